"""Audit log for admin and security-relevant actions."""

from typing import Any

from growvest.models.audit_log import AuditLog


async def log_event(
    user_id: str | None,
    event_type: str,
    entity_type: str,
    entity_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Append to audit_logs collection. user_id is the actor (None for system events)."""
    await AuditLog(
        user_id=user_id,
        event_type=event_type,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata=metadata or {},
    ).insert()


async def list_events(
    limit: int,
    offset: int,
    entity_type: str | None = None,
    user_id: str | None = None,
) -> tuple[list[AuditLog], int]:
    filters = []
    if entity_type:
        filters.append(AuditLog.entity_type == entity_type)
    if user_id:
        filters.append(AuditLog.user_id == user_id)
    query = AuditLog.find(*filters)
    total = await query.count()
    items = await query.sort(-AuditLog.created_at).skip(offset).limit(limit).to_list()
    return items, total
