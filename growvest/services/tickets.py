"""Support tickets: users open them, admins reply and move them through statuses."""

from datetime import datetime

from beanie import PydanticObjectId
from beanie.operators import Push, Set

from growvest.core.audit import log_event
from growvest.core.exceptions import BadRequestError, NotFoundError
from growvest.core.logging import get_logger
from growvest.models.support_ticket import AdminReply, SupportTicket, TicketStatus
from growvest.models.user import User

log = get_logger(__name__)


async def create_ticket(user: User, subject: str, message: str) -> SupportTicket:
    subject = (subject or "").strip()
    message = (message or "").strip()
    if not subject or not message:
        raise BadRequestError("Subject and message are required")
    ticket = SupportTicket(user_id=user.id, subject=subject, message=message, status="open")
    await ticket.insert()
    log.info("ticket_created", ticket_id=str(ticket.id), user_id=str(user.id))
    return ticket


async def list_tickets(
    user: User,
    limit: int,
    offset: int,
    status: TicketStatus | None = None,
) -> tuple[list[SupportTicket], int]:
    filters = []
    if not user.is_admin:
        filters.append(SupportTicket.user_id == user.id)
    if status:
        filters.append(SupportTicket.status == status)
    total = await SupportTicket.find(*filters).count()
    items = await SupportTicket.find(*filters).sort(-SupportTicket.created_at).skip(offset).limit(limit).to_list()
    return items, total


async def get_ticket_for(user: User, ticket_id: PydanticObjectId) -> SupportTicket:
    """Owner or admin. Anyone else gets not-found so ticket ids are not probeable."""
    ticket = await SupportTicket.get(ticket_id)
    if not ticket or (not user.is_admin and ticket.user_id != user.id):
        raise NotFoundError("Ticket not found")
    return ticket


async def reply_to_ticket(ticket_id: PydanticObjectId, admin: User, reply: str) -> SupportTicket:
    """Append an admin reply; an open ticket moves to in_progress."""
    reply = (reply or "").strip()
    if not reply:
        raise BadRequestError("Reply is required")
    now = datetime.utcnow()
    entry = AdminReply(admin_id=admin.id, reply=reply, timestamp=now)
    # $push keeps replies append-only even when two admins answer at once
    result = await SupportTicket.find_one(SupportTicket.id == ticket_id).update(
        Push({SupportTicket.admin_replies: entry.model_dump()}),
        Set({SupportTicket.updated_at: now}),
    )
    if result.matched_count == 0:
        raise NotFoundError("Ticket not found")
    await SupportTicket.find_one(
        SupportTicket.id == ticket_id,
        SupportTicket.status == "open",
    ).update(Set({SupportTicket.status: "in_progress"}))
    ticket = await SupportTicket.get(ticket_id)
    log.info("ticket_replied", ticket_id=str(ticket_id), admin_id=str(admin.id), replies=len(ticket.admin_replies))
    await log_event(str(admin.id), "ticket_replied", "support_ticket", str(ticket_id))
    return ticket


async def update_ticket_status(ticket_id: PydanticObjectId, admin: User, status: TicketStatus) -> SupportTicket:
    ticket = await SupportTicket.get(ticket_id)
    if not ticket:
        raise NotFoundError("Ticket not found")
    previous = ticket.status
    # status fields only; replies may be pushed at the same time
    await SupportTicket.find_one(SupportTicket.id == ticket_id).update(
        Set({SupportTicket.status: status, SupportTicket.updated_at: datetime.utcnow()})
    )
    ticket = await SupportTicket.get(ticket_id)
    log.info("ticket_status_changed", ticket_id=str(ticket_id), admin_id=str(admin.id), status=status)
    await log_event(
        str(admin.id),
        "ticket_status_changed",
        "support_ticket",
        str(ticket_id),
        {"from": previous, "to": status},
    )
    return ticket
