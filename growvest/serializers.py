"""Document -> JSON dicts. camelCase keys, ids and money as strings, ISO datetimes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from growvest.core.money import money_str
from growvest.models.audit_log import AuditLog
from growvest.models.deposit import Deposit
from growvest.models.investment import Investment
from growvest.models.plan import Plan
from growvest.models.profit_credit import ProfitCredit
from growvest.models.profit_ledger import ProfitLedger
from growvest.models.support_ticket import SupportTicket
from growvest.models.user import User
from growvest.models.withdrawal import Withdrawal


class CamelModel(BaseModel):
    """Request body base: accepts camelCase (and snake_case) keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _id(value) -> str | None:
    return str(value) if value is not None else None


def _dt(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _day(value: datetime | None) -> str | None:
    return value.date().isoformat() if value else None


def user_out(u: User) -> dict[str, Any]:
    return {
        "id": str(u.id),
        "email": u.email,
        "role": u.role,
        "isSuspended": u.is_suspended,
        "referralCode": u.referral_code,
        "referredBy": _id(u.referred_by),
        "lastLoginAt": _dt(u.last_login_at),
        "createdAt": _dt(u.created_at),
    }


def plan_out(p: Plan) -> dict[str, Any]:
    return {
        "id": str(p.id),
        "name": p.name,
        "dailyPercent": money_str(p.daily_percent),
        "lockPeriodDays": p.lock_period_days,
        "refundablePrincipal": p.refundable_principal,
    }


def investment_out(i: Investment, plan: Plan | None = None) -> dict[str, Any]:
    out = {
        "id": str(i.id),
        "userId": str(i.user_id),
        "planId": str(i.plan_id),
        "amount": money_str(i.amount),
        "profitAccrued": money_str(i.profit_accrued),
        "startDate": _dt(i.start_date),
        "endDate": _dt(i.end_date),
        "status": i.status,
        "lastProfitDate": _day(i.last_profit_date),
        "closedBy": _id(i.closed_by),
        "createdAt": _dt(i.created_at),
    }
    if plan is not None:
        out["plan"] = plan_out(plan)
    return out


def profit_credit_out(c: ProfitCredit) -> dict[str, Any]:
    return {
        "id": str(c.id),
        "investmentId": str(c.investment_id),
        "date": _day(c.date),
        "amount": money_str(c.amount),
    }


def ledger_out(row: ProfitLedger) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "date": _day(row.date),
        "status": row.status,
        "totalDistributed": money_str(row.total_distributed),
        "investmentCount": row.investment_count,
        "createdBy": _id(row.created_by),
        "startedAt": _dt(row.started_at),
        "completedAt": _dt(row.completed_at),
    }


def deposit_out(d: Deposit) -> dict[str, Any]:
    return {
        "id": str(d.id),
        "userId": str(d.user_id),
        "amount": money_str(d.amount),
        "method": d.method,
        "txId": d.tx_id,
        "proofUrl": d.proof_url,
        "status": d.status,
        "reviewedBy": _id(d.reviewed_by),
        "reviewedAt": _dt(d.reviewed_at),
        "rejectionReason": d.rejection_reason,
        "createdAt": _dt(d.created_at),
    }


def withdrawal_out(w: Withdrawal, method_details: str | None = None) -> dict[str, Any]:
    return {
        "id": str(w.id),
        "userId": str(w.user_id),
        "amount": money_str(w.amount),
        "methodDetails": method_details,
        "status": w.status,
        "reviewedBy": _id(w.reviewed_by),
        "reviewedAt": _dt(w.reviewed_at),
        "rejectionReason": w.rejection_reason,
        "createdAt": _dt(w.created_at),
    }


def ticket_out(t: SupportTicket) -> dict[str, Any]:
    return {
        "id": str(t.id),
        "userId": str(t.user_id),
        "subject": t.subject,
        "message": t.message,
        "status": t.status,
        "adminReplies": [
            {"adminId": str(r.admin_id), "reply": r.reply, "timestamp": _dt(r.timestamp)}
            for r in t.admin_replies
        ],
        "createdAt": _dt(t.created_at),
        "updatedAt": _dt(t.updated_at),
    }


def audit_out(e: AuditLog) -> dict[str, Any]:
    return {
        "id": str(e.id),
        "userId": e.user_id,
        "eventType": e.event_type,
        "entityType": e.entity_type,
        "entityId": e.entity_id,
        "metadata": e.metadata,
        "createdAt": _dt(e.created_at),
    }
