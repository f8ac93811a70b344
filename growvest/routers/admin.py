from fastapi import APIRouter, Body, Depends, Query

from growvest.core.audit import list_events
from growvest.core.money import money_str
from growvest.core.pagination import page_response, paginate
from growvest.deps import parse_id, require_admin
from growvest.models.user import User
from growvest.serializers import CamelModel, audit_out, deposit_out, investment_out, ledger_out, withdrawal_out
from growvest.services import approvals as approvals_service
from growvest.services import investments as investments_service
from growvest.services import profits as profits_service

router = APIRouter()


class RejectRequest(CamelModel):
    reason: str | None = None


class RunProfitRequest(CamelModel):
    date: str | None = None  # YYYY-MM-DD; defaults to today (UTC)


@router.patch("/deposits/{deposit_id}/approve")
async def admin_deposit_approve(deposit_id: str, admin: User = Depends(require_admin)):
    """Admin: approve a pending deposit. Grants the referrer commission on a first deposit."""
    deposit = await approvals_service.approve_deposit(parse_id(deposit_id, "Deposit"), admin)
    return {"message": "Deposit approved successfully", "deposit": deposit_out(deposit)}


@router.patch("/deposits/{deposit_id}/reject")
async def admin_deposit_reject(
    deposit_id: str,
    body: RejectRequest | None = Body(None),
    admin: User = Depends(require_admin),
):
    reason = body.reason if body else None
    deposit = await approvals_service.reject_deposit(parse_id(deposit_id, "Deposit"), admin, reason)
    return {"message": "Deposit rejected successfully", "deposit": deposit_out(deposit)}


@router.patch("/withdrawals/{withdrawal_id}/approve")
async def admin_withdrawal_approve(withdrawal_id: str, admin: User = Depends(require_admin)):
    w = await approvals_service.approve_withdrawal(parse_id(withdrawal_id, "Withdrawal"), admin)
    return {"message": "Withdrawal approved successfully", "withdrawal": withdrawal_out(w)}


@router.patch("/withdrawals/{withdrawal_id}/reject")
async def admin_withdrawal_reject(
    withdrawal_id: str,
    body: RejectRequest | None = Body(None),
    admin: User = Depends(require_admin),
):
    reason = body.reason if body else None
    w = await approvals_service.reject_withdrawal(parse_id(withdrawal_id, "Withdrawal"), admin, reason)
    return {"message": "Withdrawal rejected successfully", "withdrawal": withdrawal_out(w)}


@router.post("/run-daily-profit")
async def admin_run_daily_profit(
    body: RunProfitRequest | None = Body(None),
    admin: User = Depends(require_admin),
):
    """Admin: credit one day of profit to every active investment. Safe to repeat for a date."""
    result = await profits_service.run_daily_profit(admin, body.date if body else None)
    return {
        "message": result.message,
        "date": result.date.date().isoformat(),
        "totalDistributed": money_str(result.total_distributed),
        "investmentCount": result.investment_count,
        "alreadyDistributed": result.already_distributed,
    }


@router.patch("/investments/{investment_id}/complete")
async def admin_investment_complete(investment_id: str, admin: User = Depends(require_admin)):
    investment = await investments_service.close_investment(parse_id(investment_id, "Investment"), admin, "completed")
    return investment_out(investment)


@router.patch("/investments/{investment_id}/cancel")
async def admin_investment_cancel(investment_id: str, admin: User = Depends(require_admin)):
    investment = await investments_service.close_investment(parse_id(investment_id, "Investment"), admin, "cancelled")
    return investment_out(investment)


@router.get("/profit-ledger")
async def admin_profit_ledger(admin: User = Depends(require_admin), limit: int = 50, offset: int = 0):
    """Admin: one row per distribution date, newest first."""
    limit, offset = paginate(limit, offset)
    rows, total = await profits_service.list_ledger(limit, offset)
    return page_response([ledger_out(r) for r in rows], limit, offset, total)


@router.get("/audit-logs")
async def admin_audit_logs(
    admin: User = Depends(require_admin),
    entity_type: str | None = Query(None, alias="entityType"),
    user_id: str | None = Query(None, alias="userId"),
    limit: int = 50,
    offset: int = 0,
):
    limit, offset = paginate(limit, offset)
    items, total = await list_events(limit, offset, entity_type=entity_type, user_id=user_id)
    return page_response([audit_out(e) for e in items], limit, offset, total)
