"""
Daily profit distribution.

One run per calendar date credits `amount * daily_percent / 100` to every active
investment and records a ProfitLedger row for the date. Safety rests on storage
atomicity rather than a read-then-write check:

* the ledger row is claimed up front; its unique date index lets exactly one
  caller own a date;
* each investment is credited through a unique (investment_id, date)
  ProfitCredit plus one conditional update that adds the date to
  `credited_dates`, so a run that died half way can be resumed, even after
  later dates were distributed, without crediting anyone twice;
* the ledger row only becomes `completed` after every investment is credited.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from beanie import PydanticObjectId
from beanie.operators import NE, AddToSet, Set
from pymongo.errors import DuplicateKeyError

from growvest.core.audit import log_event
from growvest.core.config import get_settings
from growvest.core.exceptions import BadRequestError, ConflictError
from growvest.core.logging import get_logger
from growvest.core.money import ZERO, daily_profit, money_str, quantize, to_bson
from growvest.models.investment import Investment
from growvest.models.plan import Plan
from growvest.models.profit_credit import ProfitCredit
from growvest.models.profit_ledger import ProfitLedger
from growvest.models.user import User
from growvest.services.investments import plans_by_id

log = get_logger(__name__)

DISTRIBUTED_MESSAGE = "Daily profit distributed successfully"
ALREADY_DISTRIBUTED_MESSAGE = "Daily profit has already been distributed for {date}"
CREDIT_MAX_ATTEMPTS = 5


@dataclass
class ProfitRunResult:
    message: str
    date: datetime
    total_distributed: Decimal
    investment_count: int
    already_distributed: bool


def normalize_run_date(value: date | datetime | str | None = None) -> datetime:
    """Midnight (naive UTC) of the given day; today when None. Time of day is discarded."""
    if value is None:
        return datetime.combine(datetime.utcnow().date(), time.min)
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise BadRequestError(f"Invalid date: {value}")
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.min)


async def _claim(day: datetime, admin: User) -> tuple[ProfitLedger, bool]:
    """
    Insert the `running` ledger row for day. Returns (ledger, claimed); claimed is
    False when the day was already completed.
    """
    ledger = ProfitLedger(date=day, status="running", created_by=admin.id)
    try:
        await ledger.insert()
        return ledger, True
    except DuplicateKeyError:
        pass

    existing = await ProfitLedger.find_one(ProfitLedger.date == day)
    if existing is None:
        # row vanished between insert and read; treat as a concurrent writer
        raise ConflictError("Profit distribution for this date is in progress", code="PROFIT_RUN_IN_PROGRESS")
    if existing.status == "completed":
        return existing, False

    stale_after = timedelta(seconds=get_settings().profit_run_stale_seconds)
    if datetime.utcnow() - existing.started_at < stale_after:
        raise ConflictError(
            f"Profit distribution for {day.date().isoformat()} is already in progress",
            code="PROFIT_RUN_IN_PROGRESS",
            details={"started_at": existing.started_at.isoformat()},
        )
    # Take over a crashed run; compare-and-set on started_at so only one taker wins.
    now = datetime.utcnow()
    result = await ProfitLedger.find_one(
        ProfitLedger.id == existing.id,
        ProfitLedger.status == "running",
        ProfitLedger.started_at == existing.started_at,
    ).update(Set({ProfitLedger.started_at: now, ProfitLedger.created_by: admin.id}))
    if result.modified_count == 0:
        raise ConflictError("Profit distribution for this date is in progress", code="PROFIT_RUN_IN_PROGRESS")
    log.warning("profit_run_resumed", date=day.date().isoformat(), admin_id=str(admin.id))
    return await ProfitLedger.get(existing.id), True


async def _credit(investment: Investment, day: datetime, amount: Decimal) -> bool:
    """Credit one investment for day. True if this call applied the credit."""
    try:
        await ProfitCredit(
            investment_id=investment.id,
            user_id=investment.user_id,
            date=day,
            amount=amount,
        ).insert()
    except DuplicateKeyError:
        # an earlier attempt got this far; credited_dates decides whether it was applied
        pass
    fresh = investment
    for _ in range(CREDIT_MAX_ATTEMPTS):
        if day in fresh.credited_dates:
            return False
        current = quantize(fresh.profit_accrued)
        latest = day if fresh.last_profit_date is None else max(fresh.last_profit_date, day)
        # compare-and-set on the value read, so runs for other dates cannot lose an update
        result = await Investment.find_one(
            Investment.id == investment.id,
            NE(Investment.credited_dates, day),
            Investment.profit_accrued == to_bson(current),
        ).update(
            Set({
                Investment.profit_accrued: to_bson(current + amount),
                Investment.last_profit_date: latest,
                Investment.updated_at: datetime.utcnow(),
            }),
            AddToSet({Investment.credited_dates: day}),
        )
        if result.modified_count == 1:
            return True
        fresh = await Investment.get(investment.id)
        if fresh is None:
            return False
    raise ConflictError(
        "Investment was modified concurrently during profit distribution",
        details={"investment_id": str(investment.id)},
    )


async def run_daily_profit(admin: User, run_date: date | datetime | str | None = None) -> ProfitRunResult:
    """Distribute one day of profit to all active investments. Idempotent per date."""
    day = normalize_run_date(run_date)
    ledger, claimed = await _claim(day, admin)
    if not claimed:
        log.info("profit_run_skipped", date=day.date().isoformat(), total=money_str(ledger.total_distributed))
        return ProfitRunResult(
            message=ALREADY_DISTRIBUTED_MESSAGE.format(date=day.date().isoformat()),
            date=day,
            total_distributed=quantize(ledger.total_distributed),
            investment_count=ledger.investment_count,
            already_distributed=True,
        )

    log.info("profit_run_started", date=day.date().isoformat(), admin_id=str(admin.id))
    investments = await Investment.find(Investment.status == "active").to_list()
    plans: dict[PydanticObjectId, Plan] = await plans_by_id([i.plan_id for i in investments])

    total = ZERO
    count = 0
    applied = 0
    for investment in investments:
        plan = plans.get(investment.plan_id)
        if plan is None:
            log.warning("profit_run_missing_plan", investment_id=str(investment.id), plan_id=str(investment.plan_id))
            continue
        amount = daily_profit(investment.amount, plan.daily_percent)
        if await _credit(investment, day, amount):
            applied += 1
        total = quantize(total + amount)
        count += 1

    ledger.status = "completed"
    ledger.total_distributed = total
    ledger.investment_count = count
    ledger.completed_at = datetime.utcnow()
    await ledger.save()

    log.info(
        "profit_run_completed",
        date=day.date().isoformat(),
        total=money_str(total),
        investments=count,
        newly_credited=applied,
    )
    await log_event(
        str(admin.id),
        "profit_run_completed",
        "profit_ledger",
        str(ledger.id),
        {"date": day.date().isoformat(), "total_distributed": money_str(total), "investment_count": count},
    )
    return ProfitRunResult(
        message=DISTRIBUTED_MESSAGE,
        date=day,
        total_distributed=total,
        investment_count=count,
        already_distributed=False,
    )


async def list_ledger(limit: int, offset: int) -> tuple[list[ProfitLedger], int]:
    total = await ProfitLedger.find_all().count()
    rows = await ProfitLedger.find_all().sort(-ProfitLedger.date).skip(offset).limit(limit).to_list()
    return rows, total
