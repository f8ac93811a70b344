"""Daily profit distribution: amounts, idempotency per date, resume after a crash."""

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from growvest.core.exceptions import BadRequestError, ConflictError
from growvest.models.investment import Investment
from growvest.models.profit_credit import ProfitCredit
from growvest.models.profit_ledger import ProfitLedger
from growvest.services.profits import normalize_run_date, run_daily_profit

pytestmark = pytest.mark.asyncio

DAY = datetime(2024, 6, 1)


async def test_credits_simple_daily_interest(admin, make_user, plans, make_investment):
    user = await make_user()
    investment = await make_investment(user, plans["Plan A"], "500.00")

    result = await run_daily_profit(admin, "2024-06-01")

    assert result.already_distributed is False
    assert result.total_distributed == Decimal("15.00")
    assert result.investment_count == 1
    fresh = await Investment.get(investment.id)
    assert fresh.profit_accrued == Decimal("15.00")
    assert fresh.last_profit_date == DAY


async def test_second_run_same_date_is_a_no_op(admin, make_user, plans, make_investment):
    user = await make_user()
    investment = await make_investment(user, plans["Plan A"], "500.00")

    await run_daily_profit(admin, DAY)
    again = await run_daily_profit(admin, DAY)

    assert again.already_distributed is True
    assert again.total_distributed == Decimal("15.00")
    assert again.message == "Daily profit has already been distributed for 2024-06-01"
    assert (await Investment.get(investment.id)).profit_accrued == Decimal("15.00")
    assert await ProfitLedger.find(ProfitLedger.date == DAY).count() == 1
    assert await ProfitCredit.find(ProfitCredit.investment_id == investment.id).count() == 1


async def test_consecutive_days_accumulate(admin, make_user, plans, make_investment):
    user = await make_user()
    investment = await make_investment(user, plans["Plan B"], "100.00")

    await run_daily_profit(admin, "2024-06-01")
    await run_daily_profit(admin, "2024-06-02")

    fresh = await Investment.get(investment.id)
    assert fresh.profit_accrued == Decimal("14.00")
    assert fresh.last_profit_date == datetime(2024, 6, 2)
    assert await ProfitLedger.find_all().count() == 2


async def test_only_active_investments_are_credited(admin, make_user, plans, make_investment):
    user = await make_user()
    active = await make_investment(user, plans["Plan A"], "100.00")
    done = await make_investment(user, plans["Plan A"], "100.00", status="completed")
    cancelled = await make_investment(user, plans["Plan A"], "100.00", status="cancelled")

    result = await run_daily_profit(admin, DAY)

    assert result.investment_count == 1
    assert result.total_distributed == Decimal("3.00")
    assert (await Investment.get(active.id)).profit_accrued == Decimal("3.00")
    assert (await Investment.get(done.id)).profit_accrued == Decimal("0.00")
    assert (await Investment.get(cancelled.id)).profit_accrued == Decimal("0.00")


async def test_ledger_row_is_attributed_to_admin(admin, make_user, plans, make_investment):
    user = await make_user()
    await make_investment(user, plans["Plan A"], "100.00")

    await run_daily_profit(admin, DAY)

    ledger = await ProfitLedger.find_one(ProfitLedger.date == DAY)
    assert ledger.status == "completed"
    assert ledger.created_by == admin.id
    assert ledger.total_distributed == Decimal("3.00")
    assert ledger.investment_count == 1
    assert ledger.completed_at is not None


async def test_run_with_no_active_investments(admin, plans):
    result = await run_daily_profit(admin, DAY)
    assert result.total_distributed == Decimal("0.00")
    assert result.investment_count == 0
    assert (await ProfitLedger.find_one(ProfitLedger.date == DAY)).status == "completed"


async def test_fresh_running_row_blocks_a_concurrent_run(admin, make_user, plans, make_investment):
    user = await make_user()
    investment = await make_investment(user, plans["Plan A"], "100.00")
    await ProfitLedger(date=DAY, status="running", created_by=admin.id).insert()

    with pytest.raises(ConflictError) as exc:
        await run_daily_profit(admin, DAY)

    assert exc.value.code == "PROFIT_RUN_IN_PROGRESS"
    assert (await Investment.get(investment.id)).profit_accrued == Decimal("0.00")


async def test_stale_run_is_resumed_without_double_credit(admin, make_user, plans, make_investment):
    user = await make_user()
    credited = await make_investment(user, plans["Plan A"], "100.00")
    pending = await make_investment(user, plans["Plan A"], "200.00")
    # a crashed run that got through the first investment only
    await ProfitLedger(
        date=DAY,
        status="running",
        created_by=admin.id,
        started_at=datetime.utcnow() - timedelta(hours=2),
    ).insert()
    await ProfitCredit(investment_id=credited.id, user_id=user.id, date=DAY, amount=Decimal("3.00")).insert()
    credited.profit_accrued = Decimal("3.00")
    credited.last_profit_date = DAY
    credited.credited_dates = [DAY]
    await credited.save()

    result = await run_daily_profit(admin, DAY)

    assert result.already_distributed is False
    assert result.total_distributed == Decimal("9.00")
    assert (await Investment.get(credited.id)).profit_accrued == Decimal("3.00")
    assert (await Investment.get(pending.id)).profit_accrued == Decimal("6.00")
    assert await ProfitCredit.find(ProfitCredit.date == DAY).count() == 2
    ledger = await ProfitLedger.find_one(ProfitLedger.date == DAY)
    assert ledger.status == "completed"


async def test_resume_after_a_later_date_does_not_credit_twice(admin, make_user, plans, make_investment):
    user = await make_user()
    investment = await make_investment(user, plans["Plan A"], "100.00")
    # the run for DAY crashed after crediting, before completing its ledger row
    await ProfitLedger(
        date=DAY,
        status="running",
        created_by=admin.id,
        started_at=datetime.utcnow() - timedelta(hours=2),
    ).insert()
    await ProfitCredit(investment_id=investment.id, user_id=user.id, date=DAY, amount=Decimal("3.00")).insert()
    investment.profit_accrued = Decimal("3.00")
    investment.last_profit_date = DAY
    investment.credited_dates = [DAY]
    await investment.save()

    await run_daily_profit(admin, "2024-06-02")
    resumed = await run_daily_profit(admin, DAY)

    assert resumed.already_distributed is False
    assert resumed.total_distributed == Decimal("3.00")
    fresh = await Investment.get(investment.id)
    assert fresh.profit_accrued == Decimal("6.00")
    assert fresh.last_profit_date == datetime(2024, 6, 2)
    assert sorted(fresh.credited_dates) == [DAY, datetime(2024, 6, 2)]
    credits = await ProfitCredit.find(ProfitCredit.investment_id == investment.id).to_list()
    assert sum(c.amount for c in credits) == fresh.profit_accrued
    assert (await ProfitLedger.find_one(ProfitLedger.date == DAY)).status == "completed"


async def test_out_of_order_dates_keep_latest_profit_date(admin, make_user, plans, make_investment):
    user = await make_user()
    investment = await make_investment(user, plans["Plan A"], "100.00")

    await run_daily_profit(admin, "2024-06-02")
    await run_daily_profit(admin, "2024-06-01")

    fresh = await Investment.get(investment.id)
    assert fresh.profit_accrued == Decimal("6.00")
    assert fresh.last_profit_date == datetime(2024, 6, 2)


async def test_concurrent_runs_for_one_date_have_a_single_writer(admin, make_user, plans, make_investment):
    user = await make_user()
    investment = await make_investment(user, plans["Plan A"], "100.00")

    outcomes = await asyncio.gather(
        run_daily_profit(admin, DAY),
        run_daily_profit(admin, DAY),
        return_exceptions=True,
    )

    applied = [o for o in outcomes if not isinstance(o, Exception) and not o.already_distributed]
    assert len(applied) == 1
    other = next(o for o in outcomes if o is not applied[0])
    if isinstance(other, ConflictError):
        assert other.code == "PROFIT_RUN_IN_PROGRESS"
    else:
        assert other.already_distributed is True
    assert await ProfitLedger.find(ProfitLedger.date == DAY).count() == 1
    assert await ProfitCredit.find(ProfitCredit.investment_id == investment.id).count() == 1
    assert (await Investment.get(investment.id)).profit_accrued == Decimal("3.00")


async def test_normalize_run_date():
    assert normalize_run_date("2024-06-01") == DAY
    assert normalize_run_date(datetime(2024, 6, 1, 15, 30)) == DAY
    assert normalize_run_date().time() == datetime.min.time()
    with pytest.raises(BadRequestError):
        normalize_run_date("not-a-date")


async def test_run_daily_profit_endpoint(client, admin, make_user, plans, make_investment, auth_headers):
    user = await make_user()
    await make_investment(user, plans["Plan A"], "1000.00")
    await make_investment(user, plans["Plan A"], "1000.00", status="cancelled")
    # Plan A is 3%; use a 1% plan for the headline figure
    from growvest.models.plan import Plan
    one_percent = Plan(name="Starter", daily_percent=Decimal("1.00"), lock_period_days=7)
    await one_percent.insert()
    await make_investment(user, one_percent, "1000.00")

    r = await client.post("/api/admin/run-daily-profit", json={"date": "2024-06-01"}, headers=auth_headers(admin))
    assert r.status_code == 200
    body = r.json()
    assert body == {
        "message": "Daily profit distributed successfully",
        "date": "2024-06-01",
        "totalDistributed": "40.00",
        "investmentCount": 2,
        "alreadyDistributed": False,
    }

    r = await client.post("/api/admin/run-daily-profit", json={"date": "2024-06-01"}, headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["alreadyDistributed"] is True
    assert r.json()["totalDistributed"] == "40.00"

    r = await client.get("/api/admin/profit-ledger", headers=auth_headers(admin))
    assert r.json()["total"] == 1
    assert r.json()["items"][0]["createdBy"] == str(admin.id)


async def test_run_daily_profit_requires_admin(client, make_user, auth_headers):
    user = await make_user()
    r = await client.post("/api/admin/run-daily-profit", headers=auth_headers(user))
    assert r.status_code == 403
    r = await client.post("/api/admin/run-daily-profit")
    assert r.status_code == 401


async def test_investment_profit_history(client, admin, make_user, plans, make_investment, auth_headers):
    user = await make_user()
    investment = await make_investment(user, plans["Plan A"], "500.00")
    await run_daily_profit(admin, "2024-06-01")
    await run_daily_profit(admin, "2024-06-02")

    r = await client.get(f"/api/investments/{investment.id}/profits", headers=auth_headers(user))
    assert r.status_code == 200
    profits = r.json()["profits"]
    assert [p["date"] for p in profits] == ["2024-06-02", "2024-06-01"]
    assert all(p["amount"] == "15.00" for p in profits)
    assert r.json()["investment"]["profitAccrued"] == "30.00"

    stranger = await make_user()
    r = await client.get(f"/api/investments/{investment.id}/profits", headers=auth_headers(stranger))
    assert r.status_code == 403


async def test_end_to_end_single_investment(client, admin, make_user, make_investment, auth_headers):
    from growvest.models.plan import Plan
    user = await make_user()
    plan = Plan(name="One Percent", daily_percent=Decimal("1.0"), lock_period_days=30)
    await plan.insert()
    investment = await make_investment(user, plan, "1000")

    first = await client.post("/api/admin/run-daily-profit", json={"date": "2024-06-01"}, headers=auth_headers(admin))
    second = await client.post("/api/admin/run-daily-profit", json={"date": "2024-06-01"}, headers=auth_headers(admin))

    assert first.json()["totalDistributed"] == "10.00"
    assert first.json()["alreadyDistributed"] is False
    assert second.json()["totalDistributed"] == "10.00"
    assert second.json()["alreadyDistributed"] is True
    assert second.json()["message"] == "Daily profit has already been distributed for 2024-06-01"
    assert (await Investment.get(investment.id)).profit_accrued == Decimal("10.00")
    ledgers = await ProfitLedger.find_all().to_list()
    assert [row.date for row in ledgers] == [DAY]
