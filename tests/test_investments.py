"""Activation funding check, balances and admin completion/cancellation."""

from decimal import Decimal

import pytest

from growvest.core.exceptions import InsufficientFundsError
from growvest.models.investment import Investment
from growvest.services import investments as investments_service
from growvest.services import wallet as wallet_service

pytestmark = pytest.mark.asyncio


async def test_activation_without_deposits_is_refused(client, make_user, plans, auth_headers):
    user = await make_user()

    r = await client.post(
        "/api/investments/activate",
        json={"planId": str(plans["Plan A"].id), "amount": "100"},
        headers=auth_headers(user),
    )

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INSUFFICIENT_FUNDS"
    assert await Investment.find(Investment.user_id == user.id).count() == 0


async def test_activation_draws_on_approved_deposits(client, make_user, plans, approved_deposit, auth_headers):
    user = await make_user()
    await approved_deposit(user, "1000.00")

    r = await client.post(
        "/api/investments/activate",
        json={"planId": str(plans["Plan A"].id), "amount": "600"},
        headers=auth_headers(user),
    )

    assert r.status_code == 201
    body = r.json()
    assert body["status"] == "active"
    assert body["amount"] == "600.00"
    assert body["profitAccrued"] == "0.00"

    balances = await wallet_service.compute_balances(user.id)
    assert balances.unallocated_deposits == Decimal("400.00")

    # the remaining 400 cannot fund another 600
    r = await client.post(
        "/api/investments/activate",
        json={"planId": str(plans["Plan A"].id), "amount": "600"},
        headers=auth_headers(user),
    )
    assert r.status_code == 400
    assert r.json()["error"]["details"]["available"] == "400.00"


async def test_pending_deposits_do_not_fund(make_user, plans):
    from growvest.models.deposit import Deposit
    user = await make_user()
    await Deposit(user_id=user.id, amount=Decimal("500.00"), method="card").insert()

    with pytest.raises(InsufficientFundsError):
        await investments_service.activate_investment(user, plans["Plan A"].id, Decimal("100"))


async def test_activation_validation(client, make_user, plans, auth_headers):
    from beanie import PydanticObjectId
    user = await make_user()
    r = await client.post(
        "/api/investments/activate",
        json={"planId": str(plans["Plan A"].id), "amount": "0"},
        headers=auth_headers(user),
    )
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"

    r = await client.post(
        "/api/investments/activate",
        json={"planId": str(plans["Plan A"].id), "amount": "1e27"},
        headers=auth_headers(user),
    )
    assert r.status_code == 422

    r = await client.post(
        "/api/investments/activate",
        json={"planId": str(PydanticObjectId()), "amount": "10"},
        headers=auth_headers(user),
    )
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Investment plan not found"


async def test_list_investments_is_own_only(client, make_user, plans, make_investment, auth_headers):
    alice = await make_user()
    bob = await make_user()
    await make_investment(alice, plans["Plan A"], "100.00")
    await make_investment(bob, plans["Plan B"], "200.00")

    r = await client.get("/api/investments", headers=auth_headers(alice))

    items = r.json()["investments"]
    assert len(items) == 1
    assert items[0]["userId"] == str(alice.id)
    assert items[0]["plan"]["name"] == "Plan A"


async def test_admin_completes_and_cannot_reclose(client, admin, make_user, plans, make_investment, auth_headers):
    user = await make_user()
    investment = await make_investment(user, plans["Plan A"], "100.00")

    r = await client.patch(f"/api/admin/investments/{investment.id}/complete", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["status"] == "completed"
    assert r.json()["closedBy"] == str(admin.id)

    r = await client.patch(f"/api/admin/investments/{investment.id}/cancel", headers=auth_headers(admin))
    assert r.status_code == 409
    assert (await Investment.get(investment.id)).status == "completed"


async def test_balances_follow_plan_refundability(make_user, plans, approved_deposit, make_investment):
    user = await make_user()
    await approved_deposit(user, "1000.00")
    a = await make_investment(user, plans["Plan A"], "300.00", status="completed")
    b = await make_investment(user, plans["Plan B"], "200.00", status="completed")
    a.profit_accrued = Decimal("90.00")
    await a.save()
    b.profit_accrued = Decimal("40.00")
    await b.save()

    balances = await wallet_service.compute_balances(user.id)

    # Plan A principal is refunded, Plan B principal is kept
    assert balances.available_balance == Decimal("930.00")
    assert balances.unallocated_deposits == Decimal("500.00")
    assert balances.investable == Decimal("500.00")


async def test_dashboard_summary(client, make_user, plans, approved_deposit, make_investment, auth_headers):
    user = await make_user()
    await approved_deposit(user, "1000.00")
    inv = await make_investment(user, plans["Plan A"], "400.00")
    inv.profit_accrued = Decimal("12.00")
    await inv.save()

    r = await client.get("/api/users/me/summary", headers=auth_headers(user))

    assert r.status_code == 200
    assert r.json() == {
        "availableBalance": "612.00",
        "unallocatedDeposits": "600.00",
        "totalInvested": "400.00",
        "totalProfit": "12.00",
        "activeInvestments": 1,
        "referralCount": 0,
        "referralEarnings": "0.00",
    }
