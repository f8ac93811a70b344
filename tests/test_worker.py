from decimal import Decimal

import pytest

from growvest.models.failed_job import FailedJob
from growvest.models.investment import Investment
from growvest.worker import tasks

pytestmark = pytest.mark.asyncio


async def test_failed_job_is_dead_lettered(db):
    async def boom():
        raise RuntimeError("database went away")

    with pytest.raises(RuntimeError):
        await tasks._run_with_dlq("run_daily_profit", "job-1", [], {}, boom())

    failed = await FailedJob.find_one(FailedJob.job_id == "job-1")
    assert failed.job_name == "run_daily_profit"
    assert failed.error_type == "RuntimeError"
    assert failed.reason == "database went away"


async def test_cron_skips_without_system_admin(db, monkeypatch):
    from growvest.core.config import get_settings
    monkeypatch.setattr(get_settings(), "system_admin_email", None)
    assert await tasks.run_daily_profit_job({"job_id": "cron-1"}) is None


async def test_cron_runs_as_system_admin(admin, make_user, plans, make_investment, monkeypatch):
    from growvest.core.config import get_settings
    monkeypatch.setattr(get_settings(), "system_admin_email", admin.email)
    user = await make_user()
    investment = await make_investment(user, plans["Plan A"], "100.00")

    out = await tasks.run_daily_profit_job({"job_id": "cron-2"})

    assert out["total_distributed"] == "3.00"
    assert out["already_distributed"] is False
    assert (await Investment.get(investment.id)).profit_accrued == Decimal("3.00")


async def test_cron_disabled_by_default():
    from growvest.worker.run_worker import cron_jobs
    assert cron_jobs() == []
