"""ARQ job definitions."""

import uuid
from typing import Any

from arq.connections import RedisSettings

from growvest.core.config import get_settings
from growvest.core.logging import get_logger

log = get_logger(__name__)


async def _run_with_dlq(
    job_name: str,
    job_id: str | None,
    args: list[Any],
    kwargs: dict[str, Any],
    coro,
) -> Any:
    """Run coroutine; on exception persist to FailedJob then re-raise."""
    try:
        return await coro
    except Exception as e:
        from growvest.models.failed_job import FailedJob
        fid = job_id or str(uuid.uuid4())
        await FailedJob(
            job_name=job_name,
            job_id=fid,
            args=args,
            kwargs=kwargs,
            error_type=type(e).__name__,
            reason=str(e)[:2000],
        ).insert()
        log.exception("job_failed", job=job_name, job_id=fid, reason=str(e))
        raise


async def distribute_daily_profit() -> dict[str, Any] | None:
    """Profit run for today on behalf of SYSTEM_ADMIN_EMAIL. None when no such admin exists."""
    from growvest.core.money import money_str
    from growvest.services.profits import run_daily_profit
    from growvest.services.users import find_admin_by_email

    email = get_settings().system_admin_email
    admin = await find_admin_by_email(email)
    if admin is None:
        log.warning("profit_cron_skipped", reason="system admin not configured", email=email)
        return None
    result = await run_daily_profit(admin)
    return {
        "date": result.date.date().isoformat(),
        "total_distributed": money_str(result.total_distributed),
        "investment_count": result.investment_count,
        "already_distributed": result.already_distributed,
    }


# Cron: daily profit distribution
async def run_daily_profit_job(ctx: dict[str, Any]) -> dict[str, Any] | None:
    job_id = ctx.get("job_id") if isinstance(ctx.get("job_id"), str) else None
    log.info("job_start", job="run_daily_profit")
    out = await _run_with_dlq("run_daily_profit", job_id, [], {}, distribute_daily_profit())
    log.info("job_done", job="run_daily_profit", result=out)
    return out


async def startup(ctx: dict) -> None:
    from growvest.core.logging import configure_logging
    from growvest.db.init import init_db
    configure_logging(debug=get_settings().debug)
    await init_db()


async def shutdown(ctx: dict) -> None:
    pass


def get_redis_settings() -> RedisSettings:
    from urllib.parse import urlparse
    s = get_settings()
    u = urlparse(s.redis_url)
    return RedisSettings(
        host=u.hostname or "localhost",
        port=u.port or 6379,
        password=u.password,
        database=int(u.path.lstrip("/") or 0),
    )
