"""Run ARQ worker. Usage: python -m growvest.worker.run_worker"""

from arq import run_worker
from arq.cron import cron

from growvest.core.config import get_settings
from growvest.worker.tasks import get_redis_settings, run_daily_profit_job, shutdown, startup

QUEUE_NAME = "growvest_worker"


def cron_jobs() -> list:
    """Daily profit cron at PROFIT_CRON_HOUR:PROFIT_CRON_MINUTE UTC, only when enabled."""
    settings = get_settings()
    if not settings.profit_cron_enabled:
        return []
    return [
        cron(
            run_daily_profit_job,
            name="run_daily_profit",
            hour=settings.profit_cron_hour,
            minute=settings.profit_cron_minute,
            second=0,
            unique=True,
        ),
    ]


class WorkerSettings:
    queue_name = QUEUE_NAME
    redis_settings = get_redis_settings()
    functions = [run_daily_profit_job]
    cron_jobs = cron_jobs()
    on_startup = startup
    on_shutdown = shutdown


def main() -> None:
    run_worker(WorkerSettings)


if __name__ == "__main__":
    main()
