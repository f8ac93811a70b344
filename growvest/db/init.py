import certifi
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from growvest.core.config import get_settings
from growvest.models import (
    AuditLog,
    Deposit,
    FailedJob,
    Investment,
    Plan,
    ProfitCredit,
    ProfitLedger,
    Referral,
    SupportTicket,
    User,
    Withdrawal,
)

DOCUMENT_MODELS = [
    User,
    Plan,
    Investment,
    ProfitCredit,
    ProfitLedger,
    Deposit,
    Withdrawal,
    Referral,
    SupportTicket,
    AuditLog,
    FailedJob,
]

_client: AsyncIOMotorClient | None = None


def _use_tls(uri: str) -> bool:
    """True if URI uses TLS (Atlas or explicit tls=true). Avoids TLS for plain mongodb:// in CI."""
    return "mongodb+srv://" in uri or "tls=true" in uri.lower()


def get_client() -> AsyncIOMotorClient:
    global _client
    if _client is None:
        settings = get_settings()
        kwargs = {"tz_aware": False}
        if _use_tls(settings.mongodb_uri):
            kwargs["tlsCAFile"] = certifi.where()
            kwargs["tlsDisableOCSPEndpointCheck"] = True
        _client = AsyncIOMotorClient(settings.mongodb_uri, **kwargs)
    return _client


async def init_db(database=None) -> None:
    """Bind document models. `database` overrides the configured Mongo database (tests)."""
    if database is None:
        database = get_client()[get_settings().mongodb_db_name]
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)


async def ping_db() -> bool:
    try:
        await get_client().admin.command("ping")
        return True
    except Exception:
        return False
