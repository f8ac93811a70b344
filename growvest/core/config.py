from decimal import Decimal
from functools import lru_cache
from typing import Any, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CORS = ["http://localhost:3000", "http://localhost:3001"]


def _parse_cors_origins(v: Any) -> List[str]:
    try:
        if v is None or v == "":
            return _DEFAULT_CORS.copy()
        if isinstance(v, list):
            return [x for x in v if isinstance(x, str) and x.strip()]
        s = str(v).strip()
        if not s:
            return _DEFAULT_CORS.copy()
        if s.startswith("["):
            import json
            out = json.loads(s)
            return [x for x in out if isinstance(x, str) and x.strip()] or _DEFAULT_CORS.copy()
        return [x.strip() for x in s.split(",") if x.strip()] or _DEFAULT_CORS.copy()
    except ValueError:
        return _DEFAULT_CORS.copy()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # App
    env: str = Field(default="development", description="ENV")
    debug: bool = Field(default=False, description="DEBUG")
    secret_key: str = Field(default="change-me-in-production-min-32-chars")

    # MongoDB
    mongodb_uri: str = Field(default="mongodb://localhost:27017", alias="MONGODB_URI")
    mongodb_db_name: str = Field(default="growvest", alias="MONGODB_DB_NAME")

    # Redis (worker queue, login attempt counters)
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")

    # Fernet key (base64) for withdrawal payout details
    token_encryption_key: str = Field(default="", alias="TOKEN_ENCRYPTION_KEY")

    # Storage for deposit proofs
    storage_backend: str = Field(default="local", alias="STORAGE_BACKEND")
    storage_local_path: str = Field(default="./uploads", alias="STORAGE_LOCAL_PATH")
    gcs_bucket_name: str | None = Field(default=None, alias="GCS_BUCKET_NAME")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # Sentry
    sentry_dsn: str | None = Field(default=None, alias="SENTRY_DSN")

    # CORS: env as string, exposed as list
    cors_origins_raw: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        alias="CORS_ORIGINS",
        description="Comma-separated or JSON list",
    )

    @property
    def cors_origins(self) -> List[str]:
        return _parse_cors_origins(getattr(self, "cors_origins_raw", None))

    # Auth
    session_max_age: int = Field(default=7 * 24 * 3600, alias="SESSION_MAX_AGE")
    password_reset_max_age: int = Field(default=3600, alias="PASSWORD_RESET_MAX_AGE")
    login_max_attempts: int = Field(default=10, alias="LOGIN_MAX_ATTEMPTS")

    # Business rules
    referral_commission_percent: Decimal = Field(default=Decimal("5.00"), alias="REFERRAL_COMMISSION_PERCENT")
    profit_run_stale_seconds: int = Field(default=900, alias="PROFIT_RUN_STALE_SECONDS")

    # Daily profit cron (worker)
    profit_cron_enabled: bool = Field(default=False, alias="PROFIT_CRON_ENABLED")
    profit_cron_hour: int = Field(default=0, alias="PROFIT_CRON_HOUR")
    profit_cron_minute: int = Field(default=5, alias="PROFIT_CRON_MINUTE")
    system_admin_email: str | None = Field(default=None, alias="SYSTEM_ADMIN_EMAIL")

    # Bootstrap admin (growvest.cli.create_admin)
    admin_email: str | None = Field(default=None, alias="ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")


@lru_cache
def get_settings() -> Settings:
    return Settings()
