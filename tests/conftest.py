import os
import tempfile
from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

os.environ.setdefault("MONGODB_DB_NAME", "growvest_test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-characters-long")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("STORAGE_LOCAL_PATH", tempfile.mkdtemp(prefix="growvest-uploads-"))
os.environ.setdefault("LOGIN_MAX_ATTEMPTS", "3")


class FakeRedis:
    """The handful of redis.asyncio calls the app makes, kept in a dict."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttl: dict[str, int] = {}

    async def get(self, key: str):
        return self.store.get(key)

    async def incr(self, key: str) -> int:
        n = int(self.store.get(key, 0)) + 1
        self.store[key] = str(n)
        return n

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttl[key] = seconds
        return key in self.store

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttl.pop(key, None)
        return removed

    async def aclose(self) -> None:
        pass


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    monkeypatch.setattr("growvest.core.security.BCRYPT_ROUNDS", 4)


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database per test with all documents and indexes initialised."""
    from growvest.db.init import init_db
    database = AsyncMongoMockClient()["growvest_test"]
    await init_db(database=database)
    yield database


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def client(db, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    from growvest.deps import get_redis
    from growvest.main import app

    async def _redis():
        yield fake_redis

    app.dependency_overrides[get_redis] = _redis
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory: insert a user directly (bypassing the API) and return it."""
    from growvest.core.security import hash_password
    from growvest.models.user import User
    from growvest.services.referrals import generate_unique_code

    counter = {"n": 0}

    async def _make(
        email: str | None = None,
        role: str = "user",
        password: str = "password123",
        referred_by=None,
        is_suspended: bool = False,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_suspended=is_suspended,
            referral_code=await generate_unique_code(),
            referred_by=referred_by,
        )
        await user.insert()
        return user

    return _make


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user(email="admin@example.com", role="admin")


@pytest_asyncio.fixture
async def plans(db):
    """The default Plan A (3%/30d) and Plan B (7%/90d), keyed by name."""
    from growvest.models.plan import Plan
    from growvest.services.investments import seed_default_plans
    await seed_default_plans()
    return {p.name: p for p in await Plan.find_all().to_list()}


@pytest.fixture
def auth_headers():
    from growvest.services.users import issue_access_token

    def _headers(user) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_access_token(user)}"}

    return _headers


@pytest.fixture
def approved_deposit(db):
    """Factory: an already-approved deposit for user."""
    from growvest.models.deposit import Deposit

    async def _make(user, amount: str = "1000.00"):
        deposit = Deposit(
            user_id=user.id,
            amount=Decimal(amount),
            method="bank_transfer",
            status="approved",
            reviewed_at=datetime.utcnow(),
        )
        await deposit.insert()
        return deposit

    return _make


@pytest.fixture
def make_investment(db):
    """Factory: an investment inserted directly, bypassing the funding check."""
    from datetime import timedelta

    from growvest.models.investment import Investment

    async def _make(user, plan, amount: str, status: str = "active"):
        start = datetime.utcnow()
        investment = Investment(
            user_id=user.id,
            plan_id=plan.id,
            amount=Decimal(amount),
            start_date=start,
            end_date=start + timedelta(days=plan.lock_period_days),
            status=status,
        )
        await investment.insert()
        return investment

    return _make
