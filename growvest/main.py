import time
import uuid

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from growvest.core.config import get_settings
from growvest.core.exceptions import (
    AppError,
    app_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from growvest.core.logging import bind_request_id, configure_logging, get_logger
from growvest.db.init import init_db, ping_db
from growvest.routers import admin, auth, deposits, investments, plans, referrals, tickets, users, withdrawals
from growvest.services.investments import seed_default_plans

settings = get_settings()
configure_logging(debug=settings.debug)
log = get_logger(__name__)
STARTED_AT = time.monotonic()

API_PREFIX = "/api"

app = FastAPI(
    title="GrowVest API",
    version="1.0.0",
    default_response_class=ORJSONResponse,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    bind_request_id(request_id)
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    log.info(
        "request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )
    response.headers["X-Request-ID"] = request_id
    return response


app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Routers
app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["users"])
app.include_router(plans.router, prefix=f"{API_PREFIX}/plans", tags=["plans"])
app.include_router(investments.router, prefix=f"{API_PREFIX}/investments", tags=["investments"])
app.include_router(deposits.router, prefix=f"{API_PREFIX}/deposits", tags=["deposits"])
app.include_router(withdrawals.router, prefix=f"{API_PREFIX}/withdrawals", tags=["withdrawals"])
app.include_router(tickets.router, prefix=f"{API_PREFIX}/tickets", tags=["tickets"])
app.include_router(referrals.router, prefix=f"{API_PREFIX}/referrals", tags=["referrals"])
app.include_router(admin.router, prefix=f"{API_PREFIX}/admin", tags=["admin"])


@app.on_event("startup")
async def startup():
    if settings.sentry_dsn:
        import sentry_sdk
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.1)
        log.info("startup", msg="Sentry enabled")
    await init_db()
    log.info("startup", msg="DB connected")
    seeded = await seed_default_plans()
    if seeded:
        log.info("startup", msg="Default plans seeded", count=seeded)


@app.get("/health")
async def health():
    """Health check for load balancers and monitoring."""
    return {"status": "ok"}


@app.get("/health/liveness")
async def liveness():
    """Alive as long as the process answers; no dependency checks."""
    return {"status": "alive", "uptimeSeconds": round(time.monotonic() - STARTED_AT, 1)}


@app.get("/health/readiness")
async def readiness():
    """Ready only when MongoDB answers a ping."""
    if not await ping_db():
        return ORJSONResponse(status_code=503, content={"status": "unavailable", "database": "down"})
    return {"status": "ok", "database": "up"}
