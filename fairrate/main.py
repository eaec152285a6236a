"""FastAPI application for the fairrate backend.

Endpoints:
  GET  /health                 -> {status, timestamp, uptime}
  GET  /api/countries          -> {countries: [...]}
  POST /api/calculate          -> fair rate for {myLocation, clientLocation, currentRate}
  GET  /api/track-view         -> {status: "tracked"}
  POST /api/generate-email     -> {email} or {error, fallback}
  POST /api/admin/login        -> {success, token, expiresAt}
  GET  /api/admin/stats?days=N -> {stats, totals, period}   (Bearer token)
  POST /api/admin/logout       -> {success: true}           (Bearer token)

Run locally with ``python -m fairrate.main`` or
``uvicorn fairrate.main:app``.
"""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from fairrate.analytics import AnalyticsAggregator
from fairrate.config import (
    APP_ENV,
    FRONTEND_URL,
    HOST,
    PORT,
    SESSION_SWEEP_INTERVAL_SECONDS,
    is_production,
)
from fairrate.db import (
    MongoDBConfig,
    ensure_indexes,
    ppp_collection,
    sessions_collection,
    stats_collection,
)
from fairrate.email_drafter import EmailDrafter
from fairrate.errors import AuthenticationError, DependencyError, FairRateError
from fairrate.logging_config import setup_logging
from fairrate.ppp_store import PPPFactorStore
from fairrate.rate_limit import limiter, rate_limit_exceeded_handler
from fairrate.routers import admin, public
from fairrate.scheduler import start_periodic, stop_periodic
from fairrate.sessions import SessionAuthenticator
from fairrate.timeutils import isoformat_utc, utc_now

LOG = logging.getLogger(__name__)

_STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: connect, index, seed, sweep. Shutdown: stop sweep, close Mongo.

    Failing to reach MongoDB is the only condition that aborts startup.
    """
    setup_logging()

    mongo = MongoDBConfig.from_env()
    try:
        db = mongo.connect()
        ensure_indexes(db)
        ppp_store = PPPFactorStore(ppp_collection(db))
        ppp_store.initialize()
    except (DependencyError, PyMongoError) as exc:
        LOG.critical("Failed to start server: %s", exc)
        mongo.close()
        raise RuntimeError("MongoDB is unavailable at startup") from exc

    authenticator = SessionAuthenticator(sessions_collection(db))
    try:
        authenticator.sweep_expired()
    except PyMongoError:
        LOG.exception("Initial session sweep failed")
    sweep_task = start_periodic(
        authenticator.sweep_expired, SESSION_SWEEP_INTERVAL_SECONDS, "session-sweep"
    )

    app.state.ppp_store = ppp_store
    app.state.analytics = AnalyticsAggregator(stats_collection(db))
    app.state.authenticator = authenticator
    email_drafter = EmailDrafter()
    app.state.email_drafter = email_drafter

    LOG.info("Server ready (environment: %s)", APP_ENV)
    try:
        yield
    finally:
        LOG.info("Shutting down gracefully...")
        await stop_periodic(sweep_task)
        email_drafter.close()
        mongo.close()


app = FastAPI(
    title="Fair Rate API",
    description="PPP-adjusted freelance rate calculator with usage analytics.",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if is_production():
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
    except Exception as exc:
        LOG.exception("Error handling request %s %s: %s", request.method, request.url.path, exc)
        raise
    LOG.info("%s %s -> %s", request.method, request.url.path, response.status_code)
    return response


# ── Error handlers ────────────────────────────────────────────────────────────

@app.exception_handler(FairRateError)
async def fairrate_error_handler(request: Request, exc: FairRateError):
    if isinstance(exc, AuthenticationError):
        return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})
    if exc.status_code >= 500:
        LOG.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    LOG.info("Rejected malformed body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods look the same to clients
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    LOG.exception("Global error on %s %s", request.method, request.url.path)
    content = {"error": "Internal server error"}
    if not is_production():
        content["message"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# ── Routes ────────────────────────────────────────────────────────────────────

@app.get("/health")
def health():
    """Liveness probe. Never rate limited and never touches the store."""
    return {
        "status": "healthy",
        "timestamp": isoformat_utc(utc_now()),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
    }


app.include_router(public.router, prefix="/api")
app.include_router(admin.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("fairrate.main:app", host=HOST, port=PORT)
