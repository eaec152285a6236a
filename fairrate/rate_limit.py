"""Centralized rate-limiting configuration.

Uses `slowapi` (which wraps `limits`) to enforce per-IP request quotas with
the fixed-window strategy: a counter resets entirely at each window boundary.
The limiter instance is imported by each router that needs protection.

Three independent policies exist, each applied only to its own route group:

=================  ==========================  ===========================
Policy             Routes                      Default
=================  ==========================  ===========================
general API        countries, track-view,      ``100 per 15 minutes``
                   admin stats/logout
calculation        calculate, generate-email   ``10 per minute``
admin login        admin login                 ``5 per 15 minutes``
=================  ==========================  ===========================

Env vars
--------
RATE_LIMIT_API : str
RATE_LIMIT_CALCULATE : str
RATE_LIMIT_ADMIN_LOGIN : str
"""
from __future__ import annotations

import logging
import os

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

LOG = logging.getLogger(__name__)

API_LIMIT: str = os.getenv("RATE_LIMIT_API", "100 per 15 minutes")
CALCULATE_LIMIT: str = os.getenv("RATE_LIMIT_CALCULATE", "10 per minute")
ADMIN_LOGIN_LIMIT: str = os.getenv("RATE_LIMIT_ADMIN_LOGIN", "5 per 15 minutes")

API_LIMIT_MESSAGE = "Too many requests, please try again later."
CALCULATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait before calculating again."
ADMIN_LOGIN_LIMIT_MESSAGE = "Too many login attempts."

# Scopes for shared limits: every route in a group draws from one counter
API_SCOPE = "api"
CALCULATE_SCOPE = "calculate"

# Single limiter instance shared across the app
limiter = Limiter(key_func=get_remote_address, strategy="fixed-window")

api_limit = limiter.shared_limit(API_LIMIT, scope=API_SCOPE, error_message=API_LIMIT_MESSAGE)
calculate_limit = limiter.shared_limit(
    CALCULATE_LIMIT, scope=CALCULATE_SCOPE, error_message=CALCULATE_LIMIT_MESSAGE
)
admin_login_limit = limiter.limit(ADMIN_LOGIN_LIMIT, error_message=ADMIN_LOGIN_LIMIT_MESSAGE)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a throttled request as ``429 {"error": <policy message>}``."""
    LOG.warning(
        "Rate limit hit: %s %s from %s (%s)",
        request.method, request.url.path, get_remote_address(request), exc.detail,
    )
    return JSONResponse(status_code=429, content={"error": exc.detail})


__all__ = [
    "limiter",
    "api_limit",
    "calculate_limit",
    "admin_login_limit",
    "rate_limit_exceeded_handler",
    "API_LIMIT",
    "CALCULATE_LIMIT",
    "ADMIN_LOGIN_LIMIT",
]
