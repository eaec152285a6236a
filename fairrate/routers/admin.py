"""Admin routes: login, statistics, logout."""
from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from fairrate.analytics import AnalyticsAggregator
from fairrate.config import STATS_DEFAULT_DAYS
from fairrate.dependencies import get_analytics, get_authenticator, require_admin
from fairrate.models import LoginRequest
from fairrate.rate_limit import admin_login_limit, api_limit
from fairrate.sessions import SessionAuthenticator

LOG = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_days(value: Optional[str], default: int = STATS_DEFAULT_DAYS) -> int:
    """Leading integer of ``value`` (``"7days"`` -> 7), else ``default``."""
    if value is None:
        return default
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else default


@router.post("/login")
@admin_login_limit
def login(
    request: Request,
    req: Optional[LoginRequest] = None,
    authenticator: SessionAuthenticator = Depends(get_authenticator),
):
    password = req.password if req else None
    if not password:
        return JSONResponse(status_code=400, content={"success": False, "message": "Password required"})

    try:
        session = authenticator.login(password)
    except PyMongoError:
        LOG.exception("Login error")
        return JSONResponse(status_code=500, content={"success": False, "message": "Login failed"})
    return session.to_dict()


@router.get("/stats")
@api_limit
def stats(
    request: Request,
    days: Optional[str] = None,
    _token: str = Depends(require_admin),
    analytics: AnalyticsAggregator = Depends(get_analytics),
):
    """Recent daily counters (at most 90 days) with totals over the window."""
    try:
        window = analytics.query(parse_days(days))
    except PyMongoError:
        LOG.exception("Stats fetch error")
        raise HTTPException(status_code=500, detail="Failed to fetch statistics")
    return window.to_dict()


@router.post("/logout")
@api_limit
def logout(
    request: Request,
    token: str = Depends(require_admin),
    authenticator: SessionAuthenticator = Depends(get_authenticator),
):
    try:
        authenticator.logout(token)
    except PyMongoError:
        LOG.exception("Logout error")
        raise HTTPException(status_code=500, detail="Logout failed")
    return {"success": True}
