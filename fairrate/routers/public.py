"""Public API routes: countries, calculation, view tracking, email drafting."""
from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.errors import PyMongoError

from fairrate.analytics import AnalyticsAggregator
from fairrate.calculator import RateCalculator
from fairrate.dependencies import get_analytics, get_calculator, get_email_drafter, get_ppp_store
from fairrate.email_drafter import EmailDrafter
from fairrate.models import CalculateRequest, EmailRequest
from fairrate.ppp_store import PPPFactorStore
from fairrate.rate_limit import api_limit, calculate_limit

LOG = logging.getLogger(__name__)

router = APIRouter(tags=["public"])


@router.get("/countries")
@api_limit
def list_countries(request: Request, store: PPPFactorStore = Depends(get_ppp_store)):
    """Supported countries, sorted ascending."""
    try:
        return {"countries": store.list_countries()}
    except PyMongoError:
        LOG.exception("Failed to fetch countries")
        raise HTTPException(status_code=500, detail="Failed to fetch countries")


@router.get("/track-view")
@api_limit
def track_view(request: Request, analytics: AnalyticsAggregator = Depends(get_analytics)):
    """Count a page view. Always reports success; failures are only logged."""
    analytics.increment("views")
    return {"status": "tracked"}


@router.post("/calculate")
@calculate_limit
def calculate(
    request: Request,
    req: CalculateRequest,
    calculator: RateCalculator = Depends(get_calculator),
    analytics: AnalyticsAggregator = Depends(get_analytics),
):
    """Convert ``currentRate`` from ``myLocation`` to ``clientLocation`` terms.

    Validation failures surface as 400 through the ``ValidationError``
    handler; store failures become a 500.
    """
    started = time.perf_counter()
    try:
        quote = calculator.calculate(req.myLocation, req.clientLocation, req.currentRate)
    except PyMongoError:
        LOG.exception("Calculate error")
        raise HTTPException(status_code=500, detail="Calculation failed")

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    analytics.increment("calculations")

    body = quote.to_dict()
    body["calculationTime"] = f"{elapsed_ms}ms"
    return body


@router.post("/generate-email")
@calculate_limit
def generate_email(
    request: Request,
    req: EmailRequest,
    drafter: EmailDrafter = Depends(get_email_drafter),
):
    """Draft a rate-increase email; degrades to a template on any AI failure."""
    draft = drafter.draft(
        fair_rate=req.fairRate,
        current_rate=req.currentRate,
        skill=req.skill,
        client_location=req.clientLocation,
    )
    return draft.to_dict()
