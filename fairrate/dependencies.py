"""FastAPI dependencies.

Services are built once by the application lifespan and published on
``app.state``; these accessors hand them to the routers. Tests replace them
through ``app.dependency_overrides``.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from fairrate.analytics import AnalyticsAggregator
from fairrate.calculator import RateCalculator
from fairrate.email_drafter import EmailDrafter
from fairrate.errors import AuthorizationError, DependencyError
from fairrate.ppp_store import PPPFactorStore
from fairrate.sessions import SessionAuthenticator, bearer_token


def _state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise DependencyError(f"{name} is not initialised")
    return service


def get_ppp_store(request: Request) -> PPPFactorStore:
    return _state(request, "ppp_store")


def get_analytics(request: Request) -> AnalyticsAggregator:
    return _state(request, "analytics")


def get_authenticator(request: Request) -> SessionAuthenticator:
    return _state(request, "authenticator")


def get_email_drafter(request: Request) -> EmailDrafter:
    return _state(request, "email_drafter")


def get_calculator(store: PPPFactorStore = Depends(get_ppp_store)) -> RateCalculator:
    return RateCalculator(store)


def require_admin(
    authorization: Optional[str] = Header(None),
    authenticator: SessionAuthenticator = Depends(get_authenticator),
) -> str:
    """Guard for admin routes; returns the validated bearer token.

    Missing, unknown and expired tokens all yield the same 403.
    """
    token = bearer_token(authorization)
    if not authenticator.validate(token):
        raise AuthorizationError()
    return token
