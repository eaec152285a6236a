"""Shared fixtures for the fairrate test suite.

MongoDB is replaced by the in-memory doubles in ``tests/fakes.py``; time is
injected through ``FakeClock``.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from fairrate.analytics import AnalyticsAggregator
from fairrate.dependencies import (
    get_analytics,
    get_authenticator,
    get_email_drafter,
    get_ppp_store,
)
from fairrate.email_drafter import EmailDrafter
from fairrate.main import app
from fairrate.ppp_store import PPPFactorStore
from fairrate.rate_limit import limiter
from fairrate.sessions import SessionAuthenticator
from tests.fakes import FakeClock, FakeCollection

ADMIN_PASSWORD = "correct-horse-battery"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def ppp_collection() -> FakeCollection:
    return FakeCollection(unique="country")


@pytest.fixture
def stats_collection() -> FakeCollection:
    return FakeCollection(unique="date")


@pytest.fixture
def sessions_collection() -> FakeCollection:
    return FakeCollection(unique="token")


@pytest.fixture
def ppp_store(ppp_collection, clock) -> PPPFactorStore:
    store = PPPFactorStore(ppp_collection, clock=clock)
    store.initialize()
    return store


@pytest.fixture
def analytics(stats_collection, clock) -> AnalyticsAggregator:
    return AnalyticsAggregator(stats_collection, clock=clock)


@pytest.fixture
def authenticator(sessions_collection, clock) -> SessionAuthenticator:
    return SessionAuthenticator(
        sessions_collection,
        admin_password=ADMIN_PASSWORD,
        failed_login_delay=0,
        clock=clock,
    )


@pytest.fixture
def email_drafter() -> EmailDrafter:
    return EmailDrafter(is_configured=lambda: False)


@pytest.fixture
def client(ppp_store, analytics, authenticator, email_drafter):
    """TestClient with services injected; the lifespan is not run."""
    app.dependency_overrides[get_ppp_store] = lambda: ppp_store
    app.dependency_overrides[get_analytics] = lambda: analytics
    app.dependency_overrides[get_authenticator] = lambda: authenticator
    app.dependency_overrides[get_email_drafter] = lambda: email_drafter
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token(client) -> str:
    resp = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return resp.json()["token"]


@pytest.fixture
def auth_headers(admin_token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}
