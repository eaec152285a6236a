"""Tests for fairrate.sessions: login, validation, logout and the sweep."""
from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from fairrate.errors import AuthenticationError
from fairrate.sessions import SessionAuthenticator, bearer_token
from tests.conftest import ADMIN_PASSWORD


# =====================================================================
# login
# =====================================================================

class TestLogin:

    def test_returns_token_with_24h_expiry(self, authenticator, clock):
        session = authenticator.login(ADMIN_PASSWORD)
        assert len(session.token) == 64
        int(session.token, 16)  # hex
        assert session.expires_at == clock.now + timedelta(hours=24)

    def test_persists_session(self, authenticator, sessions_collection, clock):
        session = authenticator.login(ADMIN_PASSWORD)
        doc = sessions_collection.find_one({"token": session.token})
        assert doc["expiresAt"] == session.expires_at
        assert doc["lastAccess"] == clock.now

    def test_each_login_is_a_fresh_token(self, authenticator, sessions_collection):
        first = authenticator.login(ADMIN_PASSWORD)
        second = authenticator.login(ADMIN_PASSWORD)
        assert first.token != second.token
        assert authenticator.validate(first.token)
        assert authenticator.validate(second.token)
        assert sessions_collection.count_documents({}) == 2

    def test_wrong_password_delays_then_fails(self, sessions_collection, clock):
        sleep = MagicMock()
        auth = SessionAuthenticator(
            sessions_collection, admin_password=ADMIN_PASSWORD,
            failed_login_delay=1.0, clock=clock, sleep=sleep,
        )
        with pytest.raises(AuthenticationError):
            auth.login("guess")
        sleep.assert_called_once_with(1.0)
        assert sessions_collection.count_documents({}) == 0

    def test_correct_password_does_not_delay(self, sessions_collection, clock):
        sleep = MagicMock()
        auth = SessionAuthenticator(
            sessions_collection, admin_password=ADMIN_PASSWORD, clock=clock, sleep=sleep,
        )
        auth.login(ADMIN_PASSWORD)
        sleep.assert_not_called()

    def test_unconfigured_password_rejects_everything(self, sessions_collection, clock):
        auth = SessionAuthenticator(
            sessions_collection, admin_password=None, failed_login_delay=0, clock=clock,
        )
        with pytest.raises(AuthenticationError):
            auth.login("")

    def test_to_dict_formats_expiry(self, authenticator):
        data = authenticator.login(ADMIN_PASSWORD).to_dict()
        assert data["success"] is True
        assert data["expiresAt"] == "2026-03-15T12:00:00.000Z"


# =====================================================================
# validate
# =====================================================================

class TestValidate:

    def test_valid_right_after_login(self, authenticator):
        session = authenticator.login(ADMIN_PASSWORD)
        assert authenticator.validate(session.token) is True

    def test_updates_last_access_but_not_expiry(self, authenticator, sessions_collection, clock):
        session = authenticator.login(ADMIN_PASSWORD)
        clock.advance(hours=3)
        authenticator.validate(session.token)
        doc = sessions_collection.find_one({"token": session.token})
        assert doc["lastAccess"] == clock.now
        assert doc["expiresAt"] == session.expires_at

    def test_expired_without_sweep(self, authenticator, sessions_collection, clock):
        session = authenticator.login(ADMIN_PASSWORD)
        clock.advance(hours=23, minutes=59)
        assert authenticator.validate(session.token) is True
        clock.advance(minutes=1)
        # now == expiresAt is already invalid
        assert authenticator.validate(session.token) is False
        assert sessions_collection.count_documents({}) == 1

    @pytest.mark.parametrize("token", [None, "", "deadbeef"])
    def test_unknown_tokens(self, authenticator, token):
        assert authenticator.validate(token) is False


# =====================================================================
# logout / sweep
# =====================================================================

class TestLogout:

    def test_logout_invalidates(self, authenticator):
        session = authenticator.login(ADMIN_PASSWORD)
        authenticator.logout(session.token)
        assert authenticator.validate(session.token) is False

    def test_logout_is_idempotent(self, authenticator):
        session = authenticator.login(ADMIN_PASSWORD)
        authenticator.logout(session.token)
        authenticator.logout(session.token)
        authenticator.logout(None)


class TestSweepExpired:

    def test_removes_only_expired(self, authenticator, sessions_collection, clock):
        old = authenticator.login(ADMIN_PASSWORD)
        clock.advance(hours=12)
        fresh = authenticator.login(ADMIN_PASSWORD)
        clock.advance(hours=13)

        assert authenticator.sweep_expired() == 1
        assert sessions_collection.find_one({"token": old.token}) is None
        assert authenticator.validate(fresh.token) is True

    def test_nothing_to_sweep(self, authenticator):
        assert authenticator.sweep_expired() == 0


class TestBearerToken:

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc123", "abc123"),
        ("bearer abc123", "abc123"),
        ("Bearer ", None),
        ("Basic abc123", None),
        ("abc123", None),
        (None, None),
    ])
    def test_parsing(self, header, expected):
        assert bearer_token(header) == expected
