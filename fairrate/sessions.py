"""Admin session authentication backed by the ``adminsessions`` collection.

A session is ``{token, expiresAt, lastAccess}``. Lifecycle:

- **active**: created by :meth:`SessionAuthenticator.login`, valid while
  ``now < expiresAt``;
- **expired**: purely time based, rejected by :meth:`validate` even before
  the sweep removes the row;
- **absent**: deleted by :meth:`logout` or by :meth:`sweep_expired`.

``expiresAt`` is absolute: :meth:`validate` refreshes ``lastAccess`` only.
Concurrent logins simply create several valid sessions.
"""
from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from pymongo import ReturnDocument
from pymongo.collection import Collection

from fairrate.config import ADMIN_PASSWORD, FAILED_LOGIN_DELAY_SECONDS, SESSION_TTL_HOURS
from fairrate.errors import AuthenticationError
from fairrate.timeutils import Clock, isoformat_utc, utc_now

LOG = logging.getLogger(__name__)

# 32 random bytes -> 64 hex characters
TOKEN_BYTES = 32


@dataclass(frozen=True)
class AdminSession:
    token: str
    expires_at: datetime

    def to_dict(self) -> dict:
        return {"success": True, "token": self.token, "expiresAt": isoformat_utc(self.expires_at)}


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


class SessionAuthenticator:
    def __init__(
        self,
        collection: Collection,
        admin_password: Optional[str] = ADMIN_PASSWORD,
        ttl: timedelta = timedelta(hours=SESSION_TTL_HOURS),
        failed_login_delay: float = FAILED_LOGIN_DELAY_SECONDS,
        clock: Clock = utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.collection = collection
        self._admin_password = admin_password
        self.ttl = ttl
        self.failed_login_delay = failed_login_delay
        self._clock = clock
        self._sleep = sleep

    def _password_matches(self, password: str) -> bool:
        if not self._admin_password:
            LOG.warning("ADMIN_PASSWORD is not configured; rejecting login")
            return False
        return secrets.compare_digest(password.encode("utf-8"), self._admin_password.encode("utf-8"))

    def login(self, password: str) -> AdminSession:
        """Exchange the admin password for a fresh session.

        A mismatch waits ``failed_login_delay`` seconds, then raises
        :class:`AuthenticationError`.
        """
        if not self._password_matches(password):
            LOG.warning("Failed admin login attempt")
            self._sleep(self.failed_login_delay)
            raise AuthenticationError()

        now = self._clock()
        session = AdminSession(token=secrets.token_hex(TOKEN_BYTES), expires_at=now + self.ttl)
        self.collection.insert_one(
            {"token": session.token, "expiresAt": session.expires_at, "lastAccess": now}
        )
        LOG.info("Admin session %s... created, expires %s", session.token[:8], isoformat_utc(session.expires_at))
        return session

    def validate(self, token: Optional[str]) -> bool:
        """True iff ``token`` names a live session; touches ``lastAccess``."""
        if not token:
            return False
        now = self._clock()
        doc = self.collection.find_one_and_update(
            {"token": token, "expiresAt": {"$gt": now}},
            {"$set": {"lastAccess": now}},
            return_document=ReturnDocument.AFTER,
        )
        return doc is not None

    def logout(self, token: Optional[str]) -> None:
        """Delete the session. Unknown tokens are not an error."""
        if not token:
            return
        result = self.collection.delete_one({"token": token})
        if result.deleted_count:
            LOG.info("Admin session %s... revoked", token[:8])

    def sweep_expired(self) -> int:
        """Delete every session whose ``expiresAt`` is in the past."""
        result = self.collection.delete_many({"expiresAt": {"$lt": self._clock()}})
        LOG.info("Session sweep removed %d expired session(s)", result.deleted_count)
        return result.deleted_count


__all__ = ["SessionAuthenticator", "AdminSession", "bearer_token", "TOKEN_BYTES"]
