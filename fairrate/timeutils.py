"""UTC time helpers shared by the analytics and session services."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]

DAY_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def day_key(moment: Optional[datetime] = None) -> str:
    """Return the ``YYYY-MM-DD`` bucket for ``moment`` (default: now) in UTC."""
    moment = moment or utc_now()
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(DAY_FORMAT)


def isoformat_utc(moment: datetime) -> str:
    """Format as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
