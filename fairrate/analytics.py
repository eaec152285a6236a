"""Day-bucketed usage counters backed by the ``stats`` collection.

One document per UTC calendar day::

    {"date": "2026-10-18", "views": 12, "calculations": 4,
     "createdAt": <datetime>, "updatedAt": <datetime>}

Increments are a single server-side upsert with ``$inc``, so concurrent
writers never lose updates. Telemetry is best effort: a failing increment is
logged and reported as ``False``, never raised to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from fairrate.config import STATS_MAX_DAYS
from fairrate.timeutils import Clock, day_key, utc_now

LOG = logging.getLogger(__name__)

COUNTERS = ("views", "calculations")


@dataclass
class StatsWindow:
    """The most recent daily rows plus totals over exactly those rows."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    total_views: int = 0
    total_calculations: int = 0

    @property
    def period(self) -> str:
        return f"Last {len(self.rows)} days"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.rows,
            "totals": {
                "totalViews": self.total_views,
                "totalCalculations": self.total_calculations,
            },
            "period": self.period,
        }


def clamp_days(max_days: int) -> int:
    return max(1, min(int(max_days), STATS_MAX_DAYS))


class AnalyticsAggregator:
    def __init__(self, collection: Collection, clock: Clock = utc_now):
        self.collection = collection
        self._clock = clock

    def increment(self, counter: str, amount: int = 1) -> bool:
        """Add ``amount`` to today's ``counter``, creating the row if needed.

        Returns True when the write went through, False when it failed (the
        failure is logged, never raised).
        """
        if counter not in COUNTERS:
            LOG.error("Ignoring increment of unknown counter %r", counter)
            return False

        now = self._clock()
        today = day_key(now)
        other = "calculations" if counter == "views" else "views"
        update = {
            "$inc": {counter: amount},
            "$set": {"updatedAt": now},
            "$setOnInsert": {other: 0, "createdAt": now},
        }
        try:
            try:
                self.collection.update_one({"date": today}, update, upsert=True)
            except DuplicateKeyError:
                # Lost the first-of-day insert race; the row exists now
                self.collection.update_one({"date": today}, update, upsert=True)
        except PyMongoError:
            LOG.exception("Error updating stats (%s +%d for %s)", counter, amount, today)
            return False
        return True

    def query(self, max_days: int) -> StatsWindow:
        """Most recent ``clamp_days(max_days)`` rows, newest first, with totals."""
        limit = clamp_days(max_days)
        cursor = (
            self.collection.find({}, {"_id": 0, "date": 1, "views": 1, "calculations": 1})
            .sort("date", DESCENDING)
            .limit(limit)
        )
        window = StatsWindow()
        for doc in cursor:
            row = {
                "date": doc["date"],
                "views": int(doc.get("views", 0)),
                "calculations": int(doc.get("calculations", 0)),
            }
            window.rows.append(row)
            window.total_views += row["views"]
            window.total_calculations += row["calculations"]
        return window


__all__ = ["AnalyticsAggregator", "StatsWindow", "COUNTERS", "clamp_days"]
