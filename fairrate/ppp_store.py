"""Purchasing-power-parity factor store backed by the ``ratecaches`` collection.

Each document is ``{country, pppFactor, lastUpdated}``. The collection is
seeded once from :data:`SEED_FACTORS` when it is empty; request traffic only
reads from it.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pymongo.collection import Collection
from pymongo.errors import BulkWriteError

from fairrate.timeutils import Clock, utc_now

LOG = logging.getLogger(__name__)

NEUTRAL_FACTOR = 1.0

# Factors relative to the USA baseline of 1.0
SEED_FACTORS: Dict[str, float] = {
    "USA": 1.0,
    "United Kingdom": 0.88,
    "Canada": 0.91,
    "Australia": 0.93,
    "Germany": 0.85,
    "France": 0.86,
    "Netherlands": 0.87,
    "Switzerland": 0.79,
    "Sweden": 0.90,
    "Norway": 0.81,
    "India": 0.28,
    "Philippines": 0.34,
    "Pakistan": 0.24,
    "Bangladesh": 0.26,
    "Vietnam": 0.32,
    "Indonesia": 0.35,
    "Thailand": 0.40,
    "Malaysia": 0.42,
    "Nigeria": 0.38,
    "Kenya": 0.36,
    "South Africa": 0.44,
    "Egypt": 0.31,
    "Brazil": 0.48,
    "Mexico": 0.51,
    "Argentina": 0.46,
    "Colombia": 0.43,
    "Poland": 0.55,
    "Romania": 0.52,
    "Ukraine": 0.29,
    "Turkey": 0.43,
}


class PPPFactorStore:
    """Country -> PPP factor lookups.

    Unknown countries are PPP-neutral: :meth:`factor_of` returns ``1.0`` for
    them instead of raising.
    """

    def __init__(
        self,
        collection: Collection,
        seed: Optional[Dict[str, float]] = None,
        clock: Clock = utc_now,
    ):
        self.collection = collection
        self.seed = dict(SEED_FACTORS if seed is None else seed)
        self._clock = clock

    def initialize(self) -> int:
        """Seed the collection if it is empty.

        Returns the number of inserted rows (0 when the store already had
        data). A partial bulk insert is logged and does not raise.
        """
        if self.collection.count_documents({}) > 0:
            LOG.info("PPP store already populated, skipping seed")
            return 0

        now = self._clock()
        docs = [
            {"country": country, "pppFactor": factor, "lastUpdated": now}
            for country, factor in self.seed.items()
        ]
        try:
            result = self.collection.insert_many(docs, ordered=False)
            inserted = len(result.inserted_ids)
        except BulkWriteError as e:
            inserted = e.details.get("nInserted", 0)
            LOG.warning("PPP seed partially applied: %s", e.details.get("writeErrors", []))

        if inserted != len(docs):
            LOG.warning("PPP seed inserted %d of %d countries", inserted, len(docs))
        else:
            LOG.info("PPP store initialized with %d countries", inserted)
        return inserted

    def factor_of(self, country: str) -> float:
        doc = self.collection.find_one({"country": country}, {"pppFactor": 1, "_id": 0})
        if not doc:
            return NEUTRAL_FACTOR
        factor = doc.get("pppFactor")
        if not isinstance(factor, (int, float)) or factor <= 0:
            LOG.warning("Ignoring invalid PPP factor %r for %s", factor, country)
            return NEUTRAL_FACTOR
        return float(factor)

    def list_countries(self) -> List[str]:
        """Country names in ascending code-point order."""
        docs = self.collection.find({}, {"country": 1, "_id": 0})
        return sorted(doc["country"] for doc in docs if doc.get("country"))


__all__ = ["PPPFactorStore", "SEED_FACTORS", "NEUTRAL_FACTOR"]
