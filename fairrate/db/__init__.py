"""Persistence helpers: MongoDB connection and collection accessors."""
from fairrate.db.mongo_config import (
    MongoDBConfig,
    ensure_indexes,
    ppp_collection,
    sessions_collection,
    stats_collection,
)

__all__ = [
    "MongoDBConfig",
    "ensure_indexes",
    "ppp_collection",
    "sessions_collection",
    "stats_collection",
]
