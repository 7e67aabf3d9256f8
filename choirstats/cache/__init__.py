"""
ChoirStats - Storage Module

Persists monthly statistics and composes quarter/year rollups from them.
Redis is the production backend; the in-memory store has the same contract.
"""

from choirstats.cache.redis_store import (
    DocumentStore,
    RedisDocumentStore,
    InMemoryDocumentStore,
)
from choirstats.cache.rollup_composer import (
    StatisticsRollup,
    merge_region_counts,
    sum_month_totals,
)
from choirstats.cache.refresh_policy import DEFAULT_REFRESH_INTERVAL, should_refresh

__all__ = [
    "DocumentStore",
    "RedisDocumentStore",
    "InMemoryDocumentStore",
    "StatisticsRollup",
    "merge_region_counts",
    "sum_month_totals",
    "DEFAULT_REFRESH_INTERVAL",
    "should_refresh",
]
