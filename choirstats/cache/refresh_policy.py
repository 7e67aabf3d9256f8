"""
ChoirStats - Refresh Policy

Caller-side staleness check for stored monthly statistics. The store
itself never expires records.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from choirstats.models.aggregates import MonthlyAggregate


logger = logging.getLogger(__name__)

# Recompute the current month at most once an hour
DEFAULT_REFRESH_INTERVAL = 3600


def should_refresh(
    aggregate: Optional[MonthlyAggregate],
    now: datetime,
    max_age_seconds: int = DEFAULT_REFRESH_INTERVAL
) -> bool:
    """
    Decide whether a month should be recomputed and saved again.

    Args:
        aggregate: Stored aggregate, or None if the month was never saved
        now: Current time (timezone-aware)
        max_age_seconds: Refresh interval

    Returns:
        True if the month is missing, has no updatedAt, or is older than the interval
    """
    if aggregate is None or aggregate.updated_at is None:
        return True

    # Stored timestamps are UTC-aware; a naive now is taken as UTC
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    age = (now - aggregate.updated_at).total_seconds()
    is_stale = age >= max_age_seconds

    if is_stale:
        logger.debug(f"{aggregate.month_key} is stale (age: {age:.0f}s, max: {max_age_seconds}s)")
    else:
        logger.debug(f"{aggregate.month_key} is fresh (age: {age:.0f}s, max: {max_age_seconds}s)")

    return is_stale
