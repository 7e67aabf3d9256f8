"""
ChoirStats - Statistics Service

Thin orchestration over the pure aggregator and the rollup store. This is
the only layer that reads the wall clock; everything below it takes an
explicit reference month.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, Optional

from choirstats.aggregators.labels import (
    last_4_months_label,
    month_name_nominative,
    quarter_label,
)
from choirstats.aggregators.window_aggregator import EventLike, WindowAggregator
from choirstats.cache.refresh_policy import DEFAULT_REFRESH_INTERVAL, should_refresh
from choirstats.cache.rollup_composer import StatisticsRollup
from choirstats.calculators.region_classifier import DEFAULT_CLASSIFIER, RegionClassifier
from choirstats.models.periods import month_key


logger = logging.getLogger(__name__)


class StatisticsService:
    """
    Entry point used by calendar and statistics screens.

    Handles:
    - Live window counts relative to today (or a selected month)
    - Hourly refresh of the current month's stored aggregate
    """

    def __init__(
        self,
        rollup: StatisticsRollup,
        classifier: Optional[RegionClassifier] = None,
        refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    ):
        """
        Initialize the statistics service.

        Args:
            rollup: Rollup composer over the statistics store
            classifier: Region classifier (default: module-wide classifier)
            refresh_interval: Seconds before a stored month is recomputed
        """
        self.rollup = rollup
        self.classifier = classifier or DEFAULT_CLASSIFIER
        self.aggregator = WindowAggregator(self.classifier)
        self.refresh_interval = refresh_interval

    def current_windows(
        self,
        events: Iterable[EventLike],
        today: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Window counts and labels around a reference day.

        Args:
            events: Concert events
            today: Reference day (default: today's local date, read per call)

        Returns:
            Dictionary with the three windows and their display labels
        """
        today = today or date.today()
        windows = self.aggregator.compute_windows(events, today.year, today.month)

        result: Dict[str, Any] = windows.to_dict()
        result["labels"] = {
            "monthly": f"{month_name_nominative(today.month)} {today.year}",
            "quarterly": quarter_label(today.year, today.month),
            "last4Months": last_4_months_label(today.year, today.month)
        }
        result["homeRegion"] = self.classifier.home_region
        return result

    async def refresh_month_if_stale(
        self,
        events: Iterable[EventLike],
        year: Optional[int] = None,
        month: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Recompute and save a month when its stored copy is missing or stale.

        Args:
            events: All concert events (filtered to the month internally)
            year: Month year (default: current year)
            month: Month number (default: current month)
            now: Current time (default: datetime.now(timezone.utc))

        Returns:
            True if the month was saved
        """
        now = now or datetime.now(timezone.utc)
        if year is None or month is None:
            local_today = now.astimezone().date()
            year = year if year is not None else local_today.year
            month = month if month is not None else local_today.month

        key = month_key(year, month)
        stored = await self.rollup.get_month(key)
        if not should_refresh(stored, now, self.refresh_interval):
            logger.debug(f"Statistics for {key} are fresh, skipping save")
            return False

        aggregate = self.aggregator.build_monthly_aggregate(events, year, month)
        await self.rollup.save_month(key, aggregate)
        logger.info(f"[OK] Refreshed statistics for {key}")
        return True
