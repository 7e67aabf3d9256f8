"""
ChoirStats - Window Aggregator

Classifies concerts into the current month, the current calendar quarter
and the rolling last four months around a reference month, and builds
the monthly aggregate that is persisted for historical rollups.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from choirstats.calculators.region_classifier import (
    DEFAULT_CLASSIFIER,
    UNKNOWN_REGION,
    RegionClassifier,
)
from choirstats.models.aggregates import (
    MonthlyAggregate,
    RegionCount,
    WindowCounts,
    WindowStatistics,
)
from choirstats.models.events import ConcertEvent
from choirstats.models.periods import month_index, validate_month


logger = logging.getLogger(__name__)

EventLike = Union[ConcertEvent, Mapping[str, Any]]

# Months in the rolling window, including the reference month
ROLLING_WINDOW_MONTHS = 4


def _as_event(event: EventLike) -> ConcertEvent:
    """Accept ConcertEvent instances or raw calendar documents."""
    if isinstance(event, ConcertEvent):
        return event
    return ConcertEvent.from_dict(event)


class WindowAggregator:
    """
    Computes home/other counts over calendar and rolling windows.

    Handles:
    - Current month (exact year and month)
    - Current quarter (calendar block [1-3], [4-6], [7-9], [10-12])
    - Last 4 months (rolling, reference month inclusive, spans years)
    """

    def __init__(self, classifier: Optional[RegionClassifier] = None):
        """
        Initialize the window aggregator.

        Args:
            classifier: Region classifier (default: module-wide classifier)
        """
        self.classifier = classifier or DEFAULT_CLASSIFIER
        logger.debug("WindowAggregator initialized")

    def compute_windows(
        self,
        events: Iterable[EventLike],
        ref_year: int,
        ref_month: int
    ) -> WindowStatistics:
        """
        Count concerts in the three windows around a reference month.

        Events with missing or malformed dates are skipped. Events are
        not modified.

        Args:
            events: Concert events (ConcertEvent or mappings)
            ref_year: Reference year
            ref_month: Reference month (1-12)

        Returns:
            WindowStatistics with monthly, quarterly and last-4-months counts
        """
        validate_month(ref_month)

        counters = {
            "monthly": [0, 0],
            "quarterly": [0, 0],
            "last_4_months": [0, 0]
        }
        skipped = 0

        for raw_event in events:
            event = _as_event(raw_event)
            year_month = event.year_month
            if year_month is None:
                skipped += 1
                continue

            # 0 = home, 1 = other
            slot = 0 if self.classifier.is_home_region(event.region) else 1
            year, month = year_month

            if self.in_month(year, month, ref_year, ref_month):
                counters["monthly"][slot] += 1
            if self.in_quarter(year, month, ref_year, ref_month):
                counters["quarterly"][slot] += 1
            if self.in_last_4_months(year, month, ref_year, ref_month):
                counters["last_4_months"][slot] += 1

        if skipped:
            logger.debug(f"Skipped {skipped} events without a valid date")

        return WindowStatistics(
            monthly=WindowCounts(*counters["monthly"]),
            quarterly=WindowCounts(*counters["quarterly"]),
            last_4_months=WindowCounts(*counters["last_4_months"])
        )

    def build_monthly_aggregate(
        self,
        events: Iterable[EventLike],
        year: int,
        month: int
    ) -> MonthlyAggregate:
        """
        Build the persisted aggregate for one month.

        Uses the same month predicate and home/other split as
        compute_windows, so the stored totals match the live monthly window.
        Concerts without a region are listed under the unknown label.

        Args:
            events: Concert events (ConcertEvent or mappings)
            year: Aggregate year
            month: Aggregate month (1-12)

        Returns:
            MonthlyAggregate without timestamps (the store stamps them)
        """
        validate_month(month)

        home_count = 0
        other_count = 0
        region_totals: Dict[str, int] = {}

        for raw_event in events:
            event = _as_event(raw_event)
            year_month = event.year_month
            if year_month is None or not self.in_month(year_month[0], year_month[1], year, month):
                continue

            if self.classifier.is_home_region(event.region):
                home_count += 1
            else:
                other_count += 1

            label = event.region or UNKNOWN_REGION
            region_totals[label] = region_totals.get(label, 0) + 1

        by_city = {
            label: RegionCount(
                count=count,
                color=self.classifier.color_for_region(None if label == UNKNOWN_REGION else label)
            )
            for label, count in region_totals.items()
        }

        aggregate = MonthlyAggregate(
            year=year,
            month=month,
            monthly=WindowCounts(home_count, other_count),
            by_city=by_city
        )
        logger.info(
            f"[OK] Built aggregate for {aggregate.month_key}: "
            f"{aggregate.monthly.total} concerts in {len(by_city)} regions"
        )
        return aggregate

    @staticmethod
    def in_month(year: int, month: int, ref_year: int, ref_month: int) -> bool:
        """Event month equals the reference month."""
        return year == ref_year and month == ref_month

    @staticmethod
    def in_quarter(year: int, month: int, ref_year: int, ref_month: int) -> bool:
        """Event month is in the same calendar quarter as the reference."""
        return year == ref_year and (month - 1) // 3 == (ref_month - 1) // 3

    @staticmethod
    def in_last_4_months(year: int, month: int, ref_year: int, ref_month: int) -> bool:
        """Event month is within the 4 months ending at the reference."""
        end = month_index(ref_year, ref_month)
        start = end - (ROLLING_WINDOW_MONTHS - 1)
        return start <= month_index(year, month) <= end

    @staticmethod
    def last_4_months_range(ref_year: int, ref_month: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """
        First and last (year, month) of the rolling window.

        Args:
            ref_year: Reference year
            ref_month: Reference month (1-12)

        Returns:
            ((start_year, start_month), (ref_year, ref_month))
        """
        start = month_index(ref_year, validate_month(ref_month)) - (ROLLING_WINDOW_MONTHS - 1)
        # month_index is year*12 + month with month in 1..12
        start_year, start_month = divmod(start - 1, 12)
        return (start_year, start_month + 1), (ref_year, ref_month)


_default_aggregator = WindowAggregator()


def compute_windows(
    events: Iterable[EventLike],
    ref_year: int,
    ref_month: int,
    classifier: Optional[RegionClassifier] = None
) -> WindowStatistics:
    """Count concerts in the month, quarter and last-4-months windows."""
    aggregator = WindowAggregator(classifier) if classifier else _default_aggregator
    return aggregator.compute_windows(events, ref_year, ref_month)


def build_monthly_aggregate(
    events: Iterable[EventLike],
    year: int,
    month: int,
    classifier: Optional[RegionClassifier] = None
) -> MonthlyAggregate:
    """Build the persisted aggregate for one month."""
    aggregator = WindowAggregator(classifier) if classifier else _default_aggregator
    return aggregator.build_monthly_aggregate(events, year, month)


def events_from_dicts(documents: Iterable[Mapping[str, Any]]) -> List[ConcertEvent]:
    """Convert calendar documents into ConcertEvent records."""
    return [ConcertEvent.from_dict(document) for document in documents]
