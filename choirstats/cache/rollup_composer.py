"""
ChoirStats - Rollup Composer

Saves monthly aggregates and composes them into quarter and year views.

Composition policy is strict: months are fetched concurrently, a month
with no stored record counts as zero, and any storage error aborts the
whole composition and propagates to the caller. Nothing is retried here.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from choirstats.cache.redis_store import DocumentStore
from choirstats.models.aggregates import (
    MonthlyAggregate,
    QuarterAggregate,
    RegionCount,
    WindowCounts,
    YearAggregate,
)
from choirstats.models.periods import (
    months_in_quarter,
    months_in_year,
    parse_month_key,
    validate_quarter,
)


logger = logging.getLogger(__name__)


def merge_region_counts(
    breakdowns: Iterable[Dict[str, RegionCount]]
) -> Dict[str, RegionCount]:
    """
    Sum per-region counts across breakdowns.

    The color of a region comes from the first breakdown (in iteration
    order) that contains it, so pass breakdowns in calendar order.

    Args:
        breakdowns: byCity mappings in calendar order

    Returns:
        Merged byCity mapping
    """
    merged: Dict[str, RegionCount] = {}
    for by_city in breakdowns:
        for region, entry in by_city.items():
            existing = merged.get(region)
            if existing is None:
                merged[region] = RegionCount(count=entry.count, color=entry.color)
            else:
                merged[region] = RegionCount(count=existing.count + entry.count, color=existing.color)
    return merged


def sum_month_totals(months: Iterable[Optional[MonthlyAggregate]]) -> WindowCounts:
    """Sum monthly counts, treating missing months as zero."""
    totals = WindowCounts()
    for aggregate in months:
        if aggregate is not None:
            totals = totals + aggregate.monthly
    return totals


class StatisticsRollup:
    """
    Monthly statistics persistence and quarter/year composition.

    Handles:
    - Month upserts (createdAt set once, updatedAt on every write)
    - Single month reads (None when absent)
    - Quarter and year rollups built from stored months
    - Listing the years and months that have data
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the rollup composer.

        Args:
            store: Document store (RedisDocumentStore or InMemoryDocumentStore)
            clock: Returns the current UTC time (default: datetime.now(timezone.utc))
        """
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        logger.debug("StatisticsRollup initialized")

    # ==================== Monthly Records ====================

    async def save_month(self, month_key: str, aggregate: MonthlyAggregate) -> MonthlyAggregate:
        """
        Upsert the aggregate for a month.

        Saving identical data twice leaves the counts unchanged and only
        moves updatedAt forward.

        Args:
            month_key: Month key (YYYY-MM); must match the aggregate
            aggregate: Monthly aggregate to store

        Returns:
            The aggregate with timestamps as written

        Raises:
            InvalidMonthKeyError: If the key is malformed
            ValueError: If the key does not match the aggregate's month
            StatisticsStoreError: If the write fails
        """
        parse_month_key(month_key)
        if month_key != aggregate.month_key:
            raise ValueError(
                f"Month key {month_key} does not match aggregate for {aggregate.month_key}"
            )

        now = self.clock()
        document = aggregate.to_document()
        document["updatedAt"] = now.isoformat()

        await self.store.upsert(month_key, document, defaults={"createdAt": now.isoformat()})
        # createdAt is only written for a new record, so read back the stored value
        stored = await self.store.get(month_key)
        created_at = MonthlyAggregate.from_document(month_key, stored).created_at if stored else None

        logger.info(
            f"[OK] Saved statistics for {aggregate.month_name} {aggregate.year} "
            f"({aggregate.monthly.total} concerts)"
        )
        return MonthlyAggregate(
            year=aggregate.year,
            month=aggregate.month,
            monthly=aggregate.monthly,
            by_city=dict(aggregate.by_city),
            created_at=created_at,
            updated_at=now
        )

    async def get_month(self, month_key: str) -> Optional[MonthlyAggregate]:
        """
        Fetch the stored aggregate for a month.

        Args:
            month_key: Month key (YYYY-MM)

        Returns:
            MonthlyAggregate, or None if nothing is stored for the month
        """
        parse_month_key(month_key)
        document = await self.store.get(month_key)
        if document is None:
            logger.debug(f"No statistics stored for {month_key}")
            return None
        return MonthlyAggregate.from_document(month_key, document)

    async def delete_month(self, month_key: str) -> bool:
        """Administrative delete of a stored month."""
        parse_month_key(month_key)
        return await self.store.delete(month_key)

    async def _fetch_months(self, month_keys: Sequence[str]) -> List[Optional[MonthlyAggregate]]:
        """Fetch months concurrently, preserving the order of month_keys."""
        return list(await asyncio.gather(*(self.get_month(key) for key in month_keys)))

    # ==================== Rollups ====================

    @staticmethod
    def compose_quarter(
        quarter: int,
        year: int,
        months: Sequence[Optional[MonthlyAggregate]]
    ) -> QuarterAggregate:
        """
        Combine the three months of a quarter.

        Args:
            quarter: Quarter number (1-4)
            year: Calendar year
            months: Aggregates for the quarter's months in calendar order
                (None for months without a record)

        Returns:
            QuarterAggregate
        """
        month_keys = months_in_quarter(quarter, year)
        present = [aggregate for aggregate in months if aggregate is not None]
        return QuarterAggregate(
            year=year,
            quarter=quarter,
            totals=sum_month_totals(present),
            by_city=merge_region_counts(aggregate.by_city for aggregate in present),
            month_keys=month_keys
        )

    async def get_quarter(self, quarter: int, year: int) -> QuarterAggregate:
        """
        Build the aggregate for a calendar quarter from its stored months.

        Args:
            quarter: Quarter number (1-4)
            year: Calendar year

        Returns:
            QuarterAggregate (all zero if no month is stored)
        """
        validate_quarter(quarter)
        months = await self._fetch_months(months_in_quarter(quarter, year))
        result = self.compose_quarter(quarter, year, months)
        logger.debug(f"Composed Q{quarter} {year}: {result.totals.total} concerts")
        return result

    async def get_year(self, year: int) -> YearAggregate:
        """
        Build the aggregate for a year, including its four quarters.

        All twelve months are fetched once; quarters are composed from those
        months with compose_quarter, the same routine get_quarter uses.

        Args:
            year: Calendar year

        Returns:
            YearAggregate
        """
        month_keys = months_in_year(year)
        months = await self._fetch_months(month_keys)

        quarters: Dict[str, QuarterAggregate] = {}
        for quarter in range(1, 5):
            start = (quarter - 1) * 3
            quarters[f"Q{quarter}"] = self.compose_quarter(quarter, year, months[start:start + 3])

        present = [aggregate for aggregate in months if aggregate is not None]
        result = YearAggregate(
            year=year,
            totals=sum_month_totals(present),
            by_city=merge_region_counts(aggregate.by_city for aggregate in present),
            month_keys=month_keys,
            quarters=quarters
        )
        logger.info(
            f"[OK] Composed {year}: {result.totals.total} concerts "
            f"from {len(present)} stored months"
        )
        return result

    # ==================== Availability ====================

    async def list_available_years(self) -> List[int]:
        """Years with at least one stored month, most recent first."""
        years = set()
        for key in await self.store.list_keys(""):
            try:
                year, _ = parse_month_key(key)
            except ValueError:
                logger.warning(f"[WARN] Ignoring unexpected statistics key {key!r}")
                continue
            years.add(year)
        return sorted(years, reverse=True)

    async def list_available_months(self, year: int) -> List[Tuple[str, MonthlyAggregate]]:
        """
        Stored months of a year, most recent first.

        Args:
            year: Calendar year

        Returns:
            List of (month_key, MonthlyAggregate) tuples
        """
        keys = []
        for key in await self.store.list_keys(f"{year:04d}-"):
            try:
                key_year, _ = parse_month_key(key)
            except ValueError:
                logger.warning(f"[WARN] Ignoring unexpected statistics key {key!r}")
                continue
            if key_year == year:
                keys.append(key)

        keys.sort(reverse=True)
        months = await self._fetch_months(keys)
        # A record deleted between listing and fetching is skipped
        return [(key, aggregate) for key, aggregate in zip(keys, months) if aggregate is not None]
