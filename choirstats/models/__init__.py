"""
ChoirStats - Data Models Package

Event input records, period keys and aggregate records.
"""

from choirstats.models.events import ConcertEvent, parse_event_date
from choirstats.models.aggregates import (
    WindowCounts,
    RegionCount,
    WindowStatistics,
    MonthlyAggregate,
    QuarterAggregate,
    YearAggregate
)

__all__ = [
    "ConcertEvent",
    "parse_event_date",
    "WindowCounts",
    "RegionCount",
    "WindowStatistics",
    "MonthlyAggregate",
    "QuarterAggregate",
    "YearAggregate"
]
