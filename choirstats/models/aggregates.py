"""
ChoirStats - Aggregate Models

Typed records for window counts and monthly/quarterly/yearly rollups.
MonthlyAggregate is the persisted unit; quarter and year aggregates are
derived on demand and never stored.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from choirstats.models.periods import (
    MONTH_NAMES_NOMINATIVE,
    month_key,
    parse_month_key,
    quarter_of,
    validate_month,
)


logger = logging.getLogger(__name__)


def _coerce_count(value: Any) -> int:
    """Coerce a stored count to a non-negative int (bad values become 0)."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    if isinstance(value, str):
        try:
            return max(int(value), 0)
        except ValueError:
            return 0
    return 0


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored ISO-8601 timestamp (naive values are taken as UTC)."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class WindowCounts:
    """
    Home/other concert counts for one time window.

    total is derived, so total == home_count + other_count always holds.
    """
    home_count: int = 0
    other_count: int = 0

    @property
    def total(self) -> int:
        """Total concerts in the window."""
        return self.home_count + self.other_count

    def __add__(self, other: "WindowCounts") -> "WindowCounts":
        return WindowCounts(
            home_count=self.home_count + other.home_count,
            other_count=self.other_count + other.other_count
        )

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary for JSON output."""
        return {
            "homeCount": self.home_count,
            "otherCount": self.other_count,
            "total": self.total
        }

    @classmethod
    def from_dict(cls, data: Any) -> "WindowCounts":
        """
        Create WindowCounts from a stored mapping.

        Accepts the legacy 'voronezh'/'other' field names. A stored 'total'
        is ignored and recomputed.
        """
        if not isinstance(data, Mapping):
            return cls()
        home = data.get("homeCount", data.get("voronezh", 0))
        other = data.get("otherCount", data.get("other", 0))
        return cls(home_count=_coerce_count(home), other_count=_coerce_count(other))


@dataclass(frozen=True)
class RegionCount:
    """Concert count and display color for one region."""
    count: int
    color: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {"count": self.count, "color": self.color}


def region_counts_to_dict(by_city: Mapping[str, RegionCount]) -> Dict[str, Dict[str, Any]]:
    """Serialize a byCity breakdown."""
    return {region: entry.to_dict() for region, entry in by_city.items()}


def region_counts_from_dict(data: Any, default_color: str = "#888888") -> Dict[str, RegionCount]:
    """Deserialize a byCity breakdown, skipping malformed entries."""
    if not isinstance(data, Mapping):
        return {}
    by_city: Dict[str, RegionCount] = {}
    for region, entry in data.items():
        if not isinstance(region, str) or not isinstance(entry, Mapping):
            continue
        color = entry.get("color")
        by_city[region] = RegionCount(
            count=_coerce_count(entry.get("count", 0)),
            color=color if isinstance(color, str) and color else default_color
        )
    return by_city


@dataclass(frozen=True)
class WindowStatistics:
    """Counts for the three overlapping windows around a reference month."""
    monthly: WindowCounts = field(default_factory=WindowCounts)
    quarterly: WindowCounts = field(default_factory=WindowCounts)
    last_4_months: WindowCounts = field(default_factory=WindowCounts)

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        """Convert to dictionary for JSON output."""
        return {
            "monthly": self.monthly.to_dict(),
            "quarterly": self.quarterly.to_dict(),
            "last4Months": self.last_4_months.to_dict()
        }


@dataclass
class MonthlyAggregate:
    """
    Precomputed statistics for one calendar month.

    Primary Key: month_key (YYYY-MM)
    """
    year: int
    month: int
    monthly: WindowCounts = field(default_factory=WindowCounts)
    by_city: Dict[str, RegionCount] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        validate_month(self.month)

    @property
    def month_key(self) -> str:
        """Persistence key (YYYY-MM)."""
        return month_key(self.year, self.month)

    @property
    def month_name(self) -> str:
        """Nominative month name."""
        return MONTH_NAMES_NOMINATIVE[self.month - 1]

    @property
    def quarter(self) -> int:
        """Calendar quarter containing this month."""
        return quarter_of(self.month)

    def to_document(self) -> Dict[str, Any]:
        """
        Convert to the stored document shape.

        Timestamps are left out; the store stamps them on write.
        """
        return {
            "monthKey": self.month_key,
            "year": self.year,
            "month": self.month,
            "monthName": self.month_name,
            "quarter": self.quarter,
            "monthly": self.monthly.to_dict(),
            "byCity": region_counts_to_dict(self.by_city)
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output, including timestamps."""
        document = self.to_document()
        document["createdAt"] = self.created_at.isoformat() if self.created_at else None
        document["updatedAt"] = self.updated_at.isoformat() if self.updated_at else None
        return document

    @classmethod
    def from_document(cls, key: str, document: Mapping[str, Any]) -> "MonthlyAggregate":
        """
        Create MonthlyAggregate from a stored document.

        The key is authoritative for year and month. Counts are coerced,
        total is recomputed, and a byCity nested under 'monthly' (older
        documents) is accepted.

        Args:
            key: Month key the document was stored under
            document: Stored document

        Returns:
            MonthlyAggregate instance
        """
        year, month = parse_month_key(key)
        monthly_data = document.get("monthly")
        by_city_data = document.get("byCity")
        if by_city_data is None and isinstance(monthly_data, Mapping):
            by_city_data = monthly_data.get("byCity")

        stored_year = document.get("year")
        if stored_year is not None and stored_year != year:
            logger.warning(f"[WARN] Document {key} has mismatched year {stored_year!r}, using key")

        return cls(
            year=year,
            month=month,
            monthly=WindowCounts.from_dict(monthly_data),
            by_city=region_counts_from_dict(by_city_data),
            created_at=_parse_timestamp(document.get("createdAt", document.get("timestamp"))),
            updated_at=_parse_timestamp(document.get("updatedAt"))
        )


@dataclass
class QuarterAggregate:
    """Derived statistics for a calendar quarter (sum of 3 months)."""
    year: int
    quarter: int
    totals: WindowCounts = field(default_factory=WindowCounts)
    by_city: Dict[str, RegionCount] = field(default_factory=dict)
    month_keys: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        result: Dict[str, Any] = {"year": self.year, "quarter": self.quarter}
        result.update(self.totals.to_dict())
        result["byCity"] = region_counts_to_dict(self.by_city)
        result["months"] = list(self.month_keys)
        return result


@dataclass
class YearAggregate:
    """Derived statistics for a calendar year, with its four quarters."""
    year: int
    totals: WindowCounts = field(default_factory=WindowCounts)
    by_city: Dict[str, RegionCount] = field(default_factory=dict)
    month_keys: List[str] = field(default_factory=list)
    quarters: Dict[str, QuarterAggregate] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        result: Dict[str, Any] = {"year": self.year}
        result.update(self.totals.to_dict())
        result["byCity"] = region_counts_to_dict(self.by_city)
        result["months"] = list(self.month_keys)
        result["quarters"] = {name: quarter.to_dict() for name, quarter in self.quarters.items()}
        return result
