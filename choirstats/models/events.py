"""
ChoirStats - Event Models

Input records consumed by the statistics core.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Tuple


def parse_event_date(value: Any) -> Optional[date]:
    """
    Parse a YYYY-MM-DD string as a naive calendar date.

    Args:
        value: Raw date value from the event source

    Returns:
        Parsed date, or None when absent or malformed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    try:
        parsed = datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        return None
    if len(text) == 10:
        return parsed
    # A full ISO timestamp keeps its calendar date; other trailing text is malformed
    if len(text) < 11 or text[10] not in "T ":
        return None
    try:
        datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed


@dataclass(frozen=True)
class ConcertEvent:
    """
    A dated, region-tagged calendar event.

    Only the date and region are relevant to statistics; everything else
    the calendar stores about a concert is ignored.
    """
    date: Optional[str]
    region: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConcertEvent":
        """
        Create a ConcertEvent from a calendar document.

        Args:
            data: Mapping with 'date' and optional 'region' keys

        Returns:
            ConcertEvent instance
        """
        raw_date = data.get("date")
        raw_region = data.get("region")
        return cls(
            date=raw_date if isinstance(raw_date, str) else None,
            region=raw_region if isinstance(raw_region, str) else None
        )

    @property
    def parsed_date(self) -> Optional[date]:
        """Calendar date of the event, or None if malformed."""
        return parse_event_date(self.date)

    @property
    def year_month(self) -> Optional[Tuple[int, int]]:
        """(year, month) of the event, or None if the date is malformed."""
        parsed = self.parsed_date
        if parsed is None:
            return None
        return parsed.year, parsed.month

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"date": self.date, "region": self.region}
