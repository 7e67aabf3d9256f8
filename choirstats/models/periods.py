"""
ChoirStats - Period Keys

Month key (YYYY-MM) handling and calendar quarter arithmetic.
"""

import re
from typing import List, Tuple

from choirstats.exceptions import InvalidMonthKeyError


MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

# Nominative month names, stored with each monthly aggregate
MONTH_NAMES_NOMINATIVE = (
    "январь", "февраль", "март", "апрель", "май", "июнь",
    "июль", "август", "сентябрь", "октябрь", "ноябрь", "декабрь"
)

# Genitive month names, used in labels ("3 марта", "марта – июня")
MONTH_NAMES_GENITIVE = (
    "января", "февраля", "марта", "апреля", "мая", "июня",
    "июля", "августа", "сентября", "октября", "ноября", "декабря"
)


def validate_month(month: int) -> int:
    """Return month unchanged if it is 1-12, otherwise raise."""
    if not isinstance(month, int) or isinstance(month, bool) or not 1 <= month <= 12:
        raise InvalidMonthKeyError(f"Month must be an integer 1-12, got {month!r}")
    return month


def validate_quarter(quarter: int) -> int:
    """Return quarter unchanged if it is 1-4, otherwise raise."""
    if not isinstance(quarter, int) or isinstance(quarter, bool) or not 1 <= quarter <= 4:
        raise InvalidMonthKeyError(f"Quarter must be an integer 1-4, got {quarter!r}")
    return quarter


def month_key(year: int, month: int) -> str:
    """Build a zero-padded YYYY-MM key."""
    validate_month(month)
    return f"{year:04d}-{month:02d}"


def parse_month_key(key: str) -> Tuple[int, int]:
    """
    Parse a YYYY-MM key.

    Args:
        key: Month key string

    Returns:
        (year, month) tuple

    Raises:
        InvalidMonthKeyError: If the key is not a valid YYYY-MM key
    """
    match = MONTH_KEY_PATTERN.match(key or "")
    if not match:
        raise InvalidMonthKeyError(f"Invalid month key {key!r}, expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    validate_month(month)
    return year, month


def quarter_of(month: int) -> int:
    """Calendar quarter (1-4) that contains the month."""
    return (validate_month(month) - 1) // 3 + 1


def month_index(year: int, month: int) -> int:
    """Linear month number, so ranges compare correctly across years."""
    return year * 12 + month


def months_in_quarter(quarter: int, year: int) -> List[str]:
    """Month keys of a calendar quarter, in calendar order."""
    start_month = (validate_quarter(quarter) - 1) * 3 + 1
    return [month_key(year, start_month + offset) for offset in range(3)]


def months_in_year(year: int) -> List[str]:
    """All twelve month keys of a year, in calendar order."""
    return [month_key(year, month) for month in range(1, 13)]
