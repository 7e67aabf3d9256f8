"""
ChoirStats - Window Labels

Display labels for the statistics windows.
"""

from choirstats.aggregators.window_aggregator import WindowAggregator
from choirstats.models.periods import (
    MONTH_NAMES_GENITIVE,
    MONTH_NAMES_NOMINATIVE,
    quarter_of,
    validate_month,
)

__all__ = [
    "month_name",
    "month_name_nominative",
    "quarter_label",
    "last_4_months_label",
]


def month_name(month: int) -> str:
    """Genitive month name ("марта"), or '' for an out-of-range month."""
    if not isinstance(month, int) or not 1 <= month <= 12:
        return ""
    return MONTH_NAMES_GENITIVE[month - 1]


def month_name_nominative(month: int) -> str:
    """Nominative month name ("март")."""
    return MONTH_NAMES_NOMINATIVE[validate_month(month) - 1]


def quarter_label(ref_year: int, ref_month: int) -> str:
    """Label such as 'Q2 2025' for the quarter containing the month."""
    return f"Q{quarter_of(ref_month)} {ref_year}"


def last_4_months_label(ref_year: int, ref_month: int) -> str:
    """
    Label for the rolling four-month window ending at the reference month.

    Within one year: "марта – июня 2025".
    Across a year boundary: "октября 2024 – января 2025".
    """
    (start_year, start_month), _ = WindowAggregator.last_4_months_range(ref_year, ref_month)
    start_name = month_name(start_month)
    end_name = month_name(ref_month)
    if start_year == ref_year:
        return f"{start_name} – {end_name} {ref_year}"
    return f"{start_name} {start_year} – {end_name} {ref_year}"
