"""
ChoirStats - Aggregators Package

Window classification and monthly aggregate construction.
"""

from choirstats.aggregators.window_aggregator import (
    WindowAggregator,
    compute_windows,
    build_monthly_aggregate,
    events_from_dicts
)
from choirstats.aggregators.labels import (
    month_name,
    month_name_nominative,
    quarter_label,
    last_4_months_label
)

__all__ = [
    "WindowAggregator",
    "compute_windows",
    "build_monthly_aggregate",
    "events_from_dicts",
    "month_name",
    "month_name_nominative",
    "quarter_label",
    "last_4_months_label"
]
