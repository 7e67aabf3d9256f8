"""
ChoirStats - Calculators Package

Region classification and color lookup.
"""

from choirstats.calculators.region_classifier import (
    RegionClassifier,
    DEFAULT_CLASSIFIER,
    HOME_REGION,
    UNKNOWN_REGION,
    REGION_COLORS,
    ALL_REGIONS,
    color_for_region,
    is_home_region,
    region_display_name,
    is_valid_region
)

__all__ = [
    "RegionClassifier",
    "DEFAULT_CLASSIFIER",
    "HOME_REGION",
    "UNKNOWN_REGION",
    "REGION_COLORS",
    "ALL_REGIONS",
    "color_for_region",
    "is_home_region",
    "region_display_name",
    "is_valid_region"
]
