"""
ChoirStats - Views Package

Chart builders for statistics screens.
"""

from choirstats.views.charts import build_region_chart, build_home_other_chart, region_breakdown

__all__ = ["build_region_chart", "build_home_other_chart", "region_breakdown"]
