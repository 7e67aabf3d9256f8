"""
ChoirStats - Concert Statistics & Monthly Rollups

This package classifies a choir's concerts into month, quarter and rolling
four-month windows, splits them into home region vs. other regions, and
persists monthly aggregates that are composed into quarter and year views.
"""

__version__ = "25.11.01"
__author__ = "Choir Administration"
