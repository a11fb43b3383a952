"""Visualization module."""

from .ranges import RangeDisplay, display_range
from .reports import display_equity, display_icm, equity_table, icm_table

__all__ = [
    "RangeDisplay",
    "display_range",
    "display_equity",
    "display_icm",
    "equity_table",
    "icm_table",
]
