"""
Core data preparation and color assignment.

This module contains the palette registry and the table transformations
that turn a raw abundance table into annotated, color-mapped tables.
"""

from microshades.core.colors import create_color_dfs, extend_group, match_cdf
from microshades.core.contributions import summarize_contributions
from microshades.core.ordering import reorder_samples_by, sample_order
from microshades.core.palettes import (
    PALETTES,
    get_palette,
    group_palettes,
    interpolate_shades,
    list_palettes,
    other_palette,
)
from microshades.core.preparation import prep_mdf

__all__ = [
    "PALETTES",
    "create_color_dfs",
    "extend_group",
    "get_palette",
    "group_palettes",
    "interpolate_shades",
    "list_palettes",
    "match_cdf",
    "other_palette",
    "prep_mdf",
    "reorder_samples_by",
    "sample_order",
    "summarize_contributions",
]
