"""
Pydantic data models for microshades.

Provides type-safe models for table layout, grouping configuration,
palettes and color assignments.
"""

from microshades.models.config import GroupingConfig, TaxonomySchema
from microshades.models.palette import ColorAssignment, LegendEntry, Palette

__all__ = [
    "ColorAssignment",
    "GroupingConfig",
    "LegendEntry",
    "Palette",
    "TaxonomySchema",
]
