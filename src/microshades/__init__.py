"""
Microshades: shaded color palettes for microbiome composition plots.

Assigns one base palette per selected top-rank taxonomic group (e.g. phylum)
and one shade per sub-group (e.g. genus), ranked by abundance, and builds
stacked composition charts and two-tier legends from the result.
"""

__version__ = "0.1.0"
__author__ = "Microshades Team"

from microshades.core.colors import create_color_dfs, extend_group, match_cdf
from microshades.core.ordering import reorder_samples_by
from microshades.core.palettes import get_palette, list_palettes
from microshades.core.preparation import prep_mdf
from microshades.models.config import GroupingConfig, TaxonomySchema

__all__ = [
    "GroupingConfig",
    "TaxonomySchema",
    "__version__",
    "create_color_dfs",
    "extend_group",
    "get_palette",
    "list_palettes",
    "match_cdf",
    "prep_mdf",
    "reorder_samples_by",
]
