"""
Constants used throughout the microshades package.

Centralizes column names, default ranks and labels so that the data
preparation, color assignment and plotting modules agree on table layout.
"""

from __future__ import annotations

# =============================================================================
# Input Table Defaults
# =============================================================================

DEFAULT_SAMPLE_COLUMN = "Sample"
DEFAULT_ABUNDANCE_COLUMN = "Abundance"

# Standard lineage from broadest to most specific
DEFAULT_RANKS: tuple[str, ...] = (
    "Kingdom",
    "Phylum",
    "Class",
    "Order",
    "Family",
    "Genus",
    "Species",
)

DEFAULT_SUBGROUP_RANK = "Genus"
DEFAULT_GROUP_RANK = "Phylum"

# =============================================================================
# Annotated Table Columns
# =============================================================================

TOP_GROUP_COLUMN = "top_group"
TOP_SUBGROUP_COLUMN = "top_subgroup"
GROUP_COLUMN = "group"
HEX_COLUMN = "hex"

# Color lookup table layout, in output order
CDF_COLUMNS: tuple[str, ...] = (
    TOP_GROUP_COLUMN,
    TOP_SUBGROUP_COLUMN,
    GROUP_COLUMN,
    "palette",
    "shade_index",
    HEX_COLUMN,
    "subgroup_rank",
    "rank_order",
)

# =============================================================================
# Labels
# =============================================================================

# Bucket for every top-rank group that was not selected
OTHER_LABEL = "Other"

# Label used for sub-rank values that are missing
UNASSIGNED_LABEL = "Unassigned"

# Shade of the gray palette used for the global "Other" bucket
OTHER_SHADE_INDEX = 2

# Spacing between groups in the global stacking order; a group can hold at
# most RANK_ORDER_STRIDE - 1 colors
RANK_ORDER_STRIDE = 1000

# Tolerance used when checking that proportions sum to one
PROPORTION_TOLERANCE = 1e-9


def other_subgroup_label(group: str) -> str:
    """Label of the collapsed bucket inside a selected group."""
    return f"{OTHER_LABEL} {group}"


def group_label(top_group: str, top_subgroup: str) -> str:
    """Two-level label shown in charts and legends."""
    if top_group == OTHER_LABEL and top_subgroup == OTHER_LABEL:
        return OTHER_LABEL
    return f"{top_group}-{top_subgroup}"
