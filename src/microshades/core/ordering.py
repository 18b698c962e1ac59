"""
Sample ordering along the category axis.

Stacked composition charts are easier to read when samples are sorted by
the abundance of one sub-group. The ordering is attached to the annotated
table as a ``pl.Enum`` sample column; abundance values are left untouched.
"""

from __future__ import annotations

import logging

import polars as pl

from microshades.core.constants import (
    DEFAULT_ABUNDANCE_COLUMN,
    DEFAULT_SAMPLE_COLUMN,
    OTHER_LABEL,
    TOP_GROUP_COLUMN,
    TOP_SUBGROUP_COLUMN,
    other_subgroup_label,
)
from microshades.core.exceptions import InvalidInputError, MissingColumnError

logger = logging.getLogger(__name__)


def sample_order(mdf: pl.DataFrame, sample_column: str = DEFAULT_SAMPLE_COLUMN) -> list[str]:
    """
    Current sample order of a table.

    Returns the Enum categories when the sample column has already been
    reordered, otherwise samples in order of first appearance.
    """
    if sample_column not in mdf.columns:
        raise MissingColumnError(sample_column, mdf.columns)
    dtype = mdf.schema[sample_column]
    if isinstance(dtype, pl.Enum):
        present = set(mdf[sample_column].cast(pl.Utf8).unique().to_list())
        return [s for s in dtype.categories.to_list() if s in present]
    return mdf[sample_column].cast(pl.Utf8).unique(maintain_order=True).to_list()


def _most_abundant_subgroup(
    mdf: pl.DataFrame, cdf: pl.DataFrame, abundance_column: str
) -> tuple[str, str]:
    """Named sub-group with the largest total abundance, ties by stacking order."""
    totals = mdf.group_by([TOP_GROUP_COLUMN, TOP_SUBGROUP_COLUMN]).agg(
        pl.col(abundance_column).sum().alias("total")
    )
    # collapsed "Other <group>" buckets hold the lightest shade
    bucket = pl.concat_str([pl.lit(other_subgroup_label("")), pl.col(TOP_GROUP_COLUMN)])
    candidates = (
        cdf.filter(
            (pl.col(TOP_GROUP_COLUMN) != OTHER_LABEL) & (pl.col(TOP_SUBGROUP_COLUMN) != bucket)
        )
        .join(totals, on=[TOP_GROUP_COLUMN, TOP_SUBGROUP_COLUMN], how="inner")
        .sort(["total", "rank_order"], descending=[True, False])
    )
    if candidates.is_empty():
        raise InvalidInputError(
            message="No selected sub-group is present to order samples by",
            suggestion="Pass top_group and top_subgroup explicitly.",
        )
    return candidates[TOP_GROUP_COLUMN][0], candidates[TOP_SUBGROUP_COLUMN][0]


def reorder_samples_by(
    mdf: pl.DataFrame,
    cdf: pl.DataFrame,
    top_group: str | None = None,
    top_subgroup: str | None = None,
    descending: bool = True,
    sample_column: str = DEFAULT_SAMPLE_COLUMN,
    abundance_column: str = DEFAULT_ABUNDANCE_COLUMN,
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """
    Sort samples by the abundance of one (top_group, top_subgroup) pair.

    Args:
        mdf: Annotated table from ``create_color_dfs``
        cdf: Color lookup table from ``create_color_dfs``
        top_group: Group of the sub-group to sort by
        top_subgroup: Sub-group to sort by; when both are omitted the most
            abundant named sub-group is used
        descending: Put samples with the largest value first
        sample_column: Column holding the sample identifier
        abundance_column: Column holding proportions

    Returns:
        Tuple of (table with the sample column as an ordered Enum, cdf)
    """
    for column in (sample_column, abundance_column, TOP_GROUP_COLUMN, TOP_SUBGROUP_COLUMN):
        if column not in mdf.columns:
            raise MissingColumnError(column, mdf.columns)

    if (top_group is None) != (top_subgroup is None):
        raise InvalidInputError(
            message="top_group and top_subgroup must be given together",
            suggestion="Pass both, or neither to sort by the most abundant sub-group.",
        )
    if top_group is None:
        top_group, top_subgroup = _most_abundant_subgroup(mdf, cdf, abundance_column)
    elif cdf.filter(
        (pl.col(TOP_GROUP_COLUMN) == top_group) & (pl.col(TOP_SUBGROUP_COLUMN) == top_subgroup)
    ).is_empty():
        raise InvalidInputError(
            message=f"No color assignment for '{top_group}' / '{top_subgroup}'",
            suggestion="Choose a (top_group, top_subgroup) pair listed in the color table.",
        )

    current = sample_order(mdf, sample_column)
    values = (
        mdf.filter(
            (pl.col(TOP_GROUP_COLUMN) == top_group)
            & (pl.col(TOP_SUBGROUP_COLUMN) == top_subgroup)
        )
        .group_by(pl.col(sample_column).cast(pl.Utf8))
        .agg(pl.col(abundance_column).sum().alias("value"))
    )
    ranking = (
        pl.DataFrame({sample_column: current}, schema={sample_column: pl.Utf8})
        .with_row_index("position")
        .join(values, on=sample_column, how="left")
        .with_columns(pl.col("value").fill_null(0.0))
        .sort(["value", "position"], descending=[descending, False], maintain_order=True)
    )
    order = ranking[sample_column].to_list()

    logger.debug("Reordered %d samples by %s-%s", len(order), top_group, top_subgroup)
    reordered = mdf.with_columns(
        pl.col(sample_column).cast(pl.Utf8).cast(pl.Enum(order))
    )
    return reordered, cdf
