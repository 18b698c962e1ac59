"""
Per-group contribution statistics conditioned on a sample covariate.

Summarizes how much each colored group contributes to the samples sharing
one value of a categorical covariate (e.g. all "baseline" samples).
"""

from __future__ import annotations

import logging
from typing import Any

import polars as pl

from microshades.core.constants import (
    DEFAULT_ABUNDANCE_COLUMN,
    DEFAULT_SAMPLE_COLUMN,
    GROUP_COLUMN,
    HEX_COLUMN,
)
from microshades.core.exceptions import InvalidInputError, MissingColumnError

logger = logging.getLogger(__name__)

STAT_COLUMNS: tuple[str, ...] = (
    "n_samples",
    "mean",
    "median",
    "std",
    "min",
    "q1",
    "q3",
    "max",
)


def filter_covariate(
    mdf: pl.DataFrame,
    covariate: str,
    value: Any | None = None,
) -> pl.DataFrame:
    """Rows of ``mdf`` whose ``covariate`` equals ``value`` (all rows if None)."""
    if covariate not in mdf.columns:
        raise MissingColumnError(covariate, mdf.columns)
    if value is None:
        return mdf
    subset = mdf.filter(pl.col(covariate) == value)
    if subset.is_empty():
        levels = mdf[covariate].unique(maintain_order=True).drop_nulls().to_list()
        raise InvalidInputError(
            message=f"No rows with {covariate} == {value!r}",
            suggestion=f"Observed values: {', '.join(str(v) for v in levels[:10])}",
        )
    return subset


def per_sample_contributions(
    mdf: pl.DataFrame,
    cdf: pl.DataFrame,
    covariate: str,
    value: Any | None = None,
    sample_column: str = DEFAULT_SAMPLE_COLUMN,
    abundance_column: str = DEFAULT_ABUNDANCE_COLUMN,
) -> pl.DataFrame:
    """
    Total abundance of every colored group in every matching sample.

    Groups absent from a sample are reported with a value of zero so that
    statistics are computed over all samples of the covariate level.

    Returns:
        DataFrame with columns: sample, group, value
    """
    for column in (sample_column, abundance_column, GROUP_COLUMN):
        if column not in mdf.columns:
            raise MissingColumnError(column, mdf.columns)
    for column in (GROUP_COLUMN, "rank_order"):
        if column not in cdf.columns:
            raise MissingColumnError(column, cdf.columns)

    subset = filter_covariate(mdf, covariate, value)
    totals = subset.group_by([sample_column, GROUP_COLUMN]).agg(
        pl.col(abundance_column).sum().alias("value")
    )
    samples = subset.select(pl.col(sample_column).unique(maintain_order=True))
    groups = cdf.sort("rank_order").select(GROUP_COLUMN)

    return (
        samples.join(groups, how="cross")
        .join(totals, on=[sample_column, GROUP_COLUMN], how="left")
        .with_columns(pl.col("value").fill_null(0.0))
        .select(sample_column, GROUP_COLUMN, "value")
    )


def summarize_contributions(
    mdf: pl.DataFrame,
    cdf: pl.DataFrame,
    covariate: str,
    value: Any | None = None,
    sample_column: str = DEFAULT_SAMPLE_COLUMN,
    abundance_column: str = DEFAULT_ABUNDANCE_COLUMN,
) -> pl.DataFrame:
    """
    Summary statistics of each group's contribution within one covariate level.

    Args:
        mdf: Annotated table from ``create_color_dfs``
        cdf: Color lookup table
        covariate: Sample metadata column to condition on
        value: Level of ``covariate`` to keep; None keeps every sample
        sample_column: Column holding the sample identifier
        abundance_column: Column holding proportions

    Returns:
        One row per group in stacking order with columns group, hex,
        rank_order and n_samples, mean, median, std, min, q1, q3, max
    """
    long = per_sample_contributions(
        mdf, cdf, covariate, value, sample_column, abundance_column
    )
    stats = long.group_by(GROUP_COLUMN).agg(
        pl.col("value").count().alias("n_samples"),
        pl.col("value").mean().alias("mean"),
        pl.col("value").median().alias("median"),
        pl.col("value").std().fill_null(0.0).alias("std"),
        pl.col("value").min().alias("min"),
        pl.col("value").quantile(0.25, interpolation="linear").alias("q1"),
        pl.col("value").quantile(0.75, interpolation="linear").alias("q3"),
        pl.col("value").max().alias("max"),
    )
    logger.debug(
        "Summarized %d groups over %d rows for %s=%r",
        stats.height,
        long.height,
        covariate,
        value,
    )
    return (
        cdf.select(GROUP_COLUMN, HEX_COLUMN, "rank_order")
        .join(stats, on=GROUP_COLUMN, how="inner")
        .sort("rank_order")
        .select(GROUP_COLUMN, HEX_COLUMN, "rank_order", *STAT_COLUMNS)
    )
