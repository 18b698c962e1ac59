"""
Abundance table preparation.

Aggregates a long-format sample x taxon abundance table to one taxonomic
rank and converts each sample's counts into proportions, producing the
prepared table consumed by the color assigner.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import polars as pl

from microshades.core.exceptions import (
    InvalidInputError,
    MissingColumnError,
    ZeroTotalSampleError,
)
from microshades.models.config import TaxonomySchema

logger = logging.getLogger(__name__)

_TOTAL = "__sample_total"


def _validate_abundance(df: pl.DataFrame, schema: TaxonomySchema) -> None:
    column = schema.abundance_column
    if not df.schema[column].is_numeric():
        raise InvalidInputError(
            message=f"Abundance column '{column}' must be numeric, got {df.schema[column]}",
            suggestion="Cast the abundance column to an integer or float type.",
        )
    if df[column].null_count() > 0:
        raise InvalidInputError(
            message=f"Abundance column '{column}' contains missing values",
            suggestion="Fill missing abundances with 0 or drop those rows.",
        )
    negative = df.filter(pl.col(column) < 0).height
    if negative:
        raise InvalidInputError(
            message=f"Abundance column '{column}' contains {negative} negative values",
            suggestion="Abundances must be non-negative counts.",
        )


def prep_mdf(
    df: pl.DataFrame,
    subgroup_level: str | None = None,
    *,
    schema: TaxonomySchema | None = None,
    relative: bool = True,
    remove_na: bool = True,
    remove_zero: bool = True,
    sample_metadata: Sequence[str] = (),
) -> pl.DataFrame:
    """
    Aggregate a raw abundance table to ``subgroup_level`` and normalize it.

    Args:
        df: Long table with one row per sample x taxon, holding a sample
            identifier, lineage rank columns and an abundance count
        subgroup_level: Rank to aggregate to (defaults to Genus, or the
            deepest declared rank when Genus is absent)
        schema: Column layout; derived from the default lineage if omitted
        relative: Convert counts to per-sample proportions
        remove_na: Drop rows whose ``subgroup_level`` label is missing
        remove_zero: Drop rows whose aggregated abundance is zero
        sample_metadata: Per-sample columns to carry through (first value
            per sample is kept)

    Returns:
        Prepared table with the sample column, the lineage down to
        ``subgroup_level``, the metadata columns and the abundance column

    Raises:
        InvalidInputError: On missing sample/abundance columns, negative or
            missing abundances, an unknown rank or a zero-total sample
        MissingColumnError: If a declared rank or metadata column is absent
    """
    layout = schema or TaxonomySchema()
    for column in (layout.sample_column, layout.abundance_column):
        if column not in df.columns:
            raise InvalidInputError(
                message=f"Required column '{column}' not found in abundance table",
                suggestion=(
                    f"Available columns: {', '.join(df.columns)}. Pass a "
                    "TaxonomySchema naming your sample and abundance columns."
                ),
            )
    if schema is None:
        schema = TaxonomySchema.for_table(df)

    rank = subgroup_level or schema.default_rank()
    lineage = list(schema.ranks_through(rank))
    schema.validate_against(df, rank)
    for column in sample_metadata:
        if column not in df.columns:
            raise MissingColumnError(column, df.columns)

    _validate_abundance(df, schema)

    sample = schema.sample_column
    abundance = schema.abundance_column
    metadata = [c for c in sample_metadata if c not in lineage and c != sample]

    sample_order = (
        df.select(pl.col(sample).unique(maintain_order=True))
        .with_row_index("__sample_pos")
    )

    aggregated = (
        df.group_by([sample, *lineage])
        .agg(
            pl.col(abundance).sum(),
            *(pl.col(c).first() for c in metadata),
        )
    )
    logger.debug(
        "Aggregated %d input rows to %d rows at rank %s", df.height, aggregated.height, rank
    )

    if relative:
        totals = aggregated.group_by(sample).agg(pl.col(abundance).sum().alias(_TOTAL))
        empty = totals.filter(pl.col(_TOTAL) == 0)
        if empty.height:
            raise ZeroTotalSampleError(empty[sample].cast(pl.Utf8).sort().to_list())
        aggregated = (
            aggregated.join(totals, on=sample, how="left")
            .with_columns((pl.col(abundance) / pl.col(_TOTAL)).alias(abundance))
            .drop(_TOTAL)
        )

    if remove_na:
        before = aggregated.height
        aggregated = aggregated.filter(pl.col(rank).is_not_null())
        dropped = before - aggregated.height
        if dropped:
            logger.warning("Dropped %d rows with no %s assignment", dropped, rank)

    if remove_zero:
        aggregated = aggregated.filter(pl.col(abundance) > 0)

    return (
        aggregated.join(sample_order, on=sample, how="left")
        .sort(["__sample_pos", *lineage], nulls_last=True)
        .drop("__sample_pos")
        .select([sample, *lineage, *metadata, abundance])
    )


def sample_totals(mdf: pl.DataFrame, schema: TaxonomySchema | None = None) -> pl.DataFrame:
    """Per-sample sum of the abundance column of a prepared table."""
    schema = schema or TaxonomySchema()
    for column in (schema.sample_column, schema.abundance_column):
        if column not in mdf.columns:
            raise MissingColumnError(column, mdf.columns)
    return mdf.group_by(schema.sample_column, maintain_order=True).agg(
        pl.col(schema.abundance_column).sum().alias("total")
    )
