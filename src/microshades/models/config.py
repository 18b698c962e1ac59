"""
Pydantic configuration models for microshades.

These models describe how an abundance table is laid out (which columns hold
the sample identifier, the abundance and the lineage ranks) and which two
columns drive the two-level group/sub-group coloring.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, Field, model_validator

from microshades.core.constants import (
    DEFAULT_ABUNDANCE_COLUMN,
    DEFAULT_GROUP_RANK,
    DEFAULT_RANKS,
    DEFAULT_SAMPLE_COLUMN,
    DEFAULT_SUBGROUP_RANK,
)
from microshades.core.exceptions import MissingColumnError, UnknownRankError

if TYPE_CHECKING:
    import polars as pl

logger = logging.getLogger(__name__)


class TaxonomySchema(BaseModel):
    """
    Column layout of a long-format abundance table.

    Ranks are ordered from broadest to most specific. Only the ranks that are
    actually present in a table need to be declared; ``for_table`` derives a
    schema from the default lineage automatically.
    """

    sample_column: str = Field(
        default=DEFAULT_SAMPLE_COLUMN,
        min_length=1,
        description="Column holding the sample identifier",
    )
    abundance_column: str = Field(
        default=DEFAULT_ABUNDANCE_COLUMN,
        min_length=1,
        description="Column holding the non-negative abundance count",
    )
    ranks: tuple[str, ...] = Field(
        default=DEFAULT_RANKS,
        min_length=1,
        description="Lineage rank columns, broadest first",
    )

    @model_validator(mode="after")
    def validate_ranks(self) -> Self:
        """Ranks must be unique and distinct from the sample/abundance columns."""
        if len(set(self.ranks)) != len(self.ranks):
            msg = f"Duplicate ranks in lineage schema: {self.ranks}"
            raise ValueError(msg)
        reserved = {self.sample_column, self.abundance_column}
        clash = reserved.intersection(self.ranks)
        if clash:
            msg = f"Rank names collide with sample/abundance columns: {sorted(clash)}"
            raise ValueError(msg)
        if self.sample_column == self.abundance_column:
            msg = "sample_column and abundance_column must differ"
            raise ValueError(msg)
        return self

    model_config = {"frozen": True}

    @classmethod
    def for_table(
        cls,
        df: pl.DataFrame,
        sample_column: str = DEFAULT_SAMPLE_COLUMN,
        abundance_column: str = DEFAULT_ABUNDANCE_COLUMN,
    ) -> TaxonomySchema:
        """Build a schema from the default ranks found in ``df``."""
        ranks = tuple(r for r in DEFAULT_RANKS if r in df.columns)
        if not ranks:
            raise MissingColumnError(DEFAULT_RANKS[0], df.columns)
        return cls(
            sample_column=sample_column,
            abundance_column=abundance_column,
            ranks=ranks,
        )

    @property
    def deepest_rank(self) -> str:
        return self.ranks[-1]

    def default_rank(self) -> str:
        """Genus when declared, otherwise the deepest declared rank."""
        if DEFAULT_SUBGROUP_RANK in self.ranks:
            return DEFAULT_SUBGROUP_RANK
        return self.deepest_rank

    def ranks_through(self, rank: str) -> tuple[str, ...]:
        """Lineage truncated at ``rank`` (inclusive)."""
        if rank not in self.ranks:
            raise UnknownRankError(rank, self.ranks)
        return self.ranks[: self.ranks.index(rank) + 1]

    def validate_against(self, df: pl.DataFrame, rank: str | None = None) -> None:
        """Fail fast if ``df`` lacks a column the schema relies on."""
        ranks = self.ranks if rank is None else self.ranks_through(rank)
        for column in (self.sample_column, self.abundance_column, *ranks):
            if column not in df.columns:
                raise MissingColumnError(column, df.columns)


class GroupingConfig(BaseModel):
    """
    Two-level grouping used for color assignment.

    ``group_field`` selects the base palette (e.g. Phylum) while
    ``subgroup_field`` decides the shade within it (e.g. Genus).
    """

    group_field: str = Field(default=DEFAULT_GROUP_RANK, min_length=1)
    subgroup_field: str = Field(default=DEFAULT_SUBGROUP_RANK, min_length=1)

    @model_validator(mode="after")
    def validate_distinct(self) -> Self:
        if self.group_field == self.subgroup_field:
            msg = f"group_field and subgroup_field must differ, both are '{self.group_field}'"
            raise ValueError(msg)
        return self

    model_config = {"frozen": True}

    def validate_against(self, df: pl.DataFrame) -> None:
        """Raise MissingColumnError if either field is absent from ``df``."""
        for column in (self.group_field, self.subgroup_field):
            if column not in df.columns:
                raise MissingColumnError(column, df.columns)
