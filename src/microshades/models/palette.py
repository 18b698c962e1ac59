"""
Palette and color assignment models.

A Palette is an immutable, named sequence of hex colors ordered from the
lightest to the darkest shade. ColorAssignment and LegendEntry are row views
over the color lookup table returned by the color assigner.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    import polars as pl

_HEX_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class Palette(BaseModel):
    """Named shade sequence, lightest first."""

    name: str = Field(min_length=1)
    shades: tuple[str, ...] = Field(min_length=1)
    cvd: bool = False

    @field_validator("shades")
    @classmethod
    def validate_hex(cls, shades: tuple[str, ...]) -> tuple[str, ...]:
        bad = [s for s in shades if not _HEX_PATTERN.match(s)]
        if bad:
            msg = f"Invalid hex colors in palette: {bad}"
            raise ValueError(msg)
        return tuple(s.upper() for s in shades)

    model_config = {"frozen": True}

    def __len__(self) -> int:
        return len(self.shades)

    @property
    def lightest(self) -> str:
        return self.shades[0]

    @property
    def darkest(self) -> str:
        return self.shades[-1]


class ColorAssignment(BaseModel):
    """One (top group, sub-group) entry of the color lookup table."""

    top_group: str
    top_subgroup: str
    group: str
    palette: str
    shade_index: int = Field(ge=0)
    hex: str
    subgroup_rank: int = Field(ge=1)
    rank_order: int = Field(ge=1)

    model_config = {"frozen": True}

    @classmethod
    def from_frame(cls, cdf: pl.DataFrame) -> list[Self]:
        """Convert every row of a color lookup table, keeping its order."""
        return [cls(**row) for row in cdf.sort("rank_order").iter_rows(named=True)]


class LegendEntry(BaseModel):
    """A positioned swatch in a two-tier legend."""

    heading: str
    label: str
    hex: str
    block: int = Field(ge=0, description="Index of the top-group block")
    row: int = Field(ge=0, description="Row within the block, 0 is the heading")
    x: float
    y: float

    model_config = {"frozen": True}
