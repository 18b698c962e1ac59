"""
Shared pytest fixtures for microshades tests.

Provides a small hand-computed abundance table whose proportions, rankings
and colors are known exactly, plus seeded synthetic tables for tests that
need more volume.
"""

from __future__ import annotations

import polars as pl
import pytest

from tests.factories import AbundanceDataFactory

# =============================================================================
# Raw Abundance Tables
# =============================================================================

# (Sample, Phylum, Genus, count); sample totals are 160, 125 and 100
GUT_COUNTS: list[tuple[str, str, str | None, int]] = [
    ("S1", "Firmicutes", "Lactobacillus", 40),
    ("S1", "Firmicutes", "Streptococcus", 20),
    ("S1", "Firmicutes", "Clostridium", 10),
    ("S1", "Firmicutes", "Bacillus", 8),
    ("S1", "Firmicutes", "Veillonella", 6),
    ("S1", "Firmicutes", "Enterococcus", 4),
    ("S1", "Firmicutes", "Ruminococcus", 2),
    ("S1", "Bacteroidota", "Bacteroides", 30),
    ("S1", "Bacteroidota", "Prevotella", 10),
    ("S1", "Proteobacteria", "Escherichia", 20),
    ("S1", "Actinobacteriota", "Bifidobacterium", 10),
    ("S2", "Firmicutes", "Lactobacillus", 10),
    ("S2", "Firmicutes", "Streptococcus", 30),
    ("S2", "Firmicutes", "Clostridium", 5),
    ("S2", "Bacteroidota", "Bacteroides", 50),
    ("S2", "Bacteroidota", "Prevotella", 25),
    ("S2", "Proteobacteria", "Escherichia", 5),
    ("S2", "Actinobacteriota", "Bifidobacterium", 0),
    ("S3", "Firmicutes", "Lactobacillus", 50),
    ("S3", "Firmicutes", "Bacillus", 20),
    ("S3", "Bacteroidota", "Prevotella", 20),
    ("S3", "Proteobacteria", None, 10),
]

TREATMENT = {"S1": "control", "S2": "treated", "S3": "treated"}


@pytest.fixture
def raw_counts() -> pl.DataFrame:
    """Raw gut abundance counts for three samples."""
    return pl.DataFrame(
        {
            "Sample": [r[0] for r in GUT_COUNTS],
            "Kingdom": ["Bacteria"] * len(GUT_COUNTS),
            "Phylum": [r[1] for r in GUT_COUNTS],
            "Genus": [r[2] for r in GUT_COUNTS],
            "Abundance": [r[3] for r in GUT_COUNTS],
            "Treatment": [TREATMENT[r[0]] for r in GUT_COUNTS],
        },
        schema={
            "Sample": pl.Utf8,
            "Kingdom": pl.Utf8,
            "Phylum": pl.Utf8,
            "Genus": pl.Utf8,
            "Abundance": pl.Int64,
            "Treatment": pl.Utf8,
        },
    )


@pytest.fixture
def two_sample_counts() -> pl.DataFrame:
    """Group A with sub-groups x (70%) and y (30%), group B with z, in two samples."""
    rows = [
        (sample, phylum, genus, count)
        for sample in ("S1", "S2")
        for phylum, genus, count in (("A", "x", 35), ("A", "y", 15), ("B", "z", 50))
    ]
    return pl.DataFrame(
        rows,
        schema={"Sample": pl.Utf8, "Phylum": pl.Utf8, "Genus": pl.Utf8, "Abundance": pl.Int64},
        orient="row",
    )


@pytest.fixture
def synthetic_counts() -> pl.DataFrame:
    """Seeded synthetic table with eight samples."""
    return AbundanceDataFactory(seed=7).create_table(n_samples=8)


# =============================================================================
# Prepared / Annotated Tables
# =============================================================================


@pytest.fixture
def prepared(raw_counts: pl.DataFrame) -> pl.DataFrame:
    """Genus-level proportions with the treatment carried through."""
    from microshades.core.preparation import prep_mdf

    return prep_mdf(raw_counts, "Genus", sample_metadata=["Treatment"])


@pytest.fixture
def colored(prepared: pl.DataFrame) -> tuple[pl.DataFrame, pl.DataFrame]:
    """Annotated table and color lookup for Firmicutes and Bacteroidota."""
    from microshades.core.colors import create_color_dfs

    return create_color_dfs(prepared, ["Firmicutes", "Bacteroidota"], "Phylum", "Genus")


@pytest.fixture
def annotated(colored: tuple[pl.DataFrame, pl.DataFrame]) -> pl.DataFrame:
    return colored[0]


@pytest.fixture
def cdf(colored: tuple[pl.DataFrame, pl.DataFrame]) -> pl.DataFrame:
    return colored[1]
