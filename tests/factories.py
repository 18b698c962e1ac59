"""
Test data factories.

Provides deterministic, seeded generation of long-format abundance tables
with a realistic lineage so that preparation and coloring can be exercised
on more than a handful of rows.
"""

from __future__ import annotations

import random
from typing import NamedTuple

import polars as pl


class AbundanceRecord(NamedTuple):
    """A single sample x taxon abundance row."""

    Sample: str
    Kingdom: str
    Phylum: str | None
    Family: str | None
    Genus: str | None
    Abundance: int
    Treatment: str


class AbundanceDataFactory:
    """
    Factory for synthetic microbiome abundance tables.

    Every sample draws counts for a fixed lineage catalogue; a fraction of
    taxa can be left without a genus assignment to exercise NA handling.
    All data generation is seeded for reproducibility.
    """

    # (Phylum, Family, Genus)
    LINEAGES: list[tuple[str, str, str]] = [
        ("Firmicutes", "Lactobacillaceae", "Lactobacillus"),
        ("Firmicutes", "Streptococcaceae", "Streptococcus"),
        ("Firmicutes", "Clostridiaceae", "Clostridium"),
        ("Firmicutes", "Bacillaceae", "Bacillus"),
        ("Firmicutes", "Veillonellaceae", "Veillonella"),
        ("Firmicutes", "Enterococcaceae", "Enterococcus"),
        ("Firmicutes", "Ruminococcaceae", "Ruminococcus"),
        ("Bacteroidota", "Bacteroidaceae", "Bacteroides"),
        ("Bacteroidota", "Prevotellaceae", "Prevotella"),
        ("Proteobacteria", "Enterobacteriaceae", "Escherichia"),
        ("Proteobacteria", "Pseudomonadaceae", "Pseudomonas"),
        ("Actinobacteriota", "Bifidobacteriaceae", "Bifidobacterium"),
        ("Verrucomicrobiota", "Akkermansiaceae", "Akkermansia"),
    ]

    TREATMENTS = ["control", "treated"]

    def __init__(self, seed: int = 42):
        """Initialize with reproducible seed."""
        self._rng = random.Random(seed)

    def create_records(
        self,
        n_samples: int = 6,
        max_count: int = 500,
        zero_fraction: float = 0.1,
        unassigned_fraction: float = 0.0,
    ) -> list[AbundanceRecord]:
        """
        Create abundance rows for ``n_samples`` samples.

        Args:
            n_samples: Number of samples
            max_count: Upper bound of each count
            zero_fraction: Probability that a taxon has a zero count
            unassigned_fraction: Probability that a taxon has no genus

        Returns:
            List of AbundanceRecord
        """
        records = []
        for i in range(n_samples):
            sample = f"S{i + 1:02d}"
            treatment = self.TREATMENTS[i % len(self.TREATMENTS)]
            for phylum, family, genus in self.LINEAGES:
                count = 0 if self._rng.random() < zero_fraction else self._rng.randint(1, max_count)
                if self._rng.random() < unassigned_fraction:
                    genus = None
                records.append(
                    AbundanceRecord(
                        Sample=sample,
                        Kingdom="Bacteria",
                        Phylum=phylum,
                        Family=family,
                        Genus=genus,
                        Abundance=count,
                        Treatment=treatment,
                    )
                )
            # every sample keeps at least one non-zero count
            records.append(
                AbundanceRecord(sample, "Bacteria", "Firmicutes", "Lactobacillaceae",
                                "Lactobacillus", 1, treatment)
            )
        return records

    def create_table(self, **kwargs) -> pl.DataFrame:
        """Create an abundance table as a polars DataFrame."""
        records = self.create_records(**kwargs)
        return pl.DataFrame(
            [r._asdict() for r in records],
            schema={
                "Sample": pl.Utf8,
                "Kingdom": pl.Utf8,
                "Phylum": pl.Utf8,
                "Family": pl.Utf8,
                "Genus": pl.Utf8,
                "Abundance": pl.Int64,
                "Treatment": pl.Utf8,
            },
        )
