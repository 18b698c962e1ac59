"""Unit tests for covariate-conditioned contribution statistics."""

from __future__ import annotations

import polars as pl
import pytest

from microshades.core.contributions import (
    STAT_COLUMNS,
    filter_covariate,
    per_sample_contributions,
    summarize_contributions,
)
from microshades.core.exceptions import InvalidInputError, MissingColumnError


def _row(summary: pl.DataFrame, group: str) -> dict:
    rows = summary.filter(pl.col("group") == group)
    assert rows.height == 1, f"Expected one summary row for {group}"
    return rows.row(0, named=True)


class TestFilterCovariate:
    """Tests for selecting one covariate level."""

    def test_filters_rows(self, annotated: pl.DataFrame):
        treated = filter_covariate(annotated, "Treatment", "treated")
        assert set(treated["Sample"].to_list()) == {"S2", "S3"}

    def test_none_keeps_all(self, annotated: pl.DataFrame):
        assert filter_covariate(annotated, "Treatment").height == annotated.height

    def test_missing_covariate(self, annotated: pl.DataFrame):
        with pytest.raises(MissingColumnError) as exc_info:
            filter_covariate(annotated, "Timepoint", "day0")
        assert exc_info.value.column == "Timepoint"

    def test_absent_value(self, annotated: pl.DataFrame):
        with pytest.raises(InvalidInputError, match="placebo") as exc_info:
            filter_covariate(annotated, "Treatment", "placebo")
        assert "control" in exc_info.value.suggestion


class TestPerSampleContributions:
    """Tests for per-sample group totals."""

    def test_zero_filled(self, annotated: pl.DataFrame, cdf: pl.DataFrame):
        long = per_sample_contributions(annotated, cdf, "Treatment", "treated")
        assert long.columns == ["Sample", "group", "value"]
        assert long.height == 2 * cdf.height
        s3 = long.filter(
            (pl.col("Sample") == "S3") & (pl.col("group") == "Bacteroidota-Bacteroides")
        )
        assert s3["value"][0] == 0.0

    def test_collapsed_bucket_summed(self, annotated: pl.DataFrame, cdf: pl.DataFrame):
        long = per_sample_contributions(annotated, cdf, "Treatment", "control")
        bucket = long.filter(pl.col("group") == "Firmicutes-Other Firmicutes")
        assert bucket["value"][0] == pytest.approx((6 + 4 + 2) / 160)


class TestSummarizeContributions:
    """Tests for summary statistics."""

    def test_layout(self, annotated: pl.DataFrame, cdf: pl.DataFrame):
        summary = summarize_contributions(annotated, cdf, "Treatment", "treated")
        assert summary.columns == ["group", "hex", "rank_order", *STAT_COLUMNS]
        assert summary["rank_order"].to_list() == cdf["rank_order"].to_list()

    def test_statistics(self, annotated: pl.DataFrame, cdf: pl.DataFrame):
        summary = summarize_contributions(annotated, cdf, "Treatment", "treated")
        row = _row(summary, "Bacteroidota-Bacteroides")
        assert row["n_samples"] == 2
        assert row["mean"] == pytest.approx(0.2)
        assert row["median"] == pytest.approx(0.2)
        assert row["min"] == pytest.approx(0.0)
        assert row["max"] == pytest.approx(0.4)
        assert row["std"] == pytest.approx(0.4 / 2**0.5)
        assert row["q1"] == pytest.approx(0.1)
        assert row["q3"] == pytest.approx(0.3)

        lacto = _row(summary, "Firmicutes-Lactobacillus")
        assert lacto["mean"] == pytest.approx(0.29)

        other = _row(summary, "Other")
        assert other["mean"] == pytest.approx(0.02)

    def test_single_sample_has_zero_std(self, annotated: pl.DataFrame, cdf: pl.DataFrame):
        summary = summarize_contributions(annotated, cdf, "Treatment", "control")
        row = _row(summary, "Firmicutes-Lactobacillus")
        assert row["n_samples"] == 1
        assert row["std"] == 0.0
        assert row["mean"] == pytest.approx(0.25)

    def test_all_samples(self, annotated: pl.DataFrame, cdf: pl.DataFrame):
        summary = summarize_contributions(annotated, cdf, "Treatment")
        assert set(summary["n_samples"].to_list()) == {3}

    def test_hex_matches_cdf(self, annotated: pl.DataFrame, cdf: pl.DataFrame):
        summary = summarize_contributions(annotated, cdf, "Treatment", "treated")
        assert summary["hex"].to_list() == cdf["hex"].to_list()

    def test_requires_annotation(self, prepared: pl.DataFrame, cdf: pl.DataFrame):
        with pytest.raises(MissingColumnError):
            summarize_contributions(prepared, cdf, "Treatment", "treated")
