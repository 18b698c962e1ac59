"""
E2E test fixtures for microshades pipelines.

Provides a runner that chains preparation, color assignment, optional
extension and reordering the way a plotting script would.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import polars as pl
import pytest

from microshades import create_color_dfs, extend_group, prep_mdf, reorder_samples_by


@pytest.fixture
def run_pipeline() -> Callable[..., tuple[pl.DataFrame, pl.DataFrame]]:
    """Return a function running prep -> color -> (extend) -> reorder."""

    def _run(
        raw: pl.DataFrame,
        selected: Sequence[str],
        subgroup_level: str = "Genus",
        group_level: str = "Phylum",
        cvd: bool = False,
        extend: dict[str, Any] | None = None,
        reorder: bool = True,
        **prep_kwargs: Any,
    ) -> tuple[pl.DataFrame, pl.DataFrame]:
        mdf = prep_mdf(raw, subgroup_level, **prep_kwargs)
        mdf, cdf = create_color_dfs(mdf, selected, group_level, subgroup_level, cvd=cvd)
        if extend:
            mdf, cdf = extend_group(mdf, cdf, group_level, subgroup_level, **extend)
        if reorder:
            mdf, cdf = reorder_samples_by(mdf, cdf)
        return mdf, cdf

    return _run
