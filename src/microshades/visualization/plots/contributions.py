"""
Contribution plots: mean, median and distribution of each group's share
within the samples of one covariate level.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

import plotly.graph_objects as go
import polars as pl

from microshades.core.constants import (
    DEFAULT_ABUNDANCE_COLUMN,
    DEFAULT_SAMPLE_COLUMN,
    GROUP_COLUMN,
    HEX_COLUMN,
)
from microshades.core.contributions import (
    per_sample_contributions,
    summarize_contributions,
)
from microshades.core.exceptions import InvalidInputError
from microshades.visualization.plots.base import BasePlot, PlotConfig, require_columns

if TYPE_CHECKING:
    from pathlib import Path

ContributionKind = Literal["mean", "median", "box"]


class ContributionPlot(BasePlot):
    """
    Per-group contribution chart for one covariate level.

    ``mean`` draws horizontal bars with standard deviation error bars,
    ``median`` draws bars of the median, ``box`` draws the per-sample
    distribution of every group.
    """

    def __init__(
        self,
        mdf: pl.DataFrame,
        cdf: pl.DataFrame,
        covariate: str,
        value: Any | None = None,
        kind: ContributionKind = "mean",
        sample_column: str = DEFAULT_SAMPLE_COLUMN,
        abundance_column: str = DEFAULT_ABUNDANCE_COLUMN,
        config: PlotConfig | None = None,
        title: str | None = None,
    ) -> None:
        """
        Initialize contribution plot.

        Args:
            mdf: Annotated table from ``create_color_dfs``
            cdf: Color lookup table
            covariate: Sample metadata column to condition on
            value: Level of ``covariate`` to plot; None uses all samples
            kind: 'mean', 'median' or 'box'
            sample_column: Column holding the sample identifier
            abundance_column: Column holding proportions
            config: Plot configuration
            title: Chart title; defaults to "<covariate>: <value>"
        """
        super().__init__(config)
        require_columns(mdf, [covariate, sample_column, abundance_column, GROUP_COLUMN])
        require_columns(cdf, [GROUP_COLUMN, HEX_COLUMN, "rank_order"])
        if kind not in ("mean", "median", "box"):
            raise InvalidInputError(
                message=f"Unknown contribution plot kind '{kind}'",
                suggestion="Use 'mean', 'median' or 'box'.",
            )
        self.mdf = mdf
        self.cdf = cdf
        self.covariate = covariate
        self.value = value
        self.kind = kind
        self.sample_column = sample_column
        self.abundance_column = abundance_column
        self.title = title or (covariate if value is None else f"{covariate}: {value}")

    def summary(self) -> pl.DataFrame:
        """Summary statistics backing the chart."""
        return summarize_contributions(
            self.mdf,
            self.cdf,
            self.covariate,
            self.value,
            self.sample_column,
            self.abundance_column,
        )

    def create_figure(self) -> go.Figure:
        """Create the contribution chart."""
        fig = go.Figure()

        if self.kind == "box":
            long = per_sample_contributions(
                self.mdf,
                self.cdf,
                self.covariate,
                self.value,
                self.sample_column,
                self.abundance_column,
            )
            for row in self.summary().iter_rows(named=True):
                values = long.filter(pl.col(GROUP_COLUMN) == row[GROUP_COLUMN])["value"]
                fig.add_trace(
                    go.Box(
                        x=values.to_list(),
                        name=row[GROUP_COLUMN],
                        marker_color=row[HEX_COLUMN],
                        boxpoints="all",
                        jitter=0.3,
                        orientation="h",
                        hoverinfo="x+name",
                    )
                )
        else:
            summary = self.summary()
            stat = self.kind
            fig.add_trace(
                go.Bar(
                    x=summary[stat].to_list(),
                    y=summary[GROUP_COLUMN].to_list(),
                    orientation="h",
                    marker_color=summary[HEX_COLUMN].to_list(),
                    error_x=(
                        {"type": "data", "array": summary["std"].to_list(), "visible": True}
                        if stat == "mean"
                        else None
                    ),
                    customdata=summary["n_samples"].to_list(),
                    hovertemplate=(
                        "<b>%{y}</b><br>"
                        f"{stat.title()}: %{{x:.1%}}<br>"
                        "Samples: %{customdata}<extra></extra>"
                    ),
                )
            )

        x_title = "Relative Abundance"
        if self.kind != "box":
            x_title = f"{self.kind.title()} {x_title}"
        fig.update_layout(
            xaxis={"title": {"text": x_title}, "tickformat": ".0%"},
            yaxis={"autorange": "reversed"},
            showlegend=False,
            **self.config.to_layout_dict(self.title),
        )

        return self._apply_config(fig)


def plot_contributions(
    mdf: pl.DataFrame,
    cdf: pl.DataFrame,
    covariate: str,
    value: Any | None = None,
    kind: ContributionKind = "mean",
    output_path: Path | None = None,
    **kwargs,
) -> go.Figure:
    """Convenience function to build (and optionally save) a contribution plot.

    Args:
        mdf: Annotated table from ``create_color_dfs``.
        cdf: Color lookup table.
        covariate: Sample metadata column to condition on.
        value: Level of ``covariate`` to plot.
        kind: 'mean', 'median' or 'box'.
        output_path: Optional file path (.html, .json, .png, ...).
        **kwargs: Additional arguments passed to ContributionPlot.
    """
    plot = ContributionPlot(mdf, cdf, covariate, value, kind=kind, **kwargs)
    if output_path is not None:
        plot.save(str(output_path))
    return plot.create_figure()
