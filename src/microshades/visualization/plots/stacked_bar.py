"""
Stacked composition bar chart.

Draws one bar per sample (or per level of another column) with the colored
groups stacked in the order of the color lookup table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import plotly.graph_objects as go
import polars as pl

from microshades.core.colors import match_cdf
from microshades.core.constants import (
    DEFAULT_ABUNDANCE_COLUMN,
    DEFAULT_SAMPLE_COLUMN,
    GROUP_COLUMN,
    HEX_COLUMN,
    TOP_GROUP_COLUMN,
    TOP_SUBGROUP_COLUMN,
)
from microshades.core.ordering import sample_order
from microshades.visualization.plots.base import BasePlot, PlotConfig, require_columns

if TYPE_CHECKING:
    from pathlib import Path


class StackedAbundanceChart(BasePlot):
    """
    Stacked proportion bar chart colored by a color lookup table.

    Groups are stacked bottom-up in ``rank_order``; the legend is grouped by
    top-rank group so that it reads as a two-level key.
    """

    def __init__(
        self,
        mdf: pl.DataFrame,
        cdf: pl.DataFrame,
        x: str = DEFAULT_SAMPLE_COLUMN,
        abundance_column: str = DEFAULT_ABUNDANCE_COLUMN,
        config: PlotConfig | None = None,
        normalize: bool = True,
        reverse_stack: bool = False,
        title: str | None = None,
        y_title: str = "Relative Abundance",
    ) -> None:
        """
        Initialize stacked chart.

        Args:
            mdf: Annotated table from ``create_color_dfs``
            cdf: Color lookup table from ``create_color_dfs``
            x: Column used for the category axis (sample or metadata column)
            abundance_column: Column holding proportions
            config: Plot configuration
            normalize: Rescale every bar to sum to one
            reverse_stack: Stack the last group at the bottom instead
            title: Chart title
            y_title: Y axis title
        """
        super().__init__(config)
        require_columns(mdf, [x, abundance_column, GROUP_COLUMN])
        require_columns(cdf, [GROUP_COLUMN, HEX_COLUMN, TOP_GROUP_COLUMN, TOP_SUBGROUP_COLUMN])
        self.mdf = mdf
        self.cdf = cdf
        self.x = x
        self.abundance_column = abundance_column
        self.normalize = normalize
        self.reverse_stack = reverse_stack
        self.title = title
        self.y_title = y_title

    def categories(self) -> list[str]:
        """Category axis order."""
        return sample_order(self.mdf, self.x)

    def bar_values(self) -> pl.DataFrame:
        """Height of every (category, group) segment."""
        values = self.mdf.group_by(
            [pl.col(self.x).cast(pl.Utf8), GROUP_COLUMN]
        ).agg(pl.col(self.abundance_column).sum().alias("value"))
        if self.normalize:
            values = values.with_columns(
                (pl.col("value") / pl.col("value").sum().over(self.x)).fill_nan(0.0)
            )
        return values

    def create_figure(self) -> go.Figure:
        """Create the stacked composition chart."""
        categories = self.categories()
        lookup = {
            (row[self.x], row[GROUP_COLUMN]): row["value"]
            for row in self.bar_values().iter_rows(named=True)
        }

        entries = list(match_cdf(self.mdf, self.cdf).iter_rows(named=True))
        if self.reverse_stack:
            entries.reverse()

        fig = go.Figure()
        seen_groups: set[str] = set()
        for entry in entries:
            top_group = entry[TOP_GROUP_COLUMN]
            values = [lookup.get((c, entry[GROUP_COLUMN]), 0.0) for c in categories]
            fig.add_trace(
                go.Bar(
                    name=entry[TOP_SUBGROUP_COLUMN],
                    x=categories,
                    y=values,
                    marker_color=entry[HEX_COLUMN],
                    marker_line_width=0,
                    legendgroup=top_group,
                    legendgrouptitle_text=(
                        None if top_group in seen_groups else top_group
                    ),
                    hovertemplate=(
                        f"<b>{entry[GROUP_COLUMN]}</b><br>"
                        f"{self.x}: %{{x}}<br>"
                        "Abundance: %{y:.1%}<extra></extra>"
                    ),
                )
            )
            seen_groups.add(top_group)

        fig.update_layout(
            barmode="stack",
            bargap=0.1,
            xaxis={
                "title": {"text": self.x},
                "type": "category",
                "categoryorder": "array",
                "categoryarray": categories,
            },
            yaxis={
                "title": {"text": self.y_title},
                "tickformat": ".0%" if self.normalize else None,
            },
            legend={"traceorder": "grouped+reversed" if not self.reverse_stack else "grouped"},
            showlegend=self.config.show_legend,
            **self.config.to_layout_dict(self.title),
        )

        return self._apply_config(fig)


def plot_stacked_abundance(
    mdf: pl.DataFrame,
    cdf: pl.DataFrame,
    x: str = DEFAULT_SAMPLE_COLUMN,
    output_path: Path | None = None,
    **kwargs,
) -> go.Figure:
    """Convenience function to build (and optionally save) a stacked chart.

    Args:
        mdf: Annotated table from ``create_color_dfs``.
        cdf: Color lookup table from ``create_color_dfs``.
        x: Column used for the category axis.
        output_path: Optional file path (.html, .json, .png, ...).
        **kwargs: Additional arguments passed to StackedAbundanceChart.

    Returns:
        The Plotly figure for further customization.
    """
    chart = StackedAbundanceChart(mdf, cdf, x=x, **kwargs)
    if output_path is not None:
        chart.save(str(output_path))
    return chart.create_figure()
