"""
Standalone two-tier legend.

Builds a legend figure independent of the composition chart: one block per
top-rank group with a heading, followed by a colored swatch for each of its
sub-groups. Blocks are laid out top-to-bottom (vertical) or side by side
(horizontal) so the legend can be arranged next to one or more charts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import plotly.graph_objects as go

from microshades.core.constants import (
    HEX_COLUMN,
    TOP_GROUP_COLUMN,
    TOP_SUBGROUP_COLUMN,
)
from microshades.core.exceptions import InvalidInputError
from microshades.models.palette import LegendEntry
from microshades.visualization.plots.base import BasePlot, PlotConfig, require_columns

if TYPE_CHECKING:
    import polars as pl

LegendOrientation = Literal["vertical", "horizontal"]

# Horizontal distance between blocks in legend coordinates
BLOCK_WIDTH = 1.0
# Empty rows left between vertically stacked blocks
BLOCK_GAP = 1


class GroupLegend(BasePlot):
    """Two-level (group / sub-group) legend drawn as its own figure."""

    def __init__(
        self,
        cdf: pl.DataFrame,
        config: PlotConfig | None = None,
        legend_orientation: LegendOrientation = "vertical",
        legend_key_size: int = 16,
        legend_text_size: int = 12,
        legend_group_size: int = 14,
        title: str | None = None,
    ) -> None:
        """
        Initialize legend.

        Args:
            cdf: Color lookup table from ``create_color_dfs``
            config: Plot configuration
            legend_orientation: 'vertical' stacks group blocks, 'horizontal'
                places them side by side
            legend_key_size: Swatch size in pixels
            legend_text_size: Sub-group label font size
            legend_group_size: Group heading font size
            title: Optional legend title
        """
        super().__init__(config)
        require_columns(cdf, [TOP_GROUP_COLUMN, TOP_SUBGROUP_COLUMN, HEX_COLUMN, "rank_order"])
        if legend_orientation not in ("vertical", "horizontal"):
            raise InvalidInputError(
                message=f"Unknown legend orientation '{legend_orientation}'",
                suggestion="Use 'vertical' or 'horizontal'.",
            )
        self.cdf = cdf
        self.legend_orientation = legend_orientation
        self.legend_key_size = legend_key_size
        self.legend_text_size = legend_text_size
        self.legend_group_size = legend_group_size
        self.title = title

    def blocks(self) -> list[tuple[str, list[dict]]]:
        """Color table rows grouped by top-rank group, in stacking order."""
        blocks: dict[str, list[dict]] = {}
        for row in self.cdf.sort("rank_order").iter_rows(named=True):
            blocks.setdefault(row[TOP_GROUP_COLUMN], []).append(row)
        return list(blocks.items())

    def layout_entries(self) -> list[LegendEntry]:
        """Position every swatch; the heading of block ``b`` sits on row 0."""
        entries: list[LegendEntry] = []
        offset = 0
        for block, (heading, rows) in enumerate(self.blocks()):
            for i, row in enumerate(rows, start=1):
                if self.legend_orientation == "vertical":
                    x, y = 0.0, -float(offset + i)
                else:
                    x, y = block * BLOCK_WIDTH, -float(i)
                entries.append(
                    LegendEntry(
                        heading=heading,
                        label=row[TOP_SUBGROUP_COLUMN],
                        hex=row[HEX_COLUMN],
                        block=block,
                        row=i,
                        x=x,
                        y=y,
                    )
                )
            offset += len(rows) + 1 + BLOCK_GAP
        return entries

    def _heading_positions(self) -> list[tuple[str, float, float]]:
        positions = []
        offset = 0
        for block, (heading, rows) in enumerate(self.blocks()):
            if self.legend_orientation == "vertical":
                positions.append((heading, 0.0, -float(offset)))
            else:
                positions.append((heading, block * BLOCK_WIDTH, 0.0))
            offset += len(rows) + 1 + BLOCK_GAP
        return positions

    def create_figure(self) -> go.Figure:
        """Create the legend figure."""
        entries = self.layout_entries()
        headings = self._heading_positions()

        fig = go.Figure()
        fig.add_trace(
            go.Scatter(
                x=[h[1] for h in headings],
                y=[h[2] for h in headings],
                mode="text",
                text=[f"<b>{h[0]}</b>" for h in headings],
                textposition="middle right",
                textfont={"size": self.legend_group_size},
                hoverinfo="skip",
                showlegend=False,
            )
        )
        fig.add_trace(
            go.Scatter(
                x=[e.x for e in entries],
                y=[e.y for e in entries],
                mode="markers+text",
                marker={
                    "symbol": "square",
                    "size": self.legend_key_size,
                    "color": [e.hex for e in entries],
                    "line": {"width": 0},
                },
                text=[e.label for e in entries],
                textposition="middle right",
                textfont={"size": self.legend_text_size},
                hovertemplate="%{text}<extra></extra>",
                showlegend=False,
            )
        )

        n_blocks = len(headings)
        x_max = (n_blocks if self.legend_orientation == "horizontal" else 1) * BLOCK_WIDTH
        hidden_axis = {"visible": False, "showgrid": False, "zeroline": False}
        fig.update_layout(
            xaxis={**hidden_axis, "range": [-0.05, x_max]},
            yaxis={**hidden_axis},
            showlegend=False,
            **self.config.to_layout_dict(self.title),
        )

        return self._apply_config(fig)


def build_legend(
    cdf: pl.DataFrame,
    legend_orientation: LegendOrientation = "vertical",
    **kwargs,
) -> go.Figure:
    """Convenience function returning a standalone legend figure.

    Args:
        cdf: Color lookup table from ``create_color_dfs``.
        legend_orientation: 'vertical' or 'horizontal'.
        **kwargs: Additional arguments passed to GroupLegend.
    """
    return GroupLegend(cdf, legend_orientation=legend_orientation, **kwargs).create_figure()
