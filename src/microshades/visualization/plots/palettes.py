"""
Palette swatch overview, one row of shades per registered palette.
"""

from __future__ import annotations

import plotly.graph_objects as go

from microshades.core.palettes import get_palette, list_palettes
from microshades.visualization.plots.base import BasePlot, PlotConfig


class PaletteSwatchPlot(BasePlot):
    """Grid of palette shades, lightest on the left."""

    def __init__(
        self,
        cvd: bool | None = None,
        palettes: list[str] | None = None,
        config: PlotConfig | None = None,
        title: str = "microshades palettes",
    ) -> None:
        """
        Initialize swatch plot.

        Args:
            cvd: Restrict to the CVD (True) or base (False) family
            palettes: Explicit palette names; overrides ``cvd``
            config: Plot configuration
            title: Chart title
        """
        super().__init__(config)
        self.palettes = [get_palette(name) for name in (palettes or list_palettes(cvd))]
        self.title = title

    def create_figure(self) -> go.Figure:
        """Create the swatch grid."""
        fig = go.Figure()

        names = [p.name for p in self.palettes]
        for palette in self.palettes:
            fig.add_trace(
                go.Scatter(
                    x=list(range(len(palette))),
                    y=[palette.name] * len(palette),
                    mode="markers",
                    marker={
                        "symbol": "square",
                        "size": 36,
                        "color": list(palette.shades),
                        "line": {"width": 0},
                    },
                    text=list(palette.shades),
                    hovertemplate="%{y}<br>shade %{x}: %{text}<extra></extra>",
                    showlegend=False,
                )
            )

        fig.update_layout(
            xaxis={"title": {"text": "Shade"}, "dtick": 1, "showgrid": False},
            yaxis={
                "type": "category",
                "categoryorder": "array",
                "categoryarray": names[::-1],
                "showgrid": False,
            },
            **self.config.to_layout_dict(self.title),
        )

        return self._apply_config(fig)
