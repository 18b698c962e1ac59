"""
Base classes and utilities for plot generation.

Defines common styling, the abstract plot interface and shared helpers used
by the composition chart, legend and contribution plots.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import plotly.graph_objects as go

from microshades.core.exceptions import MissingColumnError

if TYPE_CHECKING:
    from collections.abc import Iterable

    import polars as pl


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class PlotConfig:
    """Common configuration for all plot types."""

    width: int = 900
    height: int = 500
    template: str = "plotly_white"
    font_family: str = "Arial, Helvetica, sans-serif"
    title_font_size: int = 16
    axis_font_size: int = 12
    legend_font_size: int = 11
    margin: dict[str, int] = field(
        default_factory=lambda: {"l": 60, "r": 40, "t": 60, "b": 60}
    )
    show_legend: bool = True

    def to_layout_dict(
        self,
        title: str | None = None,
        include_legend: bool = False,
    ) -> dict[str, Any]:
        """Convert config to Plotly layout dictionary.

        Args:
            title: Optional title text to include in layout.
            include_legend: Whether to include legend settings (default False
                to avoid conflicts when plots set legend explicitly).
        """
        layout: dict[str, Any] = {
            "template": self.template,
            "font": {
                "family": self.font_family,
                "size": self.axis_font_size,
            },
            "margin": self.margin,
        }
        if title:
            layout["title"] = {"text": title, "font": {"size": self.title_font_size}}
        if include_legend:
            layout["legend"] = {"font": {"size": self.legend_font_size}}
            layout["showlegend"] = self.show_legend
        return layout


# =============================================================================
# Base Plot Class
# =============================================================================

class BasePlot(ABC):
    """Abstract base class for all plot generators."""

    def __init__(self, config: PlotConfig | None = None) -> None:
        """
        Initialize plot generator.

        Args:
            config: Plot configuration (dimensions, styling)
        """
        self.config = config or PlotConfig()

    @abstractmethod
    def create_figure(self) -> go.Figure:
        """Create and return the Plotly figure."""
        ...

    def to_html_div(self, include_plotlyjs: bool = False) -> str:
        """
        Export plot as HTML div for embedding in reports.

        Args:
            include_plotlyjs: Whether to include Plotly.js library

        Returns:
            HTML string containing the plot div
        """
        fig = self.create_figure()
        return fig.to_html(
            full_html=False,
            include_plotlyjs="cdn" if include_plotlyjs else False,
            div_id=self._get_div_id(),
        )

    def to_html(self, include_plotlyjs: bool = True) -> str:
        """
        Export plot as standalone HTML file content.

        Args:
            include_plotlyjs: Whether to embed Plotly.js library

        Returns:
            Complete HTML document string
        """
        fig = self.create_figure()
        return fig.to_html(
            full_html=True,
            include_plotlyjs=True if include_plotlyjs else "cdn",
        )

    def to_json(self) -> str:
        """Export plot as JSON for data interchange."""
        fig = self.create_figure()
        return fig.to_json()

    def save(self, path: str, **kwargs: Any) -> None:
        """
        Save plot to file.

        Args:
            path: Output file path (.html, .png, .json)
            **kwargs: Additional arguments passed to write method
        """
        fig = self.create_figure()

        if path.endswith(".html"):
            fig.write_html(path, include_plotlyjs=True, **kwargs)
        elif path.endswith(".json"):
            fig.write_json(path, **kwargs)
        elif path.endswith((".png", ".jpg", ".jpeg", ".svg", ".pdf")):
            fig.write_image(path, **kwargs)
        else:
            msg = f"Unsupported file format: {path}"
            raise ValueError(msg)

    def _get_div_id(self) -> str:
        """Generate unique div ID for the plot."""
        return f"plot-{self.__class__.__name__.lower()}"

    def _apply_config(self, fig: go.Figure) -> go.Figure:
        """Apply common configuration to figure."""
        fig.update_layout(
            **self.config.to_layout_dict(),
            width=self.config.width,
            height=self.config.height,
        )
        return fig


# =============================================================================
# Utility Functions
# =============================================================================

def require_columns(df: pl.DataFrame, columns: Iterable[str]) -> None:
    """Raise MissingColumnError for the first column absent from ``df``."""
    for column in columns:
        if column not in df.columns:
            raise MissingColumnError(column, df.columns)
