"""
Visualization module for microshades.

Provides Plotly-based charts for shaded taxonomic composition data.
"""

from microshades.visualization.plots import (
    ContributionPlot,
    GroupLegend,
    PaletteSwatchPlot,
    PlotConfig,
    StackedAbundanceChart,
    build_legend,
    plot_contributions,
    plot_stacked_abundance,
)

__all__ = [
    "ContributionPlot",
    "GroupLegend",
    "PaletteSwatchPlot",
    "PlotConfig",
    "StackedAbundanceChart",
    "build_legend",
    "plot_contributions",
    "plot_stacked_abundance",
]
