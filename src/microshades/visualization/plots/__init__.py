"""
Plot components for microshades.

Provides the stacked composition chart, the standalone two-tier legend,
contribution summaries and palette swatches.
"""

from microshades.visualization.plots.base import (
    BasePlot,
    PlotConfig,
    require_columns,
)
from microshades.visualization.plots.contributions import (
    ContributionPlot,
    plot_contributions,
)
from microshades.visualization.plots.legend import GroupLegend, build_legend
from microshades.visualization.plots.palettes import PaletteSwatchPlot
from microshades.visualization.plots.stacked_bar import (
    StackedAbundanceChart,
    plot_stacked_abundance,
)

__all__ = [
    "BasePlot",
    "ContributionPlot",
    "GroupLegend",
    "PaletteSwatchPlot",
    "PlotConfig",
    "StackedAbundanceChart",
    "build_legend",
    "plot_contributions",
    "plot_stacked_abundance",
    "require_columns",
]
