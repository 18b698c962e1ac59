"""
Palette registry.

Six hand-curated base palettes and six color-vision-deficiency (CVD) safe
counterparts, five shades each, ordered from lightest to darkest. The gray
palette of each family is reserved for the "Other" bucket; the remaining five
are handed out to selected top-rank groups in a fixed order.
"""

from __future__ import annotations

import logging
from types import MappingProxyType

import numpy as np
from plotly.colors import find_intermediate_color, hex_to_rgb

from microshades.core.exceptions import InvalidInputError, PaletteExhaustionError
from microshades.models.palette import Palette

logger = logging.getLogger(__name__)


# =============================================================================
# Base Palettes
# =============================================================================

_BASE_SHADES: dict[str, tuple[str, ...]] = {
    "micro_gray": ("#D9D9D9", "#BDBDBD", "#969696", "#737373", "#525252"),
    "micro_brown": ("#D8C7BE", "#CAA995", "#B78560", "#9E5C00", "#7D3200"),
    "micro_green": ("#C7E9C0", "#A1D99B", "#74C476", "#41AB5D", "#238B45"),
    "micro_orange": ("#FEEDDE", "#FDD0A2", "#FDAE6B", "#FD8D3C", "#E6550D"),
    "micro_blue": ("#EFF3FF", "#C6DBEF", "#9ECAE1", "#6BAED6", "#3182BD"),
    "micro_purple": ("#DADAEB", "#BCBDDC", "#9E9AC8", "#807DBA", "#6A51A3"),
}

# =============================================================================
# CVD-safe Palettes
# =============================================================================

_CVD_SHADES: dict[str, tuple[str, ...]] = {
    "micro_cvd_gray": ("#F5F5F5", "#D6D6D6", "#B7B7B7", "#8B8B8B", "#616161"),
    "micro_cvd_green": ("#DDFFA0", "#BDEC6F", "#97CE2F", "#6D9F06", "#4E7705"),
    "micro_cvd_orange": ("#FFD5AF", "#FCB076", "#F09163", "#C17754", "#9D654C"),
    "micro_cvd_blue": ("#E7F4FF", "#BCE1FF", "#7DCCFF", "#56B4E9", "#098BD9"),
    "micro_cvd_turquoise": ("#A3E4D7", "#48C9B0", "#43BA8F", "#009E73", "#148F77"),
    "micro_cvd_purple": ("#EFB6D6", "#E794C1", "#CC79A7", "#A1527F", "#7D3560"),
}

PALETTES: MappingProxyType[str, Palette] = MappingProxyType(
    {
        **{name: Palette(name=name, shades=s, cvd=False) for name, s in _BASE_SHADES.items()},
        **{name: Palette(name=name, shades=s, cvd=True) for name, s in _CVD_SHADES.items()},
    }
)

# Order in which palettes are handed to selected groups
GROUP_PALETTE_ORDER: tuple[str, ...] = (
    "micro_blue",
    "micro_orange",
    "micro_green",
    "micro_purple",
    "micro_brown",
)
CVD_GROUP_PALETTE_ORDER: tuple[str, ...] = (
    "micro_cvd_blue",
    "micro_cvd_orange",
    "micro_cvd_green",
    "micro_cvd_turquoise",
    "micro_cvd_purple",
)

OTHER_PALETTE = "micro_gray"
CVD_OTHER_PALETTE = "micro_cvd_gray"

SHADES_PER_PALETTE = 5


# =============================================================================
# Lookup
# =============================================================================

def get_palette(name: str) -> Palette:
    """Return a registered palette by name."""
    try:
        return PALETTES[name]
    except KeyError:
        raise InvalidInputError(
            message=f"Unknown palette '{name}'",
            suggestion=f"Available palettes: {', '.join(PALETTES)}",
        ) from None


def list_palettes(cvd: bool | None = None) -> list[str]:
    """Names of registered palettes, optionally restricted to one family."""
    return [name for name, p in PALETTES.items() if cvd is None or p.cvd == cvd]


def group_palettes(cvd: bool = False) -> tuple[Palette, ...]:
    """Palettes assigned to selected groups, in assignment order."""
    order = CVD_GROUP_PALETTE_ORDER if cvd else GROUP_PALETTE_ORDER
    return tuple(PALETTES[name] for name in order)


def other_palette(cvd: bool = False) -> Palette:
    """Gray palette reserved for the "Other" bucket."""
    return PALETTES[CVD_OTHER_PALETTE if cvd else OTHER_PALETTE]


# =============================================================================
# Interpolation
# =============================================================================

def _rgb_to_hex(rgb: tuple[float, float, float]) -> str:
    return "#{:02X}{:02X}{:02X}".format(*(int(round(c)) for c in rgb))


def interpolate_shades(palette: Palette | str, n: int) -> tuple[str, ...]:
    """
    Resample a palette to ``n`` shades, lightest to darkest.

    The first and last shades are kept; intermediate shades are linear RGB
    interpolations along the palette's own shade sequence. Requesting the
    palette's own length returns it unchanged.

    Args:
        palette: Palette or registered palette name
        n: Number of shades to produce

    Returns:
        Tuple of ``n`` hex colors

    Raises:
        PaletteExhaustionError: If ``n`` is smaller than one
    """
    if isinstance(palette, str):
        palette = get_palette(palette)
    if n < 1:
        raise PaletteExhaustionError(requested=n, available=len(palette), what="shades")
    if n == len(palette):
        return palette.shades
    if len(palette) == 1 or n == 1:
        return (palette.darkest,) * n

    anchors = [hex_to_rgb(s) for s in palette.shades]
    positions = np.linspace(0.0, len(anchors) - 1, n)
    shades = []
    for pos in positions:
        low = min(int(np.floor(pos)), len(anchors) - 2)
        fraction = float(pos - low)
        rgb = find_intermediate_color(
            anchors[low], anchors[low + 1], fraction, colortype="tuple"
        )
        shades.append(_rgb_to_hex(rgb))

    logger.debug("Interpolated %s from %d to %d shades", palette.name, len(palette), n)
    return tuple(shades)
