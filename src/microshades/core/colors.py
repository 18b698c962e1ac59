"""
Color assignment for two-level (group / sub-group) taxonomic data.

Each selected top-rank group receives one base palette. Within a group,
sub-groups are ranked by their total proportion across samples and the most
abundant one takes the darkest shade. Every non-selected group is lumped into
a single gray "Other" bucket.

Two aligned tables are produced:

* ``mdf`` - the prepared table with ``top_group``, ``top_subgroup``,
  ``group`` and ``hex`` columns attached to every row
* ``cdf`` - the color lookup table, one row per (top_group, top_subgroup)

Example:
    >>> mdf = prep_mdf(raw, "Genus")
    >>> mdf, cdf = create_color_dfs(mdf, ["Firmicutes", "Bacteroidota"])
    >>> mdf, cdf = extend_group(mdf, cdf, "Phylum", "Genus", "Firmicutes",
    ...                         "micro_blue", "micro_purple", n_add=3)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import polars as pl

from microshades.core.constants import (
    CDF_COLUMNS,
    DEFAULT_ABUNDANCE_COLUMN,
    DEFAULT_GROUP_RANK,
    DEFAULT_SUBGROUP_RANK,
    GROUP_COLUMN,
    HEX_COLUMN,
    OTHER_LABEL,
    OTHER_SHADE_INDEX,
    RANK_ORDER_STRIDE,
    TOP_GROUP_COLUMN,
    TOP_SUBGROUP_COLUMN,
    UNASSIGNED_LABEL,
    group_label,
    other_subgroup_label,
)
from microshades.core.exceptions import (
    InvalidInputError,
    MissingColumnError,
    PaletteExhaustionError,
)
from microshades.core.palettes import (
    get_palette,
    group_palettes,
    interpolate_shades,
    other_palette,
)
from microshades.models.config import GroupingConfig

logger = logging.getLogger(__name__)

CDF_SCHEMA: dict[str, pl.DataType] = {
    TOP_GROUP_COLUMN: pl.Utf8,
    TOP_SUBGROUP_COLUMN: pl.Utf8,
    GROUP_COLUMN: pl.Utf8,
    "palette": pl.Utf8,
    "shade_index": pl.Int64,
    HEX_COLUMN: pl.Utf8,
    "subgroup_rank": pl.Int64,
    "rank_order": pl.Int64,
}

ANNOTATION_COLUMNS: tuple[str, ...] = (
    TOP_GROUP_COLUMN,
    TOP_SUBGROUP_COLUMN,
    GROUP_COLUMN,
    HEX_COLUMN,
)

_ROW = "__row"
_GROUP_KEY = "__group_key"
_SUBGROUP_KEY = "__subgroup_key"


@dataclass(frozen=True)
class _GroupShading:
    """Shade assignment for the sub-groups of one top-rank group."""

    relabel: dict[str, str]
    rows: list[dict]


# =============================================================================
# Helpers
# =============================================================================

def _require_columns(df: pl.DataFrame, columns: Sequence[str]) -> None:
    for column in columns:
        if column not in df.columns:
            raise MissingColumnError(column, df.columns)


def _with_keys(mdf: pl.DataFrame, grouping: GroupingConfig) -> pl.DataFrame:
    return mdf.with_row_index(_ROW).with_columns(
        pl.col(grouping.group_field).cast(pl.Utf8).alias(_GROUP_KEY),
        pl.col(grouping.subgroup_field)
        .cast(pl.Utf8)
        .fill_null(UNASSIGNED_LABEL)
        .alias(_SUBGROUP_KEY),
    )


def _ranked_subgroups(rows: pl.DataFrame, abundance: str) -> list[str]:
    """Distinct sub-groups ordered by total abundance, ties broken by name."""
    totals = (
        rows.group_by(_SUBGROUP_KEY)
        .agg(pl.col(abundance).sum().alias("total"))
        .sort(["total", _SUBGROUP_KEY], descending=[True, False])
    )
    return totals[_SUBGROUP_KEY].to_list()


def _rank_order(group_position: int, subgroup_rank: int) -> int:
    return group_position * RANK_ORDER_STRIDE + subgroup_rank


def _shade_group(
    group: str,
    group_position: int,
    ranked: list[str],
    palette_name: str,
    shades: Sequence[str],
) -> _GroupShading:
    """
    Assign shades to ranked sub-groups, darkest first.

    Up to ``len(shades)`` sub-groups keep their own shade. When there are
    more, the top ``len(shades) - 1`` keep their names and the remainder is
    collapsed into an "Other <group>" bucket taking the lightest shade.
    """
    n_shades = len(shades)
    if len(ranked) <= n_shades:
        named, collapsed = ranked, []
    else:
        named, collapsed = ranked[: n_shades - 1], ranked[n_shades - 1 :]

    relabel: dict[str, str] = {}
    rows: list[dict] = []
    for rank, subgroup in enumerate(named, start=1):
        relabel[subgroup] = subgroup
        rows.append({
            TOP_GROUP_COLUMN: group,
            TOP_SUBGROUP_COLUMN: subgroup,
            GROUP_COLUMN: group_label(group, subgroup),
            "palette": palette_name,
            "shade_index": n_shades - rank,
            HEX_COLUMN: shades[n_shades - rank],
            "subgroup_rank": rank,
            "rank_order": _rank_order(group_position, rank),
        })

    if collapsed:
        bucket = other_subgroup_label(group)
        rank = len(named) + 1
        relabel.update(dict.fromkeys(collapsed, bucket))
        rows.append({
            TOP_GROUP_COLUMN: group,
            TOP_SUBGROUP_COLUMN: bucket,
            GROUP_COLUMN: group_label(group, bucket),
            "palette": palette_name,
            "shade_index": 0,
            HEX_COLUMN: shades[0],
            "subgroup_rank": rank,
            "rank_order": _rank_order(group_position, rank),
        })
        logger.debug(
            "Collapsed %d sub-groups of %s into '%s'", len(collapsed), group, bucket
        )

    return _GroupShading(relabel=relabel, rows=rows)


def _relabel_frame(group: str, relabel: dict[str, str]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            _GROUP_KEY: [group] * len(relabel),
            _SUBGROUP_KEY: list(relabel),
            TOP_SUBGROUP_COLUMN: list(relabel.values()),
        },
        schema={_GROUP_KEY: pl.Utf8, _SUBGROUP_KEY: pl.Utf8, TOP_SUBGROUP_COLUMN: pl.Utf8},
    )


def _attach_colors(keyed: pl.DataFrame, cdf: pl.DataFrame) -> pl.DataFrame:
    """Join group labels and hex colors by (top_group, top_subgroup)."""
    lookup = cdf.select(TOP_GROUP_COLUMN, TOP_SUBGROUP_COLUMN, GROUP_COLUMN, HEX_COLUMN)
    return (
        keyed.join(lookup, on=[TOP_GROUP_COLUMN, TOP_SUBGROUP_COLUMN], how="left")
        .sort(_ROW)
    )


def _validate_selection(selected_groups: Sequence[str], available: int) -> list[str]:
    selected = list(selected_groups)
    if not selected:
        raise InvalidInputError(
            message="No groups selected for color assignment",
            suggestion="Pass at least one top-rank group name, e.g. ['Firmicutes'].",
        )
    duplicates = sorted({g for g in selected if selected.count(g) > 1})
    if duplicates:
        raise InvalidInputError(
            message=f"Selected groups contain duplicates: {', '.join(duplicates)}",
            suggestion="List each top-rank group once.",
        )
    if OTHER_LABEL in selected:
        raise InvalidInputError(
            message=f"'{OTHER_LABEL}' is reserved for non-selected groups",
            suggestion=f"Rename the '{OTHER_LABEL}' group in the input table before selecting it.",
        )
    if len(selected) > available:
        raise PaletteExhaustionError(requested=len(selected), available=available)
    return selected


# =============================================================================
# Public API
# =============================================================================

def create_color_dfs(
    mdf: pl.DataFrame,
    selected_groups: Sequence[str],
    group_level: str = DEFAULT_GROUP_RANK,
    subgroup_level: str = DEFAULT_SUBGROUP_RANK,
    cvd: bool = False,
    abundance_column: str = DEFAULT_ABUNDANCE_COLUMN,
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """
    Assign palette shades to every (group, sub-group) pair.

    Args:
        mdf: Prepared table (see ``prep_mdf``)
        selected_groups: Ordered top-rank groups to color; the i-th group
            always receives the i-th base palette
        group_level: Column holding the top-rank group (e.g. "Phylum")
        subgroup_level: Column holding the sub-rank group (e.g. "Genus")
        cvd: Use the color-vision-deficiency safe palette family
        abundance_column: Column holding proportions

    Returns:
        Tuple of (annotated table, color lookup table)

    Raises:
        MissingColumnError: If a grouping or abundance column is absent
        InvalidInputError: If the selection is empty, has duplicates or
            uses the reserved "Other" label, or if a data column is named
            like an annotation column
        PaletteExhaustionError: If more groups are selected than palettes
    """
    grouping = GroupingConfig(group_field=group_level, subgroup_field=subgroup_level)
    grouping.validate_against(mdf)
    _require_columns(mdf, [abundance_column])

    palettes = group_palettes(cvd)
    selected = _validate_selection(selected_groups, len(palettes))

    # A previous annotation carries all four columns; anything less is data
    clashing = [c for c in ANNOTATION_COLUMNS if c in mdf.columns]
    if clashing and len(clashing) != len(ANNOTATION_COLUMNS):
        raise InvalidInputError(
            message=f"Column names reserved for color annotation: {', '.join(clashing)}",
            suggestion="Rename these columns before assigning colors.",
        )
    base = mdf.drop(clashing)
    keyed = _with_keys(base, grouping)
    present = set(keyed[_GROUP_KEY].drop_nulls().unique().to_list())

    cdf_rows: list[dict] = []
    relabels: list[pl.DataFrame] = []
    for position, (group, palette) in enumerate(zip(selected, palettes, strict=False)):
        if group not in present:
            logger.warning("Selected group '%s' not found in column %s", group, group_level)
            continue
        ranked = _ranked_subgroups(keyed.filter(pl.col(_GROUP_KEY) == group), abundance_column)
        shading = _shade_group(group, position, ranked, palette.name, palette.shades)
        cdf_rows.extend(shading.rows)
        relabels.append(_relabel_frame(group, shading.relabel))

    is_selected = pl.col(_GROUP_KEY).is_in(selected).fill_null(False)
    if keyed.filter(~is_selected).height:
        gray = other_palette(cvd)
        cdf_rows.append({
            TOP_GROUP_COLUMN: OTHER_LABEL,
            TOP_SUBGROUP_COLUMN: OTHER_LABEL,
            GROUP_COLUMN: group_label(OTHER_LABEL, OTHER_LABEL),
            "palette": gray.name,
            "shade_index": OTHER_SHADE_INDEX,
            HEX_COLUMN: gray.shades[OTHER_SHADE_INDEX],
            "subgroup_rank": 1,
            "rank_order": _rank_order(len(palettes), 1),
        })

    cdf = pl.DataFrame(cdf_rows, schema=CDF_SCHEMA).sort("rank_order")

    relabel = (
        pl.concat(relabels)
        if relabels
        else _relabel_frame("", {})
    )
    keyed = (
        keyed.join(relabel, on=[_GROUP_KEY, _SUBGROUP_KEY], how="left")
        .with_columns(
            pl.when(is_selected)
            .then(pl.col(_GROUP_KEY))
            .otherwise(pl.lit(OTHER_LABEL))
            .alias(TOP_GROUP_COLUMN),
            pl.when(is_selected)
            .then(pl.col(TOP_SUBGROUP_COLUMN))
            .otherwise(pl.lit(OTHER_LABEL))
            .alias(TOP_SUBGROUP_COLUMN),
        )
    )
    annotated = _attach_colors(keyed, cdf).select(*base.columns, *ANNOTATION_COLUMNS)

    logger.debug(
        "Assigned %d colors across %d selected groups (cvd=%s)",
        cdf.height,
        len(selected),
        cvd,
    )
    return annotated, cdf


def extend_group(
    mdf: pl.DataFrame,
    cdf: pl.DataFrame,
    group_level: str,
    subgroup_level: str,
    group_name: str,
    existing_palette: str,
    new_palette: str,
    n_add: int = 5,
    abundance_column: str = DEFAULT_ABUNDANCE_COLUMN,
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """
    Re-shade one group with a larger palette.

    The group's current number of colors is grown by ``n_add`` using shades
    interpolated from ``new_palette``. The new count must cover every
    distinct sub-group of the group, so each one gets its own color and the
    "Other <group>" bucket disappears. All other rows of ``cdf`` are returned
    unchanged.

    Args:
        mdf: Annotated table from ``create_color_dfs``
        cdf: Color lookup table from ``create_color_dfs``
        group_level: Column holding the top-rank group
        subgroup_level: Column holding the sub-rank group
        group_name: Top-rank group to extend
        existing_palette: Palette currently assigned to ``group_name``
        new_palette: Registered palette to interpolate the new shades from
        n_add: Number of additional shades
        abundance_column: Column holding proportions

    Returns:
        Tuple of (annotated table, color lookup table)

    Raises:
        InvalidInputError: If the group is not colored, uses a different
            palette than ``existing_palette`` or ``new_palette`` is unknown
        PaletteExhaustionError: If the new shade count is smaller than the
            number of distinct sub-groups in ``group_name``
    """
    grouping = GroupingConfig(group_field=group_level, subgroup_field=subgroup_level)
    grouping.validate_against(mdf)
    _require_columns(mdf, [abundance_column, *ANNOTATION_COLUMNS])
    _require_columns(cdf, CDF_COLUMNS)

    current = cdf.filter(pl.col(TOP_GROUP_COLUMN) == group_name)
    if group_name == OTHER_LABEL or current.is_empty():
        raise InvalidInputError(
            message=f"Group '{group_name}' has no color assignment to extend",
            suggestion=(
                "Extend one of the selected groups: "
                + ", ".join(
                    g for g in cdf[TOP_GROUP_COLUMN].unique(maintain_order=True).to_list()
                    if g != OTHER_LABEL
                )
            ),
        )

    assigned = current["palette"][0]
    if assigned != existing_palette:
        raise InvalidInputError(
            message=f"Group '{group_name}' uses palette '{assigned}', not '{existing_palette}'",
            suggestion=f"Pass existing_palette='{assigned}'.",
        )

    keyed = _with_keys(mdf, grouping)
    in_group = pl.col(TOP_GROUP_COLUMN) == group_name
    ranked = _ranked_subgroups(keyed.filter(in_group), abundance_column)

    n_shades = current.height + n_add
    if n_shades < len(ranked) or n_shades < 1:
        raise PaletteExhaustionError(
            requested=len(ranked), available=n_shades, what="sub-groups"
        )
    if n_shades >= RANK_ORDER_STRIDE:
        raise PaletteExhaustionError(
            requested=n_shades, available=RANK_ORDER_STRIDE - 1, what="shades"
        )
    shades = interpolate_shades(get_palette(new_palette), n_shades)

    position = (current["rank_order"][0] - 1) // RANK_ORDER_STRIDE
    shading = _shade_group(group_name, position, ranked, new_palette, shades)

    new_cdf = pl.concat([
        cdf.filter(pl.col(TOP_GROUP_COLUMN) != group_name),
        pl.DataFrame(shading.rows, schema=CDF_SCHEMA),
    ]).sort("rank_order")

    relabeled = (
        keyed.filter(in_group)
        .drop(TOP_SUBGROUP_COLUMN, GROUP_COLUMN, HEX_COLUMN)
        .join(_relabel_frame(group_name, shading.relabel), on=[_GROUP_KEY, _SUBGROUP_KEY], how="left")
    )
    relabeled = _attach_colors(relabeled, new_cdf).select(keyed.columns)
    annotated = (
        pl.concat([keyed.filter(~in_group), relabeled])
        .sort(_ROW)
        .select(mdf.columns)
    )

    logger.debug(
        "Extended %s from %d to %d colors using %s",
        group_name,
        current.height,
        len(shading.rows),
        new_palette,
    )
    return annotated, new_cdf


def match_cdf(mdf: pl.DataFrame, cdf: pl.DataFrame) -> pl.DataFrame:
    """Restrict a color lookup table to the groups present in ``mdf``."""
    _require_columns(mdf, [GROUP_COLUMN])
    _require_columns(cdf, [GROUP_COLUMN, "rank_order"])
    present = mdf[GROUP_COLUMN].unique().to_list()
    return cdf.filter(pl.col(GROUP_COLUMN).is_in(present)).sort("rank_order")
