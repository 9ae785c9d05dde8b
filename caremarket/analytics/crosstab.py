"""
Cross-Segment Analysis

Two-facet pivots: any facet against any other facet, with series keys taken
from the data so they follow whatever the current filters leave in place.
"""

from typing import Any, Dict, List, NamedTuple, Optional

import polars as pl
import structlog

from caremarket.data.facets import Facet, Segment
from .filters import FilterSelection, MarketEvaluation, filter_segment
from .pivot import YEAR_KEY, distinct_values, sum_by

logger = structlog.get_logger(__name__)

NAME_KEY = "name"
COMBINATION_SEPARATOR = " × "


class CrossTab(NamedTuple):
    """Chart rows plus the ordered series keys present in every row"""
    rows: List[Dict[str, Any]]
    series_keys: List[str]

    @property
    def is_empty(self) -> bool:
        return not self.rows


def _empty() -> CrossTab:
    return CrossTab(rows=[], series_keys=[])


def cross_tabulate(
    df: pl.DataFrame,
    primary: Optional[Facet],
    secondary: Optional[Facet],
    mode: MarketEvaluation,
) -> CrossTab:
    """
    Pivot ``primary`` values (rows) against ``secondary`` values (series).

    Each row is ``{"name": <primary value>, <secondary value>: total, ...}``.
    Only values present in ``df`` produce rows or series. A missing facet,
    identical facets or empty input yield an empty result.
    """
    if primary is None or secondary is None or primary == secondary:
        return _empty()

    primary_values = distinct_values(df, primary)
    secondary_values = distinct_values(df, secondary)
    if not primary_values or not secondary_values:
        return _empty()

    totals = sum_by(df, [primary, secondary], mode)
    series_keys = [str(v) for v in secondary_values]

    rows = []
    for primary_value in primary_values:
        row: Dict[str, Any] = {NAME_KEY: str(primary_value)}
        for secondary_value, key in zip(secondary_values, series_keys):
            row[key] = totals.get((primary_value, secondary_value), 0)
        rows.append(row)

    logger.debug(
        "Cross tabulation computed",
        primary=primary.value,
        secondary=secondary.value,
        rows=len(rows),
        series=len(series_keys),
    )
    return CrossTab(rows=rows, series_keys=series_keys)


def cross_segment_by_year(
    df: pl.DataFrame,
    primary: Optional[Facet],
    secondary: Optional[Facet],
    mode: MarketEvaluation,
) -> CrossTab:
    """
    Year rows with one series per primary × secondary combination.

    Keys read ``"<primary value> × <secondary value>"``, primary-major.
    """
    if primary is None or secondary is None or primary == secondary:
        return _empty()

    years = distinct_values(df, Facet.YEAR)
    primary_values = distinct_values(df, primary)
    secondary_values = distinct_values(df, secondary)
    if not years or not primary_values or not secondary_values:
        return _empty()

    totals = sum_by(df, [Facet.YEAR, primary, secondary], mode)
    combinations = [
        (p, s, f"{p}{COMBINATION_SEPARATOR}{s}")
        for p in primary_values
        for s in secondary_values
    ]

    rows = []
    for year in years:
        row: Dict[str, Any] = {YEAR_KEY: str(year)}
        for p, s, key in combinations:
            row[key] = totals.get((year, p, s), 0)
        rows.append(row)

    return CrossTab(rows=rows, series_keys=[key for _, _, key in combinations])


def _segment_frame(df: pl.DataFrame, selection: FilterSelection) -> Optional[pl.DataFrame]:
    primary, secondary = selection.primary, selection.secondary
    if primary is None or secondary is None or primary.segment == secondary.segment:
        return None
    return filter_segment(filter_segment(df, primary), secondary)


def segment_cross_tab(df: pl.DataFrame, selection: FilterSelection) -> CrossTab:
    """Cross tabulation of the selection's primary and secondary segments"""
    frame = _segment_frame(df, selection)
    if frame is None:
        return _empty()
    return cross_tabulate(
        frame,
        selection.primary.facet,
        selection.secondary.facet,
        selection.evaluation,
    )


def segment_cross_by_year(df: pl.DataFrame, selection: FilterSelection) -> CrossTab:
    frame = _segment_frame(df, selection)
    if frame is None:
        return _empty()
    return cross_segment_by_year(
        frame,
        selection.primary.facet,
        selection.secondary.facet,
        selection.evaluation,
    )


# =============================================================================
# SEGMENT OPTIONS
# =============================================================================

def available_segments(mode: MarketEvaluation) -> List[Segment]:
    """Segments offered under an evaluation mode"""
    if mode == MarketEvaluation.BY_VOLUME:
        return [s for s in Segment if not s.value_only]
    return list(Segment)


def available_primary_segments(selection: FilterSelection) -> List[Segment]:
    secondary = selection.secondary.segment if selection.secondary else None
    return [s for s in available_segments(selection.evaluation) if s != secondary]


def available_secondary_segments(selection: FilterSelection) -> List[Segment]:
    primary = selection.primary.segment if selection.primary else None
    return [s for s in available_segments(selection.evaluation) if s != primary]
