"""
Pivot Engine

Aggregates a (filtered) fact table into the flat, uniformly keyed records the
chart components draw. Every function is pure and returns empty results for
empty input.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import polars as pl
import structlog

from caremarket.data.facets import Facet
from caremarket.data.generators import round_half_away
from .filters import MarketEvaluation, measure_expr

logger = structlog.get_logger(__name__)

MEASURE = "__measure"
YEAR_KEY = "year"


def distinct_values(df: pl.DataFrame, facet: Facet) -> List[Any]:
    """Sorted distinct values of a facet present in the frame"""
    if df.is_empty():
        return []
    return df.get_column(facet.column).drop_nulls().unique().sort().to_list()


def facet_options(df: pl.DataFrame) -> Dict[Facet, List[Any]]:
    """Filter dropdown options for every facet"""
    return {facet: distinct_values(df, facet) for facet in Facet}


def sum_by(
    df: pl.DataFrame,
    facets: Sequence[Facet],
    mode: MarketEvaluation,
) -> Dict[Tuple[Any, ...], Any]:
    """
    Sum the measure per combination of facet values.

    Returns:
        Mapping of facet-value tuples (in ``facets`` order) to totals
    """
    columns = list(dict.fromkeys(f.column for f in facets))
    grouped = df.group_by(columns).agg(measure_expr(mode).sum().alias(MEASURE))

    totals: Dict[Tuple[Any, ...], Any] = {}
    for row in grouped.iter_rows(named=True):
        totals[tuple(row[f.column] for f in facets)] = row[MEASURE]
    return totals


def grouped_by_facet(
    df: pl.DataFrame,
    facet: Facet,
    mode: MarketEvaluation,
) -> List[Dict[str, Any]]:
    """
    Year-by-facet grouped series.

    One row per year present (ascending), ``{"year": "2021", <value>: total}``
    with a column for every facet value present (ascending). Combinations
    without records are 0.
    """
    years = distinct_values(df, Facet.YEAR)
    values = distinct_values(df, facet)
    if not years or not values:
        return []

    totals = sum_by(df, [Facet.YEAR, facet], mode)

    rows = []
    for year in years:
        row: Dict[str, Any] = {YEAR_KEY: str(year)}
        for value in values:
            row[str(value)] = totals.get((year, value), 0)
        rows.append(row)

    logger.debug("Grouped series computed", facet=facet.value, rows=len(rows), series=len(values))
    return rows


def percent_of_total_by_region_country(
    df: pl.DataFrame,
    mode: MarketEvaluation,
) -> List[Dict[str, Any]]:
    """
    Share of each country within its region.

    Rows ``{region, country, value, percentage}`` with percentage rounded to
    one decimal; all percentages are 0 when the region total is 0.
    """
    if df.is_empty():
        return []

    totals = df.group_by(["region", "country"]).agg(measure_expr(mode).sum().alias(MEASURE))

    by_region: Dict[str, Dict[str, Any]] = {}
    for row in totals.iter_rows(named=True):
        by_region.setdefault(row["region"], {})[row["country"]] = row[MEASURE]

    result = []
    for region in sorted(by_region):
        countries = by_region[region]
        region_total = sum(countries.values())
        for country in sorted(countries):
            value = countries[country] or 0
            percentage = (value / region_total) * 100 if region_total > 0 else 0
            result.append({
                "region": region,
                "country": country,
                "value": value,
                "percentage": round_half_away(percentage, 1),
            })
    return result


# =============================================================================
# KPIs
# =============================================================================

@dataclass
class MarketKpis:
    """Headline figures of the filtered market"""
    total: Optional[float]
    yoy_growth_pct: Optional[float]
    total_label: str
    yoy_label: str
    latest_year: Optional[int] = None
    previous_year: Optional[int] = None


def format_with_commas(value: float, decimals: int = 1) -> str:
    return f"{value:,.{decimals}f}"


def compute_kpis(df: pl.DataFrame, mode: MarketEvaluation) -> MarketKpis:
    """
    Total measure and year-over-year growth between the two latest years.

    Growth is 0 when fewer than two years are present or the previous year's
    total is not positive.
    """
    if df.is_empty():
        return MarketKpis(total=None, yoy_growth_pct=None, total_label="N/A", yoy_label="N/A")

    total = df.select(measure_expr(mode).sum()).item() or 0

    years = distinct_values(df, Facet.YEAR)
    growth = 0.0
    latest_year = years[-1] if years else None
    previous_year = None
    if len(years) >= 2:
        previous_year = years[-2]
        by_year = sum_by(df, [Facet.YEAR], mode)
        latest_value = by_year.get((latest_year,), 0)
        previous_value = by_year.get((previous_year,), 0)
        if previous_value > 0:
            growth = ((latest_value - previous_value) / previous_value) * 100

    if mode == MarketEvaluation.BY_VOLUME:
        total_label = f"{format_with_commas(total / 1000, 1)}K Units"
    else:
        total_label = f"{format_with_commas(total, 1)}M"
    yoy_label = f"{'+' if growth > 0 else ''}{format_with_commas(growth, 1)}%"

    return MarketKpis(
        total=total,
        yoy_growth_pct=growth,
        total_label=total_label,
        yoy_label=yoy_label,
        latest_year=latest_year,
        previous_year=previous_year,
    )
