"""
Chart Payloads

Shapes aggregation results into the records chart components consume: flat
rows, the category field, and either a value field or a list of series
fields present in every row.
"""

from typing import Any, Dict, List, Optional

import polars as pl
from pydantic import BaseModel, Field

from caremarket.data.facets import Facet
from .crosstab import CrossTab, NAME_KEY, segment_cross_by_year, segment_cross_tab
from .filters import FilterSelection, MarketEvaluation, describe_selection, value_label
from .pivot import (
    YEAR_KEY,
    compute_kpis,
    distinct_values,
    grouped_by_facet,
    percent_of_total_by_region_country,
)


class ChartData(BaseModel):
    """Input of a chart component"""
    title: str
    data: List[Dict[str, Any]] = Field(default_factory=list)
    category_key: str
    series_keys: List[str] = Field(default_factory=list)
    value_key: Optional[str] = None
    x_label: str
    y_label: str

    @property
    def is_empty(self) -> bool:
        return not self.data


class KpiSummary(BaseModel):
    """KPI tiles"""
    total: Optional[float]
    yoy_growth_pct: Optional[float]
    total_label: str
    yoy_label: str
    total_subtitle: str


class DashboardViews(BaseModel):
    """Everything the market analysis page renders for one selection"""
    has_data: bool
    kpis: KpiSummary
    by_type: ChartData
    by_country: ChartData
    region_share: ChartData
    cross_segment: ChartData
    cross_segment_by_year: ChartData
    active_filters: Dict[str, str]


def _measure_name(mode: MarketEvaluation) -> str:
    return "Market Volume" if mode == MarketEvaluation.BY_VOLUME else "Market Value"


def grouped_chart(
    df: pl.DataFrame,
    facet: Facet,
    mode: MarketEvaluation,
    title: str,
) -> ChartData:
    rows = grouped_by_facet(df, facet, mode)
    return ChartData(
        title=title,
        data=rows,
        category_key=YEAR_KEY,
        series_keys=[str(v) for v in distinct_values(df, facet)] if rows else [],
        x_label="Year",
        y_label=value_label(mode),
    )


def region_share_chart(df: pl.DataFrame, mode: MarketEvaluation) -> ChartData:
    """Country stacks per region: raw volume under By Volume, shares otherwise"""
    if mode == MarketEvaluation.BY_VOLUME:
        value_key, y_label = "value", "Volume (Units)"
    else:
        value_key, y_label = "percentage", "Percentage (%)"
    return ChartData(
        title="Regional Distribution",
        data=percent_of_total_by_region_country(df, mode),
        category_key="region",
        value_key=value_key,
        x_label="Region",
        y_label=y_label,
    )


def cross_chart(
    crosstab: CrossTab,
    category_key: str,
    title: str,
    x_label: str,
    mode: MarketEvaluation,
) -> ChartData:
    return ChartData(
        title=title,
        data=crosstab.rows,
        category_key=category_key,
        series_keys=crosstab.series_keys,
        x_label=x_label,
        y_label=value_label(mode),
    )


def build_views(filtered: pl.DataFrame, selection: FilterSelection) -> DashboardViews:
    """Compute every chart of the page from the filtered table"""
    mode = selection.evaluation
    measure = _measure_name(mode)
    kpis = compute_kpis(filtered, mode)

    primary = selection.primary.segment.value.replace("By ", "") if selection.primary else ""
    secondary = selection.secondary.segment.value.replace("By ", "") if selection.secondary else ""
    if primary and secondary:
        cross_title = f"{measure} by {primary} and {secondary}"
    else:
        cross_title = f"{measure} Cross Segment Analysis"

    return DashboardViews(
        has_data=not filtered.is_empty(),
        kpis=KpiSummary(
            total=kpis.total,
            yoy_growth_pct=kpis.yoy_growth_pct,
            total_label=kpis.total_label,
            yoy_label=kpis.yoy_label,
            total_subtitle=f"Total {'Volume' if mode == MarketEvaluation.BY_VOLUME else 'Market Value'}",
        ),
        by_type=grouped_chart(filtered, Facet.TYPE, mode, f"{measure} by Care Type"),
        by_country=grouped_chart(filtered, Facet.COUNTRY, mode, f"{measure} by Country"),
        region_share=region_share_chart(filtered, mode),
        cross_segment=cross_chart(
            segment_cross_tab(filtered, selection),
            NAME_KEY,
            cross_title,
            primary,
            mode,
        ),
        cross_segment_by_year=cross_chart(
            segment_cross_by_year(filtered, selection),
            YEAR_KEY,
            f"{cross_title} by Year",
            "Year",
            mode,
        ),
        active_filters=describe_selection(selection),
    )
