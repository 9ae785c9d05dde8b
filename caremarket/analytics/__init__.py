"""
Market Analytics Module
"""
from .filters import FilterSelection, MarketEvaluation, SegmentChoice, apply_filters, measure_of
from .pivot import compute_kpis, grouped_by_facet, percent_of_total_by_region_country
from .crosstab import CrossTab, cross_tabulate
from .policy import SegmentRole, SelectionPolicy
from .dashboard import MarketDashboard

__all__ = [
    "FilterSelection",
    "MarketEvaluation",
    "SegmentChoice",
    "apply_filters",
    "measure_of",
    "compute_kpis",
    "grouped_by_facet",
    "percent_of_total_by_region_country",
    "CrossTab",
    "cross_tabulate",
    "SegmentRole",
    "SelectionPolicy",
    "MarketDashboard",
]
