"""
Data Generation Module
"""
from .facets import FACET_DOMAINS, FILTER_FACETS, Facet, Segment
from .generators import FactRecord, MarketDataGenerator, SeededRandom, to_frame
from .export import to_csv_text, write_csv

__all__ = [
    "FACET_DOMAINS",
    "FILTER_FACETS",
    "Facet",
    "Segment",
    "FactRecord",
    "MarketDataGenerator",
    "SeededRandom",
    "to_frame",
    "to_csv_text",
    "write_csv",
]
