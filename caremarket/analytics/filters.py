"""
Filter Model

Filter selection value type, the measure seam shared by every aggregation and
the facet filter applied to the fact table.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

import polars as pl
import structlog

from caremarket.data.facets import FILTER_FACETS, Facet, Segment

logger = structlog.get_logger(__name__)


class MarketEvaluation(str, Enum):
    """Which measure feeds the aggregations"""
    BY_VALUE = "By Value"
    BY_VOLUME = "By Volume"

    @classmethod
    def parse(cls, label: Any, default: "MarketEvaluation" = None) -> "MarketEvaluation":
        try:
            return cls(label)
        except ValueError:
            return default or cls.BY_VALUE


VALUE_COLUMN = "market_value_usd"
VOLUME_COLUMN = "volume_units"

# market_value_usd is stored in thousands of dollars
VALUE_SCALE = 1000


def measure_expr(mode: MarketEvaluation) -> pl.Expr:
    """Columnar measure for the given evaluation mode"""
    if mode == MarketEvaluation.BY_VOLUME:
        return pl.col(VOLUME_COLUMN).fill_null(0)
    return pl.col(VALUE_COLUMN).fill_null(0) / VALUE_SCALE


def measure_of(record: Any, mode: MarketEvaluation) -> float:
    """Measure of a single record (named tuple, object or mapping)"""
    column = VOLUME_COLUMN if mode == MarketEvaluation.BY_VOLUME else VALUE_COLUMN
    if isinstance(record, Mapping):
        raw = record.get(column)
    else:
        raw = getattr(record, column, None)
    raw = raw or 0
    if mode == MarketEvaluation.BY_VOLUME:
        return raw
    return raw / VALUE_SCALE


def value_label(mode: MarketEvaluation) -> str:
    if mode == MarketEvaluation.BY_VOLUME:
        return "Market Volume (Units)"
    return "Market Value (US$ Million)"


def normalize_values(facet: Facet, values: Any) -> Tuple[Any, ...]:
    """
    Coerce raw filter values to the facet's value type.

    Years become ints, everything else strings. Unparseable or unknown values
    are dropped and duplicates removed, keeping first-seen order.
    """
    if values is None:
        return ()
    if isinstance(values, (str, int)):
        values = [values]

    known = set(facet.domain)
    out = []
    for v in values:
        if v is None:
            continue
        if facet == Facet.YEAR:
            try:
                v = int(v)
            except (TypeError, ValueError):
                continue
        else:
            v = str(v)
        if v in known and v not in out:
            out.append(v)
    return tuple(out)


@dataclass(frozen=True)
class SegmentChoice:
    """A chosen cross-segment facet plus its sub-filter values"""
    segment: Segment
    values: Tuple[Any, ...] = ()

    @property
    def facet(self) -> Facet:
        return self.segment.facet


@dataclass(frozen=True)
class FilterSelection:
    """
    Immutable filter state of the market analysis page.

    ``facets`` maps a facet to its permitted values; a missing or empty entry
    means every value passes.
    """
    facets: Mapping[Facet, Tuple[Any, ...]] = field(default_factory=dict)
    evaluation: MarketEvaluation = MarketEvaluation.BY_VALUE
    primary: Optional[SegmentChoice] = None
    secondary: Optional[SegmentChoice] = None

    def values_for(self, facet: Facet) -> Tuple[Any, ...]:
        return tuple(self.facets.get(facet, ()))

    def active_facets(self) -> Iterator[Tuple[Facet, Tuple[Any, ...]]]:
        """Facets restricted to a non-empty value set"""
        for facet, values in self.facets.items():
            if values:
                yield facet, tuple(values)

    def with_facet(self, facet: Facet, values: Iterable[Any]) -> "FilterSelection":
        facets = dict(self.facets)
        facets[facet] = tuple(values)
        return replace(self, facets=facets)

    def with_evaluation(self, mode: MarketEvaluation) -> "FilterSelection":
        return replace(self, evaluation=mode)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "FilterSelection":
        """
        Build a selection from loosely typed input (e.g. a UI payload).

        Unknown facet names and unknown values are ignored.
        """
        facets: Dict[Facet, Tuple[Any, ...]] = {}
        evaluation = MarketEvaluation.BY_VALUE
        for key, values in (raw or {}).items():
            if key in ("marketEvaluation", "market_evaluation", "evaluation"):
                evaluation = MarketEvaluation.parse(values)
                continue
            facet = Facet.parse(key)
            if facet is None:
                logger.debug("Ignoring unknown filter facet", facet=key)
                continue
            facets[facet] = normalize_values(facet, values)
        return cls(facets=facets, evaluation=evaluation)


def facet_predicate(facet: Facet, values: Iterable[Any]) -> pl.Expr:
    return pl.col(facet.column).is_in(list(values))


def apply_filters(df: pl.DataFrame, selection: FilterSelection) -> pl.DataFrame:
    """
    Keep rows matching every restricted facet.

    Conditions are ANDed across facets and ORed across a facet's values.
    Facets without a selection pass all rows; row order is preserved.
    """
    combined = None
    for facet, values in selection.active_facets():
        condition = facet_predicate(facet, values)
        combined = condition if combined is None else combined & condition

    if combined is None:
        return df
    return df.filter(combined)


def filter_segment(df: pl.DataFrame, choice: Optional[SegmentChoice]) -> pl.DataFrame:
    """Apply a segment's sub-filter; no choice or no values passes everything"""
    if choice is None or not choice.values:
        return df
    return df.filter(facet_predicate(choice.facet, choice.values))


def describe_selection(selection: FilterSelection) -> Dict[str, str]:
    """Human-readable labels of the active filters"""
    labels: Dict[str, str] = {}
    for facet in FILTER_FACETS:
        values = selection.values_for(facet)
        if values:
            labels[facet.value] = ", ".join(str(v) for v in values)
        else:
            labels[facet.value] = "All Years" if facet == Facet.YEAR else "All"
    labels["market_evaluation"] = selection.evaluation.value
    return labels
