"""
Filter Selection Policy

Default selection and the transitions the dashboard applies to it. Every
transition returns a new ``FilterSelection``; the previous one is untouched.

Rules:
- year and country are never left empty
- switching to By Volume drops the gender and age group segments
- primary and secondary segments are always different facets
- choosing a segment resets its sub-filter to computed defaults
"""

from dataclasses import replace
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import structlog

from caremarket.config import get_settings
from caremarket.config.settings import DashboardSettings
from caremarket.data.facets import Facet, FILTER_FACETS, Segment
from .crosstab import available_segments
from .filters import (
    FilterSelection,
    MarketEvaluation,
    SegmentChoice,
    normalize_values,
)

logger = structlog.get_logger(__name__)

# Facets whose selection may never be emptied by an update
REQUIRED_FACETS = (Facet.YEAR, Facet.COUNTRY)

# Facets that start with every value selected
SELECT_ALL_FACETS = (Facet.GENDER, Facet.AGE_GROUP)


class SegmentRole(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class SelectionPolicy:
    """
    Builds and transitions filter selections.

    Example:
        policy = SelectionPolicy()
        selection = policy.default_selection(facet_options(df))
        selection = policy.update_facet(selection, Facet.YEAR, [], options)
    """

    def __init__(self, settings: Optional[DashboardSettings] = None):
        settings = settings or get_settings().dashboard
        self.default_years = tuple(settings.default_years)
        self.current_year = settings.current_year
        self.min_multi_select = settings.min_multi_select
        self.default_evaluation = MarketEvaluation(settings.default_evaluation)

    # -------------------------------------------------------------------------
    # Defaults
    # -------------------------------------------------------------------------

    def _default_years(self, years: Sequence[int]) -> Tuple[int, ...]:
        if self.default_years and all(y in years for y in self.default_years):
            return self.default_years
        if len(years) >= 2:
            return tuple(years[-2:])
        return tuple(years)

    def _first_values(self, values: Sequence[Any]) -> Tuple[Any, ...]:
        return tuple(values[: self.min_multi_select])

    def default_selection(self, options: Mapping[Facet, Sequence[Any]]) -> FilterSelection:
        """
        Initial selection for a freshly loaded table.

        ``options`` holds the sorted values available per facet.
        """
        facets = {}
        for facet in FILTER_FACETS:
            available = list(options.get(facet, ()))
            if facet == Facet.YEAR:
                facets[facet] = self._default_years(available)
            elif facet in SELECT_ALL_FACETS:
                facets[facet] = tuple(available)
            else:
                facets[facet] = self._first_values(available)

        selection = FilterSelection(facets=facets, evaluation=self.default_evaluation)
        logger.info("Default selection built", **{f.value: len(v) for f, v in facets.items()})
        return selection

    def _required_default(self, facet: Facet, available: Sequence[Any]) -> Tuple[Any, ...]:
        if not available:
            return ()
        if facet == Facet.YEAR:
            if self.current_year in available:
                return (self.current_year,)
            return (available[-1],)
        return (available[0],)

    def enforce_required(
        self,
        selection: FilterSelection,
        options: Mapping[Facet, Sequence[Any]],
    ) -> FilterSelection:
        """Reinstate a default for any required facet left empty"""
        for facet in REQUIRED_FACETS:
            if not selection.values_for(facet):
                available = sorted(options.get(facet, facet.domain))
                fallback = self._required_default(facet, available)
                if fallback:
                    logger.debug("Reinstating required facet", facet=facet.value, values=list(fallback))
                    selection = selection.with_facet(facet, fallback)
        return selection

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def update_facet(
        self,
        selection: FilterSelection,
        facet: Any,
        values: Any,
        options: Mapping[Facet, Sequence[Any]],
    ) -> FilterSelection:
        """
        Set a facet's permitted values.

        Unknown facets are ignored, unknown values dropped. Year and country
        fall back to a default instead of becoming empty.
        """
        resolved = Facet.parse(facet)
        if resolved is None:
            logger.debug("Ignoring update of unknown facet", facet=str(facet))
            return selection

        available = list(options.get(resolved, resolved.domain))
        normalized = [v for v in normalize_values(resolved, values) if v in available]

        updated = selection.with_facet(resolved, normalized)
        return self.enforce_required(updated, options)

    def set_evaluation(self, selection: FilterSelection, mode: Any) -> FilterSelection:
        """Switch evaluation mode, dropping segments the mode does not support"""
        resolved = MarketEvaluation.parse(mode, selection.evaluation)
        updated = selection.with_evaluation(resolved)

        if resolved == MarketEvaluation.BY_VOLUME:
            primary, secondary = updated.primary, updated.secondary
            if primary is not None and primary.segment.value_only:
                primary = None
            if secondary is not None and secondary.segment.value_only:
                secondary = None
            updated = replace(updated, primary=primary, secondary=secondary)

        return updated

    def _segment_defaults(self, segment: Segment, available: Sequence[Any]) -> Tuple[Any, ...]:
        if segment.selects_all:
            return tuple(available)
        return self._first_values(available)

    def set_primary_segment(
        self,
        selection: FilterSelection,
        segment: Any,
        available: Sequence[Any],
    ) -> FilterSelection:
        """
        Choose the primary cross-segment facet.

        ``available`` holds the segment facet's values in the filtered data.
        """
        if segment is None:
            return replace(selection, primary=None)

        resolved = Segment.parse(segment)
        if resolved is None or resolved not in available_segments(selection.evaluation):
            logger.debug("Ignoring unavailable primary segment", segment=str(segment))
            return selection

        secondary = selection.secondary
        if secondary is not None and secondary.segment == resolved:
            secondary = None

        choice = SegmentChoice(segment=resolved, values=self._segment_defaults(resolved, available))
        return replace(selection, primary=choice, secondary=secondary)

    def set_secondary_segment(
        self,
        selection: FilterSelection,
        segment: Any,
        available: Sequence[Any],
    ) -> FilterSelection:
        """Choose the secondary cross-segment facet; requires a distinct primary"""
        if segment is None:
            return replace(selection, secondary=None)

        resolved = Segment.parse(segment)
        if (
            resolved is None
            or selection.primary is None
            or selection.primary.segment == resolved
            or resolved not in available_segments(selection.evaluation)
        ):
            logger.debug("Ignoring unavailable secondary segment", segment=str(segment))
            return selection

        choice = SegmentChoice(segment=resolved, values=self._segment_defaults(resolved, available))
        return replace(selection, secondary=choice)

    def update_segment_values(
        self,
        selection: FilterSelection,
        role: Any,
        values: Iterable[Any],
        available: Sequence[Any],
    ) -> FilterSelection:
        """
        Set the sub-filter values of the primary or secondary segment.

        The sub-filter never becomes empty. Segments with more than
        ``min_multi_select`` values available keep at least that many.
        """
        try:
            resolved = SegmentRole(role)
        except ValueError:
            return selection

        choice = selection.primary if resolved == SegmentRole.PRIMARY else selection.secondary
        if choice is None:
            return selection

        available = list(available)
        chosen: List[Any] = [v for v in normalize_values(choice.facet, values) if v in available]

        if not choice.segment.selects_all and len(available) > self.min_multi_select:
            if len(chosen) < self.min_multi_select:
                missing = [v for v in available if v not in chosen]
                chosen.extend(missing[: self.min_multi_select - len(chosen)])
        elif not chosen and available:
            chosen = [available[0]]

        updated_choice = replace(choice, values=tuple(chosen))
        if resolved == SegmentRole.PRIMARY:
            return replace(selection, primary=updated_choice)
        return replace(selection, secondary=updated_choice)
