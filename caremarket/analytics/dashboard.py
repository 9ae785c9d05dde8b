"""
Market Analysis Dashboard Session

Owns the generated fact table and the current filter selection, applies the
selection policy on every change and recomputes the page's views.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import polars as pl
import structlog

from caremarket.config import Settings, get_settings
from caremarket.data.export import write_frame_csv
from caremarket.data.facets import Facet, Segment
from caremarket.data.generators import MarketDataGenerator
from .crosstab import available_primary_segments, available_secondary_segments
from .filters import FilterSelection, apply_filters
from .pivot import distinct_values, facet_options
from .policy import SegmentRole, SelectionPolicy
from .views import DashboardViews, build_views

logger = structlog.get_logger(__name__)


class MarketDashboard:
    """
    Stateful front of the pivot engine.

    The table is read-only; the selection is replaced on every transition.

    Example:
        dashboard = MarketDashboard()
        dashboard.update_filter("country", ["U.K.", "Germany"])
        dashboard.set_primary_segment("By Type")
        views = dashboard.views()
    """

    def __init__(
        self,
        table: Optional[pl.DataFrame] = None,
        policy: Optional[SelectionPolicy] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        if table is None:
            generator = MarketDataGenerator(
                seed=self.settings.dataset.seed,
                record_id_start=self.settings.dataset.record_id_start,
            )
            table = generator.generate_frame()

        self.table = table
        self.policy = policy or SelectionPolicy(self.settings.dashboard)
        self.options: Dict[Facet, List[Any]] = facet_options(table)
        self._selection = self.policy.default_selection(self.options)
        self._filtered: Optional[pl.DataFrame] = None

        logger.info("Dashboard initialized", rows=table.height)

    @property
    def selection(self) -> FilterSelection:
        return self._selection

    def _set_selection(self, selection: FilterSelection) -> FilterSelection:
        if selection != self._selection:
            self._selection = selection
            self._filtered = None
        return self._selection

    @property
    def filtered(self) -> pl.DataFrame:
        """Fact table restricted by the main filters"""
        if self._filtered is None:
            self._filtered = apply_filters(self.table, self._selection)
            logger.debug("Filters applied", rows=self._filtered.height)
        return self._filtered

    def _segment_options(self, segment: Optional[Segment]) -> List[Any]:
        if segment is None:
            return []
        return distinct_values(self.filtered, segment.facet)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def update_filter(self, facet: Any, values: Any) -> FilterSelection:
        return self._set_selection(
            self.policy.update_facet(self._selection, facet, values, self.options)
        )

    def set_evaluation(self, mode: Any) -> FilterSelection:
        return self._set_selection(self.policy.set_evaluation(self._selection, mode))

    def set_primary_segment(self, segment: Any) -> FilterSelection:
        resolved = Segment.parse(segment)
        return self._set_selection(
            self.policy.set_primary_segment(
                self._selection, segment, self._segment_options(resolved)
            )
        )

    def set_secondary_segment(self, segment: Any) -> FilterSelection:
        resolved = Segment.parse(segment)
        return self._set_selection(
            self.policy.set_secondary_segment(
                self._selection, segment, self._segment_options(resolved)
            )
        )

    def update_segment_values(self, role: Any, values: Iterable[Any]) -> FilterSelection:
        choice = (
            self._selection.primary
            if role in (SegmentRole.PRIMARY, SegmentRole.PRIMARY.value)
            else self._selection.secondary
        )
        available = self._segment_options(choice.segment if choice else None)
        return self._set_selection(
            self.policy.update_segment_values(self._selection, role, values, available)
        )

    # -------------------------------------------------------------------------
    # Outputs
    # -------------------------------------------------------------------------

    def primary_segment_options(self) -> List[Segment]:
        return available_primary_segments(self._selection)

    def secondary_segment_options(self) -> List[Segment]:
        return available_secondary_segments(self._selection)

    def views(self) -> DashboardViews:
        return build_views(self.filtered, self._selection)

    def download_csv(self, path: Union[str, Path], filtered: bool = False) -> Path:
        """Write the full (or currently filtered) table as CSV"""
        frame = self.filtered if filtered else self.table
        logger.info("Downloading fact table", rows=frame.height, filtered=filtered)
        return write_frame_csv(frame, path)
