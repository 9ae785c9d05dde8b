"""
Unit Tests - Market Dashboard
"""
from collections import defaultdict

import pytest

from caremarket.analytics.dashboard import MarketDashboard
from caremarket.analytics.filters import FilterSelection, MarketEvaluation, apply_filters, measure_of
from caremarket.analytics.pivot import grouped_by_facet, percent_of_total_by_region_country
from caremarket.analytics.policy import SelectionPolicy
from caremarket.data.export import CSV_HEADER
from caremarket.data.facets import Facet, Segment


@pytest.fixture
def dashboard(fact_table, test_settings) -> MarketDashboard:
    return MarketDashboard(table=fact_table, settings=test_settings)


class TestEndToEnd:
    """Generate, filter and pivot the full table"""

    def test_value_by_type_for_two_years_and_countries(self, fact_table, fact_records):
        """Test pivot cells against direct summation over the records"""
        selection = FilterSelection(facets={
            Facet.YEAR: (2021, 2022),
            Facet.COUNTRY: ("U.K.", "Germany"),
        })

        rows = grouped_by_facet(apply_filters(fact_table, selection), Facet.TYPE, MarketEvaluation.BY_VALUE)

        expected = defaultdict(float)
        for record in fact_records:
            if record.year in (2021, 2022) and record.country in ("U.K.", "Germany"):
                expected[(str(record.year), record.type)] += measure_of(record, MarketEvaluation.BY_VALUE)

        assert [r["year"] for r in rows] == ["2021", "2022"]
        for row in rows:
            assert len(row) == 1 + len(Facet.TYPE.domain)
            for care_type in Facet.TYPE.domain:
                assert row[care_type] == pytest.approx(expected[(row["year"], care_type)])

    def test_percentages_close_to_100(self, fact_table):
        filtered = apply_filters(fact_table, FilterSelection(facets={Facet.YEAR: (2030,)}))

        rows = percent_of_total_by_region_country(filtered, MarketEvaluation.BY_VOLUME)

        assert len(rows) == 7
        assert sum(r["percentage"] for r in rows) == pytest.approx(100.0, abs=0.1 * len(rows))


class TestMarketDashboard:
    """Tests for the dashboard session"""

    def test_default_filtered_rows(self, dashboard):
        """Test default filters keep 2 years, 2 countries and 2 values of three facets"""
        assert dashboard.filtered.height == 2 * 2 * 7 * 2 * 2 * 2 * 2 * 3
        assert dashboard.selection.values_for(Facet.COUNTRY) == ("France", "Germany")

    def test_views_shapes(self, dashboard):
        views = dashboard.views()

        assert views.has_data
        assert [r["year"] for r in views.by_type.data] == ["2021", "2022"]
        assert views.by_country.series_keys == ["France", "Germany"]
        assert views.region_share.value_key == "percentage"
        assert views.cross_segment.is_empty
        assert views.kpis.total_label.endswith("M")
        assert views.active_filters["year"] == "2021, 2022"

    def test_required_facets_never_empty(self, dashboard):
        dashboard.update_filter("year", [])
        dashboard.update_filter("country", [])

        assert dashboard.selection.values_for(Facet.YEAR) == (2025,)
        assert dashboard.selection.values_for(Facet.COUNTRY) == ("France",)
        assert set(dashboard.filtered["year"].to_list()) == {2025}

    def test_filter_change_invalidates_cache(self, dashboard):
        before = dashboard.filtered.height

        dashboard.update_filter("gender", ["Male"])

        assert dashboard.filtered.height == before // 2

    def test_cross_segment_flow(self, dashboard):
        dashboard.set_primary_segment("By Type")
        dashboard.set_secondary_segment("By Gender")

        views = dashboard.views()

        primary_values = dashboard.selection.primary.values
        assert len(primary_values) == 2
        assert [r["name"] for r in views.cross_segment.data] == sorted(primary_values)
        assert views.cross_segment.series_keys == ["Female", "Male"]
        assert views.cross_segment.title == "Market Value by Type and Gender"
        assert len(views.cross_segment_by_year.series_keys) == 4

    def test_volume_mode_drops_gender_segment(self, dashboard):
        dashboard.set_primary_segment("By Type")
        dashboard.set_secondary_segment("By Gender")

        dashboard.set_evaluation("By Volume")

        assert dashboard.selection.secondary is None
        assert Segment.GENDER not in dashboard.secondary_segment_options()
        assert dashboard.views().kpis.total_label.endswith("K Units")

    def test_region_chart_follows_evaluation(self, dashboard):
        """Test the region chart plots shares by value and raw units by volume"""
        by_value = dashboard.views().region_share

        dashboard.set_evaluation("By Volume")
        by_volume = dashboard.views().region_share

        assert (by_value.value_key, by_value.y_label) == ("percentage", "Percentage (%)")
        assert (by_volume.value_key, by_volume.y_label) == ("value", "Volume (Units)")
        assert sum(r["value"] for r in by_volume.data) == dashboard.filtered["volume_units"].sum()

    def test_segment_values_topped_up(self, dashboard):
        dashboard.set_primary_segment("By Type")

        dashboard.update_segment_values("primary", ["Nursing Homes"])

        assert dashboard.selection.primary.values == ("Nursing Homes", "Active Adult Communities")


class TestSampleDashboard:
    """Tests on the six-record sample table"""

    @pytest.fixture
    def sample_dashboard(self, sample_table, dashboard_settings) -> MarketDashboard:
        return MarketDashboard(table=sample_table, policy=SelectionPolicy(dashboard_settings))

    def test_options_and_defaults(self, sample_dashboard):
        assert sample_dashboard.options[Facet.COUNTRY] == ["France", "Germany", "U.K."]
        assert sample_dashboard.filtered["record_id"].to_list() == [3, 4, 5]

    def test_no_data_state(self, sample_dashboard):
        """Test filters leaving nothing produce an explicit empty state"""
        sample_dashboard.update_filter("country", ["France"])
        sample_dashboard.update_filter("type", ["Nursing Homes"])

        views = sample_dashboard.views()

        assert not views.has_data
        assert views.by_type.is_empty
        assert views.region_share.is_empty
        assert views.kpis.total_label == "N/A"

    def test_download_full_and_filtered(self, sample_dashboard, tmp_path):
        full = sample_dashboard.download_csv(tmp_path / "full.csv")
        filtered = sample_dashboard.download_csv(tmp_path / "filtered.csv", filtered=True)

        full_lines = full.read_text(encoding="utf-8").split("\n")
        filtered_lines = filtered.read_text(encoding="utf-8").split("\n")
        assert full_lines[0] == filtered_lines[0] == ",".join(CSV_HEADER)
        assert len(full_lines) == 7
        assert [line.split(",")[0] for line in filtered_lines[1:]] == ["3", "4", "5"]
