"""
Unit Tests - Cross-Segment Analysis
"""
from caremarket.analytics.crosstab import (
    available_primary_segments,
    available_secondary_segments,
    available_segments,
    cross_segment_by_year,
    cross_tabulate,
    segment_cross_by_year,
    segment_cross_tab,
)
from caremarket.analytics.filters import FilterSelection, MarketEvaluation, SegmentChoice
from caremarket.data.facets import Facet, Segment
from caremarket.data.generators import to_frame


VALUE = MarketEvaluation.BY_VALUE
VOLUME = MarketEvaluation.BY_VOLUME


class TestCrossTabulate:
    """Tests for cross_tabulate"""

    def test_country_by_gender(self, sample_table):
        result = cross_tabulate(sample_table, Facet.COUNTRY, Facet.GENDER, VOLUME)

        assert result.series_keys == ["Female", "Male"]
        assert result.rows == [
            {"name": "France", "Female": 0, "Male": 5000},
            {"name": "Germany", "Female": 3000, "Male": 4000},
            {"name": "U.K.", "Female": 8000, "Male": 1000},
        ]

    def test_year_primary_is_stringified(self, sample_table):
        result = cross_tabulate(sample_table, Facet.YEAR, Facet.TYPE, VALUE)

        assert [r["name"] for r in result.rows] == ["2021", "2022"]
        assert result.rows[0]["Assisted Living"] == 8.0

    def test_same_facet_is_empty(self, sample_table):
        result = cross_tabulate(sample_table, Facet.GENDER, Facet.GENDER, VALUE)

        assert result.is_empty
        assert result.series_keys == []

    def test_missing_facet_is_empty(self, sample_table):
        assert cross_tabulate(sample_table, None, Facet.GENDER, VALUE).is_empty
        assert cross_tabulate(sample_table, Facet.TYPE, None, VALUE).is_empty

    def test_empty_input(self):
        assert cross_tabulate(to_frame([]), Facet.TYPE, Facet.GENDER, VALUE).is_empty

    def test_conserves_total(self, fact_table):
        """Test the cells sum to the table total"""
        subset = fact_table.head(5000)

        result = cross_tabulate(subset, Facet.TYPE, Facet.APPLICATION, VOLUME)
        cells = sum(row[key] for row in result.rows for key in result.series_keys)

        assert cells == subset["volume_units"].sum()
        assert len(result.series_keys) == len(set(subset["application"].to_list()))


class TestCrossSegmentByYear:
    """Tests for cross_segment_by_year"""

    def test_combination_keys(self, sample_table):
        result = cross_segment_by_year(sample_table, Facet.TYPE, Facet.GENDER, VALUE)

        assert result.series_keys == [
            "Assisted Living × Female",
            "Assisted Living × Male",
            "Nursing Homes × Female",
            "Nursing Homes × Male",
        ]
        assert [list(r.values()) for r in result.rows] == [
            ["2021", 6.0, 2.0, 4.0, 0],
            ["2022", 12.0, 10.0, 0, 8.0],
        ]

    def test_same_facet_is_empty(self, sample_table):
        assert cross_segment_by_year(sample_table, Facet.TYPE, Facet.TYPE, VALUE).is_empty


class TestSegmentCrossTab:
    """Tests for selection-driven cross tabs"""

    def test_sub_filters_applied(self, sample_table):
        selection = FilterSelection(
            evaluation=VOLUME,
            primary=SegmentChoice(Segment.TYPE, ("Assisted Living",)),
            secondary=SegmentChoice(Segment.GENDER, ("Female", "Male")),
        )

        result = segment_cross_tab(sample_table, selection)

        assert result.rows == [{"name": "Assisted Living", "Female": 9000, "Male": 6000}]

    def test_series_follow_secondary_sub_filter(self, sample_table):
        selection = FilterSelection(
            primary=SegmentChoice(Segment.TYPE, ("Assisted Living", "Nursing Homes")),
            secondary=SegmentChoice(Segment.GENDER, ("Male",)),
        )

        result = segment_cross_by_year(sample_table, selection)

        assert result.series_keys == ["Assisted Living × Male", "Nursing Homes × Male"]

    def test_missing_secondary(self, sample_table):
        selection = FilterSelection(primary=SegmentChoice(Segment.TYPE, ("Assisted Living",)))

        assert segment_cross_tab(sample_table, selection).is_empty
        assert segment_cross_by_year(sample_table, selection).is_empty


class TestSegmentOptions:
    """Tests for offered segments"""

    def test_value_mode_offers_all(self):
        assert available_segments(VALUE) == list(Segment)

    def test_volume_mode_drops_gender_and_age(self):
        segments = available_segments(VOLUME)

        assert Segment.GENDER not in segments
        assert Segment.AGE_GROUP not in segments
        assert len(segments) == 4

    def test_primary_and_secondary_exclude_each_other(self):
        selection = FilterSelection(
            primary=SegmentChoice(Segment.TYPE),
            secondary=SegmentChoice(Segment.GENDER),
        )

        assert Segment.GENDER not in available_primary_segments(selection)
        assert Segment.TYPE not in available_secondary_segments(selection)
        assert Segment.TYPE in available_primary_segments(selection)
