"""
Test Suite Configuration
"""
from typing import List

import pytest
import polars as pl

from caremarket.config import Settings
from caremarket.config.settings import DashboardSettings
from caremarket.data.facets import (
    AGE_GROUPS,
    APPLICATIONS,
    CARE_OPTIONS,
    REGION,
    SERVICE_OFFERINGS,
    Facet,
)
from caremarket.data.generators import FactRecord, MarketDataGenerator, to_frame


def _make_record(
    record_id: int,
    year: int,
    country: str,
    care_type: str,
    gender: str,
    volume_units: int,
    market_value_usd: float,
    service_offering: str = SERVICE_OFFERINGS[0],
    care_option: str = CARE_OPTIONS[0],
    application: str = APPLICATIONS[0],
    age_group: str = AGE_GROUPS[0],
) -> FactRecord:
    """Build a fact record with fixed filler measures"""
    return FactRecord(
        record_id=record_id,
        year=year,
        region=REGION,
        country=country,
        type=care_type,
        service_offering=service_offering,
        care_option=care_option,
        application=application,
        gender=gender,
        age_group=age_group,
        volume_units=volume_units,
        price=10.0,
        revenue=10.0 * volume_units,
        market_value_usd=market_value_usd,
        market_share_pct=5.0,
        cagr=1.5,
        yoy_growth=2.5,
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(app_env="testing")


@pytest.fixture
def dashboard_settings() -> DashboardSettings:
    return DashboardSettings()


@pytest.fixture(scope="session")
def fact_records() -> List[FactRecord]:
    """The full generated fact table"""
    return MarketDataGenerator().generate()


@pytest.fixture(scope="session")
def fact_table(fact_records) -> pl.DataFrame:
    return to_frame(fact_records)


@pytest.fixture
def sample_records() -> List[FactRecord]:
    """
    Six hand-made records; market values in thousands are 2, 4, ..., 12.
    """
    return [
        _make_record(1, 2021, "U.K.", "Assisted Living", "Male", 1000, 2000.0),
        _make_record(2, 2021, "U.K.", "Nursing Homes", "Female", 2000, 4000.0),
        _make_record(3, 2021, "Germany", "Assisted Living", "Female", 3000, 6000.0),
        _make_record(4, 2022, "Germany", "Nursing Homes", "Male", 4000, 8000.0),
        _make_record(5, 2022, "France", "Assisted Living", "Male", 5000, 10000.0),
        _make_record(6, 2022, "U.K.", "Assisted Living", "Female", 6000, 12000.0),
    ]


@pytest.fixture
def sample_table(sample_records) -> pl.DataFrame:
    return to_frame(sample_records)


@pytest.fixture
def domain_options():
    """Sorted option lists of the complete facet domains"""
    return {facet: sorted(facet.domain) for facet in Facet}


@pytest.fixture
def make_record():
    """Factory for single fact records"""
    return _make_record
