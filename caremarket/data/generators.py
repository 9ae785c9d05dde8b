"""
Synthetic Market Data Generator

Generates the elderly-care market fact table: one record per combination of
year, country, type, service offering, care option, application, gender and
age group, with seeded pseudo-random measures.

The measures come from a fixed linear-congruential recurrence so that every
run produces byte-identical data.
"""

import math
from typing import Iterator, List, NamedTuple, Optional

import polars as pl
import structlog

from .facets import (
    AGE_GROUPS,
    APPLICATIONS,
    CARE_OPTIONS,
    COUNTRIES,
    GENDERS,
    REGION,
    SERVICE_OFFERINGS,
    TYPES,
    YEARS,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

DEFAULT_SEED = 42
DEFAULT_RECORD_ID_START = 100000

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280

FACT_SCHEMA = [
    ("record_id", pl.Int64),
    ("year", pl.Int64),
    ("region", pl.Utf8),
    ("country", pl.Utf8),
    ("type", pl.Utf8),
    ("service_offering", pl.Utf8),
    ("care_option", pl.Utf8),
    ("application", pl.Utf8),
    ("gender", pl.Utf8),
    ("age_group", pl.Utf8),
    ("volume_units", pl.Int64),
    ("price", pl.Float64),
    ("revenue", pl.Float64),
    ("market_value_usd", pl.Float64),
    ("market_share_pct", pl.Float64),
    ("cagr", pl.Float64),
    ("yoy_growth", pl.Float64),
]


def round_half_away(value: float, digits: int = 2) -> float:
    """Round to ``digits`` decimals, ties away from zero"""
    factor = 10 ** digits
    rounded = math.floor(abs(value) * factor + 0.5) / factor
    if rounded == 0:
        return 0.0
    return math.copysign(rounded, value)


class FactRecord(NamedTuple):
    """One row of the market fact table"""
    record_id: int
    year: int
    region: str
    country: str
    type: str
    service_offering: str
    care_option: str
    application: str
    gender: str
    age_group: str
    volume_units: int
    price: float
    revenue: float
    market_value_usd: float
    market_share_pct: float
    cagr: float
    yoy_growth: float


# =============================================================================
# GENERATORS
# =============================================================================

class SeededRandom:
    """Linear-congruential generator returning floats in [0, 1)"""

    def __init__(self, seed: int = DEFAULT_SEED):
        self.state = seed

    def next(self) -> float:
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS


class MarketDataGenerator:
    """
    Deterministic generator for the elderly-care market fact table.

    Each call to ``generate`` starts from a fresh ``SeededRandom`` so repeated
    calls are independent and identical.

    Example:
        generator = MarketDataGenerator()
        records = generator.generate()
        df = generator.generate_frame()
    """

    def __init__(
        self,
        seed: int = DEFAULT_SEED,
        record_id_start: int = DEFAULT_RECORD_ID_START,
    ):
        self.seed = seed
        self.record_id_start = record_id_start

    @property
    def expected_rows(self) -> int:
        """Size of the full cartesian product"""
        return (
            len(YEARS) * len(COUNTRIES) * len(TYPES) * len(SERVICE_OFFERINGS)
            * len(CARE_OPTIONS) * len(APPLICATIONS) * len(GENDERS) * len(AGE_GROUPS)
        )

    def iter_records(self, rng: Optional[SeededRandom] = None) -> Iterator[FactRecord]:
        """Yield fact records in generation order (year outermost, age group innermost)"""
        rng = rng or SeededRandom(self.seed)
        record_id = self.record_id_start

        for year in YEARS:
            for country in COUNTRIES:
                for care_type in TYPES:
                    for service_offering in SERVICE_OFFERINGS:
                        for care_option in CARE_OPTIONS:
                            for application in APPLICATIONS:
                                for gender in GENDERS:
                                    for age_group in AGE_GROUPS:
                                        # Draw order is part of the dataset contract
                                        volume_units = math.floor((1 + rng.next() * 199) * 1000)
                                        price = 2 + rng.next() * 148
                                        revenue = price * volume_units
                                        market_value = revenue * (0.8 + rng.next() * 0.4)
                                        market_share = 1 + rng.next() * 24
                                        cagr = -2 + rng.next() * 17
                                        yoy_growth = -5 + rng.next() * 25

                                        yield FactRecord(
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
                                            volume_units=int(volume_units),
                                            price=round_half_away(price),
                                            revenue=round_half_away(revenue),
                                            market_value_usd=round_half_away(market_value),
                                            market_share_pct=round_half_away(market_share),
                                            cagr=round_half_away(cagr),
                                            yoy_growth=round_half_away(yoy_growth),
                                        )
                                        record_id += 1

    def generate(self) -> List[FactRecord]:
        """Generate the full fact table"""
        records = list(self.iter_records())
        logger.info(
            "Generated market fact table",
            rows=len(records),
            seed=self.seed,
        )
        return records

    def generate_frame(self) -> pl.DataFrame:
        """Generate the full fact table as a polars DataFrame"""
        return to_frame(self.generate())


def to_frame(records: List[FactRecord]) -> pl.DataFrame:
    """Materialize fact records into a DataFrame with the fact schema"""
    return pl.DataFrame(records, schema=FACT_SCHEMA, orient="row")
