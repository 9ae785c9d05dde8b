"""
Data Validation Module

Rule-based quality checks for the generated market fact table.

Features:
- Null and uniqueness checks on record ids
- Range checks on measures
- Facet domain checks
- Table-level rules (cardinality, id ordering)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

import polars as pl
import structlog

from caremarket.data.facets import FACET_DOMAINS, REGION

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    ERROR = "error"  # table is unusable
    WARNING = "warning"  # logged, generation continues


class ValidationStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Outcome of one check"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    failed_rows: int = 0


@dataclass
class ValidationResult:
    status: ValidationStatus
    checks: List[ValidationCheck] = field(default_factory=list)

    @property
    def total_checks(self) -> int:
        return len(self.checks)

    @property
    def passed_checks(self) -> int:
        return sum(1 for c in self.checks if c.passed)

    @property
    def failures(self) -> List[ValidationCheck]:
        return [c for c in self.checks if not c.passed]

    @property
    def failed_checks(self) -> int:
        return sum(1 for c in self.failures if c.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for c in self.failures if c.severity == ValidationSeverity.WARNING)


CheckFunc = Callable[[pl.DataFrame], ValidationCheck]


class DataValidator:
    """
    Chainable suite of checks over a polars frame.

    Example:
        result = (
            DataValidator()
            .add_not_null_check("record_id")
            .add_range_check("price", min_value=2, max_value=150)
            .validate(df)
        )
    """

    def __init__(self):
        self._checks: List[CheckFunc] = []

    def _add_row_check(
        self,
        name: str,
        column: str,
        offending: Callable[[pl.DataFrame], int],
        problem: str,
        severity: ValidationSeverity,
    ) -> "DataValidator":
        """Register a check that fails when ``offending`` counts any bad rows"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return ValidationCheck(name, False, severity, f"Column '{column}' not found")
            bad = offending(df)
            message = f"Column '{column}' has {bad} {problem}" if bad else "OK"
            return ValidationCheck(name, bad == 0, severity, message, failed_rows=bad)

        self._checks.append(check)
        return self

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        return self._add_row_check(
            f"not_null_{column}",
            column,
            lambda df: df[column].null_count(),
            "null values",
            severity,
        )

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        return self._add_row_check(
            f"unique_{column}",
            column,
            lambda df: df.height - df[column].n_unique(),
            "duplicate values",
            severity,
        )

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Values must lie in [min_value, max_value]; either bound may be open"""
        outside = pl.lit(False)
        if min_value is not None:
            outside = outside | (pl.col(column) < min_value)
        if max_value is not None:
            outside = outside | (pl.col(column) > max_value)

        return self._add_row_check(
            f"range_{column}",
            column,
            lambda df: df.filter(outside).height,
            f"values outside [{min_value}, {max_value}]",
            severity,
        )

    def add_enum_check(
        self,
        column: str,
        allowed_values: Sequence,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        allowed = list(allowed_values)
        return self._add_row_check(
            f"enum_{column}",
            column,
            lambda df: df.filter(
                pl.col(column).is_not_null() & ~pl.col(column).is_in(allowed)
            ).height,
            "values outside the domain",
            severity,
        )

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add a table-level rule"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            passed = bool(check_func(df))
            return ValidationCheck(name, passed, severity, "OK" if passed else message_on_fail)

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """Run every registered check against ``df``"""
        logger.info(f"Running {len(self._checks)} validation checks on {df.height} rows")

        checks = [check(df) for check in self._checks]
        for failed in (c for c in checks if not c.passed):
            logger.warning(
                f"Validation failed: {failed.name}",
                message=failed.message,
                severity=failed.severity.value,
            )

        result = ValidationResult(status=ValidationStatus.PASSED, checks=checks)
        if result.failed_checks:
            result.status = ValidationStatus.FAILED
        elif result.warning_count:
            result.status = ValidationStatus.PARTIAL

        logger.info(
            f"Validation complete: {result.status.value}",
            passed=result.passed_checks,
            failed=result.failed_checks,
            warnings=result.warning_count,
        )
        return result


def _ids_strictly_increasing(df: pl.DataFrame) -> bool:
    if df.height < 2:
        return True
    return bool((df["record_id"].diff().drop_nulls() > 0).all())


def create_fact_table_validator(expected_rows: Optional[int] = None) -> DataValidator:
    """
    Create pre-configured validator for the market fact table.

    Args:
        expected_rows: Required row count, e.g. the full cartesian product
    """
    validator = (
        DataValidator()
        .add_not_null_check("record_id")
        .add_unique_check("record_id")
        .add_custom_check(
            name="record_id_increasing",
            check_func=_ids_strictly_increasing,
            message_on_fail="Record ids are not strictly increasing",
        )
        .add_enum_check("region", [REGION])
        .add_range_check("volume_units", min_value=1000, max_value=200000)
        .add_range_check("price", min_value=2, max_value=150)
        .add_range_check("revenue", min_value=0)
        .add_range_check("market_value_usd", min_value=0)
        .add_range_check("market_share_pct", min_value=1, max_value=25)
        .add_range_check("cagr", min_value=-2, max_value=15)
        .add_range_check("yoy_growth", min_value=-5, max_value=20)
    )

    for facet, domain in FACET_DOMAINS.items():
        validator.add_enum_check(facet.column, domain)

    if expected_rows is not None:
        validator.add_custom_check(
            name="row_count",
            check_func=lambda df: df.height == expected_rows,
            message_on_fail=f"Expected {expected_rows} rows",
        )

    return validator
