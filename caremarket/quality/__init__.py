"""
Data Quality Module
"""
from .validators import DataValidator, ValidationResult, create_fact_table_validator

__all__ = [
    "DataValidator",
    "ValidationResult",
    "create_fact_table_validator",
]
