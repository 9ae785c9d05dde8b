"""
Fact Table CSV Export

Writes the fact table in the exact layout of the published demo dataset:
camelCase header, minimal quoting of string fields, numbers in plain decimal
form and newline-joined rows without a trailing newline.
"""

from pathlib import Path
from typing import Any, Iterable, Sequence, Union

import polars as pl
import structlog

from .generators import FactRecord

logger = structlog.get_logger(__name__)

CSV_HEADER: Sequence[str] = (
    "recordId",
    "year",
    "region",
    "country",
    "type",
    "serviceOffering",
    "careOption",
    "application",
    "gender",
    "ageGroup",
    "volumeUnits",
    "price",
    "revenue",
    "marketValueUsd",
    "marketSharePct",
    "cagr",
    "yoyGrowth",
)

DELIMITER = ","
QUOTE = '"'


def escape_field(value: str) -> str:
    """Quote a string field when it contains the delimiter or a quote"""
    if DELIMITER in value or QUOTE in value:
        return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE
    return value


def format_value(value: Any) -> str:
    """Render one field; integral floats are written without a fraction"""
    if isinstance(value, str):
        return escape_field(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if value is None:
        return ""
    return str(value)


def format_row(values: Iterable[Any]) -> str:
    return DELIMITER.join(format_value(v) for v in values)


def to_csv_text(records: Iterable[Union[FactRecord, Sequence[Any]]]) -> str:
    """Serialize fact records (or rows in fact-schema order) to CSV text"""
    lines = [DELIMITER.join(CSV_HEADER)]
    lines.extend(format_row(record) for record in records)
    return "\n".join(lines)


def frame_to_csv_text(df: pl.DataFrame) -> str:
    """Serialize a fact-table DataFrame, e.g. a filtered view"""
    return to_csv_text(df.iter_rows())


def _write_text(text: str, path: Union[str, Path]) -> Path:
    output_file = Path(path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(text, encoding="utf-8", newline="")

    logger.info(f"Written fact table to {output_file}", bytes=len(text.encode("utf-8")))
    return output_file


def write_csv(
    records: Iterable[Union[FactRecord, Sequence[Any]]],
    path: Union[str, Path],
) -> Path:
    """
    Write fact records to a CSV file, creating parent directories.

    Returns:
        Path of the written file
    """
    return _write_text(to_csv_text(records), path)


def write_frame_csv(df: pl.DataFrame, path: Union[str, Path]) -> Path:
    """Write a fact-table DataFrame to a CSV file"""
    return _write_text(frame_to_csv_text(df), path)
