"""
Elderly-Care Market Dataset Generator
Generates the full synthetic fact table and writes it as CSV.

Usage:
    python scripts/generate_dataset.py
    caremarket-generate --output data/market.csv --log-level DEBUG
"""

import argparse
import sys
from pathlib import Path

from caremarket.config import get_settings
from caremarket.config.logging import configure_logging
from caremarket.data.export import write_csv
from caremarket.data.generators import MarketDataGenerator, to_frame
from caremarket.quality.validators import ValidationStatus, create_fact_table_validator


def parse_args(argv=None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Elderly-Care Market Dataset Generator")
    parser.add_argument(
        "--output",
        default=settings.dataset.output_path,
        help=f"CSV output path (default: {settings.dataset.output_path})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=settings.dataset.seed,
        help=f"Generator seed (default: {settings.dataset.seed})",
    )
    parser.add_argument(
        "--skip-validation",
        action="store_true",
        help="Write the CSV without running data quality checks",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    settings = get_settings()

    print("=" * 60)
    print("🏥 Elderly-Care Market Dataset Generator")
    print("=" * 60 + "\n")

    generator = MarketDataGenerator(
        seed=args.seed,
        record_id_start=settings.dataset.record_id_start,
    )
    print(f"📊 Generating {generator.expected_rows:,} records...")
    records = generator.generate()

    if not args.skip_validation:
        print("🔎 Validating fact table...")
        validator = create_fact_table_validator(expected_rows=generator.expected_rows)
        result = validator.validate(to_frame(records))
        if result.status == ValidationStatus.FAILED:
            for check in result.failures:
                print(f"   ❌ {check.name}: {check.message}")
            return 1
        print(f"   ✅ {result.passed_checks}/{result.total_checks} checks passed")

    output_file = write_csv(records, args.output)
    size = Path(output_file).stat().st_size / 1024 / 1024

    print("\n" + "=" * 60)
    print("✅ Dataset Generation Complete!")
    print("=" * 60)
    print(f"\n📄 {output_file}: {len(records):,} rows ({size:.2f} MB)\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
