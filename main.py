#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Metro City Fuel RSP Pipeline

Loads the RSP export (or the fallback dataset when it cannot be loaded) and
prints the monthly average series for one city, fuel type, and year.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from src.rsp_pipeline import RSPDashboard, FUEL_TYPES, AVAILABLE_YEARS
from src.rsp_pipeline.aggregation import ChartSeries
from src.utils import Config, DataGenerator, setup_logging, get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Monthly average retail selling price of petrol and diesel in metro cities"
    )
    parser.add_argument('--source', help="CSV file path or URL (default: RSP_DATA_SOURCE)")
    parser.add_argument('--city', default='Mumbai', help="Metro city name")
    parser.add_argument('--fuel-type', default='petrol', choices=FUEL_TYPES)
    parser.add_argument('--year', type=int, default=2023, choices=AVAILABLE_YEARS)
    parser.add_argument('--generate-sample', action='store_true',
                        help="Write a synthetic export to the source path before loading")
    parser.add_argument('--sample-rows', type=int, help="Rows for --generate-sample (default: SAMPLE_ROWS)")
    return parser


def main(argv=None) -> int:
    """Main execution function."""
    args = build_parser().parse_args(argv)

    config = Config()
    if args.source:
        config.RSP_DATA_SOURCE = args.source

    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file=config.LOG_FILE or None,
        log_dir=config.LOG_DIR
    )
    logger = get_logger(__name__)

    try:
        if not config.source_is_remote:
            config.ensure_directories()

        if args.generate_sample:
            if config.source_is_remote:
                logger.error("Cannot generate a sample for a remote source")
                return 1
            logger.info("Generating sample RSP export...")
            generator = DataGenerator(seed=42)
            generator.generate_dataset(
                file_path=config.RSP_DATA_SOURCE,
                num_rows=args.sample_rows or config.SAMPLE_ROWS,
                error_rate=0.1
            )

        dashboard = RSPDashboard(config)
        dataset = asyncio.run(dashboard.load())

        series = dashboard.chart_series(args.city, args.fuel_type, args.year)
        _print_series(series, dataset.summary())
        return 0

    except Exception as e:
        logger.error(f"Execution failed: {e}", exc_info=True)
        return 1


def _print_series(series: ChartSeries, dataset_summary: dict) -> None:
    """Print the monthly table and summary statistics."""
    print("\n" + "=" * 60)
    print(series.title)
    print("=" * 60)

    source = dataset_summary['source']
    if dataset_summary['is_fallback']:
        source += " (synthetic data, real source unavailable)"
    print(f"Source: {source}")
    print(f"Records: {dataset_summary['record_count']:,} "
          f"(skipped rows: {dataset_summary['skipped_rows']:,})\n")

    for label, value in zip(series.labels, series.values):
        print(f"   {label}: {value:>8.2f}")

    statistics = series.statistics
    if statistics is None:
        print("\nNo data for this selection.")
    else:
        print(f"\n   Average: ₹{statistics.average:.2f}")
        print(f"   Highest: ₹{statistics.maximum:.2f}")
        print(f"   Lowest:  ₹{statistics.minimum:.2f}")
        print(f"   Range:   ₹{statistics.price_range:.2f}")

    print("=" * 60)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
