#!/usr/bin/env python3
# ========================
# scripts/run_large_scale_test.py
# ========================

"""
Script to exercise the RSP pipeline on a large synthetic export.
Generates the file, loads it through the regular loader, and queries every
metro city, fuel type, and year combination.
"""

import asyncio
import os
import sys
import time

# Add project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.rsp_pipeline import RSPDashboard, FUEL_TYPES, AVAILABLE_YEARS, METRO_CITIES
from src.utils.config import Config
from src.utils.data_generator import DataGenerator
from src.utils.logging_setup import setup_logging


def main():
    """Run a large-scale test of the RSP pipeline."""

    if len(sys.argv) > 1:
        try:
            num_rows = int(sys.argv[1])
        except ValueError:
            print("Usage: python run_large_scale_test.py [num_rows]")
            print("Example: python run_large_scale_test.py 1000000")
            sys.exit(1)
    else:
        num_rows = 500_000

    input_file = f'data/raw/large_rsp_data_{num_rows}.csv'
    setup_logging(log_level=os.getenv('LOG_LEVEL', 'INFO'))

    print("=" * 60)
    print("LARGE SCALE RSP PIPELINE TEST")
    print("=" * 60)
    print(f"Target dataset size: {num_rows:,} rows")
    print(f"Input file: {input_file}")
    print("=" * 60)

    print(f"\nStep 1: Generating {num_rows:,} rows of sample data...")
    if os.path.exists(input_file):
        print("Using existing data file.")
    else:
        DataGenerator(seed=42).generate_dataset(input_file, num_rows, error_rate=0.1)

    print("\nStep 2: Loading dataset...")
    dashboard = RSPDashboard(Config({'rsp_data_source': input_file}))
    dataset = asyncio.run(dashboard.load())
    if dataset.is_fallback:
        print("Load failed; fallback dataset in use. Check the logs.")
        sys.exit(1)
    print(f"Valid rows: {dataset.valid_rows:,}, skipped rows: {dataset.skipped_rows:,}")

    print("\nStep 3: Querying every selection...")
    start = time.time()
    queries = 0
    empty = 0
    for city in METRO_CITIES:
        for fuel_type in FUEL_TYPES:
            for year in AVAILABLE_YEARS:
                series = dashboard.monthly_averages(city, fuel_type, year)
                queries += 1
                if not any(series):
                    empty += 1
    elapsed = time.time() - start
    print(f"{queries} queries in {elapsed:.2f}s ({elapsed / queries * 1000:.1f} ms/query), "
          f"{empty} without data")


if __name__ == '__main__':
    main()
