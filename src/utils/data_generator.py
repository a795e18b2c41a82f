# ========================
# src/utils/data_generator.py
# ========================

"""
Sample Data Generation

Writes RSP exports in the published metro-city schema, with controlled error
injection, for demos, scale tests, and fixtures.
"""

import csv
import logging
import random
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..rsp_pipeline.models import FUEL_TYPES, MAX_YEAR, METRO_CITIES, MIN_YEAR

logger = logging.getLogger(__name__)

RSP_HEADER = [
    'Country',
    'Year',
    'Month',
    'Calendar Day',
    'Products ',
    'Metro Cities',
    'Retail Selling Price (Rsp) Of Petrol And Diesel (UOM:INR/L(IndianRupeesperLitre)), Scaling Factor:1'
]


class DataGenerator:
    """
    Generator for realistic RSP export files.
    """

    def __init__(self, seed: Optional[int] = None, cities: Sequence[str] = METRO_CITIES):
        """
        Initialize data generator.

        Args:
            seed (int): Random seed for reproducible data generation
            cities (list[str]): Metro cities to include
        """
        self._random = random.Random(seed)
        self.cities = list(cities)
        self._initialize_data_patterns()
        logger.info(f"DataGenerator initialized with seed: {seed}")

    def _initialize_data_patterns(self) -> None:
        """Initialize price patterns."""
        # INR/L around 2021
        self.base_prices = {
            'petrol': {'Mumbai': 106.0, 'Delhi': 95.0, 'Chennai': 101.0, 'Kolkata': 104.0},
            'diesel': {'Mumbai': 94.0, 'Delhi': 87.0, 'Chennai': 92.0, 'Kolkata': 91.0}
        }
        self.default_base_price = {'petrol': 98.0, 'diesel': 89.0}
        self.yearly_trend = 0.04

        self.product_labels = {
            'petrol': ['Petrol', 'petrol', 'PETROL'],
            'diesel': ['Diesel', 'diesel', 'DIESEL']
        }
        self.unsupported_products = ['LPG', 'ATF', 'Kerosene', 'CNG']
        self.date_formats = ['%Y-%m-%d', '%Y-%m-%d', '%Y-%m-%d', '%d-%b-%Y']

    def generate_dataset(self,
                         file_path: str,
                         num_rows: int,
                         error_rate: float = 0.1,
                         start_date: Optional[date] = None,
                         end_date: Optional[date] = None) -> Dict[str, Any]:
        """
        Generate an RSP export with controlled error injection.

        Args:
            file_path (str): Output CSV file path
            num_rows (int): Number of data rows to generate
            error_rate (float): Fraction of rows with an intentional defect
            start_date (date): First calendar day (default: 1 Jan 2017)
            end_date (date): Last calendar day (default: 31 Dec 2025)

        Returns:
            dict: Generation statistics
        """
        logger.info(f"Generating {num_rows:,} RSP rows with {error_rate:.1%} error rate...")

        start_date = start_date or date(MIN_YEAR, 1, 1)
        end_date = end_date or date(MAX_YEAR, 12, 31)
        span_days = max(0, (end_date - start_date).days)

        stats = {
            'total_rows': num_rows,
            'error_rate': error_rate,
            'records_with_errors': 0,
            'error_types': {}
        }

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(RSP_HEADER)

            for i in range(num_rows):
                day = start_date + timedelta(days=self._random.randint(0, span_days))
                writer.writerow(self._generate_single_row(day, error_rate, stats))

                if (i + 1) % 10000 == 0:
                    logger.debug(f"Generated {i + 1:,} rows")

        stats['error_rate_actual'] = stats['records_with_errors'] / num_rows if num_rows else 0.0

        logger.info(f"Dataset generated: {file_path}")
        logger.info(f"Error breakdown: {stats['error_types']}")
        return stats

    def _generate_single_row(self, day: date, error_rate: float, stats: Dict[str, Any]) -> List[str]:
        """Generate one export row, possibly with an injected defect."""
        city = self._random.choice(self.cities)
        fuel_type = self._random.choice(FUEL_TYPES)

        base = self.base_prices.get(fuel_type, {}).get(city, self.default_base_price[fuel_type])
        trend = 1 + (day.year - 2021) * self.yearly_trend
        price = round(base * trend * self._random.uniform(0.97, 1.03), 2)

        row = {
            'country': 'India',
            'year': str(day.year),
            'month': day.strftime('%B'),
            'day': day.strftime(self._random.choice(self.date_formats)),
            'product': self._random.choice(self.product_labels[fuel_type]),
            'city': city,
            'price': f"{price:.2f}"
        }

        if self._random.random() < error_rate:
            stats['records_with_errors'] += 1
            error_type = self._inject_error(row)
            stats['error_types'][error_type] = stats['error_types'].get(error_type, 0) + 1
            if error_type == 'short_row':
                return [row['country'], row['year'], row['month'], row['day'], row['product']]

        return [row['country'], row['year'], row['month'], row['day'],
                row['product'], row['city'], row['price']]

    def _inject_error(self, row: Dict[str, str]) -> str:
        """Mutate the row in place and return the injected error type."""
        error_type = self._random.choice([
            'unsupported_product', 'placeholder_price', 'missing_city',
            'out_of_range_year', 'malformed_date', 'negative_price', 'short_row'
        ])

        if error_type == 'unsupported_product':
            row['product'] = self._random.choice(self.unsupported_products)
        elif error_type == 'placeholder_price':
            row['price'] = self._random.choice(['NA', 'N/A'])
        elif error_type == 'missing_city':
            row['city'] = ''
        elif error_type == 'out_of_range_year':
            shifted = self._random.choice([MIN_YEAR - 1, MAX_YEAR + 1])
            row['year'] = str(shifted)
            row['day'] = f"{shifted}-06-15"
        elif error_type == 'malformed_date':
            row['day'] = self._random.choice(['not-a-date', '2023-13-45', '??'])
        elif error_type == 'negative_price':
            row['price'] = f"-{row['price']}"

        return error_type
