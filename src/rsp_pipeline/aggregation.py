# ========================
# src/rsp_pipeline/aggregation.py
# ========================

"""
Monthly Aggregation Module

Computes the 12 month average price series for one (city, fuel, year)
selection, plus the summary figures and titles shown next to the chart.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .models import (
    FUEL_TYPES, MAX_YEAR, MIN_YEAR, MONTH_LABELS,
    MonthlySeries, PricePoint, empty_series, round_price
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesStatistics:
    """Average, extremes, and spread over the months that have a price."""

    average: float
    maximum: float
    minimum: float
    price_range: float
    months_with_data: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'average': self.average,
            'maximum': self.maximum,
            'minimum': self.minimum,
            'range': self.price_range,
            'months_with_data': self.months_with_data
        }


@dataclass(frozen=True)
class ChartSeries:
    """Everything the chart renderer needs for one selection."""

    city: str
    fuel_type: str
    year: int
    values: MonthlySeries
    title: str
    labels: List[str] = field(default_factory=lambda: list(MONTH_LABELS))
    statistics: Optional[SeriesStatistics] = None

    @property
    def has_data(self) -> bool:
        return any(value > 0 for value in self.values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'city': self.city,
            'fuel_type': self.fuel_type,
            'year': self.year,
            'title': self.title,
            'labels': self.labels,
            'values': self.values,
            'has_data': self.has_data,
            'statistics': self.statistics.to_dict() if self.statistics else None
        }


def _normalize_year(year: Any) -> Any:
    """Integral floats such as 2023.0 are treated as the integer year."""
    if isinstance(year, float) and year.is_integer():
        return int(year)
    return year


def _validate_selection(city: Any, fuel_type: Any, year: Any) -> Optional[str]:
    """Return a description of the first invalid argument, or None."""
    if not isinstance(city, str) or not city:
        return "City must be a non-empty string"
    if fuel_type not in FUEL_TYPES:
        return 'Fuel type must be either "petrol" or "diesel"'
    if isinstance(year, bool) or not isinstance(year, int) or year < MIN_YEAR or year > MAX_YEAR:
        return f"Year must be an integer between {MIN_YEAR} and {MAX_YEAR}"
    return None


def monthly_averages(dataset: Iterable[PricePoint],
                     city: str,
                     fuel_type: str,
                     year: int) -> MonthlySeries:
    """
    Average price per calendar month for one city, fuel type, and year.

    Invalid arguments and empty selections yield 12 zeros; this function never
    raises because it sits directly behind interactive selection.

    Args:
        dataset: Iterable of PricePoint records
        city (str): Exact city name
        fuel_type (str): "petrol" or "diesel"
        year (int): Calendar year between 2017 and 2025

    Returns:
        list[float]: 12 values, index 0 is January
    """
    try:
        year = _normalize_year(year)
        problem = _validate_selection(city, fuel_type, year)
        if problem:
            logger.warning(f"Invalid selection ({city!r}, {fuel_type!r}, {year!r}): {problem}")
            return empty_series()

        matching = [
            point for point in dataset
            if point.city == city and point.fuel_type == fuel_type and point.year == year
        ]

        if not matching:
            logger.info(f"No data found for {city} {fuel_type} {year}")
            return empty_series()

        totals = [0.0] * 12
        counts = [0] * 12
        for point in matching:
            if 1 <= point.month <= 12:
                totals[point.month - 1] += point.price
                counts[point.month - 1] += 1

        return [
            round_price(total / count) if count > 0 else 0.0
            for total, count in zip(totals, counts)
        ]

    except Exception as e:
        logger.error(f"Error calculating monthly averages: {e}")
        return empty_series()


def summarize_series(series: MonthlySeries) -> Optional[SeriesStatistics]:
    """
    Summary figures over the months with a positive price.

    Returns:
        SeriesStatistics or None when no month has data.
    """
    values = [value for value in series if value > 0]
    if not values:
        return None

    maximum = max(values)
    minimum = min(values)
    return SeriesStatistics(
        average=round_price(sum(values) / len(values)),
        maximum=maximum,
        minimum=minimum,
        price_range=round_price(maximum - minimum),
        months_with_data=len(values)
    )


def chart_title(city: str, fuel_type: str, year: int) -> str:
    """Title line for the monthly chart."""
    return f"Monthly Average RSP - {city} ({fuel_type.capitalize()}, {year})"


def build_chart_series(dataset: Iterable[PricePoint],
                       city: str,
                       fuel_type: str,
                       year: int) -> ChartSeries:
    """Combine averages, title, and statistics for one selection."""
    year = _normalize_year(year)
    values = monthly_averages(dataset, city, fuel_type, year)
    title = chart_title(str(city), str(fuel_type), year)
    return ChartSeries(
        city=city,
        fuel_type=fuel_type,
        year=year,
        values=values,
        title=title,
        statistics=summarize_series(values)
    )
