# ========================
# src/rsp_pipeline/models.py
# ========================

"""
Domain Models

Typed records shared by every stage of the RSP pipeline.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List, Optional, Tuple

FUEL_TYPES = ("petrol", "diesel")

MIN_YEAR = 2017
MAX_YEAR = 2025
AVAILABLE_YEARS = tuple(range(MIN_YEAR, MAX_YEAR + 1))

METRO_CITIES = ("Mumbai", "Delhi", "Chennai", "Kolkata")

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
)

# Jan..Dec, absence of data is 0.0
MonthlySeries = List[float]


def round_price(value: float) -> float:
    """Round half-up to 2 decimal places."""
    return math.floor(value * 100 + 0.5) / 100


def empty_series() -> MonthlySeries:
    """Return a fresh all-zero 12 month series."""
    return [0.0] * 12


@dataclass(frozen=True)
class PricePoint:
    """One retail selling price observation for a city, fuel, and month."""

    city: str
    fuel_type: str
    year: int
    month: int
    price: float


@dataclass(frozen=True)
class Dataset:
    """
    Immutable collection of price points produced by one load cycle.

    The dataset is replaced wholesale on reload. Provenance fields record
    where the records came from and how many source rows were rejected.
    """

    records: Tuple[PricePoint, ...] = ()
    source: str = ""
    is_fallback: bool = False
    valid_rows: int = 0
    skipped_rows: int = 0
    loaded_at: Optional[datetime] = None
    cities: Tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self):
        if not self.cities:
            unique = sorted({record.city for record in self.records})
            object.__setattr__(self, 'cities', tuple(unique))

    def __iter__(self) -> Iterator[PricePoint]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def summary(self) -> dict:
        """Describe the dataset without its records."""
        return {
            'source': self.source,
            'is_fallback': self.is_fallback,
            'record_count': len(self.records),
            'valid_rows': self.valid_rows,
            'skipped_rows': self.skipped_rows,
            'cities': list(self.cities),
            'loaded_at': self.loaded_at.isoformat() if self.loaded_at else None
        }
