# ========================
# src/rsp_pipeline/normalizer.py
# ========================

"""
Row Normalizer

Maps tokenized rows of the RSP export onto validated PricePoint records and
assembles them into the in-memory dataset.
"""

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .models import FUEL_TYPES, MAX_YEAR, MIN_YEAR, PricePoint, round_price
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

# Column positions fixed by the external file format (0-based)
DATE_COLUMN = 3
PRODUCT_COLUMN = 4
CITY_COLUMN = 5
PRICE_COLUMN = 6
MIN_COLUMNS = 7

PRICE_PLACEHOLDERS = ('NA', 'N/A')
PRICE_PATTERN = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')


class DatasetParseError(ValueError):
    """Raised when the raw dataset text cannot produce a usable dataset."""


class EmptySourceError(DatasetParseError):
    """Raised when the input has no header plus data row."""


class NoValidRowsError(DatasetParseError):
    """Raised when no row survives validation."""


class SkipReason(str, Enum):
    TOO_FEW_FIELDS = 'too_few_fields'
    MISSING_FIELD = 'missing_field'
    UNSUPPORTED_FUEL = 'unsupported_fuel'
    INVALID_DATE = 'invalid_date'
    YEAR_OUT_OF_RANGE = 'year_out_of_range'
    INVALID_PRICE = 'invalid_price'
    ROW_ERROR = 'row_error'


@dataclass(frozen=True)
class RowResult:
    """Outcome of normalizing one line: either a record or a skip reason."""

    record: Optional[PricePoint] = None
    reason: Optional[SkipReason] = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @classmethod
    def success(cls, record: PricePoint) -> 'RowResult':
        return cls(record=record)

    @classmethod
    def skip(cls, reason: SkipReason) -> 'RowResult':
        return cls(reason=reason)


@dataclass
class ParseSummary:
    """Counts collected while parsing one dataset."""

    valid_rows: int = 0
    skipped_rows: int = 0
    blank_lines: int = 0
    skip_reasons: Dict[str, int] = field(default_factory=dict)

    @property
    def rows_seen(self) -> int:
        return self.valid_rows + self.skipped_rows

    @property
    def skipped_rate(self) -> float:
        return self.skipped_rows / self.rows_seen if self.rows_seen > 0 else 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            'valid_rows': self.valid_rows,
            'skipped_rows': self.skipped_rows,
            'blank_lines': self.blank_lines,
            'skipped_rate': self.skipped_rate,
            'skip_reasons': dict(self.skip_reasons)
        }


class RowNormalizer:
    """
    Validates a single tokenized RSP row and converts it to a PricePoint.
    Each check maps to one SkipReason so rejected rows can be reported.
    """

    DATE_FORMATS = [
        "%Y-%m-%d %H:%M:%S",
        "%Y/%m/%d",
        "%d-%b-%Y",
        "%d %b %Y",
        "%b %d, %Y",
        "%B %d, %Y",
        "%d %B %Y",
        "%m/%d/%Y",
        "%d/%m/%Y",
        "%d-%m-%Y"
    ]

    def normalize_fields(self, columns: List[str]) -> RowResult:
        """
        Apply all validation rules to one tokenized row.

        Args:
            columns (list[str]): Fields produced by the tokenizer

        Returns:
            RowResult: The normalized record, or the reason the row was dropped.
        """
        if len(columns) < MIN_COLUMNS:
            return RowResult.skip(SkipReason.TOO_FEW_FIELDS)

        city = columns[CITY_COLUMN].strip()
        product = columns[PRODUCT_COLUMN].strip().lower()
        price_value = columns[PRICE_COLUMN].strip()
        date_value = columns[DATE_COLUMN].strip()

        if not city or not product or not price_value or not date_value:
            return RowResult.skip(SkipReason.MISSING_FIELD)

        if product not in FUEL_TYPES:
            return RowResult.skip(SkipReason.UNSUPPORTED_FUEL)

        parsed_date = self._clean_date(date_value)
        if parsed_date is None:
            return RowResult.skip(SkipReason.INVALID_DATE)

        if parsed_date.year < MIN_YEAR or parsed_date.year > MAX_YEAR:
            return RowResult.skip(SkipReason.YEAR_OUT_OF_RANGE)

        price = self._clean_price(price_value)
        if price is None:
            return RowResult.skip(SkipReason.INVALID_PRICE)

        return RowResult.success(PricePoint(
            city=city,
            fuel_type=product,
            year=parsed_date.year,
            month=parsed_date.month,
            price=round_price(price)
        ))

    def normalize_line(self, line: str) -> RowResult:
        """Tokenize and normalize one raw data line."""
        return self.normalize_fields(tokenize(line))

    def _clean_date(self, value: str) -> Optional[datetime]:
        """
        Parses a calendar date in ISO 8601 or one of the known export formats.
        Returns a datetime object or None if malformed.
        """
        text = value.strip()
        if not text:
            return None

        iso_text = text[:-1] + '+00:00' if text.endswith('Z') else text
        try:
            return datetime.fromisoformat(iso_text)
        except ValueError:
            pass

        for fmt in self.DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        return None

    def _clean_price(self, value: str) -> Optional[float]:
        """Placeholders become 0; anything else must be a finite, non-negative decimal number."""
        if value in PRICE_PLACEHOLDERS:
            return 0.0
        if not isinstance(value, str) or not PRICE_PATTERN.fullmatch(value):
            return None
        price = float(value)
        if not math.isfinite(price) or price < 0:
            return None
        return price


def parse_dataset_with_summary(raw_text: str) -> Tuple[List[PricePoint], ParseSummary]:
    """
    Parse the raw RSP export into price points and collect skip statistics.

    Args:
        raw_text (str): Full text of the CSV export, header line first

    Returns:
        tuple: (list of PricePoint, ParseSummary)

    Raises:
        EmptySourceError: If there is no header plus at least one more line.
        NoValidRowsError: If every data row was rejected.
    """
    lines = raw_text.split('\n')
    if len(lines) < 2:
        raise EmptySourceError("CSV file must have at least a header and one data row")

    normalizer = RowNormalizer()
    summary = ParseSummary()
    reasons = Counter()
    records = []

    for index, raw_line in enumerate(lines[1:], start=2):
        line = raw_line.strip()
        if not line:
            summary.blank_lines += 1
            continue

        try:
            result = normalizer.normalize_line(line)
        except Exception as e:
            logger.warning(f"Error parsing row {index}: {e}")
            result = RowResult.skip(SkipReason.ROW_ERROR)

        if result.ok:
            records.append(result.record)
            summary.valid_rows += 1
        else:
            reasons[result.reason.value] += 1
            summary.skipped_rows += 1
            logger.debug(f"Row {index} skipped: {result.reason.value}")

    summary.skip_reasons = dict(reasons)

    if summary.valid_rows == 0:
        raise NoValidRowsError(
            f"No valid data rows found in CSV file ({summary.skipped_rows} skipped)"
        )

    logger.info(
        f"CSV parsing completed: {summary.valid_rows} valid rows, "
        f"{summary.skipped_rows} skipped rows"
    )
    return records, summary


def parse_dataset(raw_text: str) -> List[PricePoint]:
    """Parse the raw RSP export into validated price points."""
    records, _ = parse_dataset_with_summary(raw_text)
    return records
