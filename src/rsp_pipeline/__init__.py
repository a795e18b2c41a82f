# ========================
# src/rsp_pipeline/__init__.py
# ========================

"""
RSP Pipeline Package

Core components for turning the metro-city fuel price export into monthly
chart series:
- tokenizer: Quote-aware CSV line splitting
- normalizer: Row validation and dataset assembly
- aggregation: Monthly averages and chart statistics
- fallback: Synthetic dataset for failed loads
- loader: Async fetch/read with fallback
- orchestrator: Dataset ownership and query coordination
"""

from .models import PricePoint, Dataset, FUEL_TYPES, METRO_CITIES, AVAILABLE_YEARS
from .tokenizer import tokenize
from .normalizer import (
    parse_dataset, parse_dataset_with_summary,
    DatasetParseError, EmptySourceError, NoValidRowsError
)
from .aggregation import monthly_averages, summarize_series, build_chart_series
from .fallback import FallbackGenerator, generate_fallback_dataset
from .loader import DatasetLoader, DatasetFetchError, load_dataset
from .orchestrator import RSPDashboard

__all__ = [
    'PricePoint',
    'Dataset',
    'FUEL_TYPES',
    'METRO_CITIES',
    'AVAILABLE_YEARS',
    'tokenize',
    'parse_dataset',
    'parse_dataset_with_summary',
    'DatasetParseError',
    'EmptySourceError',
    'NoValidRowsError',
    'monthly_averages',
    'summarize_series',
    'build_chart_series',
    'FallbackGenerator',
    'generate_fallback_dataset',
    'DatasetLoader',
    'DatasetFetchError',
    'load_dataset',
    'RSPDashboard'
]

__version__ = "1.0.0"
