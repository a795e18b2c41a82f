# ========================
# src/rsp_pipeline/loader.py
# ========================

"""
Dataset Loader

Reads the raw RSP export from a local file or an HTTP(S) URL, parses it, and
substitutes the synthetic fallback dataset whenever anything goes wrong, so
callers always receive a well-formed dataset.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import requests

from ..utils.config import Config
from ..utils.load_metrics import LoadMetrics
from ..utils.performance_monitor import monitor_performance
from .fallback import FallbackGenerator
from .models import Dataset
from .normalizer import ParseSummary, parse_dataset_with_summary

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = 'fallback'


class DatasetFetchError(RuntimeError):
    """Raised when the raw dataset text cannot be retrieved."""


class DatasetLoader:
    """
    Loads one dataset per call. Never raises to its caller: transport and
    structural failures are logged, counted, and answered with the fallback.
    """

    def __init__(self, config: Optional[Config] = None, metrics: Optional[LoadMetrics] = None):
        """
        Initialize the loader.

        Args:
            config (Config): Configuration object
            metrics (LoadMetrics): Shared metrics recorder
        """
        self.config = config or Config()
        self.metrics = metrics or LoadMetrics(self.config.METRICS_FILE or None)
        self.last_summary: Optional[ParseSummary] = None

    async def load_dataset(self, source: Optional[str] = None) -> Dataset:
        """
        Fetch, parse, and validate the dataset.

        Args:
            source (str): File path or URL; defaults to Config.RSP_DATA_SOURCE

        Returns:
            Dataset: The parsed dataset, or the fallback dataset on failure
        """
        source = source or self.config.RSP_DATA_SOURCE
        self.last_summary = None
        self.metrics.record_attempt(source)
        logger.info(f"Loading RSP dataset from '{source}'...")

        try:
            raw_text = await self._read_source(source)
            dataset = self._parse(raw_text, source)
        except Exception as e:
            logger.error(f"Error loading real data, falling back to sample data: {e}")
            self.metrics.record_fallback(e)
            return self.build_fallback_dataset()

        logger.info(f"Loaded {len(dataset)} records from '{source}'")
        return dataset

    async def _read_source(self, source: str) -> str:
        """Read the raw text off the event loop; this is the only suspension point."""
        loop = asyncio.get_running_loop()
        if source.lower().startswith(('http://', 'https://')):
            return await loop.run_in_executor(None, self._fetch_url, source)
        return await loop.run_in_executor(None, self._read_file, source)

    def _fetch_url(self, url: str) -> str:
        try:
            response = requests.get(url, timeout=self.config.REQUEST_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            raise DatasetFetchError(f"Failed to fetch data: {e}") from e

        if not response.ok:
            raise DatasetFetchError(
                f"Failed to fetch data: HTTP {response.status_code} {response.reason}"
            )

        content_type = response.headers.get('content-type', '')
        if self.config.REQUIRE_CSV_CONTENT_TYPE and self.config.EXPECTED_CONTENT_TYPE not in content_type:
            raise DatasetFetchError(
                f"Invalid content type '{content_type}': expected {self.config.EXPECTED_CONTENT_TYPE}"
            )

        return self._require_content(response.text)

    def _read_file(self, file_path: str) -> str:
        path = Path(file_path)
        if not path.is_file():
            raise DatasetFetchError(f"Input file does not exist: {file_path}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return self._require_content(f.read())
        except (OSError, UnicodeDecodeError) as e:
            raise DatasetFetchError(f"Cannot read input file: {e}") from e

    @staticmethod
    def _require_content(text: str) -> str:
        if not text or not text.strip():
            raise DatasetFetchError("Empty CSV file received")
        return text

    def _parse(self, raw_text: str, source: str) -> Dataset:
        with monitor_performance("RSP parse") as monitor:
            records, summary = parse_dataset_with_summary(raw_text)
            monitor.update_progress(summary.rows_seen)
        self.last_summary = summary

        if summary.skipped_rate > self.config.MAX_SKIPPED_ROW_RATE:
            logger.warning(
                f"{summary.skipped_rows} of {summary.rows_seen} rows skipped "
                f"({summary.skipped_rate:.1%}); reasons: {summary.skip_reasons}"
            )

        self.metrics.record_success(summary.valid_rows, summary.skipped_rows, summary.skip_reasons)
        return Dataset(
            records=tuple(records),
            source=source,
            is_fallback=False,
            valid_rows=summary.valid_rows,
            skipped_rows=summary.skipped_rows,
            loaded_at=datetime.now()
        )

    def build_fallback_dataset(self) -> Dataset:
        """Synthetic dataset used in place of a failed load."""
        records = FallbackGenerator(seed=self.config.FALLBACK_SEED).generate()
        return Dataset(
            records=tuple(records),
            source=FALLBACK_SOURCE,
            is_fallback=True,
            valid_rows=len(records),
            skipped_rows=0,
            loaded_at=datetime.now()
        )


async def load_dataset(source: Optional[str] = None, config: Optional[Config] = None) -> Dataset:
    """Load the RSP dataset once, falling back to synthetic data on any failure."""
    return await DatasetLoader(config).load_dataset(source)
