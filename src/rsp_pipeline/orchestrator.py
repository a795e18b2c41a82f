# ========================
# src/rsp_pipeline/orchestrator.py
# ========================

"""
Dashboard Orchestrator Module

Single owner of the current RSP dataset. Loads it, replaces it wholesale on
reload, and answers chart queries against it.
"""

import logging
from typing import Any, Dict, List, Optional

from ..utils.config import Config
from ..utils.load_metrics import LoadMetrics
from .aggregation import ChartSeries, build_chart_series, monthly_averages
from .loader import DatasetLoader
from .models import AVAILABLE_YEARS, FUEL_TYPES, METRO_CITIES, Dataset, MonthlySeries

logger = logging.getLogger(__name__)


class RSPDashboard:
    """
    Coordinates dataset loading and monthly aggregation for the chart.
    Aggregation is a pure function over whichever dataset is current.
    """

    def __init__(self, config: Optional[Config] = None, loader: Optional[DatasetLoader] = None):
        """
        Initialize the dashboard.

        Args:
            config (Config): Configuration object
            loader (DatasetLoader): Loader to use; built from config when omitted
        """
        self.config = config or Config()
        self.loader = loader or DatasetLoader(self.config, LoadMetrics(self.config.METRICS_FILE or None))
        self._dataset = Dataset()

        logger.info("RSPDashboard initialized:")
        logger.info(f"  Source: {self.config.RSP_DATA_SOURCE}")

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def metrics(self) -> LoadMetrics:
        return self.loader.metrics

    @property
    def is_loaded(self) -> bool:
        return self._dataset.loaded_at is not None

    async def load(self, source: Optional[str] = None) -> Dataset:
        """
        Load a dataset and make it current.

        Args:
            source (str): Optional file path or URL overriding the configured source

        Returns:
            Dataset: The dataset now in use
        """
        dataset = await self.loader.load_dataset(source)
        self._dataset = dataset
        if dataset.is_fallback:
            logger.warning(f"Serving fallback dataset ({len(dataset)} synthetic records)")
        return dataset

    async def reload(self, source: Optional[str] = None) -> Dataset:
        logger.info("Reloading RSP dataset...")
        return await self.load(source)

    def monthly_averages(self, city: str, fuel_type: str, year: int) -> MonthlySeries:
        return monthly_averages(self._dataset, city, fuel_type, year)

    def chart_series(self, city: str, fuel_type: str, year: int) -> ChartSeries:
        return build_chart_series(self._dataset, city, fuel_type, year)

    def options(self) -> Dict[str, List[Any]]:
        """Selectable cities, fuel types, and years."""
        present = set(self._dataset.cities)
        cities = [city for city in METRO_CITIES if city in present] or list(METRO_CITIES)
        return {
            'cities': cities,
            'fuel_types': list(FUEL_TYPES),
            'years': list(AVAILABLE_YEARS)
        }

    def status(self) -> Dict[str, Any]:
        """Current dataset provenance together with load metrics."""
        summary = self.loader.last_summary
        return {
            'loaded': self.is_loaded,
            'dataset': self._dataset.summary(),
            'parse_summary': summary.to_dict() if summary else None,
            'metrics': self.metrics.snapshot()
        }
