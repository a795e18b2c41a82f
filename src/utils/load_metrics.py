# ========================
# src/utils/load_metrics.py
# ========================

"""
Load Metrics

Counters describing dataset load cycles (row skips and fallback use), with
optional JSON persistence so operators can inspect them across restarts.
"""

import json
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


class LoadMetrics:
    """Accumulates dataset load outcomes for the lifetime of the process."""

    def __init__(self, metrics_file: Optional[str] = None):
        """
        Initialize the metrics recorder.

        Args:
            metrics_file (str): Optional JSON file used to persist counters
        """
        self.metrics_file = Path(metrics_file) if metrics_file else None
        self.loads_attempted = 0
        self.loads_succeeded = 0
        self.fallbacks_used = 0
        self.rows_valid = 0
        self.rows_skipped = 0
        self.skip_reasons = Counter()
        self.last_source = None
        self.last_error = None
        self.last_loaded_at = None

        if self.metrics_file:
            self._restore()

    def record_attempt(self, source: str) -> None:
        self.loads_attempted += 1
        self.last_source = source

    def record_success(self, valid_rows: int, skipped_rows: int,
                       skip_reasons: Optional[Mapping[str, int]] = None) -> None:
        """Record a load that produced a dataset from the real source."""
        self.loads_succeeded += 1
        self.rows_valid += valid_rows
        self.rows_skipped += skipped_rows
        self.skip_reasons.update(skip_reasons or {})
        self.last_error = None
        self.last_loaded_at = datetime.now().isoformat()
        self._persist()

    def record_fallback(self, error: BaseException) -> None:
        """Record a load that had to substitute the synthetic dataset."""
        self.fallbacks_used += 1
        self.last_error = f"{type(error).__name__}: {error}"
        self.last_loaded_at = datetime.now().isoformat()
        logger.warning(f"Fallback dataset used ({self.fallbacks_used} so far): {self.last_error}")
        self._persist()

    def snapshot(self) -> Dict[str, Any]:
        """Current counters as a plain dictionary."""
        return {
            'loads_attempted': self.loads_attempted,
            'loads_succeeded': self.loads_succeeded,
            'fallbacks_used': self.fallbacks_used,
            'rows_valid': self.rows_valid,
            'rows_skipped': self.rows_skipped,
            'skip_reasons': dict(self.skip_reasons),
            'last_source': self.last_source,
            'last_error': self.last_error,
            'last_loaded_at': self.last_loaded_at
        }

    def _persist(self) -> None:
        """Save counters to the metrics file, if one is configured."""
        if not self.metrics_file:
            return
        try:
            self.metrics_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.metrics_file, 'w') as f:
                json.dump(self.snapshot(), f, indent=2, default=str)
            logger.debug(f"Saved load metrics to {self.metrics_file}")
        except OSError as e:
            logger.error(f"Failed to save load metrics: {e}")

    def _restore(self) -> None:
        """Load previously persisted counters; unreadable files leave them at zero."""
        try:
            if not self.metrics_file.exists():
                return
            with open(self.metrics_file, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")

            loads_attempted = int(data.get('loads_attempted', 0))
            loads_succeeded = int(data.get('loads_succeeded', 0))
            fallbacks_used = int(data.get('fallbacks_used', 0))
            rows_valid = int(data.get('rows_valid', 0))
            rows_skipped = int(data.get('rows_skipped', 0))
            skip_reasons = Counter({
                str(reason): int(count)
                for reason, count in (data.get('skip_reasons') or {}).items()
            })
        except (OSError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Failed to load metrics file {self.metrics_file}: {e}")
            return

        self.loads_attempted = loads_attempted
        self.loads_succeeded = loads_succeeded
        self.fallbacks_used = fallbacks_used
        self.rows_valid = rows_valid
        self.rows_skipped = rows_skipped
        self.skip_reasons = skip_reasons
        self.last_source = data.get('last_source')
        self.last_error = data.get('last_error')
        self.last_loaded_at = data.get('last_loaded_at')
        logger.info(f"Restored load metrics from {self.metrics_file}")
