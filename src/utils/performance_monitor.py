# ========================
# src/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks wall time, throughput, and process memory of pipeline stages.
"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

import psutil

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Performance monitoring utility for one pipeline stage.
    Tracks memory usage, processing time, and throughput.
    """

    def __init__(self, name: str = "Pipeline"):
        """
        Initialize performance monitor.

        Args:
            name (str): Name for this monitoring session
        """
        self.name = name
        self.start_time = None
        self.end_time = None
        self.peak_memory_mb = 0.0
        self.records_processed = 0
        self.summary: Optional[Dict[str, Any]] = None

        logger.debug(f"PerformanceMonitor initialized: {name}")

    def start_monitoring(self) -> None:
        """Start performance monitoring."""
        self.start_time = time.time()
        self.peak_memory_mb = self._get_memory_usage_mb()
        logger.debug(f"{self.name} - monitoring started, memory: {self.peak_memory_mb:.2f} MB")

    def update_progress(self, records: int) -> None:
        """
        Update progress tracking.

        Args:
            records (int): Number of records handled since the last update
        """
        self.records_processed += records
        self.peak_memory_mb = max(self.peak_memory_mb, self._get_memory_usage_mb())

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_time = time.time()
        self.peak_memory_mb = max(self.peak_memory_mb, self._get_memory_usage_mb())
        total_time = self.end_time - self.start_time if self.start_time else 0
        throughput = self.records_processed / total_time if total_time > 0 else 0

        self.summary = {
            'name': self.name,
            'total_processing_time_seconds': total_time,
            'records_processed': self.records_processed,
            'average_throughput_records_per_second': throughput,
            'peak_memory_usage_mb': self.peak_memory_mb
        }

        logger.info(
            f"{self.name} - {self.records_processed:,} records in {total_time:.3f}s "
            f"({throughput:.0f} records/sec), peak memory {self.peak_memory_mb:.2f} MB"
        )
        return self.summary

    def _get_memory_usage_mb(self) -> float:
        """Get current resident memory of this process in MB."""
        try:
            process = psutil.Process(os.getpid())
            return process.memory_info().rss / (1024 * 1024)
        except psutil.Error as e:
            logger.debug(f"Could not get memory usage: {e}")
            return 0.0


@contextmanager
def monitor_performance(name: str = "Pipeline"):
    """
    Context manager for easy performance monitoring.

    Args:
        name (str): Name for this monitoring session

    Yields:
        PerformanceMonitor: Monitor instance
    """
    monitor = PerformanceMonitor(name)
    monitor.start_monitoring()
    try:
        yield monitor
    finally:
        monitor.stop_monitoring()


def get_system_stats() -> Dict[str, Any]:
    """Get current process and host memory figures for health reporting."""
    stats = {}
    try:
        process = psutil.Process(os.getpid())
        memory = psutil.virtual_memory()
        stats['process_memory_mb'] = process.memory_info().rss / (1024 * 1024)
        stats['memory_available_gb'] = memory.available / (1024 ** 3)
        stats['memory_used_percent'] = memory.percent
        stats['cpu_count'] = psutil.cpu_count()
    except psutil.Error as e:
        logger.warning(f"Could not get system stats: {e}")
    return stats
