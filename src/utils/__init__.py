# ========================
# src/utils/__init__.py
# ========================

"""
Utilities Package

Common utilities and helper functions for the RSP pipeline.
"""

from .config import Config
from .performance_monitor import monitor_performance, PerformanceMonitor, get_system_stats
from .load_metrics import LoadMetrics
from .logging_setup import setup_logging, get_logger
from .data_generator import DataGenerator

__all__ = [
    'Config',
    'monitor_performance',
    'PerformanceMonitor',
    'get_system_stats',
    'LoadMetrics',
    'setup_logging',
    'get_logger',
    'DataGenerator'
]
