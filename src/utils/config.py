# ========================
# src/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the RSP pipeline with environment support.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == '':
        return None
    return int(value)


class Config:
    """
    Configuration class for the RSP pipeline.
    Supports environment variables and default values.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides
        """
        # Data Source
        self.RSP_DATA_SOURCE = os.getenv('RSP_DATA_SOURCE', 'data/raw/rsp_metro_cities.csv')
        self.REQUEST_TIMEOUT_SECONDS = float(os.getenv('REQUEST_TIMEOUT_SECONDS', '30'))
        self.REQUIRE_CSV_CONTENT_TYPE = os.getenv('REQUIRE_CSV_CONTENT_TYPE', 'true').lower() == 'true'
        self.EXPECTED_CONTENT_TYPE = os.getenv('EXPECTED_CONTENT_TYPE', 'text/csv')

        # Fallback Dataset
        self.FALLBACK_SEED = _optional_int(os.getenv('FALLBACK_SEED'))

        # Data Quality Settings
        self.MAX_SKIPPED_ROW_RATE = float(os.getenv('MAX_SKIPPED_ROW_RATE', '0.5'))  # 50%

        # Observability
        self.METRICS_FILE = os.getenv('METRICS_FILE', '')

        # Sample Data Generation
        self.SAMPLE_ROWS = int(os.getenv('SAMPLE_ROWS', '5000'))

        # API Settings
        self.API_HOST = os.getenv('API_HOST', '0.0.0.0')
        self.API_PORT = int(os.getenv('API_PORT', '8000'))

        # Logging Configuration
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_DIR = os.getenv('LOG_DIR', 'logs')
        self.LOG_FILE = os.getenv('LOG_FILE', '')

        # Override with provided config
        if config_dict:
            self._update_from_dict(config_dict)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    @property
    def source_is_remote(self) -> bool:
        return self.RSP_DATA_SOURCE.lower().startswith(('http://', 'https://'))

    def get_data_paths(self) -> Dict[str, Path]:
        """Get all configured local paths as Path objects."""
        paths = {
            'raw_data_dir': Path('data/raw'),
            'logs_dir': Path(self.LOG_DIR)
        }
        if not self.source_is_remote:
            paths['input_file'] = Path(self.RSP_DATA_SOURCE)
        if self.METRICS_FILE:
            paths['metrics_file'] = Path(self.METRICS_FILE)
        return paths

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        for path_name, path in self.get_data_paths().items():
            if path_name.endswith('_dir'):
                path.mkdir(parents=True, exist_ok=True)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        validations['data_source'] = bool(self.RSP_DATA_SOURCE.strip())
        validations['request_timeout'] = self.REQUEST_TIMEOUT_SECONDS > 0
        validations['skipped_row_rate'] = 0.0 <= self.MAX_SKIPPED_ROW_RATE <= 1.0
        validations['sample_rows'] = self.SAMPLE_ROWS > 0
        validations['api_port'] = 1000 <= self.API_PORT <= 65535

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        validations['log_level'] = self.LOG_LEVEL.upper() in valid_log_levels

        return validations

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            attr: getattr(self, attr)
            for attr in dir(self)
            if attr.isupper() and not callable(getattr(self, attr))
        }

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'Config':
        """Load configuration from JSON file."""
        with open(file_path, 'r') as f:
            config_dict = json.load(f)
        return cls(config_dict)

    def __str__(self) -> str:
        """String representation of configuration."""
        lines = ["Configuration Settings:"]
        for key, value in sorted(self.to_dict().items()):
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
