"""
chartcore configuration management

Loads the indicator, preprocessing, decomposition and data configs.
"""

import json
import logging
from typing import Dict, Any, Optional
from pathlib import Path

import jsonschema

from chartcore.models.config import ChartConfig

logger = logging.getLogger(__name__)

CONFIG_FILES = {
    'indicators': 'indicators.json',
    'preprocessing': 'preprocessing.json',
    'decomposition': 'decomposition.json',
    'data': 'data.json'
}


class ConfigLoader:
    """Loads and manages chart configurations."""

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize configuration loader.

        Args:
            config_dir: Directory containing configuration files (defaults to this package)
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).resolve().parent
        self.configs = {}
        self._load_all_configs()

    def _load_all_configs(self) -> None:
        """Load all configuration files."""
        for config_name in CONFIG_FILES:
            self.configs[config_name] = self._load(config_name)

    def _load(self, config_name: str) -> Dict[str, Any]:
        """
        Load and validate one config.

        Missing files load as {}; parse or schema errors also load as {} with a
        warning so callers fall back to the dataclass defaults.
        """
        config_path = self.config_dir / CONFIG_FILES[config_name]
        if not config_path.exists():
            logger.warning("config_file_missing", extra={"config": config_name, "path": str(config_path)})
            return {}
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            schema_path = self.config_dir / f'{config_name}.schema.json'
            if schema_path.exists():
                with open(schema_path, 'r', encoding='utf-8') as sf:
                    schema = json.load(sf)
                jsonschema.validate(instance=data, schema=schema)
            return data
        except (OSError, json.JSONDecodeError, jsonschema.ValidationError, jsonschema.SchemaError) as e:
            logger.warning("config_load_failed", extra={"config": config_name, "error": str(e)})
            return {}

    def get_config(self, config_name: str) -> Dict[str, Any]:
        """
        Get configuration by name.

        Args:
            config_name: Name of configuration

        Returns:
            Configuration dictionary
        """
        return self.configs.get(config_name, {})

    def get_all_configs(self) -> Dict[str, Dict[str, Any]]:
        """
        Get all configurations.

        Returns:
            Dictionary of all configurations
        """
        return self.configs.copy()

    def reload_config(self, config_name: str) -> None:
        """
        Reload specific configuration.

        Args:
            config_name: Name of configuration to reload
        """
        if config_name in CONFIG_FILES:
            self.configs[config_name] = self._load(config_name)

    def chart_config(self, timeframe: Optional[str] = None) -> ChartConfig:
        """Typed configuration for one pipeline run."""
        return ChartConfig.from_dicts(
            indicators=self.get_config('indicators'),
            preprocessing=self.get_config('preprocessing'),
            decomposition=self.get_config('decomposition'),
            timeframe=timeframe,
        )


# Global configuration loader instance
config_loader = ConfigLoader()
