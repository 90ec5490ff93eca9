"""
Configuration service for bbox-overlay.
Holds the palette, provenance label and cache settings, loaded from a
JSON or YAML file.
"""

from __future__ import annotations
from typing import Dict, Any, List, Optional
from pathlib import Path
import json
import re

import yaml
from pydantic import BaseModel, Field, ValidationError, confloat, conint, field_validator

from .interfaces import IConfigService, ILogger
from .logging_service import LogLevel
from ..core.palette import DEFAULT_FILL_ALPHA, DEFAULT_PALETTE

_HEX_COLOR = re.compile(r'^#[0-9a-fA-F]{6}$')


class LoggingConfig(BaseModel):
    console_level: LogLevel = LogLevel.WARNING
    file_level: LogLevel = LogLevel.DEBUG


class AppConfig(BaseModel):
    palette: List[str] = Field(default_factory=lambda: list(DEFAULT_PALETTE))
    fill_alpha: confloat(ge=0.0, le=1.0) = DEFAULT_FILL_ALPHA
    pasted_source_label: str = "pasted JSON"
    resolution_cache_size: conint(ge=1) = 4096
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("palette")
    @classmethod
    def _check_palette(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("palette must not be empty")
        bad = [c for c in value if not _HEX_COLOR.match(c)]
        if bad:
            raise ValueError(f"invalid palette colors: {bad}")
        return value


def _read_mapping(path: Path) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        if path.suffix.lower() in ('.yaml', '.yml'):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    return data or {}


class ConfigService(IConfigService):
    """Concrete implementation of configuration service."""

    def __init__(self, logger: ILogger, config_file: Optional[Path] = None):
        self._logger = logger
        self._config_file = config_file
        self._config = AppConfig()
        if config_file is not None:
            self._load_config_from_file()

    @property
    def config(self) -> AppConfig:
        return self._config

    def _load_config_from_file(self) -> None:
        if not self._config_file.exists():
            self._logger.info("No config file found, using defaults", path=self._config_file)
            return

        try:
            self._config = AppConfig.model_validate(_read_mapping(self._config_file))
            self._logger.info(f"Loaded configuration from: {self._config_file}")
        except (OSError, ValueError, yaml.YAMLError) as e:
            # ValidationError and JSONDecodeError are both ValueErrors
            self._logger.error(f"Failed to load config from {self._config_file}", exception=e)
            self._config = AppConfig()

    def load_config(self) -> Dict[str, Any]:
        return self._config.model_dump(mode="json")

    def save_config(self, config: Dict[str, Any]) -> bool:
        try:
            self._config = AppConfig.model_validate(config)
        except ValidationError as e:
            self._logger.error("Rejected invalid configuration", exception=e)
            return False

        if self._config_file is None:
            return True

        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, 'w', encoding='utf-8') as f:
                json.dump(self.load_config(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            self._logger.error(f"Failed to save config to {self._config_file}", exception=e)
            return False

        self._logger.info(f"Saved configuration to: {self._config_file}")
        return True

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value using dot notation, e.g. 'logging.console_level'."""
        value: Any = self._config
        for part in key.split('.'):
            if not hasattr(value, part):
                return default
            value = getattr(value, part)
        return value

    def set_setting(self, key: str, value: Any) -> None:
        """Set a setting value using dot notation; invalid values are rejected."""
        data = self.load_config()
        parts = key.split('.')
        node = data
        for part in parts[:-1]:
            if not isinstance(node.get(part), dict):
                self._logger.warning(f"Setting path not found: {key}")
                return
            node = node[part]
        if parts[-1] not in node:
            self._logger.warning(f"Setting key not found: {key}")
            return
        node[parts[-1]] = value

        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            self._logger.error(f"Failed to set setting '{key}'", exception=e)
            return
        self._logger.debug(f"Set setting '{key}' = {value}")

    def export_config(self, export_path: Path) -> bool:
        """Write the active configuration as JSON, or YAML for .yaml/.yml paths."""
        config_dict = self.load_config()
        try:
            with open(export_path, 'w', encoding='utf-8') as f:
                if export_path.suffix.lower() in ('.yaml', '.yml'):
                    yaml.safe_dump(config_dict, f, default_flow_style=False)
                else:
                    json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            self._logger.error(f"Failed to export config to {export_path}", exception=e)
            return False

        self._logger.info(f"Exported configuration to: {export_path}")
        return True

    def import_config(self, import_path: Path) -> bool:
        if not import_path.exists():
            self._logger.error(f"Config file not found: {import_path}")
            return False

        try:
            config_dict = _read_mapping(import_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            self._logger.error(f"Failed to import config from {import_path}", exception=e)
            return False

        success = self.save_config(config_dict)
        if success:
            self._logger.info(f"Imported configuration from: {import_path}")
        return success
