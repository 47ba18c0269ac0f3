"""
Settings file loading and management.

The settings file is YAML (default: ./outliner.yaml) and may contain any subset of
OutlineSettings; missing sections fall back to defaults.
"""

from pathlib import Path
from typing import Optional, Union
import yaml

from .schemas import OutlineSettings


CONFIG_FILENAME = "outliner.yaml"


class ConfigError(Exception):
    """Raised for unusable configuration (bad YAML, missing credentials)."""


class SettingsManager:
    """
    Manages one settings file.

    Usage:
        manager = SettingsManager(Path("outliner.yaml"))
        settings = manager.load()  # Returns OutlineSettings
        manager.save(settings)     # Persists to disk
    """

    def __init__(self, config_path: Union[str, Path]):
        self.config_path = Path(config_path).expanduser().resolve()

    def exists(self) -> bool:
        return self.config_path.exists()

    def load(self) -> OutlineSettings:
        """
        Load settings from disk.

        Returns defaults if the file doesn't exist.
        """
        if not self.config_path.exists():
            return OutlineSettings()

        try:
            with open(self.config_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Settings file must contain a mapping: {self.config_path}")

        return OutlineSettings.model_validate(data)

    def save(self, settings: OutlineSettings) -> None:
        """Save settings to disk, creating the parent directory if needed."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        data = settings.model_dump(mode="json", exclude_none=True)

        with open(self.config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def update(self, updates: dict) -> OutlineSettings:
        """
        Update specific top-level sections in the settings file.

        Nested dicts are merged one level deep, e.g. {"verify": {"sample_size": 5}}.
        """
        current = self.load().model_dump()
        for key, value in updates.items():
            if isinstance(value, dict) and isinstance(current.get(key), dict):
                current[key].update(value)
            else:
                current[key] = value

        settings = OutlineSettings.model_validate(current)
        self.save(settings)
        return settings


def load_settings(config_path: Optional[Union[str, Path]] = None) -> OutlineSettings:
    """Load settings from config_path, or ./outliner.yaml when not given."""
    path = Path(config_path) if config_path else Path.cwd() / CONFIG_FILENAME
    return SettingsManager(path).load()
