"""
Configuration management for the outline pipeline.

Usage:
    from infra.config import SettingsManager, load_settings

    settings = load_settings("outliner.yaml")
    settings.split.max_pages_per_node  # 15 unless overridden

    from infra.config import get_settings
    settings = get_settings()  # cached, located by OUTLINER_CONFIG
"""

from .schemas import (
    LLMSettings,
    TocSettings,
    StructureSettings,
    SplitSettings,
    VerifySettings,
    RepairSettings,
    OutlineSettings,
    resolve_env_vars,
)

from .settings_config import (
    CONFIG_FILENAME,
    ConfigError,
    SettingsManager,
    load_settings,
)

from .runtime import (
    get_config_path,
    get_settings,
    get_api_key,
    reload_settings,
)


__all__ = [
    # Schemas
    "LLMSettings",
    "TocSettings",
    "StructureSettings",
    "SplitSettings",
    "VerifySettings",
    "RepairSettings",
    "OutlineSettings",
    "resolve_env_vars",
    # Settings file
    "CONFIG_FILENAME",
    "ConfigError",
    "SettingsManager",
    "load_settings",
    # Runtime
    "get_config_path",
    "get_settings",
    "get_api_key",
    "reload_settings",
]
