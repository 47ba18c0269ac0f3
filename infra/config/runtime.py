"""
Runtime configuration access.

Single source of truth: the YAML settings file located by OUTLINER_CONFIG
(default ./outliner.yaml). A .env file in the working directory is loaded first
so ${ENV_VAR} references in the settings can be satisfied from it.
"""

import os
from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv

from .schemas import OutlineSettings
from .settings_config import CONFIG_FILENAME, load_settings


def get_config_path() -> Path:
    """Get the settings file path from environment."""
    return Path(os.getenv('OUTLINER_CONFIG', CONFIG_FILENAME)).expanduser().resolve()


@lru_cache(maxsize=1)
def get_settings() -> OutlineSettings:
    """
    Load and cache the settings.

    Returns defaults if the settings file doesn't exist.
    """
    load_dotenv()
    return load_settings(get_config_path())


def get_api_key() -> str:
    """Resolved oracle API key, or empty string if not configured."""
    return get_settings().llm.resolved_api_key()


def reload_settings() -> OutlineSettings:
    """Force reload of settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
