"""
Helper utilities for the Est launcher.

Provides common functions used across handlers and the entry point:
- Settings loading (TOML, merged over defaults)
- Opening URLs in the default browser
"""

import copy
import os
import subprocess
from pathlib import Path
from typing import Dict, Any, Optional

import toml
from loguru import logger

DEFAULT_SETTINGS: Dict[str, Any] = {
    "est": {
        "endpoint": "https://est.tomyxw.me/",
    },
    "suggestions": {
        "enabled": True,
        "timeout": 5.0,
        "max_workers": 2,
    },
    "engines": {
        "max_completions": 12,
        "fuzzy_threshold": 60,
        "timeout": 5.0,
    },
}

SETTINGS_FILENAME = "settings.toml"


def locate_settings_file(path: Optional[Path] = None) -> Optional[Path]:
    """
    Find the settings file to load.

    Lookup order: explicit path, ./settings.toml,
    $XDG_CONFIG_HOME/est/settings.toml (~/.config when unset).

    Returns:
        The first existing path, or None
    """
    if path is not None:
        return Path(path) if Path(path).exists() else None

    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    candidates = [
        Path.cwd() / SETTINGS_FILENAME,
        Path(config_home) / "est" / SETTINGS_FILENAME,
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load launcher settings from TOML file.

    Args:
        path: Optional explicit settings file

    Returns:
        Dictionary containing settings with defaults applied

    Example settings structure:
        {
            "est": {"endpoint": "https://est.tomyxw.me/"},
            "suggestions": {"enabled": True, "timeout": 5.0, "max_workers": 2},
            "engines": {"max_completions": 12, "fuzzy_threshold": 60, "timeout": 5.0}
        }
    """
    settings_path = locate_settings_file(path)
    if settings_path is None:
        logger.info("Settings file not found, using defaults")
        return copy.deepcopy(DEFAULT_SETTINGS)

    try:
        loaded = toml.load(settings_path)
    except (toml.TomlDecodeError, OSError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}, using defaults")
        return copy.deepcopy(DEFAULT_SETTINGS)

    logger.debug(f"Loaded settings from {settings_path}")
    return _deep_merge(copy.deepcopy(DEFAULT_SETTINGS), loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def open_url(url: str) -> bool:
    """
    Open URL in the default browser via xdg-open.

    Returns:
        True if the browser was spawned
    """
    try:
        subprocess.Popen(
            ["xdg-open", url],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        logger.warning("xdg-open not found, cannot open URL")
        return False

    logger.debug(f"Opened {url}")
    return True
