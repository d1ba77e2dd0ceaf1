"""Utility helpers for loading and storing user settings in YAML."""
from __future__ import annotations

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

from config import ICON_SIZES, app_config

logger = logging.getLogger(__name__)

# Global config file placed next to the main sources.
CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

# Default shape of the settings tree used by the CLI and export pipeline.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "export": {
        "sizes": list(ICON_SIZES),
        "preview_size": 256,
        "output_dir": "",
    },
    "fonts": {
        "embed": True,
        "timeout_sec": 20,
    },
    "logging": {
        "level": "INFO",
    },
}


def _merge_dicts(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge two dictionaries without mutating the inputs."""
    merged = deepcopy(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(path: Path | None = None) -> Dict[str, Any]:
    """Load settings from config.yaml (or return defaults)."""
    config_path = path or CONFIG_PATH
    settings = deepcopy(DEFAULT_SETTINGS)
    if not config_path.is_file():
        return settings
    try:
        raw_data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring malformed settings file %s: %s", config_path, exc)
        return settings
    if not isinstance(raw_data, dict):
        logger.warning("Settings file %s must contain a mapping, using defaults", config_path)
        return settings
    return _merge_dicts(settings, raw_data)


def save_settings(settings: Dict[str, Any], path: Path | None = None) -> None:
    """Persist settings into config.yaml."""
    config_path = path or CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.safe_dump(settings, allow_unicode=True, sort_keys=False),
        encoding="utf-8",
    )


def apply_settings(settings: Dict[str, Any]) -> None:
    """Copy the runtime-relevant parts of the settings tree into app_config."""
    fonts = settings.get("fonts", {}) or {}
    export = settings.get("export", {}) or {}
    app_config.embed_fonts = bool(fonts.get("embed", True))
    try:
        app_config.font_timeout_sec = float(fonts.get("timeout_sec", 20))
    except (TypeError, ValueError):
        logger.warning("Invalid font timeout %r, keeping %s", fonts.get("timeout_sec"), app_config.font_timeout_sec)
    try:
        app_config.preview_size = int(export.get("preview_size", 256))
    except (TypeError, ValueError):
        logger.warning("Invalid preview size %r, keeping %s", export.get("preview_size"), app_config.preview_size)


def export_sizes(settings: Dict[str, Any]) -> tuple[int, ...]:
    """Return the configured icon sizes, falling back to the fixed container set."""
    raw = (settings.get("export", {}) or {}).get("sizes")
    if not isinstance(raw, (list, tuple)) or not raw:
        return ICON_SIZES
    sizes: list[int] = []
    for value in raw:
        try:
            sizes.append(int(value))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid export size %r", value)
    return tuple(sorted(set(sizes))) or ICON_SIZES
