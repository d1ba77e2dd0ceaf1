"""Persistence helpers for style descriptions."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from config import STYLE_FORMAT_VERSION
from style.models import StyleDescription, StyleValueError, style_from_dict
from style.store import StyleStore

logger = logging.getLogger(__name__)

JSON_SUFFIXES = {".json"}


class StyleLoadError(Exception):
    """Raised when a persisted style document cannot be read or parsed."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


def _serialize_style(style: StyleDescription) -> Dict[str, Any]:
    data: Dict[str, Any] = {"format_version": STYLE_FORMAT_VERSION}
    data.update(style.to_dict())
    return data


def save_style(style: StyleDescription, path: Path) -> Path:
    """Persist a style as YAML (or JSON when the path ends with .json)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = _serialize_style(style)
    if path.suffix.lower() in JSON_SUFFIXES:
        text = json.dumps(data, ensure_ascii=False, indent=2)
    else:
        text = yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
    path.write_text(text, encoding="utf-8")
    return path


def _read_document(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StyleLoadError(path, f"cannot read file ({exc})") from exc

    try:
        if path.suffix.lower() in JSON_SUFFIXES:
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise StyleLoadError(path, f"malformed document ({exc})") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StyleLoadError(path, f"expected a mapping, got {type(data).__name__}")
    return data


def load_style(path: Path) -> StyleDescription:
    """Load a style document; missing keys keep their defaults."""
    path = Path(path)
    data = _read_document(path)
    version = data.pop("format_version", STYLE_FORMAT_VERSION)
    if version != STYLE_FORMAT_VERSION:
        logger.warning("Style %s has format version %r, expected %s", path, version, STYLE_FORMAT_VERSION)
    try:
        return style_from_dict(data)
    except StyleValueError as exc:
        raise StyleLoadError(path, str(exc)) from exc


def load_style_into(store: StyleStore, path: Path) -> StyleDescription:
    """
    Load a document and replace the store's style with it.

    The store is only touched once the whole document parsed successfully.
    """
    style = load_style(path)
    store.replace(style)
    return style
