from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

from PySide6.QtCore import QByteArray
from PySide6.QtGui import QFontDatabase

logger = logging.getLogger(__name__)

FONT_SUFFIXES = {".ttf", ".otf", ".woff", ".woff2"}


def _iter_font_files(fonts_dir: Path) -> list[Path]:
    """Return font files below `fonts_dir`, sorted; a missing directory is empty."""
    if not fonts_dir.is_dir():
        return []
    return sorted(path for path in fonts_dir.rglob("*") if path.suffix.lower() in FONT_SUFFIXES)


def _remember(registry: dict[str, dict[str, Any]], font_id: int, source: Any) -> list[str]:
    families = QFontDatabase.applicationFontFamilies(font_id)
    for family in families:
        # First source wins for a family so lookups stay deterministic.
        registry.setdefault(family, {"source": source, "font_id": font_id})
    return list(families)


def load_builtin_fonts(base_path: Path) -> dict[str, dict[str, Any]]:
    """
    Register fonts shipped in resources/fonts with Qt so offline rasterization
    can find the families a style names.

    Returns {family: {"source": Path, "font_id": int}}.
    """
    registry: dict[str, dict[str, Any]] = {}
    for font_path in _iter_font_files(base_path / "resources" / "fonts"):
        font_id = QFontDatabase.addApplicationFont(str(font_path))
        if font_id < 0:
            logger.warning("Qt rejected font file %s", font_path)
            continue
        _remember(registry, font_id, font_path)
    return registry


def register_font_data(blobs: Iterable[bytes], registry: dict[str, dict[str, Any]], source: str = "") -> list[str]:
    """Register downloaded font binaries with Qt; return the families they added."""
    added: list[str] = []
    for data in blobs:
        font_id = QFontDatabase.addApplicationFontFromData(QByteArray(data))
        if font_id < 0:
            logger.warning("Qt rejected downloaded font data from %s", source or "memory")
            continue
        added.extend(_remember(registry, font_id, source))
    return added
