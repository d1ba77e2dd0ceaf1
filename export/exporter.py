"""Export pipeline: style -> scene -> SVG -> PNG / ICO files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from PySide6 import QtGui

from config import ICON_SIZES, app_config, has_font_family, register_downloaded_fonts
from export.ico import IconEncodeError, encode
from export.rasterizer import RasterizationError, ensure_gui_application, rasterize, rasterize_all
from fonts.embedder import FontFetchError, fetch_font_subsets, inline_font_css
from render.composer import compose
from render.serializer import serialize
from style.models import StyleDescription

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("svg", "png", "ico")


class ExportError(RuntimeError):
    """Raised when an export cannot be rendered or written."""


def format_for_path(path: Path, default: str = "ico") -> str:
    suffix = Path(path).suffix.lower().lstrip(".")
    return suffix if suffix in EXPORT_FORMATS else default


def build_markup(
    style: StyleDescription,
    embed_fonts: Optional[bool] = None,
    register_fonts: bool = False,
) -> str:
    """
    Compose and serialize `style`.

    With embedding on, the web font stylesheet is inlined; `register_fonts`
    also hands the downloaded binaries to Qt so rasterization can use them.
    """
    scene = compose(style)
    markup = serialize(scene)
    if embed_fonts is None:
        embed_fonts = app_config.embed_fonts
    if not embed_fonts or scene.font_import_url is None:
        return markup

    try:
        embedded = fetch_font_subsets(style.font, timeout=app_config.font_timeout_sec)
    except FontFetchError as exc:
        logger.warning("Failed to embed font %s: %s", style.font, exc)
        return markup
    if embedded is None:
        return markup

    if register_fonts and embedded.subsets:
        families = register_downloaded_fonts((s.data for s in embedded.subsets), source=embedded.family)
        logger.debug("Registered %s for rasterization", ", ".join(sorted(set(families))) or "no families")
    return inline_font_css(markup, embedded.css)


def warn_if_font_missing(family: str) -> bool:
    """Log when Qt cannot resolve `family`; return whether it is available."""
    if has_font_family(family):
        return True
    ensure_gui_application()
    if family in QtGui.QFontDatabase.families():
        return True
    logger.warning("Font %s is not available to Qt; rasterized text uses a fallback family", family)
    return False


def _write(path: Path, data: bytes) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise ExportError(f"Cannot write {path}: {exc}") from exc
    logger.info("Wrote %s (%s bytes)", path, len(data))
    return path


def export_svg(style: StyleDescription, path: Path, embed_fonts: Optional[bool] = None) -> Path:
    """Write the standalone SVG document for `style`."""
    markup = build_markup(style, embed_fonts=embed_fonts)
    return _write(path, markup.encode("utf-8"))


def export_png(
    style: StyleDescription,
    path: Path,
    size: Optional[int] = None,
    embed_fonts: Optional[bool] = None,
) -> Path:
    """Write a single PNG rendering of `style` (preview size by default)."""
    size = size or app_config.preview_size
    markup = build_markup(style, embed_fonts=embed_fonts, register_fonts=True)
    warn_if_font_missing(style.font)
    try:
        data = rasterize(markup, size)
    except RasterizationError as exc:
        raise ExportError(f"Rendering at {size}px failed: {exc}") from exc
    return _write(path, data)


def export_ico(
    style: StyleDescription,
    path: Path,
    sizes: Sequence[int] = ICON_SIZES,
    embed_fonts: Optional[bool] = None,
) -> Path:
    """Write a multi-resolution icon container. Nothing is written on failure."""
    markup = build_markup(style, embed_fonts=embed_fonts, register_fonts=True)
    warn_if_font_missing(style.font)
    try:
        rasters = rasterize_all(markup, sizes)
        data = encode(rasters, sizes)
    except (RasterizationError, IconEncodeError) as exc:
        raise ExportError(f"Icon export failed: {exc}") from exc
    return _write(path, data)


def export_style(
    style: StyleDescription,
    path: Path,
    fmt: Optional[str] = None,
    size: Optional[int] = None,
    sizes: Sequence[int] = ICON_SIZES,
    embed_fonts: Optional[bool] = None,
) -> Path:
    """Dispatch on `fmt` (or the path suffix) to the matching exporter."""
    fmt = (fmt or format_for_path(path)).lower()
    if fmt == "svg":
        return export_svg(style, path, embed_fonts=embed_fonts)
    if fmt == "png":
        return export_png(style, path, size=size, embed_fonts=embed_fonts)
    if fmt == "ico":
        return export_ico(style, path, sizes=sizes, embed_fonts=embed_fonts)
    raise ExportError(f"Unsupported export format: {fmt}")
