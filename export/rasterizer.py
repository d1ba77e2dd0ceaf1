"""Render SVG markup to PNG buffers with Qt's SVG renderer."""
from __future__ import annotations

import logging
import sys
from typing import Dict, Iterable

from PySide6 import QtCore, QtGui, QtSvg

logger = logging.getLogger(__name__)


class RasterizationError(RuntimeError):
    """Raised when markup cannot be turned into a bitmap."""


def ensure_gui_application() -> QtCore.QCoreApplication:
    """Text rendering needs a QGuiApplication; create one if none is running."""
    app = QtGui.QGuiApplication.instance()
    if app is None:
        app = QtGui.QGuiApplication(sys.argv[:1])
    return app


def render_image(markup: str, size_px: int) -> QtGui.QImage:
    """Paint `markup` scaled to a size_px square on a transparent image."""
    if size_px <= 0:
        raise RasterizationError(f"Invalid raster size: {size_px}")
    ensure_gui_application()

    renderer = QtSvg.QSvgRenderer(QtCore.QByteArray(markup.encode("utf-8")))
    if not renderer.isValid():
        raise RasterizationError("SVG markup could not be parsed")

    img = QtGui.QImage(size_px, size_px, QtGui.QImage.Format_ARGB32_Premultiplied)
    img.fill(QtCore.Qt.GlobalColor.transparent)
    painter = QtGui.QPainter(img)
    painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
    painter.setRenderHint(QtGui.QPainter.TextAntialiasing, True)
    painter.setRenderHint(QtGui.QPainter.SmoothPixmapTransform, True)
    renderer.render(painter, QtCore.QRectF(0, 0, size_px, size_px))
    painter.end()
    return img


def encode_png(img: QtGui.QImage) -> bytes:
    buffer = QtCore.QBuffer()
    buffer.open(QtCore.QIODevice.OpenModeFlag.WriteOnly)
    ok = img.save(buffer, "PNG")
    buffer.close()
    if not ok:
        raise RasterizationError("PNG encoding failed")
    return bytes(buffer.data())


def rasterize(markup: str, size_px: int) -> bytes:
    """Return a PNG buffer of `markup` rendered at size_px x size_px."""
    return encode_png(render_image(markup, size_px))


def rasterize_all(markup: str, sizes: Iterable[int]) -> Dict[int, bytes]:
    """Rasterize once per size, sequentially, smallest first."""
    rasters: Dict[int, bytes] = {}
    for size in sorted(set(sizes)):
        logger.debug("Rasterizing %spx", size)
        rasters[size] = rasterize(markup, size)
    return rasters
