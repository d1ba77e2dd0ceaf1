"""
Render a preview sheet for a style document.

The sheet shows the large preview next to every image of the icon container
at its native size. Run from the repository root:

    python -m tools.screenshot examples/style.yaml -o docs/preview.png
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from PySide6 import QtCore, QtGui

from config import DEFAULT_DOCS_DIR, ICON_SIZES, app_config, init_fonts
from export.exporter import build_markup
from export.ico import encode, extract_images
from export.rasterizer import RasterizationError, ensure_gui_application, render_image, rasterize_all
from style.session_io import StyleLoadError, load_style

logger = logging.getLogger(__name__)

MARGIN = 24
BACKGROUND = "#f4f4f4"


def compose_sheet(preview: QtGui.QImage, icons: List[QtGui.QImage]) -> QtGui.QImage:
    strip_width = sum(img.width() for img in icons) + MARGIN * max(len(icons) - 1, 0)
    width = MARGIN * 3 + preview.width() + strip_width
    height = MARGIN * 2 + max([preview.height()] + [img.height() for img in icons])

    sheet = QtGui.QImage(width, height, QtGui.QImage.Format_ARGB32_Premultiplied)
    sheet.fill(QtGui.QColor(BACKGROUND))
    painter = QtGui.QPainter(sheet)
    painter.drawImage(QtCore.QPointF(MARGIN, MARGIN), preview)
    x = MARGIN * 2 + preview.width()
    for img in icons:
        # Bottom-align the container images
        painter.drawImage(QtCore.QPointF(x, MARGIN + preview.height() - img.height()), img)
        x += img.width() + MARGIN
    painter.end()
    return sheet


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Render a preview sheet for a style document.")
    parser.add_argument("style", type=Path)
    parser.add_argument("-o", "--output", type=Path, default=DEFAULT_DOCS_DIR / "preview.png")
    parser.add_argument("--size", type=int, default=app_config.preview_size)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    ensure_gui_application()
    init_fonts()

    try:
        style = load_style(args.style)
    except StyleLoadError as exc:
        logger.error("%s", exc)
        return 1

    markup = build_markup(style, register_fonts=True)
    try:
        preview = render_image(markup, args.size)
        container = encode(rasterize_all(markup, ICON_SIZES))
    except RasterizationError as exc:
        logger.error("Preview failed: %s", exc)
        return 1

    # Read the images back out of the container so the sheet shows what ships
    icons = [
        QtGui.QImage.fromData(QtCore.QByteArray(data), "PNG")
        for _, data in sorted(extract_images(container).items())
    ]
    sheet = compose_sheet(preview, icons)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    if not sheet.save(str(args.output), "PNG"):
        logger.error("Cannot write %s", args.output)
        return 1
    logger.info("Preview saved to %s", args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
