"""Command line entry point for the Glyph Icon Forge compositor."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from config import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_ICON_FILENAME,
    DEFAULT_STYLE_FILENAME,
    app_config,
    get_output_dir,
    init_fonts,
)
from export.exporter import EXPORT_FORMATS, ExportError, export_style, format_for_path
from export.rasterizer import ensure_gui_application
from settings_manager import apply_settings, export_sizes, load_settings
from style.models import StyleDescription, StyleValueError, normalize_key, style_from_dict
from style.session_io import StyleLoadError, load_style

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="glyph-icon-forge", description=f"{APP_NAME} {APP_VERSION}")
    parser.add_argument(
        "style",
        type=Path,
        nargs="?",
        default=Path(DEFAULT_STYLE_FILENAME),
        help=f"style document (.yaml or editor .json, default: {DEFAULT_STYLE_FILENAME})",
    )
    parser.add_argument("-o", "--output", type=Path, help="output file (default: output/icon.<format>)")
    parser.add_argument("--format", choices=EXPORT_FORMATS, help="output format (default: from --output, else ico)")
    parser.add_argument("--size", type=int, help="PNG size in pixels")
    parser.add_argument("--no-embed-fonts", action="store_true", help="keep the font @import instead of inlining")
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="override a style field, may be repeated",
    )
    return parser


def configure_logging(settings: Dict[str, Any]) -> None:
    level_name = str((settings.get("logging", {}) or {}).get("level", "INFO")).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def apply_overrides(style: StyleDescription, pairs: Sequence[str]) -> StyleDescription:
    """Apply KEY=VALUE overrides; raises StyleValueError on malformed input."""
    changes: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise StyleValueError(f"Override must look like key=value, got {pair!r}")
        if normalize_key(key) is None:
            raise StyleValueError(f"Unknown style field '{key}'")
        changes[key] = value
    return style_from_dict(changes, base=style)


def _default_output(settings: Dict[str, Any], fmt: str) -> Path:
    out_dir = (settings.get("export", {}) or {}).get("output_dir") or get_output_dir()
    return Path(out_dir) / Path(DEFAULT_ICON_FILENAME).with_suffix(f".{fmt}").name


def main(argv: Optional[List[str]] = None) -> int:
    """Render one style document; return 0 on success, 1 on failure."""
    args = build_parser().parse_args(argv)

    settings = load_settings()
    apply_settings(settings)
    configure_logging(settings)

    ensure_gui_application()
    init_fonts()

    try:
        style = load_style(args.style)
        style = apply_overrides(style, args.overrides)
    except (StyleLoadError, StyleValueError) as exc:
        logger.error("%s", exc)
        return 1

    if args.output is not None:
        fmt = args.format or format_for_path(args.output)
        output = args.output
    else:
        fmt = args.format or "ico"
        output = _default_output(settings, fmt)

    try:
        export_style(
            style,
            output,
            fmt=fmt,
            size=args.size,
            sizes=export_sizes(settings),
            embed_fonts=app_config.embed_fonts and not args.no_embed_fonts,
        )
    except ExportError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
