"""Web fonts the compositor knows how to embed."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

GOOGLE_FONTS_CSS = "https://fonts.googleapis.com/css2"


@dataclass(frozen=True)
class WebFont:
    family: str
    css_url: str
    label: str


WEB_FONTS: List[WebFont] = [
    WebFont(
        family="Material Icons",
        css_url="https://fonts.googleapis.com/icon?family=Material+Icons",
        label="Material Icons (ligatures)",
    ),
    WebFont(
        family="Noto Sans JP",
        css_url=f"{GOOGLE_FONTS_CSS}?family=Noto+Sans+JP:wght@400;700&display=swap",
        label="Sans (Japanese)",
    ),
    WebFont(
        family="Noto Serif JP",
        css_url=f"{GOOGLE_FONTS_CSS}?family=Noto+Serif+JP:wght@400;700&display=swap",
        label="Serif (Japanese)",
    ),
    WebFont(
        family="Noto Sans Symbols",
        css_url=f"{GOOGLE_FONTS_CSS}?family=Noto+Sans+Symbols&display=swap",
        label="Symbols",
    ),
    WebFont(
        family="Noto Sans Symbols 2",
        css_url=f"{GOOGLE_FONTS_CSS}?family=Noto+Sans+Symbols+2&display=swap",
        label="Symbols 2",
    ),
    WebFont(
        family="Noto Music",
        css_url=f"{GOOGLE_FONTS_CSS}?family=Noto+Music&display=swap",
        label="Music notation",
    ),
    WebFont(
        family="Noto Serif Hentaigana",
        css_url=f"{GOOGLE_FONTS_CSS}?family=Noto+Serif+Hentaigana&display=swap",
        label="Hentaigana",
    ),
    WebFont(
        family="Noto Sans Egyptian Hieroglyphs",
        css_url=f"{GOOGLE_FONTS_CSS}?family=Noto+Sans+Egyptian+Hieroglyphs&display=swap",
        label="Egyptian hieroglyphs",
    ),
    WebFont(
        family="Noto Color Emoji",
        css_url=f"{GOOGLE_FONTS_CSS}?family=Noto+Color+Emoji&display=swap",
        label="Emoji (color)",
    ),
    WebFont(
        family="Noto Emoji",
        css_url=f"{GOOGLE_FONTS_CSS}?family=Noto+Emoji:wght@400;700&display=swap",
        label="Emoji (monochrome)",
    ),
]

_BY_FAMILY: Dict[str, WebFont] = {font.family: font for font in WEB_FONTS}


def get_web_font(family: str | None) -> Optional[WebFont]:
    """Return the web font registered for `family`, or None for unknown fonts."""
    if not family:
        return None
    return _BY_FAMILY.get(family.strip())


def font_import_url(family: str | None) -> Optional[str]:
    """Return the stylesheet URL for a known family."""
    font = get_web_font(family)
    return font.css_url if font else None
