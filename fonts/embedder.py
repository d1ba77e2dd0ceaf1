"""Inline web fonts into exported SVG markup as data URIs."""
from __future__ import annotations

import base64
import http.client
import logging
import re
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from xml.sax.saxutils import escape

from config import app_config
from fonts.presets import get_web_font

logger = logging.getLogger(__name__)

# Google Fonts serves woff2 only to browsers it recognizes.
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)

_CSS_URL_RE = re.compile(r"url\(([^)]+)\)")
_IMPORT_RE = re.compile(r"<style>@import url\('[^']+'\);</style>")

_MIME_BY_SUFFIX = {
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
}

Fetcher = Callable[[str, float], bytes]


class FontFetchError(RuntimeError):
    """Raised when a stylesheet or font binary cannot be downloaded."""


@dataclass
class FontSubset:
    url: str
    data: bytes

    @property
    def mime_type(self) -> str:
        path = self.url.split("?", 1)[0].lower()
        for suffix, mime in _MIME_BY_SUFFIX.items():
            if path.endswith(suffix):
                return mime
        return "application/octet-stream"

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass
class EmbeddedFont:
    family: str
    css: str  # stylesheet with every reachable url() inlined
    subsets: List[FontSubset] = field(default_factory=list)


def http_fetch(url: str, timeout: float) -> bytes:
    """Download `url` and return the raw body."""
    try:
        request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT}, method="GET")
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return response.read()
    except urllib.error.HTTPError as exc:  # noqa: BLE001
        raise FontFetchError(f"HTTP {exc.code}: {exc.reason}") from exc
    except urllib.error.URLError as exc:  # noqa: BLE001
        raise FontFetchError(str(exc)) from exc
    except OSError as exc:
        raise FontFetchError(str(exc)) from exc
    except (ValueError, http.client.HTTPException) as exc:
        raise FontFetchError(str(exc)) from exc


def fetch_font_subsets(
    font: str,
    timeout: Optional[float] = None,
    fetch: Fetcher = http_fetch,
) -> Optional[EmbeddedFont]:
    """
    Download the stylesheet of a known web font and every binary it references.

    Returns None for fonts without a web source. Raises FontFetchError when the
    stylesheet itself is unavailable; a subset that fails to download keeps its
    remote url() and is logged.
    """
    web_font = get_web_font(font)
    if web_font is None:
        return None
    if timeout is None:
        timeout = app_config.font_timeout_sec

    css = fetch(web_font.css_url, timeout).decode("utf-8", errors="replace")
    subsets: List[FontSubset] = []

    def _inline(match: re.Match) -> str:
        url = match.group(1).strip().strip("'\"")
        if url.startswith("data:"):
            return match.group(0)
        try:
            subset = FontSubset(url=url, data=fetch(url, timeout))
        except FontFetchError as exc:
            logger.warning("Failed to fetch font subset %s: %s", url, exc)
            return match.group(0)
        subsets.append(subset)
        return f"url('{subset.data_uri()}')"

    css = _CSS_URL_RE.sub(_inline, css)
    return EmbeddedFont(family=web_font.family, css=css, subsets=subsets)


def inline_font_css(markup: str, css: str) -> str:
    """Replace the @import placeholder style block with `css`."""
    block = f"<style>{escape(css)}</style>"
    return _IMPORT_RE.sub(lambda _match: block, markup, count=1)


def fetch_and_inline_font(
    font: str,
    markup: str,
    timeout: Optional[float] = None,
    fetch: Fetcher = http_fetch,
) -> str:
    """
    Return `markup` with the font's stylesheet embedded.

    Unknown fonts and network failures leave the markup unchanged.
    """
    try:
        embedded = fetch_font_subsets(font, timeout=timeout, fetch=fetch)
    except FontFetchError as exc:
        logger.warning("Failed to embed font %s: %s", font, exc)
        return markup
    if embedded is None:
        return markup
    return inline_font_css(markup, embedded.css)
