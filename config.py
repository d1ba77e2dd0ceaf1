"""Default configuration for the Glyph Icon Forge compositor."""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from fonts.loader import load_builtin_fonts, register_font_data

# Application identity
APP_NAME = "Glyph Icon Forge"
APP_VERSION = "0.1.0"

# Paths
BASE_PATH = Path(__file__).resolve().parent
DEFAULT_OUTPUT_DIR = BASE_PATH / "output"
DEFAULT_DOCS_DIR = BASE_PATH / "docs"

# Canvas every shape and effect is laid out on
CANVAS_SIZE = 256
CANVAS_CENTER = CANVAS_SIZE / 2

# Sizes baked into the icon container, smallest first
ICON_SIZES: Tuple[int, ...] = (16, 32, 48, 64, 128, 256)

# Style documents
STYLE_FORMAT_VERSION = 1
DEFAULT_STYLE_FILENAME = "icon_settings.yaml"
DEFAULT_ICON_FILENAME = "icon.ico"


@dataclass
class AppConfig:
    embed_fonts: bool = True
    font_timeout_sec: float = 20.0
    preview_size: int = 256


# Runtime font registry populated at startup.
FONTS_REGISTRY: Dict[str, Dict[str, Any]] = {}
app_config = AppConfig()


def init_fonts() -> None:
    """Load bundled fonts into the global registry."""
    FONTS_REGISTRY.clear()
    FONTS_REGISTRY.update(load_builtin_fonts(BASE_PATH))


def register_downloaded_fonts(blobs: Iterable[bytes], source: str = "") -> List[str]:
    """Add fetched font binaries to Qt and the global registry."""
    return register_font_data(blobs, FONTS_REGISTRY, source)


def has_font_family(family: str) -> bool:
    """Check whether a font family is available in the loaded registry."""
    return bool(family) and family in FONTS_REGISTRY


def get_output_dir() -> Path:
    """Return the default directory exports are written to."""
    return DEFAULT_OUTPUT_DIR
