"""Style description driving the icon compositor."""
from __future__ import annotations

import logging
import math
from copy import deepcopy
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

SHADOW_TYPES = ("drop", "long")


class StyleValueError(ValueError):
    """Raised when a persisted style value cannot be coerced to its field type."""


@dataclass
class StyleDescription:
    """
    Flat bag of style parameters.

    Opacities are 0..100, angles are degrees, offsets are canvas units.
    """

    # Text
    text: str = "M"
    font: str = "Noto Sans JP"
    font_size_scale: float = 100  # percent of the base glyph size
    offset_x: float = 0
    offset_y: float = 0
    rotate: float = 0
    font_weight: bool = False  # bold
    font_style: bool = False  # italic
    text_color: str = "#ffffff"
    text_gradient_enabled: bool = False
    text_gradient_color: str = "#cccccc"
    text_gradient_opacity: float = 50

    # Shape
    shape: str = "hexagon"
    shape_scale: float = 90  # percent, about the canvas center
    bg_color: str = "#6200ee"

    # Light source shared by every directional effect
    global_shadow_angle: float = 45

    # Outer shape shadow
    shape_shadow_enabled: bool = False
    shape_shadow_color: str = "#000000"
    shape_shadow_opacity: float = 50
    shape_shadow_blur: bool = True
    shape_shadow_distance: float = 4

    # Inner shape shadow
    shape_inner_shadow_enabled: bool = False
    shape_inner_shadow_color: str = "#ffffff"
    shape_inner_shadow_opacity: float = 50
    shape_inner_shadow_blur: bool = True
    shape_inner_shadow_distance: float = 4

    bg_gradient_enabled: bool = False
    bg_gradient_color: str = "#000000"
    bg_gradient_opacity: float = 20

    # Text shadow: "drop" offsets a blurred copy, "long" streaks clones
    shadow_enabled: bool = True
    shadow_type: str = "long"
    shadow_color: str = "#000000"
    shadow_opacity: float = 40
    shadow_distance: float = 8  # drop distance or long-shadow length
    shadow_blur: bool = False  # drop: blurred edge, long: fading streak

    outline_enabled: bool = False
    outline_color: str = "#ffffff"
    outline_opacity: float = 100
    outline_width: float = 4

    # Material finish
    finish_layer: bool = True
    finish_layer_opacity: float = 15
    edge_tint_shade: bool = True
    edge_opacity: float = 20
    edge_width: float = 2
    auto_color_harmony: bool = True

    score_enabled: bool = False
    score_opacity: float = 15
    score_angle: float = 180

    def snapshot(self) -> "StyleDescription":
        """Return an independent copy safe to hand to the compositor."""
        return deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Return a flat key/value mapping of every field."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


# camelCase keys written by the browser editor, plus the old long-shadow name.
LEGACY_KEYS: Dict[str, str] = {
    "fontSizeScale": "font_size_scale",
    "offsetX": "offset_x",
    "offsetY": "offset_y",
    "fontWeight": "font_weight",
    "fontStyle": "font_style",
    "textColor": "text_color",
    "textGradientEnabled": "text_gradient_enabled",
    "textGradientColor": "text_gradient_color",
    "textGradientOpacity": "text_gradient_opacity",
    "shapeScale": "shape_scale",
    "bgColor": "bg_color",
    "globalShadowAngle": "global_shadow_angle",
    "shapeShadowEnabled": "shape_shadow_enabled",
    "shapeShadowColor": "shape_shadow_color",
    "shapeShadowOpacity": "shape_shadow_opacity",
    "shapeShadowBlur": "shape_shadow_blur",
    "shapeShadowDistance": "shape_shadow_distance",
    "shapeInnerShadowEnabled": "shape_inner_shadow_enabled",
    "shapeInnerShadowColor": "shape_inner_shadow_color",
    "shapeInnerShadowOpacity": "shape_inner_shadow_opacity",
    "shapeInnerShadowBlur": "shape_inner_shadow_blur",
    "shapeInnerShadowDistance": "shape_inner_shadow_distance",
    "bgGradientEnabled": "bg_gradient_enabled",
    "bgGradientColor": "bg_gradient_color",
    "bgGradientOpacity": "bg_gradient_opacity",
    "shadowEnabled": "shadow_enabled",
    "shadowType": "shadow_type",
    "shadowColor": "shadow_color",
    "shadowOpacity": "shadow_opacity",
    "shadowDistance": "shadow_distance",
    "shadowLength": "shadow_distance",
    "shadow_length": "shadow_distance",
    "shadowBlur": "shadow_blur",
    "outlineEnabled": "outline_enabled",
    "outlineColor": "outline_color",
    "outlineOpacity": "outline_opacity",
    "outlineWidth": "outline_width",
    "finishLayer": "finish_layer",
    "finishLayerOpacity": "finish_layer_opacity",
    "edgeTintShade": "edge_tint_shade",
    "edgeOpacity": "edge_opacity",
    "edgeWidth": "edge_width",
    "autoColorHarmony": "auto_color_harmony",
    "scoreEnabled": "score_enabled",
    "scoreOpacity": "score_opacity",
    "scoreAngle": "score_angle",
}

_FIELD_TYPES: Dict[str, type] = {
    f.name: type(f.default) for f in fields(StyleDescription)  # type: ignore[arg-type]
}


def normalize_key(key: str) -> Optional[str]:
    """Map a persisted key (snake_case or legacy camelCase) to a field name."""
    if key in _FIELD_TYPES:
        return key
    return LEGACY_KEYS.get(key)


def coerce_value(name: str, value: Any) -> Any:
    """Convert a raw persisted value to the type of the named field."""
    expected = _FIELD_TYPES[name]
    if expected is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "1", "yes", "on"):
            return True
        if isinstance(value, str) and value.strip().lower() in ("false", "0", "no", "off", ""):
            return False
        if isinstance(value, (int, float)):
            return bool(value)
        raise StyleValueError(f"Field '{name}' expects a boolean, got {value!r}")
    if expected is str:
        if value is None or isinstance(value, (dict, list)):
            raise StyleValueError(f"Field '{name}' expects a string, got {value!r}")
        return str(value)
    if isinstance(value, bool) or value is None:
        raise StyleValueError(f"Field '{name}' expects a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise StyleValueError(f"Field '{name}' expects a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise StyleValueError(f"Field '{name}' expects a finite number, got {value!r}")
    return int(number) if number.is_integer() else number


def style_from_dict(
    data: Mapping[str, Any],
    base: Optional[StyleDescription] = None,
) -> StyleDescription:
    """
    Build a style from a flat mapping, starting from `base` (or defaults).

    Unknown keys are skipped. The base is never mutated.
    """
    style = base.snapshot() if base is not None else StyleDescription()
    for raw_key, value in data.items():
        name = normalize_key(str(raw_key))
        if name is None:
            logger.debug("Skipping unknown style key %r", raw_key)
            continue
        setattr(style, name, coerce_value(name, value))
    return style


def default_style() -> StyleDescription:
    """Return a style populated with editor defaults."""
    return StyleDescription()
