"""Effect composer: resolves a style description into an ordered scene graph.

Drawing order, back to front:

1. shape fill, inside a group carrying the shape-effects filter
2. background gradient overlay      (inside the group)
3. finish-layer gloss               (inside the group)
4. edge tint and shade bands        (inside the group)
5. score overlay                    (inside the group)
6. long-shadow clones
7. drop-shadow glyph run
8. outline glyph run
9. main glyph run
10. text gradient glyph run

Every directional lighting effect reads the single `global_shadow_angle`.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from config import CANVAS_CENTER, CANVAS_SIZE
from fonts.presets import font_import_url
from geometry.shapes import Outline, outline
from render.color import harmony
from render.scene import (
    AlphaInvertPrimitive,
    ClipRegion,
    CompositePrimitive,
    Fill,
    Filter,
    FilterPrimitive,
    FloodPrimitive,
    FontSpec,
    GaussianBlurPrimitive,
    GradientOverlay,
    GradientStop,
    Group,
    Layer,
    LinearGradient,
    Mask,
    MergePrimitive,
    OffsetPrimitive,
    RadialGradient,
    SceneGraph,
    ShadowClone,
    Silhouette,
    TextGlyphRun,
)
from style.models import SHADOW_TYPES, StyleDescription

logger = logging.getLogger(__name__)

DEFAULT_LIGHT_ANGLE = 45
SINGLE_GLYPH_FONT_SIZE = 160
MULTI_GLYPH_FONT_SIZE = 120

SHAPE_SHADOW_DISTANCE = 4
SHAPE_SHADOW_BLUR = 4
TEXT_SHADOW_DISTANCE = 8
TEXT_SHADOW_BLUR = 6
MAX_LONG_SHADOW_CLONES = 512

GLOSS_OFFSET = 30  # percent of the shape box, toward the light angle
GLOSS_RADIUS = 60

WHITE = "#ffffff"
BLACK = "#000000"


@dataclass(frozen=True)
class Light:
    """Direction shared by every shadow and lighting gradient."""

    angle: float  # degrees

    @property
    def cos(self) -> float:
        return math.cos(math.radians(self.angle))

    @property
    def sin(self) -> float:
        return math.sin(math.radians(self.angle))

    def offset(self, distance: float) -> Tuple[float, float]:
        return (distance * self.cos, distance * self.sin)

    def rotated(self, degrees: float) -> "Light":
        return Light(self.angle + degrees)


# -------------------- value parsing --------------------
def _as_number(value: Any, default: float, name: str) -> float:
    """Lenient numeric parse: malformed values fall back to `default`."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s value %r, using %s", name, value, default)
        return float(default)
    if not math.isfinite(number):
        logger.warning("Invalid %s value %r, using %s", name, value, default)
        return float(default)
    return number


def _distance(value: Any, default: int, name: str) -> int:
    """Whole-unit distance; zero, negative or malformed values use `default`."""
    distance = int(_as_number(value, default, name))
    return distance if distance > 0 else default


def _alpha(value: Any, name: str, default: float = 100) -> float:
    """Map a 0..100 opacity to a 0..1 alpha."""
    return max(0.0, min(_as_number(value, default, name), 100.0)) / 100


def _axis(angle: float) -> Tuple[float, float, float, float]:
    """Gradient vector across a 0..100 box along `angle` degrees."""
    rad = math.radians(angle)
    cos, sin = math.cos(rad), math.sin(rad)
    return (50 - 50 * cos, 50 - 50 * sin, 50 + 50 * cos, 50 + 50 * sin)


def _reversed_axis(angle: float) -> Tuple[float, float, float, float]:
    x1, y1, x2, y2 = _axis(angle)
    return (x2, y2, x1, y1)


# -------------------- definitions --------------------
class _Definitions:
    """Definition layers in order of first use."""

    def __init__(self) -> None:
        self.layers: List[Layer] = []

    def use(self, definition):
        if definition is not None and definition not in self.layers:
            self.layers.append(definition)
        return definition


def _shadow_chain(
    prefix: str,
    source: str,
    dx: float,
    dy: float,
    std_deviation: float,
    color: str,
    opacity: float,
) -> Tuple[FilterPrimitive, ...]:
    """Blur the source alpha, offset it and tint it; result is named `prefix`."""
    return (
        GaussianBlurPrimitive(input=source, std_deviation=std_deviation, result=f"{prefix}Blur"),
        OffsetPrimitive(input=f"{prefix}Blur", dx=dx, dy=dy, result=f"{prefix}Offset"),
        FloodPrimitive(color=color, opacity=opacity, result=f"{prefix}Flood"),
        CompositePrimitive(input=f"{prefix}Flood", input2=f"{prefix}Offset", operator="in", result=prefix),
    )


def _inner_shadow_chain(dx: float, dy: float, std_deviation: float, color: str, opacity: float) -> Tuple[FilterPrimitive, ...]:
    return (
        AlphaInvertPrimitive(input="SourceAlpha", result="invertedAlpha"),
        GaussianBlurPrimitive(input="invertedAlpha", std_deviation=std_deviation, result="blurredInverted"),
        OffsetPrimitive(input="blurredInverted", dx=dx, dy=dy, result="offsetBlurred"),
        CompositePrimitive(input="offsetBlurred", input2="SourceAlpha", operator="in", result="innerShadowAlpha"),
        FloodPrimitive(color=color, opacity=opacity, result="innerFlood"),
        CompositePrimitive(input="innerFlood", input2="innerShadowAlpha", operator="in", result="innerShadow"),
    )


def _shape_effects_filter(style: StyleDescription, light: Light) -> Optional[Filter]:
    """Outer drop shadow and inner shadow merged around the source graphic."""
    primitives: List[FilterPrimitive] = []
    merge_inputs: List[str] = []

    if style.shape_shadow_enabled:
        dist = _distance(style.shape_shadow_distance, SHAPE_SHADOW_DISTANCE, "shape shadow distance")
        dx, dy = light.offset(dist)
        primitives.extend(
            _shadow_chain(
                "dropShadow",
                "SourceAlpha",
                dx,
                dy,
                SHAPE_SHADOW_BLUR if style.shape_shadow_blur else 0,
                style.shape_shadow_color,
                _alpha(style.shape_shadow_opacity, "shape shadow opacity"),
            )
        )
        merge_inputs.append("dropShadow")

    merge_inputs.append("SourceGraphic")

    if style.shape_inner_shadow_enabled:
        dist = _distance(style.shape_inner_shadow_distance, SHAPE_SHADOW_DISTANCE, "inner shadow distance")
        dx, dy = light.offset(dist)
        primitives.extend(
            _inner_shadow_chain(
                dx,
                dy,
                SHAPE_SHADOW_BLUR if style.shape_inner_shadow_blur else 0,
                style.shape_inner_shadow_color,
                _alpha(style.shape_inner_shadow_opacity, "inner shadow opacity"),
            )
        )
        merge_inputs.append("innerShadow")

    if not primitives:
        return None
    primitives.append(MergePrimitive(inputs=tuple(merge_inputs)))
    return Filter(name="shape-effects", primitives=tuple(primitives))


# -------------------- shape stages --------------------
def _background_gradient(style: StyleDescription, light: Light, shape: Outline, mask: Mask) -> GradientOverlay:
    color = style.bg_gradient_color
    paint = LinearGradient(
        *_axis(light.angle),
        stops=(
            GradientStop(0.0, color, 0.0),
            GradientStop(1.0, color, _alpha(style.bg_gradient_opacity, "background gradient opacity")),
        ),
    )
    return GradientOverlay(name="background-gradient", paint=paint, box=shape.bounds(), silhouette=mask)


def _finish_layer(style: StyleDescription, light: Light, shape: Outline, mask: Mask) -> GradientOverlay:
    alpha = _alpha(style.finish_layer_opacity, "finish layer opacity")
    paint = RadialGradient(
        cx=50 + GLOSS_OFFSET * light.cos,
        cy=50 + GLOSS_OFFSET * light.sin,
        r=GLOSS_RADIUS,
        stops=(GradientStop(0.0, WHITE, alpha), GradientStop(1.0, WHITE, 0.0)),
    )
    return GradientOverlay(name="finish-layer", paint=paint, box=shape.bounds(), silhouette=mask)


def _edge_colors(style: StyleDescription) -> Tuple[str, str]:
    if not style.auto_color_harmony:
        return (WHITE, BLACK)
    try:
        colors = harmony(style.bg_color)
    except ValueError:
        logger.warning("Cannot derive edge colors from %r, using white/black", style.bg_color)
        return (WHITE, BLACK)
    return (colors.tint, colors.shade)


def _hard_band(color: str, alpha: float, width: float) -> Tuple[GradientStop, ...]:
    edge = max(0.0, min(width, 100.0)) / 100
    return (
        GradientStop(0.0, color, alpha),
        GradientStop(edge, color, alpha),
        GradientStop(edge, color, 0.0),
        GradientStop(1.0, color, 0.0),
    )


def _edge_bands(style: StyleDescription, light: Light, shape: Outline, mask: Mask) -> List[GradientOverlay]:
    tint, shade = _edge_colors(style)
    alpha = _alpha(style.edge_opacity, "edge opacity")
    width = _as_number(style.edge_width, 2, "edge width")
    box = shape.bounds()
    # Tint sits on the lit edge, shade on the edge shadows fall toward
    return [
        GradientOverlay(
            name="edge-tint",
            paint=LinearGradient(*_axis(light.angle), stops=_hard_band(tint, alpha, width)),
            box=box,
            silhouette=mask,
        ),
        GradientOverlay(
            name="edge-shade",
            paint=LinearGradient(*_reversed_axis(light.angle), stops=_hard_band(shade, alpha, width)),
            box=box,
            silhouette=mask,
        ),
    ]


def _score_overlay(style: StyleDescription, shape: Outline, silhouette: Silhouette) -> GradientOverlay:
    alpha = _alpha(style.score_opacity, "score opacity")
    angle = _as_number(style.score_angle, 180, "score angle")
    paint = LinearGradient(
        *_axis(angle),
        stops=(
            GradientStop(0.0, BLACK, 0.0),
            GradientStop(0.5, BLACK, 0.0),
            GradientStop(0.5, BLACK, alpha),
            GradientStop(1.0, BLACK, alpha),
        ),
    )
    return GradientOverlay(name="score", paint=paint, box=shape.bounds(), silhouette=silhouette)


# -------------------- text stages --------------------
def font_size_for(text: str, scale: Any) -> float:
    """Two-bucket heuristic: single glyphs get more room than words."""
    base = SINGLE_GLYPH_FONT_SIZE if len(text) == 1 else MULTI_GLYPH_FONT_SIZE
    return base * _as_number(scale, 100, "font size scale") / 100


def _font(style: StyleDescription) -> FontSpec:
    return FontSpec(
        family=style.font,
        size=font_size_for(style.text, style.font_size_scale),
        weight="bold" if style.font_weight else "normal",
        style="italic" if style.font_style else "normal",
    )


def _shadow_type(style: StyleDescription) -> str:
    shadow_type = str(style.shadow_type or "").strip().lower()
    if shadow_type not in SHADOW_TYPES:
        logger.warning("Unknown text shadow type %r, using long", style.shadow_type)
        return "long"
    return shadow_type


def _long_shadow(
    style: StyleDescription,
    light: Light,
    font: FontSpec,
    offset: Tuple[float, float],
    rotate: float,
    silhouette: Optional[Silhouette],
) -> ShadowClone:
    length = _distance(style.shadow_distance, TEXT_SHADOW_DISTANCE, "shadow distance")
    if length > MAX_LONG_SHADOW_CLONES:
        logger.warning("Long shadow of %s clones capped at %s", length, MAX_LONG_SHADOW_CLONES)
        length = MAX_LONG_SHADOW_CLONES
    base = _alpha(style.shadow_opacity, "shadow opacity")
    # Unchecked blur means a solid streak; checked fades it out
    solid = not style.shadow_blur
    ox, oy = offset

    clones = []
    for i in range(1, length + 1):
        dx, dy = light.offset(i)
        clones.append(
            TextGlyphRun(
                name=f"long-shadow-{i}",
                text=style.text,
                font=font,
                fill=style.shadow_color,
                fill_opacity=None if solid else base * (1 - i / length),
                translate=(dx + ox, dy + oy),
                rotate=rotate,
                rotate_center=(CANVAS_CENTER, CANVAS_CENTER),
                interactive=False,
            )
        )
    return ShadowClone(
        name="long-shadow",
        clones=tuple(clones),
        opacity=base if solid else None,
        silhouette=silhouette,
    )


def _drop_shadow(
    style: StyleDescription,
    light: Light,
    font: FontSpec,
    offset: Tuple[float, float],
    rotate: float,
    mask: Optional[Mask],
) -> Tuple[Filter, TextGlyphRun]:
    dist = _distance(style.shadow_distance, TEXT_SHADOW_DISTANCE, "shadow distance")
    # The filter runs in the glyph's rotated space; undo the rotation so the
    # shadow still falls along the screen-space light angle.
    dx, dy = light.rotated(-rotate).offset(dist)
    shadow_filter = Filter(
        name="text-shadow",
        primitives=_shadow_chain(
            "textShadow",
            "SourceAlpha",
            dx,
            dy,
            TEXT_SHADOW_BLUR if style.shadow_blur else 0,
            style.shadow_color,
            _alpha(style.shadow_opacity, "shadow opacity"),
        ),
    )
    run = TextGlyphRun(
        name="drop-shadow",
        text=style.text,
        font=font,
        fill=style.text_color,
        translate=offset,
        rotate=rotate,
        rotate_center=(CANVAS_CENTER, CANVAS_CENTER),
        filter=shadow_filter,
        silhouette=mask,
        interactive=False,
    )
    return shadow_filter, run


def _text_layers(
    style: StyleDescription,
    light: Light,
    defs: _Definitions,
    mask: Optional[Mask],
    hard_edge: Optional[Silhouette],
) -> List[Layer]:
    if not style.text:
        return []

    font = _font(style)
    offset = (
        _as_number(style.offset_x, 0, "offset x"),
        _as_number(style.offset_y, 0, "offset y"),
    )
    rotate = _as_number(style.rotate, 0, "rotation")
    layers: List[Layer] = []

    if style.shadow_enabled:
        if _shadow_type(style) == "long":
            layers.append(_long_shadow(style, light, font, offset, rotate, defs.use(hard_edge)))
        else:
            shadow_filter, run = _drop_shadow(style, light, font, offset, rotate, defs.use(mask))
            defs.use(shadow_filter)
            layers.append(run)

    if style.outline_enabled:
        layers.append(
            TextGlyphRun(
                name="text-outline",
                text=style.text,
                font=font,
                fill=None,
                stroke=style.outline_color,
                stroke_width=_as_number(style.outline_width, 4, "outline width") * 2,
                stroke_opacity=_alpha(style.outline_opacity, "outline opacity"),
                translate=offset,
                rotate=rotate,
                rotate_center=(CANVAS_CENTER, CANVAS_CENTER),
            )
        )

    layers.append(
        TextGlyphRun(
            name="text",
            text=style.text,
            font=font,
            fill=style.text_color,
            translate=offset,
            rotate=rotate,
            rotate_center=(CANVAS_CENTER, CANVAS_CENTER),
        )
    )

    if style.text_gradient_enabled:
        color = style.text_gradient_color
        gradient = LinearGradient(
            *_axis(light.angle),
            stops=(
                GradientStop(0.0, color, _alpha(style.text_gradient_opacity, "text gradient opacity")),
                GradientStop(1.0, color, 0.0),
            ),
        )
        layers.append(
            TextGlyphRun(
                name="text-gradient",
                text=style.text,
                font=font,
                fill=gradient,
                translate=offset,
                rotate=rotate,
                rotate_center=(CANVAS_CENTER, CANVAS_CENTER),
                interactive=False,
            )
        )
    return layers


def compose(style: StyleDescription) -> SceneGraph:
    """Resolve a style into a scene graph. Never raises for in-range styles."""
    style = style.snapshot()
    light = Light(_as_number(style.global_shadow_angle, DEFAULT_LIGHT_ANGLE, "light angle"))
    shape = outline(style.shape, style.shape_scale)
    defs = _Definitions()

    mask: Optional[Mask] = None
    hard_edge: Optional[Silhouette] = None
    if not shape.is_empty:
        mask = Mask(name="silhouette-mask", outline=shape)
        # Clip paths ignore strokes, so stroke-widened shapes need the mask
        hard_edge = ClipRegion(name="silhouette-clip", outline=shape) if shape.stroke_width == 0 else mask

    body: List[Layer] = []
    if not shape.is_empty:
        shape_filter = defs.use(_shape_effects_filter(style, light))
        shape_layers: List[Layer] = [Fill(outline=shape, color=style.bg_color, stroke_width=shape.stroke_width)]
        if style.bg_gradient_enabled:
            shape_layers.append(_background_gradient(style, light, shape, defs.use(mask)))
        if style.finish_layer:
            shape_layers.append(_finish_layer(style, light, shape, defs.use(mask)))
        if style.edge_tint_shade:
            shape_layers.extend(_edge_bands(style, light, shape, defs.use(mask)))
        if style.score_enabled:
            shape_layers.append(_score_overlay(style, shape, defs.use(hard_edge)))
        body.append(Group(name="shape", layers=tuple(shape_layers), filter=shape_filter))

    body.extend(_text_layers(style, light, defs, mask, hard_edge))

    return SceneGraph(
        width=CANVAS_SIZE,
        height=CANVAS_SIZE,
        layers=tuple(defs.layers) + tuple(body),
        font_import_url=font_import_url(style.font),
    )
