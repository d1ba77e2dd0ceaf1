"""Scene graph produced by the composer and consumed by the serializer.

Every value here is fully resolved: colors are hex strings, opacities are
0..1 alphas, gradient coordinates are percentages of the painted box and
offsets are canvas units. Nothing refers back to the style description.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Type, TypeVar, Union

from geometry.shapes import Outline

Box = Tuple[float, float, float, float]  # x, y, width, height


# -------------------- paints --------------------
@dataclass(frozen=True)
class GradientStop:
    offset: float  # 0..1 along the gradient vector
    color: str
    opacity: float = 1.0


@dataclass(frozen=True)
class LinearGradient:
    x1: float
    y1: float
    x2: float
    y2: float
    stops: Tuple[GradientStop, ...]


@dataclass(frozen=True)
class RadialGradient:
    cx: float
    cy: float
    r: float
    stops: Tuple[GradientStop, ...]


Gradient = Union[LinearGradient, RadialGradient]
Paint = Union[str, LinearGradient, RadialGradient]


# -------------------- filter primitives --------------------
@dataclass(frozen=True)
class AlphaInvertPrimitive:
    input: str
    result: str


@dataclass(frozen=True)
class GaussianBlurPrimitive:
    input: str
    std_deviation: float
    result: str


@dataclass(frozen=True)
class OffsetPrimitive:
    input: str
    dx: float
    dy: float
    result: str


@dataclass(frozen=True)
class FloodPrimitive:
    color: str
    opacity: float
    result: str


@dataclass(frozen=True)
class CompositePrimitive:
    input: str
    input2: str
    operator: str
    result: str


@dataclass(frozen=True)
class MergePrimitive:
    inputs: Tuple[str, ...]


FilterPrimitive = Union[
    AlphaInvertPrimitive,
    GaussianBlurPrimitive,
    OffsetPrimitive,
    FloodPrimitive,
    CompositePrimitive,
    MergePrimitive,
]


# -------------------- definition layers --------------------
@dataclass(frozen=True)
class Filter:
    name: str
    primitives: Tuple[FilterPrimitive, ...]
    region: Box = (-50.0, -50.0, 200.0, 200.0)  # percent of the filtered element


@dataclass(frozen=True)
class Mask:
    """Alpha mask: the silhouette (stroke included) filled white."""

    name: str
    outline: Outline


@dataclass(frozen=True)
class ClipRegion:
    """Hard clip to the raw geometric outline (stroke ignored)."""

    name: str
    outline: Outline


Silhouette = Union[Mask, ClipRegion]


# -------------------- drawable layers --------------------
@dataclass(frozen=True)
class Fill:
    outline: Outline
    color: str
    stroke_width: float = 0.0  # rounded-corner stroke, same color as the fill
    opacity: float = 1.0


@dataclass(frozen=True)
class GradientOverlay:
    name: str
    paint: Gradient
    box: Box  # area painted; gradient percentages are relative to it
    silhouette: Optional[Silhouette] = None
    opacity: float = 1.0


@dataclass(frozen=True)
class FontSpec:
    family: str
    size: float
    weight: str = "normal"
    style: str = "normal"


@dataclass(frozen=True)
class TextGlyphRun:
    name: str
    text: str
    font: FontSpec
    fill: Optional[Paint] = None  # None draws no fill
    fill_opacity: Optional[float] = None
    stroke: Optional[str] = None
    stroke_width: float = 0.0
    stroke_opacity: Optional[float] = None
    translate: Tuple[float, float] = (0.0, 0.0)
    rotate: float = 0.0
    rotate_center: Tuple[float, float] = (128.0, 128.0)
    filter: Optional[Filter] = None
    silhouette: Optional[Silhouette] = None
    interactive: bool = True


@dataclass(frozen=True)
class ShadowClone:
    """Translated copies of a glyph run drawn as one group."""

    name: str
    clones: Tuple[TextGlyphRun, ...]
    opacity: Optional[float] = None  # group alpha, set only for solid streaks
    silhouette: Optional[Silhouette] = None


@dataclass(frozen=True)
class Group:
    name: str
    layers: Tuple["Layer", ...]
    filter: Optional[Filter] = None


Layer = Union[Filter, Mask, ClipRegion, Fill, GradientOverlay, TextGlyphRun, ShadowClone, Group]
DEFINITION_TYPES = (Filter, Mask, ClipRegion)

L = TypeVar("L")


@dataclass(frozen=True)
class SceneGraph:
    width: int
    height: int
    layers: Tuple[Layer, ...] = field(default_factory=tuple)
    font_import_url: Optional[str] = None

    def iter_layers(self) -> Iterator[Layer]:
        """Yield every layer depth-first, descending into groups."""
        yield from _walk(self.layers)

    def find(self, kind: Type[L]) -> list[L]:
        """Return every layer of the given type in drawing order."""
        return [layer for layer in self.iter_layers() if isinstance(layer, kind)]

    def find_named(self, name: str) -> Optional[Layer]:
        for layer in self.iter_layers():
            if getattr(layer, "name", None) == name:
                return layer
        return None

    def definitions(self) -> list[Layer]:
        return [layer for layer in self.layers if isinstance(layer, DEFINITION_TYPES)]


def _walk(layers: Tuple[Layer, ...]) -> Iterator[Layer]:
    for layer in layers:
        yield layer
        if isinstance(layer, Group):
            yield from _walk(layer.layers)
