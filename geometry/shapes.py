"""Fixed palette of icon outlines laid out on the 256x256 canvas."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from config import CANVAS_CENTER, CANVAS_SIZE

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Matrix = Tuple[float, float, float, float, float, float]  # SVG order: a b c d e f
PathCommand = Tuple[str, Tuple[float, ...]]  # ("M", (x, y)), ("C", (x1, y1, x2, y2, x, y)), ("Z", ())

IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

# Rounded variants fake round corners with a fat round-joined stroke.
ROUNDED_STROKE_WIDTH = 32.0
# Sharp geometry is pulled in so the stroke still fits the canvas.
ROUNDED_INSET = 1.0 - (ROUNDED_STROKE_WIDTH / 2) / CANVAS_CENTER


@dataclass(frozen=True)
class Outline:
    """
    Closed outline of a shape.

    Geometry is stored untransformed on the canvas; `transform` is the fully
    composed affine matrix to draw it with.
    """

    shape: str
    kind: str  # "circle" | "polygon" | "path" | "empty"
    points: Tuple[Point, ...] = ()
    commands: Tuple[PathCommand, ...] = ()
    center: Point = (CANVAS_CENTER, CANVAS_CENTER)
    radius: float = 0.0
    transform: Matrix = IDENTITY
    stroke_width: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.kind == "empty"

    @property
    def is_closed(self) -> bool:
        """Circles and polygons close implicitly; paths must end with Z."""
        if self.kind in ("circle", "polygon"):
            return True
        if self.kind == "path":
            return bool(self.commands) and self.commands[-1][0] == "Z"
        return False

    @property
    def scale_factor(self) -> float:
        """Uniform scale carried by the transform."""
        a, b = self.transform[0], self.transform[1]
        return math.hypot(a, b)

    def control_points(self) -> np.ndarray:
        """Return the untransformed points bounding the geometry as an (N, 2) array."""
        if self.kind == "circle":
            cx, cy = self.center
            r = self.radius
            return np.array([(cx - r, cy - r), (cx + r, cy + r)], dtype=float)
        if self.kind == "polygon":
            return np.array(self.points, dtype=float)
        if self.kind == "path":
            coords = [value for _, args in self.commands for value in args]
            return np.array(coords, dtype=float).reshape(-1, 2)
        return np.zeros((0, 2), dtype=float)

    def bounds(self) -> Tuple[float, float, float, float]:
        """Return (x, y, width, height) of the transformed outline including its stroke."""
        pts = apply_matrix(self.transform, self.control_points())
        if pts.size == 0:
            return (CANVAS_CENTER, CANVAS_CENTER, 0.0, 0.0)
        pad = self.stroke_width / 2 * self.scale_factor
        x_min, y_min = pts.min(axis=0) - pad
        x_max, y_max = pts.max(axis=0) + pad
        return (float(x_min), float(y_min), float(x_max - x_min), float(y_max - y_min))


# -------------------- affine helpers --------------------
def _to_array(matrix: Matrix) -> np.ndarray:
    a, b, c, d, e, f = matrix
    return np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]], dtype=float)


def _from_array(arr: np.ndarray) -> Matrix:
    return (
        float(arr[0, 0]),
        float(arr[1, 0]),
        float(arr[0, 1]),
        float(arr[1, 1]),
        float(arr[0, 2]),
        float(arr[1, 2]),
    )


def translation(tx: float, ty: float) -> Matrix:
    return (1.0, 0.0, 0.0, 1.0, float(tx), float(ty))


def scaling(sx: float, sy: Optional[float] = None) -> Matrix:
    return (float(sx), 0.0, 0.0, float(sx if sy is None else sy), 0.0, 0.0)


def compose(*matrices: Matrix) -> Matrix:
    """Compose matrices left to right as SVG does for `transform="m1 m2 ..."`."""
    result = np.identity(3)
    for matrix in matrices:
        result = result @ _to_array(matrix)
    return _from_array(result)


def apply_matrix(matrix: Matrix, points: np.ndarray) -> np.ndarray:
    """Apply an affine matrix to an (N, 2) array of points."""
    if points.size == 0:
        return points
    homogeneous = np.hstack([points, np.ones((points.shape[0], 1))])
    return (homogeneous @ _to_array(matrix).T)[:, :2]


def scale_about_center(factor: float) -> Matrix:
    """Translate to center, scale uniformly, translate back."""
    return compose(
        translation(CANVAS_CENTER, CANVAS_CENTER),
        scaling(factor),
        translation(-CANVAS_CENTER, -CANVAS_CENTER),
    )


def _inset(points: Tuple[Point, ...]) -> Tuple[Point, ...]:
    arr = apply_matrix(scale_about_center(ROUNDED_INSET), np.array(points, dtype=float))
    return tuple((float(x), float(y)) for x, y in arr)


# -------------------- base geometry --------------------
def _regular_polygon(sides: int, start_deg: float) -> Tuple[Point, ...]:
    r = CANVAS_CENTER
    points = []
    for i in range(sides):
        angle = math.radians(360 / sides * i + start_deg)
        points.append((CANVAS_CENTER + r * math.cos(angle), CANVAS_CENTER + r * math.sin(angle)))
    return tuple(points)


def _square() -> Tuple[Point, ...]:
    s = float(CANVAS_SIZE)
    return ((0.0, 0.0), (s, 0.0), (s, s), (0.0, s))


def _rectangle() -> Tuple[Point, ...]:
    # 16:10 landscape, vertically centered
    s = float(CANVAS_SIZE)
    half_h = s * 10 / 16 / 2
    top, bottom = CANVAS_CENTER - half_h, CANVAS_CENTER + half_h
    return ((0.0, top), (s, top), (s, bottom), (0.0, bottom))


def _triangle() -> Tuple[Point, ...]:
    # Equilateral, side = canvas width, bounding box centered on the canvas
    s = float(CANVAS_SIZE)
    half_h = s * math.sqrt(3) / 4
    return (
        (CANVAS_CENTER, CANVAS_CENTER - half_h),
        (s, CANVAS_CENTER + half_h),
        (0.0, CANVAS_CENTER + half_h),
    )


def _hexagon() -> Tuple[Point, ...]:
    return _regular_polygon(6, -30)


def _diamond() -> Tuple[Point, ...]:
    s = float(CANVAS_SIZE)
    return ((CANVAS_CENTER, 0.0), (s, CANVAS_CENTER), (CANVAS_CENTER, s), (0.0, CANVAS_CENTER))


def _shield() -> Tuple[PathCommand, ...]:
    s = float(CANVAS_SIZE)
    c = CANVAS_CENTER
    return (
        ("M", (c, 0.0)),
        ("L", (s, s * 0.25)),
        ("L", (s, s * 0.5)),
        ("C", (s, s * 0.8, c, s, c, s)),
        ("C", (c, s, 0.0, s * 0.8, 0.0, s * 0.5)),
        ("L", (0.0, s * 0.25)),
        ("Z", ()),
    )


def _polygon(name: str, factory: Callable[[], Tuple[Point, ...]], rounded: bool) -> Outline:
    points = factory()
    if rounded:
        return Outline(shape=name, kind="polygon", points=_inset(points), stroke_width=ROUNDED_STROKE_WIDTH)
    return Outline(shape=name, kind="polygon", points=points)


_SHAPES: Dict[str, Callable[[], Outline]] = {
    "circle": lambda: Outline(shape="circle", kind="circle", radius=CANVAS_CENTER),
    "square": lambda: _polygon("square", _square, False),
    "rounded-square": lambda: _polygon("rounded-square", _square, True),
    "rectangle": lambda: _polygon("rectangle", _rectangle, False),
    "rounded-rectangle": lambda: _polygon("rounded-rectangle", _rectangle, True),
    "triangle": lambda: _polygon("triangle", _triangle, False),
    "rounded-triangle": lambda: _polygon("rounded-triangle", _triangle, True),
    "hexagon": lambda: _polygon("hexagon", _hexagon, False),
    "rounded-hexagon": lambda: _polygon("rounded-hexagon", _hexagon, True),
    "diamond": lambda: _polygon("diamond", _diamond, False),
    "rounded-diamond": lambda: _polygon("rounded-diamond", _diamond, True),
    "shield": lambda: Outline(shape="shield", kind="path", commands=_shield()),
}

# Older documents used a single rounded rectangle id.
_ALIASES: Dict[str, str] = {"rounded": "rounded-square"}

SHAPES: Tuple[str, ...] = tuple(_SHAPES)


def normalize_shape_id(shape: str) -> str:
    normalized = (shape or "").strip().lower()
    return _ALIASES.get(normalized, normalized)


def _parse_scale(scale: float | int | str | None) -> float:
    try:
        value = float(scale)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("Invalid shape scale %r, using 100", scale)
        return 1.0
    if not math.isfinite(value):
        logger.warning("Invalid shape scale %r, using 100", scale)
        return 1.0
    return max(value, 0.0) / 100


def outline(shape: str, scale: float | int | str | None = 100) -> Outline:
    """
    Return the outline of `shape` scaled (percent) about the canvas center.

    Unknown shapes yield an empty outline rather than raising.
    """
    shape_id = normalize_shape_id(shape)
    factory = _SHAPES.get(shape_id)
    if factory is None:
        logger.warning("Unknown shape %r, rendering without a silhouette", shape)
        return Outline(shape=shape_id, kind="empty")

    base = factory()
    transform = compose(scale_about_center(_parse_scale(scale)), base.transform)
    return replace(base, transform=transform)
