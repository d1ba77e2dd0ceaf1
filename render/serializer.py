"""Serialize a scene graph into a standalone SVG document."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Dict, Optional

from geometry.shapes import Outline
from render.scene import (
    AlphaInvertPrimitive,
    ClipRegion,
    CompositePrimitive,
    Fill,
    Filter,
    FilterPrimitive,
    FloodPrimitive,
    GaussianBlurPrimitive,
    Gradient,
    GradientOverlay,
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

SVG_NS = "http://www.w3.org/2000/svg"
FONT_FALLBACK = "sans-serif"


def fmt(value: float) -> str:
    """Format a number with at most four decimals and no trailing zeros."""
    text = f"{float(value):.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def pct(value: float) -> str:
    return f"{fmt(value)}%"


def _url(ident: str) -> str:
    return f"url(#{ident})"


class _Defs:
    """Owns <defs> and hands out one id per distinct definition."""

    def __init__(self, parent: ET.Element, width: int, height: int) -> None:
        self.element = ET.SubElement(parent, "defs")
        self.width = width
        self.height = height
        self._ids: Dict[object, str] = {}
        self._counters: Dict[str, int] = {}

    def _next_id(self, kind: str) -> str:
        self._counters[kind] = self._counters.get(kind, 0) + 1
        return f"{kind}-{self._counters[kind]}"

    def ref(self, definition) -> str:
        """Return the id of `definition`, emitting it on first use."""
        ident = self._ids.get(definition)
        if ident is not None:
            return ident
        if isinstance(definition, Filter):
            ident = self._next_id(definition.name)
            self.element.append(_filter_element(ident, definition))
        elif isinstance(definition, Mask):
            ident = self._next_id(definition.name)
            self.element.append(self._mask_element(ident, definition))
        elif isinstance(definition, ClipRegion):
            ident = self._next_id(definition.name)
            clip = ET.SubElement(self.element, "clipPath", {"id": ident})
            clip.append(outline_element(definition.outline))
        elif isinstance(definition, (LinearGradient, RadialGradient)):
            ident = self._next_id("gradient")
            self.element.append(self._gradient_element(ident, definition))
        else:
            raise TypeError(f"Not a definition: {definition!r}")
        self._ids[definition] = ident
        return ident

    def _mask_element(self, ident: str, mask: Mask) -> ET.Element:
        elem = ET.Element(
            "mask",
            {
                "id": ident,
                "maskUnits": "userSpaceOnUse",
                "x": "0",
                "y": "0",
                "width": str(self.width),
                "height": str(self.height),
            },
        )
        shape = outline_element(mask.outline)
        shape.set("fill", "#ffffff")
        if mask.outline.stroke_width:
            shape.set("stroke", "#ffffff")
            shape.set("stroke-width", fmt(mask.outline.stroke_width))
            shape.set("stroke-linejoin", "round")
        elem.append(shape)
        return elem

    def _gradient_element(self, ident: str, paint: Gradient) -> ET.Element:
        if isinstance(paint, LinearGradient):
            elem = ET.Element(
                "linearGradient",
                {"id": ident, "x1": pct(paint.x1), "y1": pct(paint.y1), "x2": pct(paint.x2), "y2": pct(paint.y2)},
            )
        else:
            elem = ET.Element("radialGradient", {"id": ident, "cx": pct(paint.cx), "cy": pct(paint.cy), "r": pct(paint.r)})
        for stop in paint.stops:
            ET.SubElement(
                elem,
                "stop",
                {"offset": pct(stop.offset * 100), "stop-color": stop.color, "stop-opacity": fmt(stop.opacity)},
            )
        return elem


def _primitive_element(primitive: FilterPrimitive) -> ET.Element:
    if isinstance(primitive, AlphaInvertPrimitive):
        elem = ET.Element("feComponentTransfer", {"in": primitive.input, "result": primitive.result})
        ET.SubElement(elem, "feFuncA", {"type": "table", "tableValues": "1 0"})
        return elem
    if isinstance(primitive, GaussianBlurPrimitive):
        return ET.Element(
            "feGaussianBlur",
            {"in": primitive.input, "stdDeviation": fmt(primitive.std_deviation), "result": primitive.result},
        )
    if isinstance(primitive, OffsetPrimitive):
        return ET.Element(
            "feOffset",
            {"in": primitive.input, "dx": fmt(primitive.dx), "dy": fmt(primitive.dy), "result": primitive.result},
        )
    if isinstance(primitive, FloodPrimitive):
        return ET.Element(
            "feFlood",
            {"flood-color": primitive.color, "flood-opacity": fmt(primitive.opacity), "result": primitive.result},
        )
    if isinstance(primitive, CompositePrimitive):
        return ET.Element(
            "feComposite",
            {"in": primitive.input, "in2": primitive.input2, "operator": primitive.operator, "result": primitive.result},
        )
    if isinstance(primitive, MergePrimitive):
        elem = ET.Element("feMerge")
        for name in primitive.inputs:
            ET.SubElement(elem, "feMergeNode", {"in": name})
        return elem
    raise TypeError(f"Unknown filter primitive: {primitive!r}")


def _filter_element(ident: str, flt: Filter) -> ET.Element:
    x, y, w, h = flt.region
    elem = ET.Element("filter", {"id": ident, "x": pct(x), "y": pct(y), "width": pct(w), "height": pct(h)})
    for primitive in flt.primitives:
        elem.append(_primitive_element(primitive))
    return elem


def _path_data(outline: Outline) -> str:
    parts = []
    for command, args in outline.commands:
        parts.append(" ".join([command, *(fmt(v) for v in args)]))
    return " ".join(parts)


def outline_element(outline: Outline) -> ET.Element:
    """Return the bare geometry element for an outline, transform applied."""
    if outline.kind == "circle":
        cx, cy = outline.center
        elem = ET.Element("circle", {"cx": fmt(cx), "cy": fmt(cy), "r": fmt(outline.radius)})
    elif outline.kind == "polygon":
        points = " ".join(f"{fmt(x)},{fmt(y)}" for x, y in outline.points)
        elem = ET.Element("polygon", {"points": points})
    elif outline.kind == "path":
        elem = ET.Element("path", {"d": _path_data(outline)})
    else:
        raise ValueError(f"Outline '{outline.shape}' has no geometry")
    elem.set("transform", "matrix({})".format(" ".join(fmt(v) for v in outline.transform)))
    return elem


class SvgWriter:
    def __init__(self, scene: SceneGraph) -> None:
        self.scene = scene
        self.root = ET.Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "width": str(scene.width),
                "height": str(scene.height),
                "viewBox": f"0 0 {scene.width} {scene.height}",
            },
        )
        self.defs = _Defs(self.root, scene.width, scene.height)
        if scene.font_import_url:
            style = ET.SubElement(self.defs.element, "style")
            style.text = f"@import url('{scene.font_import_url}');"

    def write(self) -> str:
        for layer in self.scene.layers:
            if isinstance(layer, (Filter, Mask, ClipRegion)):
                self.defs.ref(layer)
        for layer in self.scene.layers:
            elem = self.layer(layer)
            if elem is not None:
                self.root.append(elem)
        return ET.tostring(self.root, encoding="unicode")

    def _wrap(self, elem: ET.Element, silhouette: Optional[Silhouette], opacity: Optional[float] = None) -> ET.Element:
        # Masks live on a wrapper so glyph transforms never move them
        if silhouette is None and opacity is None:
            return elem
        group = ET.Element("g")
        if isinstance(silhouette, Mask):
            group.set("mask", _url(self.defs.ref(silhouette)))
        elif isinstance(silhouette, ClipRegion):
            group.set("clip-path", _url(self.defs.ref(silhouette)))
        if opacity is not None:
            group.set("opacity", fmt(opacity))
        group.append(elem)
        return group

    def layer(self, layer: Layer) -> Optional[ET.Element]:
        if isinstance(layer, (Filter, Mask, ClipRegion)):
            return None
        if isinstance(layer, Group):
            group = ET.Element("g", {"id": layer.name})
            if layer.filter is not None:
                group.set("filter", _url(self.defs.ref(layer.filter)))
            for child in layer.layers:
                elem = self.layer(child)
                if elem is not None:
                    group.append(elem)
            return group
        if isinstance(layer, Fill):
            return self.fill(layer)
        if isinstance(layer, GradientOverlay):
            return self.overlay(layer)
        if isinstance(layer, TextGlyphRun):
            return self._wrap(self.text(layer), layer.silhouette)
        if isinstance(layer, ShadowClone):
            group = ET.Element("g", {"id": layer.name})
            for clone in layer.clones:
                group.append(self.text(clone))
            if layer.opacity is not None:
                group.set("opacity", fmt(layer.opacity))
            if layer.silhouette is None:
                return group
            return self._wrap(group, layer.silhouette)
        raise TypeError(f"Unknown layer: {layer!r}")

    def fill(self, layer: Fill) -> ET.Element:
        elem = outline_element(layer.outline)
        elem.set("fill", layer.color)
        if layer.stroke_width:
            elem.set("stroke", layer.color)
            elem.set("stroke-width", fmt(layer.stroke_width))
            elem.set("stroke-linejoin", "round")
        if layer.opacity != 1.0:
            elem.set("opacity", fmt(layer.opacity))
        return elem

    def overlay(self, layer: GradientOverlay) -> ET.Element:
        x, y, w, h = layer.box
        rect = ET.Element(
            "rect",
            {
                "id": layer.name,
                "x": fmt(x),
                "y": fmt(y),
                "width": fmt(w),
                "height": fmt(h),
                "fill": _url(self.defs.ref(layer.paint)),
            },
        )
        if layer.opacity != 1.0:
            rect.set("opacity", fmt(layer.opacity))
        return self._wrap(rect, layer.silhouette)

    def text(self, run: TextGlyphRun) -> ET.Element:
        font = run.font
        attrs = {
            "id": run.name,
            "x": "50%",
            "y": "50%",
            "text-anchor": "middle",
            "dominant-baseline": "central",
            "font-family": f"'{font.family}', {FONT_FALLBACK}",
            "font-size": fmt(font.size),
            "font-weight": font.weight,
            "font-style": font.style,
        }
        if run.fill is None:
            attrs["fill"] = "none"
        elif isinstance(run.fill, str):
            attrs["fill"] = run.fill
        else:
            attrs["fill"] = _url(self.defs.ref(run.fill))
        if run.fill_opacity is not None:
            attrs["fill-opacity"] = fmt(run.fill_opacity)
        if run.stroke is not None:
            attrs["stroke"] = run.stroke
            attrs["stroke-width"] = fmt(run.stroke_width)
            attrs["stroke-linejoin"] = "round"
            if run.stroke_opacity is not None:
                attrs["stroke-opacity"] = fmt(run.stroke_opacity)

        transform = []
        dx, dy = run.translate
        if dx or dy:
            transform.append(f"translate({fmt(dx)} {fmt(dy)})")
        if run.rotate:
            cx, cy = run.rotate_center
            transform.append(f"rotate({fmt(run.rotate)} {fmt(cx)} {fmt(cy)})")
        if transform:
            attrs["transform"] = " ".join(transform)
        if run.filter is not None:
            attrs["filter"] = _url(self.defs.ref(run.filter))
        if not run.interactive:
            attrs["pointer-events"] = "none"

        elem = ET.Element("text", attrs)
        elem.text = run.text
        return elem


def serialize(scene: SceneGraph) -> str:
    """Render `scene` as a complete SVG document string."""
    return SvgWriter(scene).write()
