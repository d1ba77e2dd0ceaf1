import re
import xml.etree.ElementTree as ET

import pytest

from render.composer import compose
from render.serializer import SVG_NS, fmt, serialize

NS = {"svg": SVG_NS}


def render(style):
    return ET.fromstring(serialize(compose(style)))


def tag(name):
    return f"{{{SVG_NS}}}{name}"


def by_id(root, ident):
    return root.find(f".//*[@id='{ident}']")


def parent_of(root, child):
    for elem in root.iter():
        if child in list(elem):
            return elem
    return None


@pytest.mark.parametrize(
    "value, expected",
    [(2.0, "2"), (1.23456789, "1.2346"), (-0.00001, "0"), (90.5, "90.5"), (-12.25, "-12.25")],
)
def test_number_formatting(value, expected):
    assert fmt(value) == expected


def test_document_root(style):
    root = render(style)
    assert root.tag == tag("svg")
    assert root.get("width") == "256"
    assert root.get("height") == "256"
    assert root.get("viewBox") == "0 0 256 256"


def test_font_import_placeholder_comes_first(style):
    root = render(style)
    defs = root[0]
    assert defs.tag == tag("defs")
    assert defs[0].tag == tag("style")
    assert defs[0].text == (
        "@import url('https://fonts.googleapis.com/css2?family=Noto+Sans+JP:wght@400;700&display=swap');"
    )


def test_unknown_font_has_no_style_block(style):
    style.font = "Comic Sans MS"
    assert render(style).find(".//svg:style", NS) is None


def test_ids_follow_first_use(style):
    root = render(style)
    ids = [elem.get("id") for elem in root[0] if elem.get("id")]
    assert ids == ["silhouette-mask-1", "silhouette-clip-1", "gradient-1", "gradient-2", "gradient-3"]
    assert root[0].find("svg:radialGradient", NS).get("id") == "gradient-1"


def test_equal_definitions_share_one_id(style):
    root = render(style)
    assert len(root.findall(".//svg:mask", NS)) == 1
    masked = [elem for elem in root.iter() if elem.get("mask")]
    assert len(masked) == 3
    assert {elem.get("mask") for elem in masked} == {"url(#silhouette-mask-1)"}


def test_every_reference_resolves(style):
    style.shape_shadow_enabled = True
    style.shape_inner_shadow_enabled = True
    style.bg_gradient_enabled = True
    style.score_enabled = True
    style.outline_enabled = True
    style.text_gradient_enabled = True
    root = render(style)
    defined = {elem.get("id") for elem in root[0]}
    for elem in root.iter():
        for value in elem.attrib.values():
            for ident in re.findall(r"url\(#([^)]+)\)", value):
                assert ident in defined


def test_long_shadow_group_is_wrapped(example_style):
    root = render(example_style)
    group = by_id(root, "long-shadow")
    assert group.get("opacity") == "0.4"
    assert len(group.findall("svg:text", NS)) == 8
    wrapper = parent_of(root, group)
    assert wrapper.get("clip-path") == "url(#silhouette-clip-1)"
    clip = by_id(root, "silhouette-clip-1")
    assert clip[0].tag == tag("circle")
    assert clip[0].get("r") == "128"


def test_clone_transform(example_style):
    clone = by_id(render(example_style), "long-shadow-2")
    assert clone.get("transform") == "translate(1.4142 1.4142)"
    assert clone.get("pointer-events") == "none"


def test_text_attributes(style):
    style.rotate = 15
    style.offset_x = 4
    text = by_id(render(style), "text")
    assert text.text == "M"
    assert text.get("x") == "50%"
    assert text.get("y") == "50%"
    assert text.get("text-anchor") == "middle"
    assert text.get("dominant-baseline") == "central"
    assert text.get("font-size") == "160"
    assert text.get("fill") == "#ffffff"
    assert text.get("transform") == "translate(4 0) rotate(15 128 128)"
    assert text.get("pointer-events") is None


def test_drop_shadow_mask_sits_on_wrapper(style):
    style.shadow_type = "drop"
    style.rotate = 30
    root = render(style)
    shadow = by_id(root, "drop-shadow")
    assert shadow.get("mask") is None
    assert shadow.get("filter") == "url(#text-shadow-1)"
    assert parent_of(root, shadow).get("mask") == "url(#silhouette-mask-1)"
    flt = by_id(root, "text-shadow-1")
    assert [child.tag for child in flt] == [
        tag("feGaussianBlur"),
        tag("feOffset"),
        tag("feFlood"),
        tag("feComposite"),
    ]


def test_shape_group_carries_filter(style):
    style.shape_shadow_enabled = True
    style.shape_inner_shadow_enabled = True
    root = render(style)
    group = by_id(root, "shape")
    assert group.get("filter") == "url(#shape-effects-1)"
    flt = by_id(root, "shape-effects-1")
    assert flt.get("x") == "-50%"
    assert flt.find("svg:feComponentTransfer/svg:feFuncA", NS).get("tableValues") == "1 0"
    merge = [node.get("in") for node in flt.find("svg:feMerge", NS)]
    assert merge == ["dropShadow", "SourceGraphic", "innerShadow"]


def test_rounded_shape_fill_and_mask(style):
    style.shape = "rounded-square"
    root = render(style)
    fill = by_id(root, "shape")[0]
    assert fill.tag == tag("polygon")
    assert fill.get("stroke-width") == "32"
    assert fill.get("stroke-linejoin") == "round"
    assert fill.get("transform").startswith("matrix(")
    mask = by_id(root, "silhouette-mask-1")
    assert mask.get("maskUnits") == "userSpaceOnUse"
    assert mask[0].get("fill") == "#ffffff"
    assert mask[0].get("stroke") == "#ffffff"


def test_shield_is_a_path(style):
    style.shape = "shield"
    fill = by_id(render(style), "shape")[0]
    assert fill.tag == tag("path")
    assert fill.get("d").startswith("M 128 0")
    assert fill.get("d").endswith("Z")


def test_unknown_shape_still_serializes(style):
    style.shape = "blob"
    root = render(style)
    assert root.find(".//svg:mask", NS) is None
    assert by_id(root, "text") is not None


def test_empty_text_has_no_text_elements(style):
    style.text = ""
    assert render(style).find(".//svg:text", NS) is None
