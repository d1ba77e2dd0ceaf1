import math

import pytest

from render.composer import MAX_LONG_SHADOW_CLONES, compose, font_size_for
from render.scene import (
    DEFINITION_TYPES,
    ClipRegion,
    Fill,
    Filter,
    GaussianBlurPrimitive,
    GradientOverlay,
    Group,
    Mask,
    MergePrimitive,
    OffsetPrimitive,
    ShadowClone,
    TextGlyphRun,
)

COS45 = math.cos(math.radians(45))


def drawable_names(scene):
    names = []
    for layer in scene.layers:
        if isinstance(layer, DEFINITION_TYPES):
            continue
        names.append(layer.name)
    return names


def shape_stage_names(scene):
    group = scene.find_named("shape")
    return [getattr(layer, "name", type(layer).__name__) for layer in group.layers]


def offsets(flt):
    return [p for p in flt.primitives if isinstance(p, OffsetPrimitive)]


def test_long_shadow_example(example_style):
    scene = compose(example_style)
    shadow = scene.find_named("long-shadow")
    assert isinstance(shadow, ShadowClone)
    assert len(shadow.clones) == 8
    for i, clone in enumerate(shadow.clones, start=1):
        assert clone.text == "A"
        assert clone.translate == pytest.approx((i * COS45, i * COS45))
        assert clone.fill_opacity is None
    assert shadow.opacity == pytest.approx(0.4)
    assert isinstance(shadow.silhouette, ClipRegion)
    assert shadow.silhouette.outline.kind == "circle"


def test_default_layer_order(style):
    scene = compose(style)
    assert drawable_names(scene) == ["shape", "long-shadow", "text"]
    assert shape_stage_names(scene) == ["Fill", "finish-layer", "edge-tint", "edge-shade"]


def test_full_layer_order(style):
    style.shape_shadow_enabled = True
    style.shape_inner_shadow_enabled = True
    style.bg_gradient_enabled = True
    style.score_enabled = True
    style.shadow_type = "drop"
    style.outline_enabled = True
    style.text_gradient_enabled = True
    scene = compose(style)

    assert drawable_names(scene) == ["shape", "drop-shadow", "text-outline", "text", "text-gradient"]
    assert shape_stage_names(scene) == [
        "Fill",
        "background-gradient",
        "finish-layer",
        "edge-tint",
        "edge-shade",
        "score",
    ]
    assert scene.find_named("shape").filter.name == "shape-effects"


def test_definitions_come_first(style):
    style.shape_shadow_enabled = True
    style.shadow_type = "drop"
    scene = compose(style)
    kinds = [isinstance(layer, DEFINITION_TYPES) for layer in scene.layers]
    assert kinds == sorted(kinds, reverse=True)
    referenced = {scene.find_named("shape").filter, scene.find_named("drop-shadow").filter}
    assert referenced <= set(scene.definitions())


def test_shape_effects_merge_order(style):
    style.shape_shadow_enabled = True
    style.shape_inner_shadow_enabled = True
    flt = compose(style).find_named("shape").filter
    merge = flt.primitives[-1]
    assert isinstance(merge, MergePrimitive)
    assert merge.inputs == ("dropShadow", "SourceGraphic", "innerShadow")
    assert flt.primitives[0].input == "SourceAlpha"


def test_shape_shadow_distance_defaults_to_four(style):
    style.shape_shadow_enabled = True
    style.shape_shadow_distance = 0
    style.global_shadow_angle = 0
    flt = compose(style).find_named("shape").filter
    assert (offsets(flt)[0].dx, offsets(flt)[0].dy) == pytest.approx((4, 0))


def test_every_effect_follows_one_light(style):
    style.global_shadow_angle = 90
    style.shape_shadow_enabled = True
    style.shape_inner_shadow_enabled = True
    style.bg_gradient_enabled = True
    scene = compose(style)

    outer, inner = offsets(scene.find_named("shape").filter)
    assert (outer.dx, outer.dy) == pytest.approx((0, 4))
    assert (inner.dx, inner.dy) == pytest.approx((0, 4))

    bg = scene.find_named("background-gradient").paint
    assert (bg.x1, bg.y1, bg.x2, bg.y2) == pytest.approx((50, 0, 50, 100))

    gloss = scene.find_named("finish-layer").paint
    assert (gloss.cx, gloss.cy) == pytest.approx((50, 80))

    tint = scene.find_named("edge-tint").paint
    shade = scene.find_named("edge-shade").paint
    assert (tint.y1, tint.y2) == pytest.approx((0, 100))
    assert (shade.y1, shade.y2) == pytest.approx((100, 0))

    first = scene.find_named("long-shadow").clones[0]
    assert first.translate == pytest.approx((0, 1))


def test_score_uses_its_own_angle(style):
    style.score_enabled = True
    style.score_angle = 0
    style.global_shadow_angle = 90
    paint = compose(style).find_named("score").paint
    assert (paint.x1, paint.y1, paint.x2, paint.y2) == pytest.approx((0, 50, 100, 50))
    assert [s.offset for s in paint.stops] == [0.0, 0.5, 0.5, 1.0]


def test_soft_long_shadow_fades(style):
    style.shadow_blur = True
    style.shadow_opacity = 40
    shadow = compose(style).find_named("long-shadow")
    assert shadow.opacity is None
    alphas = [clone.fill_opacity for clone in shadow.clones]
    assert alphas == pytest.approx([0.4 * (1 - i / 8) for i in range(1, 9)])
    assert alphas[-1] == pytest.approx(0)


def test_long_shadow_offset_adds_text_offset(style):
    style.offset_x = 10
    style.offset_y = -5
    style.global_shadow_angle = 0
    clone = compose(style).find_named("long-shadow").clones[2]
    assert clone.translate == pytest.approx((13, -5))


def test_malformed_shadow_distance_falls_back(style, caplog):
    style.shadow_distance = "lots"
    assert len(compose(style).find_named("long-shadow").clones) == 8
    assert "Invalid shadow distance" in caplog.text


def test_long_shadow_is_capped(style, caplog):
    style.shadow_distance = 5000
    assert len(compose(style).find_named("long-shadow").clones) == MAX_LONG_SHADOW_CLONES
    assert "capped" in caplog.text


def test_drop_shadow_compensates_rotation(style):
    style.shadow_type = "drop"
    style.rotate = 90
    style.global_shadow_angle = 0
    run = compose(style).find_named("drop-shadow")
    assert run.rotate == 90
    offset = offsets(run.filter)[0]
    assert (offset.dx, offset.dy) == pytest.approx((0, -8))
    assert isinstance(run.silhouette, Mask)


@pytest.mark.parametrize("blur, expected", [(True, 6), (False, 0)])
def test_drop_shadow_blur(style, blur, expected):
    style.shadow_type = "drop"
    style.shadow_blur = blur
    flt = compose(style).find_named("drop-shadow").filter
    blur_step = next(p for p in flt.primitives if isinstance(p, GaussianBlurPrimitive))
    assert blur_step.std_deviation == expected


def test_stroke_widened_outline_uses_mask(style):
    style.shape = "rounded-hexagon"
    style.score_enabled = True
    scene = compose(style)
    assert isinstance(scene.find_named("long-shadow").silhouette, Mask)
    assert isinstance(scene.find_named("score").silhouette, Mask)

    style.shape = "hexagon"
    scene = compose(style)
    assert isinstance(scene.find_named("long-shadow").silhouette, ClipRegion)
    assert isinstance(scene.find_named("score").silhouette, ClipRegion)


def test_rounded_fill_keeps_stroke(style):
    style.shape = "rounded-square"
    fill = compose(style).find(Fill)[0]
    assert fill.stroke_width == 32
    assert fill.color == style.bg_color


def test_unknown_shape_keeps_text(style):
    style.shape = "blob"
    scene = compose(style)
    assert scene.find(Group) == []
    assert scene.find(GradientOverlay) == []
    assert scene.definitions() == []
    assert scene.find_named("long-shadow").silhouette is None
    assert scene.find_named("text") is not None


def test_empty_text_skips_text_layers(style):
    style.text = ""
    scene = compose(style)
    assert scene.find(TextGlyphRun) == []
    assert scene.find(ShadowClone) == []
    assert drawable_names(scene) == ["shape"]


def test_unknown_shadow_type_is_long(style, caplog):
    style.shadow_type = "radial"
    assert compose(style).find_named("long-shadow") is not None
    assert "Unknown text shadow type" in caplog.text


def test_font_sizing(style):
    assert font_size_for("M", 100) == 160
    assert font_size_for("AB", 100) == 120
    style.font_size_scale = 50
    assert compose(style).find_named("text").font.size == 80


def test_font_attributes(style):
    style.font_weight = True
    style.font_style = True
    font = compose(style).find_named("text").font
    assert (font.weight, font.style) == ("bold", "italic")


def test_outline_and_gradient_runs(style):
    style.outline_enabled = True
    style.outline_width = 3
    style.text_gradient_enabled = True
    scene = compose(style)
    outline = scene.find_named("text-outline")
    assert outline.fill is None
    assert outline.stroke_width == 6
    gradient = scene.find_named("text-gradient")
    assert not gradient.interactive
    assert gradient.fill.stops[0].opacity == pytest.approx(0.5)


def test_edge_colors_follow_harmony(style):
    stops = compose(style).find_named("edge-tint").paint.stops
    assert stops[0].color == "#b988ff"
    assert [s.offset for s in stops] == pytest.approx([0, 0.02, 0.02, 1])

    style.auto_color_harmony = False
    scene = compose(style)
    assert scene.find_named("edge-tint").paint.stops[0].color == "#ffffff"
    assert scene.find_named("edge-shade").paint.stops[0].color == "#000000"


def test_malformed_background_uses_fixed_edges(style, caplog):
    style.bg_color = "not-a-color"
    scene = compose(style)
    assert scene.find_named("edge-tint").paint.stops[0].color == "#ffffff"
    assert "Cannot derive edge colors" in caplog.text


def test_known_font_sets_import_url(style):
    assert "Noto+Sans+JP" in compose(style).font_import_url
    style.font = "Comic Sans MS"
    assert compose(style).font_import_url is None


def test_compose_is_deterministic_and_pure(style):
    before = style.to_dict()
    assert compose(style) == compose(style)
    assert style.to_dict() == before


def test_filters_are_defined_once(style):
    style.shape_shadow_enabled = True
    scene = compose(style)
    filters = [layer for layer in scene.layers if isinstance(layer, Filter)]
    assert len(filters) == len(set(filters)) == 1
