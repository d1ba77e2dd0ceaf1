import os

# Qt must not look for a display when tests rasterize.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402

from style.models import StyleDescription  # noqa: E402


@pytest.fixture
def style() -> StyleDescription:
    return StyleDescription()


@pytest.fixture
def example_style() -> StyleDescription:
    return StyleDescription(
        shape="circle",
        bg_color="#6200ee",
        text="A",
        shadow_enabled=True,
        shadow_type="long",
        shadow_distance=8,
        shadow_blur=False,
        global_shadow_angle=45,
    )
