import pytest

from style.models import StyleDescription, StyleValueError
from style.store import StyleStore


def test_subscribe_calls_immediately_with_snapshot():
    store = StyleStore()
    seen = []
    store.subscribe(seen.append)
    assert len(seen) == 1
    seen[0].text = "mutated"
    assert store.style.text == "M"


def test_update_notifies_only_on_change():
    store = StyleStore()
    seen = []
    store.subscribe(seen.append)

    assert store.update(text="B", rotate="15") is True
    assert len(seen) == 2
    assert seen[-1].text == "B"
    assert seen[-1].rotate == 15

    assert store.update(text="B") is False
    assert len(seen) == 2


def test_update_ignores_unknown_keys():
    store = StyleStore()
    assert store.update(sparkles=True) is False


def test_invalid_update_changes_nothing():
    store = StyleStore()
    with pytest.raises(StyleValueError):
        store.update(text="X", shadow_distance="far")
    assert store.style.text == "M"


def test_unsubscribe():
    store = StyleStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    assert len(store) == 1
    unsubscribe()
    unsubscribe()
    assert len(store) == 0
    store.update(text="Q")
    assert len(seen) == 1


def test_failing_listener_does_not_block_others(caplog):
    store = StyleStore()
    seen = []

    def broken(_style):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(seen.append)
    store.update(shape="circle")
    assert seen[-1].shape == "circle"
    assert "boom" in caplog.text


def test_replace_swaps_whole_style():
    store = StyleStore()
    seen = []
    store.subscribe(seen.append)
    replacement = StyleDescription(text="N", shape="diamond")
    store.replace(replacement)
    replacement.text = "changed later"
    assert store.style.text == "N"
    assert seen[-1].shape == "diamond"
