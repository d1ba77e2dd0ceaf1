"""State store holding the editable style and notifying registered listeners."""
from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any, Callable, List, Optional

from style.models import StyleDescription, coerce_value

logger = logging.getLogger(__name__)

Listener = Callable[[StyleDescription], None]

_FIELD_NAMES = frozenset(f.name for f in fields(StyleDescription))


class StyleStore:
    """
    Owns the single editable StyleDescription.

    Listeners always receive snapshots, so nothing downstream can hold on to
    (or mutate) the live description.
    """

    def __init__(self, style: Optional[StyleDescription] = None) -> None:
        self._style = style.snapshot() if style is not None else StyleDescription()
        self._listeners: List[Listener] = []

    @property
    def style(self) -> StyleDescription:
        """Return a snapshot of the current style."""
        return self._style.snapshot()

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register a listener, call it once with the current style and return an unsubscribe callable."""
        self._listeners.append(callback)
        self._call(callback, self._style.snapshot())

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def update(self, **changes: Any) -> bool:
        """Apply field changes in place and notify listeners when something changed."""
        coerced = {}
        for key, value in changes.items():
            if key.startswith("_") or key not in _FIELD_NAMES:
                logger.debug("Ignoring update of unknown style key %r", key)
                continue
            coerced[key] = coerce_value(key, value)

        has_changed = False
        for key, value in coerced.items():
            if getattr(self._style, key) != value:
                setattr(self._style, key, value)
                has_changed = True
        if has_changed:
            self.notify()
        return has_changed

    def replace(self, style: StyleDescription) -> None:
        """Swap the whole description (e.g. after loading a file) and notify."""
        self._style = style.snapshot()
        self.notify()

    def notify(self) -> None:
        """Call every listener with a fresh snapshot."""
        for callback in list(self._listeners):
            self._call(callback, self._style.snapshot())

    def __len__(self) -> int:
        """Return the number of registered listeners."""
        return len(self._listeners)

    def _call(self, callback: Listener, style: StyleDescription) -> None:
        try:
            callback(style)
        except Exception:  # noqa: BLE001
            logger.exception("Style listener %r failed", callback)
