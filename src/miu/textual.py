"""Textual integration for miu. Opt-in — requires textual.

Bridges store subscriptions to widget updates: effects are skipped while the
app is not running or paused, marshalled to the app thread when the store is
mutated from a worker thread, and tolerant of widgets that are not mounted
yet (NoMatches).
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

logger = logging.getLogger("miu.textual")

# Keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend bridged effects during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def subscribe(app, store, path, effect, *, fire_immediately=False):
    """store._subscribe() that safely bridges to Textual widgets.

    Returns the unsubscribe function. With fire_immediately, effect runs once
    with ``store._get(path)``: the wrapper for a composite, the raw value for
    a leaf. That is the shape descendant and ancestor notifications carry;
    only a change made exactly at a leaf path arrives as a StateValue, so
    leaf effects should accept both (``getattr(v, "value", v)``).
    """
    _main = threading.get_ident()

    def _guarded(value):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    def _safe(value):
        try:
            effect(value)
        except NoMatches:
            logger.debug("No widget for %s.%s yet", store._name, path)

    unsubscribe = store._subscribe(path, _guarded)
    if fire_immediately:
        _guarded(store._get(path))
    return unsubscribe
