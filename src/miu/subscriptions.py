"""Subscription manager — path-keyed listeners and change fan-out.

A change at ``user.profile.name`` reaches, in order:

1. root listeners (``''``), with the root wrapper;
2. listeners on ``user.profile.name``, with the change itself;
3. listeners on dotted descendants (``user.profile.name.first``), with the
   descendant's current value, or None once it no longer exists;
4. listeners on dotted ancestors (``user.profile``, ``user``), with their
   current value.

Callbacks run synchronously inside the mutating call. A callback that
mutates the store triggers further notifications re-entrantly; cycles are
the caller's responsibility.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from miu import path as paths
from miu.value import StateValue

logger = logging.getLogger("miu.subscriptions")

Callback = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class SubscriptionManager:
    """Registry of path -> callbacks, shared by every store over one state tree."""

    def __init__(self) -> None:
        # path -> {callback: registration token}, insertion-ordered.
        self._listeners: dict[str, dict[Callback, object]] = {}

    def subscribe(self, path: str, callback: Callback) -> Unsubscribe:
        """Register callback for path. Returns a function that removes it.

        Registering a callback that is already live on path shares its
        registration. Once removed, older unsubscribe functions stay inert
        even if the same callback is registered again.
        """
        paths.validate(path)
        token = self._listeners.setdefault(path, {}).setdefault(callback, object())

        def _unsubscribe() -> None:
            callbacks = self._listeners.get(path)
            if callbacks is None or callbacks.get(callback) is not token:
                return  # already removed
            del callbacks[callback]
            if not callbacks:
                del self._listeners[path]

        return _unsubscribe

    def listeners(self, path: str) -> list[Callback]:
        return list(self._listeners.get(path, ()))

    def notify(self, root: Any, change: Any, path: str | None = None) -> None:
        """Fan a change out to root, exact, descendant and ancestor listeners.

        ``path`` defaults to the path carried by ``change`` (a StateValue or a
        wrapper); pass it explicitly for raw values.
        """
        if path is None:
            path = change.path if isinstance(change, StateValue) else change._path
        logger.debug("notify %r", path)

        self._call("", root)
        if not path:
            return

        self._call(path, change)

        prefix = path + "."
        for candidate in [p for p in self._listeners if p.startswith(prefix)]:
            self._call(candidate, paths.get(root, candidate))

        parts = path.split(".")
        while len(parts) > 1:
            parts.pop()
            ancestor = ".".join(parts)
            if ancestor in self._listeners:
                self._call(ancestor, paths.get(root, ancestor))

    def _call(self, path: str, value: Any) -> None:
        for callback in self.listeners(path):
            callback(value)

    def __contains__(self, path: object) -> bool:
        return path in self._listeners

    def __len__(self) -> int:
        return sum(len(callbacks) for callbacks in self._listeners.values())

    def __repr__(self) -> str:
        return f"SubscriptionManager({sorted(self._listeners)!r})"
