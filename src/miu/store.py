"""Store — named façade over a reactive state tree.

The store API sits under ``_``-prefixed names so it never collides with keys
of the state (the same convention namedtuple uses for ``_asdict``):

    store._get(path)            read by path
    store._set(path, value)     write by path
    store._subscribe(path, cb)  listen; returns unsubscribe()
    store._data                 function-free snapshot
    store._state                live wrapper
    store._name

Everything else passes through to the state, so ``store.count = 1`` is
``store._set('count', 1)``.

Composition: ``Store('b', store_a)`` shares store_a's state and subscriptions,
and ``Store('u', store_a.user)`` is scoped to the ``user`` subtree. Paths on a
scoped store are relative to its subtree.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Iterator

from miu import path as paths
from miu.exceptions import InvalidName, ReadOnlyViolation
from miu.reactive import Reactive, snapshot, wrap
from miu.subscriptions import SubscriptionManager, Unsubscribe

_API = frozenset({"_get", "_set", "_subscribe", "_data", "_state", "_name", "_subscriptions"})


class Store:
    """Named reactive state container."""

    __slots__ = ("_store_name", "_store_state")

    def __init__(self, name: str, initial_state: Any = None) -> None:
        if not isinstance(name, str) or not name:
            raise InvalidName("Store name must be a non-empty string")
        if isinstance(initial_state, Store):
            state = initial_state._state
        elif isinstance(initial_state, Reactive):
            state = initial_state
        elif initial_state is None or isinstance(initial_state, Mapping):
            state = wrap({} if initial_state is None else initial_state)
        else:
            raise TypeError(
                f"initial state must be a mapping or a Store, not {type(initial_state).__name__}"
            )
        object.__setattr__(self, "_store_name", name)
        object.__setattr__(self, "_store_state", state)

    # --- API ---

    @property
    def _name(self) -> str:
        return self._store_name

    @property
    def _state(self) -> Reactive:
        return self._store_state

    @property
    def _subscriptions(self) -> SubscriptionManager:
        return self._store_state._root._subscriptions

    @property
    def _data(self) -> Any:
        return snapshot(self._store_state)

    def _get(self, path: str) -> Any:
        return paths.get(self._store_state, path)

    def _set(self, path: str, value: Any) -> None:
        paths.set(self._store_state, path, value)

    def _subscribe(self, path: str, callback: Callable[[Any], None]) -> Unsubscribe:
        paths.validate(path)
        return self._subscriptions.subscribe(paths.join(self._store_state._path, path), callback)

    # --- Pass-through to state ---

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name in self.__slots__:
            raise AttributeError(name)
        return getattr(self._store_state, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _API or name in self.__slots__:
            raise ReadOnlyViolation(name)
        setattr(self._store_state, name, value)

    def __delattr__(self, name: str) -> None:
        if name in _API or name in self.__slots__:
            raise ReadOnlyViolation(name)
        delattr(self._store_state, name)

    def __getitem__(self, key: Any) -> Any:
        return self._store_state[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._store_state[key] = value

    def __delitem__(self, key: Any) -> None:
        del self._store_state[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._store_state)

    def __len__(self) -> int:
        return len(self._store_state)

    def __contains__(self, key: object) -> bool:
        return key in self._store_state

    def __repr__(self) -> str:
        return f"Store({self._store_name!r}, {self._data!r})"
