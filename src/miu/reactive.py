"""Reactive wrappers — the interception engine.

``wrap()`` copies a nested value into a tree of wrappers, one per
composite node; leaves are held by reference. Every write through a wrapper
(attribute or item assignment, deletion, mutating method) updates the
backing structure and reports the change to the root's SubscriptionManager:

- leaf changes are reported as a StateValue carrying key and path;
- composite changes are reported as the wrapper itself.

Node kinds and their wrappers:

    dict                      ReactiveObject   MutableMapping with attribute access
    list                      ReactiveList     MutableSequence
    other Mapping             ReactiveMap      MutableMapping
    date / datetime / time    ReactiveDate     read-only view of the raw value

Each wrapper holds its absolute path and the root wrapper. The root also
holds the SubscriptionManager, which any store composed over the tree shares.
"""

from __future__ import annotations

import copy
import inspect
import types
from collections.abc import Mapping, MutableMapping, MutableSequence
from typing import Any, Hashable, Iterable, Iterator

from miu import path as paths
from miu._kinds import NodeKind, is_composite, kind_of
from miu.exceptions import InvalidIndex, ReadOnlyViolation
from miu.subscriptions import SubscriptionManager
from miu.value import StateValue


class Reactive:
    """Base for all wrappers. Internal state lives in slots set via object.__setattr__."""

    __slots__ = ("_target", "_path", "_root", "_subscriptions")

    _kind: NodeKind

    def __init__(
        self,
        value: Any,
        path: str = "",
        root: Reactive | None = None,
        subscriptions: SubscriptionManager | None = None,
    ) -> None:
        object.__setattr__(self, "_path", path)
        object.__setattr__(self, "_root", self if root is None else root)
        if root is None and subscriptions is None:
            subscriptions = SubscriptionManager()
        object.__setattr__(self, "_subscriptions", subscriptions if root is None else None)
        object.__setattr__(self, "_target", self._build(value))

    # --- Hooks ---

    def _build(self, value: Any) -> Any:
        raise NotImplementedError

    def _child_path(self, key: Hashable) -> str:
        return paths.child(self._path, key, bracket=True)

    def _children(self) -> Iterable[tuple[Hashable, Any]]:
        return ()

    def _set_attribute(self, name: str, value: Any) -> None:
        setattr(self._target, name, value)

    def _delete_attribute(self, name: str) -> None:
        delattr(self._target, name)

    # --- Shared machinery ---

    def _wrap_child(self, key: Hashable, value: Any) -> Any:
        if is_composite(value):
            return wrap(value, self._child_path(key), self._root)
        return value

    def _change(self, key: Hashable, item: Any) -> Any:
        if isinstance(item, Reactive):
            return item
        return StateValue(item, key, self._root, self._child_path(key))

    def _absent(self, key: Hashable) -> StateValue:
        return StateValue(None, key, self._root, self._child_path(key))

    def _notify(self, change: Any, path: str | None = None) -> None:
        root = self._root
        root._subscriptions.notify(root, change, path)

    def _relocate(self, path: str) -> None:
        """Move this subtree to a new absolute path."""
        if path == self._path:
            return
        object.__setattr__(self, "_path", path)
        for key, item in self._children():
            if isinstance(item, Reactive):
                item._relocate(self._child_path(key))

    @property
    def _data(self) -> Any:
        """Function-free plain snapshot."""
        return snapshot(self)

    @property
    def _value(self) -> Any:
        """Children as wrappers (composites) or StateValues (leaves)."""
        changes = [(key, self._change(key, item)) for key, item in self._children()]
        if self._kind is NodeKind.ARRAY:
            return [change for _, change in changes]
        return dict(changes)

    # --- Attribute protocol ---

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") and hasattr(type(self), name):
            raise ReadOnlyViolation(name, "[miu] ")
        if hasattr(type(self), name):
            # Property setters and read-only errors of the wrapper class itself.
            object.__setattr__(self, name, value)
            return
        self._set_attribute(name, value)

    def __delattr__(self, name: str) -> None:
        if hasattr(type(self), name):
            raise ReadOnlyViolation(name, "[miu] ")
        self._delete_attribute(name)

    # --- Value semantics ---

    def __eq__(self, other: object) -> bool:
        return unwrap(self) == unwrap(other)

    __hash__ = None  # type: ignore[assignment]

    def __copy__(self) -> Any:
        return unwrap(self)

    def __deepcopy__(self, memo: dict) -> Any:
        return copy.deepcopy(unwrap(self), memo)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({unwrap(self)!r})"


class ReactiveObject(Reactive, MutableMapping):
    """Record wrapper over a dict.

    Keys read as attributes or items, and the dict methods (``get``,
    ``keys``, ``items``, ``update``, ``pop``...) work through the mapping
    protocol. A stored key wins over a method of the same name on attribute
    access. Missing keys read as None through attribute access and raise
    KeyError through item access. Functions stored in the record are bound to
    the wrapper, so ``self.count += 1`` inside them notifies.
    """

    __slots__ = ()

    _kind = NodeKind.OBJECT

    def _build(self, value: Mapping) -> dict:
        return {key: self._wrap_child(key, item) for key, item in value.items()}

    def _child_path(self, key: Hashable) -> str:
        return paths.child(self._path, key)

    def _children(self) -> Iterable[tuple[Hashable, Any]]:
        return self._target.items()

    def _read(self, key: Hashable) -> Any:
        item = self._target[key]
        if inspect.isfunction(item):
            return types.MethodType(item, self)
        return item

    def _set_attribute(self, name: str, value: Any) -> None:
        self[name] = value

    def _delete_attribute(self, name: str) -> None:
        self._discard(name)

    def _discard(self, key: Hashable) -> None:
        if key not in self._target:
            return
        del self._target[key]
        self._notify(self._absent(key))

    def __getattribute__(self, name: str) -> Any:
        if not name.startswith("_"):
            target = object.__getattribute__(self, "_target")
            if name in target:
                return object.__getattribute__(self, "_read")(name)
        return object.__getattribute__(self, name)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        if name in object.__getattribute__(self, "_target"):
            return self._read(name)
        if name.startswith("_"):
            raise AttributeError(name)
        return None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            super().__setattr__(name, value)
        else:
            self[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            super().__delattr__(name)
        else:
            self._discard(name)

    def __getitem__(self, key: Hashable) -> Any:
        if key not in self._target:
            raise KeyError(key)
        return self._read(key)

    def __setitem__(self, key: Hashable, value: Any) -> None:
        child = self._wrap_child(key, value)
        self._target[key] = child
        self._notify(self._change(key, child))

    def __delitem__(self, key: Hashable) -> None:
        self._discard(key)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._target)

    def __len__(self) -> int:
        return len(self._target)

    def __contains__(self, key: object) -> bool:
        return key in self._target

    def __dir__(self) -> list[str]:
        return [*super().__dir__(), *(k for k in self._target if isinstance(k, str))]


class ReactiveList(Reactive, MutableSequence):
    """Sequence wrapper over a list.

    Index assignment past the end grows the list with None. Bulk mutators
    (append, extend, insert, pop, remove, clear, sort, reverse, slice
    assignment and deletion) notify the list once, after re-pathing the
    children to their new indices.
    """

    __slots__ = ()

    _kind = NodeKind.ARRAY

    def _build(self, value: Iterable) -> list:
        return [self._wrap_child(index, item) for index, item in enumerate(value)]

    def _children(self) -> Iterable[tuple[Hashable, Any]]:
        return enumerate(self._target)

    def _adopt(self, index: int, value: Any) -> Any:
        # A wrapper already in this list is copied, never aliased.
        if isinstance(value, Reactive) and any(value is item for item in self._target):
            value = unwrap(value)
        return self._wrap_child(index, value)

    def _changed(self) -> None:
        for index, item in enumerate(self._target):
            if isinstance(item, Reactive):
                item._relocate(self._child_path(index))
        self._notify(self)

    # --- Reads ---

    def __getitem__(self, index: int | slice) -> Any:
        return self._target[index]

    def __len__(self) -> int:
        return len(self._target)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._target)

    def __contains__(self, value: object) -> bool:
        return any(item is value or item == value for item in self._target)

    @property
    def length(self) -> int:
        return len(self._target)

    @length.setter
    def length(self, size: int) -> None:
        if not isinstance(size, int) or isinstance(size, bool) or size < 0:
            raise InvalidIndex(size)
        current = len(self._target)
        if size < current:
            del self._target[size:]
            affected = range(size, current)
        else:
            self._target.extend([None] * (size - current))
            affected = range(current, size)
        for index in affected:
            self._notify(self._absent(index))
        self._notify(self)

    # --- Writes ---

    def __setitem__(self, index: int | slice, value: Any) -> None:
        if isinstance(index, slice):
            start = index.indices(len(self._target))[0]
            children = [self._adopt(start + offset, item) for offset, item in enumerate(value)]
            self._target[index] = children
            self._changed()
            return

        size = len(self._target)
        if index < 0:
            index += size
            if index < 0:
                raise InvalidIndex(index - size)
        if index >= size:
            self._target.extend([None] * (index + 1 - size))
        current = self._target[index]
        child = value if value is current else self._adopt(index, value)
        self._target[index] = child
        self._notify(self._change(index, child))
        self._notify(self)

    def __delitem__(self, index: int | slice) -> None:
        del self._target[index]
        self._changed()

    def insert(self, index: int, value: Any) -> None:
        position = max(0, min(index + len(self._target) if index < 0 else index, len(self._target)))
        self._target.insert(index, self._adopt(position, value))
        self._changed()

    def append(self, value: Any) -> None:
        self._target.append(self._adopt(len(self._target), value))
        self._changed()

    def extend(self, values: Iterable[Any]) -> None:
        values = list(values)
        start = len(self._target)
        self._target.extend(self._adopt(start + offset, item) for offset, item in enumerate(values))
        self._changed()

    def __iadd__(self, values: Iterable[Any]) -> ReactiveList:
        self.extend(values)
        return self

    def pop(self, index: int = -1) -> Any:
        item = self._target.pop(index)
        self._changed()
        return item

    def remove(self, value: Any) -> None:
        for index, item in enumerate(self._target):
            if item is value or item == value:
                del self[index]
                return
        raise ValueError(f"{value!r} not in list")

    def clear(self) -> None:
        self._target.clear()
        self._changed()

    def sort(self, *, key: Any = None, reverse: bool = False) -> None:
        self._target.sort(key=key, reverse=reverse)
        self._changed()

    def reverse(self) -> None:
        self._target.reverse()
        self._changed()


class ReactiveMap(Reactive, MutableMapping):
    """Keyed-collection wrapper over any non-dict Mapping.

    Entries live at ``path[key]``. Setting an entry notifies the entry and
    then the map; deleting notifies the entry with an absent value and then
    the map. Attribute assignment (``m.flag = x``) does not create an entry:
    the value is kept beside the entries and reported raw at ``path.flag``,
    which reaches the map's own listeners as an ancestor change.
    """

    __slots__ = ("_props",)

    _kind = NodeKind.MAP

    def __init__(
        self,
        value: Any,
        path: str = "",
        root: Reactive | None = None,
        subscriptions: SubscriptionManager | None = None,
    ) -> None:
        object.__setattr__(self, "_props", {})
        super().__init__(value, path, root, subscriptions)

    def _build(self, value: Mapping) -> MutableMapping:
        target = _empty_like(value)
        for key, item in value.items():
            target[key] = self._wrap_child(key, item)
        return target

    def _children(self) -> Iterable[tuple[Hashable, Any]]:
        return self._target.items()

    def _store(self, key: Hashable, value: Any) -> Any:
        child = self._wrap_child(key, value)
        self._target[key] = child
        return child

    def _set_attribute(self, name: str, value: Any) -> None:
        self._props[name] = value
        self._notify(value, paths.child(self._path, name))

    def _delete_attribute(self, name: str) -> None:
        if name not in self._props:
            raise AttributeError(name)
        del self._props[name]
        self._notify(None, paths.child(self._path, name))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or hasattr(type(self), name):
            raise AttributeError(name)
        if name in self._target:
            return self._target[name]
        return self._props.get(name)

    @property
    def size(self) -> int:
        return len(self._target)

    def __getitem__(self, key: Hashable) -> Any:
        if key not in self._target:
            raise KeyError(key)
        return self._target[key]

    def __setitem__(self, key: Hashable, value: Any) -> None:
        child = self._store(key, value)
        self._notify(self._change(key, child))
        self._notify(self)

    def __delitem__(self, key: Hashable) -> None:
        if key not in self._target:
            raise KeyError(key)
        del self._target[key]
        self._notify(self._absent(key))
        self._notify(self)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._target)

    def __len__(self) -> int:
        return len(self._target)

    def __contains__(self, key: object) -> bool:
        return key in self._target

    def update(self, other: Any = (), /, **kwargs: Any) -> None:
        pairs = list(other.items() if isinstance(other, Mapping) else other)
        pairs.extend(kwargs.items())
        for key, value in pairs:
            self._notify(self._change(key, self._store(key, value)))
        self._notify(self)

    def setdefault(self, key: Hashable, default: Any = None) -> Any:
        if key not in self._target:
            self[key] = default
        return self._target[key]

    def clear(self) -> None:
        keys = list(self._target)
        self._target.clear()
        for key in keys:
            self._notify(self._absent(key))
        self._notify(self)


class ReactiveDate(Reactive):
    """Date wrapper. Dates are immutable; reads and methods go to the raw value."""

    __slots__ = ()

    _kind = NodeKind.DATE

    def _build(self, value: Any) -> Any:
        return copy.copy(value)

    @property
    def _value(self) -> Any:
        return self._target

    def __getattr__(self, name: str) -> Any:
        if hasattr(type(self), name):
            raise AttributeError(name)
        return getattr(self._target, name)

    def __hash__(self) -> int:
        return hash(self._target)

    def __lt__(self, other: Any) -> bool:
        return self._target < unwrap(other)

    def __le__(self, other: Any) -> bool:
        return self._target <= unwrap(other)

    def __gt__(self, other: Any) -> bool:
        return self._target > unwrap(other)

    def __ge__(self, other: Any) -> bool:
        return self._target >= unwrap(other)

    def __add__(self, other: Any) -> Any:
        return self._target + unwrap(other)

    def __sub__(self, other: Any) -> Any:
        return self._target - unwrap(other)

    def __radd__(self, other: Any) -> Any:
        return unwrap(other) + self._target

    def __rsub__(self, other: Any) -> Any:
        return unwrap(other) - self._target

    def __str__(self) -> str:
        return str(self._target)


_WRAPPERS: dict[NodeKind, type[Reactive]] = {
    NodeKind.OBJECT: ReactiveObject,
    NodeKind.ARRAY: ReactiveList,
    NodeKind.MAP: ReactiveMap,
    NodeKind.DATE: ReactiveDate,
}


def wrap(
    value: Any,
    path: str = "",
    root: Reactive | None = None,
    subscriptions: SubscriptionManager | None = None,
) -> Any:
    """Wrap value at path under root.

    Leaves come back as a StateValue. A wrapper already living at ``path``
    (under ``root``, when given) is returned as is; a wrapper from anywhere
    else is copied. Without a root the new wrapper is its own root and owns
    ``subscriptions`` (a fresh SubscriptionManager by default).
    """
    kind = kind_of(value)
    if kind is NodeKind.LEAF:
        return StateValue(value)
    if isinstance(value, Reactive):
        if value._path == path and (root is None or value._root is root):
            return value
        value = unwrap(value)
    return _WRAPPERS[kind](value, path, root, subscriptions)


def unwrap(value: Any) -> Any:
    """Plain copy of a wrapped (or plain) tree. Functions are kept."""
    return _plain(value, strip=False)


def snapshot(value: Any) -> Any:
    """Plain, function-free copy of a wrapped (or plain) tree.

    Composites are rebuilt and leaves are shared. Record keys holding
    functions are dropped; sequence slots holding functions become None so
    indices are preserved.
    """
    return _plain(value, strip=True)


def _plain(value: Any, strip: bool) -> Any:
    kind = kind_of(value)
    if kind is NodeKind.LEAF:
        return value
    if kind is NodeKind.DATE:
        return value._target if isinstance(value, Reactive) else value

    pairs = _pairs(value)
    if kind is NodeKind.ARRAY:
        return [None if strip and callable(item) else _plain(item, strip) for _, item in pairs]
    plain = {} if kind is NodeKind.OBJECT else _empty_like(value._target if isinstance(value, Reactive) else value)
    for key, item in pairs:
        if not (strip and callable(item)):
            plain[key] = _plain(item, strip)
    return plain


def _pairs(value: Any) -> Iterable[tuple[Hashable, Any]]:
    if isinstance(value, Reactive):
        return list(value._children())
    if isinstance(value, list):
        return enumerate(value)
    return value.items()


def _empty_like(mapping: Mapping) -> MutableMapping:
    if not isinstance(mapping, MutableMapping):
        return {}
    clone = copy.copy(mapping)
    clone.clear()
    return clone
