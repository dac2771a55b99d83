"""Path addressing — dotted/bracketed string addresses into a state tree.

    user.name          record key
    items[0], items.0  sequence index
    user_map[u1]       map key
    items.length       sequence length
    user_map.size      map size

The empty path addresses the root. Paths are validated against a strict
grammar before anything is read or written; missing data along a valid path
resolves to ``None`` instead of raising.

The walkers work on plain data and on wrappers alike, since both classify
through ``kind_of``.
"""

from __future__ import annotations

import re
from typing import Any

from miu._kinds import NodeKind, is_composite, kind_of
from miu.exceptions import InvalidIndex, InvalidPath

_IDENT = r"[A-Za-z_$][\w$]*"
_SEGMENT = rf"(?:\.{_IDENT}|\.\d+|\[[^\[\].]+\])"
_PATH_RE = re.compile(rf"{_IDENT}{_SEGMENT}*")
_SPLIT_RE = re.compile(r"[.\[]")
_INT_RE = re.compile(r"-?\d+")


def validate(path: object) -> None:
    """Raise InvalidPath unless path is '' or matches the grammar."""
    if not isinstance(path, str):
        raise InvalidPath(path)
    if path and _PATH_RE.fullmatch(path) is None:
        raise InvalidPath(path)


def split(path: str) -> list[str]:
    """Split a path into segments: 'a.b[0]' -> ['a', 'b', '0']."""
    if not path:
        return []
    return [segment.rstrip("]") for segment in _SPLIT_RE.split(path)]


def join(base: str, path: str) -> str:
    """Append a relative path to an absolute one."""
    if not base:
        return path
    if not path:
        return base
    return f"{base}{path}" if path.startswith("[") else f"{base}.{path}"


def child(path: str, key: object, *, bracket: bool = False) -> str:
    """Path of a child node: 'a' + 'b' -> 'a.b', or 'a[b]' when bracket."""
    if bracket:
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else str(key)


def get(root: Any, path: str) -> Any:
    """Resolve path against root. Returns None if any step is missing."""
    validate(path)
    node = root
    for segment in split(path):
        node = _step(node, segment)
        if node is None:
            return None
    return node


def set(root: Any, path: str, value: Any) -> None:
    """Assign value at path, creating plain dicts for missing intermediates.

    The remaining segments below the first missing intermediate are folded
    into one nested dict and assigned in a single write.
    """
    validate(path)
    segments = split(path)
    if not segments:
        raise InvalidPath(path)

    node = root
    for depth, segment in enumerate(segments[:-1]):
        found = _step(node, segment)
        if found is None:
            _assign(node, segment, _nest(segments[depth + 1:], value))
            return
        if not is_composite(found):
            raise TypeError(
                f"cannot set {path!r}: {segment!r} holds a {type(found).__name__}"
            )
        node = found
    _assign(node, segments[-1], value)


def _index(segment: str) -> int | None:
    return int(segment) if _INT_RE.fullmatch(segment) else None


def _candidate_keys(segment: str) -> tuple:
    index = _index(segment)
    return (segment,) if index is None else (segment, index)


def _existing_key(node: Any, segment: str) -> Any:
    for key in _candidate_keys(segment):
        if key in node:
            return key
    return None


def _step(node: Any, segment: str) -> Any:
    kind = kind_of(node)
    if kind is NodeKind.ARRAY:
        if segment == "length":
            return len(node)
        index = _index(segment)
        if index is None or not 0 <= index < len(node):
            return None
        return node[index]
    if kind is NodeKind.MAP and segment == "size":
        return len(node)
    if kind in (NodeKind.MAP, NodeKind.OBJECT):
        key = _existing_key(node, segment)
        if key is not None:
            return node[key]
        # Values assigned as attributes of a map wrapper, beside its entries.
        props = getattr(node, "_props", None) if kind is NodeKind.MAP else None
        return None if props is None else props.get(segment)
    if segment.startswith("_"):
        return None
    return getattr(node, segment, None)


def _assign(node: Any, segment: str, value: Any) -> None:
    kind = kind_of(node)
    if kind is NodeKind.ARRAY:
        if segment == "length":
            _resize(node, value)
            return
        index = _index(segment)
        if index is None or not 0 <= index <= len(node):
            raise InvalidIndex(segment)
        if isinstance(node, list) and index == len(node):
            node.append(value)
        else:
            node[index] = value
    elif kind is NodeKind.MAP and segment == "size":
        # Surfaces the target's own read-only error.
        setattr(node, segment, value)
    elif kind in (NodeKind.MAP, NodeKind.OBJECT):
        key = _existing_key(node, segment)
        node[segment if key is None else key] = value
    else:
        setattr(node, segment, value)


def _resize(node: Any, size: Any) -> None:
    if not isinstance(size, int) or isinstance(size, bool) or size < 0:
        raise InvalidIndex(size)
    if isinstance(node, list):
        del node[size:]
        node.extend([None] * (size - len(node)))
    else:
        node.length = size


def _nest(segments: list[str], value: Any) -> Any:
    for segment in reversed(segments):
        value = {segment: value}
    return value
