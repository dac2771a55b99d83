"""Node kinds — the closed set of shapes the wrapper engine distinguishes.

A value's kind is decided once, when it is wrapped. Wrappers carry their kind
in ``_kind`` so plain data and wrapped data classify the same way.
"""

from __future__ import annotations

import datetime
import enum
from collections.abc import Mapping


class NodeKind(enum.Enum):
    OBJECT = "object"
    ARRAY = "array"
    MAP = "map"
    DATE = "date"
    LEAF = "leaf"


def kind_of(value: object) -> NodeKind:
    """Classify a plain or wrapped value."""
    kind = getattr(type(value), "_kind", None)
    if isinstance(kind, NodeKind):
        return kind
    if type(value) is dict:
        return NodeKind.OBJECT
    if isinstance(value, list):
        return NodeKind.ARRAY
    if isinstance(value, Mapping):
        return NodeKind.MAP
    if isinstance(value, (datetime.date, datetime.time)):
        return NodeKind.DATE
    return NodeKind.LEAF


def is_composite(value: object) -> bool:
    return kind_of(value) is not NodeKind.LEAF
