"""StateValue — a leaf value together with where it was read from.

Leaves (numbers, strings, ``None``...) carry no identity of their own, so a
subscriber receiving ``'Jane'`` could not tell which field changed. A
StateValue keeps the key and the owning root alongside the value, and the
absolute path it was produced for.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable


@dataclass(frozen=True)
class StateValue:
    """Immutable leaf record. ``value`` is ``None`` when the key is absent."""

    value: Any = None
    key: Hashable | None = None
    root: Any = None
    path: str = field(default="", compare=False)

    def __repr__(self) -> str:
        return f"StateValue({self.value!r}, key={self.key!r}, path={self.path!r})"
