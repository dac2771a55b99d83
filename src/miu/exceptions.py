"""Errors raised by miu.

Each error also derives from the built-in exception a caller would catch for
the same mistake on plain Python data, so ``except KeyError`` and friends keep
working.
"""

from __future__ import annotations


class MiuError(Exception):
    """Base class for all miu errors."""


class InvalidName(MiuError, ValueError):
    """Store name is not a non-empty string."""


class InvalidPath(MiuError, ValueError):
    """Path string does not match the path grammar."""

    def __init__(self, path: object) -> None:
        super().__init__(f"Invalid path syntax: {path!r}")
        self.path = path


class InvalidIndex(MiuError, IndexError):
    """Negative or out-of-range sequence index written through the path API."""

    def __init__(self, index: object) -> None:
        super().__init__(f"Invalid array index: {index}")
        self.index = index


class ReadOnlyViolation(MiuError, AttributeError):
    """Assignment or deletion of a reserved API attribute."""

    def __init__(self, name: str, prefix: str = "") -> None:
        super().__init__(f"{prefix}'{name}' is read-only")
        self.name = name


class StoreExists(MiuError, ValueError):
    """A store with the same name is already registered."""


class StoreNotFound(MiuError, KeyError):
    """No store is registered under the requested name."""
