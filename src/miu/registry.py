"""StoreRegistry — named lookup of stores for binding layers.

Binding code refers to state with strings such as ``"todos.items[0].done"``:
a store name followed by a path inside that store. A registry maps the names
to stores and splits such references. It is an explicit object; create one
per application (or per test) and pass it where it is needed.
"""

from __future__ import annotations

import logging
from typing import Iterator

from miu import path as paths
from miu.exceptions import InvalidPath, StoreExists, StoreNotFound
from miu.store import Store

logger = logging.getLogger("miu.registry")


class StoreRegistry:
    """Name -> Store mapping with reference resolution."""

    def __init__(self, *stores: Store) -> None:
        self._stores: dict[str, Store] = {}
        self.register(*stores)

    def register(self, *stores: Store) -> None:
        """Add stores. Raises StoreExists if a name is already taken."""
        for store in stores:
            name = store._name
            if name in self._stores:
                raise StoreExists(f"Store with name {name!r} already exists")
            self._stores[name] = store
            logger.info("Registered store %r", name)

    def unregister(self, name: str) -> Store:
        store = self.get(name)
        del self._stores[name]
        return store

    def get(self, name: str) -> Store:
        try:
            return self._stores[name]
        except KeyError:
            raise StoreNotFound(f"Store not found: {name}") from None

    def resolve(self, reference: str) -> tuple[Store, str]:
        """Split ``"<store>.<path>"`` into the registered store and the path."""
        name, _, path = reference.partition(".")
        if not name or not path:
            raise InvalidPath(reference)
        paths.validate(path)
        return self.get(name), path

    def __contains__(self, name: object) -> bool:
        return name in self._stores

    def __iter__(self) -> Iterator[Store]:
        return iter(list(self._stores.values()))

    def __len__(self) -> int:
        return len(self._stores)

    def __repr__(self) -> str:
        return f"StoreRegistry({list(self._stores)!r})"
