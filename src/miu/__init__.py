"""miu: reactive state stores with path-based subscriptions."""

from importlib.metadata import version as _version

__version__ = _version("miu")

from miu._kinds import NodeKind
from miu.exceptions import (
    InvalidIndex,
    InvalidName,
    InvalidPath,
    MiuError,
    ReadOnlyViolation,
    StoreExists,
    StoreNotFound,
)
from miu.value import StateValue
from miu.subscriptions import SubscriptionManager
from miu.reactive import (
    Reactive,
    ReactiveDate,
    ReactiveList,
    ReactiveMap,
    ReactiveObject,
    snapshot,
    unwrap,
    wrap,
)
from miu.store import Store
from miu.registry import StoreRegistry
# textual NOT auto-imported: opt-in only

__all__ = [
    "Store",
    "StoreRegistry",
    "StateValue",
    "SubscriptionManager",
    "NodeKind",
    "Reactive",
    "ReactiveObject",
    "ReactiveList",
    "ReactiveMap",
    "ReactiveDate",
    "wrap",
    "unwrap",
    "snapshot",
    "MiuError",
    "InvalidName",
    "InvalidPath",
    "InvalidIndex",
    "ReadOnlyViolation",
    "StoreExists",
    "StoreNotFound",
]
