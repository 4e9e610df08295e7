"""
Persistence Adapters - Data Storage

This package contains adapters for persisting data:
- Typed scalar codec (tagged records, binary32 floats)
- File-based flat maps (one JSON file per namespace)
- Namespaced stores with observable values
"""

from currencies.adapters.persistence.codec import ValueKind
from currencies.adapters.persistence.namespaced_store import Editor, NamespacedStore
from currencies.adapters.persistence.observable import ObservableValue, Subscription

__all__ = [
    "ValueKind",
    "Editor",
    "NamespacedStore",
    "ObservableValue",
    "Subscription",
]
