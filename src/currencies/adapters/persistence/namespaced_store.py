# src/currencies/adapters/persistence/namespaced_store.py
"""
Namespaced Store - Typed, Observable Access to One Persistent Namespace

A NamespacedStore owns exactly one namespace file ("rates", "last_state",
"starred_currencies", "preferences"). It exposes typed getters and setters
with defaults, batched edits, and observable values for single keys.

All writes to a namespace go through one re-entrant write lock. A commit
persists the new map and then notifies the namespace's change dispatcher
while the lock is still held, so observers see commits one at a time and
in commit order. Reads take no lock: the file store swaps whole maps, so
a read always sees the last committed state.

Files that USE this module:
- currencies.application.rate_cache (RateCache writes the rates namespace)
- currencies.application.database (Database owns the four namespaces)
- currencies.app (creates stores for the composition root)

Files that this module USES:
- currencies.adapters.persistence.codec (encode/decode of tagged records)
- currencies.adapters.persistence.file_store (NamespaceFile persistent medium)
- currencies.adapters.persistence.observable (ObservableValue, ChangeDispatcher)
"""
from __future__ import annotations

import logging
import re
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from currencies.adapters.persistence.codec import ValueKind, decode, encode
from currencies.adapters.persistence.file_store import NamespaceFile
from currencies.adapters.persistence.observable import ChangeDispatcher, ObservableValue
from currencies.domain.errors import InvalidNamespaceError

logger = logging.getLogger(__name__)

_NAMESPACE_RE = re.compile(r"^[a-z0-9_]+$")


class Editor:
    """
    A batch of changes to one namespace, applied in a single commit.

    Operations are applied in call order: clear() drops everything queued
    before it, including earlier puts in the same batch.
    """

    def __init__(self):
        self._clear = False
        self._puts: Dict[str, Dict[str, Any]] = {}
        self._removals: Set[str] = set()

    def put(self, key: str, kind: ValueKind, value: Any) -> "Editor":
        """Queue a typed write; a value of None queues a removal instead."""
        if value is None:
            return self.remove(key)
        self._puts[key] = encode(kind, value)
        self._removals.discard(key)
        return self

    def put_string(self, key: str, value: Optional[str]) -> "Editor":
        return self.put(key, ValueKind.STRING, value)

    def put_float(self, key: str, value: Optional[float]) -> "Editor":
        return self.put(key, ValueKind.FLOAT, value)

    def put_int(self, key: str, value: Optional[int]) -> "Editor":
        return self.put(key, ValueKind.INT, value)

    def put_bool(self, key: str, value: Optional[bool]) -> "Editor":
        return self.put(key, ValueKind.BOOL, value)

    def put_string_set(self, key: str, value: Optional[Iterable[str]]) -> "Editor":
        return self.put(key, ValueKind.STRING_SET, value)

    def remove(self, key: str) -> "Editor":
        self._puts.pop(key, None)
        self._removals.add(key)
        return self

    def clear(self) -> "Editor":
        self._clear = True
        self._puts.clear()
        self._removals.clear()
        return self

    def apply_to(self, base: Mapping[str, Any]) -> Tuple[Dict[str, Any], FrozenSet[str]]:
        """
        Compute the map resulting from this batch.

        Returns:
            Tuple of (new map, keys whose record changed)
        """
        data: Dict[str, Any] = {} if self._clear else dict(base)
        for key in self._removals:
            data.pop(key, None)
        data.update(self._puts)

        changed = frozenset(
            key for key in set(base) | set(data)
            if base.get(key) != data.get(key)
        )
        return data, changed


class NamespacedStore:
    """Typed key-value access to one isolated persistent namespace."""

    def __init__(self, name: str, data_dir: Path):
        """
        Open a namespace below data_dir.

        Args:
            name: Namespace name, lowercase letters, digits and underscores
            data_dir: Directory holding one <name>.json file per namespace

        Raises:
            InvalidNamespaceError: If the name is not a safe file stem
        """
        if not name or not _NAMESPACE_RE.match(name):
            raise InvalidNamespaceError(f"Invalid namespace name: {name!r}")
        self.name = name
        self._file = NamespaceFile(Path(data_dir) / f"{name}.json")
        self._lock = threading.RLock()
        self._dispatcher = ChangeDispatcher(self._lock)

    def __repr__(self) -> str:
        return f"NamespacedStore({self.name!r}, path={str(self._file.path)!r})"

    @property
    def lock(self) -> threading.RLock:
        """The namespace write lock; commits and notifications run under it."""
        return self._lock

    @property
    def dispatcher(self) -> ChangeDispatcher:
        return self._dispatcher

    @property
    def listener_count(self) -> int:
        """Number of observable values currently attached to this namespace."""
        return len(self._dispatcher)

    # --- reads ---

    def get(self, key: str, kind: ValueKind, default: Any = None) -> Any:
        """
        Read a typed value.

        Missing keys and records that cannot be decoded as kind both
        resolve to default.
        """
        return decode(kind, self._file.get(key), default)

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.get(key, ValueKind.STRING, default)

    def get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        return self.get(key, ValueKind.FLOAT, default)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self.get(key, ValueKind.INT, default)

    def get_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        return self.get(key, ValueKind.BOOL, default)

    def get_string_set(self, key: str, default: Iterable[str] = frozenset()) -> FrozenSet[str]:
        return self.get(key, ValueKind.STRING_SET, frozenset(default))

    def contains(self, key: str) -> bool:
        return self._file.get(key) is not None

    def keys(self) -> List[str]:
        """Keys of the last committed state, in stored order."""
        return list(self._file.snapshot())

    def read_all(self) -> Mapping[str, Any]:
        """Read-only view of every raw record from one committed state."""
        return self._file.snapshot()

    # --- writes ---

    @contextmanager
    def edit(self) -> Iterator[Editor]:
        """
        Batch several changes into one commit.

        The write lock is held for the whole block. The batch is committed
        when the block exits normally and discarded if it raises.

        Raises:
            StoreWriteError: If the commit cannot be persisted
        """
        editor = Editor()
        with self._lock:
            yield editor
            self._commit(editor)

    def _commit(self, editor: Editor) -> None:
        data, changed = editor.apply_to(self._file.snapshot())
        if not changed:
            return
        self._file.commit(data)
        logger.debug("Committed %d changed key(s) to namespace %s", len(changed), self.name)
        self._dispatcher.dispatch(changed)

    def set(self, key: str, kind: ValueKind, value: Any) -> None:
        """Write a typed value durably; None removes the key."""
        with self.edit() as editor:
            editor.put(key, kind, value)

    def set_string(self, key: str, value: Optional[str]) -> None:
        self.set(key, ValueKind.STRING, value)

    def set_float(self, key: str, value: Optional[float]) -> None:
        self.set(key, ValueKind.FLOAT, value)

    def set_int(self, key: str, value: Optional[int]) -> None:
        self.set(key, ValueKind.INT, value)

    def set_bool(self, key: str, value: Optional[bool]) -> None:
        self.set(key, ValueKind.BOOL, value)

    def set_string_set(self, key: str, value: Optional[Iterable[str]]) -> None:
        self.set(key, ValueKind.STRING_SET, value)

    def remove(self, key: str) -> None:
        with self.edit() as editor:
            editor.remove(key)

    def clear_all(self) -> None:
        """Remove every key of this namespace; other namespaces are untouched."""
        with self.edit() as editor:
            editor.clear()

    def update(self, key: str, kind: ValueKind, default: Any, fn: Callable[[Any], Any]) -> Any:
        """
        Read-modify-write one key under the write lock.

        Args:
            key: Key to update
            kind: Scalar kind of the key
            default: Value passed to fn when the key is missing or malformed
            fn: Maps the current value to the new one

        Returns:
            The value written
        """
        with self.edit() as editor:
            new_value = fn(self.get(key, kind, default))
            editor.put(key, kind, new_value)
        return new_value

    # --- observation ---

    def observe(self, key: str, kind: ValueKind, default: Any = None) -> ObservableValue:
        """Create an observable value for one key of this namespace."""
        return ObservableValue(
            self,
            lambda: self.get(key, kind, default),
            name=f"{self.name}/{key}",
        )
