# src/currencies/adapters/persistence/file_store.py
"""
File Store - Flat Persistent Map Backing One Namespace

This module provides the persistent medium under a namespaced store: one
JSON file holding a flat map of key -> tagged scalar record. The whole map
is kept in memory for O(1) reads; every commit rewrites the file using an
atomic write (temp file + fsync + rename) before the in-memory map is
swapped, so a write is durable once commit() returns.

Files that USE this module:
- currencies.adapters.persistence.namespaced_store (NamespacedStore owns one NamespaceFile)

Files that this module USES:
- currencies.domain.errors (StoreWriteError for rejected writes)
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from currencies.domain.errors import StoreWriteError

logger = logging.getLogger(__name__)


class NamespaceFile:
    """A flat key -> record map persisted as one JSON file."""

    def __init__(self, path: Path):
        """
        Open a namespace file, loading its content if it exists.

        Args:
            path: Location of the JSON file (parent is created on first write)
        """
        self.path = Path(path)
        self._data: Mapping[str, Any] = MappingProxyType(self._load())

    def _load(self) -> Dict[str, Any]:
        """
        Load the map from disk.

        Handles corrupt files gracefully by backing the file up to
        <name>.json.corrupt and starting empty.
        """
        if not self.path.exists():
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self._quarantine(f"JSON decode error: {e}")
            return {}
        except OSError as e:
            logger.error("Failed to read namespace file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            self._quarantine(f"expected an object, got {type(data).__name__}")
            return {}

        logger.debug("Loaded %d entries from %s", len(data), self.path)
        return data

    def _quarantine(self, reason: str) -> None:
        backup_path = self.path.with_suffix(".json.corrupt")
        try:
            shutil.copy2(self.path, backup_path)
            self.path.unlink()
            logger.warning("Namespace file %s corrupted (%s), backed up to %s",
                           self.path, reason, backup_path)
        except OSError as backup_error:
            logger.error("Failed to backup corrupt namespace file %s: %s",
                         self.path, backup_error)

    def get(self, key: str) -> Optional[Any]:
        """Return the raw record stored under key, or None."""
        return self._data.get(key)

    def snapshot(self) -> Mapping[str, Any]:
        """Return a read-only view of the last committed map."""
        return self._data

    def commit(self, data: Dict[str, Any]) -> None:
        """
        Replace the whole map and persist it using an atomic write.

        Args:
            data: New content of the namespace

        Raises:
            StoreWriteError: If the file cannot be written
        """
        temp_path: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                suffix=".json.tmp",
                dir=str(self.path.parent),
                text=True,
            )
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())

            os.replace(temp_path, str(self.path))
        except (OSError, TypeError, ValueError) as e:
            if temp_path is not None:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
            raise StoreWriteError(f"Failed to write {self.path}: {e}") from e

        self._data = MappingProxyType(dict(data))
