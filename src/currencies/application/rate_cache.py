# src/currencies/application/rate_cache.py
"""
Rate Cache - Exchange Rate Snapshot Caching Policy

This module keeps the latest exchange rate table in the "rates" namespace.
A snapshot is replaced wholesale in one commit (clear + date + base + every
rate), so observers only ever see a complete table. A snapshot without a
date comes from a failed fetch and is ignored, which keeps the last good
table available offline.

Files that USE this module:
- currencies.application.database (Database delegates rate calls here)
- currencies.app (wires the rates namespace)

Files that this module USES:
- currencies.adapters.persistence (NamespacedStore, ObservableValue, codec)
- currencies.domain.models (ExchangeRateSnapshot, Rate)
"""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from currencies.adapters.persistence.codec import ValueKind, decode, decode_date, encode_date
from currencies.adapters.persistence.namespaced_store import NamespacedStore
from currencies.adapters.persistence.observable import ObservableValue
from currencies.domain.models import ExchangeRateSnapshot, Rate

logger = logging.getLogger(__name__)

NAMESPACE = "rates"
DATE_KEY = "_date"
BASE_KEY = "_base"


class RateCache:
    """Caches one exchange rate snapshot in a namespaced store."""

    def __init__(self, store: NamespacedStore):
        self.store = store

    def replace(self, snapshot: ExchangeRateSnapshot) -> None:
        """
        Replace the cached table with snapshot.

        Does nothing when snapshot.date is None. Otherwise the namespace is
        cleared and repopulated in a single commit.

        Raises:
            StoreWriteError: If the new table cannot be persisted
        """
        if snapshot.date is None:
            logger.debug("Ignoring undated rate snapshot (base=%s)", snapshot.base)
            return

        written = 0
        with self.store.edit() as editor:
            editor.clear()
            editor.put_string(DATE_KEY, encode_date(snapshot.date))
            editor.put_string(BASE_KEY, snapshot.base)
            for rate in snapshot.rates:
                if rate.code.startswith("_"):
                    logger.warning("Skipping rate with reserved code %r", rate.code)
                    continue
                editor.put_float(rate.code, rate.value)
                written += 1

        logger.info("Cached %d rates for %s (base %s)",
                    written, snapshot.date, snapshot.base)

    def current_date(self) -> Optional[date]:
        """Date of the cached table, or None if nothing is cached."""
        return decode_date(self.store.get_string(DATE_KEY))

    def read_snapshot(self) -> Optional[ExchangeRateSnapshot]:
        """
        Read the cached table from one committed state.

        Returns:
            ExchangeRateSnapshot, or None if no dated table is cached
        """
        data = self.store.read_all()
        day = decode_date(decode(ValueKind.STRING, data.get(DATE_KEY)))
        if day is None:
            return None

        rates: List[Rate] = []
        for code, raw in data.items():
            if code.startswith("_"):
                continue
            value = decode(ValueKind.FLOAT, raw)
            if value is not None:
                rates.append(Rate(code=code, value=value))

        return ExchangeRateSnapshot(
            date=day,
            base=decode(ValueKind.STRING, data.get(BASE_KEY)),
            rates=tuple(rates),
        )

    def current_snapshot(self) -> ObservableValue[Optional[ExchangeRateSnapshot]]:
        """Observable of the cached table; emits None until one is cached."""
        return ObservableValue(self.store, self.read_snapshot, name=f"{self.store.name}/snapshot")
