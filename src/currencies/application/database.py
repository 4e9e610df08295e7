# src/currencies/application/database.py
"""
Database - Application Facade Over the Four Persistent Namespaces

This module gives the rest of the application one object for everything
it persists: the cached rate table, the last used currency pair, starred
currencies and user preferences. Every namespace is a separate
NamespacedStore passed in by the composition root; Database.open() builds
all four below one data directory.

Toggles run as read-modify-write inside the namespace write lock
(NamespacedStore.update), so concurrent toggles of the same key in one
process cannot lose an update.

Files that USE this module:
- currencies.app (composition root creates the Database)

Files that this module USES:
- currencies.adapters.persistence (NamespacedStore, ObservableValue, ValueKind)
- currencies.application.rate_cache (RateCache for the rates namespace)
- currencies.domain.models (domain objects and defaults)
"""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import FrozenSet, Optional

from currencies.adapters.persistence.codec import ValueKind
from currencies.adapters.persistence.namespaced_store import NamespacedStore
from currencies.adapters.persistence.observable import ObservableValue
from currencies.application import rate_cache
from currencies.application.rate_cache import RateCache
from currencies.domain.models import (
    DEFAULT_API_PROVIDER,
    DEFAULT_FEE,
    DEFAULT_FEE_ENABLED,
    DEFAULT_FROM,
    DEFAULT_THEME,
    DEFAULT_TO,
    ExchangeRateSnapshot,
    LastUsedPair,
    Preferences,
    StarredCurrencySet,
)

logger = logging.getLogger(__name__)

# Namespaces
LAST_STATE_NAMESPACE = "last_state"
STARRED_NAMESPACE = "starred_currencies"
PREFERENCES_NAMESPACE = "preferences"

# Keys
LAST_FROM_KEY = "_last_from"
LAST_TO_KEY = "_last_to"
STARS_KEY = "_stars"
STARRED_ACTIVE_KEY = "_starredActive"
API_KEY = "_api"
THEME_KEY = "_theme"
FEE_ENABLED_KEY = "_feeEnabled"
FEE_KEY = "_fee"


class Database:
    """Typed access to rates, last state, starred currencies and preferences."""

    def __init__(
        self,
        rates: NamespacedStore,
        last_state: NamespacedStore,
        starred: NamespacedStore,
        preferences: NamespacedStore,
    ):
        self.rate_cache = RateCache(rates)
        self.last_state = last_state
        self.starred = starred
        self.preferences = preferences

    @classmethod
    def open(cls, data_dir: Path) -> "Database":
        """
        Open all four namespaces below data_dir.

        Args:
            data_dir: Directory holding one JSON file per namespace

        Returns:
            Database wired to the namespace files
        """
        data_dir = Path(data_dir)
        logger.info("Opening database in %s", data_dir)
        return cls(
            rates=NamespacedStore(rate_cache.NAMESPACE, data_dir),
            last_state=NamespacedStore(LAST_STATE_NAMESPACE, data_dir),
            starred=NamespacedStore(STARRED_NAMESPACE, data_dir),
            preferences=NamespacedStore(PREFERENCES_NAMESPACE, data_dir),
        )

    # --- current exchange rates from api ---

    def insert_exchange_rates(self, snapshot: ExchangeRateSnapshot) -> None:
        """Cache a fetched rate table; undated tables are ignored."""
        self.rate_cache.replace(snapshot)

    def get_exchange_rates(self) -> ObservableValue[Optional[ExchangeRateSnapshot]]:
        return self.rate_cache.current_snapshot()

    def get_date(self) -> Optional[date]:
        return self.rate_cache.current_date()

    # --- last state ---

    def save_last_used_rates(self, from_code: Optional[str], to_code: Optional[str]) -> None:
        """
        Remember the pair the user converted last.

        A code of None removes the stored value, so the default applies again.
        """
        with self.last_state.edit() as editor:
            editor.put_string(LAST_FROM_KEY, from_code)
            editor.put_string(LAST_TO_KEY, to_code)

    def get_last_rate_from(self) -> str:
        return self.last_state.get_string(LAST_FROM_KEY, DEFAULT_FROM)

    def get_last_rate_to(self) -> str:
        return self.last_state.get_string(LAST_TO_KEY, DEFAULT_TO)

    def get_last_pair(self) -> LastUsedPair:
        return LastUsedPair(from_code=self.get_last_rate_from(), to_code=self.get_last_rate_to())

    # --- starred currencies ---

    def toggle_currency_star(self, currency_code: str) -> bool:
        """
        Star the currency if it is not starred, unstar it otherwise.

        Returns:
            True if the currency is starred after the call
        """
        def toggle(codes: FrozenSet[str]) -> FrozenSet[str]:
            if currency_code in codes:
                return codes - {currency_code}
            return codes | {currency_code}

        codes = self.starred.update(STARS_KEY, ValueKind.STRING_SET, frozenset(), toggle)
        return currency_code in codes

    def get_starred(self) -> FrozenSet[str]:
        return self.starred.get_string_set(STARS_KEY)

    def get_starred_currencies(self) -> ObservableValue[FrozenSet[str]]:
        return self.starred.observe(STARS_KEY, ValueKind.STRING_SET, frozenset())

    def is_filter_starred_enabled(self) -> ObservableValue[bool]:
        return self.starred.observe(STARRED_ACTIVE_KEY, ValueKind.BOOL, False)

    def toggle_starred_active(self) -> bool:
        """Flip the starred-only filter and return its new state."""
        return self.starred.update(STARRED_ACTIVE_KEY, ValueKind.BOOL, False, lambda active: not active)

    def get_starred_state(self) -> StarredCurrencySet:
        return StarredCurrencySet(
            codes=self.get_starred(),
            filter_active=self.starred.get_bool(STARRED_ACTIVE_KEY, False),
        )

    # --- preferences ---

    def set_api_provider(self, api: int) -> None:
        self.preferences.set_int(API_KEY, api)

    def get_api_provider(self) -> int:
        return self.preferences.get_int(API_KEY, DEFAULT_API_PROVIDER)

    def get_api_provider_async(self) -> ObservableValue[int]:
        return self.preferences.observe(API_KEY, ValueKind.INT, DEFAULT_API_PROVIDER)

    def set_theme(self, theme: int) -> None:
        self.preferences.set_int(THEME_KEY, theme)

    def get_theme(self) -> int:
        return self.preferences.get_int(THEME_KEY, DEFAULT_THEME)

    def get_theme_async(self) -> ObservableValue[int]:
        return self.preferences.observe(THEME_KEY, ValueKind.INT, DEFAULT_THEME)

    def set_fee_enabled(self, enabled: bool) -> None:
        self.preferences.set_bool(FEE_ENABLED_KEY, enabled)

    def get_fee_enabled(self) -> bool:
        return self.preferences.get_bool(FEE_ENABLED_KEY, DEFAULT_FEE_ENABLED)

    def is_fee_enabled(self) -> ObservableValue[bool]:
        return self.preferences.observe(FEE_ENABLED_KEY, ValueKind.BOOL, DEFAULT_FEE_ENABLED)

    def set_fee(self, fee: float) -> None:
        self.preferences.set_float(FEE_KEY, fee)

    def get_fee_value(self) -> float:
        return self.preferences.get_float(FEE_KEY, DEFAULT_FEE)

    def get_fee(self) -> ObservableValue[float]:
        return self.preferences.observe(FEE_KEY, ValueKind.FLOAT, DEFAULT_FEE)

    def get_preferences(self) -> Preferences:
        return Preferences(
            api_provider=self.get_api_provider(),
            theme=self.get_theme(),
            fee_enabled=self.get_fee_enabled(),
            fee=self.get_fee_value(),
        )
