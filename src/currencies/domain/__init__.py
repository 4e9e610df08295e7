"""
Domain Layer - Pure Business Objects

This package contains domain models and errors.
No dependencies on infrastructure or external systems.
"""

from currencies.domain.models import (
    ExchangeRateSnapshot,
    LastUsedPair,
    Preferences,
    Rate,
    StarredCurrencySet,
    TimelinePoint,
    TimelineStats,
)
from currencies.domain.errors import (
    CurrenciesError,
    InvalidNamespaceError,
    StoreError,
    StoreWriteError,
)

__all__ = [
    "Rate",
    "ExchangeRateSnapshot",
    "LastUsedPair",
    "StarredCurrencySet",
    "Preferences",
    "TimelinePoint",
    "TimelineStats",
    "CurrenciesError",
    "StoreError",
    "StoreWriteError",
    "InvalidNamespaceError",
]
