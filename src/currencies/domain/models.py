# src/currencies/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Cached exchange rate snapshots
- The last used conversion pair
- Starred currencies and user preferences
- Timeline points and derived statistics

Files that USE this module:
- currencies.application.* (all services use domain models)
- currencies.adapters.persistence.codec (rate snapshots are decoded into these)
- tests.* (tests use domain models for test data)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from dataclasses import dataclass, field  # Decorator for creating data classes
from datetime import date  # Calendar dates for snapshots and timelines
from typing import Optional, Tuple  # Type hints for optional values


DEFAULT_FROM = "USD"
DEFAULT_TO = "EUR"
DEFAULT_API_PROVIDER = 0
DEFAULT_THEME = 2
DEFAULT_FEE_ENABLED = False
DEFAULT_FEE = 2.2


@dataclass(frozen=True)
class Rate:
    """A single exchange rate relative to the snapshot's base currency."""
    code: str
    value: float


@dataclass(frozen=True)
class ExchangeRateSnapshot:
    """
    Full table of exchange rates as returned by a rate provider.

    Attributes:
        date: Day the rates are valid for; None when the fetch failed
        base: Base currency code the rates are quoted against
        rates: Ordered rate entries
    """
    date: Optional[date]
    base: Optional[str]
    rates: Tuple[Rate, ...] = ()

    def rate_for(self, code: str) -> Optional[float]:
        """Return the rate for a currency code, or None if it is not listed."""
        for rate in self.rates:
            if rate.code == code:
                return rate.value
        return None


@dataclass(frozen=True)
class LastUsedPair:
    """The currency pair the user converted last."""
    from_code: str = DEFAULT_FROM
    to_code: str = DEFAULT_TO


@dataclass(frozen=True)
class StarredCurrencySet:
    """Starred currency codes and whether the list is filtered by them."""
    codes: frozenset = field(default_factory=frozenset)
    filter_active: bool = False


@dataclass(frozen=True)
class Preferences:
    """
    User preferences.

    Attributes:
        api_provider: Index of the selected rate provider
        theme: Index of the selected theme (2 = follow system)
        fee_enabled: Whether a conversion fee is applied
        fee: Fee in percent
    """
    api_provider: int = DEFAULT_API_PROVIDER
    theme: int = DEFAULT_THEME
    fee_enabled: bool = DEFAULT_FEE_ENABLED
    fee: float = DEFAULT_FEE


@dataclass(frozen=True)
class TimelinePoint:
    """One dated value of a rate history."""
    day: date
    value: float


@dataclass(frozen=True)
class TimelineStats:
    """
    Statistics derived from a rate history.

    Attributes:
        past: Point the current rate is compared with
        current: Latest point of the series
        average: Mean of all values
        minimum: Lowest point (first occurrence)
        maximum: Highest point (first occurrence)
        difference_percent: Change from past to current in percent
    """
    past: Optional[TimelinePoint] = None
    current: Optional[TimelinePoint] = None
    average: Optional[float] = None
    minimum: Optional[TimelinePoint] = None
    maximum: Optional[TimelinePoint] = None
    difference_percent: Optional[float] = None
