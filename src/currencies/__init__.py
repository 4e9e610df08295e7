"""
Currencies - Offline-First Currency Converter Core

A reactive, file-backed key-value store that caches exchange rate tables,
the last used currency pair, starred currencies and user preferences, plus
the statistics shown on the rate timeline.
"""

__version__ = "1.0.0"
