"""
Application Layer - Use Cases and Services

This package contains the services built on the persistence layer:
- Rate cache policy for exchange rate snapshots
- Database facade over all persistent namespaces
- Timeline statistics for rate histories
"""

from currencies.application.database import Database
from currencies.application.rate_cache import RateCache
from currencies.application.timeline import Period, TimelineSeries, summarize

__all__ = [
    "Database",
    "RateCache",
    "Period",
    "TimelineSeries",
    "summarize",
]
