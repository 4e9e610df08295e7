# src/currencies/domain/errors.py
"""
Domain Errors - Store and Business Logic Exceptions

This module defines the exceptions raised by the persistence layer and
the domain services. Decode failures are never raised (they resolve to
defaults); write failures always are.
"""


class CurrenciesError(Exception):
    """Base exception for all currencies errors."""
    pass


class StoreError(CurrenciesError):
    """Raised when a namespaced store cannot fulfil a request."""
    pass


class StoreWriteError(StoreError):
    """Raised when the persistent medium rejects a durable write."""
    pass


class InvalidNamespaceError(StoreError):
    """Raised when a namespace name is empty or contains unsafe characters."""
    pass
