"""
Adapters Layer - Infrastructure

This package contains adapters to the outside world. The persistence
adapters implement the file-backed, observable key-value store.
"""
