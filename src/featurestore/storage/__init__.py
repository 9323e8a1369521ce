"""
Feature storage backends.

Provides:
- StorageReader: Read contract consumed by the resolver and catalog
- InMemoryStorage: Dictionary-backed store, loadable from YAML fixtures
- ParquetStorage: Filesystem store with a Parquet metadata index
"""

from .base import StorageReader
from .memory import InMemoryStorage
from .parquet import ParquetStorage

__all__ = [
    "StorageReader",
    "InMemoryStorage",
    "ParquetStorage",
]
