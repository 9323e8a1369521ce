"""
Feature store and dependency resolver.

Indexes named features (a metadata header plus an opaque content snippet)
and computes, for a requested feature, the ordered list of features needed
to assemble it: every transitive dependency exactly once, dependencies
first, circular or dangling references reported as errors.

Core Components:
- FeatureResolver: Dependency resolution engine
- StorageReader: Read contract implemented by storage backends
- InMemoryStorage / ParquetStorage: Bundled backends
- FeatureCatalog: Paginated discovery over a backend

Quick Start:
    >>> from src.featurestore import FeatureResolver, InMemoryStorage
    >>>
    >>> storage = InMemoryStorage.from_yaml("features.yaml")
    >>> resolver = FeatureResolver(storage)
    >>> for feature in resolver.resolve("python-app"):
    ...     print(feature.snippet)
"""

from .core import (
    Feature,
    FeatureMeta,
    SearchParams,
    DependencyGraph,
    FeatureResolver,
    FeatureStoreError,
    FeatureNotFoundError,
    FeatureValidationError,
    StorageError,
    ConfigurationError,
    DependencyError,
    CircularDependencyError,
    UnresolvedDependencyError,
)

from .storage import (
    StorageReader,
    InMemoryStorage,
    ParquetStorage,
)

from .catalog import FeatureCatalog

__all__ = [
    # Records
    "Feature",
    "FeatureMeta",
    "SearchParams",
    # Resolution
    "DependencyGraph",
    "FeatureResolver",
    # Storage
    "StorageReader",
    "InMemoryStorage",
    "ParquetStorage",
    "FeatureCatalog",
    # Exceptions
    "FeatureStoreError",
    "FeatureNotFoundError",
    "FeatureValidationError",
    "StorageError",
    "ConfigurationError",
    "DependencyError",
    "CircularDependencyError",
    "UnresolvedDependencyError",
]
