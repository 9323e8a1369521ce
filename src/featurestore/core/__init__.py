"""
Feature store core module.

Exports:
- FeatureMeta: Lightweight, indexed header of a feature
- Feature: Full record (metadata plus content snippet)
- SearchParams: Paginated name-pattern query
- DependencyGraph: Lazy topological ordering with cycle detection
- FeatureResolver: Resolution engine over a storage backend

Errors:
- FeatureStoreError: Base exception
- FeatureNotFoundError: Feature not found
- FeatureValidationError: Invalid record, name or query
- StorageError: Storage backend failure
- ConfigurationError: Invalid configuration
- DependencyError: Generic dependency error
- CircularDependencyError: Circular dependency detected
- UnresolvedDependencyError: Declared dependency does not exist
"""

from .models import (
    Feature,
    FeatureMeta,
    SearchParams,
)
from .dependency import DependencyGraph, NodeState
from .errors import (
    FeatureStoreError,
    FeatureNotFoundError,
    FeatureValidationError,
    StorageError,
    ConfigurationError,
    DependencyError,
    CircularDependencyError,
    UnresolvedDependencyError,
)
from .resolver import FeatureResolver

__all__ = [
    # Records
    "Feature",
    "FeatureMeta",
    "SearchParams",
    # Resolution
    "DependencyGraph",
    "NodeState",
    "FeatureResolver",
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
