"""
Feature store exceptions.

Provides custom exception classes for lookup, validation, storage and
dependency resolution errors.
"""

from typing import List, Optional, Tuple


class FeatureStoreError(Exception):
    """Base exception for the feature store."""
    pass


class FeatureNotFoundError(FeatureStoreError):
    """Raised when a feature is not found in the store."""
    def __init__(self, feature_name: str):
        self.feature_name = feature_name
        super().__init__(f"Feature not found: {feature_name}")


class FeatureValidationError(FeatureStoreError):
    """Raised when a record, name or search parameter is invalid."""
    pass


class StorageError(FeatureStoreError):
    """Raised when a storage backend cannot serve a request."""
    pass


class ConfigurationError(FeatureStoreError):
    """Raised when configuration is missing or invalid."""
    pass


class DependencyError(FeatureStoreError):
    """Raised when there's an issue with feature dependencies."""
    pass


class CircularDependencyError(DependencyError):
    """Raised when circular dependency is detected."""
    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        cycle_str = " -> ".join(self.cycle + [self.cycle[0]])
        super().__init__(f"Circular dependency detected: {cycle_str}")

    @property
    def edge(self) -> Tuple[str, str]:
        """The edge (referrer, referenced) that closed the loop."""
        return self.cycle[-1], self.cycle[0]


class UnresolvedDependencyError(DependencyError):
    """Raised when a declared dependency does not exist in the store."""
    def __init__(self, feature_name: str, referenced_by: Optional[str]):
        self.feature_name = feature_name
        self.referenced_by = referenced_by
        super().__init__(
            f"Feature '{referenced_by}' depends on missing feature '{feature_name}'"
        )
