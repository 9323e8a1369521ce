"""
Feature resolution engine.

Turns a feature name into the ordered list of features required to
assemble it: every transitive dependency exactly once, dependencies before
dependents, ties broken by declaration order.

Example:
    >>> from src.featurestore.storage import InMemoryStorage
    >>> from src.featurestore.core import Feature, FeatureMeta, FeatureResolver
    >>>
    >>> storage = InMemoryStorage([
    ...     Feature(FeatureMeta("base"), "FROM python:3.11"),
    ...     Feature(FeatureMeta("pip", dependencies=["base"]), "RUN pip install -U pip"),
    ... ])
    >>> resolver = FeatureResolver(storage)
    >>> [f.name for f in resolver.resolve("pip")]
    ['base', 'pip']

Consistency: metadata is read lazily as nodes are visited. If the store
changes during a resolution, each read observes whatever the store returns
at that moment; callers needing snapshot isolation must supply a store
with point-in-time reads.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, List, Optional

from .dependency import DependencyGraph
from .errors import (
    DependencyError,
    FeatureNotFoundError,
    FeatureValidationError,
    UnresolvedDependencyError,
)
from .models import Feature, FeatureMeta

if TYPE_CHECKING:
    from ..storage.base import StorageReader

logger = logging.getLogger(__name__)


class FeatureResolver:
    """
    Resolves feature dependencies against a storage backend.

    The resolver holds no state between calls; every resolution builds its
    own DependencyGraph, so concurrent calls on one resolver are safe as long
    as the storage supports concurrent readers.
    """

    def __init__(self, storage: "StorageReader", max_workers: int = 1):
        """
        Initialize the resolver.

        Args:
            storage: Read capability used for metadata and content lookups
            max_workers: Threads used to fetch content of completed features
                         while traversal continues (1 = fetch inline)
        """
        if max_workers < 1:
            raise FeatureValidationError(f"max_workers must be >= 1, got {max_workers}")
        self.storage = storage
        self.max_workers = max_workers

    def resolve(self, name: str) -> List[Feature]:
        """
        Resolve a feature and all of its transitive dependencies.

        Args:
            name: Name of an existing feature

        Returns:
            Features ordered so that every dependency precedes its dependents;
            the requested feature is last

        Raises:
            FeatureValidationError: If name is empty or not a string
            FeatureNotFoundError: If the requested feature does not exist
            UnresolvedDependencyError: If a declared dependency does not exist
            CircularDependencyError: If the dependency graph contains a cycle
        """
        self._validate_name(name)
        try:
            if self.max_workers == 1:
                features = self._resolve_inline(name)
            else:
                features = self._resolve_parallel(name)
        except (FeatureNotFoundError, DependencyError) as e:
            logger.warning(f"Resolution of '{name}' failed: {e}")
            raise

        logger.info(f"Resolved '{name}' into {len(features)} feature(s)")
        return features

    def resolve_names(self, name: str) -> List[str]:
        """
        Resolve only the ordering, using metadata lookups exclusively.

        Args:
            name: Name of an existing feature

        Returns:
            Feature names in resolution order
        """
        self._validate_name(name)
        try:
            order = DependencyGraph().walk(name, self._fetch_meta)
        except (FeatureNotFoundError, DependencyError) as e:
            logger.warning(f"Resolution of '{name}' failed: {e}")
            raise
        logger.info(f"Resolved order for '{name}': {len(order)} feature(s)")
        return order

    def _resolve_inline(self, name: str) -> List[Feature]:
        features: List[Feature] = []

        def collect(feature_name: str, referenced_by: Optional[str]) -> None:
            features.append(self._fetch_feature(feature_name, referenced_by))

        DependencyGraph().walk(name, self._fetch_meta, collect)
        return features

    def _resolve_parallel(self, name: str) -> List[Feature]:
        # Content fetches run while traversal continues; futures are kept in
        # completion order so the output matches the inline mode. A failed
        # fetch aborts the walk, and the earliest failure in resolution order
        # is the one reported.
        futures: List[Future] = []
        failed = threading.Event()

        def mark_failure(future: Future) -> None:
            if not future.cancelled() and future.exception() is not None:
                failed.set()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:

            def submit(feature_name: str, referenced_by: Optional[str]) -> None:
                if failed.is_set():
                    _raise_first_failure(futures)
                future = executor.submit(self._fetch_feature, feature_name, referenced_by)
                future.add_done_callback(mark_failure)
                futures.append(future)

            try:
                try:
                    DependencyGraph().walk(name, self._fetch_meta, submit)
                except Exception:
                    # submitted fetches precede the traversal error inline
                    _raise_first_failure(futures)
                    raise
                return [future.result() for future in futures]
            except Exception:
                for future in futures:
                    future.cancel()
                raise

    @staticmethod
    def _validate_name(name: str) -> None:
        if not isinstance(name, str) or not name:
            raise FeatureValidationError(f"Feature name must be a non-empty string, got {name!r}")

    def _fetch_meta(self, name: str, referenced_by: Optional[str]) -> FeatureMeta:
        try:
            return self.storage.get_meta(name)
        except FeatureNotFoundError as e:
            if referenced_by is None:
                raise
            raise UnresolvedDependencyError(name, referenced_by) from e

    def _fetch_feature(self, name: str, referenced_by: Optional[str]) -> Feature:
        try:
            return self.storage.get(name)
        except FeatureNotFoundError as e:
            if referenced_by is None:
                raise
            raise UnresolvedDependencyError(name, referenced_by) from e


def _raise_first_failure(futures: List[Future]) -> None:
    """Wait for futures in order and re-raise the first exception found."""
    for future in futures:
        error = future.exception()
        if error is not None:
            raise error
