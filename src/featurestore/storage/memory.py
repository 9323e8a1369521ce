"""
In-memory storage backend.

Keeps features in insertion-ordered dictionaries. Useful as a test double
and for small catalogs loaded from YAML fixture files.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from ..core.errors import FeatureNotFoundError, FeatureValidationError, StorageError
from ..core.models import Feature, FeatureMeta, SearchParams
from .base import StorageReader

logger = logging.getLogger(__name__)


class InMemoryStorage(StorageReader):
    """
    Dictionary-backed feature storage.

    Reads and writes are guarded by a lock so the store can serve
    concurrent resolutions while a loader replaces records.
    """

    def __init__(self, features: Optional[Iterable[Feature]] = None):
        """
        Initialize the storage.

        Args:
            features: Optional initial features (names must be unique)
        """
        self._features: Dict[str, Feature] = {}
        self._lock = threading.RLock()

        for feature in features or []:
            self.add(feature)

    def add(self, feature: Feature, replace: bool = False) -> None:
        """
        Add a feature to the store.

        Args:
            feature: Feature to add
            replace: Overwrite an existing feature with the same name

        Raises:
            FeatureValidationError: If the name exists and replace is False
        """
        with self._lock:
            if feature.name in self._features and not replace:
                raise FeatureValidationError(f"Feature '{feature.name}' already exists")
            self._features[feature.name] = feature

    def remove(self, name: str) -> None:
        """Remove a feature; raises FeatureNotFoundError if absent."""
        with self._lock:
            if name not in self._features:
                raise FeatureNotFoundError(name)
            del self._features[name]

    def __len__(self) -> int:
        with self._lock:
            return len(self._features)

    # ========================================================================
    # StorageReader
    # ========================================================================

    def search_meta(self, params: SearchParams) -> List[FeatureMeta]:
        with self._lock:
            metas = [f.meta for f in self._features.values() if params.matches(f.name)]
        return params.paginate(metas)

    def get_meta(self, name: str) -> FeatureMeta:
        return self._lookup(name).meta

    def get(self, name: str) -> Feature:
        return self._lookup(name)

    def _lookup(self, name: str) -> Feature:
        with self._lock:
            try:
                return self._features[name]
            except KeyError:
                raise FeatureNotFoundError(name) from None

    # ========================================================================
    # Fixture loading
    # ========================================================================

    @classmethod
    def from_dicts(cls, records: Iterable[Dict[str, Any]]) -> "InMemoryStorage":
        """Build a store from feature dictionaries (see Feature.from_dict)."""
        return cls(Feature.from_dict(record) for record in records)

    @classmethod
    def from_yaml(cls, path: Path) -> "InMemoryStorage":
        """
        Load a store from a YAML fixture file.

        The file holds a top-level ``features`` list of feature dictionaries.

        Args:
            path: Path to YAML file

        Returns:
            Populated InMemoryStorage

        Raises:
            StorageError: If the file is missing or malformed
            FeatureValidationError: If a record is invalid or a name repeats
        """
        path = Path(path)
        if not path.exists():
            raise StorageError(f"Fixture file not found: {path}")

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise StorageError(f"Invalid YAML in {path}: {e}") from e

        records = data.get("features") if isinstance(data, dict) else None
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise StorageError(f"Fixture file {path} must contain a 'features' list of mappings")

        storage = cls.from_dicts(records)
        logger.info(f"Loaded {len(storage)} features from {path}")
        return storage
