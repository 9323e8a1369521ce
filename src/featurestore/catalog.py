"""
Feature catalog for discovery.

Browses a storage backend through search_meta, page by page, and
tabulates metadata for inspection.
"""

import logging
from typing import Iterator, Optional

import pandas as pd

from .core.errors import FeatureValidationError
from .core.models import FeatureMeta, SearchParams
from .storage.base import StorageReader

logger = logging.getLogger(__name__)

CATALOG_COLUMNS = [
    "name",
    "author",
    "created_at",
    "updated_at",
    "dependency_count",
    "dependencies",
]


class FeatureCatalog:
    """Utility for browsing available features in a store."""

    def __init__(self, storage: StorageReader, page_size: int = 100):
        """
        Initialize the catalog.

        Args:
            storage: Storage backend to browse
            page_size: Number of records requested per search_meta call
        """
        if page_size < 1:
            raise FeatureValidationError(f"page_size must be >= 1, got {page_size}")
        self.storage = storage
        self.page_size = page_size

    def iter_meta(self, pattern: Optional[str] = None) -> Iterator[FeatureMeta]:
        """
        Iterate over every matching metadata record, one page at a time.

        Args:
            pattern: Optional regular expression for feature names

        Yields:
            FeatureMeta records in storage order
        """
        offset = 0
        while True:
            page = self.storage.search_meta(
                SearchParams(name=pattern, limit=self.page_size, offset=offset)
            )
            yield from page
            if len(page) < self.page_size:
                return
            offset += len(page)

    def to_dataframe(self, pattern: Optional[str] = None) -> pd.DataFrame:
        """
        Tabulate matching metadata.

        Args:
            pattern: Optional regular expression for feature names

        Returns:
            DataFrame with one row per feature (see CATALOG_COLUMNS)
        """
        rows = [
            {
                "name": meta.name,
                "author": meta.author,
                "created_at": meta.created_at,
                "updated_at": meta.updated_at,
                "dependency_count": len(meta.unique_dependencies()),
                "dependencies": ", ".join(meta.unique_dependencies()),
            }
            for meta in self.iter_meta(pattern)
        ]
        df = pd.DataFrame(rows, columns=CATALOG_COLUMNS)
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
        df["updated_at"] = pd.to_datetime(df["updated_at"], utc=True)
        logger.debug(f"Catalog contains {len(df)} features")
        return df

    def print_catalog(self, pattern: Optional[str] = None) -> None:
        """Print a human-readable feature catalog."""
        df = self.to_dataframe(pattern)

        print("\n" + "=" * 80)
        print("FEATURE CATALOG")
        print("=" * 80 + "\n")

        for row in df.itertuples(index=False):
            deps_str = row.dependencies or "none"
            print(f"{row.name}")
            print(f"    Author: {row.author or 'unknown'}")
            print(f"    Updated: {row.updated_at.isoformat()}")
            print(f"    Dependencies: {deps_str}")
            print()
