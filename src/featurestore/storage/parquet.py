"""
Parquet-backed feature storage.

Layout:
    <base_path>/index.parquet     one row of metadata per feature
    <base_path>/snippets/*.txt    one snippet file per feature

The metadata index is small and loaded into memory, so get_meta and
search_meta never touch snippet files. The index is reloaded whenever the
index file changes, giving readers the latest written state.
"""

import hashlib
import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from ..core.errors import FeatureNotFoundError, FeatureValidationError, StorageError
from ..core.models import Feature, FeatureMeta, SearchParams
from .base import StorageReader

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.parquet"
SNIPPET_DIRNAME = "snippets"
INDEX_COLUMNS = [
    "name",
    "author",
    "created_at",
    "updated_at",
    "dependencies",
    "snippet_file",
]


class ParquetStorage(StorageReader):
    """
    Feature storage on the local filesystem.

    Metadata lives in a Parquet index (pandas/pyarrow); snippets live in
    plain text files referenced from the index.
    """

    def __init__(self, base_path: Path):
        """
        Initialize the storage.

        Args:
            base_path: Directory containing index.parquet and snippets/

        Raises:
            StorageError: If the directory or index does not exist
        """
        self.base_path = Path(base_path)
        self.index_path = self.base_path / INDEX_FILENAME
        self._lock = threading.Lock()
        self._index: pd.DataFrame = pd.DataFrame(columns=INDEX_COLUMNS)
        self._metas: Dict[str, FeatureMeta] = {}
        self._snippet_files: Dict[str, str] = {}
        self._loaded_signature: Optional[Tuple[int, int, int]] = None

        if not self.base_path.exists():
            raise StorageError(f"Feature store path not found: {self.base_path}")

        self._ensure_fresh()
        logger.info(f"Initialized ParquetStorage with base_path: {self.base_path}")

    # ========================================================================
    # StorageReader
    # ========================================================================

    def search_meta(self, params: SearchParams) -> List[FeatureMeta]:
        with self._lock:
            self._ensure_fresh()
            index, metas = self._index, self._metas

        if index.empty:
            return []
        mask = index["name"].map(params.matches).astype(bool)
        names = index.loc[mask, "name"].tolist()
        return [metas[name] for name in params.paginate(names)]

    def get_meta(self, name: str) -> FeatureMeta:
        with self._lock:
            self._ensure_fresh()
            meta = self._metas.get(name)
        if meta is None:
            raise FeatureNotFoundError(name)
        return meta

    def get(self, name: str) -> Feature:
        with self._lock:
            self._ensure_fresh()
            meta = self._metas.get(name)
            snippet_file = self._snippet_files.get(name)
        if meta is None:
            raise FeatureNotFoundError(name)

        snippet_path = self.base_path / SNIPPET_DIRNAME / snippet_file
        try:
            snippet = snippet_path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read snippet for '{name}' at {snippet_path}: {e}") from e

        return Feature(meta=meta, snippet=snippet)

    def list_names(self) -> List[str]:
        """Names of all features in index order."""
        with self._lock:
            self._ensure_fresh()
            return self._index["name"].tolist()

    # ========================================================================
    # Writing
    # ========================================================================

    @classmethod
    def write(
        cls,
        features: Iterable[Feature],
        base_path: Path,
        compression: str = "snappy",
    ) -> "ParquetStorage":
        """
        Materialise a store from a collection of features.

        Existing index content is replaced atomically; snippet files are
        written before the index so readers never see dangling references.

        Args:
            features: Features to store (names must be unique)
            base_path: Target directory (created if missing)
            compression: Parquet compression codec

        Returns:
            ParquetStorage reading from base_path
        """
        base_path = Path(base_path)
        snippet_dir = base_path / SNIPPET_DIRNAME
        snippet_dir.mkdir(parents=True, exist_ok=True)

        rows = []
        seen = set()
        for feature in features:
            if feature.name in seen:
                raise FeatureValidationError(f"Duplicate feature name: {feature.name}")
            seen.add(feature.name)

            snippet_file = _snippet_filename(feature.name)
            (snippet_dir / snippet_file).write_text(feature.snippet, encoding="utf-8")
            rows.append({
                "name": feature.name,
                "author": feature.meta.author,
                "created_at": feature.meta.created_at,
                "updated_at": feature.meta.updated_at,
                "dependencies": json.dumps(list(feature.meta.dependencies)),
                "snippet_file": snippet_file,
            })

        index_df = pd.DataFrame(rows, columns=INDEX_COLUMNS)
        index_df["created_at"] = pd.to_datetime(index_df["created_at"], utc=True)
        index_df["updated_at"] = pd.to_datetime(index_df["updated_at"], utc=True)

        index_path = base_path / INDEX_FILENAME
        tmp_path = base_path / f"{INDEX_FILENAME}.tmp"
        try:
            index_df.to_parquet(
                tmp_path,
                index=False,
                compression=compression,
                engine="pyarrow",
            )
            os.replace(tmp_path, index_path)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to write feature index to {index_path}: {e}") from e

        logger.info(f"Wrote {len(index_df)} features to {index_path}")
        return cls(base_path)

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def _ensure_fresh(self) -> None:
        """Reload the index if the file changed. Caller holds the lock."""
        try:
            stat = self.index_path.stat()
        except OSError as e:
            raise StorageError(f"Feature index not found: {self.index_path}") from e

        signature = (stat.st_ino, stat.st_mtime_ns, stat.st_size)
        if signature == self._loaded_signature:
            return

        try:
            index_df = pd.read_parquet(self.index_path, engine="pyarrow")
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read feature index {self.index_path}: {e}") from e

        missing = set(INDEX_COLUMNS) - set(index_df.columns)
        if missing:
            raise StorageError(f"Feature index {self.index_path} is missing columns: {sorted(missing)}")

        metas: Dict[str, FeatureMeta] = {}
        snippet_files: Dict[str, str] = {}
        for row in index_df.itertuples(index=False):
            try:
                meta = FeatureMeta(
                    name=row.name,
                    author=row.author or "",
                    created_at=pd.Timestamp(row.created_at).to_pydatetime(),
                    updated_at=pd.Timestamp(row.updated_at).to_pydatetime(),
                    dependencies=json.loads(row.dependencies or "[]"),
                )
            except (FeatureValidationError, ValueError) as e:
                raise StorageError(f"Corrupt index row for '{row.name}': {e}") from e
            metas[meta.name] = meta
            snippet_files[meta.name] = row.snippet_file

        self._index = index_df
        self._metas = metas
        self._snippet_files = snippet_files
        self._loaded_signature = signature
        logger.debug(f"Loaded {len(metas)} features from {self.index_path}")


def _snippet_filename(name: str) -> str:
    """Filesystem-safe file name for a feature snippet."""
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:16]
    return f"{digest}.txt"
