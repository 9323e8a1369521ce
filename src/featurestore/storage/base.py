"""
Storage read contract.

Every backend (in-memory, Parquet, networked) implements StorageReader;
the resolver and catalog only ever talk to this interface.
"""

from abc import ABC, abstractmethod
from typing import List

from ..core.errors import FeatureNotFoundError
from ..core.models import Feature, FeatureMeta, SearchParams


class StorageReader(ABC):
    """
    Interface to get features from a data source.

    Implementations must tolerate concurrent readers.
    """

    @abstractmethod
    def search_meta(self, params: SearchParams) -> List[FeatureMeta]:
        """
        Return metadata records matching params.

        Ordering is backend-defined but stable for an unchanged store.
        """

    @abstractmethod
    def get_meta(self, name: str) -> FeatureMeta:
        """
        Return a single metadata record by name.

        Metadata is small and indexed, so this should be a fast lookup.

        Raises:
            FeatureNotFoundError: If no feature has that name
        """

    @abstractmethod
    def get(self, name: str) -> Feature:
        """
        Return the full feature (metadata plus snippet).

        Slower than get_meta; prefer get_meta for quick lookups.

        Raises:
            FeatureNotFoundError: If no feature has that name
        """

    def __contains__(self, name: str) -> bool:
        try:
            self.get_meta(name)
        except FeatureNotFoundError:
            return False
        return True
