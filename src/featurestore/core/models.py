"""
Feature record types.

Defines the lightweight metadata header (FeatureMeta), the full record
(Feature) and the paginated query used for discovery (SearchParams).
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd
import pytz

from .errors import FeatureValidationError


def _utcnow() -> datetime:
    return datetime.now(tz=pytz.UTC)


def _to_utc(value: Union[datetime, date, str]) -> datetime:
    """Parse ISO strings and attach UTC to naive datetimes."""
    if isinstance(value, str):
        try:
            parsed = pd.Timestamp(value)
        except ValueError as e:
            raise FeatureValidationError(f"Invalid timestamp '{value}': {e}")
        if pd.isna(parsed):
            raise FeatureValidationError(f"Invalid timestamp '{value}'")
        value = parsed.to_pydatetime()
    elif isinstance(value, date) and not isinstance(value, datetime):
        # YAML loads bare dates as datetime.date
        value = datetime(value.year, value.month, value.day)
    if not isinstance(value, datetime):
        raise FeatureValidationError(f"Expected datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


@dataclass(frozen=True)
class FeatureMeta:
    """
    Short information about a feature.

    This piece of data is expected to be indexed by a storage backend so
    point lookups stay cheap.

    Attributes:
        name: Unique identifier of the feature
        author: Informational author field
        created_at: Creation timestamp (UTC)
        updated_at: Last update timestamp (UTC), never before created_at
        dependencies: Feature names as declared, duplicates allowed
    """
    name: str
    author: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: Optional[datetime] = None
    dependencies: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise FeatureValidationError("Feature name must be a non-empty string")

        created_at = _to_utc(self.created_at)
        updated_at = created_at if self.updated_at is None else _to_utc(self.updated_at)
        if updated_at < created_at:
            raise FeatureValidationError(
                f"Feature '{self.name}': updated_at {updated_at.isoformat()} "
                f"is before created_at {created_at.isoformat()}"
            )

        # a bare string is a single name, not a sequence of names
        if isinstance(self.dependencies, (str, bytes)):
            raise FeatureValidationError(
                f"Feature '{self.name}' dependencies must be a list of names, "
                f"got {self.dependencies!r}"
            )
        dependencies = tuple(self.dependencies or ())
        for dep in dependencies:
            if not isinstance(dep, str) or not dep:
                raise FeatureValidationError(
                    f"Feature '{self.name}' declares an invalid dependency: {dep!r}"
                )

        # frozen dataclass, normalised values are written through object
        object.__setattr__(self, "created_at", created_at)
        object.__setattr__(self, "updated_at", updated_at)
        object.__setattr__(self, "dependencies", dependencies)

    def unique_dependencies(self) -> List[str]:
        """Dependencies with repeats removed, first-seen order kept."""
        return list(dict.fromkeys(self.dependencies))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "author": self.author,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "dependencies": list(self.dependencies),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeatureMeta":
        """Create from dictionary."""
        try:
            name = data["name"]
        except KeyError:
            raise FeatureValidationError("Feature record is missing 'name'")
        kwargs: Dict[str, Any] = {
            "name": name,
            "author": data.get("author") or "",
            "dependencies": data.get("dependencies") or (),
        }
        if data.get("created_at") is not None:
            kwargs["created_at"] = data["created_at"]
        if data.get("updated_at") is not None:
            kwargs["updated_at"] = data["updated_at"]
        return cls(**kwargs)


@dataclass(frozen=True)
class Feature:
    """
    Definition of a piece of work: metadata plus the content snippet used
    to compose the generated output.
    """
    meta: FeatureMeta
    snippet: str = ""

    @property
    def name(self) -> str:
        return self.meta.name

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (metadata fields flattened)."""
        data = self.meta.to_dict()
        data["snippet"] = self.snippet
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Feature":
        """Create from dictionary."""
        return cls(meta=FeatureMeta.from_dict(data), snippet=data.get("snippet") or "")


@dataclass
class SearchParams:
    """
    Parameters for searching features by name.

    Attributes:
        name: Regular expression matched against feature names (search
              semantics); None matches every feature
        limit: Maximum number of results (None = unbounded)
        offset: Number of matching results to skip
    """
    name: Optional[Union[str, re.Pattern]] = None
    limit: Optional[int] = None
    offset: int = 0

    def __post_init__(self):
        if self.limit is not None and self.limit < 0:
            raise FeatureValidationError(f"limit must be >= 0, got {self.limit}")
        if self.offset < 0:
            raise FeatureValidationError(f"offset must be >= 0, got {self.offset}")
        if isinstance(self.name, str):
            try:
                self.name = re.compile(self.name)
            except re.error as e:
                raise FeatureValidationError(f"Invalid name pattern '{self.name}': {e}")

    def matches(self, feature_name: str) -> bool:
        """Check whether a feature name satisfies the pattern."""
        return self.name is None or self.name.search(feature_name) is not None

    def paginate(self, items: List[Any]) -> List[Any]:
        """Apply offset and limit to an already-filtered list."""
        if self.limit is None:
            return items[self.offset:]
        return items[self.offset:self.offset + self.limit]
