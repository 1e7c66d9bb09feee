"""The catalog source the pipeline consumes."""

from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

from .models import GroupVersionBucket


class ResourceCatalogSource(Protocol):
    """Supplies the server's preferred resources grouped by group-version."""

    def fetch_preferred_resources(self) -> Tuple[List[GroupVersionBucket], Optional[Exception]]:
        """Return the buckets fetched so far and the error, if any.

        A non-None error may come with a partial list of buckets.
        """
        ...

    def invalidate(self) -> None:
        """Drop any cached data so the next fetch goes to the server."""
        ...


class StaticCatalogSource:
    """In-memory catalog source, e.g. for a pre-fetched discovery dump."""

    def __init__(self, buckets: List[GroupVersionBucket], error: Optional[Exception] = None):
        self.buckets = list(buckets)
        self.error = error
        self.invalidations = 0

    def fetch_preferred_resources(self) -> Tuple[List[GroupVersionBucket], Optional[Exception]]:
        return list(self.buckets), self.error

    def invalidate(self) -> None:
        self.invalidations += 1
