"""Stable ordering of filtered entries."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from ..errors import ConfigurationError
from .models import FilteredEntry, SortKey


def sort_value(entry: FilteredEntry, sort_key: SortKey) -> Tuple[str, str]:
    """(primary field, resource name) for ``entry`` under ``sort_key``."""
    if sort_key is SortKey.NAME:
        primary = entry.resource.name
    elif sort_key is SortKey.KIND:
        primary = entry.resource.kind
    else:
        primary = entry.group
    return primary, entry.resource.name


def sort_entries(entries: Iterable[FilteredEntry], sort_key: SortKey = SortKey.UNSET) -> List[FilteredEntry]:
    """Sort by the primary field, then name; equal keys keep input order."""
    if not isinstance(sort_key, SortKey):
        raise ConfigurationError(f"unsupported sort key: {sort_key!r}")
    return sorted(entries, key=lambda e: sort_value(e, sort_key))
