"""Flatten discovery buckets into filtered entries."""

from __future__ import annotations

import logging
from typing import Iterable, List

from .models import FilterConfig, FilteredEntry, GroupVersionBucket, ResourceDescriptor, parse_group_version

logger = logging.getLogger(__name__)


def matches(group: str, resource: ResourceDescriptor, config: FilterConfig) -> bool:
    """Return True if the resource satisfies every active predicate."""
    if not resource.verbs:
        return False
    if config.group is not None and config.group != group:
        return False
    if config.namespaced is not None and config.namespaced != resource.namespaced:
        return False
    if config.verbs and not config.verbs <= resource.verb_set:
        return False
    if config.categories and not config.categories <= resource.category_set:
        return False
    return True


def filter_resources(buckets: Iterable[GroupVersionBucket], config: FilterConfig) -> List[FilteredEntry]:
    """Flatten buckets into entries matching ``config``, in server order.

    Buckets whose group-version cannot be parsed are skipped; aggregated
    APIs may legitimately report such entries in a healthy cluster.
    """
    entries: List[FilteredEntry] = []
    for bucket in buckets:
        if not bucket.resources:
            continue
        try:
            gv = parse_group_version(bucket.group_version)
        except ValueError:
            logger.debug("Skipping malformed group-version %r", bucket.group_version)
            continue

        for resource in bucket.resources:
            if not matches(gv.group, resource, config):
                continue
            entries.append(FilteredEntry(group=gv.group, group_version=str(gv), resource=resource))
    return entries
