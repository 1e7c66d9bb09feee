"""Resource discovery aggregation and presentation.

- models: descriptors, buckets and filter/sort configuration
- filters: flatten buckets and apply group/scope/verb/category predicates
- sorting: stable ordering by group, name or kind
- printers: json/yaml, table and name encoders with format negotiation
- pipeline: fetch -> filter -> sort -> render
"""

from .filters import filter_resources
from .models import (
    FilterConfig,
    FilteredEntry,
    GroupVersion,
    GroupVersionBucket,
    ResourceDescriptor,
    SortKey,
    parse_group_version,
)
from .pipeline import ApiResourcesOptions, run_api_resources
from .printers import PrintFlags
from .sorting import sort_entries
from .source import ResourceCatalogSource, StaticCatalogSource

__all__ = [
    "ApiResourcesOptions",
    "FilterConfig",
    "FilteredEntry",
    "GroupVersion",
    "GroupVersionBucket",
    "PrintFlags",
    "ResourceCatalogSource",
    "ResourceDescriptor",
    "SortKey",
    "StaticCatalogSource",
    "filter_resources",
    "parse_group_version",
    "run_api_resources",
    "sort_entries",
]
