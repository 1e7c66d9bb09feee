"""Data model for discovered API resources.

Descriptors and buckets are built once from the server's discovery payloads
and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..errors import ConfigurationError


@dataclass(frozen=True)
class GroupVersion:
    """An API group (empty for core) and a version."""
    group: str
    version: str

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


def parse_group_version(gv: str) -> GroupVersion:
    """Parse ``"v1"``, ``"apps/v1"`` or ``""`` into a GroupVersion.

    Raises ValueError for anything else, e.g. ``"a/b/c"`` or ``"apps/"``.
    """
    if not gv or gv == "/":
        return GroupVersion("", "")

    parts = gv.split("/")
    if len(parts) == 1:
        return GroupVersion("", parts[0])
    if len(parts) == 2 and parts[0] and parts[1]:
        return GroupVersion(parts[0], parts[1])
    raise ValueError(f"unexpected GroupVersion string: {gv}")


@dataclass(frozen=True)
class ResourceDescriptor:
    """One discoverable API resource."""
    name: str
    kind: str
    namespaced: bool = False
    short_names: Tuple[str, ...] = ()
    verbs: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    group: str = ""
    version: str = ""
    singular_name: str = ""

    @property
    def verb_set(self) -> FrozenSet[str]:
        return frozenset(self.verbs)

    @property
    def category_set(self) -> FrozenSet[str]:
        return frozenset(self.categories)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "singularName": self.singular_name,
            "namespaced": self.namespaced,
            "group": self.group,
            "version": self.version,
            "kind": self.kind,
            "verbs": list(self.verbs),
            "shortNames": list(self.short_names),
            "categories": list(self.categories),
        }

    @classmethod
    def from_api(cls, data: dict) -> "ResourceDescriptor":
        """Build from an ``APIResource`` object of a discovery response."""
        return cls(
            name=data.get("name", ""),
            kind=data.get("kind", ""),
            namespaced=bool(data.get("namespaced", False)),
            short_names=tuple(data.get("shortNames") or ()),
            verbs=tuple(data.get("verbs") or ()),
            categories=tuple(data.get("categories") or ()),
            group=data.get("group", ""),
            version=data.get("version", ""),
            singular_name=data.get("singularName", ""),
        )


@dataclass(frozen=True)
class GroupVersionBucket:
    """The resources a server reports under one group-version."""
    group_version: str
    resources: Tuple[ResourceDescriptor, ...] = ()

    @classmethod
    def from_api(cls, data: dict) -> "GroupVersionBucket":
        """Build from an ``APIResourceList`` response.

        Resources without verbs are unusable and dropped here, as are
        subresources such as ``pods/log``.
        """
        resources = []
        for item in data.get("resources") or []:
            resource = ResourceDescriptor.from_api(item)
            if not resource.verbs:
                continue
            if "/" in resource.name:
                continue
            resources.append(resource)
        return cls(group_version=data.get("groupVersion", ""), resources=tuple(resources))


@dataclass(frozen=True)
class FilteredEntry:
    """A resource that survived filtering, with its owning group."""
    group: str
    group_version: str
    resource: ResourceDescriptor

    @property
    def name(self) -> str:
        return self.resource.name

    def to_dict(self) -> dict:
        data = self.resource.to_dict()
        data["groupVersion"] = self.group_version
        return data


class SortKey(str, Enum):
    """Primary sort field for the resource table."""
    UNSET = ""
    NAME = "name"
    KIND = "kind"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortKey":
        try:
            return cls(value or "")
        except ValueError:
            raise ConfigurationError("--sort-by accepts only name or kind") from None


@dataclass(frozen=True)
class FilterConfig:
    """Filter predicates; ``None`` and empty sets mean "no constraint"."""
    group: Optional[str] = None
    namespaced: Optional[bool] = None
    verbs: FrozenSet[str] = field(default_factory=frozenset)
    categories: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        group: Optional[str] = None,
        namespaced: Optional[bool] = None,
        verbs: Iterable[str] = (),
        categories: Iterable[str] = (),
    ) -> "FilterConfig":
        return cls(
            group=group,
            namespaced=namespaced,
            verbs=frozenset(v for v in verbs if v),
            categories=frozenset(c for c in categories if c),
        )


def resource_list(entries: Iterable[FilteredEntry]) -> Dict[str, Any]:
    """Wrap entries into a single flat ``APIResourceList`` object."""
    items: List[dict] = [e.to_dict() for e in entries]
    return {
        "kind": "APIResourceList",
        "apiVersion": "v1",
        "groupVersion": "",
        "resources": items,
    }
