"""Shared fixtures: a small discovery catalog."""

import re

import pytest

from apires.resources.models import GroupVersionBucket, ResourceDescriptor


def make_resource(name, kind, namespaced=True, verbs=("get", "list"), categories=(), short_names=()):
    return ResourceDescriptor(
        name=name,
        kind=kind,
        namespaced=namespaced,
        verbs=tuple(verbs),
        categories=tuple(categories),
        short_names=tuple(short_names),
    )


def table_cells(output):
    """Split an aligned table into cells, using the header words as column starts."""
    lines = output.splitlines()
    starts = [m.start() for m in re.finditer(r"\S+", lines[0])]
    bounds = list(zip(starts, starts[1:] + [None]))
    return [[line[start:end].strip() for start, end in bounds] for line in lines]


@pytest.fixture
def scenario_buckets():
    """apps/v1 deployments and core v1 namespaces, in server order."""
    return [
        GroupVersionBucket("apps/v1", (make_resource("deployments", "Deployment", namespaced=True),)),
        GroupVersionBucket("v1", (make_resource("namespaces", "Namespace", namespaced=False),)),
    ]


@pytest.fixture
def rich_buckets():
    return [
        GroupVersionBucket(
            "v1",
            (
                make_resource("pods", "Pod", verbs=("get", "list", "watch", "delete"),
                              categories=("all",), short_names=("po",)),
                make_resource("nodes", "Node", namespaced=False, verbs=("get", "list"), short_names=("no",)),
                make_resource("events", "Event", verbs=("create", "get", "list"), short_names=("ev",)),
            ),
        ),
        GroupVersionBucket(
            "apps/v1",
            (
                make_resource("statefulsets", "StatefulSet", verbs=("get", "list", "delete"),
                              categories=("all",), short_names=("sts",)),
                make_resource("deployments", "Deployment", verbs=("get", "list", "watch", "delete"),
                              categories=("all",), short_names=("deploy",)),
            ),
        ),
        GroupVersionBucket(
            "events.k8s.io/v1",
            (make_resource("events", "Event", verbs=("get", "list"), short_names=("ev",)),),
        ),
        GroupVersionBucket(
            "rbac.authorization.k8s.io/v1",
            (make_resource("clusterroles", "ClusterRole", namespaced=False, verbs=("get", "list", "delete")),),
        ),
    ]
