"""Tests for the api-resources pipeline."""

import io
import json
from unittest.mock import MagicMock

import pytest

from apires.errors import (
    ConfigurationError,
    DiscoveryError,
    GroupDiscoveryFailedError,
    NoCompatiblePrinterError,
    RenderError,
)
from apires.resources.models import GroupVersionBucket
from apires.resources.pipeline import ApiResourcesOptions, run_api_resources
from apires.resources.printers import COLUMNS, PrintFlags
from apires.resources.source import StaticCatalogSource

from conftest import make_resource, table_cells

# Header of a table with no rows: every column is as wide as its title.
HEADER = "   ".join(COLUMNS)


def run(options, source):
    out = io.StringIO()
    count = run_api_resources(options, source, out)
    return count, out.getvalue()


class TestScenarios:
    """End-to-end behaviour on a two-bucket catalog."""

    def test_default_table_orders_by_group(self, scenario_buckets):
        count, output = run(ApiResourcesOptions(), StaticCatalogSource(scenario_buckets))
        assert count == 2
        assert table_cells(output) == [
            COLUMNS,
            ["namespaces", "", "v1", "false", "Namespace"],
            ["deployments", "", "apps/v1", "true", "Deployment"],
        ]

    def test_namespaced_filter(self, scenario_buckets):
        _, output = run(ApiResourcesOptions(namespaced=True), StaticCatalogSource(scenario_buckets))
        assert table_cells(output) == [COLUMNS, ["deployments", "", "apps/v1", "true", "Deployment"]]

    def test_unmatched_verbs_still_prints_header(self, scenario_buckets):
        count, output = run(ApiResourcesOptions(verbs=["delete"]), StaticCatalogSource(scenario_buckets))
        assert count == 0
        assert output.splitlines() == [HEADER]

    def test_unmatched_verbs_no_headers(self, scenario_buckets):
        options = ApiResourcesOptions(verbs=["delete"], print_flags=PrintFlags(no_headers=True))
        _, output = run(options, StaticCatalogSource(scenario_buckets))
        assert output == ""

    def test_unmatched_verbs_structured(self, scenario_buckets):
        options = ApiResourcesOptions(verbs=["delete"], print_flags=PrintFlags("json"))
        _, output = run(options, StaticCatalogSource(scenario_buckets))
        obj = json.loads(output)
        assert obj["kind"] == "APIResourceList"
        assert obj["resources"] == []

    def test_bad_sort_key_fails_before_fetch(self, scenario_buckets):
        source = MagicMock()
        out = io.StringIO()
        with pytest.raises(ConfigurationError, match="--sort-by"):
            run_api_resources(ApiResourcesOptions(sort_by="bogus"), source, out)
        source.invalidate.assert_not_called()
        source.fetch_preferred_resources.assert_not_called()
        assert out.getvalue() == ""

    def test_name_output(self, scenario_buckets):
        _, output = run(ApiResourcesOptions(print_flags=PrintFlags("name")), StaticCatalogSource(scenario_buckets))
        assert output == "namespaces\ndeployments.apps\n"


class TestValidation:
    """Configuration errors are raised before any network access."""

    def test_unknown_output_format(self):
        source = MagicMock()
        with pytest.raises(NoCompatiblePrinterError):
            run_api_resources(ApiResourcesOptions(print_flags=PrintFlags("table")), source, io.StringIO())
        source.fetch_preferred_resources.assert_not_called()

    def test_unexpected_arguments(self):
        with pytest.raises(ConfigurationError, match="unexpected arguments"):
            ApiResourcesOptions(args=["pods"]).validate()

    def test_run_negotiates_printer_when_not_validated(self, scenario_buckets):
        options = ApiResourcesOptions(print_flags=PrintFlags("name"))
        out = io.StringIO()
        assert options.run(StaticCatalogSource(scenario_buckets), out) == 2
        assert out.getvalue() == "namespaces\ndeployments.apps\n"

    def test_run_rejects_bad_flags_when_not_validated(self):
        source = MagicMock()
        with pytest.raises(NoCompatiblePrinterError):
            ApiResourcesOptions(print_flags=PrintFlags("xml")).run(source, io.StringIO())
        source.invalidate.assert_not_called()


class TestFetching:
    """Cache invalidation and fetch error handling."""

    def test_invalidates_unless_cached(self, scenario_buckets):
        source = StaticCatalogSource(scenario_buckets)
        run(ApiResourcesOptions(), source)
        assert source.invalidations == 1

        source = StaticCatalogSource(scenario_buckets)
        run(ApiResourcesOptions(cached=True), source)
        assert source.invalidations == 0

    def test_partial_results_then_error(self, scenario_buckets):
        err = GroupDiscoveryFailedError({"metrics.k8s.io/v1beta1": DiscoveryError("503")})
        source = StaticCatalogSource(scenario_buckets, error=err)
        out = io.StringIO()

        with pytest.raises(GroupDiscoveryFailedError) as exc:
            run_api_resources(ApiResourcesOptions(print_flags=PrintFlags("name")), source, out)

        assert "metrics.k8s.io/v1beta1" in str(exc.value)
        assert out.getvalue() == "namespaces\ndeployments.apps\n"

    def test_fetch_error_with_no_data(self):
        source = StaticCatalogSource([], error=DiscoveryError("connection refused"))
        out = io.StringIO()
        with pytest.raises(DiscoveryError, match="connection refused"):
            run_api_resources(ApiResourcesOptions(), source, out)
        assert out.getvalue().splitlines() == [HEADER]

    def test_empty_catalog(self):
        count, output = run(ApiResourcesOptions(), StaticCatalogSource([]))
        assert count == 0
        assert output.splitlines() == [HEADER]

    def test_empty_catalog_structured(self):
        _, output = run(ApiResourcesOptions(print_flags=PrintFlags("yaml")), StaticCatalogSource([]))
        assert "resources: []" in output

    def test_skips_empty_and_malformed_buckets(self):
        buckets = [
            GroupVersionBucket("v1", ()),
            GroupVersionBucket("bad/group/version", (make_resource("widgets", "Widget"),)),
            GroupVersionBucket("batch/v1", (make_resource("jobs", "Job"),)),
        ]
        count, output = run(ApiResourcesOptions(print_flags=PrintFlags("name")), StaticCatalogSource(buckets))
        assert count == 1
        assert output == "jobs.batch\n"


class TestRendering:
    """Sink behaviour."""

    def test_flushes_once(self, scenario_buckets):
        out = MagicMock()
        run_api_resources(ApiResourcesOptions(), StaticCatalogSource(scenario_buckets), out)
        out.flush.assert_called_once()

    def test_write_failure_aborts(self, scenario_buckets):
        out = MagicMock()
        out.write.side_effect = OSError("disk full")
        with pytest.raises(RenderError, match="disk full"):
            run_api_resources(ApiResourcesOptions(), StaticCatalogSource(scenario_buckets), out)
        assert out.write.call_count == 1

    def test_sort_by_kind(self, rich_buckets):
        options = ApiResourcesOptions(sort_by="kind", print_flags=PrintFlags("name"))
        _, output = run(options, StaticCatalogSource(rich_buckets))
        assert output.splitlines() == [
            "clusterroles.rbac.authorization.k8s.io",
            "deployments.apps",
            "events",
            "events.events.k8s.io",
            "nodes",
            "pods",
            "statefulsets.apps",
        ]
