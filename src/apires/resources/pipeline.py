"""Fetch, filter, sort and render the server's API resources."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TextIO

from ..errors import ConfigurationError, RenderError
from .filters import filter_resources
from .models import FilterConfig, SortKey
from .printers import PrintFlags, ResourcePrinter
from .sorting import sort_entries
from .source import ResourceCatalogSource

logger = logging.getLogger(__name__)


@dataclass
class ApiResourcesOptions:
    """Everything one ``api-resources`` invocation needs.

    ``api_group`` and ``namespaced`` are None when the flag was not given,
    so ``--namespaced=true`` can be told apart from the default.
    """
    sort_by: str = ""
    api_group: Optional[str] = None
    namespaced: Optional[bool] = None
    verbs: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    cached: bool = False
    print_flags: PrintFlags = field(default_factory=PrintFlags)
    args: Sequence[str] = ()

    # Set by validate()
    sort_key: SortKey = field(default=SortKey.UNSET, init=False)
    printer: Optional[ResourcePrinter] = field(default=None, init=False, repr=False)

    def validate(self) -> ResourcePrinter:
        """Check flags before any network access; raises ConfigurationError.

        Returns the negotiated printer.
        """
        if self.args:
            raise ConfigurationError(f"unexpected arguments: {list(self.args)}")
        self.sort_key = SortKey.parse(self.sort_by)
        self.printer = self.print_flags.to_printer()
        return self.printer

    def filter_config(self) -> FilterConfig:
        return FilterConfig.build(
            group=self.api_group,
            namespaced=self.namespaced,
            verbs=self.verbs,
            categories=self.categories,
        )

    def run(self, source: ResourceCatalogSource, out: TextIO) -> int:
        """Render the resource table to ``out``; returns the row count.

        A fetch error does not stop rendering of the partial catalog; it is
        raised once the output has been written and flushed.
        """
        printer = self.printer or self.validate()

        if not self.cached:
            source.invalidate()

        buckets, err = source.fetch_preferred_resources()
        if err is not None:
            logger.info("Discovery returned an error, rendering partial results: %s", err)

        entries = filter_resources(buckets or [], self.filter_config())
        entries = sort_entries(entries, self.sort_key)

        try:
            printer.print_list(entries, out)
        finally:
            try:
                out.flush()
            except OSError as e:
                raise RenderError(f"failed to flush output: {e}") from e

        if err is not None:
            raise err
        return len(entries)


def run_api_resources(options: ApiResourcesOptions, source: ResourceCatalogSource, out: TextIO) -> int:
    """Validate ``options`` and run the pipeline."""
    options.validate()
    return options.run(source, out)
