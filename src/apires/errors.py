"""Error types for apires.

Configuration errors are raised before any network access. Discovery errors
are collected while the pipeline keeps rendering whatever data arrived, and
are surfaced once it completes. Render errors abort immediately.
"""

from __future__ import annotations

from typing import Dict, Sequence


class ApiResourcesError(Exception):
    """Base error for apires operations."""
    pass


class ConfigurationError(ApiResourcesError):
    """Invalid flags or settings; the pipeline does not run."""
    pass


class NoCompatiblePrinterError(ConfigurationError):
    """No output encoder accepts the requested format."""

    def __init__(self, output_format: str, allowed_formats: Sequence[str]):
        self.output_format = output_format
        self.allowed_formats = list(allowed_formats)
        super().__init__(
            f'unable to match a printer suitable for the output format "{output_format}", '
            f"allowed formats are: {','.join(self.allowed_formats)}"
        )


class DiscoveryError(ApiResourcesError):
    """The catalog source could not (fully) fetch the server's resources."""
    pass


class GroupDiscoveryFailedError(DiscoveryError):
    """Some group-versions failed while others were fetched successfully."""

    def __init__(self, failures: Dict[str, Exception]):
        self.failures = dict(failures)
        details = ", ".join(f"{gv}: {err}" for gv, err in sorted(self.failures.items()))
        super().__init__(f"unable to retrieve the complete list of server APIs: {details}")


class RenderError(ApiResourcesError):
    """Writing to the output sink failed."""
    pass

