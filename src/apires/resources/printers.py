"""Output encoders for the resource table.

Each printer declares the formats it handles. ``PrintFlags.to_printer()``
tries structured printers first, then the human readable table, then the
name printer, and fails with the list of allowed formats when none match.
"""

from __future__ import annotations

import io
import json
from dataclasses import dataclass
from typing import List, Sequence, TextIO

import yaml
from rich.cells import cell_len
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..errors import NoCompatiblePrinterError, RenderError
from .models import FilteredEntry, resource_list

COLUMNS = ["NAME", "SHORTNAMES", "APIVERSION", "NAMESPACED", "KIND"]
WIDE_COLUMNS = ["VERBS", "CATEGORIES"]

# Spaces between table columns, as kubectl's tabwriter pads them.
COLUMN_GAP = 3


def _write(out: TextIO, text: str) -> None:
    try:
        out.write(text)
    except OSError as e:
        raise RenderError(f"failed to write output: {e}") from e


def column_names(output_format: str) -> List[str]:
    columns = list(COLUMNS)
    if output_format == "wide":
        columns.extend(WIDE_COLUMNS)
    return columns


def is_table_format(output_format: str) -> bool:
    return output_format in ("", "wide")


class ResourcePrinter:
    """Base class for output encoders."""

    formats: Sequence[str] = ()

    def __init__(self, output_format: str = "", no_headers: bool = False):
        self.output_format = output_format
        self.no_headers = no_headers

    @classmethod
    def can_handle(cls, output_format: str) -> bool:
        return output_format in cls.formats

    def encode(self, entries: Sequence[FilteredEntry]) -> str:
        raise NotImplementedError

    def print_list(self, entries: Sequence[FilteredEntry], out: TextIO) -> None:
        _write(out, self.encode(entries))


class JSONYamlPrinter(ResourcePrinter):
    """Serializes the whole result as one ``APIResourceList``."""

    formats = ("json", "yaml")

    def encode(self, entries: Sequence[FilteredEntry]) -> str:
        obj = resource_list(entries)
        if self.output_format == "json":
            return json.dumps(obj, indent=4) + "\n"
        return yaml.safe_dump(obj, default_flow_style=False, sort_keys=False)


class HumanReadablePrinter(ResourcePrinter):
    """Aligned table; ``wide`` adds verbs and categories.

    The header row is printed for every table request unless ``no_headers``
    is set, even when no rows matched.
    """

    formats = ("", "wide")

    def row(self, entry: FilteredEntry) -> List[str]:
        r = entry.resource
        cells = [
            r.name,
            ",".join(r.short_names),
            entry.group_version,
            "true" if r.namespaced else "false",
            r.kind,
        ]
        if self.output_format == "wide":
            cells.append(",".join(r.verbs))
            cells.append(",".join(r.categories))
        return cells

    def encode(self, entries: Sequence[FilteredEntry]) -> str:
        headers = column_names(self.output_format)
        rows = [self.row(e) for e in entries]
        if not rows and self.no_headers:
            return ""

        table = Table(
            box=None,
            show_header=not self.no_headers,
            header_style=None,
            pad_edge=False,
            padding=(0, COLUMN_GAP, 0, 0),
        )
        for name in headers:
            table.add_column(name, no_wrap=True, overflow="ignore")
        for cells in rows:
            table.add_row(*(Text(c) for c in cells))

        widths = [cell_len(h) for h in headers]
        for cells in rows:
            widths = [max(w, cell_len(c)) for w, c in zip(widths, cells)]

        buf = io.StringIO()
        console = Console(
            file=buf,
            width=sum(widths) + COLUMN_GAP * len(widths) + 1,
            color_system=None,
            highlight=False,
            markup=False,
            emoji=False,
        )
        console.print(table)
        return "".join(line.rstrip() + "\n" for line in buf.getvalue().splitlines())


class NamePrinter(ResourcePrinter):
    """One ``name.group`` per line; core resources have no suffix."""

    formats = ("name",)

    @staticmethod
    def full_name(entry: FilteredEntry) -> str:
        if entry.group:
            return f"{entry.resource.name}.{entry.group}"
        return entry.resource.name

    def encode(self, entries: Sequence[FilteredEntry]) -> str:
        return "".join(self.full_name(e) + "\n" for e in entries)


# Negotiation order.
PRINTERS = (JSONYamlPrinter, HumanReadablePrinter, NamePrinter)


@dataclass
class PrintFlags:
    """Requested output format and header suppression."""
    output_format: str = ""
    no_headers: bool = False

    @staticmethod
    def allowed_formats() -> List[str]:
        # Same listing order as kubectl: structured, name, then wide.
        return ["json", "yaml", "name", "wide"]

    def to_printer(self) -> ResourcePrinter:
        for printer_cls in PRINTERS:
            if printer_cls.can_handle(self.output_format):
                return printer_cls(self.output_format, no_headers=not self.wants_headers())
        raise NoCompatiblePrinterError(self.output_format, self.allowed_formats())

    def wants_headers(self) -> bool:
        return not self.no_headers and is_table_format(self.output_format)
