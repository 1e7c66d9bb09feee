"""apires CLI - print the API resources a Kubernetes server supports.

Usage:
    apires                               # all preferred resources, table
    apires -o wide                       # add VERBS and CATEGORIES columns
    apires --sort-by=name                # sort by name (or kind)
    apires --namespaced=true             # only namespaced resources
    apires --namespaced=false            # only cluster-scoped resources
    apires --api-group=rbac.authorization.k8s.io
    apires --verbs=list,get -o name      # resources supporting list and get
    apires --cached -o json              # reuse the discovery cache
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import Settings
from .discovery import DiscoveryClient
from .errors import ApiResourcesError, ConfigurationError
from .resources import ApiResourcesOptions, PrintFlags

console = Console(stderr=True)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def setup_logging(verbosity: int) -> None:
    """Route log records to stderr; -v for INFO, -vv for DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
        force=True,
    )


def _parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in ("1", "t", "true"):
        return True
    if v in ("0", "f", "false"):
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")


def _split_csv(values: Optional[List[str]]) -> List[str]:
    out: List[str] = []
    for value in values or []:
        out.extend(v.strip() for v in value.split(",") if v.strip())
    return out


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apires",
        description="Print the supported API resources on the server.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Filters
    parser.add_argument("--api-group", default=None, help="Limit to resources in the specified API group.")
    parser.add_argument(
        "--namespaced",
        type=_parse_bool,
        nargs="?",
        const=True,
        default=None,
        metavar="BOOL",
        help="If false, non-namespaced resources will be returned, otherwise namespaced resources. "
             "Both scopes are listed when omitted.",
    )
    parser.add_argument(
        "--verbs",
        action="append",
        metavar="VERB[,VERB...]",
        help="Limit to resources that support the specified verbs.",
    )
    parser.add_argument(
        "--categories",
        action="append",
        metavar="CATEGORY[,CATEGORY...]",
        help="Limit to resources that belong to the specified categories.",
    )
    parser.add_argument(
        "--sort-by",
        default="",
        help="If non-empty, sort list of resources using specified field. The field can be either 'name' or 'kind'.",
    )
    parser.add_argument("--cached", action="store_true", help="Use the cached list of resources if available.")

    # Output
    parser.add_argument(
        "-o",
        "--output",
        default="",
        help=f"Output format. One of: ({', '.join(PrintFlags.allowed_formats())}).",
    )
    parser.add_argument(
        "--no-headers",
        action="store_true",
        help="When using the default output format, don't print headers.",
    )

    # Connection
    parser.add_argument("--kubeconfig", help="Path to the kubeconfig file to use.")
    parser.add_argument("--context", help="The name of the kubeconfig context to use.")
    parser.add_argument("--server", "-s", help="The address and port of the Kubernetes API server.")
    parser.add_argument("--token", help="Bearer token for authentication to the API server.")
    parser.add_argument("--certificate-authority", help="Path to a cert file for the certificate authority.")
    parser.add_argument(
        "--insecure-skip-tls-verify",
        action="store_true",
        help="Don't check the server's certificate for validity.",
    )
    parser.add_argument("--request-timeout", type=float, help="Seconds to wait for each discovery request.")
    parser.add_argument("--cache-dir", help="Directory for the discovery cache.")

    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity.")
    parser.add_argument("args", nargs="*", help=argparse.SUPPRESS)
    return parser


def options_from_args(args: argparse.Namespace) -> ApiResourcesOptions:
    return ApiResourcesOptions(
        sort_by=args.sort_by,
        api_group=args.api_group,
        namespaced=args.namespaced,
        verbs=_split_csv(args.verbs),
        categories=_split_csv(args.categories),
        cached=args.cached,
        print_flags=PrintFlags(output_format=args.output, no_headers=args.no_headers),
        args=args.args,
    )


def settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.load(
        kubeconfig=Path(args.kubeconfig).expanduser() if args.kubeconfig else None,
        context=args.context,
    )
    if args.server:
        settings.server = args.server
    if args.token:
        settings.token = args.token
    if args.certificate_authority:
        settings.certificate_authority = args.certificate_authority
    if args.insecure_skip_tls_verify:
        settings.insecure_skip_tls_verify = True
    if args.request_timeout is not None:
        settings.request_timeout = args.request_timeout
    if args.cache_dir:
        settings.cache_dir = args.cache_dir
    if not settings.server:
        raise ConfigurationError("no API server configured; use --server, --kubeconfig or APIRES_SERVER")
    return settings


def run(argv: Optional[Sequence[str]] = None, out: Optional[TextIO] = None) -> int:
    """Run one invocation and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    out = out or sys.stdout

    options = options_from_args(args)
    try:
        options.validate()
        settings = settings_from_args(args)
    except ConfigurationError as e:
        console.print(f"[red]error:[/red] {escape(str(e))}")
        return EXIT_USAGE

    client = DiscoveryClient(settings)
    try:
        options.run(client, out)
    except ApiResourcesError as e:
        # Partial output (if any) is already written; fetch and render errors land here.
        console.print(f"[red]error:[/red] {escape(str(e))}")
        return EXIT_ERROR
    return EXIT_OK


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
