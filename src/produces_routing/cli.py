#!/usr/bin/env python3
"""Command line diagnostics for produces-routing.

The ``explain`` command builds the negotiation table for a set of
endpoint declarations and shows which endpoint a request would reach.

Examples
--------
.. code-block:: bash

    produces-routing explain \\
        --produces application/xml --produces "text/html,image/*" \\
        --accept "text/plain, image/*;q=0.9"

    produces-routing explain --produces text/html --produces application/json \\
        --query '$format=json' --strict
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from .config.settings import Settings
from .exceptions import AmbiguousMatchError, ProducesRoutingError
from .routing.metadata import Endpoint
from .routing.negotiator import RequestView, acceptable_media_types
from .routing.policy import ProducesMatcherPolicy
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_ACCEPTABLE = 1
EXIT_ERROR = 2


def _parse_endpoints(declarations: Sequence[str]) -> List[Endpoint]:
    endpoints = []
    for i, declaration in enumerate(declarations):
        content_types = [ct.strip() for ct in declaration.split(",") if ct.strip()]
        name = f"endpoint[{i}]"
        if content_types:
            endpoints.append(Endpoint.with_content_types(*content_types, name=name))
        else:
            endpoints.append(Endpoint(None, None, name))
    return endpoints


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="produces-routing",
        description="Content negotiation between endpoints sharing a route",
    )
    parser.add_argument("--log-level", default=None, help="Override PRODUCES_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    explain = subparsers.add_parser(
        "explain", help="Show the negotiation table and the selected endpoint"
    )
    explain.add_argument(
        "--produces",
        action="append",
        default=[],
        metavar="TYPES",
        help="Comma-separated content types of one endpoint (repeat per endpoint; "
        "empty for an endpoint without a declaration)",
    )
    explain.add_argument("--accept", action="append", default=None, help="Accept header line")
    explain.add_argument("--query", default="", help="Query string, e.g. '$format=json'")
    explain.add_argument(
        "--format",
        action="append",
        default=[],
        metavar="NAME=TYPE",
        help="Additional override mapping",
    )
    explain.add_argument(
        "--strict", action="store_true", help="Respond 406 when nothing matches"
    )
    explain.add_argument(
        "--literal-wildcard",
        action="store_true",
        help="Honor a literal */* instead of the default content types",
    )
    return parser


def explain(args: argparse.Namespace, settings: Settings) -> int:
    """Run the ``explain`` command and return the exit code."""
    options = settings.to_options()
    for mapping in args.format:
        name, sep, media_type = mapping.partition("=")
        if not sep:
            print(f"Invalid --format value {mapping!r}, expected NAME=TYPE", file=sys.stderr)
            return EXIT_ERROR
        options = options.with_format(name, media_type)
    updates = {}
    if args.strict:
        updates["return_http_not_acceptable"] = True
    if args.literal_wildcard:
        updates["respect_browser_accept_header"] = True
    if updates:
        options = options.model_copy(update=updates)

    policy = ProducesMatcherPolicy(options)
    endpoints = _parse_endpoints(args.produces or [""])
    edges = policy.get_edges(endpoints)
    table = policy.build_jump_table(edges)
    request = RequestView.build(accept=args.accept, query=args.query)

    print("Edges (specificity order):")
    for entry in table.entries:
        names = ", ".join(e.display_name for e in edges[entry.destination].endpoints)
        print(f"  [{entry.destination}] {entry.media_type} -> {names}")
    acceptable = acceptable_media_types(request, options)
    print("Acceptable: " + (", ".join(str(m) for m in acceptable) or "(none)"))

    try:
        destination = policy.get_destination(table, request)
    except AmbiguousMatchError as e:
        print(f"Ambiguous: {e.message} candidates={e.candidates}", file=sys.stderr)
        return EXIT_ERROR

    edge = edges[destination]
    if edge.is_rejection:
        print(f"Selected: [{destination}] 406 Not Acceptable")
        return EXIT_NOT_ACCEPTABLE
    names = ", ".join(e.display_name for e in edge.endpoints)
    print(f"Selected: [{destination}] {edge.state} -> {names}")
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point of the ``produces-routing`` command."""
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
        setup_logging(level=args.log_level or settings.log_level)
        return explain(args, settings)
    except ProducesRoutingError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
