"""Content-negotiation routing public API (re-exports)."""

from .comparer import compare_endpoints, endpoint_sort_key
from .edges import PolicyNodeEdge, build_edges
from .metadata import (
    Endpoint,
    ProducesMetadata,
    create_rejection_endpoint,
    produces,
    resolve_produces,
)
from .negotiator import RequestView, acceptable_media_types, negotiate
from .policy import ProducesMatcherPolicy
from .table import NegotiationTable, TableEntry, build_table

__all__ = [
    "Endpoint",
    "NegotiationTable",
    "PolicyNodeEdge",
    "ProducesMatcherPolicy",
    "ProducesMetadata",
    "RequestView",
    "TableEntry",
    "acceptable_media_types",
    "build_edges",
    "build_table",
    "compare_endpoints",
    "create_rejection_endpoint",
    "endpoint_sort_key",
    "negotiate",
    "produces",
    "resolve_produces",
]
