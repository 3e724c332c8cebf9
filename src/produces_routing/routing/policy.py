"""Matcher policy selecting an endpoint by its produced content types.

The policy lets several endpoints share a route while producing
different content types (e.g. an HTML page and a JSON API on the same
path). It implements the three operations a host router needs:

- :meth:`ProducesMatcherPolicy.applies_to_endpoints` decides whether the
  candidate set needs content negotiation at all,
- :meth:`ProducesMatcherPolicy.get_edges` partitions the candidates into
  content-type edges,
- :meth:`ProducesMatcherPolicy.build_jump_table` builds the decision table
  consulted per request by :meth:`ProducesMatcherPolicy.get_destination`.
"""

import logging
from typing import List, Optional, Sequence

from ..config.options import NegotiationOptions
from .comparer import compare_endpoints
from .edges import PolicyNodeEdge, build_edges
from .metadata import Endpoint
from .negotiator import NegotiationRequest, negotiate
from .table import NegotiationTable, build_table

logger = logging.getLogger(__name__)


class ProducesMatcherPolicy:
    """Endpoint matcher policy based on declared produced content types.

    Runs after the HTTP method and request content-type policies but
    before generic action constraints.

    :param options: Negotiation options; defaults to :class:`NegotiationOptions`
    :type options: Optional[NegotiationOptions]
    """

    order = 1

    def __init__(self, options: Optional[NegotiationOptions] = None):
        self.options = options or NegotiationOptions()

    @staticmethod
    def comparer(x, y) -> int:
        """Priority comparison usable by the host's endpoint ordering."""
        return compare_endpoints(x, y)

    def applies_to_endpoints(self, endpoints: Sequence[Endpoint]) -> bool:
        """Check whether any endpoint declares at least one content type."""
        return any(len(e.content_types) > 0 for e in endpoints)

    def get_edges(self, endpoints: Sequence[Endpoint]) -> List[PolicyNodeEdge]:
        """Partition the endpoints into content-type edges."""
        return build_edges(endpoints)

    def build_jump_table(
        self, edges: Sequence[PolicyNodeEdge], exit_destination: int = -1
    ) -> NegotiationTable:
        """Build the negotiation table for ``edges`` with this policy's options."""
        return build_table(edges, self.options, exit_destination)

    def get_destination(
        self, table: NegotiationTable, request: NegotiationRequest
    ) -> int:
        """Select the destination for ``request``; see :func:`negotiate`."""
        return negotiate(table, request)


__all__ = ["ProducesMatcherPolicy"]
