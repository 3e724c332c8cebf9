"""Negotiation table built from content-type edges."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..config.options import NegotiationOptions
from ..media.types import MediaType
from .edges import PolicyNodeEdge

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableEntry:
    """One edge pattern and the destination it leads to."""

    media_type: MediaType
    destination: int


@dataclass(frozen=True)
class NegotiationTable:
    """Immutable decision table for one route.

    Entries are ordered from most to least specific. The table holds no
    per-request state and may be shared by concurrent requests.

    :param entries: Edge patterns with their destinations, most specific first
    :type entries: Tuple[TableEntry, ...]
    :param escape_destination: Destination of the ``*/*`` edge
    :type escape_destination: int
    :param options: Negotiation options applied at request time
    :type options: NegotiationOptions
    """

    entries: Tuple[TableEntry, ...]
    escape_destination: int
    options: NegotiationOptions

    @property
    def single_destination(self) -> Optional[int]:
        """The only destination, when there is nothing to disambiguate."""
        if len(self.entries) == 1:
            return self.entries[0].destination
        return None

    @property
    def first_destination(self) -> int:
        return self.entries[0].destination


def build_table(
    edges: Sequence[PolicyNodeEdge],
    options: Optional[NegotiationOptions] = None,
    exit_destination: int = -1,
) -> NegotiationTable:
    """Order edges by specificity and designate the escape destination.

    The destination of an edge is its index in ``edges``. Since edges can
    have wildcards they are sorted by how wildcard-ey they are (the sort
    is stable, so equally specific edges keep their discovery order) and
    matched in that linear order at request time.

    :param edges: Edges as returned by :func:`build_edges`
    :type edges: Sequence[PolicyNodeEdge]
    :param options: Negotiation options, defaults to :class:`NegotiationOptions`
    :type options: Optional[NegotiationOptions]
    :param exit_destination: Destination used if no edge matches all types
    :type exit_destination: int
    :return: The negotiation table
    :rtype: NegotiationTable
    """
    if not edges:
        raise ValueError("Cannot build a negotiation table without edges")

    entries = sorted(
        (TableEntry(edge.media_type, i) for i, edge in enumerate(edges)),
        key=lambda entry: entry.media_type.specificity,
    )

    # build_edges always inserts a */* edge, so this normally succeeds
    for entry in entries:
        if entry.media_type.matches_all_types:
            exit_destination = entry.destination
            break

    table = NegotiationTable(tuple(entries), exit_destination, options or NegotiationOptions())
    logger.debug(
        "Negotiation table: %s (escape=%d)",
        [(str(e.media_type), e.destination) for e in table.entries],
        table.escape_destination,
    )
    return table


__all__ = ["NegotiationTable", "TableEntry", "build_table"]
