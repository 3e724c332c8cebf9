"""Partitioning of candidate endpoints into content-type edges."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..media.types import ANY_CONTENT_TYPE, MediaType
from .metadata import Endpoint, create_rejection_endpoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicyNodeEdge:
    """A content-type pattern and the endpoints able to serve it.

    :param state: The content-type pattern, as first declared
    :type state: str
    :param endpoints: Matching endpoints in candidate order
    :type endpoints: Tuple[Endpoint, ...]
    """

    state: str
    endpoints: Tuple[Endpoint, ...]

    @property
    def media_type(self) -> MediaType:
        return MediaType.parse(self.state)

    @property
    def is_rejection(self) -> bool:
        return any(e.is_rejection for e in self.endpoints)


def build_edges(endpoints: Sequence[Endpoint]) -> List[PolicyNodeEdge]:
    """Partition candidate endpoints into content-type edges.

    The algorithm preserves the order of the endpoints. The first pass
    only collects the distinct content-type patterns (compared
    case-insensitively) so that edge membership does not depend on the
    iteration order; the second pass adds every endpoint to each edge it
    can serve. An endpoint without declared content types serves every
    edge.

    If no endpoint serves ``*/*`` a rejection endpoint is synthesized for
    it, so the table always has a 406 destination.

    :param endpoints: The candidate set of one route
    :type endpoints: Sequence[Endpoint]
    :return: Edges in discovery order
    :rtype: List[PolicyNodeEdge]
    """
    edges: Dict[str, Tuple[str, List[Endpoint]]] = {}
    for endpoint in endpoints:
        content_types = endpoint.content_types or (ANY_CONTENT_TYPE,)
        for content_type in content_types:
            key = content_type.lower()
            if key not in edges:
                edges[key] = (content_type, [])

    edge_media_types = {key: MediaType.parse(state) for key, (state, _) in edges.items()}

    for endpoint in endpoints:
        if not endpoint.content_types:
            for _, members in edges.values():
                members.append(endpoint)
            continue

        declared = endpoint.metadata.media_types
        for key, (_, members) in edges.items():
            edge_key = edge_media_types[key]
            # e.g. the 'application/json' edge is served by an endpoint producing 'application/*'
            if any(edge_key.is_subset_of(media_type) for media_type in declared):
                members.append(endpoint)

    if ANY_CONTENT_TYPE not in edges:
        edges[ANY_CONTENT_TYPE] = (ANY_CONTENT_TYPE, [create_rejection_endpoint()])

    result = [PolicyNodeEdge(state, tuple(members)) for state, members in edges.values()]
    logger.debug(
        "Built %d edges for %d endpoints: %s",
        len(result),
        len(endpoints),
        [edge.state for edge in result],
    )
    return result


__all__ = ["PolicyNodeEdge", "build_edges"]
