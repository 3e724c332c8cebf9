"""Per-request selection of a negotiation destination.

The negotiator reads the client's preferences from the request (the
override query parameter first, the ``Accept`` header otherwise) and
walks the prebuilt :class:`~produces_routing.routing.table.NegotiationTable`
to choose a destination. It is a pure function of the table and the
request, safe to call concurrently.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Protocol, Sequence, Union

from starlette.datastructures import Headers, QueryParams

from ..config.options import NegotiationOptions
from ..exceptions import AmbiguousMatchError
from ..media.types import MediaType, parse_accept_header
from .table import NegotiationTable, TableEntry

logger = logging.getLogger(__name__)


class NegotiationRequest(Protocol):
    """The parts of a request read by the negotiator.

    A Starlette ``Request`` satisfies this protocol.
    """

    @property
    def headers(self) -> Headers: ...

    @property
    def query_params(self) -> QueryParams: ...


@dataclass(frozen=True)
class RequestView:
    """A minimal request carrying only headers and query parameters.

    Useful outside of an ASGI application, e.g. in tests and the CLI.
    """

    headers: Headers = field(default_factory=Headers)
    query_params: QueryParams = field(default_factory=QueryParams)

    @classmethod
    def build(
        cls,
        accept: Union[str, Sequence[str], None] = None,
        query: Union[str, Mapping[str, Any], None] = None,
    ) -> "RequestView":
        """Build a request view from an Accept value and a query string.

        :param accept: ``Accept`` header value, or a list of header lines
        :param query: Query string (``"$format=json"``) or a mapping
        :return: The request view
        :rtype: RequestView
        """
        if accept is None:
            raw = []
        elif isinstance(accept, str):
            raw = [(b"accept", accept.encode("latin-1", errors="replace"))]
        else:
            raw = [(b"accept", line.encode("latin-1", errors="replace")) for line in accept]
        return cls(Headers(raw=raw), QueryParams(query or ""))


def acceptable_media_types(
    request: NegotiationRequest, options: NegotiationOptions
) -> List[MediaType]:
    """Compute the client's acceptable media types, most preferred first.

    If the override parameter is present, only its mapped values are used
    (unknown values are dropped, possibly leaving an empty list) and the
    ``Accept`` header is ignored. Otherwise the ``Accept`` header is parsed
    and sorted by quality. Unless ``respect_browser_accept_header`` is set,
    an ``Accept`` list containing ``*/*`` is replaced by the default content
    types; an absent or unusable header always is.

    :param request: The incoming request
    :type request: NegotiationRequest
    :param options: Negotiation options
    :type options: NegotiationOptions
    :return: Acceptable media types in preference order
    :rtype: List[MediaType]
    """
    query_params = request.query_params
    if options.format_parameter in query_params:
        result = []
        for name in query_params.getlist(options.format_parameter):
            media_type = options.lookup_format(name)
            if media_type is None:
                logger.debug("Ignoring unknown %s value: %r", options.format_parameter, name)
                continue
            result.append(media_type)
        return result

    result = []
    for media_type in parse_accept_header(request.headers.getlist("accept")):
        if not options.respect_browser_accept_header and media_type.matches_all_types:
            return list(options.default_content_types)
        result.append(media_type)

    if not result:
        return list(options.default_content_types)
    return result


def _best_rank_matches(
    entries: Sequence[TableEntry], media_type: MediaType
) -> List[TableEntry]:
    matches: List[TableEntry] = []
    for entry in entries:
        if matches and entry.media_type.specificity != matches[0].media_type.specificity:
            break
        if entry.media_type.is_subset_of(media_type):
            matches.append(entry)
    return matches


def negotiate(table: NegotiationTable, request: NegotiationRequest) -> int:
    """Select the destination serving ``request``.

    Acceptable media types are tried in preference order. For each one,
    the table entries are scanned in specificity order; the most specific
    entries that are subsets of the acceptable type decide. A single match
    is returned at once, several matches are a configuration error.

    When nothing matches, the escape (406) destination is returned if
    ``return_http_not_acceptable`` is set, else the first table entry.

    :param table: The prebuilt negotiation table of the route
    :type table: NegotiationTable
    :param request: The incoming request
    :type request: NegotiationRequest
    :return: The chosen destination
    :rtype: int
    :raises AmbiguousMatchError: If an acceptable type matches several entries
    """
    single = table.single_destination
    if single is not None:
        return single

    for media_type in acceptable_media_types(request, table.options):
        matches = _best_rank_matches(table.entries, media_type)
        if len(matches) > 1:
            raise AmbiguousMatchError(
                f"The request matched multiple endpoints for the media type "
                f"{media_type.type}/{media_type.full_subtype}.",
                media_type=str(media_type),
                candidates=[str(m.media_type) for m in matches],
            )
        if matches:
            logger.debug(
                "Negotiated %s for acceptable %s -> destination %d",
                matches[0].media_type,
                media_type,
                matches[0].destination,
            )
            return matches[0].destination

    if table.options.return_http_not_acceptable:
        logger.debug("No acceptable match, using escape destination %d", table.escape_destination)
        return table.escape_destination
    logger.debug("No acceptable match, falling back to destination %d", table.first_destination)
    return table.first_destination


__all__ = [
    "NegotiationRequest",
    "RequestView",
    "acceptable_media_types",
    "negotiate",
]
