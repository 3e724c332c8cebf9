"""Starlette integration.

:class:`NegotiatedRoute` is a Starlette route whose path is served by
several handlers producing different content types. The edges and the
negotiation table are built once when the route is created; each request
is then dispatched to the handler chosen by content negotiation.

Examples
--------
.. code-block:: python

    @produces("text/html")
    async def orders_page(request):
        return HTMLResponse("<ul>...</ul>")

    @produces("application/json", "application/xml")
    class OrdersApi:
        async def list(self, request):
            return JSONResponse([...])

    app = Starlette(
        routes=[NegotiatedRoute("/orders", [orders_page, OrdersApi().list])],
        exception_handlers=exception_handlers(),
    )
"""

import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from ..config.options import NegotiationOptions
from ..exceptions import AmbiguousMatchError, ConfigurationError, ProducesRoutingError
from ..routing.comparer import compare_endpoints, endpoint_sort_key
from ..routing.metadata import Endpoint
from ..routing.policy import ProducesMatcherPolicy

logger = logging.getLogger(__name__)

HandlerOrEndpoint = Union[Callable[..., Any], Endpoint]


def _as_endpoint(item: HandlerOrEndpoint) -> Endpoint:
    if isinstance(item, Endpoint):
        return item
    return Endpoint.from_handler(item)


class NegotiatedRoute(Route):
    """A route served by the handler best matching the client's preferences.

    :param path: Route path
    :type path: str
    :param endpoints: Candidate handlers (or prebuilt endpoints) in priority order
    :type endpoints: Sequence[HandlerOrEndpoint]
    :param methods: HTTP methods, defaults to GET (and HEAD)
    :type methods: Optional[List[str]]
    :param name: Route name
    :type name: Optional[str]
    :param options: Negotiation options; defaults to the global settings
    :type options: Optional[NegotiationOptions]
    :raises ConfigurationError: If no candidate handler is given
    """

    def __init__(
        self,
        path: str,
        endpoints: Sequence[HandlerOrEndpoint],
        *,
        methods: Optional[List[str]] = None,
        name: Optional[str] = None,
        options: Optional[NegotiationOptions] = None,
        include_in_schema: bool = True,
    ) -> None:
        if not endpoints:
            raise ConfigurationError(f"No endpoints given for route {path}", setting="endpoints")
        if options is None:
            from ..config.settings import settings

            options = settings.to_options()

        self.policy = ProducesMatcherPolicy(options)
        self.candidates = [_as_endpoint(item) for item in endpoints]
        self.edges = self.policy.get_edges(self.candidates)
        self.table = self.policy.build_jump_table(self.edges)

        super().__init__(
            path,
            self.dispatch,
            methods=methods,
            name=name or path.strip("/").replace("/", "_") or "root",
            include_in_schema=include_in_schema,
        )
        logger.info(
            "Registered negotiated route %s with %d endpoints (negotiation %s): %s",
            path,
            len(self.candidates),
            "enabled" if self.policy.applies_to_endpoints(self.candidates) else "not needed",
            [str(entry.media_type) for entry in self.table.entries],
        )

    def select_endpoint(self, request: Request) -> Endpoint:
        """Choose the endpoint serving ``request``.

        Within the chosen edge, endpoints that declare content types are
        preferred over undeclared ones. Two or more endpoints left with the
        same priority are a route misconfiguration.

        :raises AmbiguousMatchError: If the route configuration is ambiguous
        """
        destination = self.policy.get_destination(self.table, request)
        edge = self.edges[destination]
        request.state.produces_content_type = edge.state
        ordered = sorted(edge.endpoints, key=endpoint_sort_key)
        tied = [e for e in ordered if compare_endpoints(e, ordered[0]) == 0]
        if len(tied) > 1:
            raise AmbiguousMatchError(
                f"The request matched multiple endpoints for the media type {edge.state}.",
                media_type=edge.state,
                candidates=[e.display_name for e in tied],
            )
        return ordered[0]

    async def dispatch(self, request: Request) -> Response:
        endpoint = self.select_endpoint(request)
        if endpoint.is_rejection:
            logger.debug("Not acceptable: %s %s", request.method, request.url.path)
            response: Response = PlainTextResponse("Not Acceptable", status_code=406)
        elif inspect.iscoroutinefunction(endpoint.handler):
            response = await endpoint.handler(request)
        else:
            response = await run_in_threadpool(endpoint.handler, request)
        response.headers.add_vary_header("Accept")
        return response


def add_produces_routes(
    target: Any,
    path: str,
    *endpoints: HandlerOrEndpoint,
    methods: Optional[List[str]] = None,
    name: Optional[str] = None,
    options: Optional[NegotiationOptions] = None,
) -> NegotiatedRoute:
    """Register a negotiated route on a Starlette application or router.

    :param target: A ``Starlette`` application or a ``Router``
    :param path: Route path
    :param endpoints: Candidate handlers sharing the path
    :return: The registered route
    :rtype: NegotiatedRoute
    """
    route = NegotiatedRoute(path, endpoints, methods=methods, name=name, options=options)
    router = getattr(target, "router", target)
    router.routes.append(route)
    return route


async def routing_error_handler(request: Request, exc: Exception) -> Response:
    """Render a produces-routing error as a JSON 500 response."""
    if isinstance(exc, AmbiguousMatchError):
        logger.error("Ambiguous negotiation for %s: %s", request.url.path, exc.message)
    details = exc.to_dict() if isinstance(exc, ProducesRoutingError) else {"error": str(exc)}
    return JSONResponse(details, status_code=500)


def exception_handlers() -> Dict[Any, Callable[..., Any]]:
    """Exception handlers to pass to ``Starlette(exception_handlers=...)``."""
    return {ProducesRoutingError: routing_error_handler}


__all__ = [
    "NegotiatedRoute",
    "add_produces_routes",
    "exception_handlers",
    "routing_error_handler",
]
