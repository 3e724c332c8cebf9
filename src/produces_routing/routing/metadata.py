"""Produces declarations and the endpoint model.

Handlers advertise the content types they can produce with the
:func:`produces` decorator, either on the handler itself or on the class
grouping several handlers. A handler-level declaration always wins over
the group-level one; the two are never merged.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from ..media.types import MediaType

logger = logging.getLogger(__name__)

PRODUCES_ATTRIBUTE = "__produces__"
HTTP_406_DISPLAY_NAME = "HTTP 406 Not Acceptable"


@dataclass(frozen=True)
class ProducesMetadata:
    """Ordered content types declared by a handler or a handler group.

    The strings are validated when the declaration is created, so a bad
    declaration fails at registration time rather than per request.

    :param content_types: Declared content types, first is most preferred
    :type content_types: Tuple[str, ...]
    :raises InvalidMediaTypeError: If a declared content type is malformed
    """

    content_types: Tuple[str, ...]

    def __post_init__(self):
        normalized = tuple(ct.strip() for ct in self.content_types)
        for content_type in normalized:
            MediaType.parse(content_type)
        object.__setattr__(self, "content_types", normalized)

    @property
    def media_types(self) -> Tuple[MediaType, ...]:
        return tuple(MediaType.parse(ct) for ct in self.content_types)

    def __len__(self) -> int:
        return len(self.content_types)


def produces(*content_types: str) -> Callable[[Any], Any]:
    """Declare the content types a handler, or a class of handlers, produces.

    Example::

        @produces("application/json", "application/xml")
        class OrdersApi:
            async def list(self, request): ...

        @produces("text/html")
        async def orders_page(request): ...

    :param content_types: Content types in order of preference
    :return: Decorator attaching a :class:`ProducesMetadata` to its target
    :raises InvalidMediaTypeError: If a content type is malformed
    """
    metadata = ProducesMetadata(tuple(content_types))

    def decorator(target: Any) -> Any:
        setattr(target, PRODUCES_ATTRIBUTE, metadata)
        return target

    return decorator


def _declared_on(target: Any) -> Optional[ProducesMetadata]:
    if target is None:
        return None
    metadata = getattr(target, PRODUCES_ATTRIBUTE, None)
    return metadata if isinstance(metadata, ProducesMetadata) else None


def resolve_produces(handler: Any, group: Any = None) -> Optional[ProducesMetadata]:
    """Resolve the active declaration of a handler.

    The handler's own declaration is returned unchanged if present,
    otherwise the declaration of its group. For bound methods the group
    defaults to the class of the bound instance.

    :param handler: The routable handler
    :param group: The enclosing group (usually a class), if any
    :return: The active declaration, or None when the handler is unconstrained
    :rtype: Optional[ProducesMetadata]
    """
    if group is None and hasattr(handler, "__self__"):
        owner = handler.__self__
        group = owner if isinstance(owner, type) else type(owner)
    metadata = _declared_on(handler)
    if metadata is not None:
        return metadata
    return _declared_on(group)


def _display_name(handler: Any) -> str:
    return getattr(handler, "__qualname__", None) or getattr(
        handler, "__name__", repr(handler)
    )


@dataclass(frozen=True, eq=False)
class Endpoint:
    """A candidate handler for a route, with its resolved declaration.

    Equality is identity: the same handler registered twice yields two
    distinct endpoints.

    :param handler: The callable serving the request (None for the 406 marker)
    :type handler: Optional[Callable]
    :param metadata: The active produces declaration, if any
    :type metadata: Optional[ProducesMetadata]
    :param display_name: Name used in logs and diagnostics
    :type display_name: str
    :param is_rejection: True for the synthesized 406 Not Acceptable marker
    :type is_rejection: bool
    """

    handler: Optional[Callable[..., Any]]
    metadata: Optional[ProducesMetadata] = None
    display_name: str = ""
    is_rejection: bool = False

    @classmethod
    def from_handler(
        cls, handler: Callable[..., Any], group: Any = None, name: Optional[str] = None
    ) -> "Endpoint":
        """Create an endpoint, resolving the handler's active declaration."""
        metadata = resolve_produces(handler, group)
        endpoint = cls(handler, metadata, name or _display_name(handler))
        logger.debug(
            "Resolved %s produces %s",
            endpoint.display_name,
            list(metadata.content_types) if metadata else "anything",
        )
        return endpoint

    @classmethod
    def with_content_types(cls, *content_types: str, name: str = "") -> "Endpoint":
        """Create a handler-less endpoint declaring ``content_types``."""
        return cls(None, ProducesMetadata(tuple(content_types)), name)

    @property
    def content_types(self) -> Tuple[str, ...]:
        return self.metadata.content_types if self.metadata else ()

    def __repr__(self) -> str:
        return f"Endpoint({self.display_name or '?'}, {list(self.content_types)})"


def create_rejection_endpoint() -> Endpoint:
    """Create the marker endpoint that must be answered with 406 Not Acceptable."""
    return Endpoint(None, None, HTTP_406_DISPLAY_NAME, is_rejection=True)


__all__ = [
    "Endpoint",
    "HTTP_406_DISPLAY_NAME",
    "PRODUCES_ATTRIBUTE",
    "ProducesMetadata",
    "create_rejection_endpoint",
    "produces",
    "resolve_produces",
]
