"""Media utilities public API (re-exports)."""

from .types import (
    ANY_CONTENT_TYPE,
    APPLICATION_JSON,
    APPLICATION_XML,
    TEXT_HTML,
    MediaType,
    parse_accept_header,
)

__all__ = [
    "ANY_CONTENT_TYPE",
    "APPLICATION_JSON",
    "APPLICATION_XML",
    "TEXT_HTML",
    "MediaType",
    "parse_accept_header",
]
