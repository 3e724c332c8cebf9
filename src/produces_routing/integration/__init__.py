"""Host framework integrations."""

from .starlette import NegotiatedRoute, add_produces_routes, exception_handlers

__all__ = ["NegotiatedRoute", "add_produces_routes", "exception_handlers"]
