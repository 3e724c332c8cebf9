"""Produces-based endpoint routing.

This package lets several handlers share a route while producing
different content types, and selects per request the handler best
matching the client's ``Accept`` header (or an explicit ``$format``
query parameter). It includes the media type model, the negotiation
engine, and a Starlette integration.

:var __version__: Current package version
:type __version__: str
"""

__version__ = "0.1.0"
