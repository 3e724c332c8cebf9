"""Configuration for produces-routing."""

from .options import DEFAULT_FORMAT_PARAMETER, NegotiationOptions
from .settings import Settings, settings

__all__ = ["DEFAULT_FORMAT_PARAMETER", "NegotiationOptions", "Settings", "settings"]
