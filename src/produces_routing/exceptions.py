"""Structured exception classes for produces-routing."""

import json
from typing import Any, Dict, Optional, Sequence


class ProducesRoutingError(Exception):
    """Base exception for all produces-routing errors.

    This exception serves as the parent class for every error raised by
    the negotiation engine, providing a consistent interface for error
    handling in the host application.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class InvalidMediaTypeError(ProducesRoutingError, ValueError):
    """Raised when a media type string cannot be parsed.

    Only raised for declared content types and configuration values;
    malformed request input is dropped instead.

    :param message: Description of the parse failure
    :param value: The offending media type string
    """

    def __init__(self, message: str, value: Optional[str] = None):
        """Initialize invalid media type error with message and value."""
        details = {}
        if value is not None:
            details["value"] = value
        super().__init__(message=message, code="INVALID_MEDIA_TYPE", details=details)
        self.value = value


class AmbiguousMatchError(ProducesRoutingError):
    """Raised when a request matches more than one negotiation destination.

    This indicates a route misconfiguration: two handlers sharing a route
    declare overlapping content types at the same specificity, and neither
    the client preferences nor the table can choose between them.

    :param message: Description of the ambiguity
    :param media_type: The acceptable media type that matched several entries
    :param candidates: The edge patterns that matched
    """

    def __init__(
        self,
        message: str,
        media_type: Optional[str] = None,
        candidates: Optional[Sequence[str]] = None,
    ):
        """Initialize ambiguous match error with the competing patterns."""
        details: Dict[str, Any] = {}
        if media_type:
            details["media_type"] = media_type
        if candidates:
            details["candidates"] = list(candidates)
        super().__init__(message=message, code="AMBIGUOUS_MATCH", details=details)
        self.media_type = media_type
        self.candidates = list(candidates or [])


class ConfigurationError(ProducesRoutingError):
    """Raised for configuration-related errors.

    This exception is raised when negotiation options fail validation,
    such as a format mapping whose value is not a valid media type.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)
