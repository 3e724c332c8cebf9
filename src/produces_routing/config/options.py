"""Negotiation options consumed by the matcher policy.

The options are an immutable Pydantic model built once at registration
time (usually from :class:`~produces_routing.config.settings.Settings`)
and shared by every negotiation table of the application.
"""

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import ConfigurationError, InvalidMediaTypeError
from ..media.types import APPLICATION_JSON, TEXT_HTML, MediaType

DEFAULT_FORMAT_PARAMETER = "$format"


def _coerce_media_type(value: Any, setting: str) -> MediaType:
    if isinstance(value, MediaType):
        return value
    try:
        return MediaType.parse(value)
    except InvalidMediaTypeError as e:
        raise ConfigurationError(
            f"Invalid media type {value!r} in {setting}: {e.message}", setting=setting
        ) from e


def _default_format_mappings() -> Dict[str, MediaType]:
    return {
        "html": MediaType.parse(TEXT_HTML),
        "json": MediaType.parse(APPLICATION_JSON),
    }


def _default_content_types() -> Tuple[MediaType, ...]:
    return (MediaType.parse(TEXT_HTML), MediaType.parse(APPLICATION_JSON))


class NegotiationOptions(BaseModel):
    """Options controlling how a request's acceptable media types are computed.

    :param format_parameter: Query string parameter overriding ``Accept``
    :type format_parameter: str
    :param format_mappings: Override values to media types; keys are case-insensitive
    :type format_mappings: Dict[str, MediaType]
    :param respect_browser_accept_header: Honor a literal ``*/*`` instead of
        substituting ``default_content_types``
    :type respect_browser_accept_header: bool
    :param return_http_not_acceptable: Route unmatched requests to the 406
        destination instead of the first table entry
    :type return_http_not_acceptable: bool
    :param default_content_types: Preferences used when the client accepts anything
    :type default_content_types: Tuple[MediaType, ...]
    """

    model_config = ConfigDict(frozen=True)

    format_parameter: str = Field(
        DEFAULT_FORMAT_PARAMETER, description="Override query string parameter"
    )
    format_mappings: Dict[str, MediaType] = Field(
        default_factory=_default_format_mappings,
        description="Override parameter value to media type",
    )
    respect_browser_accept_header: bool = Field(
        False, description="Honor a literal */* Accept value"
    )
    return_http_not_acceptable: bool = Field(
        False, description="Return 406 when nothing matches"
    )
    default_content_types: Tuple[MediaType, ...] = Field(
        default_factory=_default_content_types,
        description="Preferences substituted for */*",
    )

    @field_validator("format_mappings", mode="before")
    @classmethod
    def normalize_format_mappings(cls, v: Any) -> Dict[str, MediaType]:
        """Lower-case the keys and parse the values of the format mappings."""
        if not isinstance(v, dict):
            raise ConfigurationError(
                "format_mappings must be a mapping", setting="format_mappings"
            )
        return {
            str(name).strip().lower(): _coerce_media_type(value, "format_mappings")
            for name, value in v.items()
        }

    @field_validator("default_content_types", mode="before")
    @classmethod
    def parse_default_content_types(cls, v: Any) -> Tuple[MediaType, ...]:
        """Parse the default content types, keeping their order."""
        if isinstance(v, (str, MediaType)):
            v = [v]
        return tuple(_coerce_media_type(item, "default_content_types") for item in v)

    @field_validator("format_parameter")
    @classmethod
    def validate_format_parameter(cls, v: str) -> str:
        if not v or not v.strip():
            raise ConfigurationError(
                "format_parameter must not be empty", setting="format_parameter"
            )
        return v.strip()

    def lookup_format(self, name: str) -> Optional[MediaType]:
        """Resolve an override parameter value to its media type.

        :param name: Value of the override query string parameter
        :type name: str
        :return: The mapped media type, or None if the value is unknown
        :rtype: Optional[MediaType]
        """
        if not name or not name.strip():
            return None
        return self.format_mappings.get(name.strip().lower())

    def with_format(self, name: str, media_type: Any) -> "NegotiationOptions":
        """Return a copy with one more override mapping.

        Example::

            options = NegotiationOptions().with_format("xml", "application/xml")
        """
        mappings = dict(self.format_mappings)
        mappings[name.strip().lower()] = _coerce_media_type(media_type, "format_mappings")
        return self.model_copy(update={"format_mappings": mappings})


__all__ = ["DEFAULT_FORMAT_PARAMETER", "NegotiationOptions"]
