"""Configuration settings for produces-routing.

This module defines the environment-driven configuration of the
negotiation engine: the override query parameter and its mappings,
the treatment of wildcard ``Accept`` values and the 406 behavior.
Settings are loaded from ``PRODUCES_*`` environment variables and .env
files.
"""

from typing import Dict, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..media.types import APPLICATION_JSON, TEXT_HTML
from .options import DEFAULT_FORMAT_PARAMETER, NegotiationOptions


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Complex values (``format_mappings``, ``default_content_types``) are
    read as JSON, e.g.
    ``PRODUCES_FORMAT_MAPPINGS='{"json": "application/json", "xml": "application/xml"}'``.

    :param format_parameter: Query string parameter overriding ``Accept``
    :type format_parameter: str
    :param format_mappings: Override values to media type strings
    :type format_mappings: Dict[str, str]
    :param respect_browser_accept_header: Honor a literal ``*/*`` Accept value
    :type respect_browser_accept_header: bool
    :param return_http_not_acceptable: Respond 406 when nothing matches
    :type return_http_not_acceptable: bool
    :param default_content_types: Preferences substituted for ``*/*``
    :type default_content_types: List[str]
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="PRODUCES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )

    format_parameter: str = Field(
        DEFAULT_FORMAT_PARAMETER, description="Override query string parameter"
    )
    format_mappings: Dict[str, str] = Field(
        default_factory=lambda: {"html": TEXT_HTML, "json": APPLICATION_JSON},
        description="Override parameter value to media type",
    )
    respect_browser_accept_header: bool = Field(
        False, description="Honor a literal */* Accept value"
    )
    return_http_not_acceptable: bool = Field(
        False, description="Respond 406 Not Acceptable when nothing matches"
    )
    default_content_types: List[str] = Field(
        default_factory=lambda: [TEXT_HTML, APPLICATION_JSON],
        description="Preferences substituted for */*",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    def to_options(self) -> NegotiationOptions:
        """Build the immutable negotiation options from these settings.

        :return: Options for the matcher policy
        :rtype: NegotiationOptions
        :raises ConfigurationError: If a configured media type is invalid
        """
        return NegotiationOptions(
            format_parameter=self.format_parameter,
            format_mappings=self.format_mappings,
            respect_browser_accept_header=self.respect_browser_accept_header,
            return_http_not_acceptable=self.return_http_not_acceptable,
            default_content_types=self.default_content_types,
        )


settings = Settings()
"""Global settings instance.

Created once at import and used by the host integration when no explicit
options are supplied.
"""
