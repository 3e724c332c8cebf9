"""Unit tests for settings and negotiation options."""

import pytest

from produces_routing.config import NegotiationOptions, Settings
from produces_routing.exceptions import ConfigurationError
from produces_routing.media import MediaType


def test_defaults():
    settings = Settings()
    assert settings.format_parameter == "$format"
    assert settings.format_mappings == {"html": "text/html", "json": "application/json"}
    assert settings.respect_browser_accept_header is False
    assert settings.return_http_not_acceptable is False
    assert settings.default_content_types == ["text/html", "application/json"]
    assert settings.to_options() == NegotiationOptions()


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("PRODUCES_FORMAT_PARAMETER", "fmt")
    monkeypatch.setenv("PRODUCES_FORMAT_MAPPINGS", '{"XML": "application/xml"}')
    monkeypatch.setenv("PRODUCES_RETURN_HTTP_NOT_ACCEPTABLE", "true")
    monkeypatch.setenv("PRODUCES_RESPECT_BROWSER_ACCEPT_HEADER", "1")
    monkeypatch.setenv("PRODUCES_DEFAULT_CONTENT_TYPES", '["application/json"]')
    monkeypatch.setenv("PRODUCES_LOG_LEVEL", "debug")

    settings = Settings()
    options = settings.to_options()

    assert settings.log_level == "DEBUG"
    assert options.format_parameter == "fmt"
    assert options.lookup_format("xml") == MediaType.parse("application/xml")
    assert options.lookup_format("json") is None
    assert options.return_http_not_acceptable is True
    assert options.respect_browser_accept_header is True
    assert options.default_content_types == (MediaType.parse("application/json"),)


def test_invalid_mapping_raises_configuration_error():
    settings = Settings(format_mappings={"bad": "not a media type"})
    with pytest.raises(ConfigurationError) as exc_info:
        settings.to_options()
    assert exc_info.value.details == {"setting": "format_mappings"}


def test_invalid_default_content_type_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        NegotiationOptions(default_content_types=["*/html"])


def test_empty_format_parameter_rejected():
    with pytest.raises(ConfigurationError):
        NegotiationOptions(format_parameter=" ")


def test_lookup_is_case_insensitive():
    options = NegotiationOptions()
    assert options.lookup_format("JSON") == MediaType.parse("application/json")
    assert options.lookup_format(" Html ") == MediaType.parse("text/html")
    assert options.lookup_format("") is None


def test_with_format_returns_copy():
    options = NegotiationOptions()
    extended = options.with_format("Xml", "application/xml")

    assert extended.lookup_format("xml") == MediaType.parse("application/xml")
    assert options.lookup_format("xml") is None
    with pytest.raises(ConfigurationError):
        options.with_format("bad", "nope")
