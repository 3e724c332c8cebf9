"""Unit tests for per-request negotiation.

These tests cover the acceptable media type computation (override
parameter, Accept header, default substitution) and the selection of
a destination from the negotiation table.
"""

import pytest

from produces_routing.config.options import NegotiationOptions
from produces_routing.exceptions import AmbiguousMatchError
from produces_routing.routing import Endpoint, RequestView, acceptable_media_types


def _endpoints(*declarations):
    return [Endpoint.with_content_types(*d) for d in declarations]


def _acceptable(accept=None, query=None, options=None):
    request = RequestView.build(accept=accept, query=query)
    return [str(m) for m in acceptable_media_types(request, options or NegotiationOptions())]


class TestAcceptableMediaTypes:
    def test_accept_sorted_by_quality(self):
        assert _acceptable("text/plain, image/*;q=0.9, application/xml;q=0.8") == [
            "text/plain",
            "image/*",
            "application/xml",
        ]

    def test_missing_or_empty_accept_uses_defaults(self):
        assert _acceptable(None) == ["text/html", "application/json"]
        assert _acceptable("") == ["text/html", "application/json"]
        assert _acceptable("garbage") == ["text/html", "application/json"]

    def test_wildcard_replaced_by_defaults(self):
        assert _acceptable("*/*") == ["text/html", "application/json"]
        assert _acceptable("application/json, */*;q=0.9") == ["text/html", "application/json"]

    def test_wildcard_honored_literally(self):
        options = NegotiationOptions(respect_browser_accept_header=True)
        assert _acceptable("*/*", options=options) == ["*/*"]
        assert _acceptable("application/json, */*;q=0.9", options=options) == [
            "application/json",
            "*/*",
        ]
        assert _acceptable(None, options=options) == ["text/html", "application/json"]

    def test_override_parameter_replaces_accept(self):
        assert _acceptable("text/html", "$format=json") == ["application/json"]
        assert _acceptable("text/html", "$format=JSON&$format=html") == [
            "application/json",
            "text/html",
        ]

    def test_unknown_override_values_are_dropped(self):
        assert _acceptable("text/html", "$format=yaml&$format=json") == ["application/json"]

    def test_override_without_usable_values_is_empty(self):
        assert _acceptable("text/html", "$format=yaml") == []
        assert _acceptable("text/html", "$format=") == []

    def test_custom_override_parameter(self):
        options = NegotiationOptions(format_parameter="format")
        assert _acceptable("text/html", "format=json", options=options) == ["application/json"]
        assert _acceptable("text/html", "$format=json", options=options) == ["text/html"]


def test_wildcard_subtype_in_accept_selects_specific_endpoint(negotiate_edge):
    endpoints = _endpoints(("application/xml",), ("application/json",), ("image/png",), ("text/html",))

    edge = negotiate_edge(endpoints, accept="text/plain, image/*;q=0.9, application/xml;q=0.8")

    assert edge.state == "image/png"


def test_highest_quality_type_with_a_handler_wins(negotiate_edge):
    endpoints = _endpoints(("application/xml",), ("application/json",), ("image/*",), ("text/html",))

    edge = negotiate_edge(endpoints, accept="text/plain, image/*;q=0.9, application/xml;q=0.8")

    assert edge.state == "image/*"


class TestNonMatchingContentTypes:
    endpoints = _endpoints(("application/xml",), ("text/html", "image/*"))

    def test_returns_first_endpoint_by_default(self, negotiate_edge):
        edge = negotiate_edge(self.endpoints, accept="application/json")

        assert edge.state == "application/xml"
        assert not edge.is_rejection

    def test_returns_not_acceptable_in_strict_mode(self, negotiate_edge):
        options = NegotiationOptions(return_http_not_acceptable=True)

        edge = negotiate_edge(self.endpoints, accept="application/json", options=options)

        assert edge.state == "*/*"
        assert edge.is_rejection


class TestDefaults:
    def test_prefers_text_html_for_wildcard(self, negotiate_edge):
        endpoints = _endpoints(("application/json",), ("text/html",))
        assert negotiate_edge(endpoints, accept="*/*").state == "text/html"

    def test_prefers_text_html_without_accept(self, negotiate_edge):
        endpoints = _endpoints(("application/json",), ("text/html",))
        assert negotiate_edge(endpoints).state == "text/html"

    def test_prefers_text_html_when_accept_contains_wildcard(self, negotiate_edge):
        endpoints = _endpoints(("application/json",), ("text/html",))
        assert negotiate_edge(endpoints, accept="application/json, */*;q=0.9").state == "text/html"

    def test_literal_wildcard_respects_specific_type(self, negotiate_edge):
        endpoints = _endpoints(("application/json",), ("text/html",))
        options = NegotiationOptions(respect_browser_accept_header=True)

        edge = negotiate_edge(endpoints, accept="application/json, */*;q=0.9", options=options)

        assert edge.state == "application/json"

    def test_falls_back_to_application_json_without_html_endpoint(self, negotiate_edge):
        endpoints = _endpoints(("application/xml",), ("application/json",))
        assert negotiate_edge(endpoints, accept="*/*").state == "application/json"

    def test_application_json_as_second_default(self, negotiate_edge):
        endpoints = _endpoints(("text/plain",), ("application/json",))
        assert negotiate_edge(endpoints, accept="text/plain, */*;q=0.9").state == "application/json"

    def test_literal_wildcard_keeps_client_preference(self, negotiate_edge):
        endpoints = _endpoints(("text/plain",), ("application/json",))
        options = NegotiationOptions(respect_browser_accept_header=True)

        edge = negotiate_edge(endpoints, accept="text/plain, */*;q=0.9", options=options)

        assert edge.state == "text/plain"


class TestFormatParameter:
    def test_format_parameter_overrides_accept(self, negotiate_edge):
        endpoints = _endpoints(("text/html",), ("application/json",))

        edge = negotiate_edge(endpoints, accept="text/html", query="$format=json")

        assert edge.state == "application/json"

    def test_custom_mapping(self, negotiate_edge):
        endpoints = _endpoints(("text/html",), ("application/json",), ("application/xml",))
        options = NegotiationOptions().with_format("XML", "application/xml")

        edge = negotiate_edge(endpoints, accept="text/html", query="$format=xml", options=options)

        assert edge.state == "application/xml"

    def test_unknown_format_does_not_fall_back_to_accept(self, negotiate_edge):
        endpoints = _endpoints(("application/json",), ("text/html",))
        strict = NegotiationOptions(return_http_not_acceptable=True)

        assert negotiate_edge(endpoints, accept="text/html", query="$format=csv").state == "application/json"
        assert negotiate_edge(
            endpoints, accept="text/html", query="$format=csv", options=strict
        ).is_rejection


class TestAmbiguity:
    def test_overlapping_matches_raise(self, negotiate_edge):
        endpoints = _endpoints(("application/json",), ("application/xml",))

        with pytest.raises(AmbiguousMatchError) as exc_info:
            negotiate_edge(endpoints, accept="application/*")

        assert exc_info.value.code == "AMBIGUOUS_MATCH"
        assert exc_info.value.candidates == ["application/json", "application/xml"]
        assert exc_info.value.to_dict()["details"]["media_type"] == "application/*"

    def test_more_specific_entry_wins_over_wildcard_entry(self, negotiate_edge):
        endpoints = _endpoints(("image/png",), ("image/*",))

        assert negotiate_edge(endpoints, accept="image/*").state == "image/png"

    def test_literal_wildcard_with_several_types_is_ambiguous(self, negotiate_edge):
        endpoints = _endpoints(("application/json",), ("text/html",))
        options = NegotiationOptions(respect_browser_accept_header=True)

        with pytest.raises(AmbiguousMatchError):
            negotiate_edge(endpoints, accept="*/*", options=options)


def test_single_destination_skips_negotiation(negotiate_edge):
    first, second = Endpoint(None, None, "first"), Endpoint(None, None, "second")

    edge = negotiate_edge([first, second], accept="application/*", query="$format=nothing")

    assert edge.state == "*/*"
    assert edge.endpoints == (first, second)


def test_undeclared_endpoint_serves_every_edge(negotiate_edge):
    fallback = Endpoint(None, None, "fallback")
    json_endpoint = Endpoint.with_content_types("application/json", name="json")

    edge = negotiate_edge([json_endpoint, fallback], accept="application/json")
    assert edge.endpoints == (json_endpoint, fallback)

    edge = negotiate_edge([json_endpoint, fallback], accept="text/csv")
    assert edge.state == "application/json"


def test_handler_declaration_overrides_group(negotiate_edge):
    from produces_routing.routing import produces

    @produces("application/json")
    class Api:
        @produces("application/xml")
        async def get(self, request):
            return None

    endpoint = Endpoint.from_handler(Api().get)

    edge = negotiate_edge([endpoint], accept="application/xml")

    assert endpoint.content_types == ("application/xml",)
    assert edge.state == "application/xml"
    assert edge.endpoints == (endpoint,)


def test_request_view_replaces_unencodable_characters():
    request = RequestView.build(accept=["text/html", "application/jsжn"])

    assert request.headers.getlist("accept") == ["text/html", "application/js?n"]
    assert _acceptable("application/jsжn") == ["text/html", "application/json"]
