"""Unit tests for the partitioning of endpoints into content-type edges."""

from produces_routing.routing import Endpoint, build_edges


def _states(edges):
    return [edge.state for edge in edges]


def test_edges_preserve_discovery_order_and_membership():
    a = Endpoint.with_content_types("application/json", name="a")
    b = Endpoint(None, None, "b")
    c = Endpoint.with_content_types("application/*", name="c")

    edges = build_edges([a, b, c])

    assert _states(edges) == ["application/json", "*/*", "application/*"]
    by_state = {edge.state: edge.endpoints for edge in edges}
    assert by_state["application/json"] == (a, b, c)
    assert by_state["*/*"] == (b,)
    assert by_state["application/*"] == (b, c)
    assert not any(edge.is_rejection for edge in edges)


def test_rejection_edge_synthesized_when_nothing_accepts_everything():
    edges = build_edges(
        [
            Endpoint.with_content_types("application/xml"),
            Endpoint.with_content_types("text/html", "image/*"),
        ]
    )

    assert _states(edges) == ["application/xml", "text/html", "image/*", "*/*"]
    assert edges[-1].is_rejection
    assert len(edges[-1].endpoints) == 1


def test_exactly_one_universal_edge():
    candidate_sets = [
        [Endpoint.with_content_types("application/json")],
        [Endpoint(None), Endpoint(None)],
        [Endpoint.with_content_types("*/*"), Endpoint.with_content_types("text/html")],
        [Endpoint.with_content_types()],
    ]
    for endpoints in candidate_sets:
        edges = build_edges(endpoints)
        assert sum(1 for e in edges if e.media_type.matches_all_types) == 1


def test_endpoint_added_once_per_edge_with_overlapping_declarations():
    endpoint = Endpoint.with_content_types("application/json", "application/*")

    edges = build_edges([endpoint])

    json_edge = next(e for e in edges if e.state == "application/json")
    assert json_edge.endpoints == (endpoint,)


def test_edge_keys_are_case_insensitive():
    first = Endpoint.with_content_types("Application/JSON")
    second = Endpoint.with_content_types("application/json")

    edges = build_edges([first, second])

    assert _states(edges) == ["Application/JSON", "*/*"]
    assert edges[0].endpoints == (first, second)


def test_build_edges_is_deterministic():
    endpoints = [
        Endpoint.with_content_types("application/xml"),
        Endpoint.with_content_types("application/json"),
        Endpoint.with_content_types("image/*"),
    ]
    first = build_edges(endpoints)
    second = build_edges(endpoints)
    # The synthesized rejection endpoint is a fresh marker on every build
    assert first[:-1] == second[:-1]
    assert first[-1].state == second[-1].state == "*/*"
    assert first[-1].is_rejection and second[-1].is_rejection
