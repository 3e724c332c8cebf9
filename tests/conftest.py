import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from produces_routing.config.options import NegotiationOptions  # noqa: E402
from produces_routing.routing.negotiator import RequestView  # noqa: E402
from produces_routing.routing.policy import ProducesMatcherPolicy  # noqa: E402


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    # Add custom markers for test organization
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Isolate tests from PRODUCES_* variables of the surrounding shell.

    Settings read their values from the environment, so every test starts
    from the documented defaults.
    """
    for name in list(os.environ):
        if name.upper().startswith("PRODUCES_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("PRODUCES_LOG_LEVEL", "INFO")
    yield


@pytest.fixture
def default_options():
    """Negotiation options with every default."""
    return NegotiationOptions()


@pytest.fixture
def negotiate_edge():
    """Negotiate a request against endpoints and return the selected edge."""

    def _negotiate(endpoints, accept=None, query=None, options=None):
        policy = ProducesMatcherPolicy(options)
        edges = policy.get_edges(endpoints)
        table = policy.build_jump_table(edges)
        request = RequestView.build(accept=accept, query=query)
        return edges[policy.get_destination(table, request)]

    return _negotiate
