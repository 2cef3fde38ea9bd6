# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for the vector database client tests.

Every client under test runs against the recording MockTransport and a fake
clock, so polling tests finish instantly and tests can assert the exact RPCs
that were (or were not) sent.
"""

from __future__ import annotations

import pytest

from tests.mock.mock_transport import FakeClock, MockTransport, RecordingFactory, RecordingMetrics
from vectordb_sdk import ConnectParam, VectorClient

_ENV_VARS = (
    "VECTORDB_URI",
    "VECTORDB_TOKEN",
    "VECTORDB_DB_NAME",
    "VECTORDB_IMPORT_URL",
    "VECTORDB_API_KEY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the caller's environment out of configuration tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def factory(transport) -> RecordingFactory:
    return RecordingFactory(transport)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def client(factory, clock, metrics) -> VectorClient:
    return VectorClient(
        transport_factory=factory,
        metrics=metrics,
        clock=clock.monotonic,
        sleep=clock.sleep,
    )


@pytest.fixture
def connected_client(client, transport, metrics) -> VectorClient:
    """Client with a live session; the handshake is removed from the call log."""
    client.connect(ConnectParam(uri="http://localhost:19530", token="root:secret"))
    transport.calls.clear()
    metrics.observations.clear()
    return client
