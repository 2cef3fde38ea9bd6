# SPDX-License-Identifier: Apache-2.0
"""
Client Conformance: Status taxonomy, error serialization and error context.
"""

import pytest

from vectordb_sdk.core.error_context import attach_context, clear_context, get_context, has_context
from vectordb_sdk.core.metrics import MetricsSink, NoopMetrics
from vectordb_sdk.errors import (
    InvalidArgument,
    NotConnected,
    NotSupported,
    OperationTimeout,
    RpcFailed,
    ServerFailed,
    Status,
    StatusCode,
    VectorClientError,
)


@pytest.mark.parametrize(
    "cls,code",
    [
        (NotConnected, StatusCode.NOT_CONNECTED),
        (InvalidArgument, StatusCode.INVALID_ARGUMENT),
        (RpcFailed, StatusCode.RPC_FAILED),
        (ServerFailed, StatusCode.SERVER_FAILED),
        (OperationTimeout, StatusCode.TIMEOUT),
        (NotSupported, StatusCode.NOT_SUPPORTED),
    ],
)
def test_error_classes_map_to_status_codes(cls, code):
    err = cls("boom")
    assert isinstance(err, VectorClientError)
    assert err.status.code is code
    assert err.status.message == "boom"
    assert err.code == code.name
    assert not err.status.is_ok()


def test_status_ok_default():
    status = Status.ok()
    assert status.is_ok()
    assert status.message == "OK"
    assert int(status.code) == 0


def test_status_code_values():
    assert StatusCode.INVALID_ARGUMENT == 1000
    assert StatusCode.RPC_FAILED == 1001
    assert StatusCode.SERVER_FAILED == 1002
    assert StatusCode.TIMEOUT == 1003


def test_explicit_code_overrides_default_name():
    err = InvalidArgument("bad timeout", code="BAD_CONFIG")
    assert err.code == "BAD_CONFIG"
    assert err.status.code is StatusCode.INVALID_ARGUMENT


def test_status_from_exception():
    assert Status.from_exception(RpcFailed("down", rpc_code="UNAVAILABLE")).rpc_code == "UNAVAILABLE"
    status = Status.from_exception(RuntimeError())
    assert status.code is StatusCode.UNKNOWN_ERROR
    assert status.message == "RuntimeError"


def test_error_asdict_is_serializable():
    err = ServerFailed("collection not found", server_code=100, details={"z": 1, "a": 2})
    data = err.asdict()
    assert data["code"] == "SERVER_FAILED"
    assert data["status_code"] == 1002
    assert data["server_code"] == 100
    assert list(data["details"]) == ["a", "z"]
    assert Status.from_exception(err).asdict()["code"] == "SERVER_FAILED"


# --------------------------------------------------------------------------- #
# Error context
# --------------------------------------------------------------------------- #

def test_attach_context_sets_canonical_and_component_attrs():
    err = RpcFailed("x")
    attach_context(err, "vector_client", operation="search")
    assert has_context(err)
    assert get_context(err) == {"component": "vector_client", "operation": "search"}
    assert getattr(err, "__vector_client_context__")["operation"] == "search"


def test_attach_context_merges_and_keeps_first_component():
    err = RpcFailed("x")
    attach_context(err, "vector_client", operation="flush")
    attach_context(err, "bulk_import", job_id="7")
    ctx = get_context(err)
    assert ctx["component"] == "vector_client"
    assert ctx["operation"] == "flush"
    assert ctx["job_id"] == "7"


def test_clear_context_removes_attrs():
    err = RpcFailed("x")
    attach_context(err, "vector_client", operation="query")
    clear_context(err)
    assert not has_context(err)
    assert get_context(err) == {}
    assert not hasattr(err, "__vector_client_context__")


def test_attach_context_never_raises_on_frozen_exceptions():
    class Frozen(Exception):
        __slots__ = ()

        def __setattr__(self, name, value):
            raise AttributeError(name)

    err = Frozen()
    attach_context(err, "vector_client", operation="x")
    assert not has_context(err)


def test_noop_metrics_satisfies_sink_protocol():
    sink = NoopMetrics()
    assert isinstance(sink, MetricsSink)
    sink.observe(component="c", op="o", ms=1.0, ok=True)
    sink.counter(component="c", name="n")
