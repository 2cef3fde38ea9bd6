# SPDX-License-Identifier: Apache-2.0
"""
Client Conformance: Per-call header injection and the gRPC transport.

The end-to-end tests run an in-process gRPC server with a generic handler that
echoes the received metadata, so they need no external service.
"""

from concurrent import futures

import grpc
import pytest

from vectordb_sdk.connection import ConnectionContext, ConnectParam
from vectordb_sdk.interceptor import HeaderAdderInterceptor, create_channel_with_headers
from vectordb_sdk.transport import SERVICE_NAME, GrpcTransport, JsonCodec, RpcTransport, TransportError


class _Details:
    """Minimal ClientCallDetails stand-in."""

    def __init__(self, metadata=None):
        self.method = "/svc/Method"
        self.timeout = 1.5
        self.metadata = metadata
        self.credentials = None
        self.wait_for_ready = None
        self.compression = None


def _capture():
    seen = {}

    def continuation(details, request):
        seen["details"] = details
        seen["request"] = request
        return "response"

    return seen, continuation


def test_interceptor_adds_all_headers_in_order():
    seen, continuation = _capture()
    interceptor = HeaderAdderInterceptor([("authorization", "abc"), ("dbname", "db1")])

    result = interceptor.intercept_unary_unary(continuation, _Details(), {"x": 1})

    assert result == "response"
    assert seen["request"] == {"x": 1}
    assert list(seen["details"].metadata) == [("authorization", "abc"), ("dbname", "db1")]
    assert seen["details"].method == "/svc/Method"
    assert seen["details"].timeout == 1.5


def test_interceptor_keeps_existing_metadata():
    seen, continuation = _capture()
    interceptor = HeaderAdderInterceptor([("client-sdk", "Python/0.1.0")])
    interceptor.intercept_unary_unary(continuation, _Details(metadata=[("x-trace", "1")]), None)
    assert list(seen["details"].metadata) == [("x-trace", "1"), ("client-sdk", "Python/0.1.0")]


def test_interceptor_lowercases_keys_and_proceeds_without_headers():
    assert HeaderAdderInterceptor([("DBName", "a")]).headers == [("dbname", "a")]
    seen, continuation = _capture()
    HeaderAdderInterceptor([]).intercept_unary_unary(continuation, _Details(), "req")
    assert list(seen["details"].metadata) == []


def test_json_codec():
    assert JsonCodec.decode(JsonCodec.encode({"a": [1, 2]})) == {"a": [1, 2]}
    assert JsonCodec.decode(b"") == {}


# --------------------------------------------------------------------------- #
# In-process gRPC server
# --------------------------------------------------------------------------- #

def _echo(request, context):
    if request.get("fail"):
        context.abort(grpc.StatusCode.UNAVAILABLE, "service is down")
    metadata = {key: value for key, value in context.invocation_metadata()}
    return {"status": {"code": 0}, "echo": request, "metadata": metadata}


class _EchoService(grpc.GenericRpcHandler):
    def service(self, handler_call_details):
        if not handler_call_details.method.startswith(f"/{SERVICE_NAME}/"):
            return None
        return grpc.unary_unary_rpc_method_handler(
            _echo,
            request_deserializer=JsonCodec.decode,
            response_serializer=JsonCodec.encode,
        )


@pytest.fixture
def echo_server():
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=2))
    server.add_generic_rpc_handlers((_EchoService(),))
    port = server.add_insecure_port("127.0.0.1:0")
    server.start()
    try:
        yield port
    finally:
        server.stop(None)


def test_channel_with_headers_reaches_server(echo_server):
    channel = create_channel_with_headers(
        f"127.0.0.1:{echo_server}", [("authorization", "dG9rZW4="), ("dbname", "db1")]
    )
    try:
        call = channel.unary_unary(
            f"/{SERVICE_NAME}/GetVersion",
            request_serializer=JsonCodec.encode,
            response_deserializer=JsonCodec.decode,
        )
        reply = call({"ping": True}, timeout=5)
    finally:
        channel.close()
    assert reply["echo"] == {"ping": True}
    assert reply["metadata"]["authorization"] == "dG9rZW4="
    assert reply["metadata"]["dbname"] == "db1"


def test_grpc_transport_end_to_end(echo_server):
    param = ConnectParam(uri=f"127.0.0.1:{echo_server}", token="root:pw", db_name="db1")
    transport = GrpcTransport(ConnectionContext.from_param(param, sdk_version="9.9.9"))
    try:
        assert isinstance(transport, RpcTransport)
        assert transport.wait_ready(5000) is True
        reply = transport.call("Query", {"expr": "id > 0"}, timeout_ms=5000)
        assert reply["echo"] == {"expr": "id > 0"}
        assert reply["metadata"]["dbname"] == "db1"
        assert reply["metadata"]["client-sdk"] == "Python/9.9.9"
        assert reply["metadata"]["authorization"] == param.authorization
    finally:
        transport.close()


def test_grpc_transport_maps_rpc_errors(echo_server):
    param = ConnectParam(uri=f"127.0.0.1:{echo_server}")
    transport = GrpcTransport.from_context(ConnectionContext.from_param(param))
    try:
        with pytest.raises(TransportError) as excinfo:
            transport.call("Search", {"fail": True}, timeout_ms=5000)
    finally:
        transport.close()
    assert excinfo.value.code == "UNAVAILABLE"
    assert excinfo.value.message == "service is down"


def test_grpc_transport_unknown_method_is_unimplemented(echo_server):
    param = ConnectParam(uri=f"127.0.0.1:{echo_server}")
    transport = GrpcTransport(ConnectionContext.from_param(param), service="other.Service")
    try:
        with pytest.raises(TransportError) as excinfo:
            transport.call("GetVersion", {}, timeout_ms=5000)
    finally:
        transport.close()
    assert excinfo.value.code == "UNIMPLEMENTED"


def test_grpc_transport_zero_budget_does_not_block():
    # nothing listens on port 1
    transport = GrpcTransport(ConnectionContext.from_param(ConnectParam(uri="127.0.0.1:1")))
    try:
        assert transport.wait_ready(0) is False
    finally:
        transport.close()
