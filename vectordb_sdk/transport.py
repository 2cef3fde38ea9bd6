# vectordb_sdk/transport.py
# SPDX-License-Identifier: Apache-2.0
"""
RPC transport for the client dispatch core.

The dispatch core only needs three things from a transport: send one request
message to a named method with a deadline, report channel readiness, and close.
`GrpcTransport` provides them over a grpcio channel using generic unary-unary
calls on the service's method paths. Message encoding is pluggable; the default
codec sends JSON documents whose keys follow the server's field names.

Transport failures are raised as `TransportError` carrying the gRPC status name;
the dispatch core maps them onto the status taxonomy.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable

import grpc

from vectordb_sdk.connection import ConnectionContext
from vectordb_sdk.interceptor import create_channel_with_headers

logger = logging.getLogger(__name__)

SERVICE_NAME = "milvus.proto.milvus.MilvusService"


class TransportError(Exception):
    """
    A call did not produce a response message.

    Attributes:
        code: gRPC status name ("DEADLINE_EXCEEDED", "UNAVAILABLE", ...)
    """

    def __init__(self, message: str, *, code: str = "UNKNOWN") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


@runtime_checkable
class RpcTransport(Protocol):
    def call(self, method: str, request: Mapping[str, Any], *, timeout_ms: int = 0) -> Dict[str, Any]: ...

    def wait_ready(self, timeout_ms: int) -> bool: ...

    def close(self) -> None: ...


class JsonCodec:
    """Encodes request and response messages as UTF-8 JSON documents."""

    @staticmethod
    def encode(message: Mapping[str, Any]) -> bytes:
        return json.dumps(message, separators=(",", ":")).encode("utf-8")

    @staticmethod
    def decode(payload: bytes) -> Dict[str, Any]:
        if not payload:
            return {}
        return json.loads(payload.decode("utf-8"))


def _read_file(path: str) -> Optional[bytes]:
    if not path:
        return None
    with open(path, "rb") as fh:
        return fh.read()


def _channel_credentials(context: ConnectionContext) -> Optional[grpc.ChannelCredentials]:
    if not context.secure:
        return None
    return grpc.ssl_channel_credentials(
        root_certificates=_read_file(context.ca_cert),
        private_key=_read_file(context.key),
        certificate_chain=_read_file(context.cert),
    )


class GrpcTransport:
    """
    `RpcTransport` over a grpcio channel with the header interceptor attached.

    Usage
    -----
        context = ConnectionContext.from_param(ConnectParam(uri="localhost:19530"))
        transport = GrpcTransport(context)
        if transport.wait_ready(10000):
            reply = transport.call("GetVersion", {}, timeout_ms=5000)
    """

    def __init__(
        self,
        context: ConnectionContext,
        *,
        codec: Any = JsonCodec,
        service: str = SERVICE_NAME,
    ) -> None:
        self._context = context
        self._codec = codec
        self._service = service
        self._channel = create_channel_with_headers(
            context.target,
            context.headers(),
            credentials=_channel_credentials(context),
            options=context.channel_options(),
        )
        self._stubs: Dict[str, Callable[..., Any]] = {}

    @classmethod
    def from_context(cls, context: ConnectionContext) -> "GrpcTransport":
        return cls(context)

    @property
    def target(self) -> str:
        return self._context.target

    def _stub(self, method: str) -> Callable[..., Any]:
        stub = self._stubs.get(method)
        if stub is None:
            stub = self._channel.unary_unary(
                f"/{self._service}/{method}",
                request_serializer=self._codec.encode,
                response_deserializer=self._codec.decode,
            )
            self._stubs[method] = stub
        return stub

    def wait_ready(self, timeout_ms: int) -> bool:
        """Block up to `timeout_ms` for the channel; 0 checks readiness once without waiting."""
        try:
            grpc.channel_ready_future(self._channel).result(timeout=max(timeout_ms, 0) / 1000.0)
        except grpc.FutureTimeoutError:
            logger.debug("channel to %s not ready after %sms", self.target, timeout_ms)
            return False
        return True

    def call(self, method: str, request: Mapping[str, Any], *, timeout_ms: int = 0) -> Dict[str, Any]:
        timeout_s = timeout_ms / 1000.0 if timeout_ms and timeout_ms > 0 else None
        try:
            return self._stub(method)(request, timeout=timeout_s)
        except grpc.RpcError as exc:
            code = exc.code() if hasattr(exc, "code") else None
            details = exc.details() if hasattr(exc, "details") else None
            code_name = code.name if code is not None else "UNKNOWN"
            logger.debug("rpc %s failed: %s %s", method, code_name, details)
            raise TransportError(details or f"{method} failed: {code_name}", code=code_name) from exc

    def close(self) -> None:
        self._channel.close()


__all__ = [
    "RpcTransport",
    "TransportError",
    "GrpcTransport",
    "JsonCodec",
    "SERVICE_NAME",
]
