# vectordb_sdk/errors.py
# SPDX-License-Identifier: Apache-2.0
"""
Status taxonomy for the vector database client.

Every failure surfaced by the client maps onto a single `StatusCode`:

    OK                  call succeeded
    NOT_CONNECTED       no live connection (or the handshake failed)
    INVALID_ARGUMENT    rejected locally before any network I/O
    RPC_FAILED          transport-level failure (deadline, unavailable, ...)
    SERVER_FAILED       structurally valid response carrying a non-OK status
    TIMEOUT             a monitored operation did not finish in time

Errors are raised as `VectorClientError` subclasses. Each one can be turned into
a plain `Status` value (`err.status`) for callers that prefer to pass results
around instead of exceptions. No error in this module is ever retried
automatically; retry policy belongs to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional


class StatusCode(IntEnum):
    OK = 0
    UNKNOWN_ERROR = 1
    NOT_SUPPORTED = 2
    NOT_CONNECTED = 3

    INVALID_ARGUMENT = 1000
    RPC_FAILED = 1001
    SERVER_FAILED = 1002
    TIMEOUT = 1003

    DIMENSION_NOT_EQUAL = 2000
    VECTOR_IS_EMPTY = 2001


@dataclass(frozen=True)
class Status:
    """
    Result status of a client call.

    Attributes:
        code: Taxonomy code
        message: Human-readable message ("OK" on success)
        rpc_code: Transport status name when the failure came from the RPC layer
        server_code: Error code reported by the server, when it reported one
    """
    code: StatusCode = StatusCode.OK
    message: str = "OK"
    rpc_code: Optional[str] = None
    server_code: Optional[int] = None

    @classmethod
    def ok(cls) -> "Status":
        return cls()

    def is_ok(self) -> bool:
        return self.code == StatusCode.OK

    @classmethod
    def from_exception(cls, exc: BaseException) -> "Status":
        """Map any exception onto the status taxonomy."""
        if isinstance(exc, VectorClientError):
            return exc.status
        return cls(code=StatusCode.UNKNOWN_ERROR, message=str(exc) or type(exc).__name__)

    def asdict(self) -> Dict[str, Any]:
        return {
            "code": self.code.name,
            "message": self.message,
            "rpc_code": self.rpc_code,
            "server_code": self.server_code,
        }


# =============================================================================
# Normalized Errors
# =============================================================================

class VectorClientError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (UPPER_SNAKE_CASE)
        rpc_code: gRPC status name for transport failures (e.g. "UNAVAILABLE")
        server_code: Server-reported error code for SERVER_FAILED
        details: Additional JSON-serializable context (never credentials)
    """
    status_code: StatusCode = StatusCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        rpc_code: Optional[str] = None,
        server_code: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.status_code.name
        self.rpc_code = rpc_code
        self.server_code = server_code
        self.details = dict(details or {})

    @property
    def status(self) -> Status:
        return Status(
            code=self.status_code,
            message=self.message,
            rpc_code=self.rpc_code,
            server_code=self.server_code,
        )

    def asdict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization and logging."""
        return {
            "message": self.message,
            "code": self.code,
            "status_code": int(self.status_code),
            "rpc_code": self.rpc_code,
            "server_code": self.server_code,
            "details": {k: self.details[k] for k in sorted(self.details)},
        }


class NotConnected(VectorClientError):
    """Operation attempted without a live connection, or the handshake failed."""
    status_code = StatusCode.NOT_CONNECTED


class InvalidArgument(VectorClientError):
    """Request rejected by local validation; nothing was sent."""
    status_code = StatusCode.INVALID_ARGUMENT


class RpcFailed(VectorClientError):
    """Transport failure: deadline exceeded, unavailable, unauthenticated, etc."""
    status_code = StatusCode.RPC_FAILED


class ServerFailed(VectorClientError):
    """The server answered with a non-OK status; its message is preserved."""
    status_code = StatusCode.SERVER_FAILED


class OperationTimeout(VectorClientError):
    """A monitored operation was still running when the wait budget ran out."""
    status_code = StatusCode.TIMEOUT


class NotSupported(VectorClientError):
    """Requested operation or parameter is not supported by the client."""
    status_code = StatusCode.NOT_SUPPORTED


__all__ = [
    "StatusCode",
    "Status",
    "VectorClientError",
    "NotConnected",
    "InvalidArgument",
    "RpcFailed",
    "ServerFailed",
    "OperationTimeout",
    "NotSupported",
]
