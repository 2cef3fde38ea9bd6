# vectordb_sdk/connection.py
# SPDX-License-Identifier: Apache-2.0
"""
Connection configuration and the per-session connection context.

`ConnectParam` is what callers fill in (with environment fallbacks).
`ConnectionContext` is the immutable value derived from it at connect time: the
resolved address, the authorization header value and the channel settings. Every
outbound call takes its headers from the context of the live session; headers are
never copied into request messages.

Environment
-----------
    VECTORDB_URI       default "http://localhost:19530"
    VECTORDB_TOKEN     "user:password" or an API key
    VECTORDB_DB_NAME   database selected after connect
"""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from vectordb_sdk.errors import InvalidArgument
from vectordb_sdk.uri import URI, default_port, parse_uri

DEFAULT_URI = "http://localhost:19530"
SDK_TYPE = "Python"
CLIENT_SDK_HEADER = "client-sdk"

# Unlimited gRPC message sizes, same as the server's own clients.
_MAX_MESSAGE_LENGTH = -1


def _encode_authorization(credential: str) -> str:
    return base64.b64encode(credential.encode("utf-8")).decode("ascii")


@dataclass
class ConnectParam:
    """
    Parameters for `VectorClient.connect`.

    Attributes:
        uri: "[scheme://]host[:port][/database]"; falls back to VECTORDB_URI
        token: "user:password" or an API key; falls back to VECTORDB_TOKEN
        username / password: alternative to token
        db_name: database to use; falls back to VECTORDB_DB_NAME, then the URI path
        connect_timeout_ms: budget for channel readiness and the handshake
        rpc_deadline_ms: default per-call deadline (0 = none)
        tls: enable TLS; implied by an "https" scheme
        server_name / cert / key / ca_cert: TLS overrides and file paths
    """
    uri: Optional[str] = None
    token: Optional[str] = None
    username: str = ""
    password: str = ""
    db_name: str = ""
    connect_timeout_ms: int = 10000
    rpc_deadline_ms: int = 0
    keepalive_time_ms: int = 10000
    keepalive_timeout_ms: int = 5000
    keepalive_without_calls: bool = True
    tls: bool = False
    server_name: str = ""
    cert: str = ""
    key: str = ""
    ca_cert: str = ""

    def __post_init__(self) -> None:
        self.uri = self.uri or os.getenv("VECTORDB_URI") or DEFAULT_URI
        if self.token is None and not self.username:
            self.token = os.getenv("VECTORDB_TOKEN") or None
        self.db_name = self.db_name or os.getenv("VECTORDB_DB_NAME") or ""
        self.validate()

    def validate(self) -> None:
        for name in ("connect_timeout_ms", "rpc_deadline_ms", "keepalive_time_ms", "keepalive_timeout_ms"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise InvalidArgument(f"{name} must be a non-negative integer", code="BAD_CONFIG")
        if self.password and not self.username:
            raise InvalidArgument("password requires a username", code="BAD_CONFIG")
        if (self.cert and not self.key) or (self.key and not self.cert):
            raise InvalidArgument("TLS cert and key must be given together", code="BAD_CONFIG")

    # --- fluent helpers ---

    def with_token(self, token: str) -> "ConnectParam":
        self.token = token
        self.username = ""
        self.password = ""
        return self

    def with_authorizations(self, username: str, password: str) -> "ConnectParam":
        self.token = None
        self.username = username
        self.password = password
        self.validate()
        return self

    def with_db_name(self, db_name: str) -> "ConnectParam":
        self.db_name = db_name
        return self

    def with_connect_timeout(self, connect_timeout_ms: int) -> "ConnectParam":
        self.connect_timeout_ms = connect_timeout_ms
        self.validate()
        return self

    def with_rpc_deadline(self, rpc_deadline_ms: int) -> "ConnectParam":
        self.rpc_deadline_ms = rpc_deadline_ms
        self.validate()
        return self

    def with_tls(self, server_name: str = "", cert: str = "", key: str = "", ca_cert: str = "") -> "ConnectParam":
        self.tls = True
        self.server_name = server_name
        self.cert = cert
        self.key = key
        self.ca_cert = ca_cert
        self.validate()
        return self

    def disable_tls(self) -> "ConnectParam":
        self.tls = False
        self.server_name = self.cert = self.key = self.ca_cert = ""
        return self

    def copy(self, **changes) -> "ConnectParam":
        return replace(self, **changes)

    @property
    def authorization(self) -> str:
        if self.username:
            return _encode_authorization(f"{self.username}:{self.password}")
        if self.token:
            return _encode_authorization(self.token)
        return ""

    @property
    def user(self) -> str:
        """User name reported to the server during the handshake."""
        if self.username:
            return self.username
        if self.token and ":" in self.token:
            return self.token.split(":", 1)[0]
        return ""

    def __repr__(self) -> str:
        # credentials stay out of logs and tracebacks
        return f"ConnectParam(uri={self.uri!r}, db_name={self.db_name!r}, tls={self.tls!r})"


@dataclass(frozen=True)
class ConnectionContext:
    """
    Resolved, read-only view of a connection.

    Attributes:
        host / port: resolved endpoint (port defaulted by scheme when unset)
        database: selected database, "" for the server default
        authorization: header value, "" when no credentials were given
        secure: TLS enabled
    """
    host: str
    port: int
    database: str = ""
    authorization: str = field(default="", repr=False)
    secure: bool = False
    server_name: str = ""
    cert: str = ""
    key: str = ""
    ca_cert: str = ""
    user: str = ""
    sdk_version: str = ""
    keepalive_time_ms: int = 10000
    keepalive_timeout_ms: int = 5000
    keepalive_without_calls: bool = True

    @classmethod
    def from_param(cls, param: ConnectParam, *, sdk_version: str = "") -> "ConnectionContext":
        uri: URI = parse_uri(param.uri or DEFAULT_URI)
        if not uri.host:
            raise InvalidArgument(f"Invalid uri: {param.uri!r}", code="BAD_CONFIG")
        return cls(
            host=uri.host,
            port=uri.port or default_port(uri.scheme),
            database=param.db_name or uri.database,
            authorization=param.authorization,
            secure=param.tls or uri.secure,
            server_name=param.server_name,
            cert=param.cert,
            key=param.key,
            ca_cert=param.ca_cert,
            user=param.user,
            sdk_version=sdk_version,
            keepalive_time_ms=param.keepalive_time_ms,
            keepalive_timeout_ms=param.keepalive_timeout_ms,
            keepalive_without_calls=param.keepalive_without_calls,
        )

    @property
    def target(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"

    def headers(self) -> List[Tuple[str, str]]:
        """Metadata attached to every outbound call of this session."""
        pairs: List[Tuple[str, str]] = []
        if self.authorization:
            pairs.append(("authorization", self.authorization))
        if self.database:
            pairs.append(("dbname", self.database))
        pairs.append((CLIENT_SDK_HEADER, f"{SDK_TYPE}/{self.sdk_version or 'unknown'}"))
        return pairs

    def channel_options(self) -> List[Tuple[str, object]]:
        options: List[Tuple[str, object]] = [
            ("grpc.max_send_message_length", _MAX_MESSAGE_LENGTH),
            ("grpc.max_receive_message_length", _MAX_MESSAGE_LENGTH),
            ("grpc.keepalive_time_ms", self.keepalive_time_ms),
            ("grpc.keepalive_timeout_ms", self.keepalive_timeout_ms),
            ("grpc.keepalive_permit_without_calls", 1 if self.keepalive_without_calls else 0),
        ]
        if self.secure and self.server_name:
            options.append(("grpc.ssl_target_name_override", self.server_name))
        return options


__all__ = [
    "ConnectParam",
    "ConnectionContext",
    "DEFAULT_URI",
    "SDK_TYPE",
    "CLIENT_SDK_HEADER",
]
