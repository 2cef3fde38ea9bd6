# vectordb_sdk/uri.py
# SPDX-License-Identifier: Apache-2.0
"""
Connection-string parsing.

Accepted shape: ``[scheme://]host[:port][/database]``. IPv6 literals must be
bracketed (``[::1]:19530``). Parsing never raises; malformed input degrades to a
best-effort result.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PORT = 19530
DEFAULT_SECURE_PORT = 443
SECURE_SCHEME = "https"

_SCHEME_SEP = "://"


@dataclass(frozen=True)
class URI:
    """
    Parsed connection string.

    Attributes:
        scheme: Text before "://", empty when absent
        host: Host name or address (brackets stripped for IPv6)
        port: Port number, 0 when unset
        path: Everything from the first "/" after the authority
        database: Path without its leading "/", empty for "" or "/"
    """
    scheme: str = ""
    host: str = ""
    port: int = 0
    path: str = ""
    database: str = ""

    @property
    def secure(self) -> bool:
        return self.scheme == SECURE_SCHEME


def default_port(scheme: str) -> int:
    return DEFAULT_SECURE_PORT if scheme == SECURE_SCHEME else DEFAULT_PORT


def _port_or_unset(text: str) -> int:
    # "host:" and "host:abc" both leave the port unset
    if not text.isdigit():
        return 0
    port = int(text)
    return port if 0 < port <= 65535 else 0


def parse_uri(text: str) -> URI:
    """Parse a connection string into a `URI`."""
    text = text or ""

    scheme_pos = text.find(_SCHEME_SEP)
    scheme = text[:scheme_pos] if scheme_pos >= 0 else ""
    auth_start = scheme_pos + len(_SCHEME_SEP) if scheme_pos >= 0 else 0

    path_pos = text.find("/", auth_start)
    auth_end = path_pos if path_pos >= 0 else len(text)
    authority = text[auth_start:auth_end]

    host = ""
    port = 0
    if authority:
        if authority.startswith("["):
            close = authority.find("]")
            if close >= 0:
                host = authority[1:close]
                if authority[close + 1:close + 2] == ":":
                    port = _port_or_unset(authority[close + 2:])
            else:
                host = authority
        elif authority.count(":") == 1:
            host, _, port_text = authority.partition(":")
            port = _port_or_unset(port_text)
        else:
            # no port, or an unbracketed IPv6 literal
            host = authority
            port = default_port(scheme)

    path = text[path_pos:] if path_pos >= 0 else ""
    database = "" if path in ("", "/") else path[1:]

    return URI(scheme=scheme, host=host, port=port, path=path, database=database)


__all__ = [
    "URI",
    "parse_uri",
    "default_port",
    "DEFAULT_PORT",
    "DEFAULT_SECURE_PORT",
]
