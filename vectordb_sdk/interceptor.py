# vectordb_sdk/interceptor.py
# SPDX-License-Identifier: Apache-2.0
"""
Header injection for outbound gRPC calls.

A single interceptor on the channel adds the session metadata (authorization,
database, client identification) to every call, so individual call sites never
deal with headers.
"""

from __future__ import annotations

import collections
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import grpc

logger = logging.getLogger(__name__)

Header = Tuple[str, str]


class _ClientCallDetails(
    collections.namedtuple(
        "_ClientCallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


class HeaderAdderInterceptor(grpc.UnaryUnaryClientInterceptor):
    """
    Appends a fixed, ordered set of header pairs to the metadata of each call.

    Existing metadata on the call is kept; the interceptor always proceeds.
    """

    def __init__(self, headers: Iterable[Header]) -> None:
        self._headers: List[Header] = [(str(k).lower(), str(v)) for k, v in headers]

    @property
    def headers(self) -> List[Header]:
        return list(self._headers)

    def _augment(self, client_call_details: grpc.ClientCallDetails) -> _ClientCallDetails:
        metadata = list(client_call_details.metadata or [])
        metadata.extend(self._headers)
        return _ClientCallDetails(
            client_call_details.method,
            client_call_details.timeout,
            metadata,
            client_call_details.credentials,
            getattr(client_call_details, "wait_for_ready", None),
            getattr(client_call_details, "compression", None),
        )

    def intercept_unary_unary(self, continuation, client_call_details, request):
        return continuation(self._augment(client_call_details), request)


def create_channel_with_headers(
    target: str,
    headers: Sequence[Header],
    *,
    credentials: Optional[grpc.ChannelCredentials] = None,
    options: Sequence[Tuple[str, object]] = (),
) -> grpc.Channel:
    """Open a channel to `target` whose every unary call carries `headers`."""
    if credentials is not None:
        channel = grpc.secure_channel(target, credentials, options=list(options))
    else:
        channel = grpc.insecure_channel(target, options=list(options))
    logger.debug("opened channel to %s (headers=%s)", target, [k for k, _ in headers])
    return grpc.intercept_channel(channel, HeaderAdderInterceptor(headers))


__all__ = ["HeaderAdderInterceptor", "create_channel_with_headers"]
