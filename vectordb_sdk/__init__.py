# vectordb_sdk/__init__.py
# SPDX-License-Identifier: Apache-2.0

"""
Vector database client SDK - Public API

All public types, the synchronous client, the asyncio facade and the bulk
import client are re-exported here for clean imports.
"""

from vectordb_sdk._version import __version__

from vectordb_sdk.errors import (
    # Status taxonomy
    StatusCode,
    Status,

    # Error types
    VectorClientError,
    NotConnected,
    InvalidArgument,
    RpcFailed,
    ServerFailed,
    OperationTimeout,
    NotSupported,
)

from vectordb_sdk.uri import URI, parse_uri

from vectordb_sdk.types import (
    # Value types
    LOGICAL_BITS,
    HybridTimestamp,
    IdentifierArray,
    LoadState,
    CompactionState,
    CompactionStateCode,

    # Results / requests
    DmlResult,
    SearchHits,
    AnnSearchRequest,
)

from vectordb_sdk.ranker import BaseRanker, RRFRanker, WeightedRanker

from vectordb_sdk.progress import (
    Progress,
    ProgressMonitor,
    ProgressPoller,
    PollState,
)

from vectordb_sdk.connection import ConnectParam, ConnectionContext
from vectordb_sdk.interceptor import HeaderAdderInterceptor, create_channel_with_headers
from vectordb_sdk.transport import GrpcTransport, RpcTransport, TransportError

from vectordb_sdk.core.metrics import MetricsSink, NoopMetrics

from vectordb_sdk.client import VectorClient
from vectordb_sdk.aio import AsyncVectorClient
from vectordb_sdk.bulk_import import BulkImportClient

__all__ = [
    "__version__",

    # Status taxonomy
    "StatusCode",
    "Status",
    "VectorClientError",
    "NotConnected",
    "InvalidArgument",
    "RpcFailed",
    "ServerFailed",
    "OperationTimeout",
    "NotSupported",

    # Addressing
    "URI",
    "parse_uri",

    # Value types
    "LOGICAL_BITS",
    "HybridTimestamp",
    "IdentifierArray",
    "LoadState",
    "CompactionState",
    "CompactionStateCode",
    "DmlResult",
    "SearchHits",
    "AnnSearchRequest",

    # Ranking
    "BaseRanker",
    "RRFRanker",
    "WeightedRanker",

    # Progress
    "Progress",
    "ProgressMonitor",
    "ProgressPoller",
    "PollState",

    # Connection / transport
    "ConnectParam",
    "ConnectionContext",
    "HeaderAdderInterceptor",
    "create_channel_with_headers",
    "GrpcTransport",
    "RpcTransport",
    "TransportError",

    # Metrics
    "MetricsSink",
    "NoopMetrics",

    # Clients
    "VectorClient",
    "AsyncVectorClient",
    "BulkImportClient",
]
