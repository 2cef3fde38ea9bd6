# vectordb_sdk/client.py
# SPDX-License-Identifier: Apache-2.0
"""
Vector database client: connection and request-dispatch core.

Purpose
-------
Turns a logical client call into a correctly addressed, authenticated,
deadline-bounded RPC, maps the outcome onto the status taxonomy, and drives
long-running server work (load, flush, compaction, index build) to completion.

Every public operation follows the same sequence:

    1. connection check   -> NotConnected, no network I/O
    2. local validation   -> InvalidArgument, no network I/O
    3. request build      (plain dict with the server's field names)
    4. transport call     -> RpcFailed on transport failure
    5. status mapping     -> ServerFailed on a non-OK server status
    6. post-processing    (typed result)
    7. optional wait      (ProgressPoller against a status-check RPC)

Headers never appear here: authorization and database selection are added to
every call by the interceptor on the session's channel.

Usage
-----
    from vectordb_sdk import ConnectParam, VectorClient, ProgressMonitor

    client = VectorClient()
    client.connect(ConnectParam(uri="http://localhost:19530", token="root:Milvus"))

    client.create_collection("docs", schema)
    client.insert("docs", [{"id": 1, "vector": [0.1, 0.2]}])
    client.load_collection("docs", monitor=ProgressMonitor(120))
    hits = client.search("docs", [[0.1, 0.2]], anns_field="vector", limit=5)

Design notes
------------
- Synchronous and blocking; polling sleeps on the calling thread.
- No automatic retry and no response caching.
- `use_database` replaces the session; callers must not race it with in-flight calls.
"""

from __future__ import annotations

import json
import logging
import socket
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from vectordb_sdk._version import __version__
from vectordb_sdk.connection import SDK_TYPE, ConnectionContext, ConnectParam
from vectordb_sdk.core.error_context import attach_context
from vectordb_sdk.core.metrics import MetricsSink, NoopMetrics
from vectordb_sdk.errors import (
    InvalidArgument,
    NotConnected,
    NotSupported,
    RpcFailed,
    ServerFailed,
    StatusCode,
    VectorClientError,
)
from vectordb_sdk.progress import Progress, ProgressMonitor, ProgressPoller
from vectordb_sdk.ranker import BaseRanker, WeightedRanker
from vectordb_sdk.transport import GrpcTransport, RpcTransport, TransportError
from vectordb_sdk.types import (
    AnnSearchRequest,
    CompactionState,
    CompactionStateCode,
    DmlResult,
    HybridTimestamp,
    IdentifierArray,
    LoadState,
    SearchHits,
    columns_to_rows,
    rows_to_columns,
    split_search_results,
)

LOG = logging.getLogger(__name__)

DEFAULT_DATABASE = "default"
DEFAULT_CONSISTENCY_LEVEL = "Bounded"

TransportFactory = Callable[[ConnectionContext], RpcTransport]
Timestamp = Union[int, HybridTimestamp]

# server-side index build states (name or enum value)
_INDEX_FINISHED = ("Finished", 3)
_INDEX_FAILED = ("Failed", 4)


def _kv_pairs(params: Mapping[str, Any]) -> List[Dict[str, str]]:
    """Render a parameter mapping as the server's key/value pair list."""
    pairs = []
    for key, value in params.items():
        text = value if isinstance(value, str) else json.dumps(value)
        pairs.append({"key": str(key), "value": text})
    return pairs


def _id_filter(field_name: str, ids: IdentifierArray) -> str:
    return f"{field_name} in {json.dumps(list(ids))}"


def _status_value(value: Any) -> Union[int, str]:
    """Numeric server status code; enum names other than "Success" come back as-is."""
    if value is None or value == "" or value == "Success":
        return 0
    if isinstance(value, int):
        return int(value)
    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return text


def _check_vectors(data: Sequence[Any]) -> None:
    """Reject empty query vectors and dense vectors of mixed dimension."""
    if not data or any(isinstance(v, (list, tuple)) and not v for v in data):
        raise InvalidArgument("Search vectors cannot be empty", code=StatusCode.VECTOR_IS_EMPTY.name)
    dims = {len(v) for v in data if isinstance(v, (list, tuple))}
    if len(dims) > 1:
        raise InvalidArgument(
            f"Search vectors have different dimensions: {sorted(dims)}",
            code=StatusCode.DIMENSION_NOT_EQUAL.name,
        )


def _stats(response: Mapping[str, Any]) -> Dict[str, str]:
    return {str(kv.get("key")): str(kv.get("value", "")) for kv in response.get("stats") or []}


class VectorClient:
    """
    Synchronous client for the vector database service.

    Args:
        transport_factory: builds the RPC transport for a connection context;
            defaults to `GrpcTransport`
        metrics: optional MetricsSink; every RPC is observed under component
            "vector_client" with the op name and status code
    """

    _component = "vector_client"

    def __init__(
        self,
        *,
        transport_factory: Optional[TransportFactory] = None,
        metrics: Optional[MetricsSink] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport_factory: TransportFactory = transport_factory or GrpcTransport.from_context
        self._metrics: MetricsSink = metrics or NoopMetrics()
        self._clock = clock
        self._sleep = sleep
        self._param: Optional[ConnectParam] = None
        self._context: Optional[ConnectionContext] = None
        self._transport: Optional[RpcTransport] = None

    def __enter__(self) -> "VectorClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.disconnect()

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _require_non_empty(label: str, value: Any) -> None:
        if not isinstance(value, str) or not value.strip():
            raise InvalidArgument(f"{label} cannot be empty")

    def _require_connection(self, op: str) -> RpcTransport:
        if self._transport is None:
            raise NotConnected("Connection is not ready!", details={"op": op})
        return self._transport

    def _timeout(self, timeout_ms: Optional[int]) -> int:
        if timeout_ms is not None:
            return timeout_ms
        return self._param.rpc_deadline_ms if self._param is not None else 0

    def _record(self, op: str, t0: float, ok: bool, *, code: str = "OK", **extra: Any) -> None:
        try:
            self._metrics.observe(
                component=self._component,
                op=op,
                ms=(time.monotonic() - t0) * 1000.0,
                ok=ok,
                code=code,
                extra=extra or None,
            )
        except Exception as exc:  # noqa: BLE001
            # metrics must never break the operation
            LOG.debug("metrics sink failed for %s: %r", op, exc)

    @staticmethod
    def _check_status(op: str, method: str, response: Mapping[str, Any]) -> None:
        status = response.get("status")
        if not isinstance(status, Mapping):
            status = response
        code = _status_value(status.get("code"))
        error_code = _status_value(status.get("error_code"))
        if code == 0 and error_code == 0:
            return
        failing = code or error_code
        reason = status.get("reason") or f"{method} failed"
        LOG.warning("%s: server returned code=%s: %s", op, failing, reason)
        details: Dict[str, Any] = {"op": op, "method": method}
        if isinstance(failing, str):
            details["error_code"] = failing
        raise ServerFailed(
            reason,
            server_code=failing if isinstance(failing, int) else None,
            details=details,
        )

    def _rpc(
        self,
        op: str,
        method: str,
        request: Mapping[str, Any],
        *,
        timeout_ms: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Invoke one RPC and map its outcome onto the status taxonomy."""
        transport = self._require_connection(op)
        t0 = time.monotonic()
        try:
            try:
                response = transport.call(method, request, timeout_ms=self._timeout(timeout_ms))
            except TransportError as exc:
                raise RpcFailed(
                    exc.message,
                    rpc_code=exc.code,
                    details={"op": op, "method": method},
                ) from exc
            except VectorClientError:
                raise
            except Exception as exc:
                raise RpcFailed(f"{method} failed: {exc}", details={"op": op, "method": method}) from exc

            if not isinstance(response, Mapping):
                response = {}
            self._check_status(op, method, response)
        except VectorClientError as exc:
            self._record(op, t0, False, code=exc.code)
            attach_context(exc, self._component, operation=op, method=method)
            raise

        LOG.debug("%s: %s ok", op, method)
        self._record(op, t0, True)
        return dict(response)

    def _wait(self, op: str, monitor: Optional[ProgressMonitor], check: Callable[[], Progress]) -> Progress:
        poller = ProgressPoller(monitor or ProgressMonitor(), op=op, clock=self._clock, sleep=self._sleep)
        try:
            return poller.run(check)
        except VectorClientError as exc:
            attach_context(exc, self._component, operation=op, poll_state=poller.state.value, checks=poller.checks)
            raise
        finally:
            self._count("poll_checks", poller.checks, op=op, state=poller.state.value)

    def _count(self, name: str, value: int, **extra: Any) -> None:
        try:
            self._metrics.counter(component=self._component, name=name, value=value, extra=extra or None)
        except Exception as exc:  # noqa: BLE001
            LOG.debug("metrics sink failed for %s: %r", name, exc)

    @staticmethod
    def _consistency(
        request: Dict[str, Any],
        consistency_level: str,
        guarantee_timestamp: Optional[Timestamp],
    ) -> Dict[str, Any]:
        request["consistency_level"] = consistency_level or DEFAULT_CONSISTENCY_LEVEL
        if guarantee_timestamp is not None:
            request["guarantee_timestamp"] = int(guarantee_timestamp)
        return request

    # ------------------------------------------------------------------ #
    # Connection
    # ------------------------------------------------------------------ #

    def connect(self, param: Optional[ConnectParam] = None) -> None:
        """
        Open a session.

        Waits for the channel to become ready within `connect_timeout_ms`, then
        announces the client to the server. Any failure leaves the client
        disconnected.
        """
        param = param or ConnectParam()
        context = ConnectionContext.from_param(param, sdk_version=__version__)
        if self._transport is not None:
            self.disconnect()

        transport = self._transport_factory(context)
        try:
            if not transport.wait_ready(param.connect_timeout_ms):
                raise NotConnected(f"Failed to create grpc channel to the uri: {context.target}")
            self._handshake(transport, context, param.connect_timeout_ms)
        except VectorClientError as exc:
            transport.close()
            attach_context(exc, self._component, operation="connect", target=context.target)
            raise

        self._param = param
        self._context = context
        self._transport = transport
        LOG.info("connected to %s (database=%s)", context.target, context.database or DEFAULT_DATABASE)

    def _handshake(self, transport: RpcTransport, context: ConnectionContext, timeout_ms: int) -> None:
        request = {
            "client_info": {
                "sdk_type": SDK_TYPE,
                "sdk_version": context.sdk_version,
                "local_time": time.strftime("%Y-%m-%d %H:%M:%S"),
                "user": context.user,
                "host": socket.gethostname(),
            }
        }
        try:
            response = transport.call("Connect", request, timeout_ms=timeout_ms)
        except TransportError as exc:
            raise NotConnected(
                f"Failed to connect to {context.target}: {exc.message}",
                rpc_code=exc.code,
            ) from exc
        self._check_status("connect", "Connect", response if isinstance(response, Mapping) else {})

    def disconnect(self) -> None:
        transport, self._transport = self._transport, None
        if transport is None:
            return
        transport.close()
        LOG.info("disconnected from %s", self._context.target if self._context else "?")
        self._context = None

    def is_connected(self) -> bool:
        return self._transport is not None

    def current_database(self) -> str:
        if self._context is None:
            return ""
        return self._context.database or DEFAULT_DATABASE

    def use_database(self, db_name: str) -> None:
        """Reconnect the session against another database."""
        self._require_connection("use_database")
        self._require_non_empty("Database name", db_name)
        param = self._param.copy(db_name=db_name)
        self.disconnect()
        self.connect(param)

    def get_server_version(self, *, timeout_ms: Optional[int] = None) -> str:
        self._require_connection("get_server_version")
        response = self._rpc("get_server_version", "GetVersion", {}, timeout_ms=timeout_ms)
        return str(response.get("version", ""))

    # ------------------------------------------------------------------ #
    # Databases
    # ------------------------------------------------------------------ #

    def create_database(self, db_name: str, *, timeout_ms: Optional[int] = None) -> None:
        self._require_connection("create_database")
        self._require_non_empty("Database name", db_name)
        self._rpc("create_database", "CreateDatabase", {"db_name": db_name}, timeout_ms=timeout_ms)

    def drop_database(self, db_name: str, *, timeout_ms: Optional[int] = None) -> None:
        self._require_connection("drop_database")
        self._require_non_empty("Database name", db_name)
        self._rpc("drop_database", "DropDatabase", {"db_name": db_name}, timeout_ms=timeout_ms)

    def list_databases(self, *, timeout_ms: Optional[int] = None) -> List[str]:
        self._require_connection("list_databases")
        response = self._rpc("list_databases", "ListDatabases", {}, timeout_ms=timeout_ms)
        return list(response.get("db_names", []))

    # ------------------------------------------------------------------ #
    # Collections
    # ------------------------------------------------------------------ #

    def create_collection(
        self,
        collection_name: str,
        schema: Mapping[str, Any],
        *,
        num_shards: int = 1,
        consistency_level: str = DEFAULT_CONSISTENCY_LEVEL,
        timeout_ms: Optional[int] = None,
    ) -> None:
        self._require_connection("create_collection")
        self._require_non_empty("Collection name", collection_name)
        if not isinstance(schema, Mapping) or not schema.get("fields"):
            raise InvalidArgument("Collection schema cannot be empty")
        if num_shards < 1:
            raise InvalidArgument("Number of shards must be positive")
        request = {
            "collection_name": collection_name,
            "schema": dict(schema, name=schema.get("name") or collection_name),
            "shards_num": num_shards,
            "consistency_level": consistency_level,
        }
        self._rpc("create_collection", "CreateCollection", request, timeout_ms=timeout_ms)

    def drop_collection(self, collection_name: str, *, timeout_ms: Optional[int] = None) -> None:
        self._require_connection("drop_collection")
        self._require_non_empty("Collection name", collection_name)
        self._rpc("drop_collection", "DropCollection", {"collection_name": collection_name}, timeout_ms=timeout_ms)

    def has_collection(self, collection_name: str, *, timeout_ms: Optional[int] = None) -> bool:
        self._require_connection("has_collection")
        self._require_non_empty("Collection name", collection_name)
        response = self._rpc("has_collection", "HasCollection", {"collection_name": collection_name}, timeout_ms=timeout_ms)
        return bool(response.get("value", False))

    def describe_collection(self, collection_name: str, *, timeout_ms: Optional[int] = None) -> Dict[str, Any]:
        self._require_connection("describe_collection")
        self._require_non_empty("Collection name", collection_name)
        response = self._rpc(
            "describe_collection", "DescribeCollection", {"collection_name": collection_name}, timeout_ms=timeout_ms
        )
        response.pop("status", None)
        return response

    def list_collections(self, *, timeout_ms: Optional[int] = None) -> List[str]:
        self._require_connection("list_collections")
        response = self._rpc("list_collections", "ShowCollections", {}, timeout_ms=timeout_ms)
        return list(response.get("collection_names", []))

    def rename_collection(self, old_name: str, new_name: str, *, timeout_ms: Optional[int] = None) -> None:
        self._require_connection("rename_collection")
        self._require_non_empty("Collection name", old_name)
        self._require_non_empty("New collection name", new_name)
        self._rpc("rename_collection", "RenameCollection", {"oldName": old_name, "newName": new_name}, timeout_ms=timeout_ms)

    def load_collection(
        self,
        collection_name: str,
        *,
        replica_number: int = 1,
        refresh: bool = False,
        load_fields: Optional[Sequence[str]] = None,
        monitor: Optional[ProgressMonitor] = None,
        timeout_ms: Optional[int] = None,
    ) -> Progress:
        """
        Load a collection into memory and wait until loading completes.

        `monitor` bounds the wait (default: 60s, checked every 500ms); pass
        `ProgressMonitor.no_wait()` to return right after one progress check.
        """
        self._require_connection("load_collection")
        self._require_non_empty("Collection name", collection_name)
        if replica_number < 1:
            raise InvalidArgument("Replica number must be positive")
        request = {
            "collection_name": collection_name,
            "replica_number": replica_number,
            "refresh": refresh,
            "load_fields": list(load_fields or []),
        }
        self._rpc("load_collection", "LoadCollection", request, timeout_ms=timeout_ms)

        def check() -> Progress:
            percent = self.get_loading_progress(collection_name, refresh=refresh, timeout_ms=timeout_ms)
            return Progress(finished=min(percent, 100), total=100)

        return self._wait("load_collection", monitor, check)

    def release_collection(self, collection_name: str, *, timeout_ms: Optional[int] = None) -> None:
        self._require_connection("release_collection")
        self._require_non_empty("Collection name", collection_name)
        self._rpc(
            "release_collection", "ReleaseCollection", {"collection_name": collection_name}, timeout_ms=timeout_ms
        )

    def get_load_state(
        self,
        collection_name: str,
        partition_names: Optional[Sequence[str]] = None,
        *,
        timeout_ms: Optional[int] = None,
    ) -> LoadState:
        self._require_connection("get_load_state")
        self._require_non_empty("Collection name", collection_name)
        request = {
            "collection_name": collection_name,
            "partition_names": [p for p in (partition_names or []) if p],
        }
        response = self._rpc("get_load_state", "GetLoadState", request, timeout_ms=timeout_ms)
        try:
            return LoadState(int(response.get("state", 0) or 0))
        except ValueError:
            return LoadState.NOT_EXIST

    def get_loading_progress(
        self,
        collection_name: str,
        partition_names: Optional[Sequence[str]] = None,
        *,
        refresh: bool = False,
        timeout_ms: Optional[int] = None,
    ) -> int:
        """Loading progress in percent (refresh progress when `refresh` is set)."""
        self._require_connection("get_loading_progress")
        self._require_non_empty("Collection name", collection_name)
        request = {"collection_name": collection_name, "partition_names": list(partition_names or [])}
        response = self._rpc("get_loading_progress", "GetLoadingProgress", request, timeout_ms=timeout_ms)
        key = "refresh_progress" if refresh else "progress"
        return int(response.get(key, 0) or 0)

    def get_collection_stats(self, collection_name: str, *, timeout_ms: Optional[int] = None) -> Dict[str, str]:
        """Server-side statistics, e.g. {"row_count": "1000"}."""
        self._require_connection("get_collection_stats")
        self._require_non_empty("Collection name", collection_name)
        response = self._rpc(
            "get_collection_stats",
            "GetCollectionStatistics",
            {"collection_name": collection_name},
            timeout_ms=timeout_ms,
        )
        return _stats(response)

    # ------------------------------------------------------------------ #
    # Partitions
    # ------------------------------------------------------------------ #

    def create_partition(self, collection_name: str, partition_name: str, *, timeout_ms: Optional[int] = None) -> None:
        self._require_connection("create_partition")
        self._require_non_empty("Collection name", collection_name)
        self._require_non_empty("Partition name", partition_name)
        request = {"collection_name": collection_name, "partition_name": partition_name}
        self._rpc("create_partition", "CreatePartition", request, timeout_ms=timeout_ms)

    def drop_partition(self, collection_name: str, partition_name: str, *, timeout_ms: Optional[int] = None) -> None:
        self._require_connection("drop_partition")
        self._require_non_empty("Collection name", collection_name)
        self._require_non_empty("Partition name", partition_name)
        request = {"collection_name": collection_name, "partition_name": partition_name}
        self._rpc("drop_partition", "DropPartition", request, timeout_ms=timeout_ms)

    def has_partition(self, collection_name: str, partition_name: str, *, timeout_ms: Optional[int] = None) -> bool:
        self._require_connection("has_partition")
        self._require_non_empty("Collection name", collection_name)
        self._require_non_empty("Partition name", partition_name)
        request = {"collection_name": collection_name, "partition_name": partition_name}
        response = self._rpc("has_partition", "HasPartition", request, timeout_ms=timeout_ms)
        return bool(response.get("value", False))

    def list_partitions(self, collection_name: str, *, timeout_ms: Optional[int] = None) -> List[str]:
        self._require_connection("list_partitions")
        self._require_non_empty("Collection name", collection_name)
        response = self._rpc(
            "list_partitions", "ShowPartitions", {"collection_name": collection_name}, timeout_ms=timeout_ms
        )
        return list(response.get("partition_names", []))

    def load_partitions(
        self,
        collection_name: str,
        partition_names: Sequence[str],
        *,
        replica_number: int = 1,
        refresh: bool = False,
        monitor: Optional[ProgressMonitor] = None,
        timeout_ms: Optional[int] = None,
    ) -> Progress:
        """Load the given partitions and wait on their combined loading progress."""
        self._require_connection("load_partitions")
        self._require_non_empty("Collection name", collection_name)
        names = [p for p in (partition_names or []) if p]
        if not names:
            raise InvalidArgument("Partition names cannot be empty")
        if replica_number < 1:
            raise InvalidArgument("Replica number must be positive")
        request = {
            "collection_name": collection_name,
            "partition_names": names,
            "replica_number": replica_number,
            "refresh": refresh,
        }
        self._rpc("load_partitions", "LoadPartitions", request, timeout_ms=timeout_ms)

        def check() -> Progress:
            percent = self.get_loading_progress(collection_name, names, refresh=refresh, timeout_ms=timeout_ms)
            return Progress(finished=min(percent, 100), total=100)

        return self._wait("load_partitions", monitor, check)

    def release_partitions(
        self,
        collection_name: str,
        partition_names: Sequence[str],
        *,
        timeout_ms: Optional[int] = None,
    ) -> None:
        self._require_connection("release_partitions")
        self._require_non_empty("Collection name", collection_name)
        names = [p for p in (partition_names or []) if p]
        if not names:
            raise InvalidArgument("Partition names cannot be empty")
        request = {"collection_name": collection_name, "partition_names": names}
        self._rpc("release_partitions", "ReleasePartitions", request, timeout_ms=timeout_ms)

    def get_partition_stats(
        self,
        collection_name: str,
        partition_name: str,
        *,
        timeout_ms: Optional[int] = None,
    ) -> Dict[str, str]:
        self._require_connection("get_partition_stats")
        self._require_non_empty("Collection name", collection_name)
        self._require_non_empty("Partition name", partition_name)
        request = {"collection_name": collection_name, "partition_name": partition_name}
        response = self._rpc("get_partition_stats", "GetPartitionStatistics", request, timeout_ms=timeout_ms)
        return _stats(response)

    # ------------------------------------------------------------------ #
    # Aliases
    # ------------------------------------------------------------------ #

    def create_alias(self, collection_name: str, alias: str, *, timeout_ms: Optional[int] = None) -> None:
        self._require_connection("create_alias")
        self._require_non_empty("Collection name", collection_name)
        self._require_non_empty("Alias", alias)
        request = {"collection_name": collection_name, "alias": alias}
        self._rpc("create_alias", "CreateAlias", request, timeout_ms=timeout_ms)

    def drop_alias(self, alias: str, *, timeout_ms: Optional[int] = None) -> None:
        self._require_connection("drop_alias")
        self._require_non_empty("Alias", alias)
        self._rpc("drop_alias", "DropAlias", {"alias": alias}, timeout_ms=timeout_ms)

    def alter_alias(self, collection_name: str, alias: str, *, timeout_ms: Optional[int] = None) -> None:
        """Point an existing alias at another collection."""
        self._require_connection("alter_alias")
        self._require_non_empty("Collection name", collection_name)
        self._require_non_empty("Alias", alias)
        request = {"collection_name": collection_name, "alias": alias}
        self._rpc("alter_alias", "AlterAlias", request, timeout_ms=timeout_ms)

    def list_aliases(self, collection_name: str = "", *, timeout_ms: Optional[int] = None) -> List[str]:
        """Aliases of `collection_name`, or of every collection when it is empty."""
        self._require_connection("list_aliases")
        response = self._rpc(
            "list_aliases", "ListAliases", {"collection_name": collection_name}, timeout_ms=timeout_ms
        )
        return list(response.get("aliases", []))

    # ------------------------------------------------------------------ #
    # Indexes
    # ------------------------------------------------------------------ #

    def create_index(
        self,
        collection_name: str,
        field_name: str,
        index_params: Mapping[str, Any],
        *,
        index_name: str = "",
        monitor: Optional[ProgressMonitor] = None,
        timeout_ms: Optional[int] = None,
    ) -> Progress:
        """Build an index on `field_name` and wait until it is finished."""
        self._require_connection("create_index")
        self._require_non_empty("Collection name", collection_name)
        self._require_non_empty("Field name", field_name)
        request = {
            "collection_name": collection_name,
            "field_name": field_name,
            "index_name": index_name,
            "extra_params": _kv_pairs(index_params or {}),
        }
        self._rpc("create_index", "CreateIndex", request, timeout_ms=timeout_ms)

        def check() -> Progress:
            for desc in self.describe_index(collection_name, field_name=field_name, index_name=index_name, timeout_ms=timeout_ms):
                if index_name and desc.get("index_name") != index_name:
                    continue
                state = desc.get("state")
                indexed = int(desc.get("indexed_rows", 0) or 0)
                total = int(desc.get("total_rows", 0) or 0)
                if state in _INDEX_FAILED:
                    raise ServerFailed(
                        desc.get("index_state_fail_reason") or "index build failed",
                        details={"op": "create_index", "field_name": field_name},
                    )
                if state in _INDEX_FINISHED:
                    return Progress.complete(total)
                return Progress.running(indexed, total)
            return Progress.running(0, 0)

        return self._wait("create_index", monitor, check)

    def describe_index(
        self,
        collection_name: str,
        *,
        field_name: str = "",
        index_name: str = "",
        timeout_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self._require_connection("describe_index")
        self._require_non_empty("Collection name", collection_name)
        request = {"collection_name": collection_name, "field_name": field_name, "index_name": index_name}
        response = self._rpc("describe_index", "DescribeIndex", request, timeout_ms=timeout_ms)
        return [dict(d) for d in response.get("index_descriptions", [])]

    def drop_index(
        self,
        collection_name: str,
        *,
        field_name: str = "",
        index_name: str = "",
        timeout_ms: Optional[int] = None,
    ) -> None:
        self._require_connection("drop_index")
        self._require_non_empty("Collection name", collection_name)
        if not field_name and not index_name:
            raise InvalidArgument("Field name or index name must be given")
        request = {"collection_name": collection_name, "field_name": field_name, "index_name": index_name}
        self._rpc("drop_index", "DropIndex", request, timeout_ms=timeout_ms)

    # ------------------------------------------------------------------ #
    # Data manipulation
    # ------------------------------------------------------------------ #

    def _write_rows(
        self,
        op: str,
        method: str,
        collection_name: str,
        rows: Sequence[Mapping[str, Any]],
        partition_name: str,
        timeout_ms: Optional[int],
    ) -> DmlResult:
        self._require_connection(op)
        self._require_non_empty("Collection name", collection_name)
        if not rows:
            raise InvalidArgument("Rows cannot be empty")
        if not all(isinstance(row, Mapping) for row in rows):
            raise InvalidArgument("Rows must be mappings of field name to value")
        request = {
            "collection_name": collection_name,
            "partition_name": partition_name,
            "fields_data": rows_to_columns(rows),
            "num_rows": len(rows),
        }
        return DmlResult.from_wire(self._rpc(op, method, request, timeout_ms=timeout_ms))

    def insert(
        self,
        collection_name: str,
        rows: Sequence[Mapping[str, Any]],
        *,
        partition_name: str = "",
        timeout_ms: Optional[int] = None,
    ) -> DmlResult:
        return self._write_rows("insert", "Insert", collection_name, rows, partition_name, timeout_ms)

    def upsert(
        self,
        collection_name: str,
        rows: Sequence[Mapping[str, Any]],
        *,
        partition_name: str = "",
        timeout_ms: Optional[int] = None,
    ) -> DmlResult:
        return self._write_rows("upsert", "Upsert", collection_name, rows, partition_name, timeout_ms)

    def _primary_field(self, collection_name: str, timeout_ms: Optional[int]) -> str:
        desc = self.describe_collection(collection_name, timeout_ms=timeout_ms)
        for fld in (desc.get("schema") or {}).get("fields", []):
            if fld.get("is_primary_key"):
                return fld["name"]
        raise ServerFailed(f"Primary key field not found in collection {collection_name}")

    def delete(
        self,
        collection_name: str,
        *,
        filter: str = "",
        ids: Optional[IdentifierArray] = None,
        partition_name: str = "",
        timeout_ms: Optional[int] = None,
    ) -> DmlResult:
        """Delete rows matching `filter`, or rows whose primary key is in `ids`."""
        self._require_connection("delete")
        self._require_non_empty("Collection name", collection_name)
        if ids is not None and filter:
            raise InvalidArgument("Filter expression and ids cannot be both set")
        if ids is not None:
            if not len(ids):
                raise InvalidArgument("Ids cannot be empty")
            filter = _id_filter(self._primary_field(collection_name, timeout_ms), ids)
        self._require_non_empty("Filter expression", filter)
        request = {"collection_name": collection_name, "partition_name": partition_name, "expr": filter}
        return DmlResult.from_wire(self._rpc("delete", "Delete", request, timeout_ms=timeout_ms))

    # ------------------------------------------------------------------ #
    # Query / search
    # ------------------------------------------------------------------ #

    def query(
        self,
        collection_name: str,
        filter: str = "",
        *,
        output_fields: Optional[Sequence[str]] = None,
        partition_names: Optional[Sequence[str]] = None,
        limit: int = 0,
        offset: int = 0,
        consistency_level: str = DEFAULT_CONSISTENCY_LEVEL,
        guarantee_timestamp: Optional[Timestamp] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return rows matching `filter`; an empty filter needs a positive `limit`."""
        self._require_connection("query")
        self._require_non_empty("Collection name", collection_name)
        if not filter and limit <= 0:
            raise InvalidArgument("Filter expression cannot be empty")
        if limit < 0 or offset < 0:
            raise InvalidArgument("Limit and offset must be non-negative")
        query_params: Dict[str, Any] = {}
        if limit:
            query_params["limit"] = str(limit)
        if offset:
            query_params["offset"] = str(offset)
        request = {
            "collection_name": collection_name,
            "expr": filter,
            "output_fields": list(output_fields or []),
            "partition_names": list(partition_names or []),
            "query_params": _kv_pairs(query_params),
        }
        self._consistency(request, consistency_level, guarantee_timestamp)
        response = self._rpc("query", "Query", request, timeout_ms=timeout_ms)
        return columns_to_rows(response.get("fields_data"))

    @staticmethod
    def _search_params(
        anns_field: str,
        limit: int,
        metric_type: str,
        params: Optional[Mapping[str, Any]],
        round_decimal: Optional[int] = None,
    ) -> List[Dict[str, str]]:
        search_params: Dict[str, Any] = {"anns_field": anns_field, "topk": str(limit)}
        if metric_type:
            search_params["metric_type"] = metric_type
        search_params["params"] = json.dumps(dict(params or {}))
        if round_decimal is not None:
            search_params["round_decimal"] = str(round_decimal)
        return _kv_pairs(search_params)

    def search(
        self,
        collection_name: str,
        data: Sequence[Any],
        *,
        anns_field: str = "",
        limit: int = 10,
        filter: str = "",
        params: Optional[Mapping[str, Any]] = None,
        metric_type: str = "",
        output_fields: Optional[Sequence[str]] = None,
        partition_names: Optional[Sequence[str]] = None,
        round_decimal: int = -1,
        consistency_level: str = DEFAULT_CONSISTENCY_LEVEL,
        guarantee_timestamp: Optional[Timestamp] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[SearchHits]:
        """Vector similarity search; returns one hit list per query vector."""
        self._require_connection("search")
        self._require_non_empty("Collection name", collection_name)
        _check_vectors(data)
        if limit <= 0:
            raise InvalidArgument("Limit must be positive")
        request = {
            "collection_name": collection_name,
            "dsl": filter,
            "nq": len(data),
            "placeholder_group": list(data),
            "output_fields": list(output_fields or []),
            "partition_names": list(partition_names or []),
            "search_params": self._search_params(anns_field, limit, metric_type, params, round_decimal),
        }
        self._consistency(request, consistency_level, guarantee_timestamp)
        response = self._rpc("search", "Search", request, timeout_ms=timeout_ms)
        return split_search_results(response.get("results") or {})

    def hybrid_search(
        self,
        collection_name: str,
        requests: Sequence[AnnSearchRequest],
        ranker: BaseRanker,
        *,
        limit: int = 10,
        output_fields: Optional[Sequence[str]] = None,
        partition_names: Optional[Sequence[str]] = None,
        round_decimal: int = -1,
        consistency_level: str = DEFAULT_CONSISTENCY_LEVEL,
        guarantee_timestamp: Optional[Timestamp] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[SearchHits]:
        """Run several sub-searches and fuse their rankings with `ranker`."""
        self._require_connection("hybrid_search")
        self._require_non_empty("Collection name", collection_name)
        if not requests:
            raise InvalidArgument("Sub search requests cannot be empty")
        if not isinstance(ranker, BaseRanker):
            raise NotSupported(f"Unsupported ranker type: {type(ranker).__name__}")
        if isinstance(ranker, WeightedRanker) and len(ranker.weights) != len(requests):
            raise InvalidArgument(
                f"Weights count ({len(ranker.weights)}) does not match sub search count ({len(requests)})"
            )
        if limit <= 0:
            raise InvalidArgument("Limit must be positive")

        sub_requests = []
        for sub in requests:
            self._require_non_empty("Vector field name", sub.anns_field)
            _check_vectors(sub.data)
            sub_requests.append({
                "collection_name": collection_name,
                "dsl": sub.filter,
                "nq": len(sub.data),
                "placeholder_group": list(sub.data),
                "partition_names": list(partition_names or []),
                "search_params": self._search_params(sub.anns_field, sub.limit, sub.metric_type, sub.params),
            })

        rank_params = [{"key": k, "value": v} for k, v in ranker.rank_params()]
        rank_params.append({"key": "limit", "value": str(limit)})
        rank_params.append({"key": "round_decimal", "value": str(round_decimal)})

        request = {
            "collection_name": collection_name,
            "requests": sub_requests,
            "rank_params": rank_params,
            "output_fields": list(output_fields or []),
            "partition_names": list(partition_names or []),
        }
        self._consistency(request, consistency_level, guarantee_timestamp)
        response = self._rpc("hybrid_search", "HybridSearch", request, timeout_ms=timeout_ms)
        return split_search_results(response.get("results") or {})

    # ------------------------------------------------------------------ #
    # Flush / compaction
    # ------------------------------------------------------------------ #

    def flush(
        self,
        collection_names: Union[str, Sequence[str]],
        *,
        monitor: Optional[ProgressMonitor] = None,
        timeout_ms: Optional[int] = None,
    ) -> Dict[str, List[int]]:
        """
        Seal growing segments and wait until they are persisted.

        Returns the flushed segment ids per collection. Progress counts
        collections whose segments are all flushed.
        """
        self._require_connection("flush")
        names = [collection_names] if isinstance(collection_names, str) else list(collection_names)
        if not names:
            raise InvalidArgument("Collection names cannot be empty")
        for name in names:
            self._require_non_empty("Collection name", name)

        response = self._rpc("flush", "Flush", {"collection_names": names}, timeout_ms=timeout_ms)
        segments: Dict[str, List[int]] = {}
        for name, ids in (response.get("coll_segIDs") or {}).items():
            data = ids.get("data", []) if isinstance(ids, Mapping) else ids
            segments[name] = [int(x) for x in data]
        if not segments:
            return segments

        flushed: set = set()

        def check() -> Progress:
            for name, segment_ids in segments.items():
                if name not in flushed and self.get_flush_state(segment_ids, timeout_ms=timeout_ms):
                    flushed.add(name)
            return Progress(finished=len(flushed), total=len(segments))

        self._wait("flush", monitor, check)
        return segments

    def get_flush_state(self, segment_ids: Sequence[int], *, timeout_ms: Optional[int] = None) -> bool:
        self._require_connection("get_flush_state")
        request = {"segmentIDs": [int(x) for x in segment_ids]}
        response = self._rpc("get_flush_state", "GetFlushState", request, timeout_ms=timeout_ms)
        return bool(response.get("flushed", False))

    def compact(
        self,
        collection_name: str,
        *,
        is_clustering: bool = False,
        timeout_ms: Optional[int] = None,
    ) -> int:
        """Trigger a manual compaction; returns its compaction id."""
        self._require_connection("compact")
        self._require_non_empty("Collection name", collection_name)
        desc = self.describe_collection(collection_name, timeout_ms=timeout_ms)
        request = {
            "collectionID": int(desc.get("collectionID", 0) or 0),
            "collection_name": collection_name,
            "majorCompaction": is_clustering,
        }
        response = self._rpc("compact", "ManualCompaction", request, timeout_ms=timeout_ms)
        return int(response.get("compactionID", 0) or 0)

    def get_compaction_state(self, compaction_id: int, *, timeout_ms: Optional[int] = None) -> CompactionState:
        self._require_connection("get_compaction_state")
        response = self._rpc(
            "get_compaction_state", "GetCompactionState", {"compactionID": int(compaction_id)}, timeout_ms=timeout_ms
        )
        return CompactionState.from_wire(response)

    def wait_for_compaction(
        self,
        compaction_id: int,
        *,
        monitor: Optional[ProgressMonitor] = None,
        timeout_ms: Optional[int] = None,
    ) -> CompactionState:
        self._require_connection("wait_for_compaction")
        last: List[CompactionState] = []

        def check() -> Progress:
            state = self.get_compaction_state(compaction_id, timeout_ms=timeout_ms)
            last[:] = [state]
            total = state.completed_plan + state.executing_plan + state.timeout_plan
            if state.state == CompactionStateCode.COMPLETED:
                return Progress.complete(total)
            return Progress.running(state.completed_plan, total)

        self._wait("wait_for_compaction", monitor, check)
        return last[0]


__all__ = [
    "VectorClient",
    "TransportFactory",
    "DEFAULT_DATABASE",
    "DEFAULT_CONSISTENCY_LEVEL",
]
