# vectordb_sdk/aio.py
# SPDX-License-Identifier: Apache-2.0
"""
Asyncio facade over `VectorClient`.

Each call runs the blocking client method on a worker thread via
`asyncio.to_thread`, so polling waits never block the event loop. The facade adds
no concurrency control: concurrent awaits share one session, and `use_database`
must still not overlap with in-flight calls.

Usage
-----
    async with AsyncVectorClient() as client:
        await client.connect(ConnectParam(uri="http://localhost:19530"))
        await client.load_collection("docs")
        hits = await client.search("docs", [[0.1, 0.2]], anns_field="vector")
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from vectordb_sdk.client import VectorClient
from vectordb_sdk.connection import ConnectParam
from vectordb_sdk.progress import Progress
from vectordb_sdk.types import CompactionState, DmlResult, LoadState, SearchHits


class AsyncVectorClient:
    """Awaitable wrapper; accepts the same arguments as `VectorClient`."""

    def __init__(self, client: Optional[VectorClient] = None, **client_kwargs: Any) -> None:
        self._client = client or VectorClient(**client_kwargs)

    @property
    def sync_client(self) -> VectorClient:
        return self._client

    @staticmethod
    async def _run_in_thread(func, *args, **kwargs):
        """Run blocking client calls on a worker thread."""
        return await asyncio.to_thread(func, *args, **kwargs)

    async def __aenter__(self) -> "AsyncVectorClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()

    # --- connection ---

    async def connect(self, param: Optional[ConnectParam] = None) -> None:
        await self._run_in_thread(self._client.connect, param)

    async def disconnect(self) -> None:
        await self._run_in_thread(self._client.disconnect)

    def is_connected(self) -> bool:
        return self._client.is_connected()

    async def use_database(self, db_name: str) -> None:
        await self._run_in_thread(self._client.use_database, db_name)

    async def get_server_version(self, **kwargs: Any) -> str:
        return await self._run_in_thread(self._client.get_server_version, **kwargs)

    # --- collections ---

    async def create_collection(self, collection_name: str, schema: Dict[str, Any], **kwargs: Any) -> None:
        await self._run_in_thread(self._client.create_collection, collection_name, schema, **kwargs)

    async def drop_collection(self, collection_name: str, **kwargs: Any) -> None:
        await self._run_in_thread(self._client.drop_collection, collection_name, **kwargs)

    async def has_collection(self, collection_name: str, **kwargs: Any) -> bool:
        return await self._run_in_thread(self._client.has_collection, collection_name, **kwargs)

    async def list_collections(self, **kwargs: Any) -> List[str]:
        return await self._run_in_thread(self._client.list_collections, **kwargs)

    async def load_collection(self, collection_name: str, **kwargs: Any) -> Progress:
        return await self._run_in_thread(self._client.load_collection, collection_name, **kwargs)

    async def release_collection(self, collection_name: str, **kwargs: Any) -> None:
        await self._run_in_thread(self._client.release_collection, collection_name, **kwargs)

    async def get_load_state(self, collection_name: str, *args: Any, **kwargs: Any) -> LoadState:
        return await self._run_in_thread(self._client.get_load_state, collection_name, *args, **kwargs)

    async def get_collection_stats(self, collection_name: str, **kwargs: Any) -> Dict[str, str]:
        return await self._run_in_thread(self._client.get_collection_stats, collection_name, **kwargs)

    # --- partitions ---

    async def load_partitions(self, collection_name: str, partition_names: List[str], **kwargs: Any) -> Progress:
        return await self._run_in_thread(self._client.load_partitions, collection_name, partition_names, **kwargs)

    async def release_partitions(self, collection_name: str, partition_names: List[str], **kwargs: Any) -> None:
        await self._run_in_thread(self._client.release_partitions, collection_name, partition_names, **kwargs)

    async def get_partition_stats(self, collection_name: str, partition_name: str, **kwargs: Any) -> Dict[str, str]:
        return await self._run_in_thread(self._client.get_partition_stats, collection_name, partition_name, **kwargs)

    # --- aliases ---

    async def create_alias(self, collection_name: str, alias: str, **kwargs: Any) -> None:
        await self._run_in_thread(self._client.create_alias, collection_name, alias, **kwargs)

    async def drop_alias(self, alias: str, **kwargs: Any) -> None:
        await self._run_in_thread(self._client.drop_alias, alias, **kwargs)

    async def alter_alias(self, collection_name: str, alias: str, **kwargs: Any) -> None:
        await self._run_in_thread(self._client.alter_alias, collection_name, alias, **kwargs)

    async def list_aliases(self, collection_name: str = "", **kwargs: Any) -> List[str]:
        return await self._run_in_thread(self._client.list_aliases, collection_name, **kwargs)

    # --- indexes ---

    async def create_index(self, collection_name: str, field_name: str, index_params: Dict[str, Any], **kwargs: Any) -> Progress:
        return await self._run_in_thread(self._client.create_index, collection_name, field_name, index_params, **kwargs)

    # --- data ---

    async def insert(self, collection_name: str, rows: List[Dict[str, Any]], **kwargs: Any) -> DmlResult:
        return await self._run_in_thread(self._client.insert, collection_name, rows, **kwargs)

    async def upsert(self, collection_name: str, rows: List[Dict[str, Any]], **kwargs: Any) -> DmlResult:
        return await self._run_in_thread(self._client.upsert, collection_name, rows, **kwargs)

    async def delete(self, collection_name: str, **kwargs: Any) -> DmlResult:
        return await self._run_in_thread(self._client.delete, collection_name, **kwargs)

    async def query(self, collection_name: str, filter: str = "", **kwargs: Any) -> List[Dict[str, Any]]:
        return await self._run_in_thread(self._client.query, collection_name, filter, **kwargs)

    async def search(self, collection_name: str, data: List[Any], **kwargs: Any) -> List[SearchHits]:
        return await self._run_in_thread(self._client.search, collection_name, data, **kwargs)

    async def hybrid_search(self, collection_name: str, requests: List[Any], ranker: Any, **kwargs: Any) -> List[SearchHits]:
        return await self._run_in_thread(self._client.hybrid_search, collection_name, requests, ranker, **kwargs)

    # --- maintenance ---

    async def flush(self, collection_names: Any, **kwargs: Any) -> Dict[str, List[int]]:
        return await self._run_in_thread(self._client.flush, collection_names, **kwargs)

    async def compact(self, collection_name: str, **kwargs: Any) -> int:
        return await self._run_in_thread(self._client.compact, collection_name, **kwargs)

    async def wait_for_compaction(self, compaction_id: int, **kwargs: Any) -> CompactionState:
        return await self._run_in_thread(self._client.wait_for_compaction, compaction_id, **kwargs)


__all__ = ["AsyncVectorClient"]
