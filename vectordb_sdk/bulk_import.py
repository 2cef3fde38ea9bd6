# vectordb_sdk/bulk_import.py
# SPDX-License-Identifier: Apache-2.0
"""
Bulk import jobs over the service's REST endpoint.

Endpoints (POST, JSON body):

    <url>/v2/vectordb/jobs/import/create         {"dbName", "collectionName", "files", ...}
    <url>/v2/vectordb/jobs/import/list           {"collectionName", "dbName"}
    <url>/v2/vectordb/jobs/import/get_progress   {"dbName", "jobID"}

Each call returns the parsed JSON body on HTTP 200 and None otherwise (non-200
status or transport failure). No structured error is surfaced from the three
raw calls; `wait_for_import_job` is the one place that raises, because it must
tell "failed" from "still running".

Usage
-----
    importer = BulkImportClient("http://localhost:19530", api_key="...")
    created = importer.create_import_job("docs", ["s3://bucket/part-0.parquet"])
    job_id = created["data"]["jobId"]
    importer.wait_for_import_job(job_id, monitor=ProgressMonitor(600))
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import httpx

from vectordb_sdk.errors import InvalidArgument, RpcFailed, ServerFailed
from vectordb_sdk.progress import Progress, ProgressMonitor, ProgressPoller

logger = logging.getLogger(__name__)

IMPORT_CREATE_PATH = "/v2/vectordb/jobs/import/create"
IMPORT_LIST_PATH = "/v2/vectordb/jobs/import/list"
IMPORT_PROGRESS_PATH = "/v2/vectordb/jobs/import/get_progress"

DEFAULT_DB_NAME = "default"
DEFAULT_TIMEOUT_S = 30.0

JOB_COMPLETED = "Completed"
JOB_FAILED = "Failed"


class BulkImportClient:
    """
    Client for bulk import jobs.

    Args:
        url: service base URL; falls back to VECTORDB_IMPORT_URL
        api_key: bearer key; falls back to VECTORDB_API_KEY, omitted when empty
        db_name: target database
        timeout: per-request timeout in seconds
        http_client: optional shared httpx.Client (caller owns its lifecycle)
        transport: optional httpx transport for per-call clients
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        db_name: str = DEFAULT_DB_NAME,
        timeout: float = DEFAULT_TIMEOUT_S,
        http_client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        url = url or os.getenv("VECTORDB_IMPORT_URL") or ""
        if not url:
            raise InvalidArgument("url must be a non-empty string", code="BAD_CONFIG")
        if timeout <= 0:
            raise InvalidArgument("timeout must be positive", code="BAD_CONFIG")

        self._url = url.rstrip("/")
        self._api_key = api_key if api_key is not None else os.getenv("VECTORDB_API_KEY", "")
        self._db_name = db_name or DEFAULT_DB_NAME
        self._timeout = timeout
        self._http = http_client
        self._transport = transport
        self._poll_kwargs: Dict[str, Any] = {}
        if clock is not None:
            self._poll_kwargs["clock"] = clock
        if sleep is not None:
            self._poll_kwargs["sleep"] = sleep

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _post(self, path: str, payload: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        url = self._url + path
        try:
            if self._http is not None:
                response = self._http.post(url, json=payload, headers=self._headers())
            else:
                with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                    response = client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("bulk import request to %s failed: %s", path, exc)
            return None

        if response.status_code != 200:
            logger.warning("bulk import request to %s returned HTTP %s", path, response.status_code)
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("bulk import response from %s is not JSON", path)
            return None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def create_import_job(
        self,
        collection_name: str,
        files: Sequence[str],
        *,
        partition_name: str = "",
        options: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Start an import job reading `files` into `collection_name`.

        `files` is sent as a single file group. `options` is only forwarded when
        it carries a non-null "timeout".
        """
        payload: Dict[str, Any] = {
            "dbName": self._db_name,
            "collectionName": collection_name,
            "files": [list(files)],
        }
        if partition_name:
            payload["partitionName"] = partition_name
        if options and options.get("timeout") is not None:
            payload["options"] = dict(options)
        return self._post(IMPORT_CREATE_PATH, payload)

    def list_import_jobs(self, collection_name: str) -> Optional[Dict[str, Any]]:
        return self._post(IMPORT_LIST_PATH, {"collectionName": collection_name, "dbName": self._db_name})

    def get_import_job_progress(self, job_id: str) -> Optional[Dict[str, Any]]:
        return self._post(IMPORT_PROGRESS_PATH, {"dbName": self._db_name, "jobID": job_id})

    def wait_for_import_job(self, job_id: str, *, monitor: Optional[ProgressMonitor] = None) -> Dict[str, Any]:
        """
        Poll an import job until it completes; returns the last job data.

        Raises ServerFailed when the job fails, RpcFailed when progress cannot be
        fetched, OperationTimeout when the monitor's budget runs out.
        """
        last: List[Dict[str, Any]] = [{}]

        def check() -> Progress:
            body = self.get_import_job_progress(job_id)
            if body is None:
                raise RpcFailed(f"Failed to get progress of import job {job_id}", details={"job_id": job_id})
            code = int(body.get("code", 0) or 0)
            if code != 0:
                raise ServerFailed(body.get("message") or "import progress request failed", server_code=code)
            data = dict(body.get("data") or {})
            last[0] = data
            state = data.get("state")
            if state == JOB_FAILED:
                raise ServerFailed(data.get("reason") or f"Import job {job_id} failed", details={"job_id": job_id})
            if state == JOB_COMPLETED:
                return Progress.complete(100)
            return Progress.running(int(data.get("progress", 0) or 0), 100)

        ProgressPoller(monitor or ProgressMonitor(), op="wait_for_import_job", **self._poll_kwargs).run(check)
        return last[0]


def create_import_job(
    url: str,
    collection_name: str,
    files: Sequence[str],
    *,
    db_name: str = DEFAULT_DB_NAME,
    api_key: str = "",
    partition_name: str = "",
    options: Optional[Mapping[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    return BulkImportClient(url, api_key=api_key, db_name=db_name).create_import_job(
        collection_name, files, partition_name=partition_name, options=options
    )


def list_import_jobs(
    url: str,
    collection_name: str,
    *,
    db_name: str = DEFAULT_DB_NAME,
    api_key: str = "",
) -> Optional[Dict[str, Any]]:
    return BulkImportClient(url, api_key=api_key, db_name=db_name).list_import_jobs(collection_name)


def get_import_job_progress(
    url: str,
    job_id: str,
    *,
    db_name: str = DEFAULT_DB_NAME,
    api_key: str = "",
) -> Optional[Dict[str, Any]]:
    return BulkImportClient(url, api_key=api_key, db_name=db_name).get_import_job_progress(job_id)


__all__ = [
    "BulkImportClient",
    "create_import_job",
    "list_import_jobs",
    "get_import_job_progress",
    "IMPORT_CREATE_PATH",
    "IMPORT_LIST_PATH",
    "IMPORT_PROGRESS_PATH",
]
