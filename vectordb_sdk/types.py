# vectordb_sdk/types.py
# SPDX-License-Identifier: Apache-2.0
"""
Value types shared by the client dispatch core.

- HybridTimestamp: physical milliseconds + logical counter packed into 64 bits
- IdentifierArray: primary keys, either all int64 or all strings
- LoadState / CompactionState: server-side progress states
- DmlResult / SearchHits / AnnSearchRequest: typed views over wire messages

Wire messages are plain dicts using the server's field names.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Union

# =============================================================================
# Hybrid Timestamp
# =============================================================================

LOGICAL_BITS = 18
LOGICAL_MASK = (1 << LOGICAL_BITS) - 1
_U64_MASK = (1 << 64) - 1


@dataclass(frozen=True)
class HybridTimestamp:
    """
    Combined physical/logical timestamp used for consistency guarantees.

    The high bits hold epoch milliseconds, the low `LOGICAL_BITS` bits hold a
    logical counter. Adding milliseconds never normalizes the logical part, which
    matches the server's own arithmetic.
    """
    value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", int(self.value) & _U64_MASK)

    @classmethod
    def from_parts(cls, physical: int, logical: int = 0) -> "HybridTimestamp":
        return cls((int(physical) << LOGICAL_BITS) + (int(logical) & LOGICAL_MASK))

    @classmethod
    def from_unix_ms(cls, epoch_ms: int) -> "HybridTimestamp":
        return cls.from_parts(epoch_ms, 0)

    @classmethod
    def now(cls) -> "HybridTimestamp":
        return cls.from_unix_ms(int(time.time() * 1000))

    @property
    def physical(self) -> int:
        return self.value >> LOGICAL_BITS

    @property
    def logical(self) -> int:
        return self.value & LOGICAL_MASK

    def __add__(self, milliseconds: int) -> "HybridTimestamp":
        if not isinstance(milliseconds, int):
            return NotImplemented
        return HybridTimestamp(self.value + (milliseconds << LOGICAL_BITS))

    def __int__(self) -> int:
        return self.value


# =============================================================================
# Identifier Array
# =============================================================================

class IdentifierArray:
    """
    Primary keys of one batch: int64 ids or string ids, never both.

    Querying the inactive variant returns an empty list.
    """

    __slots__ = ("_int_ids", "_str_ids")

    def __init__(self, ids: Optional[Iterable[Union[int, str]]] = None) -> None:
        items = list(ids or [])
        self._int_ids: List[int] = []
        self._str_ids: List[str] = []
        if not items:
            return
        if all(isinstance(x, str) for x in items):
            self._str_ids = items
        elif all(isinstance(x, int) and not isinstance(x, bool) for x in items):
            self._int_ids = items
        else:
            raise TypeError("ids must be all integers or all strings")

    @classmethod
    def from_wire(cls, message: Optional[Mapping[str, Any]]) -> "IdentifierArray":
        message = message or {}
        if "str_id" in message:
            return cls([str(x) for x in (message["str_id"] or {}).get("data", [])])
        return cls([int(x) for x in (message.get("int_id") or {}).get("data", [])])

    def to_wire(self) -> Dict[str, Any]:
        if self._str_ids:
            return {"str_id": {"data": list(self._str_ids)}}
        return {"int_id": {"data": list(self._int_ids)}}

    def is_int_id(self) -> bool:
        return not self._str_ids

    def int_id_array(self) -> List[int]:
        return list(self._int_ids)

    def str_id_array(self) -> List[str]:
        return list(self._str_ids)

    def __len__(self) -> int:
        return len(self._str_ids) if self._str_ids else len(self._int_ids)

    def __iter__(self) -> Iterator[Union[int, str]]:
        return iter(self._str_ids if self._str_ids else self._int_ids)

    def __getitem__(self, index: Any) -> Any:
        return (self._str_ids if self._str_ids else self._int_ids)[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IdentifierArray):
            return NotImplemented
        return self._int_ids == other._int_ids and self._str_ids == other._str_ids

    def __repr__(self) -> str:
        return f"IdentifierArray({list(self)!r})"


# =============================================================================
# Server-side states
# =============================================================================

class LoadState(IntEnum):
    NOT_EXIST = 0
    NOT_LOAD = 1
    LOADING = 2
    LOADED = 3

    @property
    def desc(self) -> str:
        return {
            LoadState.NOT_EXIST: "NotExist",
            LoadState.NOT_LOAD: "NotLoad",
            LoadState.LOADING: "Loading",
            LoadState.LOADED: "Loaded",
        }[self]


class CompactionStateCode(IntEnum):
    UNKNOWN = 0
    EXECUTING = 1
    COMPLETED = 2


@dataclass(frozen=True)
class CompactionState:
    state: CompactionStateCode = CompactionStateCode.UNKNOWN
    executing_plan: int = 0
    timeout_plan: int = 0
    completed_plan: int = 0

    @classmethod
    def from_wire(cls, message: Mapping[str, Any]) -> "CompactionState":
        raw = message.get("state")
        # wire values: 1 = Executing, 2 = Completed; anything else stays unknown
        try:
            state = CompactionStateCode(int(raw)) if raw is not None else CompactionStateCode.UNKNOWN
        except ValueError:
            state = CompactionStateCode.UNKNOWN
        return cls(
            state=state,
            executing_plan=int(message.get("executingPlanNo", 0) or 0),
            timeout_plan=int(message.get("timeoutPlanNo", 0) or 0),
            completed_plan=int(message.get("completedPlanNo", 0) or 0),
        )


# =============================================================================
# Results / requests
# =============================================================================

@dataclass(frozen=True)
class DmlResult:
    """
    Outcome of insert/upsert/delete.

    Attributes:
        ids: Primary keys touched by the call
        insert_count / upsert_count / delete_count: Row counts reported by the server
        timestamp: Server timestamp of the write, usable as a guarantee timestamp
    """
    ids: IdentifierArray = field(default_factory=IdentifierArray)
    insert_count: int = 0
    upsert_count: int = 0
    delete_count: int = 0
    timestamp: HybridTimestamp = field(default_factory=HybridTimestamp)

    @classmethod
    def from_wire(cls, message: Mapping[str, Any]) -> "DmlResult":
        return cls(
            ids=IdentifierArray.from_wire(message.get("IDs")),
            insert_count=int(message.get("insert_cnt", 0) or 0),
            upsert_count=int(message.get("upsert_cnt", 0) or 0),
            delete_count=int(message.get("delete_cnt", 0) or 0),
            timestamp=HybridTimestamp(int(message.get("timestamp", 0) or 0)),
        )


@dataclass(frozen=True)
class SearchHits:
    """Hits of a single query vector, ordered as the server returned them."""
    ids: IdentifierArray
    scores: List[float]
    rows: List[Dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ids)


def rows_to_columns(rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Row dicts -> field_data columns; a key missing from a row becomes None."""
    names: List[str] = []
    for row in rows:
        for name in row:
            if name not in names:
                names.append(name)
    return [{"field_name": name, "data": [row.get(name) for row in rows]} for name in names]


def columns_to_rows(columns: Optional[Sequence[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """field_data columns -> row dicts."""
    columns = list(columns or [])
    if not columns:
        return []
    num_rows = max(len(col.get("data") or []) for col in columns)
    rows: List[Dict[str, Any]] = [{} for _ in range(num_rows)]
    for col in columns:
        for i, value in enumerate(col.get("data") or []):
            rows[i][col["field_name"]] = value
    return rows


def split_search_results(results: Mapping[str, Any]) -> List[SearchHits]:
    """
    Split a flat search result message into per-query hit lists.

    The server returns one id array, one score array and one set of field
    columns for all queries, with `topks` giving the number of hits for each
    query in order.
    """
    ids = IdentifierArray.from_wire(results.get("ids"))
    scores = [float(s) for s in results.get("scores", [])]
    rows = columns_to_rows(results.get("fields_data"))
    topks = [int(k) for k in results.get("topks", [])]
    if not topks and len(ids):
        topks = [len(ids)]

    out: List[SearchHits] = []
    offset = 0
    for k in topks:
        out.append(
            SearchHits(
                ids=IdentifierArray(ids[offset:offset + k]),
                scores=scores[offset:offset + k],
                rows=rows[offset:offset + k],
            )
        )
        offset += k
    return out


@dataclass(frozen=True)
class AnnSearchRequest:
    """One sub-search of a hybrid search."""
    anns_field: str
    data: Sequence[Any]
    limit: int = 10
    filter: str = ""
    params: Mapping[str, Any] = field(default_factory=dict)
    metric_type: str = ""


__all__ = [
    "LOGICAL_BITS",
    "LOGICAL_MASK",
    "HybridTimestamp",
    "IdentifierArray",
    "LoadState",
    "CompactionStateCode",
    "CompactionState",
    "DmlResult",
    "SearchHits",
    "split_search_results",
    "rows_to_columns",
    "columns_to_rows",
    "AnnSearchRequest",
]
