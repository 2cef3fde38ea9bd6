# SPDX-License-Identifier: Apache-2.0
"""
Client Conformance: Hybrid timestamps, identifier arrays and result views.
"""

import pytest

from vectordb_sdk.types import (
    LOGICAL_BITS,
    LOGICAL_MASK,
    CompactionState,
    CompactionStateCode,
    DmlResult,
    HybridTimestamp,
    IdentifierArray,
    LoadState,
    columns_to_rows,
    rows_to_columns,
    split_search_results,
)


# --------------------------------------------------------------------------- #
# HybridTimestamp
# --------------------------------------------------------------------------- #

def test_timestamp_parts_split_at_logical_bits():
    ts = HybridTimestamp.from_parts(1_700_000_000_000, 5)
    assert ts.physical == 1_700_000_000_000
    assert ts.logical == 5
    assert int(ts) == (1_700_000_000_000 << LOGICAL_BITS) + 5


def test_timestamp_from_unix_ms_has_zero_logical():
    ts = HybridTimestamp.from_unix_ms(42)
    assert ts.physical == 42
    assert ts.logical == 0


@pytest.mark.parametrize("ms", [0, 1, 1000, 86_400_000])
def test_timestamp_add_milliseconds_moves_physical_only(ms):
    base = HybridTimestamp.from_unix_ms(1_700_000_000_000)
    later = base + ms
    assert later.physical == base.physical + ms
    assert later.logical == 0


def test_timestamp_logical_never_exceeds_mask():
    ts = HybridTimestamp.from_parts(1, LOGICAL_MASK + 7)
    assert ts.logical <= LOGICAL_MASK


def test_timestamp_value_is_unsigned_64_bit():
    ts = HybridTimestamp((1 << 64) + 3)
    assert int(ts) == 3


def test_timestamp_rejects_non_integer_addition():
    with pytest.raises(TypeError):
        HybridTimestamp(1) + 1.5


def test_timestamp_now_is_recent():
    ts = HybridTimestamp.now()
    assert ts.logical == 0
    assert ts.physical > 1_600_000_000_000


# --------------------------------------------------------------------------- #
# IdentifierArray
# --------------------------------------------------------------------------- #

def test_identifier_array_int_ids():
    ids = IdentifierArray([1, 2, 3])
    assert ids.is_int_id() is True
    assert ids.int_id_array() == [1, 2, 3]
    assert ids.str_id_array() == []
    assert len(ids) == 3


def test_identifier_array_str_ids():
    ids = IdentifierArray(["a", "b", "c"])
    assert ids.is_int_id() is False
    assert ids.str_id_array() == ["a", "b", "c"]
    assert ids.int_id_array() == []
    assert len(ids) == 3


def test_identifier_array_rejects_mixed_ids():
    with pytest.raises(TypeError):
        IdentifierArray([1, "a"])


def test_identifier_array_rejects_bools():
    with pytest.raises(TypeError):
        IdentifierArray([True, False])


def test_identifier_array_empty_defaults_to_int():
    ids = IdentifierArray()
    assert ids.is_int_id() is True
    assert len(ids) == 0
    assert ids.to_wire() == {"int_id": {"data": []}}


def test_identifier_array_wire_shape():
    assert IdentifierArray([7, 8]).to_wire() == {"int_id": {"data": [7, 8]}}
    assert IdentifierArray(["x"]).to_wire() == {"str_id": {"data": ["x"]}}
    assert IdentifierArray.from_wire({"str_id": {"data": ["p", "q"]}}).str_id_array() == ["p", "q"]
    assert IdentifierArray.from_wire(None) == IdentifierArray()


def test_identifier_array_sequence_behaviour():
    ids = IdentifierArray([4, 5, 6])
    assert list(ids) == [4, 5, 6]
    assert ids[1] == 5
    assert ids[1:] == [5, 6]
    assert ids == IdentifierArray([4, 5, 6])
    assert ids != IdentifierArray(["4", "5", "6"])


# --------------------------------------------------------------------------- #
# Server states and result views
# --------------------------------------------------------------------------- #

def test_load_state_descriptions():
    assert LoadState.LOADED.desc == "Loaded"
    assert LoadState.NOT_LOAD.desc == "NotLoad"
    assert LoadState(2) is LoadState.LOADING


def test_compaction_state_from_wire():
    state = CompactionState.from_wire(
        {"state": 2, "executingPlanNo": 0, "timeoutPlanNo": 1, "completedPlanNo": 4}
    )
    assert state.state is CompactionStateCode.COMPLETED
    assert state.timeout_plan == 1
    assert state.completed_plan == 4


def test_compaction_state_unknown_values_degrade():
    assert CompactionState.from_wire({"state": 99}).state is CompactionStateCode.UNKNOWN
    assert CompactionState.from_wire({}).state is CompactionStateCode.UNKNOWN


def test_dml_result_from_wire():
    result = DmlResult.from_wire(
        {"IDs": {"str_id": {"data": ["a"]}}, "insert_cnt": 1, "timestamp": 1 << LOGICAL_BITS}
    )
    assert result.ids.str_id_array() == ["a"]
    assert result.insert_count == 1
    assert result.delete_count == 0
    assert result.timestamp.physical == 1


def test_rows_and_columns_conversion():
    rows = [{"id": 1, "tag": "x"}, {"id": 2}]
    columns = rows_to_columns(rows)
    assert columns == [
        {"field_name": "id", "data": [1, 2]},
        {"field_name": "tag", "data": ["x", None]},
    ]
    assert columns_to_rows(columns) == [{"id": 1, "tag": "x"}, {"id": 2, "tag": None}]
    assert columns_to_rows(None) == []


def test_split_search_results_by_topks():
    hits = split_search_results(
        {
            "ids": {"int_id": {"data": [10, 11, 20]}},
            "scores": [0.9, 0.8, 0.7],
            "topks": [2, 1],
            "fields_data": [{"field_name": "title", "data": ["a", "b", "c"]}],
        }
    )
    assert len(hits) == 2
    assert hits[0].ids.int_id_array() == [10, 11]
    assert hits[0].scores == [0.9, 0.8]
    assert hits[1].rows == [{"title": "c"}]
    assert len(hits[1]) == 1


def test_split_search_results_without_topks_is_single_query():
    hits = split_search_results({"ids": {"str_id": {"data": ["a", "b"]}}, "scores": [1, 2]})
    assert len(hits) == 1
    assert hits[0].ids.str_id_array() == ["a", "b"]
    assert split_search_results({}) == []
