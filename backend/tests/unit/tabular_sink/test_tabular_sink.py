from __future__ import annotations

import asyncio

import pytest

from export_shared.exceptions import (
    BackendTimeout,
    BackendUnavailable,
    PartialProvision,
    SchemaMismatch,
)
from export_shared.models.workbook import AppendResult
from tabular_sink.layout import SheetLayout
from tabular_sink.schema_registry import SURVEY_FEEDBACK_SCHEMA, USER_DATA_SCHEMA
from tabular_sink.sink import TabularSink

WORKBOOK_ID = "wb-test"


def _sink(workbook) -> TabularSink:
    return TabularSink(workbook, WORKBOOK_ID, layout=SheetLayout(body_prefill_rows=20))


def _wrap_strategies(requests, row_start):
    strategies = {}
    for request in requests:
        repeat = request.get("repeatCell")
        if repeat and repeat["range"]["startRowIndex"] == row_start:
            fmt = repeat["cell"]["userEnteredFormat"]
            for col in range(repeat["range"]["startColumnIndex"], repeat["range"]["endColumnIndex"]):
                strategies[col] = fmt["wrapStrategy"]
    return strategies


def test_workbook_id_is_required(workbook):
    with pytest.raises(ValueError):
        TabularSink(workbook, "")


@pytest.mark.asyncio
async def test_first_submission_creates_styled_table(workbook):
    record = await _sink(workbook).submit(
        "alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "Long text that should wrap"}
    )

    assert record.table_name == "alice"
    assert record.region.display_row == 3
    assert record.position_confirmed is True
    assert record.styled is True
    assert record.summary()["row"] == 3

    assert workbook.rows("alice", 2) == [
        ["", ""],
        ["Age", "Further comments"],
        ["30", "Long text that should wrap"],
    ]

    # provisioning batch, then the appended-row batch
    assert len(workbook.format_batches) == 2
    provisioning, appended = workbook.format_batches
    assert any("updateDimensionProperties" in r for r in provisioning)
    assert not any("updateDimensionProperties" in r for r in appended)
    assert _wrap_strategies(appended, 2) == {0: "OVERFLOW_CELL", 1: "WRAP"}


@pytest.mark.asyncio
async def test_sequential_submissions_get_consecutive_rows(workbook):
    sink = _sink(workbook)
    first = await sink.submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "a"})
    second = await sink.submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 31, "comments": "b"})

    assert (first.region.row_start, second.region.row_start) == (2, 3)
    assert workbook.count("create_table") == 1
    # second request found the header and did not rewrite it
    assert workbook.count("write_range") == 1


@pytest.mark.asyncio
async def test_concurrent_submissions_never_share_a_row(workbook):
    sink = _sink(workbook)
    records = await asyncio.gather(
        *(
            sink.submit("bob", USER_DATA_SCHEMA, {"username": "bob", "email": f"b{i}@x.io", "value1": i})
            for i in range(8)
        )
    )

    regions = [r.region for r in records]
    for i, a in enumerate(regions):
        for b in regions[i + 1:]:
            assert not a.overlaps(b)

    assert list(workbook.tabs) == ["bob"]
    rows = workbook.rows("bob", 4)
    assert rows[1] == ["Username", "Email", "Value1", "Value2"]
    assert sorted(row[2] for row in rows[2:]) == sorted(str(i) for i in range(8))


@pytest.mark.asyncio
async def test_tables_are_per_user(workbook):
    sink = _sink(workbook)
    await sink.submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "a"})
    record = await sink.submit("Bob's tab", SURVEY_FEEDBACK_SCHEMA, {"age": 40, "comments": "b"})

    assert sorted(workbook.tabs) == ["Bob's tab", "alice"]
    assert record.region.row_start == 2


@pytest.mark.asyncio
async def test_schema_mismatch_writes_nothing(workbook):
    with pytest.raises(SchemaMismatch):
        await _sink(workbook).submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "colour": "red"})
    assert workbook.calls == []


@pytest.mark.asyncio
async def test_blank_table_name_is_rejected(workbook):
    with pytest.raises(SchemaMismatch):
        await _sink(workbook).submit("  ", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "x"})
    assert workbook.calls == []


@pytest.mark.asyncio
async def test_styling_failure_keeps_the_record(workbook):
    sink = _sink(workbook)
    await sink.submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "a"})

    workbook.failures["batch_format"] = BackendTimeout("batch_format", 1.0)
    record = await sink.submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 31, "comments": "b"})

    assert record.styled is False
    assert workbook.rows("alice", 2)[3] == ["31", "b"]


@pytest.mark.asyncio
async def test_unclassified_styling_error_keeps_the_record(workbook):
    sink = _sink(workbook)
    await sink.submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "a"})

    workbook.failures["batch_format"] = RuntimeError("client closed")
    record = await sink.submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 31, "comments": "b"})

    assert record.styled is False
    assert record.position_confirmed is True
    assert workbook.rows("alice", 2)[3] == ["31", "b"]


@pytest.mark.asyncio
async def test_table_name_is_used_verbatim(workbook):
    sink = _sink(workbook)
    await sink.submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "a"})
    record = await sink.submit(" alice", SURVEY_FEEDBACK_SCHEMA, {"age": 31, "comments": "b"})

    assert record.table_name == " alice"
    assert sorted(workbook.tabs) == [" alice", "alice"]


@pytest.mark.asyncio
async def test_ambiguous_append_is_reported_not_raised(workbook):
    workbook.ack_override = AppendResult(updated_range="elsewhere!A9:B9", updated_rows=1)
    record = await _sink(workbook).submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "a"})

    assert record.position_confirmed is False
    assert record.region.row_start == 2


@pytest.mark.asyncio
async def test_append_failure_propagates_classified(workbook):
    workbook.failures["append_to_range"] = BackendTimeout("append_to_range", 30.0)
    with pytest.raises(BackendTimeout) as exc_info:
        await _sink(workbook).submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "a"})
    assert exc_info.value.details["outcome"] == "unknown"


@pytest.mark.asyncio
async def test_header_conflict_surfaces_partial_provision(workbook):
    tab = workbook.add_tab("alice")
    tab.cells[1] = {0: "Something", 1: "Else"}

    with pytest.raises(PartialProvision):
        await _sink(workbook).submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "a"})
    assert workbook.count("append_to_range") == 0


@pytest.mark.asyncio
async def test_unexpected_errors_are_wrapped(workbook):
    workbook.failures["list_tables"] = KeyError("sheets")

    with pytest.raises(BackendUnavailable) as exc_info:
        await _sink(workbook).submit("alice", SURVEY_FEEDBACK_SCHEMA, {"age": 30, "comments": "a"})
    assert exc_info.value.details["error"] == "KeyError"
    assert isinstance(exc_info.value.__cause__, KeyError)
