"""Unit tests for base file and delta block decoding."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from core.errors import DecodeError
from store.record_codec import decode_base_file, decode_delta_block
from tests.dataset_fixtures import DatasetWriter, delete, trip_row, upsert


def test_decode_base_file_reads_jsonl_rows() -> None:
    """JSONL base rows should decode to key/record pairs, skipping blank lines."""
    stream = io.BytesIO(b'{"_row_key": "a", "fare": 1}\n\n{"_row_key": 7, "fare": 2}\n')

    rows = list(decode_base_file("fg_001.base.jsonl", stream, "_row_key"))

    assert [key for key, _ in rows] == ["a", "7"]


def test_decode_base_file_reads_parquet_rows(tmp_path: Path) -> None:
    """Parquet base files should decode through pyarrow."""
    path = DatasetWriter(tmp_path).write_base(
        "p1", "fg-1", "001", [trip_row("a"), trip_row("b")], file_format="parquet"
    )

    with path.open("rb") as stream:
        rows = list(decode_base_file(str(path), stream, "_row_key"))

    assert [(key, row["rider"]) for key, row in rows] == [("a", "rider-a"), ("b", "rider-a")]


def test_decode_base_file_raises_for_truncated_line() -> None:
    """Truncated JSON should raise a decode error."""
    stream = io.BytesIO(b'{"_row_key": "a"}\n{"_row_key": \n')

    with pytest.raises(DecodeError):
        list(decode_base_file("fg_001.base.jsonl", stream, "_row_key"))


def test_decode_base_file_raises_for_missing_key() -> None:
    """Rows without the key field should raise a decode error."""
    stream = io.BytesIO(b'{"fare": 1}\n')

    with pytest.raises(DecodeError):
        list(decode_base_file("fg_001.base.jsonl", stream, "_row_key"))


def test_decode_base_file_raises_for_corrupt_parquet() -> None:
    """Bytes that are not Parquet should raise a decode error."""
    stream = io.BytesIO(b"not a parquet file")

    with pytest.raises(DecodeError):
        list(decode_base_file("fg_001.base.parquet", stream, "_row_key"))


def test_decode_delta_block_reads_upserts_and_tombstones(tmp_path: Path) -> None:
    """Delta rows should decode to upserts and tombstones in block order."""
    path = DatasetWriter(tmp_path).write_delta(
        "p1", "fg-1", "002", [upsert("a", fare=3.0), delete("b")]
    )

    with path.open("rb") as stream:
        entries = list(decode_delta_block(str(path), stream))

    assert [(entry.record_key, entry.is_tombstone) for entry in entries] == [
        ("a", False),
        ("b", True),
    ]


def test_decode_delta_block_raises_for_unknown_operation() -> None:
    """Unknown delta operations should raise a decode error."""
    stream = io.BytesIO(b'{"key": "a", "op": "merge", "record": {}}\n')

    with pytest.raises(DecodeError):
        list(decode_delta_block(".fg_002.delta.jsonl", stream))


def test_decode_delta_block_raises_for_non_object_row() -> None:
    """Rows that are not JSON objects should raise a decode error."""
    stream = io.BytesIO(b'["a", "upsert"]\n')

    with pytest.raises(DecodeError):
        list(decode_delta_block(".fg_002.delta.jsonl", stream))
