"""Base file and delta block decoding.

This module turns raw base files and delta blocks into keyed records.
Base files are JSONL or Parquet; delta blocks are JSONL upsert/delete rows.
"""

from __future__ import annotations

import json
from typing import Any, BinaryIO, Iterator

from core.constants import DELTA_DELETE_OP, DELTA_UPSERT_OP, PARQUET_EXTENSION
from core.errors import DecodeError, LakeSampleDependencyError
from core.types import DeltaEntry


def decode_base_file(
    path: str,
    stream: BinaryIO,
    key_field: str,
) -> Iterator[tuple[str, dict[str, Any]]]:
    """Decode a base file into ``(record_key, record)`` pairs.

    Args:
        path: File path or URI, used for format detection and errors.
        stream: Open binary stream of the file.
        key_field: Field holding the record key.

    Yields:
        Record key and record payload in file order.

    Raises:
        DecodeError: If the file cannot be parsed or a row lacks its key.
    """
    if path.endswith(PARQUET_EXTENSION):
        rows = _read_parquet_rows(path, stream)
    else:
        rows = _read_jsonl_rows(path, stream)
    for row_number, row in rows:
        key_value = row.get(key_field)
        if key_value is None:
            raise DecodeError(
                f"Failed to decode base file row at {path}:{row_number}: "
                f"missing record key field '{key_field}'."
            )
        yield str(key_value), row


def decode_delta_block(path: str, stream: BinaryIO) -> Iterator[DeltaEntry]:
    """Decode a delta block into keyed upserts and tombstones.

    Args:
        path: File path or URI used in errors.
        stream: Open binary stream of the block.

    Yields:
        Delta entries in block order.

    Raises:
        DecodeError: If a row is malformed.
    """
    for row_number, row in _read_jsonl_rows(path, stream):
        yield _delta_entry_from_row(path, row_number, row)


def _delta_entry_from_row(path: str, row_number: int, row: dict[str, Any]) -> DeltaEntry:
    key_value = row.get("key")
    operation = row.get("op", DELTA_UPSERT_OP)
    if key_value is None:
        raise DecodeError(f"Failed to decode delta row at {path}:{row_number}: missing 'key'.")
    if operation == DELTA_DELETE_OP:
        return DeltaEntry(record_key=str(key_value), record=None)
    record = row.get("record")
    if operation != DELTA_UPSERT_OP or not isinstance(record, dict):
        raise DecodeError(
            f"Failed to decode delta row at {path}:{row_number}: "
            f"expected op '{DELTA_UPSERT_OP}' with an object 'record' or op '{DELTA_DELETE_OP}'."
        )
    return DeltaEntry(record_key=str(key_value), record=record)


def _read_jsonl_rows(path: str, stream: BinaryIO) -> Iterator[tuple[int, dict[str, Any]]]:
    """Yield parsed JSON objects with one-based line numbers."""
    for line_number, raw_line in enumerate(stream, 1):
        try:
            line = raw_line.decode("utf-8")
        except UnicodeDecodeError as error:
            raise DecodeError(f"Failed to decode {path}:{line_number}: invalid UTF-8.") from error
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as error:
            raise DecodeError(
                f"Failed to decode {path}:{line_number}: {error.msg}. "
                "The file may be truncated or written by an incompatible engine."
            ) from error
        if not isinstance(payload, dict):
            raise DecodeError(
                f"Failed to decode {path}:{line_number}: expected a JSON object per line."
            )
        yield line_number, payload


def _read_parquet_rows(path: str, stream: BinaryIO) -> Iterator[tuple[int, dict[str, Any]]]:
    """Yield Parquet rows as dictionaries with one-based row numbers."""
    try:
        import pyarrow.parquet as pq
    except ImportError as error:
        raise LakeSampleDependencyError(
            "Parquet base files require pyarrow, but it is not installed. "
            "Install pyarrow to sample Parquet-backed datasets."
        ) from error
    try:
        table = pq.read_table(stream)
    except Exception as error:
        raise DecodeError(
            f"Failed to decode Parquet base file at {path}: {error}. "
            "Validate the file footer and pyarrow compatibility."
        ) from error
    for row_number, row in enumerate(table.to_pylist(), 1):
        yield row_number, row
