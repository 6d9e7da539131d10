"""Merge-on-read materialization of one file group.

This module folds a base file and its delta blocks, in commit order,
into the latest record per key. Tombstones drop keys; every other
entry overwrites the key. Only one file group is held in memory.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, BinaryIO, Iterable, Iterator

from core.errors import ResolutionError
from core.types import DeltaEntry, MergedRecord, ResolvedFileGroup
from reader.parallel import CancellationToken
from store.record_codec import decode_base_file, decode_delta_block
from store.record_schema import RecordSchema
from store.storage_client import StorageClient

LiveRecords = dict[str, tuple[str, dict[str, Any]]]


class MergeMaterializer:
    """Materialize merged records for resolved file groups."""

    def __init__(self, storage: StorageClient, schema: RecordSchema) -> None:
        self._storage = storage
        self._schema = schema

    def materialize(
        self,
        file_group: ResolvedFileGroup,
        token: CancellationToken | None = None,
    ) -> Iterator[MergedRecord]:
        """Yield the surviving records of a file group.

        The returned generator performs no I/O until first advanced and
        cannot be restarted once exhausted.

        Args:
            file_group: Resolved base file and ordered delta blocks.
            token: Optional cancellation token checked between records.

        Yields:
            Merged records tagged with partition path and file-group id.

        Raises:
            ResolutionError: If a file disappears while being read.
            DecodeError: If a file cannot be decoded.
            SampleCancelledError: If the token trips.
        """
        live_records = self._load_base(file_group, token)
        for delta in file_group.deltas:
            with self._open(file_group, delta.path) as stream:
                entries = decode_delta_block(delta.path, stream)
                apply_delta_entries(live_records, entries, delta.commit_id, token)
        for record_key, (commit_id, record) in live_records.items():
            if token is not None:
                token.raise_if_cancelled()
            payload = self._schema.project(record)
            if payload[self._schema.key_field] is None:
                payload[self._schema.key_field] = record_key
            yield MergedRecord(
                record_key=record_key,
                partition_path=file_group.partition_path,
                file_group_id=file_group.file_group_id,
                commit_id=commit_id,
                payload=payload,
            )

    def _load_base(
        self,
        file_group: ResolvedFileGroup,
        token: CancellationToken | None,
    ) -> LiveRecords:
        live_records: LiveRecords = {}
        base_file = file_group.base_file
        if base_file is None:
            return live_records
        with self._open(file_group, base_file.path) as stream:
            rows = decode_base_file(base_file.path, stream, self._schema.key_field)
            for record_key, record in rows:
                if token is not None:
                    token.raise_if_cancelled()
                live_records[record_key] = (base_file.commit_id, record)
        return live_records

    @contextmanager
    def _open(self, file_group: ResolvedFileGroup, path: str) -> Iterator[BinaryIO]:
        try:
            stream = self._storage.open_for_read(path)
        except OSError as error:
            raise ResolutionError(
                f"Failed to open {path} of file group "
                f"{file_group.partition_path}/{file_group.file_group_id}: {error}."
            ) from error
        with stream:
            try:
                yield stream
            except OSError as error:
                raise ResolutionError(
                    f"Failed to read {path} of file group "
                    f"{file_group.partition_path}/{file_group.file_group_id}: {error}."
                ) from error


def apply_delta_entries(
    live_records: LiveRecords,
    entries: Iterable[DeltaEntry],
    commit_id: str,
    token: CancellationToken | None = None,
) -> None:
    """Fold one delta block into the working key space in place.

    Args:
        live_records: Key to ``(commit_id, record)`` working set.
        entries: Entries of a single delta block, in block order.
        commit_id: Commit that wrote the block.
        token: Optional cancellation token checked between entries.
    """
    for entry in entries:
        if token is not None:
            token.raise_if_cancelled()
        if entry.is_tombstone:
            live_records.pop(entry.record_key, None)
            continue
        live_records[entry.record_key] = (commit_id, dict(entry.record or {}))
