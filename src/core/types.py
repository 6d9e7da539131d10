"""Shared typed models.

This module defines immutable data models used by the store
collaborators, the reader components, and the public SDK.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Literal, Mapping, Sequence, overload

from core.constants import (
    COMMIT_ID_METADATA_FIELD,
    FILE_GROUP_METADATA_FIELD,
    PARTITION_PATH_METADATA_FIELD,
    RECORD_KEY_METADATA_FIELD,
)

CommitState = Literal["requested", "inflight", "completed"]


@dataclass(frozen=True)
class CommitInstant:
    """One entry of the dataset timeline.

    Attributes:
        commit_id: Fixed-width commit timestamp; lexical order is commit order.
        state: Lifecycle state of the commit.
    """

    commit_id: str
    state: CommitState

    @property
    def is_completed(self) -> bool:
        return self.state == "completed"


@dataclass(frozen=True)
class BaseFileRef:
    """Location of one base file version of a file group."""

    path: str
    file_group_id: str
    commit_id: str


@dataclass(frozen=True)
class DeltaBlockRef:
    """Location of one delta block written by a single commit."""

    path: str
    file_group_id: str
    commit_id: str


@dataclass(frozen=True)
class FileGroupRef:
    """Committed files of one file group as of a timeline instant.

    Attributes:
        partition_path: Relative partition path owning the group.
        file_group_id: Group identifier, unique within the partition.
        base_files: Committed base file versions, ascending by commit.
        delta_blocks: Committed delta blocks, ascending by commit.
        as_of_commit: Latest completed commit used for discovery.
    """

    partition_path: str
    file_group_id: str
    base_files: tuple[BaseFileRef, ...]
    delta_blocks: tuple[DeltaBlockRef, ...]
    as_of_commit: str


@dataclass(frozen=True)
class ResolvedFileGroup:
    """Base file and ordered delta blocks needed to rebuild a file group."""

    partition_path: str
    file_group_id: str
    base_file: BaseFileRef | None
    deltas: tuple[DeltaBlockRef, ...]


@dataclass(frozen=True)
class DeltaEntry:
    """One keyed update from a delta block; ``record`` is ``None`` for a tombstone."""

    record_key: str
    record: Mapping[str, Any] | None

    @property
    def is_tombstone(self) -> bool:
        return self.record is None


@dataclass(frozen=True)
class DatasetLayout:
    """Discovered partitions and their committed file groups.

    Attributes:
        dataset_root: Root path or URI that was discovered.
        as_of_commit: Latest completed commit at discovery time.
        partitions: Partition paths in discovery order.
        file_groups: File groups per partition, in discovery order.
    """

    dataset_root: str
    as_of_commit: str
    partitions: tuple[str, ...]
    file_groups: Mapping[str, tuple[FileGroupRef, ...]]

    def file_group_count(self) -> int:
        return sum(len(groups) for groups in self.file_groups.values())


@dataclass(frozen=True)
class MergedRecord:
    """Latest committed value of one record key inside a file group.

    Attributes:
        record_key: Record key value.
        partition_path: Partition the record was read from.
        file_group_id: Source file group of the record.
        commit_id: Commit that last wrote the record.
        payload: Record fields projected onto the record schema.
    """

    record_key: str
    partition_path: str
    file_group_id: str
    commit_id: str
    payload: Mapping[str, Any]

    def get(self, field_name: str, default: Any = None) -> Any:
        """Return a payload or metadata field value."""
        metadata = self._metadata()
        if field_name in metadata:
            return metadata[field_name]
        return self.payload.get(field_name, default)

    def as_dict(self) -> dict[str, Any]:
        """Return payload fields followed by metadata fields."""
        return {**self.payload, **self._metadata()}

    def _metadata(self) -> dict[str, str]:
        return {
            RECORD_KEY_METADATA_FIELD: self.record_key,
            COMMIT_ID_METADATA_FIELD: self.commit_id,
            PARTITION_PATH_METADATA_FIELD: self.partition_path,
            FILE_GROUP_METADATA_FIELD: self.file_group_id,
        }


@dataclass(frozen=True)
class SampleRequest:
    """Validated sampling request.

    Exactly one of ``total_records`` and ``fraction`` is set.

    Attributes:
        partition_count: Requested number of partitions.
        file_group_count: Requested number of file groups per partition.
        total_records: Upper bound on sampled records (count policy).
        fraction: Per-record retention probability (fraction policy).
        seed: Seed for fraction sampling and shuffled selection.
        randomize_selection: Shuffle partitions and file groups before selecting.
    """

    partition_count: int
    file_group_count: int
    total_records: int | None = None
    fraction: float | None = None
    seed: int | None = None
    randomize_selection: bool = False

    @property
    def policy(self) -> Literal["count", "fraction"]:
        return "count" if self.total_records is not None else "fraction"


@dataclass(frozen=True)
class FileGroupFailure:
    """A file group that was skipped because it could not be read."""

    partition_path: str
    file_group_id: str
    error_type: str
    message: str


@dataclass(frozen=True)
class SampleResult(Sequence[MergedRecord]):
    """Sampled records plus the diversity bookkeeping of one read.

    Attributes:
        records: Sampled records, grouped by file group in selection order.
        request: Request that produced the sample.
        selected_partitions: Partitions chosen by selection.
        selected_file_groups: File groups chosen by selection.
        failures: File groups skipped because of read errors.
    """

    records: tuple[MergedRecord, ...]
    request: SampleRequest
    selected_partitions: int
    selected_file_groups: int
    failures: tuple[FileGroupFailure, ...] = field(default_factory=tuple)

    @overload
    def __getitem__(self, index: int) -> MergedRecord: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[MergedRecord]: ...

    def __getitem__(self, index: int | slice) -> MergedRecord | Sequence[MergedRecord]:
        return self.records[index]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[MergedRecord]:
        return iter(self.records)

    @property
    def partition_paths(self) -> frozenset[str]:
        """Distinct partition paths present in the sample."""
        return frozenset(record.partition_path for record in self.records)

    @property
    def file_group_ids(self) -> frozenset[tuple[str, str]]:
        """Distinct (partition path, file group id) pairs present in the sample."""
        return frozenset((record.partition_path, record.file_group_id) for record in self.records)

    def unmet_targets(self) -> dict[str, tuple[int, int]]:
        """Return diversity targets that the sample does not reach.

        Targets are the requested counts clamped to what selection found,
        so over-requests are met once every available group contributes.

        Returns:
            Mapping of target name to ``(target, achieved)`` pairs. Empty
            when both the partition and file-group targets were met.
        """
        target_partitions = min(self.request.partition_count, self.selected_partitions)
        target_groups = min(
            self.request.partition_count * self.request.file_group_count,
            self.selected_file_groups,
        )
        achieved_partitions = len(self.partition_paths)
        achieved_groups = len(self.file_group_ids)
        unmet: dict[str, tuple[int, int]] = {}
        if achieved_partitions < target_partitions:
            unmet["partitions"] = (target_partitions, achieved_partitions)
        if achieved_groups < target_groups:
            unmet["file_groups"] = (target_groups, achieved_groups)
        return unmet
