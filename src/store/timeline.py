"""Commit timeline and committed file listing.

This module reads the dataset timeline directory to find completed
commits and lists the file groups of a partition as of a commit.
Files written by requested or inflight commits are never visible.
"""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass
from typing import Literal

from core.constants import (
    BASE_FILE_MARKER,
    COMMIT_STATE_SUFFIXES,
    COMPLETED_COMMIT_SUFFIX,
    DELTA_FILE_MARKER,
    INFLIGHT_COMMIT_SUFFIX,
    JSONL_EXTENSION,
    REQUESTED_COMMIT_SUFFIX,
    SUPPORTED_BASE_EXTENSIONS,
    TIMELINE_DIR_NAME,
)
from core.errors import LayoutError
from core.types import BaseFileRef, CommitInstant, CommitState, DeltaBlockRef, FileGroupRef
from store.storage_client import StorageClient

_STATE_BY_SUFFIX: dict[str, CommitState] = {
    REQUESTED_COMMIT_SUFFIX: "requested",
    INFLIGHT_COMMIT_SUFFIX: "inflight",
    COMPLETED_COMMIT_SUFFIX: "completed",
}
_STATE_RANK = {"requested": 0, "inflight": 1, "completed": 2}


@dataclass(frozen=True)
class DataFileName:
    """Parsed name of a base file or delta block."""

    kind: Literal["base", "delta"]
    file_group_id: str
    commit_id: str


class Timeline:
    """Read-only view over a dataset's commit timeline."""

    def __init__(self, dataset_root: str, storage: StorageClient) -> None:
        self._dataset_root = dataset_root
        self._storage = storage
        self._timeline_dir = storage.join(dataset_root, TIMELINE_DIR_NAME)
        self._instants: tuple[CommitInstant, ...] | None = None

    def instants(self) -> tuple[CommitInstant, ...]:
        """Return every commit on the timeline at its most advanced state.

        The listing is read once per timeline instance.

        Raises:
            LayoutError: If the timeline is missing or holds unreadable entries.
        """
        if self._instants is not None:
            return self._instants
        if not self._storage.exists(self._timeline_dir):
            raise LayoutError(
                f"Dataset timeline not found at {self._timeline_dir}. "
                "Point the reader at a dataset root written by the storage engine."
            )
        states: dict[str, CommitState] = {}
        for file_path in self._storage.list_files(self._timeline_dir):
            commit_id, state = _parse_instant_name(basename(file_path))
            current = states.get(commit_id)
            if current is None or _STATE_RANK[state] > _STATE_RANK[current]:
                states[commit_id] = state
        self._instants = tuple(
            CommitInstant(commit_id=commit_id, state=states[commit_id])
            for commit_id in sorted(states)
        )
        return self._instants

    def completed_commits(self) -> tuple[str, ...]:
        """Return completed commit ids in commit order."""
        return tuple(instant.commit_id for instant in self.instants() if instant.is_completed)

    def latest_completed_commit(self) -> str:
        """Return the latest completed commit id.

        Raises:
            LayoutError: If no commit completed or its metadata is unreadable.
        """
        completed = self.completed_commits()
        if not completed:
            raise LayoutError(
                f"Dataset at {self._dataset_root} has no completed commits. "
                "Wait for the first write to complete before sampling."
            )
        latest = completed[-1]
        self._read_commit_metadata(latest)
        return latest

    def file_groups_as_of(self, partition_path: str, commit_id: str) -> tuple[FileGroupRef, ...]:
        """List committed file groups of a partition as of a commit.

        Args:
            partition_path: Relative partition path.
            commit_id: Latest completed commit to consider.

        Returns:
            File groups sorted by id; groups with no visible files are omitted.
        """
        visible_commits = {
            completed for completed in self.completed_commits() if completed <= commit_id
        }
        partition_dir = self._storage.join(self._dataset_root, partition_path)
        base_files: dict[str, list[BaseFileRef]] = defaultdict(list)
        delta_blocks: dict[str, list[DeltaBlockRef]] = defaultdict(list)
        for file_path in self._storage.list_files(partition_dir):
            parsed = parse_data_file_name(basename(file_path))
            if parsed is None or parsed.commit_id not in visible_commits:
                continue
            if parsed.kind == "base":
                base_files[parsed.file_group_id].append(
                    BaseFileRef(file_path, parsed.file_group_id, parsed.commit_id)
                )
            else:
                delta_blocks[parsed.file_group_id].append(
                    DeltaBlockRef(file_path, parsed.file_group_id, parsed.commit_id)
                )
        return tuple(
            FileGroupRef(
                partition_path=partition_path,
                file_group_id=file_group_id,
                base_files=tuple(sorted(base_files[file_group_id], key=lambda ref: ref.commit_id)),
                delta_blocks=tuple(
                    sorted(delta_blocks[file_group_id], key=lambda ref: ref.commit_id)
                ),
                as_of_commit=commit_id,
            )
            for file_group_id in sorted(set(base_files) | set(delta_blocks))
        )

    def _read_commit_metadata(self, commit_id: str) -> dict[str, object]:
        commit_path = self._storage.join(
            self._timeline_dir, f"{commit_id}.{COMPLETED_COMMIT_SUFFIX}"
        )
        try:
            with self._storage.open_for_read(commit_path) as stream:
                payload = json.loads(stream.read().decode("utf-8") or "{}")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as error:
            raise LayoutError(
                f"Failed to read commit metadata at {commit_path}: {error}. "
                "The timeline may be corrupt; repair it before sampling."
            ) from error
        if not isinstance(payload, dict):
            raise LayoutError(
                f"Failed to read commit metadata at {commit_path}: expected a JSON object."
            )
        return payload


def parse_data_file_name(file_name: str) -> DataFileName | None:
    """Parse a base file or delta block name.

    Base files are ``<group>_<commit>.base.<ext>`` and delta blocks are
    ``.<group>_<commit>.delta.jsonl``. Other names return ``None``.
    """
    if file_name.startswith(".") and file_name.endswith(DELTA_FILE_MARKER + JSONL_EXTENSION):
        stem = file_name[1 : -len(DELTA_FILE_MARKER + JSONL_EXTENSION)]
        return _split_group_and_commit("delta", stem)
    for extension in SUPPORTED_BASE_EXTENSIONS:
        suffix = BASE_FILE_MARKER + extension
        if not file_name.startswith(".") and file_name.endswith(suffix):
            return _split_group_and_commit("base", file_name[: -len(suffix)])
    return None


def basename(path: str) -> str:
    """Return the last path component of a local path or S3 URI."""
    return path.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]


def _split_group_and_commit(kind: Literal["base", "delta"], stem: str) -> DataFileName | None:
    file_group_id, separator, commit_id = stem.rpartition("_")
    if not separator or not file_group_id or not commit_id:
        return None
    return DataFileName(kind=kind, file_group_id=file_group_id, commit_id=commit_id)


def _parse_instant_name(file_name: str) -> tuple[str, CommitState]:
    commit_id, separator, suffix = file_name.partition(".")
    if not separator or not commit_id or suffix not in COMMIT_STATE_SUFFIXES:
        raise LayoutError(
            f"Unreadable timeline entry '{file_name}': expected <commit_id>.<state> "
            f"with state in {COMMIT_STATE_SUFFIXES}."
        )
    return commit_id, _STATE_BY_SUFFIX[suffix]
