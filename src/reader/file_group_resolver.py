"""File-group resolution.

This module picks the base file and the ordered delta blocks needed to
rebuild the latest state of one file group. Delta order is commit order
and is validated, never rearranged.
"""

from __future__ import annotations

from typing import Sequence

from core.errors import LayoutError, ResolutionError
from core.types import BaseFileRef, DeltaBlockRef, FileGroupRef, ResolvedFileGroup
from store.storage_client import StorageClient


class FileGroupResolver:
    """Resolve discovered file groups against current storage contents."""

    def __init__(self, storage: StorageClient) -> None:
        self._storage = storage

    def resolve(self, file_group: FileGroupRef) -> ResolvedFileGroup:
        """Resolve the latest base file and the delta blocks written after it.

        Args:
            file_group: Discovered file group.

        Returns:
            Base file (``None`` when the group only has deltas) and deltas
            in ascending commit order.

        Raises:
            LayoutError: If two files of the group share a commit id.
            ResolutionError: If a referenced file no longer exists.
        """
        _require_strict_commit_order(file_group, file_group.base_files)
        _require_strict_commit_order(file_group, file_group.delta_blocks)
        base_file = file_group.base_files[-1] if file_group.base_files else None
        deltas = tuple(
            delta
            for delta in file_group.delta_blocks
            if base_file is None or delta.commit_id > base_file.commit_id
        )
        for path in _referenced_paths(base_file, deltas):
            self._require_exists(file_group, path)
        return ResolvedFileGroup(
            partition_path=file_group.partition_path,
            file_group_id=file_group.file_group_id,
            base_file=base_file,
            deltas=deltas,
        )

    def _require_exists(self, file_group: FileGroupRef, path: str) -> None:
        try:
            exists = self._storage.exists(path)
        except OSError as error:
            raise ResolutionError(
                f"Failed to stat {path} for file group "
                f"{file_group.partition_path}/{file_group.file_group_id}: {error}."
            ) from error
        if not exists:
            raise ResolutionError(
                f"File {path} of file group {file_group.partition_path}/{file_group.file_group_id} "
                "vanished after discovery. It was likely cleaned by a concurrent writer."
            )


def _require_strict_commit_order(
    file_group: FileGroupRef,
    refs: Sequence[BaseFileRef | DeltaBlockRef],
) -> None:
    """Fail when adjacent refs are not strictly ascending by commit id."""
    for previous, current in zip(refs, refs[1:]):
        if current.commit_id == previous.commit_id:
            raise LayoutError(
                f"File group {file_group.partition_path}/{file_group.file_group_id} has two files "
                f"for commit {current.commit_id}: {previous.path} and {current.path}. "
                "Commit ids must be unique per file group."
            )
        if current.commit_id < previous.commit_id:
            raise LayoutError(
                f"File group {file_group.partition_path}/{file_group.file_group_id} lists "
                f"{current.path} out of commit order."
            )


def _referenced_paths(
    base_file: BaseFileRef | None,
    deltas: tuple[DeltaBlockRef, ...],
) -> list[str]:
    paths = [base_file.path] if base_file is not None else []
    return paths + [delta.path for delta in deltas]
