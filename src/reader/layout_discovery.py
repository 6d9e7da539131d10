"""Partition and file-group discovery.

This module enumerates the partitions under a dataset root and the
committed file groups of each partition as of the latest completed
commit. Discovery failures are fatal for the calling read.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Iterator

from core.constants import PARTITION_METADATA_FILE_NAME
from core.errors import LayoutError
from core.logging_config import get_logger
from core.types import DatasetLayout, FileGroupRef
from store.storage_client import StorageClient
from store.timeline import Timeline, basename

_LOGGER = get_logger(__name__)


class LayoutDiscoverer:
    """Discover the physical layout of one dataset root."""

    def __init__(self, dataset_root: str, storage: StorageClient, max_workers: int = 1) -> None:
        """Create a discoverer.

        Args:
            dataset_root: Local path or ``s3://`` URI of the dataset.
            storage: Storage client for listing.
            max_workers: Threads used to list partitions concurrently.
        """
        self._dataset_root = dataset_root
        self._storage = storage
        self._max_workers = max_workers
        self._timeline = Timeline(dataset_root, storage)

    def latest_commit(self) -> str:
        """Return the latest completed commit of the dataset."""
        self._require_root()
        return self._timeline.latest_completed_commit()

    def list_partitions(self) -> tuple[str, ...]:
        """List partition paths under the dataset root in sorted order.

        A directory is a partition when it holds the partition metadata
        marker; directories starting with ``.`` are never descended.

        Raises:
            LayoutError: If the root is missing or cannot be listed.
        """
        self._require_root()
        try:
            return tuple(self._walk_partitions(self._dataset_root, ()))
        except OSError as error:
            raise LayoutError(
                f"Failed to list partitions under {self._dataset_root}: {error}. "
                "Check storage permissions and retry."
            ) from error

    def list_file_groups(self, partition_path: str, as_of_commit: str) -> tuple[FileGroupRef, ...]:
        """List committed file groups of one partition.

        Raises:
            LayoutError: If the partition cannot be listed.
        """
        try:
            return self._timeline.file_groups_as_of(partition_path, as_of_commit)
        except OSError as error:
            raise LayoutError(
                f"Failed to list file groups of partition '{partition_path}': {error}. "
                "Check storage permissions and retry."
            ) from error

    def discover(self) -> DatasetLayout:
        """Discover partitions and committed file groups.

        Returns:
            Layout snapshot as of the latest completed commit.

        Raises:
            LayoutError: If the root, timeline, or listings are unusable.
        """
        as_of_commit = self.latest_commit()
        partitions = self.list_partitions()
        if self._max_workers > 1 and len(partitions) > 1:
            with ThreadPoolExecutor(
                max_workers=min(self._max_workers, len(partitions)),
                thread_name_prefix="lakesample-layout",
            ) as pool:
                listings = list(
                    pool.map(lambda path: self.list_file_groups(path, as_of_commit), partitions)
                )
        else:
            listings = [self.list_file_groups(path, as_of_commit) for path in partitions]
        layout = DatasetLayout(
            dataset_root=self._dataset_root,
            as_of_commit=as_of_commit,
            partitions=partitions,
            file_groups=dict(zip(partitions, listings)),
        )
        _LOGGER.info(
            "layout_discovered",
            dataset_root=self._dataset_root,
            as_of_commit=as_of_commit,
            partition_count=len(partitions),
            file_group_count=layout.file_group_count(),
        )
        return layout

    def _require_root(self) -> None:
        if not self._storage.exists(self._dataset_root):
            raise LayoutError(
                f"Dataset root not found at {self._dataset_root}. "
                "Provide the base path of an existing dataset."
            )

    def _walk_partitions(self, directory: str, relative_parts: tuple[str, ...]) -> Iterator[str]:
        file_names = {basename(path) for path in self._storage.list_files(directory)}
        if PARTITION_METADATA_FILE_NAME in file_names:
            yield "/".join(relative_parts)
            return
        for child in self._storage.list_directories(directory):
            child_name = basename(child)
            if child_name.startswith("."):
                continue
            yield from self._walk_partitions(child, relative_parts + (child_name,))
