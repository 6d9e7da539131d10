"""Unit tests for partition and file-group discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import LayoutError
from reader.layout_discovery import LayoutDiscoverer
from store.storage_client import LocalStorageClient
from tests.dataset_fixtures import DatasetWriter, build_uniform_dataset, trip_row


def test_discover_lists_nested_partitions_in_sorted_order(tmp_path: Path) -> None:
    """Nested partition paths should be discovered relative to the root."""
    build_uniform_dataset(tmp_path, partition_count=3, records_per_file_group=2)

    layout = LayoutDiscoverer(str(tmp_path), LocalStorageClient()).discover()

    assert layout.partitions == ("2024/01/01", "2024/01/02", "2024/01/03")


def test_discover_reports_file_groups_per_partition(tmp_path: Path) -> None:
    """Each partition should map to its committed file groups."""
    build_uniform_dataset(tmp_path, partition_count=2, file_groups_per_partition=2)

    layout = LayoutDiscoverer(str(tmp_path), LocalStorageClient(), max_workers=4).discover()

    assert (layout.as_of_commit, layout.file_group_count()) == ("001", 4)


def test_discover_keeps_partitions_without_committed_groups(tmp_path: Path) -> None:
    """Partitions with only uncommitted files should still be listed, but empty."""
    writer = DatasetWriter(tmp_path)
    writer.commit("001")
    writer.commit("002", state="inflight")
    writer.write_base("a", "fg-1", "001", [trip_row("k")])
    writer.write_base("b", "fg-2", "002", [trip_row("k")])

    layout = LayoutDiscoverer(str(tmp_path), LocalStorageClient()).discover()

    assert (layout.partitions, layout.file_groups["b"]) == (("a", "b"), ())


def test_list_partitions_skips_hidden_directories(tmp_path: Path) -> None:
    """The timeline and other hidden directories should never be partitions."""
    writer = DatasetWriter(tmp_path)
    writer.commit("001")
    writer.partition("visible")
    writer.partition(".staging/hidden")

    partitions = LayoutDiscoverer(str(tmp_path), LocalStorageClient()).list_partitions()

    assert partitions == ("visible",)


def test_discover_raises_for_missing_root(tmp_path: Path) -> None:
    """A missing dataset root should raise a layout error."""
    with pytest.raises(LayoutError):
        LayoutDiscoverer(str(tmp_path / "absent"), LocalStorageClient()).discover()
