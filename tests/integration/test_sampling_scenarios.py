"""Integration tests for end-to-end sampling over generated datasets."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.dataset_fixtures import DatasetContext, build_uniform_dataset


@pytest.fixture
def three_partition_dataset(tmp_path: Path) -> DatasetContext:
    """Three partitions, each with one file group of 100 records."""
    return build_uniform_dataset(
        tmp_path, partition_count=3, file_groups_per_partition=1, records_per_file_group=100
    )


def test_single_partition_single_group_read(three_partition_dataset: DatasetContext) -> None:
    """read(1, 1, 100) should draw from exactly one partition and one group."""
    result = three_partition_dataset.reader().read(1, 1, 100)

    assert (
        len(result) <= 100,
        len(result.partition_paths),
        len(result.file_group_ids),
    ) == (True, 1, 1)


def test_count_read_spans_every_partition(three_partition_dataset: DatasetContext) -> None:
    """read(3, 3, 100) should span all three partitions and groups."""
    result = three_partition_dataset.reader().read(3, 3, 100)

    assert (
        len(result) <= 100,
        len(result.partition_paths),
        len(result.file_group_ids),
    ) == (True, 3, 3)


def test_fraction_read_spans_every_partition(three_partition_dataset: DatasetContext) -> None:
    """read(3, 3, 0.5) should keep about half of every selected group."""
    result = three_partition_dataset.reader().read(3, 3, 0.5)

    assert (
        len(result.partition_paths),
        len(result.file_group_ids),
        100 <= len(result) <= 200,
    ) == (3, 3, True)


def test_over_request_is_clamped(three_partition_dataset: DatasetContext) -> None:
    """read(100, 100, 10) should clamp to the three available groups."""
    result = three_partition_dataset.reader().read(100, 100, 10)

    assert (
        len(result),
        len(result.partition_paths),
        len(result.file_group_ids),
        result.selected_file_groups,
        result.unmet_targets(),
    ) == (10, 3, 3, 3, {})


def test_sequential_and_parallel_reads_agree(three_partition_dataset: DatasetContext) -> None:
    """Worker count should not change which records a count read returns."""
    sequential = three_partition_dataset.reader(max_workers=1).read(3, 1, 30)
    parallel = three_partition_dataset.reader(max_workers=8).read(3, 1, 30)

    assert [r.record_key for r in sequential] == [r.record_key for r in parallel]
