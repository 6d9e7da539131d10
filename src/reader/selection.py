"""Partition and file-group selection.

This module chooses which partitions and file groups a read samples
from. Selection follows discovery order unless a seed is supplied,
in which case a seeded shuffle keeps the choice reproducible.
"""

from __future__ import annotations

import random

from core.types import DatasetLayout, FileGroupRef


def select_file_groups(
    layout: DatasetLayout,
    partition_count: int,
    file_group_count: int,
    seed: int | None = None,
) -> tuple[FileGroupRef, ...]:
    """Select up to ``partition_count`` partitions and ``file_group_count`` groups each.

    Only partitions with at least one committed file group are candidates.
    Requests beyond what is available are clamped, never rejected.

    Args:
        layout: Discovered dataset layout.
        partition_count: Requested number of partitions.
        file_group_count: Requested number of file groups per partition.
        seed: Optional shuffle seed; discovery order is used when ``None``.

    Returns:
        Selected file groups, partition by partition.
    """
    if partition_count <= 0 or file_group_count <= 0:
        return ()
    candidates = [partition for partition in layout.partitions if layout.file_groups.get(partition)]
    rng = random.Random(seed) if seed is not None else None
    if rng is not None:
        rng.shuffle(candidates)
    selected: list[FileGroupRef] = []
    for partition in candidates[:partition_count]:
        file_groups = list(layout.file_groups[partition])
        if rng is not None:
            rng.shuffle(file_groups)
        selected.extend(file_groups[:file_group_count])
    return tuple(selected)
