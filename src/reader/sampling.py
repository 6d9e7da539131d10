"""Sampling policies applied to merged file-group records.

The count policy splits a record budget evenly across the selected
file groups and takes a prefix of each group. The fraction policy keeps
each record with a fixed probability drawn from a per-group seeded RNG,
so a given seed yields the same sample regardless of worker scheduling.
"""

from __future__ import annotations

import random
from itertools import islice
from typing import Iterator

from core.errors import SampleRequestError
from core.types import MergedRecord, SampleRequest
from reader.parallel import CancellationToken


def build_count_request(
    partition_count: int,
    file_group_count: int,
    total_records: int,
) -> SampleRequest:
    """Validate count-policy arguments.

    Raises:
        SampleRequestError: If a count is negative or not an integer.
    """
    _require_count("partition_count", partition_count)
    _require_count("file_group_count", file_group_count)
    _require_count("total_records", total_records)
    return SampleRequest(
        partition_count=partition_count,
        file_group_count=file_group_count,
        total_records=total_records,
    )


def build_fraction_request(
    partition_count: int,
    file_group_count: int,
    fraction: float,
    seed: int,
    randomize_selection: bool = False,
) -> SampleRequest:
    """Validate fraction-policy arguments.

    Raises:
        SampleRequestError: If a count is negative or ``fraction`` is outside (0, 1].
    """
    _require_count("partition_count", partition_count)
    _require_count("file_group_count", file_group_count)
    if isinstance(fraction, bool) or not isinstance(fraction, (int, float)):
        raise SampleRequestError(f"fraction must be a number in (0, 1], got {fraction!r}.")
    if not 0.0 < fraction <= 1.0:
        raise SampleRequestError(f"fraction must be in (0, 1], got {fraction}.")
    return SampleRequest(
        partition_count=partition_count,
        file_group_count=file_group_count,
        fraction=float(fraction),
        seed=seed,
        randomize_selection=randomize_selection,
    )


def split_evenly(total: int, buckets: int) -> list[int]:
    """Split ``total`` into ``buckets`` quotas differing by at most one.

    The first ``total % buckets`` quotas receive the extra record, so the
    quotas always sum to exactly ``total``.
    """
    if buckets <= 0:
        return []
    base, remainder = divmod(total, buckets)
    return [base + 1 if index < remainder else base for index in range(buckets)]


def take_count(
    records: Iterator[MergedRecord],
    quota: int,
    token: CancellationToken | None = None,
) -> list[MergedRecord]:
    """Take up to ``quota`` records from a merged sequence."""
    taken: list[MergedRecord] = []
    for record in islice(records, quota):
        if token is not None:
            token.raise_if_cancelled()
        taken.append(record)
    return taken


def take_fraction(
    records: Iterator[MergedRecord],
    fraction: float,
    rng: random.Random,
    token: CancellationToken | None = None,
) -> list[MergedRecord]:
    """Keep each record independently with probability ``fraction``."""
    kept: list[MergedRecord] = []
    for record in records:
        if token is not None:
            token.raise_if_cancelled()
        if rng.random() < fraction:
            kept.append(record)
    return kept


def file_group_rng(seed: int, partition_path: str, file_group_id: str) -> random.Random:
    """Return the Bernoulli RNG for one file group under a seed."""
    return random.Random(f"{seed}:{partition_path}:{file_group_id}")


def _require_count(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SampleRequestError(f"{name} must be an integer, got {value!r}.")
    if value < 0:
        raise SampleRequestError(f"{name} must be >= 0, got {value}.")
