"""Unit tests for sampling policies."""

from __future__ import annotations

import pytest

from core.errors import SampleCancelledError, SampleRequestError
from core.types import MergedRecord
from reader.parallel import CancellationToken
from reader.sampling import (
    build_count_request,
    build_fraction_request,
    file_group_rng,
    split_evenly,
    take_count,
    take_fraction,
)


def _records(count: int) -> list[MergedRecord]:
    return [
        MergedRecord(f"k{index}", "p1", "fg-1", "001", {"_row_key": f"k{index}"})
        for index in range(count)
    ]


def test_split_evenly_sums_to_total_with_spread_of_one() -> None:
    """Quotas should differ by at most one and sum to the total."""
    quotas = split_evenly(10, 3)

    assert (quotas, sum(quotas)) == ([4, 3, 3], 10)


def test_split_evenly_handles_more_buckets_than_records() -> None:
    """Small totals should leave trailing buckets with a zero quota."""
    assert split_evenly(2, 4) == [1, 1, 0, 0]


def test_take_count_stops_at_quota() -> None:
    """take_count should return a prefix of at most quota records."""
    taken = take_count(iter(_records(10)), 3)

    assert [record.record_key for record in taken] == ["k0", "k1", "k2"]


def test_take_count_returns_all_records_below_quota() -> None:
    """Groups smaller than their quota should contribute every record."""
    assert len(take_count(iter(_records(2)), 5)) == 2


def test_take_fraction_is_reproducible_for_a_seed() -> None:
    """The same seed and group should keep the same records."""
    first = take_fraction(iter(_records(200)), 0.5, file_group_rng(7, "p1", "fg-1"))
    second = take_fraction(iter(_records(200)), 0.5, file_group_rng(7, "p1", "fg-1"))

    assert [r.record_key for r in first] == [r.record_key for r in second]


def test_take_fraction_keeps_roughly_the_fraction() -> None:
    """A 0.5 fraction over 1000 records should keep close to half."""
    kept = take_fraction(iter(_records(1000)), 0.5, file_group_rng(1, "p1", "fg-1"))

    assert 400 <= len(kept) <= 600


def test_take_fraction_of_one_keeps_everything() -> None:
    """A fraction of 1.0 should keep every record."""
    assert len(take_fraction(iter(_records(50)), 1.0, file_group_rng(1, "p1", "fg-1"))) == 50


def test_take_count_raises_when_cancelled() -> None:
    """A cancelled token should stop count sampling."""
    token = CancellationToken()
    token.cancel()

    with pytest.raises(SampleCancelledError):
        take_count(iter(_records(3)), 3, token)


@pytest.mark.parametrize("fraction", [0.0, -0.1, 1.5])
def test_build_fraction_request_rejects_out_of_range(fraction: float) -> None:
    """Fractions outside (0, 1] should be rejected."""
    with pytest.raises(SampleRequestError):
        build_fraction_request(1, 1, fraction, seed=1)


def test_build_count_request_rejects_negative_counts() -> None:
    """Negative counts should be rejected."""
    with pytest.raises(SampleRequestError):
        build_count_request(1, -1, 10)


def test_build_count_request_rejects_non_integer_totals() -> None:
    """Non-integer record totals should be rejected."""
    with pytest.raises(SampleRequestError):
        build_count_request(1, 1, 2.5)  # type: ignore[arg-type]
