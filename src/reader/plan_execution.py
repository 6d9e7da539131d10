"""Sample-plan execution.

This module runs every read of a validated sample plan through the
reader façade and summarizes each result for CLI and SDK callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from core.config import LakeSampleConfig
from core.sample_plan import PlannedRead, SamplePlan
from core.types import SampleResult
from reader.dataset_reader import DatasetReader
from store.record_schema import load_record_schema

ReaderFactory = Callable[[PlannedRead, LakeSampleConfig], DatasetReader]


@dataclass(frozen=True)
class PlannedReadOutcome:
    """Result of one planned read."""

    read: PlannedRead
    result: SampleResult

    def summary_line(self) -> str:
        unmet = self.result.unmet_targets()
        unmet_text = ",".join(sorted(unmet)) if unmet else "none"
        return (
            f"{self.read.name}\trecords={len(self.result)}"
            f"\tpartitions={len(self.result.partition_paths)}"
            f"\tfile_groups={len(self.result.file_group_ids)}"
            f"\tfailed={len(self.result.failures)}"
            f"\tunmet={unmet_text}"
        )


def execute_sample_plan(
    plan: SamplePlan,
    config: LakeSampleConfig,
    reader_factory: ReaderFactory | None = None,
) -> tuple[PlannedReadOutcome, ...]:
    """Execute plan reads in order.

    Args:
        plan: Validated sample plan.
        config: Runtime configuration passed to each reader.
        reader_factory: Optional reader builder, used by tests.

    Returns:
        One outcome per planned read.
    """
    build_reader = reader_factory or _build_reader
    outcomes: list[PlannedReadOutcome] = []
    for planned in plan.reads:
        reader = build_reader(planned, config)
        if planned.total_records is not None:
            result = reader.read_count(
                planned.partition_count, planned.file_group_count, planned.total_records
            )
        else:
            result = reader.read_fraction(
                planned.partition_count,
                planned.file_group_count,
                planned.fraction if planned.fraction is not None else 1.0,
                seed=planned.seed,
                randomize_selection=planned.randomize_selection,
            )
        outcomes.append(PlannedReadOutcome(read=planned, result=result))
    return tuple(outcomes)


def _build_reader(planned: PlannedRead, config: LakeSampleConfig) -> DatasetReader:
    schema = load_record_schema(planned.schema_path, planned.key_field)
    return DatasetReader(planned.dataset_root, schema, config)
