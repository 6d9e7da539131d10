"""Unit tests for sample-plan execution."""

from __future__ import annotations

from pathlib import Path

from core.config import LakeSampleConfig
from core.sample_plan import PlannedRead, SamplePlan, SamplePlanDefaults
from reader.plan_execution import execute_sample_plan
from tests.dataset_fixtures import build_uniform_dataset


def _plan(dataset_root: str, schema_path: str) -> SamplePlan:
    common = {"dataset_root": dataset_root, "schema_path": schema_path, "key_field": "_row_key"}
    return SamplePlan(
        version=1,
        defaults=SamplePlanDefaults(),
        reads=(
            PlannedRead(
                name="count", partition_count=2, file_group_count=1, total_records=6, **common
            ),
            PlannedRead(
                name="fraction", partition_count=2, file_group_count=1, fraction=1.0, **common
            ),
        ),
    )


def test_execute_sample_plan_runs_reads_in_order(tmp_path: Path) -> None:
    """Each planned read should produce one outcome in plan order."""
    context = build_uniform_dataset(tmp_path / "trips", partition_count=2, records_per_file_group=4)
    plan = _plan(str(context.root), str(context.write_schema()))

    outcomes = execute_sample_plan(plan, LakeSampleConfig(max_workers=2))

    assert [(outcome.read.name, len(outcome.result)) for outcome in outcomes] == [
        ("count", 6),
        ("fraction", 8),
    ]


def test_summary_line_reports_diversity(tmp_path: Path) -> None:
    """Summary lines should report record, partition and group counts."""
    context = build_uniform_dataset(tmp_path / "trips", partition_count=2, records_per_file_group=4)
    plan = _plan(str(context.root), str(context.write_schema()))

    (first, _) = execute_sample_plan(plan, LakeSampleConfig())

    assert first.summary_line() == (
        "count\trecords=6\tpartitions=2\tfile_groups=2\tfailed=0\tunmet=none"
    )
