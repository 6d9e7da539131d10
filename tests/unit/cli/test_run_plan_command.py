"""Unit tests for run-plan CLI command."""

from __future__ import annotations

from cli.main import main
from tests.dataset_fixtures import build_uniform_dataset


def test_cli_run_plan_prints_summary_per_read(tmp_path, capsys) -> None:
    """run-plan should print one summary line per planned read."""
    context = build_uniform_dataset(tmp_path / "trips", partition_count=2, records_per_file_group=5)
    plan_path = tmp_path / "plan.yaml"
    plan_path.write_text(
        "\n".join(
            [
                "version: 1",
                "defaults:",
                f"  dataset_root: {context.root}",
                f"  schema: {context.write_schema()}",
                "reads:",
                "  - name: wide",
                "    partitions: 5",
                "    file_groups: 5",
                "    records: 4",
                "  - name: narrow",
                "    partitions: 1",
                "    file_groups: 1",
                "    records: 3",
            ]
        ),
        encoding="utf-8",
    )

    exit_code = main(["run-plan", str(plan_path)])
    output_lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0 and output_lines == [
        "wide\trecords=4\tpartitions=2\tfile_groups=2\tfailed=0\tunmet=none",
        "narrow\trecords=3\tpartitions=1\tfile_groups=1\tfailed=0\tunmet=none",
    ]
