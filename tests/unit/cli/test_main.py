"""Unit tests for CLI command handling."""

from __future__ import annotations

import pytest

from cli.main import build_parser, main
from tests.dataset_fixtures import build_uniform_dataset


def test_cli_layout_prints_file_groups(tmp_path, capsys) -> None:
    """CLI layout should print the commit and one row per file group."""
    build_uniform_dataset(tmp_path, partition_count=2, records_per_file_group=1)

    exit_code = main(["layout", str(tmp_path)])
    output_lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0 and output_lines == [
        "as_of_commit=001",
        "2024/01/01\tfg-0-0\t0",
        "2024/01/02\tfg-1-0\t0",
    ]


def test_cli_requires_a_command() -> None:
    """Running without a subcommand should exit with a usage error."""
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_cli_max_workers_override_is_parsed() -> None:
    """The global worker override should precede the subcommand."""
    args = build_parser().parse_args(["--max-workers", "2", "layout", "/data"])

    assert (args.max_workers, args.command, args.dataset_root) == (2, "layout", "/data")
