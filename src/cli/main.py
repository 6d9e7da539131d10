"""lakesample CLI entry points.
This module exposes layout inspection, one-off sampling, and sample-plan
commands. It maps argparse commands onto reader calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from typing import Any, Sequence

from cli.run_plan_command import add_run_plan_command, run_run_plan_command
from cli.sample_command import add_sample_command, run_sample_command
from core.config import LakeSampleConfig
from core.constants import DEFAULT_RECORD_KEY_FIELD
from reader.dataset_reader import DatasetReader
from store.record_schema import RecordSchema, SchemaField


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="lakesample",
        description="Sample merged records from a partitioned log-structured dataset",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        help="Override LAKESAMPLE_MAX_WORKERS for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_layout_command(subparsers)
    add_sample_command(subparsers)
    add_run_plan_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the lakesample CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.max_workers)
    if args.command == "layout":
        return _run_layout_command(config, args)
    if args.command == "sample":
        return run_sample_command(config, args)
    if args.command == "run-plan":
        return run_run_plan_command(config, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(max_workers: int | None) -> LakeSampleConfig:
    """Build config with an optional worker override.

    Args:
        max_workers: Optional override.

    Returns:
        Runtime configuration.
    """
    config = LakeSampleConfig.from_env()
    if max_workers:
        config = replace(config, max_workers=max_workers)
    return config


def _add_layout_command(subparsers: Any) -> None:
    parser = subparsers.add_parser(
        "layout",
        help="List partitions and committed file groups of a dataset",
    )
    parser.add_argument("dataset_root", help="Dataset root path or s3:// URI")


def _run_layout_command(config: LakeSampleConfig, args: argparse.Namespace) -> int:
    """Handle layout command.

    Prints one ``partition<TAB>file_group_id<TAB>deltas`` row per file group.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    # Layout listing never decodes records, so a key-only schema is enough.
    schema = RecordSchema(
        name="layout",
        fields=(SchemaField(DEFAULT_RECORD_KEY_FIELD),),
        key_field=DEFAULT_RECORD_KEY_FIELD,
    )
    layout = DatasetReader(args.dataset_root, schema, config).describe_layout()
    print(f"as_of_commit={layout.as_of_commit}")
    for partition in layout.partitions:
        for file_group in layout.file_groups[partition]:
            deltas = len(file_group.delta_blocks)
            print(f"{partition or '.'}\t{file_group.file_group_id}\t{deltas}")
    return 0
