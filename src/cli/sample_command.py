"""Sample CLI command wiring.

This module registers the sample subcommand, runs one read through the
dataset reader and prints merged records as JSON lines.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from core.config import LakeSampleConfig
from core.constants import DEFAULT_RECORD_KEY_FIELD
from core.errors import EmptyDatasetError, SampleCancelledError
from core.types import SampleResult
from reader.dataset_reader import DatasetReader
from store.record_schema import load_record_schema


def add_sample_command(subparsers: Any) -> None:
    """Register sample subcommand."""
    parser = subparsers.add_parser(
        "sample",
        help="Sample merged records and print them as JSON lines",
    )
    parser.add_argument("dataset_root", help="Dataset root path or s3:// URI")
    parser.add_argument("--schema", required=True, help="Path to Avro-style JSON record schema")
    parser.add_argument(
        "--key-field",
        default=DEFAULT_RECORD_KEY_FIELD,
        help="Record field that holds the record key",
    )
    parser.add_argument("--partitions", type=int, required=True, help="Partitions to sample")
    parser.add_argument(
        "--file-groups",
        type=int,
        required=True,
        help="File groups per partition to sample",
    )
    policy_group = parser.add_mutually_exclusive_group(required=True)
    policy_group.add_argument("--records", type=int, help="Total record budget (count policy)")
    policy_group.add_argument(
        "--fraction",
        type=float,
        help="Per-record retention probability in (0, 1] (fraction policy)",
    )
    parser.add_argument("--seed", type=int, help="Seed for fraction sampling and selection")
    parser.add_argument(
        "--randomize-selection",
        action="store_true",
        help="Shuffle partitions and file groups with the seed before selecting",
    )
    parser.add_argument("--timeout", type=float, help="Read timeout in seconds")


def run_sample_command(config: LakeSampleConfig, args: argparse.Namespace) -> int:
    """Handle sample command invocation."""
    schema = load_record_schema(args.schema, args.key_field)
    reader = DatasetReader(args.dataset_root, schema, config)
    try:
        if args.records is not None:
            result = reader.read_count(
                args.partitions, args.file_groups, args.records, timeout=args.timeout
            )
        else:
            result = reader.read_fraction(
                args.partitions,
                args.file_groups,
                args.fraction,
                seed=args.seed,
                randomize_selection=args.randomize_selection,
                timeout=args.timeout,
            )
    except (EmptyDatasetError, SampleCancelledError) as error:
        print(f"sample_error={error}")
        return 1
    _print_result(result)
    return 0


def _print_result(result: SampleResult) -> None:
    for record in result:
        print(json.dumps(record.as_dict(), sort_keys=True, default=str))
