"""Sample-plan CLI command wiring.

This module registers the run-plan subcommand and delegates execution to
the shared plan executor used by CLI and SDK entry points.
"""

from __future__ import annotations

import argparse
from typing import Any

from core.config import LakeSampleConfig
from core.sample_plan import load_sample_plan
from reader.plan_execution import execute_sample_plan


def add_run_plan_command(subparsers: Any) -> None:
    """Register run-plan subcommand."""
    parser = subparsers.add_parser(
        "run-plan",
        help="Run every read of a declarative YAML sample plan",
    )
    parser.add_argument("plan_file", help="Path to YAML sample-plan file")


def run_run_plan_command(config: LakeSampleConfig, args: argparse.Namespace) -> int:
    """Handle run-plan command invocation."""
    plan = load_sample_plan(args.plan_file)
    for outcome in execute_sample_plan(plan, config):
        print(outcome.summary_line())
    return 0
