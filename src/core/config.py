"""Runtime configuration model for lakesample.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import DEFAULT_MAX_WORKERS, DEFAULT_RANDOM_SEED
from core.errors import LakeSampleConfigError


@dataclass(frozen=True)
class LakeSampleConfig:
    """Validated runtime configuration.

    Attributes:
        max_workers: Worker threads used to read file groups in parallel.
        random_seed: Default seed for fraction sampling and shuffled selection.
        read_timeout_seconds: Optional wall-clock limit for one read call.
        s3_region: Optional default AWS region for S3 operations.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    max_workers: int = DEFAULT_MAX_WORKERS
    random_seed: int = DEFAULT_RANDOM_SEED
    read_timeout_seconds: float | None = None
    s3_region: str | None = None
    s3_profile: str | None = None

    @classmethod
    def from_env(cls) -> "LakeSampleConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            LakeSampleConfigError: If environment values are invalid.
        """
        max_workers = _parse_int(
            "LAKESAMPLE_MAX_WORKERS", os.getenv("LAKESAMPLE_MAX_WORKERS", str(DEFAULT_MAX_WORKERS))
        )
        if max_workers < 1:
            raise LakeSampleConfigError(
                f"Invalid LAKESAMPLE_MAX_WORKERS value: expected >= 1, got {max_workers}. "
                "Set LAKESAMPLE_MAX_WORKERS to a positive integer."
            )
        random_seed = _parse_int(
            "LAKESAMPLE_RANDOM_SEED", os.getenv("LAKESAMPLE_RANDOM_SEED", str(DEFAULT_RANDOM_SEED))
        )
        return cls(
            max_workers=max_workers,
            random_seed=random_seed,
            read_timeout_seconds=_parse_timeout(os.getenv("LAKESAMPLE_READ_TIMEOUT_SECONDS")),
            s3_region=os.getenv("LAKESAMPLE_S3_REGION"),
            s3_profile=os.getenv("LAKESAMPLE_S3_PROFILE"),
        )


def _parse_int(variable_name: str, raw_value: str) -> int:
    """Parse an integer environment value.

    Args:
        variable_name: Environment variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed integer.

    Raises:
        LakeSampleConfigError: If value cannot be parsed into int.
    """
    try:
        return int(raw_value)
    except ValueError as error:
        raise LakeSampleConfigError(
            f"Invalid {variable_name} value: "
            f"expected integer, got '{raw_value}'. "
            f"Set {variable_name} to a numeric value."
        ) from error


def _parse_timeout(raw_value: str | None) -> float | None:
    """Parse the optional read timeout in seconds."""
    if raw_value is None or not raw_value.strip():
        return None
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise LakeSampleConfigError(
            "Invalid LAKESAMPLE_READ_TIMEOUT_SECONDS value: "
            f"expected number, got '{raw_value}'. Unset it to disable the timeout."
        ) from error
    if timeout <= 0:
        raise LakeSampleConfigError(
            f"Invalid LAKESAMPLE_READ_TIMEOUT_SECONDS value: expected > 0, got {timeout}."
        )
    return timeout
