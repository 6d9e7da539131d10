"""Typed sample-plan parsing for declarative workload generation.

This module loads and validates YAML sample plans: an ordered list of
reads against one or more datasets, each using the count or fraction
policy. CLI and SDK entry points execute the same validated plan.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence, cast

from core.constants import DEFAULT_RECORD_KEY_FIELD, SAMPLE_PLAN_VERSION
from core.errors import LakeSampleDependencyError, SampleRequestError


@dataclass(frozen=True)
class SamplePlanDefaults:
    """Default values applied to planned reads."""

    dataset_root: str | None = None
    schema_path: str | None = None
    key_field: str = DEFAULT_RECORD_KEY_FIELD


@dataclass(frozen=True)
class PlannedRead:
    """One read from a sample plan, with defaults already applied."""

    name: str
    dataset_root: str
    schema_path: str
    key_field: str
    partition_count: int
    file_group_count: int
    total_records: int | None = None
    fraction: float | None = None
    seed: int | None = None
    randomize_selection: bool = False


@dataclass(frozen=True)
class SamplePlan:
    """Validated sample-plan root object."""

    version: int
    defaults: SamplePlanDefaults
    reads: tuple[PlannedRead, ...]


def load_sample_plan(plan_path: str) -> SamplePlan:
    """Load and validate a YAML sample plan from disk.

    Args:
        plan_path: File path to the YAML plan.

    Returns:
        Fully validated sample plan.

    Raises:
        LakeSampleDependencyError: If PyYAML is unavailable.
        SampleRequestError: If the file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(plan_path)
    root_mapping = _expect_mapping(payload, "sample plan root")
    _validate_keys(root_mapping, {"version", "defaults", "reads"}, "sample plan root")
    version = _parse_version(root_mapping)
    defaults = _parse_defaults(root_mapping)
    reads = _parse_reads(root_mapping, defaults)
    return SamplePlan(version=version, defaults=defaults, reads=reads)


def _load_yaml_payload(plan_path: str) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise LakeSampleDependencyError(
            "YAML sample plans require PyYAML. Install with 'pip install pyyaml'."
        ) from error
    plan_file = Path(plan_path).expanduser().resolve()
    if not plan_file.exists():
        raise SampleRequestError(
            f"Sample plan does not exist at {plan_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(plan_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise SampleRequestError(
            f"Failed to read sample plan at {plan_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise SampleRequestError(
            f"Failed to parse YAML sample plan at {plan_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise SampleRequestError(
            f"Sample plan at {plan_file} is empty. Define 'version' and 'reads'."
        )
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise SampleRequestError(
            f"Invalid {context}: expected object mapping, got {type(value).__name__}."
        )
    for key in value:
        if not isinstance(key, str):
            raise SampleRequestError(
                f"Invalid {context}: expected string keys, got {type(key).__name__}."
            )
    return cast(Mapping[str, object], value)


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise SampleRequestError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise SampleRequestError("Sample plan field 'version' must be an integer. Set version: 1.")
    if raw_version != SAMPLE_PLAN_VERSION:
        raise SampleRequestError(
            f"Unsupported sample plan version {raw_version}. Use version: {SAMPLE_PLAN_VERSION}."
        )
    return raw_version


def _parse_defaults(root_mapping: Mapping[str, object]) -> SamplePlanDefaults:
    raw_defaults = root_mapping.get("defaults")
    if raw_defaults is None:
        return SamplePlanDefaults()
    defaults_mapping = _expect_mapping(raw_defaults, "sample plan defaults")
    _validate_keys(
        defaults_mapping, {"dataset_root", "schema", "key_field"}, "sample plan defaults"
    )
    return SamplePlanDefaults(
        dataset_root=_optional_string(defaults_mapping, "dataset_root"),
        schema_path=_optional_string(defaults_mapping, "schema"),
        key_field=_optional_string(defaults_mapping, "key_field") or DEFAULT_RECORD_KEY_FIELD,
    )


def _parse_reads(
    root_mapping: Mapping[str, object],
    defaults: SamplePlanDefaults,
) -> tuple[PlannedRead, ...]:
    raw_reads = root_mapping.get("reads")
    if raw_reads is None:
        raise SampleRequestError(
            "Sample plan missing required field 'reads'. Add a non-empty list of reads."
        )
    read_rows = _expect_sequence(raw_reads, "sample plan reads")
    if len(read_rows) == 0:
        raise SampleRequestError("Sample plan field 'reads' must include at least one read.")
    return tuple(_parse_read(row, index, defaults) for index, row in enumerate(read_rows))


def _parse_read(row: object, index: int, defaults: SamplePlanDefaults) -> PlannedRead:
    context = f"sample plan read #{index + 1}"
    mapping = _expect_mapping(row, context)
    _validate_keys(
        mapping,
        {
            "name",
            "dataset_root",
            "schema",
            "key_field",
            "partitions",
            "file_groups",
            "records",
            "fraction",
            "seed",
            "randomize_selection",
        },
        context,
    )
    has_records = mapping.get("records") is not None
    has_fraction = mapping.get("fraction") is not None
    if has_records == has_fraction:
        raise SampleRequestError(f"Invalid {context}: set exactly one of 'records' or 'fraction'.")
    dataset_root = _optional_string(mapping, "dataset_root") or defaults.dataset_root
    schema_path = _optional_string(mapping, "schema") or defaults.schema_path
    if dataset_root is None or schema_path is None:
        raise SampleRequestError(
            f"Invalid {context}: 'dataset_root' and 'schema' must be set "
            "on the read or in defaults."
        )
    return PlannedRead(
        name=_optional_string(mapping, "name") or f"read-{index + 1}",
        dataset_root=dataset_root,
        schema_path=schema_path,
        key_field=_optional_string(mapping, "key_field") or defaults.key_field,
        partition_count=_required_int(mapping, "partitions", context),
        file_group_count=_required_int(mapping, "file_groups", context),
        total_records=_required_int(mapping, "records", context) if has_records else None,
        fraction=_required_float(mapping, "fraction", context) if has_fraction else None,
        seed=_required_int(mapping, "seed", context) if mapping.get("seed") is not None else None,
        randomize_selection=_optional_bool(mapping, "randomize_selection", context),
    )


def _optional_string(mapping: Mapping[str, object], field_name: str) -> str | None:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return None
    if isinstance(raw_value, str):
        normalized_value = raw_value.strip()
        return normalized_value if normalized_value else None
    raise SampleRequestError(f"Sample plan field '{field_name}' must be a string when provided.")


def _required_int(mapping: Mapping[str, object], field_name: str, context: str) -> int:
    value = mapping.get(field_name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SampleRequestError(f"Invalid {context}: field '{field_name}' must be an integer.")
    return value


def _required_float(mapping: Mapping[str, object], field_name: str, context: str) -> float:
    value = mapping.get(field_name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SampleRequestError(f"Invalid {context}: field '{field_name}' must be numeric.")
    return float(value)


def _optional_bool(mapping: Mapping[str, object], field_name: str, context: str) -> bool:
    value = mapping.get(field_name, False)
    if not isinstance(value, bool):
        raise SampleRequestError(f"Invalid {context}: field '{field_name}' must be true or false.")
    return value


def _validate_keys(mapping: Mapping[str, object], allowed_keys: set[str], context: str) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise SampleRequestError(f"Invalid {context}: unknown fields {', '.join(unknown_keys)}.")
