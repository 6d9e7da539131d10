"""Public SDK surface for lakesample.

This module provides a stable import path for library users.
It re-exports the reader façade, typed results and the error taxonomy.
"""

from __future__ import annotations

from core.config import LakeSampleConfig
from core.constants import (
    COMMIT_ID_METADATA_FIELD,
    FILE_GROUP_METADATA_FIELD,
    PARTITION_PATH_METADATA_FIELD,
    RECORD_KEY_METADATA_FIELD,
)
from core.errors import (
    DecodeError,
    EmptyDatasetError,
    LakeSampleError,
    LayoutError,
    ResolutionError,
    SampleCancelledError,
    SampleRequestError,
    SchemaError,
)
from core.sample_plan import SamplePlan, load_sample_plan
from core.types import DatasetLayout, FileGroupFailure, MergedRecord, SampleResult
from reader.dataset_reader import DatasetReader
from reader.parallel import CancellationToken
from reader.plan_execution import PlannedReadOutcome, execute_sample_plan
from store.record_schema import RecordSchema, SchemaField, load_record_schema

__all__ = [
    "COMMIT_ID_METADATA_FIELD",
    "CancellationToken",
    "DatasetLayout",
    "DatasetReader",
    "DecodeError",
    "EmptyDatasetError",
    "FILE_GROUP_METADATA_FIELD",
    "FileGroupFailure",
    "LakeSampleConfig",
    "LakeSampleError",
    "LayoutError",
    "MergedRecord",
    "PARTITION_PATH_METADATA_FIELD",
    "PlannedReadOutcome",
    "RECORD_KEY_METADATA_FIELD",
    "RecordSchema",
    "ResolutionError",
    "SampleCancelledError",
    "SamplePlan",
    "SampleRequestError",
    "SampleResult",
    "SchemaError",
    "SchemaField",
    "execute_sample_plan",
    "load_record_schema",
    "load_sample_plan",
]
