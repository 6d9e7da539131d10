"""Core constants used across lakesample modules.

This module centralizes layout names and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

TIMELINE_DIR_NAME = ".timeline"
PARTITION_METADATA_FILE_NAME = ".partition_metadata"
COMPLETED_COMMIT_SUFFIX = "commit"
INFLIGHT_COMMIT_SUFFIX = "inflight"
REQUESTED_COMMIT_SUFFIX = "requested"
COMMIT_STATE_SUFFIXES = (
    REQUESTED_COMMIT_SUFFIX,
    INFLIGHT_COMMIT_SUFFIX,
    COMPLETED_COMMIT_SUFFIX,
)
BASE_FILE_MARKER = ".base"
DELTA_FILE_MARKER = ".delta"
JSONL_EXTENSION = ".jsonl"
PARQUET_EXTENSION = ".parquet"
SUPPORTED_BASE_EXTENSIONS = (JSONL_EXTENSION, PARQUET_EXTENSION)
DELTA_UPSERT_OP = "upsert"
DELTA_DELETE_OP = "delete"
RECORD_KEY_METADATA_FIELD = "_record_key"
COMMIT_ID_METADATA_FIELD = "_commit_id"
PARTITION_PATH_METADATA_FIELD = "_partition_path"
FILE_GROUP_METADATA_FIELD = "_file_group_id"
METADATA_FIELDS = (
    RECORD_KEY_METADATA_FIELD,
    COMMIT_ID_METADATA_FIELD,
    PARTITION_PATH_METADATA_FIELD,
    FILE_GROUP_METADATA_FIELD,
)
DEFAULT_RECORD_KEY_FIELD = "_row_key"
DEFAULT_MAX_WORKERS = 4
DEFAULT_RANDOM_SEED = 42
SAMPLE_PLAN_VERSION = 1
