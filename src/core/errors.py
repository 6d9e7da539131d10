"""lakesample exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Dataset-level errors abort a read; file-group errors are isolated
by the reader and only surface when nothing could be sampled.
"""

from __future__ import annotations


class LakeSampleError(Exception):
    """Base exception for all lakesample failures."""


class LakeSampleConfigError(LakeSampleError):
    """Raised for invalid runtime configuration."""


class LakeSampleDependencyError(LakeSampleError):
    """Raised when an optional runtime dependency is missing."""


class SampleRequestError(LakeSampleError):
    """Raised for invalid read arguments or sample plans."""


class LayoutError(LakeSampleError):
    """Raised when the dataset layout or timeline cannot be trusted."""


class ResolutionError(LakeSampleError):
    """Raised when a file referenced by a file group vanished or is unreadable."""


class DecodeError(LakeSampleError):
    """Raised when a base file or delta block cannot be parsed."""


class EmptyDatasetError(LakeSampleError):
    """Raised when no file group produced data to sample."""


class SampleCancelledError(LakeSampleError):
    """Raised when a read is cancelled or exceeds its timeout."""


class SchemaError(LakeSampleError):
    """Raised when a record schema descriptor is invalid."""
