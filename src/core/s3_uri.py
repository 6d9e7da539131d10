"""S3 URI parsing helpers.

This module centralizes S3 URI parsing for the storage client.
Dataset roots, partitions, and files share one addressing scheme.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.errors import LayoutError

S3_SCHEME = "s3://"


@dataclass(frozen=True)
class S3Location:
    """Parsed S3 location model."""

    bucket: str
    prefix: str

    def directory_prefix(self) -> str:
        """Return the prefix with a trailing slash, or empty for the bucket root."""
        stripped = self.prefix.strip("/")
        return f"{stripped}/" if stripped else ""


def is_s3_uri(path: str) -> bool:
    """Return whether a dataset path uses the S3 scheme."""
    return path.startswith(S3_SCHEME)


def parse_s3_uri(uri: str) -> S3Location:
    """Parse and validate an S3 URI.

    Args:
        uri: URI in format ``s3://bucket/prefix``; the prefix may be empty.

    Returns:
        Parsed bucket and prefix pair.

    Raises:
        LayoutError: If the URI has no bucket.
    """
    stripped_uri = uri.removeprefix(S3_SCHEME)
    bucket, _, prefix = stripped_uri.partition("/")
    if not is_s3_uri(uri) or not bucket:
        raise LayoutError(
            f"Invalid S3 URI '{uri}': expected s3://bucket/prefix. "
            "Provide at least a bucket name."
        )
    return S3Location(bucket=bucket, prefix=prefix)
