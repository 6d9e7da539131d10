"""Filesystem and object-store clients.

This module lists directories and opens files under a dataset root
that lives either on a local filesystem or under an ``s3://`` prefix.
Both backends report failures as ``OSError``: missing objects as
``FileNotFoundError`` and denied access as ``PermissionError``.
"""

from __future__ import annotations

import errno
import io
import posixpath
from pathlib import Path
from typing import Any, BinaryIO, Protocol

from core.config import LakeSampleConfig
from core.errors import LakeSampleDependencyError
from core.s3_uri import S3Location, is_s3_uri, parse_s3_uri

_MISSING_KEY_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "404", "NotFound"})
_ACCESS_DENIED_CODES = frozenset({"AccessDenied", "403", "Forbidden", "AllAccessDisabled"})


class StorageClient(Protocol):
    """Minimal read-only storage surface needed by the reader."""

    def join(self, base: str, *parts: str) -> str: ...

    def exists(self, path: str) -> bool: ...

    def list_directories(self, path: str) -> tuple[str, ...]: ...

    def list_files(self, path: str) -> tuple[str, ...]: ...

    def open_for_read(self, path: str) -> BinaryIO: ...


class LocalStorageClient:
    """Storage client backed by the local filesystem."""

    def join(self, base: str, *parts: str) -> str:
        return str(Path(base).joinpath(*parts))

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def list_directories(self, path: str) -> tuple[str, ...]:
        """Return child directories of ``path`` sorted by name."""
        return tuple(str(child) for child in sorted(Path(path).iterdir()) if child.is_dir())

    def list_files(self, path: str) -> tuple[str, ...]:
        """Return regular files directly under ``path`` sorted by name."""
        return tuple(str(child) for child in sorted(Path(path).iterdir()) if child.is_file())

    def open_for_read(self, path: str) -> BinaryIO:
        return open(path, "rb")


class S3StorageClient:
    """Storage client backed by an S3 bucket prefix."""

    def __init__(self, s3_client: Any) -> None:
        """Create a client around a boto3 S3 client.

        Args:
            s3_client: Boto3 S3 client (or compatible test double).
        """
        self._s3 = s3_client

    def join(self, base: str, *parts: str) -> str:
        location = parse_s3_uri(base)
        key = posixpath.join(location.directory_prefix(), *parts)
        return f"s3://{location.bucket}/{key}"

    def exists(self, path: str) -> bool:
        """Return whether ``path`` names an object or a non-empty directory prefix."""
        location = parse_s3_uri(path)
        key = location.prefix.rstrip("/")
        if key and key in self._first_keys(path, location.bucket, key):
            return True
        return bool(self._first_keys(path, location.bucket, location.directory_prefix()))

    def list_directories(self, path: str) -> tuple[str, ...]:
        """Return common prefixes one level below ``path``."""
        location = parse_s3_uri(path)
        prefixes: list[str] = []
        for page in self._list_pages(path, location):
            for common_prefix in page.get("CommonPrefixes", []):
                prefixes.append(common_prefix["Prefix"].rstrip("/"))
        return tuple(f"s3://{location.bucket}/{prefix}" for prefix in sorted(prefixes))

    def list_files(self, path: str) -> tuple[str, ...]:
        """Return object keys directly below ``path``."""
        location = parse_s3_uri(path)
        directory_prefix = location.directory_prefix()
        keys: list[str] = []
        for page in self._list_pages(path, location):
            for obj in page.get("Contents", []):
                if obj["Key"] != directory_prefix:
                    keys.append(obj["Key"])
        return tuple(f"s3://{location.bucket}/{key}" for key in sorted(keys))

    def open_for_read(self, path: str) -> BinaryIO:
        location = parse_s3_uri(path)
        try:
            response = self._s3.get_object(Bucket=location.bucket, Key=location.prefix)
            payload = response["Body"].read()
        except Exception as error:
            raise _as_os_error(error, path) from error
        return io.BytesIO(payload)

    def _first_keys(self, path: str, bucket: str, prefix: str) -> tuple[str, ...]:
        try:
            response = self._s3.list_objects_v2(Bucket=bucket, Prefix=prefix, MaxKeys=1)
        except Exception as error:
            raise _as_os_error(error, path) from error
        return tuple(obj["Key"] for obj in response.get("Contents", []))

    def _list_pages(self, path: str, location: S3Location) -> list[dict[str, Any]]:
        paginator = self._s3.get_paginator("list_objects_v2")
        try:
            return list(
                paginator.paginate(
                    Bucket=location.bucket,
                    Prefix=location.directory_prefix(),
                    Delimiter="/",
                )
            )
        except Exception as error:
            raise _as_os_error(error, path) from error


def create_storage_client(dataset_root: str, config: LakeSampleConfig) -> StorageClient:
    """Pick a storage client for a dataset root.

    Args:
        dataset_root: Local path or ``s3://`` URI.
        config: Runtime config for S3 session defaults.

    Returns:
        Storage client matching the root's addressing scheme.
    """
    if is_s3_uri(dataset_root):
        return S3StorageClient(_create_s3_client(config))
    return LocalStorageClient()


def _create_s3_client(config: LakeSampleConfig) -> Any:
    """Create a boto3 S3 client.

    Args:
        config: Runtime config containing optional profile/region.

    Returns:
        Boto3 S3 client.

    Raises:
        LakeSampleDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise LakeSampleDependencyError(
            "S3 support requires boto3, but it is not installed. "
            "Install boto3 to sample datasets stored under s3:// roots."
        ) from error
    session_kwargs = _build_boto3_session_kwargs(config)
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _build_boto3_session_kwargs(config: LakeSampleConfig) -> dict[str, str]:
    """Build boto3 Session kwargs from config.

    Args:
        config: Runtime config.

    Returns:
        Session keyword arguments.
    """
    kwargs: dict[str, str] = {}
    if config.s3_profile:
        kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        kwargs["region_name"] = config.s3_region
    return kwargs


def _as_os_error(error: Exception, path: str) -> OSError:
    """Map a boto3 or transport failure onto the matching ``OSError``."""
    response = getattr(error, "response", None)
    code = ""
    if isinstance(response, dict):
        code = str(response.get("Error", {}).get("Code", ""))
    if code in _MISSING_KEY_CODES:
        return FileNotFoundError(errno.ENOENT, f"S3 object not found ({code})", path)
    if code in _ACCESS_DENIED_CODES:
        return PermissionError(errno.EACCES, f"S3 access denied ({code})", path)
    return OSError(errno.EIO, f"S3 request failed: {error}", path)
