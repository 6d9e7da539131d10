"""In-memory stand-in for the boto3 S3 client calls used by the reader."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class S3ClientError(Exception):
    """Mimics botocore's ClientError, which carries the S3 error code."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.response = {"Error": {"Code": code}}


class _Body:
    def __init__(self, payload: bytes) -> None:
        self._payload = payload

    def read(self) -> bytes:
        return self._payload


class _Paginator:
    def __init__(self, objects: dict[str, bytes]) -> None:
        self._objects = objects

    def paginate(self, Bucket: str, Prefix: str, Delimiter: str) -> list[dict[str, Any]]:
        contents = []
        prefixes = set()
        for key in sorted(self._objects):
            if not key.startswith(Prefix):
                continue
            remainder = key[len(Prefix) :]
            if Delimiter in remainder:
                prefixes.add(Prefix + remainder.split(Delimiter, 1)[0] + Delimiter)
            else:
                contents.append({"Key": key})
        return [
            {"Contents": contents},
            {"CommonPrefixes": [{"Prefix": prefix} for prefix in sorted(prefixes)]},
        ]


class InMemoryS3:
    """Single-bucket object store keyed by object key."""

    def __init__(
        self,
        objects: dict[str, bytes] | None = None,
        denied_substrings: tuple[str, ...] = (),
    ) -> None:
        self.objects = dict(objects or {})
        self.denied_substrings = denied_substrings

    @classmethod
    def from_directory(
        cls,
        directory: Path,
        prefix: str,
        denied_substrings: tuple[str, ...] = (),
    ) -> "InMemoryS3":
        """Upload every file under ``directory`` below ``prefix``.

        Reads of keys containing any of ``denied_substrings`` fail with AccessDenied.
        """
        objects = {
            f"{prefix}/{path.relative_to(directory).as_posix()}": path.read_bytes()
            for path in directory.rglob("*")
            if path.is_file()
        }
        return cls(objects, denied_substrings)

    def get_paginator(self, operation_name: str) -> _Paginator:
        assert operation_name == "list_objects_v2"
        return _Paginator(self.objects)

    def list_objects_v2(self, Bucket: str, Prefix: str, MaxKeys: int) -> dict[str, Any]:
        matches = [key for key in sorted(self.objects) if key.startswith(Prefix)][:MaxKeys]
        return {"KeyCount": len(matches), "Contents": [{"Key": key} for key in matches]}

    def get_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        if any(part in Key for part in self.denied_substrings):
            raise S3ClientError("AccessDenied")
        if Key not in self.objects:
            raise S3ClientError("NoSuchKey")
        return {"Body": _Body(self.objects[Key])}
