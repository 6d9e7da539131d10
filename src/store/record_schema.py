"""Record schema descriptors.

This module parses Avro-style JSON record schemas into a small typed
descriptor. The reader uses it to locate the record key and to project
merged payloads onto the declared fields.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from core.constants import DEFAULT_RECORD_KEY_FIELD, METADATA_FIELDS
from core.errors import SchemaError


@dataclass(frozen=True)
class SchemaField:
    """One declared record field."""

    name: str
    default: Any = None


@dataclass(frozen=True)
class RecordSchema:
    """Record schema descriptor.

    Attributes:
        name: Record type name.
        fields: Declared fields in schema order.
        key_field: Field holding the record key.
    """

    name: str
    fields: tuple[SchemaField, ...]
    key_field: str = DEFAULT_RECORD_KEY_FIELD

    def __post_init__(self) -> None:
        field_names = self.field_names()
        if self.key_field not in field_names:
            raise SchemaError(
                f"Record schema '{self.name}' does not declare key field '{self.key_field}'. "
                f"Declared fields: {', '.join(field_names) or '<none>'}."
            )
        reserved = sorted(set(field_names) & set(METADATA_FIELDS))
        if reserved:
            raise SchemaError(
                f"Record schema '{self.name}' declares reserved metadata fields: "
                f"{', '.join(reserved)}. Rename them before sampling."
            )

    @classmethod
    def from_avro_json(cls, text: str, key_field: str = DEFAULT_RECORD_KEY_FIELD) -> "RecordSchema":
        """Parse an Avro record schema document.

        Args:
            text: JSON text of an Avro ``record`` schema.
            key_field: Field holding the record key.

        Returns:
            Parsed schema descriptor.

        Raises:
            SchemaError: If the document is not a valid record schema.
        """
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as error:
            raise SchemaError(
                f"Failed to parse record schema: {error.msg}. Provide valid Avro JSON."
            ) from error
        if not isinstance(payload, dict) or payload.get("type") != "record":
            raise SchemaError("Record schema must be a JSON object with \"type\": \"record\".")
        raw_fields = payload.get("fields")
        if not isinstance(raw_fields, list) or not raw_fields:
            raise SchemaError("Record schema must declare a non-empty 'fields' list.")
        fields = tuple(_parse_field(raw_field, index) for index, raw_field in enumerate(raw_fields))
        return cls(name=str(payload.get("name", "record")), fields=fields, key_field=key_field)

    def field_names(self) -> tuple[str, ...]:
        return tuple(schema_field.name for schema_field in self.fields)

    def project(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Project a decoded record onto declared fields, filling defaults."""
        return {
            schema_field.name: record.get(schema_field.name, schema_field.default)
            for schema_field in self.fields
        }


def load_record_schema(schema_path: str, key_field: str = DEFAULT_RECORD_KEY_FIELD) -> RecordSchema:
    """Load a record schema from a local ``.avsc`` file.

    Args:
        schema_path: Path to an Avro JSON schema file.
        key_field: Field holding the record key.

    Returns:
        Parsed schema descriptor.

    Raises:
        SchemaError: If the file is missing or invalid.
    """
    schema_file = Path(schema_path).expanduser()
    if not schema_file.exists():
        raise SchemaError(
            f"Record schema file not found at {schema_file}. Provide an existing .avsc file."
        )
    return RecordSchema.from_avro_json(schema_file.read_text(encoding="utf-8"), key_field)


def _parse_field(raw_field: object, index: int) -> SchemaField:
    if not isinstance(raw_field, dict) or not isinstance(raw_field.get("name"), str):
        raise SchemaError(f"Record schema field #{index + 1} must be an object with a 'name'.")
    return SchemaField(name=raw_field["name"], default=raw_field.get("default"))
