"""Content service: the CRUD contract consumed by outer layers.

Composes the schema registry, record store and validation engine. Caller
correctable failures (not found, validation, name conflict) come back as an
``OperationResult``; ``StorageFailureError`` is never converted and always
propagates to the caller.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from blobcms.core.config import Settings
from blobcms.core.logging import get_logger
from blobcms.domain.entities import ENVELOPE_KEYS, DataEntry, SchemaDefinition
from blobcms.domain.exceptions import NameConflictError, NotFoundError, ValidationFailedError
from blobcms.domain.services import FieldValidator
from blobcms.infrastructure.persistence import (
    KeyedDocumentStore,
    RecordStore,
    SchemaRegistry,
)
from blobcms.infrastructure.storage import DocumentStorageAdapter, build_storage_adapter

logger = get_logger(__name__)


class OutcomeStatus(str, Enum):
    """Kinds of operation outcome."""

    OK = "ok"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    NAME_CONFLICT = "name_conflict"


@dataclass
class OperationResult:
    """Structured outcome of a content operation.

    Attributes:
        status: Outcome kind.
        value: Payload on success (schema, entry, list, template or bool).
        message: Human readable summary on failure.
        errors: Field or path to message mapping for validation failures.
    """

    status: OutcomeStatus
    value: Any = None
    message: str | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.OK

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(status=OutcomeStatus.OK, value=value)

    @classmethod
    def not_found(cls, kind: str, identifier: str) -> "OperationResult":
        return cls(status=OutcomeStatus.NOT_FOUND, message=str(NotFoundError(kind, identifier)))

    @classmethod
    def validation_failed(cls, errors: dict[str, str], message: str = "Validation failed") -> "OperationResult":
        return cls(status=OutcomeStatus.VALIDATION_FAILED, message=message, errors=dict(errors))

    @classmethod
    def name_conflict(cls, name: str) -> "OperationResult":
        return cls(status=OutcomeStatus.NAME_CONFLICT, message=str(NameConflictError(name)))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value}
        if self.ok:
            data["value"] = _to_plain(self.value)
        else:
            data["message"] = self.message
            if self.errors:
                data["errors"] = self.errors
        return data


def _to_plain(value: Any) -> Any:
    if isinstance(value, (SchemaDefinition, DataEntry)):
        return value.to_dict()
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    return value


class ContentService:
    """Schema and entry CRUD with validation and structured outcomes."""

    def __init__(self, registry: SchemaRegistry, records: RecordStore) -> None:
        self.registry = registry
        self.records = records

    @classmethod
    def from_adapter(
        cls, adapter: DocumentStorageAdapter, settings: Settings | None = None
    ) -> "ContentService":
        """Wire the full stack on top of one adapter and a shared document cache."""
        documents = KeyedDocumentStore(adapter)
        if settings is None:
            records = RecordStore(documents)
            registry = SchemaRegistry(documents, records)
        else:
            records = RecordStore(
                documents,
                key_prefix=settings.collection_key_prefix,
                key_suffix=settings.collection_key_suffix,
            )
            registry = SchemaRegistry(documents, records, registry_key=settings.registry_key)
        return cls(registry, records)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentService":
        return cls.from_adapter(build_storage_adapter(settings), settings)

    # Schemas

    async def list_schemas(self) -> OperationResult:
        return OperationResult.success(await self.registry.list())

    async def get_schema(self, schema_id: str) -> OperationResult:
        schema = await self.registry.get(schema_id)
        if schema is None:
            return OperationResult.not_found("schema", schema_id)
        return OperationResult.success(schema)

    async def create_schema(self, data: dict[str, Any]) -> OperationResult:
        try:
            schema = await self.registry.create(data)
        except ValidationFailedError as e:
            return OperationResult.validation_failed(e.errors, message="Invalid schema")
        except NameConflictError as e:
            return OperationResult.name_conflict(e.name)
        return OperationResult.success(schema)

    async def update_schema(self, schema_id: str, data: dict[str, Any]) -> OperationResult:
        try:
            schema = await self.registry.update(schema_id, data)
        except ValidationFailedError as e:
            return OperationResult.validation_failed(e.errors, message="Invalid schema")
        except NameConflictError as e:
            return OperationResult.name_conflict(e.name)
        if schema is None:
            return OperationResult.not_found("schema", schema_id)
        return OperationResult.success(schema)

    async def delete_schema(self, schema_id: str) -> OperationResult:
        if not await self.registry.delete(schema_id):
            return OperationResult.not_found("schema", schema_id)
        return OperationResult.success(True)

    # Entries

    async def list_entries(
        self, schema_id: str, filters: dict[str, Any] | None = None
    ) -> OperationResult:
        """List a schema's entries, optionally keeping only exact field matches."""
        schema = await self.registry.get(schema_id)
        if schema is None:
            return OperationResult.not_found("schema", schema_id)

        entries = await self.records.list(schema.name)
        if filters:
            entries = [
                entry
                for entry in entries
                if all(entry.to_dict().get(k) == v for k, v in filters.items())
            ]
        return OperationResult.success(entries)

    async def get_entry(self, schema_id: str, entry_id: str) -> OperationResult:
        schema = await self.registry.get(schema_id)
        if schema is None:
            return OperationResult.not_found("schema", schema_id)

        entry = await self.records.get(schema.name, entry_id)
        if entry is None:
            return OperationResult.not_found("entry", entry_id)
        return OperationResult.success(entry)

    async def new_entry_template(self, schema_id: str) -> OperationResult:
        """Default values used to pre-populate a new entry."""
        schema = await self.registry.get(schema_id)
        if schema is None:
            return OperationResult.not_found("schema", schema_id)
        return OperationResult.success(FieldValidator.build_entry_template(schema))

    async def create_entry(self, schema_id: str, data: dict[str, Any]) -> OperationResult:
        """Validate and add an entry.

        Only keys declared by the schema are stored.
        """
        schema = await self.registry.get(schema_id)
        if schema is None:
            return OperationResult.not_found("schema", schema_id)

        values = self._declared_values(data, schema)
        errors = FieldValidator.validate_record(values, schema)
        if errors:
            logger.info("Entry rejected", schema_id=schema_id, error_fields=sorted(errors))
            return OperationResult.validation_failed(errors)

        entry = await self.records.add(
            schema.name, FieldValidator.normalize_record(values, schema)
        )
        return OperationResult.success(entry)

    async def update_entry(
        self, schema_id: str, entry_id: str, data: dict[str, Any]
    ) -> OperationResult:
        """Validate the entry as it would look after the update, then apply it."""
        schema = await self.registry.get(schema_id)
        if schema is None:
            return OperationResult.not_found("schema", schema_id)

        existing = await self.records.get(schema.name, entry_id)
        if existing is None:
            return OperationResult.not_found("entry", entry_id)

        changes = self._declared_values(data, schema)
        errors = FieldValidator.validate_record({**existing.values, **changes}, schema)
        if errors:
            logger.info(
                "Entry update rejected",
                schema_id=schema_id,
                entry_id=entry_id,
                error_fields=sorted(errors),
            )
            return OperationResult.validation_failed(errors)

        entry = await self.records.update(
            schema.name, entry_id, FieldValidator.normalize_record(changes, schema)
        )
        if entry is None:
            return OperationResult.not_found("entry", entry_id)
        return OperationResult.success(entry)

    async def delete_entry(self, schema_id: str, entry_id: str) -> OperationResult:
        schema = await self.registry.get(schema_id)
        if schema is None:
            return OperationResult.not_found("schema", schema_id)

        if not await self.records.delete(schema.name, entry_id):
            return OperationResult.not_found("entry", entry_id)
        return OperationResult.success(True)

    @staticmethod
    def _declared_values(data: dict[str, Any], schema: SchemaDefinition) -> dict[str, Any]:
        declared = set(schema.field_names)
        return {k: v for k, v in data.items() if k in declared and k not in ENVELOPE_KEYS}
