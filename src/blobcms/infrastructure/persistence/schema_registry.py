"""Schema registry: the single document listing every live schema.

The registry owns name uniqueness and id issuance, and keeps the
registry-name to collection-key correspondence intact across renames by
migrating the collection before committing the new name.
"""

from typing import Any

from blobcms.core.logging import get_logger
from blobcms.domain.entities import SchemaDefinition
from blobcms.domain.exceptions import (
    NameConflictError,
    StorageFailureError,
    ValidationFailedError,
)
from blobcms.domain.services import (
    IdGenerator,
    utc_timestamp,
    validate_schema_definition,
)
from blobcms.infrastructure.persistence.document_store import KeyedDocumentStore
from blobcms.infrastructure.persistence.record_store import RecordStore

logger = get_logger(__name__)

DEFAULT_REGISTRY_KEY = "cms-schemas.json"

# Keys a caller may change through update()
MUTABLE_KEYS = ("name", "displayName", "fields")


class SchemaRegistry:
    """Registry of schema definitions backed by one document."""

    def __init__(
        self,
        documents: KeyedDocumentStore,
        records: RecordStore,
        registry_key: str = DEFAULT_REGISTRY_KEY,
    ) -> None:
        self.documents = documents
        self.records = records
        self.registry_key = registry_key

    async def _load(self) -> list[dict[str, Any]]:
        document = await self.documents.get(self.registry_key, [])
        if not isinstance(document, list):
            raise StorageFailureError(self.registry_key, "read", "registry document is not a list")
        return document

    async def _save(self, rows: list[dict[str, Any]]) -> None:
        await self.documents.put(self.registry_key, rows)

    @staticmethod
    def _check_definition(data: dict[str, Any]) -> None:
        errors = validate_schema_definition(data)
        if errors:
            raise ValidationFailedError(errors, message="Invalid schema")

    async def list(self) -> list[SchemaDefinition]:
        """All live schemas in storage order."""
        return [SchemaDefinition.from_dict(row) for row in await self._load()]

    async def get(self, schema_id: str) -> SchemaDefinition | None:
        rows = await self._load()
        row = next((r for r in rows if r.get("id") == schema_id), None)
        return SchemaDefinition.from_dict(row) if row is not None else None

    async def get_by_name(self, name: str) -> SchemaDefinition | None:
        rows = await self._load()
        row = next((r for r in rows if r.get("name") == name), None)
        return SchemaDefinition.from_dict(row) if row is not None else None

    async def create(self, data: dict[str, Any]) -> SchemaDefinition:
        """Create a schema and its empty collection.

        Args:
            data: Definition with ``name``, ``displayName`` and ``fields``.

        Returns:
            The created schema.

        Raises:
            ValidationFailedError: If the definition is structurally invalid.
            NameConflictError: If a live schema already uses the name.
        """
        self._check_definition(data)

        rows = await self._load()
        name = data["name"]
        if any(r.get("name") == name for r in rows):
            raise NameConflictError(name)

        now = utc_timestamp()
        schema = SchemaDefinition.from_dict(
            {
                "id": IdGenerator.generate_unique({r.get("id") for r in rows}),
                "name": name,
                "displayName": data["displayName"],
                "fields": data["fields"],
                "createdAt": now,
                "updatedAt": now,
            }
        )
        rows.append(schema.to_dict())
        await self._save(rows)
        await self.records.init_collection(name)

        logger.info("Schema created", schema_id=schema.id, schema_name=name)
        return schema

    async def update(self, schema_id: str, partial: dict[str, Any]) -> SchemaDefinition | None:
        """Update a schema, migrating its collection if the name changes.

        ``id`` and ``createdAt`` cannot be changed; ``updatedAt`` is refreshed.

        Returns:
            The updated schema, or None if no schema has ``schema_id``.

        Raises:
            ValidationFailedError: If the merged definition is invalid.
            NameConflictError: If the new name belongs to another live schema.
        """
        rows = await self._load()
        index = next((i for i, r in enumerate(rows) if r.get("id") == schema_id), None)
        if index is None:
            return None

        current = rows[index]
        merged = {
            **current,
            **{key: partial[key] for key in MUTABLE_KEYS if key in partial},
        }
        self._check_definition(merged)

        old_name = current["name"]
        new_name = merged["name"]
        if new_name != old_name:
            if any(r.get("name") == new_name and r.get("id") != schema_id for r in rows):
                raise NameConflictError(new_name)

            migration = await self.records.migrate_collection(old_name, new_name)
            if not migration.is_complete:
                raise StorageFailureError(
                    migration.new_key, "migrate", f"migration stopped in state '{migration.state.value}'"
                )

        merged["updatedAt"] = utc_timestamp()
        schema = SchemaDefinition.from_dict(merged)
        rows[index] = schema.to_dict()
        await self._save(rows)

        logger.info(
            "Schema updated",
            schema_id=schema_id,
            schema_name=new_name,
            renamed_from=old_name if new_name != old_name else None,
        )
        return schema

    async def delete(self, schema_id: str) -> bool:
        """Remove a schema and drop its collection.

        The registry is committed first; a failure while dropping the
        collection leaves orphaned data, never a schema without a collection.

        Returns:
            False if no schema has ``schema_id``.
        """
        rows = await self._load()
        target = next((r for r in rows if r.get("id") == schema_id), None)
        if target is None:
            return False

        await self._save([r for r in rows if r.get("id") != schema_id])
        await self.records.drop_collection(target["name"])

        logger.info("Schema deleted", schema_id=schema_id, schema_name=target["name"])
        return True
