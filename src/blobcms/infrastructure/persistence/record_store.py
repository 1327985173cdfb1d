"""Record store: one collection document per schema name.

Every operation takes the schema *name*, which is what the collection key is
derived from. Schema ids never appear in storage keys.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from blobcms.core.logging import get_logger
from blobcms.domain.entities import (
    CREATED_AT_KEY,
    ENTRY_ID_KEY,
    UPDATED_AT_KEY,
    DataEntry,
)
from blobcms.domain.exceptions import StorageFailureError
from blobcms.domain.services import IdGenerator, utc_timestamp
from blobcms.infrastructure.persistence.document_store import KeyedDocumentStore

logger = get_logger(__name__)

DEFAULT_KEY_PREFIX = "data/"
DEFAULT_KEY_SUFFIX = ".json"


class MigrationState(str, Enum):
    """Progress of a rename migration."""

    PENDING = "pending"
    COPIED = "copied"
    RETIRED = "retired"


@dataclass
class RenameMigration:
    """Copy-then-cutover relocation of a collection to a new schema name.

    ``PENDING``: nothing written yet.
    ``COPIED``: the collection exists under the new key.
    ``RETIRED``: the old key's cache entry is gone; the schema may now be
    committed under the new name.

    The old object is left in the blob store.
    """

    old_name: str
    new_name: str
    old_key: str
    new_key: str
    state: MigrationState = MigrationState.PENDING
    record_count: int = 0

    @property
    def is_complete(self) -> bool:
        return self.state == MigrationState.RETIRED


class RecordStore:
    """CRUD over the collection documents of live schemas."""

    def __init__(
        self,
        documents: KeyedDocumentStore,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        key_suffix: str = DEFAULT_KEY_SUFFIX,
    ) -> None:
        self.documents = documents
        self.key_prefix = key_prefix
        self.key_suffix = key_suffix

    def collection_key(self, name: str) -> str:
        """Storage key of the collection document for a schema name."""
        return f"{self.key_prefix}{name}{self.key_suffix}"

    async def _load(self, name: str) -> list[dict[str, Any]]:
        key = self.collection_key(name)
        document = await self.documents.get(key, [])
        if not isinstance(document, list):
            raise StorageFailureError(key, "read", "collection document is not a list")
        return document

    async def _save(self, name: str, rows: list[dict[str, Any]]) -> None:
        await self.documents.put(self.collection_key(name), rows)

    async def list(self, name: str) -> list[DataEntry]:
        """All entries of a collection in storage order."""
        return [DataEntry.from_dict(row) for row in await self._load(name)]

    async def get(self, name: str, entry_id: str) -> DataEntry | None:
        rows = await self._load(name)
        row = next((r for r in rows if r.get(ENTRY_ID_KEY) == entry_id), None)
        return DataEntry.from_dict(row) if row is not None else None

    async def add(self, name: str, fields: dict[str, Any]) -> DataEntry:
        """Append a new entry with a fresh id and creation timestamps.

        Args:
            name: Schema name.
            fields: Field values. Envelope keys in here are ignored.

        Returns:
            The stored entry.
        """
        rows = await self._load(name)
        entry_id = IdGenerator.generate_unique({r.get(ENTRY_ID_KEY) for r in rows})
        now = utc_timestamp()

        entry = DataEntry(
            id=entry_id,
            values=DataEntry.from_dict({ENTRY_ID_KEY: entry_id, **fields}).values,
            created_at=now,
            updated_at=now,
        )
        rows.append(entry.to_dict())
        await self._save(name, rows)

        logger.info("Entry created", schema_name=name, entry_id=entry_id)
        return entry

    async def update(
        self, name: str, entry_id: str, partial: dict[str, Any]
    ) -> DataEntry | None:
        """Merge ``partial`` over an existing entry.

        ``id`` and ``createdAt`` are kept even if ``partial`` carries other
        values; ``updatedAt`` is refreshed.

        Returns:
            The updated entry, or None if no entry has ``entry_id``.
        """
        rows = await self._load(name)
        index = next(
            (i for i, r in enumerate(rows) if r.get(ENTRY_ID_KEY) == entry_id), None
        )
        if index is None:
            return None

        current = rows[index]
        merged = {**current, **partial}
        merged[ENTRY_ID_KEY] = entry_id
        if CREATED_AT_KEY in current:
            merged[CREATED_AT_KEY] = current[CREATED_AT_KEY]
        else:
            merged.pop(CREATED_AT_KEY, None)
        merged[UPDATED_AT_KEY] = utc_timestamp()

        rows[index] = merged
        await self._save(name, rows)

        logger.info("Entry updated", schema_name=name, entry_id=entry_id)
        return DataEntry.from_dict(merged)

    async def delete(self, name: str, entry_id: str) -> bool:
        """Remove an entry. Returns False if it did not exist."""
        rows = await self._load(name)
        remaining = [r for r in rows if r.get(ENTRY_ID_KEY) != entry_id]
        if len(remaining) == len(rows):
            return False

        await self._save(name, remaining)
        logger.info("Entry deleted", schema_name=name, entry_id=entry_id)
        return True

    async def init_collection(self, name: str) -> None:
        """Write an empty collection for a new schema."""
        await self._save(name, [])
        logger.info("Collection initialized", schema_name=name, key=self.collection_key(name))

    async def drop_collection(self, name: str) -> None:
        """Delete a collection document and its cache entry."""
        key = self.collection_key(name)
        await self.documents.remove(key)
        logger.info("Collection dropped", schema_name=name, key=key)

    async def migrate_collection(self, old_name: str, new_name: str) -> RenameMigration:
        """Relocate a collection from ``old_name`` to ``new_name``.

        Steps, in order: load the collection under the old key, write it under
        the new key, evict the old key from the cache. Any storage failure
        propagates and leaves the migration short of ``RETIRED``.

        Returns:
            The completed migration.
        """
        migration = RenameMigration(
            old_name=old_name,
            new_name=new_name,
            old_key=self.collection_key(old_name),
            new_key=self.collection_key(new_name),
        )

        rows = await self._load(old_name)
        await self._save(new_name, rows)
        migration.record_count = len(rows)
        migration.state = MigrationState.COPIED

        self.documents.evict(migration.old_key)
        migration.state = MigrationState.RETIRED

        logger.info(
            "Collection migrated",
            old_key=migration.old_key,
            new_key=migration.new_key,
            record_count=migration.record_count,
        )
        return migration
