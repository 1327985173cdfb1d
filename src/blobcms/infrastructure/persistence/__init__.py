"""Persistence layer: keyed documents, schema registry and record collections."""

from blobcms.infrastructure.persistence.document_store import KeyedDocumentStore
from blobcms.infrastructure.persistence.record_store import (
    MigrationState,
    RecordStore,
    RenameMigration,
)
from blobcms.infrastructure.persistence.schema_registry import SchemaRegistry

__all__ = [
    "KeyedDocumentStore",
    "MigrationState",
    "RecordStore",
    "RenameMigration",
    "SchemaRegistry",
]
