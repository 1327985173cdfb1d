"""Domain entities for BlobCMS.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from blobcms.domain.entities.data_entry import (
    CREATED_AT_KEY,
    ENTRY_ID_KEY,
    ENVELOPE_KEYS,
    UPDATED_AT_KEY,
    DataEntry,
)
from blobcms.domain.entities.field_definition import (
    FieldDefinition,
    FieldType,
    FieldValidation,
)
from blobcms.domain.entities.schema_definition import SchemaDefinition

__all__ = [
    "CREATED_AT_KEY",
    "DataEntry",
    "ENTRY_ID_KEY",
    "ENVELOPE_KEYS",
    "FieldDefinition",
    "FieldType",
    "FieldValidation",
    "SchemaDefinition",
    "UPDATED_AT_KEY",
]
