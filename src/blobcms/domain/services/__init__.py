"""Domain services for BlobCMS.

Services contain business logic that doesn't naturally fit within a single entity.
They have no dependencies on infrastructure or external frameworks.
"""

from blobcms.domain.services.field_validator import (
    FieldValidator,
    build_entry_template,
    coerce_number,
    default_value_for,
    validate_field_value,
    validate_record,
)
from blobcms.domain.services.id_generator import IdGenerator, utc_timestamp
from blobcms.domain.services.schema_validator import (
    RESERVED_FIELD_NAMES,
    SchemaValidationError,
    SchemaValidator,
    validate_schema_definition,
)

__all__ = [
    "FieldValidator",
    "IdGenerator",
    "RESERVED_FIELD_NAMES",
    "SchemaValidationError",
    "SchemaValidator",
    "build_entry_template",
    "coerce_number",
    "default_value_for",
    "utc_timestamp",
    "validate_field_value",
    "validate_record",
    "validate_schema_definition",
]
