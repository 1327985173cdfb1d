"""Schema definition entity for runtime-defined record shapes.

Schemas are stored together in the registry document. The schema name doubles
as the logical storage key of the schema's collection document.
"""

from dataclasses import dataclass, field
from typing import Any

from blobcms.domain.entities.field_definition import FieldDefinition


@dataclass
class SchemaDefinition:
    """Schema entity.

    Attributes:
        id: Opaque identifier, assigned at creation and never changed.
        name: Identifier-safe name, unique among live schemas.
        display_name: Free-text name shown to operators.
        fields: Ordered field definitions (at least one).
        created_at: ISO-8601 UTC creation timestamp.
        updated_at: ISO-8601 UTC timestamp of the last update.
    """

    id: str
    name: str
    display_name: str
    fields: list[FieldDefinition] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Schema ID is required")
        if not self.name:
            raise ValueError("Schema name is required")

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "fields": [f.to_dict() for f in self.fields],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchemaDefinition":
        return cls(
            id=data["id"],
            name=data["name"],
            display_name=data.get("displayName", data["name"]),
            fields=[FieldDefinition.from_dict(f) for f in data.get("fields", [])],
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )
