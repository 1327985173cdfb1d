"""Data entry entity for records stored in a schema's collection.

An entry has a fixed envelope (id and timestamps) around an open-ended mapping
of field name to JSON value. Values are checked against the owning schema at
write time rather than typed statically.
"""

from dataclasses import dataclass, field
from typing import Any

# Envelope keys that live next to the field values in the stored document
ENTRY_ID_KEY = "id"
CREATED_AT_KEY = "createdAt"
UPDATED_AT_KEY = "updatedAt"
ENVELOPE_KEYS = frozenset({ENTRY_ID_KEY, CREATED_AT_KEY, UPDATED_AT_KEY})


@dataclass
class DataEntry:
    """Record entity.

    Attributes:
        id: Identifier unique within the owning collection.
        values: Field name to value mapping.
        created_at: ISO-8601 UTC timestamp, set once on creation.
        updated_at: ISO-8601 UTC timestamp, refreshed on every update.
    """

    id: str
    values: dict[str, Any] = field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Entry ID is required")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {ENTRY_ID_KEY: self.id}
        data.update(self.values)
        if self.created_at is not None:
            data[CREATED_AT_KEY] = self.created_at
        if self.updated_at is not None:
            data[UPDATED_AT_KEY] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DataEntry":
        return cls(
            id=data[ENTRY_ID_KEY],
            values={k: v for k, v in data.items() if k not in ENVELOPE_KEYS},
            created_at=data.get(CREATED_AT_KEY),
            updated_at=data.get(UPDATED_AT_KEY),
        )
