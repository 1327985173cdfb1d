"""Field definition entity for schema fields.

A field definition describes one named, typed slot of a record together with
the rules its values must satisfy.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Supported field types for schemas."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    EMAIL = "email"
    URL = "url"
    SELECT = "select"


@dataclass
class FieldValidation:
    """Optional constraints attached to a field.

    Attributes:
        min: Length bound for text fields, value bound for number fields.
        max: Length bound for text fields, value bound for number fields.
        pattern: Regular expression text values must match.
        options: Allowed values for select fields, in display order.
    """

    min: float | None = None
    max: float | None = None
    pattern: str | None = None
    options: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("min", self.min),
                ("max", self.max),
                ("pattern", self.pattern),
                ("options", list(self.options) if self.options is not None else None),
            )
            if value is not None
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldValidation":
        options = data.get("options")
        return cls(
            min=data.get("min"),
            max=data.get("max"),
            pattern=data.get("pattern"),
            options=list(options) if options is not None else None,
        )


@dataclass
class FieldDefinition:
    """Field definition entity.

    Attributes:
        name: Identifier-safe key under which the value is stored.
        label: Display label, also used in validation messages.
        type: The field type.
        required: Whether an empty value is rejected.
        validation: Optional extra constraints.
    """

    name: str
    label: str
    type: FieldType
    required: bool = False
    validation: FieldValidation | None = field(default=None)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Field name is required")
        if not isinstance(self.type, FieldType):
            self.type = FieldType(self.type)

    @property
    def options(self) -> list[str]:
        """Declared select options, empty when none are set."""
        if self.validation is None or not self.validation.options:
            return []
        return list(self.validation.options)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.type.value,
            "required": self.required,
        }
        if self.validation is not None:
            data["validation"] = self.validation.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldDefinition":
        validation = data.get("validation")
        return cls(
            name=data["name"],
            label=data.get("label") or data["name"],
            type=FieldType(data["type"]),
            required=bool(data.get("required", False)),
            validation=FieldValidation.from_dict(validation) if validation else None,
        )
