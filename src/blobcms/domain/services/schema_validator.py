"""Schema validation service for schema definitions.

Provides validation for schema names, display names, and field configurations
before a schema definition is written to the registry.
"""

import re
from dataclasses import dataclass
from typing import Any

from blobcms.domain.entities import ENVELOPE_KEYS, FieldType

# Pattern for valid schema and field names
NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Field names reserved for the entry envelope
RESERVED_FIELD_NAMES = ENVELOPE_KEYS


@dataclass
class SchemaValidationError:
    """A single schema validation error."""

    field: str
    message: str
    code: str


class SchemaValidator:
    """Validator for schema definitions.

    Validates the schema name, display name, and individual field configurations.
    Field errors are keyed by their position, e.g. ``fields[2].name``.
    """

    MAX_NAME_LENGTH = 64

    @classmethod
    def validate_name(cls, name: Any) -> list[SchemaValidationError]:
        """Validate a schema name.

        Args:
            name: The schema name to validate.

        Returns:
            List of validation errors (empty if valid).
        """
        if not name or not isinstance(name, str):
            return [
                SchemaValidationError(
                    field="name",
                    message="Schema name is required",
                    code="name_required",
                )
            ]

        errors = []
        if len(name) > cls.MAX_NAME_LENGTH:
            errors.append(
                SchemaValidationError(
                    field="name",
                    message=f"Schema name must be at most {cls.MAX_NAME_LENGTH} characters",
                    code="name_too_long",
                )
            )
        if not NAME_PATTERN.fullmatch(name):
            errors.append(
                SchemaValidationError(
                    field="name",
                    message="Schema name must be a valid identifier",
                    code="name_invalid_format",
                )
            )
        return errors

    @classmethod
    def validate_display_name(cls, display_name: Any) -> list[SchemaValidationError]:
        if not isinstance(display_name, str) or not display_name.strip():
            return [
                SchemaValidationError(
                    field="displayName",
                    message="Display name is required",
                    code="display_name_required",
                )
            ]
        return []

    @classmethod
    def validate_field_rules(
        cls, field_type: str, rules: Any, field_index: int
    ) -> list[SchemaValidationError]:
        """Validate the optional ``validation`` block of a field.

        Args:
            field_type: The declared field type.
            rules: The raw validation block (or None).
            field_index: Index of the field in the schema (for error paths).

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []
        path = f"fields[{field_index}].validation"

        if rules is None:
            rules = {}
        if not isinstance(rules, dict):
            return [
                SchemaValidationError(
                    field=path,
                    message="Validation rules must be an object",
                    code="validation_invalid",
                )
            ]

        bounds = {}
        for key in ("min", "max"):
            bound = rules.get(key)
            if bound is None:
                continue
            if isinstance(bound, bool) or not isinstance(bound, (int, float)):
                errors.append(
                    SchemaValidationError(
                        field=f"{path}.{key}",
                        message=f"'{key}' must be a number",
                        code="bound_invalid",
                    )
                )
            else:
                bounds[key] = bound
        if "min" in bounds and "max" in bounds and bounds["min"] > bounds["max"]:
            errors.append(
                SchemaValidationError(
                    field=f"{path}.min",
                    message="'min' must not be greater than 'max'",
                    code="bounds_inverted",
                )
            )

        pattern = rules.get("pattern")
        if pattern is not None:
            try:
                re.compile(pattern)
            except (re.error, TypeError):
                errors.append(
                    SchemaValidationError(
                        field=f"{path}.pattern",
                        message="Pattern must be a valid regular expression",
                        code="pattern_invalid",
                    )
                )

        options = rules.get("options")
        if options is not None and (
            not isinstance(options, list) or not all(isinstance(o, str) for o in options)
        ):
            errors.append(
                SchemaValidationError(
                    field=f"{path}.options",
                    message="Options must be a list of strings",
                    code="options_invalid",
                )
            )
        elif field_type == FieldType.SELECT.value:
            if not options:
                errors.append(
                    SchemaValidationError(
                        field=f"{path}.options",
                        message="Select fields require at least one option",
                        code="options_required",
                    )
                )
            elif len(set(options)) != len(options):
                errors.append(
                    SchemaValidationError(
                        field=f"{path}.options",
                        message="Options must be unique",
                        code="options_duplicate",
                    )
                )

        return errors

    @classmethod
    def validate_field(cls, field: Any, field_index: int) -> list[SchemaValidationError]:
        """Validate a single field definition.

        Args:
            field: The raw field definition.
            field_index: Index of the field in the schema (for error paths).

        Returns:
            List of validation errors (empty if valid).
        """
        path = f"fields[{field_index}]"
        if not isinstance(field, dict):
            return [
                SchemaValidationError(
                    field=path,
                    message="Field definition must be an object",
                    code="field_invalid",
                )
            ]

        errors = []

        name = field.get("name")
        if not name or not isinstance(name, str):
            errors.append(
                SchemaValidationError(
                    field=f"{path}.name",
                    message="Field name is required",
                    code="field_name_required",
                )
            )
        elif not NAME_PATTERN.fullmatch(name):
            errors.append(
                SchemaValidationError(
                    field=f"{path}.name",
                    message="Field name must be a valid identifier",
                    code="field_name_invalid_format",
                )
            )
        elif name in RESERVED_FIELD_NAMES:
            errors.append(
                SchemaValidationError(
                    field=f"{path}.name",
                    message=f"Field name '{name}' is reserved and cannot be used",
                    code="field_name_reserved",
                )
            )

        label = field.get("label")
        if not isinstance(label, str) or not label.strip():
            errors.append(
                SchemaValidationError(
                    field=f"{path}.label",
                    message="Field label is required",
                    code="field_label_required",
                )
            )

        field_type = field.get("type")
        valid_types = [t.value for t in FieldType]
        if field_type not in valid_types:
            errors.append(
                SchemaValidationError(
                    field=f"{path}.type",
                    message=f"Invalid field type '{field_type}'. Valid types: {', '.join(valid_types)}",
                    code="field_type_invalid",
                )
            )

        required = field.get("required", False)
        if not isinstance(required, bool):
            errors.append(
                SchemaValidationError(
                    field=f"{path}.required",
                    message="'required' must be true or false",
                    code="field_required_invalid",
                )
            )

        errors.extend(cls.validate_field_rules(field_type, field.get("validation"), field_index))
        return errors

    @classmethod
    def validate_fields(cls, fields: Any) -> list[SchemaValidationError]:
        """Validate the field list of a schema."""
        if not isinstance(fields, list) or not fields:
            return [
                SchemaValidationError(
                    field="fields",
                    message="At least one field is required",
                    code="fields_empty",
                )
            ]

        errors = []
        seen_names: set[str] = set()
        for i, field in enumerate(fields):
            errors.extend(cls.validate_field(field, i))

            name = field.get("name") if isinstance(field, dict) else None
            if isinstance(name, str) and name:
                if name in seen_names:
                    errors.append(
                        SchemaValidationError(
                            field=f"fields[{i}].name",
                            message=f"Duplicate field name '{name}'",
                            code="field_name_duplicate",
                        )
                    )
                seen_names.add(name)
        return errors

    @classmethod
    def validate(cls, data: dict[str, Any]) -> list[SchemaValidationError]:
        """Validate a complete schema definition input.

        Args:
            data: Raw definition with ``name``, ``displayName`` and ``fields``.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []
        errors.extend(cls.validate_name(data.get("name")))
        errors.extend(cls.validate_display_name(data.get("displayName")))
        errors.extend(cls.validate_fields(data.get("fields")))
        return errors


def validate_schema_definition(data: dict[str, Any]) -> dict[str, str]:
    """Validate a schema definition and return a path to message mapping.

    The first error per path wins.
    """
    errors: dict[str, str] = {}
    for error in SchemaValidator.validate(data):
        errors.setdefault(error.field, error.message)
    return errors
