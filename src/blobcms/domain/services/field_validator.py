"""Field validation engine for record values.

Checks a single value against its field definition, a whole record against a
schema, and supplies default values used to pre-populate new records.
Supports field types: text, textarea, number, boolean, date, email, url, select.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Callable
from urllib.parse import urlsplit

from blobcms.domain.entities import FieldDefinition, FieldType, SchemaDefinition

# Simple local@domain.tld shape
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# RFC 3986 scheme
URL_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


def is_empty(value: Any) -> bool:
    """Return True for values treated as "not provided"."""
    return value is None or (isinstance(value, str) and value == "")


def coerce_number(value: Any) -> int | float | None:
    """Coerce a number or numeric string into a finite number.

    Returns:
        The number, or None if the value is not a finite number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        # int() and float() accept digit separators
        if "_" in text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
    else:
        return None

    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


class FieldValidator:
    """Validator for field values against field definitions.

    Every check returns a human readable message or None when the value is
    acceptable. Messages start with the field label.
    """

    @classmethod
    def validate_text(cls, value: Any, field: FieldDefinition) -> str | None:
        """Validate a text or textarea value."""
        if not isinstance(value, str):
            return f"{field.label} must be text"

        rules = field.validation
        if rules is None:
            return None

        if rules.min is not None and len(value) < rules.min:
            return f"{field.label} must be at least {_format_bound(rules.min)} characters"
        if rules.max is not None and len(value) > rules.max:
            return f"{field.label} must be no more than {_format_bound(rules.max)} characters"
        if rules.pattern:
            try:
                matched = re.search(rules.pattern, value) is not None
            except re.error:
                matched = False
            if not matched:
                return f"{field.label} format is invalid"
        return None

    @classmethod
    def validate_number(cls, value: Any, field: FieldDefinition) -> str | None:
        """Validate a number value. Numeric strings are accepted."""
        number = coerce_number(value)
        if number is None:
            return f"{field.label} must be a number"

        rules = field.validation
        if rules is None:
            return None

        if rules.min is not None and number < rules.min:
            return f"{field.label} must be at least {_format_bound(rules.min)}"
        if rules.max is not None and number > rules.max:
            return f"{field.label} must be no more than {_format_bound(rules.max)}"
        return None

    @classmethod
    def validate_boolean(cls, value: Any, field: FieldDefinition) -> str | None:
        if not isinstance(value, bool):
            return f"{field.label} must be true or false"
        return None

    @classmethod
    def validate_date(cls, value: Any, field: FieldDefinition) -> str | None:
        """Validate a date value.

        Only ISO 8601 date or datetime strings are accepted.
        """
        if isinstance(value, str):
            text = value.strip()
            try:
                date.fromisoformat(text)
                return None
            except ValueError:
                pass
            try:
                datetime.fromisoformat(text.replace("Z", "+00:00"))
                return None
            except ValueError:
                pass
        return f"{field.label} must be a valid date"

    @classmethod
    def validate_email(cls, value: Any, field: FieldDefinition) -> str | None:
        if not isinstance(value, str) or not EMAIL_PATTERN.fullmatch(value):
            return f"{field.label} must be a valid email address"
        return None

    @classmethod
    def validate_url(cls, value: Any, field: FieldDefinition) -> str | None:
        """Validate an absolute URL (scheme plus host or path)."""
        message = f"{field.label} must be a valid URL"
        if not isinstance(value, str) or any(ch.isspace() for ch in value):
            return message
        try:
            parts = urlsplit(value)
        except ValueError:
            return message
        if not parts.scheme or not URL_SCHEME_PATTERN.fullmatch(parts.scheme):
            return message
        if not (parts.netloc or parts.path):
            return message
        return None

    @classmethod
    def validate_select(cls, value: Any, field: FieldDefinition) -> str | None:
        if value not in field.options:
            return f"{field.label} must be one of the available options"
        return None

    @classmethod
    def validate_field_value(cls, value: Any, field: FieldDefinition) -> str | None:
        """Validate a single value against its field definition.

        Empty values (None, missing, empty string) fail only when the field is
        required; otherwise they pass without further checks.

        Args:
            value: The value to validate.
            field: The field definition.

        Returns:
            An error message if invalid, None if valid.
        """
        if is_empty(value):
            return f"{field.label} is required" if field.required else None

        validators: dict[FieldType, Callable[[Any, FieldDefinition], str | None]] = {
            FieldType.TEXT: cls.validate_text,
            FieldType.TEXTAREA: cls.validate_text,
            FieldType.NUMBER: cls.validate_number,
            FieldType.BOOLEAN: cls.validate_boolean,
            FieldType.DATE: cls.validate_date,
            FieldType.EMAIL: cls.validate_email,
            FieldType.URL: cls.validate_url,
            FieldType.SELECT: cls.validate_select,
        }
        return validators[field.type](value, field)

    @classmethod
    def validate_record(
        cls, record: dict[str, Any], schema: SchemaDefinition
    ) -> dict[str, str]:
        """Validate every schema field against the record.

        Keys in the record that the schema does not declare are ignored.

        Args:
            record: Field name to value mapping.
            schema: The owning schema.

        Returns:
            Mapping of field name to error message. Empty if the record is acceptable.
        """
        errors: dict[str, str] = {}
        for field in schema.fields:
            error = cls.validate_field_value(record.get(field.name), field)
            if error:
                errors[field.name] = error
        return errors

    @classmethod
    def default_value_for(cls, field: FieldDefinition) -> Any:
        """Default value used to pre-populate a new record.

        Deterministic for every type except date, which uses today's date.
        """
        if field.type in (FieldType.TEXT, FieldType.TEXTAREA, FieldType.EMAIL, FieldType.URL):
            return ""
        if field.type == FieldType.NUMBER:
            return 0
        if field.type == FieldType.BOOLEAN:
            return False
        if field.type == FieldType.DATE:
            return date.today().isoformat()
        if field.type == FieldType.SELECT:
            options = field.options
            return options[0] if options else ""
        return ""

    @classmethod
    def build_entry_template(cls, schema: SchemaDefinition) -> dict[str, Any]:
        """Default values for every field of a schema, in field order."""
        return {field.name: cls.default_value_for(field) for field in schema.fields}

    @classmethod
    def normalize_record(
        cls, record: dict[str, Any], schema: SchemaDefinition
    ) -> dict[str, Any]:
        """Return a copy of a validated record with numeric strings stored as numbers."""
        normalized = dict(record)
        for field in schema.fields:
            if field.type != FieldType.NUMBER:
                continue
            value = normalized.get(field.name)
            if isinstance(value, str) and not is_empty(value):
                number = coerce_number(value)
                if number is not None:
                    normalized[field.name] = number
        return normalized


def _format_bound(bound: float) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


# Module-level aliases for callers that prefer plain functions
validate_field_value = FieldValidator.validate_field_value
validate_record = FieldValidator.validate_record
default_value_for = FieldValidator.default_value_for
build_entry_template = FieldValidator.build_entry_template
