"""Exceptions raised by the BlobCMS domain and storage layers."""


class BlobCMSError(Exception):
    """Base exception for all BlobCMS errors."""


class NotFoundError(BlobCMSError):
    """Raised when a schema or entry id has no referent."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} '{identifier}' not found")


class ValidationFailedError(BlobCMSError):
    """Raised when one or more fields fail validation.

    Carries every failure at once so callers can highlight all offending
    fields, not just the first.
    """

    def __init__(self, errors: dict[str, str], message: str = "Validation failed") -> None:
        self.errors = dict(errors)
        details = "; ".join(f"{field}: {error}" for field, error in self.errors.items())
        super().__init__(f"{message}: {details}" if details else message)


class NameConflictError(BlobCMSError):
    """Raised when a schema name collides with a live schema."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Schema with name '{name}' already exists")


class StorageFailureError(BlobCMSError):
    """Raised when the blob store is unreachable, returns corrupt content, or rejects a write.

    Always fatal to the current operation. Never retried by the core.
    """

    def __init__(self, key: str, operation: str, message: str) -> None:
        self.key = key
        self.operation = operation
        super().__init__(f"Storage {operation} failed for '{key}': {message}")
