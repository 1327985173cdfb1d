"""Base abstractions for document storage adapters."""

import json
from abc import ABC, abstractmethod
from typing import Any, TypeAlias

from blobcms.domain.exceptions import StorageFailureError

# A JSON document: whatever json.loads can return at top level
Document: TypeAlias = Any

JSON_CONTENT_TYPE = "application/json"


class DocumentStorageAdapter(ABC):
    """Abstract base class for document storage adapters.

    An adapter stores exactly one JSON document per key. Reads distinguish a
    missing object (``None``) from every other failure, which raises
    ``StorageFailureError``. Writes replace the whole object; concurrent writers
    to one key resolve as last-writer-wins.
    """

    @abstractmethod
    async def read(self, key: str) -> Document | None:
        """Read the document stored at ``key``, or None if no object exists."""
        ...

    @abstractmethod
    async def write(self, key: str, document: Document) -> None:
        """Replace the object at ``key`` with the serialized document."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete the object at ``key``. Missing objects are ignored."""
        ...

    @abstractmethod
    async def test_connection(self) -> tuple[bool, str | None]:
        """Test adapter connectivity and credentials."""
        ...

    @staticmethod
    def serialize(key: str, document: Document) -> bytes:
        """Serialize a document to pretty-printed UTF-8 JSON."""
        try:
            return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise StorageFailureError(key, "write", f"document is not JSON-serializable: {e}") from e

    @staticmethod
    def deserialize(key: str, payload: bytes | str) -> Document:
        """Parse a stored payload, failing loudly on corrupt content."""
        try:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8")
            return json.loads(payload)
        except (UnicodeDecodeError, ValueError) as e:
            raise StorageFailureError(key, "read", f"stored content is not valid JSON: {e}") from e
