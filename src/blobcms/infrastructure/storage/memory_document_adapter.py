"""In-memory document storage adapter for tests and dry runs."""

from blobcms.infrastructure.storage.base import Document, DocumentStorageAdapter


class MemoryDocumentAdapter(DocumentStorageAdapter):
    """Adapter keeping serialized documents in a process-local dict.

    Documents are stored as JSON bytes, so what comes back from ``read`` never
    aliases what was passed to ``write``.
    """

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}

    async def read(self, key: str) -> Document | None:
        payload = self.objects.get(key)
        if payload is None:
            return None
        return self.deserialize(key, payload)

    async def write(self, key: str, document: Document) -> None:
        self.objects[key] = self.serialize(key, document)

    async def delete(self, key: str) -> None:
        self.objects.pop(key, None)

    async def test_connection(self) -> tuple[bool, str | None]:
        return True, f"In-memory storage holds {len(self.objects)} object(s)."
