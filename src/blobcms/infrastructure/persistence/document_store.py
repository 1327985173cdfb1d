"""Keyed document store with a process-local cache.

Turns an adapter's "None when missing" read into "document, initialized if
missing", and keeps each loaded document in memory so repeated access within
a process does not re-fetch.

The cache is advisory, not a consistency mechanism: there is no cross-process
invalidation, and a write by another process stays invisible here until the
key is evicted or the process restarts.
"""

import copy

from blobcms.core.logging import get_logger
from blobcms.infrastructure.storage.base import Document, DocumentStorageAdapter

logger = get_logger(__name__)


class KeyedDocumentStore:
    """Load, cache and persist one document per logical key.

    Documents are deep-copied on the way in and out of the cache, so callers
    may mutate what they receive without touching the cached state.
    """

    def __init__(self, adapter: DocumentStorageAdapter) -> None:
        self.adapter = adapter
        self._cache: dict[str, Document] = {}

    async def get(self, key: str, default: Document) -> Document:
        """Get the document at ``key``, writing ``default`` on first use.

        Args:
            key: Logical document key.
            default: Document persisted and returned if no object exists yet.

        Returns:
            A copy of the current document.

        Raises:
            StorageFailureError: If the adapter fails to read or initialize.
        """
        if key in self._cache:
            return copy.deepcopy(self._cache[key])

        document = await self.adapter.read(key)
        if document is None:
            logger.info("Initializing missing document", key=key)
            document = copy.deepcopy(default)
            await self.adapter.write(key, document)

        self._cache[key] = document
        return copy.deepcopy(document)

    async def put(self, key: str, document: Document) -> None:
        """Persist ``document`` at ``key`` and refresh the cache.

        The cache is only updated after the write succeeds.
        """
        snapshot = copy.deepcopy(document)
        await self.adapter.write(key, snapshot)
        self._cache[key] = snapshot

    async def remove(self, key: str) -> None:
        """Delete the object at ``key`` and forget any cached copy."""
        self.evict(key)
        await self.adapter.delete(key)

    def evict(self, key: str) -> None:
        """Drop the cache entry for ``key`` if present."""
        if self._cache.pop(key, None) is not None:
            logger.debug("Evicted cached document", key=key)

    def clear(self) -> None:
        """Drop every cache entry."""
        self._cache.clear()

    def is_cached(self, key: str) -> bool:
        return key in self._cache

    @property
    def cached_keys(self) -> list[str]:
        return list(self._cache)
