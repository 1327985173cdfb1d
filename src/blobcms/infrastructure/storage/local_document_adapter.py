"""Local filesystem document storage adapter."""

import asyncio
import os
import tempfile
from pathlib import Path

from blobcms.core.logging import get_logger
from blobcms.domain.exceptions import StorageFailureError
from blobcms.infrastructure.storage.base import Document, DocumentStorageAdapter

logger = get_logger(__name__)


class LocalDocumentAdapter(DocumentStorageAdapter):
    """Document adapter storing one JSON file per key under a root directory.

    Keys containing ``/`` map onto subdirectories.
    """

    def __init__(self, storage_path: str | Path) -> None:
        self.storage_path = Path(storage_path)

    def _path_for(self, key: str) -> Path:
        """Resolve a key to a file path inside the storage root."""
        if not key or key.endswith("/"):
            raise StorageFailureError(key, "resolve", "key must name a file")

        root = self.storage_path.resolve()
        path = (root / key).resolve()
        if root != path and root not in path.parents:
            raise StorageFailureError(key, "resolve", "key escapes the storage directory")
        return path

    def _read_bytes(self, path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def _write_bytes(self, path: Path, payload: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Atomic replace: readers see the old file or the new one
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def read(self, key: str) -> Document | None:
        path = self._path_for(key)
        try:
            payload = await asyncio.to_thread(self._read_bytes, path)
        except OSError as e:
            logger.error("Local read failed", key=key, path=str(path), error=str(e))
            raise StorageFailureError(key, "read", str(e)) from e

        if payload is None:
            logger.debug("Document not found on disk", key=key)
            return None
        return self.deserialize(key, payload)

    async def write(self, key: str, document: Document) -> None:
        path = self._path_for(key)
        payload = self.serialize(key, document)
        try:
            await asyncio.to_thread(self._write_bytes, path, payload)
        except OSError as e:
            logger.error("Local write failed", key=key, path=str(path), error=str(e))
            raise StorageFailureError(key, "write", str(e)) from e
        logger.debug("Document written to disk", key=key, size=len(payload))

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            logger.error("Local delete failed", key=key, path=str(path), error=str(e))
            raise StorageFailureError(key, "delete", str(e)) from e

    async def test_connection(self) -> tuple[bool, str | None]:
        """Verify that the configured local storage path is writable."""
        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)

            probe_file = self.storage_path / ".storage_adapter_probe"
            probe_file.write_text("ok", encoding="utf-8")
            probe_file.unlink(missing_ok=True)

            return True, f"Local storage is writable at '{self.storage_path}'."
        except OSError as e:
            return False, f"Local storage test failed: {str(e)}"
