"""Pytest configuration for all tests."""

from typing import Any

import pytest
import structlog

from blobcms.application.services import ContentService
from blobcms.core.config import Settings
from blobcms.core.logging import clear_context, configure_logging
from blobcms.domain.exceptions import StorageFailureError
from blobcms.infrastructure.persistence import (
    KeyedDocumentStore,
    RecordStore,
    SchemaRegistry,
)
from blobcms.infrastructure.storage import MemoryDocumentAdapter


class RecordingAdapter(MemoryDocumentAdapter):
    """Memory adapter that records every call and can be told to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[tuple[str, str]] = set()

    def _maybe_fail(self, operation: str, key: str) -> None:
        if (operation, key) in self.fail_on:
            raise StorageFailureError(key, operation, "injected failure")

    async def read(self, key: str) -> Any:
        self.calls.append(("read", key))
        self._maybe_fail("read", key)
        return await super().read(key)

    async def write(self, key: str, document: Any) -> None:
        self.calls.append(("write", key))
        self._maybe_fail("write", key)
        await super().write(key, document)

    async def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        self._maybe_fail("delete", key)
        await super().delete(key)


@pytest.fixture(autouse=True)
def _logging_to_stderr():
    """Route structlog through the standard library so nothing is printed to stdout."""
    configure_logging(Settings(storage_provider="memory", log_format="console", log_level="DEBUG"))
    yield
    clear_context()
    structlog.reset_defaults()


@pytest.fixture
def adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def document_store(adapter: RecordingAdapter) -> KeyedDocumentStore:
    return KeyedDocumentStore(adapter)


@pytest.fixture
def record_store(document_store: KeyedDocumentStore) -> RecordStore:
    return RecordStore(document_store)


@pytest.fixture
def registry(document_store: KeyedDocumentStore, record_store: RecordStore) -> SchemaRegistry:
    return SchemaRegistry(document_store, record_store)


@pytest.fixture
def content_service(registry: SchemaRegistry, record_store: RecordStore) -> ContentService:
    return ContentService(registry, record_store)


@pytest.fixture
def posts_definition() -> dict[str, Any]:
    """A small schema definition covering several field types."""
    return {
        "name": "posts",
        "displayName": "Blog Posts",
        "fields": [
            {"name": "title", "label": "Title", "type": "text", "required": True},
            {
                "name": "status",
                "label": "Status",
                "type": "select",
                "required": False,
                "validation": {"options": ["draft", "published"]},
            },
            {
                "name": "views",
                "label": "Views",
                "type": "number",
                "required": False,
                "validation": {"min": 0},
            },
        ],
    }
