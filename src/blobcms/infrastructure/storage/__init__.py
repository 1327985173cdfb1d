"""Document storage adapters and the factory that selects one from settings."""

from blobcms.core.config import Settings
from blobcms.infrastructure.storage.base import Document, DocumentStorageAdapter
from blobcms.infrastructure.storage.local_document_adapter import LocalDocumentAdapter
from blobcms.infrastructure.storage.memory_document_adapter import MemoryDocumentAdapter
from blobcms.infrastructure.storage.s3_document_adapter import (
    S3AdapterSettings,
    S3DocumentAdapter,
)


def build_storage_adapter(settings: Settings) -> DocumentStorageAdapter:
    """Create the document adapter configured by ``settings.storage_provider``."""
    if settings.storage_provider == "s3":
        return S3DocumentAdapter(
            S3AdapterSettings(
                bucket=settings.s3_bucket,
                region=settings.s3_region,
                access_key_id=settings.s3_access_key_id,
                secret_access_key=settings.s3_secret_access_key,
                endpoint_url=settings.s3_endpoint_url,
                force_path_style=settings.s3_force_path_style,
            )
        )
    if settings.storage_provider == "local":
        return LocalDocumentAdapter(settings.local_storage_path)
    if settings.storage_provider == "memory":
        return MemoryDocumentAdapter()
    raise ValueError(f"Unknown storage provider '{settings.storage_provider}'")


__all__ = [
    "Document",
    "DocumentStorageAdapter",
    "LocalDocumentAdapter",
    "MemoryDocumentAdapter",
    "S3AdapterSettings",
    "S3DocumentAdapter",
    "build_storage_adapter",
]
