"""Application services for BlobCMS."""

from blobcms.application.services.content_service import (
    ContentService,
    OperationResult,
    OutcomeStatus,
)

__all__ = ["ContentService", "OperationResult", "OutcomeStatus"]
