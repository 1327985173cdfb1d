"""BlobCMS - runtime-defined schemas and records persisted to a blob store.

Operators define record schemas at runtime and manage collections of records
conforming to them, with every document stored in S3 or an S3-compatible
object store instead of a database engine.
"""

__version__ = "0.1.0"

from blobcms.application.services import ContentService, OperationResult, OutcomeStatus

__all__ = ["ContentService", "OperationResult", "OutcomeStatus", "__version__"]
