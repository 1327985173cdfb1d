"""Amazon S3 document storage adapter.

Works against AWS S3 and S3-compatible services (MinIO, LocalStack) through
an optional endpoint URL and path-style addressing.
"""

import asyncio

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ConfigDict

from blobcms.core.logging import get_logger
from blobcms.domain.exceptions import StorageFailureError
from blobcms.infrastructure.storage.base import (
    JSON_CONTENT_TYPE,
    Document,
    DocumentStorageAdapter,
)

logger = get_logger(__name__)

NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class S3AdapterSettings(BaseModel):
    """Configuration settings for the S3 document adapter."""

    model_config = ConfigDict(from_attributes=True)

    bucket: str
    region: str = "us-east-1"
    access_key_id: str | None = None
    secret_access_key: str | None = None
    endpoint_url: str | None = None
    force_path_style: bool = False


class S3DocumentAdapter(DocumentStorageAdapter):
    """Document adapter implementation for Amazon S3."""

    def __init__(self, settings: S3AdapterSettings) -> None:
        self.settings = settings
        self._client = None

    def _get_client(self):
        """Get or create the S3 client."""
        if self._client is None:
            client_kwargs = {"region_name": self.settings.region}
            # Without explicit keys boto3 falls back to its own credential chain
            if self.settings.access_key_id and self.settings.secret_access_key:
                client_kwargs["aws_access_key_id"] = self.settings.access_key_id
                client_kwargs["aws_secret_access_key"] = self.settings.secret_access_key
            if self.settings.endpoint_url:
                client_kwargs["endpoint_url"] = self.settings.endpoint_url
            if self.settings.force_path_style:
                client_kwargs["config"] = Config(s3={"addressing_style": "path"})

            self._client = boto3.client("s3", **client_kwargs)
        return self._client

    @staticmethod
    def _error_code(error: ClientError) -> str:
        return str(error.response.get("Error", {}).get("Code", "Unknown"))

    async def read(self, key: str) -> Document | None:
        try:
            response = await asyncio.to_thread(
                self._get_client().get_object,
                Bucket=self.settings.bucket,
                Key=key,
            )
            body_stream = response.get("Body")
            if body_stream is None:
                raise StorageFailureError(key, "read", "response has no body")
            payload = await asyncio.to_thread(body_stream.read)
        except ClientError as e:
            if self._error_code(e) in NOT_FOUND_CODES:
                logger.debug("Document not found in S3", bucket=self.settings.bucket, key=key)
                return None
            logger.error("S3 read failed", bucket=self.settings.bucket, key=key, error=str(e))
            raise StorageFailureError(key, "read", str(e)) from e
        except BotoCoreError as e:
            logger.error("S3 read failed", bucket=self.settings.bucket, key=key, error=str(e))
            raise StorageFailureError(key, "read", str(e)) from e

        logger.debug("Document read from S3", bucket=self.settings.bucket, key=key, size=len(payload))
        return self.deserialize(key, payload)

    async def write(self, key: str, document: Document) -> None:
        body = self.serialize(key, document)
        try:
            await asyncio.to_thread(
                self._get_client().put_object,
                Bucket=self.settings.bucket,
                Key=key,
                Body=body,
                ContentType=JSON_CONTENT_TYPE,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 write failed", bucket=self.settings.bucket, key=key, error=str(e))
            raise StorageFailureError(key, "write", str(e)) from e

        logger.debug("Document written to S3", bucket=self.settings.bucket, key=key, size=len(body))

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(
                self._get_client().delete_object,
                Bucket=self.settings.bucket,
                Key=key,
            )
        except ClientError as e:
            if self._error_code(e) in NOT_FOUND_CODES:
                return
            logger.error("S3 delete failed", bucket=self.settings.bucket, key=key, error=str(e))
            raise StorageFailureError(key, "delete", str(e)) from e
        except BotoCoreError as e:
            logger.error("S3 delete failed", bucket=self.settings.bucket, key=key, error=str(e))
            raise StorageFailureError(key, "delete", str(e)) from e

        logger.debug("Document deleted from S3", bucket=self.settings.bucket, key=key)

    async def test_connection(self) -> tuple[bool, str | None]:
        try:
            await asyncio.to_thread(self._get_client().head_bucket, Bucket=self.settings.bucket)
            return True, (
                f"S3 connection successful. Bucket '{self.settings.bucket}' "
                f"is accessible in region '{self.settings.region}'."
            )
        except ClientError as e:
            error_code = self._error_code(e)
            error_message = e.response.get("Error", {}).get("Message", str(e))
            return False, f"S3 connection failed ({error_code}): {error_message}"
        except BotoCoreError as e:
            return False, f"S3 connection failed: {str(e)}"
