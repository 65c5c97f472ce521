"""
S3-Compatible Object Store
==========================
Handles object uploads to an S3-compatible bucket (AWS S3, Cloudflare R2,
MinIO) through aioboto3.
"""

from typing import Optional

import aioboto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
    NoCredentialsError,
)

from upload_service.core.exceptions import (
    NotFoundError,
    PermanentStorageError,
    StorageError,
    TransientStorageError,
)
from upload_service.core.logging_config import get_logger
from upload_service.models.upload import StoredObject
from upload_service.services.storage.base import ObjectStore


logger = get_logger(__name__)


NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}
PERMANENT_CODES = {
    "AccessDenied",
    "AllAccessDisabled",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "NoSuchBucket",
    "QuotaExceeded",
    "EntityTooLarge",
    "InvalidBucketName",
    "403",
}
TRANSIENT_CODES = {
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "RequestTimeout",
    "RequestTimeTooSkewed",
    "InternalError",
    "ServiceUnavailable",
    "503",
}


def classify_client_error(error: ClientError, key: str) -> Exception:
    """
    Map a botocore ClientError to the service error taxonomy

    Returns:
        Exception: NotFoundError or a StorageError subclass
    """
    err = error.response.get("Error", {})
    code = str(err.get("Code", "Unknown"))
    status_code = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
    message = err.get("Message") or str(error)

    if code in NOT_FOUND_CODES:
        return NotFoundError(key)
    if code in PERMANENT_CODES:
        return PermanentStorageError(f"S3 request rejected for {key}: {message}", code=code)
    if status_code == 404:
        return NotFoundError(key)
    if code in TRANSIENT_CODES or status_code >= 500:
        return TransientStorageError(f"S3 temporarily unavailable for {key}: {message}", code=code)
    return PermanentStorageError(f"S3 request failed for {key}: {message}", code=code)


def classify_botocore_error(error: BotoCoreError, key: str) -> StorageError:
    """Map a transport-level botocore error to the service error taxonomy"""
    if isinstance(error, (BotoConnectionError, HTTPClientError)):
        return TransientStorageError(f"S3 connection failed for {key}: {error}", code="connection_error")
    if isinstance(error, NoCredentialsError):
        return PermanentStorageError("S3 credentials are not configured", code="credentials_missing")
    return PermanentStorageError(f"S3 client error for {key}: {error}", code="client_error")


class S3ObjectStore(ObjectStore):
    """
    S3 Object Store

    S3 ``PutObject`` is atomic per key, so a failed upload never exposes a
    partial object. botocore's own retries are disabled.
    """

    name = "s3"

    def __init__(
        self,
        bucket_name: str,
        endpoint_url: Optional[str] = None,
        region_name: str = "us-east-1",
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 30.0,
        session: Optional[aioboto3.Session] = None,
    ):
        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url
        self.region_name = region_name
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self.session = session or aioboto3.Session()
        self.client_config = Config(
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={"max_attempts": 1, "mode": "standard"},
        )

        logger.info(
            "S3 object store configured for bucket {}",
            bucket_name,
            endpoint=endpoint_url or "aws",
        )

    def _client(self):
        return self.session.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self._access_key_id,
            aws_secret_access_key=self._secret_access_key,
            region_name=self.region_name,
            config=self.client_config,
        )

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        try:
            async with self._client() as s3_client:
                await s3_client.put_object(
                    Bucket=self.bucket_name,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                )
        except ClientError as e:
            logger.error(f"S3 upload failed: {e}")
            raise classify_client_error(e, key) from e
        except BotoCoreError as e:
            logger.error(f"S3 upload failed: {e}")
            raise classify_botocore_error(e, key) from e

        logger.info(
            "File uploaded to S3: {}",
            key,
            bucket=self.bucket_name,
        )
        return key

    async def get(self, key: str) -> StoredObject:
        try:
            async with self._client() as s3_client:
                response = await s3_client.get_object(Bucket=self.bucket_name, Key=key)
                async with response["Body"] as stream:
                    data = await stream.read()
        except ClientError as e:
            error = classify_client_error(e, key)
            if not isinstance(error, NotFoundError):
                logger.error(f"S3 download failed: {e}")
            raise error from e
        except BotoCoreError as e:
            logger.error(f"S3 download failed: {e}")
            raise classify_botocore_error(e, key) from e

        return StoredObject(
            key=key,
            data=data,
            content_type=response.get("ContentType") or "application/octet-stream",
        )

    async def delete(self, key: str) -> None:
        try:
            async with self._client() as s3_client:
                await s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            error = classify_client_error(e, key)
            if isinstance(error, NotFoundError):
                return
            logger.error(f"S3 delete failed: {e}")
            raise error from e
        except BotoCoreError as e:
            logger.error(f"S3 delete failed: {e}")
            raise classify_botocore_error(e, key) from e

        logger.info(f"File deleted from S3: {key}")

    async def exists(self, key: str) -> bool:
        try:
            async with self._client() as s3_client:
                await s3_client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            error = classify_client_error(e, key)
            if isinstance(error, NotFoundError):
                return False
            raise error from e
        except BotoCoreError as e:
            raise classify_botocore_error(e, key) from e
        return True
