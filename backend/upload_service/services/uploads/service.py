"""
Upload Service
==============
Runs a single upload through validation, key naming, object storage and
record persistence.

    received -> validated -> stored -> recorded -> complete
        any state -> rejected

An upload that reaches ``stored`` but fails to be recorded leaves an
orphaned object behind; it is logged, never silently removed.
"""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Tuple

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from upload_service.core.config import Settings
from upload_service.core.exceptions import (
    ConflictError,
    NotFoundError,
    StorageError,
    TransientStorageError,
    UploadServiceError,
)
from upload_service.core.logging_config import get_logger
from upload_service.models.upload import (
    FileMetadata,
    StoredObject,
    UploadRecordInDB,
    UploadResult,
    UploadStatus,
    utc_now,
)
from upload_service.services.database.repositories import UploadRepository, upload_repository
from upload_service.services.naming import KeyNamer
from upload_service.services.storage.base import ObjectStore
from upload_service.services.validation import UploadPolicy, UploadValidator


logger = get_logger(__name__)


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, StorageError) and error.is_transient


class UploadService:
    """
    Upload orchestration

    Storage calls are bounded by ``storage_timeout``. Transient storage
    failures are retried up to ``max_retries`` times with linear backoff;
    permanent ones are raised immediately.
    """

    def __init__(
        self,
        object_store: ObjectStore,
        repository: Optional[UploadRepository] = None,
        validator: Optional[UploadValidator] = None,
        key_namer: Optional[KeyNamer] = None,
        storage_timeout: float = 10.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.object_store = object_store
        self.repository = repository or upload_repository
        self.validator = validator or UploadValidator()
        self.key_namer = key_namer or KeyNamer()
        self.storage_timeout = storage_timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        object_store: ObjectStore,
        repository: Optional[UploadRepository] = None,
    ) -> "UploadService":
        return cls(
            object_store=object_store,
            repository=repository,
            validator=UploadValidator(UploadPolicy.from_settings(settings)),
            storage_timeout=settings.STORAGE_TIMEOUT_SECONDS,
            max_retries=settings.STORAGE_MAX_RETRIES,
            retry_backoff=settings.STORAGE_RETRY_BACKOFF_SECONDS,
        )

    # ========================================================================
    # UPLOAD
    # ========================================================================

    async def store(
        self,
        title: str,
        filename: str,
        content_type: str,
        data: bytes,
    ) -> UploadResult:
        """
        Validate, store and record one upload

        Args:
            title: Client supplied title
            filename: Original filename (extension is taken from it)
            content_type: Declared MIME type
            data: File payload

        Returns:
            UploadResult: The persisted record and the states passed through

        Raises:
            ValidationError: Policy violation; nothing was written
            ConflictError: The derived key is already recorded
            StorageError: Backend failure (transient after retries, or permanent)
        """
        transitions: List[UploadStatus] = []
        self._transition(transitions, UploadStatus.RECEIVED, title=title, filename=filename)

        metadata = FileMetadata(filename=filename, content_type=content_type, size_bytes=len(data))
        normalized_type = content_type.split(";", 1)[0].strip().lower()

        try:
            self.validator.validate(title, metadata)
            self._transition(transitions, UploadStatus.VALIDATED, filename=filename)

            clean_title = title.strip()
            storage_key = self.key_namer.make_key(clean_title, metadata.extension, self._clock())

            if await self.repository.exists_by_storage_key(storage_key):
                raise ConflictError(storage_key)

            await self._put_with_retry(storage_key, data, normalized_type)
            self._transition(transitions, UploadStatus.STORED, storage_key=storage_key)
        except UploadServiceError as e:
            self._reject(transitions, e)
            raise

        try:
            record = await self.repository.create(
                title=clean_title,
                storage_key=storage_key,
                content_type=normalized_type,
                size_bytes=metadata.size_bytes,
                original_filename=filename,
            )
        except UploadServiceError as e:
            logger.warning(
                "Orphaned object left in {} store: {}",
                self.object_store.name,
                storage_key,
                reason=type(e).__name__,
            )
            self._reject(transitions, e)
            raise

        self._transition(transitions, UploadStatus.RECORDED, record_id=record.id)
        self._transition(transitions, UploadStatus.COMPLETE, storage_key=storage_key)

        return UploadResult(record=record, status=UploadStatus.COMPLETE, transitions=transitions)

    # ========================================================================
    # DOWNLOAD
    # ========================================================================

    async def fetch(self, record_id: str) -> Tuple[UploadRecordInDB, StoredObject]:
        """
        Load a record and its stored object

        Raises:
            NotFoundError: If the record or its object is missing
            StorageError: Backend failure
        """
        record = await self.repository.get_by_id(record_id)
        if record is None:
            raise NotFoundError(record_id, resource="upload")

        try:
            stored = await asyncio.wait_for(
                self.object_store.get(record.storage_key),
                timeout=self.storage_timeout,
            )
        except asyncio.TimeoutError:
            raise TransientStorageError(
                f"Storage read timed out after {self.storage_timeout}s for {record.storage_key}",
                code="timeout",
            )

        return record, stored

    # ========================================================================
    # HELPERS
    # ========================================================================

    async def _put_once(self, storage_key: str, data: bytes, content_type: str) -> str:
        try:
            return await asyncio.wait_for(
                self.object_store.put(storage_key, data, content_type),
                timeout=self.storage_timeout,
            )
        except asyncio.TimeoutError:
            raise TransientStorageError(
                f"Storage write timed out after {self.storage_timeout}s for {storage_key}",
                code="timeout",
            )

    async def _put_with_retry(self, storage_key: str, data: bytes, content_type: str) -> str:
        def log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception()
            logger.warning(
                "Transient storage failure for {}, retrying in {}s",
                storage_key,
                retry_state.next_action.sleep,
                attempt=retry_state.attempt_number,
                code=error.code,
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_incrementing(start=self.retry_backoff, increment=self.retry_backoff),
            retry=retry_if_exception(_is_transient),
            before_sleep=log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    key = await self._put_once(storage_key, data, content_type)
        except StorageError as error:
            logger.error(
                "Storage write failed for {}: {}",
                storage_key,
                error.message,
                attempts=retrying.statistics.get("attempt_number"),
                code=error.code,
                kind=error.kind.value,
            )
            raise

        return key

    @staticmethod
    def _transition(transitions: List[UploadStatus], status: UploadStatus, **context) -> None:
        transitions.append(status)
        logger.debug("Upload -> {}", status.value, **context)

    @staticmethod
    def _reject(transitions: List[UploadStatus], error: UploadServiceError) -> None:
        transitions.append(UploadStatus.REJECTED)
        logger.info(
            "Upload rejected: {}",
            error.message,
            reason=type(error).__name__,
            last_state=transitions[-2].value,
        )
