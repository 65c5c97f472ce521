"""
Local Disk Object Store
=======================
Stores objects as files under a root directory.
"""

import asyncio
import errno
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Tuple, Union

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

META_DIR = ".meta"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_TRANSIENT_ERRNOS = {errno.EAGAIN, errno.EBUSY, errno.EINTR, errno.ETIMEDOUT}
_QUOTA_ERRNOS = {errno.ENOSPC, errno.EDQUOT}


def _classify_os_error(exc: OSError, action: str, key: str) -> StorageError:
    if isinstance(exc, PermissionError):
        return PermanentStorageError(f"Permission denied while trying to {action} {key}", code="permission_denied")
    if exc.errno in _QUOTA_ERRNOS:
        return PermanentStorageError(f"No space left while trying to {action} {key}", code="quota_exceeded")
    if exc.errno in _TRANSIENT_ERRNOS:
        return TransientStorageError(f"Temporary I/O failure while trying to {action} {key}", code="io_unavailable")
    return PermanentStorageError(f"I/O failure while trying to {action} {key}: {exc}", code="io_error")


class WriteGuard:
    """
    Publish step shared by a worker thread and the coroutine awaiting it

    Once ``cancel`` has run, ``publish`` leaves the targets untouched, so a
    timed out caller never sees its write appear later.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.cancelled = False
        self.published = False

    def publish(self, staged: List[Tuple[str, Path]]) -> bool:
        with self._lock:
            if self.cancelled:
                return False
            # Object before sidecar: a failed object write keeps the old content type
            for tmp_name, target in staged:
                os.replace(tmp_name, target)
            self.published = True
            return True

    def cancel(self) -> bool:
        """Stop any later publish; True if the write already landed"""
        with self._lock:
            self.cancelled = True
            return self.published


class LocalObjectStore(ObjectStore):
    """
    Local filesystem object store

    Objects live at ``root/<key>``; their content type is kept in
    ``root/.meta/<key>.json``. Writes go to a temp file in the target
    directory and are moved into place with ``os.replace``, object first.
    A put cancelled by a timeout never publishes.
    """

    name = "local"

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Local object store rooted at {self.root}")

    # ========================================================================
    # PATH HELPERS
    # ========================================================================

    def _object_path(self, key: str) -> Path:
        if not key or key.startswith("/") or "\x00" in key:
            raise PermanentStorageError(f"Invalid storage key: {key!r}", code="invalid_key")

        path = (self.root / key).resolve()
        if path == self.root or not path.is_relative_to(self.root):
            raise PermanentStorageError(f"Storage key escapes store root: {key!r}", code="invalid_key")
        if path.relative_to(self.root).parts[0] == META_DIR:
            raise PermanentStorageError(f"Storage key uses reserved prefix: {key!r}", code="invalid_key")
        return path

    def _meta_path(self, key: str) -> Path:
        return self.root / META_DIR / f"{key}.json"

    @staticmethod
    def _stage(path: Path, payload: bytes) -> str:
        """Write payload to a synced temp file beside ``path``"""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return tmp_name

    # ========================================================================
    # SYNC IMPLEMENTATIONS (run in worker threads)
    # ========================================================================

    def _put_sync(self, key: str, data: bytes, content_type: str, guard: WriteGuard) -> None:
        path = self._object_path(key)
        meta_path = self._meta_path(key)
        meta = json.dumps({"content_type": content_type, "size_bytes": len(data)}).encode("utf-8")

        staged: List[Tuple[str, Path]] = []
        try:
            staged.append((self._stage(path, data), path))
            staged.append((self._stage(meta_path, meta), meta_path))
            guard.publish(staged)
        finally:
            for tmp_name, _ in staged:
                Path(tmp_name).unlink(missing_ok=True)

    def _get_sync(self, key: str) -> StoredObject:
        path = self._object_path(key)
        try:
            data = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError):
            raise NotFoundError(key)

        content_type = DEFAULT_CONTENT_TYPE
        try:
            meta = json.loads(self._meta_path(key).read_text(encoding="utf-8"))
            content_type = meta.get("content_type", DEFAULT_CONTENT_TYPE)
        except FileNotFoundError:
            logger.warning(f"Missing metadata for stored object: {key}")

        return StoredObject(key=key, data=data, content_type=content_type)

    def _delete_sync(self, key: str) -> None:
        path = self._object_path(key)
        path.unlink(missing_ok=True)
        self._meta_path(key).unlink(missing_ok=True)

    def _exists_sync(self, key: str) -> bool:
        return self._object_path(key).is_file()

    # ========================================================================
    # OBJECT STORE API
    # ========================================================================

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        guard = WriteGuard()
        try:
            await asyncio.to_thread(self._put_sync, key, data, content_type, guard)
        except asyncio.CancelledError:
            if guard.cancel():
                logger.warning("Write for {} landed before cancellation, removing it", key)
                self._delete_sync(key)
            raise
        except OSError as e:
            logger.error(f"Local upload failed: {e}")
            raise _classify_os_error(e, "write", key) from e

        logger.info(
            "File uploaded to local storage: {}",
            key,
            size_bytes=len(data),
        )
        return key

    async def get(self, key: str) -> StoredObject:
        try:
            return await asyncio.to_thread(self._get_sync, key)
        except OSError as e:
            logger.error(f"Local download failed: {e}")
            raise _classify_os_error(e, "read", key) from e

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._delete_sync, key)
        except OSError as e:
            logger.error(f"Local delete failed: {e}")
            raise _classify_os_error(e, "delete", key) from e
        logger.info(f"File deleted from local storage: {key}")

    async def exists(self, key: str) -> bool:
        try:
            return await asyncio.to_thread(self._exists_sync, key)
        except OSError as e:
            raise _classify_os_error(e, "stat", key) from e
