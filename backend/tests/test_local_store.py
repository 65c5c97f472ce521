"""
Tests for the local disk object store
"""

import asyncio
import time

import pytest

from upload_service.core.exceptions import NotFoundError, PermanentStorageError, StorageError
from upload_service.services.storage import LocalObjectStore
from upload_service.services.storage.local import META_DIR, WriteGuard


@pytest.mark.asyncio
async def test_put_and_get_round_trip(local_store):
    """Test that stored bytes come back byte-identical"""
    payload = bytes(range(256)) * 8

    key = await local_store.put("1704110400_vacation.jpg", payload, "image/jpeg")
    stored = await local_store.get(key)

    assert key == "1704110400_vacation.jpg"
    assert stored.data == payload
    assert stored.content_type == "image/jpeg"
    assert stored.key == key


@pytest.mark.asyncio
async def test_get_missing_key_raises_not_found(local_store):
    with pytest.raises(NotFoundError):
        await local_store.get("nope.jpg")


@pytest.mark.asyncio
async def test_put_overwrites_existing_key(local_store):
    await local_store.put("k.png", b"first", "image/png")
    await local_store.put("k.png", b"second", "image/png")

    assert (await local_store.get("k.png")).data == b"second"


@pytest.mark.asyncio
async def test_no_temp_files_left_behind(local_store):
    await local_store.put("k.png", b"data", "image/png")

    leftovers = [p for p in local_store.root.rglob(".tmp-*")]
    assert leftovers == []


@pytest.mark.asyncio
async def test_delete_and_exists(local_store):
    await local_store.put("gone.gif", b"GIF89a", "image/gif")
    assert await local_store.exists("gone.gif") is True

    await local_store.delete("gone.gif")

    assert await local_store.exists("gone.gif") is False
    with pytest.raises(NotFoundError):
        await local_store.get("gone.gif")


@pytest.mark.asyncio
async def test_delete_missing_key_is_noop(local_store):
    await local_store.delete("never-stored.png")


@pytest.mark.asyncio
async def test_nested_keys(local_store):
    await local_store.put("2024/01/a.png", b"png", "image/png")

    assert (await local_store.get("2024/01/a.png")).data == b"png"


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["../escape.jpg", "a/../../escape.jpg", "/etc/passwd", "", ".meta/x.json"])
async def test_rejects_keys_outside_root(local_store, key):
    with pytest.raises(PermanentStorageError) as exc_info:
        await local_store.put(key, b"x", "image/jpeg")

    assert exc_info.value.code == "invalid_key"
    assert not (local_store.root.parent / "escape.jpg").exists()


@pytest.mark.asyncio
async def test_missing_metadata_defaults_content_type(local_store):
    await local_store.put("k.svg", b"<svg/>", "image/svg+xml")
    (local_store.root / ".meta" / "k.svg.json").unlink()

    stored = await local_store.get("k.svg")

    assert stored.content_type == "application/octet-stream"


@pytest.mark.asyncio
async def test_permission_denied_is_permanent(tmp_path, monkeypatch):
    store = LocalObjectStore(tmp_path / "objects")

    def deny(*args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(store, "_stage", deny)

    with pytest.raises(StorageError) as exc_info:
        await store.put("k.png", b"x", "image/png")

    assert exc_info.value.is_transient is False
    assert exc_info.value.code == "permission_denied"


@pytest.mark.asyncio
async def test_failed_overwrite_keeps_object_and_content_type(tmp_path, monkeypatch):
    """Test that a failed object write leaves the previous object fully intact"""
    store = LocalObjectStore(tmp_path / "objects")
    await store.put("k.jpg", b"\xff\xd8original", "image/jpeg")

    real_stage = LocalObjectStore._stage

    def fail_object(path, payload):
        if META_DIR in path.parts:
            return real_stage(path, payload)
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(store, "_stage", fail_object)

    with pytest.raises(PermanentStorageError):
        await store.put("k.jpg", b"\x89PNGreplacement", "image/png")

    stored = await store.get("k.jpg")
    assert stored.data == b"\xff\xd8original"
    assert stored.content_type == "image/jpeg"


class SlowWriteStore(LocalObjectStore):
    """Blocks inside the worker thread before writing"""

    def __init__(self, root, delay):
        super().__init__(root)
        self.delay = delay

    def _put_sync(self, key, data, content_type, guard):
        time.sleep(self.delay)
        super()._put_sync(key, data, content_type, guard)


@pytest.mark.asyncio
async def test_timed_out_write_is_never_published(tmp_path):
    """Test that a write abandoned by a timeout does not appear once the thread finishes"""
    store = SlowWriteStore(tmp_path / "objects", delay=0.3)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(store.put("late.jpg", b"\xff\xd8late", "image/jpeg"), timeout=0.05)

    await asyncio.sleep(0.6)

    assert await store.exists("late.jpg") is False
    assert not (store.root / META_DIR / "late.jpg.json").exists()
    assert list(store.root.rglob(".tmp-*")) == []


def test_write_guard_reports_published_write(tmp_path):
    target = tmp_path / "obj"
    staged = tmp_path / ".tmp-obj"
    staged.write_bytes(b"data")
    guard = WriteGuard()

    assert guard.publish([(str(staged), target)]) is True
    assert guard.cancel() is True
    assert target.read_bytes() == b"data"


def test_write_guard_blocks_publish_after_cancel(tmp_path):
    target = tmp_path / "obj"
    staged = tmp_path / ".tmp-obj"
    staged.write_bytes(b"data")
    guard = WriteGuard()

    assert guard.cancel() is False
    assert guard.publish([(str(staged), target)]) is False
    assert not target.exists()
