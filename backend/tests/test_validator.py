"""
Tests for the upload validator
"""

import pytest

from upload_service.core.config import Settings
from upload_service.core.exceptions import ValidationError
from upload_service.models.upload import FileMetadata
from upload_service.services.validation import UploadPolicy, UploadValidator


def meta(filename="photo.jpg", content_type="image/jpeg", size_bytes=2048):
    return FileMetadata(filename=filename, content_type=content_type, size_bytes=size_bytes)


def test_accepts_small_jpeg():
    """Test that a policy-compliant upload passes"""
    validator = UploadValidator()

    assert validator.check("vacation", meta()) == []
    validator.validate("vacation", meta())


@pytest.mark.parametrize("filename,content_type", [
    ("a.jpeg", "image/jpeg"),
    ("a.PNG", "image/png"),
    ("a.gif", "image/gif"),
    ("logo.svg", "image/svg+xml"),
    ("a.jpg", "image/jpeg; charset=binary"),
])
def test_accepts_allowed_types(filename, content_type):
    assert UploadValidator().check("ok", meta(filename, content_type)) == []


def test_rejects_oversize_file():
    """Test that a 5MB file is rejected on size only"""
    validator = UploadValidator()

    with pytest.raises(ValidationError) as exc_info:
        validator.validate("huge", meta(size_bytes=5 * 1024 * 1024))

    assert exc_info.value.fields == ["size"]


def test_size_limit_is_inclusive():
    policy = UploadPolicy(max_size_bytes=100)
    validator = UploadValidator(policy)

    assert validator.check("t", meta(size_bytes=100)) == []
    assert [i.field for i in validator.check("t", meta(size_bytes=101))] == ["size"]


def test_rejects_empty_file():
    issues = UploadValidator().check("empty", meta(size_bytes=0))
    assert [i.field for i in issues] == ["size"]


def test_rejects_executable():
    """Test that a .exe upload is rejected on extension"""
    with pytest.raises(ValidationError) as exc_info:
        UploadValidator().validate(
            "doc", meta("doc.exe", "application/octet-stream", 10 * 1024)
        )

    assert "extension" in exc_info.value.fields


def test_reports_every_failing_field():
    """Test that all failures are reported, not just the first"""
    issues = UploadValidator().check(
        "   ", meta("setup.exe", "application/x-msdownload", 10 * 1024 * 1024)
    )

    assert {i.field for i in issues} == {"title", "size", "extension", "content_type"}


def test_rejects_missing_extension():
    issues = UploadValidator().check("t", meta("README", "image/png"))
    assert [i.field for i in issues] == ["extension"]


def test_rejects_mismatched_content_type():
    """Test that a png declared as jpeg is rejected"""
    issues = UploadValidator().check("t", meta("a.png", "image/jpeg"))

    assert [i.field for i in issues] == ["content_type"]
    assert "does not match" in issues[0].message


def test_rejects_long_title():
    policy = UploadPolicy(max_title_length=5)
    issues = UploadValidator(policy).check("abcdef", meta())
    assert [i.field for i in issues] == ["title"]


def test_error_details_are_serializable():
    with pytest.raises(ValidationError) as exc_info:
        UploadValidator().validate("huge", meta(size_bytes=5 * 1024 * 1024))

    assert exc_info.value.details == [
        {"field": "size", "message": exc_info.value.issues[0].message}
    ]


def test_policy_from_settings():
    settings = Settings(
        MAX_UPLOAD_SIZE_BYTES=1024,
        ALLOWED_EXTENSIONS='["PNG", ".gif"]',
        ALLOWED_CONTENT_TYPES='["image/png", "image/gif"]',
        MAX_TITLE_LENGTH=10,
    )

    policy = UploadPolicy.from_settings(settings)

    assert policy.max_size_bytes == 1024
    assert policy.allowed_extensions == frozenset({"png", "gif"})
    assert policy.allowed_content_types == frozenset({"image/png", "image/gif"})
    assert policy.max_title_length == 10
