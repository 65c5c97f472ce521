"""
Tests for storage key naming
"""

from datetime import datetime, timezone

import pytest

from upload_service.core.exceptions import ValidationError
from upload_service.services.naming import KeyNamer


TS = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
UNIX = 1704110400


def test_key_format():
    """Test the {timestamp}_{title}.{extension} layout"""
    assert KeyNamer().make_key("vacation", "jpg", TS) == f"{UNIX}_vacation.jpg"


def test_accepts_unix_seconds_and_naive_utc():
    namer = KeyNamer()

    assert namer.make_key("a", "png", UNIX) == f"{UNIX}_a.png"
    assert namer.make_key("a", "png", UNIX + 0.9) == f"{UNIX}_a.png"
    assert namer.make_key("a", "png", TS.replace(tzinfo=None)) == f"{UNIX}_a.png"


def test_deterministic_within_same_second():
    namer = KeyNamer()
    later = TS.replace(microsecond=999999)

    assert namer.make_key("beach day", "jpg", TS) == namer.make_key("beach day", "jpg", later)


def test_next_second_changes_key():
    namer = KeyNamer()
    assert namer.make_key("a", "jpg", UNIX) != namer.make_key("a", "jpg", UNIX + 1)


@pytest.mark.parametrize("title,expected", [
    ("../../etc/passwd", "etcpasswd"),
    ("a/b\\c", "abc"),
    ("tab\tand\nnewline", "tab_and_newline"),
    ("bell\x07char\x00", "bellchar"),
    ("  spaced   out  ", "spaced_out"),
    ("...hidden", "hidden"),
    ("café", "café"),
])
def test_sanitize(title, expected):
    assert KeyNamer().sanitize(title) == expected


@pytest.mark.parametrize("title", ["", "///", "\x00\x01", "..."])
def test_sanitize_falls_back_when_empty(title):
    assert KeyNamer().sanitize(title) == "untitled"


def test_sanitized_key_has_no_separators():
    key = KeyNamer().make_key("../../secret/..\\x", "jpg", UNIX)

    assert "/" not in key
    assert "\\" not in key
    assert key.startswith(f"{UNIX}_")


def test_extension_is_normalized():
    namer = KeyNamer()

    assert namer.make_key("a", ".JPG", UNIX) == f"{UNIX}_a.jpg"
    assert namer.make_key("a", "../png", UNIX) == f"{UNIX}_a.png"


def test_missing_extension_rejected():
    with pytest.raises(ValidationError) as exc_info:
        KeyNamer().make_key("a", "", UNIX)

    assert exc_info.value.fields == ["extension"]


def test_long_titles_are_truncated():
    key = KeyNamer(max_title_length=8).make_key("x" * 50, "png", UNIX)
    assert key == f"{UNIX}_xxxxxxxx.png"
