"""Unit tests for formatting and language helpers."""

import pytest

from transcodeplan.utils.formatting import format_duration, format_size
from transcodeplan.utils.language import normalize_language_code


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (3723, "1h 2m 3s"),
        (5400.7, "1h 30m 0s"),
        (59, "0m 59s"),
        (None, "Unknown"),
        (float("nan"), "Unknown"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


@pytest.mark.parametrize(
    "size,expected",
    [
        (None, "Unknown"),
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.5 KB"),
        (1024**3, "1 GB"),
        (4_500_000_000, "4.19 GB"),
    ],
)
def test_format_size(size, expected):
    assert format_size(size) == expected


@pytest.mark.parametrize(
    "code,expected",
    [
        ("en", "eng"),
        ("zh", "chi"),
        ("ENG", "eng"),
        ("Japanese", "jpn"),
        (" fr ", "fre"),
        ("xx", "xx"),
        ("klingon", "klingon"),
    ],
)
def test_normalize_language_code(code, expected):
    assert normalize_language_code(code) == expected
