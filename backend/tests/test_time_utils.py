import math
import re
from datetime import date, datetime, timezone

import pytest

from trackview.core.time_utils import (
    format_clock,
    format_duration,
    parse_iso,
    timestamp_text,
    to_epoch_seconds,
)


def test_epoch_from_native_and_iso():
    assert to_epoch_seconds(datetime(1970, 1, 1, 0, 1, 0)) == 60.0
    assert to_epoch_seconds(datetime(1970, 1, 1, 0, 1, 0, tzinfo=timezone.utc)) == 60.0
    assert to_epoch_seconds("1970-01-01T00:01:00Z") == 60.0
    assert to_epoch_seconds("1970-01-01T01:01:00+01:00") == 60.0
    assert to_epoch_seconds(date(1970, 1, 2)) == 86400.0


@pytest.mark.parametrize("value", [None, "", "yesterday", 12345, object()])
def test_epoch_sentinel(value):
    assert math.isnan(to_epoch_seconds(value))


def test_parse_iso():
    assert parse_iso("2024-01-01T00:00:00Z").tzinfo is not None
    assert parse_iso("nope") is None
    assert parse_iso(None) is None


@pytest.mark.parametrize("text, micros", [
    ("2024-01-01T00:00:00.5Z", 500000),
    ("2024-01-01T00:00:00.25Z", 250000),
    ("2024-01-01T00:00:00.1234Z", 123400),
    ("2024-01-01T00:00:00.123456789+00:00", 123456),
])
def test_parse_iso_any_fraction_length(text, micros):
    assert parse_iso(text).microsecond == micros


def test_epoch_keeps_fractional_seconds():
    assert to_epoch_seconds("1970-01-01T00:00:01.25Z") == 1.25


def test_timestamp_text():
    assert timestamp_text(datetime(2024, 1, 1, 8, 0)) == "2024-01-01T08:00:00"
    assert timestamp_text("2024-01-01T08:00:00Z") == "2024-01-01T08:00:00Z"
    assert timestamp_text(None) is None


@pytest.mark.parametrize("seconds, expected", [
    (2732, "45:32"),
    (59.9, "0:59"),
    (3600, "60:00"),
    (0, "-"),
    (None, "-"),
    (float("nan"), "-"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_clock():
    assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", format_clock(1714807800.0))
    assert format_clock(float("nan")) is None
    assert format_clock(None) is None
