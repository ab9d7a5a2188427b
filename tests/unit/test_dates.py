"""Tests for date pattern formatting."""

from datetime import datetime, timezone

import pytest

from gitbuildnumber.errors import ConfigurationError
from gitbuildnumber.formatting import DateFormatter, resolve_time_zone
from gitbuildnumber.formatting.dates import tokenize

# Tuesday
MOMENT = datetime(2024, 3, 5, 14, 7, 9, 123000, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "pattern,expected",
    [
        ("yyyy-MM-dd", "2024-03-05"),
        ("yyyy-MM-dd HH:mm:ss", "2024-03-05 14:07:09"),
        ("yyyy-MM-dd HH:mm:ss.SSS", "2024-03-05 14:07:09.123"),
        ("yyyyMMddHHmm", "202403051407"),
        ("yy/M/d h:mm a", "24/3/5 2:07 PM"),
        ("EEE, d MMM yyyy", "Tue, 5 Mar 2024"),
        ("EEEE d MMMM", "Tuesday 5 March"),
        ("D", "65"),
        ("kk KK", "14 02"),
        ("yyyy-MM-dd'T'HH:mm", "2024-03-05T14:07"),
        ("HH 'o''clock'", "14 o'clock"),
        ("''yy''", "'24'"),
        ("Z", "+0000"),
        ("X", "Z"),
    ],
)
def test_letter_patterns_in_utc(pattern, expected):
    assert DateFormatter(pattern, "UTC").format(MOMENT) == expected


def test_strftime_pattern():
    assert DateFormatter("%Y%m%d-%H%M", "UTC").format(MOMENT) == "20240305-1407"


def test_time_zone_conversion():
    formatter = DateFormatter("yyyy-MM-dd HH:mm Z", "Europe/Berlin")

    assert formatter.format(MOMENT) == "2024-03-05 15:07 +0100"


@pytest.mark.parametrize("pattern,expected", [("X", "+01"), ("XX", "+0100"), ("XXX", "+01:00")])
def test_iso_zone_offsets(pattern, expected):
    assert DateFormatter(pattern, "Europe/Berlin").format(MOMENT) == expected


def test_negative_offset():
    assert DateFormatter("Z XXX", "America/New_York").format(MOMENT) == "-0500 -05:00"


def test_zone_name():
    assert DateFormatter("z", "UTC").format(MOMENT) == "UTC"


def test_date_line_crossing():
    """Test that the zone can move the date."""
    late = datetime(2024, 3, 5, 23, 30, tzinfo=timezone.utc)

    assert DateFormatter("yyyy-MM-dd", "Asia/Tokyo").format(late) == "2024-03-06"


def test_local_time_zone_by_default():
    formatter = DateFormatter("yyyy-MM-dd HH:mm")

    assert formatter.tz is None
    assert formatter.format(MOMENT) == MOMENT.astimezone().strftime("%Y-%m-%d %H:%M")


def test_unknown_letter():
    with pytest.raises(ConfigurationError, match="Unsupported letter"):
        DateFormatter("yyyy-qq")


def test_unterminated_quote():
    with pytest.raises(ConfigurationError, match="Unterminated quote"):
        tokenize("yyyy 'T")


def test_unknown_time_zone():
    with pytest.raises(ConfigurationError, match="Unknown time zone"):
        resolve_time_zone("Mars/Olympus_Mons")


def test_blank_time_zone_is_local():
    assert resolve_time_zone(None) is None
    assert resolve_time_zone("") is None


def test_tokenize():
    assert tokenize("yyyy-MM'T'") == [("y", 4), ("text", "-"), ("M", 2), ("text", "T")]
