"""
Unit tests for time formatting and parsing.
"""

from datetime import time

import pytest

from courtbook.exceptions import TimeFormatError
from courtbook.services.time_format import (
    format_range,
    format_time,
    parse_clock,
    parse_end_minutes,
    parse_start_minutes,
    parse_time_range,
    to_12_hour,
)


class TestTo12Hour:
    """Test 24-hour to 12-hour range conversion."""

    def test_afternoon_range(self):
        assert to_12_hour("14:00 - 16:00") == "2:00 PM - 4:00 PM"

    def test_midnight_and_noon(self):
        """Hour 0 is 12 AM and hour 12 is 12 PM."""
        assert to_12_hour("0:30 - 1:15") == "12:30 AM - 1:15 AM"
        assert to_12_hour("12:00 - 13:00") == "12:00 PM - 1:00 PM"

    def test_no_leading_zero_required(self):
        assert to_12_hour("6:45 - 7:30") == "6:45 AM - 7:30 AM"
        assert to_12_hour("08:00 - 10:00") == "8:00 AM - 10:00 AM"

    def test_already_formatted_is_unchanged(self):
        assert to_12_hour("2:00 PM - 4:00 PM") == "2:00 PM - 4:00 PM"

    def test_idempotent(self):
        """Converting twice gives the same result as converting once."""
        for value in ["14:00 - 16:00", "0:00 - 0:45", "23:15 - 0:00", "9:30 AM - 10:15 AM"]:
            assert to_12_hour(to_12_hour(value)) == to_12_hour(value)

    def test_unsplittable_input_is_returned(self):
        """Input without exactly two parts comes back unchanged."""
        assert to_12_hour("14:00") == "14:00"
        assert to_12_hour("10:00 - 11:00 - 12:00") == "10:00 - 11:00 - 12:00"
        assert to_12_hour("soon - later") == "soon - later"


class TestParsing:
    """Test clock and range parsing."""

    def test_parse_clock_24_hour(self):
        assert parse_clock("14:05") == time(14, 5)
        assert parse_clock("6:45") == time(6, 45)

    def test_parse_clock_12_hour(self):
        assert parse_clock("2:00 PM") == time(14, 0)
        assert parse_clock("12:00 AM") == time(0, 0)
        assert parse_clock("12:30 pm") == time(12, 30)

    @pytest.mark.parametrize("value", ["", "noon", "25:00", "13:00 PM", "7:60"])
    def test_parse_clock_rejects_invalid(self, value):
        with pytest.raises(TimeFormatError):
            parse_clock(value)

    def test_parse_start_minutes(self):
        """Start of a range or a bare time, with or without AM/PM."""
        assert parse_start_minutes("2:45 PM - 3:30 PM") == 14 * 60 + 45
        assert parse_start_minutes("14:00 - 16:00") == 14 * 60
        assert parse_start_minutes("7:15 AM") == 7 * 60 + 15
        assert parse_start_minutes("12:00 AM - 12:45 AM") == 0

    def test_parse_time_range(self):
        assert parse_time_range("6:45 AM - 7:30 AM") == (405, 450)
        assert parse_time_range("16:00 - 17:15") == (960, 1035)

    def test_range_past_midnight(self):
        """An end before the start runs into the next day."""
        assert parse_time_range("11:30 PM - 12:15 AM") == (1410, 1455)
        assert parse_end_minutes("23:15 - 0:00") == 1440

    def test_parse_end_of_bare_time(self):
        assert parse_end_minutes("9:00 PM") == 21 * 60


class TestFormatting:
    """Test 12-hour rendering."""

    def test_format_time(self):
        assert format_time(time(0, 5)) == "12:05 AM"
        assert format_time(time(12, 0)) == "12:00 PM"
        assert format_time(time(21, 45)) == "9:45 PM"

    def test_format_range(self):
        assert format_range(time(17, 30), time(18, 15)) == "5:30 PM - 6:15 PM"
