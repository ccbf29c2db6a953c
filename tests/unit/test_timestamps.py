"""Unit tests for org timestamps."""

from datetime import date, datetime, time

import pytest

from org_outline.timestamps import (
    Delay,
    Repeater,
    Timestamp,
    parse_exact_timestamp,
    parse_timestamp,
)


class TestParseTimestamp:
    """Test parsing timestamp text."""

    def test_active_date_only(self):
        """Test a plain active date."""
        ts = parse_timestamp("<2019-07-30 Tue>")

        assert ts.date == date(2019, 7, 30)
        assert ts.active is True
        assert ts.weekday == "Tue"
        assert ts.start is None

    def test_inactive_with_time(self):
        """Test an inactive timestamp with a time of day."""
        ts = parse_timestamp("[2019-08-01 Thu 18:03]")

        assert ts.active is False
        assert ts.start == time(18, 3)

    def test_time_range(self):
        """Test a same-day time range."""
        ts = parse_timestamp("<2019-08-01 Thu 09:00-10:30>")

        assert ts.start == time(9, 0)
        assert ts.end == time(10, 30)

    def test_repeater_and_delay(self):
        """Test repeater and warning delay cookies."""
        ts = parse_timestamp("<2019-08-01 Thu +1w -2d>")

        assert ts.repeater == Repeater(kind="+", value=1, unit="w")
        assert ts.delay == Delay(kind="-", value=2, unit="d")

    @pytest.mark.parametrize("cookie,kind", [("++2d", "++"), (".+1m", ".+"), ("+3y", "+")])
    def test_repeater_kinds(self, cookie, kind):
        """Test cumulate, catch-up and restart repeaters."""
        ts = parse_timestamp(f"<2019-08-01 Thu {cookie}>")

        assert ts.repeater.kind == kind
        assert ts.repeater.render() == cookie

    def test_habit_repeater_limit(self):
        """Test habit-style repeaters with a limit."""
        ts = parse_timestamp("<2019-08-01 Thu .+1d/3d>")

        assert ts.repeater.limit == "3d"
        assert ts.render() == "<2019-08-01 Thu .+1d/3d>"

    def test_weekday_is_optional(self):
        """Test timestamps without a day name."""
        ts = parse_timestamp("<2019-08-01>")

        assert ts.weekday is None
        assert ts.render() == "<2019-08-01>"

    def test_localized_weekday_is_kept(self):
        """Test day names in other languages are stored as written."""
        assert parse_timestamp("<2019-08-01 Do>").weekday == "Do"

    @pytest.mark.parametrize(
        "text",
        [
            "<2019-02-30 Sat>",
            "<2019-08-01 Thu]",
            "2019-08-01",
            "<2019-08-01 Thu 25:00>",
            "<2019-08-01 Thu +1x>",
        ],
    )
    def test_invalid_timestamps(self, text):
        """Test malformed or impossible timestamps are rejected."""
        assert parse_timestamp(text) is None


class TestExactTimestamp:
    """Test the round-trip guard for timestamps."""

    def test_canonical_text_is_accepted(self):
        """Test canonical timestamps parse."""
        assert parse_exact_timestamp("<2019-08-01 Thu 09:00>") is not None

    def test_unpadded_time_is_rejected(self):
        """Test that a timestamp which would render differently is rejected."""
        assert parse_timestamp("<2019-08-01 Thu 9:00>") is not None
        assert parse_exact_timestamp("<2019-08-01 Thu 9:00>") is None


class TestTimestampModel:
    """Test Timestamp helpers."""

    def test_render_built_in_code(self):
        """Test rendering a timestamp created without parsing."""
        ts = Timestamp(date=date(2019, 8, 1), weekday="Thu", start=time(8, 5), active=False)

        assert ts.render() == "[2019-08-01 Thu 08:05]"

    def test_to_datetime(self):
        """Test conversion to datetime, midnight when there is no time."""
        assert parse_timestamp("<2019-08-01 Thu 10:15>").to_datetime() == datetime(2019, 8, 1, 10, 15)
        assert parse_timestamp("<2019-08-01 Thu>").to_datetime() == datetime(2019, 8, 1)
