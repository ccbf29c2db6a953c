"""Unit tests for property and logbook drawers."""

from datetime import date, time

import pytest

from org_outline.drawers import (
    ClockEntry,
    LogbookDrawer,
    LogbookNote,
    PropertyDrawer,
    PropertyItem,
    format_duration,
    parse_clock_line,
    parse_logbook_drawer,
    parse_property_drawer,
)
from org_outline.exceptions import DocumentInvariantError, MalformedDrawerError
from org_outline.timestamps import Timestamp


class TestPropertyDrawer:
    """Test parsing and rendering properties drawers."""

    def test_parse_keeps_spacing(self):
        """Test items keep their indentation and separator."""
        lines = ["  :PROPERTIES:", "  :CATEGORY: work", "  :Effort:   1:00", "  :END:", "rest"]

        drawer, next_index = parse_property_drawer(lines, 0)

        assert next_index == 4
        assert drawer.keys() == ["CATEGORY", "Effort"]
        assert drawer.get("effort").separator == "   "
        assert drawer.render_lines("") == lines[:4]

    def test_bare_key_is_empty_property(self):
        """Test a :KEY: line inside the drawer is an empty-valued property."""
        lines = [":PROPERTIES:", ":ARCHIVE:", ":END:"]

        drawer, _ = parse_property_drawer(lines, 0)

        assert drawer.value("ARCHIVE") == ""
        assert drawer.render_lines("") == lines

    def test_keys_containing_colons(self):
        """Test header-args style keys, with and without a value."""
        lines = [
            "  :PROPERTIES:",
            "  :header-args:python: :results output",
            "  :header-args:sh:",
            "  :LOGGING:  nologrepeat",
            "  :END:",
        ]

        drawer, next_index = parse_property_drawer(lines, 0)

        assert next_index == 5
        assert drawer.keys() == ["header-args:python", "header-args:sh", "LOGGING"]
        assert drawer.value("header-args:python") == ":results output"
        assert drawer.value("header-args:sh") == ""
        assert drawer.render_lines("") == lines

    def test_value_lookup_ignores_case(self):
        """Test keys are matched case-insensitively."""
        drawer = PropertyDrawer(items=(PropertyItem("LOGGING", "nologrepeat"),))

        assert drawer.value("logging") == "nologrepeat"
        assert drawer.value("missing") is None

    def test_missing_end_is_malformed(self):
        """Test an unterminated drawer."""
        with pytest.raises(MalformedDrawerError) as exc_info:
            parse_property_drawer([":PROPERTIES:", ":ID: 1"], 0)

        assert exc_info.value.reason == "missing :END:"

    def test_mismatched_end_indentation_is_malformed(self):
        """Test :END: must be indented like the opening line."""
        with pytest.raises(MalformedDrawerError):
            parse_property_drawer(["  :PROPERTIES:", "  :ID: 1", ":END:"], 0)

    def test_non_property_line_is_malformed(self):
        """Test prose inside a properties drawer."""
        with pytest.raises(MalformedDrawerError):
            parse_property_drawer([":PROPERTIES:", "just text", ":END:"], 0)

    def test_duplicate_key_is_malformed(self):
        """Test duplicate keys (ignoring case) while parsing."""
        with pytest.raises(MalformedDrawerError):
            parse_property_drawer([":PROPERTIES:", ":ID: 1", ":id: 2", ":END:"], 0)

    def test_duplicate_key_built_in_code(self):
        """Test constructing a drawer with duplicate keys."""
        with pytest.raises(DocumentInvariantError) as exc_info:
            PropertyDrawer(items=(PropertyItem("ID", "1"), PropertyItem("Id", "2")))

        assert exc_info.value.invariant == "duplicate_property"

    def test_render_built_in_code_uses_property_format(self):
        """Test Emacs' %-10s %s layout for items without parsed spacing."""
        drawer = PropertyDrawer(items=(PropertyItem("ID", "42"), PropertyItem("CATEGORY", "work")))

        assert drawer.render_lines("  ") == [
            "  :PROPERTIES:",
            "  :ID:       42",
            "  :CATEGORY: work",
            "  :END:",
        ]


class TestClockEntry:
    """Test clock lines."""

    def test_parse_closed_clock(self):
        """Test a clock with start, end and duration."""
        line = "  CLOCK: [2019-08-01 Thu 17:00]--[2019-08-01 Thu 18:30] =>  1:30"

        clock = parse_clock_line(line)

        assert clock.elapsed_minutes == 90
        assert clock.recorded_minutes == 90
        assert clock.duration_matches
        assert clock.render("") == line

    def test_parse_running_clock(self):
        """Test a clock that has not been stopped."""
        clock = parse_clock_line("CLOCK: [2019-08-02 Fri 08:00]")

        assert clock.end is None
        assert clock.elapsed_minutes is None

    def test_duration_mismatch(self):
        """Test a written duration that disagrees with the timestamps."""
        clock = parse_clock_line("CLOCK: [2019-08-01 Thu 17:00]--[2019-08-01 Thu 18:00] =>  2:00")

        assert not clock.duration_matches

    def test_non_canonical_clock_stays_raw(self):
        """Test a clock line that would not render back identically."""
        assert parse_clock_line("CLOCK: [2019-08-01 Thu 9:00]") is None

    def test_render_built_in_code_computes_duration(self):
        """Test computed durations for clocks created without parsing."""
        clock = ClockEntry(
            start=Timestamp(date=date(2019, 8, 1), weekday="Thu", start=time(9, 0), active=False),
            end=Timestamp(date=date(2019, 8, 1), weekday="Thu", start=time(9, 45), active=False),
        )

        assert clock.render("  ") == "  CLOCK: [2019-08-01 Thu 09:00]--[2019-08-01 Thu 09:45] =>  0:45"

    @pytest.mark.parametrize("minutes,text", [(45, " =>  0:45"), (90, " =>  1:30"), (725, " => 12:05")])
    def test_format_duration(self, minutes, text):
        """Test Emacs' duration format."""
        assert format_duration(minutes) == text


class TestLogbookDrawer:
    """Test parsing and rendering logbook drawers."""

    def test_parse_keeps_order_and_notes(self):
        """Test notes and clocks are kept in stored order."""
        lines = [
            "  :LOGBOOK:",
            '  - State "DONE"       from "TODO"       [2019-08-01 Thu 18:03]',
            "  CLOCK: [2019-08-01 Thu 17:00]--[2019-08-01 Thu 18:00] =>  1:00",
            "  :END:",
        ]

        drawer, next_index = parse_logbook_drawer(lines, 0)

        assert next_index == 4
        assert isinstance(drawer.entries[0], LogbookNote)
        assert isinstance(drawer.entries[1], ClockEntry)
        assert drawer.render_lines("") == lines

    def test_running_clock(self):
        """Test finding the running clock."""
        drawer, _ = parse_logbook_drawer([":LOGBOOK:", "CLOCK: [2019-08-02 Fri 08:00]", ":END:"], 0)

        assert drawer.running_clock is drawer.clocks[0]

    def test_missing_end_is_malformed(self):
        """Test an unterminated logbook."""
        with pytest.raises(MalformedDrawerError):
            parse_logbook_drawer([":LOGBOOK:", "CLOCK: [2019-08-02 Fri 08:00]"], 0)

    def test_empty_logbook(self):
        """Test a logbook without entries."""
        drawer = LogbookDrawer()

        assert drawer.render_lines("   ") == ["   :LOGBOOK:", "   :END:"]
