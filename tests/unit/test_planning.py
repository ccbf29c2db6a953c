"""Unit tests for planning line extraction."""

from datetime import date

from org_outline.planning import (
    PlanningItem,
    PlanningItems,
    parse_planning_items,
    parse_planning_line,
)
from org_outline.timestamps import Timestamp, parse_timestamp


class TestParsePlanningItems:
    """Test stripping the planning line from a description."""

    def test_basic_list_is_not_mangled(self):
        """Test a description without planning line is returned unchanged."""
        description = "  - indented list\n     - Foo"

        result = parse_planning_items(description)

        assert result.stripped_description == description
        assert not result.planning_items

    def test_list_after_planning_line_is_not_mangled(self):
        """Test the list after a planning line keeps its indentation."""
        description = "  - indented list\n     - Foo"

        result = parse_planning_items(f"SCHEDULED: <2019-07-30 Tue>\n{description}")

        assert result.stripped_description == description
        assert result.planning_items.scheduled == parse_timestamp("<2019-07-30 Tue>")

    def test_multiple_items_keep_encounter_order(self):
        """Test items are stored in the order they were written."""
        result = parse_planning_items("  DEADLINE: <2019-08-05 Mon> SCHEDULED: <2019-08-01 Thu>\n")

        assert [item.type for item in result.planning_items.items] == ["DEADLINE", "SCHEDULED"]
        assert result.planning_items.indent == "  "
        assert result.stripped_description == ""

    def test_only_first_line_is_examined(self):
        """Test a planning line further down stays in the description."""
        description = "Some text\nSCHEDULED: <2019-07-30 Tue>"

        result = parse_planning_items(description)

        assert result.stripped_description == description
        assert not result.planning_items

    def test_trailing_text_disqualifies_line(self):
        """Test a planning keyword followed by prose is description text."""
        description = "SCHEDULED: <2019-07-30 Tue> and more"

        assert parse_planning_items(description).stripped_description == description

    def test_double_space_disqualifies_line(self):
        """Test non-canonical spacing keeps the line as text."""
        description = "SCHEDULED: <2019-07-30 Tue>  DEADLINE: <2019-08-05 Mon>"

        assert parse_planning_items(description).stripped_description == description

    def test_empty_description(self):
        """Test the empty description."""
        result = parse_planning_items("")

        assert result.stripped_description == ""
        assert not result.planning_items


class TestParsePlanningLine:
    """Test parsing a single planning line."""

    def test_repeated_keyword_is_rejected(self):
        """Test each keyword may appear once."""
        assert parse_planning_line("SCHEDULED: <2019-07-30 Tue> SCHEDULED: <2019-07-31 Wed>") is None

    def test_non_canonical_timestamp_is_rejected(self):
        """Test timestamps that would not render identically."""
        assert parse_planning_line("SCHEDULED: <2019-07-30 Tue 9:00>") is None

    def test_closed_with_inactive_timestamp(self):
        """Test CLOSED items usually carry inactive timestamps."""
        items = parse_planning_line("  CLOSED: [2019-07-30 Tue 16:42]")

        assert items.closed.active is False
        assert items.indent == "  "


class TestPlanningItems:
    """Test PlanningItems rendering."""

    def test_render_uses_canonical_order(self):
        """Test rendering sorts into SCHEDULED, DEADLINE, CLOSED."""
        items = parse_planning_line("CLOSED: [2019-07-30 Tue 16:42] SCHEDULED: <2019-07-29 Mon>")

        assert items.render("  ") == "  SCHEDULED: <2019-07-29 Mon> CLOSED: [2019-07-30 Tue 16:42]"

    def test_render_with_custom_order(self):
        """Test a configured order."""
        items = parse_planning_line("SCHEDULED: <2019-07-29 Mon> DEADLINE: <2019-07-31 Wed>")

        rendered = items.render("", ("DEADLINE", "SCHEDULED", "CLOSED"))

        assert rendered == "DEADLINE: <2019-07-31 Wed> SCHEDULED: <2019-07-29 Mon>"

    def test_items_built_in_code(self):
        """Test building planning items without parsing."""
        items = PlanningItems(
            items=(PlanningItem("DEADLINE", Timestamp(date=date(2019, 8, 5), weekday="Mon")),)
        )

        assert items.deadline.date == date(2019, 8, 5)
        assert items.scheduled is None
        assert items.render("   ") == "   DEADLINE: <2019-08-05 Mon>"
