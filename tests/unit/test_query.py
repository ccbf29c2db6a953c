"""Unit tests for inherited flag and property queries."""

from textwrap import dedent

import pytest

from org_outline.exceptions import HeadingIndexError, UnknownFlagError
from org_outline.parser import parse
from org_outline.query import inherited_property, no_log_repeat_enabled, query_inherited_flag


class TestNoLogRepeat:
    """Test "nologrepeat" detection from #+STARTUP and LOGGING properties."""

    def test_not_set(self, read_fixture):
        """Test the flag is off when nothing sets it."""
        doc = parse(read_fixture("schedule_with_repeater"))

        assert no_log_repeat_enabled(doc, 0) is False

    def test_startup_only_option(self, read_fixture):
        """Test #+STARTUP with nologrepeat as its only option."""
        doc = parse(read_fixture("schedule_with_repeater_and_nologrepeat"))

        assert no_log_repeat_enabled(doc, 0) is True

    def test_startup_with_other_options(self, read_fixture):
        """Test #+STARTUP with nologrepeat among other options."""
        doc = parse(read_fixture("schedule_with_repeater_and_nologrepeat_and_other_options"))

        assert no_log_repeat_enabled(doc, 0) is True

    def test_property_inheritance(self, read_fixture):
        """Test LOGGING properties on the heading and its ancestors."""
        doc = parse(read_fixture("schedule_with_repeater_and_nologrepeat_property"))

        assert no_log_repeat_enabled(doc, 0) is False
        assert no_log_repeat_enabled(doc, 1) is True
        assert no_log_repeat_enabled(doc, 2) is True
        assert no_log_repeat_enabled(doc, 4) is True
        assert no_log_repeat_enabled(doc, 5) is False
        assert no_log_repeat_enabled(doc, 6) is False
        assert no_log_repeat_enabled(doc, 7) is True


class TestQueryInheritedFlag:
    """Test the generic flag query."""

    def test_last_startup_token_wins(self):
        """Test later #+STARTUP options override earlier ones."""
        doc = parse("#+STARTUP: nologdone\n#+STARTUP: logdone\n* Task\n")

        assert query_inherited_flag(doc, 0, "nologdone") is False
        assert query_inherited_flag(doc, 0, "logdone") is True

    def test_property_overrides_startup(self):
        """Test a LOGGING property beats the file option."""
        doc = parse(
            dedent(
                """\
                #+STARTUP: nologrepeat
                * Parent
                  :PROPERTIES:
                  :LOGGING:  nil
                  :END:
                ** Child
                * Other
                """
            )
        )

        assert query_inherited_flag(doc, 1) is False
        assert query_inherited_flag(doc, 2) is True

    def test_other_flags(self):
        """Test flags other than nologrepeat."""
        doc = parse("* Task\n  :PROPERTIES:\n  :LOGGING:  lognoteclock-out nologrefile\n  :END:\n")

        assert query_inherited_flag(doc, 0, "lognoteclock-out") is True
        assert query_inherited_flag(doc, 0, "nologrefile") is True
        assert query_inherited_flag(doc, 0, "nologreschedule") is False

    def test_logging_next_to_key_with_colons(self):
        """Test keys like header-args:python do not hide LOGGING."""
        doc = parse(
            dedent(
                """\
                * Parent
                  :PROPERTIES:
                  :header-args:python: :results output
                  :LOGGING:  nologrepeat
                  :END:
                ** Child
                """
            )
        )

        assert doc.warnings == ()
        assert doc.heading_at(0).get_property("header-args:python") == ":results output"
        assert query_inherited_flag(doc, 0) is True
        assert query_inherited_flag(doc, 1) is True

    def test_unknown_flag(self):
        """Test unknown flag names are rejected."""
        doc = parse("* Task\n")

        with pytest.raises(UnknownFlagError) as exc_info:
            query_inherited_flag(doc, 0, "nolog-everything")

        assert exc_info.value.flag_name == "nolog-everything"

    @pytest.mark.parametrize("index", [-1, 1, 99])
    def test_invalid_index(self, index):
        """Test negative and out-of-range indices."""
        doc = parse("* Task\n")

        with pytest.raises(HeadingIndexError) as exc_info:
            query_inherited_flag(doc, index)

        assert exc_info.value.index == index


class TestInheritedProperty:
    """Test nearest-property lookup."""

    def test_nearest_definition_wins(self):
        """Test the closest heading defining the key is used."""
        doc = parse(
            dedent(
                """\
                * Root
                  :PROPERTIES:
                  :CATEGORY: home
                  :END:
                ** Middle
                   :PROPERTIES:
                   :CATEGORY: garden
                   :END:
                *** Leaf
                ** Sibling
                """
            )
        )

        assert inherited_property(doc, 2, "category").value == "garden"
        assert inherited_property(doc, 3, "CATEGORY").value == "home"
        assert inherited_property(doc, 3, "missing") is None
