"""Property and logbook drawers.

Drawers are bounded blocks::

    :PROPERTIES:
    :ID:       42
    :END:
    :LOGBOOK:
    CLOCK: [2019-08-01 Thu 10:00]--[2019-08-01 Thu 11:30] =>  1:30
    - State "DONE"       from "TODO"       [2019-08-01 Thu 11:30]
    :END:

Parsed items remember their own indentation and spacing so that export
reproduces the drawer byte for byte. Items created in code leave those fields
as None and get Emacs' default formatting.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from org_outline.classifier import LineKind, classify_line
from org_outline.exceptions import DocumentInvariantError, MalformedDrawerError
from org_outline.timestamps import Timestamp, parse_exact_timestamp


PROPERTIES_DRAWER = "PROPERTIES"
LOGBOOK_DRAWER = "LOGBOOK"

CLOCK_LINE_RE = re.compile(
    r"^(?P<indent>[ \t]*)CLOCK: (?P<start>\[[^\[\]]*\])"
    r"(?:--(?P<end>\[[^\[\]]*\])(?P<duration> +=> +\d+:\d{2}))?$"
)
DURATION_RE = re.compile(r"=>\s*(?P<hours>\d+):(?P<minutes>\d{2})")


@dataclass(frozen=True)
class PropertyItem:
    """A ``:KEY: value`` line.

    Attributes:
        key: Key in its original case
        value: Value text, possibly empty
        indent: Leading whitespace as parsed (None: use the drawer's indent)
        separator: Whitespace between ``:KEY:`` and the value as parsed
            (None: pad per org-property-format)
    """

    key: str
    value: str = ""
    indent: Optional[str] = None
    separator: Optional[str] = None

    def render(self, drawer_indent: str, key_width: int = 10) -> str:
        indent = self.indent if self.indent is not None else drawer_indent
        if self.separator is not None:
            separator = self.separator
        elif not self.value:
            separator = ""
        else:
            # org-property-format "%-10s %s"
            separator = " " * (max(0, key_width - len(self.key) - 2) + 1)
        return f"{indent}:{self.key}:{separator}{self.value}"


@dataclass(frozen=True)
class PropertyDrawer:
    """Ordered property list of a heading; keys are unique ignoring case."""

    items: tuple[PropertyItem, ...] = ()
    indent: Optional[str] = None

    def __post_init__(self):
        seen = set()
        for item in self.items:
            folded = item.key.casefold()
            if folded in seen:
                raise DocumentInvariantError(
                    "duplicate_property", f"Property key {item.key!r} appears more than once"
                )
            seen.add(folded)

    def get(self, key: str) -> Optional[PropertyItem]:
        """Find a property by key, ignoring case."""
        folded = key.casefold()
        for item in self.items:
            if item.key.casefold() == folded:
                return item
        return None

    def value(self, key: str) -> Optional[str]:
        item = self.get(key)
        return item.value if item is not None else None

    def keys(self) -> list[str]:
        return [item.key for item in self.items]

    def render_lines(self, indent: str, key_width: int = 10) -> list[str]:
        drawer_indent = self.indent if self.indent is not None else indent
        lines = [f"{drawer_indent}:{PROPERTIES_DRAWER}:"]
        lines.extend(item.render(drawer_indent, key_width) for item in self.items)
        lines.append(f"{drawer_indent}:END:")
        return lines


@dataclass(frozen=True)
class ClockEntry:
    """A ``CLOCK:`` line, closed (start and end) or still running (start only).

    Attributes:
        start: Clock-in timestamp
        end: Clock-out timestamp, None while the clock runs
        duration: Literal text after the end timestamp (e.g. ``" =>  1:30"``) as
            parsed; None means it is computed from the timestamps
        indent: Leading whitespace as parsed (None: use the drawer's indent)
    """

    start: Timestamp
    end: Optional[Timestamp] = None
    duration: Optional[str] = None
    indent: Optional[str] = None

    @property
    def elapsed_minutes(self) -> Optional[int]:
        """Minutes between start and end, derived from the timestamps."""
        if self.end is None:
            return None
        delta = self.end.to_datetime() - self.start.to_datetime()
        return int(delta.total_seconds() // 60)

    @property
    def recorded_minutes(self) -> Optional[int]:
        """Minutes written in the literal duration text."""
        if self.duration is None:
            return None
        match = DURATION_RE.search(self.duration)
        if not match:
            return None
        return int(match.group("hours")) * 60 + int(match.group("minutes"))

    @property
    def duration_matches(self) -> bool:
        """False when the written duration disagrees with the timestamps."""
        if self.end is None or self.duration is None:
            return True
        return self.recorded_minutes == self.elapsed_minutes

    def render(self, drawer_indent: str) -> str:
        indent = self.indent if self.indent is not None else drawer_indent
        line = f"{indent}CLOCK: {self.start.render()}"
        if self.end is not None:
            duration = self.duration if self.duration is not None else format_duration(self.elapsed_minutes)
            line += f"--{self.end.render()}{duration}"
        return line


@dataclass(frozen=True)
class LogbookNote:
    """Any other logbook line (state changes, notes), kept verbatim."""

    text: str

    def render(self, drawer_indent: str) -> str:
        return self.text


LogbookEntry = Union[ClockEntry, LogbookNote]


@dataclass(frozen=True)
class LogbookDrawer:
    """Logbook entries, newest first as Emacs writes them."""

    entries: tuple[LogbookEntry, ...] = ()
    indent: Optional[str] = None

    @property
    def clocks(self) -> list[ClockEntry]:
        return [entry for entry in self.entries if isinstance(entry, ClockEntry)]

    @property
    def running_clock(self) -> Optional[ClockEntry]:
        for clock in self.clocks:
            if clock.end is None:
                return clock
        return None

    def render_lines(self, indent: str) -> list[str]:
        drawer_indent = self.indent if self.indent is not None else indent
        lines = [f"{drawer_indent}:{LOGBOOK_DRAWER}:"]
        lines.extend(entry.render(drawer_indent) for entry in self.entries)
        lines.append(f"{drawer_indent}:END:")
        return lines


def format_duration(minutes: Optional[int]) -> str:
    """Format a clock duration the way Emacs writes it: ``" =>  1:30"``."""
    minutes = minutes or 0
    sign = "-" if minutes < 0 else ""
    hours, rest = divmod(abs(minutes), 60)
    return f" => {sign}{hours:2d}:{rest:02d}"


def parse_clock_line(line: str) -> Optional[ClockEntry]:
    """Parse a ``CLOCK:`` line whose timestamps round-trip exactly.

    Returns:
        ClockEntry, or None when the line should stay raw text
    """
    match = CLOCK_LINE_RE.match(line)
    if not match:
        return None

    start = parse_exact_timestamp(match.group("start"))
    if start is None:
        return None

    end = None
    if match.group("end"):
        end = parse_exact_timestamp(match.group("end"))
        if end is None:
            return None

    return ClockEntry(
        start=start,
        end=end,
        duration=match.group("duration"),
        indent=match.group("indent"),
    )


def parse_property_drawer(lines: list[str], start: int) -> tuple[PropertyDrawer, int]:
    """Parse a properties drawer opening at ``lines[start]``.

    Args:
        lines: Heading body lines
        start: Index of the ``:PROPERTIES:`` line

    Returns:
        Tuple of (drawer, index of the first line after ``:END:``)

    Raises:
        MalformedDrawerError: If the drawer is unterminated, its ``:END:`` is
            indented differently, or it contains a non-property line or a
            duplicate key
    """
    opening = classify_line(lines[start])
    indent = opening.indent
    items: list[PropertyItem] = []
    seen: set[str] = set()

    for i in range(start + 1, len(lines)):
        line = classify_line(lines[i])

        if line.kind is LineKind.DRAWER_END:
            if line.indent != indent:
                raise MalformedDrawerError(start, "mismatched :END: indentation")
            return PropertyDrawer(items=tuple(items), indent=indent), i + 1

        if line.kind is LineKind.PROPERTY:
            item = PropertyItem(
                key=line.key,
                value=line.value,
                indent=line.indent,
                separator=line.separator,
            )
        elif line.kind is LineKind.DRAWER_BEGIN:
            # A bare ":KEY:" inside the drawer is a property with an empty value
            item = PropertyItem(key=line.name, value="", indent=line.indent, separator="")
        else:
            raise MalformedDrawerError(start, f"unexpected line in property drawer: {line.raw!r}")

        if item.key.casefold() in seen:
            raise MalformedDrawerError(start, f"duplicate property key {item.key!r}")
        seen.add(item.key.casefold())
        items.append(item)

    raise MalformedDrawerError(start, "missing :END:")


def parse_logbook_drawer(lines: list[str], start: int) -> tuple[LogbookDrawer, int]:
    """Parse a logbook drawer opening at ``lines[start]``.

    Clock lines become ClockEntry; every other line is kept as a LogbookNote.

    Returns:
        Tuple of (drawer, index of the first line after ``:END:``)

    Raises:
        MalformedDrawerError: If the drawer is unterminated or its ``:END:`` is
            indented differently
    """
    opening = classify_line(lines[start])
    indent = opening.indent
    entries: list[LogbookEntry] = []

    for i in range(start + 1, len(lines)):
        line = classify_line(lines[i])

        if line.kind is LineKind.DRAWER_END:
            if line.indent != indent:
                raise MalformedDrawerError(start, "mismatched :END: indentation")
            return LogbookDrawer(entries=tuple(entries), indent=indent), i + 1

        clock = parse_clock_line(line.raw) if line.kind is LineKind.CLOCK else None
        entries.append(clock if clock is not None else LogbookNote(text=line.raw))

    raise MalformedDrawerError(start, "missing :END:")
