"""Context-free classification of single org lines.

Classification only slices the line; it never strips or rewrites it, so the
original text is always available as ``ClassifiedLine.raw``.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LineKind(Enum):
    """Kinds of lines the tree builder distinguishes."""

    HEADING = "heading"
    FILE_CONFIG = "file_config"
    PLANNING = "planning"
    DRAWER_END = "drawer_end"
    DRAWER_BEGIN = "drawer_begin"
    PROPERTY = "property"
    CLOCK = "clock"
    BLANK = "blank"
    CONTENT = "content"


HEADING_RE = re.compile(r"^(?P<stars>\*+) (?P<text>.*)$")
FILE_CONFIG_RE = re.compile(r"^#\+(?P<key>[^:\s]+):(?P<value>.*)$")
PLANNING_RE = re.compile(r"^(?P<indent>[ \t]*)(?:SCHEDULED|DEADLINE|CLOSED):")
DRAWER_END_RE = re.compile(r"^(?P<indent>[ \t]*):END:$")
DRAWER_BEGIN_RE = re.compile(r"^(?P<indent>[ \t]*):(?P<name>[A-Za-z][\w-]*):$")
PROPERTY_RE = re.compile(
    r"^(?P<indent>[ \t]*):(?P<key>\S+):(?:(?P<separator>[ \t]+)(?P<value>.*))?$"
)
CLOCK_RE = re.compile(r"^(?P<indent>[ \t]*)CLOCK:")


@dataclass(frozen=True)
class ClassifiedLine:
    """A raw line plus its classification and captured sub-fields.

    Attributes:
        kind: Line classification
        raw: The untouched source line
        level: Star count (HEADING only)
        text: Text after the stars and their separating space (HEADING only)
        key: Property key (PROPERTY) or config keyword (FILE_CONFIG)
        value: Property value (PROPERTY) or config value (FILE_CONFIG)
        name: Drawer name (DRAWER_BEGIN only)
        separator: Whitespace between property key and value (PROPERTY only)
        indent: Leading whitespace (PLANNING, drawer, PROPERTY and CLOCK lines)
    """

    kind: LineKind
    raw: str
    level: Optional[int] = None
    text: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None
    name: Optional[str] = None
    separator: Optional[str] = None
    indent: str = ""


def classify_line(line: str) -> ClassifiedLine:
    """Classify one line without looking at its neighbours.

    Ambiguous lines resolve by fixed priority: heading, file config, planning,
    drawer end, drawer begin, property, clock, blank, content. A bare
    ``:NAME:`` line is DRAWER_BEGIN when NAME is a plain word and PROPERTY
    otherwise; inside ``:PROPERTIES:`` either one is an empty-valued property.
    Property keys may contain colons (``:header-args:python: :results output``).

    Args:
        line: A single line without its newline

    Returns:
        ClassifiedLine for the line

    Examples:
        >>> classify_line("** TODO Write tests").kind
        <LineKind.HEADING: 'heading'>
        >>> classify_line("   :ID:       42").key
        'ID'
    """
    if match := HEADING_RE.match(line):
        return ClassifiedLine(
            kind=LineKind.HEADING,
            raw=line,
            level=len(match.group("stars")),
            text=match.group("text"),
        )

    if match := FILE_CONFIG_RE.match(line):
        return ClassifiedLine(
            kind=LineKind.FILE_CONFIG,
            raw=line,
            key=match.group("key"),
            value=match.group("value"),
        )

    if match := PLANNING_RE.match(line):
        return ClassifiedLine(kind=LineKind.PLANNING, raw=line, indent=match.group("indent"))

    if match := DRAWER_END_RE.match(line):
        return ClassifiedLine(kind=LineKind.DRAWER_END, raw=line, indent=match.group("indent"))

    if match := DRAWER_BEGIN_RE.match(line):
        return ClassifiedLine(
            kind=LineKind.DRAWER_BEGIN,
            raw=line,
            name=match.group("name"),
            indent=match.group("indent"),
        )

    if match := PROPERTY_RE.match(line):
        return ClassifiedLine(
            kind=LineKind.PROPERTY,
            raw=line,
            key=match.group("key"),
            value=match.group("value") or "",
            separator=match.group("separator") or "",
            indent=match.group("indent"),
        )

    if match := CLOCK_RE.match(line):
        return ClassifiedLine(kind=LineKind.CLOCK, raw=line, indent=match.group("indent"))

    if not line.strip():
        return ClassifiedLine(kind=LineKind.BLANK, raw=line)

    return ClassifiedLine(kind=LineKind.CONTENT, raw=line)


def split_lines(raw: str) -> list[str]:
    """Split newline-terminated text into lines.

    The final newline terminates the last line rather than starting a new
    empty one, so ``"a\\n"`` is one line and ``"a\\n\\n"`` is two.

    Args:
        raw: Text whose lines are each terminated by "\\n" (the last one may not be)

    Returns:
        Lines without their newlines
    """
    if not raw:
        return []
    if raw.endswith("\n"):
        raw = raw[:-1]
    return raw.split("\n")


def join_lines(lines: list[str]) -> str:
    """Inverse of split_lines: terminate every line with a newline."""
    return "".join(f"{line}\n" for line in lines)
