"""Planning items: the SCHEDULED / DEADLINE / CLOSED line under a heading."""

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from org_outline.timestamps import Timestamp, parse_exact_timestamp


PLANNING_TYPES = ("SCHEDULED", "DEADLINE", "CLOSED")

PLANNING_ITEM_RE = re.compile(
    r"(?P<type>SCHEDULED|DEADLINE|CLOSED): (?P<timestamp><[^<>]*>|\[[^\[\]]*\])"
)
PLANNING_LINE_RE = re.compile(
    r"^(?P<indent>[ \t]*)"
    r"(?P<items>(?:SCHEDULED|DEADLINE|CLOSED): (?:<[^<>]*>|\[[^\[\]]*\])"
    r"(?: (?:SCHEDULED|DEADLINE|CLOSED): (?:<[^<>]*>|\[[^\[\]]*\]))*)$"
)


@dataclass(frozen=True)
class PlanningItem:
    """One ``TYPE: <timestamp>`` pair."""

    type: str
    timestamp: Timestamp

    def render(self) -> str:
        return f"{self.type}: {self.timestamp.render()}"


@dataclass(frozen=True)
class PlanningItems:
    """Planning items of a heading, in the order they were written.

    Attributes:
        items: Planning items in encounter order
        indent: Leading whitespace of the planning line; None means the
            exporter picks the default for the heading's level
    """

    items: tuple[PlanningItem, ...] = ()
    indent: Optional[str] = None

    def __bool__(self) -> bool:
        return bool(self.items)

    def get(self, planning_type: str) -> Optional[Timestamp]:
        for item in self.items:
            if item.type == planning_type:
                return item.timestamp
        return None

    @property
    def scheduled(self) -> Optional[Timestamp]:
        return self.get("SCHEDULED")

    @property
    def deadline(self) -> Optional[Timestamp]:
        return self.get("DEADLINE")

    @property
    def closed(self) -> Optional[Timestamp]:
        return self.get("CLOSED")

    def ordered(self, order: Sequence[str] = PLANNING_TYPES) -> list[PlanningItem]:
        """Items sorted into the given canonical order."""
        rank = {planning_type: i for i, planning_type in enumerate(order)}
        return sorted(self.items, key=lambda item: rank[item.type])

    def render(self, indent: str, order: Sequence[str] = PLANNING_TYPES) -> str:
        """Render the planning line (without newline) in canonical order."""
        return indent + " ".join(item.render() for item in self.ordered(order))


@dataclass(frozen=True)
class PlanningExtraction:
    """Result of parse_planning_items."""

    planning_items: PlanningItems = field(default_factory=PlanningItems)
    stripped_description: str = ""


def parse_planning_line(line: str) -> Optional[PlanningItems]:
    """Parse a whole line as a planning line.

    The line must consist of indentation followed by one or more planning
    items separated by single spaces, each type at most once, and each
    timestamp in canonical form. Anything else is not a planning line.

    Args:
        line: A single line without newline

    Returns:
        PlanningItems, or None if the line is not a planning line
    """
    match = PLANNING_LINE_RE.match(line)
    if not match:
        return None

    items = []
    seen = set()
    for item_match in PLANNING_ITEM_RE.finditer(match.group("items")):
        planning_type = item_match.group("type")
        if planning_type in seen:
            return None
        seen.add(planning_type)

        timestamp = parse_exact_timestamp(item_match.group("timestamp"))
        if timestamp is None:
            return None
        items.append(PlanningItem(type=planning_type, timestamp=timestamp))

    return PlanningItems(items=tuple(items), indent=match.group("indent"))


def parse_planning_items(description: str) -> PlanningExtraction:
    """Strip the planning line from the start of a heading description.

    Only the first line is examined. If it is a planning line it is removed
    together with its newline; every other line, including its indentation,
    is left exactly as it was.

    Args:
        description: Raw description text (lines separated by "\\n")

    Returns:
        PlanningExtraction with the items found and the remaining description

    Examples:
        >>> parse_planning_items("  - indented list\\n     - Foo").stripped_description
        '  - indented list\\n     - Foo'
        >>> result = parse_planning_items("SCHEDULED: <2019-07-30 Tue>\\n  - indented list")
        >>> result.stripped_description
        '  - indented list'
        >>> result.planning_items.scheduled.render()
        '<2019-07-30 Tue>'
    """
    first_line, _, rest = description.partition("\n")
    planning_items = parse_planning_line(first_line)
    if planning_items is None:
        return PlanningExtraction(planning_items=PlanningItems(), stripped_description=description)
    return PlanningExtraction(planning_items=planning_items, stripped_description=rest)
