"""Tree builder: org text to OrgDocument.

IMPORTANT: Round-trip guarantee. For every text in the supported subset,
``export(parse(text)) == text``:

- Lines before the first heading are kept verbatim
- Heading bodies are split into planning line, properties drawer, logbook
  drawer and description; each keeps its exact formatting
- Anything the builder cannot structure without losing bytes (malformed
  drawers, non-canonical timestamps, unknown keywords) stays as plain text
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from org_outline.classifier import (
    ClassifiedLine,
    LineKind,
    classify_line,
    join_lines,
    split_lines,
)
from org_outline.config import DEFAULT_CONFIG, OutlineConfig
from org_outline.document import Heading, OrgDocument, ParseWarning, TodoKeywordSet
from org_outline.drawers import (
    LOGBOOK_DRAWER,
    PROPERTIES_DRAWER,
    ClockEntry,
    LogbookDrawer,
    PropertyDrawer,
    parse_logbook_drawer,
    parse_property_drawer,
)
from org_outline.exceptions import MalformedDrawerError
from org_outline.planning import PlanningItems, parse_planning_items


TODO_CONFIG_KEYS = {"TODO", "SEQ_TODO", "TYP_TODO"}

TAGS_RE = re.compile(r"^(?P<head>.*?)(?P<gap>[ \t]+)(?P<tags>:(?:[\w@#%]+:)+)$")
PRIORITY_COOKIE_RE = re.compile(r"^\[#(?P<priority>[A-Z])\]")
FAST_ACCESS_RE = re.compile(r"\(.*\)$")


@dataclass(frozen=True)
class HeadingLine:
    """Fields parsed from the text after a heading's stars."""

    title: str
    keyword: Optional[str] = None
    priority: Optional[str] = None
    tags: tuple[str, ...] = ()
    tags_gap: Optional[str] = None


@dataclass
class _PendingHeading:
    """Mutable heading under construction; frozen once the tree is complete."""

    id: int
    level: int
    path: tuple[int, ...]
    fields: dict
    children: list["_PendingHeading"] = field(default_factory=list)

    def freeze(self) -> Heading:
        return Heading(
            level=self.level,
            children=tuple(child.freeze() for child in self.children),
            id=self.id,
            path=self.path,
            **self.fields,
        )


def parse_todo_keyword_sets(
    file_config_lines: Iterable[str], config: OutlineConfig = DEFAULT_CONFIG
) -> tuple[TodoKeywordSet, ...]:
    """Collect keyword sets from ``#+TODO:`` / ``#+SEQ_TODO:`` / ``#+TYP_TODO:`` lines.

    ``|`` separates active from done keywords; without it the last keyword is
    the done keyword. Fast-access suffixes like ``(t)`` or ``(w@/!)`` are
    dropped. If the file declares no set, the configured default set is used.

    Args:
        file_config_lines: Raw ``#+KEY: value`` lines
        config: Outline configuration supplying the default set

    Returns:
        Keyword sets in declaration order
    """
    keyword_sets = []
    for raw in file_config_lines:
        line = classify_line(raw)
        if line.kind is not LineKind.FILE_CONFIG or line.key.upper() not in TODO_CONFIG_KEYS:
            continue

        words = [FAST_ACCESS_RE.sub("", word) for word in line.value.split()]
        words = [word for word in words if word]
        if "|" in words:
            bar = words.index("|")
            active = words[:bar]
            done = [word for word in words[bar + 1:] if word != "|"]
        else:
            active, done = words[:-1], words[-1:]

        if active or done:
            keyword_sets.append(TodoKeywordSet(active=tuple(active), done=tuple(done)))

    if not keyword_sets:
        defaults = config.default_todo_keywords
        keyword_sets.append(
            TodoKeywordSet(active=tuple(defaults.active), done=tuple(defaults.done), default=True)
        )

    return tuple(keyword_sets)


def parse_heading_line(text: str, keywords: Iterable[str]) -> HeadingLine:
    """Split heading text into keyword, priority, title and tags.

    A separating space after the keyword or priority cookie is only consumed
    when more text follows it, so the heading line always renders back to
    the same text.

    Args:
        text: Heading text after the stars and one space
        keywords: Known TODO keywords

    Returns:
        HeadingLine with the parsed fields

    Examples:
        >>> parse_heading_line("TODO [#A] Call mom   :family:", {"TODO", "DONE"})
        HeadingLine(title='Call mom', keyword='TODO', priority='A', tags=('family',), tags_gap='   ')
    """
    keywords = set(keywords)
    head, tags, tags_gap = text, (), None

    if match := TAGS_RE.match(text):
        found = tuple(tag for tag in match.group("tags").split(":") if tag)
        if len(set(found)) == len(found):
            head, tags, tags_gap = match.group("head"), found, match.group("gap")

    keyword = None
    first, _, rest = head.partition(" ")
    if head in keywords:
        keyword, head = head, ""
    elif first in keywords and rest:
        keyword, head = first, rest

    priority = None
    if match := PRIORITY_COOKIE_RE.match(head):
        after = head[match.end():]
        if not after:
            priority, head = match.group("priority"), ""
        elif after.startswith(" ") and len(after) > 1:
            priority, head = match.group("priority"), after[1:]

    return HeadingLine(title=head, keyword=keyword, priority=priority, tags=tags, tags_gap=tags_gap)


def parse(text: str, config: Optional[OutlineConfig] = None) -> OrgDocument:
    """Parse org text into an OrgDocument.

    Never fails on content: unknown or malformed constructs degrade to plain
    text, and malformed drawers are reported through ``OrgDocument.warnings``.

    Args:
        text: Complete org file contents
        config: Outline configuration (defaults when None)

    Returns:
        Parsed OrgDocument

    Examples:
        >>> doc = parse("#+TITLE: Notes\\n* TODO Write tests :dev:\\n")
        >>> doc.headings[0].keyword, doc.headings[0].tags
        ('TODO', ('dev',))
        >>> doc.render() == "#+TITLE: Notes\\n* TODO Write tests :dev:\\n"
        True
    """
    config = config or DEFAULT_CONFIG

    if not text:
        return OrgDocument(todo_keyword_sets=parse_todo_keyword_sets((), config))

    trailing_newline = text.endswith("\n")
    lines = (text[:-1] if trailing_newline else text).split("\n")
    classified = [classify_line(line) for line in lines]

    heading_starts = [i for i, line in enumerate(classified) if line.kind is LineKind.HEADING]
    first_heading = heading_starts[0] if heading_starts else len(lines)

    file_config_lines = tuple(
        line.raw for line in classified[:first_heading] if line.kind is LineKind.FILE_CONFIG
    )
    keyword_sets = parse_todo_keyword_sets(file_config_lines, config)

    builder = _TreeBuilder(keywords={k for s in keyword_sets for k in s.keywords})
    for n, start in enumerate(heading_starts):
        end = heading_starts[n + 1] if n + 1 < len(heading_starts) else len(lines)
        builder.add_heading(classified[start], lines[start + 1:end], line_number=start + 1)

    return OrgDocument(
        headings=builder.finish(),
        todo_keyword_sets=keyword_sets,
        file_config_lines=file_config_lines,
        lines_before_headings=join_lines(lines[:first_heading]),
        trailing_newline=trailing_newline,
        warnings=tuple(builder.warnings),
    )


class _TreeBuilder:
    """Assembles headings into a tree using a stack of open headings."""

    def __init__(self, keywords: set[str]):
        self.keywords = keywords
        self.roots: list[_PendingHeading] = []
        self.stack: list[_PendingHeading] = []
        self.warnings: list[ParseWarning] = []
        self.count = 0

    def add_heading(self, line: ClassifiedLine, body: list[str], line_number: int) -> None:
        """Add one heading and its body.

        Args:
            line: The classified heading line
            body: Lines up to the next heading
            line_number: 1-based line number of the heading line
        """
        level = line.level
        while self.stack and self.stack[-1].level >= level:
            self.stack.pop()

        parent = self.stack[-1] if self.stack else None
        siblings = parent.children if parent else self.roots
        path = (parent.path if parent else ()) + (len(siblings),)

        heading_line = parse_heading_line(line.text, self.keywords)
        planning, properties, logbook, description = self._split_body(body, line_number + 1)

        pending = _PendingHeading(
            id=self.count,
            level=level,
            path=path,
            fields={
                "title": heading_line.title,
                "keyword": heading_line.keyword,
                "priority": heading_line.priority,
                "tags": heading_line.tags,
                "tags_gap": heading_line.tags_gap,
                "planning": planning,
                "properties": properties,
                "logbook": logbook,
                "description": description,
            },
        )
        siblings.append(pending)
        self.stack.append(pending)
        self.count += 1

    def finish(self) -> tuple[Heading, ...]:
        return tuple(root.freeze() for root in self.roots)

    def _split_body(
        self, body: list[str], first_line_number: int
    ) -> tuple[PlanningItems, Optional[PropertyDrawer], Optional[LogbookDrawer], str]:
        """Separate planning line, drawers and description of one heading body."""
        extraction = parse_planning_items(join_lines(body))
        rest = split_lines(extraction.stripped_description)
        rest_line_number = first_line_number + (len(body) - len(rest))

        properties = None
        logbook = None
        pos = 0

        try:
            if pos < len(rest) and _opens_drawer(rest[pos], PROPERTIES_DRAWER):
                properties, pos = parse_property_drawer(rest, pos)
            if pos < len(rest) and _opens_drawer(rest[pos], LOGBOOK_DRAWER):
                logbook_start = pos
                logbook, pos = parse_logbook_drawer(rest, pos)
                self._check_clocks(logbook, rest_line_number + logbook_start + 1)
        except MalformedDrawerError as e:
            self._warn("malformed_drawer", rest_line_number + e.offset, e.reason)

        return extraction.planning_items, properties, logbook, join_lines(rest[pos:])

    def _check_clocks(self, logbook: LogbookDrawer, first_entry_line_number: int) -> None:
        """Warn about clock lines whose written duration disagrees with their timestamps."""
        for offset, entry in enumerate(logbook.entries):
            if not isinstance(entry, ClockEntry) or entry.duration_matches:
                continue
            self._warn(
                "clock_duration_mismatch",
                first_entry_line_number + offset,
                f"recorded {entry.recorded_minutes} min, timestamps give {entry.elapsed_minutes} min",
            )

    def _warn(self, kind: str, line_number: int, message: str) -> None:
        self.warnings.append(ParseWarning(kind=kind, line_number=line_number, message=message))


def _opens_drawer(line: str, name: str) -> bool:
    classified = classify_line(line)
    return classified.kind is LineKind.DRAWER_BEGIN and classified.name == name
