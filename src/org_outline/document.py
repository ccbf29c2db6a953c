"""Document model: OrgDocument and its Heading tree.

The model is immutable value data. Edits go through ``dataclasses.replace``
followed by ``OrgDocument.rebuild()``, never through in-place text patching.

Headings own their children. Ancestry is reached through ``Heading.path``
(child positions from the root), and ``Heading.id`` is the heading's preorder
index, the same index used by the query helpers.
"""

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Iterator, Optional

from org_outline.classifier import split_lines
from org_outline.drawers import LogbookDrawer, PropertyDrawer
from org_outline.exceptions import DocumentInvariantError, HeadingIndexError
from org_outline.markup import InlineSpan, tokenize
from org_outline.planning import PlanningItems

if TYPE_CHECKING:
    from org_outline.config import OutlineConfig


TAG_RE = re.compile(r"^[\w@#%]+$")
PRIORITY_RE = re.compile(r"^[A-Z]$")


@dataclass(frozen=True)
class TodoKeywordSet:
    """One TODO keyword sequence: active keywords, then done keywords.

    Attributes:
        active: Keywords for open tasks (e.g. TODO, NEXT)
        done: Keywords for finished tasks (e.g. DONE, CANCELLED)
        default: True for the built-in set used when the file declares none
    """

    active: tuple[str, ...]
    done: tuple[str, ...] = ()
    default: bool = False

    @property
    def keywords(self) -> tuple[str, ...]:
        return self.active + self.done

    def __contains__(self, keyword: str) -> bool:
        return keyword in self.keywords

    def is_done(self, keyword: str) -> bool:
        return keyword in self.done


@dataclass(frozen=True)
class ParseWarning:
    """Non-fatal problem found while parsing (e.g. a malformed drawer).

    Attributes:
        kind: Machine-readable kind ("malformed_drawer", "clock_duration_mismatch")
        line_number: 1-based line number in the source text
        message: Human-readable description
    """

    kind: str
    line_number: int
    message: str


@dataclass(frozen=True)
class Heading:
    """A heading with its planning items, drawers, description and children.

    Attributes:
        level: Star count (>= 1)
        title: Title text without keyword, priority and tags
        keyword: TODO keyword, None if the heading is not a task
        priority: Priority letter (``[#A]`` is "A")
        tags: Tags in written order
        tags_gap: Whitespace between title and tag block as parsed
            (None: align to the configured tag column)
        planning: SCHEDULED / DEADLINE / CLOSED items
        properties: Properties drawer, None if the heading has none
        logbook: Logbook drawer, None if the heading has none
        description: Body text after planning and drawers; every line is
            newline-terminated ("" means no lines at all)
        children: Child headings in order
        id: Preorder index within the document (None for headings built in code)
        path: Child positions from the document root
    """

    level: int
    title: str = ""
    keyword: Optional[str] = None
    priority: Optional[str] = None
    tags: tuple[str, ...] = ()
    tags_gap: Optional[str] = None
    planning: PlanningItems = field(default_factory=PlanningItems)
    properties: Optional[PropertyDrawer] = None
    logbook: Optional[LogbookDrawer] = None
    description: str = ""
    children: tuple["Heading", ...] = ()
    id: Optional[int] = None
    path: tuple[int, ...] = ()

    def __post_init__(self):
        if self.level < 1:
            raise DocumentInvariantError(
                "heading_level", f"Heading level must be >= 1, got {self.level}", self.id
            )
        if "\n" in self.title:
            raise DocumentInvariantError("multiline_title", "Title must be a single line", self.id)
        if self.priority is not None and not PRIORITY_RE.match(self.priority):
            raise DocumentInvariantError(
                "priority_range", f"Priority must be a letter A-Z, got {self.priority!r}", self.id
            )
        for tag in self.tags:
            if not TAG_RE.match(tag):
                raise DocumentInvariantError("malformed_tag", f"Invalid tag {tag!r}", self.id)
        if len(set(self.tags)) != len(self.tags):
            raise DocumentInvariantError(
                "duplicate_tags", f"Tags must be unique, got {list(self.tags)}", self.id
            )

    @cached_property
    def title_markup(self) -> tuple[InlineSpan, ...]:
        """Title split into inline markup spans."""
        return tuple(tokenize(self.title))

    @property
    def description_lines(self) -> list[str]:
        return split_lines(self.description)

    @cached_property
    def description_markup(self) -> tuple[tuple[InlineSpan, ...], ...]:
        """Description split into lines, each split into inline markup spans."""
        return tuple(tuple(tokenize(line)) for line in self.description_lines)

    def get_property(self, key: str) -> Optional[str]:
        """Value of a property on this heading only (no inheritance), ignoring key case."""
        if self.properties is None:
            return None
        return self.properties.value(key)


@dataclass(frozen=True)
class OrgDocument:
    """Parsed org file.

    Attributes:
        headings: Top-level headings
        todo_keyword_sets: Keyword sets in effect (declared, or the default set)
        file_config_lines: ``#+KEY: value`` lines found before the first heading
            (a view; they are exported as part of lines_before_headings)
        lines_before_headings: Text before the first heading, every line
            newline-terminated
        trailing_newline: Whether the source ended with a newline
        warnings: Non-fatal problems found while parsing
    """

    headings: tuple[Heading, ...] = ()
    todo_keyword_sets: tuple[TodoKeywordSet, ...] = ()
    file_config_lines: tuple[str, ...] = ()
    lines_before_headings: str = ""
    trailing_newline: bool = False
    warnings: tuple[ParseWarning, ...] = field(default=(), compare=False)

    @classmethod
    def parse(cls, text: str, config: Optional["OutlineConfig"] = None) -> "OrgDocument":
        """Parse org text. See org_outline.parser.parse."""
        from org_outline.parser import parse

        return parse(text, config)

    def render(self, config: Optional["OutlineConfig"] = None) -> str:
        """Export back to org text. See org_outline.exporter.export."""
        from org_outline.exporter import export

        return export(self, config)

    def rebuild(self, config: Optional["OutlineConfig"] = None) -> "OrgDocument":
        """Export and re-parse, renumbering ids and paths after edits made in code."""
        return self.parse(self.render(config), config)

    @cached_property
    def _flat(self) -> tuple[tuple[Heading, tuple[Heading, ...]], ...]:
        flat: list[tuple[Heading, tuple[Heading, ...]]] = []

        def walk(heading: Heading, ancestors: tuple[Heading, ...]) -> None:
            flat.append((heading, ancestors))
            for child in heading.children:
                walk(child, ancestors + (heading,))

        for heading in self.headings:
            walk(heading, ())
        return tuple(flat)

    def iter_headings(self) -> Iterator[Heading]:
        """Yield every heading in document (preorder) order."""
        for heading, _ancestors in self._flat:
            yield heading

    @property
    def heading_count(self) -> int:
        return len(self._flat)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._flat):
            raise HeadingIndexError(index, len(self._flat))

    def heading_at(self, index: int) -> Heading:
        """Heading with the given preorder index.

        Raises:
            HeadingIndexError: If the index is negative or out of range
        """
        self._check_index(index)
        return self._flat[index][0]

    def ancestors(self, index: int) -> tuple[Heading, ...]:
        """Ancestors of the heading at ``index``, root first.

        Raises:
            HeadingIndexError: If the index is negative or out of range
        """
        self._check_index(index)
        return self._flat[index][1]

    def heading_by_path(self, path: tuple[int, ...]) -> Heading:
        """Follow child positions from the root.

        Raises:
            HeadingIndexError: If any position along the path does not exist
        """
        if not path:
            raise HeadingIndexError(-1, len(self.headings))
        siblings = self.headings
        heading = None
        for position in path:
            if not 0 <= position < len(siblings):
                raise HeadingIndexError(position, len(siblings))
            heading = siblings[position]
            siblings = heading.children
        return heading

    @property
    def all_keywords(self) -> tuple[str, ...]:
        keywords: list[str] = []
        for keyword_set in self.todo_keyword_sets:
            keywords.extend(k for k in keyword_set.keywords if k not in keywords)
        return tuple(keywords)

    def keyword_set_for(self, keyword: str) -> Optional[TodoKeywordSet]:
        """First keyword set containing ``keyword``."""
        for keyword_set in self.todo_keyword_sets:
            if keyword in keyword_set:
                return keyword_set
        return None

    def is_done(self, heading: Heading) -> bool:
        """Whether the heading's keyword is a done keyword of its set."""
        if heading.keyword is None:
            return False
        keyword_set = self.keyword_set_for(heading.keyword)
        return keyword_set is not None and keyword_set.is_done(heading.keyword)

    @property
    def startup_options(self) -> list[str]:
        """Tokens of all ``#+STARTUP:`` lines, in file order."""
        options: list[str] = []
        for line in self.file_config_lines:
            key, _, value = line[2:].partition(":")
            if key.upper() == "STARTUP":
                options.extend(value.split())
        return options
