"""Exporter: OrgDocument back to org text.

IMPORTANT: Exact inverse of the tree builder:

- Emits lines_before_headings verbatim
- Headings in document order: heading line, planning line, properties
  drawer, logbook drawer, then the description rebuilt by joining the
  source text of its inline spans
- Never adds or removes blank lines; every blank line lives in a
  description or in lines_before_headings

Parsed items keep their own spacing. Items built in code get Emacs'
defaults from OutlineConfig (tag column, property format, indentation).
"""

from typing import Optional

from org_outline.classifier import LineKind, classify_line, split_lines
from org_outline.config import DEFAULT_CONFIG, OutlineConfig
from org_outline.document import Heading, OrgDocument
from org_outline.exceptions import DocumentInvariantError
from org_outline.markup import spans_to_text


def default_indent(heading: Heading, config: OutlineConfig = DEFAULT_CONFIG) -> str:
    """Indentation for planning lines and drawers that carry none of their own."""
    return " " * (heading.level + 1) if config.adapt_indentation else ""


def render_heading_line(heading: Heading, config: OutlineConfig = DEFAULT_CONFIG) -> str:
    """Render the stars line: stars, keyword, priority, title and tag block.

    Examples:
        >>> render_heading_line(
        ...     Heading(level=2, title="Call mom", keyword="TODO", tags=("family",), tags_gap=" ")
        ... )
        '** TODO Call mom :family:'
    """
    priority = f"[#{heading.priority}]" if heading.priority else None
    title = spans_to_text(heading.title_markup)
    head = " ".join(part for part in (heading.keyword, priority, title) if part)
    line = f"{'*' * heading.level} {head}"

    if heading.tags:
        tag_block = f":{':'.join(heading.tags)}:"
        if heading.tags_gap is not None:
            gap = heading.tags_gap
        else:
            # org-tags-column: right-align the tag block to the column
            gap = " " * max(1, config.tag_column - len(line) - len(tag_block))
        line += gap + tag_block

    return line


def render_heading(heading: Heading, config: OutlineConfig = DEFAULT_CONFIG) -> list[str]:
    """Render one heading (without its children) as lines.

    Args:
        heading: Heading to render
        config: Outline configuration

    Returns:
        Lines in order: heading line, planning, properties, logbook, description
    """
    indent = default_indent(heading, config)
    lines = [render_heading_line(heading, config)]

    if heading.planning:
        planning_indent = heading.planning.indent if heading.planning.indent is not None else indent
        lines.append(heading.planning.render(planning_indent, config.planning_order))

    if heading.properties is not None:
        lines.extend(heading.properties.render_lines(indent, config.property_key_width))

    if heading.logbook is not None:
        lines.extend(heading.logbook.render_lines(indent))

    lines.extend(spans_to_text(spans) for spans in heading.description_markup)
    return lines


def validate_document(document: OrgDocument) -> None:
    """Check the invariants export relies on.

    Raises:
        DocumentInvariantError: If a child is not nested deeper than its
            parent, a keyword belongs to no keyword set, planning types repeat,
            or text outside heading lines would parse back as a heading
    """
    known_keywords = set(document.all_keywords)

    for line in split_lines(document.lines_before_headings):
        if classify_line(line).kind is LineKind.HEADING:
            raise DocumentInvariantError(
                "preamble_heading", f"lines_before_headings contains a heading line: {line!r}"
            )

    def check(heading: Heading, index: int, parent_level: Optional[int]) -> None:
        if parent_level is not None and heading.level <= parent_level:
            raise DocumentInvariantError(
                "child_level",
                f"Child level {heading.level} must be deeper than parent level {parent_level}",
                index,
            )
        if heading.keyword is not None and heading.keyword not in known_keywords:
            raise DocumentInvariantError(
                "unknown_keyword",
                f"Keyword {heading.keyword!r} is not in any TODO keyword set",
                index,
            )
        types = [item.type for item in heading.planning.items]
        if len(set(types)) != len(types):
            raise DocumentInvariantError(
                "duplicate_planning", f"Planning types repeat: {types}", index
            )
        for line in heading.description_lines:
            if classify_line(line).kind is LineKind.HEADING:
                raise DocumentInvariantError(
                    "description_heading", f"Description contains a heading line: {line!r}", index
                )

    counter = 0

    def walk(heading: Heading, parent_level: Optional[int]) -> None:
        nonlocal counter
        check(heading, counter, parent_level)
        counter += 1
        for child in heading.children:
            walk(child, heading.level)

    for heading in document.headings:
        walk(heading, None)


def export(document: OrgDocument, config: Optional[OutlineConfig] = None) -> str:
    """Export an OrgDocument to org text.

    For a document returned by ``parse(text)``, the result equals ``text``.

    Args:
        document: Document to export
        config: Outline configuration (defaults when None)

    Returns:
        Org text

    Raises:
        DocumentInvariantError: If the document breaks a model invariant
    """
    config = config or DEFAULT_CONFIG
    validate_document(document)

    lines = split_lines(document.lines_before_headings)
    for heading in document.iter_headings():
        lines.extend(render_heading(heading, config))

    text = "\n".join(lines)
    if document.trailing_newline:
        text += "\n"
    return text
