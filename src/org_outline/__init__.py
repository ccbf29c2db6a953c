"""org-outline - Parse and export org-mode outlines without losing a byte.

This package parses org-mode text into an immutable document tree and
exports it back to text. For every input in the supported subset,
``export(parse(text)) == text``.

Key features:
- Heading tree with TODO keywords, priorities, tags and planning items
- Properties and logbook drawers with exact spacing preserved
- Inline markup tokenizer (emphasis, links, URLs, e-mail, phone numbers, cookies)
- Inherited logging flags (LOGGING property / #+STARTUP options)

Example:
    >>> from org_outline import OrgDocument
    >>> doc = OrgDocument.parse("* TODO [#A] Buy milk :errand:\\n")
    >>> doc.headings[0].priority
    'A'
    >>> doc.render()
    '* TODO [#A] Buy milk :errand:\\n'
"""

from org_outline.document import Heading, OrgDocument
from org_outline.exporter import export
from org_outline.markup import tokenize
from org_outline.parser import parse
from org_outline.planning import parse_planning_items
from org_outline.query import no_log_repeat_enabled, query_inherited_flag

__version__ = "0.1.0"

__all__ = [
    "Heading",
    "OrgDocument",
    "export",
    "no_log_repeat_enabled",
    "parse",
    "parse_planning_items",
    "query_inherited_flag",
    "tokenize",
]
