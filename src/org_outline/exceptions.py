"""Custom exceptions for the org outline engine.

Parsing and export degrade silently for content the format itself treats
loosely. Only caller contract violations surface as exceptions.
"""

from typing import Optional


class OrgOutlineError(Exception):
    """Base class for all org-outline errors."""


class HeadingIndexError(OrgOutlineError, IndexError):
    """Raised when a heading index does not address a heading in the document.

    Attributes:
        index: The requested preorder heading index
        heading_count: Number of headings in the document
    """

    def __init__(self, index: int, heading_count: int):
        """Initialize HeadingIndexError.

        Args:
            index: The requested preorder heading index
            heading_count: Number of headings in the document
        """
        self.index = index
        self.heading_count = heading_count
        super().__init__(
            f"Heading index {index} out of range: document has {heading_count} headings"
        )


class DocumentInvariantError(OrgOutlineError, ValueError):
    """Raised when a document or heading breaks a model invariant.

    Attributes:
        invariant: Short name of the broken invariant (e.g. "duplicate_tags")
        heading_id: Preorder index of the offending heading, if known
        message: Human-readable error message
    """

    def __init__(self, invariant: str, message: str, heading_id: Optional[int] = None):
        self.invariant = invariant
        self.heading_id = heading_id
        self.message = message
        location = f" (heading {heading_id})" if heading_id is not None else ""
        super().__init__(f"{invariant}{location}: {message}")


class UnknownFlagError(OrgOutlineError, ValueError):
    """Raised when an inherited-flag query names a flag the engine does not know."""

    def __init__(self, flag_name: str, known: tuple[str, ...]):
        self.flag_name = flag_name
        self.known = known
        super().__init__(f"Unknown flag {flag_name!r}; expected one of: {', '.join(known)}")


class MalformedDrawerError(OrgOutlineError):
    """Raised by the drawer parser for an unterminated or inconsistent drawer.

    The tree builder catches this and keeps the drawer lines as plain
    description content.

    Attributes:
        offset: Line offset of the drawer's opening line within the heading body
        reason: What made the drawer malformed
    """

    def __init__(self, offset: int, reason: str):
        self.offset = offset
        self.reason = reason
        super().__init__(f"Malformed drawer at body line {offset}: {reason}")


class ConfigError(OrgOutlineError):
    """Raised when a configuration file cannot be read or validated."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")
