"""Inherited-flag and property queries over a parsed document.

Org resolves logging behaviour per heading: the nearest ``LOGGING`` property
(on the heading itself, then its ancestors) wins; without one, the file's
``#+STARTUP:`` options apply.

    #+STARTUP: nologrepeat
    * Parent
      :PROPERTIES:
      :LOGGING:  logrepeat
      :END:
    ** Child            <- logrepeat on Parent overrides the file option
"""

from typing import Optional

from org_outline.document import OrgDocument
from org_outline.drawers import PropertyItem
from org_outline.exceptions import UnknownFlagError


LOGGING_PROPERTY = "LOGGING"

# Each flag with the token that switches it off again
FLAG_OPPOSITES = {
    "nologrepeat": "logrepeat",
    "logrepeat": "nologrepeat",
    "nologdone": "logdone",
    "logdone": "nologdone",
    "nologreschedule": "logreschedule",
    "logreschedule": "nologreschedule",
    "nologredeadline": "logredeadline",
    "logredeadline": "nologredeadline",
    "nologrefile": "logrefile",
    "logrefile": "nologrefile",
    "nolognoteclock-out": "lognoteclock-out",
    "lognoteclock-out": "nolognoteclock-out",
}


def inherited_property(document: OrgDocument, heading_index: int, key: str) -> Optional[PropertyItem]:
    """Find the nearest property with ``key``, looking at the heading and then its ancestors.

    Args:
        document: Parsed document
        heading_index: Preorder index of the heading
        key: Property key (case-insensitive)

    Returns:
        The nearest PropertyItem, or None if no heading on the path defines it

    Raises:
        HeadingIndexError: If heading_index is negative or out of range
    """
    heading = document.heading_at(heading_index)
    for candidate in (heading, *reversed(document.ancestors(heading_index))):
        if candidate.properties is not None:
            item = candidate.properties.get(key)
            if item is not None:
                return item
    return None


def query_inherited_flag(
    document: OrgDocument, heading_index: int, flag_name: str = "nologrepeat"
) -> bool:
    """Resolve a logging flag for a heading, honouring inheritance.

    The nearest ``LOGGING`` property decides: the flag is on only if its token
    is listed there, so ``:LOGGING: nil`` or the opposite token on a child
    turns off an option set higher up. Without any ``LOGGING`` property the
    last matching ``#+STARTUP:`` token decides. Otherwise the flag is off.

    Args:
        document: Parsed document
        heading_index: Preorder index of the heading
        flag_name: One of the known logging flags (e.g. "nologrepeat")

    Returns:
        True if the flag is in effect for the heading

    Raises:
        UnknownFlagError: If flag_name is not a known logging flag
        HeadingIndexError: If heading_index is negative or out of range

    Examples:
        >>> doc = OrgDocument.parse("#+STARTUP: nologrepeat\\n* Task\\n")
        >>> query_inherited_flag(doc, 0, "nologrepeat")
        True
    """
    if flag_name not in FLAG_OPPOSITES:
        raise UnknownFlagError(flag_name, tuple(FLAG_OPPOSITES))

    logging_item = inherited_property(document, heading_index, LOGGING_PROPERTY)
    if logging_item is not None:
        return flag_name in logging_item.value.split()

    opposite = FLAG_OPPOSITES[flag_name]
    enabled = False
    for option in document.startup_options:
        if option == flag_name:
            enabled = True
        elif option == opposite:
            enabled = False
    return enabled


def no_log_repeat_enabled(document: OrgDocument, heading_index: int) -> bool:
    """Whether repeating tasks under this heading skip the "State DONE" log note."""
    return query_inherited_flag(document, heading_index, "nologrepeat")
