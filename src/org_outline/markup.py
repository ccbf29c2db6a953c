"""Inline markup tokenizer for single org lines.

``tokenize`` splits a line into an ordered list of spans. Every span keeps
enough information to reproduce its exact source text, so joining the
``source`` of all spans gives back the line.

At each position the matchers in ``MATCHERS`` are tried in order and the
first hit wins:

1. bracket links ``[[target][description]]`` / ``[[target]]``
2. raw URLs (``https://...``, ``mailto:...``)
3. e-mail addresses
4. phone numbers in canonical ``+`` form
5. progress cookies ``[50%]`` / ``[1/3]``
6. emphasis ``*bold*`` ``/italic/`` ``_underline_`` ``=verbatim=`` ``~code~`` ``+strike+``

URLs, e-mail addresses and phone numbers are tried before emphasis, so a
``/`` or ``=`` inside them never opens or closes emphasis.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union


class EmphasisKind(Enum):
    """Emphasis styles keyed by their delimiter character."""

    BOLD = "*"
    ITALIC = "/"
    UNDERLINE = "_"
    VERBATIM = "="
    CODE = "~"
    STRIKE = "+"


class CookieKind(Enum):
    PERCENTAGE = "percentage"
    FRACTION = "fraction"


@dataclass(frozen=True)
class PlainText:
    text: str

    @property
    def source(self) -> str:
        return self.text


@dataclass(frozen=True)
class Emphasis:
    kind: EmphasisKind
    content: str

    @property
    def source(self) -> str:
        return f"{self.kind.value}{self.content}{self.kind.value}"


@dataclass(frozen=True)
class Link:
    target: str
    description: Optional[str] = None

    @property
    def source(self) -> str:
        if self.description is None:
            return f"[[{self.target}]]"
        return f"[[{self.target}][{self.description}]]"


@dataclass(frozen=True)
class RawURL:
    url: str

    @property
    def source(self) -> str:
        return self.url


@dataclass(frozen=True)
class Email:
    address: str

    @property
    def source(self) -> str:
        return self.address


@dataclass(frozen=True)
class Phone:
    number: str

    @property
    def source(self) -> str:
        return self.number


@dataclass(frozen=True)
class Cookie:
    """Progress cookie. ``values`` is ``(percent,)`` or ``(done, total)``; empty parts are None."""

    kind: CookieKind
    values: tuple[Optional[int], ...]

    @property
    def source(self) -> str:
        parts = ["" if value is None else str(value) for value in self.values]
        if self.kind is CookieKind.PERCENTAGE:
            return f"[{parts[0]}%]"
        return f"[{parts[0]}/{parts[1]}]"


InlineSpan = Union[PlainText, Emphasis, Link, RawURL, Email, Phone, Cookie]

# A matcher returns the span found at a position and the index just past it.
Matcher = Callable[[str, int], Optional[tuple[InlineSpan, int]]]


LINK_RE = re.compile(r"\[\[(?P<target>[^\[\]]+)\](?:\[(?P<description>[^\[\]]+)\])?\]")
URL_RE = re.compile(r"(?:https?|ftp|file|mailto):[^\s<>\[\]\"]+")
EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"\+\d{1,3}(?:[ -]?\d){4,14}")
COOKIE_RE = re.compile(
    r"\[(?:(?P<percent>0|[1-9]\d*)?%|(?P<done>0|[1-9]\d*)?/(?P<total>0|[1-9]\d*)?)\]"
)

URL_TRAILING_PUNCTUATION = ".,;:!?'\")"

EMPHASIS_PRE = frozenset(" \t-('\"{")
EMPHASIS_POST = frozenset(" \t-.,:!?;'\")}[")
EMPHASIS_MARKERS = {kind.value: kind for kind in EmphasisKind}


def _starts_word(line: str, pos: int) -> bool:
    return pos == 0 or not line[pos - 1].isalnum()


def _match_link(line: str, pos: int) -> Optional[tuple[InlineSpan, int]]:
    match = LINK_RE.match(line, pos)
    if not match:
        return None
    return Link(target=match.group("target"), description=match.group("description")), match.end()


def _trim_url(url: str) -> str:
    """Drop trailing punctuation; a ``)`` stays when it closes a ``(`` in the URL."""
    while url and url[-1] in URL_TRAILING_PUNCTUATION:
        if url[-1] == ")" and url.count("(") >= url.count(")"):
            break
        url = url[:-1]
    return url


def _match_url(line: str, pos: int) -> Optional[tuple[InlineSpan, int]]:
    if not _starts_word(line, pos):
        return None
    match = URL_RE.match(line, pos)
    if not match:
        return None
    url = _trim_url(match.group(0))
    _scheme, _, rest = url.partition(":")
    if not any(ch.isalnum() for ch in rest):
        return None
    return RawURL(url=url), pos + len(url)


def _match_email(line: str, pos: int) -> Optional[tuple[InlineSpan, int]]:
    if not _starts_word(line, pos):
        return None
    match = EMAIL_RE.match(line, pos)
    if not match:
        return None
    return Email(address=match.group(0)), match.end()


def _match_phone(line: str, pos: int) -> Optional[tuple[InlineSpan, int]]:
    if not _starts_word(line, pos):
        return None
    match = PHONE_RE.match(line, pos)
    if not match:
        return None
    return Phone(number=match.group(0)), match.end()


def _match_cookie(line: str, pos: int) -> Optional[tuple[InlineSpan, int]]:
    match = COOKIE_RE.match(line, pos)
    if not match:
        return None

    def as_int(text: Optional[str]) -> Optional[int]:
        return int(text) if text else None

    if match.group(0).endswith("%]"):
        cookie = Cookie(kind=CookieKind.PERCENTAGE, values=(as_int(match.group("percent")),))
    else:
        cookie = Cookie(
            kind=CookieKind.FRACTION,
            values=(as_int(match.group("done")), as_int(match.group("total"))),
        )
    return cookie, match.end()


def _match_emphasis(line: str, pos: int) -> Optional[tuple[InlineSpan, int]]:
    """Match emphasis opening at ``pos`` using org's border rules.

    The opening delimiter must follow line start or a pre character and be
    followed by non-whitespace. The closing delimiter is the first same
    delimiter that follows non-whitespace and precedes line end or a post
    character.
    """
    marker = line[pos]
    kind = EMPHASIS_MARKERS.get(marker)
    if kind is None:
        return None
    if pos > 0 and line[pos - 1] not in EMPHASIS_PRE:
        return None
    if pos + 1 >= len(line) or line[pos + 1].isspace():
        return None

    close = line.find(marker, pos + 2)
    while close != -1:
        after = close + 1
        if not line[close - 1].isspace() and (after == len(line) or line[after] in EMPHASIS_POST):
            return Emphasis(kind=kind, content=line[pos + 1:close]), after
        close = line.find(marker, close + 1)
    return None


MATCHERS: tuple[Matcher, ...] = (
    _match_link,
    _match_url,
    _match_email,
    _match_phone,
    _match_cookie,
    _match_emphasis,
)


def tokenize(line: str) -> list[InlineSpan]:
    """Split one line into inline markup spans.

    Total and deterministic: text that matches nothing becomes PlainText, and
    adjacent plain characters are merged into a single span.

    Args:
        line: A single line (no newline)

    Returns:
        Spans in left-to-right order covering the whole line

    Examples:
        >>> tokenize("*bold*;")
        [Emphasis(kind=<EmphasisKind.BOLD: '*'>, content='bold'), PlainText(text=';')]
        >>> spans_to_text(tokenize("see [[https://orgmode.org][Org]]"))
        'see [[https://orgmode.org][Org]]'
    """
    spans: list[InlineSpan] = []
    plain: list[str] = []
    pos = 0

    while pos < len(line):
        for matcher in MATCHERS:
            result = matcher(line, pos)
            if result is not None:
                break
        else:
            plain.append(line[pos])
            pos += 1
            continue

        if plain:
            spans.append(PlainText("".join(plain)))
            plain = []
        span, pos = result
        spans.append(span)

    if plain:
        spans.append(PlainText("".join(plain)))

    return spans


def spans_to_text(spans: list[InlineSpan] | tuple[InlineSpan, ...]) -> str:
    """Join span sources back into the original line."""
    return "".join(span.source for span in spans)
