"""Org timestamps: ``<2019-07-30 Tue 10:00-11:00 +1w -2d>`` and ``[...]``.

Timestamps render canonically (single spaces, zero-padded times). Callers that
must preserve bytes check ``Timestamp.render() == source`` before treating a
piece of text as a structured timestamp.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional


UNITS = "hdwmy"

TIMESTAMP_RE = re.compile(
    r"(?P<open>[<\[])"
    r"(?P<date>\d{4}-\d{2}-\d{2})"
    r"(?: (?P<weekday>[^\s\d<>\[\]+.\-]+))?"
    r"(?: (?P<start>\d{1,2}:\d{2})(?:-(?P<end>\d{1,2}:\d{2}))?)?"
    r"(?: (?P<repeater>(?:\+\+|\.\+|\+)\d+[hdwmy])(?:/(?P<limit>\d+[hdwmy]))?)?"
    r"(?: (?P<delay>--?\d+[hdwmy]))?"
    r"(?P<close>[>\]])"
)

_INTERVAL_RE = re.compile(r"^(?P<kind>\+\+|\.\+|\+|--|-)(?P<value>\d+)(?P<unit>[hdwmy])$")


@dataclass(frozen=True)
class Repeater:
    """Repeater cookie such as ``+1w``, ``++2d`` or ``.+1m`` (habits may add ``/3d``)."""

    kind: str
    value: int
    unit: str
    limit: Optional[str] = None

    def render(self) -> str:
        text = f"{self.kind}{self.value}{self.unit}"
        if self.limit:
            text += f"/{self.limit}"
        return text


@dataclass(frozen=True)
class Delay:
    """Warning delay cookie: ``-2d`` (all occurrences) or ``--2d`` (first only)."""

    kind: str
    value: int
    unit: str

    def render(self) -> str:
        return f"{self.kind}{self.value}{self.unit}"


@dataclass(frozen=True)
class Timestamp:
    """A single org timestamp.

    Attributes:
        date: Calendar date
        active: True for ``<...>``, False for ``[...]``
        weekday: Day name exactly as written (may be localized), None if absent
        start: Start time, None for all-day timestamps
        end: End time of a same-day range (``10:00-11:00``)
        repeater: Repeater cookie
        delay: Warning delay cookie
    """

    date: date
    active: bool = True
    weekday: Optional[str] = None
    start: Optional[time] = None
    end: Optional[time] = None
    repeater: Optional[Repeater] = None
    delay: Optional[Delay] = None

    def render(self) -> str:
        """Render the canonical text form of this timestamp."""
        parts = [self.date.isoformat()]
        if self.weekday:
            parts.append(self.weekday)
        if self.start is not None:
            clock = _format_time(self.start)
            if self.end is not None:
                clock += f"-{_format_time(self.end)}"
            parts.append(clock)
        if self.repeater is not None:
            parts.append(self.repeater.render())
        if self.delay is not None:
            parts.append(self.delay.render())

        opening, closing = ("<", ">") if self.active else ("[", "]")
        return f"{opening}{' '.join(parts)}{closing}"

    def to_datetime(self) -> datetime:
        """Start of the timestamp as a naive datetime (midnight when no time is given)."""
        return datetime.combine(self.date, self.start or time(0, 0))


def parse_timestamp(text: str) -> Optional[Timestamp]:
    """Parse text that is exactly one timestamp.

    Args:
        text: Candidate timestamp text, brackets included

    Returns:
        Timestamp, or None if the text is not a well-formed timestamp

    Examples:
        >>> parse_timestamp("<2019-07-30 Tue +1w>").repeater.render()
        '+1w'
        >>> parse_timestamp("<2019-02-30 Sat>") is None
        True
    """
    match = TIMESTAMP_RE.fullmatch(text)
    if not match:
        return None

    # Brackets must pair up: <...> or [...]
    if (match.group("open") == "<") != (match.group("close") == ">"):
        return None

    try:
        day = date.fromisoformat(match.group("date"))
        start = _parse_time(match.group("start"))
        end = _parse_time(match.group("end"))
    except ValueError:
        return None

    repeater = None
    if match.group("repeater"):
        kind, value, unit = _parse_interval(match.group("repeater"))
        repeater = Repeater(kind=kind, value=value, unit=unit, limit=match.group("limit"))

    delay = None
    if match.group("delay"):
        kind, value, unit = _parse_interval(match.group("delay"))
        delay = Delay(kind=kind, value=value, unit=unit)

    return Timestamp(
        date=day,
        active=match.group("open") == "<",
        weekday=match.group("weekday"),
        start=start,
        end=end,
        repeater=repeater,
        delay=delay,
    )


def parse_exact_timestamp(text: str) -> Optional[Timestamp]:
    """Parse a timestamp only if it renders back to exactly the same text.

    Used wherever the engine re-renders timestamps on export, so that
    non-canonical spellings (e.g. ``9:00`` for ``09:00``) are left as raw text.
    """
    timestamp = parse_timestamp(text)
    if timestamp is None or timestamp.render() != text:
        return None
    return timestamp


def _parse_time(text: Optional[str]) -> Optional[time]:
    if text is None:
        return None
    hour, minute = text.split(":")
    return time(int(hour), int(minute))


def _format_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def _parse_interval(text: str) -> tuple[str, int, str]:
    # TIMESTAMP_RE only captures well-formed intervals
    match = _INTERVAL_RE.match(text)
    return match.group("kind"), int(match.group("value")), match.group("unit")
