"""Org timestamp parser.

Stamps look like ``<2024-01-01 Mon 09:00-10:30 +1w>`` or ``[2024-01-01 Mon]``.
Both bracket styles parse the same way. Two stamps joined by ``--`` form a
double range.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

STAMP_OPEN = ("[", "<")
REPEATER_MARKS = ("+", "-", ".")

OPEN_RE = re.compile(r"[\[<]")
CLOSE_RE = re.compile(r"[>\]]")
# "--" only counts as a range join between a closing and an opening bracket,
# so warning cookies like "--2d" inside one stamp are left alone.
RANGE_JOIN_RE = re.compile(r"(?<=[>\]])--(?=[<\[])")
# Loose body stamps: active stamps only, optionally followed by a second one.
LOOSE_STAMP_RE = re.compile(
    r"<\d{4}-\d{2}-\d{2}[^>]*>(?:--<\d{4}-\d{2}-\d{2}[^>]*>)?"
)


class MalformedTimestamp(ValueError):
    """A stamp whose date or time part does not parse."""

    def __init__(self, stamp: str, reason: str = ""):
        self.stamp = stamp
        message = f"malformed timestamp {stamp!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    def is_during(self, ts: datetime) -> bool:
        """True when ts falls strictly inside the interval."""
        return self.start < ts < self.end

    def is_before(self, ts: datetime) -> bool:
        """True when the whole interval lies before ts."""
        return self.start < ts and self.end < ts


def _shift_day(ts: datetime, stamp: str) -> datetime:
    try:
        return ts + timedelta(days=1)
    except OverflowError as exc:
        raise MalformedTimestamp(stamp, "date out of range") from exc


def _parse_minute(day: str, clock: str, stamp: str) -> datetime:
    try:
        return datetime.strptime(f"{day} {clock}", "%Y-%m-%d %H:%M")
    except ValueError as exc:
        raise MalformedTimestamp(stamp, str(exc)) from exc


def parse_date_str(datestr: str) -> tuple[datetime, datetime]:
    """
    Parse a single stamp into a (start, end) pair.

    Format: ``YYYY-MM-DD [DayName] [HH:MM[-HH:MM]] [repeater/warning]``,
    brackets optional.

    Rules:
    - No time, or a token starting with +, - or . where the time would be:
      the whole day, midnight to midnight
    - HH:MM: a point in time (start == end)
    - HH:MM-HH:MM: both times on that day; an end earlier than the start
      lands on the next day
    """
    body = datestr.strip().strip("[]<>")
    tokens = body.split()
    if not tokens:
        raise MalformedTimestamp(datestr, "empty stamp")

    try:
        day = datetime.strptime(tokens[0], "%Y-%m-%d")
    except ValueError as exc:
        raise MalformedTimestamp(datestr, str(exc)) from exc

    rest = tokens[1:]
    # Day name is optional
    if rest and rest[0][0].isalpha():
        rest = rest[1:]

    if not rest or rest[0].startswith(REPEATER_MARKS):
        return day, _shift_day(day, datestr)

    times = rest[0].split("-")
    start = _parse_minute(tokens[0], times[0], datestr)
    if len(times) == 1:
        return start, start
    if len(times) != 2:
        raise MalformedTimestamp(datestr, f"bad time range {rest[0]!r}")

    end = _parse_minute(tokens[0], times[1], datestr)
    if end < start:
        end = _shift_day(end, datestr)
    return start, end


def parse_timerange(buf: str) -> TimeInterval:
    """Parse one stamp, or a ``<a>--<b>`` range running from a's start to b's start."""
    halves = RANGE_JOIN_RE.split(buf.strip(), maxsplit=1)
    if len(halves) == 2:
        start, _ = parse_date_str(halves[0])
        end, _ = parse_date_str(halves[1])
        if end < start:
            raise MalformedTimestamp(buf, "range ends before it starts")
        return TimeInterval(start, end)

    start, end = parse_date_str(buf)
    return TimeInterval(start, end)


def _find_stamp(buf: str, pos: int) -> tuple[int, int] | None:
    opening = OPEN_RE.search(buf, pos)
    if not opening:
        return None
    closing = CLOSE_RE.search(buf, opening.start())
    if not closing:
        return None
    return opening.start(), closing.end()


def next_timerange(buf: str, pos: int = 0) -> TimeInterval | None:
    """
    Parse the first bracketed stamp in buf at or after pos.

    A stamp directly followed by ``--`` and another stamp is read together
    with it as a double range. Returns None when no bracket pair is found.
    """
    span = _find_stamp(buf, pos)
    if span is None:
        return None

    start, end = span
    if buf.startswith("--", end) and buf[end + 2:end + 3] in STAMP_OPEN:
        second = _find_stamp(buf, end + 2)
        if second is not None:
            end = second[1]
    return parse_timerange(buf[start:end])


def next_prefix_timerange(buf: str, prefix: str) -> TimeInterval | None:
    """Parse the first stamp following a literal prefix such as ``SCHEDULED: ``."""
    found = buf.find(prefix)
    if found < 0:
        return None
    return next_timerange(buf, found + len(prefix))


def find_loose_timeranges(line: str) -> list[TimeInterval]:
    """Return every active stamp (or stamp range) in a line of body text."""
    return [parse_timerange(match.group(0)) for match in LOOSE_STAMP_RE.finditer(line)]
