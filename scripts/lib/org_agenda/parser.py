"""Org heading block parser."""

from dataclasses import dataclass
from datetime import datetime

from .timestamps import (
    TimeInterval,
    find_loose_timeranges,
    next_prefix_timerange,
    parse_date_str,
)

HEADING_MARKER = "*"

ACTION_STATES = ("TODO", "NEXT", "STARTED", "PROJECT")
DONE_STATES = ("DONE", "NVM")
STATE_KEYWORDS = ACTION_STATES + DONE_STATES

SCHEDULED_PREFIX = "SCHEDULED: "
DEADLINE_PREFIX = "DEADLINE: "
CLOCK_PREFIX = "CLOCK: "
PROPERTIES_OPEN = ":PROPERTIES:"
LOGBOOK_OPEN = ":LOGBOOK:"
DRAWER_END = ":END:"


@dataclass(frozen=True)
class Heading:
    title: str
    depth: int
    state: str = ""
    tags: frozenset[str] = frozenset()
    scheduled: TimeInterval | None = None
    deadline: TimeInterval | None = None
    logged: tuple[TimeInterval, ...] = ()
    active_log_start: datetime | None = None
    loose_timestamps: tuple[TimeInterval, ...] = ()
    source: str | None = None

    @property
    def is_action(self) -> bool:
        return self.state in ACTION_STATES


def _split_state(title: str) -> tuple[str, str]:
    for keyword in STATE_KEYWORDS:
        if title.startswith(keyword + " "):
            return keyword, title[len(keyword) + 1:]
    return "", title


def _split_tags(title: str) -> tuple[str, frozenset[str]]:
    """Split a trailing ``:tag1:tag2:`` word off the title."""
    stripped = title.rstrip()
    if not stripped.endswith(":"):
        return title.strip(), frozenset()

    lastword = stripped.split()[-1]
    if not lastword.startswith(":"):
        return title.strip(), frozenset()

    head = stripped[:-len(lastword)]

    tags = frozenset(tag for tag in lastword.split(":") if tag)
    return head.strip(), tags


def _skip_drawer(lines: list[str], index: int) -> int:
    """Return the index just past the drawer opened at lines[index]."""
    index += 1
    while index < len(lines) and lines[index].strip() != DRAWER_END:
        index += 1
    return index + 1


def parse_heading_block(lines: list[str], source: str | None = None) -> Heading | None:
    """
    Parse one heading block (the heading line plus its body) into a Heading.

    Rules:
    - Depth is the count of leading '*'; a block without any, or without
      title text after the marker and its separator, yields None
    - A TODO/NEXT/STARTED/PROJECT/DONE/NVM prefix becomes the state
    - A trailing ``:a:b:`` word becomes the tag set
    - Line 2 may carry SCHEDULED:/DEADLINE: stamps
    - Then an optional :PROPERTIES: drawer (skipped) and an optional
      :LOGBOOK: drawer whose CLOCK: lines become logged intervals, or the
      running clock when the line has no end stamp
    - Every active stamp in the remaining lines is a loose timestamp
    """
    if not lines:
        return None

    first = lines[0]
    depth = len(first) - len(first.lstrip(HEADING_MARKER))
    title = first[depth + 1:]
    if depth == 0 or not title.strip():
        return None

    state, title = _split_state(title)
    title, tags = _split_tags(title)

    index = 1
    scheduled = None
    deadline = None
    if index < len(lines):
        scheduled = next_prefix_timerange(lines[index], SCHEDULED_PREFIX)
        deadline = next_prefix_timerange(lines[index], DEADLINE_PREFIX)
        if scheduled is not None or deadline is not None:
            index += 1

    if index < len(lines) and lines[index].strip() == PROPERTIES_OPEN:
        index = _skip_drawer(lines, index)

    logged = []
    active_log_start = None
    if index < len(lines) and lines[index].strip() == LOGBOOK_OPEN:
        index += 1
        while index < len(lines) and lines[index].strip() != DRAWER_END:
            entry = lines[index].strip()
            if entry.startswith(CLOCK_PREFIX):
                if "--" in entry:
                    interval = next_prefix_timerange(entry, CLOCK_PREFIX)
                    if interval is not None:
                        logged.append(interval)
                else:
                    # Running clock; a later one replaces an earlier one
                    active_log_start, _ = parse_date_str(entry[len(CLOCK_PREFIX):])
            index += 1
        index += 1

    loose = []
    for line in lines[index:]:
        loose.extend(find_loose_timeranges(line))

    return Heading(
        title=title,
        depth=depth,
        state=state,
        tags=tags,
        scheduled=scheduled,
        deadline=deadline,
        logged=tuple(logged),
        active_log_start=active_log_start,
        loose_timestamps=tuple(loose),
        source=source,
    )
