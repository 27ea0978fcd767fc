"""Status line composer."""

from datetime import datetime

from .classifier import ACTION, CLOCKED, EVENT, OVERDUE
from .parser import Heading
from .selector import anchor_start, most_relevant

# dzen2 markup
OPEN_SEGMENT = "^tw()"
CLOSE_SEGMENT = "^cs()"
EVENT_MARKER = "# "

LISTING_ORDER = (CLOCKED, OVERDUE, ACTION, EVENT)
SECTION_NAMES = {
    CLOCKED: "Clocked",
    OVERDUE: "Overdue",
    ACTION: "Active",
    EVENT: "Events",
}


def _fg(color: str, text: str, markup: bool) -> str:
    return f"^fg({color}){text}^fg()" if markup else text


def format_elapsed(start: datetime, now: datetime) -> str:
    """Format now - start as HH:MM:SS."""
    seconds = max(int((now - start).total_seconds()), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_action(heading: Heading) -> str:
    return f"[ ] {heading.title}"


def format_overdue(heading: Heading, markup: bool = True) -> str:
    return f"{_fg('orangered', '[!]', markup)} {heading.title}"


def format_clocked(heading: Heading, now: datetime, markup: bool = True) -> str:
    elapsed = format_elapsed(heading.active_log_start, now)
    return _fg("orange", f"[{elapsed}] {heading.title}", markup)


def format_event(heading: Heading) -> str:
    return f"[ ] {heading.title}"


def format_heading(category: str, heading: Heading, now: datetime, markup: bool = True) -> str:
    if category == CLOCKED:
        return format_clocked(heading, now, markup)
    if category == OVERDUE:
        return format_overdue(heading, markup)
    if category == EVENT:
        return format_event(heading)
    return format_action(heading)


def compose_headline(categories: dict, now: datetime, markup: bool = True) -> str:
    """
    Pick the headline slot.

    A single running clock wins, then the most relevant active action,
    then the most relevant overdue action. Empty when none apply.
    """
    clocked = categories.get(CLOCKED, [])
    if len(clocked) == 1:
        return format_clocked(clocked[0], now, markup)

    if categories.get(ACTION):
        heading = most_relevant(categories[ACTION], now)
        if heading is not None:
            return format_action(heading)
    elif categories.get(OVERDUE):
        heading = most_relevant(categories[OVERDUE], now)
        if heading is not None:
            return format_overdue(heading, markup)
    return ""


def compose_event(categories: dict, now: datetime) -> str:
    heading = most_relevant(categories.get(EVENT, []), now)
    if heading is None:
        return ""
    return f"{EVENT_MARKER}{format_event(heading)}"


def compose_status_line(categories: dict, now: datetime, markup: bool = True) -> str:
    """Compose the single status-bar line from partitioned headings."""
    headline = compose_headline(categories, now, markup)
    event = compose_event(categories, now)

    parts = []
    if markup:
        parts.append(OPEN_SEGMENT)
    if headline:
        parts.append(f"{headline} ")
    parts.append(event)
    if markup:
        parts.append(CLOSE_SEGMENT)
    return "".join(parts)


def compose_full_listing(categories: dict, now: datetime, markup: bool = True) -> str:
    """List every categorized heading, one section per non-empty category."""
    lines = []
    for category in LISTING_ORDER:
        headings = categories.get(category, [])
        if not headings:
            continue
        lines.append(f"{SECTION_NAMES[category]}:")
        for heading in headings:
            lines.append(f"  {format_heading(category, heading, now, markup)}")
        lines.append("")
    return "\n".join(lines).rstrip("\n")


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def heading_to_dict(heading: Heading, now: datetime) -> dict:
    return {
        'title': heading.title,
        'depth': heading.depth,
        'state': heading.state,
        'tags': sorted(heading.tags),
        'scheduled': _isoformat(heading.scheduled.start) if heading.scheduled else None,
        'deadline': _isoformat(heading.deadline.start) if heading.deadline else None,
        'clocked_since': _isoformat(heading.active_log_start),
        'anchor': _isoformat(anchor_start(heading, now)),
        'source': heading.source,
    }
