"""Bucket headings by what they mean at a given instant."""

from datetime import datetime
from typing import Iterable

from .parser import Heading

CLOCKED = 'clocked'
ACTION = 'action'
EVENT = 'event'
OVERDUE = 'overdue'

# Checked in this order; the first match wins.
CATEGORIES = (CLOCKED, ACTION, EVENT, OVERDUE)


def is_clocked_now(heading: Heading, now: datetime) -> bool:
    return heading.active_log_start is not None and heading.active_log_start < now


def is_action_now(heading: Heading, now: datetime) -> bool:
    if not heading.is_action:
        return False
    return heading.scheduled is not None and heading.scheduled.is_during(now)


def is_event_now(heading: Heading, now: datetime) -> bool:
    if heading.is_action:
        return False
    return heading.scheduled is not None and heading.scheduled.is_during(now)


def is_overdue_now(heading: Heading, now: datetime) -> bool:
    """An action whose scheduled window, or failing that its deadline, is over."""
    if not heading.is_action:
        return False
    if heading.scheduled is not None:
        return heading.scheduled.is_before(now)
    if heading.deadline is not None:
        return heading.deadline.is_before(now)
    return False


_PREDICATES = (
    (CLOCKED, is_clocked_now),
    (ACTION, is_action_now),
    (EVENT, is_event_now),
    (OVERDUE, is_overdue_now),
)


def classify(heading: Heading, now: datetime) -> str | None:
    """Return the single category a heading falls in at now, or None."""
    for category, predicate in _PREDICATES:
        if predicate(heading, now):
            return category
    return None


def partition(headings: Iterable[Heading], now: datetime) -> dict:
    """
    Partition headings into categories.

    Returns dict with keys:
    - clocked: headings with a running clock
    - action: actions whose scheduled window contains now
    - event: non-actions whose scheduled window contains now
    - overdue: actions whose scheduled window or deadline has passed
    - all: every heading, categorized or not
    """
    result = {category: [] for category in CATEGORIES}
    result['all'] = []
    for heading in headings:
        result['all'].append(heading)
        category = classify(heading, now)
        if category is not None:
            result[category].append(heading)
    return result
