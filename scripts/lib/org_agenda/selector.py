"""Pick the most relevant heading of a category."""

import logging
from datetime import datetime
from typing import Iterable

from .parser import Heading

logger = logging.getLogger(__name__)


def anchor_start(heading: Heading, now: datetime) -> datetime | None:
    """
    Return the instant a heading is ranked by.

    That is the scheduled start when there is one, otherwise the start of
    the most recently begun loose timestamp at or before now. None when
    neither exists.
    """
    if heading.scheduled is not None:
        return heading.scheduled.start

    anchor = None
    for interval in heading.loose_timestamps:
        if interval.start > now:
            continue
        if anchor is None or interval.start > anchor:
            anchor = interval.start
    return anchor


def most_relevant(headings: Iterable[Heading], now: datetime) -> Heading | None:
    """
    Return the heading with the earliest anchor, so the longest-running one wins.

    Ties go to the first heading seen. Headings without an anchor are skipped.
    """
    best = None
    best_anchor = None
    for heading in headings:
        anchor = anchor_start(heading, now)
        if anchor is None:
            logger.debug(f"No anchor for {heading.title!r}, skipping")
            continue
        if best_anchor is None or anchor < best_anchor:
            best = heading
            best_anchor = anchor
    return best
