"""Split org files into heading blocks and scan many files at once."""

import logging
import queue
import threading
from pathlib import Path
from typing import Iterable, Iterator

from .parser import HEADING_MARKER, Heading, parse_heading_block

logger = logging.getLogger(__name__)

_WORKER_DONE = object()


class ScanError(Exception):
    """A file that could not be read or holds an unparsable timestamp."""

    def __init__(self, path, cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"failed to read {path}: {cause}")


def split_blocks(lines: Iterable[str]) -> Iterator[list[str]]:
    """
    Group lines into heading blocks.

    A line starting with '*' opens a new block once the current one has
    lines, so any preamble before the first heading stays in the first block.
    """
    block: list[str] = []
    for line in lines:
        if line.startswith(HEADING_MARKER) and block:
            yield block
            block = []
        block.append(line)
    if block:
        yield block


def scan_lines(lines: Iterable[str], source: str | None = None) -> Iterator[Heading]:
    """Yield each heading parsed from lines, skipping blocks that are not headings."""
    for block in split_blocks(lines):
        heading = parse_heading_block(block, source=source)
        if heading is not None:
            yield heading


def scan_file(path) -> Iterator[Heading]:
    """Yield the headings of one file as they are parsed."""
    path = Path(path)
    with path.open(encoding="utf-8") as handle:
        yield from scan_lines((line.rstrip("\r\n") for line in handle), source=str(path))


def scan_files(
    paths: Iterable,
    keep_going: bool = False,
    max_workers: int | None = None,
) -> tuple[list[Heading], list[ScanError]]:
    """
    Scan files on worker threads and collect every heading.

    Workers push headings onto one shared queue as they parse them; this
    thread drains it until each worker has reported done. Headings arrive
    in no particular order across files.

    A file that cannot be read, holds a malformed timestamp, or fails in any
    other way raises ScanError. With keep_going, the failure is logged and
    returned instead, and that file's headings are left out of the result.

    Returns:
        tuple: (headings, errors)
    """
    paths = [Path(p) for p in paths]
    if not paths:
        return [], []

    pending: queue.SimpleQueue = queue.SimpleQueue()
    for path in paths:
        pending.put(path)
    results: queue.SimpleQueue = queue.SimpleQueue()
    worker_count = min(len(paths), max_workers or len(paths))

    def _worker() -> None:
        try:
            while True:
                try:
                    path = pending.get_nowait()
                except queue.Empty:
                    return
                count = 0
                try:
                    for heading in scan_file(path):
                        results.put(heading)
                        count += 1
                except Exception as exc:
                    # Every failure reaches the consumer as a ScanError.
                    results.put(ScanError(path, exc))
                else:
                    logger.debug(f"Scanned {path}: {count} headings")
        finally:
            results.put(_WORKER_DONE)

    for n in range(worker_count):
        threading.Thread(target=_worker, name=f"org-scan-{n}", daemon=True).start()

    headings: list[Heading] = []
    errors: list[ScanError] = []
    finished = 0
    while finished < worker_count:
        item = results.get()
        if item is _WORKER_DONE:
            finished += 1
        elif isinstance(item, ScanError):
            if not keep_going:
                raise item
            logger.warning(f"Skipping {item.path}: {item.cause}")
            errors.append(item)
        else:
            headings.append(item)

    if errors:
        failed = {str(error.path) for error in errors}
        headings = [heading for heading in headings if heading.source not in failed]
    return headings, errors
