#!/usr/bin/env python3
"""
Shared configuration for the org status scripts.

Configuration via environment variables:
- ORG_STATUS_DIR: Directory holding the org files (default ~/org)
- ORG_STATUS_WORKERS: Max number of files scanned at once (default: all)
"""

import logging
import os
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

NOW_FORMATS = ('%Y-%m-%d %H:%M', '%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M:%S', '%Y-%m-%dT%H:%M:%S')


def get_org_dir() -> Path:
    """Resolve the org directory from env or default."""
    return Path(os.getenv('ORG_STATUS_DIR', Path.home() / "org")).expanduser()


def get_worker_limit() -> int | None:
    """Max concurrent file scans, or None for one worker per file."""
    raw = os.getenv('ORG_STATUS_WORKERS')
    if not raw:
        return None
    try:
        limit = int(raw)
    except ValueError:
        logger.warning(f"Ignoring ORG_STATUS_WORKERS={raw!r}: not an integer")
        return None
    if limit <= 0:
        logger.warning(f"Ignoring ORG_STATUS_WORKERS={raw!r}: must be positive")
        return None
    return limit


def list_org_files(base_dir: Path) -> list[Path]:
    """Return the files directly inside base_dir, skipping subdirectories and dotfiles."""
    return sorted(
        entry for entry in base_dir.iterdir()
        if not entry.name.startswith('.') and not entry.is_dir()
    )


def parse_now(value: str | None = None) -> datetime:
    """Return the instant to evaluate against: value if given, else the local wall clock."""
    if not value:
        return datetime.now()
    for fmt in NOW_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"Invalid --now value: {value!r} (expected YYYY-MM-DD HH:MM)")
