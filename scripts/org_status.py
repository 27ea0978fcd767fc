#!/usr/bin/env python3
"""
Org status line - what the org files say matters right now.

Scans every file in the org directory, classifies each heading against the
current time and prints one dzen2 status line: the running clock, the
active or overdue action, and the current event.

Usage:
    python3 scripts/org_status.py [--dir PATH] [--now "YYYY-MM-DD HH:MM"] [--full] [--json] [--plain] [--keep-going]
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from lib.org_agenda.classifier import CATEGORIES, partition
from lib.org_agenda.composer import compose_full_listing, compose_status_line, heading_to_dict
from lib.org_agenda.scanner import ScanError, scan_files
from org_common import get_org_dir, get_worker_limit, list_org_files, parse_now

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def build_report(
    files: list[Path],
    now: datetime,
    keep_going: bool = False,
    max_workers: int | None = None,
) -> dict:
    """Scan files and partition their headings against now.

    Returns dict with keys:
    - now: the instant everything was evaluated against
    - categories: output of partition()
    - warnings: ScanErrors skipped under keep_going
    """
    headings, errors = scan_files(files, keep_going=keep_going, max_workers=max_workers)
    categories = partition(headings, now)
    counts = ", ".join(f"{c}={len(categories[c])}" for c in CATEGORIES)
    logger.debug(f"Categorized {len(categories['all'])} headings: {counts}")
    return {'now': now, 'categories': categories, 'warnings': errors}


def report_to_json(report: dict, markup: bool = False) -> dict:
    now = report['now']
    categories = report['categories']
    return {
        'now': now.isoformat(),
        'status': compose_status_line(categories, now, markup=markup),
        'categories': {
            category: [heading_to_dict(h, now) for h in categories[category]]
            for category in CATEGORIES
        },
        'warnings': [str(error) for error in report['warnings']],
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print the org status line")
    parser.add_argument("--dir", help="Org directory (default: $ORG_STATUS_DIR or ~/org)")
    parser.add_argument("--now", help="Evaluate at this instant (YYYY-MM-DD HH:MM), default: now")
    parser.add_argument("--full", action="store_true", help="Also list every categorized heading")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--plain", action="store_true", help="Omit dzen2 markup")
    parser.add_argument("--keep-going", action="store_true", help="Skip unreadable files instead of failing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        now = parse_now(args.now)
    except ValueError as e:
        logger.error(str(e))
        return 1

    org_dir = Path(args.dir).expanduser() if args.dir else get_org_dir()
    if not org_dir.is_dir():
        print(f"\n❌ Org directory not found: {org_dir}\n", file=sys.stderr)
        print("Configure the directory via environment variable:", file=sys.stderr)
        print("  ORG_STATUS_DIR=~/path/to/org", file=sys.stderr)
        print("", file=sys.stderr)
        return 1

    try:
        report = build_report(
            list_org_files(org_dir),
            now,
            keep_going=args.keep_going,
            max_workers=get_worker_limit(),
        )
    except (ScanError, OSError) as e:
        logger.error(str(e))
        return 1

    markup = not args.plain
    if args.json:
        print(json.dumps(report_to_json(report, markup=markup), indent=2))
        return 0

    categories = report['categories']
    print(compose_status_line(categories, now, markup=markup))
    if args.full:
        listing = compose_full_listing(categories, now, markup=markup)
        if listing:
            print(listing)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
