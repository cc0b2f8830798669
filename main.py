#!/usr/bin/env python3
"""
Clerkship Dashboard - reconcile exported sources into the student timeline

Runs a dashboard action against a directory of exported source snapshots and
writes the JSON result.

Usage:
    python main.py snapshots/                          # getStudentData
    python main.py snapshots/ --action getPeriodDates
    python main.py snapshots/ --year 2025 --student-id "2025_Doe, Jane"
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from core.logging_config import configure_logging

# Logging is configured in main() after arg parsing.
logger = logging.getLogger(__name__)

from core.config import load_config
from core.errors import DashboardError
from pipeline.actions import action_registry, handle_action
from sources.snapshot import SnapshotAdapter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reconcile clerkship rotation sources into per-student dashboard data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py snapshots/                                # all students, current year
    python main.py snapshots/ --action getPeriodDates        # slot calendar only
    python main.py snapshots/ --today 2025-03-01 -o out.json # reproducible run
        """
    )

    parser.add_argument("snapshot_dir", help="Directory holding one exported file per source")
    parser.add_argument("--action", "-a", default="getStudentData",
                        help=f"Action to run (default: getStudentData; known: {', '.join(action_registry.get_names())})")
    parser.add_argument("--config", "-c", help="Path to a YAML/JSON dashboard config")
    parser.add_argument("--year", "-y", type=int, help="Academic year filter (default from config)")
    parser.add_argument("--student-id", "-s", help="Restrict to one student key, e.g. '2025_Doe, Jane'")
    parser.add_argument("--today", help="Classify as of this date (YYYY-MM-DD)")
    parser.add_argument("--offset-days", type=int, help="Rotation length used for calendar end dates")
    parser.add_argument("--public", action="store_true", help="Render as a non-privileged viewer (no status labels)")
    parser.add_argument("--output", "-o", help="Write JSON here instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    log_group = parser.add_argument_group('Logging')
    log_group.add_argument("--json-log", action="store_true", help="Emit structured JSON log lines to stderr")
    log_group.add_argument("--log-file", type=str, metavar="PATH", help="Write JSON logs to file")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(
        json_mode=args.json_log,
        log_file=args.log_file,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    if not os.path.isdir(args.snapshot_dir):
        logger.error(f"Snapshot directory not found: {args.snapshot_dir}")
        return 1

    try:
        config = load_config(args.config).with_overrides(
            year=args.year,
            student_id=args.student_id,
            today=args.today,
            rotation_offset_days=args.offset_days,
        )
        adapter = SnapshotAdapter(args.snapshot_dir, config)
        result = handle_action(
            args.action,
            {"privileged": not args.public},
            config=config,
            adapter=adapter,
        )
    except DashboardError as e:
        logger.error(f"{type(e).__name__}: {e}", extra={"stage": e.stage or "", "source": e.source or ""})
        logger.debug(json.dumps(e.to_dict()))
        return 1

    content = json.dumps(result, indent=2, ensure_ascii=False)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote {args.action} result to {output_path}")
    else:
        print(content)
    return 0


if __name__ == "__main__":
    sys.exit(main())
