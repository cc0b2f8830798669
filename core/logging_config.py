"""
Logging setup for the clerkship dashboard.

Records may carry reconciliation context as ``extra`` attributes:

- ``stage``:   pipeline stage ("schedule", "grades", "evaluations", ...)
- ``student``: student key the message is about
- ``source``:  source name involved in a failure

Both formatters render that context: JSONFormatter as top-level keys,
ConsoleFormatter as a bracketed tag ahead of the message. Stages log
through a StageLoggerAdapter so they never build the ``extra`` dict by hand.

Usage:
    from core.logging_config import configure_logging
    configure_logging(json_mode=args.json_log, log_file=args.log_file)
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

CONTEXT_FIELDS = ("stage", "student", "source")


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Non-empty reconciliation context attached to a record."""
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None)
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, context fields promoted to top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.name != "root":
            entry["module"] = record.module
        entry.update(record_context(record))
        if record.exc_info and record.exc_info[1]:
            entry["error"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }
        return json.dumps(entry, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Terminal output: colored level prefix, then a context tag.

        [WARN] (grades | 2025_Doe, Jane) No grading record matched
    """

    LEVEL_PREFIXES = {
        logging.DEBUG: "\033[90m[DEBUG]\033[0m",
        logging.INFO: "[INFO]",
        logging.WARNING: "\033[33m[WARN]\033[0m",
        logging.ERROR: "\033[31m[ERROR]\033[0m",
        logging.CRITICAL: "\033[1;31m[CRIT]\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        parts: List[str] = [self.LEVEL_PREFIXES.get(record.levelno, f"[{record.levelname}]")]
        context = record_context(record)
        if context:
            parts.append(f"({' | '.join(str(v) for v in context.values())})")
        parts.append(record.getMessage())
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    *,
    json_mode: bool = False,
    log_file: Optional[str] = None,
    level: int = logging.INFO,
    quiet: bool = False,
) -> None:
    """
    Replace the root logger's handlers.

    Args:
        json_mode: JSON lines on stderr instead of console text
        log_file: Also append JSON lines to this file
        level: Root and handler level
        quiet: No stderr handler (file only)
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handlers: List[logging.Handler] = []
    if not quiet:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(JSONFormatter() if json_mode else ConsoleFormatter())
        handlers.append(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        root.addHandler(handler)


class StageLoggerAdapter(logging.LoggerAdapter):
    """
    Injects the pipeline stage and, once narrowed, the student key.

    Usage:
        log = StageLoggerAdapter(logger, {"stage": "grades"})
        log.for_student("2025_Doe, Jane").debug("No grading record")
    """

    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        extra.setdefault("stage", self.extra.get("stage", ""))
        extra.setdefault("student", self.extra.get("student", ""))
        return msg, kwargs

    def for_student(self, student_key: str) -> "StageLoggerAdapter":
        """Same logger and stage, scoped to one student."""
        return StageLoggerAdapter(self.logger, {**self.extra, "student": student_key})
