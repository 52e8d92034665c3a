"""Logging configuration using loguru.

sheetgrid disables its own log records on import so that library users see
nothing unless they opt in. setup_logging() re-enables them and installs
either a human-readable or a JSON line sink.
"""

import json
import sys
from datetime import UTC, datetime

from loguru import logger

from sheetgrid.config import get_settings

PACKAGE = "sheetgrid"


def _json_formatter(record: dict) -> str:
    """Format a log record as a single JSON line.

    Bound context (spreadsheet_id, sheet_id, ...) is merged into the entry.
    """
    log_entry = {
        "timestamp": datetime.now(UTC).isoformat(),
        "severity": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    for key, value in record["extra"].items():
        if key not in log_entry:
            log_entry[key] = value

    if record["exception"]:
        log_entry["exception"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else None,
            "value": str(record["exception"].value) if record["exception"].value else None,
        }

    # loguru treats the returned string as a template; escape the braces.
    line = json.dumps(log_entry, default=str).replace("{", "{{").replace("}", "}}")
    return line + "\n"


def _dev_formatter(record: dict) -> str:
    """Format log record for development (human-readable)."""
    context_parts = []
    spreadsheet_id = record["extra"].get("spreadsheet_id")
    sheet_id = record["extra"].get("sheet_id")
    if spreadsheet_id:
        context_parts.append(f"doc={spreadsheet_id[:8]}")
    if sheet_id is not None:
        context_parts.append(f"sheet={sheet_id}")

    context_str = " ".join(context_parts)
    if context_str:
        context_str = f"[{context_str}] "

    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        + context_str.replace("{", "{{").replace("}", "}}")
        + "<level>{message}</level>\n"
        "{exception}"
    )


def setup_logging(json_logs: bool | None = None, log_level: str | None = None) -> None:
    """Configure loguru for an application using sheetgrid.

    Args:
        json_logs: If True, write one JSON object per line. Defaults to
            Settings.json_logs.
        log_level: Minimum log level to output. Defaults to Settings.log_level.
    """
    settings = get_settings()
    if json_logs is None:
        json_logs = settings.json_logs
    if log_level is None:
        log_level = settings.log_level

    logger.remove()
    logger.enable(PACKAGE)

    if json_logs:
        logger.add(
            sys.stderr,
            format=_json_formatter,
            level=log_level,
            serialize=False,  # We handle serialization in the formatter
        )
    else:
        logger.add(
            sys.stderr,
            format=_dev_formatter,
            level=log_level,
            colorize=True,
        )


__all__ = ["logger", "setup_logging"]
