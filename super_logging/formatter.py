# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Human-readable rendering of log records."""

from .models import LogRecord


def format_header(record: LogRecord) -> str:
    """Return the ``[logger] [LEVEL] [timestamp]`` header of a record."""
    timestamp = record.timestamp.isoformat(sep=" ", timespec="milliseconds")
    return f"[{record.logger_name}] [{record.level_name}] [{timestamp}]"


def format_record(record: LogRecord, extra_lines: str | None = None) -> str:
    """Format a record as a multi-line text block.

    Args:
        record: The record to format
        extra_lines: Optional newline-separated metadata; each line is
            emitted with the record header in front of it

    Returns:
        Formatted text without a trailing newline
    """
    header = format_header(record)
    msg = f"{header} {record.message}"

    if record.error is not None:
        msg += f"\n⤷ type: {type(record.error).__name__}\n⤷ error: {record.error}"
    if record.stack_trace:
        msg += "\n" + record.stack_trace.rstrip("\n")

    if extra_lines is not None:
        for line in extra_lines.split("\n"):
            msg += f"\n{header} {line}"

    return msg
