# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Data model shared by the pipeline components."""

import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class LogRecord:
    """One structured logging event.

    Attributes:
        logger_name: Name of the logger that produced the record
        level: Ordinal severity (stdlib logging levels)
        timestamp: Moment the record was created
        message: Rendered log message
        error: Optional error object attached to the record
        stack_trace: Optional stack trace text
    """
    logger_name: str
    level: int
    timestamp: datetime
    message: str
    error: Any = None
    stack_trace: str | None = None

    @property
    def level_name(self) -> str:
        """Human-readable name of the severity."""
        return logging.getLevelName(self.level)

    @classmethod
    def from_stdlib(cls, record: logging.LogRecord) -> "LogRecord":
        """Convert a stdlib ``logging.LogRecord``.

        Args:
            record: Record emitted through the logging module

        Returns:
            Immutable pipeline record
        """
        error = None
        stack_trace = None

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            stack_trace = "".join(traceback.format_tb(record.exc_info[2])) or None
        if record.stack_info and stack_trace is None:
            stack_trace = record.stack_info

        return cls(
            logger_name=record.name,
            level=record.levelno,
            timestamp=datetime.fromtimestamp(record.created),
            message=record.getMessage(),
            error=error,
            stack_trace=stack_trace,
        )


class Severity(str, Enum):
    """Severity levels understood by the error-tracking service."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @classmethod
    def from_level(cls, level: int) -> "Severity":
        """Map a stdlib level number to a severity."""
        if level >= logging.CRITICAL:
            return cls.FATAL
        if level >= logging.ERROR:
            return cls.ERROR
        if level >= logging.WARNING:
            return cls.WARNING
        if level >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


@dataclass
class UserContext:
    """The current user as reported alongside remote events."""
    id: str = ""
    username: str | None = None
    email: str | None = None
    extra_attributes: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form used in context lines and events."""
        data: dict[str, Any] = {"id": self.id}
        if self.username is not None:
            data["username"] = self.username
        if self.email is not None:
            data["email"] = self.email
        if self.extra_attributes:
            data["extras"] = dict(self.extra_attributes)
        return data


def user_factory(
    id: str | None = None,
    username: str | None = None,
    email: str | None = None,
    extra_info: dict[str, str] | None = None,
) -> UserContext:
    """Build a UserContext, defaulting the id to an empty string."""
    return UserContext(
        id=id or "",
        username=username,
        email=email,
        extra_attributes=dict(extra_info or {}),
    )


@dataclass(frozen=True)
class RemoteEvent:
    """Payload delivered to the remote error-tracking service."""
    release_version: str
    severity: Severity
    culprit: str
    logger_name: str
    message: str
    error: Any = None
    stack_trace: str | None = None
    user: UserContext = field(default_factory=UserContext)

    @classmethod
    def from_record(
        cls,
        record: LogRecord,
        user: UserContext,
        release_version: str = "",
    ) -> "RemoteEvent":
        """Build the event for a record accepted into the retry queue."""
        return cls(
            release_version=release_version,
            severity=Severity.from_level(record.level),
            culprit=record.message,
            logger_name=record.logger_name,
            message=record.message,
            error=record.error,
            stack_trace=record.stack_trace,
            user=user,
        )
