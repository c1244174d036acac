# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Configuration for the logging pipeline."""

import os
import sys
from collections.abc import Callable
from dataclasses import dataclass, field

from .console import DEFAULT_CHUNK_SIZE
from .file_store import DEFAULT_DATE_FORMAT, DEFAULT_SUFFIX
from .models import LogRecord
from .retry_queue import DEFAULT_RETRY_DELAY_SECONDS

_TRUE_VALUES = {"1", "true", "yes", "on"}


def has_error(record: LogRecord) -> bool:
    """Default remote filter: forward records that carry an error."""
    return record.error is not None


def _env_bool(env_var: str, fallback: bool) -> bool:
    value = os.getenv(env_var)
    if value is None:
        return fallback
    return value.strip().lower() in _TRUE_VALUES


def _env_number(env_var: str, fallback, cast):
    value = os.getenv(env_var)
    if value is None or value == "":
        return fallback
    try:
        return cast(value)
    except ValueError:
        raise ValueError(f"Invalid value for {env_var}: {value!r}") from None


@dataclass
class SuperLoggingConfig:
    """Settings consumed by the pipeline at startup.

    Attributes:
        sentry_dsn: DSN of the Sentry project. Only records accepted by
            ``remote_filter`` are sent. If None, remote delivery is
            disabled (default).
        environment: Sentry environment name
        release_version: Application version, reported with remote events
            and shown in the context lines of the log
        retry_delay_seconds: Wait before re-sending a failed remote event
        max_queue_size: Bound of the remote retry queue, 0 for unbounded
        log_dir_path: Directory for daily log files. None disables file
            logging (default); an empty string selects ``<tempdir>/logs``.
        max_log_files: Number of daily log files kept in ``log_dir_path``
        enable_in_debug_mode: Enable file and remote logging in debug mode,
            where they are usually not needed
        date_format: strftime pattern used to name log files
        log_file_suffix: Extension appended to every log file name
        log_chunk_size: Maximum characters per console write
        remote_filter: Decides which records are sent to the remote service
    """
    sentry_dsn: str | None = None
    environment: str | None = None
    release_version: str = ""
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS
    max_queue_size: int = 0
    log_dir_path: str | None = None
    max_log_files: int = 10
    enable_in_debug_mode: bool = False
    date_format: str = DEFAULT_DATE_FORMAT
    log_file_suffix: str = DEFAULT_SUFFIX
    log_chunk_size: int = DEFAULT_CHUNK_SIZE
    remote_filter: Callable[[LogRecord], bool] = field(default=has_error)

    @classmethod
    def from_env(cls, **overrides) -> "SuperLoggingConfig":
        """Build a configuration from environment variables.

        Explicit keyword overrides take precedence over the environment.

        Raises:
            ValueError: If a numeric variable cannot be parsed or the
                resulting configuration is invalid
        """
        values = {
            "sentry_dsn": os.getenv("SENTRY_DSN") or None,
            "environment": os.getenv("SENTRY_ENVIRONMENT") or None,
            "release_version": os.getenv("APP_RELEASE", ""),
            "retry_delay_seconds": _env_number(
                "SUPER_LOGGING_RETRY_DELAY", DEFAULT_RETRY_DELAY_SECONDS, float
            ),
            "max_queue_size": _env_number("SUPER_LOGGING_MAX_QUEUE_SIZE", 0, int),
            "log_dir_path": os.getenv("APP_LOG_PATH"),
            "max_log_files": _env_number("SUPER_LOGGING_MAX_LOG_FILES", 10, int),
            "enable_in_debug_mode": _env_bool("SUPER_LOGGING_ENABLE_IN_DEBUG", False),
            "date_format": os.getenv("SUPER_LOGGING_DATE_FORMAT") or DEFAULT_DATE_FORMAT,
        }
        values.update(overrides)
        config = cls(**values)
        config.validate()
        return config

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ValueError: If any setting is out of range
        """
        if self.max_log_files < 0:
            raise ValueError(f"max_log_files must be >= 0, got {self.max_log_files}")
        if self.retry_delay_seconds < 0:
            raise ValueError(
                f"retry_delay_seconds must be >= 0, got {self.retry_delay_seconds}"
            )
        if self.max_queue_size < 0:
            raise ValueError(f"max_queue_size must be >= 0, got {self.max_queue_size}")
        if self.log_chunk_size <= 0:
            raise ValueError(f"log_chunk_size must be positive, got {self.log_chunk_size}")


def is_release_mode() -> bool:
    """Report whether the process runs in release mode.

    Python development mode (``-X dev``) or ``SUPER_LOGGING_DEBUG=1``
    count as debug mode.
    """
    if _env_bool("SUPER_LOGGING_DEBUG", False):
        return False
    return not sys.flags.dev_mode
