# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Super Logging.

Delivers a single stream of log records, in order, to the console, to a
rotating set of daily log files and to a remote error-tracking service
(Sentry) through an at-least-once retry queue.

Example:
    >>> import logging
    >>> from super_logging import SuperLogging, SuperLoggingConfig
    >>>
    >>> pipeline = SuperLogging(
    ...     SuperLoggingConfig(
    ...         sentry_dsn="https://key@o0.ingest.sentry.io/0",
    ...         log_dir_path="",  # <tempdir>/logs
    ...     )
    ... )
    >>> pipeline.main(run_app)
    >>>
    >>> log = logging.getLogger("main")
    >>> try:
    ...     do_something_dangerous()
    ... except Exception:
    ...     log.exception("Houston, we have a problem")
"""

__version__ = "0.1.0"

from .config import SuperLoggingConfig, has_error, is_release_mode
from .console import ConsoleSink, chunked
from .factory import create_transport
from .file_store import RotatingFileStore
from .formatter import format_record
from .handler import SuperLoggingHandler
from .models import LogRecord, RemoteEvent, Severity, UserContext, user_factory
from .pipeline import SuperLogging, create_super_logging
from .retry_queue import DeliveryState, RetryQueue
from .silent_transport import SilentTransport
from .transport import RemoteTransport

__all__ = [
    "__version__",
    "ConsoleSink",
    "DeliveryState",
    "LogRecord",
    "RemoteEvent",
    "RemoteTransport",
    "RetryQueue",
    "RotatingFileStore",
    "Severity",
    "SilentTransport",
    "SuperLogging",
    "SuperLoggingConfig",
    "SuperLoggingHandler",
    "UserContext",
    "chunked",
    "create_super_logging",
    "create_transport",
    "format_record",
    "has_error",
    "is_release_mode",
    "user_factory",
]
