# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Bridge from the stdlib logging module into the pipeline."""

import logging
from typing import TYPE_CHECKING

from .models import LogRecord

if TYPE_CHECKING:
    from .pipeline import SuperLogging

INTERNAL_LOGGER_NAME = "super_logging"


def is_internal(logger_name: str) -> bool:
    """Check whether a logger belongs to this package."""
    return logger_name == INTERNAL_LOGGER_NAME or logger_name.startswith(INTERNAL_LOGGER_NAME + ".")


class SuperLoggingHandler(logging.Handler):
    """Logging handler that feeds every record to a SuperLogging pipeline.

    Records from the package's own loggers are diagnostics about the
    pipeline itself and only go to the console sink, so a failing file or
    remote sink never receives reports about its own failures.
    """

    def __init__(self, pipeline: "SuperLogging", level: int = logging.NOTSET):
        self.pipeline = pipeline
        super().__init__(level=level)

    def createLock(self) -> None:
        # one lock for handler and pipeline, so the pipeline may log while holding it
        self.lock = self.pipeline.lock

    def emit(self, record: logging.LogRecord) -> None:
        try:
            converted = LogRecord.from_stdlib(record)
            if is_internal(record.name):
                self.pipeline.on_diagnostic(converted)
            else:
                self.pipeline.on_record(converted)
        except Exception:
            self.handleError(record)
