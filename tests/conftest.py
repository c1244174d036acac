# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Shared fixtures for super_logging tests."""

import logging
import time
from collections.abc import Callable
from datetime import datetime

import pytest

from super_logging import ConsoleSink, LogRecord, SuperLoggingHandler


class RecordingConsole(ConsoleSink):
    """Console sink that keeps every written block in memory."""

    def __init__(self, chunk_size: int = 800):
        super().__init__(chunk_size=chunk_size)
        self.blocks: list[str] = []

    def write(self, text: str) -> None:
        self.blocks.append(text)

    @property
    def output(self) -> str:
        return "\n".join(self.blocks)


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def make_record() -> Callable[..., LogRecord]:
    """Build LogRecords with sensible defaults."""

    def _make(
        message: str = "hello",
        error: object = None,
        level: int = logging.INFO,
        logger_name: str = "app",
        stack_trace: str | None = None,
        timestamp: datetime | None = None,
    ) -> LogRecord:
        return LogRecord(
            logger_name=logger_name,
            level=level,
            timestamp=timestamp or datetime(2023, 1, 2, 3, 4, 5, 678000),
            message=message,
            error=error,
            stack_trace=stack_trace,
        )

    return _make


@pytest.fixture
def wait_for() -> Callable[..., bool]:
    """Poll a predicate until it holds or the timeout expires."""

    def _wait(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.01)
        return predicate()

    return _wait


@pytest.fixture
def restore_root_logger():
    """Restore the root logger level and drop pipeline handlers after a test."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if isinstance(handler, SuperLoggingHandler):
            root.removeHandler(handler)
    root.setLevel(level)
