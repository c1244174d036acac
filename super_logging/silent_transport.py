# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Silent transport implementation for testing."""

import threading

from .models import RemoteEvent
from .transport import RemoteTransport


class SilentTransport(RemoteTransport):
    """Transport that stores events in memory instead of sending them.

    Useful for unit tests where delivery behavior needs to be observed
    without network access. Failures can be simulated with ``fail_times``
    (the first N sends fail) or ``always_fail``.
    """

    def __init__(self, fail_times: int = 0, always_fail: bool = False):
        """Initialize silent transport.

        Args:
            fail_times: Number of initial send attempts that report failure
            always_fail: Report failure for every attempt
        """
        self.fail_times = fail_times
        self.always_fail = always_fail
        self.attempts: list[RemoteEvent] = []
        self.delivered: list[RemoteEvent] = []
        self._lock = threading.Lock()

    def send(self, event: RemoteEvent) -> bool:
        """Record the attempt and report success or a simulated failure."""
        with self._lock:
            self.attempts.append(event)
            if self.always_fail or len(self.attempts) <= self.fail_times:
                return False
            self.delivered.append(event)
            return True

    def clear(self) -> None:
        """Forget all recorded attempts."""
        with self._lock:
            self.attempts.clear()
            self.delivered.clear()
