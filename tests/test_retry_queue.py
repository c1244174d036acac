# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Tests for the at-least-once retry queue."""

import logging
import threading
from unittest.mock import Mock

import pytest

from super_logging import RemoteEvent, RemoteTransport, RetryQueue, Severity, SilentTransport


def _event(message: str = "boom") -> RemoteEvent:
    return RemoteEvent(
        release_version="1.0.0",
        severity=Severity.ERROR,
        culprit=message,
        logger_name="app",
        message=message,
        error=ValueError(message),
    )


class FailFirstAttemptOf(RemoteTransport):
    """Fails the first attempt for the given messages."""

    def __init__(self, *messages: str):
        self.pending_failures = set(messages)
        self.attempts: list[str] = []
        self._lock = threading.Lock()

    def send(self, event: RemoteEvent) -> bool:
        with self._lock:
            self.attempts.append(event.message)
            if event.message in self.pending_failures:
                self.pending_failures.discard(event.message)
                return False
            return True


@pytest.fixture
def queues():
    """Track queues created by a test and stop them afterwards."""
    created: list[RetryQueue] = []

    def _make(transport, **kwargs) -> RetryQueue:
        q = RetryQueue(transport, **kwargs)
        created.append(q)
        return q

    yield _make
    for q in created:
        q.stop(timeout=1.0)


class TestEnqueue:
    """Tests for RetryQueue.enqueue."""

    def test_enqueue_without_consumer(self, queues):
        """Test events wait in the queue until the uploader starts."""
        transport = SilentTransport()
        q = queues(transport)

        assert q.enqueue(_event()) is True

        assert q.pending_count == 1
        assert len(q) == 1
        assert transport.attempts == []

    def test_unbounded_by_default(self, queues):
        """Test the default queue accepts any number of events."""
        q = queues(SilentTransport())

        for i in range(1000):
            assert q.enqueue(_event(str(i)))

        assert q.pending_count == 1000

    def test_bounded_queue_rejects_new_events(self, queues, caplog):
        """Test a full bounded queue rejects fresh events."""
        q = queues(SilentTransport(), max_size=1)

        assert q.enqueue(_event("a")) is True
        with caplog.at_level(logging.WARNING, logger="super_logging.retry_queue"):
            assert q.enqueue(_event("b")) is False

        assert q.pending_count == 1
        assert "Retry queue full" in caplog.text

    @pytest.mark.parametrize("kwargs", [{"retry_delay": -1}, {"max_size": -1}])
    def test_invalid_arguments(self, kwargs):
        """Test negative delay or bound is rejected."""
        with pytest.raises(ValueError):
            RetryQueue(SilentTransport(), **kwargs)


class TestDelivery:
    """Tests for the uploader loop."""

    def test_delivers_in_enqueue_order(self, queues):
        """Test events that never fail are attempted in enqueue order."""
        transport = SilentTransport()
        q = queues(transport, retry_delay=0.05)
        for message in ["a", "b", "c"]:
            q.enqueue(_event(message))

        q.start()

        assert q.wait_until_idle(timeout=5.0)
        assert [e.message for e in transport.delivered] == ["a", "b", "c"]
        assert q.delivered_count == 3
        assert q.failed_attempts == 0

    def test_failed_event_is_retried_until_delivered(self, queues):
        """Test an event failing once is sent again and then delivered."""
        transport = SilentTransport(fail_times=1)
        q = queues(transport, retry_delay=0.05)
        q.start()

        q.enqueue(_event("boom"))

        assert q.wait_until_idle(timeout=5.0)
        assert len(transport.attempts) == 2
        assert [e.message for e in transport.delivered] == ["boom"]
        assert q.failed_attempts == 1
        assert q.pending_count == 0

    def test_exception_from_send_counts_as_failure(self, queues):
        """Test a raising transport does not lose the event."""
        transport = Mock(spec=RemoteTransport)
        transport.send.side_effect = [ConnectionError("offline"), True]
        q = queues(transport, retry_delay=0.05)
        q.start()

        q.enqueue(_event())

        assert q.wait_until_idle(timeout=5.0)
        assert transport.send.call_count == 2

    def test_non_success_acknowledgement_is_retried(self, queues):
        """Test a falsy send result triggers a retry."""
        transport = Mock(spec=RemoteTransport)
        transport.send.side_effect = [False, False, True]
        q = queues(transport, retry_delay=0.05)
        q.start()

        q.enqueue(_event())

        assert q.wait_until_idle(timeout=5.0)
        assert transport.send.call_count == 3
        assert q.failed_attempts == 2

    def test_retry_does_not_block_other_events(self, queues, wait_for):
        """Test the consumer moves on while a failed event waits to retry."""
        transport = FailFirstAttemptOf("a")
        q = queues(transport, retry_delay=0.5)
        q.start()

        q.enqueue(_event("a"))
        assert wait_for(lambda: transport.attempts == ["a"])
        q.enqueue(_event("b"))

        assert wait_for(lambda: transport.attempts[:2] == ["a", "b"], timeout=0.4)
        assert q.wait_until_idle(timeout=5.0)
        assert transport.attempts == ["a", "b", "a"]

    def test_always_failing_event_is_never_dropped(self, queues, wait_for):
        """Test an undeliverable event stays pending and keeps retrying."""
        transport = SilentTransport(always_fail=True)
        q = queues(transport, retry_delay=0.1)
        q.start()

        q.enqueue(_event("boom"))

        assert wait_for(lambda: len(transport.attempts) >= 2)
        assert q.pending_count == 1
        assert transport.delivered == []

    def test_retry_reinserts_a_fresh_envelope(self, queues, wait_for):
        """Test each attempt receives its own copy of the event."""
        transport = SilentTransport(fail_times=1)
        q = queues(transport, retry_delay=0.05)
        q.start()

        q.enqueue(_event())

        assert q.wait_until_idle(timeout=5.0)
        first, second = transport.attempts
        assert first == second
        assert first is not second

    def test_wait_until_idle_times_out(self, queues):
        """Test waiting reports False while events remain pending."""
        q = queues(SilentTransport())
        q.enqueue(_event())

        assert q.wait_until_idle(timeout=0.05) is False


class TestLifecycle:
    """Tests for starting and stopping the uploader."""

    def test_start_and_stop(self, queues):
        """Test the uploader thread starts and stops."""
        q = queues(SilentTransport())

        q.start()
        assert q.is_running()

        q.stop(timeout=1.0)
        assert not q.is_running()

    def test_start_twice_is_harmless(self, queues):
        """Test a second start keeps the running thread."""
        q = queues(SilentTransport())
        q.start()
        thread = q._thread

        q.start()

        assert q._thread is thread

    def test_stop_cancels_pending_retries(self, queues, wait_for):
        """Test stopping cancels retry timers that have not fired."""
        transport = SilentTransport(always_fail=True)
        q = queues(transport, retry_delay=10.0)
        q.start()
        q.enqueue(_event())
        assert wait_for(lambda: len(transport.attempts) == 1)
        assert wait_for(lambda: len(q._timers) == 1)

        q.stop(timeout=1.0)

        assert not q._timers
        assert not q.is_running()
        assert q.pending_count == 1

    def test_restart_delivers_retries_cancelled_by_stop(self, queues, wait_for):
        """Test a retry cancelled by stop is delivered after the next start."""
        transport = SilentTransport(fail_times=1)
        q = queues(transport, retry_delay=10.0)
        q.start()
        q.enqueue(_event("held"))
        assert wait_for(lambda: len(q._timers) == 1)

        q.stop(timeout=1.0)
        q.start()

        assert q.wait_until_idle(timeout=5.0)
        assert [e.message for e in transport.delivered] == ["held"]
        assert len(transport.attempts) == 2

    def test_stop_keeps_queued_events_for_restart(self, queues):
        """Test events queued but never attempted survive a stop and restart."""
        transport = SilentTransport()
        q = queues(transport)
        q.enqueue(_event("first"))
        q.enqueue(_event("second"))

        q.stop(timeout=1.0)
        q.start()

        assert q.wait_until_idle(timeout=5.0)
        assert [e.message for e in transport.delivered] == ["first", "second"]
