# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""At-least-once delivery queue for remote events.

A single background consumer drains the queue and hands each event to the
transport. A failed event is never dropped: a timer re-inserts a fresh
envelope at the tail of the queue after ``retry_delay`` seconds while the
consumer moves straight on to the next event. There is no retry limit.

Events that never failed are attempted in enqueue order. A retried event
competes with newer events purely on its re-insertion time.
"""

import logging
import queue
import threading
from dataclasses import dataclass, replace
from enum import Enum

from .models import RemoteEvent
from .transport import RemoteTransport

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY_SECONDS = 10.0


class DeliveryState(str, Enum):
    """Lifecycle of a queued event."""
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    RETRY_SCHEDULED = "retry_scheduled"
    DELIVERED = "delivered"


@dataclass
class QueuedEvent:
    """Envelope owned by the queue for one delivery attempt.

    Attributes:
        event: The event to deliver
        attempts: Number of send attempts made so far
        state: Current delivery state
    """
    event: RemoteEvent
    attempts: int = 0
    state: DeliveryState = DeliveryState.PENDING


class RetryQueue:
    """Ordered queue of remote events with a single uploader thread.

    ``max_size`` of 0 means unbounded (the default). With a bound, a new
    event offered to a full queue is rejected and ``enqueue`` returns False;
    re-insertions of failed events are never rejected, their timer waits
    for room instead.
    """

    def __init__(
        self,
        transport: RemoteTransport,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        max_size: int = 0,
        poll_interval: float = 0.1,
    ):
        """Initialize the retry queue.

        Args:
            transport: Transport used to deliver events
            retry_delay: Seconds to wait before re-inserting a failed event
            max_size: Maximum number of queued events, 0 for unbounded
            poll_interval: Seconds the consumer waits for work before
                re-checking the stop signal
        """
        if retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {retry_delay}")
        if max_size < 0:
            raise ValueError(f"max_size must be >= 0, got {max_size}")

        self.transport = transport
        self.retry_delay = retry_delay
        self.max_size = max_size
        self.poll_interval = poll_interval

        self._queue: queue.Queue[QueuedEvent] = queue.Queue(maxsize=max_size)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._timers: dict[threading.Thread, QueuedEvent] = {}
        self._parked: list[QueuedEvent] = []
        self._cond = threading.Condition()
        self._pending = 0
        self.delivered_count = 0
        self.failed_attempts = 0

    def __len__(self) -> int:
        return self.pending_count

    @property
    def pending_count(self) -> int:
        """Events not yet delivered: queued, in flight or waiting on a retry timer."""
        with self._cond:
            return self._pending

    def is_running(self) -> bool:
        """Check if the uploader thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def enqueue(self, event: RemoteEvent) -> bool:
        """Append an event to the tail of the queue without blocking.

        Args:
            event: Event to deliver

        Returns:
            True if the event was accepted, False if a bounded queue is full
        """
        with self._cond:
            self._pending += 1

        try:
            self._queue.put_nowait(QueuedEvent(event=event))
        except queue.Full:
            with self._cond:
                self._pending -= 1
                self._cond.notify_all()
            logger.warning(
                f"Retry queue full ({self.max_size} events), rejecting event from {event.logger_name}"
            )
            return False
        return True

    def start(self) -> None:
        """Start the uploader in a background thread.

        Retries whose timers were cancelled by ``stop`` are re-inserted.
        """
        if self.is_running():
            logger.warning("Retry queue uploader already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop, name="super-logging-uploader", daemon=True
        )
        self._thread.start()

        with self._cond:
            parked, self._parked = self._parked, []
        for item in parked:
            self._start_timer(item, 0)

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the uploader and cancel retry timers.

        Nothing accepted is dropped: queued events stay in the queue and
        retries whose timers were cancelled are held until the next
        ``start``. Call ``wait_until_idle`` first to drain the queue.
        """
        self._stop_event.set()

        with self._cond:
            timers = list(self._timers)
            self._parked.extend(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        if timers:
            logger.info(f"Cancelled {len(timers)} retry timers, events held until restart")

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until every accepted event has been delivered.

        Returns:
            True if the queue drained, False if the timeout expired first
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._pending == 0, timeout)

    def _run_loop(self) -> None:
        """Main uploader loop."""
        while not self._stop_event.is_set():
            try:
                item = self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            self._deliver(item)

    def _deliver(self, item: QueuedEvent) -> None:
        item.state = DeliveryState.IN_FLIGHT
        item.attempts += 1

        try:
            delivered = self.transport.send(item.event)
        except Exception as e:
            logger.warning(
                f"Remote upload raised on attempt {item.attempts}: {e}",
                exc_info=True,
            )
            delivered = False

        if delivered:
            item.state = DeliveryState.DELIVERED
            with self._cond:
                self.delivered_count += 1
                self._pending -= 1
                self._cond.notify_all()
            if item.attempts > 1:
                logger.info(f"Remote event delivered after {item.attempts} attempts")
            return

        with self._cond:
            self.failed_attempts += 1
        logger.warning(
            f"Remote upload failed (attempt {item.attempts}), retrying in {self.retry_delay}s"
        )
        self._schedule_retry(item)

    def _schedule_retry(self, item: QueuedEvent) -> None:
        retry = QueuedEvent(
            event=replace(item.event),
            attempts=item.attempts,
            state=DeliveryState.RETRY_SCHEDULED,
        )
        self._start_timer(retry, self.retry_delay)

    def _start_timer(self, item: QueuedEvent, delay: float) -> None:
        timer = threading.Timer(delay, self._reinsert, args=(item,))
        timer.daemon = True
        with self._cond:
            if self._stop_event.is_set():
                self._parked.append(item)
                return
            self._timers[timer] = item
        timer.start()

    def _reinsert(self, item: QueuedEvent) -> None:
        with self._cond:
            # stop() has taken over this retry
            if self._timers.pop(threading.current_thread(), None) is None:
                return

        item.state = DeliveryState.PENDING
        while not self._stop_event.is_set():
            try:
                self._queue.put(item, timeout=self.poll_interval)
                return
            except queue.Full:
                continue

        with self._cond:
            item.state = DeliveryState.RETRY_SCHEDULED
            self._parked.append(item)
