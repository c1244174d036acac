# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Abstract remote transport interface."""

from abc import ABC, abstractmethod

from .models import RemoteEvent


class RemoteTransport(ABC):
    """Abstract base class for delivering events to an error-tracking service."""

    @abstractmethod
    def send(self, event: RemoteEvent) -> bool:
        """Deliver a single event.

        Args:
            event: The event to deliver

        Returns:
            True if the service accepted the event, False otherwise.
            Implementations may also raise; callers treat that as a failure.
        """
        pass
