# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Sentry transport implementation."""

import logging
from typing import Any

import sentry_sdk
from sentry_sdk.utils import event_from_exception

from .models import RemoteEvent
from .transport import RemoteTransport

logger = logging.getLogger(__name__)


class SentryTransport(RemoteTransport):
    """Delivers remote events to Sentry.

    The SDK is initialised without its default integrations so that it does
    not install its own logging handler or excepthook; every event reaches
    Sentry through ``send``.

    Example:
        transport = SentryTransport(dsn="https://...@sentry.io/...")
        transport.send(event)
    """

    def __init__(
        self,
        dsn: str | None = None,
        environment: str | None = None,
        release: str | None = None,
    ):
        """Initialize Sentry transport.

        Args:
            dsn: Sentry DSN (Data Source Name) for the project
            environment: Environment name (production, staging, development)
            release: Release version reported with every event
        """
        self.dsn = dsn
        self.environment = environment
        self.release = release
        self._initialized = False

        if dsn:
            self._initialize_sentry()

    def _initialize_sentry(self) -> None:
        sentry_sdk.init(
            dsn=self.dsn,
            environment=self.environment,
            release=self.release or None,
            default_integrations=False,
        )
        self._initialized = True

    def build_event(self, event: RemoteEvent) -> tuple[dict[str, Any], dict[str, Any] | None]:
        """Translate a RemoteEvent into a Sentry event payload and hint.

        Args:
            event: The event to translate

        Returns:
            Tuple of (sentry event dict, hint dict or None)
        """
        hint: dict[str, Any] | None = None
        extra: dict[str, Any] = {}

        if isinstance(event.error, BaseException):
            payload, hint = event_from_exception(
                event.error,
                client_options=sentry_sdk.get_client().options,
            )
        else:
            payload = {}
            if event.error is not None:
                extra["error_type"] = type(event.error).__name__
                extra["error"] = str(event.error)

        if event.stack_trace:
            extra["stack_trace"] = event.stack_trace

        payload.update({
            "message": event.message,
            "level": event.severity.value,
            "logger": event.logger_name,
            "culprit": event.culprit,
            "user": event.user.to_dict(),
        })
        if event.release_version:
            payload["release"] = event.release_version
        if extra:
            payload["extra"] = extra

        return payload, hint

    def send(self, event: RemoteEvent) -> bool:
        """Capture the event with the Sentry SDK.

        Returns:
            True if the SDK accepted the event (an event id was assigned)
        """
        if not self._initialized:
            raise RuntimeError("Sentry transport not initialized with a valid DSN")

        payload, hint = self.build_event(event)
        with sentry_sdk.new_scope():
            event_id = sentry_sdk.capture_event(payload, hint=hint)

        if event_id is None:
            logger.debug(f"Sentry did not accept event from {event.logger_name}")
            return False
        return True
