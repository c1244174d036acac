# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Factory functions for creating remote transports."""

import os

from .transport import RemoteTransport


def _default(value: str | None, env_var: str, fallback: str) -> str:
    """Helper to pick an explicit value, then env var, then fallback."""
    return (value or os.getenv(env_var) or fallback)


def create_transport(
    transport_type: str | None = None,
    dsn: str | None = None,
    environment: str | None = None,
    release: str | None = None,
) -> RemoteTransport:
    """Factory function to create a remote transport.

    Args:
        transport_type: Type of transport. Options: "sentry", "silent".
            Defaults to SUPER_LOGGING_TRANSPORT env or "sentry".
        dsn: Sentry DSN, used by the "sentry" transport. Defaults to SENTRY_DSN env.
        environment: Sentry environment name. Defaults to SENTRY_ENVIRONMENT env.
        release: Release version reported with events

    Returns:
        RemoteTransport instance

    Raises:
        ValueError: If transport_type is not recognized or the sentry
            transport has no DSN

    Example:
        >>> transport = create_transport("silent")
        >>> transport = create_transport("sentry", dsn="https://key@sentry.io/1")
    """
    transport_type = _default(transport_type, "SUPER_LOGGING_TRANSPORT", "sentry").lower()

    if transport_type == "silent":
        from .silent_transport import SilentTransport

        return SilentTransport()
    elif transport_type == "sentry":
        from .sentry_transport import SentryTransport

        dsn = dsn or os.getenv("SENTRY_DSN")
        if not dsn:
            raise ValueError("The sentry transport requires a DSN (dsn or SENTRY_DSN)")
        return SentryTransport(
            dsn=dsn,
            environment=environment or os.getenv("SENTRY_ENVIRONMENT"),
            release=release,
        )
    else:
        raise ValueError(
            f"Unknown transport_type: {transport_type}. "
            f"Must be one of: sentry, silent"
        )
