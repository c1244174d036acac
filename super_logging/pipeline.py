# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Pipeline coordinator: delivers each record to console, file and remote sinks."""

import asyncio
import inspect
import json
import logging
import tempfile
import threading
import traceback
from collections.abc import Callable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import SuperLoggingConfig, is_release_mode
from .console import ConsoleSink
from .file_store import RotatingFileStore
from .formatter import format_record
from .handler import SuperLoggingHandler
from .models import LogRecord, RemoteEvent, UserContext, user_factory
from .retry_queue import RetryQueue
from .transport import RemoteTransport

logger = logging.getLogger(__name__)


class SuperLogging:
    """Fans a single stream of log records out to every configured sink.

    Console output is always on. File and remote delivery are enabled once,
    in ``start()``, from the configuration and the release-mode flag, and
    stay fixed for the lifetime of the instance.

    Example:
        >>> pipeline = SuperLogging(SuperLoggingConfig(log_dir_path=""))
        >>> pipeline.main(run_app)
    """

    def __init__(
        self,
        config: SuperLoggingConfig | None = None,
        transport: RemoteTransport | None = None,
        context_info: Callable[[], Mapping[str, str]] | None = None,
        release_mode: bool | None = None,
        console: ConsoleSink | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Pipeline settings (defaults to SuperLoggingConfig())
            transport: Remote transport; when None a Sentry transport is
                created from ``config.sentry_dsn``
            context_info: Returns app/device metadata shown in the context lines
            release_mode: Externally reported release flag (defaults to
                is_release_mode())
            console: Console sink (defaults to stdout)
            clock: Returns the current time, used for file names
        """
        self.config = config or SuperLoggingConfig()
        self.config.validate()
        self.release_mode = is_release_mode() if release_mode is None else release_mode
        self.context_info = context_info
        self.console = console or ConsoleSink(chunk_size=self.config.log_chunk_size)

        self._transport = transport
        self._clock = clock
        self._file_enabled = False
        self._remote_enabled = False
        self._started = False
        self._last_extra_lines = ""
        self.lock = threading.RLock()
        self._user = user_factory()
        self._handler: SuperLoggingHandler | None = None
        self._installed_on: logging.Logger | None = None

        self.file_store: RotatingFileStore | None = None
        self.retry_queue: RetryQueue | None = None

    @property
    def file_enabled(self) -> bool:
        """Whether file logging is enabled."""
        return self._file_enabled

    @property
    def remote_enabled(self) -> bool:
        """Whether remote delivery is enabled."""
        return self._remote_enabled

    @property
    def log_file(self) -> Path | None:
        """The log file in use today, if file logging is enabled."""
        if self.file_store is None:
            return None
        return self.file_store.active_file

    @property
    def user(self) -> UserContext:
        """The current user."""
        return self._user

    def set_user(
        self,
        id: str | None = None,
        username: str | None = None,
        email: str | None = None,
        extra_info: dict[str, str] | None = None,
    ) -> UserContext:
        """Replace the current user.

        Events created from later records carry the new user; events
        already queued keep the user they were created with.
        """
        user = user_factory(id=id, username=username, email=email, extra_info=extra_info)
        with self.lock:
            self._user = user
        return user

    def start(self) -> None:
        """Decide which sinks are enabled and prepare them."""
        if self._started:
            logger.warning("SuperLogging already started")
            return

        enable = self.config.enable_in_debug_mode or self.release_mode
        self._file_enabled = enable and self.config.log_dir_path is not None
        self._remote_enabled = enable and (
            self._transport is not None or self.config.sentry_dsn is not None
        )

        if self._file_enabled:
            try:
                self._setup_log_dir()
            except OSError as e:
                logger.error(f"Failed to set up log directory, file logging disabled: {e}")
                self._file_enabled = False
                self.file_store = None

        if self._remote_enabled:
            try:
                self._setup_uploader()
            except ValueError as e:
                logger.error(f"Failed to set up remote transport, remote logging disabled: {e}")
                self._remote_enabled = False

        self._started = True

        if not enable:
            logger.info("detected debug mode; file & remote logging disabled.")
        if self._file_enabled:
            logger.info(f"using this log file for today: {self.log_file}")
        if self._remote_enabled:
            logger.info("remote uploader started")

    def _setup_log_dir(self) -> None:
        log_dir = self.config.log_dir_path
        if not log_dir:
            log_dir = str(Path(tempfile.gettempdir()) / "logs")

        self.file_store = RotatingFileStore(
            log_dir,
            max_files=self.config.max_log_files,
            date_format=self.config.date_format,
            suffix=self.config.log_file_suffix,
            clock=self._clock,
        )
        self.file_store.setup()

    def _setup_uploader(self) -> None:
        if self._transport is None:
            from .factory import create_transport

            self._transport = create_transport(
                "sentry",
                dsn=self.config.sentry_dsn,
                environment=self.config.environment,
                release=self.config.release_version,
            )

        self.retry_queue = RetryQueue(
            self._transport,
            retry_delay=self.config.retry_delay_seconds,
            max_size=self.config.max_queue_size,
        )
        self.retry_queue.start()

    def context_lines(self) -> str:
        """Build the metadata lines describing the app and current user."""
        lines = []
        if self.config.release_version:
            lines.append(f"app version: {self.config.release_version}")
        if self.context_info is not None:
            for key, value in self.context_info().items():
                lines.append(f"{key}: {value}")
        user = json.dumps(self._user.to_dict(), sort_keys=True)
        lines.append(f"current user: {user}")
        return "\n".join(lines)

    def on_record(self, record: LogRecord) -> None:
        """Deliver one record to every enabled sink, in order."""
        with self.lock:
            # log misc info, but only if it changed
            extra_lines: str | None = self.context_lines()
            if extra_lines != self._last_extra_lines:
                self._last_extra_lines = extra_lines
            else:
                extra_lines = None

            text = format_record(record, extra_lines)

            self.console.write(text)

            if self._file_enabled and self.file_store is not None:
                # append() logs its own failures
                self.file_store.append(text + "\n")

            if (
                self._remote_enabled
                and self.retry_queue is not None
                and self.config.remote_filter(record)
            ):
                event = RemoteEvent.from_record(
                    record, self._user, release_version=self.config.release_version
                )
                self.retry_queue.enqueue(event)

    def on_diagnostic(self, record: LogRecord) -> None:
        """Write a record about the pipeline itself to the console only."""
        self.console.write(format_record(record))

    def capture_exception(
        self,
        error: BaseException,
        message: str = "Uncaught exception",
        logger_name: str = "uncaught",
    ) -> None:
        """Route an exception through the pipeline as a CRITICAL record."""
        stack_trace = "".join(traceback.format_tb(error.__traceback__)) or None
        record = LogRecord(
            logger_name=logger_name,
            level=logging.CRITICAL,
            timestamp=datetime.now(),
            message=message,
            error=error,
            stack_trace=stack_trace,
        )
        self.on_record(record)

    def install(self, target: logging.Logger | None = None) -> SuperLoggingHandler:
        """Subscribe the pipeline to a logger (the root logger by default).

        The logger's level is lowered to NOTSET so every record reaches the
        pipeline.
        """
        if self._handler is not None:
            return self._handler

        target = target or logging.getLogger()
        handler = SuperLoggingHandler(self)
        target.setLevel(logging.NOTSET)
        target.addHandler(handler)
        self._handler = handler
        self._installed_on = target
        logger.info("logger installed")
        return handler

    def uninstall(self) -> None:
        """Remove the pipeline's handler from the logger it was installed on."""
        if self._handler is not None and self._installed_on is not None:
            self._installed_on.removeHandler(self._handler)
        self._handler = None
        self._installed_on = None

    def _thread_excepthook(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit or args.exc_value is None:
            return
        name = args.thread.name if args.thread is not None else "unknown"
        self.capture_exception(args.exc_value, message=f"Uncaught exception in thread {name}")

    def main(self, body: Callable[[], Any] | None = None) -> Any:
        """Start the pipeline and optionally run a body of work under it.

        While ``body`` runs, uncaught exceptions in other threads are routed
        through the pipeline. An exception escaping ``body`` itself is
        logged as CRITICAL and re-raised. Coroutine functions are run with
        ``asyncio.run``.

        Returns:
            Whatever ``body`` returns, or None without a body
        """
        self.install()
        self.start()

        if body is None:
            return None

        previous_hook = threading.excepthook
        threading.excepthook = self._thread_excepthook
        try:
            if inspect.iscoroutinefunction(body):
                return asyncio.run(body())
            return body()
        except Exception as e:
            self.capture_exception(e)
            raise
        finally:
            threading.excepthook = previous_hook

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until the remote queue has delivered everything.

        Returns:
            True if nothing is left pending
        """
        if self.retry_queue is None:
            return True
        return self.retry_queue.wait_until_idle(timeout)

    def stop(self, timeout: float = 5.0) -> None:
        """Unsubscribe from logging and stop the uploader."""
        self.uninstall()
        if self.retry_queue is not None:
            self.retry_queue.stop(timeout=timeout)


def create_super_logging(config: SuperLoggingConfig | None = None, **kwargs: Any) -> SuperLogging:
    """Create a pipeline from explicit config or from the environment.

    Args:
        config: Settings; read with SuperLoggingConfig.from_env() when None
        **kwargs: Passed to SuperLogging (transport, context_info, ...)

    Returns:
        SuperLogging instance, not yet started
    """
    return SuperLogging(config or SuperLoggingConfig.from_env(), **kwargs)
