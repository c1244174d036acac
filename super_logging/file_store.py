# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Rotating store of date-named log files."""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "%Y-%m-%d"
DEFAULT_SUFFIX = ".txt"


class RotatingFileStore:
    """Directory of one log file per calendar day.

    Old files are removed at setup time once more than ``max_files`` files
    with date-parseable names are present. Files whose names do not parse
    are never counted and never deleted.

    Each append opens, writes, flushes and closes the active file, so no
    descriptor is held between calls.
    """

    def __init__(
        self,
        directory: str | Path,
        max_files: int = 10,
        date_format: str = DEFAULT_DATE_FORMAT,
        suffix: str = DEFAULT_SUFFIX,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize file store.

        Args:
            directory: Directory holding the log files
            max_files: Number of dated files kept after rotation
            date_format: strftime/strptime pattern used for file names
            suffix: Fixed extension appended to every file name
            clock: Returns the current time (defaults to datetime.now)
        """
        if max_files < 0:
            raise ValueError(f"max_files must be >= 0, got {max_files}")
        self.directory = Path(directory)
        self.max_files = max_files
        self.date_format = date_format
        self.suffix = suffix
        self._clock = clock or datetime.now
        self.active_file: Path | None = None
        self.last_rotation: list[Path] = []

    def parse_date(self, name: str) -> datetime | None:
        """Parse a file name into its date, or None if it is not a log file."""
        if self.suffix:
            if not name.endswith(self.suffix):
                return None
            name = name[: -len(self.suffix)]
        try:
            return datetime.strptime(name, self.date_format)
        except ValueError:
            return None

    def setup(self) -> Path:
        """Create the directory, rotate old files and pick today's file.

        Returns:
            Path of the active log file (not created until first append)

        Raises:
            OSError: If the directory cannot be created
        """
        self.directory.mkdir(parents=True, exist_ok=True)

        dated: list[tuple[datetime, Path]] = []
        for entry in self.directory.iterdir():
            if not entry.is_file():
                continue
            date = self.parse_date(entry.name)
            if date is not None:
                dated.append((date, entry))

        deleted: list[Path] = []
        if len(dated) > self.max_files:
            # oldest first
            dated.sort(key=lambda item: item[0])
            extra = len(dated) - self.max_files
            for _, path in dated[:extra]:
                try:
                    path.unlink()
                    deleted.append(path)
                except OSError as e:
                    logger.warning(f"Failed to delete old log file {path}: {e}")

        self.last_rotation = deleted
        if deleted:
            logger.info(f"Deleted {len(deleted)} old log file(s) from {self.directory}")

        today = self._clock().strftime(self.date_format)
        self.active_file = self.directory / f"{today}{self.suffix}"
        return self.active_file

    def append(self, text: str) -> bool:
        """Append text to the active file.

        Characters that cannot be encoded as UTF-8, such as lone surrogates
        from undecodable file names, are written as backslash escapes.

        Args:
            text: Text to append, written as-is

        Returns:
            True if the write succeeded, False on an I/O or encoding failure

        Raises:
            RuntimeError: If setup() has not been called
        """
        if self.active_file is None:
            raise RuntimeError("RotatingFileStore.setup() must be called before append()")

        try:
            with open(self.active_file, "a", encoding="utf-8", errors="backslashreplace") as f:
                f.write(text)
                f.flush()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write to log file {self.active_file}: {e}")
            return False
        return True
