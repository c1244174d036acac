# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Console sink that writes formatted records in fixed-size chunks."""

import sys
from collections.abc import Iterator
from typing import TextIO

DEFAULT_CHUNK_SIZE = 800


class Chunks:
    """Lazy view of a text split into pieces of ``size`` characters.

    Every iteration starts again from the beginning of the text.
    """

    def __init__(self, text: str, size: int):
        self.text = text
        self.size = size

    def __iter__(self) -> Iterator[str]:
        return _chunks(self.text, self.size)


def chunked(text: str, size: int) -> Chunks:
    """Split text into consecutive pieces of ``size`` characters.

    The last piece holds the remainder and is never empty. Pieces are
    produced on demand, and the result can be iterated more than once.

    Args:
        text: Text to split
        size: Maximum piece length, must be positive

    Returns:
        Re-iterable sequence of the pieces in order

    Raises:
        ValueError: If size is not positive
    """
    if size <= 0:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return Chunks(text, size)


def _chunks(text: str, size: int) -> Iterator[str]:
    start = 0
    while start + size <= len(text):
        yield text[start:start + size]
        start += size

    if start < len(text):
        yield text[start:]


class ConsoleSink:
    """Writes formatted records to a text stream, one write per chunk.

    Long lines are split because some console transports truncate them.
    """

    def __init__(self, stream: TextIO | None = None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Initialize console sink.

        Args:
            stream: Target stream (defaults to sys.stdout at write time)
            chunk_size: Maximum characters per write
        """
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        self.stream = stream
        self.chunk_size = chunk_size

    def write(self, text: str) -> None:
        """Write text as a sequence of chunks.

        Characters the stream cannot encode are written as backslash
        escapes instead of failing the write.
        """
        stream = self.stream or sys.stdout
        for piece in chunked(text, self.chunk_size):
            try:
                print(piece, file=stream, flush=True)
            except UnicodeEncodeError:
                encoding = getattr(stream, "encoding", None) or "utf-8"
                escaped = piece.encode(encoding, "backslashreplace").decode(encoding)
                print(escaped, file=stream, flush=True)
