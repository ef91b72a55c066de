"""Rewindable view over the next bytes of a forward-only stream."""

from __future__ import annotations

import io
from collections.abc import Iterator
from typing import BinaryIO

from driveupload.exceptions import SourceExhaustedError

ITER_BLOCK_SIZE = 64 * 1024


def _read_into(source: BinaryIO, view: memoryview) -> int:
    """Read from ``source`` until ``view`` is full or the source ends."""
    received = 0
    while received < len(view):
        readinto = getattr(source, "readinto", None)
        if readinto is not None:
            count = readinto(view[received:])
        else:
            data = source.read(len(view) - received)
            count = len(data) if data else 0
            view[received : received + count] = data or b""
        if not count:
            break
        received += count
    return received


class RepeatableChunkReader:
    """Bounded, seekable reader over exactly ``size`` bytes of a source.

    The bytes are pulled from the source once, into a scratch buffer supplied
    by the caller, and every later ``read`` is served from that buffer. The
    buffer is reused for the next chunk, so a reader is only valid until the
    next reader is built on the same buffer.
    """

    def __init__(self, source: BinaryIO, buffer: bytearray, size: int) -> None:
        """Fill the scratch buffer with the next ``size`` bytes of ``source``.

        Args:
            source: Forward-only stream to read from.
            buffer: Reusable scratch buffer, at least ``size`` bytes long.
            size: Number of bytes in this chunk.

        Raises:
            ValueError: If ``size`` is negative or larger than the buffer.
            SourceExhaustedError: If the source ends before ``size`` bytes.
        """
        if size < 0 or size > len(buffer):
            raise ValueError(
                f"chunk size {size} does not fit in a {len(buffer)} byte buffer"
            )
        self._view = memoryview(buffer)[:size]
        self._size = size
        self._position = 0

        received = _read_into(source, self._view)
        if received != size:
            raise SourceExhaustedError(size, received)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[bytes]:
        while True:
            block = self.read(ITER_BLOCK_SIZE)
            if not block:
                return
            yield block

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes (all remaining if negative)."""
        end = self._size if size is None or size < 0 else self._position + size
        end = min(end, self._size)
        data = bytes(self._view[self._position : end])
        self._position = end
        return data

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the read position, clamped to the chunk bounds."""
        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = self._position + offset
        elif whence == io.SEEK_END:
            position = self._size + offset
        else:
            raise ValueError(f"invalid whence: {whence}")
        if position < 0:
            raise ValueError(f"negative seek position {position}")
        self._position = min(position, self._size)
        return self._position

    def tell(self) -> int:
        return self._position


def discard_bytes(source: BinaryIO, count: int, buffer: bytearray) -> None:
    """Consume and drop ``count`` bytes from ``source`` using ``buffer``.

    Raises:
        SourceExhaustedError: If the source ends first.
    """
    if count and not buffer:
        raise ValueError("scratch buffer must not be empty")
    view = memoryview(buffer)
    remaining = count
    while remaining > 0:
        step = min(remaining, len(view))
        received = _read_into(source, view[:step])
        remaining -= received
        if received < step:
            raise SourceExhaustedError(count, count - remaining)
