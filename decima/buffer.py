"""A read-only byte cursor over binary data."""

from __future__ import annotations

import struct
from typing import Any


class BufferRangeError(ValueError):
    """Raised when a read or slice goes past the end of a buffer."""


class Buffer:
    """A view of bytes that is consumed from the front as values are read."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._view = memoryview(data).cast("B")

    def __len__(self) -> int:
        return len(self._view)

    def __repr__(self) -> str:
        return f"Buffer({len(self)} bytes)"

    def slice(self, offset: int, count: int) -> Buffer:
        """Return a new buffer of ``count`` bytes starting at ``offset``."""
        if offset < 0 or count < 0 or offset + count > len(self):
            raise BufferRangeError("Cannot take slice that is larger than buffer")
        return Buffer(self._view[offset:offset + count])

    def take(self, count: int) -> Buffer:
        """Return the first ``count`` bytes."""
        return self.slice(0, count)

    def last(self, count: int) -> Buffer:
        """Return the final ``count`` bytes."""
        if count > len(self):
            raise BufferRangeError("Cannot take slice that is larger than buffer")
        return self.slice(len(self) - count, count)

    def skip(self, count: int) -> Buffer:
        """Return everything after the first ``count`` bytes."""
        if count > len(self):
            raise BufferRangeError("Cannot take slice that is larger than buffer")
        return self.slice(count, len(self) - count)

    def read(self, count: int) -> bytes:
        """Consume ``count`` bytes from the front and return them."""
        chunk = self.take(count).tobytes()
        self._view = self._view[count:]
        return chunk

    def read_struct(self, fmt: str) -> Any:
        """Consume and unpack a struct; little-endian unless ``fmt`` says otherwise.

        A single field is returned as a value, several as a tuple.
        """
        if not fmt or fmt[0] not in "@=<>!":
            fmt = "<" + fmt
        values = struct.unpack(fmt, self.read(struct.calcsize(fmt)))
        return values[0] if len(values) == 1 else values

    def tobytes(self) -> bytes:
        """Return the remaining contents as bytes."""
        return self._view.tobytes()