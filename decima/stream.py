"""Pointers into external ``.core.stream`` files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from decima.buffer import Buffer
from decima.strings import read_string

STREAM_SUFFIX = ".core.stream"


@dataclass
class Stream:
    """A span of data stored in a companion stream file."""

    name: str = ""
    offset: int = 0
    size: int = 0
    data: bytes = b""

    @classmethod
    def parse(cls, manager: Any, buffer: Buffer, file: Any) -> Stream:
        """Consume a stream descriptor and load the stream file's contents."""
        name = read_string(buffer)
        buffer.read(20)
        offset, size = buffer.read_struct("II")
        stream_name = name + STREAM_SUFFIX
        stream_file = manager.query_file(stream_name)
        if stream_file is None:
            raise LookupError(f"stream file '{stream_name}' not found")
        return cls(name=name, offset=offset, size=size, data=bytes(stream_file.contents))

    @property
    def file_name(self) -> str:
        """Name of the stream file this descriptor points into."""
        return self.name + STREAM_SUFFIX