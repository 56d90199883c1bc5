import struct

import pytest

from decima.buffer import Buffer
from decima.stream import Stream


class FakeStreamFile:
    def __init__(self, contents):
        self.contents = contents


class FakeManager:
    def __init__(self, files):
        self.files = files
        self.requested = []

    def query_file(self, name):
        self.requested.append(name)
        return self.files.get(name)


def stream_bytes(name, offset, size):
    encoded = name.encode()
    return (
        struct.pack("<I", len(encoded))
        + encoded
        + b"\xee" * 20
        + struct.pack("<II", offset, size)
    )


def test_parse_reads_fields_and_loads_data():
    manager = FakeManager({"tex/a.core.stream": FakeStreamFile(b"payload")})
    buffer = Buffer(stream_bytes("tex/a", 16, 4096) + b"after")
    stream = Stream.parse(manager, buffer, None)
    assert stream.name == "tex/a"
    assert stream.offset == 16
    assert stream.size == 4096
    assert stream.data == b"payload"
    assert manager.requested == ["tex/a.core.stream"]
    assert buffer.tobytes() == b"after"


def test_file_name_property():
    assert Stream(name="x/y").file_name == "x/y.core.stream"


def test_missing_stream_file_raises():
    manager = FakeManager({})
    with pytest.raises(LookupError):
        Stream.parse(manager, Buffer(stream_bytes("gone", 0, 0)), None)