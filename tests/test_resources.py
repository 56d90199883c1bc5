import struct

import pytest

from decima.buffer import Buffer, BufferRangeError
from decima.reference import RefLoadMode
from decima.resources import (
    IndexArrayResource,
    IndexFormat,
    PrimitiveResource,
    VertexArrayResource,
    VertexStreamData,
    VertexStreamInfo,
)

GUID_A = bytes(range(16))
GUID_B = bytes(range(16, 32))


class FakeFile:
    def __init__(self):
        self.objects = []
        self.refs = []

    def queue_reference(self, ref):
        self.refs.append(ref)


def with_header(magic, body):
    return struct.pack("<QI", magic, len(body) + 16) + GUID_A + body


def stream_info_bytes(flags, stride, elements):
    data = struct.pack("<III", flags, stride, len(elements))
    for element in elements:
        data += bytes(element)
    return data + GUID_B


def test_vertex_stream_data_fields_in_order():
    data = VertexStreamData.parse(Buffer(bytes([1, 2, 3, 4])))
    assert (data.offset, data.storage_type, data.slots_used, data.element_type) == (1, 2, 3, 4)


def test_vertex_stream_info_parse():
    buffer = Buffer(stream_info_bytes(7, 24, [(0, 1, 2, 3), (12, 4, 5, 6)]))
    info = VertexStreamInfo.parse(buffer, FakeFile())
    assert len(buffer) == 0
    assert info.flags == 7 and info.stride == 24
    assert [d.offset for d in info.descriptors] == [0, 12]
    assert info.resource_uuid.data == GUID_B


def test_vertex_array_resource_parse():
    body = struct.pack("<IIB", 3, 2, 1)
    body += stream_info_bytes(1, 12, [(0, 1, 1, 1)])
    body += stream_info_bytes(2, 8, [])
    buffer = Buffer(with_header(0x3AC29A123FAABAB4, body))
    resource = VertexArrayResource()
    resource.parse(None, buffer, FakeFile())
    assert len(buffer) == 0
    assert resource.vertex_count == 3
    assert resource.is_streaming is True
    assert len(resource.vertex_stream_info) == resource.vertex_stream_count == 2
    assert resource.vertex_stream_info[1].descriptors == []


def test_index_array_empty_reads_only_count():
    body = struct.pack("<I", 0)
    buffer = Buffer(with_header(0x5FE633B37CEDBF84, body) + b"tail")
    resource = IndexArrayResource()
    resource.parse(None, buffer, FakeFile())
    assert resource.indices_count == 0
    assert buffer.tobytes() == b"tail"


def test_index_array_full():
    body = struct.pack("<IIIB", 6, 9, 1, 0) + GUID_B
    buffer = Buffer(with_header(0x5FE633B37CEDBF84, body))
    resource = IndexArrayResource()
    resource.parse(None, buffer, FakeFile())
    assert len(buffer) == 0
    assert resource.indices_count == 6
    assert resource.flags == 9
    assert resource.index_type is IndexFormat.INDEX32
    assert resource.is_streaming is False
    assert resource.resource_uuid.data == GUID_B


def test_index_array_truncated_raises():
    body = struct.pack("<II", 6, 9)
    with pytest.raises(BufferRangeError):
        IndexArrayResource().parse(None, Buffer(with_header(0x5FE633B37CEDBF84, body)), FakeFile())


def test_primitive_resource_parse_queues_references():
    body = struct.pack("<I", 5)
    body += bytes([0])
    body += bytes([1]) + GUID_B
    body += struct.pack("<6f", -1.0, -2.0, -3.0, 1.0, 2.0, 3.0)
    body += bytes([0])
    body += struct.pack("<III", 10, 20, 0xDEAD)
    buffer = Buffer(with_header(0xEE49D93DA4C1F4B8, body))
    file = FakeFile()
    resource = PrimitiveResource()
    resource.parse(None, buffer, file)
    assert len(buffer) == 0
    assert resource.flags == 5
    assert resource.vertex_array.mode is RefLoadMode.NOT_PRESENT
    assert resource.index_array.mode is RefLoadMode.EMBEDDED
    assert resource.index_array.guid.data == GUID_B
    assert resource.bounding_box.minimum == (-1.0, -2.0, -3.0)
    assert resource.bounding_box.maximum == (1.0, 2.0, 3.0)
    assert (resource.start_index, resource.end_index, resource.hash) == (10, 20, 0xDEAD)
    assert file.refs == [resource.vertex_array, resource.index_array, resource.skd_tree]