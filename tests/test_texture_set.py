import struct

import pytest

from decima.buffer import Buffer, BufferRangeError
from decima.guid import GUID
from decima.reference import RefLoadMode
from decima.texture_set import (
    TextureDefaultColor,
    TextureSet,
    TextureSetEntry,
    TextureSetTextureDescriptor,
)

GUID_BYTES = bytes(range(16))
COLOR = (0.5, 1.0, 0.25, 0.0)


class FakeFile:
    def __init__(self):
        self.objects = []
        self.queued = []

    def queue_reference(self, ref):
        self.queued.append(ref)


def string(text):
    encoded = text.encode()
    return struct.pack("<I", len(encoded)) + encoded


def embedded_ref(fill):
    return struct.pack("<B", 1) + bytes([fill]) * 16


def entry_bytes():
    return struct.pack("<IBIII", 2, 1, 3, 0x1234, 5) + embedded_ref(9)


def descriptor_bytes(active, path="tex/src"):
    data = struct.pack("<I", 7) + string(path) + struct.pack("<BBIII", active, 1, 2, 3, 4)
    if active:
        data += struct.pack("<II", 1024, 512)
    else:
        data += struct.pack("<I", 77)
    return data + struct.pack("<4f", *COLOR)


def test_default_color_parse():
    buffer = Buffer(struct.pack("<4f", *COLOR) + b"x")
    assert TextureDefaultColor.parse(buffer).rgba == COLOR
    assert buffer.tobytes() == b"x"


def test_entry_parse():
    file = FakeFile()
    buffer = Buffer(entry_bytes())
    entry = TextureSetEntry.parse(buffer, file)
    assert (entry.compression_method, entry.create_mip_maps, entry.color_space) == (2, 1, 3)
    assert (entry.packing_info, entry.texture_type) == (0x1234, 5)
    assert entry.texture.mode is RefLoadMode.EMBEDDED
    assert entry.texture.guid == GUID(bytes([9]) * 16)
    assert file.queued == [entry.texture]
    assert len(buffer) == 0


def test_active_descriptor_reads_size():
    buffer = Buffer(descriptor_bytes(1))
    descriptor = TextureSetTextureDescriptor.parse(buffer, FakeFile())
    assert descriptor.texture_type == 7
    assert descriptor.path == "tex/src"
    assert descriptor.active == 1
    assert (descriptor.gamma_space, descriptor.storage_type) == (1, 2)
    assert (descriptor.quality_type, descriptor.compression_method) == (3, 4)
    assert (descriptor.width, descriptor.height) == (1024, 512)
    assert descriptor.unk_0 == 0
    assert descriptor.default_color.rgba == COLOR
    assert len(buffer) == 0


def test_inactive_descriptor_reads_unknown():
    buffer = Buffer(descriptor_bytes(0))
    descriptor = TextureSetTextureDescriptor.parse(buffer, FakeFile())
    assert descriptor.unk_0 == 77
    assert (descriptor.width, descriptor.height) == (0, 0)
    assert descriptor.default_color.rgba == COLOR
    assert len(buffer) == 0


def test_texture_set_parse():
    body = (
        GUID_BYTES
        + struct.pack("<I", 2) + entry_bytes() + entry_bytes()
        + struct.pack("<I", 6)
        + struct.pack("<I", 2) + descriptor_bytes(1, "a") + descriptor_bytes(0, "b")
        + embedded_ref(4)
    )
    data = struct.pack("<QI", 0xA321E8C307328D2E, len(body)) + body
    file = FakeFile()
    texture_set = TextureSet()
    file.objects.append((texture_set, 0))
    buffer = Buffer(data)
    texture_set.parse(None, buffer, file)
    assert len(texture_set.entries) == 2
    assert texture_set.mip_map_mode == 6
    assert [d.path for d in texture_set.descriptors] == ["a", "b"]
    assert texture_set.preset.guid == GUID(bytes([4]) * 16)
    assert texture_set.preset.owner is texture_set
    assert len(file.queued) == 3
    assert len(buffer) == 0


def test_texture_set_truncated_raises():
    body = GUID_BYTES + struct.pack("<I", 3) + entry_bytes()
    data = struct.pack("<QI", 0xA321E8C307328D2E, len(body)) + body
    with pytest.raises(BufferRangeError):
        TextureSet().parse(None, Buffer(data), FakeFile())