import struct

import pytest

from decima.buffer import Buffer
from decima.handlers import get_type_handler, get_type_name
from decima.objects import Collection, Dummy, Prefetch, Translation
from decima.resources import IndexArrayResource, PrimitiveResource, VertexArrayResource
from decima.texture import Texture
from decima.texture_set import TextureSet


class FakeFile:
    def __init__(self):
        self.objects = []
        self.refs = []

    def queue_reference(self, ref):
        self.refs.append(ref)


@pytest.mark.parametrize(
    "magic, cls",
    [
        (0x31BE502435317445, Translation),
        (0xA664164D69FD2B38, Texture),
        (0xA321E8C307328D2E, TextureSet),
        (0xF3586131B4F18516, Collection),
        (0xD05789EAE3ACBF02, Prefetch),
        (0x3AC29A123FAABAB4, VertexArrayResource),
        (0x5FE633B37CEDBF84, IndexArrayResource),
        (0xEE49D93DA4C1F4B8, PrimitiveResource),
    ],
)
def test_known_handlers(magic, cls):
    assert type(get_type_handler(magic)) is cls


@pytest.mark.parametrize("magic", [0x1234, 0x11E1D1A40B933E66])
def test_unknown_magic_gives_dummy_that_skips_body(magic):
    handler = get_type_handler(magic)
    assert isinstance(handler, Dummy)
    body = b"\xaa\xbb\xcc\xdd"
    trailing = b"\x01\x02\x03"
    data = struct.pack("<QI", magic, 16 + len(body)) + bytes(range(16)) + body + trailing
    buffer = Buffer(data)
    handler.parse(None, buffer, FakeFile())
    assert buffer.tobytes() == trailing


def test_handler_returns_fresh_instances():
    first = get_type_handler(0xF3586131B4F18516)
    second = get_type_handler(0xF3586131B4F18516)
    assert first is not second
    first.refs.append("x")
    assert second.refs == []


@pytest.mark.parametrize(
    "magic, name",
    [
        (0x11E1D1A40B933E66, "Armature"),
        (0x16BB69A9E5AA0D9E, "Shader"),
        (0xA664164D69FD2B38, "Texture"),
        (0xEE49D93DA4C1F4B8, "PrimitiveResource"),
    ],
)
def test_known_names(magic, name):
    assert get_type_name(magic) == name


def test_unknown_name_includes_hex():
    assert get_type_name(0xABC) == "Unknown 'abc'"
    assert get_type_name(0xF2E1AFB7052B3866) == "Unknown 'f2e1afb7052b3866'"