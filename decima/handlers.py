"""Mapping from object type magics to object classes and display names."""

from __future__ import annotations

from typing import Callable

from decima.objects import Collection, CoreObject, Dummy, Prefetch, Translation
from decima.resources import IndexArrayResource, PrimitiveResource, VertexArrayResource
from decima.texture import Texture
from decima.texture_set import TextureSet
from decima.utils import uint64_to_hex

ARMATURE = 0x11E1D1A40B933E66
TEXTURE = 0xA664164D69FD2B38
TEXTURE_SET = 0xA321E8C307328D2E
TRANSLATION = 0x31BE502435317445
SHADER = 0x16BB69A9E5AA0D9E
COLLECTION = 0xF3586131B4F18516
PREFETCH = 0xD05789EAE3ACBF02
VERTEX_ARRAY_RESOURCE = 0x3AC29A123FAABAB4
INDEX_ARRAY_RESOURCE = 0x5FE633B37CEDBF84
PRIMITIVE_RESOURCE = 0xEE49D93DA4C1F4B8

ZERO_DAWN_TEXTURE = 0xF2E1AFB7052B3866

_HANDLERS: dict[int, Callable[[], CoreObject]] = {
    TRANSLATION: Translation,
    TEXTURE: Texture,
    TEXTURE_SET: TextureSet,
    COLLECTION: Collection,
    PREFETCH: Prefetch,
    VERTEX_ARRAY_RESOURCE: VertexArrayResource,
    INDEX_ARRAY_RESOURCE: IndexArrayResource,
    PRIMITIVE_RESOURCE: PrimitiveResource,
}

_NAMES: dict[int, str] = {
    ARMATURE: "Armature",
    TEXTURE: "Texture",
    TEXTURE_SET: "TextureSet",
    TRANSLATION: "Translation",
    SHADER: "Shader",
    COLLECTION: "Collection",
    PREFETCH: "Prefetch",
    VERTEX_ARRAY_RESOURCE: "VertexArrayResource",
    INDEX_ARRAY_RESOURCE: "IndexArrayResource",
    PRIMITIVE_RESOURCE: "PrimitiveResource",
}


def get_type_handler(magic: int) -> CoreObject:
    """Return a fresh object for ``magic``, or a ``Dummy`` for unknown types."""
    return _HANDLERS.get(magic, Dummy)()


def get_type_name(magic: int) -> str:
    """Return the type name for ``magic``, or ``Unknown '<hex>'``."""
    return _NAMES.get(magic, f"Unknown '{uint64_to_hex(magic)}'")