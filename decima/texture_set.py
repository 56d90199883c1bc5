"""Texture set objects: source textures packed into combined outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from decima.buffer import Buffer
from decima.objects import CoreObject
from decima.reference import Ref
from decima.strings import read_string


@dataclass
class TextureDefaultColor:
    """An RGBA colour used when a texture is missing."""

    rgba: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)

    @classmethod
    def parse(cls, buffer: Buffer) -> TextureDefaultColor:
        """Consume four 32-bit floats."""
        return cls(tuple(buffer.read_struct("4f")))


@dataclass(eq=False)
class TextureSetEntry:
    """One packed output texture of a texture set."""

    compression_method: int = 0
    create_mip_maps: int = 0
    color_space: int = 0
    packing_info: int = 0
    texture_type: int = 0
    texture: Ref = field(default_factory=Ref)

    @classmethod
    def parse(cls, buffer: Buffer, file: Any) -> TextureSetEntry:
        """Consume an entry and its texture reference."""
        compression_method, create_mip_maps, color_space, packing_info, texture_type = (
            buffer.read_struct("IBIII")
        )
        return cls(
            compression_method=compression_method,
            create_mip_maps=create_mip_maps,
            color_space=color_space,
            packing_info=packing_info,
            texture_type=texture_type,
            texture=Ref.parse(buffer, file),
        )


@dataclass
class TextureSetTextureDescriptor:
    """A source texture feeding a texture set."""

    texture_type: int = 0
    path: str = ""
    active: int = 0
    gamma_space: int = 0
    storage_type: int = 0
    quality_type: int = 0
    compression_method: int = 0
    width: int = 0
    height: int = 0
    unk_0: int = 0
    default_color: TextureDefaultColor = field(default_factory=TextureDefaultColor)

    @classmethod
    def parse(cls, buffer: Buffer, file: Any) -> TextureSetTextureDescriptor:
        """Consume a descriptor; active ones store a size, inactive ones one unknown value."""
        descriptor = cls(texture_type=buffer.read_struct("I"), path=read_string(buffer))
        (
            descriptor.active,
            descriptor.gamma_space,
            descriptor.storage_type,
            descriptor.quality_type,
            descriptor.compression_method,
        ) = buffer.read_struct("BBIII")
        if descriptor.active > 0:
            descriptor.width, descriptor.height = buffer.read_struct("II")
        else:
            descriptor.unk_0 = buffer.read_struct("I")
        descriptor.default_color = TextureDefaultColor.parse(buffer)
        return descriptor


@dataclass(eq=False)
class TextureSet(CoreObject):
    """A set of packed textures, the sources they come from and a preset."""

    entries: list[TextureSetEntry] = field(default_factory=list)
    mip_map_mode: int = 0
    descriptors: list[TextureSetTextureDescriptor] = field(default_factory=list)
    preset: Ref = field(default_factory=Ref)

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        super().parse(manager, buffer, file)
        entry_count = buffer.read_struct("I")
        self.entries = [TextureSetEntry.parse(buffer, file) for _ in range(entry_count)]
        self.mip_map_mode = buffer.read_struct("I")
        descriptor_count = buffer.read_struct("I")
        self.descriptors = [
            TextureSetTextureDescriptor.parse(buffer, file) for _ in range(descriptor_count)
        ]
        self.preset = Ref.parse(buffer, file)