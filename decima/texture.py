"""Texture objects, their pixel formats and TGA export."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any

from decima.buffer import Buffer
from decima.guid import GUID
from decima.objects import CoreObject
from decima.stream import Stream


class TexturePixelFormat(enum.IntEnum):
    """Pixel formats whose layout is known."""

    RGBA8 = 0x0C
    RGBA16F = 0x13
    A8 = 0x1F
    BC1 = 0x42
    BC3 = 0x44
    BC4 = 0x45
    BC5 = 0x47
    BC6 = 0x49
    BC7 = 0x4B


@dataclass(frozen=True)
class TexturePixelFormatInfo:
    """Block size (in pixels), bits per pixel and whether blocks are compressed."""

    block_size: int
    block_density: int
    compressed: bool

    def calculate_size(self, width: int, height: int) -> int:
        """Return ``width * height * block_density``."""
        return width * height * self.block_density


TEXTURE_FORMAT_INFO: dict[TexturePixelFormat, TexturePixelFormatInfo] = {
    TexturePixelFormat.BC1: TexturePixelFormatInfo(4, 4, True),
    TexturePixelFormat.BC3: TexturePixelFormatInfo(4, 8, True),
    TexturePixelFormat.BC4: TexturePixelFormatInfo(4, 4, True),
    TexturePixelFormat.BC5: TexturePixelFormatInfo(4, 8, True),
    TexturePixelFormat.BC6: TexturePixelFormatInfo(4, 8, True),
    TexturePixelFormat.BC7: TexturePixelFormatInfo(4, 8, True),
    TexturePixelFormat.A8: TexturePixelFormatInfo(1, 8, False),
    TexturePixelFormat.RGBA8: TexturePixelFormatInfo(1, 32, False),
    TexturePixelFormat.RGBA16F: TexturePixelFormatInfo(1, 64, False),
}


@dataclass(frozen=True)
class MipLevel:
    """The raw data of one mip-map level."""

    index: int
    width: int
    height: int
    data: bytes
    external: bool


def _pixel_format(value: int) -> TexturePixelFormat | int:
    try:
        return TexturePixelFormat(value)
    except ValueError:
        return value


@dataclass(eq=False)
class Texture(CoreObject):
    """A texture whose top mips may live in an external stream file."""

    texture_type: int = 0
    width: int = 0
    height: int = 0
    layers: int = 0
    total_mips: int = 0
    pixel_format: TexturePixelFormat | int = 0
    unk_0: int = 0
    unk_1: int = 0
    unk_2: GUID = field(default_factory=GUID)
    buffer_size: int = 0
    total_size: int = 0
    stream_size: int = 0
    stream_mips: int = 0
    unk_3: int = 0
    unk_4: int = 0
    external_data: Stream | None = None
    embedded_data: bytes = b""
    mips: list[MipLevel] = field(default_factory=list)

    @property
    def format_info(self) -> TexturePixelFormatInfo | None:
        """Layout of the pixel format, or ``None`` when it is unknown."""
        return TEXTURE_FORMAT_INFO.get(self.pixel_format)

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        super().parse(manager, buffer, file)
        (
            self.texture_type,
            self.width,
            self.height,
            self.layers,
            self.total_mips,
            pixel_format,
            self.unk_0,
            self.unk_1,
        ) = buffer.read_struct("HHHHBBHI")
        self.pixel_format = _pixel_format(pixel_format)
        self.unk_2 = GUID.parse(buffer)
        (
            self.buffer_size,
            self.total_size,
            self.stream_size,
            self.stream_mips,
            self.unk_3,
            self.unk_4,
        ) = buffer.read_struct("6I")

        self.external_data = (
            Stream.parse(manager, buffer, file) if self.stream_size > 0 else None
        )

        # Some textures declare a total size larger than the embedded data.
        available = min(self.total_size, len(buffer))
        embedded = buffer.read(available)
        self.embedded_data = embedded + bytes(self.total_size - available)

        self.mips = list(self._build_mips())

    def _build_mips(self):
        info = self.format_info
        if info is None:
            return
        external = self.external_data.data if self.external_data else b""
        source, position = external, 0
        for mip in range(self.total_mips):
            mip_width = max(self.width >> mip, info.block_size)
            mip_height = max(self.height >> mip, info.block_size)
            size = mip_width * mip_height * info.block_density // 8
            is_external = mip < self.stream_mips
            if mip == self.stream_mips:
                source, position = self.embedded_data, 0
            yield MipLevel(
                index=mip,
                width=mip_width,
                height=mip_height,
                data=bytes(source[position:position + size]),
                external=is_external,
            )
            position += size


_TGA_HEADER = struct.Struct("<BBBHHBHHHHBB")
_TGA_FOOTER = struct.Struct("<II18s")
_TGA_SIGNATURE = b"TRUEVISION-XFILE.\0"


def write_tga(path: str | PathLike[str], width: int, height: int, rgba: bytes) -> Path:
    """Write top-down RGBA8 pixels as an uncompressed 32-bit TGA file."""
    rgba = bytes(rgba)
    row_size = width * 4
    if len(rgba) != row_size * height:
        raise ValueError(
            f"expected {row_size * height} bytes of pixels, got {len(rgba)}"
        )
    pixels = bytearray()
    for y in reversed(range(height)):
        row = bytearray(rgba[y * row_size:(y + 1) * row_size])
        row[0::4], row[2::4] = row[2::4], row[0::4]
        pixels += row

    header = _TGA_HEADER.pack(0, 0, 2, 0, 0, 0, 0, 0, width, height, 32, 8)
    footer = _TGA_FOOTER.pack(0, 0, _TGA_SIGNATURE)
    target = Path(path)
    target.write_bytes(header + bytes(pixels) + footer)
    return target