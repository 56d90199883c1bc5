"""Wrapper around an externally supplied block decompressor."""

from __future__ import annotations

import enum
from typing import Callable

MINIMUM_VERSION = 0x2E070030

DecompressFn = Callable[[bytes, int], bytes]


class CompressionLevel(enum.IntEnum):
    """Compression levels understood by the compressor library."""

    NONE = 0
    SUPER_FAST = 1
    VERY_FAST = 2
    FAST = 3
    NORMAL = 4
    OPTIMAL1 = 5
    OPTIMAL2 = 6
    OPTIMAL3 = 7
    OPTIMAL4 = 8
    OPTIMAL5 = 9


def compression_bound(size: int) -> int:
    """Return the largest compressed size possible for ``size`` input bytes."""
    return size + 274 * ((size + 0x3FFFF) // 0x40000)


def version_string(version: int) -> str:
    """Render a packed library version number as ``major.minor.patch``."""
    major = (version & 0xFF) - (version >> 24)
    minor = (version >> 16) & 0xFF
    patch = (version >> 8) & 0xFF
    return f"{major}.{minor}.{patch}"


class Compressor:
    """Decompresses archive chunks through a supplied decompression function."""

    def __init__(self, decompress: DecompressFn, version: int) -> None:
        self._decompress = decompress
        self.version = version

    def decompress(self, data: bytes, size: int) -> bytes:
        """Decompress ``data`` into exactly ``size`` bytes."""
        result = bytes(self._decompress(bytes(data), size))
        if len(result) != size:
            raise ValueError(
                f"decompressed {len(result)} bytes, expected {size}"
            )
        return result

    def version_string(self) -> str:
        """Return the library version as ``major.minor.patch``."""
        return version_string(self.version)

    @property
    def supported(self) -> bool:
        """Whether the library version is new enough to read archives."""
        return self.version >= MINIMUM_VERSION