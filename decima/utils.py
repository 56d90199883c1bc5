"""Hashing and name helpers shared by the archive code."""

from __future__ import annotations

import struct

_MASK64 = 0xFFFFFFFFFFFFFFFF
_C1 = 0x87C37B91114253D5
_C2 = 0x4CF5AD432745937F


def _rotl64(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (64 - shift))) & _MASK64


def _fmix64(value: int) -> int:
    value ^= value >> 33
    value = (value * 0xFF51AFD7ED558CCD) & _MASK64
    value ^= value >> 33
    value = (value * 0xC4CEB9FE1A85EC53) & _MASK64
    value ^= value >> 33
    return value


def murmurhash3_x64_128(data: bytes, seed: int) -> bytes:
    """Return the 16-byte MurmurHash3 x64/128 digest (h1 then h2, little-endian)."""
    data = bytes(data)
    length = len(data)
    block_end = length - length % 16
    h1 = h2 = seed & 0xFFFFFFFF

    for k1, k2 in struct.iter_unpack("<QQ", data[:block_end]):
        k1 = (k1 * _C1) & _MASK64
        k1 = _rotl64(k1, 31)
        k1 = (k1 * _C2) & _MASK64
        h1 ^= k1
        h1 = _rotl64(h1, 27)
        h1 = (h1 + h2) & _MASK64
        h1 = (h1 * 5 + 0x52DCE729) & _MASK64

        k2 = (k2 * _C2) & _MASK64
        k2 = _rotl64(k2, 33)
        k2 = (k2 * _C1) & _MASK64
        h2 ^= k2
        h2 = _rotl64(h2, 31)
        h2 = (h2 + h1) & _MASK64
        h2 = (h2 * 5 + 0x38495AB5) & _MASK64

    tail = data[block_end:]
    if len(tail) > 8:
        k2 = int.from_bytes(tail[8:], "little")
        k2 = (k2 * _C2) & _MASK64
        k2 = _rotl64(k2, 33)
        k2 = (k2 * _C1) & _MASK64
        h2 ^= k2
    if tail:
        k1 = int.from_bytes(tail[:8], "little")
        k1 = (k1 * _C1) & _MASK64
        k1 = _rotl64(k1, 31)
        k1 = (k1 * _C2) & _MASK64
        h1 ^= k1

    h1 ^= length
    h2 ^= length
    h1 = (h1 + h2) & _MASK64
    h2 = (h2 + h1) & _MASK64
    h1 = _fmix64(h1)
    h2 = _fmix64(h2)
    h1 = (h1 + h2) & _MASK64
    h2 = (h2 + h1) & _MASK64
    return struct.pack("<QQ", h1, h2)


def uint64_to_hex(value: int) -> str:
    """Format an unsigned 64-bit value as lower-case hex without a prefix."""
    return format(value & _MASK64, "x")


def hash_string(filename: str, seed: int) -> int:
    """Hash a file name (with its terminating NUL) the way archives index files."""
    digest = murmurhash3_x64_128(filename.encode("utf-8") + b"\0", seed)
    return int.from_bytes(digest[:8], "little")


def sanitize_name(filename: str) -> str:
    """Normalise slashes and add ``.core`` unless the name is a core or stream file."""
    filename = filename.replace("\\", "/")
    extension = filename.rsplit(".", 1)[-1]
    if extension not in ("stream", "core"):
        return filename + ".core"
    return filename


def split(text: str, delim: str) -> list[str]:
    """Split ``text`` on every occurrence of ``delim``, keeping empty parts."""
    return text.split(delim)