"""Length-prefixed strings found in core files."""

from __future__ import annotations

from decima.buffer import Buffer


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def read_string(buffer: Buffer) -> str:
    """Consume a string prefixed by its 32-bit byte length."""
    size = buffer.read_struct("I")
    return _decode(buffer.read(size)) if size else ""


def read_hashed_string(buffer: Buffer) -> tuple[str, int]:
    """Consume a length-prefixed string that carries a 32-bit hash.

    Returns ``(text, hash)``; an empty string has no hash stored and
    yields a hash of zero.
    """
    size = buffer.read_struct("I")
    if not size:
        return "", 0
    string_hash = buffer.read_struct("I")
    return _decode(buffer.read(size)), string_hash