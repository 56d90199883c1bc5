"""Sixteen-byte object identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from decima.buffer import Buffer


@dataclass(frozen=True)
class GUID:
    """A 16-byte object identifier as stored in core files."""

    data: bytes = bytes(16)

    SIZE: ClassVar[int] = 16

    def __post_init__(self) -> None:
        if len(self.data) != self.SIZE:
            raise ValueError(f"GUID must be {self.SIZE} bytes, got {len(self.data)}")

    @classmethod
    def parse(cls, buffer: Buffer) -> GUID:
        """Consume a GUID from ``buffer``."""
        return cls(buffer.read(cls.SIZE))

    def __str__(self) -> str:
        digits = self.data.hex().upper()
        return "-".join(
            (digits[0:8], digits[8:12], digits[12:16], digits[16:20], digits[20:])
        )