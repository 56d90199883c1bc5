"""Core object header and the simpler object types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, TypeVar

from decima.buffer import Buffer
from decima.guid import GUID
from decima.reference import Ref
from decima.strings import read_string

T = TypeVar("T")


def read_array(buffer: Buffer, read_item: Callable[[Buffer], T]) -> list[T]:
    """Consume a 32-bit count followed by that many items."""
    count = buffer.read_struct("I")
    return [read_item(buffer) for _ in range(count)]


def _read_u32_array(buffer: Buffer) -> list[int]:
    count = buffer.read_struct("I")
    if not count:
        return []
    values = buffer.read_struct(f"{count}I")
    return list(values) if count > 1 else [values]


@dataclass(frozen=True)
class CoreHeader:
    """Type magic and payload size that precede every core object."""

    file_type: int
    file_size: int

    FORMAT: ClassVar[str] = "<QI"
    SIZE: ClassVar[int] = 12

    @classmethod
    def peek(cls, buffer: Buffer) -> CoreHeader:
        """Read a header without consuming it."""
        return cls(*buffer.take(cls.SIZE).read_struct(cls.FORMAT))

    @classmethod
    def _read(cls, buffer: Buffer) -> CoreHeader:
        return cls(*buffer.read_struct(cls.FORMAT))


@dataclass(eq=False)
class CoreObject:
    """Base object: a header followed by the object's GUID."""

    header: CoreHeader = field(default_factory=lambda: CoreHeader(0, 0))
    guid: GUID = field(default_factory=GUID)

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        """Consume the header and GUID."""
        self.header = CoreHeader._read(buffer)
        self.guid = GUID.parse(buffer)


@dataclass(eq=False)
class Dummy(CoreObject):
    """An object of unknown type whose payload is skipped."""

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        super().parse(manager, buffer, file)
        buffer.read(self.header.file_size - GUID.SIZE)


@dataclass(eq=False)
class Collection(CoreObject):
    """A list of references to other objects."""

    refs: list[Ref] = field(default_factory=list)

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        super().parse(manager, buffer, file)
        self.refs = read_array(buffer, lambda item: Ref.parse(item, file))


@dataclass(eq=False)
class Prefetch(CoreObject):
    """The index of every file path, its size and its dependencies."""

    paths: list[str] = field(default_factory=list)
    sizes: list[int] = field(default_factory=list)
    links_total: int = 0
    links: list[list[int]] = field(default_factory=list)

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        super().parse(manager, buffer, file)
        self.paths = read_array(buffer, read_string)
        self.sizes = _read_u32_array(buffer)
        self.links_total = buffer.read_struct("I")
        self.links = [_read_u32_array(buffer) for _ in self.paths]


def _read_short_string(buffer: Buffer, default: str = "<empty>") -> str:
    length = buffer.read_struct("H")
    if length:
        return buffer.read(length).decode("utf-8", errors="replace")
    return default


@dataclass(eq=False)
class Translation(CoreObject):
    """A localised text with one entry per supported language."""

    LANGUAGES: ClassVar[tuple[str, ...]] = (
        "English",
        "French",
        "Spanish",
        "German",
        "Italian",
        "Dutch",
        "Portuguese",
        "Chinese (Traditional)",
        "Korean",
        "Russian",
        "Polish",
        "Danish",
        "Finnish",
        "Norwegian",
        "Swedish",
        "Japanese",
        "Spanish (Latin America)",
        "Portuguese (Brazil)",
        "Turkish",
        "Arabic",
        "Chinese (Simplified)",
        "English (UK)",
        "Greek",
        "Czech",
        "Hungarian",
    )

    translations: list[str] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    flags: list[int] = field(default_factory=list)

    def parse(self, manager: Any, buffer: Buffer, file: Any) -> None:
        super().parse(manager, buffer, file)
        self.translations, self.comments, self.flags = [], [], []
        for _ in self.LANGUAGES:
            self.translations.append(_read_short_string(buffer))
            self.comments.append(_read_short_string(buffer))
            self.flags.append(buffer.read_struct("b"))