"""Packed archives, their encryption and the core files stored inside them."""

from __future__ import annotations

import enum
import hashlib
import struct
from dataclasses import dataclass
from os import PathLike
from typing import Any, ClassVar

from decima.buffer import Buffer
from decima.compressor import Compressor
from decima.handlers import get_type_handler
from decima.objects import CoreHeader, CoreObject
from decima.reference import Ref, RefLoadMode
from decima.utils import murmurhash3_x64_128

_MASK32 = 0xFFFFFFFF
_BLOCK_SIZE = 32
_HEADER_PREFIX = struct.Struct("<II")
_HEADER_BODY = struct.Struct("<QQQII")
_FILE_ENTRY = struct.Struct("<IIQQII")
_CHUNK_ENTRY = struct.Struct("<QIIQII")
_SPAN = struct.Struct("<QII")
_KEY_WORDS = struct.Struct("<4I")


class ArchiveError(ValueError):
    """Raised when an archive is malformed or truncated."""


@dataclass(frozen=True)
class CipherKeys:
    """Seed and key words used to decrypt archive tables and chunks."""

    seed: int
    plain_key: tuple[int, int, int, int]
    chunk_key: tuple[int, int, int, int]

    def __post_init__(self) -> None:
        if len(self.plain_key) != 4 or len(self.chunk_key) != 4:
            raise ValueError("cipher keys must consist of four 32-bit words")


def _xor(data: bytes, stream: bytes) -> bytes:
    length = len(data)
    value = int.from_bytes(data, "little") ^ int.from_bytes(stream[:length], "little")
    return value.to_bytes(length, "little")


def decrypt_block(keys: CipherKeys, key_1: int, key_2: int, data: bytes) -> bytes:
    """Decrypt (or encrypt, the operation is its own inverse) a 32-byte record."""
    data = bytes(data)
    if len(data) != _BLOCK_SIZE:
        raise ValueError(f"block must be {_BLOCK_SIZE} bytes, got {len(data)}")
    _, *rest = keys.plain_key
    first = _KEY_WORDS.pack(key_1 & _MASK32, *rest)
    second = _KEY_WORDS.pack(key_2 & _MASK32, *rest)
    iv = murmurhash3_x64_128(first, keys.seed) + murmurhash3_x64_128(second, keys.seed)
    return _xor(data, iv)


def decrypt_chunk(keys: CipherKeys, data: bytes, chunk_entry: ArchiveChunkEntry) -> bytes:
    """Decrypt (or encrypt) the compressed data of one chunk."""
    span = chunk_entry.decompressed_span
    seed_bytes = _SPAN.pack(span.offset, span.size, span.key)
    iv = _KEY_WORDS.unpack(murmurhash3_x64_128(seed_bytes, keys.seed))
    mixed = _KEY_WORDS.pack(*(word ^ key for word, key in zip(iv, keys.chunk_key)))
    digest = hashlib.md5(mixed).digest()
    data = bytes(data)
    stream = digest * (len(data) // len(digest) + 1)
    return _xor(data, stream)


class ArchiveType(enum.IntEnum):
    """Magic values that identify plain and encrypted archives."""

    REGULAR = 0x20304050
    ENCRYPTED = 0x21304050


@dataclass(frozen=True)
class ArchiveHeader:
    """The fixed-size header at the start of every archive."""

    type: ArchiveType
    key: int
    file_size: int
    data_size: int
    file_entries_count: int
    chunk_entries_count: int
    chunk_maximum_size: int

    SIZE: ClassVar[int] = 40

    @property
    def encrypted(self) -> bool:
        """Whether tables and chunks of the archive are encrypted."""
        return self.type == ArchiveType.ENCRYPTED


@dataclass(frozen=True)
class ArchiveSpan:
    """An offset, a size and the key that protects the span."""

    offset: int
    size: int
    key: int


@dataclass(frozen=True)
class ArchiveFileEntry:
    """Location of one file within the decompressed archive data."""

    index: int
    key: int
    hash: int
    span: ArchiveSpan

    @classmethod
    def _decode(cls, raw: bytes, keys: CipherKeys | None) -> ArchiveFileEntry:
        index, key, file_hash, offset, size, span_key = _FILE_ENTRY.unpack(raw)
        if keys is not None:
            index, _, file_hash, offset, size, _ = _FILE_ENTRY.unpack(
                decrypt_block(keys, key, span_key, raw)
            )
        return cls(index, key, file_hash, ArchiveSpan(offset, size, span_key))


@dataclass(frozen=True)
class ArchiveChunkEntry:
    """Where a chunk lives decompressed and where its compressed bytes are."""

    decompressed_span: ArchiveSpan
    compressed_span: ArchiveSpan

    @classmethod
    def _decode(cls, raw: bytes, keys: CipherKeys | None) -> ArchiveChunkEntry:
        d_offset, d_size, d_key, c_offset, c_size, c_key = _CHUNK_ENTRY.unpack(raw)
        if keys is not None:
            d_offset, d_size, _, c_offset, c_size, _ = _CHUNK_ENTRY.unpack(
                decrypt_block(keys, d_key, c_key, raw)
            )
        return cls(ArchiveSpan(d_offset, d_size, d_key), ArchiveSpan(c_offset, c_size, c_key))


def _records(data: bytes, size: int) -> list[bytes]:
    return [data[start:start + size] for start in range(0, len(data), size)]


class Archive:
    """An open archive file with its decoded tables."""

    def __init__(self, path: str | PathLike[str], keys: CipherKeys) -> None:
        self.path = str(path)
        self.keys = keys
        self.header: ArchiveHeader | None = None
        self.file_entries: list[ArchiveFileEntry] = []
        self.chunk_entries: list[ArchiveChunkEntry] = []
        self.cache: dict[int, CoreFile] = {}
        self._hash_to_index: dict[int, int] = {}
        self._file = open(self.path, "rb")
        try:
            self.open()
        except BaseException:
            self._file.close()
            raise

    def __repr__(self) -> str:
        return f"Archive({self.path!r})"

    def _read_exact(self, size: int) -> bytes:
        data = self._file.read(size)
        if len(data) != size:
            raise ArchiveError(f"'{self.path}' is truncated")
        return data

    def _read_at(self, offset: int, size: int) -> bytes:
        self._file.seek(offset)
        return self._read_exact(size)

    def open(self) -> None:
        """Read and decode the header, file table and chunk table."""
        raw = self._read_at(0, ArchiveHeader.SIZE)
        type_value, key = _HEADER_PREFIX.unpack_from(raw)
        try:
            archive_type = ArchiveType(type_value)
        except ValueError:
            raise ArchiveError(
                f"'{self.path}' has unknown archive type {type_value:#x}"
            ) from None

        body = raw[_HEADER_PREFIX.size:]
        if archive_type == ArchiveType.ENCRYPTED:
            body = decrypt_block(self.keys, key, key + 1, body)
        self.header = ArchiveHeader(archive_type, key, *_HEADER_BODY.unpack(body))

        keys = self.keys if self.header.encrypted else None
        file_table = self._read_exact(_FILE_ENTRY.size * self.header.file_entries_count)
        chunk_table = self._read_exact(_CHUNK_ENTRY.size * self.header.chunk_entries_count)
        self.file_entries = [
            ArchiveFileEntry._decode(record, keys)
            for record in _records(file_table, _FILE_ENTRY.size)
        ]
        self.chunk_entries = [
            ArchiveChunkEntry._decode(record, keys)
            for record in _records(chunk_table, _CHUNK_ENTRY.size)
        ]

        self._hash_to_index = {}
        for index, entry in enumerate(self.file_entries):
            self._hash_to_index.setdefault(entry.hash, index)

    def close(self) -> None:
        """Close the underlying file."""
        self._file.close()

    def __enter__(self) -> Archive:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def find_entry(self, file_hash: int) -> ArchiveFileEntry | None:
        """Return the entry of the file with ``file_hash``, if present."""
        index = self._hash_to_index.get(file_hash)
        return None if index is None else self.file_entries[index]


def _chunk_index(archive: Archive, offset: int) -> int:
    for index, chunk in enumerate(archive.chunk_entries):
        if chunk.decompressed_span.offset == offset:
            return index
    raise ArchiveError(f"no chunk starts at offset {offset:#x} in '{archive.path}'")


def unpack(compressor: Compressor, archive: Archive, entry: ArchiveFileEntry) -> bytes:
    """Read, decrypt and decompress the chunks holding ``entry`` and return its bytes."""
    chunk_size = archive.header.chunk_maximum_size
    mask = ~(chunk_size - 1)
    first = _chunk_index(archive, entry.span.offset & mask)
    last = _chunk_index(archive, (entry.span.offset + entry.span.size) & mask)
    chunks = archive.chunk_entries[first:last + 1]
    if not chunks:
        raise ArchiveError(f"chunk table of '{archive.path}' is out of order")

    archive._file.seek(chunks[0].compressed_span.offset)
    compressed = bytearray()
    total = 0
    for chunk in chunks:
        data = archive._read_exact(chunk.compressed_span.size)
        if archive.header.encrypted:
            data = decrypt_chunk(archive.keys, data, chunk)
        compressed += data
        total += chunk.decompressed_span.size

    result = compressor.decompress(bytes(compressed), total)
    start = entry.span.offset & (chunk_size - 1)
    return result[start:start + entry.span.size]


class CoreFile:
    """The decompressed contents of one file and the objects parsed from it."""

    def __init__(self, archive: Archive | None, manager: Any,
                 entry: ArchiveFileEntry | None, contents: bytes) -> None:
        self.archive = archive
        self.manager = manager
        self.entry = entry
        self.contents = bytes(contents)
        self.objects: list[tuple[CoreObject, int]] = []
        self.references: list[Ref] = []

    def parse(self) -> None:
        """Parse every object once, then resolve pending references."""
        if not self.objects:
            buffer = Buffer(self.contents)
            while len(buffer):
                header = CoreHeader.peek(buffer)
                offset = len(self.contents) - len(buffer)
                obj = get_type_handler(header.file_type)
                # Registered before parsing so references can find their owner.
                self.objects.append((obj, offset))
                obj.parse(self.manager, buffer, self)
        self.resolve_references()

    def queue_reference(self, ref: Ref) -> None:
        """Register ``ref`` for resolution here or in the file it points to."""
        if ref.mode in (RefLoadMode.NOT_PRESENT, RefLoadMode.WORK_ONLY):
            return
        if ref.mode in (RefLoadMode.IMMEDIATE_CORE_FILE, RefLoadMode.CORE_FILE):
            target = self.manager.query_file(ref.file)
            if target is None:
                raise LookupError(f"referenced file '{ref.file}' not found")
            target.references.append(ref)
            target.parse()
        else:
            self.references.append(ref)

    def resolve_references(self) -> None:
        """Point pending references at the objects of this file with their GUID."""
        by_guid: dict[Any, CoreObject] = {}
        for obj, _ in self.objects:
            by_guid.setdefault(obj.guid, obj)
        pending = []
        for ref in self.references:
            target = by_guid.get(ref.guid)
            if target is None:
                pending.append(ref)
            else:
                ref.object = target
        self.references = pending