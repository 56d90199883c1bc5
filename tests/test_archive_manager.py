import struct

import pytest

from decima.archive import ArchiveHeader, ArchiveType, CipherKeys
from decima.archive_manager import PREFETCH_PATH, ArchiveManager
from decima.compressor import Compressor
from decima.handlers import PREFETCH

KEYS = CipherKeys(
    seed=42,
    plain_key=(0x11111111, 0x22222222, 0x33333333, 0x44444444),
    chunk_key=(0x55555555, 0x66666666, 0x77777777, 0x88888888),
)
COMPRESSOR = Compressor(lambda data, size: data, 0x2E070030)
CHUNK_SIZE = 0x40000
PATHS = ["a/one", "b/two", "c/three"]
LINKS = [[1, 2], [2], []]


def build_archive(files):
    blob = b"".join(content for _, content in files)
    data_offset = ArchiveHeader.SIZE + 32 * len(files) + 32
    entries = b""
    offset = 0
    for number, (file_hash, content) in enumerate(files):
        entries += struct.pack("<IIQQII", number, 0, file_hash, offset, len(content), 0)
        offset += len(content)
    chunk = struct.pack("<QIIQII", 0, len(blob), 0, data_offset, len(blob), 0)
    header = struct.pack(
        "<IIQQQII", ArchiveType.REGULAR, 0, data_offset + len(blob), len(blob),
        len(files), 1, CHUNK_SIZE,
    )
    return header + entries + chunk + blob


def build_prefetch():
    payload = struct.pack("<I", len(PATHS))
    for path in PATHS:
        payload += struct.pack("<I", len(path)) + path.encode()
    payload += struct.pack("<I3I", 3, 1, 2, 3)
    payload += struct.pack("<I", sum(len(links) for links in LINKS))
    for links in LINKS:
        payload += struct.pack(f"<I{len(links)}I", len(links), *links)
    return struct.pack("<QI", PREFETCH, 16 + len(payload)) + bytes(16) + payload


@pytest.fixture
def manager():
    instance = ArchiveManager(KEYS, COMPRESSOR)
    yield instance
    for archive in instance.archives:
        archive.close()


@pytest.fixture
def loaded(manager, tmp_path):
    files = [
        (manager.hash_name(PREFETCH_PATH), build_prefetch()),
        (manager.hash_name("a/one"), b"first file"),
    ]
    path = tmp_path / "data.bin"
    path.write_bytes(build_archive(files))
    manager.load_archive(path)
    return manager


def test_hash_name_sanitizes(manager):
    assert manager.hash_name("a/b") == manager.hash_name("a/b.core")
    assert manager.hash_name("a\\b") == manager.hash_name("a/b")
    assert manager.hash_name("a/b") != manager.hash_name("a/c")


def test_get_file_entry_by_name_and_hash(loaded):
    entry = loaded.get_file_entry("a/one")
    assert entry.span.size == len(b"first file")
    assert loaded.get_file_entry(loaded.hash_name("a/one")) == entry
    assert loaded.get_file_entry("missing/file") is None


def test_load_archive_indexes_files(loaded):
    assert loaded.hash_to_archive_index[loaded.hash_name("a/one")] == 0
    assert len(loaded.hash_to_archive_index) == 2


def test_query_file_returns_cached_contents(loaded):
    core = loaded.query_file("a/one")
    assert core.contents == b"first file"
    assert loaded.query_file(loaded.hash_name("a/one")) is core
    assert loaded.query_file("missing/file") is None


def test_query_file_without_compressor(tmp_path):
    manager = ArchiveManager(KEYS)
    path = tmp_path / "data.bin"
    path.write_bytes(build_archive([(manager.hash_name("x"), b"data")]))
    archive = manager.load_archive(path)
    try:
        assert manager.get_file_entry("x").span.size == 4
        with pytest.raises(RuntimeError):
            manager.query_file("x")
    finally:
        archive.close()


def test_first_archive_wins(manager, tmp_path):
    file_hash = manager.hash_name("shared")
    first = tmp_path / "first.bin"
    second = tmp_path / "second.bin"
    first.write_bytes(build_archive([(file_hash, b"one")]))
    second.write_bytes(build_archive([(file_hash, b"two")]))
    manager.load_archive(first)
    manager.load_archive(second)
    assert manager.hash_to_archive_index[file_hash] == 0
    assert manager.query_file("shared").contents == b"one"


def test_load_prefetch_indexes_paths(loaded):
    loaded.load_prefetch()
    assert loaded.prefetch.paths == PATHS
    for index, path in enumerate(PATHS):
        file_hash = loaded.hash_name(path)
        assert loaded.hash_to_name[file_hash] == path
        assert loaded.hash_to_index[file_hash] == index


def test_references(loaded):
    loaded.load_prefetch()
    one, two, three = (loaded.hash_name(path) for path in PATHS)
    assert loaded.references_of(one) == ["b/two", "c/three"]
    assert loaded.references_of(three) == []
    assert loaded.referenced_by(three) == ["a/one", "b/two"]
    assert loaded.referenced_by(one) == []


def test_references_need_prefetch(loaded):
    with pytest.raises(RuntimeError):
        loaded.references_of(loaded.hash_name("a/one"))


def test_references_of_unknown_hash(loaded):
    loaded.load_prefetch()
    with pytest.raises(KeyError):
        loaded.referenced_by(loaded.hash_name("nowhere"))


def test_load_prefetch_missing(manager, tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(build_archive([(manager.hash_name("x"), b"data")]))
    manager.load_archive(path)
    with pytest.raises(LookupError):
        manager.load_prefetch()