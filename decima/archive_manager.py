"""Lookup of files across a set of loaded archives."""

from __future__ import annotations

from os import PathLike

from decima.archive import Archive, ArchiveFileEntry, CipherKeys, CoreFile, unpack
from decima.compressor import Compressor
from decima.objects import Prefetch
from decima.utils import hash_string, sanitize_name

PREFETCH_PATH = "prefetch/fullgame.prefetch"


class ArchiveManager:
    """Indexes archives by file hash and hands out parsed core files."""

    def __init__(self, keys: CipherKeys, compressor: Compressor | None = None) -> None:
        self.keys = keys
        self.compressor = compressor
        self.archives: list[Archive] = []
        self.hash_to_archive_index: dict[int, int] = {}
        self.hash_to_name: dict[int, str] = {}
        self.hash_to_index: dict[int, int] = {}
        self.prefetch: Prefetch | None = None

    def hash_name(self, name: str) -> int:
        """Return the hash under which the file called ``name`` is stored."""
        return hash_string(sanitize_name(name), self.keys.seed)

    def _hash(self, key: int | str) -> int:
        return key if isinstance(key, int) else self.hash_name(key)

    def load_archive(self, path: str | PathLike[str]) -> Archive:
        """Open an archive and index its files; earlier archives take precedence."""
        archive = Archive(path, self.keys)
        self.archives.append(archive)
        index = len(self.archives) - 1
        for entry in archive.file_entries:
            self.hash_to_archive_index.setdefault(entry.hash, index)
        return archive

    def load_prefetch(self) -> None:
        """Parse the prefetch file and index every path it names."""
        prefetch_file = self.query_file(PREFETCH_PATH)
        if prefetch_file is None:
            raise LookupError(f"'{PREFETCH_PATH}' not found in loaded archives")
        prefetch_file.parse()
        if not prefetch_file.objects or not isinstance(prefetch_file.objects[0][0], Prefetch):
            raise TypeError(f"'{PREFETCH_PATH}' does not start with a prefetch object")
        self.prefetch = prefetch_file.objects[0][0]

        for index, path in enumerate(self.prefetch.paths):
            file_hash = self.hash_name(path)
            self.hash_to_name.setdefault(file_hash, path)
            self.hash_to_index.setdefault(file_hash, index)

    def get_file_entry(self, key: int | str) -> ArchiveFileEntry | None:
        """Return the table entry for a file given by hash or name."""
        file_hash = self._hash(key)
        archive_index = self.hash_to_archive_index.get(file_hash)
        if archive_index is None:
            return None
        return self.archives[archive_index].find_entry(file_hash)

    def query_file(self, key: int | str) -> CoreFile | None:
        """Return the (cached) core file for a hash or name, or ``None``."""
        file_hash = self._hash(key)
        archive_index = self.hash_to_archive_index.get(file_hash)
        if archive_index is None:
            return None
        archive = self.archives[archive_index]
        entry = archive.find_entry(file_hash)
        if entry is None:
            return None
        core_file = archive.cache.get(file_hash)
        if core_file is None:
            if self.compressor is None:
                raise RuntimeError("no compressor has been set")
            contents = unpack(self.compressor, archive, entry)
            core_file = CoreFile(archive, self, entry, contents)
            archive.cache[file_hash] = core_file
        return core_file

    def _prefetch_index(self, file_hash: int) -> int:
        if self.prefetch is None:
            raise RuntimeError("prefetch has not been loaded")
        return self.hash_to_index[file_hash]

    def references_of(self, file_hash: int) -> list[str]:
        """Return the paths of the files that the given file references."""
        index = self._prefetch_index(file_hash)
        return [self.prefetch.paths[link] for link in self.prefetch.links[index]]

    def referenced_by(self, file_hash: int) -> list[str]:
        """Return the paths of the files that reference the given file."""
        index = self._prefetch_index(file_hash)
        return [
            self.prefetch.paths[link_index]
            for link_index, links in enumerate(self.prefetch.links)
            for link in links
            if link == index
        ]