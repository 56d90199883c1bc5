"""A folder tree of archive file names with text filtering."""

from __future__ import annotations

import enum
from collections.abc import Container, Mapping
from dataclasses import dataclass, field
from typing import ClassVar

from decima.utils import split


class ExpandMode(enum.Enum):
    """Whether folders should be forced open, forced closed or left alone."""

    NONE = "none"
    SHOW = "show"
    HIDE = "hide"


class TextFilter:
    """Comma-separated, case-insensitive substring filter.

    Terms starting with ``-`` exclude; the first matching term decides. If no
    term matches, text passes only when there are no including terms.
    """

    def __init__(self, pattern: str = "") -> None:
        self.pattern = pattern
        terms = (term.strip(" \t") for term in pattern.split(","))
        self._terms = [term for term in terms if term]

    def is_active(self) -> bool:
        """Whether the filter has any terms."""
        return bool(self._terms)

    def passes(self, text: str) -> bool:
        """Whether ``text`` passes the filter."""
        if not self._terms:
            return True
        text = text.lower()
        includes = False
        for term in self._terms:
            if term.startswith("-"):
                needle = term[1:].lower()
                if needle and needle in text:
                    return False
            else:
                includes = True
                if term.lower() in text:
                    return True
        return not includes


@dataclass
class FileInfo:
    """A file shown in the tree."""

    path: str
    name: str
    hash: int
    visible: bool = field(default=True, compare=False)


@dataclass(eq=False)
class FileTree:
    """A folder holding sub-folders and files, each with a visibility flag."""

    folders: dict[str, FileTree] = field(default_factory=dict)
    files: dict[str, FileInfo] = field(default_factory=dict)
    visible: bool = True

    EXPAND_THRESHOLD: ClassVar[int] = 512

    def add_folder(self, name: str) -> FileTree:
        """Return the sub-folder ``name``, creating it if needed."""
        return self.folders.setdefault(name, FileTree())

    def add_file(self, path: str, name: str, file_hash: int) -> FileInfo:
        """Add a file unless one of that name exists; return the stored file."""
        return self.files.setdefault(name, FileInfo(path=path, name=name, hash=file_hash))

    def _match(self, text_filter: TextFilter) -> bool:
        result = False
        for name, info in self.files.items():
            if text_filter.passes(name):
                info.visible = True
                result = True
        for folder in self.folders.values():
            if folder._match(text_filter):
                folder.visible = True
                result = True
        return result

    def apply_filter(self, text_filter: TextFilter) -> ExpandMode:
        """Show only matching files and the folders leading to them."""
        if text_filter.is_active():
            self.reset_filter(False)
            self._match(text_filter)
        else:
            self.reset_filter(True)
        return ExpandMode.SHOW if self.size() < self.EXPAND_THRESHOLD else ExpandMode.HIDE

    def reset_filter(self, visibility: bool) -> None:
        """Set the visibility of everything below this folder."""
        for folder in self.folders.values():
            folder.reset_filter(visibility)
            folder.visible = visibility
        for info in self.files.values():
            info.visible = visibility

    def size(self) -> int:
        """Count the visible files in this folder and below."""
        own = sum(1 for info in self.files.values() if info.visible)
        return own + sum(folder.size() for folder in self.folders.values())


def build_file_tree(hash_to_name: Mapping[int, str], available: Container[int]) -> FileTree:
    """Build a tree from known paths, adding only files present in ``available``."""
    root = FileTree()
    for file_hash, path in hash_to_name.items():
        *folders, name = split(path, "/")
        current = root
        for folder in folders:
            current = current.add_folder(folder)
        if file_hash in available:
            current.add_file(path, name, file_hash)
    return root