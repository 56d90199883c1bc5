"""Command-line front end: list and export files from a game folder."""

from __future__ import annotations

import argparse
import shlex
import subprocess
import sys
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Callable, Iterable, Sequence

from decima.archive import ArchiveError, CipherKeys
from decima.archive_manager import ArchiveManager
from decima.compressor import MINIMUM_VERSION, Compressor
from decima.file_tree import TextFilter
from decima.utils import sanitize_name, uint64_to_hex


@dataclass
class GameFiles:
    """Archives and compressor library found in a game folder."""

    archives: list[Path] = field(default_factory=list)
    compressor: Path | None = None


def _log(*parts: object) -> None:
    print("".join(str(part) for part in parts), file=sys.stderr)


def find_game_files(folder: str | PathLike[str]) -> GameFiles:
    """Walk ``folder`` for ``.bin`` archives and the first ``oo2core*.dll``."""
    root = Path(folder)
    if not root.is_dir():
        raise NotADirectoryError(f"'{root}' is not a directory")
    found = GameFiles()
    for path in sorted(p for p in root.rglob("*") if p.is_file()):
        if path.suffix == ".dll" and path.name.startswith("oo2core") and found.compressor is None:
            found.compressor = path
        if path.suffix == ".bin":
            found.archives.append(path)
    return found


def export_files(manager: ArchiveManager, hashes: Iterable[int],
                 destination: str | PathLike[str]) -> list[Path]:
    """Write the files with the given hashes below ``destination``; return their paths."""
    base = Path(destination)
    written = []
    for file_hash in sorted(set(hashes)):
        try:
            name = manager.hash_to_name[file_hash]
        except KeyError:
            raise KeyError(f"no known name for file {uint64_to_hex(file_hash)}") from None
        filename = sanitize_name(name)
        core_file = manager.query_file(filename)
        if core_file is None:
            raise LookupError(f"file '{filename}' is not in any loaded archive")
        target = base / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(core_file.contents)
        written.append(target)
    return written


def _command_decompressor(command: str) -> Callable[[bytes, int], bytes]:
    args = shlex.split(command)
    if not args:
        raise ValueError("decompressor command is empty")

    def decompress(data: bytes, size: int) -> bytes:
        completed = subprocess.run(
            [*args, str(size)], input=data, capture_output=True, check=True
        )
        return completed.stdout

    return decompress


def _parse_int(text: str) -> int:
    return int(text, 0)


def _parse_hash(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError:
        return int(text, 16)


def _parse_words(text: str) -> tuple[int, int, int, int]:
    try:
        words = tuple(int(part, 0) & 0xFFFFFFFF for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid key words: '{text}'") from None
    if len(words) != 4:
        raise argparse.ArgumentTypeError("a key must consist of four comma-separated words")
    return words


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("folder", help="game folder to search for archives")
    common.add_argument("--seed", type=_parse_int, required=True,
                        help="hash seed used for file names and decryption")
    common.add_argument("--plain-key", type=_parse_words, default=(0, 0, 0, 0),
                        help="four comma-separated words of the table key")
    common.add_argument("--chunk-key", type=_parse_words, default=(0, 0, 0, 0),
                        help="four comma-separated words of the chunk key")
    common.add_argument("--decompressor",
                        help="command that reads compressed data on stdin, takes the "
                             "decompressed size as last argument and writes the result")
    common.add_argument("--compressor-version", type=_parse_int, default=MINIMUM_VERSION,
                        help="packed version number of the decompressor")

    parser = argparse.ArgumentParser(prog="decima", description="Browse and export archive files.")
    commands = parser.add_subparsers(dest="command", required=True)

    list_parser = commands.add_parser("list", parents=[common], help="list files")
    list_parser.add_argument("--filter", default="", help="comma-separated filter terms")
    list_parser.set_defaults(handler=_list_command)

    export_parser = commands.add_parser("export", parents=[common], help="export files")
    export_parser.add_argument("--name", action="append", default=[], help="file to export by name")
    export_parser.add_argument("--hash", action="append", default=[], type=_parse_hash,
                               help="file to export by hash")
    export_parser.add_argument("--output", required=True, help="destination folder")
    export_parser.set_defaults(handler=_export_command)
    return parser


def _list_command(manager: ArchiveManager, args: argparse.Namespace) -> int:
    text_filter = TextFilter(args.filter)
    if manager.hash_to_name:
        lines = sorted(
            path for file_hash, path in manager.hash_to_name.items()
            if file_hash in manager.hash_to_archive_index
        )
    else:
        lines = [uint64_to_hex(file_hash) for file_hash in sorted(manager.hash_to_archive_index)]
    for line in lines:
        if text_filter.passes(line):
            print(line)
    return 0


def _export_command(manager: ArchiveManager, args: argparse.Namespace) -> int:
    if manager.compressor is None:
        raise RuntimeError("exporting requires a decompressor command")
    wanted = [(name, manager.hash_name(name)) for name in args.name]
    wanted += [(uint64_to_hex(file_hash), file_hash) for file_hash in args.hash]
    selected = []
    for label, file_hash in wanted:
        if manager.get_file_entry(file_hash) is None:
            _log("File '", label, "' not found")
            continue
        selected.append(file_hash)
    if not selected:
        raise LookupError("nothing to export")
    for path in export_files(manager, selected, args.output):
        print(f"File was exported to: {path}")
    return 0


def _run(args: argparse.Namespace) -> int:
    game = find_game_files(args.folder)
    if not game.archives:
        raise LookupError(f"no archives found in '{args.folder}'")

    compressor = None
    if args.decompressor:
        compressor = Compressor(_command_decompressor(args.decompressor), args.compressor_version)
        _log("Using decompressor '", args.decompressor, "' (version ",
             compressor.version_string(), ")")
        if not compressor.supported:
            raise ValueError("Compressor library version must be at least 2.7.0 "
                             "(oo2core_7_win64) or greater")
    elif game.compressor is not None:
        _log("Found compressor library '", game.compressor.name,
             "', but no decompressor command was given")
    else:
        _log("Could not find compressor library")

    keys = CipherKeys(args.seed, args.plain_key, args.chunk_key)
    manager = ArchiveManager(keys, compressor)
    try:
        for path in game.archives:
            _log("Loading archive '", path.stem, "'")
            manager.load_archive(path)
        if compressor is not None:
            manager.load_prefetch()
        return args.handler(manager, args)
    finally:
        for archive in manager.archives:
            archive.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    args = _build_parser().parse_args(argv)
    try:
        return _run(args)
    except (ArchiveError, LookupError, OSError, RuntimeError, TypeError, ValueError,
            subprocess.CalledProcessError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())