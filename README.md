# decima

Tools for reading the packed `.bin` archives used by games built on the
Decima engine. The package parses archive headers, decrypts file and chunk
tables, unpacks compressed files and decodes the core objects stored in
them: translations, textures, texture sets, collections, prefetch tables
and mesh resources.

It uses only the Python standard library. Decompression is handed to a
callable that you supply, so the package works with whichever
decompressor you have.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Command line

The `decima` command searches a game folder for `.bin` archives and
either lists or exports files. It has two subcommands, `list` and
`export`, and both take:

- `folder`: the game folder, searched recursively for `.bin` files;
- `--seed` (required): the hash seed used for file names and decryption;
- `--plain-key` and `--chunk-key`: four comma-separated 32-bit words each,
  the keys of the archive tables and of the chunk data (default all zero);
- `--decompressor`: a command that reads compressed data on stdin, takes
  the decompressed size as its last argument and writes the decompressed
  data to stdout;
- `--compressor-version`: the packed version number to report for that
  decompressor. Versions below 2.7.0 are rejected.

```
decima list GAME_DIR --seed 42 --filter textures,-ui
decima export GAME_DIR --seed 42 --decompressor "my-decompressor" \
    --name prefetch/fullgame.prefetch --output out/
```

`list` prints file paths taken from the prefetch table when a
decompressor is given. Without one the prefetch table cannot be read, and
`list` prints the hex hashes of the files found in the archives instead.
`--filter` takes comma-separated, case-insensitive terms. A term starting
with `-` excludes the paths that contain it.

`export` needs `--decompressor` and `--output`. Files are chosen with
`--name` or `--hash`, and each option may be repeated. Every file is
written below the output folder under its normalised name. The command
exits with status 1 and prints `error: ...` to stderr when it fails.

## Library use

### Hashing and names

Files in archives are identified by a 64-bit MurmurHash3 of the
normalised name:

```python
from decima.utils import hash_string, sanitize_name, uint64_to_hex

name = sanitize_name("prefetch\\fullgame.prefetch")  # "prefetch/fullgame.prefetch.core"
print(uint64_to_hex(hash_string(name, 42)))
```

`sanitize_name` turns backslashes into forward slashes. It appends
`.core` unless the name already ends in `.core` or `.stream`.
`murmurhash3_x64_128` returns the full 16-byte digest.

### Reading binary data

`decima.buffer.Buffer` is a bounds-checked cursor over bytes. Reading past
the end raises `BufferRangeError`. `read_struct` is little-endian unless
the format says otherwise. It returns a single value for one field and a
tuple for several:

```python
from decima.buffer import Buffer

buf = Buffer(b"\x01\x00\x00\x00rest")
count = buf.read_struct("I")
print(count, buf.tobytes())  # 1 b'rest'
```

### Opening archives

An `ArchiveManager` takes a `decima.archive.CipherKeys` (seed, table key
and chunk key) and a `decima.compressor.Compressor`. The compressor wraps
a `decompress(data, size) -> bytes` callable and the version number of
the library:

```python
from decima.archive import CipherKeys
from decima.archive_manager import ArchiveManager
from decima.compressor import Compressor

keys = CipherKeys(seed=42, plain_key=(0, 0, 0, 0), chunk_key=(0, 0, 0, 0))
manager = ArchiveManager(keys, Compressor(my_decompress, my_version))

manager.load_archive("data/example.bin")
manager.load_prefetch()

entry = manager.get_file_entry("prefetch/fullgame.prefetch")
core_file = manager.query_file("prefetch/fullgame.prefetch")
core_file.parse()
for obj, offset in core_file.objects:
    print(offset, type(obj).__name__, obj.guid)
```

`get_file_entry` and `query_file` accept either a name or a hash, and
return `None` for unknown files. After `load_prefetch`, `references_of`
and `referenced_by` return the paths linked to a given file hash in the
prefetch table. `Archive` can also be used on its own, as a context
manager, with `find_entry` to look up entries by hash.

### Object types

`decima.handlers.get_type_handler` returns a fresh object for a type
magic. Unknown types get a `Dummy`, which skips the object's data.
`get_type_name` returns a readable name for a magic.

### Browsing the file tree

```python
from decima.file_tree import TextFilter, build_file_tree

tree = build_file_tree(manager.hash_to_name, manager.hash_to_archive_index)
mode = tree.apply_filter(TextFilter("textures"))
print(tree.size(), mode)
```

### Textures

A parsed `decima.texture.Texture` exposes its mip levels as raw `MipLevel`
data. `write_tga` writes top-down RGBA8 pixels as an uncompressed 32-bit
TGA image.

## What the package does not do

- It has no graphical browser or previewer. Browsing is limited to
  `FileTree`, the `list` command and the parsed objects.
- It does not include a decompressor. When a compressor library is found
  in the game folder, the command only reports it. Decompression always
  goes through the callable, or the `--decompressor` command, that you
  provide.
- It does not decode block-compressed texture data into pixels, so
  `write_tga` needs RGBA8 data that you already have.