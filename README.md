# xvutils

A small collection of classic Unix-style command-line tools, together with
the building blocks of a tiny teaching operating system. Everything is
plain Python with no third-party dependencies.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command-line tools

| Command    | What it does                                                     |
|------------|------------------------------------------------------------------|
| `xvcat`    | Copy files (or standard input) to standard output                |
| `xvecho`   | Print its arguments separated by spaces                          |
| `xvgrep`   | Print lines matching a pattern (`^`, `$`, `.` and `*` only)      |
| `xvwc`     | Print line, word and character counts                            |
| `xvls`     | List files with type, inode number and size                      |
| `xvmkfs`   | Build a file-system image: `xvmkfs fs.img file...`               |

Examples:

```
xvecho hello world
xvgrep '^ab*c$' notes.txt
xvwc notes.txt
xvcat a.txt b.txt
xvls .
xvmkfs fs.img README _cat _echo
```

`xvgrep`, `xvcat` and `xvwc` read standard input when no file is given.
With no argument `xvls` lists the current directory. `xvmkfs` strips a
leading `user/` directory and a leading `_` from each file name before
placing the file in the image's root directory.

## Library use

The same pieces are available as modules.

- `xvutils.grep.match(pattern, text)` – the small regular-expression
  matcher behind `xvgrep`; `grep(pattern, stream, out)` filters a stream.
- `xvutils.wc.count(stream)` – returns a `Counts` with lines, words and
  characters.
- `xvutils.cat.cat(stream, out)` and `xvutils.echo.echo(words, out)`.
- `xvutils.ls.fmtname(path)` and `ls(path, out)`, with the `FileType` enum.
- `xvutils.fmt.render(fmt, *args)` – the minimal formatter understanding
  `%d`, `%l`, `%x`, `%p`, `%s`, `%c` and `%%`; `printf` and `fprintf`
  write the result.
- `xvutils.ulib` – `atoi`, `strcmp`, `memcmp`, `gets` and the `RtcDate`
  record.
- `xvutils.umalloc.Heap` – a first-fit free-list allocator over a fixed
  capacity; `malloc`, `free` and `free_units`, raising `OutOfMemory`
  when it cannot grow.
- `xvutils.sh.parse(line)` – parses a shell command line into a tree of
  `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`, raising
  `ParseError` on bad syntax; `tokenize(line)` exposes the tokens.
- `xvutils.prng.ParkMiller` – the Park–Miller "minimal standard"
  pseudo-random generator, iterable.
- `xvutils.virtio` – register offsets, status and descriptor flags, and
  the packed ring structures (`VirtqDesc`, `VirtqAvail`, `VirtqUsed`,
  `BlkRequest`) with `pack` and `unpack`.
- `xvutils.vm` – a three-level Sv39 page-table model over simulated
  `PhysicalMemory`, with mapping, growing, shrinking, copying and
  user/kernel copy operations; invariant violations raise `Panic`.
- `xvutils.mkfs` – `ImageBuilder` and `build_image` lay out a disk image
  (boot block, superblock, log, inodes, bitmap, data) according to an
  `FsLayout`.

```python
from xvutils.grep import match
from xvutils.sh import parse

match("^hel*o", "hello")       # True
tree = parse("cat < in | wc > out")
```

## What it does not do

- There are no commands for creating links, making or removing
  directories and files, or killing processes.
- The shell module only parses command lines; it does not run them.