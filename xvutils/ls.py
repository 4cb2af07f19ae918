"""List files and directory contents."""

from __future__ import annotations

import enum
import os
import stat
import sys
from typing import IO

from xvutils.fmt import render

DIRSIZ = 14
_BUFSIZE = 512


class FileType(enum.IntEnum):
    DIR = 1
    FILE = 2
    DEVICE = 3
    SYMLINK = 4


def _file_type(mode: int) -> FileType:
    if stat.S_ISDIR(mode):
        return FileType.DIR
    if stat.S_ISREG(mode):
        return FileType.FILE
    if stat.S_ISLNK(mode):
        return FileType.SYMLINK
    return FileType.DEVICE


def fmtname(path: str) -> str:
    """Return the last path component, blank-padded to ``DIRSIZ`` when shorter."""
    name = path.rsplit("/", 1)[-1]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def ls(path: str, out: IO[str]) -> None:
    """Describe ``path``, or every entry in it when it is a directory."""
    try:
        st = os.stat(path)
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return
    kind = _file_type(st.st_mode)
    if kind is FileType.FILE:
        out.write(render("%s %d %d %l\n", fmtname(path), kind, st.st_ino, st.st_size))
    elif kind is FileType.DIR:
        if len(os.fsencode(path)) + 1 + DIRSIZ + 1 > _BUFSIZE:
            out.write("ls: path too long\n")
            return
        try:
            names = os.listdir(path)
        except OSError:
            sys.stderr.write(f"ls: cannot open {path}\n")
            return
        for name in [".", "..", *names]:
            entry = f"{path}/{name[:DIRSIZ]}"
            try:
                est = os.stat(entry)
            except OSError:
                out.write(f"ls: cannot stat {entry}\n")
                continue
            out.write(
                render(
                    "%s %d %d %d\n",
                    fmtname(entry),
                    _file_type(est.st_mode),
                    est.st_ino,
                    est.st_size,
                )
            )


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    for path in args or ["."]:
        ls(path, sys.stdout)
    return 0