"""Count lines, words and characters."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import IO

_BUFSIZE = 512
# A NUL byte also separates words.
_SEPARATORS = frozenset(" \r\t\n\v\0")


@dataclass(frozen=True)
class Counts:
    lines: int
    words: int
    chars: int


def count(stream: IO) -> Counts:
    """Count the lines, words and characters read from ``stream``."""
    lines = words = chars = 0
    in_word = False
    while True:
        chunk = stream.read(_BUFSIZE)
        if not chunk:
            break
        if isinstance(chunk, (bytes, bytearray)):
            chunk = bytes(chunk).decode("latin-1")
        for ch in chunk:
            chars += 1
            if ch == "\n":
                lines += 1
            if ch in _SEPARATORS:
                in_word = False
            elif not in_word:
                words += 1
                in_word = True
    return Counts(lines, words, chars)


def _report(stream: IO, name: str) -> bool:
    try:
        counts = count(stream)
    except OSError:
        sys.stdout.write("wc: read error\n")
        return False
    sys.stdout.write(f"{counts.lines} {counts.words} {counts.chars} {name}\n")
    return True


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        return 0 if _report(sys.stdin.buffer, "") else 1
    for path in args:
        try:
            stream = open(path, "rb")
        except OSError:
            sys.stdout.write(f"wc: cannot open {path}\n")
            return 1
        with stream:
            if not _report(stream, path):
                return 1
    return 0