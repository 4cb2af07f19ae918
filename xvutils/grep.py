"""A simple grep supporting only the ^ . * $ operators."""

from __future__ import annotations

import sys
from typing import IO

_BUFSIZE = 1024
_LINE_LIMIT = _BUFSIZE - 1


def match(pattern: str, text: str) -> bool:
    """Return whether ``pattern`` matches anywhere in ``text``."""
    if pattern.startswith("^"):
        return _match_here(pattern[1:], text)
    return any(_match_here(pattern, text[start:]) for start in range(len(text) + 1))


def _match_here(pattern: str, text: str) -> bool:
    if not pattern:
        return True
    if len(pattern) > 1 and pattern[1] == "*":
        return _match_star(pattern[0], pattern[2:], text)
    if pattern == "$":
        return not text
    if text and pattern[0] in (".", text[0]):
        return _match_here(pattern[1:], text[1:])
    return False


def _match_star(c: str, pattern: str, text: str) -> bool:
    while True:
        if _match_here(pattern, text):
            return True
        if not text or not (text[0] == c or c == "."):
            return False
        text = text[1:]


def grep(pattern: str, stream: IO[str], out: IO[str]) -> None:
    """Copy each complete line of ``stream`` that matches ``pattern`` to ``out``.

    A final line without a newline is ignored, and a line too long for
    the read buffer ends the search.
    """
    for line in stream:
        if not line.endswith("\n") or len(line) > _LINE_LIMIT:
            break
        if match(pattern, line[:-1]):
            out.write(line)


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern, files = args[0], args[1:]
    if not files:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for path in files:
        try:
            stream = open(path, encoding="utf-8", errors="surrogateescape", newline="")
        except OSError:
            sys.stdout.write(f"grep: cannot open {path}\n")
            return 1
        with stream:
            grep(pattern, stream, sys.stdout)
    return 0