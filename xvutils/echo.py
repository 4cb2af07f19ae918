"""Print arguments separated by spaces."""

from __future__ import annotations

import sys
from typing import IO, Iterable


def echo(words: Iterable[str], out: IO[str]) -> None:
    """Write ``words`` joined by spaces and a newline; nothing at all if empty."""
    words = list(words)
    if words:
        out.write(" ".join(words) + "\n")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    echo(args, sys.stdout)
    return 0