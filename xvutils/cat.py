"""Concatenate files to standard output."""

from __future__ import annotations

import sys
from typing import IO

_BUFSIZE = 512


def cat(stream: IO[bytes], out: IO[bytes]) -> None:
    """Copy all of ``stream`` to ``out``.

    Raises OSError with a message naming whether reading or writing failed.
    """
    while True:
        try:
            chunk = stream.read(_BUFSIZE)
        except OSError as exc:
            raise OSError("cat: read error") from exc
        if not chunk:
            return
        try:
            written = out.write(chunk)
        except OSError as exc:
            raise OSError("cat: write error") from exc
        if written is not None and written != len(chunk):
            raise OSError("cat: write error")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    out = sys.stdout.buffer
    try:
        if not args:
            cat(sys.stdin.buffer, out)
            return 0
        for path in args:
            try:
                stream = open(path, "rb")
            except OSError:
                sys.stderr.write(f"cat: cannot open {path}\n")
                return 1
            with stream:
                cat(stream, out)
    except OSError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    finally:
        out.flush()
    return 0