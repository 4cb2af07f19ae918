"""Small string, memory and input helpers used by the command-line tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import IO, AnyStr

_DIGITS = "0123456789"


@dataclass(frozen=True)
class RtcDate:
    """A wall-clock date as reported by a real-time clock."""

    second: int
    minute: int
    hour: int
    day: int
    month: int
    year: int


def atoi(s: str) -> int:
    """Return the value of the leading decimal digits of ``s``; no sign, no blanks."""
    digits = []
    for ch in s:
        if ch not in _DIGITS:
            break
        digits.append(ch)
    return int("".join(digits)) if digits else 0


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode() if isinstance(value, str) else bytes(value)


def _terminated(value: str | bytes) -> bytes:
    return _as_bytes(value).split(b"\0", 1)[0] + b"\0"


def strcmp(p: str | bytes, q: str | bytes) -> int:
    """Compare two NUL-terminated strings as unsigned bytes.

    Returns zero when equal, otherwise the difference of the first
    differing bytes.
    """
    for x, y in zip(_terminated(p), _terminated(q)):
        if x != y or x == 0:
            return x - y
    return 0


def memcmp(a: bytes, b: bytes, n: int) -> int:
    """Compare the first ``n`` bytes of ``a`` and ``b`` as unsigned bytes."""
    if n < 0:
        raise ValueError("negative length")
    if len(a) < n or len(b) < n:
        raise ValueError("buffer shorter than requested length")
    for x, y in zip(a[:n], b[:n]):
        if x != y:
            return x - y
    return 0


def gets(stream: IO[AnyStr], max: int) -> AnyStr:
    """Read one line from ``stream`` one character at a time.

    Stops after a newline or carriage return, at end of input, or once
    ``max - 1`` characters have been read. The terminator is kept.
    """
    parts: list = []
    empty = None
    while len(parts) + 1 < max:
        c = stream.read(1)
        if empty is None:
            empty = c[:0] if c is not None else b""
        if not c:
            break
        parts.append(c)
        if c in ("\n", "\r", b"\n", b"\r"):
            break
    if empty is None:
        empty = b""
    return empty.join(parts)