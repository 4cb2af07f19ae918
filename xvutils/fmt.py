"""A minimal formatter understanding %d, %l, %x, %p, %s, %c and %%."""

from __future__ import annotations

import sys
from typing import IO, Any

_DIGITS = "0123456789ABCDEF"
_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


def _int_text(value: Any, base: int, signed: bool) -> str:
    value = int(value) & _MASK32
    negative = signed and value & 0x80000000
    if negative:
        value = 0x100000000 - value
    digits = []
    while True:
        digits.append(_DIGITS[value % base])
        value //= base
        if not value:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _string_text(value: Any) -> str:
    if value is None:
        return "(null)"
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("latin-1")
    return str(value).split("\0", 1)[0]


def _char_text(value: Any) -> str:
    if isinstance(value, str):
        value = ord(value[0]) if value else 0
    return chr(int(value) & 0xFF)


def render(fmt: str, *args: Any) -> str:
    """Format ``args`` according to ``fmt`` and return the text."""
    pending = iter(args)

    def take() -> Any:
        try:
            return next(pending)
        except StopIteration:
            raise ValueError("not enough arguments for format") from None

    out: list[str] = []
    escaped = False
    for c in fmt:
        if not escaped:
            if c == "%":
                escaped = True
            else:
                out.append(c)
            continue
        escaped = False
        if c == "d":
            out.append(_int_text(take(), 10, True))
        elif c == "l":
            # The value passes through a 32-bit parameter on its way out.
            out.append(_int_text(take(), 10, False))
        elif c == "x":
            out.append(_int_text(take(), 16, False))
        elif c == "p":
            out.append(f"0x{int(take()) & _MASK64:016X}")
        elif c == "s":
            out.append(_string_text(take()))
        elif c == "c":
            out.append(_char_text(take()))
        elif c == "%":
            out.append("%")
        else:
            out.append("%" + c)
    return "".join(out)


def fprintf(stream: IO[str], fmt: str, *args: Any) -> None:
    """Write formatted text to ``stream``."""
    stream.write(render(fmt, *args))


def printf(fmt: str, *args: Any) -> None:
    """Write formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)