"""The Park-Miller minimal standard pseudo-random generator."""

from __future__ import annotations

from typing import Iterator

_MODULUS = 0x7FFFFFFF
_MULTIPLIER = 16807
_Q = 127773
_R = 2836
_MASK64 = 0xFFFFFFFFFFFFFFFF


class ParkMiller:
    """Generator of values in ``[0, 0x7ffffffd]`` computing ``16807 * x mod (2**31 - 1)``."""

    def __init__(self, seed: int = 1) -> None:
        if seed < 0:
            raise ValueError("seed must not be negative")
        self.state = seed & _MASK64

    def next(self) -> int:
        """Advance the generator and return the new value."""
        x = self.state % (_MODULUS - 1) + 1
        hi, lo = divmod(x, _Q)
        x = _MULTIPLIER * lo - _R * hi
        if x < 0:
            x += _MODULUS
        x -= 1
        self.state = x
        return x

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next()