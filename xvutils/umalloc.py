"""A first-fit free-list allocator over a simulated break-grown heap."""

from __future__ import annotations

HEADER_SIZE = 16
MIN_GROWTH_UNITS = 4096
_BASE = -1


class OutOfMemory(MemoryError):
    """Raised when the heap cannot grow enough to satisfy a request."""


class Heap:
    """A circular, address-ordered free list with coalescing on free.

    Addresses handed out are byte offsets into the heap; every block is
    preceded by a one-unit header, and the heap grows in chunks of at
    least ``MIN_GROWTH_UNITS`` units until ``capacity`` bytes are used.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._limit = capacity // HEADER_SIZE
        self._brk = 0
        self._next: dict[int, int] = {}
        self._size: dict[int, int] = {}
        self._freep: int | None = None
        self._allocated: set[int] = set()

    def malloc(self, nbytes: int) -> int:
        """Allocate ``nbytes`` bytes and return the block's address."""
        if nbytes < 0:
            raise ValueError("size must not be negative")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._next[_BASE] = _BASE
            self._size[_BASE] = 0
            self._freep = _BASE
        prevp = self._freep
        p = self._next[prevp]
        while True:
            if self._size[p] >= nunits:
                if self._size[p] == nunits:
                    self._next[prevp] = self._next[p]
                    del self._next[p]
                else:
                    self._size[p] -= nunits
                    p += self._size[p]
                    self._size[p] = nunits
                self._freep = prevp
                self._allocated.add(p)
                return (p + 1) * HEADER_SIZE
            if p == self._freep:
                p = self._morecore(nunits)
            prevp, p = p, self._next[p]

    def free(self, address: int) -> None:
        """Return a block obtained from :meth:`malloc` to the free list."""
        bp, rem = divmod(address, HEADER_SIZE)
        bp -= 1
        if rem or bp not in self._allocated:
            raise ValueError(f"address {address} was not allocated")
        self._allocated.remove(bp)
        self._release(bp)

    def free_units(self) -> int:
        """Total size, in header units, of all blocks on the free list."""
        if self._freep is None:
            return 0
        total = 0
        p = self._next[_BASE]
        while p != _BASE:
            total += self._size[p]
            p = self._next[p]
        return total

    def _morecore(self, nunits: int) -> int:
        nu = max(nunits, MIN_GROWTH_UNITS)
        if self._brk + nu > self._limit:
            raise OutOfMemory(f"cannot grow heap by {nu * HEADER_SIZE} bytes")
        hp = self._brk
        self._brk += nu
        self._size[hp] = nu
        self._release(hp)
        assert self._freep is not None
        return self._freep

    def _release(self, bp: int) -> None:
        assert self._freep is not None
        nxt = self._next
        size = self._size
        p = self._freep
        while not (p < bp < nxt[p]):
            if p >= nxt[p] and (bp > p or bp < nxt[p]):
                break
            p = nxt[p]
        after = nxt[p]
        if bp + size[bp] == after:
            size[bp] += size[after]
            nxt[bp] = nxt[after]
            del size[after], nxt[after]
        else:
            nxt[bp] = after
        if p + size[p] == bp:
            size[p] += size[bp]
            nxt[p] = nxt[bp]
            del size[bp], nxt[bp]
        else:
            nxt[p] = bp
        self._freep = p