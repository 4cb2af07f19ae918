"""Three-level Sv39 page tables over a simulated physical memory."""

from __future__ import annotations

import enum
import struct

PGSIZE = 4096
PGSHIFT = 12
PTES_PER_PAGE = 512
KERNBASE = 0x80000000
# One bit less than the full Sv39 range, to avoid sign-extending high addresses.
MAXVA = 1 << (9 + 9 + 9 + 12 - 1)

_PXMASK = 0x1FF
_PTE = struct.Struct("<Q")


class Panic(RuntimeError):
    """An unrecoverable inconsistency that halts the kernel."""


class PteFlags(enum.IntFlag):
    V = 1 << 0
    R = 1 << 1
    W = 1 << 2
    X = 1 << 3
    U = 1 << 4


def pg_round_up(sz: int) -> int:
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1)


def pg_round_down(a: int) -> int:
    return a & ~(PGSIZE - 1)


def _px(level: int, va: int) -> int:
    return (va >> (PGSHIFT + 9 * level)) & _PXMASK


def _pa2pte(pa: int) -> int:
    return (pa >> 12) << 10


def _pte2pa(pte: int) -> int:
    return (pte >> 10) << 12


def _pte_flags(pte: int) -> int:
    return pte & 0x3FF


class PhysicalMemory:
    """A pool of ``npages`` physical pages starting at ``KERNBASE``."""

    def __init__(self, npages: int) -> None:
        if npages < 0:
            raise ValueError("page count must not be negative")
        self.base = KERNBASE
        self.npages = npages
        self._data = bytearray(npages * PGSIZE)
        self._free = [self.base + i * PGSIZE for i in reversed(range(npages))]
        self._free_set = set(self._free)

    @property
    def free_pages(self) -> int:
        """Number of pages currently available to :meth:`kalloc`."""
        return len(self._free)

    def kalloc(self) -> int:
        """Allocate one page and return its physical address."""
        if not self._free:
            raise MemoryError("out of physical pages")
        pa = self._free.pop()
        self._free_set.discard(pa)
        return pa

    def kfree(self, pa: int) -> None:
        """Return the page at ``pa`` to the pool."""
        if pa % PGSIZE or not self.base <= pa < self.base + self.npages * PGSIZE:
            raise Panic("kfree")
        if pa in self._free_set:
            raise Panic("kfree")
        self._free.append(pa)
        self._free_set.add(pa)

    def _offset(self, pa: int, n: int) -> int:
        off = pa - self.base
        if n < 0 or off < 0 or off + n > len(self._data):
            raise ValueError(f"physical range {pa:#x}+{n} outside memory")
        return off

    def read(self, pa: int, n: int) -> bytes:
        """Return ``n`` bytes starting at physical address ``pa``."""
        off = self._offset(pa, n)
        return bytes(self._data[off:off + n])

    def write(self, pa: int, data: bytes) -> None:
        """Store ``data`` starting at physical address ``pa``."""
        off = self._offset(pa, len(data))
        self._data[off:off + len(data)] = data


class PageTable:
    """A user page table rooted in one page of ``memory``."""

    def __init__(self, memory: PhysicalMemory) -> None:
        self.memory = memory
        self.root = memory.kalloc()
        memory.write(self.root, bytes(PGSIZE))

    def _load(self, addr: int) -> int:
        return _PTE.unpack(self.memory.read(addr, _PTE.size))[0]

    def _store(self, addr: int, value: int) -> None:
        self.memory.write(addr, _PTE.pack(value))

    def walk(self, va: int, alloc: bool = False) -> int | None:
        """Return the physical address of the PTE for ``va``.

        Missing page-table pages are created when ``alloc`` is true;
        otherwise ``None`` is returned for them.
        """
        if va >= MAXVA:
            raise Panic("walk")
        table = self.root
        for level in (2, 1):
            pte_addr = table + 8 * _px(level, va)
            pte = self._load(pte_addr)
            if pte & PteFlags.V:
                table = _pte2pa(pte)
            else:
                if not alloc:
                    return None
                table = self.memory.kalloc()
                self.memory.write(table, bytes(PGSIZE))
                self._store(pte_addr, _pa2pte(table) | PteFlags.V)
        return table + 8 * _px(0, va)

    def walkaddr(self, va: int) -> int | None:
        """Return the physical page mapped at user address ``va``, or ``None``."""
        if va >= MAXVA:
            return None
        pte_addr = self.walk(va)
        if pte_addr is None:
            return None
        pte = self._load(pte_addr)
        if not pte & PteFlags.V or not pte & PteFlags.U:
            return None
        return _pte2pa(pte)

    def mappages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map ``size`` bytes at ``va`` onto physical memory at ``pa``."""
        if size <= 0:
            raise Panic("mappages: size")
        a = pg_round_down(va)
        last = pg_round_down(va + size - 1)
        while True:
            pte_addr = self.walk(a, True)
            assert pte_addr is not None
            if self._load(pte_addr) & PteFlags.V:
                raise Panic("remap")
            self._store(pte_addr, _pa2pte(pa) | int(perm) | PteFlags.V)
            if a == last:
                return
            a += PGSIZE
            pa += PGSIZE

    def unmap(self, va: int, npages: int, do_free: bool) -> None:
        """Remove ``npages`` existing mappings from ``va``, optionally freeing the pages."""
        if va % PGSIZE:
            raise Panic("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            pte_addr = self.walk(a)
            if pte_addr is None:
                raise Panic("uvmunmap: walk")
            pte = self._load(pte_addr)
            if not pte & PteFlags.V:
                raise Panic("uvmunmap: not mapped")
            if _pte_flags(pte) == PteFlags.V:
                raise Panic("uvmunmap: not a leaf")
            if do_free:
                self.memory.kfree(_pte2pa(pte))
            self._store(pte_addr, 0)

    def uvminit(self, src: bytes) -> None:
        """Load ``src``, shorter than a page, at address 0."""
        if len(src) >= PGSIZE:
            raise Panic("inituvm: more than a page")
        mem = self.memory.kalloc()
        self.memory.write(mem, bytes(src) + bytes(PGSIZE - len(src)))
        self.mappages(0, PGSIZE, mem, PteFlags.W | PteFlags.R | PteFlags.X | PteFlags.U)

    def uvmalloc(self, oldsz: int, newsz: int) -> int:
        """Grow from ``oldsz`` to ``newsz`` bytes and return the new size.

        On running out of memory the pages added so far are released and
        MemoryError is raised.
        """
        if newsz < oldsz:
            return oldsz
        oldsz = pg_round_up(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            try:
                mem = self.memory.kalloc()
            except MemoryError:
                self.uvmdealloc(a, oldsz)
                raise
            self.memory.write(mem, bytes(PGSIZE))
            try:
                self.mappages(
                    a, PGSIZE, mem, PteFlags.W | PteFlags.X | PteFlags.R | PteFlags.U
                )
            except MemoryError:
                self.memory.kfree(mem)
                self.uvmdealloc(a, oldsz)
                raise
        return newsz

    def uvmdealloc(self, oldsz: int, newsz: int) -> int:
        """Shrink from ``oldsz`` to ``newsz`` bytes and return the new size."""
        if newsz >= oldsz:
            return oldsz
        if pg_round_up(newsz) < pg_round_up(oldsz):
            npages = (pg_round_up(oldsz) - pg_round_up(newsz)) // PGSIZE
            self.unmap(pg_round_up(newsz), npages, True)
        return newsz

    def _freewalk(self, table: int) -> None:
        for i in range(PTES_PER_PAGE):
            addr = table + 8 * i
            pte = self._load(addr)
            if pte & PteFlags.V and not pte & (PteFlags.R | PteFlags.W | PteFlags.X):
                self._freewalk(_pte2pa(pte))
                self._store(addr, 0)
            elif pte & PteFlags.V:
                raise Panic("freewalk: leaf")
        self.memory.kfree(table)

    def uvmfree(self, sz: int) -> None:
        """Free the first ``sz`` bytes of user memory, then every page-table page."""
        if sz > 0:
            self.unmap(0, pg_round_up(sz) // PGSIZE, True)
        self._freewalk(self.root)

    def uvmcopy(self, new: PageTable, sz: int) -> None:
        """Copy the first ``sz`` bytes of memory and mappings into ``new``.

        On running out of memory the copies made so far are released and
        MemoryError is raised.
        """
        for i in range(0, sz, PGSIZE):
            pte_addr = self.walk(i)
            if pte_addr is None:
                raise Panic("uvmcopy: pte should exist")
            pte = self._load(pte_addr)
            if not pte & PteFlags.V:
                raise Panic("uvmcopy: page not present")
            pa = _pte2pa(pte)
            flags = _pte_flags(pte)
            try:
                mem = new.memory.kalloc()
            except MemoryError:
                new.unmap(0, i // PGSIZE, True)
                raise
            new.memory.write(mem, self.memory.read(pa, PGSIZE))
            try:
                new.mappages(i, PGSIZE, mem, flags)
            except MemoryError:
                new.memory.kfree(mem)
                new.unmap(0, i // PGSIZE, True)
                raise

    def uvmclear(self, va: int) -> None:
        """Make the page at ``va`` inaccessible to user mode."""
        pte_addr = self.walk(va)
        if pte_addr is None:
            raise Panic("uvmclear")
        self._store(pte_addr, self._load(pte_addr) & ~PteFlags.U)

    def _user_page(self, va0: int) -> int:
        pa0 = self.walkaddr(va0)
        if pa0 is None:
            raise ValueError(f"user address {va0:#x} is not mapped")
        return pa0

    def copyout(self, dstva: int, data: bytes) -> None:
        """Copy ``data`` to user address ``dstva``."""
        view = memoryview(bytes(data))
        while view:
            va0 = pg_round_down(dstva)
            pa0 = self._user_page(va0)
            n = min(PGSIZE - (dstva - va0), len(view))
            self.memory.write(pa0 + (dstva - va0), view[:n])
            view = view[n:]
            dstva = va0 + PGSIZE

    def copyin(self, srcva: int, n: int) -> bytes:
        """Return ``n`` bytes read from user address ``srcva``."""
        if n < 0:
            raise ValueError("negative length")
        parts = []
        while n > 0:
            va0 = pg_round_down(srcva)
            pa0 = self._user_page(va0)
            chunk = min(PGSIZE - (srcva - va0), n)
            parts.append(self.memory.read(pa0 + (srcva - va0), chunk))
            n -= chunk
            srcva = va0 + PGSIZE
        return b"".join(parts)

    def copyinstr(self, srcva: int, max: int) -> bytes:
        """Return the NUL-terminated string at ``srcva``, without its terminator.

        Raises ValueError if no NUL appears within ``max`` bytes.
        """
        parts = []
        while max > 0:
            va0 = pg_round_down(srcva)
            pa0 = self._user_page(va0)
            n = min(PGSIZE - (srcva - va0), max)
            chunk = self.memory.read(pa0 + (srcva - va0), n)
            end = chunk.find(b"\0")
            if end >= 0:
                parts.append(chunk[:end])
                return b"".join(parts)
            parts.append(chunk)
            max -= n
            srcva = va0 + PGSIZE
        raise ValueError("string not terminated within limit")