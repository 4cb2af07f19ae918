"""Legacy virtio MMIO register layout and virtqueue structures for block devices."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import ClassVar

NUM = 8
MMIO_BASE = 0x10001000
MAGIC_VALUE = 0x74726976
VENDOR_ID = 0x554D4551


class MmioRegister(enum.IntEnum):
    MAGIC_VALUE = 0x000
    VERSION = 0x004
    DEVICE_ID = 0x008
    VENDOR_ID = 0x00C
    DEVICE_FEATURES = 0x010
    DRIVER_FEATURES = 0x020
    GUEST_PAGE_SIZE = 0x028
    QUEUE_SEL = 0x030
    QUEUE_NUM_MAX = 0x034
    QUEUE_NUM = 0x038
    QUEUE_ALIGN = 0x03C
    QUEUE_PFN = 0x040
    QUEUE_READY = 0x044
    QUEUE_NOTIFY = 0x050
    INTERRUPT_STATUS = 0x060
    INTERRUPT_ACK = 0x064
    STATUS = 0x070


class ConfigStatus(enum.IntFlag):
    ACKNOWLEDGE = 1
    DRIVER = 2
    DRIVER_OK = 4
    FEATURES_OK = 8


class FeatureBit(enum.IntEnum):
    BLK_RO = 5
    BLK_SCSI = 7
    BLK_CONFIG_WCE = 11
    BLK_MQ = 12
    ANY_LAYOUT = 27
    RING_INDIRECT_DESC = 28
    RING_EVENT_IDX = 29


class DescFlags(enum.IntFlag):
    NEXT = 1
    WRITE = 2


class BlkRequestType(enum.IntEnum):
    IN = 0
    OUT = 1


def _pack(fmt: str, *values: int) -> bytes:
    try:
        return struct.pack(fmt, *values)
    except struct.error as exc:
        raise ValueError(str(exc)) from None


def _check_size(cls: type, data: bytes) -> bytes:
    data = bytes(data)
    if len(data) != cls.SIZE:
        raise ValueError(f"{cls.__name__} needs {cls.SIZE} bytes, got {len(data)}")
    return data


@dataclass(frozen=True)
class VirtqDesc:
    """A single descriptor."""

    FORMAT: ClassVar[str] = "<QIHH"
    SIZE: ClassVar[int] = struct.calcsize(FORMAT)

    addr: int = 0
    length: int = 0
    flags: DescFlags = DescFlags(0)
    next: int = 0

    def pack(self) -> bytes:
        return _pack(self.FORMAT, self.addr, self.length, int(self.flags), self.next)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqDesc":
        addr, length, flags, nxt = struct.unpack(cls.FORMAT, _check_size(cls, data))
        return cls(addr, length, DescFlags(flags), nxt)


@dataclass(frozen=True)
class VirtqAvail:
    """The whole available ring."""

    FORMAT: ClassVar[str] = f"<HH{NUM}HH"
    SIZE: ClassVar[int] = struct.calcsize(FORMAT)

    flags: int = 0
    idx: int = 0
    ring: tuple[int, ...] = (0,) * NUM
    unused: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "ring", tuple(self.ring))
        if len(self.ring) != NUM:
            raise ValueError(f"ring must hold {NUM} entries")

    def pack(self) -> bytes:
        return _pack(self.FORMAT, self.flags, self.idx, *self.ring, self.unused)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqAvail":
        flags, idx, *rest = struct.unpack(cls.FORMAT, _check_size(cls, data))
        return cls(flags, idx, tuple(rest[:NUM]), rest[NUM])


@dataclass(frozen=True)
class VirtqUsedElem:
    """One completed request reported by the device."""

    FORMAT: ClassVar[str] = "<II"
    SIZE: ClassVar[int] = struct.calcsize(FORMAT)

    id: int = 0
    length: int = 0

    def pack(self) -> bytes:
        return _pack(self.FORMAT, self.id, self.length)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqUsedElem":
        return cls(*struct.unpack(cls.FORMAT, _check_size(cls, data)))


def _empty_used_ring() -> tuple[VirtqUsedElem, ...]:
    return tuple(VirtqUsedElem() for _ in range(NUM))


@dataclass(frozen=True)
class VirtqUsed:
    """The whole used ring."""

    HEADER: ClassVar[str] = "<HH"
    SIZE: ClassVar[int] = struct.calcsize(HEADER) + NUM * VirtqUsedElem.SIZE

    flags: int = 0
    idx: int = 0
    ring: tuple[VirtqUsedElem, ...] = field(default_factory=_empty_used_ring)

    def __post_init__(self) -> None:
        object.__setattr__(self, "ring", tuple(self.ring))
        if len(self.ring) != NUM:
            raise ValueError(f"ring must hold {NUM} entries")

    def pack(self) -> bytes:
        header = _pack(self.HEADER, self.flags, self.idx)
        return header + b"".join(elem.pack() for elem in self.ring)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqUsed":
        data = _check_size(cls, data)
        head = struct.calcsize(cls.HEADER)
        flags, idx = struct.unpack(cls.HEADER, data[:head])
        step = VirtqUsedElem.SIZE
        ring = tuple(
            VirtqUsedElem.unpack(data[off:off + step]) for off in range(head, cls.SIZE, step)
        )
        return cls(flags, idx, ring)


@dataclass(frozen=True)
class BlkRequest:
    """The first descriptor of a block-device request."""

    FORMAT: ClassVar[str] = "<IIQ"
    SIZE: ClassVar[int] = struct.calcsize(FORMAT)

    type: BlkRequestType = BlkRequestType.IN
    reserved: int = 0
    sector: int = 0

    def pack(self) -> bytes:
        return _pack(self.FORMAT, int(self.type), self.reserved, self.sector)

    @classmethod
    def unpack(cls, data: bytes) -> "BlkRequest":
        kind, reserved, sector = struct.unpack(cls.FORMAT, _check_size(cls, data))
        try:
            kind = BlkRequestType(kind)
        except ValueError:
            raise ValueError(f"unknown request type {kind}") from None
        return cls(kind, reserved, sector)