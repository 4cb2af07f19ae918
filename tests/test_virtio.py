import pytest

from xvutils.virtio import (
    NUM,
    BlkRequest,
    BlkRequestType,
    DescFlags,
    VirtqAvail,
    VirtqDesc,
    VirtqUsed,
    VirtqUsedElem,
)


def test_desc_wire_bytes():
    desc = VirtqDesc(addr=0x1000, length=512, flags=DescFlags.NEXT | DescFlags.WRITE, next=1)
    expected = (
        (0x1000).to_bytes(8, "little")
        + (512).to_bytes(4, "little")
        + (3).to_bytes(2, "little")
        + (1).to_bytes(2, "little")
    )
    assert desc.pack() == expected


def test_desc_round_trip():
    desc = VirtqDesc(addr=0xDEADBEEF00, length=7, flags=DescFlags.WRITE, next=5)
    again = VirtqDesc.unpack(desc.pack())
    assert again == desc
    assert again.flags is DescFlags.WRITE or again.flags == DescFlags.WRITE


def test_desc_wrong_length():
    with pytest.raises(ValueError):
        VirtqDesc.unpack(b"\0" * 15)


def test_desc_out_of_range():
    with pytest.raises(ValueError):
        VirtqDesc(next=1 << 16).pack()


def test_avail_round_trip():
    avail = VirtqAvail(flags=0, idx=3, ring=tuple(range(NUM)), unused=9)
    data = avail.pack()
    assert len(data) == VirtqAvail.SIZE
    assert VirtqAvail.unpack(data) == avail


def test_avail_ring_size_checked():
    with pytest.raises(ValueError):
        VirtqAvail(ring=(0,) * (NUM - 1))


def test_used_size_and_round_trip():
    ring = tuple(VirtqUsedElem(id=i, length=i * 10) for i in range(NUM))
    used = VirtqUsed(flags=0, idx=2, ring=ring)
    data = used.pack()
    assert len(data) == 68
    assert VirtqUsed.unpack(data) == used


def test_used_elem_position():
    ring = tuple(VirtqUsedElem(id=(5 if i == 1 else 0)) for i in range(NUM))
    data = VirtqUsed(ring=ring).pack()
    elem = VirtqUsedElem.unpack(data[4 + VirtqUsedElem.SIZE:4 + 2 * VirtqUsedElem.SIZE])
    assert elem.id == 5


def test_used_ring_size_checked():
    with pytest.raises(ValueError):
        VirtqUsed(ring=())


def test_blk_request_wire_bytes():
    req = BlkRequest(type=BlkRequestType.OUT, reserved=0, sector=42)
    assert req.pack() == (1).to_bytes(4, "little") + bytes(4) + (42).to_bytes(8, "little")


def test_blk_request_round_trip():
    req = BlkRequest(BlkRequestType.IN, 0, 123456789)
    assert BlkRequest.unpack(req.pack()) == req


def test_blk_request_unknown_type():
    with pytest.raises(ValueError):
        BlkRequest.unpack((7).to_bytes(4, "little") + bytes(12))