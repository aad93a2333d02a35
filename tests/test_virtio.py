import pytest

from xvtools.virtio import (
    NUM,
    VIRTIO_BLK_T_OUT,
    VRING_DESC_F_NEXT,
    VRING_DESC_F_WRITE,
    BlkRequest,
    VirtqAvail,
    VirtqDesc,
    VirtqUsed,
    VirtqUsedElem,
)


def test_desc_wire_bytes_are_little_endian():
    raw = VirtqDesc(addr=1, len=2, flags=3, next=4).pack()
    assert raw == b"\x01" + bytes(7) + b"\x02" + bytes(3) + b"\x03\x00" + b"\x04\x00"


def test_desc_round_trip():
    desc = VirtqDesc(addr=0x80001000, len=1024, flags=VRING_DESC_F_NEXT | VRING_DESC_F_WRITE, next=2)
    assert VirtqDesc.unpack(desc.pack()) == desc


def test_desc_field_out_of_range():
    with pytest.raises(ValueError):
        VirtqDesc(flags=1 << 16).pack()


def test_desc_unpack_wrong_length():
    with pytest.raises(ValueError):
        VirtqDesc.unpack(b"\x00" * (VirtqDesc.SIZE - 1))


def test_avail_round_trip():
    avail = VirtqAvail(flags=0, idx=5, ring=list(range(NUM)), unused=0)
    raw = avail.pack()
    assert len(raw) == VirtqAvail.SIZE
    assert VirtqAvail.unpack(raw) == avail


def test_avail_default_ring_has_num_entries():
    assert VirtqAvail().ring == [0] * NUM


def test_avail_bad_ring_length():
    with pytest.raises(ValueError):
        VirtqAvail(ring=[0] * (NUM + 1)).pack()


def test_used_elem_round_trip():
    elem = VirtqUsedElem(id=3, len=512)
    assert VirtqUsedElem.unpack(elem.pack()) == elem


def test_used_round_trip():
    used = VirtqUsed(flags=0, idx=9, ring=[VirtqUsedElem(i, i * 10) for i in range(NUM)])
    raw = used.pack()
    assert len(raw) == VirtqUsed.SIZE
    assert VirtqUsed.unpack(raw) == used


def test_used_unpack_wrong_length():
    with pytest.raises(ValueError):
        VirtqUsed.unpack(bytes(VirtqUsed.SIZE + 1))


def test_blk_request_type_is_first_word():
    raw = BlkRequest(type=VIRTIO_BLK_T_OUT, sector=7).pack()
    assert raw[:4] == b"\x01\x00\x00\x00"
    assert BlkRequest.unpack(raw) == BlkRequest(VIRTIO_BLK_T_OUT, 0, 7)


def test_blk_request_unpack_wrong_length():
    with pytest.raises(ValueError):
        BlkRequest.unpack(b"")