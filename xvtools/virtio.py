"""Virtio MMIO register layout and the wire format of split virtqueues
and block-device requests."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

# MMIO control registers, as offsets from the device base address.
VIRTIO_MMIO_MAGIC_VALUE = 0x000  # 0x74726976
VIRTIO_MMIO_VERSION = 0x004  # should be 2
VIRTIO_MMIO_DEVICE_ID = 0x008  # 1 is net, 2 is disk
VIRTIO_MMIO_VENDOR_ID = 0x00C  # 0x554d4551
VIRTIO_MMIO_DEVICE_FEATURES = 0x010
VIRTIO_MMIO_DRIVER_FEATURES = 0x020
VIRTIO_MMIO_QUEUE_SEL = 0x030  # write-only
VIRTIO_MMIO_QUEUE_NUM_MAX = 0x034  # read-only
VIRTIO_MMIO_QUEUE_NUM = 0x038  # write-only
VIRTIO_MMIO_QUEUE_READY = 0x044
VIRTIO_MMIO_QUEUE_NOTIFY = 0x050  # write-only
VIRTIO_MMIO_INTERRUPT_STATUS = 0x060  # read-only
VIRTIO_MMIO_INTERRUPT_ACK = 0x064  # write-only
VIRTIO_MMIO_STATUS = 0x070
VIRTIO_MMIO_QUEUE_DESC_LOW = 0x080
VIRTIO_MMIO_QUEUE_DESC_HIGH = 0x084
VIRTIO_MMIO_DRIVER_DESC_LOW = 0x090
VIRTIO_MMIO_DRIVER_DESC_HIGH = 0x094
VIRTIO_MMIO_DEVICE_DESC_LOW = 0x0A0
VIRTIO_MMIO_DEVICE_DESC_HIGH = 0x0A4

# Status register bits.
VIRTIO_CONFIG_S_ACKNOWLEDGE = 1
VIRTIO_CONFIG_S_DRIVER = 2
VIRTIO_CONFIG_S_DRIVER_OK = 4
VIRTIO_CONFIG_S_FEATURES_OK = 8

# Device feature bits.
VIRTIO_BLK_F_RO = 5
VIRTIO_BLK_F_SCSI = 7
VIRTIO_BLK_F_CONFIG_WCE = 11
VIRTIO_BLK_F_MQ = 12
VIRTIO_F_ANY_LAYOUT = 27
VIRTIO_RING_F_INDIRECT_DESC = 28
VIRTIO_RING_F_EVENT_IDX = 29

NUM = 8  # descriptors per queue; a power of two

VRING_DESC_F_NEXT = 1  # chained with another descriptor
VRING_DESC_F_WRITE = 2  # device writes (vs read)

VIRTIO_BLK_T_IN = 0  # read the disk
VIRTIO_BLK_T_OUT = 1  # write the disk


def _pack(fmt: struct.Struct, *values: int) -> bytes:
    try:
        return fmt.pack(*values)
    except struct.error as exc:
        raise ValueError(str(exc)) from None


def _unpack(fmt: struct.Struct, data: bytes, what: str) -> tuple[int, ...]:
    if len(data) != fmt.size:
        raise ValueError(f"{what} needs {fmt.size} bytes, got {len(data)}")
    return fmt.unpack(bytes(data))


@dataclass
class VirtqDesc:
    """One descriptor in the descriptor table."""

    addr: int = 0
    len: int = 0
    flags: int = 0
    next: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<QIHH")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(self._FORMAT, self.addr, self.len, self.flags, self.next)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqDesc":
        return cls(*_unpack(cls._FORMAT, data, "descriptor"))


@dataclass
class VirtqAvail:
    """The whole available ring: heads of chains offered to the device."""

    flags: int = 0
    idx: int = 0
    ring: list[int] = field(default_factory=lambda: [0] * NUM)
    unused: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(f"<HH{NUM}HH")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        if len(self.ring) != NUM:
            raise ValueError(f"ring must have {NUM} entries")
        return _pack(self._FORMAT, self.flags, self.idx, *self.ring, self.unused)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqAvail":
        values = _unpack(cls._FORMAT, data, "available ring")
        return cls(values[0], values[1], list(values[2:2 + NUM]), values[2 + NUM])


@dataclass
class VirtqUsedElem:
    """One completed request reported by the device."""

    id: int = 0
    len: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<II")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(self._FORMAT, self.id, self.len)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqUsedElem":
        return cls(*_unpack(cls._FORMAT, data, "used element"))


@dataclass
class VirtqUsed:
    """The whole used ring, written by the device."""

    flags: int = 0
    idx: int = 0
    ring: list[VirtqUsedElem] = field(default_factory=lambda: [VirtqUsedElem() for _ in range(NUM)])

    _HEAD: ClassVar[struct.Struct] = struct.Struct("<HH")
    SIZE: ClassVar[int] = _HEAD.size + NUM * VirtqUsedElem.SIZE

    def pack(self) -> bytes:
        if len(self.ring) != NUM:
            raise ValueError(f"ring must have {NUM} entries")
        return _pack(self._HEAD, self.flags, self.idx) + b"".join(e.pack() for e in self.ring)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqUsed":
        if len(data) != cls.SIZE:
            raise ValueError(f"used ring needs {cls.SIZE} bytes, got {len(data)}")
        flags, idx = cls._HEAD.unpack(bytes(data[:cls._HEAD.size]))
        body = data[cls._HEAD.size:]
        step = VirtqUsedElem.SIZE
        ring = [VirtqUsedElem.unpack(body[i:i + step]) for i in range(0, len(body), step)]
        return cls(flags, idx, ring)


@dataclass
class BlkRequest:
    """The first descriptor of a block-device request."""

    type: int = VIRTIO_BLK_T_IN
    reserved: int = 0
    sector: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<IIQ")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(self._FORMAT, self.type, self.reserved, self.sector)

    @classmethod
    def unpack(cls, data: bytes) -> "BlkRequest":
        return cls(*_unpack(cls._FORMAT, data, "block request"))