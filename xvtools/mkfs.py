"""Build a file-system image holding a root directory and the given files.

Disk layout:
[ boot block | super block | log | inode blocks | free bit map | data blocks ]
All on-disk integers are little-endian.
"""

from __future__ import annotations

import os
import struct
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, Iterable

from xvtools.ulib import FileType

DIRSIZ = 14
_INODE_HEAD = struct.Struct("<hhhhI")


class MkfsError(Exception):
    """The image could not be built."""


@dataclass(frozen=True)
class Geometry:
    """Sizes that fix the layout of an image."""

    block_size: int = 1024
    fs_size: int = 2000
    ninodes: int = 200
    nlog: int = 30
    ndirect: int = 12
    dirsiz: int = DIRSIZ
    magic: int = 0x10203040
    rootino: int = 1

    def __post_init__(self) -> None:
        if self.block_size <= 0 or self.block_size % self.dinode_size:
            raise ValueError("block size must be a multiple of the inode size")
        if self.block_size % self.dirent_size:
            raise ValueError("block size must be a multiple of the directory entry size")
        if self.nmeta >= self.fs_size:
            raise ValueError("file system too small for its metadata")

    @property
    def dinode_size(self) -> int:
        return _INODE_HEAD.size + 4 * (self.ndirect + 1)

    @property
    def dirent_size(self) -> int:
        return 2 + self.dirsiz

    @property
    def ipb(self) -> int:
        """Inodes per block."""
        return self.block_size // self.dinode_size

    @property
    def bpb(self) -> int:
        """Bitmap bits per block."""
        return self.block_size * 8

    @property
    def nindirect(self) -> int:
        return self.block_size // 4

    @property
    def maxfile(self) -> int:
        return self.ndirect + self.nindirect

    @property
    def nbitmap(self) -> int:
        return self.fs_size // self.bpb + 1

    @property
    def ninodeblocks(self) -> int:
        return self.ninodes // self.ipb + 1

    @property
    def nmeta(self) -> int:
        """Boot, super, log, inode and bitmap blocks."""
        return 2 + self.nlog + self.ninodeblocks + self.nbitmap

    @property
    def nblocks(self) -> int:
        """Data blocks."""
        return self.fs_size - self.nmeta


@dataclass
class SuperBlock:
    """Describes the layout of the disk."""

    magic: int
    size: int
    nblocks: int
    ninodes: int
    nlog: int
    logstart: int
    inodestart: int
    bmapstart: int

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<8I")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return self._FORMAT.pack(self.magic, self.size, self.nblocks, self.ninodes,
                                 self.nlog, self.logstart, self.inodestart, self.bmapstart)

    @classmethod
    def unpack(cls, data: bytes) -> "SuperBlock":
        """Decode a superblock from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(f"superblock needs {cls.SIZE} bytes")
        return cls(*cls._FORMAT.unpack(bytes(data[:cls.SIZE])))


@dataclass
class Dinode:
    """An on-disk inode; ``addrs`` holds the direct blocks and then the indirect one."""

    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: list[int] = field(default_factory=list)

    def pack(self) -> bytes:
        head = _INODE_HEAD.pack(self.type, self.major, self.minor, self.nlink, self.size)
        return head + struct.pack(f"<{len(self.addrs)}I", *self.addrs)

    @classmethod
    def unpack(cls, data: bytes) -> "Dinode":
        body = len(data) - _INODE_HEAD.size
        if body < 4 or body % 4:
            raise ValueError(f"bad inode length {len(data)}")
        head = _INODE_HEAD.unpack(bytes(data[:_INODE_HEAD.size]))
        addrs = list(struct.unpack(f"<{body // 4}I", bytes(data[_INODE_HEAD.size:])))
        return cls(*head, addrs=addrs)


@dataclass
class Dirent:
    """A directory entry: an inode number and a NUL-padded name."""

    inum: int = 0
    name: str = ""
    dirsiz: int = DIRSIZ

    def pack(self) -> bytes:
        raw = self.name.encode()
        if len(raw) > self.dirsiz:
            raise ValueError(f"name {self.name!r} longer than {self.dirsiz}")
        return struct.pack("<H", self.inum) + raw.ljust(self.dirsiz, b"\0")

    @classmethod
    def unpack(cls, data: bytes) -> "Dirent":
        if len(data) < 2:
            raise ValueError("directory entry too short")
        (inum,) = struct.unpack("<H", bytes(data[:2]))
        name = bytes(data[2:]).split(b"\0", 1)[0].decode(errors="replace")
        return cls(inum, name, len(data) - 2)


class FsImage:
    """A freshly formatted image written to a seekable binary stream."""

    def __init__(self, stream: BinaryIO, geometry: Geometry | None = None) -> None:
        self.stream = stream
        self.geometry = g = geometry or Geometry()
        self.sb = SuperBlock(
            magic=g.magic,
            size=g.fs_size,
            nblocks=g.nblocks,
            ninodes=g.ninodes,
            nlog=g.nlog,
            logstart=2,
            inodestart=2 + g.nlog,
            bmapstart=2 + g.nlog + g.ninodeblocks,
        )
        self.freeinode = 1
        self.freeblock = g.nmeta  # first block that can be allocated
        zero = bytes(g.block_size)
        for sec in range(g.fs_size):
            self.wsect(sec, zero)
        self.wsect(1, self.sb.pack().ljust(g.block_size, b"\0"))

    def rsect(self, sec: int) -> bytes:
        """Read sector ``sec``."""
        bs = self.geometry.block_size
        self.stream.seek(sec * bs)
        data = self.stream.read(bs)
        if len(data) != bs:
            raise MkfsError(f"read: short read of sector {sec}")
        return data

    def wsect(self, sec: int, data: bytes) -> None:
        """Write one whole sector."""
        bs = self.geometry.block_size
        if len(data) != bs:
            raise ValueError(f"sector data must be {bs} bytes")
        self.stream.seek(sec * bs)
        written = self.stream.write(bytes(data))
        if written is not None and written != bs:
            raise MkfsError(f"write: short write of sector {sec}")

    def _iblock(self, inum: int) -> int:
        block = inum // self.geometry.ipb + self.sb.inodestart
        if block >= self.sb.bmapstart:
            raise MkfsError(f"inode {inum} out of range")
        return block

    def _islot(self, inum: int) -> slice:
        size = self.geometry.dinode_size
        start = (inum % self.geometry.ipb) * size
        return slice(start, start + size)

    def rinode(self, inum: int) -> Dinode:
        """Read inode ``inum``."""
        return Dinode.unpack(self.rsect(self._iblock(inum))[self._islot(inum)])

    def winode(self, inum: int, dinode: Dinode) -> None:
        """Write inode ``inum``."""
        block = self._iblock(inum)
        buf = bytearray(self.rsect(block))
        buf[self._islot(inum)] = dinode.pack()
        self.wsect(block, bytes(buf))

    def ialloc(self, type: int) -> int:
        """Allocate the next inode with the given type and return its number."""
        inum = self.freeinode
        self.freeinode += 1
        addrs = [0] * (self.geometry.ndirect + 1)
        self.winode(inum, Dinode(type=int(type), nlink=1, size=0, addrs=addrs))
        return inum

    def _take_block(self) -> int:
        if self.freeblock >= self.geometry.fs_size:
            raise MkfsError("out of blocks")
        block = self.freeblock
        self.freeblock += 1
        return block

    def iappend(self, inum: int, data: bytes) -> None:
        """Append ``data`` to the file of inode ``inum``."""
        g = self.geometry
        bs, nd = g.block_size, g.ndirect
        din = self.rinode(inum)
        off = din.size
        view = memoryview(bytes(data))
        while view:
            fbn = off // bs
            if fbn >= g.maxfile:
                raise MkfsError(f"inode {inum}: file too large")
            if fbn < nd:
                if din.addrs[fbn] == 0:
                    din.addrs[fbn] = self._take_block()
                x = din.addrs[fbn]
            else:
                if din.addrs[nd] == 0:
                    din.addrs[nd] = self._take_block()
                fmt = f"<{g.nindirect}I"
                indirect = list(struct.unpack(fmt, self.rsect(din.addrs[nd])))
                if indirect[fbn - nd] == 0:
                    indirect[fbn - nd] = self._take_block()
                    self.wsect(din.addrs[nd], struct.pack(fmt, *indirect))
                x = indirect[fbn - nd]
            n1 = min(len(view), (fbn + 1) * bs - off)
            buf = bytearray(self.rsect(x))
            start = off - fbn * bs
            buf[start:start + n1] = view[:n1]
            self.wsect(x, bytes(buf))
            view = view[n1:]
            off += n1
        din.size = off
        self.winode(inum, din)

    def balloc(self, used: int) -> None:
        """Mark the first ``used`` blocks allocated in the bitmap."""
        g = self.geometry
        if used >= g.bpb:
            raise MkfsError(f"balloc: {used} blocks do not fit in one bitmap block")
        buf = bytearray(g.block_size)
        for i in range(used):
            buf[i // 8] |= 1 << (i % 8)
        self.wsect(self.sb.bmapstart, bytes(buf))


def shortname(path: str) -> str:
    """Name a file gets in the image: without "user/" and a leading "_"."""
    name = path[len("user/"):] if path.startswith("user/") else path
    if "/" in name:
        raise MkfsError(f"{path}: name must not contain '/'")
    return name[1:] if name.startswith("_") else name


def build_image(stream: BinaryIO, paths: Iterable[str], geometry: Geometry | None = None) -> FsImage:
    """Format ``stream`` and copy the files at ``paths`` into its root directory."""
    image = FsImage(stream, geometry)
    g = image.geometry
    rootino = image.ialloc(FileType.DIR)
    if rootino != g.rootino:
        raise MkfsError(f"root inode is {rootino}, expected {g.rootino}")
    image.iappend(rootino, Dirent(rootino, ".", g.dirsiz).pack())
    image.iappend(rootino, Dirent(rootino, "..", g.dirsiz).pack())

    for path in paths:
        name = shortname(path)
        try:
            src = open(path, "rb")
        except OSError as exc:
            raise MkfsError(f"{path}: {exc.strerror}") from exc
        with src:
            if len(name.encode()) > g.dirsiz:
                raise MkfsError(f"{path}: name longer than {g.dirsiz}")
            inum = image.ialloc(FileType.FILE)
            image.iappend(rootino, Dirent(inum, name, g.dirsiz).pack())
            while chunk := src.read(g.block_size):
                image.iappend(inum, chunk)

    # Round the root directory up past its last block.
    din = image.rinode(rootino)
    din.size = (din.size // g.block_size + 1) * g.block_size
    image.winode(rootino, din)

    image.balloc(image.freeblock)
    return image


def main(argv: list[str] | None = None) -> int:
    """Build the image named first from the files named after it."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("Usage: mkfs fs.img files...\n")
        return 1
    g = Geometry()
    img_path, files = args[0], args[1:]
    try:
        stream = open(img_path, "w+b")
    except OSError as exc:
        sys.stderr.write(f"{img_path}: {os.strerror(exc.errno or 0)}\n")
        return 1
    print(f"nmeta {g.nmeta} (boot, super, log blocks {g.nlog} inode blocks {g.ninodeblocks}, "
          f"bitmap blocks {g.nbitmap}) blocks {g.nblocks} total {g.fs_size}")
    with stream:
        try:
            image = build_image(stream, files, g)
        except MkfsError as exc:
            sys.stderr.write(f"{exc}\n")
            return 1
    print(f"balloc: first {image.freeblock} blocks have been allocated")
    print(f"balloc: write bitmap block at sector {image.sb.bmapstart}")
    return 0


if __name__ == "__main__":
    sys.exit(main())