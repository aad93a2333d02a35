import io

import pytest

from xvtools.mkfs import (
    Dinode,
    Dirent,
    FsImage,
    Geometry,
    MkfsError,
    SuperBlock,
    build_image,
    main,
    shortname,
)
from xvtools.ulib import FileType

SMALL = Geometry(block_size=64, fs_size=300, ninodes=20, nlog=4)


def read_file(image, inum):
    g = image.geometry
    din = image.rinode(inum)
    blocks = list(din.addrs[:g.ndirect])
    if din.addrs[g.ndirect]:
        ind = image.rsect(din.addrs[g.ndirect])
        blocks += [int.from_bytes(ind[i:i + 4], "little") for i in range(0, len(ind), 4)]
    data = b"".join(image.rsect(b) for b in blocks if b)
    return data[:din.size]


def root_entries(image):
    g = image.geometry
    data = read_file(image, g.rootino)
    size = g.dirent_size
    entries = [Dirent.unpack(data[i:i + size]) for i in range(0, len(data) - size + 1, size)]
    return [e for e in entries if e.inum != 0]


def test_shortname_strips_prefix_and_underscore():
    assert shortname("user/_cat") == "cat"
    assert shortname("_ls") == "ls"
    assert shortname("README") == "README"


def test_shortname_rejects_subdirectory():
    with pytest.raises(MkfsError):
        shortname("a/b")


def test_superblock_layout():
    image = FsImage(io.BytesIO(), SMALL)
    sb = SuperBlock.unpack(image.rsect(1))
    assert sb == image.sb
    assert sb.magic == SMALL.magic
    assert sb.logstart == 2
    assert sb.inodestart == 2 + SMALL.nlog
    assert sb.bmapstart == 2 + SMALL.nlog + SMALL.ninodeblocks
    assert sb.size == SMALL.fs_size
    assert sb.nblocks + SMALL.nmeta == SMALL.fs_size


def test_image_size_is_whole_fs():
    stream = io.BytesIO()
    FsImage(stream, SMALL)
    assert len(stream.getvalue()) == SMALL.fs_size * SMALL.block_size


def test_dinode_round_trip():
    din = Dinode(type=2, major=0, minor=0, nlink=1, size=100, addrs=list(range(13)))
    raw = din.pack()
    assert len(raw) == Geometry().dinode_size
    assert Dinode.unpack(raw) == din


DIRSIZ_DEFAULT = Geometry().dirsiz


def test_dirent_round_trip_full_length_name():
    name = "x" * DIRSIZ_DEFAULT
    ent = Dirent(5, name)
    raw = ent.pack()
    assert len(raw) == Geometry().dirent_size
    assert Dirent.unpack(raw) == ent


def test_dirent_name_too_long():
    with pytest.raises(ValueError):
        Dirent(1, "y" * (DIRSIZ_DEFAULT + 1)).pack()


def test_ialloc_numbers_in_order():
    image = FsImage(io.BytesIO(), SMALL)
    first = image.ialloc(FileType.DIR)
    second = image.ialloc(FileType.FILE)
    assert first == SMALL.rootino
    assert second == first + 1
    din = image.rinode(second)
    assert din.type == FileType.FILE
    assert din.nlink == 1
    assert din.size == 0


def test_iappend_uses_indirect_block():
    image = FsImage(io.BytesIO(), SMALL)
    inum = image.ialloc(FileType.FILE)
    data = bytes(i % 251 for i in range((SMALL.ndirect + 3) * SMALL.block_size + 5))
    image.iappend(inum, data[:100])
    image.iappend(inum, data[100:])
    assert image.rinode(inum).addrs[SMALL.ndirect] != 0
    assert read_file(image, inum) == data


def test_iappend_too_large():
    image = FsImage(io.BytesIO(), SMALL)
    inum = image.ialloc(FileType.FILE)
    with pytest.raises(MkfsError):
        image.iappend(inum, bytes((SMALL.maxfile + 1) * SMALL.block_size))


def test_build_image_root_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "_cat").write_bytes(b"meow")
    (tmp_path / "README").write_bytes(b"hello\n" * 50)
    image = build_image(io.BytesIO(), ["_cat", "README"], SMALL)
    entries = root_entries(image)
    names = [e.name for e in entries]
    assert names[:2] == [".", ".."]
    assert sorted(names[2:]) == ["README", "cat"]
    by_name = {e.name: e.inum for e in entries}
    assert read_file(image, by_name["cat"]) == b"meow"
    assert read_file(image, by_name["README"]) == b"hello\n" * 50
    assert image.rinode(SMALL.rootino).size % SMALL.block_size == 0


def test_build_image_bitmap(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "f").write_bytes(b"z" * 200)
    image = build_image(io.BytesIO(), ["f"], SMALL)
    # one block for the root directory, four for the 200-byte file
    used = SMALL.nmeta + 5
    assert image.freeblock == used
    bitmap = image.rsect(image.sb.bmapstart)
    bits = [(bitmap[i // 8] >> (i % 8)) & 1 for i in range(used + 8)]
    assert bits == [1] * used + [0] * 8


def test_build_image_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(MkfsError):
        build_image(io.BytesIO(), ["nosuchfile"], SMALL)


def test_build_image_name_too_long(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    name = "n" * (SMALL.dirsiz + 1)
    (tmp_path / name).write_bytes(b"x")
    with pytest.raises(MkfsError):
        build_image(io.BytesIO(), [name], SMALL)


def test_geometry_rejects_bad_block_size():
    with pytest.raises(ValueError):
        Geometry(block_size=100)


def test_main_usage(capsys):
    assert main([]) == 1
    assert "Usage: mkfs fs.img files..." in capsys.readouterr().err


def test_main_writes_image(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "README").write_bytes(b"text\n")
    assert main(["fs.img", "README"]) == 0
    g = Geometry()
    raw = (tmp_path / "fs.img").read_bytes()
    assert len(raw) == g.fs_size * g.block_size
    sb = SuperBlock.unpack(raw[g.block_size:2 * g.block_size])
    assert sb.magic == g.magic
    out = capsys.readouterr().out
    assert f"balloc: write bitmap block at sector {sb.bmapstart}" in out