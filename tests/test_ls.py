import io
import os

from xvtools.ls import DIRSIZ, fmtname, ls, main
from xvtools.ulib import FileType


def test_fmtname_pads():
    result = fmtname("a/b/name")
    assert result == "name" + " " * (DIRSIZ - len("name"))
    assert len(result) == DIRSIZ


def test_fmtname_no_slash():
    assert fmtname("plain").rstrip() == "plain"


def test_fmtname_long_name_unchanged():
    long = "x" * (DIRSIZ + 3)
    assert fmtname("dir/" + long) == long


def test_ls_file(tmp_path):
    path = tmp_path / "f.txt"
    data = b"abc"
    path.write_bytes(data)
    out = io.StringIO()
    ls(str(path), out)
    ino = os.stat(path).st_ino
    assert out.getvalue() == f"{fmtname(str(path))} {int(FileType.FILE)} {ino} {len(data)}\n"


def test_ls_directory(tmp_path):
    for name in ["b", "a", "c"]:
        (tmp_path / name).write_bytes(b"")
    out = io.StringIO()
    ls(str(tmp_path), out)
    lines = out.getvalue().splitlines()
    assert len(lines) == 2 + 3
    names = [line[:DIRSIZ].rstrip() for line in lines]
    assert names == [".", "..", "a", "b", "c"]
    assert lines[0].split()[1] == str(int(FileType.DIR))


def test_ls_missing(tmp_path, capsys):
    missing = tmp_path / "nope"
    out = io.StringIO()
    ls(str(missing), out)
    assert out.getvalue() == ""
    assert f"ls: cannot open {missing}" in capsys.readouterr().err


def test_ls_path_too_long(tmp_path):
    path = str(tmp_path) + "/." * 260
    out = io.StringIO()
    ls(path, out)
    assert out.getvalue() == "ls: path too long\n"


def test_main(tmp_path, capsys):
    path = tmp_path / "g"
    path.write_bytes(b"")
    assert main([str(path)]) == 0
    assert capsys.readouterr().out.startswith(fmtname(str(path)))