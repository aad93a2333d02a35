import os

from xvtools.ln import main


def test_link(tmp_path):
    old = tmp_path / "old"
    old.write_bytes(b"data")
    new = tmp_path / "new"
    assert main([str(old), str(new)]) == 0
    assert new.read_bytes() == b"data"
    assert os.stat(old).st_ino == os.stat(new).st_ino


def test_usage(capsys):
    assert main(["only"]) == 1
    assert "Usage: ln old new" in capsys.readouterr().err


def test_failure_reported(tmp_path, capsys):
    old = tmp_path / "missing"
    new = tmp_path / "new"
    assert main([str(old), str(new)]) == 0
    assert f"link {old} {new}: failed" in capsys.readouterr().err
    assert not new.exists()