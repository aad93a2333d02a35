from xvtools.mkdir import main


def test_creates_directories(tmp_path):
    a, b = tmp_path / "a", tmp_path / "b"
    assert main([str(a), str(b)]) == 0
    assert a.is_dir() and b.is_dir()


def test_usage(capsys):
    assert main([]) == 1
    assert "Usage: mkdir files..." in capsys.readouterr().err


def test_stops_at_failure(tmp_path, capsys):
    existing = tmp_path / "x"
    existing.mkdir()
    later = tmp_path / "y"
    assert main([str(existing), str(later)]) == 0
    assert not later.exists()
    assert f"mkdir: {existing} failed to create" in capsys.readouterr().err