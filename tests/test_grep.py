import io

import pytest

from xvtools.grep import grep, main, match, matchhere, matchstar


@pytest.mark.parametrize(
    "re, text, expected",
    [
        ("abc", "xxabcxx", True),
        ("abc", "abx", False),
        ("^abc", "abcdef", True),
        ("^abc", "xabc", False),
        ("abc$", "xxabc", True),
        ("abc$", "abcx", False),
        ("a.c", "abc", True),
        ("a.c", "ac", False),
        ("ab*c", "ac", True),
        ("ab*c", "abbbbc", True),
        ("ab*c", "abxc", False),
        ("^.*$", "", True),
        ("", "anything", True),
        ("$", "", True),
        ("x*", "", True),
        (".*z", "abcz", True),
    ],
)
def test_match(re, text, expected):
    assert match(re, text) is expected


def test_matchhere_anchored():
    assert matchhere("ab", "abc") is True
    assert matchhere("bc", "abc") is False


def test_matchstar():
    assert matchstar("a", "b", "aaab") is True
    assert matchstar("a", "b", "aaxb") is False
    assert matchstar(".", "z", "xyz") is True


def test_grep_prints_matching_lines():
    out = io.StringIO()
    grep("an", io.StringIO("apple\nbanana\ncherry\n"), out)
    assert out.getvalue() == "banana\n"


def test_grep_ignores_unterminated_last_line():
    out = io.StringIO()
    grep("y", io.StringIO("x\nyz"), out)
    assert out.getvalue() == ""


def test_grep_stops_when_line_fills_buffer():
    out = io.StringIO()
    grep("b", io.StringIO("a" * 2000 + "\nb\n"), out)
    assert out.getvalue() == ""


def test_grep_lines_across_reads():
    lines = [f"line{i} {'k' if i % 3 == 0 else 'n'}" for i in range(500)]
    out = io.StringIO()
    grep("k$", io.StringIO("\n".join(lines) + "\n"), out)
    expected = [line for line in lines if line.endswith("k")]
    assert out.getvalue().splitlines() == expected


def test_main_usage(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "missing"
    assert main(["x", str(missing)]) == 1
    assert capsys.readouterr().out == f"grep: cannot open {missing}\n"


def test_main_files(tmp_path, capsys):
    f = tmp_path / "f.txt"
    f.write_text("one\ntwo\nthree\n")
    assert main(["^t", str(f)]) == 0
    assert capsys.readouterr().out == "two\nthree\n"


def test_main_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("foo\nbar\n"))
    assert main(["o"]) == 0
    assert capsys.readouterr().out == "foo\n"