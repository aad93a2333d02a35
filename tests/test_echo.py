from xvtools.echo import echo, main


def test_echo_joins():
    assert echo(["a", "b", "c"]) == "a b c\n"


def test_echo_empty():
    assert echo([]) == ""


def test_echo_single():
    assert echo(["word"]) == "word\n"


def test_main(capsys):
    assert main(["hi", "there"]) == 0
    assert capsys.readouterr().out == echo(["hi", "there"])