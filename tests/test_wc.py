import io

from xvutils.wc import Counts, count, main


def test_count_text():
    text = "hello world\nfoo\n"
    counts = count(io.StringIO(text))
    assert counts.lines == text.count("\n")
    assert counts.chars == len(text)
    assert counts.words == 3


def test_count_empty():
    assert count(io.StringIO("")) == Counts(0, 0, 0)


def test_nul_separates_words():
    assert count(io.StringIO("a\0b")).words == 2


def test_bytes_and_text_agree():
    assert count(io.BytesIO(b"a  b\tc\r\n")) == count(io.StringIO("a  b\tc\r\n"))


def test_large_input_spans_chunks():
    text = "word " * 1000
    counts = count(io.StringIO(text))
    assert counts.words == 1000
    assert counts.chars == len(text)


def test_main_prints_counts(tmp_path, capsys):
    path = tmp_path / "f"
    path.write_bytes(b"one two\nthree\n")
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == f"2 3 14 {path}\n"


def test_main_missing(tmp_path, capsys):
    missing = tmp_path / "nope"
    assert main([str(missing)]) == 1
    assert capsys.readouterr().out == f"wc: cannot open {missing}\n"