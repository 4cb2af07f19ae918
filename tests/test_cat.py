import io

import pytest

from xvutils.cat import cat, main


def test_cat_copies_everything():
    data = bytes(range(256)) * 10
    out = io.BytesIO()
    cat(io.BytesIO(data), out)
    assert out.getvalue() == data


def test_cat_empty():
    out = io.BytesIO()
    cat(io.BytesIO(b""), out)
    assert out.getvalue() == b""


class _ShortWriter:
    def write(self, data):
        return 0


def test_cat_short_write():
    with pytest.raises(OSError, match="write error"):
        cat(io.BytesIO(b"abc"), _ShortWriter())


def test_main_concatenates(tmp_path, capsysbinary):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_bytes(b"first\n")
    b.write_bytes(b"second\n")
    assert main([str(a), str(b)]) == 0
    assert capsysbinary.readouterr().out == b"first\nsecond\n"


def test_main_missing(tmp_path, capsys):
    missing = tmp_path / "nope"
    assert main([str(missing)]) == 1
    assert capsys.readouterr().err == f"cat: cannot open {missing}\n"