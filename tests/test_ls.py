import io
import os

from xvutils.fmt import render
from xvutils.ls import DIRSIZ, FileType, fmtname, ls, main


def test_fmtname_pads_short_names():
    name = fmtname("a/b/hello")
    assert len(name) == DIRSIZ
    assert name.rstrip(" ") == "hello"


def test_fmtname_keeps_long_names():
    long_name = "a" * 20
    assert fmtname("x/" + long_name) == long_name


def test_ls_file(tmp_path):
    data = b"12345"
    path = tmp_path / "data.txt"
    path.write_bytes(data)
    out = io.StringIO()
    ls(str(path), out)
    fields = out.getvalue().split()
    assert fields[0] == "data.txt"
    assert fields[1] == str(int(FileType.FILE))
    assert fields[2] == render("%d", os.stat(path).st_ino)
    assert fields[3] == str(len(data))


def test_ls_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a.txt").write_text("abc")
    (tmp_path / "sub").mkdir()
    out = io.StringIO()
    ls(".", out)
    rows = {line.split()[0]: line.split() for line in out.getvalue().splitlines()}
    assert set(rows) == {".", "..", "a.txt", "sub"}
    assert rows["sub"][1] == str(int(FileType.DIR))
    assert rows["a.txt"][1] == str(int(FileType.FILE))


def test_ls_long_entry_cannot_be_stated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ("a" * 20)).write_text("x")
    out = io.StringIO()
    ls(".", out)
    assert f"ls: cannot stat ./{'a' * DIRSIZ}\n" in out.getvalue()


def test_ls_path_too_long(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = io.StringIO()
    ls("." + "/." * 250, out)
    assert out.getvalue() == "ls: path too long\n"


def test_main_missing(tmp_path, capsys):
    missing = str(tmp_path / "nope")
    assert main([missing]) == 0
    assert capsys.readouterr().err == f"ls: cannot open {missing}\n"