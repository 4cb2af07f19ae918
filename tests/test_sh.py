import pytest

from xvutils.sh import (
    BackCmd,
    ExecCmd,
    ListCmd,
    ParseError,
    PipeCmd,
    RedirCmd,
    RedirMode,
    Token,
    parse,
    tokenize,
)


def test_simple_command():
    assert parse("echo hi there\n") == ExecCmd(["echo", "hi", "there"])


def test_empty_line():
    assert parse("   \n") == ExecCmd([])


def test_nul_ends_line():
    assert parse("a\0b") == ExecCmd(["a"])


def test_pipe_is_right_associative():
    assert parse("a | b | c") == PipeCmd(
        ExecCmd(["a"]), PipeCmd(ExecCmd(["b"]), ExecCmd(["c"]))
    )


def test_list():
    assert parse("a ; b ; c") == ListCmd(
        ExecCmd(["a"]), ListCmd(ExecCmd(["b"]), ExecCmd(["c"]))
    )


def test_trailing_semicolon_gives_empty_command():
    assert parse("a ;") == ListCmd(ExecCmd(["a"]), ExecCmd([]))


def test_background_stacks():
    assert parse("a & &") == BackCmd(BackCmd(ExecCmd(["a"])))


def test_background_then_list():
    assert parse("a & ; b") == ListCmd(BackCmd(ExecCmd(["a"])), ExecCmd(["b"]))


def test_redirections_wrap_in_order():
    cmd = parse("cat < in > out")
    assert cmd == RedirCmd(
        RedirCmd(ExecCmd(["cat"]), "in", RedirMode.READ, 0),
        "out",
        RedirMode.WRITE,
        1,
    )


def test_redirection_before_words():
    assert parse("> out echo x") == RedirCmd(
        ExecCmd(["echo", "x"]), "out", RedirMode.WRITE, 1
    )


def test_append():
    assert parse("echo x >> log") == RedirCmd(
        ExecCmd(["echo", "x"]), "log", RedirMode.APPEND, 1
    )


def test_block_with_redirection():
    assert parse("(a ; b) > f") == RedirCmd(
        ListCmd(ExecCmd(["a"]), ExecCmd(["b"])), "f", RedirMode.WRITE, 1
    )


def test_leftovers():
    with pytest.raises(ParseError) as info:
        parse("a )")
    assert info.value.leftover == ")"


def test_missing_close_paren():
    with pytest.raises(ParseError, match="missing \\)"):
        parse("( a")


def test_symbol_inside_words():
    with pytest.raises(ParseError, match="syntax"):
        parse("a ( b")


def test_missing_redirection_file():
    with pytest.raises(ParseError, match="missing file"):
        parse("a > |")


def test_too_many_args():
    assert parse(" ".join("abcdefghi")) == ExecCmd(list("abcdefghi"))
    with pytest.raises(ParseError, match="too many args"):
        parse(" ".join("abcdefghij"))


def test_tokenize():
    assert tokenize("a>>b|c") == [
        Token("a", "a"),
        Token("+", ">>"),
        Token("a", "b"),
        Token("|", "|"),
        Token("a", "c"),
    ]


def test_tokenize_words_stop_at_symbols():
    assert [t.text for t in tokenize("x<y;(z)&")] == ["x", "<", "y", ";", "(", "z", ")", "&"]