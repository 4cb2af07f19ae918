"""Parser for the shell's command language: words, redirections, pipes, lists and background jobs."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import NamedTuple, Union

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10


class ParseError(ValueError):
    """Raised when a command line cannot be parsed."""

    def __init__(self, message: str, leftover: str | None = None) -> None:
        super().__init__(message)
        self.leftover = leftover


class RedirMode(enum.Enum):
    """How a redirected file is opened."""

    READ = "<"
    WRITE = ">"
    APPEND = ">>"


@dataclass
class ExecCmd:
    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    cmd: "Command"
    file: str
    mode: RedirMode
    fd: int


@dataclass
class PipeCmd:
    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class Token(NamedTuple):
    """A lexical token; ``kind`` is ``"a"`` for a word, ``"+"`` for ``>>``, else the symbol."""

    kind: str
    text: str


_REDIRECTIONS = {
    "<": (RedirMode.READ, 0),
    ">": (RedirMode.WRITE, 1),
    "+": (RedirMode.APPEND, 1),
}


class _Parser:
    def __init__(self, line: str) -> None:
        self.text = line.split("\0", 1)[0]
        self.pos = 0

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _skip_space(self) -> None:
        while not self.at_end and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def peek(self, toks: str) -> bool:
        self._skip_space()
        return not self.at_end and self.text[self.pos] in toks

    def next_token(self) -> Token | None:
        self._skip_space()
        if self.at_end:
            return None
        start = self.pos
        c = self.text[start]
        self.pos += 1
        if c in "|();&<":
            kind = c
        elif c == ">":
            kind = ">"
            if self.text.startswith(">", self.pos):
                kind = "+"
                self.pos += 1
        else:
            kind = "a"
            while not self.at_end and self.text[self.pos] not in WHITESPACE + SYMBOLS:
                self.pos += 1
        token = Token(kind, self.text[start:self.pos])
        self._skip_space()
        return token

    def parse_line(self) -> Command:
        cmd = self.parse_pipe()
        while self.peek("&"):
            self.next_token()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.next_token()
            cmd = ListCmd(cmd, self.parse_line())
        return cmd

    def parse_pipe(self) -> Command:
        cmd = self.parse_exec()
        if self.peek("|"):
            self.next_token()
            cmd = PipeCmd(cmd, self.parse_pipe())
        return cmd

    def parse_redirs(self, cmd: Command) -> Command:
        while self.peek("<>"):
            op = self.next_token()
            target = self.next_token()
            if target is None or target.kind != "a":
                raise ParseError("missing file for redirection")
            assert op is not None
            mode, fd = _REDIRECTIONS[op.kind]
            cmd = RedirCmd(cmd, target.text, mode, fd)
        return cmd

    def parse_block(self) -> Command:
        if not self.peek("("):
            raise ParseError("parseblock")
        self.next_token()
        cmd = self.parse_line()
        if not self.peek(")"):
            raise ParseError("syntax - missing )")
        self.next_token()
        return self.parse_redirs(cmd)

    def parse_exec(self) -> Command:
        if self.peek("("):
            return self.parse_block()
        exec_cmd = ExecCmd()
        cmd = self.parse_redirs(exec_cmd)
        while not self.peek("|)&;"):
            token = self.next_token()
            if token is None:
                break
            if token.kind != "a":
                raise ParseError("syntax")
            exec_cmd.argv.append(token.text)
            if len(exec_cmd.argv) >= MAXARGS:
                raise ParseError("too many args")
            cmd = self.parse_redirs(cmd)
        return cmd


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into the tokens the parser sees."""
    parser = _Parser(line)
    tokens = []
    while (token := parser.next_token()) is not None:
        tokens.append(token)
    return tokens


def parse(line: str) -> Command:
    """Parse one command line into a command tree."""
    parser = _Parser(line)
    cmd = parser.parse_line()
    parser.peek("")
    if not parser.at_end:
        raise ParseError("syntax", leftover=parser.text[parser.pos:])
    return cmd