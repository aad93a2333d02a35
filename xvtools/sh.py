"""Command-line parser for the small shell: pipes, lists, background jobs,
redirections and parenthesised blocks."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import NamedTuple, Union

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10

READ = os.O_RDONLY
WRITE = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
WRITE_NO_TRUNC = os.O_WRONLY | os.O_CREAT


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""

    def __init__(self, message: str, leftovers: str | None = None) -> None:
        super().__init__(message if leftovers is None else f"{message}: leftovers: {leftovers}")
        self.leftovers = leftovers


@dataclass
class ExecCmd:
    """Run a program with its arguments."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run ``cmd`` with descriptor ``fd`` reopened on ``file``."""

    cmd: "Cmd"
    file: str
    mode: int
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of ``left`` to the input of ``right``."""

    left: "Cmd"
    right: "Cmd"


@dataclass
class ListCmd:
    """Run ``left``, wait for it, then run ``right``."""

    left: "Cmd"
    right: "Cmd"


@dataclass
class BackCmd:
    """Run ``cmd`` without waiting for it."""

    cmd: "Cmd"


Cmd = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class _Token(NamedTuple):
    kind: str  # "" at end of input, "a" for a word, "+" for ">>", else the symbol
    start: int
    end: int
    pos: int


def _skip(s: str, pos: int) -> int:
    while pos < len(s) and s[pos] in WHITESPACE:
        pos += 1
    return pos


def gettoken(s: str, pos: int = 0) -> _Token:
    """Read the token at ``pos``; return its kind, span and the position after it."""
    pos = _skip(s, pos)
    start = pos
    if pos >= len(s):
        kind = ""
    elif s[pos] in "|();&<":
        kind = s[pos]
        pos += 1
    elif s[pos] == ">":
        pos += 1
        kind = ">"
        if pos < len(s) and s[pos] == ">":
            kind = "+"
            pos += 1
    else:
        kind = "a"
        while pos < len(s) and s[pos] not in WHITESPACE and s[pos] not in SYMBOLS:
            pos += 1
    return _Token(kind, start, pos, _skip(s, pos))


def peek(s: str, pos: int, toks: str) -> tuple[bool, int]:
    """Skip whitespace; report whether the next character is one of ``toks``."""
    pos = _skip(s, pos)
    return (pos < len(s) and s[pos] in toks, pos)


class _Parser:
    def __init__(self, s: str) -> None:
        self.s = s
        self.pos = 0

    def peek(self, toks: str) -> bool:
        found, self.pos = peek(self.s, self.pos, toks)
        return found

    def token(self) -> _Token:
        tok = gettoken(self.s, self.pos)
        self.pos = tok.pos
        return tok

    def line(self) -> Cmd:
        cmd = self.pipe()
        while self.peek("&"):
            self.token()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.token()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self) -> Cmd:
        cmd = self.exec()
        if self.peek("|"):
            self.token()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self, cmd: Cmd) -> Cmd:
        while self.peek("<>"):
            op = self.token().kind
            target = self.token()
            if target.kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            name = self.s[target.start:target.end]
            if op == "<":
                cmd = RedirCmd(cmd, name, READ, 0)
            elif op == ">":
                cmd = RedirCmd(cmd, name, WRITE, 1)
            else:
                cmd = RedirCmd(cmd, name, WRITE_NO_TRUNC, 1)
        return cmd

    def block(self) -> Cmd:
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.token()
        cmd = self.line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.token()
        return self.redirs(cmd)

    def exec(self) -> Cmd:
        if self.peek("("):
            return self.block()
        ecmd = ExecCmd()
        ret = self.redirs(ecmd)
        while not self.peek("|)&;"):
            tok = self.token()
            if tok.kind == "":
                break
            if tok.kind != "a":
                raise ShellSyntaxError("syntax")
            ecmd.argv.append(self.s[tok.start:tok.end])
            if len(ecmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.redirs(ret)
        return ret


def parsecmd(s: str) -> Cmd:
    """Parse a whole command line into a command tree."""
    parser = _Parser(s)
    cmd = parser.line()
    parser.peek("")
    if parser.pos != len(s):
        raise ShellSyntaxError("syntax", leftovers=s[parser.pos:])
    return cmd