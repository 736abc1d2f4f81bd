"""Token kinds and the operator rules of the command-line syntax."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

_OPERATOR_CHARS = "<>|"


class TokenType(IntEnum):
    """Role of a token in a command line."""

    EMPTY = 0
    COMMAND = 1
    ARGUMENT = 2
    REDIR_INPUT = 3
    REDIR_OUTPUT = 4
    REDIR_APPEND = 5
    REDIR_HERE_DOC = 6
    PIPE = 7

    @property
    def is_redirection(self) -> bool:
        return TokenType.REDIR_INPUT <= self <= TokenType.REDIR_HERE_DOC


class Builtin(IntEnum):
    """Commands the shell runs itself."""

    NONE = 0
    ECHO = 1
    CD = 2
    PWD = 3
    EXPORT = 4
    UNSET = 5
    ENV = 6
    EXIT = 7


_BUILTINS = {
    "echo": Builtin.ECHO,
    "cd": Builtin.CD,
    "pwd": Builtin.PWD,
    "export": Builtin.EXPORT,
    "unset": Builtin.UNSET,
    "env": Builtin.ENV,
    "exit": Builtin.EXIT,
}


@dataclass
class Token:
    """One word or operator of a command line."""

    text: str | None = None
    type: TokenType = TokenType.EMPTY
    builtin: Builtin = Builtin.NONE


class ParseError(Exception):
    """Raised for a syntax error; ``token`` is the offending token text."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"syntax error near unexpected token `{token}'")


def builtin_type(command: str) -> Builtin:
    """Return which builtin *command* names, or ``Builtin.NONE``."""
    return _BUILTINS.get(command, Builtin.NONE)


def _check_target(text: str, start: int) -> None:
    """Make sure a redirection operator ending at *start* has a target."""
    k = start
    while k < len(text) and text[k] == " ":
        k += 1
    if k >= len(text):
        raise ParseError("newline")
    if text[k] in _OPERATOR_CHARS:
        width = 2 if text[k + 1:k + 2] in ("<", ">") and k + 1 < len(text) else 1
        raise ParseError(text[k:k + width])


def redirection_symbol(text: str, index: int) -> tuple[Token, int]:
    """Read a redirection operator that starts a word at *index*.

    Returns the operator token and the index just past the operator. Raises
    ``ParseError`` when no file name follows or another operator does.
    """
    if text[index:index + 2] == "<<":
        symbol, kind = "<<", TokenType.REDIR_HERE_DOC
    elif text[index:index + 2] == ">>":
        symbol, kind = ">>", TokenType.REDIR_APPEND
    elif text[index:index + 1] == "<":
        symbol, kind = "<", TokenType.REDIR_INPUT
    elif text[index:index + 1] == ">":
        symbol, kind = ">", TokenType.REDIR_OUTPUT
    else:
        raise ValueError(f"no redirection at index {index}")
    end = index + len(symbol)
    _check_target(text, end)
    return Token(symbol, kind), end


def pipe_token(text: str, index: int) -> tuple[Token, int]:
    """Read the pipe operator at *index*."""
    if text[index:index + 1] != "|":
        raise ValueError(f"no pipe at index {index}")
    return Token("|", TokenType.PIPE), index + 1


def double_operator(text: str, index: int) -> tuple[Token, int]:
    """Read a redirection operator found in the middle of a word.

    Two-character operators directly followed by another operator character
    are rejected with ``ParseError`` naming the last operator character of
    the run.
    """
    pair = text[index:index + 2]
    if pair in ("<<", ">>"):
        if text[index + 2:index + 3] in ("<", ">", "|") and index + 2 < len(text):
            i = index
            while i < len(text) and text[i] in _OPERATOR_CHARS:
                i += 1
            raise ParseError(text[i - 1])
        kind = TokenType.REDIR_HERE_DOC if pair == "<<" else TokenType.REDIR_APPEND
        return Token(pair, kind), index + 2
    char = text[index:index + 1]
    if char == ">":
        return Token(">", TokenType.REDIR_OUTPUT), index + 1
    if char == "<":
        return Token("<", TokenType.REDIR_INPUT), index + 1
    raise ValueError(f"no redirection at index {index}")