"""Open the files and here-documents a command's redirections name."""

from __future__ import annotations

import os
import sys
import tempfile
from collections.abc import Callable, Iterable
from typing import BinaryIO, TextIO

from minishell.commands import Redirect
from minishell.syntax import TokenType

ReadLine = Callable[[], "str | None"]

_FILE_MODE = 0o644
_TRUNCATE = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
_APPEND = os.O_WRONLY | os.O_CREAT | os.O_APPEND


class RedirectionError(Exception):
    """Raised when a redirection target cannot be opened."""

    def __init__(self, file: str, message: str) -> None:
        self.file = file
        super().__init__(message)


def _prompt_line() -> str | None:
    try:
        return input("> ")
    except EOFError:
        return None


class Redirections:
    """The standard input and output a command gets from its redirections.

    ``stdin`` and ``stdout`` are ``None`` where no redirection applies.
    ``detached`` is set when a here-document has sent output back to the
    shell's own standard output instead of any pipe.
    """

    def __init__(self) -> None:
        self.stdin: BinaryIO | None = None
        self.stdout: TextIO | None = None
        self.detached = False

    def _replace_stdin(self, stream: BinaryIO | None) -> None:
        if self.stdin is not None:
            self.stdin.close()
        self.stdin = stream

    def _replace_stdout(self, stream: TextIO | None) -> None:
        if self.stdout is not None:
            self.stdout.close()
        self.stdout = stream

    def close(self) -> None:
        """Close every file this object holds."""
        self._replace_stdin(None)
        self._replace_stdout(None)

    def __enter__(self) -> "Redirections":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def read_heredoc(delimiter: str, read_line: ReadLine | None = None) -> str:
    """Read lines until one equals *delimiter* or input ends.

    Each line read before the delimiter is kept with a trailing newline.
    """
    reader = read_line or _prompt_line
    lines: list[str] = []
    while True:
        line = reader()
        if line is None or line == delimiter:
            break
        lines.append(line + "\n")
    return "".join(lines)


def _heredoc_file(text: str) -> BinaryIO:
    stream = tempfile.TemporaryFile("w+b")
    stream.write(text.encode("utf-8"))
    stream.seek(0)
    return stream


def _apply(redirs: Redirections, redirect: Redirect, read_line: ReadLine | None) -> None:
    kind = TokenType(redirect.type)
    if kind == TokenType.REDIR_INPUT:
        redirs._replace_stdin(open(redirect.file, "rb"))
    elif kind in (TokenType.REDIR_OUTPUT, TokenType.REDIR_APPEND):
        flags = _TRUNCATE if kind == TokenType.REDIR_OUTPUT else _APPEND
        fd = os.open(redirect.file, flags, _FILE_MODE)
        redirs._replace_stdout(os.fdopen(fd, "w", encoding="utf-8"))
    elif kind == TokenType.REDIR_HERE_DOC:
        text = read_heredoc(redirect.file, read_line)
        # A here-document restores the shell's own output before taking input.
        redirs._replace_stdout(None)
        redirs.detached = True
        redirs._replace_stdin(_heredoc_file(text))


def open_redirections(
    redirects: Iterable[Redirect],
    read_line: ReadLine | None = None,
    strict: bool = True,
) -> Redirections:
    """Open *redirects* in order; later ones replace earlier ones.

    With *strict*, a file that cannot be opened raises ``RedirectionError``;
    otherwise the error is reported on standard error and skipped.
    """
    redirs = Redirections()
    try:
        for redirect in redirects:
            try:
                _apply(redirs, redirect, read_line)
            except OSError as exc:
                message = f"open error: {exc.strerror or exc}"
                if strict:
                    raise RedirectionError(redirect.file, message) from exc
                print(message, file=sys.stderr)
    except BaseException:
        redirs.close()
        raise
    return redirs