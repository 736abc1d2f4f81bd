"""The interactive read-evaluate loop of the shell."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import TextIO

from minishell.builtins import ShellExit
from minishell.commands import build_commands, format_commands
from minishell.env import Environment
from minishell.executor import run_commands
from minishell.expand import QuoteError
from minishell.lexer import tokenize
from minishell.syntax import ParseError

PROMPT = "minishell % "
HEREDOC_PROMPT = "> "

PromptReader = Callable[[str], "str | None"]


def _input_line(prompt: str) -> str | None:
    """Read one line from the terminal, giving ``None`` at end of input."""
    try:
        return input(prompt)
    except EOFError:
        return None


class Shell:
    """One shell session: its variables, its last exit status and its I/O.

    *read_line* is called with a prompt and returns the next line, or
    ``None`` at end of input; it also supplies here-document lines.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        out: TextIO | None = None,
        read_line: PromptReader | None = None,
    ) -> None:
        self.env = Environment.from_mapping(os.environ if environ is None else environ)
        self.out = sys.stdout if out is None else out
        self.read_line = read_line or _input_line
        self.status = 0
        self.debug = False

    def _heredoc_line(self) -> str | None:
        return self.read_line(HEREDOC_PROMPT)

    def process_line(self, line: str) -> int:
        """Parse and run one command line, returning the new exit status.

        Syntax errors are reported on the shell's output and leave the
        status unchanged. ``exit`` raises ``ShellExit``.
        """
        try:
            tokens = tokenize(line, self.env, self.status)
            if not tokens:
                return self.status
            commands = build_commands(tokens)
        except (ParseError, QuoteError) as exc:
            self.out.write(f"{exc}\n")
            return self.status
        if self.debug:
            self.out.write(format_commands(commands))
        self.status = run_commands(
            commands, self.env, self.status, self.out, self._heredoc_line
        )
        return self.status

    def _interrupted(self) -> None:
        self.status = 130
        self.out.write("\n")

    def run(self) -> int:
        """Read and run lines until end of input or ``exit``; return the status."""
        while True:
            try:
                line = self.read_line(PROMPT)
            except KeyboardInterrupt:
                self._interrupted()
                continue
            if line is None:
                self.out.write("exit\n")
                self.out.flush()
                return self.status
            try:
                self.process_line(line)
            except ShellExit as exc:
                self.out.flush()
                return exc.code
            except KeyboardInterrupt:
                self._interrupted()


@contextlib.contextmanager
def _quiet_control_chars() -> Iterator[None]:
    """Stop the terminal from echoing control characters such as ``^C``."""
    if not sys.stdin.isatty():
        yield
        return
    try:
        import termios
    except ImportError:
        yield
        return
    fd = sys.stdin.fileno()
    try:
        saved = termios.tcgetattr(fd)
    except termios.error as exc:
        raise SystemExit(1) from exc
    changed = list(saved)
    changed[3] &= ~getattr(termios, "ECHOCTL", 0)
    try:
        termios.tcsetattr(fd, termios.TCSANOW, changed)
    except termios.error as exc:
        raise SystemExit(1) from exc
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSANOW, saved)


def main(argv: Sequence[str] | None = None) -> int:
    """Start an interactive session on the terminal; return its exit status."""
    with contextlib.suppress(ImportError):
        import readline  # noqa: F401  (enables line editing and history for input())
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    with _quiet_control_chars():
        shell = Shell(os.environ, sys.stdout)
        return shell.run()


if __name__ == "__main__":
    sys.exit(main())