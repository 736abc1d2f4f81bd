"""Group a token stream into the commands of a pipeline."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from minishell.syntax import ParseError, Token, TokenType


@dataclass
class Redirect:
    """One redirection of a command: its target and operator kind."""

    file: str
    type: TokenType


@dataclass
class Command:
    """One command of a pipeline: its words and its redirections."""

    args: list[Token] = field(default_factory=list)
    redirects: list[Redirect] = field(default_factory=list)

    @property
    def argv(self) -> list[str]:
        """The command's words as plain strings."""
        return [token.text or "" for token in self.args]

    @property
    def name(self) -> str | None:
        """The first word, or ``None`` for a command with no words."""
        return self.args[0].text if self.args else None


def _segments(tokens: Sequence[Token]) -> Iterator[list[Token]]:
    """Yield the token runs between pipe operators."""
    current: list[Token] = []
    for token in tokens:
        if token.type == TokenType.PIPE:
            yield current
            current = []
        else:
            current.append(token)
    yield current


def _build_command(segment: list[Token]) -> Command:
    command = Command()
    stream = iter(segment)
    for token in stream:
        if TokenType(token.type).is_redirection:
            target = next(stream, None)
            if target is None or target.text is None:
                raise ParseError("newline")
            command.redirects.append(Redirect(target.text, TokenType(token.type)))
        else:
            command.args.append(dataclasses.replace(token))
    return command


def build_commands(tokens: Sequence[Token]) -> list[Command]:
    """Split *tokens* at pipes into commands, separating out redirections.

    An operator token takes the token after it as its target. An empty token
    list gives no commands.
    """
    if not tokens:
        return []
    return [_build_command(segment) for segment in _segments(tokens)]


def format_commands(commands: Iterable[Command]) -> str:
    """Render *commands* as a readable dump for debugging."""
    commands = list(commands)
    lines = [
        f"Command Count: {len(commands)}",
        f"Pipe Count: {max(len(commands) - 1, 0)}",
        "Commands:",
    ]
    for i, command in enumerate(commands):
        lines.append(f"Command[{i}]:")
        lines.append(f"  Token Count: {len(command.args)}")
        lines.append(f"  Redirect Count: {len(command.redirects)}")
        lines.append("  Tokens:")
        for k, token in enumerate(command.args):
            lines.append(f"  Token[{k}]:")
            lines.append(f"    Token String: {token.text}")
            lines.append(f"    Token Type: {int(token.type)}")
            lines.append(f"    Builtin Type: {int(token.builtin)}")
        lines.append("  Redirects:")
        for k, redirect in enumerate(command.redirects):
            lines.append(f"  Redirect[{k}]:")
            lines.append(f"    File: {redirect.file}")
            lines.append(f"    Type: {int(redirect.type)}")
    return "\n".join(lines) + "\n"