"""Commands the shell runs itself.

Each builtin takes the full word list (the command name first) and writes to
*out*. It returns the new exit status, or ``None`` when the previous status
is left as it was. ``exit`` raises ``ShellExit``.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import TextIO

from minishell.env import Environment
from minishell.textutils import atoi, is_identifier, is_numeric

_BUILTIN_NAMES = frozenset({"echo", "cd", "pwd", "export", "unset", "env", "exit"})


class ShellExit(Exception):
    """Raised to end the shell with exit status ``code``."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"exit {code}")


def is_builtin(name: str | None) -> bool:
    """Tell whether *name* is one of the shell's own commands."""
    return name is not None and name in _BUILTIN_NAMES


def echo(args: Sequence[str], out: TextIO) -> int:
    """Print the arguments separated by spaces; a leading ``-n`` drops the newline."""
    words = list(args[1:])
    newline = True
    if words and words[0] == "-n":
        newline = False
        words = words[1:]
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    return 0


def pwd(out: TextIO) -> int | None:
    """Print the current working directory."""
    try:
        current = os.getcwd()
    except OSError as exc:
        print(f"getcwd error: {exc.strerror}", file=sys.stderr)
        return None
    out.write(current + "\n")
    return 0


def _update_pwd(env: Environment) -> None:
    old = env.get("PWD")
    try:
        current = os.getcwd()
    except OSError as exc:
        print(f"getcwd error: {exc.strerror}", file=sys.stderr)
        return
    if old is not None:
        env.set("OLDPWD", old)
    env.set("PWD", current)


def cd(args: Sequence[str], env: Environment, out: TextIO) -> int | None:
    """Change directory to the argument, or to ``HOME`` without one."""
    if len(args) > 2:
        out.write("cd: too many arguments\n")
        return 1
    if len(args) > 1:
        path = args[1]
    else:
        home = env.get("HOME")
        if home is None:
            out.write("cd: HOME not set\n")
            return None
        path = home
    try:
        os.chdir(path)
    except OSError as exc:
        print(f"cd: {exc.strerror}", file=sys.stderr)
        return 1
    _update_pwd(env)
    return 0


def env_command(env: Environment, out: TextIO) -> None:
    """Print every variable that has a value as ``KEY=VALUE``."""
    for key, value in env.items():
        if value is not None:
            out.write(f"{key}={value}\n")


def parse_assignment(text: str) -> tuple[str, str | None]:
    """Split ``KEY=VALUE`` into its parts; without ``=`` the value is ``None``.

    Raises ``ValueError`` when the key is not a valid identifier.
    """
    key, sep, value = text.partition("=")
    if not is_identifier(key):
        raise ValueError(f"'{text}': not a valid identifier")
    return key, (value if sep else None)


def export_print(env: Environment, out: TextIO) -> None:
    """List every variable in ``declare -x`` form."""
    for key, value in env.items():
        if value is None:
            out.write(f"declare -x {key}\n")
        else:
            out.write(f'declare -x {key}="{value}"\n')


def export(args: Sequence[str], env: Environment, out: TextIO) -> int | None:
    """Define each ``KEY[=VALUE]`` argument; stops at the first invalid one."""
    for word in args[1:]:
        try:
            key, value = parse_assignment(word)
        except ValueError as exc:
            out.write(f"{exc}\n")
            return 1
        env.add(key, value)
    return None


def unset(args: Sequence[str], env: Environment, out: TextIO) -> None:
    """Remove each named variable."""
    if len(args) < 2:
        out.write("unset: not enough arguments\n")
        return
    for key in args[1:]:
        env.unset(key)


def exit_command(args: Sequence[str], out: TextIO) -> int:
    """Leave the shell, raising ``ShellExit`` with the requested status.

    With several arguments of which the first is numeric, nothing happens
    but an error and status 1 is returned.
    """
    out.write("exit\n")
    if len(args) > 2 and is_numeric(args[1]):
        out.write("exit: too many arguments\n")
        return 1
    code = 0
    if len(args) > 1:
        if not is_numeric(args[1]):
            out.write(f"exit: {args[1]}: numeric argument required\n")
            code = 2
        else:
            code = atoi(args[1]) % 256
    raise ShellExit(code)


def run_builtin(args: Sequence[str], env: Environment, out: TextIO) -> int | None:
    """Dispatch *args* to the builtin its first word names."""
    name = args[0] if args else ""
    if name == "echo":
        return echo(args, out)
    if name == "cd":
        return cd(args, env, out)
    if name == "pwd":
        return pwd(out)
    if name == "export":
        if len(args) > 1:
            return export(args, env, out)
        export_print(env, out)
        return None
    if name == "unset":
        unset(args, env, out)
        return None
    if name == "env":
        env_command(env, out)
        return None
    if name == "exit":
        return exit_command(args, out)
    out.write(f"minishell: command not found: {name}\n")
    raise ShellExit(1)