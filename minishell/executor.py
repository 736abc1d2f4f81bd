"""Run the commands of a pipeline, builtins in the shell and others as processes."""

from __future__ import annotations

import copy
import io
import os
import signal
import subprocess
import sys
import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TextIO, TypeVar

from minishell.builtins import ShellExit, is_builtin, run_builtin
from minishell.commands import Command
from minishell.env import Environment
from minishell.redirs import RedirectionError, open_redirections
from minishell.textutils import split_nonempty

ReadLine = Callable[[], "str | None"]
_T = TypeVar("_T")


def find_path(command: str, env: Environment) -> str | None:
    """Return the first executable ``dir/command`` along ``PATH``, or ``None``."""
    path_value = env.get("PATH")
    if path_value is None:
        return None
    for directory in split_nonempty(path_value, ":"):
        candidate = f"{directory}/{command}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def status_from_returncode(returncode: int, previous: int) -> int:
    """Fold one finished command's return code into the shell's exit status.

    A normal exit gives its code, except that a previous status of 1 sticks.
    Death by SIGINT gives 130; other signals leave the status unchanged.
    """
    if returncode >= 0:
        return 1 if previous == 1 else returncode
    if -returncode == signal.SIGINT:
        return 130
    return previous


@dataclass
class _Stage:
    status: int = 0
    process: subprocess.Popen | None = None
    captured: bool = False
    feeder: threading.Thread | None = None


def _out_fd(out: TextIO) -> int | None:
    try:
        return out.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _feed(fd: int, data: bytes) -> threading.Thread:
    """Write *data* to the pipe *fd* in the background, then close it."""

    def run() -> None:
        try:
            with os.fdopen(fd, "wb") as pipe:
                pipe.write(data)
        except OSError:
            pass

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread


def _deliver(text: str, dest, out: TextIO) -> threading.Thread | None:
    """Send *text* to a redirect file, a pipe descriptor or the shell's output."""
    if dest is None:
        out.write(text)
        return None
    if isinstance(dest, int):
        return _feed(os.dup(dest), text.encode("utf-8"))
    dest.write(text)
    dest.flush()
    return None


def _uninterrupted(func: Callable[[], _T]) -> _T:
    while True:
        try:
            return func()
        except KeyboardInterrupt:
            continue


def _run_builtin_stage(command: Command, env: Environment, dest, out: TextIO) -> _Stage:
    buffer = io.StringIO()
    saved_cwd = os.getcwd()
    try:
        run_builtin(command.argv, copy.deepcopy(env), buffer)
        code = 0
    except ShellExit as exc:
        code = exc.code
    finally:
        os.chdir(saved_cwd)
    feeder = _deliver(buffer.getvalue(), dest, out)
    return _Stage(status=code, feeder=feeder)


def _run_external_stage(
    command: Command, env: Environment, stdin, dest, out: TextIO
) -> _Stage:
    name = command.name
    if name is None:
        return _Stage(status=0)
    path = name if "/" in name else find_path(name, env)
    if path is None:
        feeder = _deliver(f"minishell: command not found: {name}\n", dest, out)
        return _Stage(status=127, feeder=feeder)
    captured = False
    stdout = dest
    if dest is None:
        stdout = _out_fd(out)
        if stdout is None:
            stdout = subprocess.PIPE
            captured = True
    out.flush()
    child_env = {key: ("" if value is None else value) for key, value in env.items()}
    try:
        process = subprocess.Popen(
            command.argv, executable=path, stdin=stdin, stdout=stdout, env=child_env
        )
    except OSError as exc:
        print(f"execution error: {exc.strerror or exc}", file=sys.stderr)
        return _Stage(status=1)
    return _Stage(process=process, captured=captured)


def _start_stage(
    command: Command,
    stdin_fd: int | None,
    stdout_fd: int | None,
    env: Environment,
    out: TextIO,
    read_line: ReadLine | None,
) -> _Stage:
    try:
        redirs = open_redirections(command.redirects, read_line, strict=True)
    except RedirectionError as exc:
        print(exc, file=sys.stderr)
        return _Stage(status=1)
    with redirs:
        stdin = redirs.stdin if redirs.stdin is not None else stdin_fd
        if redirs.stdout is not None:
            dest = redirs.stdout
        elif redirs.detached:
            dest = None
        else:
            dest = stdout_fd
        if is_builtin(command.name):
            return _run_builtin_stage(command, env, dest, out)
        return _run_external_stage(command, env, stdin, dest, out)


def _run_in_shell(
    command: Command, env: Environment, status: int, out: TextIO, read_line: ReadLine | None
) -> int:
    with open_redirections(command.redirects, read_line, strict=False) as redirs:
        target = redirs.stdout if redirs.stdout is not None else out
        result = run_builtin(command.argv, env, target)
        target.flush()
    return status if result is None else result


def _run_pipeline(
    commands: Sequence[Command],
    env: Environment,
    status: int,
    out: TextIO,
    read_line: ReadLine | None,
) -> int:
    stages: list[_Stage] = []
    previous_read: int | None = None
    last = len(commands) - 1
    try:
        for i, command in enumerate(commands):
            read_end, write_end = (None, None) if i == last else os.pipe()
            try:
                stages.append(
                    _start_stage(command, previous_read, write_end, env, out, read_line)
                )
            except BaseException:
                if read_end is not None:
                    os.close(read_end)
                raise
            finally:
                for fd in (previous_read, write_end):
                    if fd is not None:
                        os.close(fd)
                previous_read = None
            previous_read = read_end
    finally:
        if previous_read is not None:
            os.close(previous_read)
    for stage in stages:
        if stage.process is not None and stage.captured:
            data, _ = _uninterrupted(stage.process.communicate)
            out.write(data.decode("utf-8", errors="replace"))
    for stage in stages:
        if stage.process is not None:
            code = _uninterrupted(stage.process.wait)
        else:
            code = stage.status
        if stage.feeder is not None:
            stage.feeder.join()
        status = status_from_returncode(code, status)
    return status


def run_commands(
    commands: Iterable[Command],
    env: Environment,
    status: int,
    out: TextIO,
    read_line: ReadLine | None = None,
) -> int:
    """Run a pipeline and return the new exit status.

    A lone builtin runs in the shell itself and may change *env*; ``exit``
    there raises ``ShellExit``. Everything else runs as a separate stage
    whose changes to the environment are not kept.
    """
    commands = list(commands)
    if not commands:
        return status
    if len(commands) == 1 and is_builtin(commands[0].name):
        return _run_in_shell(commands[0], env, status, out, read_line)
    return _run_pipeline(commands, env, status, out, read_line)