"""The shell's ordered table of environment variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class Environment:
    """Ordered variables; a value of ``None`` marks a name exported without one."""

    def __init__(self) -> None:
        self._vars: dict[str, str | None] = {}

    @classmethod
    def from_envp(cls, envp: Iterable[str]) -> "Environment":
        """Build from ``KEY=VALUE`` strings; entries without ``=`` are ignored."""
        env = cls()
        for entry in envp:
            key, sep, value = entry.partition("=")
            if sep:
                env._vars.setdefault(key, value)
        return env

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "Environment":
        """Build from a mapping such as ``os.environ``."""
        env = cls()
        for key, value in mapping.items():
            env._vars.setdefault(key, value)
        return env

    def get(self, key: str) -> str | None:
        """Return the value of *key*, or ``None`` when unset or valueless."""
        return self._vars.get(key)

    def set(self, key: str, value: str | None) -> None:
        """Change the value of an existing variable; unknown names are left alone."""
        if key in self._vars:
            self._vars[key] = value

    def add(self, key: str, value: str | None) -> None:
        """Define *key*, replacing any earlier entry and moving it to the end."""
        self._vars.pop(key, None)
        self._vars[key] = value

    def unset(self, key: str) -> None:
        """Remove *key* if it is defined."""
        self._vars.pop(key, None)

    def items(self) -> Iterator[tuple[str, str | None]]:
        """Iterate over ``(key, value)`` pairs in definition order."""
        return iter(list(self._vars.items()))

    def to_envp(self) -> list[str]:
        """Render as ``KEY=VALUE`` strings for a child process."""
        return [f"{key}={'' if value is None else value}" for key, value in self._vars.items()]

    def __len__(self) -> int:
        return len(self._vars)

    def __contains__(self, key: object) -> bool:
        return key in self._vars