"""Small text helpers shared by the parser and the builtins."""

from __future__ import annotations

import string

_SPACE = " \t\n\v\f\r"
_DIGITS = frozenset(string.digits)
_ALPHA = frozenset(string.ascii_letters)
_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")

_INT_MAX = 2147483647
# Value reported for any number that grows past the 32-bit range.
_OVERFLOW = 2147483649


def atoi(text: str) -> int:
    """Parse a leading integer the way the shell's numeric builtins do.

    Leading whitespace and one optional sign are accepted, parsing stops at
    the first non-digit, and a magnitude past the 32-bit range yields
    2147483649 whatever the sign.
    """
    rest = text.lstrip(_SPACE)
    sign = 1
    if rest[:1] in ("-", "+"):
        if rest[0] == "-":
            sign = -1
        rest = rest[1:]
    value = 0
    for ch in rest:
        if ch not in _DIGITS:
            break
        if value > _INT_MAX:
            return _OVERFLOW
        value = value * 10 + int(ch)
    return value * sign


def is_numeric(text: str) -> bool:
    """Tell whether *text* is made of digits, each optionally preceded by a sign."""
    chars = iter(text)
    for ch in chars:
        if ch in "+-":
            ch = next(chars, "")
        if ch not in _DIGITS:
            return False
    return True


def is_name_char(char: str) -> bool:
    """Tell whether *char* may appear in a variable name."""
    return char in _NAME_CHARS


def is_identifier(text: str) -> bool:
    """Tell whether *text* is a valid variable name."""
    if not text or (text[0] not in _ALPHA and text[0] != "_"):
        return False
    return all(is_name_char(ch) for ch in text[1:])


def split_nonempty(text: str, sep: str) -> list[str]:
    """Split *text* on the character *sep*, dropping empty pieces."""
    return [piece for piece in text.split(sep) if piece]