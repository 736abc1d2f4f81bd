"""Variable expansion and quote handling for command lines."""

from __future__ import annotations

from minishell.env import Environment
from minishell.textutils import is_name_char


class QuoteError(Exception):
    """Raised when a quoted section has no closing quote."""

    def __init__(self, quote: str) -> None:
        self.quote = quote
        super().__init__(
            f"syntax error: unexpected EOF while looking for matching `{quote}'"
        )


def expand_variable(
    text: str, index: int, env: Environment, status: int
) -> tuple[str, int]:
    """Expand the ``$`` reference at *index*.

    Returns the expanded value and the index just past the reference.
    ``$?`` gives the last exit status, a ``$`` not followed by a name
    character stays a literal ``$``, and unknown or valueless variables
    expand to the empty string.
    """
    if text[index:index + 1] != "$":
        raise ValueError(f"no variable reference at index {index}")
    following = text[index + 1:index + 2]
    if following == "?":
        return str(status), index + 2
    if not following or not is_name_char(following):
        return "$", index + 1
    end = index + 1
    while end < len(text) and is_name_char(text[end]):
        end += 1
    value = env.get(text[index + 1:end])
    return ("" if value is None else value), end


def quotes_balanced(text: str, quote: str) -> bool:
    """Tell whether *quote* occurs an even number of times in *text*."""
    return text.count(quote) % 2 == 0


def single_quoted(text: str, index: int) -> tuple[str, int]:
    """Read a single-quoted section starting at *index*, without expansion.

    Returns the content and the index just past the closing quote.
    """
    if not quotes_balanced(text, "'"):
        raise QuoteError("'")
    i = index
    if text[i:i + 1] == "'":
        i += 1
    end = text.find("'", i)
    if end == -1:
        raise QuoteError("'")
    return text[i:end], end + 1


def double_quoted(
    text: str, index: int, env: Environment, status: int
) -> tuple[str, int]:
    """Read a double-quoted section starting at *index*, expanding variables.

    Returns the content and the index just past the closing quote.
    """
    if not quotes_balanced(text, '"'):
        raise QuoteError('"')
    i = index
    if text[i:i + 1] == '"':
        i += 1
    parts: list[str] = []
    while i < len(text) and text[i] != '"':
        if text[i] == "$":
            value, i = expand_variable(text, i, env, status)
            parts.append(value)
        else:
            parts.append(text[i])
            i += 1
    if i < len(text) and text[i] == '"':
        i += 1
    return "".join(parts), i


def _count_quoted(
    text: str, i: int, env: Environment, status: int
) -> tuple[int, int]:
    quote = text[i]
    i += 1
    count = 0
    while i < len(text) and text[i] != quote:
        if quote == '"' and text[i] == "$":
            value, i = expand_variable(text, i, env, status)
            count += len(value)
        else:
            count += 1
            i += 1
    if i < len(text) and text[i] == quote:
        i += 1
    return count, i


def _count_unquoted(
    text: str, i: int, env: Environment, status: int
) -> tuple[int, int]:
    count = 0
    while i < len(text) and text[i] not in " '\"":
        if text[i] == "$":
            value, i = expand_variable(text, i, env, status)
            count += len(value)
        else:
            count += 1
            i += 1
    return count, i


def count_tokens(text: str, env: Environment, status: int) -> int:
    """Return an upper bound on the number of tokens *text* can produce.

    Each word contributes its expanded length plus one, which is always at
    least as many slots as the tokenizer fills.
    """
    count = 0
    i = 0
    while i < len(text):
        while i < len(text) and text[i] == " ":
            i += 1
        if i >= len(text):
            break
        if text[i] in "'\"":
            size, i = _count_quoted(text, i, env, status)
        else:
            size, i = _count_unquoted(text, i, env, status)
        count += size + 1
    return count