"""Split a command line into typed tokens, expanding quotes and variables."""

from __future__ import annotations

from minishell.env import Environment
from minishell.expand import count_tokens, double_quoted, expand_variable, single_quoted
from minishell.syntax import (
    Builtin,
    ParseError,
    Token,
    TokenType,
    builtin_type,
    double_operator,
    pipe_token,
    redirection_symbol,
)

_WORD_STOP = " '\""
_TARGET_TYPES = {
    "<": TokenType.REDIR_INPUT,
    ">": TokenType.REDIR_OUTPUT,
    ">>": TokenType.REDIR_APPEND,
    "<<": TokenType.REDIR_HERE_DOC,
}


class _Abort(Exception):
    """Stops tokenizing without a message; the line then runs nothing."""


class Lexer:
    """Tokenizer for one command line.

    Syntax errors raise ``ParseError`` and unterminated quotes raise
    ``QuoteError``; a line that expands to nothing gives an empty list.
    """

    def __init__(self, text: str, env: Environment, status: int) -> None:
        self.text = text
        self.env = env
        self.status = status
        self._pos = 0
        self._tokens: list[Token] = []
        self._j = 0

    def tokenize(self) -> list[Token]:
        """Return the tokens of the line, in order."""
        if count_tokens(self.text, self.env, self.status) == 0:
            return []
        self._pos = 0
        self._tokens = []
        self._j = 0
        try:
            while self._pos < len(self.text):
                while self._char() in (" ", "\t"):
                    self._pos += 1
                if self._pos >= len(self.text):
                    break
                if self._step():
                    continue
                if self._slot().text is None:
                    return []
                self._assign_type()
        except _Abort:
            return []
        return self._tokens[:self._j]

    # -- slots -------------------------------------------------------------

    def _char(self, offset: int = 0) -> str:
        k = self._pos + offset
        return self.text[k] if k < len(self.text) else ""

    def _slot(self) -> Token:
        while len(self._tokens) <= self._j:
            self._tokens.append(Token())
        return self._tokens[self._j]

    def _put(self, token: Token) -> None:
        self._slot()
        self._tokens[self._j] = token
        self._j += 1

    def _append(self, piece: str) -> None:
        slot = self._slot()
        slot.text = piece if slot.text is None else slot.text + piece

    def _word_end(self, i: int) -> int:
        while i < len(self.text) and self.text[i] not in _WORD_STOP:
            i += 1
        return i

    def _skip_dollar_run(self) -> None:
        while self._char() == "$" and self._char(1) == "$":
            self._pos += 1

    # -- steps -------------------------------------------------------------

    def _step(self) -> bool:
        """Handle the text at the cursor; True when the token is finished."""
        if self._start() or self._redirection() or self._pipe():
            return True
        self._quotes()
        self._dollar()
        return self._rest()

    def _start(self) -> bool:
        text = self.text
        char = self._char()
        if text.startswith("|") or (char == "|" and self._j == 0):
            raise ParseError("|")
        if text.startswith("/") and char == "/" and self._j == 0:
            start = self._pos
            self._pos = self._word_end(start)
            self._put(Token(text[start:self._pos], TokenType.COMMAND, Builtin.NONE))
            return True
        return False

    def _redirection(self) -> bool:
        if self._char() not in ("<", ">"):
            return False
        token, self._pos = redirection_symbol(self.text, self._pos)
        self._put(token)
        return True

    def _pipe(self) -> bool:
        if self._char() != "|":
            return False
        text = self.text
        k = self._pos + 1
        while k < len(text) and text[k] == " ":
            k += 1
        if k >= len(text):
            raise ParseError("newline")
        if text[k] == "|":
            raise ParseError("|")
        token, self._pos = pipe_token(text, self._pos)
        self._put(token)
        return True

    def _quotes(self) -> None:
        char = self._char()
        if char == "'":
            quoted, self._pos = single_quoted(self.text, self._pos)
        elif char == '"':
            quoted, self._pos = double_quoted(self.text, self._pos, self.env, self.status)
        else:
            return
        self._append(quoted)

    def _dollar(self) -> None:
        if self._char() != "$":
            return
        text = self.text
        start = self._pos
        self._skip_dollar_run()
        slot = self._slot()
        if self._pos + 1 == len(text) and self._j > 0:
            slot.text = text[start:self._pos] + "$"
            self._pos += 1
            return
        prefix = text[start:self._pos]
        value, self._pos = expand_variable(text, self._pos, self.env, self.status)
        slot.text = prefix + value
        if slot.text == "" and self._pos >= len(text) and self._j == 0:
            raise _Abort
        if self._char() in ("=", "."):
            end = self._word_end(self._pos)
            slot.text += text[self._pos:end]
            self._pos = end

    def _rest(self) -> bool:
        text = self.text
        start = self._pos
        while self._pos < len(text) and text[self._pos] not in _WORD_STOP:
            char = text[self._pos]
            if char in "<>|" and self._pos + 1 == len(text):
                raise ParseError("newline")
            if char == "$":
                self._rest_dollar(start)
                return True
            if char in "<>":
                if self._pos > start:
                    self._put(Token(text[start:self._pos], TokenType.ARGUMENT, Builtin.NONE))
                token, self._pos = double_operator(text, self._pos)
                self._put(token)
                return True
            if char == "|":
                if self._slot().text is not None:
                    self._j += 1
                if self._pos > start:
                    self._put(Token(text[start:self._pos], TokenType.ARGUMENT, Builtin.NONE))
                token, self._pos = pipe_token(text, self._pos)
                self._put(token)
                return True
            self._pos += 1
        if self._pos > start:
            self._append(text[start:self._pos])
        return False

    def _rest_dollar(self, start: int) -> None:
        text = self.text
        slot = self._slot()
        if self._pos + 1 == len(text):
            if slot.text is None:
                slot.text = text[start:self._pos] + "$"
            else:
                slot.text += "$"
            self._pos += 1
            self._j += 1
            return
        self._skip_dollar_run()
        self._append(text[start:self._pos])
        value, self._pos = expand_variable(text, self._pos, self.env, self.status)
        self._append(value)
        self._j += 1

    def _assign_type(self) -> None:
        token = self._tokens[self._j]
        previous = self._tokens[self._j - 1].text if self._j > 0 else None
        if self._j == 0 or previous == "|":
            token.type = TokenType.COMMAND
            token.builtin = builtin_type(token.text)
        elif previous in _TARGET_TYPES:
            token.type = _TARGET_TYPES[previous]
        if self._char() in (" ", ""):
            self._j += 1


def tokenize(text: str, env: Environment, status: int) -> list[Token]:
    """Tokenize *text* with variables taken from *env* and ``$?`` as *status*."""
    return Lexer(text, env, status).tokenize()