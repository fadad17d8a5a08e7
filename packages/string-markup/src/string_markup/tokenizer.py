"""Tokenizer for the markup tag language.

Outside a tag everything up to the next unescaped ``<`` is a single text
token.  Inside a tag whitespace is skipped and the input is split into words,
quoted strings and the ``/``, ``=`` and ``>`` delimiters.

Escapes: in text, ``\\<`` is a literal ``<`` and ``\\\\`` a literal
backslash.  In quoted strings, a backslash escapes the matching quote or
another backslash.  Any other backslash is kept as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from string_markup.errors import TokenizeError


class TokenType(Enum):
    TEXT = auto()
    SLASH = auto()  # /
    LESS = auto()  # <
    EQUALS = auto()  # =
    GREATER = auto()  # >
    WORD = auto()
    STRING = auto()
    EOF = auto()


@dataclass(frozen=True)
class Position:
    """Source position: 0-based offset, 1-based line and column."""

    offset: int
    line: int
    column: int


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    position: Position


_SINGLE_CHAR_TOKENS = {
    "/": TokenType.SLASH,
    "=": TokenType.EQUALS,
    ">": TokenType.GREATER,
}

_WHITESPACE = frozenset(" \t\r\n")


def is_word_char(ch: str) -> bool:
    """Return True if *ch* may appear in a tag or attribute name."""
    return ch.isalnum() or ch in "_-.:"


class _Tokenizer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.index = 0
        self.tokens: list[Token] = []
        # line bookkeeping up to offset _scanned
        self._scanned = 0
        self._line = 1
        self._line_start = 0

    def run(self) -> list[Token]:
        n = len(self.text)
        while self.index < n:
            if self.text[self.index] == "<":
                self._push(TokenType.LESS, "<", self.index)
                self.index += 1
                self._read_tag()
            else:
                self._read_text()
        self._push(TokenType.EOF, "", n)
        return self.tokens

    def _position(self, offset: int) -> Position:
        """Position of *offset*; offsets must not decrease between calls."""
        newlines = self.text.count("\n", self._scanned, offset)
        if newlines:
            self._line += newlines
            self._line_start = self.text.rfind("\n", self._scanned, offset) + 1
        self._scanned = offset
        return Position(offset, self._line, offset - self._line_start + 1)

    def _push(self, type_: TokenType, value: str, offset: int) -> None:
        self.tokens.append(Token(type_, value, self._position(offset)))

    def _read_text(self) -> None:
        start = self.index
        text = self.text
        parts: list[str] = []
        while self.index < len(text):
            ch = text[self.index]
            if ch == "<":
                break
            if ch == "\\" and self.index + 1 < len(text) and text[self.index + 1] in "<\\":
                parts.append(text[self.index + 1])
                self.index += 2
                continue
            parts.append(ch)
            self.index += 1
        self._push(TokenType.TEXT, "".join(parts), start)

    def _read_tag(self) -> None:
        text = self.text
        while self.index < len(text):
            ch = text[self.index]

            if ch in _WHITESPACE:
                self.index += 1
                continue

            if ch in _SINGLE_CHAR_TOKENS:
                self._push(_SINGLE_CHAR_TOKENS[ch], ch, self.index)
                self.index += 1
                if ch == ">":
                    return
                continue

            if ch in ("'", '"'):
                self._read_string(ch)
                continue

            if is_word_char(ch):
                start = self.index
                while self.index < len(text) and is_word_char(text[self.index]):
                    self.index += 1
                self._push(TokenType.WORD, text[start : self.index], start)
                continue

            raise TokenizeError(f"Unexpected character {ch!r} inside tag", self._position(self.index))

        raise TokenizeError("Unexpected end of input inside tag", self._position(len(text)))

    def _read_string(self, quote: str) -> None:
        text = self.text
        start = self.index
        self.index += 1
        parts: list[str] = []
        while self.index < len(text):
            ch = text[self.index]
            if ch == "\\" and self.index + 1 < len(text) and text[self.index + 1] in (quote, "\\"):
                parts.append(text[self.index + 1])
                self.index += 2
                continue
            if ch == quote:
                self.index += 1
                self._push(TokenType.STRING, "".join(parts), start)
                return
            parts.append(ch)
            self.index += 1
        raise TokenizeError("Unterminated string", self._position(start))


def tokenize(markup: str) -> list[Token]:
    """Split *markup* into tokens. The last token is always ``EOF``."""
    return _Tokenizer(markup).run()
