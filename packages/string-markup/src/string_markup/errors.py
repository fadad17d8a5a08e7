"""Error types raised while tokenizing, parsing and rendering markup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from string_markup.tokenizer import Position


class MarkupError(ValueError):
    """Base class for all markup errors. Carries the source position."""

    def __init__(self, message: str, position: Position | None = None) -> None:
        self.message = message
        self.position = position
        super().__init__(self._format())

    def _format(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (line {self.position.line}, column {self.position.column})"


class TokenizeError(MarkupError):
    """Malformed lexical input: unterminated string or tag."""


class ParseError(MarkupError):
    """Unexpected token while parsing."""


class UnknownTagError(ParseError):
    """Tag name outside the fixed vocabulary."""


class MismatchedTagError(ParseError):
    """Close tag that does not match the open tag, or a tag never closed."""


class InvalidAttributeError(MarkupError):
    """Attribute value that is invalid for a known tag."""


class DepthExceededError(MarkupError):
    """Nesting deeper than the configured limit."""


@dataclass(frozen=True)
class MarkupDiagnostic:
    """A non-fatal problem found while rendering, e.g. a malformed table."""

    message: str
    position: Position | None = None
