"""Recursive-descent parser building the markup tree from tokens.

Grammar::

    children := (TEXT | tag)*
    tag      := LESS WORD attr* (GREATER children LESS SLASH WORD GREATER
                                 | SLASH GREATER)
    attr     := WORD (EQUALS STRING)?

Only syntax is checked here; table/list structure is left to the renderer.
"""

from __future__ import annotations

import sys

from string_markup.errors import DepthExceededError, MismatchedTagError, ParseError, UnknownTagError
from string_markup.nodes import ChildNode, MarkupTagName, TagAttributes, TagNode, TextNode
from string_markup.tokenizer import Token, TokenType, tokenize

DEFAULT_MAX_DEPTH = 100

# stack frames spent per nesting level, with headroom for the caller
_FRAMES_PER_LEVEL = 8


def clamp_depth(max_depth: int) -> int:
    """Limit *max_depth* so that nesting fails before the interpreter stack does."""
    return max(1, min(max_depth, sys.getrecursionlimit() // _FRAMES_PER_LEVEL))


class _Parser:
    def __init__(self, tokens: list[Token], max_depth: int) -> None:
        self.tokens = tokens
        self.index = 0
        self.max_depth = max_depth

    def _peek(self, ahead: int = 0) -> Token:
        i = min(self.index + ahead, len(self.tokens) - 1)
        return self.tokens[i]

    def _next(self) -> Token:
        tok = self._peek()
        if tok.type is not TokenType.EOF:
            self.index += 1
        return tok

    def _expect(self, type_: TokenType) -> Token:
        tok = self._next()
        if tok.type is not type_:
            raise ParseError(f"Expected {type_.name.lower()} but got {_describe(tok)}", tok.position)
        return tok

    def parse_children(self, parent: TagNode | None, depth: int) -> list[ChildNode]:
        children: list[ChildNode] = []
        while True:
            tok = self._peek()

            if tok.type is TokenType.EOF:
                if parent is not None:
                    raise MismatchedTagError(f"Unclosed tag <{parent.name.value}>", parent.position)
                return children

            if tok.type is TokenType.TEXT:
                self._next()
                children.append(TextNode(tok.value))
                continue

            if tok.type is TokenType.LESS and self._peek(1).type is TokenType.SLASH:
                self._close_tag(parent)
                return children

            if tok.type is TokenType.LESS:
                children.append(self._tag(depth + 1))
                continue

            raise ParseError(f"Unexpected {_describe(tok)}", tok.position)

    def _close_tag(self, parent: TagNode | None) -> None:
        self._expect(TokenType.LESS)
        self._expect(TokenType.SLASH)
        name = self._expect(TokenType.WORD)
        if parent is None:
            raise MismatchedTagError(f"Unexpected closing tag </{name.value}>", name.position)
        if name.value != parent.name.value:
            raise MismatchedTagError(
                f"Expected closing tag </{parent.name.value}> but got </{name.value}>",
                name.position,
            )
        self._expect(TokenType.GREATER)

    def _tag(self, depth: int) -> TagNode:
        start = self._expect(TokenType.LESS)
        if depth > self.max_depth:
            raise DepthExceededError(f"Markup nested deeper than {self.max_depth} tags", start.position)

        name_tok = self._expect(TokenType.WORD)
        try:
            name = MarkupTagName(name_tok.value)
        except ValueError:
            raise UnknownTagError(f"Unknown tag <{name_tok.value}>", name_tok.position) from None

        attributes: TagAttributes = {}
        while self._peek().type is TokenType.WORD:
            key = self._next().value
            if self._peek().type is TokenType.EQUALS:
                self._next()
                attributes[key] = self._expect(TokenType.STRING).value
            else:
                attributes[key] = None

        node = TagNode(name, attributes, [], start.position)

        if self._peek().type is TokenType.SLASH:
            self._next()
            self._expect(TokenType.GREATER)
            return node

        self._expect(TokenType.GREATER)
        node.children = self.parse_children(node, depth)
        return node


def _describe(tok: Token) -> str:
    if tok.type is TokenType.EOF:
        return "end of input"
    return f"{tok.type.name.lower()} {tok.value!r}"


def parse_markup(markup: str, *, max_depth: int = DEFAULT_MAX_DEPTH) -> list[ChildNode]:
    """Parse *markup* into a list of top-level nodes.

    Raises a :class:`~string_markup.errors.MarkupError` subclass on the first
    problem; no partial tree is returned.
    """
    parser = _Parser(tokenize(markup), clamp_depth(max_depth))
    return parser.parse_children(None, 0)
