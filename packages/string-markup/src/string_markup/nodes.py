"""Markup syntax tree shared by the parser and the renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from string_markup.tokenizer import Position


class MarkupTagName(str, Enum):
    """The closed set of tag names understood by the parser."""

    TOKEN = "token"
    HR = "hr"
    PAD = "pad"
    GRAMMAR_NUMBER = "grammarNumber"
    COMMAND = "command"
    INVERSE = "inverse"
    DIM = "dim"
    EMPHASIS = "emphasis"
    NUMBER = "number"
    HYPERLINK = "hyperlink"
    FILELINK = "filelink"
    DURATION = "duration"
    FILESIZE = "filesize"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKE = "strike"
    ERROR = "error"
    SUCCESS = "success"
    WARN = "warn"
    INFO = "info"
    HIGHLIGHT = "highlight"
    COLOR = "color"
    TABLE = "table"
    TR = "tr"
    TD = "td"
    NOBR = "nobr"
    OL = "ol"
    UL = "ul"
    LI = "li"


TagAttributes = dict[str, Union[str, None]]


@dataclass(frozen=True)
class TextNode:
    value: str


@dataclass
class TagNode:
    name: MarkupTagName
    attributes: TagAttributes = field(default_factory=dict)
    children: list[ChildNode] = field(default_factory=list)
    position: Position | None = field(default=None, compare=False)

    def get(self, attribute: str) -> str | None:
        return self.attributes.get(attribute)

    def has(self, attribute: str) -> bool:
        return attribute in self.attributes


ChildNode = Union[TextNode, TagNode]


def text_content(node: ChildNode | list[ChildNode]) -> str:
    """Concatenate all text below *node* in document order."""
    if isinstance(node, TextNode):
        return node.value
    children = node if isinstance(node, list) else node.children
    return "".join(text_content(child) for child in children)


def is_blank(node: ChildNode) -> bool:
    """Return True for whitespace-only text nodes."""
    return isinstance(node, TextNode) and not node.value.strip()
