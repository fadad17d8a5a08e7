"""Resolve tag names and attributes to visual styles and formatted content.

Styles are computed per render and passed down the tree by value; nodes are
never annotated.  Colors, token classes and link targets of the innermost
tag win, emphasis flags accumulate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from string_markup.errors import InvalidAttributeError
from string_markup.humanize import (
    format_filename,
    grammar_number,
    humanize_duration,
    humanize_filesize,
    humanize_number,
)
from string_markup.nodes import MarkupTagName, TagNode, text_content
from string_markup.options import MarkupFormatOptions

logger = logging.getLogger(__name__)


class MarkupColor(str, Enum):
    BLACK = "black"
    BRIGHT_BLACK = "brightBlack"
    RED = "red"
    BRIGHT_RED = "brightRed"
    GREEN = "green"
    BRIGHT_GREEN = "brightGreen"
    YELLOW = "yellow"
    BRIGHT_YELLOW = "brightYellow"
    BLUE = "blue"
    BRIGHT_BLUE = "brightBlue"
    MAGENTA = "magenta"
    BRIGHT_MAGENTA = "brightMagenta"
    CYAN = "cyan"
    BRIGHT_CYAN = "brightCyan"
    WHITE = "white"
    BRIGHT_WHITE = "brightWhite"


class MarkupTokenType(str, Enum):
    KEYWORD = "keyword"
    NUMBER = "number"
    REGEX = "regex"
    STRING = "string"
    COMMENT = "comment"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    VARIABLE = "variable"
    ATTR_NAME = "attr-name"
    FUNCTION = "function"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class ResolvedStyle:
    fg: MarkupColor | None = None
    bg: MarkupColor | None = None
    bold: bool = False
    dim: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    inverse: bool = False
    token: MarkupTokenType | None = None
    link: str | None = None

    def inherit(
        self,
        *,
        fg: MarkupColor | None = None,
        bg: MarkupColor | None = None,
        bold: bool = False,
        dim: bool = False,
        italic: bool = False,
        underline: bool = False,
        strike: bool = False,
        inverse: bool = False,
        token: MarkupTokenType | None = None,
        link: str | None = None,
    ) -> ResolvedStyle:
        """Compose a child style onto this one."""
        return replace(
            self,
            fg=fg or self.fg,
            bg=bg or self.bg,
            bold=self.bold or bold,
            dim=self.dim or dim,
            italic=self.italic or italic,
            underline=self.underline or underline,
            strike=self.strike or strike,
            inverse=self.inverse or inverse,
            token=token or self.token,
            link=link or self.link,
        )


PLAIN = ResolvedStyle()

TOKEN_COLORS: dict[MarkupTokenType, MarkupColor | None] = {
    MarkupTokenType.KEYWORD: MarkupColor.CYAN,
    MarkupTokenType.NUMBER: MarkupColor.MAGENTA,
    MarkupTokenType.REGEX: MarkupColor.MAGENTA,
    MarkupTokenType.STRING: MarkupColor.GREEN,
    MarkupTokenType.COMMENT: MarkupColor.BRIGHT_BLACK,
    MarkupTokenType.OPERATOR: MarkupColor.YELLOW,
    MarkupTokenType.PUNCTUATION: MarkupColor.BRIGHT_BLACK,
    MarkupTokenType.VARIABLE: None,
    MarkupTokenType.ATTR_NAME: MarkupColor.YELLOW,
    MarkupTokenType.FUNCTION: MarkupColor.BLUE,
    MarkupTokenType.BOOLEAN: MarkupColor.MAGENTA,
}

HIGHLIGHT_COLORS = (
    MarkupColor.MAGENTA,
    MarkupColor.CYAN,
    MarkupColor.GREEN,
    MarkupColor.YELLOW,
    MarkupColor.BLUE,
    MarkupColor.RED,
)


# ---------------------------------------------------------------------------
# Attribute readers
# ---------------------------------------------------------------------------


def read_color(node: TagNode, attribute: str) -> MarkupColor | None:
    value = node.get(attribute)
    if value is None:
        return None
    try:
        return MarkupColor(value)
    except ValueError:
        raise InvalidAttributeError(
            f"Unknown color {value!r} for <{node.name.value} {attribute}>", node.position
        ) from None


def read_int(node: TagNode, attribute: str, default: int) -> int:
    value = node.get(attribute)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise InvalidAttributeError(
            f"Expected an integer for <{node.name.value} {attribute}>, got {value!r}", node.position
        ) from None


def read_number_content(node: TagNode) -> float:
    """Parse the text content of *node* as a number."""
    raw = text_content(node).strip().replace("_", "")
    try:
        return float(raw)
    except ValueError:
        raise InvalidAttributeError(
            f"Expected a number inside <{node.name.value}>, got {raw!r}", node.position
        ) from None


# ---------------------------------------------------------------------------
# Style resolution
# ---------------------------------------------------------------------------

_StyleRule = Callable[[TagNode, ResolvedStyle, MarkupFormatOptions], ResolvedStyle]


def _unchanged(node: TagNode, parent: ResolvedStyle, options: MarkupFormatOptions) -> ResolvedStyle:
    return parent


def _flags(**flags: bool) -> _StyleRule:
    def rule(node: TagNode, parent: ResolvedStyle, options: MarkupFormatOptions) -> ResolvedStyle:
        return parent.inherit(**flags)

    return rule


def _fg(color: MarkupColor) -> _StyleRule:
    def rule(node: TagNode, parent: ResolvedStyle, options: MarkupFormatOptions) -> ResolvedStyle:
        return parent.inherit(fg=color)

    return rule


def _color(node: TagNode, parent: ResolvedStyle, options: MarkupFormatOptions) -> ResolvedStyle:
    return parent.inherit(fg=read_color(node, "fg"), bg=read_color(node, "bg"))


def _highlight(node: TagNode, parent: ResolvedStyle, options: MarkupFormatOptions) -> ResolvedStyle:
    index = read_int(node, "i", 0)
    return parent.inherit(fg=HIGHLIGHT_COLORS[index % len(HIGHLIGHT_COLORS)])


def _token(node: TagNode, parent: ResolvedStyle, options: MarkupFormatOptions) -> ResolvedStyle:
    value = node.get("type")
    try:
        token = MarkupTokenType(value)
    except ValueError:
        logger.debug("Unknown token type %r, rendering unstyled", value)
        return parent
    return parent.inherit(token=token, fg=TOKEN_COLORS[token])


def _hyperlink(node: TagNode, parent: ResolvedStyle, options: MarkupFormatOptions) -> ResolvedStyle:
    target = node.get("target") or text_content(node)
    return parent.inherit(link=target or None, underline=True)


def _filelink(node: TagNode, parent: ResolvedStyle, options: MarkupFormatOptions) -> ResolvedStyle:
    _label, target = format_filename(
        _filelink_target(node), options.normalize_filename, options.humanize_filename
    )
    return parent.inherit(link=target, underline=True)


def _filelink_target(node: TagNode) -> str:
    target = node.get("target")
    if not target:
        raise InvalidAttributeError("<filelink> requires a target attribute", node.position)
    return target


_STYLE_RULES: dict[MarkupTagName, _StyleRule] = {
    MarkupTagName.TOKEN: _token,
    MarkupTagName.HR: _unchanged,
    MarkupTagName.PAD: _unchanged,
    MarkupTagName.GRAMMAR_NUMBER: _unchanged,
    MarkupTagName.COMMAND: _flags(italic=True),
    MarkupTagName.INVERSE: _flags(inverse=True),
    MarkupTagName.DIM: _flags(dim=True),
    MarkupTagName.EMPHASIS: _flags(bold=True),
    MarkupTagName.NUMBER: _unchanged,
    MarkupTagName.HYPERLINK: _hyperlink,
    MarkupTagName.FILELINK: _filelink,
    MarkupTagName.DURATION: _unchanged,
    MarkupTagName.FILESIZE: _unchanged,
    MarkupTagName.ITALIC: _flags(italic=True),
    MarkupTagName.UNDERLINE: _flags(underline=True),
    MarkupTagName.STRIKE: _flags(strike=True),
    MarkupTagName.ERROR: _fg(MarkupColor.RED),
    MarkupTagName.SUCCESS: _fg(MarkupColor.GREEN),
    MarkupTagName.WARN: _fg(MarkupColor.YELLOW),
    MarkupTagName.INFO: _fg(MarkupColor.BLUE),
    MarkupTagName.HIGHLIGHT: _highlight,
    MarkupTagName.COLOR: _color,
    MarkupTagName.TABLE: _unchanged,
    MarkupTagName.TR: _unchanged,
    MarkupTagName.TD: _unchanged,
    MarkupTagName.NOBR: _unchanged,
    MarkupTagName.OL: _unchanged,
    MarkupTagName.UL: _unchanged,
    MarkupTagName.LI: _unchanged,
}


def resolve_style(
    node: TagNode,
    parent: ResolvedStyle,
    options: MarkupFormatOptions,
) -> ResolvedStyle:
    """Return the style of *node* given the style it inherits."""
    return _STYLE_RULES[node.name](node, parent, options)


# ---------------------------------------------------------------------------
# Content resolution
# ---------------------------------------------------------------------------


def _number(node: TagNode, options: MarkupFormatOptions) -> str:
    text = humanize_number(read_number_content(node))
    return "~" + text if node.has("approx") else text


def _duration(node: TagNode, options: MarkupFormatOptions) -> str:
    text = humanize_duration(read_number_content(node))
    return "~" + text if node.has("approx") else text


def _filesize(node: TagNode, options: MarkupFormatOptions) -> str:
    return humanize_filesize(read_number_content(node), binary=not node.has("decimal"))


def _grammar_number(node: TagNode, options: MarkupFormatOptions) -> str:
    singular = node.get("singular")
    plural = node.get("plural")
    if singular is None or plural is None:
        raise InvalidAttributeError(
            "<grammarNumber> requires singular and plural attributes", node.position
        )
    return grammar_number(read_number_content(node), singular, plural, node.get("none"))


def _filelink_label(node: TagNode, options: MarkupFormatOptions) -> str | None:
    label, _target = format_filename(
        _filelink_target(node), options.normalize_filename, options.humanize_filename
    )
    if node.children:
        label = text_content(node)
    line = node.get("line")
    if line is not None:
        label += f":{line}"
        column = node.get("column")
        if column is not None:
            label += f":{column}"
    return label


def _hyperlink_label(node: TagNode, options: MarkupFormatOptions) -> str | None:
    if node.children:
        return None
    return node.get("target") or ""


_CONTENT_RULES: dict[MarkupTagName, Callable[[TagNode, MarkupFormatOptions], str | None]] = {
    MarkupTagName.NUMBER: _number,
    MarkupTagName.DURATION: _duration,
    MarkupTagName.FILESIZE: _filesize,
    MarkupTagName.GRAMMAR_NUMBER: _grammar_number,
    MarkupTagName.FILELINK: _filelink_label,
    MarkupTagName.HYPERLINK: _hyperlink_label,
}


def resolve_content(node: TagNode, options: MarkupFormatOptions) -> str | None:
    """Return the text that replaces the children of *node*, if any.

    Only formatting tags (numbers, sizes, durations, links) have one; every
    other tag renders its children.
    """
    rule = _CONTENT_RULES.get(node.name)
    if rule is None:
        return None
    return rule(node, options)
