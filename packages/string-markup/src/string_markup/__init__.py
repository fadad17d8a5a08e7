"""string-markup: a small tag language for styled diagnostic output."""

# Errors
from string_markup.errors import (
    DepthExceededError,
    InvalidAttributeError,
    MarkupDiagnostic,
    MarkupError,
    MismatchedTagError,
    ParseError,
    TokenizeError,
    UnknownTagError,
)

# Formatting helpers
from string_markup.humanize import (
    format_filename,
    grammar_number,
    humanize_duration,
    humanize_filesize,
    humanize_number,
)

# Syntax tree
from string_markup.nodes import ChildNode, MarkupTagName, TagNode, TextNode, text_content

# Options
from string_markup.options import GridOutputFormat, MarkupFormatOptions

# Parsing
from string_markup.parser import parse_markup

# Rendering
from string_markup.render import (
    MarkupLinesAndWidth,
    markup_to_ansi,
    markup_to_html,
    markup_to_plain_text,
    render_markup,
)

# Building and normalizing markup
from string_markup.serialize import escape_markup, markup_tag, normalize_markup, serialize_markup

# Styles
from string_markup.styles import MarkupColor, MarkupTokenType, ResolvedStyle, resolve_style

# Tokens
from string_markup.tokenizer import Position, Token, TokenType, tokenize

# Utilities
from string_markup.utils import strip_ansi, visible_width

__all__ = [
    # Errors
    "DepthExceededError",
    "InvalidAttributeError",
    "MarkupDiagnostic",
    "MarkupError",
    "MismatchedTagError",
    "ParseError",
    "TokenizeError",
    "UnknownTagError",
    # Formatting helpers
    "format_filename",
    "grammar_number",
    "humanize_duration",
    "humanize_filesize",
    "humanize_number",
    # Syntax tree
    "ChildNode",
    "MarkupTagName",
    "TagNode",
    "TextNode",
    "text_content",
    # Options
    "GridOutputFormat",
    "MarkupFormatOptions",
    # Parsing
    "parse_markup",
    # Rendering
    "MarkupLinesAndWidth",
    "markup_to_ansi",
    "markup_to_html",
    "markup_to_plain_text",
    "render_markup",
    # Building and normalizing
    "escape_markup",
    "markup_tag",
    "normalize_markup",
    "serialize_markup",
    # Styles
    "MarkupColor",
    "MarkupTokenType",
    "ResolvedStyle",
    "resolve_style",
    # Tokens
    "Position",
    "Token",
    "TokenType",
    "tokenize",
    # Utilities
    "strip_ansi",
    "visible_width",
]
