"""Public rendering entry points."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence, Union

from string_markup.encoders import ENCODERS
from string_markup.errors import MarkupDiagnostic
from string_markup.grid import GridRenderer, line_width
from string_markup.nodes import ChildNode
from string_markup.options import GridOutputFormat, MarkupFormatOptions
from string_markup.parser import parse_markup

MarkupInput = Union[str, Sequence[ChildNode]]


@dataclass
class MarkupLinesAndWidth:
    """Rendered lines plus the widest line's width in terminal cells."""

    lines: list[str]
    width: int
    diagnostics: list[MarkupDiagnostic] = field(default_factory=list)


def render_markup(markup: MarkupInput, options: MarkupFormatOptions | None = None) -> MarkupLinesAndWidth:
    """Parse (if needed), lay out and encode *markup*.

    *markup* is either a markup string or an already built list of nodes.
    Structural problems (a ``<li>`` inside a ``<table>``, ...) do not raise;
    they are returned in ``diagnostics`` and the subtree is rendered as
    plain text.
    """
    options = options or MarkupFormatOptions()
    nodes = parse_markup(markup, max_depth=options.max_depth) if isinstance(markup, str) else markup

    renderer = GridRenderer(options)
    laid_out = renderer.render(nodes)
    encode = ENCODERS[GridOutputFormat(options.format)]

    return MarkupLinesAndWidth(
        lines=[encode(line) for line in laid_out],
        width=max((line_width(line) for line in laid_out), default=0),
        diagnostics=renderer.diagnostics,
    )


def _render_as(markup: MarkupInput, options: MarkupFormatOptions | None, fmt: GridOutputFormat) -> str:
    options = replace(options, format=fmt) if options else MarkupFormatOptions(format=fmt)
    return "\n".join(render_markup(markup, options).lines)


def markup_to_ansi(markup: MarkupInput, options: MarkupFormatOptions | None = None) -> str:
    return _render_as(markup, options, GridOutputFormat.ANSI)


def markup_to_html(markup: MarkupInput, options: MarkupFormatOptions | None = None) -> str:
    return _render_as(markup, options, GridOutputFormat.HTML)


def markup_to_plain_text(markup: MarkupInput, options: MarkupFormatOptions | None = None) -> str:
    return _render_as(markup, options, GridOutputFormat.NONE)
