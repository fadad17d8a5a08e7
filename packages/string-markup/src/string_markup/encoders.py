"""Target-specific encoding of laid-out lines.

Every styled run is encoded on its own: ANSI output opens the run's SGR codes
and resets right after it, HTML output wraps it in its own element.  Nothing
is left open at the end of a run, so wrapping and truncation never leak a
style into the next line.
"""

from __future__ import annotations

import html
from typing import Callable, Sequence

from string_markup.grid import Segment
from string_markup.options import GridOutputFormat
from string_markup.styles import MarkupColor, ResolvedStyle

RESET = "\x1b[0m"
OSC8_CLOSE = "\x1b]8;;\x07"

_ANSI_FG: dict[MarkupColor, int] = {
    MarkupColor.BLACK: 30,
    MarkupColor.RED: 31,
    MarkupColor.GREEN: 32,
    MarkupColor.YELLOW: 33,
    MarkupColor.BLUE: 34,
    MarkupColor.MAGENTA: 35,
    MarkupColor.CYAN: 36,
    MarkupColor.WHITE: 37,
    MarkupColor.BRIGHT_BLACK: 90,
    MarkupColor.BRIGHT_RED: 91,
    MarkupColor.BRIGHT_GREEN: 92,
    MarkupColor.BRIGHT_YELLOW: 93,
    MarkupColor.BRIGHT_BLUE: 94,
    MarkupColor.BRIGHT_MAGENTA: 95,
    MarkupColor.BRIGHT_CYAN: 96,
    MarkupColor.BRIGHT_WHITE: 97,
}

_HTML_COLORS: dict[MarkupColor, str] = {
    MarkupColor.BLACK: "#000000",
    MarkupColor.RED: "#cd3131",
    MarkupColor.GREEN: "#0dbc79",
    MarkupColor.YELLOW: "#e5e510",
    MarkupColor.BLUE: "#2472c8",
    MarkupColor.MAGENTA: "#bc3fbc",
    MarkupColor.CYAN: "#11a8cd",
    MarkupColor.WHITE: "#e5e5e5",
    MarkupColor.BRIGHT_BLACK: "#666666",
    MarkupColor.BRIGHT_RED: "#f14c4c",
    MarkupColor.BRIGHT_GREEN: "#23d18b",
    MarkupColor.BRIGHT_YELLOW: "#f5f543",
    MarkupColor.BRIGHT_BLUE: "#3b8eea",
    MarkupColor.BRIGHT_MAGENTA: "#d670d6",
    MarkupColor.BRIGHT_CYAN: "#29b8db",
    MarkupColor.BRIGHT_WHITE: "#ffffff",
}


def merge_runs(line: Sequence[Segment]) -> list[tuple[str, ResolvedStyle]]:
    """Join adjacent segments that share a style."""
    runs: list[tuple[str, ResolvedStyle]] = []
    for seg in line:
        if not seg.text:
            continue
        if runs and runs[-1][1] == seg.style:
            runs[-1] = (runs[-1][0] + seg.text, seg.style)
        else:
            runs.append((seg.text, seg.style))
    return runs


# ---------------------------------------------------------------------------
# ANSI
# ---------------------------------------------------------------------------


def sgr_codes(style: ResolvedStyle) -> list[int]:
    codes: list[int] = []
    if style.bold:
        codes.append(1)
    if style.dim:
        codes.append(2)
    if style.italic:
        codes.append(3)
    if style.underline:
        codes.append(4)
    if style.inverse:
        codes.append(7)
    if style.strike:
        codes.append(9)
    if style.fg is not None:
        codes.append(_ANSI_FG[style.fg])
    if style.bg is not None:
        codes.append(_ANSI_FG[style.bg] + 10)
    return codes


def encode_ansi(line: Sequence[Segment]) -> str:
    parts: list[str] = []
    for text, style in merge_runs(line):
        codes = sgr_codes(style)
        if codes:
            text = f"\x1b[{';'.join(str(c) for c in codes)}m{text}{RESET}"
        if style.link:
            text = f"\x1b]8;;{style.link}\x07{text}{OSC8_CLOSE}"
        parts.append(text)
    return "".join(parts)


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def css_declarations(style: ResolvedStyle) -> list[str]:
    css: list[str] = []
    if style.fg is not None:
        css.append(f"color: {_HTML_COLORS[style.fg]}")
    if style.bg is not None:
        css.append(f"background-color: {_HTML_COLORS[style.bg]}")
    if style.bold:
        css.append("font-weight: bold")
    if style.dim:
        css.append("opacity: 0.75")
    if style.italic:
        css.append("font-style: italic")
    decorations = [
        name for name, on in (("underline", style.underline), ("line-through", style.strike)) if on
    ]
    if decorations:
        css.append(f"text-decoration: {' '.join(decorations)}")
    return css


def encode_html(line: Sequence[Segment]) -> str:
    parts: list[str] = []
    for text, style in merge_runs(line):
        text = html.escape(text)
        css = css_declarations(style)
        classes: list[str] = []
        if style.token is not None:
            classes.extend(("token", style.token.value))
        if style.inverse:
            classes.append("inverse")
        if css or classes:
            attrs = ""
            if classes:
                attrs += f' class="{" ".join(classes)}"'
            if css:
                attrs += f' style="{"; ".join(css)}"'
            text = f"<span{attrs}>{text}</span>"
        if style.link:
            text = f'<a href="{html.escape(style.link)}">{text}</a>'
        parts.append(text)
    return "".join(parts)


# ---------------------------------------------------------------------------
# Plain
# ---------------------------------------------------------------------------


def encode_plain(line: Sequence[Segment]) -> str:
    return "".join(seg.text for seg in line)


ENCODERS: dict[GridOutputFormat, Callable[[Sequence[Segment]], str]] = {
    GridOutputFormat.ANSI: encode_ansi,
    GridOutputFormat.HTML: encode_html,
    GridOutputFormat.NONE: encode_plain,
}
