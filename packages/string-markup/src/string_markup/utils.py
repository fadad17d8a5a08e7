"""Display-width measurement for rendered text.

Widths are counted in terminal cells per grapheme cluster: wide (CJK, emoji)
clusters take two cells, combining marks and control characters none.
Escape sequences emitted by the ANSI encoder do not count.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# CSI SGR, OSC 8 hyperlinks
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;]*m"          # CSI
    r"|\x1b\]8;[^\x07]*\x07"   # OSC 8
)


def strip_ansi(text: str) -> str:
    """Remove SGR and hyperlink escape sequences from *text*."""
    return _STRIP_RE.sub("", text)


def split_graphemes(text: str) -> list[str]:
    return list(grapheme.graphemes(text))


def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Rules:
    1. Zero-width characters (control, combining marks, etc.) -> 0
    2. Emoji (VS16, ZWJ sequences, skin tones, flags) -> 2
    3. Otherwise delegate to wcwidth for the first codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # regional indicators
            return 2

    first = g[0]
    if ord(first) >= 0x1F000 or 0x2600 <= ord(first) <= 0x27BF:
        return 2

    cat = unicodedata.category(first)
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Calculate the visible width of *text* in terminal cells.

    * Strips escape sequences.
    * Treats tabs as 3 spaces.
    * Uses a fast path for printable ASCII.
    """
    if not text:
        return 0

    stripped = strip_ansi(text).replace("\t", "   ")
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)
    return sum(grapheme_width(g) for g in grapheme.graphemes(stripped))
