"""End-to-end rendering tests for all three output formats."""

from __future__ import annotations

import re

import pytest

from string_markup import (
    ChildNode,
    GridOutputFormat,
    InvalidAttributeError,
    MarkupFormatOptions,
    MarkupTagName,
    TagNode,
    TextNode,
    markup_to_ansi,
    markup_to_html,
    markup_to_plain_text,
    render_markup,
    text_content,
    visible_width,
)

_SGR_OPEN_RE = re.compile(r"\x1b\[(?!0m)[0-9;]*m")
_RESET = "\x1b[0m"


def _options(fmt: str = "none", columns: int = 80, **kwargs: object) -> MarkupFormatOptions:
    return MarkupFormatOptions(format=fmt, columns=columns, **kwargs)  # type: ignore[arg-type]


def _tag(name: MarkupTagName, *children: ChildNode, **attributes: str | None) -> TagNode:
    return TagNode(name, dict(attributes), list(children))


# ---------------------------------------------------------------------------
# Examples
# ---------------------------------------------------------------------------


class TestExamples:
    def test_error_as_plain_text(self) -> None:
        result = render_markup("<error>build failed</error>", _options())
        assert result.lines == ["build failed"]
        assert result.width == 12

    def test_adjacent_colors_are_reset_between(self) -> None:
        out = markup_to_ansi('<color fg="red">x</color><color fg="blue">y</color>', _options())
        assert out == "\x1b[31mx\x1b[0m\x1b[34my\x1b[0m"

    def test_malformed_table_degrades(self) -> None:
        result = render_markup("<table><li>x</li></table>", _options())
        assert result.diagnostics
        assert "x" in "\n".join(result.lines)

    def test_filesize(self) -> None:
        assert markup_to_plain_text("<filesize>1048576</filesize>", _options()) == "1.0 MiB"


# ---------------------------------------------------------------------------
# ANSI
# ---------------------------------------------------------------------------


class TestAnsi:
    def test_nested_styles_compose(self) -> None:
        out = markup_to_ansi("<emphasis>a <error>b</error></emphasis>", _options())
        assert out == "\x1b[1ma \x1b[0m\x1b[1;31mb\x1b[0m"

    def test_plain_text_has_no_codes(self) -> None:
        assert markup_to_ansi("hello", _options()) == "hello"

    def test_unknown_token_type_is_unstyled(self) -> None:
        assert markup_to_ansi('<token type="bogus">x</token>', _options()) == "x"

    def test_token_color(self) -> None:
        assert markup_to_ansi('<token type="string">"a"</token>', _options()) == '\x1b[32m"a"\x1b[0m'

    def test_background_and_bright_colors(self) -> None:
        out = markup_to_ansi('<color fg="brightWhite" bg="red">x</color>', _options())
        assert out == "\x1b[97;41mx\x1b[0m"

    def test_hyperlink(self) -> None:
        out = markup_to_ansi('<hyperlink target="https://x.dev">docs</hyperlink>', _options())
        assert out == "\x1b]8;;https://x.dev\x07\x1b[4mdocs\x1b[0m\x1b]8;;\x07"

    def test_style_is_reset_at_every_wrap(self) -> None:
        result = render_markup("<error>aaa bbb ccc</error>", _options("ansi", columns=4))
        assert result.lines == ["\x1b[31maaa\x1b[0m", "\x1b[31mbbb\x1b[0m", "\x1b[31mccc\x1b[0m"]

    def test_invalid_color_raises(self) -> None:
        with pytest.raises(InvalidAttributeError):
            render_markup('<color fg="purple">x</color>', _options("ansi"))


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


class TestHtml:
    def test_escapes_text(self) -> None:
        out = markup_to_html(r"<emphasis>a \< b & c</emphasis>", _options())
        assert out == '<span style="font-weight: bold">a &lt; b &amp; c</span>'

    def test_plain_text_is_escaped(self) -> None:
        assert markup_to_html(r'\<script> "x"', _options()) == "&lt;script&gt; &quot;x&quot;"

    def test_token_class(self) -> None:
        out = markup_to_html('<token type="keyword">const</token>', _options())
        assert out == '<span class="token keyword" style="color: #11a8cd">const</span>'

    def test_link(self) -> None:
        out = markup_to_html('<hyperlink target="https://x.dev/?a=1&amp;b">x</hyperlink>', _options())
        assert out.startswith('<a href="https://x.dev/?a=1&amp;amp;b">')
        assert out.endswith("</a>")

    def test_strike_and_underline(self) -> None:
        out = markup_to_html("<strike><underline>x</underline></strike>", _options())
        assert 'text-decoration: underline line-through' in out


# ---------------------------------------------------------------------------
# Formatting tags
# ---------------------------------------------------------------------------


class TestFormattingTags:
    def test_number(self) -> None:
        assert markup_to_plain_text("<number>1234567</number>", _options()) == "1,234,567"

    def test_duration(self) -> None:
        assert markup_to_plain_text("<duration>1500</duration>", _options()) == "1s 500ms"

    def test_grammar_number(self) -> None:
        markup = '<number>3</number> <grammarNumber singular="file" plural="files">3</grammarNumber>'
        assert markup_to_plain_text(markup, _options()) == "3 files"

    def test_filelink_label_and_target(self) -> None:
        options = _options(
            "ansi",
            normalize_filename=lambda name: "/abs/" + name,
            humanize_filename=lambda name: name.rsplit("/", 1)[-1],
        )
        out = markup_to_ansi('<filelink target="src/a.ts" line="3" column="4" />', options)
        assert "\x1b]8;;/abs/src/a.ts\x07" in out
        assert "a.ts:3:4" in out

    def test_filelink_without_humanizer_shows_normalized(self) -> None:
        options = _options(normalize_filename=lambda name: "/abs/" + name)
        out = markup_to_plain_text('<filelink target="src/a.ts" line="3" />', options)
        assert out == "/abs/src/a.ts:3"

    def test_empty_hyperlink_shows_target(self) -> None:
        out = markup_to_plain_text('<hyperlink target="https://x.dev" />', _options())
        assert out == "https://x.dev"


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

_TREES: list[list[ChildNode]] = [
    [
        TextNode("Hello "),
        _tag(MarkupTagName.EMPHASIS, TextNode("world"), _tag(MarkupTagName.DIM, TextNode("!"))),
        TextNode(" and  more"),
    ],
    [
        _tag(MarkupTagName.COLOR, TextNode("red "), fg="red"),
        _tag(MarkupTagName.ITALIC, _tag(MarkupTagName.UNDERLINE, TextNode("deep"))),
        TextNode("  tail "),
    ],
    [_tag(MarkupTagName.TOKEN, TextNode("const"), type="keyword"), TextNode(" x = 1;")],
]

_WRAP_SAMPLES = [
    "The quick brown fox jumps over the lazy dog",
    "<error>failure</error> in <emphasis>some really long sentence</emphasis> here",
    "<ul><li>first item text</li><li>second <dim>item</dim> text</li></ul>",
    "<ol><li>a<ul><li>nested item with words</li></ul></li></ol>",
    "<table><tr><td>name</td><td>a fairly long description</td></tr>"
    "<tr><td>x</td><td>y</td></tr></table>",
    "averyveryverylongwordthatcannotfit",
    "<hr />",
    "<hr>a rather long label here</hr>",
    "<table><tr><td>c</td><td>c</td><td>c</td><td>c</td><td>c</td><td>c</td></tr>"
    "<tr><td>0</td><td>1</td><td>2</td><td>3</td><td>4</td><td>5</td></tr></table>",
]


class TestProperties:
    @pytest.mark.parametrize("nodes", _TREES)
    def test_plain_text_is_concatenated_text(self, nodes: list[ChildNode]) -> None:
        result = render_markup(nodes, _options(columns=200))
        assert "".join(result.lines) == text_content(nodes)

    @pytest.mark.parametrize("fmt", ["ansi", "html", "none"])
    @pytest.mark.parametrize("nodes", _TREES)
    def test_rendering_is_idempotent(self, nodes: list[ChildNode], fmt: str) -> None:
        options = _options(fmt, columns=12)
        first = render_markup(nodes, options)
        second = render_markup(nodes, options)
        assert first.lines == second.lines
        assert first.width == second.width

    @pytest.mark.parametrize("columns", [6, 10, 20])
    @pytest.mark.parametrize("markup", _WRAP_SAMPLES)
    def test_ansi_lines_fit_columns(self, markup: str, columns: int) -> None:
        result = render_markup(markup, _options("ansi", columns=columns))
        assert all(visible_width(line) <= columns for line in result.lines)
        assert result.width <= columns

    @pytest.mark.parametrize("columns", [6, 10, 20])
    @pytest.mark.parametrize("markup", _WRAP_SAMPLES)
    def test_html_width_fits_columns(self, markup: str, columns: int) -> None:
        assert render_markup(markup, _options("html", columns=columns)).width <= columns

    @pytest.mark.parametrize("markup", _WRAP_SAMPLES)
    def test_ansi_styles_are_balanced(self, markup: str) -> None:
        for line in render_markup(markup, _options("ansi", columns=10)).lines:
            assert len(_SGR_OPEN_RE.findall(line)) == line.count(_RESET)

    def test_table_columns_share_one_width(self) -> None:
        markup = (
            "<table><tr><td>a</td><td>one</td><td>x</td></tr>"
            "<tr><td>bbbb</td><td>2</td><td>y</td></tr>"
            "<tr><td>cc</td><td>three</td><td>z</td></tr></table>"
        )
        lines = render_markup(markup, _options()).lines
        assert [line.index(c) for line, c in zip(lines, "xyz")] == [11, 11, 11]

    def test_width_counts_display_cells(self) -> None:
        result = render_markup("<emphasis>世界</emphasis>", _options("ansi"))
        assert result.width == 4

    def test_width_is_widest_line(self) -> None:
        assert render_markup("a\nbbb\ncc", _options()).width == 3


class TestNobr:
    def test_nobr_may_overflow(self) -> None:
        result = render_markup("<nobr>aaa bbb ccc</nobr>", _options(columns=5))
        assert result.lines == ["aaa bbb ccc"]
        assert result.width == 11

    def test_nobr_keeps_table_at_natural_width(self) -> None:
        markup = "<nobr><table><tr><td>aaaa bbbb</td><td>cccc</td></tr></table></nobr>"
        assert render_markup(markup, _options(columns=8)).lines == ["aaaa bbbb cccc"]


class TestOptions:
    def test_format_enum_accepted(self) -> None:
        options = MarkupFormatOptions(format=GridOutputFormat.HTML, columns=10)
        assert render_markup("<dim>x</dim>", options).lines == ['<span style="opacity: 0.75">x</span>']

    def test_convenience_helpers_override_format(self) -> None:
        options = _options("html")
        assert markup_to_plain_text("<dim>x</dim>", options) == "x"
        assert options.format is GridOutputFormat.HTML
