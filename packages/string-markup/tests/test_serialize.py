"""Tests for building and normalizing markup strings."""

from __future__ import annotations

from string_markup.nodes import MarkupTagName, TagNode, TextNode
from string_markup.options import MarkupFormatOptions
from string_markup.parser import parse_markup
from string_markup.serialize import escape_markup, markup_tag, normalize_markup, serialize_markup


class TestEscapeMarkup:
    def test_escapes_less_than_and_backslash(self) -> None:
        assert escape_markup("a<b\\c") == "a\\<b\\\\c"

    def test_escaped_text_parses_back(self) -> None:
        text = r"if (a < b) { path = C:\dir\<x> }"
        assert parse_markup(escape_markup(text)) == [TextNode(text)]

    def test_plain_text_unchanged(self) -> None:
        assert escape_markup("nothing to see") == "nothing to see"


class TestMarkupTag:
    def test_wraps_text(self) -> None:
        assert markup_tag("emphasis", "hi") == "<emphasis>hi</emphasis>"

    def test_self_closing_when_empty(self) -> None:
        assert markup_tag(MarkupTagName.HR) == "<hr />"

    def test_attributes(self) -> None:
        assert markup_tag("number", "5", {"approx": None}) == "<number approx>5</number>"
        assert markup_tag("filelink", "", {"target": "src/index.ts"}) == '<filelink target="src/index.ts" />'

    def test_attribute_quotes_are_escaped(self) -> None:
        out = markup_tag("hyperlink", "x", {"target": 'a"b'})
        assert out == '<hyperlink target="a\\"b">x</hyperlink>'
        (node,) = parse_markup(out)
        assert isinstance(node, TagNode)
        assert node.get("target") == 'a"b'


class TestSerializeMarkup:
    def test_round_trip(self) -> None:
        nodes = [
            TextNode("x < y "),
            TagNode(
                MarkupTagName.COLOR,
                {"fg": "red"},
                [TextNode("a"), TagNode(MarkupTagName.PAD, {"width": "3"})],
            ),
            TagNode(MarkupTagName.HYPERLINK, {"target": 'say "hi" \\o/'}, [TextNode("link")]),
        ]
        assert parse_markup(serialize_markup(nodes)) == nodes


class TestNormalizeMarkup:
    def test_canonical_quoting(self) -> None:
        assert normalize_markup("<color   fg='red' >x</color >") == '<color fg="red">x</color>'

    def test_filelink_target_is_normalized(self) -> None:
        options = MarkupFormatOptions(columns=80, normalize_filename=lambda name: "/r/" + name)
        out = normalize_markup('<filelink target="a.ts" line="1" />', options)
        assert out == '<filelink target="/r/a.ts" line="1" />'

    def test_strip_positions(self) -> None:
        options = MarkupFormatOptions(
            columns=80,
            normalize_filename=lambda name: "/r/" + name,
            strip_positions=True,
        )
        out = normalize_markup('<filelink target="a.ts" line="1" column="2">a</filelink>', options)
        assert out == '<filelink target="/r/a.ts">a</filelink>'

    def test_positions_on_other_tags_are_kept(self) -> None:
        options = MarkupFormatOptions(columns=80, strip_positions=True)
        assert normalize_markup('<pad width="2" line="1" />', options) == '<pad width="2" line="1" />'
