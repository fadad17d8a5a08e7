"""Tests for string_markup.utils -- display width measurement."""

from __future__ import annotations

from string_markup.utils import grapheme_width, split_graphemes, strip_ansi, visible_width


class TestVisibleWidth:
    """Measure the visible terminal width of text."""

    def test_plain_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_empty_string(self) -> None:
        assert visible_width("") == 0

    def test_ansi_codes_do_not_count(self) -> None:
        assert visible_width("\x1b[1mhi\x1b[0m") == 2

    def test_multiple_ansi_codes(self) -> None:
        assert visible_width("\x1b[1;31mabc\x1b[0m") == 3

    def test_wide_cjk_characters_count_as_two(self) -> None:
        assert visible_width("世") == 2

    def test_mixed_ascii_and_wide(self) -> None:
        assert visible_width("A世B") == 4

    def test_combining_mark_is_zero_width(self) -> None:
        assert visible_width("e\u0301") == 1

    def test_emoji_counts_as_two(self) -> None:
        assert visible_width("\U0001f44d") == 2

    def test_tab_counts_as_three_spaces(self) -> None:
        assert visible_width("\t") == 3

    def test_osc8_hyperlink_does_not_count(self) -> None:
        text = "\x1b]8;;https://example.com\x07link\x1b]8;;\x07"
        assert visible_width(text) == 4


class TestStripAnsi:
    def test_removes_sgr_and_links(self) -> None:
        text = "\x1b]8;;x\x07\x1b[4mdocs\x1b[0m\x1b]8;;\x07"
        assert strip_ansi(text) == "docs"

    def test_plain_text_unchanged(self) -> None:
        assert strip_ansi("plain") == "plain"


class TestGraphemes:
    def test_clusters_keep_combining_marks(self) -> None:
        assert split_graphemes("e\u0301a") == ["e\u0301", "a"]

    def test_control_characters_are_zero_width(self) -> None:
        assert grapheme_width("\x07") == 0

    def test_flag_is_two_cells(self) -> None:
        assert grapheme_width("\U0001f1fa\U0001f1f8") == 2
