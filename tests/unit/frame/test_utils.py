"""Tests for the shared text helpers."""

import math

import pytest

from frame.core.utils import (
    disambiguation,
    escape_markdown,
    human_join,
    maybe_await,
    parse_args,
    remove_smart_quotes,
    split_message,
)


class TestParseArgs:
    """Test argument string tokenizing."""

    def test_splits_on_whitespace(self):
        assert parse_args("a b  c") == ["a", "b", "c"]

    def test_quoted_groups_are_single_tokens(self):
        assert parse_args('one "two three" \'four five\'') == ["one", "two three", "four five"]

    def test_count_keeps_remainder(self):
        assert parse_args("a b c d", 2) == ["a", "b c d"]

    def test_count_of_one_returns_whole_string(self):
        assert parse_args("a b c", 1) == ["a b c"]

    def test_remainder_wrapping_quotes_are_stripped(self):
        assert parse_args('a "b c"', 2) == ["a", "b c"]

    def test_infinite_count(self):
        assert parse_args("x y z", math.inf) == ["x", "y", "z"]

    def test_empty_string(self):
        assert parse_args("") == []
        assert parse_args("", math.inf) == []

    def test_single_quotes_can_be_disabled(self):
        assert parse_args("it's \"a test\"", 0, False) == ["it's", "a test"]

    def test_smart_quotes_are_normalised(self):
        assert parse_args("\u201chello world\u201d") == ["hello world"]


class TestTextHelpers:
    """Test the remaining helpers."""

    def test_remove_smart_quotes(self):
        assert remove_smart_quotes("\u2018a\u2019 \u201cb\u201d") == "'a' \"b\""
        assert remove_smart_quotes("\u2018a\u2019", allow_single_quote=False) == "\u2018a\u2019"

    def test_escape_markdown(self):
        assert escape_markdown("*bold* _it_ `code`") == "\\*bold\\* \\_it\\_ \\`code\\`"

    def test_disambiguation(self):
        items = [type("Item", (), {"name": "first one"})(), type("Item", (), {"name": "second"})()]

        result = disambiguation(items, "commands")

        assert result == 'Multiple commands found, please be more specific: "first\xa0one",   "second"'

    def test_disambiguation_of_plain_strings(self):
        assert disambiguation(["a", "b"], "roles", None).endswith('"a",   "b"')

    @pytest.mark.parametrize(
        "items,expected",
        [
            ([], ""),
            (["a"], "a"),
            (["a", "b"], "a or b"),
            (["a", "b", "c"], "a, b, or c"),
        ],
    )
    def test_human_join(self, items, expected):
        assert human_join(items) == expected

    @pytest.mark.asyncio
    async def test_maybe_await(self):
        async def coroutine():
            return 5

        assert await maybe_await(coroutine()) == 5
        assert await maybe_await(3) == 3


class TestSplitMessage:
    """Test splitting long replies."""

    def test_short_text_is_one_chunk(self):
        assert split_message("hello\nworld") == ["hello\nworld"]

    def test_splits_on_line_breaks(self):
        text = "\n".join(["x" * 10] * 5)

        chunks = split_message(text, limit=25)

        assert all(len(chunk) <= 25 for chunk in chunks)
        assert "\n".join(chunks) == text

    def test_overlong_line_is_cut(self):
        chunks = split_message("y" * 45, limit=20)

        assert chunks == ["y" * 20, "y" * 20, "y" * 5]
