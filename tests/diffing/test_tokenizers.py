"""Tests for the tokenizer strategies."""

import pytest

from edit_engine.diffing.tokenizers import (
    UNDEFINED,
    CharacterTokenizer,
    DiffOptions,
    JsonTokenizer,
    LineTokenizer,
    TokenizerKind,
    canonicalize_json,
    get_tokenizer,
)


OPTS = DiffOptions()


class TestLineTokenizer:
    def test_keeps_newline_on_each_line(self):
        tok = get_tokenizer("line")
        assert tok.split("a\nb\nc", OPTS) == ["a\n", "b\n", "c"]

    def test_trailing_newline_does_not_add_empty_token(self):
        tok = get_tokenizer(TokenizerKind.LINE)
        assert tok.split("a\nb\n", OPTS) == ["a\n", "b\n"]

    def test_crlf_kept_as_separator(self):
        tok = LineTokenizer()
        assert tok.split("a\r\nb\r\n", OPTS) == ["a\r\n", "b\r\n"]

    def test_strip_trailing_cr(self):
        tok = LineTokenizer()
        opts = DiffOptions(strip_trailing_cr=True)
        assert tok.split("a\r\nb\r\n", opts) == ["a\n", "b\n"]

    def test_newline_is_token(self):
        tok = LineTokenizer()
        opts = DiffOptions(newline_is_token=True)
        assert tok.split("a\nb", opts) == ["a", "\n", "b"]

    def test_empty_text_has_no_tokens(self):
        assert LineTokenizer().split("", OPTS) == []

    def test_ignore_whitespace_equality(self):
        tok = LineTokenizer()
        opts = DiffOptions(ignore_whitespace=True)
        assert tok.equals("  foo \n", "foo\n", opts)
        assert not tok.equals("foo\n", "bar\n", opts)

    def test_ignore_whitespace_keeps_newline_tokens(self):
        tok = LineTokenizer()
        opts = DiffOptions(ignore_whitespace=True, newline_is_token=True)
        assert not tok.equals("\n", " \n", opts)
        assert tok.equals("\n", "\n", opts)
        assert tok.equals(" a", "a", opts)
        assert tok.equals("a\t", " a", opts)

    def test_ignore_newline_at_eof(self):
        tok = LineTokenizer()
        assert not tok.equals("last\n", "last", OPTS)
        assert tok.equals("last\n", "last", DiffOptions(ignore_newline_at_eof=True))

    def test_ignore_case(self):
        tok = LineTokenizer()
        assert tok.equals("LINE2\n", "line2\n", DiffOptions(ignore_case=True))
        assert not tok.equals("LINE2\n", "line2\n", OPTS)


class TestWordTokenizer:
    def test_whitespace_attaches_to_previous_word(self):
        tok = get_tokenizer("word")
        assert tok.split("foo bar  baz", OPTS) == ["foo ", "bar  ", "baz"]

    def test_punctuation_is_its_own_token(self):
        tok = get_tokenizer("word")
        assert tok.split("a,b", OPTS) == ["a", ",", "b"]

    def test_leading_whitespace_is_kept(self):
        tok = get_tokenizer("word")
        assert tok.split("  x", OPTS) == ["  ", "x"]

    def test_ignore_whitespace_equality(self):
        tok = get_tokenizer("word")
        assert tok.equals("foo ", "foo", DiffOptions(ignore_whitespace=True))
        assert not tok.equals("foo ", "foo", OPTS)


class TestOtherTokenizers:
    def test_character(self):
        assert CharacterTokenizer().split("abc", OPTS) == ["a", "b", "c"]

    def test_char_alias(self):
        assert get_tokenizer("char") is get_tokenizer(TokenizerKind.CHARACTER)

    def test_sentence(self):
        tok = get_tokenizer("sentence")
        assert tok.split("One. Two! Three?", OPTS) == ["One.", " ", "Two!", " ", "Three?"]

    def test_css(self):
        tok = get_tokenizer("css")
        assert tok.split("a{color:red;}", OPTS) == [
            "a", "{", "color", ":", "red", ";", "}",
        ]

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown tokenizer"):
            get_tokenizer("paragraph")

    def test_instance_passes_through(self):
        tok = LineTokenizer()
        assert get_tokenizer(tok) is tok


class TestJsonTokenizer:
    def test_objects_are_serialised_with_sorted_keys(self):
        tok = JsonTokenizer()
        text = tok.cast_input({"b": 1, "a": [1, 2]}, OPTS)
        assert text == '{\n  "a": [\n    1,\n    2\n  ],\n  "b": 1\n}'

    def test_strings_are_used_verbatim(self):
        assert JsonTokenizer().cast_input('{"z": 1}', OPTS) == '{"z": 1}'

    def test_trailing_comma_ignored_in_comparison(self):
        tok = JsonTokenizer()
        assert tok.equals('  "a": 1,\n', '  "a": 1\n', OPTS)

    def test_whitespace_options_do_not_apply(self):
        tok = JsonTokenizer()
        assert not tok.equals("  \"a\": 1\n", "\"a\": 1\n", DiffOptions(ignore_whitespace=True))
        assert not tok.equals("}\n", "}", DiffOptions(ignore_newline_at_eof=True))
        assert tok.equals("TRUE\n", "true\n", DiffOptions(ignore_case=True))

    def test_prefers_longest_token(self):
        assert JsonTokenizer.use_longest_token is True

    def test_undefined_members_dropped(self):
        assert canonicalize_json({"a": UNDEFINED, "b": 2}) == {"b": 2}

    def test_undefined_array_items_become_null(self):
        assert canonicalize_json([1, UNDEFINED]) == [1, None]

    def test_undefined_replacement(self):
        assert canonicalize_json({"a": UNDEFINED}, "gone") == {"a": "gone"}

    def test_circular_reference_raises(self):
        data = {}
        data["self"] = data
        with pytest.raises(ValueError, match="Circular"):
            canonicalize_json(data)
