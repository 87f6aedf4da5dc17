"""
Tokenizer strategies — split text into comparable units for the differ.

Each strategy is a small class implementing the same interface
(``cast_input`` / ``tokenize`` / ``equals`` / ``join``).  The set is closed
and looked up by :class:`TokenizerKind`, so callers pick a granularity by
name instead of patching methods at runtime.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any


class TokenizerKind(str, Enum):
    CHARACTER = "character"
    WORD = "word"
    SENTENCE = "sentence"
    LINE = "line"
    CSS = "css"
    JSON = "json"


class _Undefined:
    """Marker for a JSON value that is absent (JavaScript ``undefined``)."""

    _instance: "_Undefined | None" = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


@dataclass
class DiffOptions:
    """Comparison switches shared by every tokenizer."""
    ignore_case: bool = False
    ignore_whitespace: bool = False
    ignore_newline_at_eof: bool = False
    newline_is_token: bool = False
    strip_trailing_cr: bool = False
    use_longest_token: bool | None = None   # None -> tokenizer default
    undefined_replacement: Any = UNDEFINED


# ---------------------------------------------------------------------------
# Base strategy
# ---------------------------------------------------------------------------

class Tokenizer:
    """Character-level behaviour; subclasses override what differs."""

    kind = TokenizerKind.CHARACTER
    use_longest_token = False

    def cast_input(self, value: Any, options: DiffOptions) -> str:
        return value

    def tokenize(self, text: str, options: DiffOptions) -> list[str]:
        return list(text)

    def equals(self, left: str, right: str, options: DiffOptions) -> bool:
        if left == right:
            return True
        return options.ignore_case and left.lower() == right.lower()

    def join(self, tokens: list[str]) -> str:
        return "".join(tokens)

    def split(self, value: Any, options: DiffOptions) -> list[str]:
        """Cast and tokenize, dropping empty tokens."""
        text = self.cast_input(value, options)
        return [t for t in self.tokenize(text, options) if t]


class CharacterTokenizer(Tokenizer):
    kind = TokenizerKind.CHARACTER


# A word, a whitespace run, or a single punctuation character.
_WORD_PATTERN = re.compile(r"\w+|\s+|[^\w\s]")


class WordTokenizer(Tokenizer):
    """Words (or single punctuation marks) with trailing whitespace attached."""

    kind = TokenizerKind.WORD

    def tokenize(self, text: str, options: DiffOptions) -> list[str]:
        tokens: list[str] = []
        for part in _WORD_PATTERN.findall(text):
            if part.isspace() and tokens:
                tokens[-1] += part
            else:
                tokens.append(part)
        return tokens

    def equals(self, left: str, right: str, options: DiffOptions) -> bool:
        if options.ignore_whitespace:
            left, right = left.strip(), right.strip()
        return super().equals(left, right, options)


_SENTENCE_SPLIT = re.compile(r"(\S.+?[.!?])(?=\s+|$)")


class SentenceTokenizer(Tokenizer):
    kind = TokenizerKind.SENTENCE

    def tokenize(self, text: str, options: DiffOptions) -> list[str]:
        return _SENTENCE_SPLIT.split(text)


_LINE_SPLIT = re.compile(r"(\n|\r\n)")


class LineTokenizer(Tokenizer):
    """One token per line, newline kept on the line it terminates."""

    kind = TokenizerKind.LINE

    def tokenize(self, text: str, options: DiffOptions) -> list[str]:
        if options.strip_trailing_cr:
            text = text.replace("\r\n", "\n")

        parts = _LINE_SPLIT.split(text)
        if parts and not parts[-1]:
            parts.pop()

        tokens: list[str] = []
        for index, part in enumerate(parts):
            # Odd indices are the captured newline separators
            if index % 2 and not options.newline_is_token:
                tokens[-1] += part
            else:
                tokens.append(part)
        return tokens

    def equals(self, left: str, right: str, options: DiffOptions) -> bool:
        if options.ignore_whitespace:
            if not options.newline_is_token or "\n" not in left:
                left = left.strip()
            if not options.newline_is_token or "\n" not in right:
                right = right.strip()
        elif options.ignore_newline_at_eof and not options.newline_is_token:
            if left.endswith("\n"):
                left = left[:-1]
            if right.endswith("\n"):
                right = right[:-1]
        return super().equals(left, right, options)


_CSS_SPLIT = re.compile(r"([{}:;,]|\s+)")


class CssTokenizer(Tokenizer):
    kind = TokenizerKind.CSS

    def tokenize(self, text: str, options: DiffOptions) -> list[str]:
        return _CSS_SPLIT.split(text)


_TRAILING_COMMA = re.compile(r",([\r\n])")


class JsonTokenizer(LineTokenizer):
    """Line diff over canonical JSON, tolerant of trailing commas."""

    kind = TokenizerKind.JSON
    use_longest_token = True

    def cast_input(self, value: Any, options: DiffOptions) -> str:
        if isinstance(value, str):
            return value
        canonical = canonicalize_json(value, options.undefined_replacement)
        if canonical is UNDEFINED:
            return ""
        return json.dumps(canonical, indent=2, ensure_ascii=False)

    def equals(self, left: str, right: str, options: DiffOptions) -> bool:
        # Plain token equality; the line whitespace rules do not apply to JSON
        return Tokenizer.equals(
            self,
            _TRAILING_COMMA.sub(r"\1", left),
            _TRAILING_COMMA.sub(r"\1", right),
            options,
        )


def canonicalize_json(value: Any, undefined_replacement: Any = UNDEFINED) -> Any:
    """Return a copy of *value* with dict keys sorted and UNDEFINED resolved.

    Undefined object members are dropped and undefined array items become
    ``None``, unless a replacement is given.
    """
    return _canonicalize(value, undefined_replacement, [], in_array=False)


def _canonicalize(value: Any, replacement: Any, stack: list, in_array: bool) -> Any:
    if value is UNDEFINED:
        value = replacement
        if value is UNDEFINED:
            return None if in_array else UNDEFINED

    if isinstance(value, (dict, list, tuple)):
        if any(value is seen for seen in stack):
            raise ValueError("Circular reference in JSON value")
        stack.append(value)
        try:
            if isinstance(value, dict):
                result = {}
                for key in sorted(value, key=str):
                    item = _canonicalize(value[key], replacement, stack, in_array=False)
                    if item is not UNDEFINED:
                        result[str(key)] = item
                return result
            return [
                _canonicalize(item, replacement, stack, in_array=True)
                for item in value
            ]
        finally:
            stack.pop()

    return value


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_TOKENIZERS: dict[TokenizerKind, Tokenizer] = {
    TokenizerKind.CHARACTER: CharacterTokenizer(),
    TokenizerKind.WORD: WordTokenizer(),
    TokenizerKind.SENTENCE: SentenceTokenizer(),
    TokenizerKind.LINE: LineTokenizer(),
    TokenizerKind.CSS: CssTokenizer(),
    TokenizerKind.JSON: JsonTokenizer(),
}


def get_tokenizer(kind: TokenizerKind | str | Tokenizer) -> Tokenizer:
    """Resolve a tokenizer by enum, name (``"line"``, ``"char"``...) or instance."""
    if isinstance(kind, Tokenizer):
        return kind
    if isinstance(kind, str) and not isinstance(kind, TokenizerKind):
        name = kind.strip().lower()
        if name == "char":
            name = TokenizerKind.CHARACTER.value
        try:
            kind = TokenizerKind(name)
        except ValueError:
            valid = ", ".join(k.value for k in TokenizerKind)
            raise ValueError(f"Unknown tokenizer {kind!r} (expected one of: {valid})")
    return _TOKENIZERS[kind]
