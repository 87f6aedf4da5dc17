"""Token-sequence diffing — tokenizers, Myers differ, hunks and word diffs."""

from .tokenizers import (
    TokenizerKind, Tokenizer, DiffOptions, UNDEFINED, get_tokenizer,
    canonicalize_json,
)
from .differ import (
    OpKind, DiffOp, diff, diff_sequences, diff_lines, diff_words, diff_chars,
    diff_sentences, diff_css, diff_json, old_tokens_of, new_tokens_of,
)
from .hunks import (
    Hunk, PatchApplyError, NO_NEWLINE_MARKER, DEFAULT_CONTEXT,
    build_hunks, structured_patch, apply_hunks, format_patch, split_lines,
)
from .word_diff import (
    LineType, DisplayLine, DEFAULT_WORD_DIFF_THRESHOLD,
    highlight, highlight_hunks, to_display_lines,
)

__all__ = [
    "TokenizerKind", "Tokenizer", "DiffOptions", "UNDEFINED", "get_tokenizer",
    "canonicalize_json",
    "OpKind", "DiffOp", "diff", "diff_sequences", "diff_lines", "diff_words",
    "diff_chars", "diff_sentences", "diff_css", "diff_json",
    "old_tokens_of", "new_tokens_of",
    "Hunk", "PatchApplyError", "NO_NEWLINE_MARKER", "DEFAULT_CONTEXT",
    "build_hunks", "structured_patch", "apply_hunks", "format_patch",
    "split_lines",
    "LineType", "DisplayLine", "DEFAULT_WORD_DIFF_THRESHOLD",
    "highlight", "highlight_hunks", "to_display_lines",
]
