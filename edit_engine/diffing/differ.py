"""
Sequence differ — Myers O(N·D) shortest edit script over token lists.

The differ knows nothing about what a token is; tokenization and the
equality predicate come from :mod:`edit_engine.diffing.tokenizers`.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence

from .tokenizers import DiffOptions, Tokenizer, TokenizerKind, get_tokenizer


class OpKind(str, Enum):
    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


@dataclass
class DiffOp:
    """A run of tokens that were kept, inserted or deleted."""
    kind: OpKind
    tokens: list[str] = field(default_factory=list)
    old_tokens: list[str] = field(default_factory=list)  # old side of EQUAL / DELETE

    @property
    def count(self) -> int:
        return len(self.tokens)

    @property
    def value(self) -> str:
        return "".join(self.tokens)

    @property
    def added(self) -> bool:
        return self.kind is OpKind.INSERT

    @property
    def removed(self) -> bool:
        return self.kind is OpKind.DELETE

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "value": self.value, "count": self.count}


# ---------------------------------------------------------------------------
# Path bookkeeping
# ---------------------------------------------------------------------------

class _Component:
    """One node of a candidate edit path (linked back to its predecessor)."""

    __slots__ = ("count", "added", "removed", "previous")

    def __init__(self, count: int, added: bool, removed: bool,
                 previous: "_Component | None") -> None:
        self.count = count
        self.added = added
        self.removed = removed
        self.previous = previous


class _Path:
    __slots__ = ("old_pos", "last")

    def __init__(self, old_pos: int, last: _Component | None) -> None:
        self.old_pos = old_pos   # index of the last consumed old token
        self.last = last


def _add_to_path(path: _Path, added: bool, removed: bool, old_step: int) -> _Path:
    last = path.last
    if last is not None and last.added == added and last.removed == removed:
        component = _Component(last.count + 1, added, removed, last.previous)
    else:
        component = _Component(1, added, removed, last)
    return _Path(path.old_pos + old_step, component)


def _extract_common(path: _Path, new: Sequence, old: Sequence, diagonal: int,
                    equals: Callable[[Any, Any], bool]) -> int:
    """Follow the snake along *diagonal*; return the new-side position."""
    new_len, old_len = len(new), len(old)
    old_pos = path.old_pos
    new_pos = old_pos - diagonal
    common = 0

    while (new_pos + 1 < new_len and old_pos + 1 < old_len
           and equals(old[old_pos + 1], new[new_pos + 1])):
        new_pos += 1
        old_pos += 1
        common += 1

    if common:
        path.last = _Component(common, False, False, path.last)

    path.old_pos = old_pos
    return new_pos


def _build_ops(last: _Component | None, new: Sequence, old: Sequence,
               use_longest_token: bool) -> list[DiffOp]:
    components: list[_Component] = []
    while last is not None:
        components.append(last)
        last = last.previous
    components.reverse()

    ops: list[DiffOp] = []
    new_pos = 0
    old_pos = 0
    for comp in components:
        if comp.removed:
            removed = list(old[old_pos:old_pos + comp.count])
            ops.append(DiffOp(OpKind.DELETE, removed, list(removed)))
            old_pos += comp.count
        elif comp.added:
            ops.append(DiffOp(OpKind.INSERT, list(new[new_pos:new_pos + comp.count])))
            new_pos += comp.count
        else:
            kept_new = list(new[new_pos:new_pos + comp.count])
            kept_old = list(old[old_pos:old_pos + comp.count])
            if use_longest_token:
                tokens = [
                    o if len(o) > len(n) else n
                    for n, o in zip(kept_new, kept_old)
                ]
            else:
                tokens = kept_new
            ops.append(DiffOp(OpKind.EQUAL, tokens, kept_old))
            new_pos += comp.count
            old_pos += comp.count
    return ops


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def diff_sequences(
    old: Sequence,
    new: Sequence,
    equals: Callable[[Any, Any], bool] | None = None,
    use_longest_token: bool = False,
) -> list[DiffOp]:
    """Compute the shortest edit script turning *old* into *new*.

    At equal cost, the path that consumes an old token is extended unless
    the insertion path is strictly further along, so deletions come before
    insertions inside a replaced region.

    Parameters
    ----------
    old, new:
        Token sequences.
    equals:
        ``equals(old_token, new_token)``; defaults to ``==``.
    use_longest_token:
        For kept tokens that compare equal but differ in text, emit the
        longer of the two.
    """
    equals = equals or operator.eq
    new_len, old_len = len(new), len(old)

    best_path: dict[int, _Path | None] = {0: _Path(-1, None)}
    new_pos = _extract_common(best_path[0], new, old, 0, equals)
    if best_path[0].old_pos + 1 >= old_len and new_pos + 1 >= new_len:
        return _build_ops(best_path[0].last, new, old, use_longest_token)

    max_edit_length = new_len + old_len
    # Diagonals that have already reached an edge of the edit graph are pruned.
    min_diagonal = -max_edit_length - 1
    max_diagonal = max_edit_length + 1

    for edit_length in range(1, max_edit_length + 1):
        low = max(min_diagonal, -edit_length)
        high = min(max_diagonal, edit_length)
        for diagonal in range(low, high + 1, 2):
            remove_path = best_path.get(diagonal - 1)
            add_path = best_path.get(diagonal + 1)
            if remove_path is not None:
                best_path[diagonal - 1] = None

            can_add = False
            if add_path is not None:
                add_new_pos = add_path.old_pos - diagonal
                can_add = 0 <= add_new_pos < new_len
            can_remove = remove_path is not None and remove_path.old_pos + 1 < old_len

            if not can_add and not can_remove:
                best_path[diagonal] = None
                continue

            if not can_remove or (can_add and remove_path.old_pos < add_path.old_pos):
                path = _add_to_path(add_path, True, False, 0)
            else:
                path = _add_to_path(remove_path, False, True, 1)

            new_pos = _extract_common(path, new, old, diagonal, equals)
            if path.old_pos + 1 >= old_len and new_pos + 1 >= new_len:
                return _build_ops(path.last, new, old, use_longest_token)

            best_path[diagonal] = path
            if path.old_pos + 1 >= old_len:
                max_diagonal = min(max_diagonal, diagonal - 1)
            if new_pos + 1 >= new_len:
                min_diagonal = max(min_diagonal, diagonal + 1)

    # Unreachable: an edit script of length old_len + new_len always exists.
    raise RuntimeError("diff did not converge")


def diff(
    old_text: Any,
    new_text: Any,
    tokenizer: TokenizerKind | str | Tokenizer = TokenizerKind.LINE,
    options: DiffOptions | None = None,
) -> list[DiffOp]:
    """Tokenize both inputs with *tokenizer* and diff the token lists."""
    options = options or DiffOptions()
    tok = get_tokenizer(tokenizer)

    old_tokens = tok.split(old_text, options)
    new_tokens = tok.split(new_text, options)

    use_longest = tok.use_longest_token
    if options.use_longest_token is not None:
        use_longest = options.use_longest_token

    return diff_sequences(
        old_tokens,
        new_tokens,
        equals=lambda left, right: tok.equals(left, right, options),
        use_longest_token=use_longest,
    )


def diff_lines(old_text: str, new_text: str, options: DiffOptions | None = None) -> list[DiffOp]:
    return diff(old_text, new_text, TokenizerKind.LINE, options)


def diff_words(old_text: str, new_text: str, options: DiffOptions | None = None) -> list[DiffOp]:
    return diff(old_text, new_text, TokenizerKind.WORD, options)


def diff_chars(old_text: str, new_text: str, options: DiffOptions | None = None) -> list[DiffOp]:
    return diff(old_text, new_text, TokenizerKind.CHARACTER, options)


def diff_sentences(old_text: str, new_text: str, options: DiffOptions | None = None) -> list[DiffOp]:
    return diff(old_text, new_text, TokenizerKind.SENTENCE, options)


def diff_css(old_text: str, new_text: str, options: DiffOptions | None = None) -> list[DiffOp]:
    return diff(old_text, new_text, TokenizerKind.CSS, options)


def diff_json(old_value: Any, new_value: Any, options: DiffOptions | None = None) -> list[DiffOp]:
    return diff(old_value, new_value, TokenizerKind.JSON, options)


def old_tokens_of(ops: list[DiffOp]) -> list[str]:
    """Reassemble the old token sequence from a diff."""
    tokens: list[str] = []
    for op in ops:
        if op.kind is not OpKind.INSERT:
            tokens.extend(op.old_tokens)
    return tokens


def new_tokens_of(ops: list[DiffOp]) -> list[str]:
    """Reassemble the new token sequence from a diff."""
    tokens: list[str] = []
    for op in ops:
        if op.kind is not OpKind.DELETE:
            tokens.extend(op.tokens)
    return tokens
