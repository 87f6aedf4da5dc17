"""
Edit requests — the ``(old_string, new_string, replace_all)`` unit, plus
helpers that normalise requests before a transaction runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from ..diffing.hunks import NO_NEWLINE_MARKER, Hunk

logger = logging.getLogger(__name__)

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off", "")


def _as_flag(value: Any) -> bool:
    """Read a replace_all flag; strings use the same spellings as env config."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise ValueError(f"replace_all must be a boolean, got {value!r}")


@dataclass(frozen=True)
class Edit:
    """One requested substitution."""
    old_string: str
    new_string: str
    replace_all: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Edit":
        """Build from a tool-call payload (snake_case or camelCase keys)."""
        old = data.get("old_string", data.get("oldString"))
        new = data.get("new_string", data.get("newString"))
        if old is None or new is None:
            raise ValueError(f"Edit requires old_string and new_string: {data!r}")
        replace_all = data.get("replace_all", data.get("replaceAll", False))
        return cls(str(old), str(new), _as_flag(replace_all))

    def to_dict(self) -> dict:
        return {
            "old_string": self.old_string,
            "new_string": self.new_string,
            "replace_all": self.replace_all,
        }


def normalize_edits(edits: Iterable[Any]) -> list[Edit]:
    """Coerce dicts, tuples and :class:`Edit` objects into a list of Edits."""
    result: list[Edit] = []
    for item in edits:
        if isinstance(item, Edit):
            result.append(item)
        elif isinstance(item, dict):
            result.append(Edit.from_dict(item))
        elif isinstance(item, (tuple, list)) and len(item) in (2, 3):
            flag = _as_flag(item[2]) if len(item) == 3 else False
            result.append(Edit(item[0], item[1], flag))
        else:
            raise TypeError(f"Cannot interpret {item!r} as an edit")
    return result


# Abbreviated tags that can appear in model output in place of the real ones.
_TAG_EXPANSIONS = {
    "<fnr>": "<function_results>",
    "<n>": "<name>",
    "</n>": "</name>",
    "<o>": "<output>",
    "</o>": "</output>",
    "<e>": "<error>",
    "</e>": "</error>",
    "<s>": "<system>",
    "</s>": "</system>",
    "<r>": "<result>",
    "</r>": "</result>",
    "< META_START >": "<META_START>",
    "< META_END >": "<META_END>",
    "< EOT >": "<EOT>",
    "< META >": "<META>",
    "< SOS >": "<SOS>",
    "\n\nH:": "\n\nHuman:",
    "\n\nA:": "\n\nAssistant:",
}


def expand_tags(text: str) -> tuple[str, list[tuple[str, str]]]:
    """Expand abbreviated tags in *text*; return it with the expansions used."""
    applied: list[tuple[str, str]] = []
    for short, full in _TAG_EXPANSIONS.items():
        expanded = text.replace(short, full)
        if expanded != text:
            applied.append((short, full))
            text = expanded
    return text, applied


def desanitize_edits(content: str, edits: Iterable[Any]) -> list[Edit]:
    """Repair edits whose ``old_string`` only matches after tag expansion.

    An edit that already matches *content* is left alone.  Otherwise, when
    the expanded ``old_string`` is found, the same expansions are applied to
    ``new_string`` so the edit stays consistent.
    """
    repaired: list[Edit] = []
    for edit in normalize_edits(edits):
        if edit.old_string in content:
            repaired.append(edit)
            continue
        old, applied = expand_tags(edit.old_string)
        if applied and old in content:
            new = edit.new_string
            for short, full in applied:
                new = new.replace(short, full)
            logger.debug(
                "[Edits] Expanded %d abbreviated tag(s) in old_string", len(applied),
            )
            repaired.append(Edit(old, new, edit.replace_all))
        else:
            repaired.append(edit)
    return repaired


def hunks_to_edits(hunks: list[Hunk]) -> list[Edit]:
    """Turn hunks back into exact-string edits, one per hunk.

    Used when a reviewer modified the proposed patch: context plus removed
    lines become ``old_string``, context plus added lines ``new_string``.
    """
    edits: list[Edit] = []
    for hunk in hunks:
        old_lines: list[str] = []
        new_lines: list[str] = []
        for line in hunk.lines:
            if line == NO_NEWLINE_MARKER:
                continue
            marker, text = line[:1], line[1:]
            if marker == " ":
                old_lines.append(text)
                new_lines.append(text)
            elif marker == "-":
                old_lines.append(text)
            elif marker == "+":
                new_lines.append(text)
        edits.append(Edit("\n".join(old_lines), "\n".join(new_lines)))
    return edits
