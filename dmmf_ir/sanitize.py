# File: dmmf_ir/sanitize.py
"""
dmmf-ir - Text Sanitization
=============================
Escaping for free text that generators embed in string literals and block
comments.

Escape order (each step must run after the previous one, because later
steps introduce backslashes that the first step would otherwise double):

1. backslash
2. quotes
3. U+2028 / U+2029 line and paragraph separators
4. remaining control characters
5. ``</script`` and ``</style`` sequences
6. comment terminators ``*/`` (documentation only, outside code fences)
"""

from __future__ import annotations

import re
from typing import List, Optional

CODE_FENCE: str = "```"

_CONTROL_RE: re.Pattern[str] = re.compile(r"[\x00-\x1f\x7f]")
_DOC_CONTROL_RE: re.Pattern[str] = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_CLOSING_TAG_RE: re.Pattern[str] = re.compile(r"</(script|style)", re.IGNORECASE)

_NAMED_CONTROL_ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _escape_control(match: re.Match[str]) -> str:
    char: str = match.group(0)
    named: Optional[str] = _NAMED_CONTROL_ESCAPES.get(char)
    if named is not None:
        return named
    return f"\\x{ord(char):02x}"


def _escape_text(text: str, control_re: re.Pattern[str]) -> str:
    out: str = text.replace("\\", "\\\\")
    out = out.replace('"', '\\"').replace("'", "\\'")
    out = out.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")
    out = control_re.sub(_escape_control, out)
    out = _CLOSING_TAG_RE.sub(r"<\\/\1", out)
    return out


def escape_for_codegen(value: str) -> str:
    """Escape *value* for embedding inside a double- or single-quoted literal."""
    return _escape_text(value, _CONTROL_RE)


def _balance_fences(segments: List[str]) -> List[str]:
    """
    Drop a dangling fence marker.

    ``text.split(CODE_FENCE)`` yields an even number of segments when the
    marker count is odd; the last marker then opens a fence that never
    closes, so its two neighbours are joined without it.
    """
    if len(segments) % 2 == 0:
        tail: str = segments.pop()
        segments[-1] = segments[-1] + tail
    return segments


def sanitize_documentation(doc: Optional[str]) -> Optional[str]:
    """
    Make documentation text safe to place in a generated block comment.

    Text inside balanced triple-backtick fences keeps its comment
    terminators; everywhere else ``*/`` becomes ``*\\/``.  Newlines and tabs
    are preserved so fenced examples stay readable.

    Returns None for missing, non-string or blank input.
    """
    if not isinstance(doc, str) or not doc.strip():
        return None

    text: str = doc.replace("\r\n", "\n").replace("\r", "\n")
    text = _escape_text(text, _DOC_CONTROL_RE)

    segments: List[str] = _balance_fences(text.split(CODE_FENCE))
    for i in range(0, len(segments), 2):
        segments[i] = segments[i].replace("*/", "*\\/")

    return CODE_FENCE.join(segments).strip() or None


__all__: List[str] = [
    "CODE_FENCE",
    "escape_for_codegen",
    "sanitize_documentation",
]
