"""
Statement Segmenter (Layer 1: Raw DSL text → logical statements).

Rules:
    - Statements end at ';' or at the end of a line.
    - A statement starting with `let` that opens a brace is a block: it
      keeps accumulating lines (newlines included) until its brace depth
      returns to zero or less.
    - A block still open at end of input is flushed best-effort and
      reported as an UNCLOSED_BLOCK diagnostic.

Syntax Notes:
    - Scanning is quote-aware. ';', '{' and '}' inside '...' or "..."
      never count. Backslash escapes the next character inside a string.
    - Quote state does not carry across line ends: string literals are
      single-line.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List

from .errors import Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)

_DECLARATION_RE = re.compile(r'^\s*let\b')
_OPENERS = {'(': ')', '[': ']', '{': '}'}
_CLOSERS = {')', ']', '}'}


@dataclass
class Segmentation:
    """Result of segmenting DSL text."""
    statements: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def mask_quoted(text: str) -> str:
    """
    Return `text` with the contents of string literals blanked out.

    The result has the same length as `text` and keeps the quote characters,
    so indices found in the mask are valid in `text`.
    """
    out = []
    quote = None
    escaped = False
    for ch in text:
        if quote is None:
            if ch in "'\"":
                quote = ch
            out.append(ch)
            continue
        if escaped:
            escaped = False
            out.append(' ')
        elif ch == '\\':
            escaped = True
            out.append(' ')
        elif ch == quote:
            quote = None
            out.append(ch)
        elif ch == '\n':
            quote = None
            out.append(ch)
        else:
            out.append(' ')
    return ''.join(out)


def contains_unquoted(text: str, token: str) -> bool:
    """True if `token` occurs in `text` outside string literals."""
    return token in mask_quoted(text)


def split_top_level(text: str, sep: str = ',') -> List[str]:
    """
    Split on `sep` outside string literals and outside (), [] and {}.

    Returns trimmed, non-empty parts.
    """
    masked = mask_quoted(text)
    parts = []
    depth = 0
    start = 0
    for i, ch in enumerate(masked):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(depth - 1, 0)
        elif ch == sep and depth == 0:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return [p.strip() for p in parts if p.strip()]


def split_statements(code: str) -> Segmentation:
    """
    Segment DSL source text into logical statements.

    Args:
        code: Raw, multi-line DSL text

    Returns:
        Segmentation with ordered statements and any diagnostics
    """
    result = Segmentation()
    buf: List[str] = []
    depth = 0

    def flush() -> None:
        stmt = ''.join(buf).strip()
        buf.clear()
        if stmt:
            result.statements.append(stmt)

    for line in code.splitlines():
        masked = mask_quoted(line)
        for ch, m in zip(line, masked):
            if depth > 0:
                buf.append(ch)
                if m == '{':
                    depth += 1
                elif m == '}':
                    depth -= 1
                continue

            if m == ';':
                flush()
                continue

            buf.append(ch)
            if m == '{' and _DECLARATION_RE.match(''.join(buf)):
                depth = 1

        if depth > 0:
            buf.append('\n')
        else:
            depth = 0
            flush()

    if depth > 0:
        block = ''.join(buf).strip()
        first_line = block.splitlines()[0] if block else ''
        diagnostic = Diagnostic(
            DiagnosticKind.UNCLOSED_BLOCK,
            f"Unclosed '{{' in block starting at: {first_line}",
            statement=block,
        )
        logger.warning("%s", diagnostic)
        result.diagnostics.append(diagnostic)
        flush()

    return result


__all__ = [
    "Segmentation",
    "split_statements",
    "mask_quoted",
    "contains_unquoted",
    "split_top_level",
]
