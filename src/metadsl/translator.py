"""
Arrow-Syntax Translator.

Converts the DSL's `(p1, p2, ...) => body` surface form into Python source
for a single function, then compiles it into a NativeClosure.

Translation:
    (name) => "hi " + name

Becomes:
    def __metadsl_fn__(_p_name):
        return "hi " + _p_name

Rules:
    - Parameters are comma-split, trimmed, blanks dropped.
    - Every whole-identifier occurrence of a parameter in the body is
      rewritten to its parameter variable (`_p_<name>`). Occurrences inside
      string literals, attribute accesses (`obj.name`) and keyword-argument
      names (`dict(name=name)`) are left alone.
      Because of the rewrite, parameters may be Python keywords.
    - A body wrapped in braces is a statement sequence; the outer pair is
      stripped and the inner text dedented. Any other body is a single
      expression and is wrapped in `return`.

IMPORTANT:
    Bodies run as ordinary Python with full builtins. There is no sandbox.
"""

import re
import textwrap
from dataclasses import dataclass
from typing import Tuple

from .errors import TranslationError
from .model import NativeClosure
from .segmenter import mask_quoted

FUNCTION_NAME = "__metadsl_fn__"
PARAM_PREFIX = "_p_"

_ARROW_RE = re.compile(r'^\(([^)]*)\)\s*=>\s*(.+)$', re.DOTALL)
_IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_STRING_PATTERN = r'''(?P<str>(["'])(?:\\.|(?!\2).)*?\2)'''
_KWARG_ASSIGN_RE = re.compile(r'\s*=(?!=)')
_CLOSERS = {')': '(', ']': '[', '}': '{'}


@dataclass(frozen=True)
class ArrowTranslation:
    """
    Result of translating one arrow definition.

    Properties:
        params: Declared parameter names, in order
        body: Rewritten function body (already indented)
        source: Complete Python source defining the function
    """

    params: Tuple[str, ...]
    body: str
    source: str


def _innermost_bracket(text: str) -> str:
    """Opening bracket enclosing the end of `text`, or '' at top level."""
    stack = []
    for ch in text:
        if ch in '([{':
            stack.append(ch)
        elif ch in _CLOSERS and stack and stack[-1] == _CLOSERS[ch]:
            stack.pop()
    return stack[-1] if stack else ''


def _is_keyword_argument(masked: str, start: int, end: int) -> bool:
    """True if the identifier at [start, end) names a keyword argument: `f(x, name=...)`."""
    if not _KWARG_ASSIGN_RE.match(masked, end):
        return False
    before = masked[:start].rstrip()
    return before.endswith(('(', ',')) and _innermost_bracket(before) == '('


def _rewrite_param(body: str, param: str) -> str:
    """
    Rewrite free occurrences of `param` in `body`.

    String literals, attribute names and keyword-argument names are skipped.
    """
    pattern = re.compile(
        _STRING_PATTERN + r'|(?<![\w.])' + re.escape(param) + r'(?!\w)'
    )
    masked = mask_quoted(body)

    def replace(match: re.Match) -> str:
        if match.group('str') is not None:
            return match.group(0)
        if _is_keyword_argument(masked, match.start(), match.end()):
            return match.group(0)
        return PARAM_PREFIX + param

    return pattern.sub(replace, body)


def _block_body(body: str) -> str:
    """Turn a brace-delimited body into an indented statement block."""
    inner = body[1:]
    if inner.rstrip().endswith('}'):
        inner = inner.rstrip()[:-1]

    lines = inner.split('\n')
    head = lines[0].strip()
    rest = textwrap.dedent('\n'.join(lines[1:])).strip('\n')
    text = '\n'.join(part for part in (head, rest) if part.strip())
    if not text.strip():
        text = 'pass'
    return textwrap.indent(text, '    ')


def translate_arrow(expr: str) -> ArrowTranslation:
    """
    Translate an arrow definition into Python function source.

    Args:
        expr: Text of the form `(params) => body`

    Returns:
        ArrowTranslation

    Raises:
        TranslationError: If `expr` is not an arrow definition or declares
            an invalid parameter name
    """
    match = _ARROW_RE.match(expr.strip())
    if not match:
        raise TranslationError(f"Invalid arrow function: {expr.strip()!r}")

    params = tuple(p.strip() for p in match.group(1).split(',') if p.strip())
    for p in params:
        if not _IDENTIFIER_RE.match(p):
            raise TranslationError(f"Invalid parameter name: {p!r}")
    if len(set(params)) != len(params):
        raise TranslationError(f"Duplicate parameter names: {', '.join(params)}")

    body = match.group(2).strip()
    for p in params:
        body = _rewrite_param(body, p)

    if body.startswith('{'):
        body = _block_body(body)
    else:
        body = f"    return {body.rstrip(';').strip()}"

    signature = ', '.join(PARAM_PREFIX + p for p in params)
    source = f"def {FUNCTION_NAME}({signature}):\n{body}\n"
    return ArrowTranslation(params=params, body=body, source=source)


def compile_arrow(expr: str, name: str = "<arrow>") -> NativeClosure:
    """
    Translate and compile an arrow definition into a NativeClosure.

    Args:
        expr: Text of the form `(params) => body`
        name: Used in the compiled code's filename for tracebacks

    Raises:
        TranslationError: If translation fails or the generated source does
            not compile
    """
    translation = translate_arrow(expr)
    try:
        code = compile(translation.source, f"<metadsl:{name}>", "exec")
    except SyntaxError as e:
        raise TranslationError(f"Generated code for '{name}' does not compile: {e.msg}") from e

    namespace: dict = {}
    exec(code, namespace)
    return NativeClosure(namespace[FUNCTION_NAME], translation.params, translation.source)


__all__ = ["ArrowTranslation", "translate_arrow", "compile_arrow"]
