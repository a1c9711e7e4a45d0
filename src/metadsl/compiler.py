"""
Declaration Compiler (Layer 2: statements → MetaObject registry).

Statements:
    debug on|off                 toggle tracing on this compiler's config
    let <id> = (a, b) => expr    callable, type "function", tag "callable"
    let <id> = object(k: v, ..)  structured record, type "abstract-object"
    let <id> = <literal>         Python literal, type "value", tag "value"
    tag <id> as t1, t2, ...      add tags (trimmed, deduplicated)

Error policy:
    Compilation is best-effort. A bad statement becomes a Diagnostic, is
    logged as a warning and skipped; the next statement still compiles.
"""

import ast
import logging
import re
import threading
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional

from .binder import arguments_for, build_meta_object
from .config import CompilerConfig
from .errors import (
    Diagnostic,
    DiagnosticKind,
    EvaluationError,
    ObjectNotFoundError,
    TranslationError,
)
from .model import EXECUTE, MetaObject, MetaVar
from .routes import Route, export_routes
from .segmenter import contains_unquoted, split_statements, split_top_level
from .translator import compile_arrow

logger = logging.getLogger(__name__)

ARROW = "=>"

_DEBUG_RE = re.compile(r'^debug\s+(on|off)\b', re.IGNORECASE)
_LET_RE = re.compile(r'^let\s+(\w+)\s*=\s*(.+)$', re.DOTALL)
_TAG_RE = re.compile(r'^tag\s+(\w+)\s+as\s+(.+)$', re.DOTALL)
_OBJECT_RE = re.compile(r'^object\s*\((.*)\)$', re.DOTALL)


def _contains_set(value: Any) -> bool:
    if isinstance(value, (set, frozenset)):
        return True
    if isinstance(value, dict):
        return any(_contains_set(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(_contains_set(v) for v in value)
    return False


def evaluate_value(expr: str) -> Any:
    """
    Evaluate a value expression as a Python literal.

    Accepts strings, numbers, tuples, lists, dicts, booleans and None.
    Sets, including nested ones, are rejected.

    Raises:
        EvaluationError: If `expr` is not a literal or contains a set
    """
    try:
        value = ast.literal_eval(expr.strip())
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError) as e:
        raise EvaluationError(f"Invalid value expression {expr.strip()!r}: {e}") from e
    if _contains_set(value):
        raise EvaluationError(f"Set literals are not supported: {expr.strip()!r}")
    return value


def parse_object_fields(args: str) -> Dict[str, Any]:
    """
    Parse the argument list of `object(name: "Alice", age: 30)`.

    Keys are bare identifiers or quoted strings; values are Python literals.

    Raises:
        EvaluationError: If an entry is not `key: value`
    """
    values: Dict[str, Any] = {}
    for entry in split_top_level(args, ','):
        parts = split_top_level(entry, ':')
        if len(parts) != 2:
            raise EvaluationError(f"Invalid object field {entry!r}, expected 'key: value'")
        key, raw = parts
        if key[:1] in "'\"":
            key = evaluate_value(key)
        values[str(key)] = evaluate_value(raw)
    return values


class MetaCompiler:
    """
    Compiles DSL text into a registry of MetaObjects.

    The registry persists across compile() calls on the same instance
    unless `reset` (or config.reset_on_compile) asks for a fresh one.
    The config is copied, so `debug on` never leaks into a shared config.
    Registry mutation is serialized by an instance lock; describe, route
    export and invocation need no locking once compilation has finished.

    Example:
        compiler = MetaCompiler()
        compiler.compile('let greet = (name) => "hi " + name; '
                         'tag greet as api, path:/greet;')
        compiler.export_routes()  # -> [Route("/greet", "GET", <greet>)]
    """

    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = replace(config) if config is not None else CompilerConfig()
        self.objects: Dict[str, MetaObject] = {}
        self.diagnostics: List[Diagnostic] = []
        self._lock = threading.Lock()

    @property
    def debug(self) -> bool:
        return self.config.debug

    def set_debug(self, enabled: bool) -> None:
        self.config.debug = bool(enabled)
        if self.config.debug:
            logger.info("[SYSTEM] Debug mode ON")

    def _trace(self, msg: str, *args: Any) -> None:
        if self.config.debug:
            logger.debug(msg, *args)

    def _report(self, diagnostics: List[Diagnostic], diagnostic: Diagnostic) -> None:
        logger.warning("%s", diagnostic)
        diagnostics.append(diagnostic)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def add_object(self, obj: MetaObject) -> None:
        with self._lock:
            self.objects[obj.id] = obj

    def get_object(self, object_id: str) -> MetaObject:
        """
        Raises:
            ObjectNotFoundError: If `object_id` is not registered
        """
        try:
            return self.objects[object_id]
        except KeyError:
            raise ObjectNotFoundError(object_id) from None

    def describe_object(self, object_id: str) -> Dict[str, Any]:
        """Description of a registered object, or {} if unknown."""
        obj = self.objects.get(object_id)
        return obj.describe() if obj is not None else {}

    def reset(self) -> None:
        with self._lock:
            self.objects = {}
            self.diagnostics = []

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def compile(self, code: str, reset: bool = False) -> List[Diagnostic]:
        """
        Compile DSL text into the registry.

        Args:
            code: DSL source text
            reset: Wipe the registry before compiling

        Returns:
            Diagnostics produced by this pass (also appended to
            self.diagnostics)
        """
        if reset or self.config.reset_on_compile:
            self.reset()

        segmentation = split_statements(code)
        diagnostics = list(segmentation.diagnostics)

        for stmt in segmentation.statements:
            debug_match = _DEBUG_RE.match(stmt)
            if debug_match:
                self.set_debug(debug_match.group(1).lower() == "on")
                continue

            self._trace("[DSL] %s", stmt)
            if stmt.startswith("let"):
                self._handle_define(stmt, diagnostics)
            elif stmt.startswith("tag"):
                self._handle_tag(stmt, diagnostics)
            else:
                self._report(diagnostics, Diagnostic(
                    DiagnosticKind.MALFORMED_STATEMENT,
                    f"Unrecognized statement: {stmt}",
                    statement=stmt,
                ))

        self.diagnostics.extend(diagnostics)
        return diagnostics

    def compile_file(self, filepath: str, reset: bool = False) -> List[Diagnostic]:
        """
        Compile a DSL source file (UTF-8).

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        with open(filepath, 'r', encoding='utf-8') as f:
            code = f.read()
        return self.compile(code, reset=reset)

    def _handle_define(self, stmt: str, diagnostics: List[Diagnostic]) -> None:
        match = _LET_RE.match(stmt)
        if not match:
            self._report(diagnostics, Diagnostic(
                DiagnosticKind.MALFORMED_STATEMENT,
                f"Malformed let statement: {stmt}",
                statement=stmt,
            ))
            return

        object_id = match.group(1)
        expr = match.group(2).strip()
        try:
            obj = self._build_object(object_id, expr)
        except TranslationError as e:
            self._report(diagnostics, Diagnostic(
                DiagnosticKind.TRANSLATION_FAILED,
                f"In define '{object_id}': {e}",
                object_id=object_id,
                statement=stmt,
            ))
            return
        except EvaluationError as e:
            self._report(diagnostics, Diagnostic(
                DiagnosticKind.EVALUATION_FAILED,
                f"In define '{object_id}': {e}",
                object_id=object_id,
                statement=stmt,
            ))
            return

        self.add_object(obj)
        self._trace("[OK] Object '%s' created", object_id)

    def _build_object(self, object_id: str, expr: str) -> MetaObject:
        if contains_unquoted(expr, ARROW):
            closure = compile_arrow(expr, name=object_id)
            self._trace("[DEBUG EVAL]:\n%s", closure.source)
            obj = MetaObject(object_id, "function")
            obj.add_method(EXECUTE, closure)
            obj.tag("callable")
            return obj

        object_match = _OBJECT_RE.match(expr)
        if object_match:
            values = parse_object_fields(object_match.group(1))
            obj = build_meta_object(object_id, values, self.config.source_type)
            obj.tag("object")
            return obj

        obj = MetaObject(object_id, "value", evaluate_value(expr))
        obj.tag("value")
        return obj

    def _handle_tag(self, stmt: str, diagnostics: List[Diagnostic]) -> None:
        match = _TAG_RE.match(stmt)
        if not match:
            self._report(diagnostics, Diagnostic(
                DiagnosticKind.MALFORMED_STATEMENT,
                f"Malformed tag statement: {stmt}",
                statement=stmt,
            ))
            return

        object_id = match.group(1)
        tags = [t.strip() for t in match.group(2).split(',') if t.strip()]
        with self._lock:
            obj = self.objects.get(object_id)
            if obj is not None:
                obj.tag(*tags)

        if obj is None:
            self._report(diagnostics, Diagnostic(
                DiagnosticKind.MISSING_OBJECT,
                f"Tried to tag missing object '{object_id}'",
                object_id=object_id,
                statement=stmt,
            ))
            return
        self._trace("[OK] Tagged '%s' as %s", object_id, ", ".join(tags))

    # ------------------------------------------------------------------
    # Routes and arguments
    # ------------------------------------------------------------------

    def export_routes(self) -> List[Route]:
        return export_routes(self.objects)

    def arguments_for(self, obj: MetaObject, source: Mapping, source_type: Optional[str] = None) -> List[MetaVar]:
        """Bind external input against `obj`'s declared execute parameters."""
        return arguments_for(obj, source, source_type or self.config.source_type)
