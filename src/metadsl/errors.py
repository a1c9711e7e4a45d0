"""
Errors and diagnostics for the Meta DSL engine.

Two families live here:

    - Exceptions (MetaDSLError and subclasses) for failures that must
      reach the caller: lookups at call sites, invocation failures,
      unreconstructable descriptions.
    - Diagnostic records for recoverable compile-time problems.
      Compilation never raises for a single bad statement; it records a
      Diagnostic and moves on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MetaDSLError(Exception):
    """Base class for all engine errors."""
    pass


class TranslationError(MetaDSLError):
    """Raised when an arrow definition does not have the expected shape."""
    pass


class EvaluationError(MetaDSLError):
    """Raised when a value expression cannot be evaluated."""
    pass


class ObjectNotFoundError(MetaDSLError):
    """Raised when an id is not present in the registry."""

    def __init__(self, object_id: str):
        self.object_id = object_id
        super().__init__(f"Object '{object_id}' not found")


class OperationNotFoundError(MetaDSLError):
    """Raised when an operation is missing or not callable on an object."""

    def __init__(self, object_id: str, operation: str):
        self.object_id = object_id
        self.operation = operation
        super().__init__(f"Method '{operation}' not callable or missing in '{object_id}'")


class InvocationError(MetaDSLError):
    """Raised when a callable body fails. Carries the underlying message."""

    def __init__(self, object_id: str, operation: str, cause: BaseException):
        self.object_id = object_id
        self.operation = operation
        self.cause = cause
        super().__init__(f"Call to '{object_id}.{operation}' failed: {cause}")


class ReconstructionError(MetaDSLError):
    """Raised when a description cannot be rebuilt into a structured object."""
    pass


class DiagnosticKind(Enum):
    """Kinds of recoverable compile-time problems."""

    UNCLOSED_BLOCK = "unclosed-block"
    MALFORMED_STATEMENT = "malformed-statement"
    TRANSLATION_FAILED = "translation-failed"
    EVALUATION_FAILED = "evaluation-failed"
    MISSING_OBJECT = "missing-object"


@dataclass(frozen=True)
class Diagnostic:
    """
    A non-fatal problem found while segmenting or compiling DSL text.

    Properties:
        kind: DiagnosticKind
        message: Human-readable description
        object_id: The declaration id involved, when known
        statement: The offending statement text, when known
    """

    kind: DiagnosticKind
    message: str
    object_id: Optional[str] = None
    statement: Optional[str] = None

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"
