"""
LogGuard exception hierarchy.

Every failure the transformation pipeline can report is a LogGuardError,
so callers (the CLI, build integrations) can catch one type.

Compile-time errors (anything the engine signals about a class being
transformed) derive from TransformationError.
"""

from __future__ import annotations

from typing import Optional


class LogGuardError(Exception):
    """Base exception for all LogGuard errors."""


class ParseError(LogGuardError):
    """Raised when source text cannot be parsed into the model."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


# --- Transformation ---


class TransformationError(LogGuardError):
    """Base for compile-time errors raised while transforming a class."""

    def __init__(self, class_name: str, detail: str) -> None:
        self.class_name = class_name
        super().__init__(f"{class_name}: {detail}")


class DuplicateFieldError(TransformationError):
    """Raised when the annotated class already declares the logger field."""

    def __init__(self, class_name: str, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(
            class_name,
            f"class annotated with @Commons cannot declare a field named '{field_name}'",
        )


class StrategyInstantiationError(TransformationError):
    """Raised when the configured logging strategy cannot be created."""

    def __init__(self, class_name: str, strategy: object, reason: str) -> None:
        self.strategy = strategy
        super().__init__(class_name, f"cannot instantiate logging strategy {strategy!r}: {reason}")


class InvalidAnnotationError(TransformationError):
    """Raised when an annotation member has the wrong shape."""


# --- Types ---


class UnresolvedTypeError(LogGuardError):
    """Raised when a type reference is used where it must resolve, but cannot."""

    def __init__(self, type_name: str, context: str = "") -> None:
        self.type_name = type_name
        self.context = context
        message = f"Unable to resolve class {type_name}"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)


class PreconditionError(LogGuardError, ValueError):
    """Raised when a caller violates an operation's input contract."""


class EvaluationError(LogGuardError):
    """Raised when the interpreter cannot evaluate an expression."""
