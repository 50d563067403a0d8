"""
Apache Commons Logging strategy.

Adds

    private static final transient Log log = LogFactory.getLog(Foo)

to the annotated class and rewrites

    log.debug(msg)

into

    log.isDebugEnabled() ? log.debug(msg) : null
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import FrozenSet, Optional

from logguard.expressions import (
    EMPTY_ARGUMENTS,
    NULL,
    ArgumentListExpression,
    BooleanExpression,
    ClassExpression,
    Expression,
    MethodCallExpression,
    TernaryExpression,
)
from logguard.model import ClassNode, FieldNode, Modifier
from logguard.strategies.base import LoggingStrategy, guard_method_name
from logguard.typesystem import ClassPath, TypeDescriptor

logger = logging.getLogger(__name__)

LOGGER_TYPE_NAME = "org.apache.commons.logging.Log"
LOGGER_FACTORY_TYPE_NAME = "org.apache.commons.logging.LogFactory"

LOGGING_METHODS: FrozenSet[str] = frozenset({"fatal", "error", "warn", "info", "debug", "trace"})

LOGGER_FIELD_MODIFIERS = Modifier.PRIVATE | Modifier.STATIC | Modifier.FINAL | Modifier.TRANSIENT


@dataclass(frozen=True)
class LoggerFacadeBinding:
    """The facade's logger type and the factory type that creates loggers."""

    logger_type: TypeDescriptor
    factory_type: TypeDescriptor

    @property
    def resolved(self) -> bool:
        return self.logger_type.resolved and self.factory_type.resolved


def resolve_facade_binding(classpath: ClassPath) -> LoggerFacadeBinding:
    """
    Look both facade types up on classpath.

    A miss does not raise: the binding then holds placeholders and the
    error appears when generated code is type checked.
    """
    binding = LoggerFacadeBinding(
        logger_type=classpath.lookup(LOGGER_TYPE_NAME),
        factory_type=classpath.lookup(LOGGER_FACTORY_TYPE_NAME),
    )
    if not binding.resolved:
        logger.warning(
            "Commons Logging not found on class path; binding %s and %s by name",
            LOGGER_TYPE_NAME,
            LOGGER_FACTORY_TYPE_NAME,
        )
    return binding


_binding_lock = threading.Lock()
_binding: Optional[LoggerFacadeBinding] = None


def facade_binding(classpath: Optional[ClassPath] = None) -> LoggerFacadeBinding:
    """
    Process-wide binding, resolved once on first use.

    classpath is only consulted by the first call; without one the
    binding is resolved against an empty class path (placeholders).
    Callers with a class path, such as LogTransformation, settle the
    binding before any strategy is constructed.
    """
    global _binding
    with _binding_lock:
        if _binding is None:
            _binding = resolve_facade_binding(classpath if classpath is not None else ClassPath())
        return _binding


def reset_facade_binding() -> None:
    """Forget the process-wide binding so the next use resolves again."""
    global _binding
    with _binding_lock:
        _binding = None


class CommonsLoggingStrategy(LoggingStrategy):
    """Strategy for the Commons Logging `Log` / `LogFactory` facade."""

    def __init__(self, binding: Optional[LoggerFacadeBinding] = None) -> None:
        self.binding = binding if binding is not None else facade_binding()

    def add_logger_field_to_class(self, class_node: ClassNode, field_name: str) -> FieldNode:
        return class_node.add_field(
            field_name,
            LOGGER_FIELD_MODIFIERS,
            self.binding.logger_type,
            MethodCallExpression(
                ClassExpression(self.binding.factory_type),
                "getLog",
                ArgumentListExpression((ClassExpression(class_node.type_descriptor),)),
            ),
        )

    def is_logging_method(self, method_name: str) -> bool:
        return method_name in LOGGING_METHODS

    def wrap_logging_method_call(
        self, log_variable: Expression, method_name: str, original_expression: Expression
    ) -> Expression:
        condition = MethodCallExpression(log_variable, guard_method_name(method_name), EMPTY_ARGUMENTS)
        return TernaryExpression(BooleanExpression(condition), original_expression, NULL)
