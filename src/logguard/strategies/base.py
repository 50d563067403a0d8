"""
Logging strategy contract.

A strategy knows one logging facade. The transformation engine drives it;
the strategy never calls back into the engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from logguard.errors import PreconditionError
from logguard.expressions import Expression
from logguard.model import ClassNode, FieldNode


class LoggingStrategy(ABC):
    """
    Capability contract every logging strategy implements.

    Subclasses must be constructible without arguments; the engine
    instantiates them from the annotation's `loggingStrategy` member.
    """

    @abstractmethod
    def add_logger_field_to_class(self, class_node: ClassNode, field_name: str) -> FieldNode:
        """
        Add the static logger field to class_node and return it.

        The engine has already checked that no field named field_name exists.
        """

    @abstractmethod
    def is_logging_method(self, method_name: str) -> bool:
        """True if a call of method_name on the logger should be guarded."""

    @abstractmethod
    def wrap_logging_method_call(
        self, log_variable: Expression, method_name: str, original_expression: Expression
    ) -> Expression:
        """Return original_expression wrapped in an enablement guard."""


def guard_method_name(method_name: str) -> str:
    """
    Enablement predicate for a level method.

        debug -> isDebugEnabled
        trace -> isTraceEnabled
    """
    if not method_name:
        raise PreconditionError("logging method name must not be empty")
    return "is" + method_name[0].upper() + method_name[1:] + "Enabled"
