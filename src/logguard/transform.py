"""
Log Transformation: applies @Commons to the classes of a compilation unit.

For every annotated class:
    1. Read the annotation into a LoggingConfiguration
    2. Instantiate the configured strategy
    3. Reject the class if it already declares the logger field
    4. Let the strategy add the logger field
    5. Rewrite logging calls on the logger variable in method bodies
       and field initializers
    6. Drop the annotation (source retention)

A call is rewritten when:
    - its receiver is the bare logger name
    - the name is not bound by a parameter of the enclosing method
    - the strategy recognizes the method as a logging method
    - it is not already the guarded branch of an enablement check
    - (optionally) it has at least one non-trivial argument

IMPORTANT: The class is modified in place. The report is a by-product.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from logguard.annotation import (
    configuration_from_annotation,
    instantiate_strategy,
    is_logging_annotation,
)
from logguard.config import TransformConfig
from logguard.errors import DuplicateFieldError
from logguard.expressions import (
    ArgumentListExpression,
    BooleanExpression,
    ConstantExpression,
    Expression,
    MethodCallExpression,
    NotExpression,
    PropertyExpression,
    TernaryExpression,
    VariableExpression,
)
from logguard.model import ClassNode, CompilationUnit, ExpressionStatement, ReturnStatement, Statement
from logguard.strategies import LoggingStrategy, facade_binding
from logguard.typesystem import ClassPath

logger = logging.getLogger(__name__)


@dataclass
class ClassReport:
    """What the transformation did to one class."""

    class_name: str
    field_name: str
    strategy: str
    wrapped_calls: int = 0
    untouched_calls: int = 0          # non-logging methods called on the logger
    skipped_simple_calls: int = 0     # only constant/variable arguments
    already_guarded_calls: int = 0
    shadowed_methods: List[str] = field(default_factory=list)


@dataclass
class TransformationReport:
    """Per-class reports for one compilation unit."""

    unit_name: str
    classes: List[ClassReport] = field(default_factory=list)

    @property
    def total_wrapped_calls(self) -> int:
        return sum(c.wrapped_calls for c in self.classes)

    def get_class_report(self, class_name: str) -> Optional[ClassReport]:
        for report in self.classes:
            if report.class_name == class_name:
                return report
        return None


def _is_simple_expression(expr: Expression) -> bool:
    return isinstance(expr, (ConstantExpression, VariableExpression))


def _uses_simple_arguments_only(call: MethodCallExpression) -> bool:
    return all(_is_simple_expression(arg) for arg in call.arguments)


class _CallRewriter:
    """Rewrites logging calls on one logger name, bottom-up."""

    def __init__(
        self,
        strategy: LoggingStrategy,
        field_name: str,
        skip_simple_arguments: bool,
        report: ClassReport,
    ) -> None:
        self.strategy = strategy
        self.field_name = field_name
        self.skip_simple_arguments = skip_simple_arguments
        self.report = report

    def visit_statement(self, statement: Statement) -> Statement:
        expr = self.visit(statement.expression)
        if expr is statement.expression:
            return statement
        if isinstance(statement, ReturnStatement):
            return ReturnStatement(expr)
        return ExpressionStatement(expr)

    def visit(self, expr: Expression) -> Expression:
        if isinstance(expr, MethodCallExpression):
            return self._transform_call(self._visit_call_children(expr))

        if isinstance(expr, TernaryExpression):
            if self._is_existing_guard(expr):
                self.report.already_guarded_calls += 1
                true_branch = self._visit_call_children(expr.true_expression)
                false_branch = self.visit(expr.false_expression)
                if true_branch is expr.true_expression and false_branch is expr.false_expression:
                    return expr
                return TernaryExpression(expr.boolean_expression, true_branch, false_branch)

            condition = self.visit(expr.boolean_expression)
            true_branch = self.visit(expr.true_expression)
            false_branch = self.visit(expr.false_expression)
            if (
                condition is expr.boolean_expression
                and true_branch is expr.true_expression
                and false_branch is expr.false_expression
            ):
                return expr
            return TernaryExpression(condition, true_branch, false_branch)

        if isinstance(expr, BooleanExpression):
            inner = self.visit(expr.expression)
            return expr if inner is expr.expression else BooleanExpression(inner)

        if isinstance(expr, NotExpression):
            inner = self.visit(expr.expression)
            return expr if inner is expr.expression else NotExpression(inner)

        if isinstance(expr, PropertyExpression):
            inner = self.visit(expr.object_expression)
            return expr if inner is expr.object_expression else PropertyExpression(inner, expr.property)

        if isinstance(expr, ArgumentListExpression):
            return self._visit_arguments(expr)

        # Constants, variables, class references
        return expr

    def _visit_arguments(self, args: ArgumentListExpression) -> ArgumentListExpression:
        visited = tuple(self.visit(a) for a in args.arguments)
        if all(new is old for new, old in zip(visited, args.arguments)):
            return args
        return ArgumentListExpression(visited)

    def _visit_call_children(self, call: MethodCallExpression) -> MethodCallExpression:
        receiver = self.visit(call.object_expression)
        arguments = self._visit_arguments(call.arguments)
        if receiver is call.object_expression and arguments is call.arguments:
            return call
        return MethodCallExpression(receiver, call.method, arguments)

    def _is_logger_variable(self, expr: Expression) -> bool:
        return isinstance(expr, VariableExpression) and expr.name == self.field_name

    def _is_existing_guard(self, expr: TernaryExpression) -> bool:
        """True for `log.isXEnabled() ? log.x(...) : ...`."""
        call = expr.true_expression
        condition = expr.boolean_expression.expression
        if not isinstance(call, MethodCallExpression) or not isinstance(condition, MethodCallExpression):
            return False
        if not (self._is_logger_variable(call.object_expression) and self._is_logger_variable(condition.object_expression)):
            return False
        if not call.method or not self.strategy.is_logging_method(call.method):
            return False
        expected = self.strategy.wrap_logging_method_call(call.object_expression, call.method, call)
        return isinstance(expected, TernaryExpression) and expected.boolean_expression == expr.boolean_expression

    def _transform_call(self, call: MethodCallExpression) -> Expression:
        if not self._is_logger_variable(call.object_expression):
            return call
        if not self.strategy.is_logging_method(call.method):
            self.report.untouched_calls += 1
            return call
        if self.skip_simple_arguments and _uses_simple_arguments_only(call):
            self.report.skipped_simple_calls += 1
            return call
        self.report.wrapped_calls += 1
        logger.debug("Guarding %s.%s() in %s", self.field_name, call.method, self.report.class_name)
        return self.strategy.wrap_logging_method_call(call.object_expression, call.method, call)


class LogTransformation:
    """
    The engine that drives logging strategies over a compilation unit.

    Args:
        classpath: Types visible to the compilation (used to bind the
            logging facade). Defaults to an empty class path.
        skip_simple_arguments: Leave calls whose arguments are all
            constants or variables unguarded.
    """

    def __init__(self, classpath: Optional[ClassPath] = None, skip_simple_arguments: bool = False) -> None:
        self.classpath = classpath if classpath is not None else ClassPath()
        self.skip_simple_arguments = skip_simple_arguments

    @classmethod
    def from_config(cls, config: TransformConfig) -> "LogTransformation":
        return cls(classpath=config.class_path(), skip_simple_arguments=config.skip_simple_arguments)

    def transform_unit(self, unit: CompilationUnit) -> TransformationReport:
        """
        Transform every annotated class of unit.

        Raises:
            TransformationError: On the first class that cannot be transformed
        """
        # The facade binding is process-wide; settle it before any class is visited.
        facade_binding(self.classpath.with_unit(unit))

        report = TransformationReport(unit_name=unit.name)
        for class_node in unit.classes:
            class_report = self.transform_class(class_node)
            if class_report is not None:
                report.classes.append(class_report)
        return report

    def transform_class(self, class_node: ClassNode) -> Optional[ClassReport]:
        """Transform one class; None if it carries no logging annotation."""
        annotation = next((a for a in class_node.annotations if is_logging_annotation(a)), None)
        if annotation is None:
            return None

        # No-op when transform_unit has already settled the binding.
        facade_binding(self.classpath.extended([class_node.name]))

        config = configuration_from_annotation(annotation, class_node.name)
        strategy = instantiate_strategy(config, class_node.name)

        if class_node.get_field(config.field_name) is not None:
            raise DuplicateFieldError(class_node.name, config.field_name)

        log_field = strategy.add_logger_field_to_class(class_node, config.field_name)

        report = ClassReport(
            class_name=class_node.name,
            field_name=config.field_name,
            strategy=type(strategy).__name__,
        )
        rewriter = _CallRewriter(strategy, config.field_name, self.skip_simple_arguments, report)

        for f in class_node.fields:
            if f is not log_field and f.initial_expression is not None:
                f.initial_expression = rewriter.visit(f.initial_expression)

        for method in class_node.methods:
            if config.field_name in method.parameter_names():
                # The name is bound to the parameter, not to the logger.
                report.shadowed_methods.append(method.name)
                continue
            method.body = [rewriter.visit_statement(s) for s in method.body]

        class_node.remove_annotation(annotation)

        logger.info(
            "Added logger field '%s' to %s, guarded %d call(s)",
            config.field_name,
            class_node.name,
            report.wrapped_calls,
        )
        return report


def transform_unit(unit: CompilationUnit, config: Optional[TransformConfig] = None) -> TransformationReport:
    """Transform unit with settings from config (defaults when None)."""
    return LogTransformation.from_config(config or TransformConfig()).transform_unit(unit)


__all__ = [
    "LogTransformation",
    "TransformationReport",
    "ClassReport",
    "transform_unit",
]
