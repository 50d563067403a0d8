"""
Unit Analyzer: type checking and inventory of compilation units.

This module provides:
    - check_types: fails on the first type reference that cannot be
      resolved (this is where a facade bound by name only is reported)
    - analyze_unit: read-only report of classes, logger fields,
      guarded and unguarded logging calls, and unresolved types

IMPORTANT: Nothing here modifies the unit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set, Tuple

from logguard.annotation import DEFAULT_FIELD_NAME, is_logging_annotation
from logguard.errors import UnresolvedTypeError
from logguard.expressions import (
    ArgumentListExpression,
    BooleanExpression,
    ClassExpression,
    Expression,
    MethodCallExpression,
    NotExpression,
    PropertyExpression,
    TernaryExpression,
    VariableExpression,
)
from logguard.model import ClassNode, CompilationUnit
from logguard.strategies.base import guard_method_name
from logguard.strategies.commons import LOGGER_TYPE_NAME, LOGGING_METHODS
from logguard.typesystem import ClassPath, TypeDescriptor


def _children(expr: Expression) -> List[Expression]:
    if isinstance(expr, MethodCallExpression):
        return [expr.object_expression, *expr.arguments.arguments]
    if isinstance(expr, ArgumentListExpression):
        return list(expr.arguments)
    if isinstance(expr, PropertyExpression):
        return [expr.object_expression]
    if isinstance(expr, (BooleanExpression, NotExpression)):
        return [expr.expression]
    if isinstance(expr, TernaryExpression):
        return [expr.boolean_expression, expr.true_expression, expr.false_expression]
    return []


def _walk(expr: Expression) -> Iterator[Expression]:
    """Pre-order traversal."""
    yield expr
    for child in _children(expr):
        yield from _walk(child)


def _depth(expr: Expression) -> int:
    children = _children(expr)
    if not children:
        return 1
    return 1 + max(_depth(c) for c in children)


def _class_expressions(class_node: ClassNode) -> Iterator[Tuple[str, Expression]]:
    """(context, expression) for every expression the class holds."""
    for f in class_node.fields:
        if f.initial_expression is not None:
            yield f"{class_node.name}.{f.name}", f.initial_expression
    for m in class_node.methods:
        for statement in m.body:
            yield f"{class_node.name}.{m.name}()", statement.expression


def _type_references(class_node: ClassNode) -> Iterator[Tuple[str, TypeDescriptor]]:
    for f in class_node.fields:
        if f.type is not None:
            yield f"type of field {class_node.name}.{f.name}", f.type
    for m in class_node.methods:
        if m.return_type is not None:
            yield f"return type of {class_node.name}.{m.name}()", m.return_type
        for p in m.parameters:
            if p.type is not None:
                yield f"parameter {p.name} of {class_node.name}.{m.name}()", p.type
    for context, expr in _class_expressions(class_node):
        for node in _walk(expr):
            if isinstance(node, ClassExpression):
                yield f"class reference in {context}", node.type


def check_types(unit: CompilationUnit, classpath: Optional[ClassPath] = None) -> None:
    """
    Verify every type reference in unit resolves.

    Classes declared in the unit and java.lang types always resolve.

    Raises:
        UnresolvedTypeError: For the first reference that does not
    """
    visible = (classpath or ClassPath()).with_unit(unit)
    for class_node in unit.classes:
        for context, descriptor in _type_references(class_node):
            if not visible.contains(descriptor.name):
                raise UnresolvedTypeError(descriptor.name, context)


@dataclass
class ClassSummary:
    """Logging-related facts about one class."""

    name: str
    logger_field: Optional[str] = None
    annotated: bool = False
    guarded_calls: int = 0
    unguarded_calls: int = 0


@dataclass
class UnitReport:
    """Analysis report for a compilation unit."""

    unit_name: str
    total_classes: int = 0
    total_fields: int = 0
    total_methods: int = 0

    classes: List[ClassSummary] = field(default_factory=list)

    # Logging calls
    guarded_calls: int = 0
    unguarded_calls: int = 0

    # Types
    unresolved_types: Set[str] = field(default_factory=set)

    # Expression complexity
    max_expression_depth: int = 0
    total_expressions: int = 0

    # Warnings and flags
    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    def get_class(self, name: str) -> Optional[ClassSummary]:
        for summary in self.classes:
            if summary.name == name:
                return summary
        return None


def _logger_name(class_node: ClassNode) -> Tuple[Optional[str], bool]:
    """(logger field name, still annotated) for class_node."""
    for a in class_node.annotations:
        if is_logging_annotation(a):
            value = a.get_member("value", DEFAULT_FIELD_NAME)
            return (value if isinstance(value, str) else DEFAULT_FIELD_NAME), True
    for f in class_node.fields:
        if f.type is not None and f.type.name == LOGGER_TYPE_NAME:
            return f.name, False
    return None, False


def _is_guard(expr: TernaryExpression, logger_name: str) -> bool:
    call = expr.true_expression
    condition = expr.boolean_expression.expression
    return (
        isinstance(call, MethodCallExpression)
        and isinstance(condition, MethodCallExpression)
        and call.method in LOGGING_METHODS
        and condition.method == guard_method_name(call.method)
        and VariableExpression(logger_name) == call.object_expression == condition.object_expression
    )


def _count_logging_calls(expr: Expression, logger_name: str) -> Tuple[int, int]:
    """(guarded, unguarded) logging calls on logger_name within expr."""
    guarded = 0
    unguarded = 0
    guarded_ids: Set[int] = set()
    for node in _walk(expr):
        if isinstance(node, TernaryExpression) and _is_guard(node, logger_name):
            guarded += 1
            guarded_ids.add(id(node.true_expression))
        elif (
            isinstance(node, MethodCallExpression)
            and id(node) not in guarded_ids
            and node.method in LOGGING_METHODS
            and node.object_expression == VariableExpression(logger_name)
        ):
            unguarded += 1
    return guarded, unguarded


def analyze_unit(unit: CompilationUnit, classpath: Optional[ClassPath] = None) -> UnitReport:
    """
    Inventory a compilation unit.

    Works on transformed and untransformed units alike: before the
    transformation logging calls show up as unguarded, after it as guarded.
    """
    report = UnitReport(unit_name=unit.name)
    visible = (classpath or ClassPath()).with_unit(unit)

    report.total_classes = len(unit.classes)
    for class_node in unit.classes:
        report.total_fields += len(class_node.fields)
        report.total_methods += len(class_node.methods)

        logger_name, annotated = _logger_name(class_node)
        summary = ClassSummary(name=class_node.name, logger_field=logger_name, annotated=annotated)

        for _, expr in _class_expressions(class_node):
            report.total_expressions += 1
            report.max_expression_depth = max(report.max_expression_depth, _depth(expr))
            if logger_name is not None:
                guarded, unguarded = _count_logging_calls(expr, logger_name)
                summary.guarded_calls += guarded
                summary.unguarded_calls += unguarded

        for _, descriptor in _type_references(class_node):
            if not visible.contains(descriptor.name):
                report.unresolved_types.add(descriptor.name)

        report.guarded_calls += summary.guarded_calls
        report.unguarded_calls += summary.unguarded_calls
        report.classes.append(summary)

    # =========================================================================
    # WARNING FLAGS
    # =========================================================================

    for summary in report.classes:
        if summary.annotated:
            report.add_warning(f"{summary.name} is annotated but not transformed")
        elif summary.unguarded_calls:
            report.add_warning(
                f"{summary.name} has {summary.unguarded_calls} unguarded logging call(s) on '{summary.logger_field}'"
            )

    if report.unresolved_types:
        report.add_warning(f"Unresolved types: {', '.join(sorted(report.unresolved_types))}")

    return report
