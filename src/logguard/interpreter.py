"""
Interpreter: runs the model against Python objects.

Used to check what transformed code does at run time: a guarded logging
call must not evaluate its arguments when the level is disabled, and a
facade bound by name only must fail here, not during the transformation.

Types are supplied by a Runtime, keyed by fully-qualified name. Classes of
the unit become ClassObjects once initialize_class has run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

from logguard.errors import EvaluationError, UnresolvedTypeError
from logguard.expressions import (
    ArgumentListExpression,
    BooleanExpression,
    ClassExpression,
    ConstantExpression,
    Expression,
    MethodCallExpression,
    NotExpression,
    PropertyExpression,
    TernaryExpression,
    VariableExpression,
)
from logguard.model import ClassNode, ReturnStatement
from logguard.typesystem import TypeDescriptor


@dataclass
class ClassObject:
    """A loaded class: its declaration plus its initialized fields."""

    node: ClassNode
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.node.name


class Runtime:
    """Types available while evaluating, by fully-qualified name."""

    def __init__(self, types: Optional[Mapping[str, Any]] = None) -> None:
        self.types: Dict[str, Any] = dict(types or {})

    def load_type(self, descriptor: TypeDescriptor) -> Any:
        try:
            return self.types[descriptor.name]
        except KeyError:
            raise UnresolvedTypeError(descriptor.name, "class not found at run time") from None

    def register(self, name: str, value: Any) -> None:
        self.types[name] = value


def evaluate(expr: Expression, scope: Mapping[str, Any], runtime: Runtime) -> Any:
    """Evaluate expr; names are looked up in scope, then among runtime types."""
    if isinstance(expr, ConstantExpression):
        return expr.value

    if isinstance(expr, VariableExpression):
        if expr.name in scope:
            return scope[expr.name]
        if expr.name in runtime.types:
            return runtime.types[expr.name]
        raise EvaluationError(f"No such property: {expr.name}")

    if isinstance(expr, ClassExpression):
        return runtime.load_type(expr.type)

    if isinstance(expr, PropertyExpression):
        target = evaluate(expr.object_expression, scope, runtime)
        try:
            return getattr(target, expr.property)
        except AttributeError:
            raise EvaluationError(f"No such property: {expr.property} on {target!r}") from None

    if isinstance(expr, MethodCallExpression):
        target = evaluate(expr.object_expression, scope, runtime)
        args = [evaluate(a, scope, runtime) for a in expr.arguments]
        method = getattr(target, expr.method, None)
        if not callable(method):
            raise EvaluationError(f"No signature of method: {expr.method}() on {target!r}")
        return method(*args)

    if isinstance(expr, ArgumentListExpression):
        return [evaluate(a, scope, runtime) for a in expr.arguments]

    if isinstance(expr, BooleanExpression):
        return bool(evaluate(expr.expression, scope, runtime))

    if isinstance(expr, NotExpression):
        return not evaluate(expr.expression, scope, runtime)

    if isinstance(expr, TernaryExpression):
        if evaluate(expr.boolean_expression, scope, runtime):
            return evaluate(expr.true_expression, scope, runtime)
        return evaluate(expr.false_expression, scope, runtime)

    raise EvaluationError(f"Unsupported expression type: {type(expr).__name__}")


def initialize_class(class_node: ClassNode, runtime: Runtime) -> ClassObject:
    """
    Load class_node into runtime and evaluate its field initializers in
    declaration order. The model has no instances, so every field lives
    on the ClassObject.
    """
    class_obj = ClassObject(node=class_node)
    runtime.register(class_node.name, class_obj)
    for f in class_node.fields:
        value = None
        if f.initial_expression is not None:
            value = evaluate(f.initial_expression, class_obj.fields, runtime)
        class_obj.fields[f.name] = value
    return class_obj


def invoke(class_obj: ClassObject, method_name: str, runtime: Runtime, args: Sequence[Any] = ()) -> Any:
    """Run a method; returns the value of the first return statement reached, else None."""
    method = class_obj.node.get_method(method_name)
    if method is None:
        raise EvaluationError(f"No signature of method: {class_obj.name}.{method_name}()")
    if len(args) != len(method.parameters):
        raise EvaluationError(
            f"{class_obj.name}.{method_name}() takes {len(method.parameters)} argument(s), got {len(args)}"
        )

    scope: Dict[str, Any] = dict(class_obj.fields)
    scope.update(zip(method.parameter_names(), args))

    for statement in method.body:
        value = evaluate(statement.expression, scope, runtime)
        if isinstance(statement, ReturnStatement):
            return value
    return None
