"""
Expression System for LogGuard

Method bodies and field initializers are represented as Abstract Syntax
Trees (ASTs), never as strings.

This ensures:
    - Rewrites operate on structure, not text
    - The same tree can be rendered, serialized, or evaluated
    - Nodes can be shared (a rewrite may keep the original node verbatim)

ARCHITECTURAL RULE:
    Nodes are immutable.
    A rewrite builds new parent nodes around existing children.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Tuple, Union

from logguard.typesystem import TypeDescriptor


class Expression(ABC):
    """
    Base class for all AST expressions.

    This class is structure only.

    DO NOT:
        - Add evaluation logic here (belongs in interpreter layer)
        - Add string representations (belongs in backends)
        - Add rewrite logic here (belongs in transform layer)
    """
    pass


@dataclass(frozen=True)
class ConstantExpression(Expression):
    """
    A literal constant.

    Examples:
        - "hi"
        - 42
        - null  (value None)
    """

    value: Union[None, bool, int, float, str]


NULL = ConstantExpression(None)
TRUE = ConstantExpression(True)
FALSE = ConstantExpression(False)


@dataclass(frozen=True)
class VariableExpression(Expression):
    """
    A bare name: a local, a parameter, a field, or an unbound name.

    IMPORTANT:
        The node does NOT know what the name is bound to.
        Scope resolution belongs in the transform layer.
    """

    name: str


@dataclass(frozen=True)
class ClassExpression(Expression):
    """
    A reference to a type used as a value (e.g. the receiver of a static call).

    Example:
        LogFactory.getLog(Foo)

    Has two ClassExpressions: LogFactory (receiver) and Foo (argument).
    """

    type: TypeDescriptor


@dataclass(frozen=True)
class ArgumentListExpression(Expression):
    """Positional call arguments."""

    arguments: Tuple[Expression, ...] = ()

    def __len__(self) -> int:
        return len(self.arguments)

    def __iter__(self):
        return iter(self.arguments)


EMPTY_ARGUMENTS = ArgumentListExpression(())


@dataclass(frozen=True)
class MethodCallExpression(Expression):
    """
    A method invocation on a receiver.

    Example:
        log.debug("hi")

    Becomes:
        MethodCallExpression(
            object_expression=VariableExpression("log"),
            method="debug",
            arguments=ArgumentListExpression((ConstantExpression("hi"),)),
        )
    """

    object_expression: Expression
    method: str
    arguments: ArgumentListExpression = EMPTY_ARGUMENTS


@dataclass(frozen=True)
class PropertyExpression(Expression):
    """Property access without a call, e.g. `foo.name`."""

    object_expression: Expression
    property: str


@dataclass(frozen=True)
class BooleanExpression(Expression):
    """
    Marks an expression used as a condition.

    The wrapped expression is evaluated for its truth value.
    """

    expression: Expression


@dataclass(frozen=True)
class NotExpression(Expression):
    """Logical negation, e.g. `!log.isDebugEnabled()`."""

    expression: Expression


@dataclass(frozen=True)
class TernaryExpression(Expression):
    """
    Conditional expression `cond ? a : b`.

    Only one of the branches is evaluated.
    """

    boolean_expression: BooleanExpression
    true_expression: Expression
    false_expression: Expression
