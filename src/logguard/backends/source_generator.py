"""
Source generator for LogGuard compilation units.

Converts a CompilationUnit back into Groovy-like source text that the
parser accepts again.

Type names are written:
    - by simple name for classes declared in the unit and java.lang types
    - fully qualified otherwise (no imports are emitted)
"""

from typing import List, Optional, Set

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
from logguard.model import (
    AnnotationNode,
    ClassNode,
    CompilationUnit,
    FieldNode,
    MethodNode,
    ReturnStatement,
    Statement,
    modifier_names,
)
from logguard.typesystem import JAVA_LANG_TYPES, TypeDescriptor

_JAVA_LANG_NAMES = set(JAVA_LANG_TYPES.values())


def _escape_string(s: str) -> str:
    """Quote a string literal."""
    s = s.replace("\\", "\\\\")
    s = s.replace('"', '\\"')
    s = s.replace("\n", "\\n").replace("\t", "\\t").replace("\r", "\\r")
    return f'"{s}"'


class _Renderer:
    def __init__(self, unit: CompilationUnit, indent: str) -> None:
        self.local_types: Set[str] = {c.name for c in unit.classes}
        self.indent = indent

    def type_name(self, descriptor: TypeDescriptor) -> str:
        if descriptor.name in self.local_types or descriptor.name in _JAVA_LANG_NAMES:
            return descriptor.simple_name
        return descriptor.name

    # =========================================================================
    # EXPRESSIONS
    # =========================================================================

    def expression(self, expr: Expression) -> str:
        if isinstance(expr, ConstantExpression):
            value = expr.value
            if value is None:
                return "null"
            if isinstance(value, bool):
                return "true" if value else "false"
            if isinstance(value, str):
                return _escape_string(value)
            return repr(value)

        if isinstance(expr, VariableExpression):
            return expr.name

        if isinstance(expr, ClassExpression):
            return self.type_name(expr.type)

        if isinstance(expr, PropertyExpression):
            return f"{self._receiver(expr.object_expression)}.{expr.property}"

        if isinstance(expr, MethodCallExpression):
            return f"{self._receiver(expr.object_expression)}.{expr.method}({self.arguments(expr.arguments)})"

        if isinstance(expr, ArgumentListExpression):
            return self.arguments(expr)

        if isinstance(expr, BooleanExpression):
            return self.expression(expr.expression)

        if isinstance(expr, NotExpression):
            return f"!{self._operand(expr.expression)}"

        if isinstance(expr, TernaryExpression):
            condition = self._operand(expr.boolean_expression.expression)
            true_branch = self._operand(expr.true_expression)
            false_branch = self.expression(expr.false_expression)
            return f"{condition} ? {true_branch} : {false_branch}"

        raise TypeError(f"Unsupported Expression type: {type(expr)}")

    def arguments(self, args: ArgumentListExpression) -> str:
        return ", ".join(self.expression(a) for a in args.arguments)

    def _operand(self, expr: Expression) -> str:
        """Parenthesize an operand that would otherwise bind wrongly."""
        text = self.expression(expr)
        if isinstance(expr, TernaryExpression):
            return f"({text})"
        return text

    def _receiver(self, expr: Expression) -> str:
        text = self.expression(expr)
        if isinstance(expr, (TernaryExpression, NotExpression)):
            return f"({text})"
        return text

    # =========================================================================
    # DECLARATIONS
    # =========================================================================

    def annotation(self, annotation: AnnotationNode) -> str:
        if not annotation.members:
            return f"@{annotation.name}"
        if list(annotation.members) == ["value"]:
            return f"@{annotation.name}({self._annotation_value(annotation.members['value'])})"
        members = ", ".join(f"{k} = {self._annotation_value(v)}" for k, v in annotation.members.items())
        return f"@{annotation.name}({members})"

    def _annotation_value(self, value) -> str:
        return self.expression(ConstantExpression(value))

    def _declaration_prefix(self, modifiers, declared_type) -> str:
        words = modifier_names(modifiers)
        words.append(self.type_name(declared_type) if declared_type is not None else "def")
        return " ".join(words)

    def field(self, f: FieldNode) -> str:
        line = f"{self._declaration_prefix(f.modifiers, f.type)} {f.name}"
        if f.initial_expression is not None:
            line += f" = {self.expression(f.initial_expression)}"
        return line

    def statement(self, statement: Statement) -> str:
        if isinstance(statement, ReturnStatement):
            return f"return {self.expression(statement.expression)}"
        return self.expression(statement.expression)

    def method(self, m: MethodNode) -> List[str]:
        params = ", ".join(
            f"{self.type_name(p.type)} {p.name}" if p.type is not None else p.name for p in m.parameters
        )
        lines = [f"{self._declaration_prefix(m.modifiers, m.return_type)} {m.name}({params}) {{"]
        for statement in m.body:
            lines.append(f"{self.indent}{self.statement(statement)}")
        lines.append("}")
        return lines

    def class_node(self, c: ClassNode) -> List[str]:
        lines = [self.annotation(a) for a in c.annotations]
        header = " ".join(modifier_names(c.modifiers) + ["class", c.simple_name])
        lines.append(f"{header} {{")

        members: List[List[str]] = []
        if c.fields:
            members.append([self.field(f) for f in c.fields])
        for m in c.methods:
            members.append(self.method(m))

        for i, block in enumerate(members):
            if i:
                lines.append("")
            lines.extend(f"{self.indent}{line}" if line else "" for line in block)

        lines.append("}")
        return lines


def generate_source(unit: CompilationUnit, indent: str = "    ") -> str:
    """
    Generate source text for a compilation unit.

    Args:
        unit: CompilationUnit to render
        indent: Indentation for one nesting level

    Returns:
        Source text ending with a newline
    """
    renderer = _Renderer(unit, indent)
    lines: List[str] = []

    if unit.package:
        lines.append(f"package {unit.package}")
        lines.append("")

    for i, c in enumerate(unit.classes):
        if i:
            lines.append("")
        lines.extend(renderer.class_node(c))

    return "\n".join(lines) + "\n"


def generate_expression(expr: Expression, unit: Optional[CompilationUnit] = None) -> str:
    """Render a single expression."""
    return _Renderer(unit or CompilationUnit(name=""), "    ").expression(expr)


def save_source_file(unit: CompilationUnit, filename: str) -> None:
    """
    Generate source and save to file.

    Args:
        unit: CompilationUnit to render
        filename: Output file path
    """
    source = generate_source(unit)
    with open(filename, "w", encoding="utf-8") as f:
        f.write(source)


__all__ = ["generate_source", "generate_expression", "save_source_file"]
