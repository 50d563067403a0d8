"""
Source Parser for LogGuard (Layer 1: Source text → Compilation Unit).

Parses a small Groovy-like language into the declaration model.

Example:
    package com.acme

    import org.apache.commons.logging.Log

    @Commons("logger")
    class Foo {
        private static String greeting = "hi"

        def bar(name) {
            logger.debug(greeting)
            return name.toUpperCase()
        }
    }

Syntax Notes:
    - Statements end at ';' or where the next statement begins
    - Expressions: literals, names, property access, method calls on a
      receiver, '!', parentheses and 'cond ? a : b'
    - Annotations are only accepted in front of 'class'
    - Type names resolve through imports, the unit's own classes and
      java.lang; anything else is kept as written
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from logguard.errors import ParseError
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
    NULL,
    TRUE,
    FALSE,
)
from logguard.model import (
    AnnotationNode,
    ClassNode,
    CompilationUnit,
    ExpressionStatement,
    FieldNode,
    MethodNode,
    Modifier,
    Parameter,
    ReturnStatement,
    Statement,
)
from logguard.typesystem import JAVA_LANG_TYPES, TypeDescriptor


_TOKEN_RE = re.compile(
    r"""
      (?P<ws>[ \t\r\n]+)
    | (?P<comment>//[^\n]*|/\*.*?\*/)
    | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
    | (?P<number>\d+\.\d+|\d+)
    | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<op>[@{}()=,;.?:!])
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "'": "'", "$": "$"}

_MODIFIERS = {
    "public": Modifier.PUBLIC,
    "protected": Modifier.PROTECTED,
    "private": Modifier.PRIVATE,
    "static": Modifier.STATIC,
    "final": Modifier.FINAL,
    "transient": Modifier.TRANSIENT,
}

KEYWORDS = {"package", "import", "class", "def", "return", "null", "true", "false"} | set(_MODIFIERS)


@dataclass(frozen=True)
class Token:
    kind: str   # "ident", "string", "number", "op", "eof"
    text: str
    line: int


def tokenize(source: str) -> List[Token]:
    """Split source into tokens, dropping whitespace and comments."""
    tokens: List[Token] = []
    pos = 0
    line = 1
    while pos < len(source):
        m = _TOKEN_RE.match(source, pos)
        if m is None:
            raise ParseError(f"Unexpected character {source[pos]!r}", line)
        kind = m.lastgroup
        text = m.group()
        if kind not in ("ws", "comment"):
            tokens.append(Token(kind, text, line))
        line += text.count("\n")
        pos = m.end()
    tokens.append(Token("eof", "", line))
    return tokens


def _unquote(literal: str) -> str:
    body = literal[1:-1]
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            out.append(_ESCAPES.get(body[i + 1], body[i + 1]))
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _is_op(tokens: List[Token], pos: int, text: str) -> bool:
    return tokens[pos].kind == "op" and tokens[pos].text == text


def _is_keyword(tokens: List[Token], pos: int, word: str) -> bool:
    return tokens[pos].kind == "ident" and tokens[pos].text == word


def _expect_op(tokens: List[Token], pos: int, text: str) -> int:
    if not _is_op(tokens, pos, text):
        tok = tokens[pos]
        found = tok.text or "end of input"
        raise ParseError(f"Expected '{text}', got '{found}'", tok.line)
    return pos + 1


def _expect_identifier(tokens: List[Token], pos: int) -> Tuple[str, int]:
    tok = tokens[pos]
    if tok.kind != "ident" or tok.text in KEYWORDS:
        found = tok.text or "end of input"
        raise ParseError(f"Expected identifier, got '{found}'", tok.line)
    return tok.text, pos + 1


def _skip_semicolons(tokens: List[Token], pos: int) -> int:
    while _is_op(tokens, pos, ";"):
        pos += 1
    return pos


def _parse_qualified_name(tokens: List[Token], pos: int) -> Tuple[str, int]:
    name, pos = _expect_identifier(tokens, pos)
    parts = [name]
    while _is_op(tokens, pos, ".") and tokens[pos + 1].kind == "ident":
        parts.append(tokens[pos + 1].text)
        pos += 2
    return ".".join(parts), pos


# =============================================================================
# EXPRESSIONS
# =============================================================================


def _parse_expression(tokens: List[Token], pos: int) -> Tuple[Expression, int]:
    """Parse ternary expression (lowest precedence)."""
    condition, pos = _parse_unary_expression(tokens, pos)

    if _is_op(tokens, pos, "?"):
        pos += 1
        true_expr, pos = _parse_expression(tokens, pos)
        pos = _expect_op(tokens, pos, ":")
        false_expr, pos = _parse_expression(tokens, pos)
        return TernaryExpression(BooleanExpression(condition), true_expr, false_expr), pos

    return condition, pos


def _parse_unary_expression(tokens: List[Token], pos: int) -> Tuple[Expression, int]:
    """Parse unary expression (!)."""
    if _is_op(tokens, pos, "!"):
        operand, pos = _parse_unary_expression(tokens, pos + 1)
        return NotExpression(operand), pos
    return _parse_postfix_expression(tokens, pos)


def _parse_arguments(tokens: List[Token], pos: int) -> Tuple[ArgumentListExpression, int]:
    """Parse '(' args ')' with pos on the '('."""
    pos = _expect_op(tokens, pos, "(")
    arguments: List[Expression] = []
    if not _is_op(tokens, pos, ")"):
        while True:
            arg, pos = _parse_expression(tokens, pos)
            arguments.append(arg)
            if _is_op(tokens, pos, ","):
                pos += 1
                continue
            break
    pos = _expect_op(tokens, pos, ")")
    return ArgumentListExpression(tuple(arguments)), pos


def _parse_postfix_expression(tokens: List[Token], pos: int) -> Tuple[Expression, int]:
    """Parse property access and method calls: a.b, a.b(...), chained."""
    expr, pos = _parse_primary_expression(tokens, pos)

    while _is_op(tokens, pos, "."):
        tok = tokens[pos + 1]
        if tok.kind != "ident":
            raise ParseError(f"Expected member name after '.', got '{tok.text}'", tok.line)
        pos += 2
        if _is_op(tokens, pos, "("):
            arguments, pos = _parse_arguments(tokens, pos)
            expr = MethodCallExpression(expr, tok.text, arguments)
        else:
            expr = PropertyExpression(expr, tok.text)

    return expr, pos


def _parse_primary_expression(tokens: List[Token], pos: int) -> Tuple[Expression, int]:
    """Parse primary expression (literal, name or parenthesized)."""
    tok = tokens[pos]

    if _is_op(tokens, pos, "("):
        expr, pos = _parse_expression(tokens, pos + 1)
        pos = _expect_op(tokens, pos, ")")
        return expr, pos

    if tok.kind == "string":
        return ConstantExpression(_unquote(tok.text)), pos + 1

    if tok.kind == "number":
        value = float(tok.text) if "." in tok.text else int(tok.text)
        return ConstantExpression(value), pos + 1

    if tok.kind == "ident":
        if tok.text == "null":
            return NULL, pos + 1
        if tok.text == "true":
            return TRUE, pos + 1
        if tok.text == "false":
            return FALSE, pos + 1
        if tok.text in KEYWORDS:
            raise ParseError(f"Unexpected keyword '{tok.text}'", tok.line)
        if _is_op(tokens, pos + 1, "("):
            raise ParseError(f"Call to '{tok.text}' needs a receiver", tok.line)
        return VariableExpression(tok.text), pos + 1

    raise ParseError(f"Unexpected token: '{tok.text or 'end of input'}'", tok.line)


def parse_expression(text: str) -> Expression:
    """
    Parse a single expression.

    Raises:
        ParseError: If the text is not exactly one expression
    """
    tokens = tokenize(text)
    expr, pos = _parse_expression(tokens, 0)
    if tokens[pos].kind != "eof":
        raise ParseError(f"Unexpected tokens after expression: '{tokens[pos].text}'", tokens[pos].line)
    return expr


# =============================================================================
# DECLARATIONS
# =============================================================================


class _TypeNames:
    """Resolves type names written in source to qualified names."""

    def __init__(self, package: str, imports: Dict[str, str], class_names: List[str]) -> None:
        self.package = package
        self.imports = imports
        self.class_names = set(class_names)

    def qualify(self, name: str) -> str:
        if "." in name:
            return name
        if name in self.imports:
            return self.imports[name]
        if name in self.class_names:
            return f"{self.package}.{name}" if self.package else name
        if name in JAVA_LANG_TYPES:
            return JAVA_LANG_TYPES[name]
        return name

    def descriptor(self, name: str) -> TypeDescriptor:
        return TypeDescriptor(name=self.qualify(name))


def _parse_annotation_value(tokens: List[Token], pos: int):
    tok = tokens[pos]
    if tok.kind == "string":
        return _unquote(tok.text), pos + 1
    if tok.kind == "number":
        return (float(tok.text) if "." in tok.text else int(tok.text)), pos + 1
    if tok.kind == "ident" and tok.text in ("true", "false", "null"):
        return {"true": True, "false": False, "null": None}[tok.text], pos + 1
    if tok.kind == "ident":
        return _parse_qualified_name(tokens, pos)
    raise ParseError(f"Invalid annotation value '{tok.text}'", tok.line)


def _parse_annotation(tokens: List[Token], pos: int) -> Tuple[AnnotationNode, int]:
    """Parse '@' Name ( '(' members ')' )? with pos on the '@'."""
    pos = _expect_op(tokens, pos, "@")
    name, pos = _parse_qualified_name(tokens, pos)
    annotation = AnnotationNode(name=name)
    if not _is_op(tokens, pos, "("):
        return annotation, pos

    pos += 1
    if _is_op(tokens, pos, ")"):
        return annotation, pos + 1

    # Single unnamed value: @Commons("logger")
    if not (tokens[pos].kind == "ident" and _is_op(tokens, pos + 1, "=")):
        value, pos = _parse_annotation_value(tokens, pos)
        annotation.members["value"] = value
        return annotation, _expect_op(tokens, pos, ")")

    while True:
        key, pos = _expect_identifier(tokens, pos)
        pos = _expect_op(tokens, pos, "=")
        if key in annotation.members:
            raise ParseError(f"Duplicate annotation member '{key}'", tokens[pos].line)
        annotation.members[key], pos = _parse_annotation_value(tokens, pos)
        if _is_op(tokens, pos, ","):
            pos += 1
            continue
        break
    return annotation, _expect_op(tokens, pos, ")")


def _parse_modifiers(tokens: List[Token], pos: int) -> Tuple[Modifier, int]:
    modifiers = Modifier.NONE
    while tokens[pos].kind == "ident" and tokens[pos].text in _MODIFIERS:
        flag = _MODIFIERS[tokens[pos].text]
        if flag in modifiers:
            raise ParseError(f"Repeated modifier '{tokens[pos].text}'", tokens[pos].line)
        modifiers |= flag
        pos += 1
    return modifiers, pos


def _parse_parameters(tokens: List[Token], pos: int, types: _TypeNames) -> Tuple[List[Parameter], int]:
    pos = _expect_op(tokens, pos, "(")
    parameters: List[Parameter] = []
    if _is_op(tokens, pos, ")"):
        return parameters, pos + 1
    while True:
        param_type: Optional[TypeDescriptor] = None
        if _is_keyword(tokens, pos, "def"):
            pos += 1
        elif tokens[pos].kind == "ident" and tokens[pos + 1].kind == "ident" or (
            tokens[pos].kind == "ident" and _is_op(tokens, pos + 1, ".")
        ):
            type_name, pos = _parse_qualified_name(tokens, pos)
            param_type = types.descriptor(type_name)
        name, pos = _expect_identifier(tokens, pos)
        if name in [p.name for p in parameters]:
            raise ParseError(f"Duplicate parameter '{name}'", tokens[pos].line)
        parameters.append(Parameter(name=name, type=param_type))
        if _is_op(tokens, pos, ","):
            pos += 1
            continue
        break
    return parameters, _expect_op(tokens, pos, ")")


def _parse_statement(tokens: List[Token], pos: int) -> Tuple[Statement, int]:
    if _is_keyword(tokens, pos, "return"):
        expr, pos = _parse_expression(tokens, pos + 1)
        return ReturnStatement(expr), _skip_semicolons(tokens, pos)
    expr, pos = _parse_expression(tokens, pos)
    return ExpressionStatement(expr), _skip_semicolons(tokens, pos)


def _parse_member(tokens: List[Token], pos: int, types: _TypeNames, class_node: ClassNode) -> int:
    """Parse one field or method and attach it to class_node."""
    if _is_op(tokens, pos, "@"):
        raise ParseError("Annotations are only allowed on class declarations", tokens[pos].line)

    modifiers, pos = _parse_modifiers(tokens, pos)

    declared_type: Optional[TypeDescriptor] = None
    if _is_keyword(tokens, pos, "def"):
        pos += 1
    else:
        type_name, pos = _parse_qualified_name(tokens, pos)
        declared_type = types.descriptor(type_name)

    name_line = tokens[pos].line
    name, pos = _expect_identifier(tokens, pos)

    if _is_op(tokens, pos, "("):
        parameters, pos = _parse_parameters(tokens, pos, types)
        pos = _expect_op(tokens, pos, "{")
        body: List[Statement] = []
        pos = _skip_semicolons(tokens, pos)
        while not _is_op(tokens, pos, "}"):
            if tokens[pos].kind == "eof":
                raise ParseError(f"Missing '}}' closing method '{name}'", tokens[pos].line)
            statement, pos = _parse_statement(tokens, pos)
            body.append(statement)
        class_node.methods.append(
            MethodNode(name=name, parameters=parameters, body=body, modifiers=modifiers, return_type=declared_type)
        )
        return pos + 1

    if class_node.get_field(name) is not None:
        raise ParseError(f"Duplicate field '{name}' in class {class_node.name}", name_line)

    initial: Optional[Expression] = None
    if _is_op(tokens, pos, "="):
        initial, pos = _parse_expression(tokens, pos + 1)
    class_node.fields.append(
        FieldNode(name=name, modifiers=modifiers, type=declared_type, initial_expression=initial, owner=class_node.name)
    )
    return _skip_semicolons(tokens, pos)


def _scan_class_names(tokens: List[Token]) -> List[str]:
    """Names following 'class', so members can refer to classes declared later."""
    return [
        tokens[i + 1].text
        for i, tok in enumerate(tokens[:-1])
        if tok.kind == "ident" and tok.text == "class" and tokens[i + 1].kind == "ident"
    ]


def _parse_class(tokens: List[Token], pos: int, package: str, types: _TypeNames) -> Tuple[ClassNode, int]:
    annotations: List[AnnotationNode] = []
    while _is_op(tokens, pos, "@"):
        annotation, pos = _parse_annotation(tokens, pos)
        annotations.append(annotation)

    modifiers, pos = _parse_modifiers(tokens, pos)
    if not _is_keyword(tokens, pos, "class"):
        found = tokens[pos].text or "end of input"
        raise ParseError(f"Expected 'class', got '{found}'", tokens[pos].line)
    simple_name, pos = _expect_identifier(tokens, pos + 1)

    class_node = ClassNode(
        name=f"{package}.{simple_name}" if package else simple_name,
        annotations=annotations,
        modifiers=modifiers,
    )

    pos = _expect_op(tokens, pos, "{")
    pos = _skip_semicolons(tokens, pos)
    while not _is_op(tokens, pos, "}"):
        if tokens[pos].kind == "eof":
            raise ParseError(f"Missing '}}' closing class {simple_name}", tokens[pos].line)
        pos = _parse_member(tokens, pos, types, class_node)
        pos = _skip_semicolons(tokens, pos)
    return class_node, pos + 1


def parse_source(source: str, unit_name: str = "Script") -> CompilationUnit:
    """
    Parse source text into a CompilationUnit.

    Args:
        source: Source text
        unit_name: Name for the unit

    Returns:
        CompilationUnit with its classes

    Raises:
        ParseError: If parsing fails
    """
    tokens = tokenize(source)
    pos = 0

    package = ""
    if _is_keyword(tokens, pos, "package"):
        package, pos = _parse_qualified_name(tokens, pos + 1)
        pos = _skip_semicolons(tokens, pos)

    imports: Dict[str, str] = {}
    while _is_keyword(tokens, pos, "import"):
        qualified, pos = _parse_qualified_name(tokens, pos + 1)
        imports[qualified.rsplit(".", 1)[-1]] = qualified
        pos = _skip_semicolons(tokens, pos)

    types = _TypeNames(package, imports, _scan_class_names(tokens))
    unit = CompilationUnit(name=unit_name, package=package)

    while tokens[pos].kind != "eof":
        class_node, pos = _parse_class(tokens, pos, package, types)
        if unit.get_class(class_node.name) is not None:
            raise ParseError(f"Duplicate class {class_node.name}", tokens[pos - 1].line)
        unit.classes.append(class_node)
        pos = _skip_semicolons(tokens, pos)

    return unit


def parse_file(filepath: str, unit_name: Optional[str] = None) -> CompilationUnit:
    """
    Parse a source file.

    Args:
        filepath: Path to the source file
        unit_name: Optional unit name (defaults to the file stem)

    Raises:
        FileNotFoundError: If file doesn't exist
        ParseError: If parsing fails
    """
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Source file not found: {filepath}")
    except UnicodeDecodeError as e:
        raise ParseError(f"{filepath} is not valid UTF-8: {e.reason} at byte {e.start}") from e

    if unit_name is None:
        unit_name = os.path.splitext(os.path.basename(filepath))[0]

    return parse_source(content, unit_name=unit_name)


__all__ = [
    "parse_source",
    "parse_file",
    "parse_expression",
    "tokenize",
    "ParseError",
]
