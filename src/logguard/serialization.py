"""
Serialization helpers for LogGuard objects (CompilationUnit, expressions,
transformation reports).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
This module intentionally keeps serialization structure stable and explicit.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Dict

import yaml

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
    ExpressionStatement,
    FieldNode,
    MethodNode,
    Parameter,
    ReturnStatement,
    Statement,
    modifier_names,
    modifiers_from_names,
)
from logguard.transform import TransformationReport
from logguard.typesystem import TypeDescriptor


def type_to_dict(t: TypeDescriptor | None) -> Dict[str, Any] | None:
    if t is None:
        return None
    return {"name": t.name, "resolved": t.resolved}


def type_from_dict(d: Dict[str, Any] | None) -> TypeDescriptor | None:
    if d is None:
        return None
    return TypeDescriptor(name=d["name"], resolved=d.get("resolved", False))


def expr_to_dict(expr: Expression | None) -> Any:
    if expr is None:
        return None
    if isinstance(expr, ConstantExpression):
        return {"type": "const", "value": expr.value}
    if isinstance(expr, VariableExpression):
        return {"type": "var", "name": expr.name}
    if isinstance(expr, ClassExpression):
        return {"type": "class", "class": type_to_dict(expr.type)}
    if isinstance(expr, ArgumentListExpression):
        return {"type": "args", "arguments": [expr_to_dict(a) for a in expr.arguments]}
    if isinstance(expr, MethodCallExpression):
        return {
            "type": "call",
            "object": expr_to_dict(expr.object_expression),
            "method": expr.method,
            "arguments": [expr_to_dict(a) for a in expr.arguments],
        }
    if isinstance(expr, PropertyExpression):
        return {"type": "property", "object": expr_to_dict(expr.object_expression), "property": expr.property}
    if isinstance(expr, BooleanExpression):
        return {"type": "bool", "expression": expr_to_dict(expr.expression)}
    if isinstance(expr, NotExpression):
        return {"type": "not", "expression": expr_to_dict(expr.expression)}
    if isinstance(expr, TernaryExpression):
        return {
            "type": "ternary",
            "condition": expr_to_dict(expr.boolean_expression.expression),
            "true": expr_to_dict(expr.true_expression),
            "false": expr_to_dict(expr.false_expression),
        }
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def expr_from_dict(d: Any) -> Expression | None:
    if d is None:
        return None
    t = d.get("type")
    if t == "const":
        return ConstantExpression(d["value"])
    if t == "var":
        return VariableExpression(d["name"])
    if t == "class":
        return ClassExpression(type_from_dict(d["class"]))
    if t == "args":
        return ArgumentListExpression(tuple(expr_from_dict(a) for a in d.get("arguments", [])))
    if t == "call":
        return MethodCallExpression(
            expr_from_dict(d["object"]),
            d["method"],
            ArgumentListExpression(tuple(expr_from_dict(a) for a in d.get("arguments", []))),
        )
    if t == "property":
        return PropertyExpression(expr_from_dict(d["object"]), d["property"])
    if t == "bool":
        return BooleanExpression(expr_from_dict(d["expression"]))
    if t == "not":
        return NotExpression(expr_from_dict(d["expression"]))
    if t == "ternary":
        return TernaryExpression(
            BooleanExpression(expr_from_dict(d["condition"])),
            expr_from_dict(d["true"]),
            expr_from_dict(d["false"]),
        )
    raise TypeError(f"Unsupported expression dict type: {t}")


def annotation_to_dict(a: AnnotationNode) -> Dict[str, Any]:
    return {"name": a.name, "members": dict(a.members)}


def annotation_from_dict(d: Dict[str, Any]) -> AnnotationNode:
    return AnnotationNode(name=d["name"], members=dict(d.get("members") or {}))


def statement_to_dict(s: Statement) -> Dict[str, Any]:
    kind = "return" if isinstance(s, ReturnStatement) else "expression"
    return {"kind": kind, "expression": expr_to_dict(s.expression)}


def statement_from_dict(d: Dict[str, Any]) -> Statement:
    expr = expr_from_dict(d["expression"])
    if d.get("kind") == "return":
        return ReturnStatement(expr)
    return ExpressionStatement(expr)


def field_to_dict(f: FieldNode) -> Dict[str, Any]:
    return {
        "name": f.name,
        "modifiers": modifier_names(f.modifiers),
        "type": type_to_dict(f.type),
        "initial_expression": expr_to_dict(f.initial_expression),
    }


def field_from_dict(d: Dict[str, Any], owner: str) -> FieldNode:
    return FieldNode(
        name=d["name"],
        modifiers=modifiers_from_names(d.get("modifiers", [])),
        type=type_from_dict(d.get("type")),
        initial_expression=expr_from_dict(d.get("initial_expression")),
        owner=owner,
    )


def method_to_dict(m: MethodNode) -> Dict[str, Any]:
    return {
        "name": m.name,
        "modifiers": modifier_names(m.modifiers),
        "return_type": type_to_dict(m.return_type),
        "parameters": [{"name": p.name, "type": type_to_dict(p.type)} for p in m.parameters],
        "body": [statement_to_dict(s) for s in m.body],
    }


def method_from_dict(d: Dict[str, Any]) -> MethodNode:
    return MethodNode(
        name=d["name"],
        modifiers=modifiers_from_names(d.get("modifiers", [])),
        return_type=type_from_dict(d.get("return_type")),
        parameters=[Parameter(name=p["name"], type=type_from_dict(p.get("type"))) for p in d.get("parameters", [])],
        body=[statement_from_dict(s) for s in d.get("body", [])],
    )


def class_to_dict(c: ClassNode) -> Dict[str, Any]:
    return {
        "name": c.name,
        "modifiers": modifier_names(c.modifiers),
        "annotations": [annotation_to_dict(a) for a in c.annotations],
        "fields": [field_to_dict(f) for f in c.fields],
        "methods": [method_to_dict(m) for m in c.methods],
    }


def class_from_dict(d: Dict[str, Any]) -> ClassNode:
    c = ClassNode(name=d["name"], modifiers=modifiers_from_names(d.get("modifiers", [])))
    c.annotations = [annotation_from_dict(a) for a in d.get("annotations", [])]
    c.fields = [field_from_dict(f, owner=c.name) for f in d.get("fields", [])]
    c.methods = [method_from_dict(m) for m in d.get("methods", [])]
    return c


def unit_to_dict(u: CompilationUnit) -> Dict[str, Any]:
    return {
        "name": u.name,
        "package": u.package,
        "classes": [class_to_dict(c) for c in u.classes],
    }


def unit_from_dict(d: Dict[str, Any]) -> CompilationUnit:
    u = CompilationUnit(name=d.get("name", ""), package=d.get("package", ""))
    u.classes = [class_from_dict(c) for c in d.get("classes", [])]
    return u


def unit_to_json(u: CompilationUnit) -> str:
    return json.dumps(unit_to_dict(u), sort_keys=True)


def unit_from_json(s: str) -> CompilationUnit:
    d = json.loads(s)
    return unit_from_dict(d)


def unit_to_yaml(u: CompilationUnit) -> str:
    return yaml.safe_dump(unit_to_dict(u))


def unit_from_yaml(s: str) -> CompilationUnit:
    d = yaml.safe_load(s)
    return unit_from_dict(d)


def report_to_dict(r: TransformationReport) -> Dict[str, Any]:
    return {
        "unit": r.unit_name,
        "total_wrapped_calls": r.total_wrapped_calls,
        "classes": [asdict(c) for c in r.classes],
    }


def report_to_json(r: TransformationReport) -> str:
    return json.dumps(report_to_dict(r), sort_keys=True, indent=2)


def report_to_yaml(r: TransformationReport) -> str:
    return yaml.safe_dump(report_to_dict(r), sort_keys=False)
