"""
Core Declaration Model

Defines the declaration-level structures of a compilation unit:
    - Annotations (markers with named members)
    - Fields (typed slots with modifiers and an optional initializer)
    - Methods (parameters and a statement list)
    - Classes (the unit of transformation)
    - Compilation units (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about the source language's concrete syntax
        - Know nothing about logging
        - Are fully serializable
    ClassNode is mutable on purpose: transformations add fields and
    replace method bodies in place.
"""

from dataclasses import dataclass, field
from enum import Flag, auto
from typing import Any, Dict, List, Optional, Union

from logguard.expressions import Expression
from logguard.typesystem import TypeDescriptor


class Modifier(Flag):
    """
    Declaration modifiers.

    Combine with `|`:
        Modifier.PRIVATE | Modifier.STATIC | Modifier.FINAL
    """

    NONE = 0
    PUBLIC = auto()
    PROTECTED = auto()
    PRIVATE = auto()
    STATIC = auto()
    FINAL = auto()
    TRANSIENT = auto()


# Canonical rendering order.
MODIFIER_ORDER = (
    Modifier.PUBLIC,
    Modifier.PROTECTED,
    Modifier.PRIVATE,
    Modifier.STATIC,
    Modifier.FINAL,
    Modifier.TRANSIENT,
)


def modifier_names(modifiers: Modifier) -> List[str]:
    """Lower-case keywords for the flags set in modifiers, in canonical order."""
    return [m.name.lower() for m in MODIFIER_ORDER if m in modifiers]


def modifiers_from_names(names: List[str]) -> Modifier:
    result = Modifier.NONE
    for name in names:
        result |= Modifier[name.upper()]
    return result


AnnotationValue = Union[str, int, float, bool, None]


@dataclass
class AnnotationNode:
    """
    An annotation on a declaration.

    Examples:
        @Commons                      -> AnnotationNode("Commons")
        @Commons("logger")            -> members {"value": "logger"}
        @Commons(value = "logger",
                 loggingStrategy = "commons")

    Member values are plain scalars; the annotation's consumer decides
    what they mean.
    """

    name: str
    members: Dict[str, AnnotationValue] = field(default_factory=dict)

    def get_member(self, key: str, default: Any = None) -> Any:
        return self.members.get(key, default)


@dataclass(frozen=True)
class Parameter:
    """A method parameter. An untyped parameter has type None."""

    name: str
    type: Optional[TypeDescriptor] = None


@dataclass(frozen=True)
class ExpressionStatement:
    """An expression evaluated for its effect."""

    expression: Expression


@dataclass(frozen=True)
class ReturnStatement:
    """Return the value of an expression."""

    expression: Expression


Statement = Union[ExpressionStatement, ReturnStatement]


@dataclass
class FieldNode:
    """
    A field declared on a class.

    Properties:
        name: Field identifier
        modifiers: Modifier flags
        type: Declared type (None for a dynamically typed `def` field)
        initial_expression: Initializer, or None
        owner: Name of the declaring class
    """

    name: str
    modifiers: Modifier = Modifier.NONE
    type: Optional[TypeDescriptor] = None
    initial_expression: Optional[Expression] = None
    owner: Optional[str] = None

    @property
    def is_static(self) -> bool:
        return Modifier.STATIC in self.modifiers

    @property
    def is_private(self) -> bool:
        return Modifier.PRIVATE in self.modifiers

    @property
    def is_final(self) -> bool:
        return Modifier.FINAL in self.modifiers


@dataclass
class MethodNode:
    """
    A method declared on a class.

    Properties:
        name: Method identifier
        parameters: Declared parameters (their names shadow fields)
        body: Statements, in order
        modifiers: Modifier flags
        return_type: Declared return type (None for `def`)
    """

    name: str
    parameters: List[Parameter] = field(default_factory=list)
    body: List[Statement] = field(default_factory=list)
    modifiers: Modifier = Modifier.NONE
    return_type: Optional[TypeDescriptor] = None

    def parameter_names(self) -> List[str]:
        return [p.name for p in self.parameters]


@dataclass
class ClassNode:
    """
    A class declaration: the unit a transformation works on.

    INVARIANTS:
        - Field names are unique within a class
        - name is fully qualified when the unit declares a package
    """

    name: str
    fields: List[FieldNode] = field(default_factory=list)
    methods: List[MethodNode] = field(default_factory=list)
    annotations: List[AnnotationNode] = field(default_factory=list)
    modifiers: Modifier = Modifier.NONE

    @property
    def type_descriptor(self) -> TypeDescriptor:
        """A declared class always resolves to itself."""
        return TypeDescriptor(name=self.name, resolved=True)

    @property
    def simple_name(self) -> str:
        return self.type_descriptor.simple_name

    def get_field(self, field_name: str) -> Optional[FieldNode]:
        """
        Retrieve a field by name.

        Returns:
            FieldNode or None if not found
        """
        for f in self.fields:
            if f.name == field_name:
                return f
        return None

    def get_method(self, method_name: str) -> Optional[MethodNode]:
        for m in self.methods:
            if m.name == method_name:
                return m
        return None

    def add_field(
        self,
        name: str,
        modifiers: Modifier,
        type: Optional[TypeDescriptor],
        initial_expression: Optional[Expression] = None,
    ) -> FieldNode:
        """
        Create a field, attach it to this class and return it.

        The field goes first so that it is initialized before any
        field declared by the user.
        """
        node = FieldNode(
            name=name,
            modifiers=modifiers,
            type=type,
            initial_expression=initial_expression,
            owner=self.name,
        )
        self.fields.insert(0, node)
        return node

    def get_annotation(self, annotation_name: str) -> Optional[AnnotationNode]:
        for a in self.annotations:
            if a.name == annotation_name:
                return a
        return None

    def remove_annotation(self, annotation: AnnotationNode) -> None:
        self.annotations = [a for a in self.annotations if a is not annotation]


@dataclass
class CompilationUnit:
    """
    Root container: one source file.

    Properties:
        name: Unit identifier (usually the file stem)
        package: Package declared by the unit, or "" for none
        classes: Declared classes, in source order
    """

    name: str
    package: str = ""
    classes: List[ClassNode] = field(default_factory=list)

    def get_class(self, class_name: str) -> Optional[ClassNode]:
        """Find a class by fully-qualified or simple name."""
        for c in self.classes:
            if c.name == class_name or c.simple_name == class_name:
                return c
        return None
