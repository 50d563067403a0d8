"""
Type references and the class path they are resolved against.

A TypeDescriptor is a reference to a type by fully-qualified name.
It is either resolved (the name was found on the class path) or a
placeholder (the name is kept so code generation can continue, and
the failure surfaces when something needs the type to exist).

ARCHITECTURAL RULE:
    Lookup never raises.
    Whether a missing type is fatal is the caller's decision.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, Optional

import yaml

from logguard.errors import UnresolvedTypeError

if TYPE_CHECKING:
    from logguard.model import CompilationUnit

logger = logging.getLogger(__name__)

# Visible without an import.
JAVA_LANG_TYPES: Dict[str, str] = {
    name: f"java.lang.{name}"
    for name in ("Object", "String", "Boolean", "Integer", "Long", "Double", "Class", "Throwable", "Exception")
}
_IMPLICIT = frozenset(JAVA_LANG_TYPES.values())


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Reference to a type by fully-qualified name.

    Properties:
        name: Fully-qualified name (e.g. "org.apache.commons.logging.Log")
        resolved: True if the name was found when the descriptor was made
    """

    name: str
    resolved: bool = False

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def package(self) -> str:
        if "." not in self.name:
            return ""
        return self.name.rsplit(".", 1)[0]

    def require_resolved(self, context: str = "") -> "TypeDescriptor":
        """Return self, or raise UnresolvedTypeError for a placeholder."""
        if not self.resolved:
            raise UnresolvedTypeError(self.name, context)
        return self


def placeholder(name: str) -> TypeDescriptor:
    """Descriptor carrying only a name; resolution is deferred."""
    return TypeDescriptor(name=name, resolved=False)


class ClassPath:
    """
    The set of type names visible to a compilation.

    Examples:
        ClassPath(["org.apache.commons.logging.Log"])
        ClassPath.from_yaml("classpath:\\n  - java.lang.String\\n")
    """

    def __init__(self, type_names: Iterable[str] = ()) -> None:
        self._names: FrozenSet[str] = frozenset(n.strip() for n in type_names if n and n.strip())

    @property
    def type_names(self) -> FrozenSet[str]:
        return self._names

    def contains(self, name: str) -> bool:
        return name in self._names or name in _IMPLICIT

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"ClassPath({sorted(self._names)!r})"

    def lookup(self, name: str) -> TypeDescriptor:
        """
        Look up a type by fully-qualified name.

        Returns:
            A resolved descriptor on a hit, a placeholder on a miss.
        """
        if self.contains(name):
            return TypeDescriptor(name=name, resolved=True)
        logger.debug("Type %s not on class path, using placeholder", name)
        return placeholder(name)

    def find(self, name: str) -> Optional[TypeDescriptor]:
        """Like lookup, but None on a miss."""
        if self.contains(name):
            return TypeDescriptor(name=name, resolved=True)
        return None

    def extended(self, type_names: Iterable[str]) -> "ClassPath":
        return ClassPath(self._names | frozenset(type_names))

    def with_unit(self, unit: "CompilationUnit") -> "ClassPath":
        """Class path that also sees the classes declared in unit."""
        return self.extended(c.name for c in unit.classes)

    @classmethod
    def from_yaml(cls, text: str) -> "ClassPath":
        """
        Build from YAML: either a list of names or a mapping with a
        `classpath` list.
        """
        data = yaml.safe_load(text)
        if data is None:
            return cls()
        if isinstance(data, dict):
            data = data.get("classpath", [])
        if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
            raise ValueError("class path YAML must be a list of type names")
        return cls(data)

    @classmethod
    def from_file(cls, path: str) -> "ClassPath":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_yaml(f.read())
