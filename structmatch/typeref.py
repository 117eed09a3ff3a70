"""
structmatch/typeref.py
══════════════════════

Parser for the textual type references found in type-model documents.

The notation is the one type-introspection backends print for the
Kubernetes API types this package is aimed at:

    k8s.io/apimachinery/pkg/apis/meta/v1.ObjectMeta    named type
    string, int64, interface{}                         builtin
    *T                                                 pointer
    []T                                                slice
    [4]T                                               array
    map[K]V                                            map

Parsing uses a Parsimonious PEG grammar; ``parse_type_ref`` returns a small
frozen AST whose ``str()`` is the canonical qualified-type text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Union

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from structmatch.errors import TypeRefSyntaxError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1: GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

TYPEREF_GRAMMAR = Grammar(r'''
    type_ref    = pointer / slice / array / map / named / builtin

    pointer     = "*" type_ref
    slice       = "[]" type_ref
    array       = "[" digits "]" type_ref
    map         = "map[" type_ref "]" type_ref

    # Greedy path with backtracking to the last ".Name".
    named       = ~r"(?P<path>[A-Za-z0-9_.~/\-]+)\.(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    builtin     = ~r"interface\{\}|struct\{\}|[A-Za-z_][A-Za-z0-9_]*"

    digits      = ~r"[0-9]+"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2: AST
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class NamedRef:
    path: str
    name: str

    def __str__(self) -> str:
        return f"{self.path}.{self.name}"


@dataclass(frozen=True)
class BuiltinRef:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PointerRef:
    target: TypeRef

    def __str__(self) -> str:
        return f"*{self.target}"


@dataclass(frozen=True)
class SliceRef:
    element: TypeRef

    def __str__(self) -> str:
        return f"[]{self.element}"


@dataclass(frozen=True)
class ArrayRef:
    length: int
    element: TypeRef

    def __str__(self) -> str:
        return f"[{self.length}]{self.element}"


@dataclass(frozen=True)
class MapRef:
    key: TypeRef
    value: TypeRef

    def __str__(self) -> str:
        return f"map[{self.key}]{self.value}"


TypeRef = Union[NamedRef, BuiltinRef, PointerRef, SliceRef, ArrayRef, MapRef]


# ═══════════════════════════════════════════════════════════════════
#  PART 3: VISITOR
# ═══════════════════════════════════════════════════════════════════

class TypeRefVisitor(NodeVisitor):
    """Turn a Parsimonious parse tree into a ``TypeRef``."""

    grammar = TYPEREF_GRAMMAR

    def visit_type_ref(self, node: Node, visited_children: List[Any]) -> TypeRef:
        return visited_children[0]

    def visit_pointer(self, node: Node, visited_children: List[Any]) -> PointerRef:
        _, target = visited_children
        return PointerRef(target)

    def visit_slice(self, node: Node, visited_children: List[Any]) -> SliceRef:
        _, element = visited_children
        return SliceRef(element)

    def visit_array(self, node: Node, visited_children: List[Any]) -> ArrayRef:
        _, length, _, element = visited_children
        return ArrayRef(length, element)

    def visit_map(self, node: Node, visited_children: List[Any]) -> MapRef:
        _, key, _, value = visited_children
        return MapRef(key, value)

    def visit_named(self, node: Node, visited_children: List[Any]) -> NamedRef:
        return NamedRef(node.match.group("path"), node.match.group("name"))

    def visit_builtin(self, node: Node, visited_children: List[Any]) -> BuiltinRef:
        return BuiltinRef(node.text)

    def visit_digits(self, node: Node, visited_children: List[Any]) -> int:
        return int(node.text)

    def generic_visit(self, node: Node, visited_children: List[Any]) -> Any:
        return visited_children or node


_VISITOR = TypeRefVisitor()


@lru_cache(maxsize=4096)
def parse_type_ref(text: str) -> TypeRef:
    """Parse *text* into a ``TypeRef``.

    Raises
    ------
    TypeRefSyntaxError
        If *text* is not a valid type reference.
    """
    source = text.strip()
    try:
        return _VISITOR.parse(source)
    except ParseError as exc:
        logger.debug("type reference %r rejected at %d", source, exc.pos)
        raise TypeRefSyntaxError(source, exc.pos) from exc
    except VisitationError as exc:
        raise TypeRefSyntaxError(source) from exc


def canonical(text: str) -> str:
    """Return the canonical spelling of type reference *text*."""
    return str(parse_type_ref(text))
