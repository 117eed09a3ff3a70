"""
structmatch/shapes.py
═════════════════════

Neutral shape model shared by the matcher engine and the adapters.

A declared type is modelled as a term of a small algebra:

    shape ::= struct({f_1, ..., f_n})     (ordered named fields)
            | sequence(τ)                 (slice / array / list of τ)
            | mapping(κ, τ)               (map from κ to τ)
            | other(description)          (anything without struct structure)

where each τ is itself a ``DeclaredType``.  Shapes are resolved lazily: an
adapter hands a loader callable to ``DeclaredType`` and the loader runs on
first access to ``DeclaredType.shape``.  The result is cached for the life
of the object and never invalidated.

License: MIT, same as structmatch.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Iterator, Optional, Protocol, Tuple, Union


class ShapeKind(Enum):
    """Discriminant for the shape algebra."""
    STRUCT = auto()
    SEQUENCE = auto()
    MAPPING = auto()
    OTHER = auto()


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: SHAPES
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StructShape:
    """
    A struct decomposed into its fields.

    ``fields`` keeps declaration order.  Matching never depends on it; the
    order only decides how soon an existential search stops.
    """
    fields: Tuple[Field, ...] = ()
    kind: ShapeKind = field(default=ShapeKind.STRUCT, init=False)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def field_named(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(frozen=True)
class SequenceShape:
    """One-level container of ``element``."""
    element: DeclaredType
    kind: ShapeKind = field(default=ShapeKind.SEQUENCE, init=False)


@dataclass(frozen=True)
class MappingShape:
    """One-level container mapping ``key`` to ``value``.

    Only the value type takes part in resolution; ``key`` is kept as text
    for display.
    """
    value: DeclaredType
    key: str = ""
    kind: ShapeKind = field(default=ShapeKind.MAPPING, init=False)


@dataclass(frozen=True)
class OtherShape:
    """Anything without struct structure (scalars, pointers, functions...)."""
    description: str = ""
    kind: ShapeKind = field(default=ShapeKind.OTHER, init=False)


Shape = Union[StructShape, SequenceShape, MappingShape, OtherShape]

OTHER = OtherShape()


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: DECLARED TYPES AND FIELDS
# ═════════════════════════════════════════════════════════════════════════

class Shaped(Protocol):
    """Anything the resolver can look through: a type or a field."""

    @property
    def shape(self) -> Shape: ...


class DeclaredType:
    """
    An opaque reference to a named type in the analysed codebase.

    ``shape`` may be given directly or as a zero-argument loader.  A loader
    runs at most once, also under concurrent access; its result is cached
    on the instance.

    Examples
    --------
    >>> t = DeclaredType("pkg.Empty", StructShape())
    >>> t.shape.kind
    <ShapeKind.STRUCT: 1>
    """

    def __init__(
        self,
        name: str,
        shape: Union[Shape, Callable[[], Shape]],
    ) -> None:
        self.name = name
        self._lock = threading.RLock()
        self._shape: Optional[Shape] = None
        self._loader: Optional[Callable[[], Shape]] = None
        if callable(shape):
            self._loader = shape
        else:
            self._shape = shape

    @property
    def shape(self) -> Shape:
        shape = self._shape
        if shape is None:
            with self._lock:
                if self._shape is None:
                    loader = self._loader
                    self._shape = OTHER if loader is None else loader()
                    self._loader = None
                shape = self._shape
        return shape

    @property
    def is_resolved(self) -> bool:
        """True once the shape has been computed (or was given eagerly)."""
        return self._shape is not None

    def __repr__(self) -> str:
        return f"DeclaredType({self.name!r})"


@dataclass(frozen=True)
class Field:
    """
    Neutral descriptor of one struct field.

    Attributes
    ----------
    name           : Field name as declared (case-sensitive)
    qualified_type : Fully-qualified textual identity of the field's type,
                     used for suffix comparison
    type           : The field's own declared type
    embedded       : True if the field's type is promoted into the
                     containing struct's namespace
    """
    name: str
    qualified_type: str
    type: DeclaredType = field(compare=False, repr=False)
    embedded: bool = False

    @property
    def shape(self) -> Shape:
        return self.type.shape


def struct_of(*fields: Field, name: str = "") -> DeclaredType:
    """Build a ``DeclaredType`` whose shape is a struct of *fields*."""
    return DeclaredType(name, StructShape(tuple(fields)))


def sequence_of(element: DeclaredType, name: str = "") -> DeclaredType:
    return DeclaredType(name or f"[]{element.name}", SequenceShape(element))


def mapping_of(
    value: DeclaredType, key: str = "string", name: str = ""
) -> DeclaredType:
    return DeclaredType(
        name or f"map[{key}]{value.name}", MappingShape(value, key)
    )


def opaque(name: str, description: str = "") -> DeclaredType:
    return DeclaredType(name, OtherShape(description or name))
