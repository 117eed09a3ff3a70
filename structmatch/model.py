"""
structmatch/model.py
════════════════════

Adapter from JSON type-model documents to the neutral shape model.

A type-introspection backend (outside this package) describes the declared
types of a codebase in a document such as::

    {
      "types": {
        "example.org/api/v1.Widget": {
          "kind": "struct",
          "fields": [
            {"name": "TypeMeta",
             "type": "k8s.io/apimachinery/pkg/apis/meta/v1.TypeMeta",
             "embedded": true},
            {"name": "Spec", "type": "example.org/api/v1.WidgetSpec"}
          ]
        },
        "example.org/api/v1.WidgetSpec": {"kind": "struct", "fields": []},
        "example.org/api/v1.Widgets": {
          "kind": "alias", "type": "[]example.org/api/v1.Widget"
        },
        "example.org/api/v1.Phase": {"kind": "other", "description": "string"}
      }
    }

``TypeUniverse`` turns each entry into a ``DeclaredType`` whose shape is
computed on first use:

    struct  → StructShape of its fields
    alias   → shape of the aliased type reference (cycles → OtherShape)
    other   → OtherShape

and each field type reference into a ``DeclaredType``:

    []T        → SequenceShape(T)
    [n]T       → OtherShape (fixed-length arrays are not unwrapped)
    map[K]V    → MappingShape(V)
    *T         → OtherShape
    builtin    → OtherShape
    named      → the declared type; undeclared → OtherShape

With ``strict=True`` undeclared references are rejected with
``UnknownTypeError`` while the model is built (``from_dict``,
``declare_struct``, ``declare_alias``, ``type_of``).  Computing a shape
never raises.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
    Union,
)

from structmatch.errors import (
    ErrorCode,
    ModelError,
    TypeRefSyntaxError,
    UnknownTypeError,
)
from structmatch.shapes import (
    DeclaredType,
    Field,
    MappingShape,
    OtherShape,
    SequenceShape,
    Shape,
    StructShape,
)
from structmatch.typeref import (
    ArrayRef,
    MapRef,
    NamedRef,
    PointerRef,
    SliceRef,
    TypeRef,
    parse_type_ref,
)

logger = logging.getLogger(__name__)

KIND_STRUCT = "struct"
KIND_ALIAS = "alias"
KIND_OTHER = "other"
KINDS = (KIND_STRUCT, KIND_ALIAS, KIND_OTHER)


@dataclass(frozen=True)
class FieldDecl:
    name: str
    type: TypeRef
    embedded: bool = False


@dataclass(frozen=True)
class TypeDecl:
    """One entry of a type-model document, after validation."""
    name: str
    kind: str
    fields: Tuple[FieldDecl, ...] = ()
    target: Optional[TypeRef] = None
    description: str = ""


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: TYPE UNIVERSE
# ═════════════════════════════════════════════════════════════════════════

class TypeUniverse:
    """
    The declared types of one analysis run.

    Declared types are created once per name and cached, so two fields
    referring to the same named type share one ``DeclaredType`` (and one
    lazily computed shape).
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._decls: Dict[str, TypeDecl] = {}
        self._types: Dict[str, DeclaredType] = {}
        self._anonymous: Dict[str, DeclaredType] = {}

    # ── Declaration ──────────────────────────────────────────────────

    def declare(self, decl: TypeDecl) -> DeclaredType:
        if decl.name in self._decls:
            raise ModelError(
                f"type {decl.name!r} declared twice",
                code=ErrorCode.MODEL_BAD_LAYOUT,
            )
        self._decls[decl.name] = decl
        t = DeclaredType(decl.name, lambda: self._shape_of(decl))
        self._types[decl.name] = t
        return t

    def declare_struct(
        self, name: str, fields: List[Tuple[str, str, bool]]
    ) -> DeclaredType:
        """Declare struct *name* from ``(field_name, type_text, embedded)``."""
        decls = tuple(
            FieldDecl(fname, parse_type_ref(text), embedded)
            for fname, text, embedded in fields
        )
        return self._declare_checked(TypeDecl(name, KIND_STRUCT, fields=decls))

    def declare_alias(self, name: str, target: str) -> DeclaredType:
        return self._declare_checked(
            TypeDecl(name, KIND_ALIAS, target=parse_type_ref(target))
        )

    def declare_other(self, name: str, description: str = "") -> DeclaredType:
        return self.declare(TypeDecl(name, KIND_OTHER, description=description))

    # ── Lookup ───────────────────────────────────────────────────────

    def __contains__(self, name: object) -> bool:
        return name in self._decls

    def __iter__(self) -> Iterator[DeclaredType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def names(self) -> List[str]:
        return list(self._decls)

    def lookup(self, name: str) -> DeclaredType:
        """Return the declared type called *name*.

        Raises ``UnknownTypeError`` if the model does not declare it.
        """
        try:
            return self._types[name]
        except KeyError:
            raise UnknownTypeError(name) from None

    def type_of(self, ref: Union[str, TypeRef]) -> DeclaredType:
        """Return the ``DeclaredType`` a type reference denotes.

        With ``strict=True`` a reference to an undeclared named type raises
        ``UnknownTypeError``.
        """
        if isinstance(ref, str):
            ref = parse_type_ref(ref)
        if self.strict:
            for named in _named_refs(ref):
                if str(named) not in self._decls:
                    raise UnknownTypeError(str(named))
        return self._resolve_ref(ref)

    def check_references(self) -> None:
        """Raise ``UnknownTypeError`` for the first undeclared named
        reference anywhere in the model."""
        for decl in self._decls.values():
            self._check_decl(decl)

    # ── Internals ────────────────────────────────────────────────────

    def _declare_checked(self, decl: TypeDecl) -> DeclaredType:
        t = self.declare(decl)
        if self.strict:
            try:
                self._check_decl(decl)
            except UnknownTypeError:
                del self._decls[decl.name]
                del self._types[decl.name]
                raise
        return t

    def _check_decl(self, decl: TypeDecl) -> None:
        refs: List[TypeRef] = [f.type for f in decl.fields]
        if decl.target is not None:
            refs.append(decl.target)
        for ref in refs:
            for named in _named_refs(ref):
                if str(named) not in self._decls:
                    raise UnknownTypeError(str(named), source=decl.name)

    def _resolve_ref(self, ref: TypeRef) -> DeclaredType:
        key = str(ref)
        if isinstance(ref, NamedRef):
            if key in self._types:
                return self._types[key]
            return self._anonymous_type(
                key, lambda: OtherShape(f"undeclared {key}")
            )
        if isinstance(ref, SliceRef):
            element = self._resolve_ref(ref.element)
            return self._anonymous_type(key, lambda: SequenceShape(element))
        if isinstance(ref, MapRef):
            value = self._resolve_ref(ref.value)
            return self._anonymous_type(
                key, lambda: MappingShape(value, str(ref.key))
            )
        if isinstance(ref, ArrayRef):
            return self._anonymous_type(key, lambda: OtherShape("array"))
        if isinstance(ref, PointerRef):
            return self._anonymous_type(key, lambda: OtherShape("pointer"))
        return self._anonymous_type(key, lambda: OtherShape("builtin"))

    def _anonymous_type(self, key: str, loader: Any) -> DeclaredType:
        t = self._anonymous.get(key)
        if t is None:
            t = DeclaredType(key, loader)
            self._anonymous[key] = t
        return t

    def _shape_of(self, decl: TypeDecl) -> Shape:
        if decl.kind == KIND_STRUCT:
            return StructShape(tuple(
                Field(
                    name=f.name,
                    qualified_type=str(f.type),
                    type=self._resolve_ref(f.type),
                    embedded=f.embedded,
                )
                for f in decl.fields
            ))
        if decl.kind == KIND_ALIAS:
            target = self._final_alias_target(decl)
            if target is None:
                logger.debug("alias cycle through %s", decl.name)
                return OtherShape(f"cyclic alias {decl.name}")
            return self._resolve_ref(target).shape
        return OtherShape(decl.description or decl.name)

    def _final_alias_target(self, decl: TypeDecl) -> Optional[TypeRef]:
        seen: Set[str] = {decl.name}
        ref = decl.target
        while isinstance(ref, NamedRef):
            inner = self._decls.get(str(ref))
            if inner is None or inner.kind != KIND_ALIAS:
                break
            if inner.name in seen:
                return None
            seen.add(inner.name)
            ref = inner.target
        return ref

    # ── Construction ─────────────────────────────────────────────────

    @classmethod
    def from_dict(
        cls,
        data: Any,
        strict: bool = False,
        source: Optional[str] = None,
    ) -> TypeUniverse:
        """Build a universe from a decoded type-model document."""
        if not isinstance(data, Mapping) or not isinstance(
            data.get("types"), Mapping
        ):
            raise ModelError(
                'document must be an object with a "types" object',
                code=ErrorCode.MODEL_BAD_LAYOUT,
                source=source,
            )
        universe = cls(strict=strict)
        for name, entry in data["types"].items():
            universe.declare(_decl_from_entry(name, entry, source))
        if strict:
            universe.check_references()
        logger.info(
            "loaded %d declared types%s",
            len(universe),
            f" from {source}" if source else "",
        )
        return universe


def _named_refs(ref: TypeRef) -> Iterator[NamedRef]:
    if isinstance(ref, NamedRef):
        yield ref
    elif isinstance(ref, (SliceRef, ArrayRef)):
        yield from _named_refs(ref.element)
    elif isinstance(ref, MapRef):
        yield from _named_refs(ref.key)
        yield from _named_refs(ref.value)
    elif isinstance(ref, PointerRef):
        yield from _named_refs(ref.target)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: DOCUMENT VALIDATION
# ═════════════════════════════════════════════════════════════════════════

def _parse_ref(text: Any, where: str, source: Optional[str]) -> TypeRef:
    if not isinstance(text, str):
        raise ModelError(
            f"{where}: type reference must be a string",
            code=ErrorCode.MODEL_BAD_FIELD,
            source=source,
        )
    try:
        return parse_type_ref(text)
    except TypeRefSyntaxError as exc:
        raise TypeRefSyntaxError(
            exc.text, exc.position, source=source or where
        ) from exc


def _decl_from_entry(
    name: Any, entry: Any, source: Optional[str]
) -> TypeDecl:
    if not isinstance(name, str) or not isinstance(
        _safe_parse(name), NamedRef
    ):
        raise ModelError(
            f"type name {name!r} is not a qualified named type",
            code=ErrorCode.MODEL_BAD_LAYOUT,
            hint="expected <import path>.<Name>",
            source=source,
        )
    if not isinstance(entry, Mapping):
        raise ModelError(
            f"{name}: entry must be an object",
            code=ErrorCode.MODEL_BAD_LAYOUT,
            source=source,
        )
    kind = entry.get("kind")
    if kind not in KINDS:
        raise ModelError(
            f"{name}: unknown kind {kind!r}",
            code=ErrorCode.MODEL_BAD_KIND,
            hint=f"one of {', '.join(KINDS)}",
            source=source,
        )
    if kind == KIND_ALIAS:
        target = _parse_ref(entry.get("type"), name, source)
        return TypeDecl(name, kind, target=target)
    if kind == KIND_OTHER:
        return TypeDecl(name, kind, description=str(entry.get("description", "")))

    raw_fields = entry.get("fields", [])
    if not isinstance(raw_fields, list):
        raise ModelError(
            f"{name}: fields must be a list",
            code=ErrorCode.MODEL_BAD_FIELD,
            source=source,
        )
    fields: List[FieldDecl] = []
    for i, raw in enumerate(raw_fields):
        where = f"{name}.fields[{i}]"
        if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str):
            raise ModelError(
                f"{where}: field must be an object with a string name",
                code=ErrorCode.MODEL_BAD_FIELD,
                source=source,
            )
        embedded = raw.get("embedded", False)
        if not isinstance(embedded, bool):
            raise ModelError(
                f"{where}: embedded must be a boolean",
                code=ErrorCode.MODEL_BAD_FIELD,
                source=source,
            )
        fields.append(
            FieldDecl(raw["name"], _parse_ref(raw.get("type"), where, source),
                      embedded)
        )
    return TypeDecl(name, kind, fields=tuple(fields))


def _safe_parse(text: str) -> Optional[TypeRef]:
    try:
        return parse_type_ref(text)
    except TypeRefSyntaxError:
        return None


def load_model(path: Union[str, Path], strict: bool = False) -> TypeUniverse:
    """Read a JSON type-model document from *path*."""
    p = Path(path)
    if not p.is_file():
        raise ModelError(
            f"model file not found: {p}", code=ErrorCode.MODEL_NOT_FOUND
        )
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ModelError(
            f"invalid JSON: {exc.msg} (line {exc.lineno})",
            code=ErrorCode.MODEL_INVALID_JSON,
            source=str(p),
        ) from exc
    return TypeUniverse.from_dict(data, strict=strict, source=str(p))
