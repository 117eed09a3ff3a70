"""
structmatch/pytypes.py
══════════════════════

Adapter from annotated Python classes to the neutral shape model.

Dataclasses, ``TypedDict``s, ``NamedTuple``s and any other class with
annotations become structs; their annotated attributes become fields.
Container annotations map onto the one-level container shapes:

    list[T], set[T], frozenset[T], tuple[T, ...], Sequence[T]  → sequence(T)
    dict[K, V], Mapping[K, V]                                  → mapping(V)
    Optional[T], unions, scalars, callables                    → other

Field metadata rides on ``typing.Annotated``::

    @dataclass
    class Widget:
        __qualified_type__ = "example.org/api/v1.Widget"

        type_meta: Annotated[TypeMeta, FieldInfo("TypeMeta", embedded=True)]
        spec: Annotated[WidgetSpec, FieldInfo("Spec")]

A class may pin its qualified type with ``__qualified_type__``; otherwise
``<module>.<qualname>`` is used.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from structmatch.errors import ErrorCode, ModelError
from structmatch.shapes import (
    DeclaredType,
    Field,
    MappingShape,
    OtherShape,
    SequenceShape,
    Shape,
    StructShape,
)

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = frozenset({
    list,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Collection,
    collections.abc.Iterable,
})

_MAPPING_ORIGINS = frozenset({
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
})

_UNION_ORIGINS = frozenset({typing.Union, types.UnionType})


@dataclass(frozen=True)
class FieldInfo:
    """``Annotated`` metadata overriding how an attribute appears as a field."""
    name: Optional[str] = None
    embedded: bool = False


EMBEDDED = FieldInfo(embedded=True)


def _strip_annotated(tp: Any) -> Tuple[Any, Optional[FieldInfo]]:
    if typing.get_origin(tp) is typing.Annotated:
        inner, *extras = typing.get_args(tp)
        info = next((e for e in extras if isinstance(e, FieldInfo)), None)
        return inner, info
    return tp, None


def _is_struct_class(tp: Any) -> bool:
    if not isinstance(tp, type) or tp.__module__ == "builtins":
        return False
    if dataclasses.is_dataclass(tp):
        return True
    return any(getattr(k, "__annotations__", None) for k in tp.__mro__[:-1])


def qualified_name(tp: Any) -> str:
    """Textual identity of *tp*, in the notation of ``structmatch.typeref``."""
    tp, _ = _strip_annotated(tp)
    if tp is None or tp is type(None):
        return "nil"
    if isinstance(tp, type):
        pinned = tp.__dict__.get("__qualified_type__")
        if isinstance(pinned, str):
            return pinned
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin in _SEQUENCE_ORIGINS:
        return "[]" + (qualified_name(args[0]) if args else "any")
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return "[]" + qualified_name(args[0])
    if origin in _MAPPING_ORIGINS:
        if len(args) == 2:
            return f"map[{qualified_name(args[0])}]{qualified_name(args[1])}"
        return "map[any]any"
    if origin in _UNION_ORIGINS:
        members = [a for a in args if a is not type(None)]
        if len(members) == 1 and len(args) == 2:
            return "*" + qualified_name(members[0])
    if tp is typing.Any:
        return "any"
    return repr(tp)


class ClassIntrospector:
    """
    Caching translation of Python annotations into declared types.

    One introspector per analysis run; each distinct annotation maps to a
    single ``DeclaredType`` so recursive classes resolve without looping.
    """

    def __init__(self) -> None:
        self._cache: Dict[Any, DeclaredType] = {}
        self._walked: Set[DeclaredType] = set()

    def type_of(self, tp: Any) -> DeclaredType:
        """Return the declared type for annotation *tp*.

        Every class reachable from *tp* is resolved before returning, so an
        unresolvable annotation anywhere below *tp* raises ``ModelError``
        here and never from a later match.
        """
        t = self._type_of(tp)
        self._resolve_reachable(t)
        return t

    def _type_of(self, tp: Any) -> DeclaredType:
        tp, _ = _strip_annotated(tp)
        try:
            cached = self._cache.get(tp)
        except TypeError:
            return self._build(tp)
        if cached is None:
            cached = self._build(tp)
            self._cache[tp] = cached
        return cached

    def _resolve_reachable(self, root: DeclaredType) -> None:
        pending = [root]
        while pending:
            t = pending.pop()
            if t in self._walked:
                continue
            shape = t.shape
            if isinstance(shape, StructShape):
                pending.extend(f.type for f in shape)
            elif isinstance(shape, SequenceShape):
                pending.append(shape.element)
            elif isinstance(shape, MappingShape):
                pending.append(shape.value)
            self._walked.add(t)

    def _build(self, tp: Any) -> DeclaredType:
        name = qualified_name(tp)
        if _is_struct_class(tp):
            hints = self._hints(tp)
            return DeclaredType(name, lambda: self._struct_shape(hints))
        return DeclaredType(name, lambda: self._container_shape(tp))

    def _hints(self, cls: type) -> Dict[str, Any]:
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except (NameError, TypeError) as exc:
            raise ModelError(
                f"cannot resolve annotations of {qualified_name(cls)}: {exc}",
                code=ErrorCode.MODEL_BAD_FIELD,
            ) from exc
        return {
            k: v for k, v in hints.items()
            if typing.get_origin(v) is not typing.ClassVar
            and v is not typing.ClassVar
        }

    def _struct_shape(self, hints: Dict[str, Any]) -> Shape:
        fields: List[Field] = []
        for attr, hint in hints.items():
            inner, info = _strip_annotated(hint)
            info = info or FieldInfo()
            fields.append(Field(
                name=info.name or attr,
                qualified_type=qualified_name(inner),
                type=self._type_of(inner),
                embedded=info.embedded,
            ))
        return StructShape(tuple(fields))

    def _container_shape(self, tp: Any) -> Shape:
        origin = typing.get_origin(tp)
        if origin is None and isinstance(tp, type):
            origin = tp
        args = typing.get_args(tp)
        if origin in _SEQUENCE_ORIGINS:
            return SequenceShape(self._type_of(args[0] if args else typing.Any))
        if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
            return SequenceShape(self._type_of(args[0]))
        if origin in _MAPPING_ORIGINS:
            key, value = args if len(args) == 2 else (typing.Any, typing.Any)
            return MappingShape(self._type_of(value), qualified_name(key))
        logger.debug("%s has no struct structure", qualified_name(tp))
        return OtherShape(qualified_name(tp))


def declared_type_of(tp: Any) -> DeclaredType:
    """Translate annotation *tp* with a fresh ``ClassIntrospector``."""
    return ClassIntrospector().type_of(tp)
