"""
structmatch/matchers.py
═══════════════════════

Field matchers and the structural query built on them.

A ``Matcher`` is an immutable predicate over a single ``Field``.  Matchers
compose with ``and_`` (also spelled ``m1.and_(m2)`` or ``m1 & m2``), and
``has`` asks whether a declared type's struct satisfies a list of them:

    has(t, m_1, ..., m_n)  ⟺  struct(t) exists
                              ∧ ∀ i. ∃ field f ∈ struct(t). m_i(f)

Each matcher may be satisfied by a different field.  Nothing here demands
that a single field satisfy every matcher at once; compose with ``and_``
for that.

``has_field_that`` closes the loop: it views a field as a declared type and
runs ``has`` against it, so matchers can describe nested structs.

Usage::

    from structmatch.matchers import has, is_named, is_type_named

    if has(obj_type, is_named("Items").and_(is_slice())):
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from structmatch.resolver import find_struct
from structmatch.shapes import Field, SequenceShape, Shaped, StructShape

logger = logging.getLogger(__name__)


class TypeMatchMode(Enum):
    """How ``is_type_named`` compares a field's qualified type.

    SUFFIX   : literal ``str.endswith``; tolerates differing import-path
               prefixes (vendored copies) but also accepts fortuitous
               matches such as ``pkg.FooSpec`` for ``Spec``.
    BOUNDARY : suffix must be the whole text or follow ``/ . * ]``.
    EXACT    : the qualified type must equal the expected text.
    """
    SUFFIX = "suffix"
    BOUNDARY = "boundary"
    EXACT = "exact"


_BOUNDARY_CHARS = frozenset("/.*]")


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: MATCHER VALUE
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Matcher:
    """
    A predicate over a struct field.

    Calling the matcher evaluates it.  ``description`` is informational
    only (used in logs and ``repr``).
    """
    fn: Callable[[Field], bool]
    description: str = ""

    def __call__(self, f: Field) -> bool:
        return bool(self.fn(f))

    def and_(self, other: Matcher) -> Matcher:
        """Chain *other* after this matcher; see ``and_``."""
        return and_(self, other)

    def __and__(self, other: Matcher) -> Matcher:
        if not isinstance(other, Matcher):
            return NotImplemented
        return and_(self, other)

    def __repr__(self) -> str:
        return f"Matcher({self.description or self.fn!r})"


def and_(first: Matcher, second: Matcher) -> Matcher:
    """Return a matcher true iff both *first* and *second* hold.

    *first* is evaluated first; when it is false *second* is not called.
    """
    def _both(f: Field) -> bool:
        return first(f) and second(f)

    return Matcher(_both, f"{first.description} and {second.description}")


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: QUERY
# ═════════════════════════════════════════════════════════════════════════

def matches(s: StructShape, m: Matcher) -> bool:
    """True if any field of *s* satisfies *m*."""
    for f in s.fields:
        if m(f):
            return True
    return False


def has(t: Shaped, *ms: Matcher) -> bool:
    """
    True if *t* resolves to a struct (directly, or as the element of a
    sequence or mapping) and every matcher in *ms* is satisfied by some
    field of it.

    With no matchers the answer only depends on whether a struct was found.
    """
    s = find_struct(t)
    if s is None:
        return False
    for m in ms:
        if not matches(s, m):
            logger.debug("%r: no field satisfies %r", t, m)
            return False
    return True


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: FIELD MATCHERS
# ═════════════════════════════════════════════════════════════════════════

def is_embedded() -> Matcher:
    """Matches embedded fields."""
    return Matcher(lambda f: f.embedded, "is_embedded")


def is_slice() -> Matcher:
    """Matches fields whose own type is a sequence."""
    return Matcher(lambda f: isinstance(f.shape, SequenceShape), "is_slice")


def is_named(name: str) -> Matcher:
    """Matches fields named exactly *name* (case-sensitive)."""
    return Matcher(lambda f: f.name == name, f"is_named({name!r})")


def type_name_matches(
    qualified_type: str,
    expected: str,
    mode: TypeMatchMode = TypeMatchMode.SUFFIX,
) -> bool:
    """Compare a qualified type against *expected* under *mode*."""
    if mode is TypeMatchMode.EXACT:
        return qualified_type == expected
    if not qualified_type.endswith(expected):
        return False
    if mode is TypeMatchMode.SUFFIX or not expected:
        return True
    if len(qualified_type) == len(expected):
        return True
    return qualified_type[-len(expected) - 1] in _BOUNDARY_CHARS


def is_type_named(
    type_suffix: str,
    name: str,
    mode: TypeMatchMode = TypeMatchMode.SUFFIX,
) -> Matcher:
    """Matches fields named *name* whose qualified type ends with
    *type_suffix*.

    The default comparison is a literal string suffix, not a nominal type
    identity check: ``is_type_named("pkg.Foo", "Bar")`` accepts
    ``other/pkg.Foo`` but rejects ``pkg.XFoo``.
    """
    of_type = Matcher(
        lambda f: type_name_matches(f.qualified_type, type_suffix, mode),
        f"type {mode.value} {type_suffix!r}",
    )
    return and_(is_named(name), of_type)


def has_field_that(*ms: Matcher) -> Matcher:
    """Matches fields whose own type is a struct satisfying ``has(f, *ms)``."""
    described = ", ".join(m.description for m in ms)
    return Matcher(lambda f: has(f, *ms), f"has_field_that({described})")
