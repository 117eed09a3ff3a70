"""
structmatch/resolver.py
═══════════════════════

Resolve a declared type (or a field, viewed as a type) to the struct shape
that field matchers run against.

    struct(F)             → struct(F)
    sequence(struct(F))   → struct(F)
    mapping(κ, struct(F)) → struct(F)
    anything else         → None

Only one layer of container wrapping is looked through: a slice of slices of
structs does not resolve.
"""

from __future__ import annotations

import logging
from typing import Optional

from structmatch.shapes import (
    MappingShape,
    SequenceShape,
    Shaped,
    StructShape,
)

logger = logging.getLogger(__name__)


def find_struct(t: Shaped) -> Optional[StructShape]:
    """Return the struct shape of *t*, or ``None`` if it has none."""
    shape = t.shape
    if isinstance(shape, StructShape):
        return shape
    if isinstance(shape, SequenceShape):
        inner = shape.element.shape
    elif isinstance(shape, MappingShape):
        inner = shape.value.shape
    else:
        logger.debug("no struct shape for %r (%s)", t, shape.kind.name)
        return None
    if isinstance(inner, StructShape):
        return inner
    logger.debug(
        "%r wraps %s, not a struct", t, inner.kind.name
    )
    return None
