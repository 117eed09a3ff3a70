"""
structmatch: Structural Field Matching for Static-Analysis Rules
================================================================

Answers yes/no questions about a declared type's shape: does it carry a
``TypeMeta`` field of the right type, does its element struct have a
``Spec``, does a nested field look like a resource claim spec.

Core modules
------------
shapes
    Neutral shape model: ``DeclaredType``, ``Field`` and the struct /
    sequence / mapping / other shape variants.
resolver
    Resolution of a declared type to its struct (through one container).
matchers
    ``Matcher`` combinators and the ``has`` query.
catalog
    Declarative table of conventional Kubernetes / Crossplane fields.
config
    ``MatchConfig`` tuning knobs and environment loading.
errors
    Boundary error hierarchy (models, configuration, catalog).

Adapter modules
---------------
typeref
    Parsimonious grammar for textual type references.
model
    JSON type-model documents → ``TypeUniverse``.
pytypes
    Annotated Python classes → declared types.

Quick start
-----------
>>> from structmatch import has, is_named, struct_of, Field, opaque
>>> t = struct_of(Field("Items", "[]pkg.Foo", opaque("[]pkg.Foo")))
>>> has(t, is_named("Items"))
True
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import TYPE_CHECKING, List

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.2.0"
__license__ = "MIT"
__all__: List[str] = []          # populated below

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

# ---------------------------------------------------------------------------
# Internal registry: (module_name, list_of_names_to_import)
# ---------------------------------------------------------------------------

_CORE_MODULES = {
    "shapes": [
        "ShapeKind",
        "StructShape",
        "SequenceShape",
        "MappingShape",
        "OtherShape",
        "DeclaredType",
        "Field",
        "struct_of",
        "sequence_of",
        "mapping_of",
        "opaque",
    ],
    "resolver": [
        "find_struct",
    ],
    "matchers": [
        "Matcher",
        "TypeMatchMode",
        "and_",
        "matches",
        "has",
        "is_embedded",
        "is_slice",
        "is_named",
        "is_type_named",
        "has_field_that",
    ],
    "catalog": [
        "FieldRole",
        "ROLES",
        "role_matcher",
        "build_catalog",
        "is_type_meta",
        "is_object_meta",
        "is_list_meta",
        "is_spec",
        "is_spec_template",
        "is_status",
        "is_resource_spec",
        "is_resource_status",
        "is_resource_claim_spec",
        "is_resource_claim_status",
        "is_non_portable_class_spec_template",
        "is_portable_class",
        "is_items",
    ],
    "config": [
        "MatchConfig",
    ],
    "errors": [
        "StructMatchError",
        "ModelError",
        "TypeRefSyntaxError",
        "UnknownTypeError",
        "ConfigError",
        "UnknownRoleError",
    ],
}

_ADAPTER_MODULES = {
    "typeref": [
        "parse_type_ref",
    ],
    "model": [
        "TypeUniverse",
        "load_model",
    ],
    "pytypes": [
        "ClassIntrospector",
        "FieldInfo",
        "declared_type_of",
    ],
}


def _import_names(module_rel_name: str, names: List[str]) -> None:
    """Import *names* from a submodule and bind them in the package
    namespace."""
    mod = importlib.import_module(f"{__name__}.{module_rel_name}")
    current_module = sys.modules[__name__]
    for name in names:
        setattr(current_module, name, getattr(mod, name))
        __all__.append(name)
    setattr(current_module, module_rel_name, mod)
    __all__.append(module_rel_name)


for _mod, _names in {**_CORE_MODULES, **_ADAPTER_MODULES}.items():
    _import_names(_mod, _names)

del _mod, _names


def list_submodules() -> List[str]:
    """Return the names of all submodules in the package."""
    return sorted(set(_CORE_MODULES) | set(_ADAPTER_MODULES))


__all__ += ["list_submodules", "__version__"]

if TYPE_CHECKING:
    from .shapes import (
        ShapeKind as ShapeKind,
        StructShape as StructShape,
        SequenceShape as SequenceShape,
        MappingShape as MappingShape,
        OtherShape as OtherShape,
        DeclaredType as DeclaredType,
        Field as Field,
        struct_of as struct_of,
        sequence_of as sequence_of,
        mapping_of as mapping_of,
        opaque as opaque,
    )
    from .resolver import find_struct as find_struct
    from .matchers import (
        Matcher as Matcher,
        TypeMatchMode as TypeMatchMode,
        and_ as and_,
        matches as matches,
        has as has,
        is_embedded as is_embedded,
        is_slice as is_slice,
        is_named as is_named,
        is_type_named as is_type_named,
        has_field_that as has_field_that,
    )
    from .catalog import (
        FieldRole as FieldRole,
        ROLES as ROLES,
        role_matcher as role_matcher,
        build_catalog as build_catalog,
        is_type_meta as is_type_meta,
        is_object_meta as is_object_meta,
        is_list_meta as is_list_meta,
        is_spec as is_spec,
        is_spec_template as is_spec_template,
        is_status as is_status,
        is_resource_spec as is_resource_spec,
        is_resource_status as is_resource_status,
        is_resource_claim_spec as is_resource_claim_spec,
        is_resource_claim_status as is_resource_claim_status,
        is_non_portable_class_spec_template as is_non_portable_class_spec_template,
        is_portable_class as is_portable_class,
        is_items as is_items,
    )
    from .config import MatchConfig as MatchConfig
    from .errors import (
        StructMatchError as StructMatchError,
        ModelError as ModelError,
        TypeRefSyntaxError as TypeRefSyntaxError,
        UnknownTypeError as UnknownTypeError,
        ConfigError as ConfigError,
        UnknownRoleError as UnknownRoleError,
    )
    from .typeref import parse_type_ref as parse_type_ref
    from .model import TypeUniverse as TypeUniverse, load_model as load_model
    from .pytypes import (
        ClassIntrospector as ClassIntrospector,
        FieldInfo as FieldInfo,
        declared_type_of as declared_type_of,
    )
