# tests/conftest.py
"""
Shared builders and fixtures for the structmatch test-suite.
"""

from typing import List

import pytest

from structmatch.matchers import Matcher
from structmatch.shapes import (
    DeclaredType,
    Field,
    OtherShape,
    SequenceShape,
    StructShape,
    mapping_of,
    opaque,
    sequence_of,
    struct_of,
)

META_V1 = "k8s.io/apimachinery/pkg/apis/meta/v1"
CORE_V1ALPHA1 = "github.com/crossplaneio/crossplane-runtime/apis/core/v1alpha1"


def make_field(
    name: str,
    qualified_type: str = "",
    type_: DeclaredType = None,
    embedded: bool = False,
) -> Field:
    """Field helper; an opaque type is used when none is given."""
    qualified_type = qualified_type or f"pkg.{name}"
    if type_ is None:
        type_ = opaque(qualified_type)
    return Field(name, qualified_type, type_, embedded)


def make_struct(*fields: Field, name: str = "pkg.T") -> DeclaredType:
    return struct_of(*fields, name=name)


class RecordingMatcher:
    """A matcher test double that records the fields it was called with."""

    def __init__(self, result: bool = True):
        self.result = result
        self.calls: List[Field] = []

    def _fn(self, f: Field) -> bool:
        self.calls.append(f)
        return self.result

    @property
    def matcher(self) -> Matcher:
        return Matcher(self._fn, f"recording({self.result})")


@pytest.fixture
def type_meta_field():
    return make_field("TypeMeta", f"{META_V1}.TypeMeta", embedded=True)


@pytest.fixture
def object_meta_field():
    return make_field("ObjectMeta", f"{META_V1}.ObjectMeta", embedded=True)


@pytest.fixture
def resource_type(type_meta_field, object_meta_field):
    """A typical top-level API resource: metadata, spec and status."""
    return make_struct(
        type_meta_field,
        object_meta_field,
        make_field("Spec", "example.org/api/v1.WidgetSpec"),
        make_field("Status", "example.org/api/v1.WidgetStatus"),
        name="example.org/api/v1.Widget",
    )


@pytest.fixture
def widget_model() -> dict:
    """A type-model document covering structs, aliases and containers."""
    return {
        "types": {
            "example.org/api/v1.Widget": {
                "kind": "struct",
                "fields": [
                    {"name": "TypeMeta", "type": f"{META_V1}.TypeMeta",
                     "embedded": True},
                    {"name": "ObjectMeta", "type": f"{META_V1}.ObjectMeta",
                     "embedded": True},
                    {"name": "Spec", "type": "example.org/api/v1.WidgetSpec"},
                    {"name": "Status",
                     "type": "example.org/api/v1.WidgetStatus"},
                ],
            },
            "example.org/api/v1.WidgetSpec": {
                "kind": "struct",
                "fields": [
                    {"name": "ResourceSpec",
                     "type": f"{CORE_V1ALPHA1}.ResourceSpec",
                     "embedded": True},
                    {"name": "Size", "type": "int64"},
                ],
            },
            "example.org/api/v1.WidgetStatus": {
                "kind": "struct",
                "fields": [
                    {"name": "ResourceStatus",
                     "type": f"{CORE_V1ALPHA1}.ResourceStatus",
                     "embedded": True},
                ],
            },
            "example.org/api/v1.WidgetList": {
                "kind": "struct",
                "fields": [
                    {"name": "TypeMeta", "type": f"{META_V1}.TypeMeta",
                     "embedded": True},
                    {"name": "ListMeta", "type": f"{META_V1}.ListMeta"},
                    {"name": "Items", "type": "[]example.org/api/v1.Widget"},
                ],
            },
            "example.org/api/v1.Widgets": {
                "kind": "alias",
                "type": "[]example.org/api/v1.Widget",
            },
            "example.org/api/v1.WidgetIndex": {
                "kind": "alias",
                "type": "map[string]example.org/api/v1.Widget",
            },
            "example.org/api/v1.Phase": {
                "kind": "other",
                "description": "string",
            },
        }
    }


__all__ = [
    "CORE_V1ALPHA1",
    "META_V1",
    "DeclaredType",
    "OtherShape",
    "RecordingMatcher",
    "SequenceShape",
    "StructShape",
    "make_field",
    "make_struct",
    "mapping_of",
    "opaque",
    "sequence_of",
]
