# tests/test_model.py
"""
Tests for loading JSON type-model documents into a ``TypeUniverse``.
"""

import json

import pytest

from structmatch import catalog
from structmatch.errors import (
    ErrorCode,
    ModelError,
    TypeRefSyntaxError,
    UnknownTypeError,
)
from structmatch.matchers import has, has_field_that, is_named, is_slice
from structmatch.model import TypeUniverse, load_model
from structmatch.resolver import find_struct
from structmatch.shapes import (
    MappingShape,
    OtherShape,
    SequenceShape,
    ShapeKind,
    StructShape,
)
from tests.conftest import META_V1


@pytest.fixture
def universe(widget_model):
    return TypeUniverse.from_dict(widget_model)


class TestUniverseShapes:

    def test_declared_types_listed(self, universe, widget_model):
        assert universe.names() == list(widget_model["types"])
        assert len(universe) == len(widget_model["types"])
        assert "example.org/api/v1.Widget" in universe

    def test_struct_fields(self, universe):
        widget = universe.lookup("example.org/api/v1.Widget")
        s = widget.shape
        assert isinstance(s, StructShape)
        assert [f.name for f in s] == ["TypeMeta", "ObjectMeta", "Spec", "Status"]
        type_meta = s.field_named("TypeMeta")
        assert type_meta.embedded
        assert type_meta.qualified_type == f"{META_V1}.TypeMeta"

    def test_shapes_are_lazy_and_cached(self, universe):
        widget = universe.lookup("example.org/api/v1.Widget")
        assert not widget.is_resolved
        first = widget.shape
        assert widget.is_resolved
        assert widget.shape is first

    def test_field_shares_declared_type(self, universe):
        widget = universe.lookup("example.org/api/v1.Widget")
        spec_field = widget.shape.field_named("Spec")
        assert spec_field.type is universe.lookup("example.org/api/v1.WidgetSpec")

    def test_slice_field(self, universe):
        lst = universe.lookup("example.org/api/v1.WidgetList")
        items = lst.shape.field_named("Items")
        assert isinstance(items.shape, SequenceShape)
        assert is_slice()(items)

    def test_alias_to_slice(self, universe):
        widgets = universe.lookup("example.org/api/v1.Widgets")
        assert widgets.shape.kind is ShapeKind.SEQUENCE
        assert find_struct(widgets) is universe.lookup(
            "example.org/api/v1.Widget").shape

    def test_alias_to_map(self, universe):
        index = universe.lookup("example.org/api/v1.WidgetIndex")
        assert isinstance(index.shape, MappingShape)
        assert index.shape.key == "string"

    def test_other_kind(self, universe):
        phase = universe.lookup("example.org/api/v1.Phase")
        assert phase.shape == OtherShape("string")
        assert find_struct(phase) is None

    def test_undeclared_reference_is_opaque(self, universe):
        widget = universe.lookup("example.org/api/v1.Widget")
        meta = widget.shape.field_named("ObjectMeta")
        assert isinstance(meta.shape, OtherShape)

    def test_type_of_builtin_and_pointer(self, universe):
        assert isinstance(universe.type_of("int64").shape, OtherShape)
        ptr = universe.type_of("*example.org/api/v1.Widget")
        assert find_struct(ptr) is None

    def test_anonymous_types_cached(self, universe):
        a = universe.type_of("[]example.org/api/v1.Widget")
        b = universe.type_of("[]example.org/api/v1.Widget")
        assert a is b

    def test_array_field_is_not_a_slice(self):
        u = TypeUniverse()
        u.declare_struct("p.Elem", [("Name", "string", False)])
        holder = u.declare_struct("p.Holder", [("Fixed", "[4]p.Elem", False),
                                                ("Open", "[]p.Elem", False)])
        assert has(holder, is_named("Open").and_(is_slice()))
        assert not has(holder, is_named("Fixed").and_(is_slice()))
        assert not has(holder, has_field_that(is_named("Name"))
                       .and_(is_named("Fixed")))

    def test_array_alias_does_not_resolve(self):
        u = TypeUniverse()
        u.declare_struct("p.Elem", [("Name", "string", False)])
        fixed = u.declare_alias("p.Fixed", "[4]p.Elem")
        assert isinstance(fixed.shape, OtherShape)
        assert find_struct(fixed) is None
        assert not has(fixed)


class TestAliases:

    def test_alias_chain(self):
        u = TypeUniverse()
        u.declare_struct("p.S", [("A", "string", False)])
        u.declare_alias("p.A1", "p.S")
        u.declare_alias("p.A2", "p.A1")
        assert find_struct(u.lookup("p.A2")) is u.lookup("p.S").shape

    def test_alias_cycle_is_other(self):
        u = TypeUniverse()
        u.declare_alias("p.A", "p.B")
        u.declare_alias("p.B", "p.A")
        assert isinstance(u.lookup("p.A").shape, OtherShape)
        assert not has(u.lookup("p.B"))

    def test_self_referential_struct(self):
        u = TypeUniverse()
        u.declare_struct("p.Node", [("Children", "[]p.Node", False),
                                    ("Name", "string", False)])
        node = u.lookup("p.Node")
        children = node.shape.field_named("Children")
        assert find_struct(children) is node.shape

    def test_duplicate_declaration(self):
        u = TypeUniverse()
        u.declare_other("p.X")
        with pytest.raises(ModelError):
            u.declare_other("p.X")


class TestCatalogOverModel:

    def test_resource(self, universe):
        widget = universe.lookup("example.org/api/v1.Widget")
        assert has(widget, catalog.is_type_meta(), catalog.is_object_meta(),
                   catalog.is_spec(), catalog.is_status())
        assert not has(widget, catalog.is_items())

    def test_managed_resource_nested(self, universe):
        widget = universe.lookup("example.org/api/v1.Widget")
        nested_spec = catalog.is_spec().and_(
            has_field_that(catalog.is_resource_spec()))
        nested_status = catalog.is_status().and_(
            has_field_that(catalog.is_resource_status()))
        assert has(widget, nested_spec, nested_status)

    def test_list(self, universe):
        lst = universe.lookup("example.org/api/v1.WidgetList")
        items = catalog.is_items().and_(is_slice()).and_(
            has_field_that(catalog.is_object_meta()))
        assert has(lst, catalog.is_type_meta(), catalog.is_list_meta(), items)


class TestStrictModel:

    def test_unknown_reference_rejected(self, widget_model):
        with pytest.raises(UnknownTypeError) as info:
            TypeUniverse.from_dict(widget_model, strict=True)
        assert info.value.code is ErrorCode.MODEL_UNKNOWN_TYPE

    def test_complete_model_accepted(self):
        data = {"types": {
            "p.A": {"kind": "struct", "fields": [
                {"name": "B", "type": "map[string][]p.B"}]},
            "p.B": {"kind": "other"},
        }}
        u = TypeUniverse.from_dict(data, strict=True)
        assert u.strict

    def test_type_of_unknown_strict(self):
        u = TypeUniverse(strict=True)
        with pytest.raises(UnknownTypeError):
            u.type_of("p.Missing")
        with pytest.raises(UnknownTypeError):
            u.type_of("map[string][]p.Missing")

    def test_declare_struct_unknown_strict(self):
        u = TypeUniverse(strict=True)
        with pytest.raises(UnknownTypeError) as info:
            u.declare_struct("p.Outer", [("Inner", "[]p.Missing", False)])
        assert info.value.name == "p.Missing"
        assert "p.Outer" not in u
        assert len(u) == 0

    def test_declare_alias_unknown_strict(self):
        u = TypeUniverse(strict=True)
        with pytest.raises(UnknownTypeError):
            u.declare_alias("p.Alias", "p.Missing")
        assert "p.Alias" not in u

    def test_strict_self_reference_allowed(self):
        u = TypeUniverse(strict=True)
        node = u.declare_struct("p.Node", [("Next", "[]p.Node", False)])
        assert has(node, has_field_that(is_named("Next")))

    def test_strict_shapes_never_raise(self):
        u = TypeUniverse(strict=True)
        u.declare_other("p.Leaf")
        outer = u.declare_struct("p.Outer", [("Leaf", "p.Leaf", False)])
        assert not has(outer, has_field_that(is_named("x")))

    def test_lookup_unknown(self):
        with pytest.raises(UnknownTypeError):
            TypeUniverse().lookup("p.Missing")


class TestDocumentValidation:

    @pytest.mark.parametrize("data", [
        [],
        {},
        {"types": []},
    ])
    def test_bad_layout(self, data):
        with pytest.raises(ModelError) as info:
            TypeUniverse.from_dict(data)
        assert info.value.code is ErrorCode.MODEL_BAD_LAYOUT

    def test_unqualified_type_name(self):
        with pytest.raises(ModelError):
            TypeUniverse.from_dict({"types": {"Widget": {"kind": "other"}}})

    def test_bad_kind(self):
        with pytest.raises(ModelError) as info:
            TypeUniverse.from_dict({"types": {"p.X": {"kind": "union"}}})
        assert info.value.code is ErrorCode.MODEL_BAD_KIND
        assert info.value.hint

    @pytest.mark.parametrize("field", [
        "not-an-object",
        {"type": "string"},
        {"name": "A", "type": 3},
        {"name": "A", "type": "string", "embedded": "yes"},
    ])
    def test_bad_field(self, field):
        data = {"types": {"p.X": {"kind": "struct", "fields": [field]}}}
        with pytest.raises(ModelError) as info:
            TypeUniverse.from_dict(data)
        assert info.value.code is ErrorCode.MODEL_BAD_FIELD

    def test_bad_type_reference(self):
        data = {"types": {"p.X": {"kind": "struct", "fields": [
            {"name": "A", "type": "chan int"}]}}}
        with pytest.raises(TypeRefSyntaxError):
            TypeUniverse.from_dict(data, source="model.json")


class TestLoadModel:

    def test_load(self, tmp_path, widget_model):
        path = tmp_path / "model.json"
        path.write_text(json.dumps(widget_model), encoding="utf-8")
        u = load_model(path)
        assert len(u) == len(widget_model["types"])

    def test_missing_file(self, tmp_path):
        with pytest.raises(ModelError) as info:
            load_model(tmp_path / "absent.json")
        assert info.value.code is ErrorCode.MODEL_NOT_FOUND

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ModelError) as info:
            load_model(path)
        assert info.value.code is ErrorCode.MODEL_INVALID_JSON
        assert str(path) in str(info.value)
