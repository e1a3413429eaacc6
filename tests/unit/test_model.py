"""Tests for Model construction, lookups, type equivalence and value checks."""

from decimal import Decimal

import pytest

from sadl.core import ir
from sadl.core.dsl_parser_impl import parse_sadl
from sadl.core.errors import ModelError
from sadl.core.model import Model


def build(source: str) -> Model:
    return Model(parse_sadl(source))


class TestConstruction:
    def test_duplicate_type(self):
        with pytest.raises(ModelError, match="Duplicate type: Foo"):
            build("type Foo String\ntype Foo Struct { s String }\n")

    def test_base_type_names_are_reserved(self):
        with pytest.raises(ModelError, match="Duplicate type: String"):
            build("type String Int32")

    def test_duplicate_http_name(self):
        with pytest.raises(ModelError, match="Duplicate http action: getIt"):
            build(
                'http GET "/a" (operation=getIt) { expect 200 }\n'
                'http GET "/b" (operation=getIt) { expect 200 }\n'
            )

    def test_unnamed_http_are_not_duplicates(self):
        model = build('http GET "/a" { expect 200 }\nhttp GET "/b" { expect 200 }\n')
        assert len(model.http) == 2

    def test_duplicate_action(self):
        with pytest.raises(ModelError, match="Duplicate action: ping"):
            build("action ping()\naction ping()\n")

    def test_accessors(self, crudl_model):
        assert crudl_model.name == "crudl"
        assert crudl_model.namespace == "example.crudl"
        assert crudl_model.version == "1"
        assert crudl_model.comment == "A simple CRUDL service"
        assert [td.name for td in crudl_model.types][:3] == ["ItemId", "Currency", "Item"]
        assert crudl_model.warnings == []


class TestLookups:
    def test_find_type(self, crudl_model):
        assert crudl_model.find_type("Item").type == "Struct"
        assert crudl_model.find_type("Int32").spec == ir.NumberSpec(type="Int32")
        assert crudl_model.find_type("Nope") is None

    def test_find_http_operation_example(self, crudl_model):
        assert crudl_model.find_http("createItem").method == ir.HttpMethod.POST
        assert crudl_model.find_operation("getItem").output == "Item"
        assert crudl_model.find_example("minimal").target == "Item"
        assert crudl_model.find_http("getItem") is None

    def test_resolve_follows_references(self, crudl_model):
        resolved = crudl_model.resolve(ir.RefSpec(type="ItemId"))
        assert isinstance(resolved, ir.StringSpec)
        assert resolved.max_size == 40

    def test_resolve_undefined(self, crudl_model):
        assert crudl_model.resolve_name("Missing") is None

    def test_is_numeric_type(self, crudl_model):
        assert crudl_model.is_numeric_type("Decimal")
        assert crudl_model.is_numeric_type(ir.NumberSpec(type="Int8"))
        assert not crudl_model.is_numeric_type("ItemId")

    def test_to_dict(self, crudl_model):
        data = crudl_model.to_dict()
        assert data["name"] == "crudl"
        item = next(t for t in data["types"] if t["name"] == "Item")
        assert item["spec"]["type"] == "Struct"
        assert "extensions" not in data


class TestPatternExpansion:
    def test_reference_is_expanded_without_anchors(self):
        model = build('type Word String (pattern="^[a-z]+$")\n')
        expanded, problems = model.expand_pattern("^{Word}(-{Word})*$")
        assert expanded == "^[a-z]+(-[a-z]+)*$"
        assert problems == []

    def test_quantifiers_are_left_alone(self):
        model = build("type Foo String")
        assert model.expand_pattern("^a{2,4}$") == ("^a{2,4}$", [])

    def test_reference_must_have_pattern(self):
        model = build("type Foo String")
        _, problems = model.expand_pattern("{Foo}")
        assert problems == ["Pattern reference '{Foo}' must name a String type with a pattern"]


class TestEquivalence:
    def test_enums_compare_as_sets(self):
        model = build("type A Enum { X; Y }\ntype B Enum { Y; X }\ntype C Enum { X; Z }\n")
        assert model.equivalent_type_names("A", "B")
        assert not model.equivalent_type_names("A", "C")

    def test_structs(self):
        model = build(
            "type A Struct { x Int32 (required) }\n"
            "type B Struct { x Int32 (required) }\n"
            "type C Struct { x Int32 }\n"
        )
        assert model.equivalent_type_names("A", "B")
        assert not model.equivalent_type_names("A", "C")

    def test_different_base_types(self):
        model = build("type A String\ntype B Int32\n")
        assert not model.equivalent_type_names("A", "B")


class TestValidateValue:
    @pytest.fixture
    def model(self) -> Model:
        return build(
            """type Small Int8
type Ratio Float64 (min=0, max=1)
type Code String (values=["a", "b"])
type Tags Array<String> (maxsize=2)
type Scores Map<String,Int32>
type Color Enum { RED; GREEN }
type Value Union<Int32,Bool>
type Money UnitValue<Decimal,Color>
type Point Struct {
    x Int32 (required)
    y Int32
}
"""
        )

    def test_integer_limits(self, model):
        assert model.validate_value("", "Small", Decimal(127)) == []
        assert model.validate_value("", "Small", Decimal(128)) == [
            "Small: Numeric value greater than the maximum allowed (127)"
        ]

    def test_integer_rejects_fraction(self, model):
        assert model.validate_value("", "Small", Decimal("1.5")) == ["Small: Not an integer: 1.5"]

    def test_float_bounds(self, model):
        assert model.validate_value("r", "Ratio", Decimal("0.5")) == []
        assert model.validate_value("r", "Ratio", Decimal("-1")) == [
            "r: Numeric value less than the minimum allowed (0)"
        ]

    def test_not_a_number(self, model):
        assert model.validate_value("r", "Ratio", True) == ["r: Not a number: True"]

    def test_string_values(self, model):
        assert model.validate_value("c", "Code", "a") == []
        problems = model.validate_value("c", "Code", "z")
        assert len(problems) == 1
        assert "'values=" in problems[0]

    def test_array(self, model):
        assert model.validate_value("t", "Tags", ["a"]) == []
        assert model.validate_value("t", "Tags", ["a", "b", "c"]) == [
            "t: Array is too large (maxsize=2)"
        ]
        assert model.validate_value("t", "Tags", [Decimal(1)]) == [
            "t[0]: not a valid String (not a string): 1"
        ]

    def test_map(self, model):
        assert model.validate_value("s", "Scores", {"a": Decimal(1)}) == []
        assert model.validate_value("s", "Scores", {"a": "x"}) == ["s['a']: Not a number: 'x'"]

    def test_map_with_numeric_keys(self):
        model = build("type Counts Map<Int32,String>\n")
        assert model.validate_value("c", "Counts", {"1": "one", "two": "2"}) == []

    def test_map_with_enum_keys(self):
        model = build("type Color Enum { RED; GREEN }\ntype Shades Map<Color,Int32>\n")
        assert model.validate_value("s", "Shades", {"RED": Decimal(1)}) == []
        assert model.validate_value("s", "Shades", {"BLUE": Decimal(1)}) == [
            "s key 'BLUE': Not valid: 'BLUE'"
        ]

    def test_enum_and_union(self, model):
        assert model.validate_value("", "Color", "RED") == []
        assert model.validate_value("", "Color", "BLUE") == ["Color: Not valid: 'BLUE'"]
        assert model.validate_value("", "Value", True) == []
        assert model.validate_value("", "Value", Decimal(3)) == []
        assert model.validate_value("", "Value", "x") == [
            "Value: Value matches no variant of the Union: 'x'"
        ]

    def test_unit_value(self, model):
        assert model.validate_value("m", "Money", "1.25 GREEN") == []
        assert model.validate_value("m", "Money", "1.25 BLUE") == ["m.unit: Not valid: 'BLUE'"]
        assert model.validate_value("m", "Money", "lots") == ["m: Not valid: 'lots'"]

    def test_struct(self, model):
        assert model.validate_value("", "Point", {"x": Decimal(1)}) == []
        assert model.validate_value("", "Point", {"y": Decimal(1), "z": Decimal(2)}) == [
            "Undefined field in Point: 'z'",
            "Point missing required field 'x'",
        ]

    def test_timestamp_and_uuid(self, model):
        assert model.validate_value("", "Timestamp", "2019-03-05T12:34:56Z") == []
        assert model.validate_value("", "UUID", "123e4567-e89b-12d3-a456-426614174000") == []
        assert model.validate_value("", "UUID", "nope") == [
            "UUID: not a valid UUID (format invalid): 'nope'"
        ]

    def test_undefined_type(self, model):
        assert model.validate_value("", "Missing", 1) == ["Undefined type: Missing"]
