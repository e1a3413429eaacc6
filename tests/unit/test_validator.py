"""Tests for semantic validation of SADL models."""

import pytest

from sadl.core.errors import ValidationError
from sadl.core.parser import parse_string


def errors_of(source: str) -> list[str]:
    with pytest.raises(ValidationError) as exc_info:
        parse_string(source)
    return exc_info.value.errors


class TestStructFields:
    def test_required_and_default_conflict(self):
        errors = errors_of('type Test Struct { s String (required, default="blah") }')
        assert errors == ["Cannot have a default value for required field struct field 'Test.s'"]

    def test_default_shorter_than_minsize(self):
        errors = errors_of('type Test Struct { foo String (minSize=5, default="one") }')
        assert len(errors) == 1
        assert errors[0].startswith("Bad default value for struct field 'Test.foo'")
        assert "'minsize=5' constraint failed" in errors[0]

    def test_default_satisfies_minsize(self):
        model = parse_string('type Test Struct { foo String (minSize=1, default="one") }')
        assert model.types[0].spec.fields[0].default == "one"

    def test_pattern_and_values_conflict(self):
        errors = errors_of(
            'type Test Struct { foo String (pattern="^[a-z]*$", values=["one","two"], '
            'default="one") }'
        )
        assert "Cannot have both pattern and values in struct field 'Test.foo'" in errors

    def test_undefined_type(self):
        errors = errors_of("type Foo Struct { b Bar }")
        assert errors == ["Undefined type 'Bar' in struct field 'Foo.b'"]

    def test_nested_struct_default(self):
        model = parse_string(
            'type Test Struct { mynestedstruct Struct { something String; oranother Int32 } '
            '(default={"something":"Hey","oranother":23}) }'
        )
        assert model.find_type("Test") is not None

    def test_nested_struct_bad_default(self):
        errors = errors_of(
            'type Test Struct { inner Struct { n Int32 } (default={"n":"x", "m":1}) }'
        )
        assert any("Undefined field in Test.inner: 'm'" in e for e in errors)
        assert any("Test.inner.n: Not a number: 'x'" in e for e in errors)

    def test_nested_field_context(self):
        errors = errors_of("type Outer Struct { inner Struct { b Missing } }")
        assert errors == ["Undefined type 'Missing' in struct field 'Outer.inner.b'"]

    def test_forward_and_recursive_references(self):
        model = parse_string(
            "type Tree Struct { children Array<Tree>; leaf Leaf }\ntype Leaf String\n"
        )
        assert [td.name for td in model.types] == ["Tree", "Leaf"]

    def test_duplicate_fields(self):
        errors = errors_of("type Foo Struct { a String; a Int32 }")
        assert errors == ["Duplicate field 'a' in struct 'Foo'"]


class TestTypeConstraints:
    def test_min_greater_than_max(self):
        errors = errors_of("type Foo Int32 (min=10, max=1)")
        assert errors == ["Minimum is greater than maximum in type 'Foo'"]

    def test_minsize_greater_than_maxsize(self):
        errors = errors_of("type Foo String (minsize=10, maxsize=1)")
        assert errors == ["minsize is greater than maxsize in type 'Foo'"]

    def test_bad_pattern(self):
        errors = errors_of('type Foo String (pattern="[a-")')
        assert len(errors) == 1
        assert errors[0].startswith("Bad pattern '[a-' in type 'Foo'")

    def test_pattern_reference_expansion(self):
        model = parse_string(
            'type Word String (pattern="^[a-z]+$")\n'
            'type Slug String (pattern="^{Word}(-{Word})*$")\n'
            'example Slug "one-two"\n'
        )
        assert model.find_type("Slug") is not None

    def test_pattern_reference_applies_to_examples(self):
        errors = errors_of(
            'type Word String (pattern="^[a-z]+$")\n'
            'type Slug String (pattern="^{Word}(-{Word})*$")\n'
            'example Slug "One Two"\n'
        )
        assert len(errors) == 1
        assert errors[0].startswith("Bad example 'Slug'")

    def test_pattern_reference_to_non_pattern_type(self):
        errors = errors_of('type Foo String\ntype Bar String (pattern="{Foo}")\n')
        assert errors == [
            "Pattern reference '{Foo}' must name a String type with a pattern in type 'Bar'"
        ]

    def test_unit_value_types(self):
        errors = errors_of("type Cost UnitValue<String,Int32>")
        assert errors == [
            "UnitValue value type must be numeric in type 'Cost': String",
            "UnitValue unit type must be a String or Enum in type 'Cost': Int32",
        ]

    def test_unit_value_enum_unit(self):
        model = parse_string("type Currency Enum { USD; EUR }\ntype Cost UnitValue<Decimal,Currency>\n")
        assert model.find_type("Cost").type == "UnitValue"

    def test_empty_enum_warns(self):
        model = parse_string("type Nothing Enum { }")
        assert model.warnings == ["Enum has no elements in type 'Nothing'"]

    def test_duplicate_enum_symbol(self):
        errors = errors_of("type Color Enum { RED; RED }")
        assert errors == ["Duplicate enum symbol 'RED' in type 'Color'"]

    def test_array_items_must_resolve(self):
        errors = errors_of("type Foo Array<Missing>")
        assert errors == ["Undefined type 'Missing' in items of type 'Foo'"]

    def test_reference_must_resolve(self):
        errors = errors_of("type Foo Struct { owner UUID (reference=Person) }")
        assert errors == ["Undefined type 'Person' in reference of struct field 'Foo.owner'"]


class TestHttp:
    def test_two_body_parameters(self):
        errors = errors_of(
            'http POST "/items" (operation=create) {\n'
            "    a String\n"
            "    b String\n"
            "    expect 201\n"
            "}\n"
        )
        assert errors == ["HTTP POST 'create' has more than one body parameter: a, b"]

    def test_one_body_parameter(self):
        model = parse_string('http PUT "/items" {\n    a String\n    expect 204\n}\n')
        assert model.http[0].body_inputs[0].name == "a"

    def test_get_cannot_have_body(self):
        errors = errors_of('http GET "/items" {\n    q String\n    expect 200\n}\n')
        assert errors == [
            "HTTP GET 'GET /items' parameters must be bound to the path, query or a header: q"
        ]

    def test_template_variable_without_parameter(self):
        errors = errors_of('http GET "/one/{two}" { expect 200 }')
        assert errors == [
            "Path template variable 'two' of http 'GET /one/{two}' has no matching input parameter"
        ]

    def test_template_parse_without_validation(self):
        model = parse_string('http GET "/one/{two}" { }', validate=False)
        assert model.http[0].path == "/one/{two}"

    def test_query_variable_is_bound(self):
        model = parse_string(
            'http GET "/items?limit={limit}" {\n    limit Int32\n    expect 200\n}\n'
        )
        assert model.http[0].inputs[0].query == "limit"

    def test_missing_expect_warns(self):
        model = parse_string('http GET "/ping" (operation=ping) { }')
        assert model.warnings == ["HTTP 'ping' has no expected response"]

    def test_bad_status(self):
        errors = errors_of('http GET "/ping" { expect 99 }')
        assert errors == ["Bad HTTP status 99 in http 'GET /ping'"]

    def test_two_body_outputs(self):
        errors = errors_of(
            'http GET "/ping" {\n    expect 200 {\n        a String\n        b String\n    }\n}\n'
        )
        assert errors == ["HTTP 'GET /ping' expected response has more than one body output: a, b"]

    def test_exception_type_must_resolve(self):
        errors = errors_of('http GET "/ping" {\n    expect 200\n    except 404 NotFound\n}\n')
        assert errors == ["Undefined type 'NotFound' in exception of http 'GET /ping'"]

    def test_bad_parameter_default(self):
        errors = errors_of(
            'http GET "/items?limit={limit}" {\n    limit Int32 (default="ten")\n    expect 200\n}\n'
        )
        assert errors == [
            "Bad default value for http parameter 'GET /items?limit={limit}.limit': "
            "GET /items?limit={limit}.limit: Not a number: 'ten'"
        ]


class TestActionsAndExamples:
    def test_action_types_must_resolve(self):
        errors = errors_of("action get(Req) Resp except Oops")
        assert errors == [
            "Undefined type 'Req' in input of action 'get'",
            "Undefined type 'Resp' in output of action 'get'",
            "Undefined type 'Oops' in exceptions of action 'get'",
        ]

    def test_example_target_must_exist(self):
        errors = errors_of('example Missing "x"')
        assert errors == ["Undefined type 'Missing' in example 'Missing'"]

    def test_example_value_checked(self, crudl_source):
        errors = errors_of(crudl_source + 'example Item (name=broken) {"id": "item2"}\n')
        assert errors == ["Bad example 'broken': broken missing required field 'name'"]

    def test_numeric_map_keys_in_example_and_default(self):
        model = parse_string(
            'type Counts Map<Int32,String>\nexample Counts {"1": "one"}\n'
            'type Tally Struct { m Map<Int32,String> (default={"1": "one"}) }\n'
        )
        assert [ex.example for ex in model.examples] == [{"1": "one"}]

    def test_duplicate_example_names(self):
        errors = errors_of('example String (name=a) "x"\nexample String (name=a) "y"\n')
        assert errors == ["Duplicate example name: a"]


class TestAggregation:
    def test_all_problems_are_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_string("type A Struct { x Missing }\naction go(Other)\n")
        error = exc_info.value
        assert len(error.errors) == 2
        assert str(error).startswith("Validation failed:\n  - ")

    def test_valid_model(self, crudl_model):
        assert crudl_model.find_type("Item") is not None
