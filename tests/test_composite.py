"""Tests for the object and array checkers and field-path composition."""

import pytest

from dataknobs_parameter.exceptions import NestingDepthError, UnknownRuleTypeError


class TestObject:
    """Test the object checker."""

    def test_check_ok(self, parameter):
        """Test a mapping with a valid nested schema."""
        rule = {"object": {"type": "object", "rule": {"name": "string", "age": "int"}}}
        assert parameter.validate(rule, {"object": {"name": "a", "age": 1}}) is None

    def test_not_object(self, parameter):
        """Test lists and scalars are not objects."""
        for value in ([], "string", 1):
            errors = parameter.validate({"object": "object"}, {"object": value})
            assert errors[0].message == "should be an object"

    def test_nested_field_path(self, parameter):
        """Test nested failures are reported as object.<field>."""
        rule = {"object": {"type": "object", "rule": {"age": "int"}}}
        errors = parameter.validate(rule, {"object": {"age": "20"}})
        assert [e.to_dict() for e in errors] == [
            {"code": "invalid", "field": "object.age", "message": "should be an integer"}
        ]

    def test_nested_missing_field(self, parameter):
        """Test a missing nested field is reported with its full path."""
        rule = {"user": {"type": "object", "rule": {"profile": {"type": "object", "rule": {"name": "string"}}}}}
        errors = parameter.validate(rule, {"user": {"profile": {}}})
        assert [e.to_dict() for e in errors] == [
            {"code": "missing_field", "field": "user.profile.name", "message": "required"}
        ]

    def test_object_without_rule(self, parameter):
        """Test an object rule without nested schema accepts any mapping."""
        assert parameter.validate({"meta": "object"}, {"meta": {"anything": [1, 2]}}) is None


class TestArray:
    """Test the array checker."""

    def test_check_ok(self, parameter):
        """Test an untyped array within bounds."""
        rule = {"array": {"type": "array", "min": 1, "max": 3}}
        assert parameter.validate(rule, {"array": [1, "a", None]}) is None
        assert parameter.validate(rule, {"array": (1, 2)}) is None

    def test_not_array(self, parameter):
        """Test mappings and strings are not arrays."""
        for value in ({}, "abc"):
            errors = parameter.validate({"array": "array"}, {"array": value})
            assert errors[0].message == "should be an array"

    def test_length_bounds(self, parameter):
        """Test length messages."""
        rule = {"array": {"type": "array", "max": 4, "min": 2}}
        errors = parameter.validate(rule, {"array": [1, 2, 3, 4, 5]})
        assert errors[0].message == "length should smaller than 4"
        errors = parameter.validate(rule, {"array": [1]})
        assert errors[0].message == "length should bigger than 2"

    def test_item_type(self, parameter):
        """Test each item is checked and reported by index."""
        rule = {"array": {"type": "array", "itemType": "string"}}
        errors = parameter.validate(rule, {"array": ["a", 1, "b", 2]})
        assert [e.to_dict() for e in errors] == [
            {"code": "invalid", "field": "array[1]", "message": "should be a string"},
            {"code": "invalid", "field": "array[3]", "message": "should be a string"},
        ]

    def test_item_rule(self, parameter):
        """Test the item rule is taken from the array's rule."""
        rule = {"array": {"type": "array", "itemType": "string", "rule": {"type": "string", "allowEmpty": True}}}
        assert parameter.validate(rule, {"array": ["a", ""]}) is None
        rule = {"array": {"type": "array", "itemType": "string"}}
        errors = parameter.validate(rule, {"array": ["a", ""]})
        assert errors[0].to_dict() == {"code": "invalid", "field": "array[1]", "message": "should not be empty"}

    def test_item_enum_shorthand(self, parameter):
        """Test an item rule written as shorthand."""
        rule = {"array": {"type": "array", "itemType": "enum", "rule": [1, 2]}}
        errors = parameter.validate(rule, {"array": [1, 3]})
        assert errors[0].to_dict() == {"code": "invalid", "field": "array[1]", "message": "should be one of 1, 2"}

    def test_object_items(self, parameter):
        """Test object items report paths like children[0].name."""
        rule = {"children": {"type": "array", "itemType": "object", "rule": {"name": "string", "age": "int"}}}
        errors = parameter.validate(rule, {"children": [{"name": 22, "age": 1}, {"name": "b"}, "c"]})
        assert [e.to_dict() for e in errors] == [
            {"code": "invalid", "field": "children[0].name", "message": "should be a string"},
            {"code": "missing_field", "field": "children[1].age", "message": "required"},
            {"code": "invalid", "field": "children[2]", "message": "should be an object"},
        ]

    def test_nested_arrays(self, parameter):
        """Test arrays of arrays compose bracketed indexes."""
        rule = {"matrix": {"type": "array", "itemType": "array", "rule": {"type": "array", "itemType": "int"}}}
        errors = parameter.validate(rule, {"matrix": [[1, 2], [3, "x"]]})
        assert [e.field for e in errors] == ["matrix[1][1]"]

    def test_unknown_item_type(self, parameter):
        """Test an unknown itemType is a configuration error."""
        with pytest.raises(UnknownRuleTypeError):
            parameter.validate({"array": {"type": "array", "itemType": "bogus"}}, {"array": [1]})


class TestNestingDepth:
    """Test the recursion limit on self-referencing schemas."""

    def test_self_referencing_schema(self):
        """Test deep data against a recursive schema stops at max_depth."""
        from dataknobs_parameter import Parameter

        tree = {"value": "int", "child": {"type": "object", "required": False}}
        tree["child"]["rule"] = tree

        data = {"value": 0}
        node = data
        for i in range(1, 10):
            node["child"] = {"value": i}
            node = node["child"]

        assert Parameter(maxDepth=20).validate(tree, data) is None
        with pytest.raises(NestingDepthError):
            Parameter(maxDepth=5).validate(tree, data)

    def test_depth_resets_after_error(self):
        """Test the depth counter is restored after a failed call."""
        from dataknobs_parameter import Parameter

        parameter = Parameter(maxDepth=1)
        deep = {"a": {"type": "object", "rule": {"b": {"type": "object", "rule": {"c": "int"}}}}}
        with pytest.raises(NestingDepthError):
            parameter.validate(deep, {"a": {"b": {"c": 1}}})
        shallow = {"a": {"type": "object", "rule": {"c": "int"}}}
        assert parameter.validate(shallow, {"a": {"c": 1}}) is None
