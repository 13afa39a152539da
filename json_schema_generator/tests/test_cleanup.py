import copy
import json
from pathlib import Path

import pytest

from json_schema_generator.config import PLAIN_JSON, ConfigBuilder
from json_schema_generator.generation import SchemaCleanUp
from json_schema_generator.keywords import SchemaVersion


def load_test_data():
    """Load clean-up cases from JSON file"""
    test_data_path = Path(__file__).parent / "test_data" / "cleanup_cases.json"
    with open(test_data_path) as f:
        return json.load(f)


def create_cleanup(version: SchemaVersion = SchemaVersion.DRAFT_2020_12) -> SchemaCleanUp:
    return SchemaCleanUp(ConfigBuilder(version, PLAIN_JSON).build())


def run_pass(cleanup: SchemaCleanUp, pass_name: str, schema: dict) -> None:
    if pass_name == "all_of":
        cleanup.reduce_all_of_nodes([schema])
    elif pass_name == "any_of":
        cleanup.reduce_any_of_nodes([schema])
    elif pass_name == "strict_type":
        cleanup.set_strict_type_info([schema], include_null=False)
    elif pass_name == "strict_type_with_null":
        cleanup.set_strict_type_info([schema], include_null=True)
    else:
        raise ValueError(f"Unknown pass: {pass_name}")


@pytest.mark.parametrize("test_case", load_test_data(), ids=lambda case: case["name"])
def test_cleanup_cases(test_case):
    """Each pass produces the expected node"""
    schema = copy.deepcopy(test_case["input"])
    run_pass(create_cleanup(), test_case["pass"], schema)
    assert schema == test_case["expected"]


@pytest.mark.parametrize("test_case", load_test_data(), ids=lambda case: case["name"])
def test_cleanup_is_idempotent(test_case):
    """Running a pass a second time changes nothing"""
    cleanup = create_cleanup()
    schema = copy.deepcopy(test_case["input"])
    run_pass(cleanup, test_case["pass"], schema)
    once = copy.deepcopy(schema)
    run_pass(cleanup, test_case["pass"], schema)
    assert schema == once


class TestAllOfCleanUp:
    """allOf merging details not covered by the data file"""

    def test_boolean_and_number_are_different_values(self):
        schema = {"allOf": [{"const": True}, {"const": 1}]}
        create_cleanup().reduce_all_of_nodes([schema])
        assert schema == {"allOf": [{"const": True}, {"const": 1}]}

    def test_false_part_blocks_merge(self):
        schema = {"allOf": [False, {"type": "string"}]}
        create_cleanup().reduce_all_of_nodes([schema])
        assert schema == {"allOf": [False, {"type": "string"}]}

    def test_unknown_keyword_kept_when_single(self):
        schema = {"allOf": [{"type": "string"}, {"x-custom": 1}]}
        create_cleanup().reduce_all_of_nodes([schema])
        assert schema == {"type": "string", "x-custom": 1}

    def test_unknown_keyword_twice_blocks_merge(self):
        schema = {"allOf": [{"x-custom": 1}, {"x-custom": 1}]}
        create_cleanup().reduce_all_of_nodes([schema])
        assert schema == {"allOf": [{"x-custom": 1}, {"x-custom": 1}]}

    def test_reference_siblings_kept_for_draft_7(self):
        """Drafts 6 and 7 ignore keywords next to "$ref", so no merge happens"""
        schema = {"allOf": [{"$ref": "#/definitions/Address"}, {"description": "Home"}]}
        create_cleanup(SchemaVersion.DRAFT_7).reduce_all_of_nodes([schema])
        assert schema == {"allOf": [{"$ref": "#/definitions/Address"}, {"description": "Home"}]}

    def test_nested_sub_schemas_merged(self):
        schema = {
            "allOf": [
                {"type": "array", "items": {"type": "string"}},
                {"items": {"minLength": 2}},
            ]
        }
        create_cleanup().reduce_all_of_nodes([schema])
        assert schema == {"type": "array", "items": {"type": "string", "minLength": 2}}

    def test_all_bounds_narrowed(self):
        schema = {
            "allOf": [
                {"minItems": 1, "maxItems": 9, "minLength": 2, "maxLength": 8, "exclusiveMinimum": 0},
                {"minItems": 3, "maxItems": 5, "minLength": 1, "maxLength": 4, "exclusiveMaximum": 7},
                {"minProperties": 2, "maxProperties": 6, "exclusiveMinimum": 1, "exclusiveMaximum": 9},
            ]
        }
        create_cleanup().reduce_all_of_nodes([schema])
        assert schema == {
            "minItems": 3,
            "maxItems": 5,
            "minLength": 2,
            "maxLength": 4,
            "exclusiveMinimum": 1,
            "exclusiveMaximum": 7,
            "minProperties": 2,
            "maxProperties": 6,
        }

    def test_dependent_required_merged(self):
        schema = {
            "allOf": [
                {"dependentRequired": {"a": ["b"]}},
                {"dependentRequired": {"a": ["c"], "d": ["e"]}},
            ]
        }
        create_cleanup().reduce_all_of_nodes([schema])
        assert schema == {"dependentRequired": {"a": ["b", "c"], "d": ["e"]}}

    def test_shared_node_visited_once(self):
        shared = {"allOf": [{"type": "string"}, {"minLength": 1}]}
        schema = {"properties": {"a": shared, "b": shared}}
        create_cleanup().reduce_all_of_nodes([schema])
        assert schema["properties"]["a"] is schema["properties"]["b"]
        assert shared == {"type": "string", "minLength": 1}


class TestRedundantMemberAttributes:
    """Attributes repeated next to a reference"""

    def test_attribute_equal_to_definition_removed(self):
        definitions = {"Address": {"type": "object", "description": "A postal address"}}
        schema = {
            "properties": {
                "home": {"$ref": "#/$defs/Address", "description": "A postal address"},
                "work": {"$ref": "#/$defs/Address", "description": "Office"},
            }
        }
        create_cleanup().reduce_redundant_member_attributes([schema], definitions, "#/$defs/")
        assert schema["properties"]["home"] == {"$ref": "#/$defs/Address"}
        assert schema["properties"]["work"] == {"$ref": "#/$defs/Address", "description": "Office"}

    def test_conditionals_kept_when_any_differs(self):
        definitions = {"A": {"if": {"required": ["x"]}, "then": {"required": ["y"]}}}
        schema = {
            "properties": {
                "a": {"$ref": "#/$defs/A", "if": {"required": ["x"]}, "then": {"required": ["z"]}},
            }
        }
        create_cleanup().reduce_redundant_member_attributes([schema], definitions, "#/$defs/")
        assert schema["properties"]["a"] == {
            "$ref": "#/$defs/A",
            "if": {"required": ["x"]},
            "then": {"required": ["z"]},
        }


if __name__ == "__main__":
    pytest.main([__file__])
