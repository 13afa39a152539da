import importlib

import pytest

import json_schema_generator


@pytest.mark.parametrize(
    "module_name",
    [
        "json_schema_generator.type_model",
        "json_schema_generator.config",
        "json_schema_generator.generation",
        "json_schema_generator.modules",
        "json_schema_generator.json_schema_generator",
    ],
)
def test_subpackages_import(module_name):
    assert importlib.import_module(module_name).__name__ == module_name


def test_public_names():
    assert json_schema_generator.__version__ == "1.0.0"
    for name in json_schema_generator.__all__:
        assert getattr(json_schema_generator, name) is not None


if __name__ == "__main__":
    pytest.main([__file__])
