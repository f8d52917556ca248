import pytest
import yaml

from oasvalidate.locate import (
    json_pointer_to_segments,
    locate_schema_property_node,
    node_line_and_column,
)

SPEC = """openapi: 3.1.0
paths:
  /burgers/createBurger:
    post:
      requestBody:
        content:
          application/json:
            schema:
              type: object
              properties:
                name:
                  type: string
                patties:
                  type: integer
                vegetarian:
                  type: boolean"""

VEGETARIAN = (
    "/paths/~1burgers~1createBurger/post/requestBody/content/"
    "application~1json/schema/properties/vegetarian"
)


@pytest.fixture
def root():
    return yaml.compose(SPEC)


def test_bad_node():
    assert locate_schema_property_node(None, "") is None


def test_locate_property(root):
    found = locate_schema_property_node(root, VEGETARIAN)
    assert found.value[0][1].value == "boolean"


def test_locate_missing(root):
    assert locate_schema_property_node(root, "/i/do/not/exist") is None


def test_empty_pointer_finds_nothing(root):
    assert locate_schema_property_node(root, "") is None
    assert locate_schema_property_node(root, "#/") is None


def test_fragment_pointer(root):
    found = locate_schema_property_node(root, "#/paths/~1burgers~1createBurger/post")
    assert [key.value for key, _ in found.value] == ["requestBody"]


def test_sequence_index():
    doc = yaml.compose("items:\n  - a\n  - b\n")
    assert locate_schema_property_node(doc, "/items/1").value == "b"
    assert locate_schema_property_node(doc, "/items/5") is None
    assert locate_schema_property_node(doc, "/items/x") is None


def test_scalar_has_no_children(root):
    assert locate_schema_property_node(root, "/openapi/child") is None


@pytest.mark.parametrize(
    "pointer, expected",
    [
        ("", []),
        ("#", []),
        ("/a/b", ["a", "b"]),
        ("#/components/schemas/Pet", ["components", "schemas", "Pet"]),
        ("/a~1b/c~0d", ["a/b", "c~d"]),
        ("#/a%20b", ["a b"]),
        ("/0/items", ["0", "items"]),
    ],
)
def test_json_pointer_to_segments(pointer, expected):
    assert json_pointer_to_segments(pointer) == expected


def test_line_and_column_of_mapping_points_at_key(root):
    found = locate_schema_property_node(root, VEGETARIAN)
    assert node_line_and_column(found) == (15, 19)


def test_line_and_column_of_scalar(root):
    found = locate_schema_property_node(root, "/openapi")
    assert node_line_and_column(found) == (1, 10)