"""Tests for the OpenAPI/Swagger adapter."""

import pytest

from entityscope.adapters.openapi import TYPE_FORMAT_MAPPINGS, OpenAPIAdapter
from entityscope.errors import MalformedInputError, UnsupportedFormatError


@pytest.fixture
def blog_graph(fixtures_dir):
    return OpenAPIAdapter().parse(fixtures_dir / "openapi.yaml")


def test_only_object_schemas_become_entities(blog_graph):
    assert set(blog_graph.entities) == {"User", "Post"}


def test_property_mapping(blog_graph):
    user = blog_graph.get_entity("User")

    assert user.table == "users"
    assert user.fields["id"].storage_type == "bigInteger"
    assert user.fields["id"].nullable is False
    assert user.fields["name"].storage_type == "string"
    assert user.fields["email"].format == "email"
    assert user.fields["bio"].storage_type == "text"
    assert user.fields["bio"].nullable is True

    balance = user.fields["balance"]
    assert (balance.storage_type, balance.precision, balance.scale, balance.cast) == ("decimal", 10, 2, "float")

    created_at = user.fields["created_at"]
    assert created_at.storage_type == "timestamp"
    assert created_at.cast == "datetime"
    assert created_at.format == "datetime"


def test_collection_properties(blog_graph):
    post = blog_graph.get_entity("Post")

    assert post.fields["published_on"].storage_type == "date"
    assert post.fields["published_on"].cast == "date"
    assert post.fields["tags"].storage_type == "json"
    assert post.fields["tags"].cast == "array"
    assert post.fields["metadata"].language_type == "object"


def test_refs_become_relationships(blog_graph):
    user = blog_graph.get_entity("User")
    post = blog_graph.get_entity("Post")

    author = post.get_relationship("author")
    assert author.type == "to_one"
    assert author.related_entity == "User"
    assert author.foreign_key == "author_id"
    assert post.fields["author_id"].nullable is True

    posts = user.get_relationship("posts")
    assert posts.type == "to_many"
    assert posts.related_entity == "Post"
    # Adopts the key of the existing back reference
    assert posts.foreign_key == "author_id"

    assert OpenAPIAdapter().validate(blog_graph) == []


def test_swagger_definitions_and_reciprocals(fixtures_dir):
    graph = OpenAPIAdapter().parse(fixtures_dir / "swagger.json")

    category = graph.get_entity("Category")
    product = graph.get_entity("Product")

    assert category.get_relationship("products").foreign_key == "category_id"
    assert product.get_relationship("category").type == "to_one"
    assert product.fields["category_id"].storage_type == "unsignedBigInteger"

    assert product.fields["description"].nullable is True
    assert product.fields["price"].storage_type == "double"
    assert product.fields["price"].nullable is False
    assert product.fields["sku"].storage_type == "uuid"


def test_openapi_31_type_lists_and_all_of():
    content = """
openapi: 3.1.0
info: {title: t, version: "1"}
components:
  schemas:
    Team:
      type: object
      required: [name, nickname]
      properties:
        name: {type: string}
        nickname: {type: [string, "null"]}
    Player:
      type: object
      required: [team]
      properties:
        team:
          allOf:
            - $ref: '#/components/schemas/Team'
        password: {type: string, format: binary}
"""
    graph = OpenAPIAdapter().parse(content)

    team = graph.get_entity("Team")
    assert team.fields["name"].nullable is False
    assert team.fields["nickname"].nullable is True

    player = graph.get_entity("Player")
    assert player.get_relationship("team").related_entity == "Team"
    assert player.fields["team_id"].nullable is False
    assert player.fields["password"].storage_type == "string"


def test_missing_version_field():
    with pytest.raises(UnsupportedFormatError, match="Missing version field"):
        OpenAPIAdapter().parse('{"info": {"title": "x"}, "paths": {}}')


def test_single_line_yaml_is_raw_text():
    assert len(OpenAPIAdapter().parse("openapi: 3.0.0")) == 0
    with pytest.raises(UnsupportedFormatError):
        OpenAPIAdapter().parse("title: nothing")


def test_invalid_yaml():
    with pytest.raises(MalformedInputError, match="Invalid YAML"):
        OpenAPIAdapter().parse_content("openapi: 3.0.0\ncomponents: [unclosed\n")


def test_non_mapping_document():
    with pytest.raises(MalformedInputError):
        OpenAPIAdapter().parse_content("- a\n- b\n")


def test_type_table_is_read_only():
    assert TYPE_FORMAT_MAPPINGS[("integer", "int64")].storage_type == "bigInteger"
    with pytest.raises(TypeError):
        TYPE_FORMAT_MAPPINGS[("integer", "int32")] = TYPE_FORMAT_MAPPINGS[("integer", None)]
