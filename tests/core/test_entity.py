"""Tests for the entity model."""

from entityscope.core.entity import Entity, FieldConflict, Index
from entityscope.core.type_inferrer import field_from_value, foreign_key_field


def _user(**values) -> Entity:
    entity = Entity(name="User", table="users")
    for name, value in values.items():
        entity.add_field(field_from_value(name, value))
    return entity


def test_casts_are_derived_from_fields():
    user = _user(id=1, active=True, score=2.5, name="John")

    assert user.casts == {"active": "boolean", "score": "decimal:2"}
    assert set(user.casts) <= set(user.fields)


def test_author_link_detection():
    assert _user(name="x").has_author_link is False

    post = Entity(name="Post", table="posts")
    post.add_field(foreign_key_field("owner_id"))
    assert post.has_author_link is True


def test_add_field_is_append_only():
    user = _user(name="John")

    assert user.add_field(field_from_value("name", 42)) is False
    assert user.fields["name"].language_type == "string"
    assert user.add_field(field_from_value("age", 42)) is True
    assert list(user.fields) == ["name", "age"]


def test_merge_keeps_first_writer_and_reports_conflicts():
    first = _user(id=1, price=10)
    second = _user(id=2, price="ten", nickname="JJ")

    conflicts = first.merge(second)

    assert list(first.fields) == ["id", "price", "nickname"]
    assert first.fields["price"].language_type == "integer"
    assert first.fields["id"].sample_value == 1
    assert conflicts == [FieldConflict(entity="User", field="price", kept="integer/integer", rejected="string/string")]


def test_merge_adopts_parent_and_indexes():
    first = Entity(name="Post", table="posts", indexes=[Index(name="posts_pkey", columns=["id"], primary=True)])
    second = Entity(
        name="Post",
        table="posts",
        parent="User",
        indexes=[Index(name="posts_pkey", columns=["id"]), Index(name="posts_slug", columns=["slug"], unique=True)],
    )

    first.merge(second)

    assert first.parent == "User"
    assert [index.name for index in first.indexes] == ["posts_pkey", "posts_slug"]
    assert first.indexes[0].primary is True


def test_merge_never_adopts_self_as_parent():
    first = Entity(name="Category", table="categories")
    first.merge(Entity(name="Category", table="categories", parent="Category"))

    assert first.parent is None


def test_dump_includes_computed_fields():
    data = _user(active=True).model_dump(mode="json")

    assert data["casts"] == {"active": "boolean"}
    assert data["has_author_link"] is False
    assert data["fields"]["active"]["storage_type"] == "boolean"
