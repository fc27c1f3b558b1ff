"""Tests for graph assembly: merging and dependency ordering."""

import pytest

from entityscope.core.assembler import assemble, merge_graphs, order_entities
from entityscope.core.entity import Entity
from entityscope.core.entity_graph import EntityGraph
from entityscope.core.type_inferrer import field_from_value
from entityscope.errors import DependencyCycleError


def _graph(*entities: Entity) -> EntityGraph:
    graph = EntityGraph()
    for entity in entities:
        graph.register(entity)
    return graph


def _entity(entity_name: str, parent: str | None = None, **values) -> Entity:
    entity = Entity(name=entity_name, table=entity_name.lower() + "s", parent=parent)
    for field_name, value in values.items():
        entity.add_field(field_from_value(field_name, value))
    return entity


def test_parents_precede_children():
    graph = _graph(_entity("Comment", parent="Post"), _entity("Post", parent="User"), _entity("User"))

    assert [entity.name for entity in order_entities(graph)] == ["User", "Post", "Comment"]


def test_missing_parent_is_placeable():
    graph = _graph(_entity("Post", parent="Blog"))

    assert [entity.name for entity in order_entities(graph)] == ["Post"]


def test_cycle_is_reported():
    graph = EntityGraph()
    for entity in (_entity("A", parent="B"), _entity("B", parent="A"), _entity("C")):
        graph.add_entity(entity)

    with pytest.raises(DependencyCycleError) as exc_info:
        order_entities(graph)

    assert exc_info.value.remaining == ["A", "B"]


def test_assemble_assigns_explicit_sequence():
    graph = _graph(_entity("Post", parent="User"), _entity("User"))

    assembled = assemble(graph, start_sequence=5)

    assert [entity.name for entity in assembled.entities] == ["User", "Post"]
    assert assembled.sequence == {"User": 5, "Post": 6}
    assert assembled.next_sequence == 7

    again = assemble(graph, start_sequence=assembled.next_sequence)
    assert again.sequence == {"User": 7, "Post": 8}


def test_assembled_graph_serialization():
    assembled = assemble(_graph(_entity("User", name="John")))

    data = assembled.to_dict()
    assert data["User"]["sequence"] == 1
    assert assembled.get_entity("User").table == "users"
    with pytest.raises(KeyError):
        assembled.get_entity("Post")


def test_merge_graphs_first_graph_wins():
    first = _graph(_entity("User", name="John", age=30))
    second = _graph(_entity("User", age="thirty", email="john@x.com"), _entity("Post", parent="User"))

    merged = merge_graphs(first, second)

    user = merged.get_entity("User")
    assert list(user.fields) == ["name", "age", "email"]
    assert user.fields["age"].language_type == "integer"
    assert [conflict.field for conflict in merged.conflicts] == ["age"]
    assert "Post" in merged

    # Inputs are untouched
    assert list(first.get_entity("User").fields) == ["name", "age"]
