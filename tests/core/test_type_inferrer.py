"""Tests for type inference from sample values."""

import pytest

from entityscope.core.type_inferrer import (
    StorageSpec,
    ValueShape,
    classify_shape,
    field_from_value,
    foreign_key_field,
    infer_cast,
    infer_language_type,
    infer_storage_type,
    infer_string_format,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, "string"),
        (True, "boolean"),
        (False, "boolean"),
        (3, "integer"),
        (1.5, "float"),
        ([1, 2], "array"),
        ({"a": 1}, "object"),
        ("hello", "string"),
        ("2024-01-15T10:30:00Z", "string"),
    ],
)
def test_infer_language_type(value, expected):
    assert infer_language_type(value) == expected


def test_decimal_storage_for_floats():
    assert infer_storage_type(999.99, "price") == StorageSpec("decimal", precision=10, scale=2)
    assert infer_cast(999.99, "price") == "decimal:2"


def test_datetime_string_is_nullable_timestamp():
    spec = infer_storage_type("2024-01-15T10:30:00Z", "published_at")

    assert spec.type == "timestamp"
    assert spec.nullable is True
    assert infer_cast("2024-01-15T10:30:00Z") == "datetime"
    assert infer_cast("2024-01-15T10:30:00.123+02:00") == "datetime"


def test_date_string_is_not_nullable():
    spec = infer_storage_type("2024-01-15", "birthday")

    assert spec.type == "date"
    assert spec.nullable is False
    assert infer_cast("2024-01-15") == "date"


def test_key_integers_are_unsigned_big_integers():
    assert infer_storage_type(5, "id").type == "unsignedBigInteger"
    assert infer_storage_type(5, "user_id").type == "unsignedBigInteger"
    assert infer_cast(5, "user_id") is None
    assert infer_storage_type(5, "count").type == "integer"
    assert infer_cast(5, "count") == "integer"


def test_booleans_are_not_integers():
    assert infer_storage_type(True, "active").type == "boolean"
    assert infer_cast(True) == "boolean"


def test_null_falls_back_to_nullable_string():
    assert infer_storage_type(None, "nickname") == StorageSpec("string", nullable=True)
    assert infer_cast(None) is None


def test_long_text():
    assert infer_storage_type("short", "description").type == "text"
    assert infer_storage_type("x" * 256, "title").type == "text"
    assert infer_storage_type("x" * 255, "title").type == "string"


def test_email_stays_plain_string():
    assert infer_storage_type("john@x.com", "contact").type == "string"
    assert infer_storage_type("not an address", "email").type == "string"
    assert infer_string_format("john@x.com") == "email"
    assert infer_string_format("anything", "email") == "email"


def test_uuid_storage():
    assert infer_storage_type("123e4567-e89b-12d3-a456-426614174000", "token").type == "uuid"


def test_collections_are_json():
    assert infer_storage_type([1, 2], "tags").type == "json"
    assert infer_cast([1, 2]) == "array"
    assert infer_storage_type({"a": 1}, "meta").type == "json"
    assert infer_cast({"a": 1}) is None


@pytest.mark.parametrize(
    "value,shape",
    [
        ("x", ValueShape.SCALAR),
        (None, ValueShape.SCALAR),
        ({}, ValueShape.SCALAR),
        ({"a": 1}, ValueShape.OBJECT),
        ([], ValueShape.SCALAR_LIST),
        ([1, 2], ValueShape.SCALAR_LIST),
        ([{}], ValueShape.SCALAR_LIST),
        ([{"id": 1}], ValueShape.OBJECT_LIST),
    ],
)
def test_classify_shape(value, shape):
    assert classify_shape(value) is shape


def test_field_from_value():
    field = field_from_value("email", "john@x.com")

    assert field.name == "email"
    assert field.sample_value == "john@x.com"
    assert field.language_type == "string"
    assert field.storage_type == "string"
    assert field.format == "email"
    assert field.cast is None

    price = field_from_value("price", 9.5)
    assert (price.storage_type, price.precision, price.scale, price.cast) == ("decimal", 10, 2, "decimal:2")


def test_foreign_key_field():
    field = foreign_key_field("user_id")

    assert field.storage_type == "unsignedBigInteger"
    assert field.language_type == "integer"
    assert field.nullable is False
    assert field.is_foreign_key
