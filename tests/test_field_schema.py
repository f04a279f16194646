from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

import pytest

from graph_repository.field_schema import EntitySchema, dump_value

from .models import Article, Membership, Status


@pytest.fixture
def schema() -> EntitySchema:
    return EntitySchema.from_model(Article)


def test_from_model_collects_column_attributes(schema: EntitySchema) -> None:
    """
    < EntitySchema lists column attributes only, with nullability and uniqueness >
    1. Build the schema of Article.
    2. Assert relationships are not fields.
    3. Assert nullable / unique / key flags.
    """
    # 1
    fields = schema.fields

    # 2
    assert 'item' not in schema
    assert 'item_id' in schema

    # 3
    assert fields['id'].is_key
    assert fields['slug'].is_key
    assert fields['subtitle'].nullable
    assert not fields['title'].nullable
    assert not fields['score'].is_key
    assert schema.primary_key == ('id',)


def test_composite_primary_key_order_and_no_key_field() -> None:
    """
    < Composite primary keys keep mapper order; no single column is a key >
    1. Build the schema of Membership.
    2. Assert primary_key order and that nullable unique `code` is not a key.
    """
    # 1
    schema = EntitySchema.from_model(Membership)

    # 2
    assert schema.primary_key == ('group_id', 'user_id')
    assert not any(f.is_key for f in schema.fields.values())
    assert schema.fields['code'].unique


def test_field_kinds(schema: EntitySchema) -> None:
    f = schema.fields
    assert f['title'].is_string
    assert not f['status'].is_string
    assert f['status'].is_enum
    assert f['score'].is_comparable
    assert f['published_at'].is_comparable
    assert f['price'].is_comparable
    assert not f['is_featured'].is_comparable
    assert not f['title'].is_comparable


def test_coerce_accepts_json_level_values(schema: EntitySchema) -> None:
    """
    < coerce converts JSON-level values to the field's Python type >
    1. Coerce values for int, decimal, datetime and enum fields.
    2. Assert the converted values.
    """
    # 1 / 2
    f = schema.fields
    assert f['score'].coerce(3) == 3
    assert f['score'].coerce(3.0) == 3
    assert f['price'].coerce('9.99') == Decimal('9.99')
    assert f['price'].coerce(1.5) == Decimal('1.5')
    assert f['published_at'].coerce('2024-01-01T12:00:00') == dt.datetime(2024, 1, 1, 12)
    assert f['status'].coerce('draft') is Status.DRAFT
    assert f['subtitle'].coerce(None) is None


@pytest.mark.parametrize(
    ('field', 'value', 'exc'),
    [
        ('score', True, TypeError),
        ('score', '3', TypeError),
        ('score', 3.5, TypeError),
        ('is_featured', 1, TypeError),
        ('title', 5, TypeError),
        ('title', None, ValueError),
        ('published_at', 'yesterday', ValueError),
        ('price', 'abc', ValueError),
        ('status', 'archived', ValueError),
    ],
)
def test_coerce_rejects_mismatched_values(schema: EntitySchema, field: str, value: object, exc: type[Exception]) -> None:
    with pytest.raises(exc):
        schema.fields[field].coerce(value)


def test_dump_value_is_json_safe() -> None:
    u = uuid.UUID('12345678-1234-5678-1234-567812345678')
    assert dump_value(dt.datetime(2024, 1, 1, 12)) == '2024-01-01T12:00:00'
    assert dump_value(Decimal('1.50')) == '1.50'
    assert dump_value(u) == str(u)
    assert dump_value(Status.PUBLISHED) == 'published'
    assert dump_value(dt.timedelta(minutes=1)) == 60.0
    assert dump_value(7) == 7
