from __future__ import annotations

import enum
from typing import Any

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.orm import aliased

from graph_repository.enums import NullsOrder, SortDirection
from graph_repository.exceptions import InvalidSortError
from graph_repository.field_schema import EntitySchema
from graph_repository.query.strategies import OrderByStrategy, SortField

from .models import Article, Item, Membership

ASC, DESC = SortDirection.ASC, SortDirection.DESC
FIRST, LAST = NullsOrder.FIRST, NullsOrder.LAST

SCHEMA = EntitySchema.from_model(Article)


# Enum inputs for order_by
class ArticleOrder(enum.Enum):
    TITLE = 'title'
    NEWEST = '-published_at'


class IntOrder(enum.Enum):
    ONE = 1


def apply(items: Any) -> list[SortField]:
    return OrderByStrategy.apply(SCHEMA, items)


# -------------------------------
# Tests
# -------------------------------
def test_string_key_appends_primary_key_tie_break() -> None:
    """
    < A non-unique sort field gets the primary key appended >
    1. Pass ['title'] (not unique).
    2. Assert `id ASC` is appended and NULL placement is resolved.
    """
    # 1
    got = apply(['title'])

    # 2
    assert got == [SortField('title', ASC, LAST), SortField('id', ASC, LAST)]


def test_unique_non_nullable_field_needs_no_tie_break() -> None:
    assert apply(['slug']) == [SortField('slug', ASC, LAST)]
    assert apply(['-id']) == [SortField('id', DESC, FIRST)]


def test_empty_or_none_orders_by_primary_key() -> None:
    assert apply(None) == [SortField('id', ASC, LAST)]
    assert apply([]) == [SortField('id', ASC, LAST)]


def test_minus_prefix_is_descending_with_nulls_first() -> None:
    assert apply(['-score']) == [SortField('score', DESC, FIRST), SortField('id', ASC, LAST)]


def test_mapping_items_keep_insertion_order() -> None:
    """
    < GraphQL-shaped {field: direction} mappings are accepted in any letter case >
    1. Pass a mapping with two fields, then another mapping.
    2. Assert fields keep their order and directions.
    """
    # 1
    got = apply([{'score': 'DESC', 'title': 'asc'}, {'id': 'desc'}])

    # 2
    assert got == [SortField('score', DESC, FIRST), SortField('title', ASC, LAST), SortField('id', DESC, FIRST)]


def test_enum_value_normalizes_to_field() -> None:
    assert apply([ArticleOrder.NEWEST, ArticleOrder.TITLE]) == [
        SortField('published_at', DESC, FIRST),
        SortField('title', ASC, LAST),
        SortField('id', ASC, LAST),
    ]


def test_instrumented_attribute_and_unary_expressions() -> None:
    """
    < ORM attributes and asc()/desc()/nulls_*() expressions keep direction and NULL placement >
    1. Pass Article.title, Article.score.desc().nulls_last(), Article.published_at.asc().nulls_first().
    2. Assert each SortField, with explicit NULL placement preserved.
    """
    # 1
    got = apply([Article.title, Article.score.desc().nulls_last(), Article.published_at.asc().nulls_first()])

    # 2
    assert got == [
        SortField('title', ASC, LAST),
        SortField('score', DESC, LAST),
        SortField('published_at', ASC, FIRST),
        SortField('id', ASC, LAST),
    ]


def test_sort_field_items_pass_through() -> None:
    assert apply([SortField('score', DESC, LAST)]) == [SortField('score', DESC, LAST), SortField('id', ASC, LAST)]


def test_duplicates_keep_first_occurrence() -> None:
    """
    < Duplicate fields are dropped regardless of direction; the first one wins >
    1. Pass title twice with different directions.
    2. Assert only the first (ASC) remains.
    """
    # 1
    got = apply(['title', '-title', Article.title.desc()])

    # 2
    assert got == [SortField('title', ASC, LAST), SortField('id', ASC, LAST)]


def test_composite_primary_key_is_appended_in_order() -> None:
    """
    < Without a unique non-nullable field, every primary-key column is appended >
    1. Sort Membership by `code` (unique but nullable).
    2. Assert group_id and user_id follow.
    """
    # 1
    got = OrderByStrategy.apply(EntitySchema.from_model(Membership), ['-code'])

    # 2
    assert got == [SortField('code', DESC, FIRST), SortField('group_id', ASC, LAST), SortField('user_id', ASC, LAST)]


def test_partially_listed_primary_key_is_completed() -> None:
    got = OrderByStrategy.apply(EntitySchema.from_model(Membership), ['-user_id'])
    assert got == [SortField('user_id', DESC, FIRST), SortField('group_id', ASC, LAST)]


@pytest.mark.parametrize(
    'items',
    [
        'title',
        {'title': 'asc'},
        ['nope'],
        ['-'],
        [{'title': 'up'}],
        [{'ghost': 'asc'}],
        [IntOrder.ONE],
        [123],
        [Item.name],
        [Item.name.desc()],
        [aliased(Article).title.desc()],
        [func.lower(Article.title).asc()],
        [text('title')],
    ],
)
def test_invalid_inputs_raise_invalid_sort(items: Any) -> None:
    with pytest.raises(InvalidSortError) as exc_info:
        apply(items)
    assert exc_info.value.code == 'INVALID_SORT'


def test_clauses_render_explicit_null_placement() -> None:
    """
    < clauses() renders every field with an explicit NULLS FIRST / NULLS LAST >
    1. Build clauses for `-score` (+ id tie-break).
    2. Compile and inspect the ORDER BY.
    """
    # 1
    clauses = OrderByStrategy.clauses(SCHEMA, apply(['-score']))

    # 2
    sql = str(select(Article).order_by(*clauses))
    assert 'ORDER BY article.score DESC NULLS FIRST, article.id ASC NULLS LAST' in sql


def test_sort_field_reversed_flips_direction_and_nulls() -> None:
    sf = SortField('score', DESC)
    assert sf.nulls_order is FIRST
    assert sf.reversed() == SortField('score', ASC, LAST)
    assert sf.resolved().canonical() == ['score', 'desc', 'first']


def test_sort_field_accepts_string_direction_and_nulls() -> None:
    """
    < SortField built with plain strings behaves like one built with enums >
    1. Apply SortField('score', 'desc') and SortField('title', 'ASC', 'first').
    2. Assert the normalized fields and the rendered ORDER BY.
    3. Reverse the descending field for backward paging.
    """
    # 1
    got = apply([SortField('score', 'desc'), SortField('title', 'ASC', 'first')])  # type: ignore[arg-type]

    # 2
    assert got == [SortField('score', DESC, FIRST), SortField('title', ASC, FIRST), SortField('id', ASC, LAST)]
    sql = str(select(Article).order_by(*OrderByStrategy.clauses(SCHEMA, got)))
    assert 'ORDER BY article.score DESC NULLS FIRST, article.title ASC NULLS FIRST, article.id ASC NULLS LAST' in sql

    # 3
    assert got[0].reversed() == SortField('score', ASC, LAST)


@pytest.mark.parametrize('direction, nulls', [('sideways', None), ('asc', 'middle'), (1, None)])
def test_sort_field_rejects_unknown_direction_or_nulls(direction: Any, nulls: Any) -> None:
    with pytest.raises(InvalidSortError) as exc_info:
        SortField('score', direction, nulls)
    assert exc_info.value.details == {'field': 'score'}
