from __future__ import annotations

import base64
import datetime as dt
import json
from decimal import Decimal

import pytest

from graph_repository.exceptions import InvalidCursorError
from graph_repository.field_schema import EntitySchema
from graph_repository.query.cursor import CursorCodec, query_fingerprint
from graph_repository.query.filter_expr import Condition
from graph_repository.query.strategies import OrderByStrategy, SortField

from .models import Article

SCHEMA = EntitySchema.from_model(Article)
SORT = OrderByStrategy.apply(SCHEMA, ['-published_at'])
FP = query_fingerprint(SORT, None)


def raw_token(doc: object) -> str:
    return base64.urlsafe_b64encode(json.dumps(doc).encode()).decode().rstrip('=')


def test_round_trip_restores_typed_values() -> None:
    """
    < A cursor decodes back to the same sort-key tuple, with Python types restored >
    1. Encode (datetime, id) for the -published_at sort.
    2. Decode under the same sort + fingerprint.
    3. Assert the values and their types.
    """
    # 1
    when = dt.datetime(2024, 1, 2, 3, 4, 5)
    token = CursorCodec.encode(SORT, [when, 7], FP)

    # 2
    got = CursorCodec.decode(token, SCHEMA, SORT, FP)

    # 3
    assert got == (when, 7)
    assert '=' not in token


def test_round_trip_with_null_and_decimal() -> None:
    sort = OrderByStrategy.apply(SCHEMA, ['price'])
    fp = query_fingerprint(sort, None)
    assert CursorCodec.decode(CursorCodec.encode(sort, [None, 3], fp), SCHEMA, sort, fp) == (None, 3)
    assert CursorCodec.decode(CursorCodec.encode(sort, [Decimal('1.50'), 3], fp), SCHEMA, sort, fp) == (
        Decimal('1.50'),
        3,
    )


def test_fingerprint_depends_on_sort_and_filter() -> None:
    """
    < The fingerprint changes with the sort and with the filter, and is stable otherwise >
    1. Compute fingerprints for variations of the same request.
    2. Assert equal inputs agree and different inputs differ.
    """
    # 1
    by_id = OrderByStrategy.apply(SCHEMA, ['id'])
    by_id_desc = OrderByStrategy.apply(SCHEMA, ['-id'])
    flt = Condition('score', 'gt', 1)

    # 2
    assert query_fingerprint(by_id, None) == query_fingerprint(OrderByStrategy.apply(SCHEMA, None), None)
    assert query_fingerprint(by_id, None) != query_fingerprint(by_id_desc, None)
    assert query_fingerprint(by_id, flt) != query_fingerprint(by_id, None)
    assert query_fingerprint(by_id, flt) != query_fingerprint(by_id, Condition('score', 'gt', 2))
    assert len(query_fingerprint(by_id, flt)) == 16


def test_cursor_from_other_sort_is_rejected() -> None:
    """
    < A cursor issued under sort-by-id is rejected under sort-by-title >
    1. Encode a cursor for ORDER BY id.
    2. Decode it for ORDER BY title, id.
    3. Assert InvalidCursorError.
    """
    # 1
    by_id = OrderByStrategy.apply(SCHEMA, ['id'])
    token = CursorCodec.encode(by_id, [2], query_fingerprint(by_id, None))

    # 2 / 3
    by_title = OrderByStrategy.apply(SCHEMA, ['title'])
    with pytest.raises(InvalidCursorError):
        CursorCodec.decode(token, SCHEMA, by_title, query_fingerprint(by_title, None))


def test_cursor_from_other_filter_is_rejected() -> None:
    token = CursorCodec.encode(SORT, [None, 1], FP)
    other = query_fingerprint(SORT, Condition('score', 'eq', 1))
    with pytest.raises(InvalidCursorError, match='different filter or sort'):
        CursorCodec.decode(token, SCHEMA, SORT, other)


@pytest.mark.parametrize(
    'token',
    [
        '',
        '!!!not-base64!!!',
        base64.urlsafe_b64encode(b'\xff\xfe').decode(),
        raw_token([1, 2]),
        raw_token({'v': 2, 'f': FP, 'k': {'published_at': None, 'id': 1}}),
        raw_token({'v': 1, 'f': FP, 'k': [None, 1]}),
        raw_token({'v': 1, 'f': FP, 'k': {'id': 1}}),
        raw_token({'v': 1, 'f': FP, 'k': {'id': 1, 'published_at': None}}),
        raw_token({'v': 1, 'f': FP, 'k': {'published_at': 'soon', 'id': 1}}),
        raw_token({'v': 1, 'f': FP, 'k': {'published_at': None, 'id': 'one'}}),
        raw_token({'v': 1, 'f': FP, 'k': {'published_at': None, 'id': None}}),
    ],
)
def test_malformed_cursors_raise_invalid_cursor(token: str) -> None:
    with pytest.raises(InvalidCursorError) as exc_info:
        CursorCodec.decode(token, SCHEMA, SORT, FP)
    assert exc_info.value.code == 'INVALID_CURSOR'


def test_oversized_cursor_is_rejected_before_decoding() -> None:
    with pytest.raises(InvalidCursorError, match='longer than 32'):
        CursorCodec.decode('a' * 33, SCHEMA, SORT, FP, max_length=32)


def test_encode_row_reads_sort_fields_from_row() -> None:
    row = Article(id=4, published_at=dt.datetime(2024, 1, 4))
    token = CursorCodec.encode_row(SORT, row, FP)
    assert CursorCodec.decode(token, SCHEMA, SORT, FP) == (dt.datetime(2024, 1, 4), 4)
