"""
< Opaque keyset cursors >
A cursor is URL-safe base64 (no padding) of a compact JSON document:

    {"v": 1, "f": "<fingerprint>", "k": {"name": "b", "id": 2}}

- `k` holds the sort-key values of one row, in sort order, as JSON-safe values.
- `f` is a fingerprint of the filter + sort that produced the cursor.
  A cursor only decodes under the same filter and sort; replaying it under another filter or
  sort is rejected with `InvalidCursorError`.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from collections.abc import Sequence
from typing import Any

from graph_repository.exceptions import InvalidCursorError
from graph_repository.field_schema import EntitySchema, dump_value
from graph_repository.query.filter_expr import FilterExpression, canonical
from graph_repository.query.strategies.order_by import SortField

CURSOR_VERSION = 1
DEFAULT_MAX_CURSOR_LENGTH = 2048


def query_fingerprint(sort_fields: Sequence[SortField], flt: FilterExpression | None) -> str:
    doc = {'s': [sf.canonical() for sf in sort_fields], 'f': canonical(flt)}
    raw = json.dumps(doc, separators=(',', ':'), default=str)
    return hashlib.sha256(raw.encode('utf-8')).hexdigest()[:16]


class CursorCodec:
    @staticmethod
    def encode(sort_fields: Sequence[SortField], values: Sequence[Any], fingerprint: str) -> str:
        if len(values) != len(sort_fields):
            raise ValueError('cursor values length does not match sort fields.')
        keys = {sf.field: dump_value(v) for sf, v in zip(sort_fields, values)}
        doc = {'v': CURSOR_VERSION, 'f': fingerprint, 'k': keys}
        raw = json.dumps(doc, separators=(',', ':')).encode('utf-8')
        return base64.urlsafe_b64encode(raw).decode('ascii').rstrip('=')

    @staticmethod
    def encode_row(sort_fields: Sequence[SortField], row: Any, fingerprint: str) -> str:
        return CursorCodec.encode(sort_fields, [getattr(row, sf.field) for sf in sort_fields], fingerprint)

    @staticmethod
    def decode(
        token: str,
        schema: EntitySchema,
        sort_fields: Sequence[SortField],
        fingerprint: str,
        *,
        max_length: int = DEFAULT_MAX_CURSOR_LENGTH,
    ) -> tuple[Any, ...]:
        """
        < Decode a cursor into the sort-key tuple >
        1. Base64/JSON decode and check the document shape and version.
        2. Check that the key set and key order match `sort_fields`.
        3. Check the filter + sort fingerprint.
        4. Coerce every value to its field's Python type.

        Raises
        ------
        InvalidCursorError
            On any failure above.
        """
        if not isinstance(token, str) or not token:
            raise InvalidCursorError('Cursor must be a non-empty string.')
        if len(token) > max_length:
            raise InvalidCursorError(f'Cursor is longer than {max_length} characters.')

        try:
            padded = token + '=' * (-len(token) % 4)
            doc = json.loads(base64.urlsafe_b64decode(padded.encode('ascii')).decode('utf-8'))
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise InvalidCursorError('Cursor is not a valid token.') from e

        if not isinstance(doc, dict) or doc.get('v') != CURSOR_VERSION:
            raise InvalidCursorError('Cursor is not a valid token.')
        keys = doc.get('k')
        if not isinstance(keys, dict):
            raise InvalidCursorError('Cursor is not a valid token.')

        required = [sf.field for sf in sort_fields]
        got = list(keys.keys())
        if set(got) != set(required):
            raise InvalidCursorError(
                f'Cursor keys do not match the current sort. required={required}, got={got}',
                required=required,
                got=got,
            )
        if got != required:
            raise InvalidCursorError(f'Cursor key order does not match the current sort. required={required}, got={got}')

        if doc.get('f') != fingerprint:
            raise InvalidCursorError('Cursor was issued for a different filter or sort.')

        values: list[Any] = []
        for name in required:
            try:
                values.append(schema.fields[name].coerce(keys[name]))
            except (TypeError, ValueError) as e:
                raise InvalidCursorError(f"Cursor value for '{name}' is invalid: {e}", field=name) from e
        return tuple(values)
