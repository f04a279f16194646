from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Select, and_, false, or_, tuple_
from sqlalchemy.sql.elements import ColumnElement, False_

from graph_repository.enums import NullsOrder
from graph_repository.field_schema import EntitySchema, FieldSpec
from graph_repository.query.strategies.order_by import SortField
from graph_repository.repo_types import TModel


class KeysetStrategy:
    """
    <Keyset Pagination Strategy>

    Builds the `WHERE` condition that selects the rows strictly after a cursor position in the
    order described by `sort_fields`. Backward paging passes reversed sort fields
    (`SortField.reversed()`), so "before C" is "after C" in the reversed order.

    Current behavior:
    - If every key is non-nullable, the cursor holds no NULL and all directions agree:
      - single column: simple `>` / `<` comparison
      - multi column: row-value tuple comparison
    - Otherwise: an OR-ladder (seek) condition, comparing each column by its own direction
      and NULL placement:

          (k1 after v1)
          OR (k1 = v1 AND k2 after v2)
          OR (k1 = v1 AND k2 = v2 AND k3 after v3) ...
    """

    @staticmethod
    def apply(
        stmt: Select[tuple[TModel]],
        *,
        schema: EntitySchema,
        sort_fields: Sequence[SortField],
        cursor_values: Sequence[Any] | None,
        size: int,
    ) -> Select[tuple[TModel]]:
        """
        <Build WHERE + LIMIT for keyset pagination>

        1. Validate sort_fields and size
        2. First page (no cursor values) -> apply LIMIT only
        3. Otherwise -> apply the seek condition, then LIMIT
        """
        if not sort_fields:
            raise ValueError('keyset pagination requires sort_fields.')
        if size < 1:
            raise ValueError('size must be >= 1.')

        if cursor_values is None:
            return stmt.limit(size)
        return stmt.where(KeysetStrategy.seek(schema, sort_fields, cursor_values)).limit(size)

    @staticmethod
    def seek(
        schema: EntitySchema,
        sort_fields: Sequence[SortField],
        values: Sequence[Any],
    ) -> ColumnElement[bool]:
        if len(values) != len(sort_fields):
            raise ValueError('cursor values length does not match sort_fields.')

        fields = [schema.fields[sf.field] for sf in sort_fields]
        cols = [f.attribute for f in fields]

        if KeysetStrategy._can_use_row_values(fields, sort_fields, values):
            desc = sort_fields[0].is_desc
            if len(cols) == 1:
                return cols[0] < values[0] if desc else cols[0] > values[0]
            lhs, rhs = tuple_(*cols), tuple_(*values)
            return lhs < rhs if desc else lhs > rhs

        branches: list[ColumnElement[bool]] = []
        for i, sf in enumerate(sort_fields):
            step = KeysetStrategy._after(fields[i], sf, values[i])
            if isinstance(step, False_):
                continue
            # Fix previous columns with equality
            prefix = [KeysetStrategy._equal(fields[j], values[j]) for j in range(i)]
            branches.append(and_(*prefix, step) if prefix else step)

        if not branches:
            return false()
        return branches[0] if len(branches) == 1 else or_(*branches)

    @staticmethod
    def _can_use_row_values(fields: list[FieldSpec], sort_fields: Sequence[SortField], values: Sequence[Any]) -> bool:
        if any(f.nullable for f in fields) or any(v is None for v in values):
            return False
        return len({sf.direction for sf in sort_fields}) == 1

    @staticmethod
    def _after(field: FieldSpec, sf: SortField, value: Any) -> ColumnElement[bool]:
        """Rows whose value of this single column comes strictly after `value`."""
        col = field.attribute
        nulls_last = sf.nulls_order is NullsOrder.LAST

        if value is None:
            # NULL is at one end of the order: nothing follows it, or every non-NULL does.
            return false() if nulls_last else col.is_not(None)

        cmp = col < value if sf.is_desc else col > value
        if nulls_last and field.nullable:
            return or_(cmp, col.is_(None))
        return cmp

    @staticmethod
    def _equal(field: FieldSpec, value: Any) -> ColumnElement[bool]:
        col = field.attribute
        return col.is_(None) if value is None else col == value
