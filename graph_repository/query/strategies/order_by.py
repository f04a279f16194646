"""
< Normalize ORDER BY inputs into a deterministic list of SortField >
1. Accept user-facing order_by inputs (SortField / str / Enum / mapping / ORM attribute / asc,desc expression).
2. Validate that each input names a column of the given model (other models, aliased tables,
   raw SQL and functions are rejected with `InvalidSortError`).
3. Remove duplicates by field name (direction does not matter); keep the first occurrence.
4. Fix NULL placement per field. NULL sorts as the largest value unless overridden:
   ASC -> NULLS LAST, DESC -> NULLS FIRST.
5. If no field in the result is unique and non-nullable, append the primary-key columns (ASC).
   Cursor pagination depends on this: without a unique tail, rows that tie on every sort key
   can be skipped or repeated across pages.

< Supported inputs >
- SortField('name', SortDirection.DESC) or SortField('name', 'desc', 'first')
- str: 'name' (ASC) or '-name' (DESC)
- Enum: member whose value is such a str
- Mapping: {'name': 'DESC', 'id': 'ASC'} (GraphQL sort input shape, insertion order kept)
- InstrumentedAttribute: Model.name
- UnaryExpression: Model.name.desc(), Model.name.asc().nulls_first()
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from sqlalchemy.orm.attributes import InstrumentedAttribute
from sqlalchemy.sql import operators
from sqlalchemy.sql.elements import ColumnElement, TextClause, UnaryExpression
from sqlalchemy.sql.functions import FunctionElement

from graph_repository.enums import NullsOrder, SortDirection
from graph_repository.exceptions import InvalidSortError
from graph_repository.field_schema import EntitySchema


@dataclass(frozen=True)
class SortField:
    field: str
    direction: SortDirection = SortDirection.ASC
    nulls: NullsOrder | None = None

    def __post_init__(self) -> None:
        # 'desc' / 'first' strings are accepted and stored as enum members
        try:
            object.__setattr__(self, 'direction', SortDirection.parse(self.direction))
            if self.nulls is not None:
                object.__setattr__(self, 'nulls', NullsOrder.parse(self.nulls))
        except ValueError as e:
            raise InvalidSortError(str(e), field=str(self.field)) from e

    @property
    def is_desc(self) -> bool:
        return self.direction is SortDirection.DESC

    @property
    def nulls_order(self) -> NullsOrder:
        return self.nulls if self.nulls is not None else NullsOrder.default_for(self.direction)

    def resolved(self) -> SortField:
        return replace(self, nulls=self.nulls_order)

    def reversed(self) -> SortField:
        """The same field walked the other way (used for `last N before C`)."""
        return SortField(self.field, self.direction.reversed(), self.nulls_order.reversed())

    def canonical(self) -> list[str]:
        return [self.field, str(self.direction), str(self.nulls_order)]


class OrderByStrategy:
    """
    < Order-by input normalization strategy >

    1. Normalizes user-provided order_by inputs into SortField items.
    2. Enforces that the inputs refer to columns on the given model only.
    3. Guarantees a total order by appending a unique key when needed.
    4. Renders SortField items as ORDER BY clauses with explicit NULLS FIRST/LAST.
    """

    @staticmethod
    def apply(schema: EntitySchema, order_items: Sequence[Any] | None) -> list[SortField]:
        """
        < Normalize ordering criteria >

        Parameters
        ----------
        schema : EntitySchema
            Field schema of the queried model.
        order_items : Sequence[Any] | None
            Ordering inputs (see module docstring). None or empty means primary key ascending.

        Returns
        -------
        list[SortField]
            Validated, deduplicated, null-resolved sort fields ending in a unique key.

        Raises
        ------
        InvalidSortError
            If `order_items` is a single string/mapping, or an item cannot be mapped to the model.
        ValueError
            If a tie-break key is needed but the model has no primary key.
        """
        if isinstance(order_items, (str, Mapping)):
            raise InvalidSortError('order_items must be a sequence, not a single string or mapping.')

        normalized: list[SortField] = []
        for item in order_items or []:
            normalized.extend(OrderByStrategy._normalize(schema, item))

        seen: set[str] = set()
        out: list[SortField] = []
        for sf in normalized:
            if sf.field in seen:
                continue
            seen.add(sf.field)
            out.append(sf.resolved())

        if not any(schema.fields[sf.field].is_key for sf in out):
            if not schema.primary_key:
                raise ValueError(f'Cannot build a total ordering. Model {schema.name} must have a primary key.')
            for key in schema.primary_key:
                if key not in seen:
                    out.append(SortField(key).resolved())
        return out

    @staticmethod
    def clauses(schema: EntitySchema, sort_fields: Sequence[SortField]) -> list[ColumnElement[Any]]:
        """Render sort fields as ORDER BY clauses."""
        out: list[ColumnElement[Any]] = []
        for sf in sort_fields:
            col = schema.fields[sf.field].attribute
            clause = col.desc() if sf.is_desc else col.asc()
            clause = clause.nulls_first() if sf.nulls_order is NullsOrder.FIRST else clause.nulls_last()
            out.append(clause)
        return out

    @staticmethod
    def _check_field(schema: EntitySchema, name: Any) -> str:
        if not isinstance(name, str) or name not in schema:
            raise InvalidSortError(f"Model {schema.name} does not have a field '{name}'.", field=str(name))
        return name

    @staticmethod
    def _parse_direction(value: Any, field: str) -> SortDirection:
        try:
            return SortDirection.parse(value)
        except ValueError as e:
            raise InvalidSortError(str(e), field=field) from e

    @staticmethod
    def _normalize(schema: EntitySchema, item: Any) -> list[SortField]:
        # 1) SortField
        if isinstance(item, SortField):
            OrderByStrategy._check_field(schema, item.field)
            return [item]

        # 2) Enum (only when value is str); checked before str because str-Enums are str too
        if isinstance(item, Enum):
            if not isinstance(item.value, str):
                raise InvalidSortError(f'Unsupported order_by input type: {item!r}')
            item = item.value

        # 3) 'name' / '-name'
        if isinstance(item, str):
            if item.startswith('-'):
                return [SortField(OrderByStrategy._check_field(schema, item[1:]), SortDirection.DESC)]
            return [SortField(OrderByStrategy._check_field(schema, item))]

        # 4) {'name': 'DESC'}
        if isinstance(item, Mapping):
            out: list[SortField] = []
            for key, direction in item.items():
                name = OrderByStrategy._check_field(schema, key)
                out.append(SortField(name, OrderByStrategy._parse_direction(direction, name)))
            return out

        # 5) Model.col
        if isinstance(item, InstrumentedAttribute):
            return [SortField(OrderByStrategy._attribute_key(schema, item))]

        # 6) Model.col.desc() / .asc().nulls_first() ...
        if isinstance(item, UnaryExpression):
            return [OrderByStrategy._from_unary(schema, item)]

        raise InvalidSortError(f'Unsupported order_by input type: {item!r}')

    @staticmethod
    def _attribute_key(schema: EntitySchema, attr: InstrumentedAttribute[Any]) -> str:
        cls = getattr(attr, 'class_', None)
        if cls is not schema.model:
            raise InvalidSortError(f"'{attr}' belongs to another model ({getattr(cls, '__name__', 'Unknown')}).")
        return OrderByStrategy._check_field(schema, attr.key)

    @staticmethod
    def _from_unary(schema: EntitySchema, item: UnaryExpression[Any]) -> SortField:
        direction = SortDirection.ASC
        nulls: NullsOrder | None = None

        node: Any = item
        while isinstance(node, UnaryExpression):
            mod = node.modifier
            if mod is operators.desc_op:
                direction = SortDirection.DESC
            elif mod is operators.nulls_first_op:
                nulls = NullsOrder.FIRST
            elif mod is operators.nulls_last_op:
                nulls = NullsOrder.LAST
            elif mod is not operators.asc_op:
                raise InvalidSortError(f'Unsupported order_by input type: {item!r}')
            node = node.element

        if isinstance(node, FunctionElement | TextClause):
            raise InvalidSortError(f'Unsupported order_by input type: {item!r}')

        if isinstance(node, InstrumentedAttribute):
            return SortField(OrderByStrategy._attribute_key(schema, node), direction, nulls)

        if isinstance(node, ColumnElement):
            key = getattr(node, 'key', getattr(node, 'name', None))
            field = schema.get(key) if isinstance(key, str) else None
            if field is None or not OrderByStrategy._same_column(node, field.attribute.expression):
                raise InvalidSortError(f"Model {schema.name} does not have a field '{key}'.", field=str(key))
            return SortField(field.name, direction, nulls)

        raise InvalidSortError(f'Unsupported order_by input type: {item!r}')

    @staticmethod
    def _same_column(a: Any, b: Any) -> bool:
        """
        True when `a` is the model's own column `b` (same table object, same column).
        Columns of `aliased()` entities carry a different table object and are rejected.
        """
        ta = getattr(a, 'table', None)
        tb = getattr(b, 'table', None)
        if ta is None or tb is None or ta is not tb:
            return False
        return bool(a.compare(b)) or b in getattr(a, 'proxy_set', ())
