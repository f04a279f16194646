from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Generic

from sqlalchemy import Select, func, select
from sqlalchemy.sql.elements import ColumnElement
from typing_extensions import Doc

from graph_repository.base_filter import BaseRepoFilter
from graph_repository.config import Settings, get_settings
from graph_repository.enums import PagingMode
from graph_repository.exceptions import InvalidCursorError, InvalidFilterError, InvalidPageSizeError
from graph_repository.field_schema import EntitySchema
from graph_repository.query.cursor import CursorCodec, query_fingerprint
from graph_repository.query.filter_expr import And, Condition, FilterExpression, Or, parse_filter
from graph_repository.repo_types import TModel

from .strategies import KeysetStrategy, OrderByStrategy, PredicateStrategy, SortField

WhereInput = FilterExpression | BaseRepoFilter | Mapping[str, Any]


class ListQuery(Generic[TModel]):
    """
    A lightweight DSL for read-only, paged queries.

    This is a **pure state object** used to compose WHERE / ORDER BY / PAGING.
    It is turned into SQL by `build_page_plan()` (paged) or `query_to_stmt()` (unpaged), in a fixed order:

        filter -> predicate  ->  sort -> total order  ->  cursor -> seek + limit

    Design principles
    -----------------
    - WHERE:
        - Accepts a FilterExpression tree, a GraphQL-shaped mapping, or a BaseRepoFilter dataclass.
        - `where()` can be called at most once. Combine conditions with And / Or.
    - ORDER:
        - Inputs are normalized by OrderByStrategy. A unique key is appended when missing.
    - PAGING:
        - FORWARD : `first(n, after=cursor)`
        - BACKWARD: `last(n, before=cursor)`
        - The two directions are mutually exclusive.

    Typical usage
    -------------
    >>> q = (
    ...     repo.list(where={'title': {'contains': 'sql'}})
    ...         .order_by(['-title'])
    ...         .first(20, after=page.page_info.end_cursor)
    ... )
    >>> page = await repo.paginate(q)
    """

    def __init__(self, model: type[TModel], where: WhereInput | None = None) -> None:
        """
        Parameters
        ----------
        model:
            Target SQLAlchemy ORM model class.
        where:
            Initial WHERE filter (optional). If provided, it behaves as if `where()` was called once.
        """
        self.model: type[TModel] = model

        self._filter: FilterExpression | None = None
        self._order_items: Sequence[Any] | None = None

        self._mode: PagingMode = PagingMode.NONE
        self._size: int | None = None
        self._cursor: str | None = None
        self._with_total_count: bool = False
        self._sealed: bool = False

        if where is not None:
            self.where(where)

    def _ensure_mutable(self) -> None:
        """
        Raises
        ------
        RuntimeError
            If the query was already turned into SQL.
        """
        if self._sealed:
            raise RuntimeError('This query has already been used. Create a new ListQuery.')

    def where(self, flt: WhereInput | None) -> ListQuery[TModel]:
        """
        Set the WHERE condition. None is a no-op.

        Raises
        ------
        ValueError
            If `where()` is called a second time after a filter is already set.
        InvalidFilterError
            If a mapping filter is malformed.
        """
        self._ensure_mutable()
        if flt is None:
            return self
        if self._filter is not None:
            raise ValueError('where() can be called only once. Combine conditions with And/Or.')
        self._filter = _to_expression(flt)
        return self

    def order_by(self, items: Sequence[Any] | None) -> ListQuery[TModel]:
        """
        Define the ORDER BY clause. See OrderByStrategy for accepted inputs.
        None or an empty sequence orders by primary key.
        """
        self._ensure_mutable()
        self._order_items = items
        return self

    def first(self, size: int | None = None, *, after: str | None = None) -> ListQuery[TModel]:
        """
        Forward paging: `size` rows following the `after` cursor (from the start when None).
        A None size means the configured default page size.

        Raises
        ------
        InvalidPageSizeError
            If size < 0 or `last()` was already called.
        """
        self._ensure_mutable()
        if self._mode is PagingMode.BACKWARD:
            raise InvalidPageSizeError('first and last cannot be used together.')
        self._set_size(size, 'first')
        self._mode = PagingMode.FORWARD
        self._cursor = after
        return self

    def last(self, size: int | None = None, *, before: str | None = None) -> ListQuery[TModel]:
        """
        Backward paging: `size` rows preceding the `before` cursor (from the end when None).
        A None size means the configured default page size.

        Raises
        ------
        InvalidPageSizeError
            If size < 0 or `first()` was already called.
        """
        self._ensure_mutable()
        if self._mode is PagingMode.FORWARD:
            raise InvalidPageSizeError('first and last cannot be used together.')
        self._set_size(size, 'last')
        self._mode = PagingMode.BACKWARD
        self._cursor = before
        return self

    def with_total_count(self, enabled: bool = True) -> ListQuery[TModel]:
        """Also count every row matching the filter (one extra COUNT query)."""
        self._ensure_mutable()
        self._with_total_count = enabled
        return self

    def connection(
        self,
        *,
        first: int | None = None,
        after: str | None = None,
        last: int | None = None,
        before: str | None = None,
    ) -> ListQuery[TModel]:
        """
        Apply connection-style arguments as a client sends them.

        - `first` / `after` -> forward paging
        - `last` / `before` -> backward paging
        - nothing           -> forward paging with the default page size

        Raises
        ------
        InvalidPageSizeError
            If both `first` and `last` are given.
        InvalidCursorError
            If both `after` and `before` are given, or a cursor is paired with the other direction.
        """
        if first is not None and last is not None:
            raise InvalidPageSizeError('first and last cannot be used together.')
        if after is not None and before is not None:
            raise InvalidCursorError('after and before cannot be used together.')
        if after is not None and last is not None:
            raise InvalidCursorError('after can only be used with first.')
        if before is not None and first is not None:
            raise InvalidCursorError('before can only be used with last.')

        if last is not None or before is not None:
            return self.last(last, before=before)
        return self.first(first, after=after)

    def _set_size(self, size: int | None, arg: str) -> None:
        if size is None:
            self._size = None
            return
        if isinstance(size, bool) or not isinstance(size, int):
            raise InvalidPageSizeError(f'{arg} must be an integer.', argument=arg)
        if size < 0:
            raise InvalidPageSizeError(f'{arg} must be >= 0, got {size}.', argument=arg)
        self._size = size

    @property
    def filter(self) -> Annotated[FilterExpression | None, Doc('The current filter tree (or None if unset).')]:
        return self._filter

    @property
    def order_items(
        self,
    ) -> Annotated[Sequence[Any] | None, Doc('The user-provided ORDER BY items. Normalized by OrderByStrategy.')]:
        return self._order_items

    @property
    def mode(self) -> Annotated[PagingMode, Doc('Current paging mode (NONE / FORWARD / BACKWARD).')]:
        return self._mode

    @property
    def size(self) -> Annotated[int | None, Doc('Requested page size (None until first()/last()).')]:
        return self._size

    @property
    def cursor(self) -> Annotated[str | None, Doc('The after/before cursor token (or None).')]:
        return self._cursor

    @property
    def total_count_requested(self) -> Annotated[bool, Doc('Whether a total count was requested.')]:
        return self._with_total_count


@dataclass(frozen=True)
class PagePlan(Generic[TModel]):
    """Everything the paginator needs to run one page request and package the result."""

    schema: EntitySchema
    sort_fields: list[SortField]
    fingerprint: str
    mode: PagingMode
    size: int
    has_cursor: bool
    statement: Select[tuple[TModel]]
    count_statement: Select[tuple[int]] | None

    @property
    def fetch_size(self) -> int:
        # one extra row tells whether another page exists
        return self.size + 1

    def encode_cursor(self, row: Any) -> str:
        return CursorCodec.encode_row(self.sort_fields, row, self.fingerprint)


def _to_expression(flt: WhereInput) -> FilterExpression | None:
    if isinstance(flt, (Condition, And, Or)):
        return flt
    if isinstance(flt, BaseRepoFilter):
        return flt.to_expression()
    if isinstance(flt, Mapping):
        return parse_filter(flt)
    raise InvalidFilterError(f'Unsupported filter type: {type(flt).__name__}')


def _compute_predicate(q: ListQuery[TModel], schema: EntitySchema) -> ColumnElement[bool] | None:
    """Stage 1: filter tree -> WHERE expression (validated against the field schema)."""
    return PredicateStrategy.apply(schema, q.filter)


def _compute_sort(q: ListQuery[TModel], schema: EntitySchema) -> list[SortField]:
    """Stage 2: ORDER BY inputs -> total order ending in a unique key."""
    return OrderByStrategy.apply(schema, q.order_items)


def _apply_where(stmt: Select[Any], pred: ColumnElement[bool] | None) -> Select[Any]:
    return stmt if pred is None else stmt.where(pred)


def _apply_order(stmt: Select[tuple[TModel]], schema: EntitySchema, sort_fields: list[SortField]) -> Select[tuple[TModel]]:
    return stmt.order_by(*OrderByStrategy.clauses(schema, sort_fields))


def _resolve_size(q: ListQuery[TModel], settings: Settings) -> int:
    size = settings.default_page_size if q.size is None else q.size
    if size > settings.max_page_size:
        raise InvalidPageSizeError(
            f'Requested page size {size} exceeds the maximum of {settings.max_page_size}.',
            size=size,
            max_page_size=settings.max_page_size,
        )
    return size


def build_page_plan(q: ListQuery[TModel], settings: Settings | None = None) -> PagePlan[TModel]:
    """
    Convert a ListQuery into a PagePlan.

    Conversion order
    ----------------
    1. Build the field schema of `q.model`
    2. Stage 1: WHERE predicate (InvalidFilterError)
    3. Stage 2: total order (InvalidSortError)
    4. Resolve page size (InvalidPageSizeError)
    5. Stage 3: decode the cursor against the sort + filter fingerprint (InvalidCursorError)
    6. Apply ORDER BY (reversed for backward paging), seek condition and LIMIT size + 1
    7. Build the COUNT statement when a total count was requested
    8. Seal the query
    """
    settings = settings or get_settings()
    schema = EntitySchema.from_model(q.model)

    pred = _compute_predicate(q, schema)
    sort_fields = _compute_sort(q, schema)
    size = _resolve_size(q, settings)
    fingerprint = query_fingerprint(sort_fields, q.filter)

    mode = PagingMode.FORWARD if q.mode is PagingMode.NONE else q.mode
    walk = sort_fields if mode is PagingMode.FORWARD else [sf.reversed() for sf in sort_fields]

    cursor_values = None
    if q.cursor is not None:
        cursor_values = CursorCodec.decode(
            q.cursor, schema, sort_fields, fingerprint, max_length=settings.max_cursor_length
        )

    stmt = _apply_where(select(q.model), pred)
    stmt = _apply_order(stmt, schema, walk)
    stmt = KeysetStrategy.apply(stmt, schema=schema, sort_fields=walk, cursor_values=cursor_values, size=size + 1)

    count_stmt = None
    if q.total_count_requested:
        count_stmt = _apply_where(select(func.count()).select_from(q.model), pred)

    q._sealed = True
    return PagePlan(
        schema=schema,
        sort_fields=sort_fields,
        fingerprint=fingerprint,
        mode=mode,
        size=size,
        has_cursor=cursor_values is not None,
        statement=stmt,
        count_statement=count_stmt,
    )


def _build_list_query(q: ListQuery[TModel]) -> Select[tuple[TModel]]:
    """
    Convert an unpaged ListQuery into a Select (WHERE + ORDER BY, no LIMIT).

    Raises
    ------
    ValueError
        If the query is paged. Paged queries go through `build_page_plan()`.
    """
    if q.mode is not PagingMode.NONE:
        raise ValueError('Paged queries must be built with build_page_plan().')
    if q.cursor is not None:
        raise InvalidCursorError('A cursor requires first() or last().')

    schema = EntitySchema.from_model(q.model)
    stmt = _apply_where(select(q.model), _compute_predicate(q, schema))
    stmt = _apply_order(stmt, schema, _compute_sort(q, schema))
    q._sealed = True
    return stmt
