from __future__ import annotations

import builtins

from collections.abc import Sequence
from typing import Annotated, Any, Generic, cast, get_args

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase
from typing_extensions import Doc

from graph_repository.config import Settings
from graph_repository.enums import PagingMode
from graph_repository.field_schema import EntitySchema
from graph_repository.query.converter import query_to_stmt
from graph_repository.query.list_query import ListQuery, WhereInput
from graph_repository.query.page import Page
from graph_repository.query.paginator import CursorPaginator
from graph_repository.query.strategies import PredicateStrategy
from graph_repository.repo_types import QueryOrStmt, TModel, TSchema
from graph_repository.session_provider import SessionProvider
from graph_repository.validator import validate_schema_base, validate_schema_fields


class BaseRepository(Generic[TModel, TSchema]):
    """
    Read-only single-model **Repository** exposing an entity set with filtering, sorting and cursor paging.

    Principles
    ----------
    - **Single-model oriented design**: one repository per ORM model.
    - **Explicit session**: every call runs on the session passed in, or the one resolved from the
      class-level SessionProvider / the instance session. The repository never opens or closes sessions.
    - **Schema conversion**: when `mapping_schema` is set (Pydantic, `from_attributes=True`), rows are
      returned as schema objects unless `convert_schema=False` is passed.
    """

    _session_provider: SessionProvider | None = None

    model: Annotated[
        type[TModel],
        Doc('Target SQLAlchemy ORM model class. Usually inferred from the generic type argument.'),
    ]
    mapping_schema: Annotated[
        type[TSchema] | None,
        Doc('Pydantic schema used for ORM → schema conversion. Its required fields must be model columns.'),
    ] = None
    settings: Annotated[
        Settings | None,
        Doc('Paging settings (page sizes, cursor length). None uses the process-wide settings.'),
    ] = None
    _default_convert_schema: bool = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """
        Infer `model` / `mapping_schema` from the generic arguments (e.g. BaseRepository[Post, PostSchema])
        unless the subclass declares them, and check the schema's shape.
        """
        super().__init_subclass__(**kwargs)

        inferred_model: type[DeclarativeBase] | None = None
        inferred_schema: type[BaseModel] | None = None

        for base in getattr(cls, '__orig_bases__', []):
            args = get_args(base)
            if not args:
                continue

            if inferred_model is None and isinstance(args[0], type):
                inferred_model = args[0]

            if inferred_schema is None and len(args) >= 2:
                schema_arg = args[1]
                if isinstance(schema_arg, type) and issubclass(schema_arg, BaseModel):
                    inferred_schema = schema_arg

        if not hasattr(cls, 'model') and inferred_model is not None:
            cls.model = cast(type[TModel], inferred_model)

        if getattr(cls, 'mapping_schema', None) is None and inferred_schema is not None:
            cls.mapping_schema = cast(type[TSchema], inferred_schema)

        if getattr(cls, 'mapping_schema', None) is not None:
            validate_schema_base(cast(type[BaseModel], cls.mapping_schema))
            cls._default_convert_schema = True

    def __init__(
        self,
        session: Annotated[
            AsyncSession | None,
            Doc('AsyncSession bound to this repository (request-scoped). Optional with a SessionProvider.'),
        ] = None,
        *,
        settings: Annotated[Settings | None, Doc('Overrides the class-level paging settings.')] = None,
        default_convert_schema: Annotated[
            bool | None,
            Doc('Default return type when the caller does not pass convert_schema. None uses the class default.'),
        ] = None,
    ):
        """
        Raises
        ------
        - TypeError: when required `mapping_schema` fields are not model columns.
        - ValueError: when `default_convert_schema=True` but no schema is configured.
        """
        self._specific_session = session
        self.entity_schema = EntitySchema.from_model(self.model)
        self.paginator: CursorPaginator[TModel] = CursorPaginator(settings or self.settings)

        if self.mapping_schema is not None:
            validate_schema_fields(cast(type[BaseModel], self.mapping_schema), self.entity_schema)

        if default_convert_schema is not None:
            if default_convert_schema and self.mapping_schema is None:
                raise ValueError('default_convert_schema=True is not allowed without mapping_schema.')
            self._default_convert_schema = default_convert_schema

    @classmethod
    def configure_session_provider(cls, provider: SessionProvider | None) -> None:
        cls._session_provider = provider

    @property
    def session(self) -> AsyncSession:
        if self._session_provider is None:
            if self._specific_session is None:
                raise RuntimeError('Neither SessionProvider nor a repository session is configured.')
            return self._specific_session

        return self._session_provider.get_session()

    def _resolve_session(self, session: AsyncSession | None) -> AsyncSession:
        return session if session is not None else self.session

    def _convert(self, row: Any, *, convert_schema: bool | None = None) -> Any:
        """ORM → schema (Pydantic `model_validate`), when enabled for this call."""
        effective = self._default_convert_schema if convert_schema is None else convert_schema
        schema = self.mapping_schema
        if not effective or row is None or schema is None:
            return row
        return cast(type[BaseModel], schema).model_validate(row)

    def list(
        self,
        where: Annotated[WhereInput | None, Doc('Initial WHERE filter (optional).')] = None,
    ) -> Annotated[ListQuery[TModel], Doc('ListQuery DSL entrypoint (where/order_by/first/last).')]:
        """
        Start a chained query.

        Example
        -------
        >>> q = repo.list(where={'blog_id': {'eq': 1}}).order_by(['-post_id']).first(10)
        >>> page = await repo.paginate(q)
        """
        return ListQuery[TModel](self.model, where=where)

    async def paginate(
        self,
        q: Annotated[ListQuery[TModel], Doc('The query to run as one page.')],
        *,
        session: Annotated[AsyncSession | None, Doc('Session to use for execution (optional).')] = None,
        convert_schema: Annotated[bool | None, Doc('Per-call schema conversion flag. None uses default.')] = None,
    ) -> Annotated[Page[Any], Doc('Edges, page info and optional total count.')]:
        """
        Run `q` as one cursor page. A query without first()/last() gets the default page size.
        """
        s = self._resolve_session(session)
        page = await self.paginator.paginate(s, q)
        return page.map(lambda row: self._convert(row, convert_schema=convert_schema))

    async def get_page(
        self,
        *,
        where: Annotated[WhereInput | None, Doc('WHERE filter (optional).')] = None,
        order_by: Annotated[Sequence[Any] | None, Doc('Ordering (optional). See OrderByStrategy.')] = None,
        first: Annotated[int | None, Doc('Forward page size.')] = None,
        after: Annotated[str | None, Doc('Cursor to continue forward from.')] = None,
        last: Annotated[int | None, Doc('Backward page size.')] = None,
        before: Annotated[str | None, Doc('Cursor to continue backward from.')] = None,
        with_total_count: Annotated[bool, Doc('Also count all rows matching the filter.')] = False,
        session: Annotated[AsyncSession | None, Doc('Session to use for execution (optional).')] = None,
        convert_schema: Annotated[bool | None, Doc('Per-call schema conversion flag.')] = None,
    ) -> Page[Any]:
        """
        Convenience method: builds a ListQuery from connection arguments and runs it.
        """
        q = self.list(where).order_by(order_by).connection(first=first, after=after, last=last, before=before)
        q.with_total_count(with_total_count)
        return await self.paginate(q, session=session, convert_schema=convert_schema)

    async def execute(
        self,
        q_or_stmt: Annotated[QueryOrStmt[TModel], Doc('Unpaged ListQuery or SQLAlchemy Select.')],
        *,
        session: Annotated[AsyncSession | None, Doc('Session to use for execution (optional).')] = None,
        convert_schema: Annotated[bool | None, Doc('Per-call schema conversion flag. None uses default.')] = None,
    ) -> builtins.list[Any]:
        """
        Execute an unpaged `ListQuery` or a Select and return every row.
        Paged queries (first()/last()) must go through `paginate()`.
        """
        if isinstance(q_or_stmt, ListQuery) and q_or_stmt.mode is not PagingMode.NONE:
            raise ValueError('Paged ListQuery must be run with paginate().')
        stmt = query_to_stmt(q_or_stmt)
        s = self._resolve_session(session)
        result = await s.execute(stmt)
        return [self._convert(r, convert_schema=convert_schema) for r in result.scalars()]

    async def get(
        self,
        where: Annotated[WhereInput, Doc('WHERE filter for single-row lookup.')],
        *,
        convert_schema: Annotated[bool | None, Doc('Per-call schema conversion flag.')] = None,
        session: Annotated[AsyncSession | None, Doc('Session to use for execution (optional).')] = None,
    ) -> Annotated[Any | None, Doc('Returns ORM/schema object if found, otherwise None.')]:
        """
        Get a single row. Returns the first matching row in primary-key order.
        """
        stmt = query_to_stmt(self.list(where)).limit(1)
        rows = await self.execute(stmt, session=session, convert_schema=convert_schema)
        return rows[0] if rows else None

    async def count(
        self,
        where: Annotated[WhereInput | None, Doc('WHERE filter for aggregation (optional).')] = None,
        *,
        session: Annotated[AsyncSession | None, Doc('Session to use for execution (optional).')] = None,
    ) -> Annotated[int, Doc('Number of rows matching the condition.')]:
        s = self._resolve_session(session)
        stmt = select(func.count()).select_from(self.model)
        pred = PredicateStrategy.apply(self.entity_schema, self.list(where).filter)
        if pred is not None:
            stmt = stmt.where(pred)
        res = await s.execute(stmt)
        return res.scalar_one()
