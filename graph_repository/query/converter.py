from __future__ import annotations

from sqlalchemy import Select

from graph_repository.repo_types import QueryOrStmt, TModel

from .list_query import ListQuery, _build_list_query


def query_to_stmt(
    q_or_stmt: QueryOrStmt[TModel],
) -> Select[tuple[TModel]]:
    if isinstance(q_or_stmt, ListQuery):
        return _build_list_query(q_or_stmt)

    # A SQLAlchemy Select is passed through as-is.
    if isinstance(q_or_stmt, Select):
        return q_or_stmt

    raise TypeError(f'Unsupported query/statement type: {type(q_or_stmt)}')
