from __future__ import annotations

from typing import Any, TypeVar

from litestar.params import Parameter
from pydantic import BaseModel, Field

from graph_repository.query.list_query import ListQuery

T = TypeVar('T', bound=ListQuery[Any])


class ConnectionArgs(BaseModel):
    first: int | None = Field(default=None, description='Forward page size')
    after: str | None = Field(default=None, description='Cursor to continue forward from')
    last: int | None = Field(default=None, description='Backward page size')
    before: str | None = Field(default=None, description='Cursor to continue backward from')


def provide_connection_args(
    first: int | None = Parameter(default=None, query='first', description='Forward page size'),
    after: str | None = Parameter(default=None, query='after', description='Cursor to continue forward from'),
    last: int | None = Parameter(default=None, query='last', description='Backward page size'),
    before: str | None = Parameter(default=None, query='before', description='Cursor to continue backward from'),
) -> ConnectionArgs:
    return ConnectionArgs(first=first, after=after, last=last, before=before)


def apply_connection_args(q: T, args: ConnectionArgs) -> T:
    """
    Apply connection arguments to the ListQuery.

    Range checks (negative sizes, first + last, mismatched cursors) are left to the query itself
    so HTTP and GraphQL callers fail with the same error codes.
    """
    q.connection(first=args.first, after=args.after, last=args.last, before=args.before)
    return q
