"""
Connection types returned by paged GraphQL fields.

`Connection[Blog]` is exposed as `BlogConnection { edges { cursor node } nodes pageInfo totalCount }`.
"""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

import strawberry

from graph_repository.query.page import Page

T = TypeVar('T')


@strawberry.type(name='PageInfo')
class PageInfoType:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None
    end_cursor: str | None


@strawberry.type
class Edge(Generic[T]):
    cursor: str
    node: T


@strawberry.type
class Connection(Generic[T]):
    edges: list[Edge[T]]
    nodes: list[T]
    page_info: PageInfoType
    total_count: int | None

    @classmethod
    def from_page(cls, page: Page[Any], to_node: Callable[[Any], T]) -> 'Connection[T]':
        edges = [Edge(cursor=e.cursor, node=to_node(e.node)) for e in page.edges]
        info = page.page_info
        return cls(
            edges=edges,
            nodes=[e.node for e in edges],
            page_info=PageInfoType(
                has_next_page=info.has_next_page,
                has_previous_page=info.has_previous_page,
                start_cursor=info.start_cursor,
                end_cursor=info.end_cursor,
            ),
            total_count=page.total_count,
        )
