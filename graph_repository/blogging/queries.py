"""
Root GraphQL query definitions for the blogging entity sets
"""

import strawberry
from strawberry.extensions import MaskErrors

from graph_repository.graphql.connection import Connection
from graph_repository.graphql.errors import GENERIC_ERROR_MESSAGE, should_mask_error
from graph_repository.graphql.resolvers import resolve_connection

from .repositories import BlogRepository, PostRepository
from .types import BlogFilterInput, BlogSortInput, BlogType, PostFilterInput, PostSortInput, PostType


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def blogs(
        self,
        info: strawberry.Info,
        first: int | None = None,
        after: str | None = None,
        last: int | None = None,
        before: str | None = None,
        where: BlogFilterInput | None = None,
        order: list[BlogSortInput] | None = None,
    ) -> Connection[BlogType]:
        """Blogs with cursor paging, filtering and sorting."""
        return await resolve_connection(
            info,
            BlogRepository,
            BlogType.from_schema,
            first=first,
            after=after,
            last=last,
            before=before,
            where=where,
            order=order,
        )

    @strawberry.field
    async def posts(
        self,
        info: strawberry.Info,
        first: int | None = None,
        after: str | None = None,
        last: int | None = None,
        before: str | None = None,
        where: PostFilterInput | None = None,
        order: list[PostSortInput] | None = None,
    ) -> Connection[PostType]:
        """Posts with cursor paging, filtering and sorting."""
        return await resolve_connection(
            info,
            PostRepository,
            PostType.from_schema,
            first=first,
            after=after,
            last=last,
            before=before,
            where=where,
            order=order,
        )


schema = strawberry.Schema(
    query=Query,
    extensions=[MaskErrors(should_mask_error=should_mask_error, error_message=GENERIC_ERROR_MESSAGE)],
)
