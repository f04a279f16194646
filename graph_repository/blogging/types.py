"""
Blog / Post GraphQL types, filter inputs and sort inputs
"""

from typing import Optional

import strawberry

from graph_repository.graphql.inputs import (
    IntOperationFilterInput,
    SortEnumType,
    StringOperationFilterInput,
)

from .schemas import BlogSchema, PostSchema


@strawberry.type(name='Blog')
class BlogType:
    """Blog type for GraphQL API."""

    blog_id: int
    url: str

    @classmethod
    def from_schema(cls, blog: BlogSchema) -> 'BlogType':
        return cls(blog_id=blog.blog_id, url=blog.url)


@strawberry.type(name='Post')
class PostType:
    """Post type for GraphQL API."""

    post_id: int
    title: str
    content: str | None
    blog_id: int

    @classmethod
    def from_schema(cls, post: PostSchema) -> 'PostType':
        return cls(post_id=post.post_id, title=post.title, content=post.content, blog_id=post.blog_id)


@strawberry.input
class BlogFilterInput:
    and_: Optional[list['BlogFilterInput']] = strawberry.field(name='and', default=strawberry.UNSET)
    or_: Optional[list['BlogFilterInput']] = strawberry.field(name='or', default=strawberry.UNSET)
    blog_id: IntOperationFilterInput | None = strawberry.UNSET
    url: StringOperationFilterInput | None = strawberry.UNSET


@strawberry.input
class PostFilterInput:
    and_: Optional[list['PostFilterInput']] = strawberry.field(name='and', default=strawberry.UNSET)
    or_: Optional[list['PostFilterInput']] = strawberry.field(name='or', default=strawberry.UNSET)
    post_id: IntOperationFilterInput | None = strawberry.UNSET
    title: StringOperationFilterInput | None = strawberry.UNSET
    content: StringOperationFilterInput | None = strawberry.UNSET
    blog_id: IntOperationFilterInput | None = strawberry.UNSET


@strawberry.input
class BlogSortInput:
    blog_id: SortEnumType | None = strawberry.UNSET
    url: SortEnumType | None = strawberry.UNSET


@strawberry.input
class PostSortInput:
    post_id: SortEnumType | None = strawberry.UNSET
    title: SortEnumType | None = strawberry.UNSET
    content: SortEnumType | None = strawberry.UNSET
    blog_id: SortEnumType | None = strawberry.UNSET
