from __future__ import annotations

from graph_repository.repository import BaseRepository

from .models import Blog, Post
from .schemas import BlogSchema, PostSchema


class BlogRepository(BaseRepository[Blog, BlogSchema]):
    pass


class PostRepository(BaseRepository[Post, PostSchema]):
    pass
