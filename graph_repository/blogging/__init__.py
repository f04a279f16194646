from .models import Base, Blog, Post
from .repositories import BlogRepository, PostRepository
from .schemas import BlogSchema, PostSchema

__all__ = [
    'Base',
    'Blog',
    'Post',
    'BlogRepository',
    'PostRepository',
    'BlogSchema',
    'PostSchema',
]
