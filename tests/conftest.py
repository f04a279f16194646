from __future__ import annotations

import datetime as dt
from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from graph_repository.blogging.models import Base as BloggingBase
from graph_repository.blogging.models import Blog, Post
from graph_repository.config import Settings
from graph_repository.session_provider import create_session_factory

from .models import Article, Base, Item, Status


@pytest.fixture
def settings() -> Settings:
    return Settings(default_page_size=10, max_page_size=50)


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """One in-memory SQLite database per test, shared by every connection of the engine."""
    engine = create_async_engine(
        'sqlite+aiosqlite://',
        poolclass=StaticPool,
        connect_args={'check_same_thread': False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(BloggingBase.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def items(session: AsyncSession) -> list[Item]:
    """Items 1..3 named a, b, c."""
    rows = [Item(id=1, name='a'), Item(id=2, name='b'), Item(id=3, name='c')]
    session.add_all(rows)
    await session.commit()
    return rows


@pytest_asyncio.fixture
async def articles(session: AsyncSession) -> list[Article]:
    """Five articles; `score` is NULL for ids 2 and 4 and ties (10) for ids 1 and 5."""
    t0 = dt.datetime(2024, 1, 1, 12, 0, 0)
    rows = [
        Article(id=1, slug='one', title='Intro to SQL', subtitle=None, score=10, price=Decimal('9.99'),
                published_at=t0, is_featured=True, status=Status.PUBLISHED),
        Article(id=2, slug='two', title='Advanced SQL', subtitle='joins', score=None, price=None,
                published_at=t0 + dt.timedelta(days=1), is_featured=False, status=Status.PUBLISHED),
        Article(id=3, slug='three', title='100% coverage', subtitle='tests', score=30, price=Decimal('0.50'),
                published_at=None, is_featured=False, status=Status.DRAFT),
        Article(id=4, slug='four', title='Cursor paging', subtitle=None, score=None, price=Decimal('15.00'),
                published_at=t0 + dt.timedelta(days=3), is_featured=True, status=Status.DRAFT),
        Article(id=5, slug='five', title='Keyset intro', subtitle='seek', score=10, price=None,
                published_at=t0 + dt.timedelta(days=2), is_featured=False, status=Status.PUBLISHED),
    ]
    session.add_all(rows)
    await session.commit()
    return rows


@pytest_asyncio.fixture
async def blogging(session: AsyncSession) -> None:
    """Three blogs; blog 1 has posts 1..3, blog 2 has posts 4..5, blog 3 has none."""
    session.add_all(
        [
            Blog(blog_id=1, url='https://a.example/blog'),
            Blog(blog_id=2, url='https://b.example/blog'),
            Blog(blog_id=3, url='https://c.example/notes'),
        ]
    )
    session.add_all(
        [
            Post(post_id=1, title='Hello', content='first post', blog_id=1),
            Post(post_id=2, title='GraphQL paging', content=None, blog_id=1),
            Post(post_id=3, title='Keyset', content='seek method', blog_id=1),
            Post(post_id=4, title='Hello again', content='x', blog_id=2),
            Post(post_id=5, title='Zebra', content=None, blog_id=2),
        ]
    )
    await session.commit()
