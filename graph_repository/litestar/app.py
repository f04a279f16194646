"""
Litestar application serving the blogging GraphQL API.
"""

from __future__ import annotations

from typing import Any

from litestar import Litestar, Request, Response, get
from litestar.di import Provide
from litestar.status_codes import HTTP_400_BAD_REQUEST
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from strawberry.litestar import make_graphql_controller

from graph_repository.blogging.queries import schema
from graph_repository.blogging.repositories import BlogRepository, PostRepository
from graph_repository.config import Settings, get_settings
from graph_repository.exceptions import QueryError
from graph_repository.logging import configure_logging, get_logger
from graph_repository.query.page import Page
from graph_repository.session_provider import create_engine, create_session_factory

from .pagination import ConnectionArgs, apply_connection_args, provide_connection_args
from .repository import provide_repo, provide_session

logger = get_logger(__name__)


def _page_to_dict(page: Page[Any]) -> dict[str, Any]:
    info = page.page_info
    return {
        'edges': [{'cursor': e.cursor, 'node': e.node.model_dump()} for e in page.edges],
        'page_info': {
            'has_next_page': info.has_next_page,
            'has_previous_page': info.has_previous_page,
            'start_cursor': info.start_cursor,
            'end_cursor': info.end_cursor,
        },
        'total_count': page.total_count,
    }


@get('/blogs', dependencies={'repo': Provide(provide_repo(BlogRepository))})
async def list_blogs(repo: BlogRepository, args: ConnectionArgs) -> dict[str, Any]:
    q = apply_connection_args(repo.list().order_by(['blog_id']), args)
    return _page_to_dict(await repo.paginate(q))


@get('/posts', dependencies={'repo': Provide(provide_repo(PostRepository))})
async def list_posts(repo: PostRepository, args: ConnectionArgs, blog_id: int | None = None) -> dict[str, Any]:
    where = {'blog_id': {'eq': blog_id}} if blog_id is not None else None
    q = apply_connection_args(repo.list(where).order_by(['post_id']), args)
    return _page_to_dict(await repo.paginate(q))


def query_error_handler(request: Request[Any, Any, Any], exc: QueryError) -> Response[dict[str, Any]]:
    logger.info('request rejected', path=request.url.path, code=exc.code, reason=exc.message)
    return Response(content=exc.to_dict(), status_code=HTTP_400_BAD_REQUEST)


def create_app(
    settings: Settings | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> Litestar:
    """
    Build the application.

    Without a `session_factory` an engine is created from `settings.database_url` and
    disposed on shutdown. A caller-supplied factory is left for the caller to close.
    """
    settings = settings or get_settings()
    engine: AsyncEngine | None = None
    if session_factory is None:
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)

    async def get_context() -> dict[str, Any]:
        return {'session_factory': session_factory, 'settings': settings}

    GraphQLController = make_graphql_controller(schema, path='/graphql', context_getter=get_context)

    def on_startup(app: Litestar) -> None:
        configure_logging(debug=settings.debug, level=settings.log_level)
        app.state.session_factory = session_factory
        app.state.settings = settings
        logger.info('application started', debug=settings.debug)

    async def on_shutdown(app: Litestar) -> None:
        if engine is not None:
            await engine.dispose()
        logger.info('application stopped')

    return Litestar(
        route_handlers=[GraphQLController, list_blogs, list_posts],
        dependencies={
            'session': Provide(provide_session),
            'args': Provide(provide_connection_args, sync_to_thread=False),
        },
        exception_handlers={QueryError: query_error_handler},
        on_startup=[on_startup],
        on_shutdown=[on_shutdown],
        debug=settings.debug,
    )
