from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import TypeVar

from litestar.datastructures import State
from sqlalchemy.ext.asyncio import AsyncSession

from graph_repository.repository.base_repo import BaseRepository
from graph_repository.session_provider import session_scope

T = TypeVar('T', bound=BaseRepository)


async def provide_session(state: State) -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session taken from `app.state.session_factory`.

    Rolled back when the handler raises, always closed once the response is produced.
    """
    async with session_scope(state.session_factory) as session:
        yield session


def provide_repo(repo_type: type[T]) -> Callable[[AsyncSession, State], Awaitable[T]]:
    """
    Create a dependency provider for a specific Repository type.

    The repository is bound to the request session and to `app.state.settings` when the
    application sets it (see `create_app`); otherwise it uses the process-wide settings.

    Usage:
        app = Litestar(
            dependencies={
                'session': Provide(provide_session),
                'post_repo': Provide(provide_repo(PostRepository)),
            }
        )
    """

    async def _provide_repo(session: AsyncSession, state: State) -> T:
        return repo_type(session=session, settings=state.get('settings'))

    return _provide_repo
