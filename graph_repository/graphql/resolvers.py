"""
Shared resolver for paged, filterable, sortable entity sets.
"""

from collections.abc import Callable
from typing import Any, TypeVar

import strawberry
from strawberry.types.nodes import FragmentSpread, InlineFragment, SelectedField

from graph_repository.exceptions import QueryError
from graph_repository.logging import get_logger
from graph_repository.repository import BaseRepository
from graph_repository.session_provider import session_scope

from .connection import Connection
from .errors import to_graphql_error
from .inputs import filter_to_mapping, sort_to_items

logger = get_logger(__name__)

T = TypeVar('T')


def selects_field(info: strawberry.Info, name: str) -> bool:
    """True when the current field's selection set asks for `name` (fragments included)."""

    def _walk(selections: list[Any]) -> bool:
        for sel in selections:
            if isinstance(sel, SelectedField) and sel.name == name:
                return True
            if isinstance(sel, (FragmentSpread, InlineFragment)) and _walk(sel.selections):
                return True
        return False

    return any(_walk(field.selections) for field in info.selected_fields)


async def resolve_connection(
    info: strawberry.Info,
    repo_type: type[BaseRepository[Any, Any]],
    to_node: Callable[[Any], T],
    *,
    first: int | None = None,
    after: str | None = None,
    last: int | None = None,
    before: str | None = None,
    where: Any = None,
    order: list[Any] | None = None,
) -> Connection[T]:
    """Resolve one entity set as a connection.

    The context must carry `session_factory` (an `async_sessionmaker`) and may carry `settings`.
    A session is opened for this field only and closed before returning.
    """
    context = info.context
    settings = context.get('settings')
    with_total_count = selects_field(info, 'totalCount')
    if settings is not None and not settings.include_total_count:
        with_total_count = False

    try:
        async with session_scope(context['session_factory']) as session:
            repo = repo_type(session, settings=settings)
            page = await repo.get_page(
                where=filter_to_mapping(where),
                order_by=sort_to_items(order),
                first=first,
                after=after,
                last=last,
                before=before,
                with_total_count=with_total_count,
            )
    except QueryError as e:
        raise to_graphql_error(e) from e

    logger.debug('connection resolved', field=info.field_name, returned=len(page))
    return Connection.from_page(page, to_node)
