from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic

from sqlalchemy.ext.asyncio import AsyncSession

from graph_repository.config import Settings, get_settings
from graph_repository.enums import PagingMode
from graph_repository.exceptions import QueryError
from graph_repository.logging import get_logger
from graph_repository.query.list_query import ListQuery, PagePlan, build_page_plan
from graph_repository.query.page import Edge, Page, PageInfo
from graph_repository.repo_types import TModel

logger = get_logger(__name__)


class CursorPaginator(Generic[TModel]):
    """
    Runs a ListQuery as one cursor page.

    1. `plan()`    : validate + build SQL (pure, no I/O)
    2. `paginate()`: execute the page statement (and COUNT when requested) on the given session
    3. `build_page()`: trim the extra row, restore order for backward paging, encode cursors (pure)

    The session is only borrowed: acquiring and releasing it belongs to the caller.
    Database errors propagate unchanged.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def plan(self, q: ListQuery[TModel]) -> PagePlan[TModel]:
        try:
            plan = build_page_plan(q, self.settings)
        except QueryError as e:
            logger.info('query rejected', entity=q.model.__name__, code=e.code, reason=e.message)
            raise
        logger.debug(
            'page planned',
            entity=q.model.__name__,
            mode=plan.mode.value,
            size=plan.size,
            sort=[sf.canonical() for sf in plan.sort_fields],
            has_cursor=plan.has_cursor,
        )
        return plan

    async def paginate(self, session: AsyncSession, q: ListQuery[TModel]) -> Page[TModel]:
        plan = self.plan(q)

        result = await session.execute(plan.statement)
        rows: list[TModel] = list(result.scalars())

        total: int | None = None
        if plan.count_statement is not None:
            total = (await session.execute(plan.count_statement)).scalar_one()

        page = self.build_page(plan, rows, total_count=total)
        logger.debug(
            'page fetched',
            entity=plan.schema.name,
            returned=len(page),
            has_next_page=page.page_info.has_next_page,
            has_previous_page=page.page_info.has_previous_page,
        )
        return page

    @staticmethod
    def build_page(plan: PagePlan[Any], rows: Sequence[Any], *, total_count: int | None = None) -> Page[Any]:
        """
        Package fetched rows (at most `plan.fetch_size`, in walk order) as a Page.

        - FORWARD : the extra row means `has_next_page`; `has_previous_page` is set when a cursor was given.
        - BACKWARD: the extra row means `has_previous_page`; rows come back reversed and are flipped
          into sort order; `has_next_page` is set when a cursor was given.
        """
        has_more = len(rows) > plan.size
        window = list(rows[: plan.size])

        if plan.mode is PagingMode.BACKWARD:
            window.reverse()
            has_next, has_previous = plan.has_cursor, has_more
        else:
            has_next, has_previous = has_more, plan.has_cursor

        edges = [Edge(node=row, cursor=plan.encode_cursor(row)) for row in window]
        info = PageInfo(
            has_next_page=has_next,
            has_previous_page=has_previous,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        )
        return Page(edges=edges, page_info=info, total_count=total_count)
