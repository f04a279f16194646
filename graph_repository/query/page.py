from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic

from graph_repository.repo_types import TNode


@dataclass(frozen=True)
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None = None
    end_cursor: str | None = None


@dataclass(frozen=True)
class Edge(Generic[TNode]):
    node: TNode
    cursor: str


@dataclass(frozen=True)
class Page(Generic[TNode]):
    """One window of results plus navigation metadata."""

    edges: list[Edge[TNode]] = field(default_factory=list)
    page_info: PageInfo = field(default_factory=lambda: PageInfo(has_next_page=False, has_previous_page=False))
    total_count: int | None = None

    @property
    def nodes(self) -> list[TNode]:
        return [e.node for e in self.edges]

    def __len__(self) -> int:
        return len(self.edges)

    def map(self, fn: Callable[[TNode], Any]) -> Page[Any]:
        """Same page with every node passed through `fn` (cursors are kept)."""
        return replace(self, edges=[Edge(node=fn(e.node), cursor=e.cursor) for e in self.edges])
