import sys
from typing import TYPE_CHECKING, Any, TypeAlias

from pydantic import BaseModel
from sqlalchemy import Select
from sqlalchemy.orm import DeclarativeBase

if sys.version_info >= (3, 13):
    from typing import TypeVar
else:
    from typing_extensions import TypeVar

if TYPE_CHECKING:
    from graph_repository.query.list_query import ListQuery


class NoSchema:
    """Typing-only sentinel. Never used as a real mapping schema."""

    pass


TModel = TypeVar('TModel', bound=DeclarativeBase)
TSchema = TypeVar('TSchema', bound=BaseModel | NoSchema, default=NoSchema)
TNode = TypeVar('TNode', default=Any)


QueryOrStmt: TypeAlias = 'ListQuery[TModel] | Select[tuple[TModel]]'
