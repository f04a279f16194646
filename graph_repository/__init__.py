from .base_filter import BaseRepoFilter
from .config import Settings, get_settings
from .enums import FilterOperator, NullsOrder, SortDirection
from .exceptions import *
from .query.filter_expr import And, Condition, Or, parse_filter
from .query.list_query import ListQuery
from .query.page import Edge, Page, PageInfo
from .query.strategies import SortField
from .repo_types import *
from .repository import BaseRepository
from .session_provider import SessionProvider, session_scope

__all__ = [
    # base_filter
    'BaseRepoFilter',
    # config
    'Settings',
    'get_settings',
    # enums
    'FilterOperator',
    'NullsOrder',
    'SortDirection',
    # exceptions
    'QueryError',
    'InvalidFilterError',
    'InvalidSortError',
    'InvalidCursorError',
    'InvalidPageSizeError',
    # query
    'And',
    'Condition',
    'Or',
    'parse_filter',
    'ListQuery',
    'SortField',
    'Edge',
    'Page',
    'PageInfo',
    # session_provider
    'SessionProvider',
    'session_scope',
    # base_repo
    'BaseRepository',
    # repo_types
    'TModel',
    'TSchema',
    'QueryOrStmt',
]


__version__ = '0.1.0'
