from .connection import Connection, Edge, PageInfoType
from .errors import GENERIC_ERROR_MESSAGE, should_mask_error, to_graphql_error
from .inputs import (
    IntOperationFilterInput,
    SortEnumType,
    StringOperationFilterInput,
    filter_to_mapping,
    sort_to_items,
)
from .resolvers import resolve_connection, selects_field

__all__ = [
    'Connection',
    'Edge',
    'PageInfoType',
    'GENERIC_ERROR_MESSAGE',
    'should_mask_error',
    'to_graphql_error',
    'IntOperationFilterInput',
    'SortEnumType',
    'StringOperationFilterInput',
    'filter_to_mapping',
    'sort_to_items',
    'resolve_connection',
    'selects_field',
]
