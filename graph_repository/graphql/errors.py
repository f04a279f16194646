"""
Error mapping between the query layer and GraphQL responses.
"""

from graphql import GraphQLError

from graph_repository.exceptions import QueryError

GENERIC_ERROR_MESSAGE = 'Unexpected execution error.'


def to_graphql_error(error: QueryError) -> GraphQLError:
    """Client input errors keep their message and expose the code under `extensions.code`."""
    extensions = {'code': error.code}
    if error.details:
        extensions['details'] = dict(error.details)
    return GraphQLError(error.message, extensions=extensions, original_error=error)


def should_mask_error(error: GraphQLError) -> bool:
    """Mask everything that is not a GraphQL or client-input error (database failures, bugs)."""
    original = error.original_error
    if original is None:
        return False
    return not isinstance(original, (GraphQLError, QueryError))
