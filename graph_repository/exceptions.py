from __future__ import annotations

from typing import Any, ClassVar

__all__ = [
    'QueryError',
    'InvalidFilterError',
    'InvalidSortError',
    'InvalidCursorError',
    'InvalidPageSizeError',
]


class QueryError(ValueError):
    """
    Base class for client-input validation failures.

    Every subclass carries a machine-readable ``code`` next to the human-readable
    message. These errors are raised before any statement reaches the database and
    are never retried.
    """

    code: ClassVar[str] = 'INVALID_QUERY'

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {'code': self.code, 'message': self.message}
        if self.details:
            out['details'] = dict(self.details)
        return out


class InvalidFilterError(QueryError):
    """Unknown field, unknown operator, or an operator/value that does not fit the field type."""

    code = 'INVALID_FILTER'


class InvalidSortError(QueryError):
    """Unknown sort field or unsupported ordering input."""

    code = 'INVALID_SORT'


class InvalidCursorError(QueryError):
    """Malformed cursor, or a cursor replayed under a different filter or sort."""

    code = 'INVALID_CURSOR'


class InvalidPageSizeError(QueryError):
    """Negative page size, a size above the configured maximum, or conflicting size arguments."""

    code = 'INVALID_PAGE_SIZE'
