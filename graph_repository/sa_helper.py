from typing import Any, cast

from sqlalchemy import Column, UniqueConstraint, inspect
from sqlalchemy.orm import Mapper
from sqlalchemy.types import NullType


def sa_mapper(model: type[Any]) -> Mapper[Any]:
    return cast(Mapper[Any], inspect(model))


def column_python_type(col: Column[Any]) -> type[Any] | None:
    """Python type of a column, or None when the SQL type does not declare one."""
    # NullType reports `object` on newer SQLAlchemy releases and raises on older ones
    if isinstance(col.type, NullType):
        return None
    try:
        return cast(type[Any], col.type.python_type)
    except NotImplementedError:
        return None


def is_unique_column(col: Column[Any], pk_cols: list[Column[Any]]) -> bool:
    """
    True when the column alone identifies a row:
    a single-column primary key, `unique=True`, or a single-column unique constraint/index.
    """
    if col.primary_key and len(pk_cols) == 1:
        return True
    if col.unique:
        return True

    table = getattr(col, 'table', None)
    if table is None:
        return False
    for cons in getattr(table, 'constraints', ()):
        if isinstance(cons, UniqueConstraint) and [c.key for c in cons.columns] == [col.key]:
            return True
    for idx in getattr(table, 'indexes', ()):
        if idx.unique and [c.key for c in idx.columns] == [col.key]:
            return True
    return False
