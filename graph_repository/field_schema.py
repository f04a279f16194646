"""
< Field schema registry >
Describes the fields of an ORM model that may be referenced by filters, sorts and cursors.

For every column attribute of the model it records:
- the attribute key (the name clients use),
- the Python type declared by the SQL type (if any),
- nullability,
- uniqueness (single-column PK / unique column / single-column unique constraint).

`FieldSpec.coerce()` turns JSON-level input (numbers, strings, ISO timestamps) into the
field's Python type. Both PredicateStrategy and CursorCodec go through it, so a
value is accepted or rejected the same way wherever it comes from.
"""

from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from sqlalchemy.orm import InstrumentedAttribute

from graph_repository.sa_helper import column_python_type, is_unique_column, sa_mapper

_TEMPORAL_TYPES: tuple[type[Any], ...] = (dt.datetime, dt.date, dt.time, dt.timedelta)
_NUMERIC_TYPES: tuple[type[Any], ...] = (int, float, Decimal)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    python_type: type[Any] | None
    nullable: bool
    unique: bool
    attribute: InstrumentedAttribute[Any]

    @property
    def is_string(self) -> bool:
        return self.python_type is not None and issubclass(self.python_type, str) and not self.is_enum

    @property
    def is_enum(self) -> bool:
        return self.python_type is not None and issubclass(self.python_type, Enum)

    @property
    def is_comparable(self) -> bool:
        t = self.python_type
        if t is None or t is bool:
            return False
        return issubclass(t, _NUMERIC_TYPES + _TEMPORAL_TYPES)

    @property
    def is_key(self) -> bool:
        """Unique and never NULL: safe as the last tie-break of a total order."""
        return self.unique and not self.nullable

    def coerce(self, value: Any) -> Any:
        """
        Convert `value` to this field's Python type.

        Raises
        ------
        TypeError / ValueError
            If the value cannot represent this field.
        """
        if value is None:
            if not self.nullable:
                raise ValueError(f"'{self.name}' is not nullable.")
            return None

        t = self.python_type
        if t is None:
            return value

        if t is bool:
            if isinstance(value, bool):
                return value
            raise TypeError(f"'{self.name}' expects bool, got {type(value).__name__}.")

        # bool is an int subclass; never let True/False stand in for a number.
        if isinstance(value, bool):
            raise TypeError(f"'{self.name}' expects {t.__name__}, got bool.")

        if isinstance(value, t) and not (t is dt.date and isinstance(value, dt.datetime)):
            return value

        if t is int:
            if isinstance(value, float) and value.is_integer():
                return int(value)
            raise TypeError(f"'{self.name}' expects int, got {type(value).__name__}.")

        if t is float:
            if isinstance(value, (int, Decimal)):
                return float(value)
            raise TypeError(f"'{self.name}' expects float, got {type(value).__name__}.")

        if t is Decimal:
            if isinstance(value, (int, float, str)):
                try:
                    return Decimal(str(value))
                except InvalidOperation as e:
                    raise ValueError(f"'{self.name}' expects a decimal, got {value!r}.") from e
            raise TypeError(f"'{self.name}' expects a decimal, got {type(value).__name__}.")

        if t in (dt.datetime, dt.date, dt.time):
            if isinstance(value, str):
                return t.fromisoformat(value)
            if t is dt.date and isinstance(value, dt.datetime):
                return value.date()
            raise TypeError(f"'{self.name}' expects an ISO {t.__name__} string.")

        if t is dt.timedelta and isinstance(value, (int, float)):
            return dt.timedelta(seconds=value)

        if t is uuid.UUID and isinstance(value, str):
            return uuid.UUID(value)

        if issubclass(t, Enum):
            return t(value)

        if t is str:
            raise TypeError(f"'{self.name}' expects str, got {type(value).__name__}.")

        return t(value)


def dump_value(value: Any) -> Any:
    """JSON-safe representation of a field value. `FieldSpec.coerce()` reverses it."""
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, dt.timedelta):
        return value.total_seconds()
    if isinstance(value, (Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True)
class EntitySchema:
    model: type[Any]
    fields: Mapping[str, FieldSpec]
    primary_key: tuple[str, ...]

    @classmethod
    def from_model(cls, model: type[Any]) -> EntitySchema:
        mapper = sa_mapper(model)
        pk_cols = list(mapper.primary_key)
        key_by_column: dict[int, str] = {}
        out: dict[str, FieldSpec] = {}

        for prop in mapper.column_attrs:
            col = prop.columns[0]
            nullable = bool(getattr(col, 'nullable', True)) and not getattr(col, 'primary_key', False)
            out[prop.key] = FieldSpec(
                name=prop.key,
                python_type=column_python_type(col),
                nullable=nullable,
                unique=is_unique_column(col, pk_cols),
                attribute=getattr(model, prop.key),
            )
            key_by_column[id(col)] = prop.key

        # Keep the mapper's primary-key column order.
        pk = tuple(key_by_column[id(c)] for c in pk_cols if id(c) in key_by_column)
        if len(pk) != len(pk_cols):
            raise ValueError(f'Primary key of {model.__name__} is not fully mapped to column attributes.')

        return cls(model=model, fields=out, primary_key=pk)

    @property
    def name(self) -> str:
        return self.model.__name__

    def get(self, name: str) -> FieldSpec | None:
        return self.fields.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.fields
