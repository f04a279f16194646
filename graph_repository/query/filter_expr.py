"""
< Filter expression tree >
A filter is a tree of `Condition(field, op, value)` leaves joined by `And(...)` / `Or(...)`.
The tree is plain data: it is validated and translated into SQL by `PredicateStrategy`.

`parse_filter()` accepts the mapping shape GraphQL filter inputs arrive in:

>>> parse_filter({'name': {'eq': 'b'}, 'or': [{'id': {'lt': 2}}, {'id': {'gt': 5}}]})
And(Condition('name', 'eq', 'b'), Or(Condition('id', 'lt', 2), Condition('id', 'gt', 5)))

Several operators on one field, or several fields in one mapping, are AND-ed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from collections.abc import Set as ABCSet
from dataclasses import dataclass
from typing import Any, TypeAlias

from graph_repository.enums import FilterOperator
from graph_repository.exceptions import InvalidFilterError
from graph_repository.field_schema import dump_value

AND_KEY = 'and'
OR_KEY = 'or'


@dataclass(frozen=True)
class Condition:
    field: str
    op: FilterOperator | str
    value: Any = None

    def __repr__(self) -> str:
        return f'Condition({self.field!r}, {str(self.op)!r}, {self.value!r})'


@dataclass(frozen=True, init=False, repr=False)
class And:
    items: tuple[FilterExpression, ...]

    def __init__(self, *items: FilterExpression) -> None:
        object.__setattr__(self, 'items', tuple(items))

    def __repr__(self) -> str:
        return f'And({", ".join(map(repr, self.items))})'


@dataclass(frozen=True, init=False, repr=False)
class Or:
    items: tuple[FilterExpression, ...]

    def __init__(self, *items: FilterExpression) -> None:
        object.__setattr__(self, 'items', tuple(items))

    def __repr__(self) -> str:
        return f'Or({", ".join(map(repr, self.items))})'


FilterExpression: TypeAlias = Condition | And | Or


def is_sequence_value(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (Sequence, ABCSet))


def parse_filter(data: Mapping[str, Any] | None) -> FilterExpression | None:
    """
    Parse a GraphQL-shaped filter mapping into a FilterExpression.

    Raises
    ------
    InvalidFilterError
        If the mapping is malformed or names an unknown operator.
    """
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise InvalidFilterError(f'Filter must be a mapping, got {type(data).__name__}.')

    parts: list[FilterExpression] = []
    for key, value in data.items():
        if key in (AND_KEY, OR_KEY):
            if isinstance(value, Mapping) or not is_sequence_value(value):
                raise InvalidFilterError(f"'{key}' expects a list of filters.", field=key)
            children = [c for c in (parse_filter(v) for v in value) if c is not None]
            if not children:
                continue
            parts.append(And(*children) if key == AND_KEY else Or(*children))
            continue

        if not isinstance(value, Mapping):
            raise InvalidFilterError(f"Filter for '{key}' must map operators to values.", field=key)
        for op_name, operand in value.items():
            try:
                op = FilterOperator.parse(op_name)
            except ValueError as e:
                raise InvalidFilterError(str(e), field=key, operator=op_name) from e
            parts.append(Condition(key, op, operand))

    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return And(*parts)


def canonical(expr: FilterExpression | None) -> Any:
    """A JSON-serializable, order-preserving form of the tree (used for cursor fingerprints)."""
    if expr is None:
        return None
    if isinstance(expr, Condition):
        value: Any = expr.value
        if isinstance(value, ABCSet):
            value = sorted(value, key=repr)
        value = [dump_value(v) for v in value] if is_sequence_value(value) else dump_value(value)
        return [str(expr.op), expr.field, value]
    tag = AND_KEY if isinstance(expr, And) else OR_KEY
    return [tag, [canonical(c) for c in expr.items]]
