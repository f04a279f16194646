"""
Reusable GraphQL filter / sort inputs and their conversion into query inputs.

Entity filter inputs are declared per entity, with one `<Type>OperationFilterInput` field per
column plus `and` / `or` lists. They are converted into the mapping form accepted by
`parse_filter()`; sort inputs become `{field: 'asc' | 'desc'}` mappings for `OrderByStrategy`.
"""

import dataclasses
from enum import Enum
from typing import Any

import strawberry

from graph_repository.exceptions import InvalidSortError


@strawberry.enum
class SortEnumType(Enum):
    ASC = 'asc'
    DESC = 'desc'


@strawberry.input
class IntOperationFilterInput:
    eq: int | None = strawberry.UNSET
    neq: int | None = strawberry.UNSET
    in_: list[int] | None = strawberry.field(name='in', default=strawberry.UNSET)
    nin: list[int] | None = strawberry.UNSET
    gt: int | None = strawberry.UNSET
    ngt: int | None = strawberry.UNSET
    gte: int | None = strawberry.UNSET
    ngte: int | None = strawberry.UNSET
    lt: int | None = strawberry.UNSET
    nlt: int | None = strawberry.UNSET
    lte: int | None = strawberry.UNSET
    nlte: int | None = strawberry.UNSET


@strawberry.input
class StringOperationFilterInput:
    eq: str | None = strawberry.UNSET
    neq: str | None = strawberry.UNSET
    in_: list[str] | None = strawberry.field(name='in', default=strawberry.UNSET)
    nin: list[str] | None = strawberry.UNSET
    contains: str | None = strawberry.UNSET
    ncontains: str | None = strawberry.UNSET
    starts_with: str | None = strawberry.UNSET
    nstarts_with: str | None = strawberry.UNSET
    ends_with: str | None = strawberry.UNSET
    nends_with: str | None = strawberry.UNSET


def _python_key(name: str) -> str:
    # `in_`, `and_`, `or_` avoid Python keywords
    return name.rstrip('_')


def _is_set(value: Any) -> bool:
    return value is not strawberry.UNSET


def operations_to_mapping(ops: Any) -> dict[str, Any]:
    """`StringOperationFilterInput(eq="b")` -> `{"eq": "b"}`. An explicit null is kept (IS NULL)."""
    out: dict[str, Any] = {}
    for f in dataclasses.fields(ops):
        value = getattr(ops, f.name)
        if _is_set(value):
            out[_python_key(f.name)] = value
    return out


def filter_to_mapping(flt: Any) -> dict[str, Any] | None:
    """Convert an entity filter input (with nested `and` / `or`) into a `parse_filter()` mapping."""
    if flt is None or not _is_set(flt):
        return None

    out: dict[str, Any] = {}
    for f in dataclasses.fields(flt):
        value = getattr(flt, f.name)
        if value is None or not _is_set(value):
            continue
        key = _python_key(f.name)
        if key in ('and', 'or'):
            out[key] = [m for m in (filter_to_mapping(item) for item in value) if m is not None]
        else:
            out[key] = operations_to_mapping(value)
    return out


def sort_to_items(order: list[Any] | None) -> list[dict[str, str]] | None:
    """
    Convert a list of entity sort inputs into `{field: direction}` mappings, keeping list order.

    Each sort object names exactly one field; `[{title: DESC}, {postId: ASC}]` orders by title
    first. An object setting several fields has no defined order and raises `InvalidSortError`.
    """
    if order is None or not _is_set(order):
        return None

    items: list[dict[str, str]] = []
    for entry in order:
        mapping: dict[str, str] = {}
        for f in dataclasses.fields(entry):
            value = getattr(entry, f.name)
            if value is None or not _is_set(value):
                continue
            mapping[_python_key(f.name)] = value.value
        if len(mapping) > 1:
            raise InvalidSortError(
                f'A sort input must set exactly one field, got {sorted(mapping)}.', fields=sorted(mapping)
            )
        if mapping:
            items.append(mapping)
    return items
