from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Annotated, Any

from typing_extensions import Doc

from graph_repository.enums import FilterOperator
from graph_repository.query.filter_expr import And, Condition, FilterExpression, is_sequence_value


class BaseRepoFilter:
    """
    A helper base class that turns a dataclass of optional values into a FilterExpression.

    How to use
    ----------
    1. Inherit from this class and declare it as a dataclass.
       Example:
           @dataclass
           class PostFilter(BaseRepoFilter):
               post_id: int | Sequence[int] | None = None
               blog_id: int | None = None

    2. `to_expression()` builds an AND of one Condition per set field:
       - None         → no condition generated
       - sequence     → `in` (an empty sequence matches nothing)
       - other scalar → `eq`

       Examples:
        post_id=1            → Condition('post_id', 'eq', 1)
        post_id=[1, 2, 3]    → Condition('post_id', 'in', [1, 2, 3])

    The expression is validated like any client filter when the query is built: a field that does
    not exist on the model raises InvalidFilterError.

    Mapping rules
    -------------
    - Field names map to model attribute names.
    - If they differ, declare `__aliases__` in the subclass:
          class PostFilter(BaseRepoFilter):
              __aliases__ = {'blog': 'blog_id'}  # field blog → column blog_id
    """

    __aliases__: Annotated[
        dict[str, str],
        Doc(
            'A mapping dict for field name → column name.\n'
            "Example: {'blog': 'blog_id'} maps the 'blog' field to the model's 'blog_id' column."
        ),
    ] = {}

    @classmethod
    def _resolve_column_name(
        cls,
        field_name: Annotated[str, Doc('Dataclass field name.')],
    ) -> Annotated[str, Doc('Resolved column name to use for mapping.')]:
        return cls.__aliases__.get(field_name, field_name)

    def to_expression(self) -> Annotated[FilterExpression | None, Doc('None when no field is set.')]:
        """
        Raises
        ------
        TypeError
            If `self` is not a dataclass.
        """
        if not is_dataclass(self):
            raise TypeError('BaseRepoFilter must be used with a dataclass.')

        parts: list[FilterExpression] = []
        for f in fields(self):
            val = getattr(self, f.name)
            if val is None:
                continue

            name = self._resolve_column_name(f.name)
            if is_sequence_value(val):
                parts.append(Condition(name, FilterOperator.IN, list(val)))
            else:
                parts.append(Condition(name, FilterOperator.EQ, val))

        if not parts:
            return None
        return parts[0] if len(parts) == 1 else And(*parts)
