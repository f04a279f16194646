"""
< Translate a FilterExpression tree into a SQLAlchemy WHERE expression >
1. Every leaf is validated against the entity's field schema before any SQL is built:
   unknown fields, unknown operators, operators that do not fit the field type and values that
   cannot be coerced to the field type all raise `InvalidFilterError`.
2. The result is a SQL expression tree. Nothing is evaluated in Python, so OR branches are left
   to the database.
3. Constant branches are folded: a `false()` child collapses an AND chain, a `true()` child
   collapses an OR chain (an empty `in` list is `false()`, an empty `nin` list is `true()`).
4. Negated operators keep NULL rows: on a nullable field `neq 'x'` matches `NULL` as well.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement, False_, True_

from graph_repository.enums import FilterOperator
from graph_repository.exceptions import InvalidFilterError
from graph_repository.field_schema import EntitySchema, FieldSpec
from graph_repository.query.filter_expr import And, Condition, FilterExpression, Or, is_sequence_value

_Builder = Callable[[Any, Any], ColumnElement[bool]]

_POSITIVE: dict[FilterOperator, _Builder] = {
    FilterOperator.GT: lambda col, v: col > v,
    FilterOperator.GTE: lambda col, v: col >= v,
    FilterOperator.LT: lambda col, v: col < v,
    FilterOperator.LTE: lambda col, v: col <= v,
    FilterOperator.CONTAINS: lambda col, v: col.contains(v, autoescape=True),
    FilterOperator.STARTS_WITH: lambda col, v: col.startswith(v, autoescape=True),
    FilterOperator.ENDS_WITH: lambda col, v: col.endswith(v, autoescape=True),
}

_NEGATED: dict[FilterOperator, FilterOperator] = {
    FilterOperator.NGT: FilterOperator.GT,
    FilterOperator.NGTE: FilterOperator.GTE,
    FilterOperator.NLT: FilterOperator.LT,
    FilterOperator.NLTE: FilterOperator.LTE,
    FilterOperator.NCONTAINS: FilterOperator.CONTAINS,
    FilterOperator.NSTARTS_WITH: FilterOperator.STARTS_WITH,
    FilterOperator.NENDS_WITH: FilterOperator.ENDS_WITH,
}


class PredicateStrategy:
    @staticmethod
    def apply(schema: EntitySchema, expr: FilterExpression | None) -> ColumnElement[bool] | None:
        """
        Build the WHERE expression for `expr`.

        Returns
        -------
        ColumnElement[bool] | None
            None when there is nothing to filter (no expression, or it folds to `true()`).

        Raises
        ------
        InvalidFilterError
            If any leaf of the tree is invalid for `schema`.
        """
        if expr is None:
            return None
        clause = PredicateStrategy._build(schema, expr)
        if isinstance(clause, True_):
            return None
        return clause

    @staticmethod
    def _build(schema: EntitySchema, expr: FilterExpression) -> ColumnElement[bool]:
        if isinstance(expr, Condition):
            return PredicateStrategy._condition(schema, expr)
        if isinstance(expr, And):
            return PredicateStrategy._fold_and([PredicateStrategy._build(schema, e) for e in expr.items])
        if isinstance(expr, Or):
            return PredicateStrategy._fold_or([PredicateStrategy._build(schema, e) for e in expr.items])
        raise InvalidFilterError(f'Unsupported filter node: {expr!r}')

    @staticmethod
    def _fold_and(clauses: list[ColumnElement[bool]]) -> ColumnElement[bool]:
        kept: list[ColumnElement[bool]] = []
        for c in clauses:
            if isinstance(c, False_):
                return false()
            if isinstance(c, True_):
                continue
            kept.append(c)
        if not kept:
            return true()
        return kept[0] if len(kept) == 1 else and_(*kept)

    @staticmethod
    def _fold_or(clauses: list[ColumnElement[bool]]) -> ColumnElement[bool]:
        kept: list[ColumnElement[bool]] = []
        for c in clauses:
            if isinstance(c, True_):
                return true()
            if isinstance(c, False_):
                continue
            kept.append(c)
        if not kept:
            return false()
        return kept[0] if len(kept) == 1 else or_(*kept)

    @staticmethod
    def _resolve(schema: EntitySchema, cond: Condition) -> tuple[FieldSpec, FilterOperator]:
        field = schema.get(cond.field)
        if field is None:
            raise InvalidFilterError(f"Model {schema.name} does not have a field '{cond.field}'.", field=cond.field)

        try:
            op = FilterOperator.parse(cond.op)
        except ValueError as e:
            raise InvalidFilterError(str(e), field=cond.field, operator=str(cond.op)) from e

        if op.is_string and not field.is_string:
            raise InvalidFilterError(
                f"Operator '{op}' is only valid for string fields; '{field.name}' is not a string.",
                field=field.name,
                operator=str(op),
            )
        if op.is_comparison and not field.is_comparable:
            raise InvalidFilterError(
                f"Operator '{op}' is only valid for numeric or temporal fields; '{field.name}' is not.",
                field=field.name,
                operator=str(op),
            )
        return field, op

    @staticmethod
    def _coerce(field: FieldSpec, op: FilterOperator, value: Any) -> Any:
        try:
            return field.coerce(value)
        except (TypeError, ValueError) as e:
            raise InvalidFilterError(
                f"Invalid value for '{field.name}' ({op}): {e}", field=field.name, operator=str(op)
            ) from e

    @staticmethod
    def _condition(schema: EntitySchema, cond: Condition) -> ColumnElement[bool]:
        field, op = PredicateStrategy._resolve(schema, cond)
        col = field.attribute
        value = cond.value

        if op.is_list:
            if not is_sequence_value(value):
                raise InvalidFilterError(f"Operator '{op}' expects a list.", field=field.name, operator=str(op))
            if any(v is None for v in value):
                raise InvalidFilterError(
                    f"Operator '{op}' does not accept null items.", field=field.name, operator=str(op)
                )
            values = [PredicateStrategy._coerce(field, op, v) for v in value]
            if op is FilterOperator.IN:
                return col.in_(values) if values else false()
            if not values:
                return true()
            return PredicateStrategy._keep_nulls(field, col.not_in(values))

        if value is None:
            if op is FilterOperator.EQ:
                return col.is_(None)
            if op is FilterOperator.NEQ:
                return col.is_not(None)
            raise InvalidFilterError(f"Operator '{op}' does not accept null.", field=field.name, operator=str(op))

        v = PredicateStrategy._coerce(field, op, value)

        if op is FilterOperator.EQ:
            # bool values use IS to keep NULL/True/False distinct
            return col.is_(v) if isinstance(v, bool) else col == v
        if op is FilterOperator.NEQ:
            return PredicateStrategy._keep_nulls(field, col.is_not(v) if isinstance(v, bool) else col != v)

        if op in _POSITIVE:
            return _POSITIVE[op](col, v)

        base = _NEGATED[op]
        return PredicateStrategy._keep_nulls(field, ~_POSITIVE[base](col, v))

    @staticmethod
    def _keep_nulls(field: FieldSpec, clause: ColumnElement[bool]) -> ColumnElement[bool]:
        if not field.nullable:
            return clause
        return or_(clause, field.attribute.is_(None))
