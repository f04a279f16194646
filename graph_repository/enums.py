from enum import Enum


class SortDirection(str, Enum):
    ASC = 'asc'
    DESC = 'desc'

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value: object) -> 'SortDirection':
        if isinstance(value, SortDirection):
            return value
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise ValueError(f'Unsupported sort direction: {value!r}')

    def reversed(self) -> 'SortDirection':
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class NullsOrder(str, Enum):
    FIRST = 'first'
    LAST = 'last'

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value: object) -> 'NullsOrder':
        if isinstance(value, NullsOrder):
            return value
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise ValueError(f'Unsupported nulls order: {value!r}')

    @classmethod
    def default_for(cls, direction: SortDirection) -> 'NullsOrder':
        # NULL sorts as the largest value.
        return cls.LAST if direction is SortDirection.ASC else cls.FIRST

    def reversed(self) -> 'NullsOrder':
        return NullsOrder.FIRST if self is NullsOrder.LAST else NullsOrder.LAST


class FilterOperator(str, Enum):
    EQ = 'eq'
    NEQ = 'neq'
    IN = 'in'
    NIN = 'nin'
    GT = 'gt'
    NGT = 'ngt'
    GTE = 'gte'
    NGTE = 'ngte'
    LT = 'lt'
    NLT = 'nlt'
    LTE = 'lte'
    NLTE = 'nlte'
    CONTAINS = 'contains'
    NCONTAINS = 'ncontains'
    STARTS_WITH = 'starts_with'
    NSTARTS_WITH = 'nstarts_with'
    ENDS_WITH = 'ends_with'
    NENDS_WITH = 'nends_with'

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value: object) -> 'FilterOperator':
        if isinstance(value, FilterOperator):
            return value
        if isinstance(value, str):
            key = _CAMEL_ALIASES.get(value, value)
            try:
                return cls(key)
            except ValueError:
                pass
        raise ValueError(f'Unsupported filter operator: {value!r}')

    @property
    def is_string(self) -> bool:
        return self in _STRING_OPS

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISON_OPS

    @property
    def is_list(self) -> bool:
        return self in (FilterOperator.IN, FilterOperator.NIN)


_STRING_OPS = frozenset(
    {
        FilterOperator.CONTAINS,
        FilterOperator.NCONTAINS,
        FilterOperator.STARTS_WITH,
        FilterOperator.NSTARTS_WITH,
        FilterOperator.ENDS_WITH,
        FilterOperator.NENDS_WITH,
    }
)

_COMPARISON_OPS = frozenset(
    {
        FilterOperator.GT,
        FilterOperator.NGT,
        FilterOperator.GTE,
        FilterOperator.NGTE,
        FilterOperator.LT,
        FilterOperator.NLT,
        FilterOperator.LTE,
        FilterOperator.NLTE,
    }
)

# GraphQL clients send camelCase operator names.
_CAMEL_ALIASES = {
    'startsWith': 'starts_with',
    'nstartsWith': 'nstarts_with',
    'endsWith': 'ends_with',
    'nendsWith': 'nends_with',
}


class PagingMode(Enum):
    """
    Paging direction of a ListQuery.

    - NONE     : no paging arguments were given (the paginator applies the default page size)
    - FORWARD  : first N [after cursor]
    - BACKWARD : last N [before cursor]
    """

    NONE = 'none'
    FORWARD = 'forward'
    BACKWARD = 'backward'
