from .keyset import KeysetStrategy
from .order_by import OrderByStrategy, SortField
from .predicate import PredicateStrategy

__all__ = ['KeysetStrategy', 'OrderByStrategy', 'PredicateStrategy', 'SortField']
