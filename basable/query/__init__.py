"""查询构建模块"""

from .filter import Filter, FilterChain, FilterOperator, Combinator, OperatorKind
from .query import BasableQuery, QueryCommand, QueryOrder, OrderDirection, TableSearchOpts
from .compiler import QueryCompiler

__all__ = [
    "Filter",
    "FilterChain",
    "FilterOperator",
    "Combinator",
    "OperatorKind",
    "BasableQuery",
    "QueryCommand",
    "QueryOrder",
    "OrderDirection",
    "TableSearchOpts",
    "QueryCompiler",
]
