"""
分类统计：按目标列分组计数
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from ..query import BasableQuery, QueryCommand
from .base import parse_limit, require_params

COUNT_COLUMN = "COUNT"
DEFAULT_CATEGORY_LIMIT = 20


class CategoryGraphType(Enum):
    SIMPLE = "simple"
    MANY_TO_MANY = "many_to_many"
    MANUAL = "manual"


@dataclass
class CategoryGraphOpts:
    table: str
    target_col: str
    graph_type: CategoryGraphType = CategoryGraphType.SIMPLE
    limit: int = DEFAULT_CATEGORY_LIMIT

    @staticmethod
    def from_query_params(params: Dict[str, str]) -> 'CategoryGraphOpts':
        table, target_col = require_params(params, "table", "target_col")
        return CategoryGraphOpts(
            table=table,
            target_col=target_col,
            graph_type=CategoryGraphType(params.get("graph_type", "simple").lower()),
            limit=parse_limit(params, DEFAULT_CATEGORY_LIMIT),
        )

    def to_query(self) -> BasableQuery:
        return BasableQuery(
            table=self.table,
            command=QueryCommand.select_data([f"COUNT(*) as {COUNT_COLUMN}", self.target_col]),
            group_by=[self.target_col],
            row_count=self.limit,
        )
