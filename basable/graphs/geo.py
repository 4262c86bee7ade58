"""
地理分布统计
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from ..query import BasableQuery, QueryCommand
from .base import require_params
from .category import COUNT_COLUMN


class GeoGraphScope(Enum):
    GLOBAL = "global"
    CONTINENTAL = "continental"
    NATIONAL = "national"
    REGIONAL = "regional"

    @staticmethod
    def parse(value: str) -> 'GeoGraphScope':
        for scope in GeoGraphScope:
            if scope.value == value:
                return scope

        scopes = ", ".join(scope.value for scope in GeoGraphScope)
        raise ValueError(f"Not a valid geo scope. Acceptable options are: {scopes}.")


@dataclass
class GeoGraphOpts:
    table: str
    scope: GeoGraphScope
    target_column: str

    @staticmethod
    def from_query_params(params: Dict[str, str]) -> 'GeoGraphOpts':
        table, scope, target_column = require_params(params, "table", "scope", "target_column")
        return GeoGraphOpts(table, GeoGraphScope.parse(scope), target_column)

    def to_query(self) -> BasableQuery:
        return BasableQuery(
            table=self.table,
            command=QueryCommand.select_data([f"COUNT(*) as {COUNT_COLUMN}", self.target_column]),
            group_by=[self.target_column],
        )
