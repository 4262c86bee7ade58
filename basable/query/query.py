"""
查询描述对象
"""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum

from .filter import FilterChain


class CommandKind(Enum):
    """查询命令类型"""
    SELECT_DATA = "select_data"


@dataclass
class QueryCommand:
    """查询命令，columns 为空时选择全部列"""
    kind: CommandKind = CommandKind.SELECT_DATA
    columns: Optional[List[str]] = None

    @classmethod
    def select_data(cls, columns: Optional[List[str]] = None) -> 'QueryCommand':
        return cls(CommandKind.SELECT_DATA, list(columns) if columns else None)


class OrderDirection(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass
class QueryOrder:
    """排序"""
    column: str
    direction: OrderDirection = OrderDirection.ASC

    @classmethod
    def asc(cls, column: str) -> 'QueryOrder':
        return cls(column, OrderDirection.ASC)

    @classmethod
    def desc(cls, column: str) -> 'QueryOrder':
        return cls(column, OrderDirection.DESC)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QueryOrder':
        """支持 {"ASC": "name"} 或 {"column": "name", "direction": "DESC"} 两种形式"""
        if "column" in data:
            direction = OrderDirection(str(data.get("direction", "ASC")).upper())
            return cls(data["column"], direction)

        if len(data) != 1:
            raise ValueError("order must hold exactly one direction")
        direction, column = next(iter(data.items()))
        return cls(column, OrderDirection(direction.upper()))

    def render(self) -> str:
        return f"`{self.column}` {self.direction.value}"

    def __str__(self) -> str:
        return self.render()


@dataclass
class TableSearchOpts:
    """全文搜索选项"""
    search_cols: List[str]
    query: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TableSearchOpts':
        cols = data.get("search_cols") or []
        if isinstance(cols, str):
            cols = [c for c in cols.split(",") if c]
        return cls(search_cols=list(cols), query=str(data.get("query", "")))


@dataclass
class BasableQuery:
    """一次查询的声明式描述"""
    table: str = ""
    command: QueryCommand = field(default_factory=QueryCommand)
    filters: FilterChain = field(default_factory=FilterChain)
    row_count: Optional[int] = None
    offset: Optional[int] = None
    order_by: Optional[QueryOrder] = None
    group_by: Optional[List[str]] = None
    left_join: Optional[str] = None
    having: FilterChain = field(default_factory=FilterChain)
    search_opts: Optional[TableSearchOpts] = None
    table_alias: Optional[str] = None

    def is_search_mode(self) -> bool:
        return self.search_opts is not None
