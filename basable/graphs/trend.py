"""
趋势分析

单表模式直接读取 (xcol, ycol)；跨表模式 LEFT JOIN 外表，
统计每个 xcol 在外表中被引用的次数。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from ..errors import MissingParameterError
from ..query import BasableQuery, Filter, FilterChain, FilterOperator, OrderDirection, QueryCommand, QueryOrder
from .base import parse_limit, require_params

DEFAULT_TREND_LIMIT = 50


class TrendAnalysisType(Enum):
    INTRA_MODEL = "intra"
    CROSS_MODEL = "cross"

    @staticmethod
    def parse(value: str) -> 'TrendAnalysisType':
        normalized = value.replace("_", "").replace("-", "").lower()
        for kind in TrendAnalysisType:
            if normalized in (kind.value, kind.value + "model"):
                return kind
        raise ValueError(f"error parsing trend analysis type: {value}")


@dataclass
class CrossOptions:
    # 要关联的外表
    foreign_table: str
    # 主表中被外表 ycol 引用的列
    target_col: str


@dataclass
class TrendAnalysisOpts:
    table: str
    analysis_type: TrendAnalysisType
    xcol: str
    ycol: str
    order: OrderDirection = OrderDirection.DESC
    limit: int = DEFAULT_TREND_LIMIT
    cross: Optional[CrossOptions] = None

    @staticmethod
    def from_query_params(params: Dict[str, str]) -> 'TrendAnalysisOpts':
        table, analysis_type, xcol, ycol = require_params(params, "table", "analysis_type", "xcol", "ycol")

        cross = None
        if params.get("foreign_table") and params.get("target_col"):
            cross = CrossOptions(params["foreign_table"], params["target_col"])

        return TrendAnalysisOpts(
            table=table,
            analysis_type=TrendAnalysisType.parse(analysis_type),
            xcol=xcol,
            ycol=ycol,
            order=OrderDirection(params.get("order", "DESC").upper()),
            limit=parse_limit(params, DEFAULT_TREND_LIMIT),
            cross=cross,
        )

    def _order(self) -> QueryOrder:
        return QueryOrder(self.ycol, self.order)

    def to_query(self) -> BasableQuery:
        """
        Raises:
            MissingParameterError: 跨表模式没有提供 cross 选项
        """
        if self.analysis_type == TrendAnalysisType.INTRA_MODEL:
            return BasableQuery(
                table=self.table,
                command=QueryCommand.select_data([self.xcol, self.ycol]),
                order_by=self._order(),
                row_count=self.limit,
            )

        if self.cross is None:
            raise MissingParameterError("You must provide cross model options.")

        having = FilterChain.empty()
        having.add_one(Filter.base(self.ycol, FilterOperator.gt("0")))

        return BasableQuery(
            table=self.table,
            table_alias="x",
            command=QueryCommand.select_data([
                f"x.{self.xcol} AS {self.xcol}",
                f"COUNT(y.{self.ycol}) AS {self.ycol}",
            ]),
            left_join=f"{self.cross.foreign_table} y ON x.{self.cross.target_col} = y.{self.ycol}",
            group_by=[self.xcol],
            having=having,
            order_by=self._order(),
            row_count=self.limit,
        )
