"""
图表查询的执行

VisualizeDB 作为混入类使用，宿主类需要提供 connector 属性和 generate_sql 方法。
"""
from typing import TYPE_CHECKING, Callable, List

from loguru import logger

from .base import AnalysisResult, AnalysisResults, AnalysisValue, row_value
from .category import COUNT_COLUMN, CategoryGraphOpts
from .chrono import BASIS_VALUE_COLUMN, RESULT_COLUMN, ChronoAnalysisBasis, ChronoAnalysisOpts
from .geo import GeoGraphOpts
from .trend import TrendAnalysisOpts, TrendAnalysisType

if TYPE_CHECKING:
    from ..db.connector import Connector, Row
    from ..query import BasableQuery


class VisualizeDB:
    """图表分析"""

    connector: 'Connector'
    generate_sql: Callable[['BasableQuery'], str]

    def _run_graph(self, name: str, query: 'BasableQuery') -> List['Row']:
        sql = self.generate_sql(query)
        rows = self.connector.exec_query(sql)
        logger.debug(f"{name} graph on {query.table} returned {len(rows)} rows")
        return rows

    def chrono_graph(self, opts: ChronoAnalysisOpts) -> AnalysisResults:
        """日分桶的 x 为日期，月/年分桶的 x 为整数"""
        rows = self._run_graph("chrono", opts.to_query())

        results = []
        for row in rows:
            raw_x = row_value(row, BASIS_VALUE_COLUMN)
            if opts.basis == ChronoAnalysisBasis.DAILY:
                x = AnalysisValue.day(raw_x)
            else:
                x = AnalysisValue.uint(raw_x)
            y = AnalysisValue.uint(row_value(row, RESULT_COLUMN))
            results.append(AnalysisResult(x, y))

        return results

    def trend_graph(self, opts: TrendAnalysisOpts) -> AnalysisResults:
        rows = self._run_graph("trend", opts.to_query())

        results = []
        for row in rows:
            x = AnalysisValue.text(row_value(row, opts.xcol))
            raw_y = row_value(row, opts.ycol)
            if opts.analysis_type == TrendAnalysisType.INTRA_MODEL:
                y = AnalysisValue.null() if raw_y is None else AnalysisValue.double(raw_y)
            else:
                y = AnalysisValue.uint(raw_y)
            results.append(AnalysisResult(x, y))

        return results

    def category_graph(self, opts: CategoryGraphOpts) -> AnalysisResults:
        rows = self._run_graph("category", opts.to_query())
        return [
            AnalysisResult(
                AnalysisValue.uint(row_value(row, COUNT_COLUMN)),
                AnalysisValue.from_raw(row.get(opts.target_col)),
            )
            for row in rows
        ]

    def geo_graph(self, opts: GeoGraphOpts) -> AnalysisResults:
        rows = self._run_graph("geo", opts.to_query())
        return [
            AnalysisResult(
                AnalysisValue.uint(row_value(row, COUNT_COLUMN)),
                AnalysisValue.from_raw(row.get(opts.target_column)),
            )
            for row in rows
        ]
