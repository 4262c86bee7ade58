"""
时间序列分析：按日/月/年分桶统计行数
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from ..query import BasableQuery, Filter, FilterChain, FilterOperator, QueryCommand, QueryOrder
from .base import require_params

BASIS_VALUE_COLUMN = "BASABLE_CHRONO_BASIS_VALUE"
RESULT_COLUMN = "BASABLE_CHRONO_RESULT"


class ChronoAnalysisBasis(Enum):
    """值为 MySQL 的分桶函数名"""
    DAILY = "Date"
    MONTHLY = "Month"
    YEARLY = "Year"

    @staticmethod
    def parse(value: str) -> 'ChronoAnalysisBasis':
        """接受函数名 (Date/Month/Year) 或 daily/monthly/yearly"""
        for basis in ChronoAnalysisBasis:
            if value.lower() in (basis.value.lower(), basis.name.lower()):
                return basis
        raise ValueError(f"error parsing analysis basis: {value}")


@dataclass
class ChronoAnalysisRange:
    start: str
    end: str

    @staticmethod
    def parse(value: str) -> 'ChronoAnalysisRange':
        """格式为 "start - end"，日期本身可以包含连字符"""
        parts = value.split(" - ")
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise ValueError(f"error parsing analysis range: {value}")
        return ChronoAnalysisRange(parts[0].strip(), parts[1].strip())

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


@dataclass
class ChronoAnalysisOpts:
    table: str
    chrono_col: str
    basis: ChronoAnalysisBasis
    range: ChronoAnalysisRange

    @staticmethod
    def from_query_params(params: Dict[str, str]) -> 'ChronoAnalysisOpts':
        table, column, basis, range_ = require_params(params, "table", "column", "basis", "range")
        return ChronoAnalysisOpts(
            table=table,
            chrono_col=column,
            basis=ChronoAnalysisBasis.parse(basis),
            range=ChronoAnalysisRange.parse(range_),
        )

    def bucket(self) -> str:
        return f"{self.basis.value}({self.chrono_col})"

    def to_query(self) -> BasableQuery:
        filters = FilterChain.empty()
        filters.add_one(Filter.base(
            self.chrono_col,
            FilterOperator.between(self.range.start, self.range.end),
        ))

        return BasableQuery(
            table=self.table,
            command=QueryCommand.select_data([
                f"{self.bucket()} as {BASIS_VALUE_COLUMN}",
                f"COUNT(*) as {RESULT_COLUMN}",
            ]),
            filters=filters,
            group_by=[self.bucket()],
            order_by=QueryOrder.asc(BASIS_VALUE_COLUMN),
        )
