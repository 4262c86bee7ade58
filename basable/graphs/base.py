"""
图表分析的公共类型
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple

from ..errors import MissingParameterError


class AnalysisKind(Enum):
    NULL = "NULL"
    UINT = "UInt"
    INT = "Int"
    TEXT = "Text"
    DATE = "Date"
    FLOAT = "Float"
    DOUBLE = "Double"


@dataclass(frozen=True)
class AnalysisValue:
    """分析结果中的单个值"""
    kind: AnalysisKind
    value: Any = None

    @classmethod
    def null(cls) -> 'AnalysisValue':
        return cls(AnalysisKind.NULL)

    @classmethod
    def uint(cls, value: Any) -> 'AnalysisValue':
        value = int(value)
        if value < 0:
            raise ValueError(f"negative value for unsigned analysis value: {value}")
        return cls(AnalysisKind.UINT, value)

    @classmethod
    def integer(cls, value: Any) -> 'AnalysisValue':
        return cls(AnalysisKind.INT, int(value))

    @classmethod
    def text(cls, value: Any) -> 'AnalysisValue':
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return cls(AnalysisKind.TEXT, str(value))

    @classmethod
    def day(cls, value: date) -> 'AnalysisValue':
        if isinstance(value, datetime):
            value = value.date()
        return cls(AnalysisKind.DATE, value)

    @classmethod
    def double(cls, value: Any) -> 'AnalysisValue':
        return cls(AnalysisKind.DOUBLE, float(value))

    @classmethod
    def from_raw(cls, raw: Any) -> 'AnalysisValue':
        """按驱动返回值的类型推断"""
        if raw is None:
            return cls.null()
        if isinstance(raw, bool):
            return cls.integer(raw)
        if isinstance(raw, int):
            return cls.uint(raw) if raw >= 0 else cls.integer(raw)
        if isinstance(raw, float):
            return cls.double(raw)
        if isinstance(raw, Decimal):
            return cls.double(raw)
        if isinstance(raw, (datetime, date)):
            return cls.day(raw)
        return cls.text(raw)

    def to_python(self) -> Any:
        if self.kind == AnalysisKind.DATE:
            return self.value.isoformat()
        return self.value

    def __str__(self) -> str:
        if self.kind == AnalysisKind.NULL:
            return "null"
        return str(self.to_python())


@dataclass(frozen=True)
class AnalysisResult:
    """(x, y) 数据点"""
    x: AnalysisValue
    y: AnalysisValue

    def to_list(self) -> List[Any]:
        return [self.x.to_python(), self.y.to_python()]

    def __str__(self) -> str:
        return f"{{x: {self.x}, y: {self.y}}}"


AnalysisResults = List[AnalysisResult]


def require_params(params: Mapping[str, str], *names: str) -> Tuple[str, ...]:
    """读取必填参数，缺少任一参数时报错"""
    missing = [name for name in names if not params.get(name)]
    if missing:
        raise MissingParameterError(f"Missing required parameter: {', '.join(missing)}")
    return tuple(params[name] for name in names)


def parse_limit(params: Dict[str, str], default: int) -> int:
    value = params.get("limit")
    if value is None or value == "":
        return default
    try:
        limit = int(value)
    except ValueError:
        raise ValueError(f"limit must be an integer: {value}")
    if limit < 0:
        raise ValueError(f"limit must not be negative: {limit}")
    return limit


def row_value(row: Mapping[str, Any], key: str) -> Any:
    """
    Raises:
        KeyError: 结果行中缺少图表查询选择的列
    """
    if key not in row:
        raise KeyError(f"graph row is missing column {key!r}")
    return row[key]
