"""类型转换辅助函数"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from .types import ColumnValue, INT64_MAX


Row = Dict[str, Any]


def to_column_value(raw: Any) -> ColumnValue:
    """
    把驱动返回的值转换为 ColumnValue

    Args:
        raw: pymysql 返回的 Python 值

    Returns:
        ColumnValue，整数和时间类型不丢失精度
    """
    if raw is None:
        return ColumnValue.null()

    if isinstance(raw, bool):
        return ColumnValue.integer(int(raw))

    if isinstance(raw, int):
        # 超出有符号 64 位范围的只可能来自 UNSIGNED BIGINT
        if raw > INT64_MAX:
            return ColumnValue.unsigned(raw)
        return ColumnValue.integer(raw)

    if isinstance(raw, float):
        return ColumnValue.double(raw)

    if isinstance(raw, Decimal):
        # DECIMAL 保留原始文本，避免精度损失
        return ColumnValue.text(str(raw))

    if isinstance(raw, datetime):
        return ColumnValue.date(raw.year, raw.month, raw.day, raw.hour,
                                raw.minute, raw.second, raw.microsecond)

    if isinstance(raw, date):
        return ColumnValue.date(raw.year, raw.month, raw.day)

    if isinstance(raw, timedelta):
        return _timedelta_value(raw)

    if isinstance(raw, time):
        return ColumnValue.time(False, 0, raw.hour, raw.minute, raw.second, raw.microsecond)

    if isinstance(raw, (bytes, bytearray)):
        try:
            return ColumnValue.text(bytes(raw).decode("utf-8"))
        except UnicodeDecodeError:
            return ColumnValue.text(bytes(raw).hex())

    return ColumnValue.text(str(raw))


def _timedelta_value(delta: timedelta) -> ColumnValue:
    negative = delta < timedelta(0)
    if negative:
        delta = -delta

    hours, rest = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return ColumnValue.time(negative, delta.days, hours, minutes, seconds, delta.microseconds)


def map_row(row: Row, columns: Iterable[str]) -> Dict[str, ColumnValue]:
    """按选择的列把一行转换为 ColumnValue 字典，行中没有的列会被跳过"""
    result = {}
    for col in columns:
        if col in row:
            result[col] = to_column_value(row[col])
    return result


def get_str(row: Row, key: str) -> str:
    """
    从行中获取字符串值

    Returns:
        字符串值，不存在时返回空字符串
    """
    value = row.get(key)
    if value is None:
        return ""
    return to_column_value(value).to_text()


def get_int(row: Row, key: str, default: int = 0) -> int:
    """从行中获取整数值，不存在或无法转换时返回默认值"""
    value = row.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_required(row: Row, key: str) -> Any:
    """
    获取目录查询中必须存在的值

    Raises:
        KeyError: 目录数据不符合预期，属于程序契约错误
    """
    value = row.get(key)
    if value is None:
        raise KeyError(f"catalog row is missing required value {key!r}")
    return value


def get_optional(row: Row, key: str) -> Optional[Any]:
    return row.get(key)
