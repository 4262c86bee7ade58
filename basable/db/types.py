"""数据库类型定义"""

import struct
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, asdict

from ..config.config import get_settings
from ..errors import MissingParameterError
from ..query import BasableQuery, Filter, FilterChain, QueryCommand, QueryOrder, TableSearchOpts


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
UINT64_MAX = 2 ** 64 - 1


class ValueKind(Enum):
    """列值类型"""
    NULL = "NULL"
    TEXT = "Text"
    INT = "Int"
    UINT = "UInt"
    FLOAT = "Float"
    DOUBLE = "Double"
    DATE = "Date"
    TIME = "Time"


@dataclass(frozen=True)
class DateValue:
    """年、月、日、时、分、秒、微秒"""
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    microsecond: int = 0

    def has_time(self) -> bool:
        return any((self.hour, self.minute, self.second, self.microsecond))

    def to_text(self) -> str:
        text = f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
        if self.has_time():
            text += f" {self.hour:02d}:{self.minute:02d}:{self.second:02d}"
            if self.microsecond:
                text += f".{self.microsecond:06d}"
        return text


@dataclass(frozen=True)
class TimeValue:
    """是否为负、天、时、分、秒、微秒"""
    is_negative: bool
    days: int
    hours: int
    minutes: int
    seconds: int
    microseconds: int = 0

    def to_text(self) -> str:
        sign = "-" if self.is_negative else ""
        hours = self.days * 24 + self.hours
        text = f"{sign}{hours:02d}:{self.minutes:02d}:{self.seconds:02d}"
        if self.microseconds:
            text += f".{self.microseconds:06d}"
        return text


@dataclass(frozen=True)
class ColumnValue:
    """
    与后端无关的单元格值

    kind 决定 value 的类型：TEXT 为 str，INT/UINT 为 int，FLOAT/DOUBLE 为 float，
    DATE 为 DateValue，TIME 为 TimeValue，NULL 时 value 为 None。
    """
    kind: ValueKind
    value: Any = None

    @classmethod
    def null(cls) -> 'ColumnValue':
        return cls(ValueKind.NULL)

    @classmethod
    def text(cls, value: str) -> 'ColumnValue':
        return cls(ValueKind.TEXT, value)

    @classmethod
    def integer(cls, value: int) -> 'ColumnValue':
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError(f"{value} does not fit a signed 64-bit integer")
        return cls(ValueKind.INT, value)

    @classmethod
    def unsigned(cls, value: int) -> 'ColumnValue':
        if not 0 <= value <= UINT64_MAX:
            raise ValueError(f"{value} does not fit an unsigned 64-bit integer")
        return cls(ValueKind.UINT, value)

    @classmethod
    def float32(cls, value: float) -> 'ColumnValue':
        # 截断到 32 位精度
        return cls(ValueKind.FLOAT, struct.unpack("f", struct.pack("f", value))[0])

    @classmethod
    def double(cls, value: float) -> 'ColumnValue':
        return cls(ValueKind.DOUBLE, float(value))

    @classmethod
    def date(cls, year: int, month: int, day: int, hour: int = 0, minute: int = 0,
             second: int = 0, microsecond: int = 0) -> 'ColumnValue':
        return cls(ValueKind.DATE, DateValue(year, month, day, hour, minute, second, microsecond))

    @classmethod
    def time(cls, is_negative: bool, days: int, hours: int, minutes: int,
             seconds: int, microseconds: int = 0) -> 'ColumnValue':
        return cls(ValueKind.TIME, TimeValue(is_negative, days, hours, minutes, seconds, microseconds))

    def is_null(self) -> bool:
        return self.kind == ValueKind.NULL

    def to_text(self) -> str:
        """尽力转换为文本，NULL 为空字符串"""
        if self.kind == ValueKind.NULL:
            return ""
        if self.kind in (ValueKind.DATE, ValueKind.TIME):
            return self.value.to_text()
        return str(self.value)

    def to_python(self) -> Any:
        """转换为 Python 原生值"""
        if self.kind == ValueKind.DATE:
            d = self.value
            return datetime(d.year, d.month, d.day, d.hour, d.minute, d.second, d.microsecond)
        if self.kind == ValueKind.TIME:
            t = self.value
            delta = timedelta(days=t.days, hours=t.hours, minutes=t.minutes,
                              seconds=t.seconds, microseconds=t.microseconds)
            return -delta if t.is_negative else delta
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        """序列化为 {类型: 值}"""
        if self.kind in (ValueKind.DATE, ValueKind.TIME):
            return {self.kind.value: list(asdict(self.value).values())}
        return {self.kind.value: self.value}

    def __str__(self) -> str:
        return self.to_text()


@dataclass
class Column:
    """列定义"""
    name: str
    col_type: str
    nullable: bool
    default_value: Optional[str] = None
    unique: bool = False
    primary: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


ColumnList = List[Column]


@dataclass
class HistoryColumn:
    """用于查询行创建、更新时间的列"""
    name: str
    pattern: str


class SpecialValueType(Enum):
    IMAGE = "Image"
    AUDIO = "Audio"
    VIDEO = "Video"
    PDF = "PDF"
    WEBPAGE = "Webpage"


@dataclass
class SpecialColumn:
    """值指向某种媒体类型的列"""
    name: str
    special_type: SpecialValueType
    path: str


class NotifyTrigger(Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class NotifyTriggerTime(Enum):
    BEFORE = "Before"
    AFTER = "After"


class NotifyEventMethod(Enum):
    GET = "Get"
    POST = "Post"
    DELETE = "Delete"
    PUT = "Put"
    PATCH = "Patch"


class OnNotifyError(Enum):
    """通知失败时，操作是中止还是继续"""
    FAIL = "Fail"
    PROCEED = "Proceed"


@dataclass
class NotifyEvent:
    """根据触发动作发送到 webhook 的事件"""
    trigger: NotifyTrigger
    trigger_time: NotifyTriggerTime
    method: NotifyEventMethod
    url: str
    on_error: OnNotifyError = OnNotifyError.PROCEED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trigger': self.trigger.value,
            'trigger_time': self.trigger_time.value,
            'method': self.method.value,
            'url': self.url,
            'on_error': self.on_error.value,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'NotifyEvent':
        return NotifyEvent(
            trigger=NotifyTrigger(data['trigger']),
            trigger_time=NotifyTriggerTime(data['trigger_time']),
            method=NotifyEventMethod(data['method']),
            url=data['url'],
            on_error=OnNotifyError(data.get('on_error', OnNotifyError.PROCEED.value)),
        )


@dataclass
class TableConfig:
    """表的行为配置，由外部存储持久化"""
    label: str = ""
    name: str = ""
    pk_column: Optional[str] = None
    items_per_page: int = 100
    created_column: Optional[HistoryColumn] = None
    updated_column: Optional[HistoryColumn] = None
    special_columns: Optional[List[SpecialColumn]] = None
    events: Optional[List[NotifyEvent]] = None
    exclude_columns: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'label': self.label,
            'name': self.name,
            'pk_column': self.pk_column,
            'items_per_page': self.items_per_page,
            'created_column': asdict(self.created_column) if self.created_column else None,
            'updated_column': asdict(self.updated_column) if self.updated_column else None,
            'special_columns': [
                {'name': c.name, 'special_type': c.special_type.value, 'path': c.path}
                for c in self.special_columns
            ] if self.special_columns is not None else None,
            'events': [e.to_dict() for e in self.events] if self.events is not None else None,
            'exclude_columns': self.exclude_columns,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'TableConfig':
        """从字典创建对象"""
        created = data.get('created_column')
        updated = data.get('updated_column')
        specials = data.get('special_columns')
        events = data.get('events')

        return TableConfig(
            label=data.get('label', ''),
            name=data.get('name', ''),
            pk_column=data.get('pk_column'),
            items_per_page=data.get('items_per_page', 100),
            created_column=HistoryColumn(**created) if created else None,
            updated_column=HistoryColumn(**updated) if updated else None,
            special_columns=[
                SpecialColumn(s['name'], SpecialValueType(s['special_type']), s['path'])
                for s in specials
            ] if specials is not None else None,
            events=[NotifyEvent.from_dict(e) for e in events] if events is not None else None,
            exclude_columns=data.get('exclude_columns'),
        )


def _split_list(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [s.strip() for s in value.split(",") if s.strip()]


def _parse_count(params: Dict[str, Any], key: str, default: int) -> int:
    value = params.get(key)
    if value is None or value == "":
        return default
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a non-negative integer, got {value!r}")
    if count < 0:
        raise ValueError(f"{key} must be a non-negative integer, got {value!r}")
    return count


@dataclass
class TableQueryOpts:
    """表数据查询选项"""
    table: str
    offset: int = 0
    row_count: Optional[int] = None
    filters: Optional[List[Filter]] = None
    columns: Optional[List[str]] = None
    order_by: Optional[QueryOrder] = None
    search_opts: Optional[TableSearchOpts] = None

    def __post_init__(self):
        if self.row_count is None:
            self.row_count = get_settings().default_rows_per_page

    @staticmethod
    def from_query_params(params: Dict[str, str]) -> 'TableQueryOpts':
        """从 URL 查询参数构建，columns 以逗号分隔"""
        table = params.get("table")
        if not table:
            raise MissingParameterError("Table name must be provided")

        return TableQueryOpts(
            table=table,
            offset=_parse_count(params, "offset", 0),
            row_count=_parse_count(params, "row_count", get_settings().default_rows_per_page),
            columns=_split_list(params.get("columns")),
        )

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'TableQueryOpts':
        """从请求 JSON 构建"""
        table = data.get("table")
        if not table:
            raise MissingParameterError("Table name must be provided")

        filters = data.get("filters")
        order_by = data.get("order_by")
        search_opts = data.get("search_opts")

        return TableQueryOpts(
            table=table,
            offset=_parse_count(data, "offset", 0),
            row_count=_parse_count(data, "row_count", get_settings().default_rows_per_page),
            filters=FilterChain.prefill(filters).all() if filters is not None else None,
            columns=list(data["columns"]) if data.get("columns") else None,
            order_by=QueryOrder.from_dict(order_by) if order_by else None,
            search_opts=TableSearchOpts.from_dict(search_opts) if search_opts else None,
        )

    def is_search_mode(self) -> bool:
        return self.search_opts is not None

    def filter_chain(self) -> FilterChain:
        return FilterChain.prefill(self.filters) if self.filters else FilterChain.empty()

    def to_query(self) -> BasableQuery:
        """转换为查询描述"""
        return BasableQuery(
            table=self.table,
            command=QueryCommand.select_data(self.columns),
            filters=self.filter_chain(),
            row_count=self.row_count,
            offset=self.offset,
            order_by=self.order_by,
            search_opts=self.search_opts,
        )


class TableExportFormat(Enum):
    """导出格式"""
    CSV = "csv"
    PSV = "psv"
    TSV = "tsv"
    TEXT = "text"
    JSON = "json"
    HTML = "html"

    @staticmethod
    def parse(value: str) -> Optional['TableExportFormat']:
        """未知格式返回 None"""
        for fmt in TableExportFormat:
            if fmt.value == value.lower():
                return fmt
        return None

    def field_delimiter(self) -> Optional[str]:
        return _DELIMITERS.get(self)


_DELIMITERS = {
    TableExportFormat.CSV: ",",
    TableExportFormat.PSV: "|",
    TableExportFormat.TSV: "\t",
    TableExportFormat.TEXT: " ",
}


@dataclass
class ExportTrim:
    """导出时的偏移和数量"""
    offset: int
    count: int


@dataclass
class TableExportOpts:
    """表导出选项"""
    query_opts: TableQueryOpts
    format: Optional[TableExportFormat]
    trim: Optional[ExportTrim] = None


@dataclass
class UpdateTableData:
    """批量更新数据，input 的第 i 行对应 unique_values 的第 i 个值"""
    unique_key: str
    columns: List[str]
    unique_values: List[str]
    input: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class TableSummary:
    """表概要"""
    name: str
    row_count: int
    col_count: int
    created: Optional[str] = None
    updated: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


TableSummaries = List[TableSummary]


@dataclass
class DbServerDetails:
    """数据库服务器详情，db_size 单位为 MB"""
    version: str = ""
    db_size: float = 0.0
    os: str = ""
    comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def format_catalog_time(value: Any) -> Optional[str]:
    """把目录中的时间转换为文本"""
    if value is None:
        return None
    if isinstance(value, (datetime, date, time)):
        return value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
    return str(value)
