"""数据库访问模块"""

from .types import (
    ValueKind,
    ColumnValue,
    Column,
    ColumnList,
    TableConfig,
    TableQueryOpts,
    TableExportFormat,
    TableExportOpts,
    ExportTrim,
    UpdateTableData,
    TableSummary,
    DbServerDetails,
)
from .conv import to_column_value, map_row
from .connector import Connector, MysqlConnector
from .export import process_exports
from .table import Table, MySqlTable, search_index_name
from .db import DB, MySqlDB

__all__ = [
    "ValueKind",
    "ColumnValue",
    "Column",
    "ColumnList",
    "TableConfig",
    "TableQueryOpts",
    "TableExportFormat",
    "TableExportOpts",
    "ExportTrim",
    "UpdateTableData",
    "TableSummary",
    "DbServerDetails",
    "to_column_value",
    "map_row",
    "Connector",
    "MysqlConnector",
    "process_exports",
    "Table",
    "MySqlTable",
    "search_index_name",
    "DB",
    "MySqlDB",
]
