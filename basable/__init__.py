"""
basable - 关系型数据库的查询构建与表访问层
"""

__version__ = "0.1.0"

from .errors import (
    BasableError,
    ConfigurationError,
    DBConnectionError,
    MalformedChainError,
    QueryExecutionError,
    NotFoundError,
    FeatureNotImplementedError,
    MissingParameterError,
    NotifyError,
)
from .config import Config, ConnectionConfig, Settings, get_settings, configure
from .query import Filter, FilterChain, FilterOperator, BasableQuery, QueryCompiler
from .db import (
    ColumnValue,
    Column,
    TableConfig,
    TableQueryOpts,
    TableExportFormat,
    TableExportOpts,
    UpdateTableData,
    Connector,
    MysqlConnector,
    Table,
    MySqlTable,
    DB,
    MySqlDB,
)
from .config.table_config_store import (
    TableConfigStore,
    MemoryTableConfigStore,
    RedisTableConfigStore,
    create_table_config_store,
)
from .monitor import setup_logger, EventNotifier
from .core import Basable

__all__ = [
    "BasableError",
    "ConfigurationError",
    "DBConnectionError",
    "MalformedChainError",
    "QueryExecutionError",
    "NotFoundError",
    "FeatureNotImplementedError",
    "MissingParameterError",
    "NotifyError",
    "Config",
    "ConnectionConfig",
    "Settings",
    "get_settings",
    "configure",
    "Filter",
    "FilterChain",
    "FilterOperator",
    "BasableQuery",
    "QueryCompiler",
    "ColumnValue",
    "Column",
    "TableConfig",
    "TableQueryOpts",
    "TableExportFormat",
    "TableExportOpts",
    "UpdateTableData",
    "Connector",
    "MysqlConnector",
    "Table",
    "MySqlTable",
    "DB",
    "MySqlDB",
    "TableConfigStore",
    "MemoryTableConfigStore",
    "RedisTableConfigStore",
    "create_table_config_store",
    "setup_logger",
    "EventNotifier",
    "Basable",
]
