"""
数据库句柄

一个句柄对应一个逻辑连接：持有连接器和已加载的表，提供表概要和服务器详情。
"""
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from loguru import logger

from ..errors import NotFoundError
from ..graphs.visualize import VisualizeDB
from ..monitor.notifier import EventNotifier
from ..query import BasableQuery, QueryCompiler
from .connector import Connector, Row
from .conv import get_int, get_optional, get_required, get_str
from .table import MySqlTable, Table
from .types import DbServerDetails, TableConfig, TableSummaries, TableSummary, format_catalog_time


class DB(ABC):
    """数据库句柄接口"""

    @property
    @abstractmethod
    def id(self) -> uuid.UUID:
        pass

    @property
    @abstractmethod
    def user_id(self) -> str:
        pass

    @property
    @abstractmethod
    def connector(self) -> Connector:
        pass

    @abstractmethod
    def load_tables(self) -> List[TableConfig]:
        """加载全部表，返回各表的初始配置"""
        pass

    @abstractmethod
    def tables(self) -> List[Table]:
        pass

    @abstractmethod
    def query_tables(self) -> List[Row]:
        """目录中的原始表信息"""
        pass

    @abstractmethod
    def query_column_count(self, table_name: str) -> int:
        pass

    @abstractmethod
    def build_table_list(self) -> TableSummaries:
        pass

    @abstractmethod
    def table_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    def details(self) -> DbServerDetails:
        pass

    @abstractmethod
    def get_table(self, name: str) -> Optional[Table]:
        pass

    @abstractmethod
    def drop_table(self, name: str) -> None:
        pass

    @abstractmethod
    def generate_sql(self, query: BasableQuery) -> str:
        pass


class MySqlDB(VisualizeDB, DB):
    """MySQL 数据库句柄"""

    def __init__(self, connector: Connector, user_id: str,
                 compiler: Optional[QueryCompiler] = None,
                 notifier: Optional[EventNotifier] = None):
        self._id = uuid.uuid4()
        self._user_id = user_id
        self._connector = connector
        self._compiler = compiler or QueryCompiler()
        self._notifier = notifier
        self._tables: Dict[str, Table] = {}

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def connector(self) -> Connector:
        return self._connector

    @property
    def db_name(self) -> str:
        return self._connector.config().db_name or ""

    def load_tables(self) -> List[TableConfig]:
        """
        为目录中的每张表创建 Table，所有表共享同一个连接器（连接池线程安全）

        Returns:
            各表由 init_config 生成的初始配置，由调用方保存
        """
        tables: Dict[str, Table] = {}
        configs: List[TableConfig] = []

        for row in self.query_tables():
            name = get_required(row, "TABLE_NAME")
            table = MySqlTable(name, self._connector, notifier=self._notifier)

            config = table.init_config()
            if config is not None:
                table.config = config
                configs.append(config)

            tables[name] = table

        self._tables = tables
        logger.info(f"Loaded {len(tables)} tables from {self.db_name}")
        return configs

    def attach_config(self, config: TableConfig) -> None:
        """用持久化的配置替换表的初始配置"""
        table = self.get_table(config.name)
        if table is None:
            raise NotFoundError(f"Table {config.name} not found")
        table.config = config

    def tables(self) -> List[Table]:
        return list(self._tables.values())

    def query_tables(self) -> List[Row]:
        query = f"""
            SELECT
                table_name AS TABLE_NAME,
                table_rows AS TABLE_ROWS,
                create_time AS CREATE_TIME,
                update_time AS UPDATE_TIME
            FROM information_schema.tables
            WHERE table_schema = '{self.db_name}'
            ORDER BY table_name
        """
        return self._connector.exec_query(query)

    def query_column_count(self, table_name: str) -> int:
        query = f"""
            SELECT COUNT(*) AS COLUMN_COUNT
            FROM information_schema.columns
            WHERE table_schema = '{self.db_name}' AND table_name = '{table_name}'
        """
        rows = self._connector.exec_query(query)
        return get_int(rows[0], "COLUMN_COUNT") if rows else 0

    def build_table_list(self) -> TableSummaries:
        summaries: TableSummaries = []
        for row in self.query_tables():
            name = get_required(row, "TABLE_NAME")
            summaries.append(TableSummary(
                name=name,
                row_count=get_int(row, "TABLE_ROWS"),
                col_count=self.query_column_count(name),
                created=format_catalog_time(get_optional(row, "CREATE_TIME")),
                updated=format_catalog_time(get_optional(row, "UPDATE_TIME")),
            ))
        return summaries

    query_table_summaries = build_table_list

    def table_exists(self, name: str) -> bool:
        query = f"""
            SELECT COUNT(*) AS TABLE_COUNT
            FROM information_schema.tables
            WHERE table_schema = '{self.db_name}' AND table_name = '{name}'
        """
        rows = self._connector.exec_query(query)
        return bool(rows) and get_int(rows[0], "TABLE_COUNT") > 0

    def show_version(self) -> Dict[str, str]:
        """服务器版本相关的系统变量"""
        query = """
            SHOW VARIABLES WHERE Variable_name IN
                ('version', 'version_comment', 'version_compile_os', 'version_compile_zlib')
        """
        rows = self._connector.exec_query(query)
        return {get_str(row, "Variable_name"): get_str(row, "Value") for row in rows}

    def size(self) -> float:
        """数据与索引的总大小（MB，保留一位小数）"""
        query = f"""
            SELECT ROUND(SUM(data_length + index_length) / 1024 / 1024, 1) AS DB_SIZE
            FROM information_schema.tables
            WHERE table_schema = '{self.db_name}'
        """
        rows = self._connector.exec_query(query)
        if not rows:
            return 0.0

        value = get_optional(rows[0], "DB_SIZE")
        if value is None:
            return 0.0
        return float(value)

    def details(self) -> DbServerDetails:
        variables = self.show_version()
        return DbServerDetails(
            version=variables.get("version", ""),
            db_size=self.size(),
            os=variables.get("version_compile_os", ""),
            comment=variables.get("version_comment"),
        )

    def get_table(self, name: str) -> Optional[Table]:
        return self._tables.get(name)

    def drop_table(self, name: str) -> None:
        """
        Raises:
            NotFoundError: 表没有被加载
        """
        if name not in self._tables:
            raise NotFoundError(f"Table {name} not found")

        self._connector.exec_query(f"DROP TABLE {name}")
        del self._tables[name]
        logger.info(f"Dropped table {name}")

    def generate_sql(self, query: BasableQuery) -> str:
        return self._compiler.generate_sql(query)

    def close(self) -> None:
        self._connector.close()
