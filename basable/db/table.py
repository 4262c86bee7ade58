"""
表操作模块

每个 Table 绑定一个连接器，提供增删改查、结构查询以及全文搜索索引的生命周期管理。
"""
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from loguru import logger

from ..config.config import get_settings
from ..monitor.notifier import EventNotifier
from ..query import BasableQuery, QueryCommand, TableSearchOpts
from .connector import Connector, Row
from .conv import get_int, get_optional, get_required, map_row
from .export import process_exports
from .types import (
    Column,
    ColumnList,
    ColumnValue,
    NotifyTrigger,
    NotifyTriggerTime,
    TableConfig,
    TableExportOpts,
    TableQueryOpts,
    UpdateTableData,
)

if TYPE_CHECKING:
    from .db import DB


DataRow = Dict[str, ColumnValue]

SEARCH_INDEX_PREFIX = "bsearch_"


def search_index_name(search_cols: Sequence[str]) -> str:
    """全文索引名称，空格替换为下划线"""
    name = SEARCH_INDEX_PREFIX + "_".join(search_cols)
    return name.replace(" ", "_")


class _SearchLocks:
    """
    按 (数据库, 表, 搜索列) 划分的互斥锁

    锁在进程内一直保留，不会回收，条目数等于出现过的不同搜索列组合数。
    threading.Lock 不支持弱引用，所以没有用 WeakValueDictionary。
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Tuple[str, str, Tuple[str, ...]], threading.Lock] = {}

    def get(self, key: Tuple[str, str, Tuple[str, ...]]) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock


_search_locks = _SearchLocks()


class Table(ABC):
    """表接口"""

    @property
    @abstractmethod
    def name(self) -> str:
        """表名"""
        pass

    @property
    @abstractmethod
    def connector(self) -> Connector:
        """表使用的连接器"""
        pass

    @abstractmethod
    def query_columns(self) -> ColumnList:
        """查询表的列定义，不缓存"""
        pass

    @abstractmethod
    def init_config(self) -> Optional[TableConfig]:
        """生成表的初始配置，由调用方负责保存"""
        pass

    @abstractmethod
    def insert_data(self, data: Dict[str, str]) -> None:
        """插入一行"""
        pass

    @abstractmethod
    def query_data(self, opts: TableQueryOpts, db: 'DB') -> List[DataRow]:
        """按查询选项读取数据"""
        pass

    @abstractmethod
    def query_result_count(self, opts: TableQueryOpts, db: 'DB') -> int:
        """按查询选项统计可返回的行数"""
        pass

    @abstractmethod
    def update_data(self, data: UpdateTableData) -> None:
        """批量更新"""
        pass

    @abstractmethod
    def delete_data(self, column: str, values: Union[str, Sequence[str]]) -> None:
        """按列值删除"""
        pass

    @abstractmethod
    def export(self, opts: TableExportOpts, db: 'DB') -> str:
        """导出数据"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """清空表"""
        pass


class MySqlTable(Table):
    """MySQL 表实现"""

    def __init__(self, name: str, connector: Connector,
                 config: Optional[TableConfig] = None,
                 notifier: Optional[EventNotifier] = None):
        self._name = name
        self._connector = connector
        self.config = config
        self.notifier = notifier

    @property
    def name(self) -> str:
        return self._name

    @property
    def connector(self) -> Connector:
        return self._connector

    def _exec(self, query: str) -> List[Row]:
        return self._connector.exec_query(query)

    def query_columns(self) -> ColumnList:
        """查询列定义，包括唯一索引和主键信息"""
        table_name = self._name

        query = f"""
            SELECT
                cols.column_name AS COLUMN_NAME,
                cols.column_type AS COLUMN_TYPE,
                cols.is_nullable AS IS_NULLABLE,
                cols.column_default AS COLUMN_DEFAULT,
                IF(stats.index_name IS NOT NULL, 'YES', 'NO') AS IS_UNIQUE,
                IF(kcus.constraint_name IS NOT NULL, 'YES', 'NO') AS IS_PRIMARY
            FROM
                information_schema.columns AS cols
            LEFT JOIN
                (SELECT DISTINCT
                    column_name,
                    index_name
                FROM
                    information_schema.statistics
                WHERE
                    table_schema = DATABASE()
                    AND table_name = '{table_name}'
                    AND non_unique = 0) AS stats
            ON
                cols.column_name = stats.column_name
            LEFT JOIN
                information_schema.key_column_usage AS kcus
            ON
                cols.table_schema = kcus.table_schema
                AND cols.table_name = kcus.table_name
                AND cols.column_name = kcus.column_name
                AND kcus.constraint_name = 'PRIMARY'
            WHERE
                cols.table_schema = DATABASE()
                AND cols.table_name = '{table_name}'
            ORDER BY cols.ordinal_position
        """

        rows = self._exec(query)

        columns: ColumnList = []
        seen = set()
        for row in rows:
            name = get_required(row, "COLUMN_NAME")
            # 同一列可能出现在多个唯一索引中
            if name in seen:
                continue
            seen.add(name)

            default = get_optional(row, "COLUMN_DEFAULT")
            columns.append(Column(
                name=name,
                col_type=get_required(row, "COLUMN_TYPE"),
                nullable=get_required(row, "IS_NULLABLE") == "YES",
                default_value=str(default) if default is not None else None,
                unique=get_required(row, "IS_UNIQUE") == "YES",
                primary=get_required(row, "IS_PRIMARY") == "YES",
            ))

        return columns

    def init_config(self) -> Optional[TableConfig]:
        """主键列优先，其次是第一个唯一列"""
        cols = self.query_columns()

        pk = next((c for c in cols if c.primary), None)
        if pk is None:
            pk = next((c for c in cols if c.unique), None)

        return TableConfig(
            label=self._name,
            name=self._name,
            pk_column=pk.name if pk else None,
            items_per_page=get_settings().items_per_page,
        )

    def _selected_columns(self, columns: Optional[List[str]]) -> List[str]:
        """显式选择的列，否则为全部列（去掉配置中排除的列）"""
        if columns:
            return list(columns)

        names = [col.name for col in self.query_columns()]
        if self.config and self.config.exclude_columns:
            names = [n for n in names if n not in self.config.exclude_columns]
        return names

    def _search_lock(self, search_cols: Sequence[str]) -> threading.Lock:
        conf = self._connector.config()
        database = f"{conf.host}:{conf.port}/{conf.db_name}"
        return _search_locks.get((database, self._name, tuple(search_cols)))

    def search_index_exists(self, search_cols: Sequence[str]) -> bool:
        index_name = search_index_name(search_cols)
        rows = self._exec(f"SHOW INDEX FROM {self._name}")
        return any(row.get("Key_name") == index_name for row in rows)

    def create_search_index(self, search_cols: Sequence[str]) -> None:
        index_name = search_index_name(search_cols)
        wrap_cols = ", ".join(f"`{col}`" for col in search_cols)
        self._exec(f"CREATE FULLTEXT INDEX {index_name} ON {self._name} ({wrap_cols})")
        logger.info(f"Created search index {index_name} on {self._name}")

    def drop_search_index(self, search_cols: Sequence[str]) -> None:
        if self.search_index_exists(search_cols):
            index_name = search_index_name(search_cols)
            self._exec(f"DROP INDEX {index_name} ON {self._name}")
            logger.info(f"Dropped search index {index_name} on {self._name}")

    def search_prelude(self, search_cols: Sequence[str]) -> None:
        """删除旧索引后重新创建"""
        self.drop_search_index(search_cols)
        self.create_search_index(search_cols)

    @contextmanager
    def _search_section(self, search_opts: Optional[TableSearchOpts]) -> Iterator[None]:
        """
        搜索模式：创建索引 -> 执行查询 -> 删除索引，整个过程持有互斥锁

        查询失败时不会删除索引，索引会残留到下一次同一列集合的搜索。
        """
        if search_opts is None or not search_opts.search_cols:
            yield
            return

        search_cols = list(search_opts.search_cols)
        with self._search_lock(search_cols):
            self.search_prelude(search_cols)
            yield
            self.drop_search_index(search_cols)

    def query_data(self, opts: TableQueryOpts, db: 'DB') -> List[DataRow]:
        sql = db.generate_sql(opts.to_query())
        cols = self._selected_columns(opts.columns)

        with self._search_section(opts.search_opts):
            rows = self._exec(sql)

        return [map_row(row, cols) for row in rows]

    def query_result_count(self, opts: TableQueryOpts, db: 'DB') -> int:
        query = BasableQuery(
            table=opts.table,
            command=QueryCommand.select_data(["COUNT(*)"]),
            filters=opts.filter_chain(),
            search_opts=opts.search_opts,
        )
        sql = db.generate_sql(query)

        with self._search_section(opts.search_opts):
            rows = self._exec(sql)

        if not rows:
            return 0
        return get_int(rows[0], "COUNT(*)")

    def _notify(self, trigger: NotifyTrigger, trigger_time: NotifyTriggerTime, data: Dict) -> None:
        if self.notifier is not None:
            self.notifier.notify(self.config, trigger, trigger_time, data)

    def insert_data(self, data: Dict[str, str]) -> None:
        if not data:
            raise ValueError("insert data must not be empty")

        self._notify(NotifyTrigger.CREATE, NotifyTriggerTime.BEFORE, data)

        keys = ", ".join(data.keys())
        values = ", ".join(f"'{v}'" for v in data.values())
        self._exec(f"INSERT INTO {self._name} ({keys}) VALUES ({values})")

        self._notify(NotifyTrigger.CREATE, NotifyTriggerTime.AFTER, data)

    def build_update_sql(self, data: UpdateTableData) -> str:
        """
        为每列生成一个 CASE 块，一条语句即可更新多行多列

        input 的第 i 行对应 unique_values 的第 i 个值，行中没有的列不会生成 WHEN 分支。
        """
        if not data.columns:
            raise ValueError("update requires at least one column")
        if not data.unique_values:
            raise ValueError("update requires at least one unique value")

        key = data.unique_key
        cases = []
        for col in data.columns:
            branches = []
            for index, unique_value in enumerate(data.unique_values):
                if index >= len(data.input):
                    break
                values = data.input[index]
                if col in values:
                    branches.append(f"WHEN {unique_value} THEN '{values[col]}'")

            cases.append(f"`{col}` = CASE `{key}` {' '.join(branches)} ELSE `{col}` END")

        unique_values = ",".join(data.unique_values)
        return f"UPDATE {self._name} SET {', '.join(cases)} WHERE `{key}` IN ({unique_values})"

    def update_data(self, data: UpdateTableData) -> None:
        sql = self.build_update_sql(data)
        payload = {'unique_key': data.unique_key, 'unique_values': data.unique_values}

        self._notify(NotifyTrigger.UPDATE, NotifyTriggerTime.BEFORE, payload)
        self._exec(sql)
        self._notify(NotifyTrigger.UPDATE, NotifyTriggerTime.AFTER, payload)

    def build_delete_sql(self, column: str, values: Union[str, Sequence[str]]) -> str:
        if isinstance(values, str):
            values = [values]
        values = list(values)

        if not values:
            raise ValueError("a value must be provided")

        if len(values) == 1:
            condition = f"{column} = '{values[0]}'"
        else:
            condition = f"{column} IN ({', '.join(quote_value(v) for v in values)})"

        return f"DELETE FROM {self._name} WHERE {condition}"

    def delete_data(self, column: str, values: Union[str, Sequence[str]]) -> None:
        sql = self.build_delete_sql(column, values)
        payload = {'column': column, 'values': [values] if isinstance(values, str) else list(values)}

        self._notify(NotifyTrigger.DELETE, NotifyTriggerTime.BEFORE, payload)
        self._exec(sql)
        self._notify(NotifyTrigger.DELETE, NotifyTriggerTime.AFTER, payload)

    def export(self, opts: TableExportOpts, db: 'DB') -> str:
        query_opts = opts.query_opts
        filters = query_opts.filter_chain()
        filters.validate()
        cols = self._selected_columns(query_opts.columns)

        query = BasableQuery(
            table=query_opts.table,
            command=QueryCommand.select_data(cols or None),
            filters=filters,
            offset=opts.trim.offset if opts.trim else None,
            row_count=opts.trim.count if opts.trim else None,
        )
        sql = db.generate_sql(query)

        rows = self._exec(sql)
        logger.debug(f"Exporting {len(rows)} rows from {self._name}")
        return process_exports(opts.format, cols, rows)

    def clear(self) -> None:
        self._exec(f"DELETE FROM {self._name}")
        logger.info(f"Cleared table {self._name}")


def quote_value(value: str) -> str:
    """把值包装为 SQL 字符串字面量"""
    return f"'{value}'"
