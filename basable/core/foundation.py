"""
连接注册表

保存进程内所有活动的数据库句柄，按 (连接 ID, 用户) 查找。
锁只保护列表本身，不会在数据库调用期间持有。
"""
import threading
import uuid
from typing import List, Optional, Union

from loguru import logger

from ..config.config import ConnectionConfig, DatabaseType, SourceKind
from ..config.table_config_store import TableConfigStore
from ..db.connector import MysqlConnector
from ..db.db import DB, MySqlDB
from ..errors import FeatureNotImplementedError, NotFoundError
from ..monitor.notifier import EventNotifier


class Basable:
    """连接注册表"""

    def __init__(self, config_store: Optional[TableConfigStore] = None,
                 notifier: Optional[EventNotifier] = None):
        self._lock = threading.Lock()
        self._instances: List[DB] = []
        self.config_store = config_store
        self.notifier = notifier

    def create_connection(self, config: ConnectionConfig, user_id: str) -> DB:
        """
        创建连接器和数据库句柄并加载全部表，不会加入注册表

        Raises:
            ConfigurationError: 数据源类型无效
            FeatureNotImplementedError: 数据源类型尚未支持
            DBConnectionError: 无法建立连接池
        """
        source = config.get_source()
        if source.kind != SourceKind.DATABASE or source.database != DatabaseType.MYSQL:
            raise FeatureNotImplementedError(f"Unsupported source: {config.source_type}/{config.source}")

        connector = MysqlConnector(config)
        db = MySqlDB(connector, user_id, notifier=self.notifier)
        configs = db.load_tables()

        if self.config_store is not None:
            connection_id = str(db.id)
            self.config_store.save_all(connection_id, configs)
            for table_config in self.config_store.list_table_configs(connection_id):
                if db.get_table(table_config.name) is not None:
                    db.attach_config(table_config)

        return db

    def add_connection(self, db: DB) -> None:
        with self._lock:
            self._instances.append(db)
        logger.info(f"Registered connection {db.id} for user {db.user_id}")

    def get_connection(self, conn_id: Union[str, uuid.UUID], user_id: str) -> DB:
        """
        Raises:
            NotFoundError: ID 无效，或没有属于该用户的连接
        """
        target = self._parse_id(conn_id)
        with self._lock:
            for db in self._instances:
                if db.id == target and db.user_id == user_id:
                    return db
        raise NotFoundError(f"Connection {conn_id} not found")

    def remove_connection(self, conn_id: Union[str, uuid.UUID], user_id: str) -> None:
        """移出注册表并关闭连接器"""
        target = self._parse_id(conn_id)
        with self._lock:
            for index, db in enumerate(self._instances):
                if db.id == target and db.user_id == user_id:
                    removed = self._instances.pop(index)
                    break
            else:
                raise NotFoundError(f"Connection {conn_id} not found")

        removed.connector.close()
        logger.info(f"Removed connection {conn_id}")

    def connections(self, user_id: str) -> List[DB]:
        with self._lock:
            return [db for db in self._instances if db.user_id == user_id]

    @staticmethod
    def _parse_id(conn_id: Union[str, uuid.UUID]) -> uuid.UUID:
        if isinstance(conn_id, uuid.UUID):
            return conn_id
        try:
            return uuid.UUID(conn_id)
        except ValueError:
            raise NotFoundError(f"Invalid connection id: {conn_id}")
