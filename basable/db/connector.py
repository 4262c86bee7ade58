"""
数据库连接器

连接器是与物理数据库交互的唯一入口：执行 SQL 文本并返回原始行。
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

import pymysql
from pymysql.cursors import DictCursor
from dbutils.pooled_db import PooledDB
from loguru import logger

from ..config.config import ConnectionConfig
from ..errors import DBConnectionError, QueryExecutionError


Row = Dict[str, Any]


class Connector(ABC):
    """连接器接口"""

    @abstractmethod
    def exec_query(self, query: str) -> List[Row]:
        """执行 SQL 并返回结果行"""
        pass

    @abstractmethod
    def config(self) -> ConnectionConfig:
        """连接配置"""
        pass

    def close(self) -> None:
        """释放连接资源"""
        pass


class MysqlConnector(Connector):
    """MySQL 连接器，基于 DBUtils 连接池"""

    def __init__(self, config: ConnectionConfig):
        self._config = config
        self._pool = None
        self._init_pool()

    def _init_pool(self) -> None:
        """初始化连接池"""
        try:
            self._pool = PooledDB(
                creator=pymysql,
                maxconnections=self._config.pool_size,
                mincached=1,
                maxcached=self._config.pool_size,
                blocking=True,
                host=self._config.host or "localhost",
                port=self._config.port or 3306,
                user=self._config.username or "root",
                password=self._config.password or "",
                database=self._config.db_name,
                charset=self._config.charset,
                cursorclass=DictCursor
            )
            logger.info(f"MySQL connection pool initialized: {self._config.host}:{self._config.port}")
        except pymysql.MySQLError as e:
            logger.error(f"Failed to initialize MySQL pool: {e}")
            raise DBConnectionError(str(e), e) from e

    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        """获取数据库连接（上下文管理器）"""
        try:
            conn = self._pool.connection()
        except pymysql.MySQLError as e:
            logger.error(f"Failed to acquire connection: {e}")
            raise DBConnectionError(str(e), e) from e

        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def exec_query(self, query: str) -> List[Row]:
        """执行 SQL 语句，写操作会立即提交"""
        logger.debug(f"Executing SQL: {query}")

        with self.get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(query)
                rows = cursor.fetchall()
                conn.commit()
                return list(rows) if rows else []
            except pymysql.MySQLError as e:
                logger.error(f"Query execution failed: {e}")
                raise QueryExecutionError(str(e), e) from e
            finally:
                cursor.close()

    def config(self) -> ConnectionConfig:
        return self._config

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None
            logger.info("MySQL connection pool closed")
