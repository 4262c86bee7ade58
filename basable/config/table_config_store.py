"""
表配置存储

按 (connection_id, table_name) 保存 TableConfig。Redis 可用时使用 Redis，
否则使用内存存储。
"""
import json
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import redis
from loguru import logger

from ..db.types import TableConfig
from ..errors import NotFoundError
from .config import RedisConfig


class TableConfigStore(ABC):
    """表配置存储接口"""

    @abstractmethod
    def get_table_config(self, table: str, connection_id: str) -> Optional[TableConfig]:
        pass

    @abstractmethod
    def update_table_config(self, table: str, connection_id: str, config: TableConfig) -> None:
        """
        Raises:
            NotFoundError: 配置不存在
        """
        pass

    @abstractmethod
    def create_table_config(self, connection_id: str, config: TableConfig) -> None:
        pass

    @abstractmethod
    def list_table_configs(self, connection_id: str) -> List[TableConfig]:
        pass

    def save_all(self, connection_id: str, configs: List[TableConfig]) -> None:
        """保存 load_tables 返回的初始配置，已有的配置不会被覆盖"""
        for config in configs:
            if self.get_table_config(config.name, connection_id) is None:
                self.create_table_config(connection_id, config)


class MemoryTableConfigStore(TableConfigStore):
    """内存存储"""

    def __init__(self):
        self._lock = threading.Lock()
        self._configs: Dict[str, Dict[str, TableConfig]] = {}

    def get_table_config(self, table: str, connection_id: str) -> Optional[TableConfig]:
        with self._lock:
            return self._configs.get(connection_id, {}).get(table)

    def update_table_config(self, table: str, connection_id: str, config: TableConfig) -> None:
        with self._lock:
            configs = self._configs.get(connection_id, {})
            if table not in configs:
                raise NotFoundError(f"No config for table {table}")
            configs[table] = config

    def create_table_config(self, connection_id: str, config: TableConfig) -> None:
        with self._lock:
            self._configs.setdefault(connection_id, {})[config.name] = config

    def list_table_configs(self, connection_id: str) -> List[TableConfig]:
        with self._lock:
            return list(self._configs.get(connection_id, {}).values())


class RedisTableConfigStore(TableConfigStore):
    """Redis 存储，每个连接一个 hash，字段为表名，值为 JSON"""

    def __init__(self, client: redis.Redis, key_prefix: str = "basable"):
        self.redis = client
        self.key_prefix = key_prefix

    def _key(self, connection_id: str) -> str:
        return f"{self.key_prefix}:table_config:{connection_id}"

    def get_table_config(self, table: str, connection_id: str) -> Optional[TableConfig]:
        data = self.redis.hget(self._key(connection_id), table)
        if not data:
            return None
        return TableConfig.from_dict(json.loads(data))

    def update_table_config(self, table: str, connection_id: str, config: TableConfig) -> None:
        key = self._key(connection_id)
        if not self.redis.hexists(key, table):
            raise NotFoundError(f"No config for table {table}")
        self.redis.hset(key, table, json.dumps(config.to_dict(), ensure_ascii=False))

    def create_table_config(self, connection_id: str, config: TableConfig) -> None:
        self.redis.hset(self._key(connection_id), config.name,
                        json.dumps(config.to_dict(), ensure_ascii=False))

    def list_table_configs(self, connection_id: str) -> List[TableConfig]:
        values = self.redis.hgetall(self._key(connection_id))
        return [TableConfig.from_dict(json.loads(v)) for v in values.values()]


def create_table_config_store(config: Optional[RedisConfig] = None) -> TableConfigStore:
    """Redis 未启用或连接失败时退回内存存储"""
    if config is None or not config.enabled:
        return MemoryTableConfigStore()

    try:
        client = redis.Redis(
            host=config.host,
            port=config.port,
            db=config.db,
            decode_responses=True
        )
        client.ping()
        logger.info("Redis connected successfully")
        return RedisTableConfigStore(client, config.key_prefix)
    except redis.RedisError as e:
        logger.warning(f"Redis connection failed: {e}, using memory store")
        return MemoryTableConfigStore()
