"""表配置存储测试"""

import json
import unittest
from unittest.mock import MagicMock, patch

import redis

from basable.config.config import RedisConfig
from basable.config.table_config_store import (
    MemoryTableConfigStore,
    RedisTableConfigStore,
    create_table_config_store,
)
from basable.db.types import TableConfig
from basable.errors import NotFoundError


class TestMemoryTableConfigStore(unittest.TestCase):
    """内存存储测试"""

    def setUp(self):
        self.store = MemoryTableConfigStore()
        self.config = TableConfig(label="users", name="users", pk_column="id")

    def test_create_and_get(self):
        self.store.create_table_config("conn-1", self.config)

        self.assertEqual(self.store.get_table_config("users", "conn-1"), self.config)
        self.assertIsNone(self.store.get_table_config("users", "conn-2"))
        self.assertIsNone(self.store.get_table_config("orders", "conn-1"))

    def test_update(self):
        self.store.create_table_config("conn-1", self.config)
        updated = TableConfig(label="People", name="users", pk_column="id")

        self.store.update_table_config("users", "conn-1", updated)

        self.assertEqual(self.store.get_table_config("users", "conn-1").label, "People")

    def test_update_unknown(self):
        with self.assertRaises(NotFoundError):
            self.store.update_table_config("users", "conn-1", self.config)

    def test_save_all_keeps_existing(self):
        custom = TableConfig(label="Custom", name="users")
        self.store.create_table_config("conn-1", custom)

        self.store.save_all("conn-1", [self.config, TableConfig(label="orders", name="orders")])

        self.assertEqual(self.store.get_table_config("users", "conn-1").label, "Custom")
        self.assertEqual(len(self.store.list_table_configs("conn-1")), 2)


class TestRedisTableConfigStore(unittest.TestCase):
    """Redis 存储测试"""

    def setUp(self):
        self.client = MagicMock()
        self.store = RedisTableConfigStore(self.client, "test")
        self.config = TableConfig(label="users", name="users", pk_column="id")

    def test_create(self):
        self.store.create_table_config("conn-1", self.config)

        key, field, payload = self.client.hset.call_args.args
        self.assertEqual(key, "test:table_config:conn-1")
        self.assertEqual(field, "users")
        self.assertEqual(json.loads(payload)["pk_column"], "id")

    def test_get(self):
        self.client.hget.return_value = json.dumps(self.config.to_dict())

        self.assertEqual(self.store.get_table_config("users", "conn-1"), self.config)
        self.client.hget.assert_called_with("test:table_config:conn-1", "users")

    def test_get_missing(self):
        self.client.hget.return_value = None
        self.assertIsNone(self.store.get_table_config("users", "conn-1"))

    def test_update_unknown(self):
        self.client.hexists.return_value = False

        with self.assertRaises(NotFoundError):
            self.store.update_table_config("users", "conn-1", self.config)
        self.client.hset.assert_not_called()

    def test_list(self):
        self.client.hgetall.return_value = {"users": json.dumps(self.config.to_dict())}
        self.assertEqual(self.store.list_table_configs("conn-1"), [self.config])


class TestCreateStore(unittest.TestCase):
    """存储选择测试"""

    def test_disabled_uses_memory(self):
        self.assertIsInstance(create_table_config_store(RedisConfig(enabled=False)), MemoryTableConfigStore)
        self.assertIsInstance(create_table_config_store(None), MemoryTableConfigStore)

    @patch("basable.config.table_config_store.redis.Redis")
    def test_enabled_uses_redis(self, redis_cls):
        store = create_table_config_store(RedisConfig(enabled=True, host="cache", key_prefix="app"))

        self.assertIsInstance(store, RedisTableConfigStore)
        self.assertEqual(store.key_prefix, "app")
        redis_cls.assert_called_once_with(host="cache", port=6379, db=0, decode_responses=True)

    @patch("basable.config.table_config_store.redis.Redis")
    def test_unreachable_redis_falls_back(self, redis_cls):
        redis_cls.return_value.ping.side_effect = redis.ConnectionError("refused")

        store = create_table_config_store(RedisConfig(enabled=True))

        self.assertIsInstance(store, MemoryTableConfigStore)


if __name__ == '__main__':
    unittest.main()
