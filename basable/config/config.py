"""
配置管理模块
"""
import json
import os
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from urllib.parse import quote

from ..errors import ConfigurationError, FeatureNotImplementedError


class DatabaseType(Enum):
    """数据库类型"""
    MYSQL = "mysql"
    POSTGRES = "postgres"
    ORACLE = "oracle"
    MONGO = "mongo"

    @staticmethod
    def parse(value: str) -> 'DatabaseType':
        for db_type in DatabaseType:
            if db_type.value == value:
                return db_type
        raise ConfigurationError(f"Invalid database source type: {value}")


class SourceKind(Enum):
    """数据源大类"""
    DATABASE = "database"
    CLOUD = "cloud"
    FILE = "file"


@dataclass
class SourceType:
    """数据源类型，数据库类数据源带有具体的数据库类型"""
    kind: SourceKind
    database: Optional[DatabaseType] = None

    @staticmethod
    def from_str(src_type: str, src: str) -> 'SourceType':
        if src_type == SourceKind.DATABASE.value:
            return SourceType(SourceKind.DATABASE, DatabaseType.parse(src))
        if src_type == SourceKind.CLOUD.value:
            return SourceType(SourceKind.CLOUD)
        if src_type == SourceKind.FILE.value:
            return SourceType(SourceKind.FILE)
        raise ConfigurationError(f"Invalid source type: {src_type}")


@dataclass
class ConnectionConfig:
    """新连接的配置"""
    source_type: str = "database"
    source: str = "mysql"
    username: Optional[str] = None
    password: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    db_name: Optional[str] = None
    charset: str = "utf8mb4"
    pool_size: int = 5

    def get_source(self) -> SourceType:
        """解析数据源类型"""
        return SourceType.from_str(self.source_type, self.source)

    def build_url(self) -> str:
        """构建连接 URL，用户名和密码经过 URL 编码"""
        src = self.get_source()
        if src.kind != SourceKind.DATABASE:
            raise FeatureNotImplementedError()

        return "{}://{}:{}@{}:{}/{}".format(
            self.source,
            quote(self.username or "root", safe=""),
            quote(self.password or "", safe=""),
            self.host or "localhost",
            self.port or 3306,
            self.db_name or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Settings:
    """进程级设置"""
    filter_prefix: str = ""
    filter_joiner: str = " "
    default_rows_per_page: int = 100
    items_per_page: int = 100
    search_mode: str = "NATURAL LANGUAGE MODE"


CONSOLE_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {process}:{thread.name} | {name}:{line} - {message}"


@dataclass
class LogConfig:
    """日志配置"""
    log_level: str = "INFO"
    log_file: Optional[str] = "basable.log"
    log_max_size: str = "100MB"
    log_backup_count: int = 10
    console_format: str = CONSOLE_LOG_FORMAT
    file_format: str = FILE_LOG_FORMAT
    error_log_suffix: Optional[str] = ".error.log"


@dataclass
class RedisConfig:
    """Redis 配置（表配置存储可选使用）"""
    enabled: bool = False
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    key_prefix: str = "basable"


_settings = Settings()


def get_settings() -> Settings:
    """获取当前进程级设置"""
    return _settings


def configure(settings: Settings) -> None:
    """替换进程级设置"""
    global _settings
    _settings = settings


class Config:
    """配置管理器"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config_file()
        self._data: Dict[str, Any] = {}

        self.connection: Optional[ConnectionConfig] = None
        self.settings: Optional[Settings] = None
        self.logging: Optional[LogConfig] = None
        self.redis: Optional[RedisConfig] = None

        self.load()

    def _find_config_file(self) -> str:
        """查找配置文件"""
        search_paths = [
            Path.cwd() / "config.json",
            Path.cwd() / "config" / "config.json",
            Path.home() / ".basable" / "config.json",
        ]

        for path in search_paths:
            if path.exists():
                return str(path)

        return str(Path.cwd() / "config.json")

    def load(self) -> None:
        """加载配置文件"""
        if not os.path.exists(self.config_path):
            self._create_default_config()

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._data = json.load(f)

        self._parse_config()

    def _parse_config(self) -> None:
        """解析配置"""
        self.connection = ConnectionConfig(**self._data.get('connection', {}))
        self.settings = Settings(**self._data.get('settings', {}))
        self.logging = LogConfig(**self._data.get('logging', {}))
        self.redis = RedisConfig(**self._data.get('redis', {}))

        configure(self.settings)

    def _create_default_config(self) -> None:
        """创建默认配置文件"""
        default_config = {
            "connection": {
                "source_type": "database",
                "source": "mysql",
                "username": "root",
                "password": "",
                "host": "localhost",
                "port": 3306,
                "db_name": "basable"
            },
            "settings": asdict(Settings()),
            "logging": {
                "log_level": "INFO",
                "log_file": "basable.log"
            },
            "redis": {
                "enabled": False
            }
        }

        directory = os.path.dirname(self.config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(default_config, f, indent=4, ensure_ascii=False)

        self._data = default_config

    def save(self) -> None:
        """保存配置"""
        config_dict = {
            "connection": self.connection.to_dict() if self.connection else {},
            "settings": asdict(self.settings) if self.settings else {},
            "logging": asdict(self.logging) if self.logging else {},
            "redis": asdict(self.redis) if self.redis else {},
        }

        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(config_dict, f, indent=4, ensure_ascii=False)

    def validate(self) -> bool:
        """验证配置是否有效"""
        if not self.connection:
            raise ConfigurationError("missing connection configuration")

        # 数据源类型不合法时直接抛出
        source = self.connection.get_source()
        if source.kind == SourceKind.DATABASE and not self.connection.db_name:
            raise ConfigurationError("database connection requires db_name")

        return True

    def get(self, key: str, default: Any = None) -> Any:
        """获取配置值"""
        keys = key.split('.')
        value = self._data

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """设置配置值"""
        keys = key.split('.')
        data = self._data

        for k in keys[:-1]:
            if k not in data:
                data[k] = {}
            data = data[k]

        data[keys[-1]] = value
        self._parse_config()

    def reload(self) -> None:
        """重新加载配置"""
        self.load()
