"""配置模块"""

from .config import (
    Config,
    ConnectionConfig,
    Settings,
    LogConfig,
    RedisConfig,
    SourceType,
    SourceKind,
    DatabaseType,
    get_settings,
    configure,
)

__all__ = [
    "Config",
    "ConnectionConfig",
    "Settings",
    "LogConfig",
    "RedisConfig",
    "SourceType",
    "SourceKind",
    "DatabaseType",
    "get_settings",
    "configure",
]
