"""
异常定义
"""
from typing import Optional


class BasableError(Exception):
    """所有 basable 异常的基类"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class ConfigurationError(BasableError):
    """不支持的数据源或数据库类型"""


class DBConnectionError(BasableError):
    """驱动层连接或连接池失败"""


class MalformedChainError(BasableError):
    """过滤链的第一个条件不是 BASE"""


class QueryExecutionError(BasableError):
    """后端拒绝执行编译后的 SQL"""


class NotFoundError(BasableError):
    """未知的表、列或连接 ID"""


class FeatureNotImplementedError(BasableError, NotImplementedError):
    """尚未支持的数据源类型（云端、文件等）"""

    def __init__(self, message: str = "feature not implemented"):
        super().__init__(message)


class MissingParameterError(BasableError):
    """构建查询选项时缺少必要参数"""


class NotifyError(BasableError):
    """Webhook 通知失败且策略要求中止操作"""
