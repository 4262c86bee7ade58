"""监控模块"""

from .logger import setup_logger
from .notifier import EventNotifier

__all__ = ["setup_logger", "EventNotifier"]
