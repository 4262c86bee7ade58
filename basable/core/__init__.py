"""核心模块"""

from .foundation import Basable

__all__ = ["Basable"]
