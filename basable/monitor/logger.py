"""
日志配置

控制台输出一份，配置了 log_file 时再加一个滚动文件和一个只记录 ERROR 的文件。
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.config import LogConfig


def error_log_path(config: LogConfig) -> Optional[Path]:
    """错误日志路径，未配置文件或后缀时返回 None"""
    if not config.log_file or not config.error_log_suffix:
        return None
    return Path(config.log_file).with_suffix(config.error_log_suffix)


def _add_file_sink(path: str, level: str, config: LogConfig, retention: int) -> None:
    logger.add(
        path,
        level=level,
        format=config.file_format,
        rotation=config.log_max_size,
        retention=retention,
        compression="zip",
        encoding="utf-8",
    )


def setup_logger(config: LogConfig) -> None:
    """配置日志"""
    logger.remove()

    logger.add(sys.stdout, level=config.log_level, format=config.console_format, colorize=True)

    if config.log_file:
        _add_file_sink(config.log_file, config.log_level, config, config.log_backup_count)

    # 错误日志保留两倍份数
    error_file = error_log_path(config)
    if error_file is not None:
        _add_file_sink(str(error_file), "ERROR", config, config.log_backup_count * 2)

    logger.info(f"Logger initialized with level: {config.log_level}, file: {config.log_file or '-'}")
