"""日志配置测试"""

import sys

from loguru import logger

from basable.config.config import LogConfig
from basable.monitor.logger import error_log_path, setup_logger


class TestSetupLogger:
    """日志测试类"""

    def teardown_method(self):
        logger.remove()
        logger.add(sys.stderr)

    def test_file_sinks(self, tmp_path):
        log_file = tmp_path / "basable.log"

        setup_logger(LogConfig(log_level="DEBUG", log_file=str(log_file)))
        logger.error("query failed")

        assert "query failed" in log_file.read_text(encoding="utf-8")
        assert "query failed" in (tmp_path / "basable.error.log").read_text(encoding="utf-8")

    def test_stdout_only(self, tmp_path, capsys):
        setup_logger(LogConfig(log_level="INFO", log_file=None))
        logger.info("hello")

        assert "hello" in capsys.readouterr().out
        assert list(tmp_path.iterdir()) == []

    def test_custom_format_and_error_suffix(self, tmp_path):
        log_file = tmp_path / "basable.log"

        setup_logger(LogConfig(
            log_level="INFO",
            log_file=str(log_file),
            file_format="[{level}] {message}",
            error_log_suffix=".failures.log",
        ))
        logger.error("export failed")

        assert "[ERROR] export failed" in log_file.read_text(encoding="utf-8")
        assert "export failed" in (tmp_path / "basable.failures.log").read_text(encoding="utf-8")
        assert not (tmp_path / "basable.error.log").exists()

    def test_error_sink_can_be_disabled(self, tmp_path):
        log_file = tmp_path / "basable.log"
        config = LogConfig(log_file=str(log_file), error_log_suffix=None)

        setup_logger(config)
        logger.error("boom")

        assert error_log_path(config) is None
        assert [p.name for p in tmp_path.iterdir()] == ["basable.log"]
