"""pytest 公共夹具"""

import pytest

from basable.config.config import Settings, configure
from tests.fakes import FakeConnector, USER_COLUMNS


@pytest.fixture(autouse=True)
def reset_settings():
    """每个测试后恢复默认进程设置"""
    yield
    configure(Settings())


@pytest.fixture
def connector() -> FakeConnector:
    conn = FakeConnector()
    conn.respond("IS_PRIMARY", USER_COLUMNS)
    return conn
