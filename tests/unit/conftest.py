# tests/unit/conftest.py
"""单元测试专用 fixtures.

提供内存存储、固定时钟与 Flask 测试客户端。
"""

from datetime import UTC, datetime, timedelta

import pytest

from scriptform import create_app
from scriptform.infra.kv_store import InMemoryKeyValueStore
from scriptform.services.form_config import FormConfigStore
from scriptform.settings import Settings


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 强制注入隔离环境变量.

    目标:
    - unit tests 不读写本机的 userdata 目录
    - 避免开发者本机环境变量影响测试稳定性
    """
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("FORM_CONFIG_BACKEND", "memory")
    monkeypatch.delenv("FORM_CONFIG_DIR", raising=False)
    monkeypatch.delenv("FORM_CONFIG_STORAGE_KEY", raising=False)


class FakeClock:
    """可手动推进的时钟, 供 store 生成 lastUpdated."""

    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: int = 60) -> datetime:
        self.current += timedelta(seconds=seconds)
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(backend, clock) -> FormConfigStore:
    return FormConfigStore(backend, clock=clock)


@pytest.fixture
def app(store):
    settings = Settings.load()
    application = create_app(settings=settings, store=store)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()
