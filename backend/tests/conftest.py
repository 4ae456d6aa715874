"""
Popsite Monitor 测试基础配置

提供测试配置、伪造的 Prometheus 客户端、FastAPI 异步测试客户端等通用 fixture。
所有测试不依赖真实的 Prometheus 服务。
"""
from typing import AsyncGenerator

# 必须在导入 app 之前设置环境变量，避免读取真实配置
import os
os.environ["PROMETHEUS_URL"] = "http://prometheus.test:9090"
os.environ["PROMETHEUS_USER"] = "tester"
os.environ["PROMETHEUS_PASSWORD"] = "secret"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.core.config import Settings
from app.main import create_app
from app.routers.http_monitoring import get_prometheus_client
from app.services.prometheus import PrometheusClient, QueryResult


class FakePrometheusClient(PrometheusClient):
    """内存级 Prometheus 客户端，返回预设结果并记录查询。"""

    def __init__(self, settings: Settings, result: QueryResult | None = None):
        super().__init__(settings)
        self.result = result or QueryResult.from_result([])
        self.calls: list[tuple[str, object]] = []

    async def query_range(self, query, window):
        self.calls.append((query, window))
        return self.result


def make_series(instance: str | None, values: list, **labels) -> dict:
    """构造一条 Prometheus range query 原始序列。"""
    metric = dict(labels)
    if instance is not None:
        metric["instance"] = instance
    return {"metric": metric, "values": values}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        prometheus_url="http://prometheus.test:9090/",
        prometheus_user="tester",
        prometheus_password="secret",
        _env_file=None,
    )


@pytest.fixture
def fake_prometheus(settings: Settings) -> FakePrometheusClient:
    return FakePrometheusClient(settings)


@pytest.fixture
def app(settings: Settings, fake_prometheus: FakePrometheusClient):
    application = create_app(settings)
    application.dependency_overrides[get_prometheus_client] = lambda: fake_prometheus
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供配置好依赖覆盖的异步 HTTP 测试客户端。"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
