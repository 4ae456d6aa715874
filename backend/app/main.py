"""
Popsite 监控代理应用入口模块 (Popsite Monitor Application Entry Module)

负责 FastAPI 应用的构造：注入只读配置和 Prometheus 客户端、注册全局异常处理器、
注册 /http_monitoring 路由和 /health 存活检查。

Builds the FastAPI application: injects the frozen settings and the Prometheus client,
registers the global exception handlers, the /http_monitoring router and the /health probe.

运行方式 (Run):
    uvicorn app.main:app --port 5000
    popsite-monitor run
"""
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI

from app import __version__
from app.core.config import Settings, get_settings
from app.core.exceptions import register_exception_handlers
from app.routers import http_monitoring
from app.schemas.http_monitoring import HealthResponse
from app.services.prometheus import PrometheusClient


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    应用工厂 (Application Factory)

    Args:
        settings: 显式构造的配置；为空时从环境变量 / .env 读取

    Returns:
        FastAPI: 配置完成的应用实例
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Popsite Monitor",
        description="Prometheus HTTP probe proxy | Prometheus HTTP 探测代理",
        version=__version__,
    )
    app.state.prometheus = PrometheusClient(settings)

    # 注册全局异常处理器 (Register global exception handlers)
    register_exception_handlers(app)

    app.include_router(http_monitoring.router)  # HTTP 监控 (HTTP monitoring)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """存活检查接口 (Liveness Probe)"""
        return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))

    return app


app = create_app()
