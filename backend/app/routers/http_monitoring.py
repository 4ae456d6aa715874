"""
HTTP 监控路由模块 (HTTP Monitoring Router)

功能说明：代理 Prometheus，按 popsite 查询 HTTP 探测状态码并整理为健康标记序列
核心职责：
  - 校验 popsite / date / time 查询参数
  - 解析查询时间窗口（默认最近 6 小时）
  - 调用 Prometheus range query 并映射结果为 HTTP 响应
  - 将原始序列转换为 {短名称: [0/1, ...]}
依赖关系：依赖 PrometheusClient（通过 app.state 注入，携带只读配置）
API端点：GET /http_monitoring

Author: Popsite Monitor Team
"""
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.exceptions import BackendUnavailableError, NotFoundError, ValidationError
from app.schemas.http_monitoring import ErrorResponse
from app.services.prometheus import PrometheusClient
from app.services.transformer import parse_series, transform_series
from app.services.window import resolve_window

logger = logging.getLogger(__name__)

router = APIRouter(tags=["http-monitoring"])


def get_prometheus_client(request: Request) -> PrometheusClient:
    """从 app.state 取出 Prometheus 客户端。"""
    return request.app.state.prometheus


async def collect_health_flags(
    client: PrometheusClient,
    popsite: Optional[str],
    date: Optional[str] = None,
    time: Optional[str] = None,
) -> Dict[str, List[int]]:
    """
    执行完整查询流程 (Run the full query pipeline)

    校验 -> 时间窗口 -> Prometheus 查询 -> 序列转换。供路由和 CLI 共用。

    Raises:
        ValidationError: popsite 缺失或 date/time 格式错误
        NotFoundError: 无匹配数据（默认配置下也包括后端调用失败）
        BackendUnavailableError: 后端调用失败且关闭了 backend_errors_as_not_found
    """
    settings = client.settings
    if not popsite:
        raise ValidationError("Popsite is required")

    window = resolve_window(
        date,
        time,
        hours=settings.window_hours,
        require_pair=settings.require_date_time_pair,
    )

    result = await client.query_popsite(popsite, window)
    not_found = NotFoundError(f"Popsite '{popsite}' not found in Prometheus data")

    if not result.ok:
        logger.warning("Prometheus query failed for popsite=%s: %s", popsite, result.error)
        if settings.backend_errors_as_not_found:
            raise not_found
        raise BackendUnavailableError("Prometheus backend unavailable")

    series = parse_series(result.result)
    if not series:
        logger.info("No series for popsite=%s in [%d, %d]", popsite, window.start, window.end)
        raise not_found

    return transform_series(series)


@router.get(
    "/http_monitoring",
    response_model=Dict[str, List[int]],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def http_monitoring(
    popsite: Optional[str] = Query(None, description="Popsite 标签值"),
    date: Optional[str] = Query(None, description="窗口起始日期 YYYY-MM-DD"),
    time: Optional[str] = Query(None, description="窗口起始时间 HH:mm (24 小时制)"),
    client: PrometheusClient = Depends(get_prometheus_client),
):
    """
    查询 popsite 的 HTTP 健康标记 (Query HTTP health flags for a popsite)

    返回 {短名称: [0/1, ...]}，0 表示状态码 200/301/302，1 表示其他状态码。
    """
    return await collect_health_flags(client, popsite, date, time)
