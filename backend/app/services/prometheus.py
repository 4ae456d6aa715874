"""
Prometheus 查询客户端 (Prometheus Query Client)

功能描述 (Description):
    封装对 Prometheus /api/v1/query_range 的异步 HTTP 调用。
    调用结果以 QueryResult 显式区分三种情况，由上层路由决定 HTTP 状态码映射：
      - DATA:   查询成功且有匹配序列
      - EMPTY:  查询成功但没有匹配序列
      - FAILED: 网络异常、非 2xx 响应或响应格式错误

    Wraps async calls to the Prometheus range-query endpoint. Outcomes are reported as
    an explicit QueryResult instead of raising, so the router owns the HTTP mapping.

技术特性 (Technical Features):
    - 异步 HTTP 客户端 (httpx.AsyncClient)，每次查询独立连接
    - 超时控制：由配置 prometheus_timeout 决定
    - Basic Auth：仅在配置了用户名时发送
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import httpx

from app.core.config import Settings
from app.services.window import QueryWindow

logger = logging.getLogger(__name__)


class QueryStatus(str, enum.Enum):
    DATA = "data"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class QueryResult:
    """range query 结果 (Range Query Outcome)"""
    status: QueryStatus
    result: List[Any] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: List[Any]) -> "QueryResult":
        return cls(QueryStatus.DATA if result else QueryStatus.EMPTY, list(result))

    @classmethod
    def failed(cls, error: str) -> "QueryResult":
        return cls(QueryStatus.FAILED, error=error)

    @property
    def ok(self) -> bool:
        return self.status is not QueryStatus.FAILED


def escape_label_value(value: str) -> str:
    """转义 PromQL 字符串字面量中的反斜杠和双引号。"""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_popsite_query(metric: str, popsite: str) -> str:
    """构造 <metric>{popsite="<value>"} 查询表达式。"""
    return f'{metric}{{popsite="{escape_label_value(popsite)}"}}'


def extract_result(payload: Any) -> List[Any]:
    """
    从响应体中取出 data.result 列表 (Extract data.result from a response body)

    Raises:
        ValueError: 响应体不是 Prometheus 成功响应格式
    """
    if not isinstance(payload, dict):
        raise ValueError("response body is not an object")
    if payload.get("status", "success") != "success":
        raise ValueError(f"prometheus status {payload.get('status')!r}: {payload.get('error', '')}")
    data = payload.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("result"), list):
        raise ValueError("response body has no data.result list")
    return data["result"]


class PrometheusClient:
    """
    Prometheus range query 客户端类 (Prometheus Range Query Client)

    持有只读配置，无共享可变状态，可被并发请求安全复用。
    Holds read-only settings only, safe to share between concurrent requests.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings

    async def query_range(self, query: str, window: QueryWindow) -> QueryResult:
        """
        执行 range query (Run a range query)

        Args:
            query: PromQL 表达式
            window: 查询时间窗口 (UTC Unix 秒)

        Returns:
            QueryResult: 不抛异常，失败时返回 FAILED 并携带原因
        """
        params = {
            "query": query,
            "start": window.start,
            "end": window.end,
            "step": self._settings.query_step,
        }
        logger.debug("Prometheus query_range %s params=%s", self._settings.query_range_url, params)

        try:
            async with httpx.AsyncClient(timeout=self._settings.prometheus_timeout) as client:
                resp = await client.get(
                    self._settings.query_range_url,
                    params=params,
                    auth=self._settings.basic_auth,
                )
                resp.raise_for_status()  # 检查HTTP状态码
                payload = resp.json()
        except httpx.HTTPStatusError as e:
            return QueryResult.failed(f"HTTP {e.response.status_code} from Prometheus")
        except httpx.HTTPError as e:
            return QueryResult.failed(f"{type(e).__name__}: {e}")
        except ValueError as e:
            # 响应体不是合法 JSON (Body is not valid JSON)
            return QueryResult.failed(f"invalid JSON body: {e}")

        try:
            result = extract_result(payload)
        except ValueError as e:
            return QueryResult.failed(str(e))
        return QueryResult.from_result(result)

    async def query_popsite(self, popsite: str, window: QueryWindow) -> QueryResult:
        """按 popsite 标签查询默认指标 (Query the default metric scoped to a popsite)."""
        return await self.query_range(build_popsite_query(self._settings.promql, popsite), window)
