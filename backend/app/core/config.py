"""
应用配置模块 (Application Configuration Module)

使用 Pydantic Settings 管理监控代理的所有配置项，支持从 .env 文件和环境变量读取。
提供 Prometheus 后端地址、认证凭据、查询参数、服务监听端口等配置。

Uses Pydantic Settings to manage every configuration item of the monitoring proxy,
reading from a .env file and environment variables. Covers the Prometheus backend URL,
credentials, range-query parameters and the HTTP listen address.

配置在进程启动时构造一次，之后不可修改 (frozen)，通过 create_app() 显式注入。
Settings are built once at startup, frozen, and passed explicitly into create_app().
"""
import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    应用全局配置类 (Application Global Configuration Class)

    字段名自动映射同名环境变量（不区分大小写），例如 PROMETHEUS_URL、PROMQL、PORT。
    Field names map to same-named environment variables (case insensitive),
    e.g. PROMETHEUS_URL, PROMQL, PORT.
    """

    # Prometheus 后端配置 (Prometheus Backend Configuration)
    prometheus_url: str = "http://localhost:9090"  # Prometheus 基础地址 (Base URL)
    prometheus_user: str = ""  # Basic Auth 用户名，为空时不发送认证 (Basic auth user, omitted when empty)
    prometheus_password: str = ""  # Basic Auth 密码 (Basic auth password)
    prometheus_timeout: float = Field(10.0, gt=0)  # 出站请求超时秒数 (Outbound timeout, seconds)

    # 查询配置 (Query Configuration)
    promql: str = "probe_http_status_code"  # 默认指标名 (Default metric name)
    query_step: str = "60s"  # range query 采样步长 (Range query step)
    window_hours: int = Field(6, ge=1)  # 查询窗口跨度（小时） (Window span in hours)

    # 行为开关 (Behaviour Switches)
    # 后端调用失败时返回 404（兼容旧客户端）；关闭后返回 502
    # Backend failures answer 404 for old callers; disable to answer 502 instead
    backend_errors_as_not_found: bool = True
    # 只提供 date 或 time 其中之一时是否报错 (Reject a lone date or time)
    require_date_time_pair: bool = False

    # 服务配置 (Server Configuration)
    host: str = "0.0.0.0"  # 监听地址 (Bind host)
    port: int = Field(5000, ge=1, le=65535)  # 监听端口 (Bind port)
    log_level: str = "INFO"  # 日志级别 (Log level)

    @field_validator("prometheus_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level

    @property
    def query_range_url(self) -> str:
        """Prometheus range query 端点 (Prometheus range query endpoint)."""
        return f"{self.prometheus_url}/api/v1/query_range"

    @property
    def basic_auth(self) -> tuple[str, str] | None:
        """返回 httpx 可用的 Basic Auth 元组，未配置用户名时为 None。"""
        if not self.prometheus_user:
            return None
        return (self.prometheus_user, self.prometheus_password)

    def masked(self) -> dict:
        """导出配置字典，密码脱敏 (Dump settings with the password masked)."""
        data = self.model_dump()
        if data["prometheus_password"]:
            data["prometheus_password"] = "***"
        return data

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "frozen": True}  # 自动加载 .env，构造后只读


@lru_cache
def get_settings() -> Settings:
    """
    进程级默认配置 (Process-wide Default Settings)

    仅在 create_app() 未显式传入配置时使用。
    Used only when create_app() is not given explicit settings.
    """
    settings = Settings()
    if not settings.prometheus_user:
        logger.warning(
            "PROMETHEUS_USER 未设置，将以匿名方式查询 Prometheus | "
            "PROMETHEUS_USER not set, querying Prometheus without basic auth"
        )
    return settings
