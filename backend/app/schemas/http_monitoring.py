"""
HTTP 监控接口 Schema

定义 /http_monitoring 与 /health 的响应结构，用于 OpenAPI 文档和序列化。
"""
from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """统一错误响应"""
    error: str = Field(..., description="错误信息")


class HealthResponse(BaseModel):
    """存活检查响应"""
    status: str = "ok"
    timestamp: datetime
