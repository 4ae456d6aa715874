"""
全局异常处理模块 (Global Exception Handling Module)

定义业务异常类和 FastAPI 全局异常处理器，提供统一的错误响应格式 {"error": <message>}。
所有未捕获的异常都会被转换为结构化 JSON 响应，避免裸 500 错误和内部细节泄露。

Defines business exception classes and FastAPI global exception handlers,
providing a unified {"error": <message>} response body. All uncaught exceptions are
converted to structured JSON responses without leaking internal details.
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# ============================================================
# 业务异常类 (Business Exception Classes)
# ============================================================

class BusinessError(Exception):
    """业务异常基类 (Base Business Exception)"""
    status_code: int = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BusinessError):
    """请求参数缺失或格式错误 (Missing or Malformed Request Input)"""
    status_code = 400


class NotFoundError(BusinessError):
    """Prometheus 中没有匹配的数据 (No Matching Series in Prometheus)"""
    status_code = 404


class BackendUnavailableError(BusinessError):
    """Prometheus 后端不可用 (Prometheus Backend Unreachable)"""
    status_code = 502


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ============================================================
# 全局异常处理器注册 (Global Exception Handler Registration)
# ============================================================

def register_exception_handlers(app: FastAPI) -> None:
    """
    注册全局异常处理器到 FastAPI 应用 (Register global exception handlers to FastAPI app)

    处理优先级：
    1. BusinessError 子类 → 对应 HTTP 状态码 + {"error": message}
    2. HTTPException / RequestValidationError → 保持状态码，包装为统一格式
    3. Exception → 500 + 完整 traceback 日志
    """

    @app.exception_handler(BusinessError)
    async def business_error_handler(request: Request, exc: BusinessError) -> JSONResponse:
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error_response(400, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        # 记录完整 traceback 用于调试 (Log full traceback for debugging)
        logger.error(
            "Unhandled exception on %s %s: %s\n%s",
            request.method,
            request.url.path,
            str(exc),
            traceback.format_exc(),
        )
        return _error_response(500, "Internal server error")
