"""
应用异常基类 + FastAPI 全局异常处理

所有业务异常继承 AppError，携带 HTTP 状态码与对外消息。
对外响应统一为 {"status": <int>, "message": <str>}。
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.observability.metrics import ERROR_TOTAL

log = structlog.get_logger()

INTERNAL_ERROR_MESSAGE = "服务内部错误"


class AppError(Exception):
    """业务异常基类"""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"status": self.status_code, "message": self.message}


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "message": message},
        headers=headers,
    )


def format_validation_errors(errors: list[dict]) -> str:
    """把 pydantic 错误列表压成一行字段级诊断：loc: msg; loc: msg"""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体/参数校验失败统一按 400 返回"""
    return _error_response(400, format_validation_errors(exc.errors()))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底：未识别异常不向调用方泄露内部细节"""
    ERROR_TOTAL.labels(error_type="unknown").inc()
    log.error("未处理异常", path=request.url.path, error=str(exc), exc_info=exc)
    return _error_response(500, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """注册全局异常处理器"""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
