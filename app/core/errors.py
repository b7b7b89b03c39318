"""统一错误处理

提供标准化的错误响应结构、自定义异常类以及 FastAPI 异常处理器。
所有错误响应统一为 {"error": message, "code": code}。
"""

from typing import Any, NoReturn

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.logging import get_logger

logger = get_logger("errors")

UPSTREAM_ERROR_MESSAGE = "Erro interno do servidor. Tente novamente."


class AppError(HTTPException):
    """应用自定义异常

    使用示例:
        raise AppError(
            code="user_not_found",
            message="Usuário não encontrado",
            status_code=404,
            data={"session_id": session_id},
        )
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.code = code
        self.error_message = message
        self.data = data
        super().__init__(status_code=status_code, detail=message, headers=headers)


class UpstreamError(Exception):
    """生成式 API 调用失败（网络、超时、非 2xx、响应无法解析）"""


def create_error_response(
    code: str,
    message: str,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """创建标准错误响应"""
    body: dict[str, Any] = {"error": message, "code": code}
    if data:
        body["details"] = data
    return body


# 常用错误快捷函数
def raise_not_found(resource: str, message: str, resource_id: Any = None) -> NoReturn:
    """抛出资源不存在错误"""
    raise AppError(
        code=f"{resource}_not_found",
        message=message,
        status_code=status.HTTP_404_NOT_FOUND,
        data={"id": resource_id} if resource_id is not None else None,
    )


def raise_bad_request(code: str, message: str, data: dict[str, Any] | None = None) -> NoReturn:
    """抛出请求参数错误"""
    raise AppError(
        code=code,
        message=message,
        status_code=status.HTTP_400_BAD_REQUEST,
        data=data,
    )


def raise_unauthorized(message: str = "Acesso negado") -> NoReturn:
    """抛出未认证错误"""
    raise AppError(
        code="unauthorized",
        message=message,
        status_code=status.HTTP_401_UNAUTHORIZED,
    )


def raise_upstream_error(message: str = UPSTREAM_ERROR_MESSAGE, *, cause: Exception | None = None) -> NoReturn:
    """抛出上游（生成式 API）错误，细节只写日志不返回给客户端"""
    raise AppError(
        code="upstream_error",
        message=message,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    ) from cause


def _format_validation_error(exc: RequestValidationError) -> tuple[str, list[dict[str, Any]]]:
    """把 pydantic 校验错误转为字段级消息"""
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        fields.append({"field": ".".join(loc) or None, "message": err.get("msg", "")})

    if fields:
        first = fields[0]
        message = f"{first['field']}: {first['message']}" if first["field"] else first["message"]
    else:
        message = "Dados inválidos"
    return message, fields


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.code, exc.error_message, exc.data),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response("http_error", str(exc.detail)),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message, fields = _format_validation_error(exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=create_error_response("validation_error", message, {"fields": fields}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "未处理的异常",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response("internal_error", UPSTREAM_ERROR_MESSAGE),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """注册全局异常处理器"""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
