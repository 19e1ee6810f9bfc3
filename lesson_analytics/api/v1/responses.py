# -*- coding: utf-8 -*-
"""
Единый формат ответов API: ``{success, data?, message?, error?}``.
"""

from typing import Any, Generic, Optional, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from lesson_analytics.config.settings import settings
from lesson_analytics.utils.exceptions import APIException, StoreError

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Успешный ответ API."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    return {"success": True, "message": message, "data": data}


def error_body(message: str, error: Optional[str] = None) -> dict:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


def store_failure(message: str, exc: Exception) -> StoreError:
    """
    Превратить непредвиденную ошибку в StoreError для ответа 500.

    Полный traceback пишется в лог, клиенту уходит только общее сообщение.
    """
    logger.exception(f"{message}: {type(exc).__name__}: {exc}")
    return StoreError(message, error=str(exc))


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    error = None
    if isinstance(exc, StoreError) and settings.expose_error_details:
        error = exc.error
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail, error),
        headers=exc.headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = ", ".join(
        ".".join(str(part) for part in err["loc"] if part != "body")
        for err in exc.errors()
    )
    logger.warning(f"Некорректный запрос {request.method} {request.url.path}: {fields}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(f"Некорректные данные запроса: {fields}"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
