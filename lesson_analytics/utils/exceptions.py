# -*- coding: utf-8 -*-
"""
Исключения уровня API.

Каждое исключение несёт HTTP статус и текст для клиента; обработчики из
``lesson_analytics.api.v1.responses`` превращают их в ``{success: false, message}``.
"""

from fastapi import HTTPException, status


class APIException(HTTPException):
    """Базовое исключение сервиса. Подклассы задают ``status_code`` и ``code``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "API_ERROR"

    def __init__(self, detail: str, headers: dict | None = None):
        super().__init__(status_code=type(self).status_code, detail=detail, headers=headers)


class NotFoundError(APIException):
    """
    Курс, глава или урок отсутствуют в каталоге.

    ``missing`` согласуется с родом ресурса: "Глава ... не найдена".
    """

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(
        self,
        resource_type: str,
        resource_id: str | int | None = None,
        missing: str = "не найден",
    ):
        self.resource_type = resource_type
        if resource_id is None:
            detail = f"{resource_type} {missing}"
        else:
            detail = f"{resource_type} с ID {resource_id} {missing}"
        super().__init__(detail)


class PermissionDeniedError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    code = "PERMISSION_DENIED"

    def __init__(self, detail: str = "Недостаточно прав"):
        super().__init__(detail)


class ValidationError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class StoreError(APIException):
    """
    Непредвиденный сбой хранилища или расчёта.

    ``error`` хранит текст исходного исключения и отдаётся клиенту только
    при ``EXPOSE_ERROR_DETAILS=true``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORE_ERROR"

    def __init__(self, detail: str, error: str | None = None):
        super().__init__(detail)
        self.error = error
