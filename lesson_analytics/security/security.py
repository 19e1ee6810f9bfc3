# -*- coding: utf-8 -*-
"""security.security
~~~~~~~~~~~~~~~~~~~~
Проверка bearer-токенов и ролей.

Токены выдаёт сервис авторизации платформы, здесь проверяется только подпись,
срок действия и claims ``sub`` / ``role`` / ``token_type``. Для тестов и
служебных скриптов есть ``create_access_token``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from lesson_analytics.config.logger import configure_logger
from lesson_analytics.config.settings import settings
from lesson_analytics.domain.enums import Role
from lesson_analytics.utils.exceptions import PermissionDeniedError

logger = configure_logger()

# auto_error=False: отсутствие заголовка отдаём как 401, а не 403
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        **data,
        "sub": str(data["sub"]),
        "token_type": "access",
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict:
    """Декодировать access-токен. Любая проблема с токеном даёт 401."""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.warning(f"🔒 JWT отклонён: {exc}")
        raise _unauthorized("Недействительный или истекший токен") from exc

    if claims.get("token_type") != "access" or claims.get("sub") is None:
        raise _unauthorized("Недействительный токен")

    # sub хранит числовой ID пользователя
    try:
        int(claims["sub"])
    except (TypeError, ValueError) as exc:
        raise _unauthorized("Неверный payload токена") from exc
    return claims


def require_roles(*allowed_roles: Role) -> Callable[..., Awaitable[dict]]:
    """Зависимость FastAPI: валидный токен с одной из ``allowed_roles``."""

    async def checker(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    ) -> dict:
        if credentials is None:
            raise _unauthorized("Отсутствует bearer токен")

        claims = verify_token(credentials.credentials)
        try:
            role = Role(claims["role"])
        except (KeyError, ValueError) as exc:
            raise _unauthorized("Неверный payload токена") from exc

        if role not in allowed_roles:
            logger.warning(
                f"🚫 {request.method} {request.url.path}: роль {role.value} "
                f"пользователя {claims['sub']} не допускается"
            )
            raise PermissionDeniedError()
        return claims

    return checker


admin_only = require_roles(Role.ADMIN)
authenticated = require_roles(Role.ADMIN, Role.STUDENT)


def is_admin(claims: dict) -> bool:
    return claims.get("role") == Role.ADMIN.value


def ensure_admin(claims: dict) -> None:
    if not is_admin(claims):
        raise PermissionDeniedError("Доступ запрещен. Требуется роль администратора")


def ensure_self_or_admin(claims: dict, user_id: int) -> None:
    """Данные пользователя видит он сам или администратор."""
    if is_admin(claims) or str(claims.get("sub")) == str(user_id):
        return
    logger.warning(f"🚫 Пользователь {claims.get('sub')} запросил данные пользователя {user_id}")
    raise PermissionDeniedError("Нет доступа к данным другого пользователя")
