# -*- coding: utf-8 -*-
"""
API эндпоинты трекинга и аналитики просмотров уроков.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.api.v1.lesson_views.schemas import (
    ChapterViewsAnalytics, CourseViewsAnalytics, LessonViewRead,
    LessonViewsAnalytics, TrackViewRequest, UserViewHistory)
from lesson_analytics.api.v1.responses import ApiResponse, ok, store_failure
from lesson_analytics.clients.database_client import get_db
from lesson_analytics.security.security import (authenticated, ensure_admin,
                                                ensure_self_or_admin)
from lesson_analytics.service.analytics import (get_chapter_views_analytics,
                                                get_course_views_analytics,
                                                get_lesson_views_analytics,
                                                get_user_view_history)
from lesson_analytics.service.tracking_service import track_lesson_view
from lesson_analytics.utils.exceptions import APIException

router = APIRouter(prefix="/lesson-views", tags=["🎬 Просмотры уроков"])


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post(
    "/track",
    response_model=ApiResponse[LessonViewRead],
    status_code=status.HTTP_200_OK,
)
async def track_view(
    payload: TrackViewRequest,
    request: Request,
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(authenticated),
):
    """
    Зарегистрировать просмотр урока текущим пользователем.

    Повторные события по тому же уроку сливаются в одну запись: длительность
    берется максимальная, завершенность не сбрасывается.
    """
    student_id = int(claims["sub"])

    try:
        view = await track_lesson_view(
            session,
            student_id=student_id,
            course_id=payload.course_id,
            chapter_id=payload.chapter_id,
            lesson_id=payload.lesson_id,
            lesson_title=payload.lesson_title,
            view_duration=payload.view_duration,
            is_completed=payload.is_completed,
            ip_address=_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при регистрации просмотра урока", e) from e

    return ok(
        LessonViewRead.model_validate(view).model_dump(mode="json"),
        message="Просмотр урока зарегистрирован",
    )


@router.get(
    "/lesson/{course_id}/{chapter_id}/{lesson_id}",
    response_model=ApiResponse[LessonViewsAnalytics],
)
async def lesson_views(
    course_id: int,
    chapter_id: int,
    lesson_id: int,
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(authenticated),
):
    """Все просмотры урока со сводкой (только для администраторов)."""
    ensure_admin(claims)

    try:
        result = await get_lesson_views_analytics(session, course_id, chapter_id, lesson_id)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении просмотров урока", e) from e

    return ok(result.model_dump(mode="json"))


@router.get(
    "/course/{course_id}/analytics",
    response_model=ApiResponse[CourseViewsAnalytics],
)
async def course_analytics(
    course_id: int,
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(authenticated),
):
    try:
        result = await get_course_views_analytics(session, course_id)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении аналитики курса", e) from e

    return ok(result.model_dump(mode="json"))


@router.get(
    "/chapter/{chapter_id}/analytics",
    response_model=ApiResponse[ChapterViewsAnalytics],
)
async def chapter_analytics(
    chapter_id: int,
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(authenticated),
):
    try:
        result = await get_chapter_views_analytics(session, chapter_id)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении аналитики главы", e) from e

    return ok(result.model_dump(mode="json"))


@router.get(
    "/user/{user_id}/history",
    response_model=ApiResponse[UserViewHistory],
)
async def user_history(
    user_id: int,
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(authenticated),
):
    """
    История просмотров пользователя.

    Доступна самому пользователю и администраторам.
    """
    ensure_self_or_admin(claims, user_id)

    try:
        result = await get_user_view_history(session, user_id)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении истории просмотров", e) from e

    logger.debug(f"История просмотров пользователя {user_id}: {len(result.view_history)} записей")
    return ok(result.model_dump(mode="json"))
