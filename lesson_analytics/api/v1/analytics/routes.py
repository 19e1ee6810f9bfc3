# -*- coding: utf-8 -*-
"""
API эндпоинты аналитики студентов и платформы.
"""

from typing import List

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.api.v1.analytics.schemas import (DashboardOverview,
                                                       StudentProgress,
                                                       StudentProgressSummary,
                                                       StudentsAnalytics,
                                                       ViewsStatistics)
from lesson_analytics.api.v1.responses import ApiResponse, ok, store_failure
from lesson_analytics.clients.database_client import get_db
from lesson_analytics.security.security import (admin_only, authenticated,
                                                ensure_self_or_admin)
from lesson_analytics.service.analytics import (get_all_students_progress,
                                                get_dashboard_overview,
                                                get_student_progress,
                                                get_students_analytics,
                                                get_views_statistics)
from lesson_analytics.utils.exceptions import APIException

router = APIRouter(prefix="/analytics", tags=["📊 Аналитика"])


@router.get(
    "/students/progress",
    response_model=ApiResponse[List[StudentProgressSummary]],
)
async def all_students_progress(
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(admin_only),
):
    """Сводный прогресс всех студентов с просмотрами."""
    try:
        result = await get_all_students_progress(session)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении прогресса студентов", e) from e

    return ok([item.model_dump(mode="json") for item in result])


@router.get(
    "/students/{student_id}/progress",
    response_model=ApiResponse[StudentProgress],
)
async def student_progress(
    student_id: int,
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(authenticated),
):
    """Прогресс конкретного студента: просмотры, главы и экзамены."""
    ensure_self_or_admin(claims, student_id)

    try:
        result = await get_student_progress(session, student_id)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении прогресса студента", e) from e

    return ok(result.model_dump(mode="json"))


@router.get("/views", response_model=ApiResponse[ViewsStatistics])
async def views_statistics(
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(admin_only),
):
    try:
        result = await get_views_statistics(session)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении статистики просмотров", e) from e

    return ok(result.model_dump(mode="json"))


@router.get("/students", response_model=ApiResponse[StudentsAnalytics])
async def students_analytics(
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(admin_only),
):
    try:
        result = await get_students_analytics(session)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении аналитики студентов", e) from e

    return ok(result.model_dump(mode="json"))


@router.get("/dashboard", response_model=ApiResponse[DashboardOverview])
async def dashboard(
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(admin_only),
):
    """
    Сводка дашборда администратора.

    Единственная точка перехвата ошибок для вспомогательных функций дашборда.
    """
    logger.info(f"📈 Запрос дашборда администратором {claims.get('sub')}")
    try:
        result = await get_dashboard_overview(session)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении данных дашборда", e) from e

    return ok(result.model_dump(mode="json"))
