# -*- coding: utf-8 -*-
"""
Платформенная статистика для администраторов.

Статистика просмотров по временным окнам, когортная аналитика студентов и
сводка дашборда. Все числа считаются на лету, ничего не кэшируется.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.api.v1.analytics.schemas import (DashboardOverview,
                                                       DistributionItem,
                                                       MostActiveStudent,
                                                       MostViewedLesson,
                                                       SignupsByDay,
                                                       StudentsAnalytics,
                                                       ViewsStatistics)
from lesson_analytics.config.tracking_config import TrackingConfig
from lesson_analytics.domain.enums import PaymentStatus
from lesson_analytics.repository.enrollments import (count_enrollments,
                                                     sum_paid_enrollments)
from lesson_analytics.repository.exams import get_platform_average_score
from lesson_analytics.repository.lesson_views import (
    count_students_above_views, get_most_active_student,
    get_most_viewed_lesson, sum_watch_counts)
from lesson_analytics.repository.users import (count_students,
                                               get_signups_by_day,
                                               get_students_distribution)


async def get_views_statistics(
    session: AsyncSession, now: Optional[datetime] = None
) -> ViewsStatistics:
    """
    Суммарные просмотры за все время и за последние сутки, неделю и месяц.

    Args:
        session: Сессия базы данных
        now: Точка отсчета окон (по умолчанию текущее время UTC)

    Returns:
        Статистика просмотров с самым активным студентом и самым
        просматриваемым уроком (None, если просмотров нет)
    """
    now = now or datetime.utcnow()

    most_active = await get_most_active_student(session)
    most_viewed = await get_most_viewed_lesson(session)

    return ViewsStatistics(
        total_views=await sum_watch_counts(session),
        last_24_hours=await sum_watch_counts(
            session, since=now - timedelta(days=TrackingConfig.LAST_DAY_WINDOW_DAYS)
        ),
        last_week=await sum_watch_counts(
            session, since=now - timedelta(days=TrackingConfig.LAST_WEEK_WINDOW_DAYS)
        ),
        last_month=await sum_watch_counts(
            session, since=now - timedelta(days=TrackingConfig.LAST_MONTH_WINDOW_DAYS)
        ),
        most_active_student=MostActiveStudent(**most_active) if most_active else None,
        most_viewed_lesson=MostViewedLesson(**most_viewed) if most_viewed else None,
    )


async def get_students_analytics(
    session: AsyncSession, now: Optional[datetime] = None
) -> StudentsAnalytics:
    """Когортные показатели студентов платформы."""
    now = now or datetime.utcnow()

    total = await count_students(session)
    banned = await count_students(session, is_banned=True)

    return StudentsAnalytics(
        total_students=total,
        active_students=await count_students(session, is_banned=False),
        banned_students=banned,
        last_week_active=await count_students(
            session,
            active_since=now - timedelta(days=TrackingConfig.LAST_WEEK_WINDOW_DAYS),
        ),
        monthly_active_users=await count_students(
            session,
            active_since=now - timedelta(days=TrackingConfig.LAST_MONTH_WINDOW_DAYS),
        ),
        high_engagement=await count_students_above_views(
            session, TrackingConfig.HIGH_ENGAGEMENT_THRESHOLD
        ),
        average_exam_score=round(await get_platform_average_score(session)),
        government_distribution=[
            DistributionItem(**item)
            for item in await get_students_distribution(session, "government")
        ],
        level_distribution=[
            DistributionItem(**item)
            for item in await get_students_distribution(session, "level")
        ],
    )


async def get_new_students_count(
    session: AsyncSession,
    days: int = TrackingConfig.NEW_STUDENTS_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> int:
    now = now or datetime.utcnow()
    return await count_students(session, created_since=now - timedelta(days=days))


async def get_student_signups_by_day(
    session: AsyncSession,
    days: int = TrackingConfig.SIGNUPS_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> List[SignupsByDay]:
    """Регистрации студентов по дням за последние ``days`` дней."""
    now = now or datetime.utcnow()
    rows = await get_signups_by_day(session, since=now - timedelta(days=days))
    return [SignupsByDay(**row) for row in rows]


async def calculate_total_revenue(session: AsyncSession) -> float:
    return await sum_paid_enrollments(session)


async def get_pending_enrollments(session: AsyncSession) -> int:
    return await count_enrollments(session, PaymentStatus.PENDING)


async def get_dashboard_overview(session: AsyncSession) -> DashboardOverview:
    """
    Сводка дашборда администратора.

    Ошибки вспомогательных функций не перехватываются здесь и уходят
    вызывающему обработчику.
    """
    now = datetime.utcnow()

    overview = DashboardOverview(
        new_students=await get_new_students_count(session, now=now),
        signups_by_day=await get_student_signups_by_day(session, now=now),
        total_revenue=await calculate_total_revenue(session),
        pending_enrollments=await get_pending_enrollments(session),
        views=await get_views_statistics(session, now=now),
        students=await get_students_analytics(session, now=now),
    )

    logger.info(
        f"📈 Дашборд: новых студентов={overview.new_students}, "
        f"выручка={overview.total_revenue}, ожидают оплаты={overview.pending_enrollments}"
    )
    return overview
