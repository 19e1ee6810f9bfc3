# -*- coding: utf-8 -*-
"""
Репозиторий просмотров уроков.

Единственное место, где выполняются запросы к таблице ``lesson_views``:
точечный поиск по составному ключу, выборки по уроку/главе/курсу/студенту и
группирующие агрегации для платформенной статистики.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import and_, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.domain.models import Chapter, Course, LessonView, User

ViewWithStudent = Tuple[LessonView, Optional[str], Optional[str]]


async def get_view_by_key(
    session: AsyncSession,
    student_id: int,
    course_id: int,
    chapter_id: int,
    lesson_id: int,
    for_update: bool = False,
) -> Optional[LessonView]:
    """
    Получить запись просмотра по составному ключу.

    Args:
        session: Сессия базы данных
        student_id: ID студента
        course_id: ID курса
        chapter_id: ID главы
        lesson_id: ID урока внутри главы
        for_update: Заблокировать строку до конца транзакции

    Returns:
        Запись просмотра или None
    """
    stmt = select(LessonView).where(
        and_(
            LessonView.student_id == student_id,
            LessonView.course_id == course_id,
            LessonView.chapter_id == chapter_id,
            LessonView.lesson_id == lesson_id,
        )
    )
    if for_update:
        stmt = stmt.with_for_update()

    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def add_view(session: AsyncSession, view: LessonView) -> LessonView:
    """Добавить новую запись и отправить INSERT без commit."""
    session.add(view)
    await session.flush()
    logger.debug(
        f"Создана запись просмотра: student_id={view.student_id}, "
        f"lesson_id={view.lesson_id}, view_id={view.id}"
    )
    return view


def _with_student(stmt):
    return stmt.add_columns(User.name, User.email).outerjoin(
        User, User.id == LessonView.student_id
    )


async def list_lesson_views(
    session: AsyncSession, course_id: int, chapter_id: int, lesson_id: int
) -> List[ViewWithStudent]:
    """Все просмотры урока с именем и email студента, новые первыми."""
    stmt = _with_student(
        select(LessonView).where(
            and_(
                LessonView.course_id == course_id,
                LessonView.chapter_id == chapter_id,
                LessonView.lesson_id == lesson_id,
            )
        )
    ).order_by(desc(LessonView.created_at), desc(LessonView.id))
    result = await session.execute(stmt)
    return [tuple(row) for row in result.all()]


async def list_chapter_views(
    session: AsyncSession, chapter_id: int
) -> List[ViewWithStudent]:
    """Все просмотры уроков главы с данными студента, новые первыми."""
    stmt = _with_student(
        select(LessonView).where(LessonView.chapter_id == chapter_id)
    ).order_by(desc(LessonView.created_at), desc(LessonView.id))
    result = await session.execute(stmt)
    return [tuple(row) for row in result.all()]


async def list_course_views(session: AsyncSession, course_id: int) -> List[LessonView]:
    """Все просмотры курса."""
    stmt = (
        select(LessonView)
        .where(LessonView.course_id == course_id)
        .order_by(desc(LessonView.created_at), desc(LessonView.id))
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_student_views(
    session: AsyncSession, student_id: int, limit: Optional[int] = None
) -> List[Tuple[LessonView, Optional[str], Optional[str], Optional[str]]]:
    """
    Просмотры студента вместе с названием курса, его изображением и названием главы.

    Записи отсортированы по времени последнего просмотра, новые первыми.
    """
    stmt = (
        select(LessonView, Course.name, Course.image_url, Chapter.title)
        .outerjoin(Course, Course.id == LessonView.course_id)
        .outerjoin(Chapter, Chapter.id == LessonView.chapter_id)
        .where(LessonView.student_id == student_id)
        .order_by(desc(LessonView.last_viewed_at), desc(LessonView.id))
    )
    if limit:
        stmt = stmt.limit(limit)

    result = await session.execute(stmt)
    return [tuple(row) for row in result.all()]


# ---------------------------------------------------------------------------
# Группирующие агрегации
# ---------------------------------------------------------------------------


async def aggregate_views_by_student(session: AsyncSession) -> List[Dict[str, Any]]:
    """
    Статистика просмотров по каждому студенту за один групповой запрос.

    Студенты без записи в таблице пользователей отбрасываются.
    """
    stmt = (
        select(
            LessonView.student_id,
            User.name,
            User.email,
            User.last_active,
            func.sum(LessonView.watch_count).label("total_views"),
            func.count(LessonView.lesson_id.distinct()).label("unique_lessons"),
            func.max(LessonView.last_viewed_at).label("last_watched_at"),
        )
        .join(User, User.id == LessonView.student_id)
        .group_by(LessonView.student_id, User.name, User.email, User.last_active)
        .order_by(LessonView.student_id)
    )
    result = await session.execute(stmt)
    return [dict(row._mapping) for row in result.all()]


async def sum_watch_counts(
    session: AsyncSession, since: Optional[datetime] = None
) -> int:
    """Суммарное число просмотров, опционально начиная с момента ``since``."""
    stmt = select(func.coalesce(func.sum(LessonView.watch_count), 0))
    if since is not None:
        stmt = stmt.where(LessonView.last_viewed_at >= since)
    return int(await session.scalar(stmt) or 0)


async def get_most_active_student(session: AsyncSession) -> Optional[Dict[str, Any]]:
    """Студент с наибольшим суммарным числом просмотров (при равенстве меньший ID)."""
    totals = (
        select(
            LessonView.student_id.label("student_id"),
            func.sum(LessonView.watch_count).label("total_views"),
        )
        .group_by(LessonView.student_id)
        .order_by(desc("total_views"), LessonView.student_id)
        .limit(1)
        .subquery()
    )
    stmt = select(
        totals.c.student_id, totals.c.total_views, User.name, User.email
    ).outerjoin(User, User.id == totals.c.student_id)

    row = (await session.execute(stmt)).first()
    if row is None:
        return None
    return {
        "id": row.student_id,
        "name": row.name,
        "email": row.email,
        "total_views": int(row.total_views or 0),
    }


async def get_most_viewed_lesson(session: AsyncSession) -> Optional[Dict[str, Any]]:
    """
    Урок с наибольшим суммарным числом просмотров.

    Группировка по паре (lesson_id, lesson_title); курс и глава берутся из
    первой записи группы и дополняются названиями из каталога.
    """
    totals = (
        select(
            LessonView.lesson_id.label("lesson_id"),
            LessonView.lesson_title.label("lesson_title"),
            func.sum(LessonView.watch_count).label("total_views"),
            func.min(LessonView.course_id).label("course_id"),
            func.min(LessonView.chapter_id).label("chapter_id"),
        )
        .group_by(LessonView.lesson_id, LessonView.lesson_title)
        .order_by(desc("total_views"), LessonView.lesson_id)
        .limit(1)
        .subquery()
    )
    stmt = (
        select(totals, Course.name.label("course_name"), Chapter.title.label("chapter_title"))
        .outerjoin(Course, Course.id == totals.c.course_id)
        .outerjoin(Chapter, Chapter.id == totals.c.chapter_id)
    )

    row = (await session.execute(stmt)).first()
    if row is None:
        return None
    return {
        "lesson_id": row.lesson_id,
        "lesson_title": row.lesson_title,
        "course_name": row.course_name,
        "chapter_title": row.chapter_title,
        "total_views": int(row.total_views or 0),
    }


async def count_students_above_views(session: AsyncSession, threshold: int) -> int:
    """Количество студентов, у которых суммарно больше ``threshold`` просмотров."""
    engaged = (
        select(LessonView.student_id)
        .group_by(LessonView.student_id)
        .having(func.sum(LessonView.watch_count) > threshold)
        .subquery()
    )
    return int(await session.scalar(select(func.count()).select_from(engaged)) or 0)
