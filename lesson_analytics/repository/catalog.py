# -*- coding: utf-8 -*-
"""
Репозиторий каталога курсов (только чтение).
"""

from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lesson_analytics.domain.models import Chapter, Course, Lesson
from lesson_analytics.repository.base import find_item, get_item


async def get_course(session: AsyncSession, course_id: int) -> Course:
    """Получить курс или вызвать NotFoundError."""
    return await get_item(session, Course, course_id, resource_type="Курс")


async def get_course_with_chapters(session: AsyncSession, course_id: int) -> Course:
    """
    Получить курс вместе с главами и уроками в порядке каталога.

    Raises:
        NotFoundError: Если курс не найден
    """
    return await get_item(
        session,
        Course,
        course_id,
        resource_type="Курс",
        options=[selectinload(Course.chapters).selectinload(Chapter.lessons)],
    )


async def get_chapter(session: AsyncSession, chapter_id: int) -> Chapter:
    """
    Получить главу вместе с уроками в порядке каталога.

    Raises:
        NotFoundError: Если глава не найдена
    """
    return await get_item(
        session,
        Chapter,
        chapter_id,
        resource_type="Глава",
        missing="не найдена",
        options=[selectinload(Chapter.lessons)],
    )


async def find_chapter(session: AsyncSession, chapter_id: int) -> Optional[Chapter]:
    return await find_item(session, Chapter, chapter_id)


async def find_lesson_in_chapter(
    session: AsyncSession, chapter_id: int, lesson_id: int
) -> Optional[Lesson]:
    """Найти урок по ID только внутри указанной главы."""
    stmt = select(Lesson).where(
        and_(Lesson.id == lesson_id, Lesson.chapter_id == chapter_id)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
