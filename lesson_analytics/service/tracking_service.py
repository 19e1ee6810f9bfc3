# -*- coding: utf-8 -*-
"""
Сервис трекинга просмотров уроков студентами.
"""

from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.domain.models import VIEW_KEY_CONSTRAINT, LessonView
from lesson_analytics.repository.catalog import (find_chapter,
                                                 find_lesson_in_chapter,
                                                 get_course)
from lesson_analytics.repository.lesson_views import add_view, get_view_by_key
from lesson_analytics.utils.exceptions import NotFoundError


def merge_view_event(
    view: LessonView,
    view_duration: Optional[int] = None,
    is_completed: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> LessonView:
    """
    Слить очередное событие просмотра в существующую запись.

    Длительность поднимается до максимума из всех присланных значений,
    завершенность не сбрасывается, счетчик просмотров растет на единицу.

    Args:
        view: Существующая запись просмотра
        view_duration: Длительность из события (секунды)
        is_completed: Флаг завершения из события
        now: Момент события

    Returns:
        Та же запись после слияния
    """
    view.view_duration = max(view.view_duration or 0, view_duration or 0)
    view.is_completed = bool(view.is_completed or is_completed)
    view.watch_count = (view.watch_count or 0) + 1
    view.last_viewed_at = now or datetime.utcnow()
    return view


def _is_view_key_conflict(exc: IntegrityError) -> bool:
    """Дубль ключа (student, course, chapter, lesson), а не FK или NOT NULL."""
    message = str(exc.orig)
    # PostgreSQL называет ограничение, SQLite перечисляет столбцы
    return VIEW_KEY_CONSTRAINT in message or "UNIQUE constraint failed: lesson_views." in message


async def _validate_catalog_refs(
    session: AsyncSession, course_id: int, chapter_id: int, lesson_id: int
):
    """Проверить ссылки события на курс, главу и урок. Возвращает урок."""
    await get_course(session, course_id)

    chapter = await find_chapter(session, chapter_id)
    if chapter is None or chapter.course_id != course_id:
        raise NotFoundError(resource_type="Глава", resource_id=chapter_id, missing="не найдена")

    lesson = await find_lesson_in_chapter(session, chapter_id, lesson_id)
    if lesson is None:
        raise NotFoundError(resource_type="Урок", resource_id=lesson_id)

    return lesson


async def track_lesson_view(
    session: AsyncSession,
    student_id: int,
    course_id: int,
    chapter_id: int,
    lesson_id: int,
    lesson_title: Optional[str] = None,
    view_duration: Optional[int] = None,
    is_completed: Optional[bool] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> LessonView:
    """
    Зарегистрировать просмотр урока.

    Создает запись при первом просмотре или сливает событие в существующую.
    Если параллельный запрос успел создать запись первым, нарушение
    уникальности обрабатывается повторной попыткой как обновление.

    Args:
        session: Сессия базы данных
        student_id: ID студента из токена
        course_id: ID курса
        chapter_id: ID главы
        lesson_id: ID урока внутри главы
        lesson_title: Название урока от клиента (иначе берется из каталога)
        view_duration: Длительность просмотра в секундах
        is_completed: Флаг завершения урока
        ip_address: IP клиента
        user_agent: User-Agent клиента

    Returns:
        Актуальная запись просмотра после слияния

    Raises:
        NotFoundError: Если курс, глава или урок не найдены
    """
    lesson = await _validate_catalog_refs(session, course_id, chapter_id, lesson_id)
    now = datetime.utcnow()

    view = await get_view_by_key(
        session, student_id, course_id, chapter_id, lesson_id, for_update=True
    )

    if view is None:
        try:
            view = await add_view(
                session,
                LessonView(
                    student_id=student_id,
                    course_id=course_id,
                    chapter_id=chapter_id,
                    lesson_id=lesson_id,
                    lesson_title=lesson_title or lesson.title,
                    view_duration=view_duration or 0,
                    is_completed=bool(is_completed),
                    watch_count=1,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    last_viewed_at=now,
                    created_at=now,
                    updated_at=now,
                ),
            )
            await session.commit()
            await session.refresh(view)
            logger.info(
                f"Первый просмотр урока: student_id={student_id}, course_id={course_id}, "
                f"chapter_id={chapter_id}, lesson_id={lesson_id}"
            )
            return view
        except IntegrityError as exc:
            await session.rollback()
            if not _is_view_key_conflict(exc):
                logger.error(
                    f"Нарушение ограничения при создании просмотра: student_id={student_id}, "
                    f"lesson_id={lesson_id}: {exc.orig}"
                )
                raise
            logger.warning(
                f"Запись просмотра уже создана параллельным запросом, повторяем как обновление: "
                f"student_id={student_id}, lesson_id={lesson_id}"
            )
            view = await get_view_by_key(
                session, student_id, course_id, chapter_id, lesson_id, for_update=True
            )
            if view is None:
                raise

    merge_view_event(view, view_duration, is_completed, now=now)
    await session.commit()
    await session.refresh(view)

    logger.debug(
        f"Просмотр обновлен: student_id={student_id}, lesson_id={lesson_id}, "
        f"view_duration={view.view_duration}s, is_completed={view.is_completed}, "
        f"watch_count={view.watch_count}"
    )
    return view
