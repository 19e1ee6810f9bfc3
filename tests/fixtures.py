# -*- coding: utf-8 -*-
"""
Построители тестовых данных: пользователи, каталог, просмотры, экзамены.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.domain.enums import PaymentStatus, Role
from lesson_analytics.domain.models import (Chapter, Course, Enrollment,
                                            ExamAttempt, ExamResult, Lesson,
                                            LessonView, User)
from lesson_analytics.repository.base import create_item
from lesson_analytics.repository.catalog import get_course_with_chapters
from lesson_analytics.security.security import create_access_token


def auth_headers(user_id: int, role: Role = Role.STUDENT) -> Dict[str, str]:
    """Заголовок Authorization с JWT для пользователя."""
    token = create_access_token({"sub": user_id, "role": role.value})
    return {"Authorization": f"Bearer {token}"}


async def create_test_user(
    session: AsyncSession,
    user_id: Optional[int] = None,
    role: Role = Role.STUDENT,
    **kwargs,
) -> User:
    """Создать тестового пользователя"""
    suffix = user_id if user_id is not None else datetime.utcnow().timestamp()
    fields = {
        "name": f"Student {suffix}",
        "email": f"user{suffix}@example.com",
        "role": role,
        "is_banned": False,
    }
    fields.update(kwargs)
    if user_id is not None:
        fields["id"] = user_id
    return await create_item(session, User, **fields)


async def create_test_course(
    session: AsyncSession,
    name: str = "Test Course",
    chapters: Sequence[Tuple[str, Sequence[str]]] = (("Chapter 1", ("Lesson 1",)),),
    image_url: Optional[str] = None,
) -> Course:
    """
    Создать курс с главами и уроками в заданном порядке.

    Args:
        chapters: [(название главы, [названия уроков])]

    Returns:
        Курс с загруженными главами и уроками
    """
    course = await create_item(session, Course, name=name, image_url=image_url)

    for chapter_position, (chapter_title, lesson_titles) in enumerate(chapters):
        chapter = await create_item(
            session,
            Chapter,
            course_id=course.id,
            title=chapter_title,
            position=chapter_position,
        )
        for lesson_position, lesson_title in enumerate(lesson_titles):
            await create_item(
                session,
                Lesson,
                chapter_id=chapter.id,
                title=lesson_title,
                position=lesson_position,
                is_free=lesson_position == 0,
            )

    return await get_course_with_chapters(session, course.id)


async def create_test_view(
    session: AsyncSession,
    student_id: int,
    lesson: Lesson,
    course_id: int,
    view_duration: int = 0,
    is_completed: bool = False,
    watch_count: int = 1,
    last_viewed_at: Optional[datetime] = None,
) -> LessonView:
    """Создать запись просмотра напрямую, минуя трекер"""
    viewed_at = last_viewed_at or datetime.utcnow()
    return await create_item(
        session,
        LessonView,
        student_id=student_id,
        course_id=course_id,
        chapter_id=lesson.chapter_id,
        lesson_id=lesson.id,
        lesson_title=lesson.title,
        view_duration=view_duration,
        is_completed=is_completed,
        watch_count=watch_count,
        last_viewed_at=viewed_at,
        created_at=viewed_at,
        updated_at=viewed_at,
    )


async def create_exam_result(
    session: AsyncSession,
    student_id: int,
    attempts: Sequence[Tuple[int, int]] = (),
) -> ExamResult:
    """Создать документ результатов с попытками (правильные, всего вопросов)."""
    result = await create_item(session, ExamResult, student_id=student_id)
    for position, (correct, total) in enumerate(attempts):
        await create_item(
            session,
            ExamAttempt,
            exam_result_id=result.id,
            correct_answers=correct,
            total_questions=total,
            exam_date=datetime(2026, 1, position + 1),
            position=position,
        )
    return result


async def create_enrollment(
    session: AsyncSession,
    student_id: int,
    course_id: int,
    price: float,
    payment_status: PaymentStatus = PaymentStatus.PAID,
) -> Enrollment:
    return await create_item(
        session,
        Enrollment,
        student_id=student_id,
        course_id=course_id,
        price=price,
        payment_status=payment_status,
    )


def course_lessons(course: Course) -> List[Lesson]:
    """Все уроки курса в порядке каталога."""
    return [lesson for chapter in course.chapters for lesson in chapter.lessons]
