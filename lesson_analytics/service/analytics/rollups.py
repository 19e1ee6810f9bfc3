# -*- coding: utf-8 -*-
"""
Агрегаты просмотров по уроку, главе и курсу.

Чистые функции ``summarize_*`` считают метрики по уже загруженным записям,
асинхронные ``get_*`` загружают записи и каталог через репозитории.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.api.v1.lesson_views.schemas import (
    ChapterAnalytics, ChapterInfo, ChapterLessonViews, ChapterViewsAnalytics,
    CourseInfo, CourseViewsAnalytics, LessonAnalytics, LessonViewRead, LessonViewsAnalytics,
    LessonViewWithStudent, StudentRef, ViewsSummary)
from lesson_analytics.domain.models import Chapter, Course, Lesson, LessonView
from lesson_analytics.repository.catalog import (get_chapter,
                                                 get_course_with_chapters)
from lesson_analytics.repository.lesson_views import (ViewWithStudent,
                                                      list_chapter_views,
                                                      list_course_views,
                                                      list_lesson_views)


def summarize_views(records: Sequence[LessonView]) -> ViewsSummary:
    """
    Посчитать базовые метрики по записям просмотра.

    Каждая запись считается одним просмотром. Процент завершения и средняя
    длительность округляются до двух знаков, для пустого набора равны 0.
    """
    total = len(records)
    if total == 0:
        return ViewsSummary()

    completed = sum(1 for view in records if view.is_completed)
    total_duration = sum(view.view_duration or 0 for view in records)

    return ViewsSummary(
        total_views=total,
        unique_viewers=len({view.student_id for view in records}),
        completed_views=completed,
        completion_rate=round(completed / total * 100, 2),
        total_duration=total_duration,
        avg_duration=round(total_duration / total, 2),
    )


def _group_by(records: Iterable[LessonView], attr: str) -> Dict[int, List[LessonView]]:
    grouped: Dict[int, List[LessonView]] = defaultdict(list)
    for view in records:
        grouped[getattr(view, attr)].append(view)
    return grouped


def summarize_lesson(lesson: Lesson, records: Sequence[LessonView]) -> LessonAnalytics:
    return LessonAnalytics(
        lesson_id=lesson.id,
        lesson_title=lesson.title,
        is_free=bool(lesson.is_free),
        **summarize_views(records).model_dump(),
    )


def summarize_chapter(chapter: Chapter, records: Sequence[LessonView]) -> ChapterAnalytics:
    """
    Метрики главы и каждого ее урока в порядке каталога.

    Уроки без просмотров присутствуют с нулевыми метриками.
    """
    by_lesson = _group_by(records, "lesson_id")
    lessons = [summarize_lesson(lesson, by_lesson.get(lesson.id, [])) for lesson in chapter.lessons]

    return ChapterAnalytics(
        chapter_id=chapter.id,
        chapter_title=chapter.title,
        lessons_count=len(chapter.lessons),
        lessons=lessons,
        **summarize_views(records).model_dump(),
    )


def summarize_course(course: Course, records: Sequence[LessonView]) -> CourseViewsAnalytics:
    """Метрики курса целиком и разбивка по главам в порядке каталога."""
    by_chapter = _group_by(records, "chapter_id")
    chapters = [
        summarize_chapter(chapter, by_chapter.get(chapter.id, []))
        for chapter in course.chapters
    ]

    return CourseViewsAnalytics(
        course=CourseInfo(
            id=course.id,
            name=course.name,
            chapters_count=len(course.chapters),
            total_lessons=sum(len(chapter.lessons) for chapter in course.chapters),
        ),
        overall_analytics=summarize_views(records),
        chapters=chapters,
    )


def _view_with_student(row: ViewWithStudent) -> LessonViewWithStudent:
    view, name, email = row
    return LessonViewWithStudent(
        **LessonViewRead.model_validate(view).model_dump(),
        student=StudentRef(id=view.student_id, name=name, email=email),
    )


async def get_lesson_views_analytics(
    session: AsyncSession, course_id: int, chapter_id: int, lesson_id: int
) -> LessonViewsAnalytics:
    """Все просмотры урока с данными студентов и сводкой метрик."""
    rows = await list_lesson_views(session, course_id, chapter_id, lesson_id)
    records = [row[0] for row in rows]

    logger.debug(
        f"Аналитика урока: course_id={course_id}, chapter_id={chapter_id}, "
        f"lesson_id={lesson_id}, записей={len(records)}"
    )
    return LessonViewsAnalytics(
        views=[_view_with_student(row) for row in rows],
        analytics=summarize_views(records),
    )


async def get_chapter_views_analytics(
    session: AsyncSession, chapter_id: int
) -> ChapterViewsAnalytics:
    """
    Аналитика главы: сводка, метрики каждого урока и список его просмотров.

    Raises:
        NotFoundError: Если глава не найдена
    """
    chapter = await get_chapter(session, chapter_id)
    rows = await list_chapter_views(session, chapter_id)

    rows_by_lesson: Dict[int, List[ViewWithStudent]] = defaultdict(list)
    for row in rows:
        rows_by_lesson[row[0].lesson_id].append(row)

    lessons = []
    for lesson in chapter.lessons:
        lesson_rows = rows_by_lesson.get(lesson.id, [])
        summary = summarize_lesson(lesson, [row[0] for row in lesson_rows])
        lessons.append(
            ChapterLessonViews(
                **summary.model_dump(),
                views=[_view_with_student(row) for row in lesson_rows],
            )
        )

    return ChapterViewsAnalytics(
        chapter=ChapterInfo(
            id=chapter.id,
            course_id=chapter.course_id,
            title=chapter.title,
            lessons_count=len(chapter.lessons),
        ),
        overall_analytics=summarize_views([row[0] for row in rows]),
        lessons=lessons,
    )


async def get_course_views_analytics(
    session: AsyncSession, course_id: int
) -> CourseViewsAnalytics:
    """
    Аналитика курса: сводка и разбивка по главам и урокам.

    Raises:
        NotFoundError: Если курс не найден
    """
    course = await get_course_with_chapters(session, course_id)
    records = await list_course_views(session, course_id)

    logger.debug(f"Аналитика курса {course_id}: записей просмотра={len(records)}")
    return summarize_course(course, records)
