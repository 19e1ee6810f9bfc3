# -*- coding: utf-8 -*-
"""
Прогресс студентов: история просмотров, группировка по главам и экзамены.
"""

from collections import OrderedDict
from typing import List, Optional, Sequence, Tuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.api.v1.analytics.schemas import (ChapterLessons,
                                                       ExamAttemptRead,
                                                       ExamStats,
                                                       GroupedLesson,
                                                       StudentInfo,
                                                       StudentProgress,
                                                       StudentProgressStats,
                                                       StudentProgressSummary,
                                                       StudentSummaryStats)
from lesson_analytics.api.v1.lesson_views.schemas import (HistoryEntry,
                                                          HistorySummary,
                                                          LessonViewRead,
                                                          UserViewHistory)
from lesson_analytics.config.tracking_config import TrackingConfig
from lesson_analytics.domain.models import ExamResult, LessonView
from lesson_analytics.repository.exams import (aggregate_exam_stats_by_student,
                                               get_exam_result)
from lesson_analytics.repository.lesson_views import (
    aggregate_views_by_student, list_student_views)

StudentViewRow = Tuple[LessonView, Optional[str], Optional[str], Optional[str]]


def compute_exam_stats(exam_result: Optional[ExamResult]) -> Optional[ExamStats]:
    """
    Сводка по попыткам экзаменов студента.

    Средний балл считается как средняя доля правильных ответов (0..1).
    Попытка без вопросов дает 0, документ без попыток дает средний балл 0.
    """
    if exam_result is None:
        return None

    attempts = exam_result.attempts
    if not attempts:
        return ExamStats(total_exams=0, average_score=0, last_exam_date=None)

    ratios = [
        attempt.correct_answers / attempt.total_questions if attempt.total_questions else 0
        for attempt in attempts
    ]
    return ExamStats(
        total_exams=len(attempts),
        average_score=sum(ratios) / len(attempts),
        last_exam_date=attempts[-1].exam_date,
    )


def group_lessons_by_chapter(rows: Sequence[StudentViewRow]) -> List[ChapterLessons]:
    """Сгруппировать просмотренные уроки по главам, повторы урока отбрасываются."""
    chapters: "OrderedDict[int, ChapterLessons]" = OrderedDict()
    seen = set()

    for view, course_name, _image_url, chapter_title in rows:
        group = chapters.get(view.chapter_id)
        if group is None:
            group = ChapterLessons(
                chapter_id=view.chapter_id,
                chapter_title=chapter_title,
                course_id=view.course_id,
                course_name=course_name,
                lessons=[],
            )
            chapters[view.chapter_id] = group

        key = (view.chapter_id, view.lesson_id)
        if key in seen:
            continue
        seen.add(key)

        group.lessons.append(
            GroupedLesson(
                lesson_id=view.lesson_id,
                lesson_title=view.lesson_title,
                watch_count=view.watch_count,
                view_duration=view.view_duration,
                is_completed=view.is_completed,
                last_viewed_at=view.last_viewed_at,
            )
        )

    return list(chapters.values())


def _history_entry(row: StudentViewRow) -> HistoryEntry:
    view, course_name, image_url, chapter_title = row
    return HistoryEntry(
        **LessonViewRead.model_validate(view).model_dump(),
        course_name=course_name,
        course_image_url=image_url,
        chapter_title=chapter_title,
    )


async def get_student_progress(
    session: AsyncSession, student_id: int
) -> StudentProgress:
    """
    Прогресс студента по всем просмотренным урокам и экзаменам.

    Args:
        session: Сессия базы данных
        student_id: ID студента

    Returns:
        История просмотров, уроки по главам, попытки экзаменов и статистика
    """
    rows = await list_student_views(session, student_id)
    exam_result = await get_exam_result(session, student_id)
    views = [row[0] for row in rows]

    stats = StudentProgressStats(
        total_views=sum(view.watch_count for view in views),
        unique_lessons=len({view.lesson_id for view in views}),
        last_activity=max((view.last_viewed_at for view in views), default=None),
        exam_stats=compute_exam_stats(exam_result),
    )

    logger.debug(
        f"Прогресс студента {student_id}: просмотров={stats.total_views}, "
        f"уроков={stats.unique_lessons}"
    )
    return StudentProgress(
        watch_history=[_history_entry(row) for row in rows],
        grouped_lessons=group_lessons_by_chapter(rows),
        exam_results=[
            ExamAttemptRead.model_validate(attempt)
            for attempt in (exam_result.attempts if exam_result else [])
        ],
        stats=stats,
    )


async def get_all_students_progress(
    session: AsyncSession,
) -> List[StudentProgressSummary]:
    """
    Сводный прогресс всех студентов, у которых есть хотя бы один просмотр.

    Просмотры и экзамены агрегируются двумя групповыми запросами и
    объединяются по ID студента.
    """
    view_stats = await aggregate_views_by_student(session)
    exam_stats = await aggregate_exam_stats_by_student(session)

    summaries = []
    for row in view_stats:
        exams = exam_stats.get(row["student_id"], {"exams_taken": 0, "average_score": 0.0})
        summaries.append(
            StudentProgressSummary(
                student=StudentInfo(
                    id=row["student_id"],
                    name=row["name"],
                    email=row["email"],
                    last_active=row["last_active"],
                ),
                stats=StudentSummaryStats(
                    total_views=int(row["total_views"] or 0),
                    unique_lessons_count=int(row["unique_lessons"] or 0),
                    last_watched_at=row["last_watched_at"],
                    exams_taken=exams["exams_taken"],
                    average_score=exams["average_score"],
                ),
                progress=TrackingConfig.PROGRESS_PLACEHOLDER,
            )
        )

    logger.info(f"📊 Прогресс рассчитан для {len(summaries)} студентов")
    return summaries


async def get_user_view_history(session: AsyncSession, user_id: int) -> UserViewHistory:
    """Последние просмотры пользователя (не более HISTORY_LIMIT) и их сводка."""
    rows = await list_student_views(session, user_id, limit=TrackingConfig.HISTORY_LIMIT)
    views = [row[0] for row in rows]

    return UserViewHistory(
        view_history=[_history_entry(row) for row in rows],
        analytics=HistorySummary(
            total_views=sum(view.watch_count for view in views),
            lessons_viewed=len(views),
            completed_lessons=sum(1 for view in views if view.is_completed),
            total_watch_time=sum(view.view_duration for view in views),
            courses_viewed=len({view.course_id for view in views}),
        ),
    )
