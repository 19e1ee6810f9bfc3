# -*- coding: utf-8 -*-
"""
Репозиторий результатов экзаменов (только чтение).
"""

from typing import Dict, Optional

from sqlalchemy import Float, case, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lesson_analytics.domain.models import ExamAttempt, ExamResult

# Доля правильных ответов попытки; попытка без вопросов дает 0
_attempt_ratio = case(
    (
        ExamAttempt.total_questions > 0,
        cast(ExamAttempt.correct_answers, Float)
        / cast(ExamAttempt.total_questions, Float),
    ),
    else_=0.0,
)


async def get_exam_result(
    session: AsyncSession, student_id: int
) -> Optional[ExamResult]:
    """Документ результатов студента вместе с попытками или None."""
    stmt = (
        select(ExamResult)
        .where(ExamResult.student_id == student_id)
        .options(selectinload(ExamResult.attempts))
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def aggregate_exam_stats_by_student(
    session: AsyncSession,
) -> Dict[int, Dict[str, float]]:
    """
    Количество попыток и средняя доля правильных ответов по каждому студенту.

    Returns:
        {student_id: {"exams_taken": int, "average_score": float}}
    """
    stmt = (
        select(
            ExamResult.student_id,
            func.count(ExamAttempt.id).label("exams_taken"),
            func.avg(_attempt_ratio).label("average_score"),
        )
        .join(ExamAttempt, ExamAttempt.exam_result_id == ExamResult.id)
        .group_by(ExamResult.student_id)
    )
    result = await session.execute(stmt)
    return {
        row.student_id: {
            "exams_taken": int(row.exams_taken),
            "average_score": float(row.average_score or 0.0),
        }
        for row in result.all()
    }


async def get_platform_average_score(session: AsyncSession) -> float:
    """Средний процент правильных ответов по всем попыткам платформы."""
    value = await session.scalar(select(func.avg(_attempt_ratio * 100)))
    return float(value or 0.0)
