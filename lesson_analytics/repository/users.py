# -*- coding: utf-8 -*-
"""
Репозиторий пользователей для когортной аналитики (только чтение).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.domain.enums import Role
from lesson_analytics.domain.models import User


async def count_students(
    session: AsyncSession,
    is_banned: Optional[bool] = None,
    active_since: Optional[datetime] = None,
    created_since: Optional[datetime] = None,
) -> int:
    """
    Подсчитать студентов по фильтрам.

    Args:
        session: Сессия базы данных
        is_banned: Фильтр по блокировке
        active_since: Только студенты с last_active не раньше указанного момента
        created_since: Только студенты, зарегистрированные не раньше момента

    Returns:
        Количество студентов
    """
    conditions = [User.role == Role.STUDENT]
    if is_banned is not None:
        conditions.append(User.is_banned == is_banned)
    if active_since is not None:
        conditions.append(User.last_active >= active_since)
    if created_since is not None:
        conditions.append(User.created_at >= created_since)

    stmt = select(func.count(User.id)).where(and_(*conditions))
    return int(await session.scalar(stmt) or 0)


async def get_students_distribution(
    session: AsyncSession, field: str
) -> List[Dict[str, Any]]:
    """
    Распределение студентов по значению поля (government, level).

    Returns:
        [{"id": значение, "value": количество}] по убыванию количества
    """
    column = getattr(User, field)
    stmt = (
        select(column.label("id"), func.count(User.id).label("value"))
        .where(User.role == Role.STUDENT)
        .group_by(column)
        .order_by(desc("value"), column)
    )
    result = await session.execute(stmt)
    return [{"id": row.id, "value": int(row.value)} for row in result.all()]


async def get_signups_by_day(
    session: AsyncSession, since: datetime
) -> List[Dict[str, Any]]:
    """Регистрации студентов по дням начиная с ``since``, по возрастанию даты."""
    day = func.date(User.created_at)
    stmt = (
        select(day.label("day"), func.count(User.id).label("count"))
        .where(and_(User.role == Role.STUDENT, User.created_at >= since))
        .group_by(day)
        .order_by(day)
    )
    result = await session.execute(stmt)
    return [{"date": str(row.day), "count": int(row.count)} for row in result.all()]
