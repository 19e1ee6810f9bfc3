# -*- coding: utf-8 -*-
"""
Репозиторий записей на курсы для финансовой части дашборда (только чтение).
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.domain.enums import PaymentStatus
from lesson_analytics.domain.models import Enrollment


async def sum_paid_enrollments(session: AsyncSession) -> float:
    """Сумма цен всех оплаченных записей."""
    stmt = select(func.coalesce(func.sum(Enrollment.price), 0)).where(
        Enrollment.payment_status == PaymentStatus.PAID
    )
    return float(await session.scalar(stmt) or 0)


async def count_enrollments(session: AsyncSession, status: PaymentStatus) -> int:
    stmt = select(func.count(Enrollment.id)).where(Enrollment.payment_status == status)
    return int(await session.scalar(stmt) or 0)
