# -*- coding: utf-8 -*-
"""
lesson_analytics/domain/enums.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Определение классов перечислений для домена аналитики просмотров.
"""

import enum


class Role(str, enum.Enum):
    """Роли, доступные в системе."""

    ADMIN = "admin"
    STUDENT = "student"


class PaymentStatus(str, enum.Enum):
    """Статусы оплаты записи на курс."""

    PENDING = "pending"
    PAID = "paid"
    REJECTED = "rejected"
