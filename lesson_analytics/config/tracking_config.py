# -*- coding: utf-8 -*-
"""
Конфигурация трекинга просмотров уроков и аналитики.
"""


class TrackingConfig:
    """Константы трекинга и аналитических окон."""

    # История просмотров
    HISTORY_LIMIT: int = 100  # Максимум записей в истории пользователя

    # Окна статистики просмотров (в днях)
    LAST_DAY_WINDOW_DAYS: int = 1
    LAST_WEEK_WINDOW_DAYS: int = 7
    LAST_MONTH_WINDOW_DAYS: int = 30

    # Когортная аналитика
    HIGH_ENGAGEMENT_THRESHOLD: int = 10  # Суммарно просмотров, чтобы считаться вовлеченным
    NEW_STUDENTS_WINDOW_DAYS: int = 7
    SIGNUPS_WINDOW_DAYS: int = 30

    # Прогресс студента пока не вычисляется: отдаем фиксированное значение
    PROGRESS_PLACEHOLDER: int = 100

    # Настройки кошельков
    WALLET_SETTINGS_KEY: str = "wallets"
    WALLET_PROVIDERS: tuple = ("vodafone", "orange", "etisalat", "instapay")
    WALLET_PHONE_PATTERN: str = r"^01[0-9]{9}$"
