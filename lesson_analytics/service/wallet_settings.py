# -*- coding: utf-8 -*-
"""
Сервис настроек кошельков для оплаты записи на курсы.
"""

import re
from typing import Dict

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.config.tracking_config import TrackingConfig
from lesson_analytics.domain.models import WalletSettings
from lesson_analytics.repository.wallet_settings import (
    create_wallet_settings, find_wallet_settings, save_wallets)
from lesson_analytics.utils.exceptions import ValidationError

_PHONE_RE = re.compile(TrackingConfig.WALLET_PHONE_PATTERN)


def default_wallets() -> Dict[str, dict]:
    """Все провайдеры выключены, номера пустые."""
    return {
        provider: {"phone": "", "enabled": False}
        for provider in TrackingConfig.WALLET_PROVIDERS
    }


def validate_wallets(wallets: Dict[str, dict]) -> None:
    """
    Проверить набор кошельков перед сохранением.

    Raises:
        ValidationError: Если кошельков нет, ни один не включен, у включенного
            нет номера или номер не соответствует формату
    """
    if not wallets:
        raise ValidationError("Необходимо указать кошельки")

    enabled = {name: wallet for name, wallet in wallets.items() if wallet.get("enabled")}
    if not enabled:
        raise ValidationError("Необходимо включить хотя бы один кошелек")

    for name, wallet in enabled.items():
        phone = (wallet.get("phone") or "").strip()
        if not phone:
            raise ValidationError(f"Для кошелька {name} не указан номер телефона")
        if not _PHONE_RE.match(phone):
            raise ValidationError(f"Неверный формат номера телефона для кошелька {name}")


async def get_wallet_settings(session: AsyncSession) -> WalletSettings:
    """Получить настройки кошельков, создав значения по умолчанию при первом обращении."""
    row = await find_wallet_settings(session, TrackingConfig.WALLET_SETTINGS_KEY)
    if row is None:
        row = await create_wallet_settings(
            session, TrackingConfig.WALLET_SETTINGS_KEY, default_wallets()
        )
        logger.info("💳 Созданы настройки кошельков по умолчанию")
    return row


async def ensure_wallet_settings(session: AsyncSession) -> WalletSettings:
    """Явная загрузка настроек при старте приложения."""
    row = await get_wallet_settings(session)
    enabled = [name for name, wallet in row.wallets.items() if wallet.get("enabled")]
    logger.info(f"💳 Настройки кошельков загружены, включены: {enabled or 'нет'}")
    return row


async def update_wallet_settings(
    session: AsyncSession, wallets: Dict[str, dict]
) -> WalletSettings:
    """
    Заменить набор кошельков после проверки.

    Args:
        session: Сессия базы данных
        wallets: Провайдер -> {"phone": str, "enabled": bool}

    Returns:
        Обновленная запись настроек
    """
    validate_wallets(wallets)

    row = await get_wallet_settings(session)
    row = await save_wallets(session, row, wallets)

    logger.info(f"💳 Настройки кошельков обновлены: {sorted(wallets)}")
    return row
