# -*- coding: utf-8 -*-
"""
Репозиторий настроек кошельков.

Настройки хранятся одной записью с фиксированным ключом, а не "первым
попавшимся документом" коллекции.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.domain.models import WalletSettings


async def find_wallet_settings(
    session: AsyncSession, key: str
) -> Optional[WalletSettings]:
    result = await session.execute(
        select(WalletSettings).where(WalletSettings.key == key)
    )
    return result.scalar_one_or_none()


async def create_wallet_settings(
    session: AsyncSession, key: str, wallets: dict
) -> WalletSettings:
    settings_row = WalletSettings(
        key=key, wallets=wallets, last_updated=datetime.utcnow()
    )
    session.add(settings_row)
    await session.commit()
    await session.refresh(settings_row)
    return settings_row


async def save_wallets(
    session: AsyncSession, settings_row: WalletSettings, wallets: dict
) -> WalletSettings:
    """Заменить набор кошельков и обновить отметку времени."""
    settings_row.wallets = wallets
    settings_row.last_updated = datetime.utcnow()
    await session.commit()
    await session.refresh(settings_row)
    return settings_row
