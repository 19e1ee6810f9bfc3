# -*- coding: utf-8 -*-
"""
API эндпоинты настроек кошельков.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.api.v1.responses import ApiResponse, ok, store_failure
from lesson_analytics.api.v1.settings.schemas import (WalletSettingsRead,
                                                      WalletSettingsUpdate)
from lesson_analytics.clients.database_client import get_db
from lesson_analytics.security.security import admin_only, authenticated
from lesson_analytics.service.wallet_settings import (get_wallet_settings,
                                                      update_wallet_settings)
from lesson_analytics.utils.exceptions import APIException

router = APIRouter(prefix="/settings", tags=["💳 Настройки"])


@router.get("/wallets", response_model=ApiResponse[WalletSettingsRead])
async def read_wallets(
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(authenticated),
):
    try:
        row = await get_wallet_settings(session)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при получении настроек кошельков", e) from e

    return ok(WalletSettingsRead.model_validate(row).model_dump(mode="json"))


@router.post("/wallets", response_model=ApiResponse[WalletSettingsRead])
async def update_wallets(
    payload: WalletSettingsUpdate,
    session: AsyncSession = Depends(get_db),
    claims: dict = Depends(admin_only),
):
    """Обновить кошельки (только администратор)."""
    wallets = {name: wallet.model_dump() for name, wallet in payload.wallets.items()}

    try:
        row = await update_wallet_settings(session, wallets)
    except APIException:
        raise
    except Exception as e:
        raise store_failure("Ошибка при обновлении настроек кошельков", e) from e

    return ok(
        WalletSettingsRead.model_validate(row).model_dump(mode="json"),
        message="Настройки кошельков обновлены",
    )
