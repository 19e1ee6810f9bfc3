# -*- coding: utf-8 -*-
"""
Unit тесты настроек кошельков
"""

import pytest

from lesson_analytics.config.tracking_config import TrackingConfig
from lesson_analytics.service.wallet_settings import (ensure_wallet_settings,
                                                      get_wallet_settings,
                                                      update_wallet_settings)
from lesson_analytics.utils.exceptions import ValidationError


class TestWalletSettings:
    @pytest.mark.asyncio
    async def test_defaults_created_once(self, test_session):
        first = await ensure_wallet_settings(test_session)
        second = await get_wallet_settings(test_session)

        assert first.key == TrackingConfig.WALLET_SETTINGS_KEY
        assert second.key == first.key
        assert set(first.wallets) == set(TrackingConfig.WALLET_PROVIDERS)
        assert all(
            wallet == {"phone": "", "enabled": False} for wallet in first.wallets.values()
        )

    @pytest.mark.asyncio
    async def test_update_replaces_wallets(self, test_session):
        before = await get_wallet_settings(test_session)
        previous_update = before.last_updated
        wallets = {
            "vodafone": {"phone": "01012345678", "enabled": True},
            "orange": {"phone": "", "enabled": False},
        }

        updated = await update_wallet_settings(test_session, wallets)

        assert updated.wallets == wallets
        assert updated.last_updated >= previous_update

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "wallets",
        [
            {},
            {"vodafone": {"phone": "01012345678", "enabled": False}},
            {"vodafone": {"phone": "", "enabled": True}},
            {"instapay": {"phone": "+201012345678", "enabled": True}},
            {"orange": {"phone": "0101234567", "enabled": True}},
        ],
    )
    async def test_invalid_wallets_rejected(self, test_session, wallets):
        with pytest.raises(ValidationError) as exc_info:
            await update_wallet_settings(test_session, wallets)

        assert exc_info.value.status_code == 400
