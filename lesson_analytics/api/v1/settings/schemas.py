# -*- coding: utf-8 -*-
"""
Схемы настроек кошельков.
"""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel, ConfigDict


class WalletEntry(BaseModel):
    phone: str = ""
    enabled: bool = False


class WalletSettingsUpdate(BaseModel):
    """Новый набор кошельков: провайдер -> номер и флаг включения."""

    wallets: Dict[str, WalletEntry]


class WalletSettingsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    wallets: Dict[str, WalletEntry]
    last_updated: datetime
