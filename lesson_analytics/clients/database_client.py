# -*- coding: utf-8 -*-
"""
Асинхронный движок SQLAlchemy и сессии для обработчиков.
"""
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lesson_analytics.config.settings import settings
from lesson_analytics.domain.models import Base


def _engine_options(url: str) -> dict:
    # У sqlite (тесты, локальный запуск) нет серверного пула соединений
    if url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True, "pool_recycle": 3600}


async_engine = create_async_engine(
    settings.database_url,
    echo=False,
    **_engine_options(settings.database_url),
)

AsyncSessionLocal = async_sessionmaker(async_engine, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Сессия на один запрос; незавершённая транзакция откатывается при ошибке."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_connection() -> None:
    async with async_engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def init_db() -> None:
    """Создать недостающие таблицы (без изменения существующих)."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
