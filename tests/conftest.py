# -*- coding: utf-8 -*-
"""
Общие фикстуры для тестирования
"""

import os
import tempfile
from pathlib import Path

# Окружение выставляется до импорта приложения: настройки читаются при импорте
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTO_MIGRATE", "false")
os.environ.setdefault(
    "LOG_FILE", str(Path(tempfile.gettempdir()) / "lesson_analytics_tests.log")
)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (AsyncSession,  # noqa: E402
                                    async_sessionmaker, create_async_engine)
from sqlalchemy.pool import StaticPool  # noqa: E402

from lesson_analytics.clients.database_client import get_db  # noqa: E402
from lesson_analytics.domain.models import Base  # noqa: E402
from lesson_analytics.main import app  # noqa: E402

# Тестовая база данных в памяти
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Создать тестовый движок БД со свежей схемой."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_session(session_maker):
    """Создать тестовую сессию БД."""
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    """Асинхронный тестовый клиент API, каждый запрос получает свою сессию."""

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as async_client:
        yield async_client
    app.dependency_overrides.clear()
