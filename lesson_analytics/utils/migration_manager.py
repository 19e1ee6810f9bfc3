# -*- coding: utf-8 -*-
"""
Автоприменение миграций Alembic при старте сервиса.

Alembic запускается отдельным процессом из корня проекта (там лежит alembic.ini),
поэтому его синхронный драйвер не пересекается с асинхронным движком приложения.
Сбой миграций не останавливает старт: недостающие таблицы создаёт ``init_db``.
"""

import subprocess
from pathlib import Path
from typing import Optional

from sqlalchemy import inspect, text

from lesson_analytics.clients.database_client import async_engine
from lesson_analytics.config.logger import configure_logger
from lesson_analytics.config.settings import settings

logger = configure_logger()

PROJECT_ROOT = Path(__file__).resolve().parents[2]
VERSION_TABLE = "alembic_version"


def _run_alembic(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["alembic", *args],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
    )


async def get_current_migration_version() -> Optional[str]:
    """Ревизия, записанная в БД; None для пустой базы или при ошибке чтения."""
    try:
        async with async_engine.connect() as conn:
            has_table = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).has_table(VERSION_TABLE)
            )
            if not has_table:
                return None
            return (await conn.execute(text(f"SELECT version_num FROM {VERSION_TABLE}"))).scalar()
    except Exception as e:
        logger.error(f"❌ Не удалось прочитать {VERSION_TABLE}: {e}")
        return None


def get_latest_migration_version() -> Optional[str]:
    """Головная ревизия из ``alembic heads``."""
    try:
        result = _run_alembic("heads")
    except OSError as e:
        logger.warning(f"⚠️ alembic не запускается: {e}")
        return None

    if result.returncode != 0:
        logger.warning(f"⚠️ alembic heads завершился с ошибкой: {result.stderr.strip()}")
        return None
    # Формат строки: "3f1a9c2d7b10 (head)"
    heads = [line.split()[0] for line in result.stdout.splitlines() if "(head)" in line]
    return heads[0] if heads else None


async def run_migrations() -> bool:
    try:
        result = _run_alembic("upgrade", "head")
    except OSError as e:
        logger.error(f"❌ alembic upgrade не запустился: {e}")
        return False

    if result.returncode != 0:
        logger.error(f"❌ alembic upgrade head: {result.stderr.strip() or result.stdout.strip()}")
        return False
    logger.info("✅ Миграции применены")
    return True


async def check_and_apply_migrations() -> None:
    if not settings.auto_migrate:
        logger.info("⚙️ AUTO_MIGRATE=false, миграции не применяются автоматически")
        return

    current = await get_current_migration_version()
    latest = get_latest_migration_version()

    if current is not None and current == latest:
        logger.info(f"✅ Схема БД актуальна ({current})")
        return

    logger.info(f"🔄 Применяем миграции: {current or 'пустая база'} -> {latest or 'head'}")
    if not await run_migrations():
        logger.warning("⚠️ Миграции не применены, продолжаем запуск")
