# -*- coding: utf-8 -*-
"""
FastAPI-приложение: трекинг просмотров уроков, прогресс студентов,
платформенная аналитика и настройки кошельков.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from lesson_analytics.api.v1.analytics.routes import router as analytics_router
from lesson_analytics.api.v1.lesson_views.routes import router as lesson_views_router
from lesson_analytics.api.v1.responses import ok, register_exception_handlers
from lesson_analytics.api.v1.settings.routes import router as settings_router
from lesson_analytics.clients.database_client import AsyncSessionLocal, check_connection, init_db
from lesson_analytics.config.logger import configure_logger, get_system_logger
from lesson_analytics.config.settings import settings
from lesson_analytics.config.uvicorn_config import setup_uvicorn_logging
from lesson_analytics.service.wallet_settings import ensure_wallet_settings
from lesson_analytics.utils.migration_manager import check_and_apply_migrations
from lesson_analytics.utils.startup_banner import print_startup_banner

logger = configure_logger()

API_PREFIX = "/api/v1"

TAGS = [
    {"name": "🎬 Просмотры уроков", "description": "Трекинг просмотров, аналитика урока, главы и курса"},
    {"name": "📊 Аналитика", "description": "Прогресс студентов, статистика просмотров, дашборд"},
    {"name": "💳 Настройки", "description": "Кошельки для оплаты записи на курсы"},
    {"name": "🩺 Служебное", "description": "Проверка работоспособности"},
]


async def _prepare_storage() -> None:
    """Подключение к БД, миграции, недостающие таблицы, строка настроек кошельков."""
    try:
        await check_connection()
    except Exception as e:
        logger.error(f"❌ База данных недоступна: {e}")
        raise
    logger.info("✅ База данных подключена")

    await check_and_apply_migrations()
    await init_db()

    async with AsyncSessionLocal() as session:
        await ensure_wallet_settings(session)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_uvicorn_logging()
    print_startup_banner()

    await _prepare_storage()

    migrations = "✅" if settings.auto_migrate else "⚙️ отключены"
    system_logger = get_system_logger()
    system_logger.info(f"📊 База данных: ✅  Миграции: {migrations}  Кошельки: ✅")
    system_logger.info("🎉 Lesson Analytics API готов к работе")

    yield

    logger.info("🛑 Lesson Analytics API остановлен")


app = FastAPI(
    title="Lesson Analytics API",
    description="Трекинг просмотров уроков, прогресс студентов и аналитика платформы",
    version="0.1.0",
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
    openapi_url=f"{API_PREFIX}/openapi.json",
    openapi_tags=TAGS,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.get_cors_methods(),
    allow_headers=settings.get_cors_headers(),
)

register_exception_handlers(app)


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    if not request.url.path.startswith(API_PREFIX):
        return await call_next(request)

    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"💥 {request.method} {request.url.path}: необработанная ошибка")
        raise

    elapsed_ms = (time.perf_counter() - started) * 1000
    line = f"{request.method} {request.url.path} → {response.status_code} ({elapsed_ms:.0f} ms)"
    if response.status_code >= 400:
        logger.warning(f"❌ {line}")
    else:
        logger.info(f"✅ {line}")
    return response


app.include_router(lesson_views_router, prefix=API_PREFIX)
app.include_router(analytics_router, prefix=API_PREFIX)
app.include_router(settings_router, prefix=API_PREFIX)


@app.get(f"{API_PREFIX}/health", tags=["🩺 Служебное"])
async def health():
    return ok({"status": "ok"})


if __name__ == "__main__":
    import uvicorn

    from lesson_analytics.config.uvicorn_config import get_uvicorn_config

    uvicorn.run(**get_uvicorn_config())
