# -*- coding: utf-8 -*-
"""
Параметры запуска uvicorn. Собственный log_config uvicorn отключён,
его логгеры переводятся на loguru через InterceptHandler.
"""

import logging

from lesson_analytics.config.logger import InterceptHandler
from lesson_analytics.config.settings import settings

# Логгер -> минимальный уровень, который попадает в loguru
THIRD_PARTY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "fastapi": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "alembic": logging.INFO,
}


def setup_uvicorn_logging() -> None:
    handler = InterceptHandler()
    for name, level in THIRD_PARTY_LEVELS.items():
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.setLevel(level)
        std_logger.propagate = False


def get_uvicorn_config() -> dict:
    return {
        "app": "lesson_analytics.main:app",
        "host": settings.app_host,
        "port": settings.app_port,
        "reload": False,
        "log_config": None,
        "access_log": True,
    }
