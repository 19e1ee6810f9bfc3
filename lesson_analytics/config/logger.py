# -*- coding: utf-8 -*-
"""
Логирование сервиса на loguru.

Стандартный ``logging`` (uvicorn, SQLAlchemy, alembic) перенаправляется в loguru,
поэтому все сообщения выходят в одном формате. Сообщения, привязанные через
``get_system_logger``, печатаются без пути к коду и не пишутся в файл.
"""
import logging
import sys

from loguru import logger

from lesson_analytics.config.settings import settings

_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "aiosqlite", "multipart")

_TIME = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
CONSOLE_FORMAT = _TIME + "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
SYSTEM_FORMAT = _TIME + "<magenta>startup</magenta> | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _is_system(record) -> bool:
    return bool(record["extra"].get("system"))


class InterceptHandler(logging.Handler):
    """Пробрасывает записи стандартного logging в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith(_QUIET_LOGGERS):
            return
        # Баннер старта печатаем сами, служебные INFO uvicorn не нужны
        if record.name.startswith("uvicorn") and record.levelno == logging.INFO:
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Поднимаемся к кадру, откуда реально вызвали logging
        frame, depth = sys._getframe(1), 1
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _setup() -> None:
    level = settings.log_level.upper()
    logger.remove()

    logger.add(
        sys.stdout,
        level=level,
        format=CONSOLE_FORMAT,
        colorize=True,
        diagnose=False,
        filter=lambda record: not _is_system(record),
    )
    logger.add(
        sys.stdout,
        level=level,
        format=SYSTEM_FORMAT,
        colorize=True,
        filter=_is_system,
    )
    logger.add(
        settings.log_file,
        level="INFO",
        format=FILE_FORMAT,
        rotation="10 MB",
        retention="30 days",
        encoding="utf-8",
        enqueue=True,
        filter=lambda record: not _is_system(record),
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


_setup()


def configure_logger(name: str = "lesson_analytics"):
    """Общий loguru-логгер; ``name`` оставлен для совместимости вызовов."""
    return logger


def get_system_logger():
    return logger.bind(system=True)
