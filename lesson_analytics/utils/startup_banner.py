# -*- coding: utf-8 -*-
"""
Баннер при запуске сервиса.
"""

import platform
import sys
from datetime import datetime

from sqlalchemy.engine import make_url

from lesson_analytics.config.settings import settings

TITLE = "🎬 Lesson Analytics API 📊"
SUBTITLE = "Трекинг просмотров уроков и аналитика платформы"
WIDTH = 68


def _public_api_url() -> str:
    host = settings.app_domain or f"localhost:{settings.app_port}"
    return f"http://{host}/api/v1"


def startup_lines() -> list[tuple[str, str]]:
    """Пары (подпись, значение) для баннера; пароль в URL базы скрыт."""
    return [
        ("📅 Запуск", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
        ("🖥️  Система", f"{platform.system()} {platform.release()} ({platform.machine()})"),
        ("🐍 Python", platform.python_version()),
        ("🌐 API", _public_api_url()),
        ("📊 База данных", make_url(settings.database_url).render_as_string(hide_password=True)),
        ("📝 Лог-файл", settings.log_file),
        ("⚙️  Конфиг", settings.get_config_source()),
    ]


def print_startup_banner() -> None:
    border = "═" * WIDTH
    body = "\n".join(f"  {label}: {value}" for label, value in startup_lines())
    text = f"╔{border}╗\n  {TITLE}\n  {SUBTITLE}\n╚{border}╝\n{body}\n"
    try:
        sys.stdout.write(text)
    except UnicodeEncodeError:
        # Консоль без UTF-8
        sys.stdout.write(f"{TITLE.encode('ascii', 'ignore').decode().strip()}\n")
    sys.stdout.flush()
