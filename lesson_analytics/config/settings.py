# -*- coding: utf-8 -*-
"""
lesson_analytics/config/settings.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Настройки сервиса аналитики просмотров.

Значения читаются из переменных окружения. Если рядом с проектом лежит .env,
он подхватывается автоматически (сначала корень репозитория, затем каталог пакета).
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_CANDIDATES = (
    PROJECT_ROOT / ".env",
    PROJECT_ROOT / "lesson_analytics" / ".env",
)


def _find_env_file() -> Path | None:
    return next((path for path in ENV_CANDIDATES if path.exists()), None)


def _split_csv(raw: str) -> list[str]:
    """'a, b,,c' -> ['a', 'b', 'c']; '*' остаётся единственным элементом."""
    if raw.strip() == "*":
        return ["*"]
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # База данных: либо готовый DATABASE_URL, либо набор POSTGRES_*
    database_url: str | None = None
    postgres_db: str = "lesson_analytics"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    # Токены выпускает сервис авторизации, здесь только проверка подписи
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440

    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_domain: str | None = None

    log_file: str = "logs/lesson_analytics.log"
    log_level: str = "INFO"

    auto_migrate: bool = True

    # Текст исходной ошибки в теле ответа 500
    expose_error_details: bool = False

    cors_allow_origins: str = ""
    cors_allow_credentials: bool = True
    cors_allow_methods: str = "GET,POST,OPTIONS"
    cors_allow_headers: str = "Authorization,Content-Type"

    def model_post_init(self, __context) -> None:
        if not self.database_url:
            self.database_url = (
                f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
                f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            )

    def get_allowed_origins(self) -> list[str]:
        """
        Origins для CORS.

        Явный CORS_ALLOW_ORIGINS важнее всего. Без него разрешаются домен
        приложения (http и https) и локальный фронтенд на порту 3000.
        """
        explicit = _split_csv(self.cors_allow_origins)
        if explicit:
            return explicit

        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
        if self.app_domain:
            origins = [f"https://{self.app_domain}", f"http://{self.app_domain}"] + origins
        return origins

    def get_cors_methods(self) -> list[str]:
        return _split_csv(self.cors_allow_methods)

    def get_cors_headers(self) -> list[str]:
        return _split_csv(self.cors_allow_headers)

    def get_config_source(self) -> str:
        env_file = _find_env_file()
        return str(env_file) if env_file else "environment variables only"


settings = Settings()
