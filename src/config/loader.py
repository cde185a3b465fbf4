# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Источник настроек: config/config.json.
Секретные данные и порт переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "order_tracking"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "colored"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_MAX_BYTES: int = 10485760


class ServerSettings(BaseModel):
    """Настройки HTTP/WebSocket сервера."""
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ALLOW_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])
    STATIC_DIR: str = "public"

    @property
    def static_path(self) -> Path:
        """Абсолютный путь к статике (относительные пути считаются от корня проекта)."""
        path = Path(self.STATIC_DIR)
        if not path.is_absolute():
            path = get_project_root() / path
        return path


class SupabaseSettings(BaseModel):
    """Настройки хранилища заказов (Supabase REST)."""
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    ORDERS_TABLE: str = "orders"
    LOOKUP_TIMEOUT: float = 10.0

    @field_validator("SUPABASE_URL", "SUPABASE_ANON_KEY", mode="before")
    @classmethod
    def get_from_env(cls, v: str | None, info) -> str:
        """Получает значение из переменных окружения, если не задано."""
        if not v:
            return os.getenv(info.field_name, "")
        return v

    @property
    def is_configured(self) -> bool:
        """Заданы ли URL и ключ."""
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)

    @property
    def rest_url(self) -> str:
        """Базовый URL PostgREST API."""
        return f"{self.SUPABASE_URL.rstrip('/')}/rest/v1"


class RelaySettings(BaseModel):
    """Настройки ретрансляции геолокации."""
    SEND_TIMEOUT: float = Field(default=5.0, gt=0)
    OUTBOX_MAX_SIZE: int = Field(default=100, ge=1)


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    relay: RelaySettings = Field(default_factory=RelaySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Секреты переопределяются из переменных окружения.
        """
        config_data = load_config_json()

        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        filtered_data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        return cls(
            system=SystemSettings(
                PROJECT_NAME=filtered_data.get("PROJECT_NAME", "order_tracking"),
                VERSION=filtered_data.get("VERSION", "1.0.0"),
                DEBUG=filtered_data.get("DEBUG", False),
                ENVIRONMENT=os.getenv("ENVIRONMENT", filtered_data.get("ENVIRONMENT", "development")),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", filtered_data.get("LOG_LEVEL", "INFO")),
                LOG_FORMAT=filtered_data.get("LOG_FORMAT", "colored"),
                LOG_TO_FILE=filtered_data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=filtered_data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_MAX_BYTES=filtered_data.get("LOG_MAX_BYTES", 10485760),
            ),
            server=ServerSettings(
                HOST=os.getenv("HOST", filtered_data.get("HOST", "0.0.0.0")),
                PORT=int(os.getenv("PORT", filtered_data.get("PORT", 3000))),
                CORS_ALLOW_ORIGINS=filtered_data.get("CORS_ALLOW_ORIGINS", ["*"]),
                STATIC_DIR=filtered_data.get("STATIC_DIR", "public"),
            ),
            supabase=SupabaseSettings(
                SUPABASE_URL=filtered_data.get("SUPABASE_URL", ""),
                SUPABASE_ANON_KEY=filtered_data.get("SUPABASE_ANON_KEY", ""),
                ORDERS_TABLE=filtered_data.get("ORDERS_TABLE", "orders"),
                LOOKUP_TIMEOUT=filtered_data.get("LOOKUP_TIMEOUT", 10.0),
            ),
            relay=RelaySettings(
                SEND_TIMEOUT=filtered_data.get("SEND_TIMEOUT", 5.0),
                OUTBOX_MAX_SIZE=filtered_data.get("OUTBOX_MAX_SIZE", 100),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv

    # Загружаем .env файл
    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
