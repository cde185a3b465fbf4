"""
Модуль конфигурации.
Экспортирует настройки сервиса отслеживания заказов.
"""

from src.config.loader import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
