# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


# Имя корневого логгера и сервиса в /health
SERVICE_NAME = "order_tracking"


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class HealthState(str, Enum):
    """Состояния сервиса для /health."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
