# src/shared/models/common.py
"""
Общие модели ответов.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой: {"error": "..."}."""

    error: str


class HealthStatus(BaseModel):
    """Статус здоровья сервиса."""

    service: str
    status: str = "healthy"  # healthy, degraded, unhealthy
    version: str | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
    # dependencies: {"supabase": "configured" | "not_configured"}


class RelayStatsResponse(BaseModel):
    """Статистика комнат ретранслятора."""

    total_rooms: int
    total_memberships: int
    total_joins: int
    total_broadcasts: int
    total_deliveries: int
    total_dropped: int
