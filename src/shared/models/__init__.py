# src/shared/models/__init__.py
"""
Общие Pydantic-модели ответов HTTP API.
"""

from src.shared.models.common import (
    ErrorResponse,
    HealthStatus,
    RelayStatsResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthStatus",
    "RelayStatsResponse",
]
